# ABOUTME: Disk-cached, rate-limited HTTP fetcher for Bulbapedia pages and images
# ABOUTME: Each URL is downloaded at most once; later calls are served from the cache directory

import os
import threading
import time
from pathlib import Path

import httpx

from pokedict.utils.locks import KeyedLocks
from pokedict.utils.logging import get_logger
from pokedict.utils.retry import TransientHTTPError, is_retryable_status, transient_http_retrying

ERROR_BODY_LIMIT = 1000
REFERER = "https://bulbapedia.bulbagarden.net/"

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
        "(KHTML, like Gecko) Version/17.3 Safari/605.1.15"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Sec-Fetch-Site": "none",
}

DOCUMENT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
}

IMAGE_HEADERS = {
    "Accept": (
        "image/webp,image/avif,image/jxl,image/heic,image/heic-sequence,video/*;q=0.8,"
        "image/png,image/svg+xml,image/*;q=0.8,*/*;q=0.5"
    ),
    "Sec-Fetch-Dest": "image",
    "Sec-Fetch-Mode": "no-cors",
    "Sec-Fetch-Site": "same-site",
    "Referer": REFERER,
}


class FetchError(Exception):
    """Raised when a URL could not be downloaded."""

    def __init__(self, url: str, reason: str, status_code: int | None = None, body: str = ""):
        message = f"failed to fetch {url}: {reason}"
        if body:
            message += f"\n{body}..."
        super().__init__(message)
        self.url = url
        self.reason = reason
        self.status_code = status_code
        self.body = body


def cache_file_name(url: str) -> str:
    return url.replace("/", "~")


class Fetcher:
    """Fetches URLs through a shared client and keeps every response body on disk.

    Network requests are serialized and each one is preceded by ``request_delay``
    seconds of sleep, so a thread pool never hammers the wiki.
    """

    def __init__(
        self,
        cache_dir: Path,
        client: httpx.Client | None = None,
        request_delay: float = 0.5,
        max_attempts: int = 3,
        min_wait: float = 1.0,
        max_wait: float = 10.0,
    ):
        self.cache_dir = cache_dir
        self.request_delay = request_delay
        self.max_attempts = max_attempts
        self.min_wait = min_wait
        self.max_wait = max_wait
        self._owns_client = client is None
        self.http_client = client or httpx.Client(  # Allow for dependency injection
            headers=DEFAULT_HEADERS,
            follow_redirects=True,
            timeout=30.0,
        )
        self._client_lock = threading.Lock()
        self._url_locks = KeyedLocks()
        self.logger = get_logger(__name__)

    def cache_path(self, url: str) -> Path:
        return self.cache_dir / cache_file_name(url)

    def get(self, url: str, document: bool) -> bytes:
        """Return the body of ``url``, downloading it only when it is not cached yet.

        Raises:
            FetchError: The server answered with a non-success status, or the
                request kept failing after all retry attempts
        """
        cache_path = self.cache_path(url)
        with self._url_locks.hold(url):
            if cache_path.is_file():
                return cache_path.read_bytes()

            data = self._download(url, document)
            self._store(cache_path, data)
            return data

    def _download(self, url: str, document: bool) -> bytes:
        retrying = transient_http_retrying(
            max_attempts=self.max_attempts, min_wait=self.min_wait, max_wait=self.max_wait
        )
        try:
            return retrying(self._request, url, document)
        except TransientHTTPError as exc:
            raise FetchError(url, f"got {exc.status_code}", status_code=exc.status_code) from exc
        except httpx.TransportError as exc:
            raise FetchError(url, str(exc) or type(exc).__name__) from exc

    def _request(self, url: str, document: bool) -> bytes:
        with self._client_lock:
            self.logger.info("Fetching", url=url, document=document)
            time.sleep(self.request_delay)
            response = self.http_client.get(url, headers=DOCUMENT_HEADERS if document else IMAGE_HEADERS)

        if response.is_success:
            return response.content
        if is_retryable_status(response.status_code):
            raise TransientHTTPError(url, response.status_code)
        raise FetchError(
            url,
            f"got {response.status_code}",
            status_code=response.status_code,
            body=response.text[:ERROR_BODY_LIMIT],
        )

    def _store(self, cache_path: Path, data: bytes) -> None:
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        partial = cache_path.with_name(cache_path.name + ".part")
        partial.write_bytes(data)
        os.replace(partial, cache_path)

    def close(self) -> None:
        if self._owns_client:
            self.http_client.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
