# ABOUTME: Local image store keyed by a stable identifier derived from the image URL
# ABOUTME: Non-animated PNGs are re-encoded as lossy WebP with Pillow before they are stored

import io
import os
from pathlib import Path
from urllib.parse import urlsplit

from PIL import Image, UnidentifiedImageError

from pokedict.extraction.base import Fetcher
from pokedict.utils.locks import KeyedLocks
from pokedict.utils.logging import get_logger

MEDIA_PATH_PREFIX = "/media/upload"
COMPRESSED_EXT = "webp"
COMPRESSION_QUALITY = 80


class ImageCacheError(Exception):
    """Raised when an image cannot be identified, decoded, or stored."""

    pass


def image_id_and_extension(url: str) -> tuple[str, str]:
    """Derive the cache identifier and file extension of an image URL.

    ``/media/upload/a/ab/File.png`` becomes ``("File-ab-a", "png")``.

    Raises:
        ImageCacheError: The URL path has no file extension
    """
    path = urlsplit(url).path
    path = path.removeprefix(MEDIA_PATH_PREFIX).lstrip("/")

    name, dot, ext = path.rpartition(".")
    if not dot:
        raise ImageCacheError(f"image URL has no file extension: {url}")
    return "-".join(reversed(name.split("/"))), ext


def try_compress(ext: str, data: bytes) -> bytes | None:
    """Re-encode a still PNG as WebP. Returns None for anything that is left as-is.

    Raises:
        ImageCacheError: The PNG could not be decoded or encoded
    """
    if ext != "png":
        return None

    try:
        with Image.open(io.BytesIO(data)) as image:
            if getattr(image, "is_animated", False):
                return None

            icc_profile = image.info.get("icc_profile")
            converted = image.convert("RGBA")
            output = io.BytesIO()
            save_options: dict[str, object] = {"quality": COMPRESSION_QUALITY}
            if icc_profile:
                save_options["icc_profile"] = icc_profile
            converted.save(output, format="WEBP", **save_options)
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise ImageCacheError(f"error compressing image: {exc}") from exc

    return output.getvalue()


class ImageCache:
    """Stores images under ``image_dir`` as ``<id>.webp`` or ``<id>.<ext>``."""

    def __init__(self, image_dir: Path, fetcher: Fetcher):
        self.image_dir = image_dir
        self.fetcher = fetcher
        self._id_locks = KeyedLocks()
        self.logger = get_logger(__name__)

    def get(self, url: str) -> str:
        """Make sure the image at ``url`` is stored locally and return its file name.

        Raises:
            ImageCacheError: The URL has no extension or the image could not be compressed
            FetchError: The image could not be downloaded
        """
        image_id, ext = image_id_and_extension(url)
        compressed_name = f"{image_id}.{COMPRESSED_EXT}"
        original_name = f"{image_id}.{ext}"

        with self._id_locks.hold(image_id):
            if (self.image_dir / compressed_name).is_file():
                return compressed_name
            if (self.image_dir / original_name).is_file():
                return original_name

            data = self.fetcher.get(url, document=False)
            compressed = try_compress(ext, data)
            if compressed is not None:
                self._store(compressed_name, compressed)
                self.logger.debug(
                    "Stored compressed image",
                    image=compressed_name,
                    original_bytes=len(data),
                    compressed_bytes=len(compressed),
                )
                return compressed_name

            self._store(original_name, data)
            self.logger.debug("Stored image", image=original_name, bytes=len(data))
            return original_name

    def _store(self, name: str, data: bytes) -> None:
        self.image_dir.mkdir(parents=True, exist_ok=True)
        target = self.image_dir / name
        partial = target.with_name(name + ".part")
        partial.write_bytes(data)
        os.replace(partial, target)
