# ABOUTME: Picks the best variant of an <img> and recovers original assets from thumbnail URLs
# ABOUTME: Pure functions; safe to share between worker threads

from urllib.parse import urljoin, urlsplit

from bs4 import Tag

from pokedict.extraction.base import ParseFailure
from pokedict.extraction.dom import attribute

MEDIA_ARCHIVE_DOMAIN = "archives.bulbagarden.net"
THUMBNAIL_PREFIX = ("media", "upload", "thumb")
DENSITY_PREFERENCE = ("2x", "1.5x", "1x")


def absolute_url(base_url: str, href: str, field: str) -> str:
    """Resolve ``href`` against ``base_url``.

    Raises:
        ParseFailure: ``href`` is not a valid URL (e.g. an unbalanced IPv6 host)
    """
    try:
        return urljoin(base_url, href)
    except ValueError:
        raise ParseFailure(field, href) from None


def parse_srcset(srcset: str) -> dict[str, str]:
    """Map density descriptors (``"2x"``) to candidate URLs."""
    candidates: dict[str, str] = {}
    for entry in srcset.split(","):
        src, sep, descriptor = entry.rpartition(" ")
        if sep:
            candidates[descriptor.strip()] = src.strip()
    return candidates


def resolve_best_source(img: Tag, base_url: str, prefer_canonical: bool) -> str | None:
    """Absolute URL of the highest-density variant of ``img``.

    Raises:
        ParseFailure: The chosen candidate is not a valid URL

    With ``prefer_canonical`` set, a thumbnail URL is swapped for the original
    asset when the thumbnail shape is recognised; otherwise the thumbnail is kept.
    """
    candidates = parse_srcset(attribute(img, "srcset") or "")
    candidates.setdefault("1x", (attribute(img, "src") or "").strip())

    chosen = next((candidates[density] for density in DENSITY_PREFERENCE if candidates.get(density)), None)
    if chosen is None:
        return None

    resolved = absolute_url(base_url, chosen, "image source")
    if prefer_canonical:
        return reconstruct_canonical_origin(resolved) or resolved
    return resolved


def reconstruct_canonical_origin(url: str) -> str | None:
    """Undo the archive's resized-thumbnail convention.

    ``/media/upload/thumb/a/ab/File.png/200px-File.png`` becomes
    ``/media/upload/a/ab/File.png``. Returns None for anything else.
    """
    parts = urlsplit(url)
    if parts.hostname != MEDIA_ARCHIVE_DOMAIN or "/thumb/" not in parts.path:
        return None

    segments = parts.path.lstrip("/").split("/")
    if tuple(segments[: len(THUMBNAIL_PREFIX)]) != THUMBNAIL_PREFIX:
        return None

    rest = segments[len(THUMBNAIL_PREFIX) :]
    if len(rest) < 3:
        return None
    a, b, file_name = rest[:3]

    return parts._replace(path=f"/media/upload/{a}/{b}/{file_name}").geturl()
