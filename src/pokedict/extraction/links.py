# ABOUTME: In-place rewriting of links and images inside an extracted subtree
# ABOUTME: Internal Pokémon links become dictionary cross-references, images become cache paths

from urllib.parse import quote

from bs4.element import PageElement

from pokedict.core.models import Index
from pokedict.extraction.base import DownstreamFailure, ImageCache, MissingElement
from pokedict.extraction.dom import select_inclusive
from pokedict.extraction.images import absolute_url, resolve_best_source
from pokedict.extraction.xhtml import serialize

FOOTNOTE_SELECTOR = "sup.reference"
INTERNAL_ARTICLE_PREFIX = "/wiki/"
INTERNAL_ARTICLE_SUFFIX = "_(Pok%C3%A9mon)"
CROSS_REFERENCE_SCHEME = "x-dictionary"
ENTRY_ID_PREFIX = "pokemon"
IMAGE_PATH_PREFIX = "images/"


def entry_anchor(dex_value: int) -> str:
    """Dictionary entry id for a dex number, shared with the renderer."""
    return f"{ENTRY_ID_PREFIX}-{dex_value}"


def cross_reference(dex_value: int) -> str:
    return f"{CROSS_REFERENCE_SCHEME}:r:{entry_anchor(dex_value)}"


def image_path(image_id: str) -> str:
    return IMAGE_PATH_PREFIX + quote(image_id, safe="")


def is_internal_article(href: str) -> bool:
    return href.startswith(INTERNAL_ARTICLE_PREFIX) and href.endswith(INTERNAL_ARTICLE_SUFFIX)


def rewrite_subtree(
    node: PageElement,
    index: Index,
    image_cache: ImageCache,
    base_url: str,
    prefer_canonical_images: bool,
) -> None:
    """Rewrite footnotes, links, and images under ``node`` in place.

    Raises:
        MissingElement: An image has no resolvable source
        ParseFailure: A link or image URL is malformed
        DownstreamFailure: The image cache could not provide an image
    """
    for reference in select_inclusive(node, FOOTNOTE_SELECTOR):
        if reference is not node and not reference.decomposed:
            reference.decompose()

    for link in select_inclusive(node, "a[href]"):
        href = link["href"]
        url = absolute_url(base_url, href, "link href")

        dex_id = index.dex_id_for_url(url) if is_internal_article(href) else None
        if dex_id is not None:
            link["href"] = cross_reference(dex_id.value)
            # the title described the web page we no longer link to
            link.attrs.pop("title", None)
        else:
            link["href"] = url

    for img in select_inclusive(node, "img"):
        src = resolve_best_source(img, base_url, prefer_canonical_images)
        if src is None:
            raise MissingElement("image source", serialize(img))

        try:
            image_id = image_cache.get(src)
        except Exception as exc:
            raise DownstreamFailure(f'error fixing <img src="{src}">', exc) from exc

        img.attrs.pop("srcset", None)
        img["src"] = image_path(image_id)

        # keep aspect ratio
        if "width" in img.attrs:
            img.attrs.pop("height", None)
