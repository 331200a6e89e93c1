# ABOUTME: Structural extractor turning one Bulbapedia Pokémon page into an EntryRecord
# ABOUTME: Validates the exact page layout and fails loudly, with the stage path, on any deviation

import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import NamedTuple

from bs4 import BeautifulSoup, Tag

from pokedict.config import Config
from pokedict.core.models import DexId, EntryImage, EntryRecord, Index
from pokedict.extraction.base import (
    DownstreamFailure,
    ExtractionError,
    Fetcher,
    ImageCache,
    MissingElement,
    ParseFailure,
    UnexpectedShape,
)
from pokedict.extraction.dom import (
    attribute,
    element_children,
    first_child_of_tag,
    inline_style,
    is_element,
    is_hidden,
    parse_document,
    select_first,
    text_contents,
)
from pokedict.extraction.images import absolute_url, resolve_best_source
from pokedict.extraction.links import image_path, rewrite_subtree
from pokedict.extraction.xhtml import serialize, serialize_inner
from pokedict.utils.logging import get_logger

INFO_BOX_SELECTOR = "table.roundy"
INFO_BOX_STYLE_KEYS = ("background", "border", "padding", "text-align")
FIRST_EXTRA_INFO_BOX = "Gender ratio"
CONTENT_SELECTOR = ".mw-parser-output"
TOC_ID = "toc"
# the header and info box tables at the top of the article
LEADING_TABLES = 2
# gallery rows linking to the media archive carry no image of their own
ARCHIVE_LINK_TEXT = "Archives"


class _NameBox(NamedTuple):
    name: str
    categories_html: tuple[str, ...]
    name_jp_text: str
    name_jp_html: str
    name_jp_translit_html: str


@contextmanager
def _stage(name: str) -> Iterator[None]:
    try:
        yield
    except ExtractionError as exc:
        raise exc.within(name)


def _descend(node: Tag, *tags: str) -> Tag:
    """Follow a chain of first-child tags, failing on the first missing link."""
    current = node
    walked: list[str] = []
    for tag in tags:
        walked.append(tag)
        child = first_child_of_tag(current, tag)
        if child is None:
            raise MissingElement(f"<{tag}>", " > ".join(walked))
        current = child
    return current


def _require(node: Tag, selector: str, what: str) -> Tag:
    found = select_first(node, selector)
    if found is None:
        raise MissingElement(what, selector)
    return found


def _element_children_exactly(node: Tag, count: int, what: str) -> list[Tag]:
    children = element_children(node)
    if len(children) != count:
        raise UnexpectedShape(what, count, len(children))
    return children


def _cache_image(image_cache: ImageCache, src: str) -> str:
    try:
        return image_cache.get(src)
    except Exception as exc:
        raise DownstreamFailure(f"error loading image {src}", exc) from exc


def _split_info_rows(info_box: Tag) -> tuple[Tag, list[Tag], list[Tag]]:
    """Header row, then rows before and from the first extra-info marker row."""
    tbody = _descend(info_box, "tbody")

    rows = element_children(tbody)
    if not rows:
        raise MissingElement("header box", "first <tr> of info box")
    header_row, rest = rows[0], rows[1:]

    top_rows: list[Tag] = []
    extra_rows: list[Tag] = []
    is_extra = False
    for row in rest:
        if text_contents(row).strip().startswith(FIRST_EXTRA_INFO_BOX):
            is_extra = True
        (extra_rows if is_extra else top_rows).append(row)
    return header_row, top_rows, extra_rows


def _read_categories(english_box: Tag) -> tuple[str, ...]:
    link = _require(english_box, "a[title]", "category link")
    (item,) = _element_children_exactly(link, 1, "category item count")

    categories: list[str] = []
    for node in item.children:
        if is_element(node) and node.name == "br":
            categories.append("")
            continue
        fragment = serialize(node)
        if categories:
            categories[-1] += fragment
        else:
            categories.append(fragment)

    if categories and not categories[-1]:
        categories.pop()
    return tuple(categories)


def _read_name_box(name_box: Tag) -> _NameBox:
    row = _descend(name_box, "table", "tbody", "tr")
    english_box, jp_box = _element_children_exactly(row, 2, "name box cell count")

    with _stage("English name"):
        name = text_contents(_require(english_box, "big", "display name <big>")).strip()
        categories_html = _read_categories(english_box)

    with _stage("Japanese name"):
        name_jp = _require(jp_box, "[lang='ja']", "Japanese name")
        translit = _require(jp_box, "i", "Japanese transliteration")

    return _NameBox(
        name=name,
        categories_html=categories_html,
        name_jp_text=text_contents(name_jp).strip(),
        name_jp_html=serialize(name_jp),
        name_jp_translit_html=serialize(translit),
    )


def _read_dex_id(dex_box: Tag) -> DexId:
    raw = text_contents(_require(dex_box, "a", "dex number link")).strip()
    try:
        return DexId.parse(raw)
    except ValueError:
        raise ParseFailure("dex number", raw) from None


def _read_image(
    img: Tag, cell: Tag, flex: bool, image_cache: ImageCache, base_url: str, prefer_canonical: bool
) -> EntryImage:
    src = resolve_best_source(img, base_url, prefer_canonical)
    if src is None:
        raise MissingElement("image source", serialize(img))
    image_id = _cache_image(image_cache, src)

    raw_width = attribute(img, "width") or ""
    if not (raw_width.isascii() and raw_width.isdigit()):
        raise ParseFailure("image width", raw_width)

    caption = select_first(cell, "small")
    return EntryImage(
        href=absolute_url(base_url, attribute(img.parent, "href") or "", "image link href"),
        alt=attribute(img, "alt") or "",
        width=int(raw_width),
        src=image_path(image_id),
        caption_text=text_contents(caption) if caption is not None else None,
        caption_html=serialize_inner(caption) if caption is not None else None,
        flex=flex,
    )


def _read_gallery(
    gallery_row: Tag, image_cache: ImageCache, base_url: str, prefer_canonical: bool
) -> tuple[EntryImage, ...]:
    tbody = _descend(gallery_row, "td", "table", "tbody")

    images: list[EntryImage] = []
    for row in element_children(tbody):
        if is_hidden(row):
            continue

        cells = [cell for cell in element_children(row) if not is_hidden(cell)]
        flex = len(cells) > 1
        for cell in cells:
            img = select_first(cell, "img")
            if img is not None:
                images.append(_read_image(img, cell, flex, image_cache, base_url, prefer_canonical))
            elif ARCHIVE_LINK_TEXT not in text_contents(row):
                raise UnexpectedShape("image box cell", "an <img>", serialize(row))
    return tuple(images)


def _read_body(
    doc: BeautifulSoup, index: Index, image_cache: ImageCache, config: Config, base_url: str
) -> tuple[str, str]:
    container = _require(doc, CONTENT_SELECTOR, "article content")

    summary: list[str] = []
    body: list[str] = []
    in_body = False
    tables_seen = 0
    sections_seen = 0
    for node in list(container.children):
        name = node.name if is_element(node) else None
        if attribute(node, "id") == TOC_ID:
            in_body = True
            continue
        if name == "table":
            tables_seen += 1
            if tables_seen <= LEADING_TABLES:
                continue
        if name == "h2":
            sections_seen += 1
        if sections_seen > config.max_body_sections:
            break

        rewrite_subtree(node, index, image_cache, base_url, config.hq_body_images)
        (body if in_body else summary).append(serialize(node))

    return "".join(summary), "".join(body)


def extract_entry(html: str, index: Index, image_cache: ImageCache, config: Config, source_url: str) -> EntryRecord:
    """Extract one Pokémon page.

    Args:
        html: Raw page markup
        index: Dex index, used to turn Pokémon links into cross-references
        image_cache: Image store for gallery, info box, and body images
        config: Image quality and body section options
        source_url: URL the page was fetched from; relative links resolve against it

    Returns:
        The complete entry record

    Raises:
        StructuralMismatch: The page layout differs from what is expected
        ParseFailure: A field did not parse (dex number, image width, link URL)
        DownstreamFailure: An image could not be loaded
    """
    doc = parse_document(html)

    with _stage("info box"):
        info_box = _require(doc, INFO_BOX_SELECTOR, "info box")
        info_box_style = {
            key: value for key, value in sorted(inline_style(info_box).items()) if key in INFO_BOX_STYLE_KEYS
        }
        header_row, top_rows, extra_rows = _split_info_rows(info_box)

    with _stage("header box"):
        header_table = _descend(header_row, "td", "table", "tbody")
        title_row, gallery_row = _element_children_exactly(header_table, 2, "header box row count")
        name_cell, dex_cell = _element_children_exactly(title_row, 2, "header box cell count")

        with _stage("name box"):
            name_box = _read_name_box(name_cell)
        with _stage("dex number"):
            dex_id = _read_dex_id(dex_cell)
        with _stage("image box"):
            images = _read_gallery(gallery_row, image_cache, source_url, config.hq_pokemon_images)

    with _stage("info box links"):
        for row in top_rows + extra_rows:
            rewrite_subtree(row, index, image_cache, source_url, config.hq_body_images)

    with _stage("article body"):
        summary_html, body_html = _read_body(doc, index, image_cache, config, source_url)

    return EntryRecord(
        url=source_url,
        info_box_style=info_box_style,
        dex_id=dex_id,
        name=name_box.name,
        categories_html=name_box.categories_html,
        name_jp_text=name_box.name_jp_text,
        name_jp_html=name_box.name_jp_html,
        name_jp_translit_html=name_box.name_jp_translit_html,
        images=images,
        top_info_boxes_html=tuple(serialize(row) for row in top_rows),
        extra_info_boxes_html=tuple(serialize(row) for row in extra_rows),
        summary_html=summary_html,
        body_html=body_html,
    )


class EntryExtractor:
    """Fetches Pokémon pages and extracts them into entry records."""

    def __init__(self, fetcher: Fetcher, index: Index, image_cache: ImageCache, config: Config):
        self.fetcher = fetcher
        self.index = index
        self.image_cache = image_cache
        self.config = config
        self.logger = get_logger(__name__)

    def extract(self, url: str) -> EntryRecord:
        """Fetch ``url`` and extract its entry record."""
        start_time = time.time()
        try:
            raw = self.fetcher.get(url, document=True)
        except Exception as exc:
            raise DownstreamFailure(f"error fetching page {url}", exc) from exc

        try:
            html = raw.decode("utf-8")
        except UnicodeDecodeError:
            raise ParseFailure("page body as UTF-8", raw[:80].decode("utf-8", "replace")) from None

        entry = extract_entry(html, self.index, self.image_cache, self.config, url)

        self.logger.debug(
            "Extracted entry",
            dex_id=str(entry.dex_id),
            name=entry.name,
            url=url,
            images=len(entry.images),
            top_info_rows=len(entry.top_info_boxes_html),
            extra_info_rows=len(entry.extra_info_boxes_html),
            duration_seconds=round(time.time() - start_time, 3),
        )
        return entry
