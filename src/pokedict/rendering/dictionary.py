# ABOUTME: Renders entry records into the Apple Dictionary Services XML document
# ABOUTME: Stored XHTML fragments are embedded as-is after a few compiler workarounds

from collections.abc import Mapping

from pokedict.core.models import DexId, EntryImage, EntryRecord
from pokedict.extraction.links import entry_anchor
from pokedict.extraction.xhtml import escape
from pokedict.utils.logging import get_logger

XHTML_NAMESPACE = "http://www.w3.org/1999/xhtml"
DICTIONARY_NAMESPACE = "http://www.apple.com/DTDs/DictionaryService-1.0.rng"
READ_MORE_LABEL = "Read more on Bulbapedia"

HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    "<!-- generated file -->\n"
    f'<d:dictionary xmlns="{XHTML_NAMESPACE}" xmlns:d="{DICTIONARY_NAMESPACE}">\n'
)
FOOTER = "</d:dictionary>"

# the dictionary compiler knows no &nbsp; and drops spaces between some elements
RAW_REPLACEMENTS = (
    ("&nbsp;", "\u00a0"),
    ("</b> <i", "</b>\u00a0<wbr/><i"),
    ("</a> <a", "</a>\u00a0<wbr/><a"),
)

logger = get_logger(__name__)


class RenderError(Exception):
    """Raised when one entry cannot be rendered."""

    def __init__(self, dex_id: DexId, cause: BaseException):
        super().__init__(f"error generating entry {dex_id}: {cause}")
        self.dex_id = dex_id
        self.cause = cause


def _text(value: str) -> str:
    return escape(value, attr_mode=False)


def _attr(value: str) -> str:
    return escape(value, attr_mode=True)


def raw(fragment: str) -> str:
    for old, new in RAW_REPLACEMENTS:
        fragment = fragment.replace(old, new)
    return fragment


def image_anchor(position: int) -> str:
    return f"pokemon-image-{position}"


def index_names(entry: EntryRecord) -> list[tuple[str, int | None]]:
    """Search names of an entry, each with the gallery position it points at (or None)."""
    names: list[tuple[str, int | None]] = [(entry.name, None), (entry.name_jp_text, None)]
    seen = {entry.name, entry.name_jp_text}

    for position, image in enumerate(entry.images):
        if image.caption_text is None:
            continue
        # captions such as "Spring Form" need the Pokémon name added
        name = image.caption_text if entry.name in image.caption_text else f"{entry.name} - {image.caption_text}"
        if name in seen:
            continue
        seen.add(name)
        names.append((name, position))
    return names


def _render_image(out: list[str], image: EntryImage, position: int) -> None:
    out.append(f'<li class="pokemon-image" id="{image_anchor(position)}">')
    out.append(f'<img alt="{_attr(image.alt)}" src="{_attr(image.src)}" style="width: {image.width}px" />')
    if image.caption_html is not None:
        out.append(f'<div class="image-caption">{raw(image.caption_html)}</div>')
    out.append("</li>")


def _render_images(out: list[str], images: tuple[EntryImage, ...]) -> None:
    out.append('<ul class="pokemon-images">')
    position = 0
    while position < len(images):
        following = images[position + 1] if position + 1 < len(images) else None
        if images[position].flex and following is not None and following.flex:
            out.append('<li class="pokemon-images-flex"><ul>')
            while position < len(images) and images[position].flex:
                _render_image(out, images[position], position)
                position += 1
            out.append("</ul></li>")
        else:
            _render_image(out, images[position], position)
            position += 1
    out.append("</ul>")


def _render_info_table(out: list[str], css_class: str, style: str, rows: tuple[str, ...]) -> None:
    out.append(f'<table class="roundy {css_class}" style="{_attr(style)}"><tbody>')
    out.extend(raw(row) for row in rows)
    out.append("</tbody></table>")


def render_entry(entry: EntryRecord) -> str:
    """Render one ``d:entry`` element, newline-terminated."""
    out: list[str] = [f'<d:entry id="{entry_anchor(entry.dex_id.value)}" d:title="{_attr(entry.name)}">']

    for name, position in index_names(entry):
        if position is None:
            out.append(f'<d:index d:value="{_attr(name)}" />')
        else:
            out.append(
                f'<d:index d:value="{_attr(name)}" '
                f"d:anchor=\"xpointer(//*[@id='{image_anchor(position)}'])\" />"
            )

    out.append('<div class="outer-container">')
    out.append(f'<div class="pokedex-id">{entry.dex_id}</div>')
    out.append(f'<h1 class="pokemon-name">{_text(entry.name)}</h1>')
    out.append('<ul class="pokemon-categories">')
    out.extend(f"<li>{raw(category)}</li>" for category in entry.categories_html)
    out.append("</ul>")
    out.append(
        f'<div class="pokemon-name-jp">{raw(entry.name_jp_html)} ({raw(entry.name_jp_translit_html)})</div>'
    )

    _render_images(out, entry.images)

    style = "".join(f"{key}:{value};" for key, value in sorted(entry.info_box_style.items()))
    _render_info_table(out, "top-info-box", style, entry.top_info_boxes_html)
    out.append(raw(entry.summary_html))
    _render_info_table(out, "extra-info-box", style, entry.extra_info_boxes_html)
    out.append(raw(entry.body_html))

    out.append(f'<div class="footer-read-more"><a href="{_attr(entry.url)}">{READ_MORE_LABEL}</a></div>')
    out.append("</div></d:entry>")
    return "\n".join(out) + "\n"


def render_dictionary(entries: Mapping[DexId, EntryRecord]) -> str:
    """Render the whole dictionary document, entries in dex order.

    Raises:
        RenderError: An entry could not be rendered
    """
    parts = [HEADER]
    for dex_id in sorted(entries):
        try:
            parts.append(render_entry(entries[dex_id]))
        except Exception as exc:
            raise RenderError(dex_id, exc) from exc
    parts.append(FOOTER)

    logger.info("Rendered dictionary", entries=len(entries))
    return "".join(parts)
