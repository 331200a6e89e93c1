# ABOUTME: Small DOM helpers over BeautifulSoup trees parsed with html5lib
# ABOUTME: Attribute lookup, child lookup, fixed-pattern selection, and inline style parsing

from bs4 import BeautifulSoup, Tag
from bs4.element import PageElement

XHTML_NAMESPACE = "http://www.w3.org/1999/xhtml"


def parse_document(html: str) -> BeautifulSoup:
    """Parse HTML the way a browser would.

    html5lib gives every element its namespace and inserts implied ``<tbody>``
    elements; multi-valued attributes stay plain strings so they serialize as-is.
    """
    return BeautifulSoup(html, "html5lib", multi_valued_attributes=None)


def is_element(node: PageElement | None) -> bool:
    return isinstance(node, Tag)


def attribute(node: PageElement | None, name: str) -> str | None:
    """Attribute value, or None for non-elements and absent attributes."""
    if not isinstance(node, Tag):
        return None
    value = node.attrs.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return value


def element_children(node: Tag) -> list[Tag]:
    return [child for child in node.children if isinstance(child, Tag)]


def first_child_of_tag(node: Tag, tag: str) -> Tag | None:
    """First immediate child element named ``tag``, in document order."""
    for child in node.children:
        if isinstance(child, Tag) and child.name == tag:
            return child
    return None


def text_contents(node: PageElement) -> str:
    """Concatenated text of the node and its descendants, comments excluded."""
    if isinstance(node, Tag):
        return node.get_text()
    return str(node)


def select_first(node: Tag, selector: str) -> Tag | None:
    return node.select_one(selector)


def select_inclusive(node: PageElement, selector: str) -> list[Tag]:
    """Elements matching ``selector``: the node itself first, then its descendants."""
    if not isinstance(node, Tag):
        return []
    matches = [node] if node.css.match(selector) else []
    matches.extend(node.select(selector))
    return matches


def parse_style_string(style: str) -> dict[str, str]:
    """Parse an inline ``key: value;`` style attribute.

    Entries without a ``:`` are dropped and later duplicates win.
    """
    values: dict[str, str] = {}
    for entry in style.split(";"):
        key, sep, value = entry.strip().partition(":")
        if sep:
            values[key.strip()] = value.strip()
    return values


def inline_style(node: PageElement) -> dict[str, str]:
    return parse_style_string(attribute(node, "style") or "")


def is_hidden(node: PageElement) -> bool:
    """True when the node's own inline style says ``display: none``."""
    return inline_style(node).get("display") == "none"
