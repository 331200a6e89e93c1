# ABOUTME: Strict XHTML serializer for subtrees of html5lib-parsed documents
# ABOUTME: Every element is explicitly closed and escaped for the dictionary compiler

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from bs4.element import CData, Declaration, Doctype, PageElement, ProcessingInstruction

from pokedict.extraction.dom import XHTML_NAMESPACE


class NamespaceViolation(RuntimeError):
    """An element or attribute outside the XHTML namespace reached the serializer.

    Input is always markup we parsed ourselves, so this is a bug, not a page problem.
    """

    pass


def escape(text: str, attr_mode: bool) -> str:
    """Escape ``&`` always, ``"`` in attribute mode, ``<`` and ``>`` in text mode."""
    text = text.replace("&", "&amp;")
    if attr_mode:
        return text.replace('"', "&quot;")
    return text.replace("<", "&lt;").replace(">", "&gt;")


def serialize(node: PageElement, include_node: bool = True) -> str:
    """Serialize ``node`` (or only its children when ``include_node`` is False)."""
    out: list[str] = []
    if include_node and not isinstance(node, BeautifulSoup):
        _write_node(out, node)
    elif isinstance(node, Tag):
        for child in node.children:
            _write_node(out, child)
    return "".join(out)


def serialize_inner(node: PageElement) -> str:
    return serialize(node, include_node=False)


def _write_node(out: list[str], node: PageElement) -> None:
    if isinstance(node, Tag):
        _write_element(out, node)
    elif isinstance(node, Comment):
        out.append(f"<!--{node}-->")
    elif isinstance(node, ProcessingInstruction):
        out.append(f"<?{node}>")
    elif isinstance(node, Doctype):
        out.append(f"<!DOCTYPE {node}>")
    elif isinstance(node, CData):
        out.append(f"<![CDATA[{node}]]>")
    elif isinstance(node, Declaration):
        out.append(f"<!{node}>")
    elif isinstance(node, NavigableString):
        out.append(escape(str(node), attr_mode=False))


def _write_element(out: list[str], tag: Tag) -> None:
    if tag.namespace != XHTML_NAMESPACE:
        raise NamespaceViolation(f"unexpected namespace {tag.namespace!r} on <{tag.name}>")

    out.append(f"<{tag.name}")
    for name, value in tag.attrs.items():
        namespace = getattr(name, "namespace", None)
        if namespace and namespace != XHTML_NAMESPACE:
            raise NamespaceViolation(f"unexpected attribute namespace {namespace!r} on {name!r} of <{tag.name}>")
        if isinstance(value, list):
            value = " ".join(value)
        out.append(f' {name}="{escape(value, attr_mode=True)}"')
    out.append(">")

    for child in tag.children:
        _write_node(out, child)

    out.append(f"</{tag.name}>")
