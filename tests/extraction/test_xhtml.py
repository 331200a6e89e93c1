# ABOUTME: Tests for the strict XHTML serializer
# ABOUTME: Validates escaping rules, explicit closing tags, and namespace enforcement

import pytest

from pokedict.extraction.dom import parse_document, select_first
from pokedict.extraction.xhtml import NamespaceViolation, escape, serialize, serialize_inner


class TestEscape:
    """Escaping differs between text and attribute values."""

    def test_text_mode(self):
        assert escape('a & b < c > d "e"', attr_mode=False) == 'a &amp; b &lt; c &gt; d "e"'

    def test_attr_mode(self):
        assert escape('a & b < c > d "e"', attr_mode=True) == "a &amp; b < c > d &quot;e&quot;"

    def test_existing_entities_are_escaped_again(self):
        assert escape("&amp;", attr_mode=False) == "&amp;amp;"


class TestSerialize:
    """Serializing subtrees."""

    def test_void_elements_are_closed(self):
        doc = parse_document('<p>one<br>two<img src="x.png" alt="a &amp; b"></p>')

        assert serialize(select_first(doc, "p")) == (
            '<p>one<br></br>two<img src="x.png" alt="a &amp; b"></img></p>'
        )

    def test_inner(self):
        doc = parse_document("<div><b>bold</b> &lt;tag&gt;</div>")

        assert serialize_inner(select_first(doc, "div")) == "<b>bold</b> &lt;tag&gt;"
        assert serialize(select_first(doc, "div"), include_node=False) == "<b>bold</b> &lt;tag&gt;"

    def test_comment_passes_through(self):
        doc = parse_document("<div>a<!-- note -->b</div>")

        assert serialize(select_first(doc, "div")) == "<div>a<!-- note -->b</div>"

    def test_attribute_order_preserved(self):
        doc = parse_document('<a title="t" href="/x" class="c">x</a>')

        assert serialize(select_first(doc, "a")) == '<a title="t" href="/x" class="c">x</a>'

    def test_text_node(self):
        doc = parse_document("<p>1 &lt; 2</p>")

        assert serialize(select_first(doc, "p").contents[0]) == "1 &lt; 2"

    def test_document_serializes_children_only(self):
        doc = parse_document("<p>x</p>")

        assert serialize(doc).startswith("<html>")

    def test_svg_namespace_is_rejected(self):
        doc = parse_document('<div><svg><circle r="1"></circle></svg></div>')

        with pytest.raises(NamespaceViolation, match="svg"):
            serialize(select_first(doc, "div"))

    def test_foreign_attribute_namespace_is_rejected(self):
        doc = parse_document('<div><math xlink:href="#x"></math></div>')
        math = select_first(doc, "div").contents[0]
        math.namespace = "http://www.w3.org/1999/xhtml"

        with pytest.raises(NamespaceViolation, match="attribute namespace"):
            serialize(math)


class TestRoundTrip:
    """Serialized markup parses back to the same logical content."""

    def test_escaped_text_and_attributes(self):
        original = select_first(parse_document("""<p title='a &amp; "b" <c>'>x &amp; &lt;y&gt; "z"</p>"""), "p")

        reparsed = select_first(parse_document(serialize(original)), "p")

        assert reparsed["title"] == original["title"] == 'a & "b" <c>'
        assert reparsed.get_text() == original.get_text() == 'x & <y> "z"'
