"""Tests for the line buffer and entity re-serialization."""

import logging

from docweave.core.line import Line
from docweave.core.model import Heading, InlineComment, Link, Range


def make_line(text, *entities):
    line = Line(1, text)
    for entity in entities:
        assert line.add(entity)
    return line


def test_unmodified_line_keeps_text():
    """Entities that are not edited never change the text."""
    link = Link(1, Range(4, 20), "docs", "guide.md")
    line = make_line("See [docs](guide.md) now", link)
    assert line.to_string() == "See [docs](guide.md) now"
    assert not line.is_modified


def test_link_grows_and_shrinks():
    """Test updating a link in the middle of the line."""
    text = "See [docs](guide.md) and [api](api.md)."
    first = Link(1, Range(4, 20), "docs", "guide.md")
    second = Link(2, Range(25, 38), "api", "api.md")
    line = make_line(text, first, second)

    first.path = "../repoB/guide/intro"
    assert first.modified
    assert line.to_string() == "See [docs](../repoB/guide/intro) and [api](api.md)."
    assert not line.is_modified
    assert second.range == Range(37, 50)

    second.path = "a"
    first.path = "b"
    assert line.to_string() == "See [docs](b) and [api](a)."
    assert first.range == Range(4, 13)
    assert second.range == Range(18, 26)


def test_same_value_is_not_a_modification():
    link = Link(1, Range(0, 9), "t", "x.md")
    line = make_line("[t](x.md)", link)
    link.path = "x.md"
    assert not line.is_modified


def test_heading_and_comment_serialization():
    heading = Heading(1, Range(0, 9), 2, "Title")
    line = make_line("##  Title", heading)
    heading.level = 3
    assert line.to_string() == "### Title"

    comment = InlineComment(2, Range(4, 20), "begin x")
    line = make_line("abc <!-- begin x --> def", comment)
    comment.content = "end"
    assert line.to_string() == "abc <!-- end --> def"


def test_image_flag():
    image = Link(1, Range(0, 17), "logo", "logo.png", is_image=True)
    line = make_line("![logo](logo.png)", image)
    image.path = "img/logo.png"
    assert line.to_string() == "![logo](img/logo.png)"


def test_overlap_rejected(caplog):
    """Test that a second entity over the same characters is refused."""
    line = Line(7, "[a](b) text")
    assert line.add(Link(1, Range(0, 6), "a", "b"))
    with caplog.at_level(logging.WARNING):
        assert not line.add(InlineComment(2, Range(3, 8), "x"))
    assert "overlaps" in caplog.text
    assert len(line.entities) == 1
    # touching ranges do not overlap
    assert line.add(InlineComment(3, Range(6, 11), "x"))


def test_lookup_and_remove():
    link = Link(1, Range(0, 6), "a", "b")
    comment = InlineComment(2, Range(7, 20), "note")
    line = make_line("[a](b) <!-- note -->", link, comment)
    assert line.contains(1)
    assert line.find(2) is comment
    assert line.first("comment") is comment
    assert list(line.entities_of("link")) == [link]
    assert line.remove(1) is link
    assert line.remove(1) is None
    assert not line.contains(1)


def test_reset_flushes_edits():
    link = Link(1, Range(0, 6), "a", "b")
    line = make_line("[a](b)", link)
    link.title = "title"
    line.reset()
    assert line.text == "[title](b)"
    assert line.entities == []
