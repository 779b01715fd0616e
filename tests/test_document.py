"""Tests for document loading and line edits."""

import logging

import pytest

from docweave.core.document import Document
from docweave.core.model import FENCED_BACKTICK, NONE
from docweave.diagnostics import Diagnostics

SAMPLE = """# Guide

Intro with [link](setup.md).

## Setup
```bash
# not a heading
```

## Setup
Text <!-- SIDEBAR Guide 2 -->"""


def make_doc(text=SAMPLE, name="repoA/guide/intro.md"):
    return Document.from_text(name, text, repo_id="repoA", diagnostics=Diagnostics())


def test_round_trip():
    """Loading and serializing unchanged text is lossless."""
    doc = make_doc()
    assert doc.to_text() == SAMPLE
    assert not doc.has_changes


def entity_set(doc):
    return [
        (index, entity.kind, entity.range, tuple(getattr(entity, name) for name in entity.payload))
        for index, line in enumerate(doc.lines)
        for entity in sorted(line.entities, key=lambda e: e.range.start)
    ]


def test_edited_entities_survive_reparse():
    """Several edits on one line serialize to text that parses back to the same entities."""
    doc = make_doc(
        "# Title\n"
        "See [a](one.md), [second](two/longer.md) and ![pic](p.png) <!-- SIDEBAR x -->\n"
        "```\n[not](a link)\n```"
    )
    first, second, image = doc.links
    first.path = "much/longer/target.md"
    second.title = "2"
    image.title = "picture"
    doc.comments[0].content = "SIDEBAR Guide 3"
    doc.headings[0].title = "T"

    text = doc.to_text()
    assert text.split("\n")[:2] == [
        "# T",
        "See [a](much/longer/target.md), [2](two/longer.md) and ![picture](p.png) <!-- SIDEBAR Guide 3 -->",
    ]
    assert entity_set(doc) == entity_set(make_doc(text))


def test_crlf_is_normalized():
    doc = make_doc("# A\r\nb\r\n")
    assert doc.to_text() == "# A\nb\n"
    assert len(doc.lines) == 3


def test_paths():
    doc = make_doc()
    assert doc.file_name == "intro.md"
    assert doc.directory == "repoA/guide"
    assert doc.local_path == "guide/intro.md"
    assert doc.original_name == doc.name


def test_headings_and_anchors():
    doc = make_doc()
    assert [h.title for h in doc.headings] == ["Guide", "Setup", "Setup"]
    assert doc.first_heading.title == "Guide"
    assert doc.contains_anchor("guide") == 1
    assert doc.contains_anchor("setup") == 2
    assert doc.contains_anchor("not-a-heading") is None


def test_line_lookups():
    doc = make_doc()
    link = doc.links[0]
    assert doc.line_of(link) == 2
    line = doc.line_at(2)
    assert doc.line_number(line.id) == 2
    assert doc.line_at(100) is None
    assert doc.lines[5].state_end == FENCED_BACKTICK
    assert doc.lines[7].state_end == NONE


def test_link_edit_marks_document_changed():
    doc = make_doc()
    doc.links[0].path = "../setup"
    assert doc.has_changes
    assert "Intro with [link](../setup)." in doc.to_text()


def test_insert_parses_new_lines():
    doc = make_doc()
    doc.insert(["## Added", "See [x](x.md)"], 3)
    assert doc.lines[3].first("heading").title == "Added"
    assert doc.lines[4].first("link").path == "x.md"
    assert doc.contains_anchor("added") == 1
    assert doc.is_modified


def test_append_and_prepare_lines():
    doc = make_doc("# T")
    doc.append(doc.prepare_lines(["", "tail"]))
    assert doc.to_text() == "# T\n\ntail"


def test_insert_changing_code_state_warns(caplog):
    """Test inserting an unbalanced fence reports a warning."""
    doc = make_doc()
    with caplog.at_level(logging.WARNING):
        doc.insert(["```"], 1)
    assert "Inserted lines changed multiline state" in caplog.text
    assert doc.diagnostics.warning_count == 1


def test_insert_out_of_range():
    doc = make_doc()
    with pytest.raises(IndexError):
        doc.insert(["x"], len(doc.lines) + 1)


def test_remove_lines():
    doc = make_doc()
    removed = doc.remove(4, 4)
    assert [line.text for line in removed] == ["## Setup", "```bash", "# not a heading", "```"]
    assert doc.contains_anchor("setup") == 1
    assert doc.diagnostics.warning_count == 0
    assert doc.remove(0, 0) == []


def test_remove_half_code_block_warns():
    doc = make_doc()
    doc.remove(5, 1)
    assert doc.diagnostics.warning_count == 1


def test_remove_out_of_range():
    doc = make_doc()
    with pytest.raises(IndexError):
        doc.remove(10, 5)


def test_metadata_lookup():
    doc = make_doc()
    sidebar = doc.first_metadata("sidebar")
    assert sidebar is not None
    assert sidebar.parameters == ["Guide", "2"]
    assert not sidebar.is_multiline
    assert doc.get_metadata(sidebar.id) is sidebar
    assert doc.parent_metadata(sidebar) is None


def test_lines_for_metadata():
    text = "\n".join([
        "# T",
        "<!-- begin box info -->",
        "one",
        "two",
        "<!-- end -->",
        "after",
    ])
    doc = make_doc(text)
    node = doc.first_metadata("box", multiline=True)
    assert [l.text for l in doc.lines_for_metadata(node)] == [
        "<!-- begin box info -->", "one", "two", "<!-- end -->",
    ]
    assert [l.text for l in doc.lines_for_metadata(node, include_markers=False)] == ["one", "two"]

    assert doc.remove_lines_for_metadata(node)
    assert doc.to_text() == "# T\nafter"
    assert doc.first_metadata("box") is None


def test_unclosed_fence_at_end_warns():
    doc = make_doc("# T\n```\ncode")
    assert doc.diagnostics.warning_count == 1


def test_first_heading_missing():
    doc = make_doc("no headings here")
    assert doc.first_heading is None
    assert doc.headings == []
