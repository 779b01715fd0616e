"""Tests for storage and the documentation database."""

import tempfile
from pathlib import Path

import pytest

from docweave.adapters.fs_storage import FsStorage
from docweave.adapters.yaml_codec import YamlFrontmatter
from docweave.config import load_config
from docweave.diagnostics import Diagnostics
from docweave.docset.database import DocumentationDatabase
from docweave.docset.items import DocumentationItem
from docweave.errors import ConfigError, DocumentationError

CONFIG = """
[parameters]
auxiliary_documents = ["_Sidebar.md"]

[repositories.repoA]
remote = "org/repo-a"
"""


def make_database(tmpdir, files):
    config_path = Path(tmpdir) / "docweave.toml"
    config_path.write_text(CONFIG)
    out = Path(tmpdir) / "out"
    for rel, text in files.items():
        path = out / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
    return DocumentationDatabase(load_config(config_path=config_path), FsStorage(out), Diagnostics())


def test_fs_storage():
    """Test reading, atomic writing and listing files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = FsStorage(Path(tmpdir))
        storage.write_text("a/b/page.md", "# Page")
        storage.write_text("a/z.md", "z")
        storage.write_text("a/b/page.md", "# Page 2")

        assert storage.read_text("a/b/page.md") == "# Page 2"
        assert storage.exists("a/b")
        assert not storage.exists("a/c")
        assert storage.mtime("a/z.md") is not None
        assert storage.mtime("missing.md") is None
        assert list(storage.list_tree("a")) == [("b", True), ("z.md", False), ("b/page.md", False)]
        assert list(storage.list_tree("missing")) == []
        assert not list(Path(tmpdir).rglob("*.tmp"))


def test_yaml_codec():
    codec = YamlFrontmatter()
    lines = codec.encode_lines({"title": "A: B", "timestamp": 1})
    assert lines[0] == lines[-1] == "---"
    meta, body = codec.decode("\n".join(lines) + "\nBody")
    assert meta == {"title": "A: B", "timestamp": 1}
    assert body == "Body"
    assert codec.decode("no front matter") == ({}, "no front matter")
    assert codec.encode({}) == ""


def test_load_items():
    with tempfile.TemporaryDirectory() as tmpdir:
        db = make_database(tmpdir, {
            "repoA/index.md": "# A",
            "repoA/_Sidebar.md": "* [A](index.md)",
            "repoA/guide/intro.md": "# Intro",
            "repoA/guide/diagram.png": "png",
        })
        db.load()

    assert [d.name for d in db.all_documents()] == [
        "repoA/_Sidebar.md", "repoA/guide/intro.md", "repoA/index.md",
    ]
    assert db.find_item("repoA/guide/").kind == "dir"
    assert db.find_item("repoA/guide/diagram.png").kind == "file"
    assert db.find_document("repoA/guide/diagram.png") is None
    assert db.find_document("repoA/index.md").local_path == "index.md"
    assert db.find_item("repoA/_Sidebar.md").reference_count == 1
    assert [i.path for i in db.unreferenced_items()] == [
        "repoA/guide/diagram.png", "repoA/guide/intro.md", "repoA/index.md",
    ]
    assert db.repository("repoA").contains_local_file("guide/intro.md")


def test_missing_repository_directory():
    with tempfile.TemporaryDirectory() as tmpdir:
        db = make_database(tmpdir, {"other/index.md": "# X"})
        with pytest.raises(DocumentationError):
            db.load()


def test_unknown_repository():
    with tempfile.TemporaryDirectory() as tmpdir:
        db = make_database(tmpdir, {"repoA/index.md": "# A"})
        db.load()
    with pytest.raises(ConfigError):
        db.repository("repoB")


def test_create_document_and_save():
    with tempfile.TemporaryDirectory() as tmpdir:
        db = make_database(tmpdir, {"repoA/index.md": "# A"})
        db.load()
        created = db.create_document("repoA", "repoA/generated/list.md", "# List")
        assert db.find_document("repoA/generated/list.md") is created
        assert db.repository("repoA").contains_local_file("generated/list.md")

        with pytest.raises(DocumentationError):
            db.add_item(DocumentationItem.markdown(created))

        assert db.save_all() == 1
        assert db.save_all() == 0
        assert (Path(tmpdir) / "out/repoA/generated/list.md").read_text(encoding="utf-8") == "# List"
