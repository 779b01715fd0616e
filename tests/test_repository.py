"""Tests for the repository file index and URL matching."""

import logging
import tempfile
from pathlib import Path

from docweave.adapters.fs_storage import FsStorage
from docweave.config import load_config
from docweave.diagnostics import Diagnostics
from docweave.docset.repository import RepositoryIndex, matches_pattern

CONFIG = """
[parameters]
ignored_files = ["*.bak", "drafts"]

[repositories.repoA]
remote = "org/repo-a"

[repositories.repoB]
remote = "org/repo-b"
tag = "2.0.0"

[repositories.repoB.parameters]
docs_folder = "documentation"

[repositories.single]
remote = "org/single"

[repositories.single.parameters]
single_document_file = "README.md"
"""


def make_config(tmpdir):
    path = Path(tmpdir) / "docweave.toml"
    path.write_text(CONFIG)
    return load_config(config_path=path)


def make_files(root, files):
    for rel, text in files.items():
        path = Path(root) / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)


def test_matches_pattern():
    assert matches_pattern("notes.bak", "*.bak")
    assert matches_pattern(".DS_Store", ".DS_Store")
    assert not matches_pattern("x.bak.md", "*.bak")


def test_scan_indexes_and_ignores(caplog):
    """Test scanning the merged copy of one repository."""
    caplog.set_level(logging.DEBUG, logger="docweave.docset.repository")
    with tempfile.TemporaryDirectory() as tmpdir:
        out = Path(tmpdir) / "out"
        make_files(out, {
            "repoA/index.md": "# A",
            "repoA/guide/intro.md": "# Intro",
            "repoA/guide/old.bak": "x",
            "repoA/drafts/wip.md": "# WIP",
            "repoA/images/logo.png": "png",
        })
        index = RepositoryIndex.from_config(make_config(tmpdir), "repoA")
        accepted = index.scan(FsStorage(out))

    assert ("guide", True) in accepted
    assert index.files == {"index.md", "guide/intro.md", "images/logo.png"}
    assert index.directories == {"guide", "images"}
    assert "repoA: indexed 3 files (1 images), 2 directories" in caplog.text


def test_scan_warns_about_brackets():
    with tempfile.TemporaryDirectory() as tmpdir:
        out = Path(tmpdir) / "out"
        make_files(out, {"repoA/index.md": "# A", "repoA/file (1).md": "# B"})
        index = RepositoryIndex.from_config(make_config(tmpdir), "repoA")
        diag = Diagnostics()
        index.scan(FsStorage(out), diag)
    assert diag.warning_count == 1
    assert "file (1).md" in index.files


def test_contains():
    with tempfile.TemporaryDirectory() as tmpdir:
        index = RepositoryIndex.from_config(make_config(tmpdir), "repoA")
    index.files = {"index.md", "guide/intro.md"}
    index.directories = {"guide"}
    assert index.contains_local_file("guide/intro.md")
    assert index.contains_local_file("repoA/guide/intro.md")
    assert not index.contains_local_file("guide")
    assert index.contains_directory("guide/")
    assert index.contains_directory("")
    assert not index.contains_directory("other")
    assert index.is_markdown("guide/intro.MD")
    assert index.is_image("a/b.svg")


def test_original_source_url():
    """Merged paths map back to the upstream file browser."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config = make_config(tmpdir)
    a = RepositoryIndex.from_config(config, "repoA")
    assert a.original_source_url("repoA/Home.md") == "https://github.com/org/repo-a/blob/develop/docs/Home.md"
    assert a.original_source_url("repoA/guide/index.md") == (
        "https://github.com/org/repo-a/blob/develop/docs/guide/Home.md"
    )
    b = RepositoryIndex.from_config(config, "repoB")
    assert b.original_source_url("repoB/setup.md") == (
        "https://github.com/org/repo-b/blob/2.0.0/documentation/setup.md"
    )
    single = RepositoryIndex.from_config(config, "single")
    assert single.original_source_url("single/index.md") == (
        "https://github.com/org/single/blob/develop/README.md"
    )
    assert a.source_url("src/Main.java") == "https://github.com/org/repo-a/blob/develop/src/Main.java"


def test_match_url():
    with tempfile.TemporaryDirectory() as tmpdir:
        config = make_config(tmpdir)
    b = RepositoryIndex.from_config(config, "repoB")

    link = b.match_url("https://github.com/org/repo-b")
    assert (link.repo_id, link.path, link.anchor) == ("repoB", None, None)
    link = b.match_url("https://github.com/org/repo-b/#intro")
    assert (link.path, link.anchor) == (None, "intro")
    link = b.match_url("https://github.com/org/repo-b/blob/2.0.0/documentation/setup.md#install")
    assert (link.path, link.anchor) == ("documentation/setup.md", "install")
    link = b.match_url("https://github.com/org/repo-b/tree/develop/documentation/")
    assert link.path == "documentation"
    link = b.match_url("https://GitHub.com/org/Repo-B/blob/x/src/Main.java")
    assert link.path == "src/Main.java"

    assert b.match_url("https://github.com/org/repo-b/issues/12") is None
    assert b.match_url("https://github.com/org/repo-bb/blob/x/a.md") is None
    assert b.match_url("https://example.com") is None
