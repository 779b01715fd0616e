"""Tests for configuration loading."""

import os
import tempfile
from pathlib import Path

import pytest

from docweave.config import load_config
from docweave.errors import ConfigError

FULL_CONFIG = """
[paths]
repositories = "checkouts"
output = "site/docs"

[global]
target_home_file = "README.md"
markdown_extensions = [".MD", "markdown"]
release_identifier = "2024.10"
default_branch = "main"

[parameters]
home_file = "Start.md"
ignored_files = [".DS_Store", "*.bak"]
auxiliary_documents = ["_Sidebar.md", "_Footer.md"]

[repositories.server]
remote = "acme/server"
tag = "1.4.0"

[repositories.server.parameters]
docs_folder = "documentation/"
ignored_files = ["*.tmp", ".DS_Store"]

[repositories.mobile]
remote = "acme/mobile"
provider = "https://gitlab.example.com/"
branch = "release"
source_url = "https://browse.example.com/mobile/"

[repositories.mobile.parameters]
home_file = "Home.md"
private_product_website = "https://mobile.example.com"

[repositories.tool]
remote = "acme/tool"
path = "acme-tool"

[repositories.tool.parameters]
single_document_file = "README.md"
"""


def write_config(tmpdir, text):
    config_path = Path(tmpdir) / "docweave.toml"
    config_path.write_text(text)
    return config_path


def test_load_config_defaults():
    """Test loading config with defaults when no file exists."""
    with tempfile.TemporaryDirectory() as tmpdir:
        orig_cwd = os.getcwd()
        try:
            os.chdir(tmpdir)
            config = load_config()
        finally:
            os.chdir(orig_cwd)

    assert config.source is None
    assert config.repositories == {}
    assert config.paths.repositories.name == "repos"
    assert config.paths.output.name == "out"
    assert config.global_params.target_home_file == "index.md"
    assert config.global_params.markdown_extensions == ["md"]
    assert config.global_params.default_branch == "develop"


def test_load_config_from_file():
    """Test loading config with every section present."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = write_config(tmpdir, FULL_CONFIG)
        config = load_config(config_path=config_path)

        assert config.source == config_path
        assert config.paths.repositories == Path(tmpdir) / "checkouts"
        assert config.paths.output == Path(tmpdir) / "site/docs"

    g = config.global_params
    assert g.target_home_file == "README.md"
    assert g.markdown_extensions == ["md", "markdown"]
    assert g.release_identifier == "2024.10"
    assert list(config.repositories) == ["server", "mobile", "tool"]

    server = config.repository("server")
    assert server.remote_url == "https://github.com/acme/server"
    assert server.ref(g.default_branch) == "1.4.0"
    assert config.source_base_url("server") == "https://github.com/acme/server/blob/1.4.0"

    mobile = config.repository("mobile")
    assert mobile.remote_url == "https://gitlab.example.com/acme/mobile"
    assert config.source_base_url("mobile") == "https://browse.example.com/mobile"

    tool = config.repository("tool")
    assert tool.path == "acme-tool"
    assert config.source_base_url("tool") == "https://github.com/acme/tool/blob/main"


def test_effective_parameters():
    """Repository values win over global ones; ignore lists are merged."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config = load_config(config_path=write_config(tmpdir, FULL_CONFIG))

    server = config.effective_parameters("server")
    assert server.docs_folder == "documentation"
    assert server.home_file == "Start.md"
    assert server.ignored_files == [".DS_Store", "*.bak", "*.tmp"]
    assert server.auxiliary_documents == ["_Sidebar.md", "_Footer.md"]
    assert not server.has_single_document

    mobile = config.effective_parameters("mobile")
    assert mobile.docs_folder == "docs"
    assert mobile.home_file == "Home.md"
    assert mobile.private_product_website == "https://mobile.example.com"

    tool = config.effective_parameters("tool")
    assert tool.has_single_document
    assert tool.single_document_file == "README.md"


@pytest.mark.parametrize("folder", [".", "/", "./"])
def test_docs_folder_at_checkout_root(folder):
    text = f'[repositories.site]\nremote = "acme/site"\n\n[repositories.site.parameters]\ndocs_folder = "{folder}"\n'
    with tempfile.TemporaryDirectory() as tmpdir:
        config = load_config(config_path=write_config(tmpdir, text))
    assert config.effective_parameters("site").docs_folder == ""


def test_load_config_search_cwd():
    """Test config search in current working directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        orig_cwd = os.getcwd()
        try:
            os.chdir(tmpdir)
            write_config(tmpdir, '[repositories.a]\nremote = "org/a"\n')
            config = load_config()
            assert list(config.repositories) == ["a"]
        finally:
            os.chdir(orig_cwd)


def test_load_config_search_source_path():
    with tempfile.TemporaryDirectory() as tmpdir:
        source = Path(tmpdir) / "project"
        source.mkdir()
        write_config(source, '[repositories.b]\nremote = "org/b"\n')
        orig_cwd = os.getcwd()
        try:
            os.chdir(tmpdir)
            config = load_config(source_path=source)
        finally:
            os.chdir(orig_cwd)
        assert list(config.repositories) == ["b"]
        assert config.paths.output == source / "out"


def test_missing_explicit_config():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(ConfigError):
            load_config(config_path=Path(tmpdir) / "nope.toml")


def test_invalid_toml():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(ConfigError):
            load_config(config_path=write_config(tmpdir, "[paths\n"))


def test_invalid_values_are_collected():
    """Test that every validation problem ends up in one error."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = write_config(tmpdir, """
[global]
target_home_file = ""

[repositories.a]
remote = ""
branch = " "

[repositories.a.parameters]
ignored_files = ["ok", ""]
""")
        with pytest.raises(ConfigError) as excinfo:
            load_config(config_path=config_path)

    message = str(excinfo.value)
    assert "target_home_file" in message
    assert "repositories.a: 'remote' is required" in message
    assert "'branch' must not be empty" in message
    assert "'ignored_files' contains an empty entry" in message


def test_unknown_repository():
    with tempfile.TemporaryDirectory() as tmpdir:
        config = load_config(config_path=write_config(tmpdir, FULL_CONFIG))
    with pytest.raises(ConfigError):
        config.repository("nope")
