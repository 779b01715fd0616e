"""Tests for version information."""

import platform
import subprocess
import sys

from docweave import __version__


def test_version_flag():
    """`--version` names the package and the interpreter it runs on."""
    result = subprocess.run(
        [sys.executable, "-m", "docweave", "--version"],
        capture_output=True,
        text=True,
    )

    assert result.returncode == 0
    assert result.stdout.startswith(f"docweave {__version__} (")
    assert f"python {platform.python_version()}" in result.stdout
    assert f"platform {sys.platform}-" in result.stdout


def test_version_format():
    assert isinstance(__version__, str)
    major, minor, patch = __version__.split(".")
    assert major.isdigit() and minor.isdigit() and patch.isdigit()
