"""Utility functions for docweave."""

import posixpath


def heading_anchor_slug(title: str) -> str:
    """
    Convert a heading title to the anchor generated for it by the site.

    - Lowercase
    - Drop `.` and backtick characters
    - Any character outside `[a-z0-9]` becomes `-`
    - Consecutive `-` collapse to one, leading `-` is dropped
    - A single trailing `-` is removed

    Examples:
        >>> heading_anchor_slug("Title With . Dots`")
        'title-with-dots'
        >>> heading_anchor_slug("Response 200 (OK)")
        'response-200-ok'
    """
    chars: list[str] = []
    last_was_dash = True
    for c in title.lower():
        if c in ".`":
            continue
        if "a" <= c <= "z" or "0" <= c <= "9":
            chars.append(c)
            last_was_dash = False
        elif not last_was_dash:
            chars.append("-")
            last_was_dash = True
    if chars and chars[-1] == "-":
        chars.pop()
    return "".join(chars)


def split_anchor(path: str) -> tuple[str, str | None]:
    """Split ``"file.md#anchor"`` at the last ``#``; empty anchors become None."""
    base, sep, anchor = path.rpartition("#")
    if not sep:
        return path, None
    return base, anchor or None


def path_components(path: str) -> list[str]:
    return [part for part in path.split("/") if part]


def file_name(path: str) -> str:
    return posixpath.basename(path.rstrip("/"))


def parent_dir(path: str) -> str:
    return posixpath.dirname(path.rstrip("/"))


def file_extension(path: str) -> str:
    name = file_name(path)
    stem, dot, ext = name.rpartition(".")
    return ext.lower() if dot and stem else ""


def join_path(directory: str, path: str) -> str:
    if not directory:
        return path
    if not path:
        return directory
    return f"{directory.rstrip('/')}/{path}"


def normalize_path(path: str) -> str:
    """Collapse ``.`` and ``..`` segments; the result never ends with ``/``."""
    if not path:
        return ""
    normalized = posixpath.normpath(path)
    return "" if normalized == "." else normalized


def is_escaping(path: str) -> bool:
    """True if a normalized relative path leaves its base directory."""
    return path == ".." or path.startswith("../")


def strip_extension(path: str, extension: str) -> str:
    suffix = "." + extension
    if path.lower().endswith(suffix.lower()) and len(file_name(path)) > len(suffix):
        return path[: -len(suffix)]
    return path


def relative_path(source: str, target: str) -> str:
    """
    Shortest relative link from the document at `source` to `target`.

    Both paths are relative to the same root. The common directory prefix is
    dropped and one `..` is emitted per remaining directory of the source.

    Examples:
        >>> relative_path("repoA/guide/intro.md", "repoB/index")
        '../../repoB/index'
        >>> relative_path("repoA/guide/intro.md", "repoA/guide/setup")
        'setup'
    """
    source_dirs = path_components(source)[:-1]
    target_parts = path_components(target)
    common = 0
    limit = min(len(source_dirs), len(target_parts) - 1)
    while common < limit and source_dirs[common] == target_parts[common]:
        common += 1
    parts = [".."] * (len(source_dirs) - common) + target_parts[common:]
    return "/".join(parts)
