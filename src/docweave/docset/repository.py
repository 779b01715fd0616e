"""Per-repository file index and URL mapping."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..config import DocsConfig, EffectiveParameters, GlobalParameters, RepositoryConfig
from ..core.ports import StorageStrategy
from ..core.utils import file_extension, file_name, join_path, parent_dir, split_anchor
from ..diagnostics import Diagnostics

logger = logging.getLogger(__name__)

UNSAFE_NAME_CHARS = "[]()"


def matches_pattern(name: str, pattern: str) -> bool:
    """Ignore-list match: exact file name, or ``*suffix``."""
    if pattern.startswith("*"):
        return name.endswith(pattern[1:])
    return name == pattern


@dataclass
class RepositoryLink:
    """A URL recognized as pointing into a configured repository."""
    repo_id: str
    path: str | None  # path inside the repository, None for the repository itself
    anchor: str | None = None


@dataclass
class RepositoryIndex:
    repo: RepositoryConfig
    params: EffectiveParameters
    global_params: GlobalParameters
    source_base_url: str
    files: set[str] = field(default_factory=set)
    directories: set[str] = field(default_factory=set)

    @classmethod
    def from_config(cls, config: DocsConfig, repo_id: str) -> RepositoryIndex:
        return cls(
            repo=config.repository(repo_id),
            params=config.effective_parameters(repo_id),
            global_params=config.global_params,
            source_base_url=config.source_base_url(repo_id),
        )

    @property
    def repo_id(self) -> str:
        return self.repo.id

    @property
    def remote_url(self) -> str:
        return self.repo.remote_url

    @property
    def target_home_file(self) -> str:
        return self.global_params.target_home_file

    # -- listing ---------------------------------------------------------------

    def is_ignored(self, name: str) -> bool:
        return any(matches_pattern(name, p) for p in self.params.ignored_files)

    def scan(self, storage: StorageStrategy, diagnostics: Diagnostics | None = None) -> list[tuple[str, bool]]:
        """Index the merged copy of this repository (``<root>/<repo_id>``).

        Returns the accepted ``(repo-relative path, is_directory)`` entries.
        """
        accepted: list[tuple[str, bool]] = []
        for path, is_dir in storage.list_tree(self.repo_id):
            if any(self.is_ignored(part) for part in path.split("/")):
                continue
            name = file_name(path)
            if diagnostics is not None and any(c in name for c in UNSAFE_NAME_CHARS):
                diagnostics.warning(
                    f"{self.repo_id}/{path}: file name contains brackets or parentheses; links to it cannot be parsed."
                )
            if is_dir:
                self.directories.add(path)
            else:
                self.files.add(path)
            accepted.append((path, is_dir))
        images = sum(1 for path in self.files if self.is_image(path))
        logger.debug(
            "%s: indexed %d files (%d images), %d directories",
            self.repo_id, len(self.files), images, len(self.directories),
        )
        return accepted

    def strip_repo(self, path: str) -> str:
        """Drop a leading ``<repo_id>/`` segment, if present."""
        prefix = self.repo_id + "/"
        return path[len(prefix):] if path.startswith(prefix) else path

    def add_file(self, path: str) -> None:
        self.files.add(self.strip_repo(path))

    def contains_local_file(self, path: str) -> bool:
        return self.strip_repo(path) in self.files

    def contains_directory(self, path: str) -> bool:
        path = self.strip_repo(path).rstrip("/")
        return path == "" or path in self.directories

    def is_markdown(self, path: str) -> bool:
        return file_extension(path) in self.global_params.markdown_extensions

    def is_image(self, path: str) -> bool:
        return file_extension(path) in self.global_params.image_extensions

    def is_auxiliary(self, path: str) -> bool:
        return file_name(path) in self.params.auxiliary_documents

    # -- URLs ------------------------------------------------------------------

    def original_source_url(self, local_path: str) -> str:
        """Upstream file-browser URL for a (possibly renamed) merged path."""
        if self.params.single_document_file:
            return f"{self.source_base_url}/{self.params.single_document_file}"
        path = self.strip_repo(local_path)
        name = file_name(path)
        if name == self.target_home_file:
            name = self.params.home_file
        parts = [self.params.docs_folder, parent_dir(path), name]
        return self.source_base_url + "/" + "/".join(p for p in parts if p)

    def source_url(self, repo_path: str) -> str:
        """File-browser URL for a path relative to the repository root."""
        return join_path(self.source_base_url, repo_path)

    def match_url(self, url: str) -> RepositoryLink | None:
        """Recognize the repository's own URL or a file-browser URL into it."""
        base, anchor = split_anchor(url)
        remote = self.remote_url
        lowered = base.lower()
        if lowered in (remote.lower(), remote.lower() + "/"):
            return RepositoryLink(self.repo_id, None, anchor)

        source = self.source_base_url
        if lowered.startswith(source.lower() + "/"):
            return RepositoryLink(self.repo_id, base[len(source) + 1:] or None, anchor)

        if not lowered.startswith(remote.lower() + "/"):
            return None
        parts = base[len(remote) + 1:].split("/", 2)
        if len(parts) < 2 or parts[0] not in ("blob", "tree"):
            return None
        path = parts[2] if len(parts) == 3 else ""
        return RepositoryLink(self.repo_id, path.strip("/") or None, anchor)
