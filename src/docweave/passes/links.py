"""Rewrite every link of the merged documentation.

Links are classified in this order:

1. ``http(s)://`` URLs. URLs into a configured repository become relative
   links to the merged copy; anything else is recorded as external.
2. ``#anchor`` links into the same document (validated only).
3. Other URI schemes (``mailto:`` ...), recorded as external.
4. Relative paths leaving the repository's docs folder become links to the
   upstream file browser ("source links").
5. Everything else is a local link inside the same repository.

Every successfully resolved target gets its reference count incremented.
"""

from __future__ import annotations

import re

from ..core.document import Document
from ..core.model import Link
from ..core.utils import (
    file_extension,
    file_name,
    is_escaping,
    join_path,
    normalize_path,
    parent_dir,
    relative_path,
    split_anchor,
    strip_extension,
)
from ..docset.database import DocumentationDatabase
from ..docset.items import DocumentationItem
from ..docset.repository import RepositoryIndex, RepositoryLink
from .base import BasePass

KEEP_LINK_ANCHOR = "docweave-keep-link"
URI_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")


class LinkResolverPass(BasePass):
    name = "resolve-links"
    banner = "Resolving links..."

    def __init__(self) -> None:
        super().__init__()
        self.resolved = 0

    @property
    def db(self) -> DocumentationDatabase:
        if self.database is None:
            raise RuntimeError("LinkResolverPass.set_up() was not called")
        return self.database

    def apply(self, document: Document) -> bool:
        for link in document.links:
            self.resolve(document, link)
        return True

    def tear_down(self) -> bool:
        self.db.diagnostics.debug(f"{self.resolved} links resolved")
        return True

    # -- dispatch --------------------------------------------------------------

    def resolve(self, document: Document, link: Link) -> None:
        path = link.path.strip()
        line = document.line_of(link)
        if path.startswith(("http://", "https://")):
            self._resolve_url(document, link, path, line)
        elif path.startswith("#"):
            self._check_own_anchor(document, link, path[1:], line)
        elif URI_SCHEME_RE.match(path):
            self.db.external_links.append((document, link))
        else:
            repo = self.db.repository_for(document)
            base, anchor = split_anchor(path)
            repo_dir = self._repository_dir(document, repo)
            if is_escaping(normalize_path(join_path(parent_dir(document.local_path), base))):
                self._resolve_source_link(document, link, repo, repo_dir, base, anchor, line)
            else:
                self._resolve_local(document, link, repo, base, anchor, line)

    # -- helpers ---------------------------------------------------------------

    def _repository_dir(self, document: Document, repo: RepositoryIndex) -> str:
        """Directory of the document's upstream file, relative to the repository root."""
        if repo.params.single_document_file:
            return parent_dir(repo.params.single_document_file)
        return join_path(repo.params.docs_folder, parent_dir(document.local_path))

    def _validated_anchor(
        self,
        document: Document,
        link: Link,
        item: DocumentationItem,
        anchor: str | None,
        line: int | None,
    ) -> str | None:
        if anchor is None:
            return None
        if item.document is None:
            document.warning(
                f"Link [{link.title}] has anchor '#{anchor}' but points to a file that is not a document.",
                line,
            )
            return None
        count = item.document.contains_anchor(anchor)
        if count is None:
            document.warning(
                f"Link [{link.title}] points to unknown anchor '#{anchor}' in '{item.path}'.", line
            )
            return anchor
        if count > 1:
            document.warning(
                f"Link [{link.title}] points to ambiguous anchor '#{anchor}' in '{item.path}'.", line
            )
            self.db.ambiguous_links.append((document, link))
            return None
        return anchor

    def _rewrite(
        self,
        document: Document,
        link: Link,
        repo: RepositoryIndex,
        rel_path: str,
        anchor: str | None,
        line: int | None,
    ) -> None:
        """Point `link` at an existing file of `repo` and count the reference."""
        item = self.db.find_item(f"{repo.repo_id}/{rel_path}")
        if item is None:
            document.error(f"Link [{link.title}]: '{rel_path}' is indexed but has no item.", line)
            return
        anchor = self._validated_anchor(document, link, item, anchor, line)
        item.reference_count += 1

        target = item.path
        if repo.is_markdown(rel_path):
            target = strip_extension(target, file_extension(rel_path))
        new_path = relative_path(document.name, target)
        if anchor:
            new_path += "#" + anchor
        if new_path != link.path:
            link.path = new_path
        self.resolved += 1

    def _home_substitution(self, repo: RepositoryIndex, rel_path: str) -> str:
        home = repo.params.home_file
        if file_name(rel_path) == home and home != repo.target_home_file:
            return join_path(parent_dir(rel_path), repo.target_home_file)
        return rel_path

    def _find_target(self, repo: RepositoryIndex, rel_path: str) -> str | None:
        rel_path = self._home_substitution(repo, rel_path)
        if repo.contains_directory(rel_path):
            rel_path = join_path(rel_path, repo.target_home_file)
        return rel_path if repo.contains_local_file(rel_path) else None

    # -- link kinds ------------------------------------------------------------

    def _check_own_anchor(self, document: Document, link: Link, anchor: str, line: int | None) -> None:
        if not anchor:
            return
        count = document.contains_anchor(anchor)
        if count is None:
            document.warning(f"Link [{link.title}] points to unknown anchor '#{anchor}'.", line)
        elif count > 1:
            document.warning(f"Link [{link.title}] points to ambiguous anchor '#{anchor}'.", line)
            self.db.ambiguous_links.append((document, link))

    def _resolve_local(
        self,
        document: Document,
        link: Link,
        repo: RepositoryIndex,
        base: str,
        anchor: str | None,
        line: int | None,
    ) -> None:
        rel_path = normalize_path(join_path(parent_dir(document.local_path), base))
        target = self._find_target(repo, rel_path)
        if target is None:
            document.warning(f"Link [{link.title}]({link.path}) points to unknown document.", line)
            return
        self._rewrite(document, link, repo, target, anchor, line)

    def _resolve_source_link(
        self,
        document: Document,
        link: Link,
        repo: RepositoryIndex,
        repo_dir: str,
        base: str,
        anchor: str | None,
        line: int | None,
    ) -> None:
        repo_path = normalize_path(join_path(repo_dir, base))
        if not repo_path or is_escaping(repo_path):
            document.warning(f"Link [{link.title}]({link.path}) points outside of the repository.", line)
            return
        url = repo.source_url(repo_path)
        if anchor:
            url += "#" + anchor
        link.path = url

    def _resolve_url(self, document: Document, link: Link, url: str, line: int | None) -> None:
        match: RepositoryLink | None = None
        for repo in self.db.repositories.values():
            match = repo.match_url(url)
            if match is not None:
                break
        if match is None:
            self.db.external_links.append((document, link))
            return

        target = self.db.repository(match.repo_id)
        if match.anchor == KEEP_LINK_ANCHOR:
            link.path = target.remote_url if match.path is None else split_anchor(url)[0]
            return
        if match.repo_id == document.repo_id:
            document.warning(
                f"Link [{link.title}] uses full URL but points to the same repository. "
                f"Use a relative link, or add '#{KEEP_LINK_ANCHOR}' to keep it.",
                line,
            )
            return

        rel_path = self._path_in_docs(target, match.path)
        found = self._find_target(target, rel_path)
        if found is None:
            if match.path is None:
                document.warning(
                    f"Link [{link.title}] points to repository '{target.repo_id}' that has no home document.",
                    line,
                )
            else:
                document.warning(
                    f"Link [{link.title}] points to unknown document '{rel_path}' in repository "
                    f"'{target.repo_id}'.",
                    line,
                )
            return
        self._rewrite(document, link, target, found, match.anchor, line)

    def _path_in_docs(self, repo: RepositoryIndex, path: str | None) -> str:
        """Translate a repository path to a path in the merged copy."""
        if path is None:
            return repo.target_home_file
        params = repo.params
        if params.single_document_file and path == params.single_document_file:
            return repo.target_home_file
        docs = params.docs_folder
        if docs and path == docs:
            return ""
        if docs and path.startswith(docs + "/"):
            path = path[len(docs) + 1:]
        return normalize_path(path)
