"""In-memory database of all merged documentation items."""

from __future__ import annotations

import logging

from ..adapters.idgen import SequentialId
from ..adapters.markdown_parser import MarkdownParser
from ..config import DocsConfig
from ..core.document import Document
from ..core.model import Link
from ..core.ports import StorageStrategy
from ..diagnostics import Diagnostics
from ..errors import ConfigError, DocumentationError
from .items import DocumentationItem
from .repository import RepositoryIndex

logger = logging.getLogger(__name__)


class DocumentationDatabase:
    """Every file, directory and markdown document of the merged tree.

    Paths are relative to the storage root and start with the repository
    identifier. `origins` maps renamed paths back to their original names.
    """

    def __init__(
        self,
        config: DocsConfig,
        storage: StorageStrategy,
        diagnostics: Diagnostics,
        origins: dict[str, str] | None = None,
    ):
        self.config = config
        self.storage = storage
        self.diagnostics = diagnostics
        self.origins = dict(origins or {})
        self.ids = SequentialId()
        self.parser = MarkdownParser(self.ids, diagnostics)
        self.repositories: dict[str, RepositoryIndex] = {}
        self.items: dict[str, DocumentationItem] = {}
        self.external_links: list[tuple[Document, Link]] = []
        self.ambiguous_links: list[tuple[Document, Link]] = []

    def load(self) -> None:
        for repo_id in self.config.repositories:
            if not self.storage.exists(repo_id):
                raise DocumentationError(f"No documentation found for repository '{repo_id}'")
            index = RepositoryIndex.from_config(self.config, repo_id)
            self.repositories[repo_id] = index
            for rel_path, is_dir in index.scan(self.storage, self.diagnostics):
                path = f"{repo_id}/{rel_path}"
                if is_dir:
                    item = DocumentationItem.directory(repo_id, path)
                elif index.is_markdown(rel_path):
                    document = self._read_document(repo_id, path)
                    # auxiliary documents (sidebar, footer) are referenced by the site itself
                    item = DocumentationItem.markdown(document, 1 if index.is_auxiliary(rel_path) else 0)
                else:
                    item = DocumentationItem.file(repo_id, path)
                self._register(item)
        self.diagnostics.info(
            f"Loaded {len(self.all_documents())} documents from {len(self.repositories)} repositories"
        )

    def _read_document(self, repo_id: str, path: str) -> Document:
        document = Document(
            path,
            repo_id,
            self.parser,
            self.ids,
            self.diagnostics,
            original_name=self.origins.get(path),
            mtime=self.storage.mtime(path),
        )
        document.load(self.storage.read_text(path))
        return document

    def _register(self, item: DocumentationItem) -> None:
        if item.path in self.items:
            raise DocumentationError(f"Item '{item.path}' already exists in the documentation database")
        self.items[item.path] = item

    # -- queries -----------------------------------------------------------------

    def repository(self, repo_id: str) -> RepositoryIndex:
        try:
            return self.repositories[repo_id]
        except KeyError:
            raise ConfigError(f"Unknown repository identifier '{repo_id}'") from None

    def repository_for(self, document: Document) -> RepositoryIndex:
        return self.repository(document.repo_id)

    def all_documents(self) -> list[Document]:
        documents = [item.document for item in self.items.values() if item.document is not None]
        return sorted(documents, key=lambda d: d.name)

    def find_item(self, path: str) -> DocumentationItem | None:
        return self.items.get(path.rstrip("/"))

    def find_document(self, path: str) -> Document | None:
        item = self.find_item(path)
        return item.document if item is not None else None

    def unreferenced_items(self) -> list[DocumentationItem]:
        return sorted(
            (item for item in self.items.values() if item.reference_count == 0),
            key=lambda i: i.path,
        )

    # -- mutation ----------------------------------------------------------------

    def add_item(self, item: DocumentationItem) -> None:
        """Register an item created during processing; its path must be new."""
        index = self.repository(item.repo_id)
        self._register(item)
        if item.kind == "dir":
            index.directories.add(index.strip_repo(item.path))
        else:
            index.add_file(item.path)

    def create_document(self, repo_id: str, path: str, text: str) -> Document:
        """Create a brand new markdown document and add it to the database."""
        document = Document(path, repo_id, self.parser, self.ids, self.diagnostics)
        document.load(text)
        document.is_modified = True
        self.add_item(DocumentationItem.markdown(document))
        return document

    def save_all(self) -> int:
        """Write every modified document; returns the number of files written."""
        saved = 0
        for document in self.all_documents():
            if not document.has_changes:
                continue
            self.storage.write_text(document.name, document.to_text())
            document.is_modified = False
            saved += 1
            logger.debug("saved %s", document.name)
        return saved
