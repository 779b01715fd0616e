from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from ..core.document import Document

ItemKind = Literal["markdown", "file", "dir"]


@dataclass(eq=False)
class DocumentationItem:
    kind: ItemKind
    repo_id: str
    path: str  # "<repo_id>/<relative path>"
    reference_count: int = 0
    document: Document | None = None  # set for "markdown" items only

    @classmethod
    def markdown(cls, document: Document, reference_count: int = 0) -> DocumentationItem:
        return cls("markdown", document.repo_id, document.name, reference_count, document)

    @classmethod
    def file(cls, repo_id: str, path: str) -> DocumentationItem:
        return cls("file", repo_id, path)

    @classmethod
    def directory(cls, repo_id: str, path: str) -> DocumentationItem:
        # directories are always reachable through their index page
        return cls("dir", repo_id, path, reference_count=1)

    @property
    def local_path(self) -> str:
        prefix = self.repo_id + "/"
        return self.path[len(prefix):] if self.path.startswith(prefix) else self.path
