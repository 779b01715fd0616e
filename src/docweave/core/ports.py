from __future__ import annotations
from typing import TYPE_CHECKING, Any, Iterable, Protocol, Sequence

from .model import LexerState

if TYPE_CHECKING:
    from .document import Document
    from .line import Line
    from ..docset.database import DocumentationDatabase


class IdGenerator(Protocol):
    """
    Source of unique integer identifiers for lines and entities.
    """

    def new_id(self) -> int:
        pass

    def mixed(self, first: int, second: int) -> int:
        pass


class ParserStrategy(Protocol):
    """
    Scan a run of lines starting in the given lexer state, attach entities
    to each line and return the state after the last line.
    """

    def parse(
        self,
        lines: Sequence[Line],
        state: LexerState,
        first_line: int = 0,
        document: object = None,
    ) -> LexerState:
        pass


class StorageStrategy(Protocol):
    """
    Text files addressed by a '/'-separated path relative to a root.
    """

    def exists(self, path: str) -> bool:
        pass

    def read_text(self, path: str) -> str:
        pass

    def write_text(self, path: str, contents: str) -> None:
        pass

    def mtime(self, path: str) -> float | None:
        pass

    def list_tree(self, path: str) -> Iterable[tuple[str, bool]]:
        pass


class DocumentPass(Protocol):
    """
    One rewrite step applied to every document of the database.

    ``set_up`` runs once before the documents, ``tear_down`` once after.
    Returning False reports a failure; the run continues.
    """

    name: str

    def set_up(self, database: DocumentationDatabase) -> bool:
        pass

    def apply(self, document: Document) -> bool:
        pass

    def tear_down(self) -> bool:
        pass


class FrontmatterCodec(Protocol):
    """
    Round-trip a YAML front-matter block.
    """

    def decode(self, text: str) -> tuple[dict[str, Any], str]:
        pass

    def encode(self, meta: dict[str, Any]) -> str:
        pass
