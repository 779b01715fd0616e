from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from ..core.document import Document
from ..core.line import Line
from ..core.metadata import MetadataNode
from ..core.ports import DocumentPass

if TYPE_CHECKING:
    from ..docset.database import DocumentationDatabase


class BasePass(DocumentPass):
    """Common set-up/tear-down for passes that only need `apply`."""

    name = "pass"
    banner = ""

    def __init__(self) -> None:
        self.database: DocumentationDatabase | None = None

    def set_up(self, database: DocumentationDatabase) -> bool:
        self.database = database
        if self.banner:
            database.diagnostics.info(self.banner)
        return True

    def apply(self, document: Document) -> bool:
        raise NotImplementedError

    def tear_down(self) -> bool:
        return True


def replace_block(document: Document, node: MetadataNode, new_lines: Sequence[Line | str]) -> bool:
    """Replace a multiline metadata block, markers included, with `new_lines`."""
    start = document.line_number(node.begin_line)
    if start is None:
        document.error(f"Failed to locate the '{node.name}' block.")
        return False
    document.remove_lines_for_metadata(node, include_markers=True)
    document.insert(new_lines, start)
    return True


def block_content(document: Document, node: MetadataNode) -> list[Line] | None:
    lines = document.lines_for_metadata(node, include_markers=False)
    if lines is None:
        start = document.line_number(node.begin_line)
        document.error(f"Failed to acquire lines for the '{node.name}' block.", start)
    return lines


class TagStack:
    """Emits nested ``{% PREFIXkind ... %}`` / ``{% endPREFIXkind %}`` tags.

    The root section uses the empty kind, so prefix "api" produces
    ``{% api ... %}``, ``{% apidescription %}``, ``{% endapi %}`` and so on.
    """

    def __init__(self, prefix: str):
        self.prefix = prefix
        self.lines: list[Line | str] = []
        self.states: list[str] = []

    @property
    def top(self) -> str | None:
        return self.states[-1] if self.states else None

    def open(self, kind: str, argument: str = "") -> None:
        tag = self.prefix + kind
        self.lines.append(f"{{% {tag} {argument} %}}" if argument else f"{{% {tag} %}}")
        self.states.append(kind)

    def close(self) -> None:
        if self.states:
            self.lines.append(f"{{% end{self.prefix}{self.states.pop()} %}}")

    def close_all(self) -> None:
        while self.states:
            self.close()

    def copy(self, line: Line) -> None:
        self.lines.append(line)
