from __future__ import annotations

import logging
from typing import Sequence

from .line import Line
from .metadata import MetadataNode, MetadataTree, build_metadata
from .model import NONE, Entity, EntityKind, Heading, InlineComment, LexerState, LineId, Link
from .ports import IdGenerator, ParserStrategy
from .utils import file_name, heading_anchor_slug, parent_dir
from ..diagnostics import Diagnostics

logger = logging.getLogger(__name__)


class Document:
    """A markdown document held as a buffer of parsed lines.

    `name` is the path of the document in the merged tree, starting with the
    repository identifier (``"repo/guide/Intro.md"``). Edits go through
    :meth:`insert` and :meth:`remove`; only the inserted lines are parsed, and
    the anchor table and metadata tree are rebuilt afterwards.
    """

    def __init__(
        self,
        name: str,
        repo_id: str,
        parser: ParserStrategy,
        ids: IdGenerator,
        diagnostics: Diagnostics,
        original_name: str | None = None,
        mtime: float | None = None,
    ):
        self.name = name
        self.repo_id = repo_id
        self.parser = parser
        self.ids = ids
        self.diagnostics = diagnostics
        self.original_name = original_name or name
        self.mtime = mtime
        self.lines: list[Line] = []
        self.anchors: dict[str, int] = {}
        self.metadata = MetadataTree()
        self.is_modified = False

    @classmethod
    def from_text(
        cls,
        name: str,
        text: str,
        repo_id: str = "",
        diagnostics: Diagnostics | None = None,
        **kwargs,
    ) -> Document:
        """Standalone document with its own parser and id generator."""
        from ..adapters.idgen import SequentialId
        from ..adapters.markdown_parser import MarkdownParser

        diagnostics = diagnostics or Diagnostics()
        ids = SequentialId()
        doc = cls(name, repo_id, MarkdownParser(ids, diagnostics), ids, diagnostics, **kwargs)
        doc.load(text)
        return doc

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Document({self.name!r}, lines={len(self.lines)})"

    # -- paths ---------------------------------------------------------------

    @property
    def file_name(self) -> str:
        return file_name(self.name)

    @property
    def directory(self) -> str:
        return parent_dir(self.name)

    @property
    def local_path(self) -> str:
        """Path without the leading repository identifier."""
        prefix = self.repo_id + "/"
        if self.repo_id and self.name.startswith(prefix):
            return self.name[len(prefix):]
        return self.name

    # -- loading and serialization ------------------------------------------

    def load(self, text: str) -> None:
        self.lines = [
            Line(self.ids.new_id(), chunk)
            for chunk in text.replace("\r\n", "\n").split("\n")
        ]
        state = self.parser.parse(self.lines, NONE, 0, self)
        if state.is_multiline:
            self.warning(f"Document ends in {state} state.", len(self.lines) - 1)
        self._rebuild(report=True)
        self.is_modified = False

    def to_text(self) -> str:
        return "\n".join(line.to_string() for line in self.lines)

    @property
    def has_changes(self) -> bool:
        return self.is_modified or any(line.is_modified for line in self.lines)

    # -- diagnostics -------------------------------------------------------------

    def warning(self, message: str, line: int | None = None) -> None:
        self.diagnostics.document_warning(self, message, line)

    def error(self, message: str, line: int | None = None) -> None:
        self.diagnostics.document_error(self, message, line)

    # -- edits -----------------------------------------------------------------

    def prepare_lines(self, texts: Sequence[str]) -> list[Line]:
        """Wrap texts into new lines; they are parsed when inserted."""
        return [Line(self.ids.new_id(), text) for text in texts]

    def insert(self, lines: Sequence[str | Line], at: int) -> None:
        if at < 0 or at > len(self.lines):
            raise IndexError(f"{self.name}: insert position {at} out of range")
        new_lines = [
            line if isinstance(line, Line) else Line(self.ids.new_id(), line)
            for line in lines
        ]
        previous = self.lines[at - 1].state_end if at > 0 else NONE
        last = self.parser.parse(new_lines, previous, at, self)
        self._check_boundary(previous, last, at, "Inserted lines changed multiline state")
        self.lines[at:at] = new_lines
        self.is_modified = True
        self._rebuild()

    def append(self, lines: Sequence[str | Line]) -> None:
        self.insert(lines, len(self.lines))

    def remove(self, start: int, count: int = 1) -> list[Line]:
        if count <= 0:
            return []
        if start < 0 or start + count > len(self.lines):
            raise IndexError(f"{self.name}: cannot remove lines {start}..{start + count - 1}")
        before = self.lines[start].state_start
        after = self.lines[start + count - 1].state_end
        self._check_boundary(before, after, start, "Removed lines changed multiline state")
        removed = self.lines[start:start + count]
        del self.lines[start:start + count]
        self.is_modified = True
        self._rebuild()
        return removed

    def _check_boundary(self, before: LexerState, after: LexerState, line: int, message: str) -> None:
        if before != after and (before.is_multiline or after.is_multiline):
            self.warning(f"{message} ({before} -> {after}).", line)

    def _rebuild(self, report: bool = False) -> None:
        self.anchors = {}
        for heading in self.headings:
            slug = heading_anchor_slug(heading.title)
            self.anchors[slug] = self.anchors.get(slug, 0) + 1
        # metadata problems are reported once, when the document is loaded
        warn = self.warning if report else self._debug
        self.metadata = build_metadata(self.lines, self.ids.mixed, warn)

    def _debug(self, message: str, line: int | None = None) -> None:
        logger.debug("%s:%s: %s", self.name, "?" if line is None else line + 1, message)

    def rebuild(self) -> None:
        """Refresh anchors and metadata after entities were edited in place."""
        self._rebuild()

    # -- lookups ---------------------------------------------------------------

    def line_at(self, index: int) -> Line | None:
        if 0 <= index < len(self.lines):
            return self.lines[index]
        return None

    def line_number(self, line_id: LineId) -> int | None:
        for index, line in enumerate(self.lines):
            if line.id == line_id:
                return index
        return None

    def line_of(self, entity: Entity) -> int | None:
        for index, line in enumerate(self.lines):
            if line.contains(entity.id):
                return index
        return None

    def entities(self, kind: EntityKind) -> list[Entity]:
        return [entity for line in self.lines for entity in line.entities_of(kind)]

    @property
    def headings(self) -> list[Heading]:
        return self.entities("heading")  # type: ignore[return-value]

    @property
    def links(self) -> list[Link]:
        return self.entities("link")  # type: ignore[return-value]

    @property
    def comments(self) -> list[InlineComment]:
        return self.entities("comment")  # type: ignore[return-value]

    @property
    def first_heading(self) -> Heading | None:
        headings = self.headings
        return headings[0] if headings else None

    def contains_anchor(self, name: str) -> int | None:
        """Number of headings producing anchor `name`, or None."""
        return self.anchors.get(name)

    # -- metadata ----------------------------------------------------------------

    def metadata_named(self, name: str, multiline: bool | None = None) -> list[MetadataNode]:
        return self.metadata.named(name, multiline)

    def first_metadata(self, name: str, multiline: bool | None = None) -> MetadataNode | None:
        return self.metadata.first(name, multiline)

    def get_metadata(self, node_id: int) -> MetadataNode | None:
        return self.metadata.get(node_id)

    def nested_metadata(self, parent: MetadataNode | None) -> list[MetadataNode]:
        return self.metadata.children(parent)

    def parent_metadata(self, node: MetadataNode) -> MetadataNode | None:
        return self.metadata.parent_of(node)

    def _metadata_span(self, node: MetadataNode, include_markers: bool) -> tuple[int, int] | None:
        begin = self.line_number(node.begin_line)
        end = self.line_number(node.end_line)
        if begin is None or end is None or end < begin:
            return None
        if include_markers:
            return begin, end - begin + 1
        return begin + 1, max(end - begin - 1, 0)

    def lines_for_metadata(
        self,
        node: MetadataNode,
        include_markers: bool = True,
        remove: bool = False,
    ) -> list[Line] | None:
        span = self._metadata_span(node, include_markers)
        if span is None:
            return None
        start, count = span
        if remove:
            return self.remove(start, count)
        return self.lines[start:start + count]

    def remove_lines_for_metadata(self, node: MetadataNode, include_markers: bool = True) -> bool:
        return self.lines_for_metadata(node, include_markers, remove=True) is not None


def first_heading(lines: Sequence[Line]) -> Heading | None:
    for line in lines:
        heading = line.first("heading")
        if heading is not None:
            return heading  # type: ignore[return-value]
    return None
