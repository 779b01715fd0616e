"""Metadata annotations carried by inline HTML comments.

Single-line form ``<!-- NAME param... -->`` and block form::

    <!-- begin NAME param... -->
    ...
    <!-- end [NAME] -->

Comments are turned into Begin/End/Simple tokens and fed to a stack machine
that emits one :class:`MetadataNode` per simple comment or closed block.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator, Sequence, Union, cast

from .line import Line
from .model import EntityId, InlineComment, LineId

IGNORE_MARKER = "!!"


@dataclass(frozen=True)
class BeginToken:
    name: str
    parameters: tuple[str, ...]


@dataclass(frozen=True)
class EndToken:
    name: str | None


@dataclass(frozen=True)
class SimpleToken:
    name: str
    parameters: tuple[str, ...]


Token = Union[BeginToken, EndToken, SimpleToken]


@dataclass
class MetadataNode:
    id: int
    parent_id: int | None
    name: str
    parameters: list[str]
    begin_line: LineId
    end_line: LineId
    begin_comment: EntityId
    end_comment: EntityId
    order: int = field(default=0, repr=False)

    @property
    def name_lower(self) -> str:
        return self.name.lower()

    @property
    def is_multiline(self) -> bool:
        return self.begin_line != self.end_line


def tokenize(content: str) -> Token | str | None:
    """Classify comment content. Returns a token, None for ignored comments,
    or a string describing why the comment is not valid metadata."""
    parts = content.split()
    if not parts:
        return "Cannot parse metadata information."
    keyword = parts[0].lower()
    if keyword == IGNORE_MARKER:
        return None
    if keyword == "end":
        return EndToken(parts[1] if len(parts) > 1 else None)
    if keyword == "begin":
        if len(parts) < 2:
            return "Insufficient information in metadata comment."
        return BeginToken(parts[1], tuple(parts[2:]))
    return SimpleToken(parts[0], tuple(parts[1:]))


@dataclass
class _Open:
    node_id: int
    parent_id: int | None
    token: BeginToken
    line: LineId
    comment: EntityId
    order: int


class MetadataTree:
    """All metadata nodes of a document, in document order."""

    def __init__(self, nodes: Sequence[MetadataNode] = ()):
        self.nodes = sorted(nodes, key=lambda n: n.order)
        self._by_id = {node.id: node for node in self.nodes}

    def __iter__(self) -> Iterator[MetadataNode]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def named(self, name: str, multiline: bool | None = None) -> list[MetadataNode]:
        wanted = name.lower()
        return [
            node for node in self.nodes
            if node.name_lower == wanted and (multiline is None or node.is_multiline == multiline)
        ]

    def first(self, name: str, multiline: bool | None = None) -> MetadataNode | None:
        found = self.named(name, multiline)
        return found[0] if found else None

    def get(self, node_id: int) -> MetadataNode | None:
        return self._by_id.get(node_id)

    def children(self, parent: MetadataNode | None) -> list[MetadataNode]:
        parent_id = parent.id if parent is not None else None
        return [node for node in self.nodes if node.parent_id == parent_id]

    def parent_of(self, node: MetadataNode) -> MetadataNode | None:
        if node.parent_id is None:
            return None
        return self._by_id.get(node.parent_id)


def build_metadata(
    lines: Sequence[Line],
    mixed_id: Callable[[int, int], int],
    warn: Callable[[str, int], None],
) -> MetadataTree:
    """Run the begin/end stack machine over all comments of `lines`.

    `warn` receives a message and the 0-based line index it refers to.
    """
    stack: list[_Open] = []
    nodes: list[MetadataNode] = []
    order = 0

    for index, line in enumerate(lines):
        comments = sorted(line.entities_of("comment"), key=lambda e: e.range.start)
        for comment in cast("list[InlineComment]", comments):
            token = tokenize(comment.content)
            if token is None:
                continue
            if isinstance(token, str):
                warn(token, index)
                continue

            parent_id = stack[-1].node_id if stack else None
            node_id = mixed_id(line.id, comment.id)
            order += 1

            if isinstance(token, BeginToken):
                stack.append(_Open(node_id, parent_id, token, line.id, comment.id, order))
            elif isinstance(token, EndToken):
                if not stack:
                    warn("Ending metadata without the beginning comment.", index)
                    continue
                top = stack[-1]
                if token.name is not None and token.name.lower() != top.token.name.lower():
                    warn(
                        f"Closing different metadata block. Expected `<!-- end {top.token.name} -->`.",
                        index,
                    )
                    continue
                stack.pop()
                if top.line == line.id:
                    warn("Beginning and ending metadata comments must be on different lines.", index)
                    continue
                nodes.append(
                    MetadataNode(
                        id=top.node_id,
                        parent_id=top.parent_id,
                        name=top.token.name,
                        parameters=list(top.token.parameters),
                        begin_line=top.line,
                        end_line=line.id,
                        begin_comment=top.comment,
                        end_comment=comment.id,
                        order=top.order,
                    )
                )
            else:
                nodes.append(
                    MetadataNode(
                        id=node_id,
                        parent_id=parent_id,
                        name=token.name,
                        parameters=list(token.parameters),
                        begin_line=line.id,
                        end_line=line.id,
                        begin_comment=comment.id,
                        end_comment=comment.id,
                        order=order,
                    )
                )

    if stack:
        names = ", ".join(f"`<!-- begin {o.token.name} -->`" for o in stack)
        warn(f"Metadata block {names} is not closed.", len(lines) - 1)

    return MetadataTree(nodes)
