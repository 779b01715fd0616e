from __future__ import annotations
from dataclasses import dataclass, field
from typing import ClassVar, Literal

EntityId = int
LineId = int

EntityKind = Literal["heading", "link", "comment"]
LexerKind = Literal["none", "inline_code", "fenced"]


@dataclass(frozen=True)
class Range:
    start: int  # character offsets in the owning line, half-open
    end: int

    def __len__(self) -> int:
        return self.end - self.start

    def overlaps(self, other: Range) -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class LexerState:
    kind: LexerKind = "none"
    fence: str = ""  # "`" or "~" for fenced code blocks

    @property
    def is_multiline(self) -> bool:
        return self.kind == "fenced"

    @property
    def is_code_block(self) -> bool:
        return self.kind == "fenced"

    def __str__(self) -> str:
        if self.kind == "fenced":
            return f"fenced({self.fence * 3})"
        return self.kind


NONE = LexerState()
INLINE_CODE = LexerState("inline_code")
FENCED_BACKTICK = LexerState("fenced", "`")
FENCED_TILDE = LexerState("fenced", "~")


@dataclass(eq=False)
class Entity:
    """A parsed construct anchored to a character range of one line.

    Assigning a different value to any payload field marks the entity as
    modified; the owning line re-serializes it on the next ``to_string()``.
    """

    kind: ClassVar[EntityKind]
    payload: ClassVar[tuple[str, ...]] = ()

    id: EntityId
    range: Range
    modified: bool = field(default=False, init=False, repr=False)

    def __setattr__(self, name: str, value: object) -> None:
        if name in self.payload and name in self.__dict__ and self.__dict__[name] != value:
            object.__setattr__(self, "modified", True)
        object.__setattr__(self, name, value)

    def to_string(self) -> str:
        raise NotImplementedError


@dataclass(eq=False)
class Heading(Entity):
    kind: ClassVar[EntityKind] = "heading"
    payload: ClassVar[tuple[str, ...]] = ("level", "title")

    level: int
    title: str

    def to_string(self) -> str:
        return "#" * self.level + " " + self.title


@dataclass(eq=False)
class Link(Entity):
    kind: ClassVar[EntityKind] = "link"
    payload: ClassVar[tuple[str, ...]] = ("title", "path", "is_image")

    title: str
    path: str
    is_image: bool = False

    def to_string(self) -> str:
        prefix = "!" if self.is_image else ""
        return f"{prefix}[{self.title}]({self.path})"


@dataclass(eq=False)
class InlineComment(Entity):
    kind: ClassVar[EntityKind] = "comment"
    payload: ClassVar[tuple[str, ...]] = ("content",)

    content: str

    def to_string(self) -> str:
        return f"<!-- {self.content} -->"
