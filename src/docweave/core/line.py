import logging
from dataclasses import dataclass, field
from typing import Iterator, TypeVar

from .model import NONE, Entity, EntityId, EntityKind, LexerState, LineId, Range

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Entity)


@dataclass(eq=False)
class Line:
    """One line of a markdown document together with the entities parsed from it."""

    id: LineId
    text: str
    entities: list[Entity] = field(default_factory=list)
    state_start: LexerState = NONE
    state_end: LexerState = NONE

    def add(self, entity: Entity) -> bool:
        for existing in self.entities:
            if existing.range.overlaps(entity.range):
                logger.warning(
                    "Line %s: entity %s %s overlaps entity %s %s, ignoring",
                    self.id, entity.kind, entity.range, existing.kind, existing.range,
                )
                return False
        self.entities.append(entity)
        return True

    def remove(self, entity_id: EntityId) -> Entity | None:
        for i, entity in enumerate(self.entities):
            if entity.id == entity_id:
                return self.entities.pop(i)
        return None

    def find(self, entity_id: EntityId) -> Entity | None:
        for entity in self.entities:
            if entity.id == entity_id:
                return entity
        return None

    def contains(self, entity_id: EntityId) -> bool:
        return self.find(entity_id) is not None

    def entities_of(self, kind: EntityKind) -> Iterator[Entity]:
        for entity in self.entities:
            if entity.kind == kind:
                yield entity

    def first(self, kind: EntityKind) -> Entity | None:
        return next(self.entities_of(kind), None)

    @property
    def is_modified(self) -> bool:
        return any(entity.modified for entity in self.entities)

    def to_string(self) -> str:
        if self.is_modified:
            self._rebuild()
        return self.text

    def reset(self) -> None:
        """Flush pending entity edits into the text and forget all entities."""
        self.to_string()
        self.entities.clear()

    def _rebuild(self) -> None:
        # Walk entities by their position in the current text; modified ones
        # are replaced by their serialized form, everything else is copied
        # verbatim. Ranges are recomputed against the new buffer as we go.
        pieces: list[str] = []
        cursor = 0
        length = 0
        for entity in sorted(self.entities, key=lambda e: e.range.start):
            start, end = entity.range.start, entity.range.end
            gap = self.text[cursor:start]
            pieces.append(gap)
            length += len(gap)
            if entity.modified:
                chunk = entity.to_string()
                entity.modified = False
            else:
                chunk = self.text[start:end]
            pieces.append(chunk)
            entity.range = Range(length, length + len(chunk))
            length += len(chunk)
            cursor = end
        pieces.append(self.text[cursor:])
        self.text = "".join(pieces)

    def __str__(self) -> str:
        return self.to_string()
