"""Diagnostics context shared by the processing pipeline.

A single :class:`Diagnostics` instance is created per run and handed to every
component that can report problems. It wraps a stdlib logger, counts warnings
and filters parser warnings by severity.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any

from .errors import StrictModeError


class WarningLevel(IntEnum):
    """Severity of markdown parser warnings; also the filter threshold."""

    OFF = 0
    SERIOUS = 1
    MINOR = 2
    ALL = 3

    @classmethod
    def from_name(cls, name: str) -> "WarningLevel":
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown warning level: {name}") from None


def _location(source: Any, line: int | None) -> str:
    name = getattr(source, "name", source)
    if line is None:
        return f"{name}"
    return f"{name}:{line + 1}"


class VerbosityGuard:
    """Temporarily change the logger level; restores the previous one on exit."""

    def __init__(self, logger: logging.Logger, level: int):
        self.logger = logger
        self.level = level
        self._previous: int | None = None

    def __enter__(self) -> "VerbosityGuard":
        self._previous = self.logger.level
        self.logger.setLevel(self.level)
        return self

    def __exit__(self, *exc: object) -> None:
        if self._previous is not None:
            self.logger.setLevel(self._previous)
            self._previous = None


class Diagnostics:
    def __init__(
        self,
        logger: logging.Logger | None = None,
        parser_warnings: WarningLevel = WarningLevel.SERIOUS,
        strict: bool = False,
    ):
        self.logger = logger or logging.getLogger("docweave")
        self.parser_warnings = parser_warnings
        self.strict = strict
        self.warning_count = 0
        self.error_count = 0

    def debug(self, message: str) -> None:
        self.logger.debug(message)

    def info(self, message: str) -> None:
        self.logger.info(message)

    def warning(self, message: str) -> None:
        self.warning_count += 1
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.error_count += 1
        self.logger.error(message)

    def document_warning(self, document: Any, message: str, line: int | None = None) -> None:
        """Warning tied to a document, optionally to a 0-based line number."""
        self.warning(f"{_location(document, line)}: {message}")

    def document_error(self, document: Any, message: str, line: int | None = None) -> None:
        self.error(f"{_location(document, line)}: {message}")

    def parser_warning(
        self,
        level: WarningLevel,
        message: str,
        document: Any = None,
        line: int | None = None,
    ) -> None:
        if level > self.parser_warnings or level == WarningLevel.OFF:
            return
        if document is None:
            self.warning(message)
        else:
            self.document_warning(document, message, line)

    def verbosity(self, level: int) -> VerbosityGuard:
        """Scoped logger level: ``with diag.verbosity(logging.ERROR): ...``."""
        return VerbosityGuard(self.logger, level)

    def check_strict(self) -> None:
        if self.strict and self.warning_count > 0:
            raise StrictModeError(
                f"{self.warning_count} warning(s) reported and --fail-on-warning is set"
            )
