"""Diagnostics shared by every compiler phase.

Each phase constructs :class:`Diagnostic` values directly and hands them to a
:class:`DiagnosticBag`, which deduplicates them and orders them by phase and
source position. The wire representation is the only feedback channel to the
upstream generator, so its shape is produced by a pydantic model and must stay
stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class DiagnosticCode:
    """Stable diagnostic identifiers."""

    SYNTAX_ERROR = "SIGIL_SYNTAX_ERROR"
    TYPE_MISMATCH = "SIGIL_TYPE_MISMATCH"
    REBIND = "SIGIL_REBIND"
    MISSING_RETURN = "SIGIL_MISSING_RETURN"
    UNRESOLVED_NAME = "SIGIL_UNRESOLVED_NAME"
    UNKNOWN_FIELD = "SIGIL_UNKNOWN_FIELD"
    UNKNOWN_TYPE = "SIGIL_UNKNOWN_TYPE"
    ARITY_MISMATCH = "SIGIL_ARITY_MISMATCH"
    DUPLICATE_DECLARATION = "SIGIL_DUPLICATE_DECLARATION"
    PURITY_VIOLATION = "SIGIL_PURITY_VIOLATION"
    UNRESOLVED_CALL = "SIGIL_UNRESOLVED_CALL"
    RESOURCE_LIMIT = "SIGIL_RESOURCE_LIMIT"


class Phase(IntEnum):
    """Pipeline phases in execution order; used as the primary sort key."""

    LEX = 0
    PARSE = 1
    TYPES = 2
    EFFECTS = 3
    EMIT = 4


@dataclass(frozen=True)
class DiagnosticLocation:
    line: int
    column: int


@dataclass(frozen=True)
class Diagnostic:
    """A single, immutable compilation finding."""

    code: str
    message: str
    location: DiagnosticLocation
    hint: Optional[str] = None
    phase: Phase = field(default=Phase.PARSE, compare=False)

    @classmethod
    def at(
        cls,
        code: str,
        message: str,
        *,
        line: int,
        column: int,
        hint: Optional[str] = None,
        phase: Phase = Phase.PARSE,
    ) -> "Diagnostic":
        return cls(code=code, message=message, location=DiagnosticLocation(line, column), hint=hint, phase=phase)

    @property
    def sort_key(self) -> Tuple[int, int, int, str]:
        return (int(self.phase), self.location.line, self.location.column, self.code)

    def to_wire(self) -> Dict[str, Any]:
        return DiagnosticPayload.from_diagnostic(self).model_dump(exclude_none=True)

    def __str__(self) -> str:
        text = f"{self.location.line}:{self.location.column} [{self.code}] {self.message}"
        if self.hint:
            text += f" Hint: {self.hint}"
        return text


class LocationPayload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    line: int
    column: int


class DiagnosticPayload(BaseModel):
    """Wire shape of a diagnostic: ``code``, ``message``, ``location``, ``hint``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    code: str
    message: str
    location: LocationPayload
    hint: Optional[str] = None

    @classmethod
    def from_diagnostic(cls, diagnostic: Diagnostic) -> "DiagnosticPayload":
        return cls(
            code=diagnostic.code,
            message=diagnostic.message,
            location=LocationPayload(line=diagnostic.location.line, column=diagnostic.location.column),
            hint=diagnostic.hint,
        )


class DiagnosticBag:
    """Collects findings from every phase.

    Entries are never discarded to make room for later ones; exact duplicates
    (same code, location and message) are kept once.
    """

    def __init__(self, diagnostics: Iterable[Diagnostic] = ()) -> None:
        self._items: List[Diagnostic] = []
        self._seen: set = set()
        self.extend(diagnostics)

    def add(self, diagnostic: Diagnostic) -> None:
        key = (diagnostic.code, diagnostic.location, diagnostic.message)
        if key in self._seen:
            return
        self._seen.add(key)
        self._items.append(diagnostic)

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self.add(diagnostic)

    def has_errors(self) -> bool:
        return bool(self._items)

    def sorted(self) -> List[Diagnostic]:
        return sorted(self._items, key=lambda item: item.sort_key)

    def codes(self) -> List[str]:
        return [item.code for item in self.sorted()]

    def to_wire(self) -> List[Dict[str, Any]]:
        return [item.to_wire() for item in self.sorted()]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.sorted())


__all__ = [
    "DiagnosticCode",
    "Phase",
    "DiagnosticLocation",
    "Diagnostic",
    "DiagnosticPayload",
    "LocationPayload",
    "DiagnosticBag",
]
