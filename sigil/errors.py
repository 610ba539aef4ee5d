"""Unified error model for Sigil.

User-facing compile problems travel as :class:`~sigil.diagnostics.Diagnostic`
values. The exceptions below cover everything else: fatal lexing, broken
registry or configuration input, resource ceilings and internal defects.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .diagnostics import Diagnostic, Phase


@dataclass
class ErrorLocation:
    path: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None

    def describe(self) -> str:
        if self.path and self.line is not None and self.column is not None:
            return f"{self.path}:{self.line}:{self.column}"
        if self.line is not None and self.column is not None:
            return f"{self.line}:{self.column}"
        if self.path:
            return self.path
        return "unknown location"


class SigilError(Exception):
    """Base class for all compiler errors."""

    code: Optional[str] = None
    hint: Optional[str] = None

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        code: Optional[str] = None,
        hint: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.location = ErrorLocation(path=path, line=line, column=column)
        if code is not None:
            self.code = code
        if hint is not None:
            self.hint = hint

    def format(self) -> str:
        components = [self.message]
        meta_parts = []
        location_desc = self.location.describe()
        if location_desc != "unknown location":
            meta_parts.append(location_desc)
        if self.code:
            meta_parts.append(self.code)
        if meta_parts:
            components[-1] = f"{components[-1]} ({'; '.join(meta_parts)})"
        if self.hint:
            components.append(f"Hint: {self.hint}")
        return " ".join(part for part in components if part)


class LexError(SigilError):
    """Raised when the lexer cannot continue past a malformed token."""

    code = "SIGIL_SYNTAX_ERROR"

    def __init__(self, message: str, *, line: int, column: int, hint: Optional[str] = None) -> None:
        super().__init__(message, line=line, column=column, hint=hint)

    def to_diagnostic(self) -> "Diagnostic":
        from .diagnostics import Diagnostic, DiagnosticCode, Phase

        return Diagnostic.at(
            DiagnosticCode.SYNTAX_ERROR,
            self.message,
            line=self.location.line or 1,
            column=self.location.column or 1,
            hint=self.hint,
            phase=Phase.LEX,
        )


class RegistryError(SigilError):
    """Raised when a domain registry definition is malformed."""


class ConfigError(SigilError):
    """Raised when compiler configuration is invalid."""


class ResourceLimitExceeded(SigilError):
    """Raised internally when a compilation exceeds one of its ceilings.

    The pipeline converts it into a ``SIGIL_RESOURCE_LIMIT`` diagnostic.
    """

    code = "SIGIL_RESOURCE_LIMIT"

    def __init__(self, message: str, *, limit: str, line: Optional[int] = None, column: Optional[int] = None) -> None:
        super().__init__(message, line=line, column=column)
        self.limit = limit

    def to_diagnostic(self, phase: "Phase") -> "Diagnostic":
        from .diagnostics import Diagnostic, DiagnosticCode

        return Diagnostic.at(
            DiagnosticCode.RESOURCE_LIMIT,
            self.message,
            line=self.location.line or 1,
            column=self.location.column or 1,
            hint=f"Simplify the program or raise '{self.limit}' in the compiler limits.",
            phase=phase,
        )


class InternalCompilerError(SigilError):
    """A structurally invalid AST reached a later phase.

    Signals a defect in the compiler itself and is never reported through the
    diagnostics wire format.
    """


__all__ = [
    "ErrorLocation",
    "SigilError",
    "LexError",
    "RegistryError",
    "ConfigError",
    "ResourceLimitExceeded",
    "InternalCompilerError",
]
