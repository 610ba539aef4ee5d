"""Lexical scopes for the type checker."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from sigil.ast import SourceSpan

from .core import Type


@dataclass(frozen=True)
class Binding:
    """An immutable name binding."""

    name: str
    type: Type
    span: Optional[SourceSpan] = None


class Scope:
    """
    Symbol table for one lexical scope.

    A name may be bound once per scope. Child scopes may shadow names from
    their parents; the parent's binding is never touched.
    """

    def __init__(self, parent: Optional["Scope"] = None):
        self.parent = parent
        self.bindings: Dict[str, Binding] = {}

    def bind(self, name: str, type: Type, span: Optional[SourceSpan] = None) -> Optional[Binding]:
        """Bind ``name`` in this scope.

        Returns the existing binding when ``name`` is already bound in this
        exact scope (the caller reports the rebind), otherwise ``None``.
        """
        existing = self.bindings.get(name)
        if existing is not None:
            return existing
        self.bindings[name] = Binding(name, type, span)
        return None

    def lookup(self, name: str) -> Optional[Binding]:
        scope: Optional[Scope] = self
        while scope is not None:
            binding = scope.bindings.get(name)
            if binding is not None:
                return binding
            scope = scope.parent
        return None

    def child(self) -> "Scope":
        return Scope(parent=self)

    def visible_names(self) -> Iterator[str]:
        seen = set()
        scope: Optional[Scope] = self
        while scope is not None:
            for name in scope.bindings:
                if name not in seen:
                    seen.add(name)
                    yield name
            scope = scope.parent


__all__ = ["Binding", "Scope"]
