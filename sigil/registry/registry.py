"""
Domain registry: the read-only catalog of domain types, records, effectful
operations and pure helpers that a compilation is checked against.

The registry is validated and fully resolved at construction. After that it
exposes only read-only mappings, so one instance can be shared by any number
of concurrent compilations.
"""

from __future__ import annotations

import json
import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Set, Tuple

from pydantic import ValidationError

from sigil.ast import Purity
from sigil.errors import RegistryError
from sigil.types.core import (
    BASE_TYPES,
    BUILTIN_TYPE_NAMES,
    STRING,
    DomainType,
    FunctionType,
    ListType,
    RecordType,
    Type,
)

from .models import CallableModel, RegistryDocument, TypeDefinitionModel

logger = logging.getLogger(__name__)

LIST_PREFIX = "List of "


@dataclass(frozen=True)
class Signature:
    """Resolved signature of a registry operation or helper."""

    name: str
    parameters: Tuple[Tuple[str, Type], ...]
    returns: Optional[Type]
    purity: Purity

    @property
    def function_type(self) -> FunctionType:
        return FunctionType(tuple(t for _, t in self.parameters), self.returns)

    @property
    def arity(self) -> int:
        return len(self.parameters)


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts)


class _TypeResolver:
    """Resolves registry type expressions, following aliases and detecting cycles."""

    def __init__(self, definitions: Mapping[str, TypeDefinitionModel]):
        self.definitions = definitions
        self.resolved: Dict[str, Type] = {}
        self._resolving: Set[str] = set()

    def resolve_all(self) -> Dict[str, Type]:
        for name in self.definitions:
            self.named(name, context=f"type '{name}'")
        records = [(name, t) for name, t in self.resolved.items() if isinstance(t, RecordType)]
        for name, record in records:
            definition = self.definitions[name]
            for field_name, expression in definition.fields.items():
                record.fields[field_name] = self.expression(expression, context=f"field '{name}.{field_name}'")
        return self.resolved

    def named(self, name: str, *, context: str) -> Type:
        if name in BASE_TYPES:
            return BASE_TYPES[name]
        if name in self.resolved:
            return self.resolved[name]
        definition = self.definitions.get(name)
        if definition is None:
            raise RegistryError(f"Unknown type '{name}' in {context}.")
        if name in self._resolving:
            raise RegistryError(f"Type alias cycle through '{name}'.")
        self._resolving.add(name)
        try:
            resolved = self._define(name, definition)
        finally:
            self._resolving.discard(name)
        self.resolved[name] = resolved
        return resolved

    def _define(self, name: str, definition: TypeDefinitionModel) -> Type:
        if definition.kind == "record":
            # Fields are resolved after every name exists so records may be mutually recursive.
            return RecordType(name, external=True)
        if definition.kind == "alias":
            return self.expression(definition.target or "", context=f"alias '{name}'")
        underlying: Optional[Type] = None
        if definition.underlying:
            underlying = self.expression(definition.underlying, context=f"domain type '{name}'")
        elif definition.values:
            underlying = STRING
        return DomainType(name, underlying=underlying, values=tuple(definition.values), external=True)

    def expression(self, text: str, *, context: str) -> Type:
        text = text.strip()
        if text.startswith(LIST_PREFIX):
            return ListType(self.expression(text[len(LIST_PREFIX):], context=context))
        if not text:
            raise RegistryError(f"Empty type expression in {context}.")
        return self.named(text, context=context)


class DomainRegistry:
    """
    Immutable catalog of externally declared types and callables.

    Operations are always effectful; helpers are pure foreign declarations
    callable without a body.
    """

    def __init__(
        self,
        types: Optional[Mapping[str, Type]] = None,
        operations: Optional[Mapping[str, Signature]] = None,
        helpers: Optional[Mapping[str, Signature]] = None,
    ):
        self.types: Mapping[str, Type] = MappingProxyType(dict(types or {}))
        self.operations: Mapping[str, Signature] = MappingProxyType(dict(operations or {}))
        self.helpers: Mapping[str, Signature] = MappingProxyType(dict(helpers or {}))

    @classmethod
    def empty(cls) -> "DomainRegistry":
        return cls()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DomainRegistry":
        """Validate ``data`` and resolve every type expression it contains."""
        try:
            document = RegistryDocument.model_validate(dict(data))
        except ValidationError as exc:
            raise RegistryError(
                f"Invalid domain registry: {_format_validation_error(exc)}",
                hint="Check the registry against the documented 'types', 'operations' and 'helpers' shape.",
            ) from exc

        for name in document.types:
            if name in BUILTIN_TYPE_NAMES:
                raise RegistryError(f"Registry type '{name}' shadows a built-in type.")
        clashes = sorted(set(document.operations) & set(document.helpers))
        if clashes:
            raise RegistryError(f"Names declared as both operation and helper: {', '.join(clashes)}.")

        resolver = _TypeResolver(document.types)
        types = resolver.resolve_all()
        operations = {
            name: cls._signature(name, model, Purity.EFFECTFUL, resolver)
            for name, model in document.operations.items()
        }
        helpers = {
            name: cls._signature(name, model, Purity.PURE, resolver)
            for name, model in document.helpers.items()
        }
        logger.debug(
            "Loaded registry with %d types, %d operations, %d helpers",
            len(types), len(operations), len(helpers),
        )
        return cls(types=types, operations=operations, helpers=helpers)

    @staticmethod
    def _signature(name: str, model: CallableModel, purity: Purity, resolver: _TypeResolver) -> Signature:
        parameters = tuple(
            (param.name, resolver.expression(param.type, context=f"parameter '{param.name}' of '{name}'"))
            for param in model.parameters
        )
        returns = resolver.expression(model.returns, context=f"return type of '{name}'") if model.returns else None
        return Signature(name=name, parameters=parameters, returns=returns, purity=purity)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def lookup_type(self, name: str) -> Optional[Type]:
        if name in BASE_TYPES:
            return BASE_TYPES[name]
        return self.types.get(name)

    def lookup_callable(self, name: str) -> Optional[Signature]:
        return self.operations.get(name) or self.helpers.get(name)

    def is_operation(self, name: str) -> bool:
        return name in self.operations

    def is_helper(self, name: str) -> bool:
        return name in self.helpers

    def declared_names(self) -> Set[str]:
        return set(self.types) | set(self.operations) | set(self.helpers)

    def __repr__(self) -> str:
        return (
            f"DomainRegistry(types={len(self.types)}, operations={len(self.operations)}, "
            f"helpers={len(self.helpers)})"
        )


def load_registry(path: Path) -> DomainRegistry:
    """Read a registry from a JSON or TOML file."""
    path = Path(path)
    try:
        if path.suffix == ".toml":
            with path.open("rb") as handle:
                data = tomllib.load(handle)
        else:
            data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise RegistryError(f"Registry file {path} does not exist.", path=str(path)) from exc
    except json.JSONDecodeError as exc:
        raise RegistryError(f"Invalid JSON in {path}: {exc.msg}", path=str(path), line=exc.lineno) from exc
    except tomllib.TOMLDecodeError as exc:
        raise RegistryError(f"Invalid TOML in {path}: {exc}", path=str(path)) from exc
    if not isinstance(data, dict):
        raise RegistryError(f"Registry file {path} must contain an object at the top level.", path=str(path))
    logger.info("Loading domain registry from %s", path)
    return DomainRegistry.from_mapping(data)


__all__ = ["Signature", "DomainRegistry", "load_registry", "LIST_PREFIX"]
