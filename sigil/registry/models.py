"""
Pydantic schema models for domain registry input.

A registry document looks like::

    {
      "types": {
        "Email": {"kind": "domain", "underlying": "String"},
        "OrderStatus": {"kind": "domain", "underlying": "String",
                        "values": ["Pending", "Shipped", "Cancelled"]},
        "Order": {"kind": "record",
                  "fields": {"id": "String", "status": "OrderStatus"}},
        "OrderList": {"kind": "alias", "target": "List of Order"}
      },
      "operations": {
        "send_email": {"parameters": [{"name": "to", "type": "Email"},
                                      {"name": "body", "type": "String"}]}
      },
      "helpers": {
        "normalize_email": {"parameters": [{"name": "raw", "type": "String"}],
                            "returns": "Email"}
      }
    }

Type expressions are strings: a type name or ``List of <type>``. The models
only check shape; name resolution happens in :mod:`sigil.registry.registry`.
"""

from __future__ import annotations

import re
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _check_identifier(value: str, what: str) -> str:
    if not _IDENTIFIER.match(value):
        raise ValueError(f"{what} {value!r} is not a valid identifier")
    return value


class RegistryModel(BaseModel):
    """Base for registry models: strict, immutable, whitespace-stripped."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        str_strip_whitespace=True,
    )


class ParameterModel(RegistryModel):
    name: str = Field(..., description="Parameter name")
    type: str = Field(..., description="Type expression")

    @field_validator("name")
    @classmethod
    def _valid_name(cls, value: str) -> str:
        return _check_identifier(value, "parameter name")


class CallableModel(RegistryModel):
    """Signature of an operation or helper."""

    parameters: List[ParameterModel] = Field(default_factory=list)
    returns: Optional[str] = Field(None, description="Return type expression; omitted for nothing")
    description: Optional[str] = None

    @model_validator(mode="after")
    def _unique_parameters(self) -> "CallableModel":
        names = [param.name for param in self.parameters]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate parameter names: {', '.join(duplicates)}")
        return self


class TypeDefinitionModel(RegistryModel):
    """A named type: ``domain``, ``record`` or ``alias``."""

    kind: Literal["domain", "record", "alias"]
    underlying: Optional[str] = Field(None, description="Base type a domain type converts to and from")
    values: List[str] = Field(default_factory=list, description="Allowed string literals of a domain type")
    fields: Dict[str, str] = Field(default_factory=dict, description="Record fields: name -> type expression")
    target: Optional[str] = Field(None, description="Aliased type expression")
    description: Optional[str] = None

    @model_validator(mode="after")
    def _kind_specific_fields(self) -> "TypeDefinitionModel":
        if self.kind == "record":
            if self.underlying or self.values or self.target:
                raise ValueError("record types only accept 'fields'")
            for name in self.fields:
                _check_identifier(name, "field name")
        elif self.kind == "domain":
            if self.fields or self.target:
                raise ValueError("domain types accept 'underlying' and 'values' only")
            if self.values and self.underlying not in (None, "String"):
                raise ValueError("a domain type with literal values must have underlying type String")
            if len(set(self.values)) != len(self.values):
                raise ValueError("domain values must be unique")
        else:
            if not self.target:
                raise ValueError("alias types require 'target'")
            if self.fields or self.values or self.underlying:
                raise ValueError("alias types only accept 'target'")
        return self


class RegistryDocument(RegistryModel):
    """Top-level registry document."""

    types: Dict[str, TypeDefinitionModel] = Field(default_factory=dict)
    operations: Dict[str, CallableModel] = Field(default_factory=dict)
    helpers: Dict[str, CallableModel] = Field(default_factory=dict)

    @field_validator("types", "operations", "helpers")
    @classmethod
    def _valid_names(cls, value: Dict[str, object]) -> Dict[str, object]:
        for name in value:
            _check_identifier(name, "name")
        return value


__all__ = [
    "RegistryModel",
    "ParameterModel",
    "CallableModel",
    "TypeDefinitionModel",
    "RegistryDocument",
]
