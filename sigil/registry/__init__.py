"""Domain registry consumed read-only by the compiler."""

from .models import CallableModel, ParameterModel, RegistryDocument, TypeDefinitionModel
from .registry import DomainRegistry, Signature, load_registry

__all__ = [
    "CallableModel",
    "ParameterModel",
    "RegistryDocument",
    "TypeDefinitionModel",
    "DomainRegistry",
    "Signature",
    "load_registry",
]
