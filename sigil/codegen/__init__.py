"""Code generation backends."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional, Type

from sigil.ast import Program
from sigil.config import TargetLanguageConfig
from sigil.errors import ConfigError

from .typescript import TypeScriptEmitter

if TYPE_CHECKING:
    from sigil.registry import DomainRegistry

EMITTERS: Dict[str, Type[TypeScriptEmitter]] = {
    "typescript": TypeScriptEmitter,
}


def emit(
    program: Program,
    registry: "DomainRegistry",
    target_config: Optional[TargetLanguageConfig] = None,
) -> str:
    """Render a fully checked ``program`` in the configured target language."""
    config = target_config or TargetLanguageConfig()
    emitter_cls = EMITTERS.get(config.language)
    if emitter_cls is None:
        raise ConfigError(f"No emitter registered for target language '{config.language}'.")
    return emitter_cls(registry, config).emit(program)


__all__ = ["EMITTERS", "TypeScriptEmitter", "emit"]
