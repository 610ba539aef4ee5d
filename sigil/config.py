"""Compiler configuration.

Settings come from dataclass defaults, an optional ``sigil.toml`` (or JSON
``.sigilrc``) in the working directory, and ``SIGIL_*`` environment
variables, in increasing order of precedence.
"""

from __future__ import annotations

import json
import os
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigError

SUPPORTED_TARGETS = ("typescript",)


@dataclass(frozen=True)
class CompilerLimits:
    """Ceilings that bound pathological inputs."""

    max_nesting_depth: int = 48
    max_nodes: int = 50_000
    time_budget_seconds: float = 5.0


@dataclass(frozen=True)
class TargetLanguageConfig:
    """Emission settings for the target language."""

    language: str = "typescript"
    domain_module: str = "./domain"
    indent: str = "  "
    header: bool = True

    def __post_init__(self) -> None:
        if self.language not in SUPPORTED_TARGETS:
            supported = ", ".join(SUPPORTED_TARGETS)
            raise ConfigError(
                f"Unsupported target language '{self.language}'.",
                hint=f"Supported targets: {supported}.",
            )


@dataclass
class SigilConfig:
    """Resolved configuration for a compiler instance."""

    root: Path
    registry: Optional[Path] = None
    target: TargetLanguageConfig = field(default_factory=TargetLanguageConfig)
    limits: CompilerLimits = field(default_factory=CompilerLimits)
    raw: Dict[str, Any] = field(default_factory=dict)


_ENV_LIMITS = {
    "SIGIL_MAX_NESTING_DEPTH": ("max_nesting_depth", int),
    "SIGIL_MAX_NODES": ("max_nodes", int),
    "SIGIL_TIME_BUDGET": ("time_budget_seconds", float),
}


def _read_json_config(path: Path) -> Dict[str, Any]:
    content = path.read_text(encoding="utf-8")
    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc.msg}", path=str(path), line=exc.lineno) from exc


def _read_toml_config(path: Path) -> Dict[str, Any]:
    with path.open("rb") as handle:
        try:
            return tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {path}: {exc}", path=str(path)) from exc


def _parse_limits(data: Mapping[str, Any]) -> CompilerLimits:
    section = data.get("limits") or {}
    defaults = CompilerLimits()
    try:
        return CompilerLimits(
            max_nesting_depth=int(section.get("max_nesting_depth", defaults.max_nesting_depth)),
            max_nodes=int(section.get("max_nodes", defaults.max_nodes)),
            time_budget_seconds=float(section.get("time_budget_seconds", defaults.time_budget_seconds)),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid [limits] value: {exc}") from exc


def _parse_target(data: Mapping[str, Any]) -> TargetLanguageConfig:
    section = data.get("target") or {}
    defaults = TargetLanguageConfig()
    return TargetLanguageConfig(
        language=str(section.get("language") or defaults.language),
        domain_module=str(section.get("domain_module") or defaults.domain_module),
        indent=str(section.get("indent") or defaults.indent),
        header=bool(section.get("header", defaults.header)),
    )


def apply_env_overrides(limits: CompilerLimits, environ: Optional[Mapping[str, str]] = None) -> CompilerLimits:
    """Return ``limits`` with any ``SIGIL_*`` environment overrides applied."""

    environ = os.environ if environ is None else environ
    overrides: Dict[str, Any] = {}
    for variable, (attribute, convert) in _ENV_LIMITS.items():
        raw = environ.get(variable)
        if raw is None or raw == "":
            continue
        try:
            overrides[attribute] = convert(raw)
        except ValueError as exc:
            raise ConfigError(f"Environment variable {variable} must be a number, got {raw!r}.") from exc
    return replace(limits, **overrides) if overrides else limits


def locate_config_file(root: Path, explicit: Optional[Path] = None) -> Optional[Path]:
    if explicit is not None:
        return explicit if explicit.exists() else None
    for candidate in ("sigil.toml", ".sigilrc"):
        path = root / candidate
        if path.exists():
            return path
    return None


def load_config(
    root: Path,
    explicit: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> SigilConfig:
    """Load configuration for the workspace rooted at ``root``."""

    root = root.resolve()
    config_path = locate_config_file(root, explicit)
    if explicit is not None and config_path is None:
        raise ConfigError(f"Configuration file {explicit} does not exist.", path=str(explicit))
    if config_path is None:
        return SigilConfig(root=root, limits=apply_env_overrides(CompilerLimits(), environ))

    if config_path.suffix == ".toml":
        data = _read_toml_config(config_path)
    else:
        data = _read_json_config(config_path)

    registry_raw = data.get("registry")
    registry: Optional[Path] = None
    if registry_raw:
        registry = Path(str(registry_raw))
        if not registry.is_absolute():
            registry = (config_path.parent / registry).resolve()

    return SigilConfig(
        root=root,
        registry=registry,
        target=_parse_target(data),
        limits=apply_env_overrides(_parse_limits(data), environ),
        raw=data,
    )


__all__ = [
    "SUPPORTED_TARGETS",
    "CompilerLimits",
    "TargetLanguageConfig",
    "SigilConfig",
    "apply_env_overrides",
    "locate_config_file",
    "load_config",
]
