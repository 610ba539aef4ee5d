"""Implementations of the ``sigil`` subcommands.

Each command returns a process exit code: 0 on success, 1 when the program
has diagnostics, 2 for usage or configuration errors.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Tuple

from sigil.config import SigilConfig, load_config
from sigil.errors import ConfigError, RegistryError
from sigil.pipeline import CompilationResult, Compiler
from sigil.registry import DomainRegistry, load_registry

from .output import print_diagnostics, print_error, print_source, print_success, print_wire

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_DIAGNOSTICS = 1
EXIT_USAGE = 2


def _build_compiler(args: argparse.Namespace) -> Compiler:
    explicit_config = Path(args.config) if getattr(args, "config", None) else None
    config: SigilConfig = load_config(Path.cwd(), explicit_config)
    registry_path: Optional[Path] = Path(args.registry) if args.registry else config.registry
    registry = load_registry(registry_path) if registry_path is not None else DomainRegistry.empty()
    return Compiler(registry, config.target, limits=config.limits)


def _run(args: argparse.Namespace) -> Tuple[int, Optional[CompilationResult]]:
    source_path = Path(args.file)
    try:
        source_text = source_path.read_text(encoding="utf-8")
    except OSError as exc:
        print_error(f"cannot read {source_path}: {exc.strerror or exc}")
        return EXIT_USAGE, None
    try:
        compiler = _build_compiler(args)
    except (ConfigError, RegistryError) as exc:
        print_error(exc.format())
        return EXIT_USAGE, None
    logger.debug("Compiling %s with %r", source_path, compiler.registry)
    return EXIT_OK, compiler.compile(source_text)


def cmd_compile(args: argparse.Namespace) -> int:
    """Compile a source file to TypeScript."""
    status, result = _run(args)
    if result is None:
        return status
    if args.format == "json" and not args.out:
        print_wire(result.to_wire())
        return EXIT_OK if result.ok else EXIT_DIAGNOSTICS
    if not result.ok:
        if args.format == "json":
            print_wire(result.to_wire())
        else:
            print_diagnostics(result.diagnostics, source_name=args.file)
        return EXIT_DIAGNOSTICS
    assert result.target_source is not None
    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(result.target_source, encoding="utf-8")
        if args.format == "json":
            print_wire({"output": str(out_path)})
        else:
            print_success(f"Wrote {out_path}")
    else:
        print_source(result.target_source)
    return EXIT_OK


def cmd_check(args: argparse.Namespace) -> int:
    """Run every phase and report diagnostics without writing output."""
    status, result = _run(args)
    if result is None:
        return status
    if args.format == "json":
        print_wire({"diagnostics": result.to_wire().get("diagnostics", [])})
    elif result.ok:
        print_success(f"{args.file}: no diagnostics")
    else:
        print_diagnostics(result.diagnostics, source_name=args.file)
    return EXIT_OK if result.ok else EXIT_DIAGNOSTICS


__all__ = ["cmd_compile", "cmd_check", "EXIT_OK", "EXIT_DIAGNOSTICS", "EXIT_USAGE"]
