"""
Sigil CLI entry point.

    sigil compile FILE [--registry PATH] [--out PATH] [--format text|json]
    sigil check FILE [--registry PATH] [--format text|json]
"""

import argparse
import logging
import os
from typing import List, Optional

from sigil import __version__

from .commands import EXIT_USAGE, cmd_check, cmd_compile


def _configure_logging(args: argparse.Namespace) -> None:
    """Configure the ``sigil`` logger from ``--log-level`` or ``SIGIL_LOG_LEVEL``."""
    log_level = (getattr(args, "log_level", None) or os.getenv("SIGIL_LOG_LEVEL", "warning")).lower()
    level_map = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warn": logging.WARNING,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }
    numeric_level = level_map.get(log_level, logging.WARNING)

    sigil_logger = logging.getLogger("sigil")
    sigil_logger.setLevel(numeric_level)
    if not sigil_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        sigil_logger.addHandler(handler)
        sigil_logger.propagate = False


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("file", help="Sigil source file")
    parser.add_argument("--registry", help="Domain registry file (JSON or TOML)")
    parser.add_argument("--config", help="Configuration file (defaults to ./sigil.toml or ./.sigilrc)")
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format for diagnostics (default: text)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sigil",
        description="Compile Sigil source to TypeScript.",
    )
    parser.add_argument("--version", action="version", version=f"sigil {__version__}")
    parser.add_argument(
        "--log-level",
        choices=("debug", "info", "warning", "error"),
        help="Logging verbosity (overrides SIGIL_LOG_LEVEL)",
    )
    subparsers = parser.add_subparsers(dest="command")

    compile_parser = subparsers.add_parser("compile", help="Compile a source file")
    _add_common_arguments(compile_parser)
    compile_parser.add_argument("--out", help="Write the generated TypeScript to this path")
    compile_parser.set_defaults(func=cmd_compile)

    check_parser = subparsers.add_parser("check", help="Report diagnostics without emitting code")
    _add_common_arguments(check_parser)
    check_parser.set_defaults(func=cmd_check)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return EXIT_USAGE
    _configure_logging(args)
    return args.func(args)


__all__ = ["main", "build_parser"]
