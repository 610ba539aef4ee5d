"""
Compilation pipeline.

Lexer -> Parser -> Type Checker -> Effect Checker -> Emitter. Each phase runs
only when every earlier phase produced zero diagnostics, and a result holds
either the emitted source or the ordered diagnostics, never both.

**Usage:**
    from sigil import compile
    from sigil.registry import load_registry

    result = compile(source, load_registry(Path("domain.json")))
    if result.ok:
        print(result.target_source)
    else:
        print(result.to_wire())
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .ast import Program
from .budget import CompilationBudget
from .codegen import emit
from .config import CompilerLimits, TargetLanguageConfig
from .diagnostics import Diagnostic, DiagnosticBag, Phase
from .effects import check_effects
from .errors import LexError, ResourceLimitExceeded
from .lang.lexer import tokenize
from .lang.parser import parse
from .registry import DomainRegistry
from .types import check_types

logger = logging.getLogger(__name__)


@dataclass
class CompilationResult:
    """Outcome of one compilation: target source or diagnostics."""

    target_source: Optional[str] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)
    program: Optional[Program] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.target_source is not None and self.diagnostics:
            raise ValueError("a compilation result cannot carry both target source and diagnostics")

    @property
    def ok(self) -> bool:
        return self.target_source is not None

    def to_wire(self) -> Dict[str, Any]:
        if self.target_source is not None:
            return {"target_source": self.target_source}
        return {"diagnostics": DiagnosticBag(self.diagnostics).to_wire()}


class _Run:
    """State private to a single compilation."""

    def __init__(self, registry: DomainRegistry, target: TargetLanguageConfig, limits: CompilerLimits):
        self.registry = registry
        self.target = target
        self.budget = CompilationBudget(limits)
        self.bag = DiagnosticBag()

    def phase(self, name: str, phase: Phase, action: Callable[[], Any]) -> Any:
        started = time.perf_counter()
        try:
            result = action()
        except ResourceLimitExceeded as exc:
            logger.info("%s stopped: %s", name, exc.message)
            self.bag.add(exc.to_diagnostic(phase))
            return None
        except RecursionError:
            # Raised limits can still outgrow the interpreter stack.
            logger.info("%s stopped: interpreter recursion limit reached", name)
            exc = ResourceLimitExceeded(
                "Program nests too deeply to compile",
                limit="max_nesting_depth",
            )
            self.bag.add(exc.to_diagnostic(phase))
            return None
        logger.debug("%s finished in %.2f ms", name, (time.perf_counter() - started) * 1000)
        return result

    def gate(self, name: str) -> bool:
        if self.bag.has_errors():
            logger.info("Stopping before %s: %d diagnostic(s)", name, len(self.bag))
            return False
        return True

    def execute(self, source_text: str) -> CompilationResult:
        try:
            tokens = tokenize(source_text)
        except LexError as exc:
            self.bag.add(exc.to_diagnostic())
            return self.failed(None)
        logger.debug("Lexed %d tokens", len(tokens))

        parsed = self.phase("parse", Phase.PARSE, lambda: parse(tokens, budget=self.budget))
        if parsed is None:
            return self.failed(None)
        self.bag.extend(parsed.diagnostics)
        program = parsed.program
        if not self.gate("type checking"):
            return self.failed(program)

        diagnostics = self.phase(
            "type check", Phase.TYPES, lambda: check_types(program, self.registry, budget=self.budget)
        )
        self.bag.extend(diagnostics or [])
        if not self.gate("effect checking"):
            return self.failed(program)

        diagnostics = self.phase(
            "effect check", Phase.EFFECTS, lambda: check_effects(program, self.registry, budget=self.budget)
        )
        self.bag.extend(diagnostics or [])
        if not self.gate("emission"):
            return self.failed(program)

        target_source = self.phase("emit", Phase.EMIT, lambda: emit(program, self.registry, self.target))
        if target_source is None:
            return self.failed(program)
        return CompilationResult(target_source=target_source, program=program)

    def failed(self, program: Optional[Program]) -> CompilationResult:
        return CompilationResult(diagnostics=self.bag.sorted(), program=program)


def compile(
    source_text: str,
    registry: Optional[DomainRegistry] = None,
    target_config: Optional[TargetLanguageConfig] = None,
    *,
    limits: Optional[CompilerLimits] = None,
) -> CompilationResult:
    """Compile ``source_text`` against ``registry``.

    Returns target source when every phase is clean, otherwise the ordered
    diagnostics. :class:`~sigil.errors.InternalCompilerError` propagates.
    """
    run = _Run(
        registry if registry is not None else DomainRegistry.empty(),
        target_config or TargetLanguageConfig(),
        limits or CompilerLimits(),
    )
    result = run.execute(source_text)
    logger.info(
        "Compilation %s with %d diagnostic(s)",
        "succeeded" if result.ok else "failed", len(result.diagnostics),
    )
    return result


class Compiler:
    """
    A registry and target configuration bound for repeated compilation.

    Holds no per-compilation state, so one instance may serve concurrent
    threads.
    """

    def __init__(
        self,
        registry: Optional[DomainRegistry] = None,
        target_config: Optional[TargetLanguageConfig] = None,
        *,
        limits: Optional[CompilerLimits] = None,
    ):
        self.registry = registry if registry is not None else DomainRegistry.empty()
        self.target_config = target_config or TargetLanguageConfig()
        self.limits = limits or CompilerLimits()

    def compile(self, source_text: str) -> CompilationResult:
        return compile(source_text, self.registry, self.target_config, limits=self.limits)

    def check(self, source_text: str) -> List[Diagnostic]:
        """Run every phase and return the diagnostics only."""
        return self.compile(source_text).diagnostics


__all__ = ["CompilationResult", "Compiler", "compile"]
