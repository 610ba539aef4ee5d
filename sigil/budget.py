"""Per-compilation resource accounting."""

from __future__ import annotations

import time
from typing import Callable, Optional

from .config import CompilerLimits
from .errors import ResourceLimitExceeded


class CompilationBudget:
    """Tracks nesting depth, node count and wall-clock time for one compilation.

    Instances are private to a single compile call; nothing here is shared
    between threads.
    """

    def __init__(self, limits: Optional[CompilerLimits] = None, *, clock: Callable[[], float] = time.monotonic):
        self.limits = limits or CompilerLimits()
        self._clock = clock
        self.deadline = clock() + self.limits.time_budget_seconds
        self.depth = 0
        self.nodes = 0

    def enter(self, line: int, column: int) -> None:
        self.depth += 1
        if self.depth > self.limits.max_nesting_depth:
            raise ResourceLimitExceeded(
                f"Nesting depth exceeds the limit of {self.limits.max_nesting_depth}",
                limit="max_nesting_depth",
                line=line,
                column=column,
            )

    def exit(self) -> None:
        self.depth -= 1

    def count_node(self, line: int, column: int) -> None:
        self.nodes += 1
        if self.nodes > self.limits.max_nodes:
            raise ResourceLimitExceeded(
                f"Program exceeds the limit of {self.limits.max_nodes} syntax nodes",
                limit="max_nodes",
                line=line,
                column=column,
            )

    def check_time(self, line: int = 1, column: int = 1) -> None:
        if self._clock() > self.deadline:
            raise ResourceLimitExceeded(
                f"Compilation exceeded its time budget of {self.limits.time_budget_seconds:g}s",
                limit="time_budget_seconds",
                line=line,
                column=column,
            )


__all__ = ["CompilationBudget"]
