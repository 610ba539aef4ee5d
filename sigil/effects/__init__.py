"""Effect (purity) analysis."""

from .analyzer import EffectChecker, check_effects, iter_calls
from .graph import CallSite, EffectGraph, EffectNode

__all__ = ["EffectChecker", "check_effects", "iter_calls", "CallSite", "EffectGraph", "EffectNode"]
