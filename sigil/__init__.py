"""Sigil: compiles a keyword-based, English-like language to TypeScript."""

from .config import CompilerLimits, TargetLanguageConfig
from .diagnostics import Diagnostic, DiagnosticCode
from .errors import SigilError
from .pipeline import CompilationResult, Compiler, compile
from .registry import DomainRegistry, load_registry

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CompilationResult",
    "Compiler",
    "CompilerLimits",
    "Diagnostic",
    "DiagnosticCode",
    "DomainRegistry",
    "SigilError",
    "TargetLanguageConfig",
    "compile",
    "load_registry",
]
