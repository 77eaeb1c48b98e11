"""Analysis backend boundary and the dialyzer implementation."""

from .base import AnalysisBackend, AnalysisOptions, AnalysisType, Diagnostic
from .dialyzer_cli import DialyzerCli
from .runtime import Runtime, resolve_runtime

__all__ = [
    "AnalysisBackend",
    "AnalysisOptions",
    "AnalysisType",
    "Diagnostic",
    "DialyzerCli",
    "Runtime",
    "resolve_runtime",
]
