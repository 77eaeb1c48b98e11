"""Single calls into the analysis backend.

The invoker is the only component that calls the backend. It fixes the
option set for each analysis type:

- success typing always requests warnings;
- PLT maintenance requests them only when ``get_warnings`` is on;
- without warnings every optional category is suppressed and whatever the
  backend returns is discarded, so maintenance cannot leak diagnostics;
- the backend's own PLT consistency pre-check is always disabled.
"""

from collections.abc import Iterable
from pathlib import Path

from pltsync.backend.base import AnalysisBackend, AnalysisOptions, AnalysisType, Diagnostic
from pltsync.plt.fileset import FileSet
from pltsync.utils.logging import logger

# Disables every optional dialyzer warning category
NO_WARNINGS = (
    "no_return",
    "no_unused",
    "no_improper_lists",
    "no_fun_app",
    "no_match",
    "no_opaque",
    "no_fail_call",
    "no_contracts",
    "no_behaviours",
    "no_undefined_callbacks",
)


class AnalysisInvoker:
    """Builds backend options and runs one analysis at a time."""

    def __init__(
        self,
        backend: AnalysisBackend,
        warnings: Iterable[str] = (),
        get_warnings: bool = False,
        home_plt: Path | None = None,
    ):
        self.backend = backend
        self.warnings = tuple(warnings)
        self.get_warnings = get_warnings
        self.home_plt = home_plt

    def wants_warnings(self, analysis: AnalysisType) -> bool:
        return analysis.always_warns or self.get_warnings

    def options_for(self, analysis: AnalysisType, files: Iterable[str], plt: Path) -> AnalysisOptions:
        get_warnings = self.wants_warnings(analysis)
        return AnalysisOptions(
            analysis_type=analysis,
            files=tuple(files),
            get_warnings=get_warnings,
            warnings=self.warnings if get_warnings else NO_WARNINGS,
            init_plt=None if analysis is AnalysisType.BUILD else plt,
            output_plt=plt if analysis.mutates_plt else None,
            check_plt=False,
            home_plt=self.home_plt,
        )

    def query_file_set(self, plt: Path) -> FileSet | None:
        return self.backend.query_file_set(plt)

    def run(self, analysis: AnalysisType, files: Iterable[str], plt: Path) -> list[Diagnostic]:
        """Run ``analysis`` over ``files`` against ``plt``.

        Returns the raw diagnostics, or an empty list when warnings were not
        requested.
        """
        options = self.options_for(analysis, files, plt)
        logger.debug("Running dialyzer with options: {}", options)
        diagnostics = self.backend.run_analysis(options)
        if not options.get_warnings:
            if diagnostics:
                logger.debug(
                    "Discarding {} diagnostics from {} (warnings not requested)",
                    len(diagnostics),
                    analysis.label,
                )
            return []
        return list(diagnostics)
