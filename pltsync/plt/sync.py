"""PLT synchronization.

Brings a PLT's contents to exactly the required file set with the fewest
backend calls: a single build when the PLT does not exist yet, otherwise the
remove, check and add phases in that order, each skipped when it has no
files. Removing first keeps the PLT from growing before it shrinks; checking
before adding validates retained entries before new ones are layered on.
"""

import time
from collections.abc import Iterable
from pathlib import Path

from pltsync.backend.base import AnalysisType
from pltsync.errors import FileAccessError, PltSyncError
from pltsync.invoker import AnalysisInvoker
from pltsync.pipeline.structures import PhaseResult, TaskStatus
from pltsync.plt.fileset import FileSet, partition
from pltsync.reporter import WarningReporter
from pltsync.utils.logging import logger


class PltDiffEngine:
    """Drives backend phases against a PLT and reports their warnings.

    Every backend call made through the engine is recorded in ``phases`` in
    execution order.
    """

    def __init__(self, invoker: AnalysisInvoker, reporter: WarningReporter):
        self.invoker = invoker
        self.reporter = reporter
        self.phases: list[PhaseResult] = []

    def read(self, plt: Path) -> FileSet | None:
        """Current contents of ``plt``, None if it has not been built."""
        return self.invoker.query_file_set(plt)

    def run_phase(self, analysis: AnalysisType, plt: Path, files: Iterable[str]) -> int:
        """Run one analysis and report its warnings. Empty file lists are skipped."""
        file_list = FileSet.of(files).sorted()
        if not file_list:
            logger.debug("Skipping {} on {}: no files", analysis.label, plt)
            return 0

        phase = PhaseResult(name=analysis.value, plt=str(plt), files=len(file_list))
        start = time.perf_counter()
        try:
            diagnostics = self.invoker.run(analysis, file_list, plt)
            phase.warnings = self.reporter.report(diagnostics)
        except PltSyncError:
            phase.status = TaskStatus.FAILED
            raise
        finally:
            phase.elapsed = time.perf_counter() - start
            self.phases.append(phase)

        logger.debug(
            "{} on {} finished in {:.2f}s with {} warnings",
            analysis.label, plt, phase.elapsed, phase.warnings,
        )
        return phase.warnings

    def build(self, plt: Path, files: Iterable[str]) -> int:
        """Create ``plt`` from scratch over ``files``."""
        files = FileSet.of(files)
        try:
            plt.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileAccessError(plt.parent, e) from e
        logger.info("Adding {} files to {}...", len(files), plt)
        return self.run_phase(AnalysisType.BUILD, plt, files)

    def sync(self, plt: Path, old: Iterable[str], new: Iterable[str]) -> int:
        """Update ``plt`` from ``old`` contents to ``new``; return the warning count."""
        delta = partition(old, new)
        if not delta.changes_contents:
            logger.debug("{} already holds the required files", plt)
        warnings = 0

        if delta.remove:
            logger.info("Removing {} files from {}...", len(delta.remove), plt)
            warnings += self.run_phase(AnalysisType.REMOVE, plt, delta.remove)

        if delta.check:
            logger.info("Checking {} files in {}...", len(delta.check), plt)
            warnings += self.run_phase(AnalysisType.CHECK, plt, delta.check)

        if delta.add:
            logger.info("Adding {} files to {}...", len(delta.add), plt)
            warnings += self.run_phase(AnalysisType.ADD, plt, delta.add)

        return warnings
