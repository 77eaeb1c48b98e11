"""Warning output - console echo plus an append-only warnings file."""

from collections.abc import Iterable
from pathlib import Path

from rich.console import Console

from pltsync.backend.base import Diagnostic
from pltsync.errors import OutputFileError
from pltsync.pipeline.ui import console as default_console

# Position prefix of warnings not tied to a source line
UNKNOWN_POSITION = ":0: "


def format_warning(diagnostic: Diagnostic) -> str:
    """One-line rendering with the empty ``:0:`` position dropped."""
    text = diagnostic.format().rstrip("\n")
    if text.startswith(UNKNOWN_POSITION):
        return text[len(UNKNOWN_POSITION):]
    return text


def format_warnings(diagnostics: Iterable[Diagnostic]) -> list[str]:
    return [format_warning(d) for d in diagnostics]


class WarningReporter:
    """Writes formatted warnings to the console and the warnings file.

    The file is truncated once by ``create()`` at the start of a run and only
    appended to afterwards. No handle is kept open between phases.
    """

    def __init__(self, output: Path, console: Console | None = None):
        self.output = Path(output)
        self.console = console or default_console
        self.total = 0

    def create(self) -> Path:
        try:
            self.output.parent.mkdir(parents=True, exist_ok=True)
            with open(self.output, "w", encoding="utf-8"):
                pass
        except OSError as e:
            raise OutputFileError(self.output, e) from e
        return self.output

    def report(self, diagnostics: Iterable[Diagnostic]) -> int:
        """Print and append ``diagnostics``; return how many there were."""
        lines = format_warnings(diagnostics)
        for line in lines:
            self.console.print(line, markup=False, highlight=False, soft_wrap=True)
        if lines:
            try:
                with open(self.output, "a", encoding="utf-8") as f:
                    f.writelines(line + "\n" for line in lines)
            except OSError as e:
                raise OutputFileError(self.output, e) from e
        self.total += len(lines)
        return len(lines)
