"""Backend that drives the ``dialyzer`` executable.

Each analysis is one subprocess. Options are mapped onto dialyzer's command
line and its ``--quiet --fullpath`` output is parsed back into diagnostics.

Dialyzer exit status:
    0 = no warnings, 1 = error, 2 = warnings were emitted
"""

import os
import re
import shutil
import subprocess
from pathlib import Path

from pltsync.backend.base import AnalysisBackend, AnalysisOptions, AnalysisType, Diagnostic
from pltsync.errors import BackendError, PltReadError
from pltsync.plt.fileset import FileSet
from pltsync.utils.constants import ENV_DIALYZER_PLT, OBJECT_FILE_EXTENSION
from pltsync.utils.logging import logger

EXIT_OK = 0
EXIT_WARNINGS = 2

_MODE_FLAGS = {
    AnalysisType.BUILD: ["--build_plt"],
    AnalysisType.ADD: ["--add_to_plt"],
    AnalysisType.REMOVE: ["--remove_from_plt"],
    AnalysisType.CHECK: ["--check_plt"],
    AnalysisType.SUCC_TYPINGS: [],
}

# file:line: message  or  file:line:column: message
_WARNING_RE = re.compile(r"^(?P<file>.*?):(?P<line>\d+)(?::(?P<column>\d+))?: (?P<message>.*)$")
_QUOTED_RE = re.compile(r'"((?:[^"\\]|\\.)*)"')
_READ_FAILURE_MARKERS = ("Could not read", "Old PLT file", "not a valid PLT")


def build_command(executable: str, options: AnalysisOptions) -> list[str]:
    """Translate ``options`` into a dialyzer argument list."""
    atype = options.analysis_type
    cmd = [executable, *_MODE_FLAGS[atype]]

    if options.init_plt is not None and atype is not AnalysisType.BUILD:
        cmd += ["--plt", str(options.init_plt)]
    if options.output_plt is not None and atype in (
        AnalysisType.BUILD,
        AnalysisType.ADD,
        AnalysisType.REMOVE,
    ):
        cmd += ["--output_plt", str(options.output_plt)]

    if options.get_warnings and atype.mutates_plt:
        cmd.append("--get_warnings")

    # --no_check_plt contradicts --check_plt, the check mode is the check itself
    if not options.check_plt and atype is not AnalysisType.CHECK:
        cmd.append("--no_check_plt")

    if not options.from_byte_code:
        cmd.append("--src")

    cmd += [f"-W{category}" for category in options.warnings]
    cmd += ["--fullpath", "--quiet"]
    cmd += list(options.files)
    return cmd


def parse_warnings(output: str) -> list[Diagnostic]:
    """Parse dialyzer's warning output into diagnostics.

    Indented lines continue the previous warning.
    """
    diagnostics: list[Diagnostic] = []
    for raw in output.splitlines():
        if not raw.strip():
            continue
        if raw[0].isspace() and diagnostics:
            last = diagnostics.pop()
            diagnostics.append(
                Diagnostic(
                    file=last.file,
                    line=last.line,
                    message=f"{last.message} {raw.strip()}",
                    column=last.column,
                    tag=last.tag,
                )
            )
            continue

        match = _WARNING_RE.match(raw.rstrip())
        if match is None:
            diagnostics.append(Diagnostic(file="", line=0, message=raw.strip()))
            continue
        column = match.group("column")
        diagnostics.append(
            Diagnostic(
                file=match.group("file"),
                line=int(match.group("line")),
                message=match.group("message"),
                column=int(column) if column is not None else None,
            )
        )
    return diagnostics


def parse_plt_info(output: str) -> FileSet:
    """Extract the compiled-object paths listed by ``--plt_info``."""
    files = [
        quoted.replace('\\"', '"').replace("\\\\", "\\")
        for quoted in _QUOTED_RE.findall(output)
    ]
    return FileSet.of(f for f in files if f.endswith(OBJECT_FILE_EXTENSION))


class DialyzerCli(AnalysisBackend):
    """Runs analyses by shelling out to ``dialyzer``."""

    name = "dialyzer"

    def __init__(self, executable: str = "dialyzer", timeout: int | None = None):
        self.executable = executable
        self.timeout = timeout or None

    def _resolve_executable(self) -> str:
        resolved = shutil.which(self.executable)
        if resolved is None:
            raise BackendError(f"dialyzer executable '{self.executable}' not found on PATH")
        return resolved

    def _run(self, cmd: list[str], home_plt: Path | None) -> subprocess.CompletedProcess:
        env = os.environ.copy()
        if home_plt is not None:
            env[ENV_DIALYZER_PLT] = str(home_plt)
        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                env=env,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise BackendError(f"dialyzer timed out after {self.timeout}s") from e
        except OSError as e:
            raise BackendError(f"Could not start dialyzer: {e}") from e

    def query_file_set(self, plt: Path) -> FileSet | None:
        plt = Path(plt)
        if not plt.is_file():
            return None

        cmd = [self._resolve_executable(), "--plt_info", "--plt", str(plt)]
        logger.debug("Reading PLT info: {}", cmd)
        proc = self._run(cmd, home_plt=None)
        if proc.returncode != EXIT_OK:
            logger.debug("plt_info failed ({}): {}", proc.returncode, proc.stderr.strip())
            raise PltReadError(plt)
        return parse_plt_info(proc.stdout)

    def run_analysis(self, options: AnalysisOptions) -> list[Diagnostic]:
        cmd = build_command(self._resolve_executable(), options)
        logger.debug("Running dialyzer: {} ({} files)", cmd[: len(cmd) - len(options.files)], len(options.files))
        proc = self._run(cmd, home_plt=options.home_plt)

        if proc.returncode in (EXIT_OK, EXIT_WARNINGS):
            return parse_warnings(proc.stdout)

        detail = (proc.stderr.strip() or proc.stdout.strip()).splitlines()
        message = detail[-1] if detail else f"dialyzer exited with status {proc.returncode}"
        if options.init_plt is not None and any(m in "\n".join(detail) for m in _READ_FAILURE_MARKERS):
            raise PltReadError(options.init_plt)
        raise BackendError(message)
