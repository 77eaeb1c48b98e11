"""Pytest configuration and fixtures."""
import io
import json
from pathlib import Path

import pytest
from rich.console import Console

from pltsync.backend.base import AnalysisBackend, AnalysisOptions, AnalysisType, Diagnostic
from pltsync.backend.runtime import Runtime
from pltsync.errors import PltReadError
from pltsync.manifest import ProjectApp
from pltsync.orchestrator import DialyzerSettings, PhaseOrchestrator, Project
from pltsync.plt.fileset import FileSet


class RecordingBackend(AnalysisBackend):
    """In-process stand-in for dialyzer.

    A PLT is a JSON file holding the sorted list of its files, so copying a
    PLT on disk copies its contents too. Every ``run_analysis`` call is
    recorded; ``diagnostics`` scripts what each analysis type returns.
    """

    name = "recording"

    def __init__(self, diagnostics=None):
        self.calls: list[AnalysisOptions] = []
        self.queries: list[Path] = []
        self.diagnostics: dict[AnalysisType, list[Diagnostic]] = dict(diagnostics or {})

    @staticmethod
    def contents(plt: Path) -> FileSet:
        return FileSet.of(json.loads(Path(plt).read_text()))

    @staticmethod
    def seed(plt: Path, files) -> None:
        plt.parent.mkdir(parents=True, exist_ok=True)
        plt.write_text(json.dumps(sorted(files)))

    def query_file_set(self, plt: Path) -> FileSet | None:
        self.queries.append(Path(plt))
        if not Path(plt).exists():
            return None
        try:
            return self.contents(plt)
        except ValueError as e:
            raise PltReadError(plt) from e

    def run_analysis(self, options: AnalysisOptions) -> list[Diagnostic]:
        self.calls.append(options)
        atype = options.analysis_type
        files = set(options.files)

        if atype is AnalysisType.BUILD:
            self.seed(options.output_plt, files)
        elif atype in (AnalysisType.ADD, AnalysisType.REMOVE):
            current = set(self.contents(options.init_plt))
            current = current | files if atype is AnalysisType.ADD else current - files
            self.seed(options.output_plt, current)

        return list(self.diagnostics.get(atype, []))

    def call_types(self) -> list[AnalysisType]:
        return [c.analysis_type for c in self.calls]


def make_app(lib_dir: Path, dirname: str, modules) -> Path:
    """Create ``lib_dir/dirname/ebin`` with one .beam per module."""
    ebin = lib_dir / dirname / "ebin"
    ebin.mkdir(parents=True, exist_ok=True)
    for module in modules:
        (ebin / f"{module}.beam").write_bytes(b"FOR1")
    (ebin / f"{dirname.split('-')[0]}.app").write_text("{application, x, []}.")
    return ebin


def beams(ebin: Path, *modules) -> set[str]:
    return {str((ebin / f"{m}.beam").absolute()) for m in modules}


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
def console_buffer():
    """Rich console writing into a StringIO."""
    buffer = io.StringIO()
    return Console(file=buffer, width=200, color_system=None), buffer


@pytest.fixture
def otp(tmp_path):
    """A fake OTP install with the default base PLT applications."""
    root = tmp_path / "otp"
    lib = root / "lib"
    ebins = {
        "erts": make_app(lib, "erts-14.0", ["erlang", "erts_internal"]),
        "crypto": make_app(lib, "crypto-5.2", ["crypto"]),
        "kernel": make_app(lib, "kernel-9.0", ["application", "code"]),
        "stdlib": make_app(lib, "stdlib-5.0", ["lists", "maps"]),
        "ssl": make_app(lib, "ssl-11.0", ["ssl"]),
    }
    return Runtime(otp_release="26", root_dir=root), ebins


@pytest.fixture
def project_dir(tmp_path):
    """A project with one app ``myapp`` depending on ``cowboy`` and ``ssl``."""
    root = tmp_path / "project"
    lib = root / "_build" / "default" / "lib"
    myapp = make_app(lib, "myapp", ["myapp_app", "myapp_sup"])
    cowboy = make_app(lib, "cowboy", ["cowboy", "cowboy_req"])
    return root, {"myapp": myapp, "cowboy": cowboy}


@pytest.fixture
def project(project_dir):
    root, ebins = project_dir
    app = ProjectApp(
        name="myapp",
        ebin=ebins["myapp"],
        applications=("kernel", "stdlib", "cowboy", "ssl"),
    )
    return Project(apps=(app,), code_paths=(ebins["cowboy"],))


@pytest.fixture
def settings(tmp_path, project_dir):
    root, _ = project_dir
    return DialyzerSettings(
        base_dir=root / "_build" / "default",
        global_cache_dir=tmp_path / "cache",
    )


@pytest.fixture
def make_orchestrator(settings, project, backend, otp, console_buffer):
    """Factory so tests can tweak settings before wiring."""
    runtime, _ = otp
    console, _ = console_buffer

    def factory(**overrides):
        from dataclasses import replace

        return PhaseOrchestrator(
            replace(settings, **overrides), project, backend, runtime, console=console
        )

    return factory
