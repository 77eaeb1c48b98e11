"""Phase orchestration for a dialyzer run.

A run is one pass through:

    START -> (update_plt?) project PLT exists? -> sync project PLT
                                      missing -> update or build the base PLT,
                                                 copy it to the project PLT,
                                                 sync from the base file set
          -> (succ_typings?) success typing over the project's own files
          -> DONE: 0 warnings = success, otherwise warnings are reported

Fatal errors stop the pipeline at once. They are caught in exactly one place,
``PhaseOrchestrator.run()``, and returned as a failed ``RunResult``. The
dependency search path is installed for the duration of the run and removed
afterwards on every exit path.
"""

import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from rich.console import Console

from pltsync.backend.base import AnalysisBackend, AnalysisType
from pltsync.backend.runtime import Runtime
from pltsync.errors import DialyzerWarnings, FileAccessError, PltCopyError, PltSyncError
from pltsync.invoker import AnalysisInvoker
from pltsync.manifest import ArtifactRegistry, ManifestResolver, ProjectApp
from pltsync.pipeline.structures import RunResult, RunStatus
from pltsync.plt.fileset import FileSet
from pltsync.plt.paths import GLOBAL, LOCAL, base_plt_path, project_plt_path, warnings_file_path
from pltsync.plt.sync import PltDiffEngine
from pltsync.reporter import WarningReporter
from pltsync.utils.constants import DEFAULT_BASE_PLT_APPS, DEFAULT_PLT_PREFIX
from pltsync.utils.logging import logger


def _as_location(value: Any, root: Path) -> str | Path:
    """A location keyword as is, otherwise a directory relative to ``root``."""
    if isinstance(value, str) and value in (LOCAL, GLOBAL):
        return value
    path = Path(str(value)).expanduser()
    return path if path.is_absolute() else root / path


@dataclass(frozen=True)
class DialyzerSettings:
    """Read-only run options."""

    update_plt: bool = True
    succ_typings: bool = True
    warnings: tuple[str, ...] = ()
    get_warnings: bool = False
    plt_extra_apps: tuple[str, ...] = ()
    plt_location: str | Path = "local"
    plt_prefix: str = DEFAULT_PLT_PREFIX
    base_plt_apps: tuple[str, ...] = DEFAULT_BASE_PLT_APPS
    base_plt_location: str | Path = "global"
    base_plt_prefix: str = DEFAULT_PLT_PREFIX
    base_dir: Path = Path("_build/default")
    global_cache_dir: Path = Path("~/.cache/rebar3").expanduser()
    home_plt: Path | None = None

    @classmethod
    def from_config(cls, cfg: dict[str, Any], root: Path | str = ".", **overrides: Any) -> "DialyzerSettings":
        """Build settings from a ``load_runtime_config`` dict.

        ``overrides`` with a value of None are ignored, so unset CLI flags
        fall back to the configuration.
        """
        root = Path(root)
        opts = cfg.get("dialyzer", {})
        paths = cfg.get("paths", {})

        base_dir = Path(paths.get("base_dir", "_build/default")).expanduser()
        if not base_dir.is_absolute():
            base_dir = root / base_dir
        home_plt = paths.get("home_plt") or None

        settings = cls(
            update_plt=bool(opts.get("update_plt", True)),
            succ_typings=bool(opts.get("succ_typings", True)),
            warnings=tuple(opts.get("warnings", ())),
            get_warnings=bool(opts.get("get_warnings", False)),
            plt_extra_apps=tuple(opts.get("plt_extra_apps", ())),
            plt_location=_as_location(opts.get("plt_location", LOCAL), root),
            plt_prefix=opts.get("plt_prefix") or DEFAULT_PLT_PREFIX,
            base_plt_apps=tuple(opts.get("base_plt_apps", DEFAULT_BASE_PLT_APPS)),
            base_plt_location=_as_location(opts.get("base_plt_location", GLOBAL), root),
            base_plt_prefix=opts.get("base_plt_prefix") or DEFAULT_PLT_PREFIX,
            base_dir=base_dir,
            global_cache_dir=Path(paths.get("global_cache_dir", "~/.cache/rebar3")).expanduser(),
            home_plt=Path(home_plt).expanduser() if home_plt else None,
        )
        overrides = {k: v for k, v in overrides.items() if v is not None}
        if overrides:
            settings = replace(settings, **overrides)
        return settings


@dataclass(frozen=True)
class Project:
    """The project's applications and the code paths of its dependencies.

    Supplied by the caller; this package does not compute dependency graphs.
    """

    apps: tuple[ProjectApp, ...] = ()
    code_paths: tuple[Path, ...] = field(default_factory=tuple)

    @classmethod
    def from_config(cls, cfg: dict[str, Any], root: Path | str = ".") -> "Project":
        root = Path(root)
        section = cfg.get("project", {})
        apps = tuple(ProjectApp.from_dict(a, root) for a in section.get("apps", ()))
        code_paths = []
        for p in section.get("code_paths", ()):
            path = Path(p).expanduser()
            code_paths.append(path if path.is_absolute() else root / path)
        return cls(apps=apps, code_paths=tuple(code_paths))

    def dependency_apps(self) -> list[str]:
        """Applications the project apps declare, in declaration order."""
        return [dep for app in self.apps for dep in app.applications]


class PhaseOrchestrator:
    """Runs PLT maintenance and success typing for one project."""

    def __init__(
        self,
        settings: DialyzerSettings,
        project: Project,
        backend: AnalysisBackend,
        runtime: Runtime,
        console: Console | None = None,
    ):
        self.settings = settings
        self.project = project
        self.runtime = runtime

        self.plt = project_plt_path(
            settings.plt_prefix, settings.plt_location, settings.base_dir, runtime.otp_release
        )
        self.base_plt = base_plt_path(
            settings.base_plt_prefix,
            settings.base_plt_location,
            settings.global_cache_dir,
            runtime.otp_release,
        )
        self.output = warnings_file_path(settings.base_dir, runtime.otp_release)

        self.registry = ArtifactRegistry(lib_root=runtime.lib_dir)
        self.resolver = ManifestResolver(self.registry)
        self.invoker = AnalysisInvoker(
            backend,
            warnings=settings.warnings,
            get_warnings=settings.get_warnings,
            home_plt=settings.home_plt,
        )
        self.reporter = WarningReporter(self.output, console=console)
        self.engine = PltDiffEngine(self.invoker, self.reporter)

    def run(self) -> RunResult:
        logger.info("Dialyzer starting, this may take a while...")
        with self.registry.code_paths(self.project.code_paths):
            try:
                total = self._run()
            except OSError as e:
                return self._failed(FileAccessError(e.filename or self.output.parent, e))
            except PltSyncError as e:
                return self._failed(e)

        if total == 0:
            return RunResult(
                status=RunStatus.SUCCESS, output=self.output, phases=list(self.engine.phases)
            )

        logger.info("Warnings written to {}", self.output)
        return RunResult(
            status=RunStatus.WARNINGS,
            warnings=total,
            output=self.output,
            error=DialyzerWarnings(total, self.output),
            phases=list(self.engine.phases),
        )

    def _failed(self, error: PltSyncError) -> RunResult:
        logger.debug("Run aborted: {}", error)
        return RunResult(
            status=RunStatus.FAILED,
            warnings=self.reporter.total,
            output=self.output,
            error=error,
            phases=list(self.engine.phases),
        )

    def _run(self) -> int:
        self.reporter.create()
        plt_warnings = self.update_proj_plt()
        warnings = self.succ_typings()
        return plt_warnings + warnings

    # -- file sets ---------------------------------------------------------

    def proj_plt_files(self) -> FileSet:
        apps: Iterable[str] = [
            *self.settings.base_plt_apps,
            *self.settings.plt_extra_apps,
            *self.project.dependency_apps(),
        ]
        return self.resolver.resolve(apps, self.project.apps)

    def base_plt_files(self) -> FileSet:
        return self.resolver.resolve(self.settings.base_plt_apps, self.project.apps)

    # -- project PLT -------------------------------------------------------

    def update_proj_plt(self) -> int:
        if not self.settings.update_plt:
            return 0
        logger.info("Updating plt...")
        files = self.proj_plt_files()
        old_files = self.engine.read(self.plt)
        if old_files is None:
            return self.build_proj_plt(files)
        return self.engine.sync(self.plt, old_files, files)

    def build_proj_plt(self, files: FileSet) -> int:
        logger.info("Updating base plt...")
        base_files = self.base_plt_files()
        base_warnings = self.update_base_plt(base_files)
        if not self.base_plt.is_file():
            # No base applications: there is no base PLT to start from
            return base_warnings + self.engine.build(self.plt, files)
        self.copy_base_plt()
        # The fresh copy holds exactly the base file set
        return base_warnings + self.engine.sync(self.plt, base_files, files)

    def copy_base_plt(self) -> None:
        logger.info("Copying {} to {}...", self.base_plt, self.plt)
        try:
            self.plt.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(self.base_plt, self.plt)
        except OSError as e:
            raise PltCopyError(self.base_plt, self.plt, e) from e

    # -- base PLT ----------------------------------------------------------

    def update_base_plt(self, base_files: FileSet) -> int:
        old_files = self.engine.read(self.base_plt)
        if old_files is None:
            return self.engine.build(self.base_plt, base_files)
        return self.engine.sync(self.base_plt, old_files, base_files)

    # -- success typing ----------------------------------------------------

    def succ_typings(self) -> int:
        if not self.settings.succ_typings:
            return 0
        logger.info("Doing success typing analysis...")
        files = self.resolver.project_files(self.project.apps)
        logger.info("Analyzing {} files with {}...", len(files), self.plt)
        return self.engine.run_phase(AnalysisType.SUCC_TYPINGS, self.plt, files)


def create_orchestrator(
    root: Path | str = ".",
    cfg: dict[str, Any] | None = None,
    backend: AnalysisBackend | None = None,
    runtime: Runtime | None = None,
    console: Console | None = None,
    **overrides: Any,
) -> PhaseOrchestrator:
    """Wire an orchestrator from the project's configuration.

    Raises:
        BackendError: the Erlang runtime could not be probed.
    """
    from pltsync.backend.dialyzer_cli import DialyzerCli
    from pltsync.backend.runtime import resolve_runtime
    from pltsync.config_runtime import load_runtime_config

    root = Path(root)
    if cfg is None:
        cfg = load_runtime_config(root)
    rt = cfg["runtime"]
    timeout = rt.get("timeout") or None

    if runtime is None:
        runtime = resolve_runtime(
            otp_release=rt.get("otp_release", ""),
            otp_root=rt.get("otp_root", ""),
            erl=rt.get("erl", "erl"),
            timeout=timeout or 30,
        )
    if backend is None:
        backend = DialyzerCli(rt.get("dialyzer", "dialyzer"), timeout=timeout)

    logger.debug("OTP release {} at {}", runtime.otp_release, runtime.root_dir)
    return PhaseOrchestrator(
        DialyzerSettings.from_config(cfg, root, **overrides),
        Project.from_config(cfg, root),
        backend,
        runtime,
        console=console,
    )
