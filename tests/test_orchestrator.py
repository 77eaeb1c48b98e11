"""End-to-end tests of the phase state machine with a recording backend."""

import pytest

from conftest import RecordingBackend, beams, make_app
from pltsync.backend.base import AnalysisType, Diagnostic
from pltsync.errors import (
    DialyzerWarnings,
    FileAccessError,
    PltCopyError,
    PltReadError,
    UnknownApplication,
)
from pltsync.invoker import NO_WARNINGS
from pltsync.pipeline.structures import RunStatus
from pltsync.plt.fileset import FileSet

BUILD, ADD, REMOVE, CHECK, SUCC = (
    AnalysisType.BUILD,
    AnalysisType.ADD,
    AnalysisType.REMOVE,
    AnalysisType.CHECK,
    AnalysisType.SUCC_TYPINGS,
)


@pytest.fixture
def base_files(otp):
    _, ebins = otp
    return FileSet.of(
        beams(ebins["erts"], "erlang", "erts_internal")
        | beams(ebins["crypto"], "crypto")
        | beams(ebins["kernel"], "application", "code")
        | beams(ebins["stdlib"], "lists", "maps")
    )


@pytest.fixture
def project_plt_files(base_files, otp, project_dir):
    _, otp_ebins = otp
    _, ebins = project_dir
    return FileSet(
        base_files | beams(ebins["cowboy"], "cowboy", "cowboy_req") | beams(otp_ebins["ssl"], "ssl")
    )


@pytest.fixture
def own_files(project_dir):
    _, ebins = project_dir
    return FileSet.of(beams(ebins["myapp"], "myapp_app", "myapp_sup"))


class TestFreshProject:
    def test_builds_base_copies_and_syncs(
        self, make_orchestrator, backend, base_files, project_plt_files, own_files
    ):
        orch = make_orchestrator()
        result = orch.run()

        assert result.status == RunStatus.SUCCESS
        assert backend.call_types() == [BUILD, CHECK, ADD, SUCC]

        build, check, add, succ = backend.calls
        assert build.output_plt == orch.base_plt
        assert FileSet.of(build.files) == base_files
        assert check.init_plt == orch.plt
        assert FileSet.of(check.files) == base_files
        assert FileSet.of(add.files) == project_plt_files - base_files
        assert FileSet.of(succ.files) == own_files
        assert succ.init_plt == orch.plt

        assert RecordingBackend.contents(orch.base_plt) == base_files
        assert RecordingBackend.contents(orch.plt) == project_plt_files

    def test_paths_follow_naming_convention(self, make_orchestrator, settings, tmp_path):
        orch = make_orchestrator()
        assert orch.plt == settings.base_dir / "rebar3_26_plt"
        assert orch.base_plt == tmp_path / "cache" / "rebar3_26_plt"
        assert orch.output == settings.base_dir / "26.dialyzer_warnings"

    def test_existing_base_plt_is_synced_not_rebuilt(
        self, make_orchestrator, backend, base_files, otp
    ):
        _, ebins = otp
        orch = make_orchestrator()
        stale = "/old/otp/lib/stdlib-4.0/ebin/lists.beam"
        seeded = set(beams(ebins["erts"], "erlang", "erts_internal")) | {stale}
        RecordingBackend.seed(orch.base_plt, seeded)

        orch.run()

        assert backend.call_types() == [REMOVE, CHECK, ADD, CHECK, ADD, SUCC]
        assert backend.calls[0].files == (stale,)
        assert RecordingBackend.contents(orch.base_plt) == base_files

    def test_existing_empty_base_plt_is_copied(self, make_orchestrator, backend):
        orch = make_orchestrator(base_plt_apps=())
        RecordingBackend.seed(orch.base_plt, [])
        orch.run()
        assert backend.call_types() == [ADD, SUCC]

    def test_no_base_apps_builds_project_plt_directly(
        self, make_orchestrator, backend, otp, project_dir
    ):
        _, otp_ebins = otp
        _, ebins = project_dir
        orch = make_orchestrator(base_plt_apps=())

        result = orch.run()

        assert result.status == RunStatus.SUCCESS
        assert backend.call_types() == [BUILD, SUCC]
        assert backend.calls[0].output_plt == orch.plt
        assert not orch.base_plt.exists()
        assert RecordingBackend.contents(orch.plt) == FileSet.of(
            beams(otp_ebins["kernel"], "application", "code")
            | beams(otp_ebins["stdlib"], "lists", "maps")
            | beams(ebins["cowboy"], "cowboy", "cowboy_req")
            | beams(otp_ebins["ssl"], "ssl")
        )


class TestExistingProjectPlt:
    def test_second_run_only_checks(self, make_orchestrator, backend, project_plt_files):
        make_orchestrator().run()
        backend.calls.clear()

        result = make_orchestrator().run()

        assert result.status == RunStatus.SUCCESS
        assert backend.call_types() == [CHECK, SUCC]
        assert FileSet.of(backend.calls[0].files) == project_plt_files

    def test_changed_requirements_are_diffed(
        self, make_orchestrator, backend, project_plt_files, otp
    ):
        orch = make_orchestrator()
        stale = "/gone/ebin/gone.beam"
        _, ebins = otp
        ssl = beams(ebins["ssl"], "ssl")
        RecordingBackend.seed(orch.plt, (project_plt_files - ssl) | {stale})

        orch.run()

        assert backend.call_types() == [REMOVE, CHECK, ADD, SUCC]
        assert backend.calls[0].files == (stale,)
        assert FileSet.of(backend.calls[2].files) == FileSet.of(ssl)
        assert RecordingBackend.contents(orch.plt) == project_plt_files
        # base PLT untouched when project PLT exists
        assert not orch.base_plt.exists()

    def test_plt_extra_apps_are_added(self, make_orchestrator, backend, project_plt_files, otp):
        runtime, _ = otp
        extra = make_app(runtime.lib_dir, "mnesia-4.22", ["mnesia"])
        orch = make_orchestrator(plt_extra_apps=("mnesia",))
        RecordingBackend.seed(orch.plt, project_plt_files)

        orch.run()

        assert backend.call_types() == [CHECK, ADD, SUCC]
        assert FileSet.of(backend.calls[1].files) == FileSet.of(beams(extra, "mnesia"))


class TestOptionsGating:
    def test_update_plt_disabled(self, make_orchestrator, backend):
        orch = make_orchestrator(update_plt=False)
        result = orch.run()
        assert backend.call_types() == [SUCC]
        assert backend.queries == []
        assert result.success

    def test_succ_typings_disabled(self, make_orchestrator, backend):
        make_orchestrator(succ_typings=False).run()
        assert SUCC not in backend.call_types()

    def test_both_disabled(self, make_orchestrator, backend):
        result = make_orchestrator(update_plt=False, succ_typings=False).run()
        assert backend.calls == []
        assert result.status == RunStatus.SUCCESS
        assert result.output.read_text() == ""

    def test_maintenance_suppressed_but_success_typing_warns(self, make_orchestrator, backend):
        make_orchestrator(warnings=("unmatched_returns",)).run()
        for call in backend.calls:
            if call.analysis_type is SUCC:
                assert call.get_warnings is True
                assert call.warnings == ("unmatched_returns",)
            else:
                assert call.get_warnings is False
                assert call.warnings == NO_WARNINGS

    def test_dependency_search_path_is_scoped(self, make_orchestrator, project):
        orch = make_orchestrator()
        orch.run()
        assert orch.registry.search_path == []


class TestWarnings:
    def test_success_typing_warnings_fail_the_run(self, make_orchestrator, backend):
        backend.diagnostics = {
            SUCC: [
                Diagnostic("/p/myapp_app.erl", 10, "Function start/2 has no local return"),
                Diagnostic("", 0, "Unknown function foo:bar/0"),
            ]
        }
        orch = make_orchestrator()
        result = orch.run()

        assert result.status == RunStatus.WARNINGS
        assert result.warnings == 2
        assert isinstance(result.error, DialyzerWarnings)
        assert str(result.error) == "Warnings occurred running dialyzer: 2"
        assert result.output.read_text().splitlines() == [
            "/p/myapp_app.erl:10: Function start/2 has no local return",
            "Unknown function foo:bar/0",
        ]

    def test_warnings_accumulate_in_phase_order(self, make_orchestrator, backend, console_buffer):
        backend.diagnostics = {
            BUILD: [Diagnostic("/otp/x.erl", 1, "from build")],
            ADD: [Diagnostic("/otp/y.erl", 2, "from add")],
            SUCC: [Diagnostic("/p/z.erl", 3, "from succ")],
        }
        result = make_orchestrator(get_warnings=True).run()

        assert result.warnings == 3
        assert [p.warnings for p in result.phases] == [1, 0, 1, 1]
        lines = result.output.read_text().splitlines()
        assert lines == ["/otp/x.erl:1: from build", "/otp/y.erl:2: from add", "/p/z.erl:3: from succ"]
        _, buffer = console_buffer
        assert buffer.getvalue().splitlines() == lines

    def test_output_file_reset_each_run(self, make_orchestrator, backend):
        backend.diagnostics = {SUCC: [Diagnostic("/p/z.erl", 3, "w")]}
        make_orchestrator().run()
        result = make_orchestrator().run()
        assert result.output.read_text().splitlines() == ["/p/z.erl:3: w"]


class TestFatalErrors:
    def test_unknown_application(self, make_orchestrator, backend):
        orch = make_orchestrator(plt_extra_apps=("missing_app",))
        result = orch.run()

        assert result.status == RunStatus.FAILED
        assert isinstance(result.error, UnknownApplication)
        assert result.error.app == "missing_app"
        assert backend.calls == []
        assert orch.output.read_text() == ""
        assert orch.registry.search_path == []

    def test_unreadable_project_plt(self, make_orchestrator, backend):
        orch = make_orchestrator()
        orch.plt.parent.mkdir(parents=True, exist_ok=True)
        orch.plt.write_bytes(b"\x00corrupt")

        result = orch.run()

        assert isinstance(result.error, PltReadError)
        assert result.error.plt == orch.plt
        assert backend.calls == []
        # never deleted or rebuilt
        assert orch.plt.read_bytes() == b"\x00corrupt"

    def test_copy_failure(self, make_orchestrator, backend, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not dir")
        orch = make_orchestrator(plt_location=blocker / "plts")

        result = orch.run()

        assert isinstance(result.error, PltCopyError)
        assert result.error.destination == orch.plt
        assert "Could not copy PLT from" in str(result.error)
        assert backend.call_types() == [BUILD]

    def test_fatal_error_stops_later_phases(self, make_orchestrator, backend):
        backend.diagnostics = {SUCC: [Diagnostic("/p/z.erl", 3, "w")]}
        result = make_orchestrator(plt_extra_apps=("missing_app",)).run()
        assert SUCC not in backend.call_types()
        assert result.warnings == 0

    def test_blocked_base_plt_directory(self, make_orchestrator, backend, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not dir")
        orch = make_orchestrator(base_plt_location=blocker / "plts")

        result = orch.run()

        assert result.status == RunStatus.FAILED
        assert isinstance(result.error, FileAccessError)
        assert result.error.path == blocker / "plts"
        assert "Could not access" in str(result.error)
        assert backend.calls == []
        assert orch.registry.search_path == []

    def test_stray_os_error_is_a_failed_run(self, make_orchestrator, backend, monkeypatch):
        orch = make_orchestrator()

        def denied():
            raise PermissionError(13, "Permission denied", "/otp/lib/kernel-9.0/ebin")

        monkeypatch.setattr(orch, "proj_plt_files", denied)
        result = orch.run()

        assert result.status == RunStatus.FAILED
        assert isinstance(result.error, FileAccessError)
        assert str(result.error) == (
            "Error in dialyzing apps: Could not access /otp/lib/kernel-9.0/ebin: Permission denied"
        )
        assert backend.calls == []
