"""Run the Dialyzer analyzer on the project."""

import json
import sys
from pathlib import Path

import click

from pltsync.errors import PltSyncError
from pltsync.pipeline.structures import RunStatus
from pltsync.pipeline.ui import console, print_error, print_status_panel, print_success
from pltsync.utils.error_handler import handle_exceptions
from pltsync.utils.exit_codes import ExitCodes
from pltsync.utils.logging import configure_file_logging

_EXIT_CODES = {
    RunStatus.SUCCESS: ExitCodes.SUCCESS,
    RunStatus.WARNINGS: ExitCodes.WARNINGS,
    RunStatus.FAILED: ExitCodes.FATAL_ERROR,
}


@click.command()
@handle_exceptions
@click.option("--root", default=".", help="Project root directory")
@click.option(
    "-u",
    "--update-plt",
    type=click.BOOL,
    default=None,
    help="Enable updating the PLT. Default: true",
)
@click.option(
    "-s",
    "--succ-typings",
    type=click.BOOL,
    default=None,
    help="Enable success typing analysis. Default: true",
)
@click.option("--summary", "summary_path", default=None, help="Write a JSON run summary to this file")
@click.option("--log-dir", default=None, help="Also write a rotating debug log (pltsync.log) here")
def dialyzer(root, update_plt, succ_typings, summary_path, log_dir):
    """Run the Dialyzer analyzer on the project.

    Builds, and keeps up to date, a suitable PLT and uses it to carry out
    success typing analysis on the current project.

    \b
    PLT handling:
      - The project PLT lives in the project base directory (plt_location)
      - If it is missing it is seeded from the base PLT, a shared PLT of
        core applications kept in ~/.cache/rebar3 (base_plt_location),
        one per OTP release
      - Existing PLTs are synced: stale files removed, kept files checked,
        new files added. Nothing is re-analyzed needlessly.
      - PLT files are named "<prefix>_<otp_release>_plt"

    \b
    Options in the "dialyzer" section of .pf/config.json:
      warnings            list of dialyzer warning categories to enable
      get_warnings        report warnings while altering a PLT (bool)
      plt_extra_apps      extra applications to include in the PLT
      plt_location        "local" (default) or a directory
      plt_prefix          PLT file prefix, default "rebar3"
      base_plt_apps       applications in the base PLT
                          (default: erts, crypto, kernel, stdlib)
      base_plt_location   "global" (default) or a directory
      base_plt_prefix     base PLT file prefix, default "rebar3"

    \b
    Examples:
      pltsync dialyzer                  # Update PLT and analyze
      pltsync dialyzer -u false         # Skip PLT maintenance
      pltsync dialyzer -s false         # Only bring the PLT up to date

    \b
    Output:
      _build/default/<otp_release>.dialyzer_warnings   # All warnings of the run

    \b
    Exit Codes:
      0 = No warnings
      1 = Dialyzer reported warnings
      2 = Fatal error (unknown application, unreadable PLT, I/O failure)"""
    from pltsync.orchestrator import create_orchestrator

    if log_dir:
        configure_file_logging(Path(log_dir))

    try:
        orchestrator = create_orchestrator(
            root, update_plt=update_plt, succ_typings=succ_typings
        )
    except PltSyncError as e:
        print_error(str(e))
        sys.exit(ExitCodes.FATAL_ERROR)

    try:
        result = orchestrator.run()
    except KeyboardInterrupt:
        console.print("\n[bold red][INFO] Run stopped by user.[/bold red]")
        sys.exit(ExitCodes.INTERRUPTED)

    exit_code = _EXIT_CODES[result.status]
    if summary_path:
        summary = result.to_dict()
        summary["exit_code"] = exit_code
        summary["exit_description"] = ExitCodes.get_description(exit_code)
        with open(summary_path, "w", encoding="utf-8") as f:
            json.dump(summary, f, indent=2)

    if result.status == RunStatus.FAILED:
        print_error(str(result.error))
    elif result.status == RunStatus.WARNINGS:
        print_status_panel(
            "WARNINGS",
            str(result.error),
            f"Warnings written to {result.output}",
            level="warning",
        )
    else:
        print_success("No dialyzer warnings")

    if exit_code != ExitCodes.SUCCESS:
        sys.exit(exit_code)
