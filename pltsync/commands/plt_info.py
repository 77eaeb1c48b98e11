"""Show a PLT's location and contents."""

import sys

import click

from pltsync.errors import PltSyncError
from pltsync.pipeline.ui import console, print_error, print_warning
from pltsync.utils.error_handler import handle_exceptions
from pltsync.utils.exit_codes import ExitCodes


@click.command("plt-info")
@handle_exceptions
@click.option("--root", default=".", help="Project root directory")
@click.option("--base", is_flag=True, help="Show the base PLT instead of the project PLT")
@click.option("--files", "list_files", is_flag=True, help="List every file in the PLT")
def plt_info(root, base, list_files):
    """Show where the PLT lives and how many files it holds.

    Read-only: the PLT is never built or modified by this command.

    \b
    Examples:
      pltsync plt-info                # Project PLT
      pltsync plt-info --base         # Shared base PLT
      pltsync plt-info --files        # Also list the files"""
    from pltsync.orchestrator import create_orchestrator

    try:
        orchestrator = create_orchestrator(root)
        plt = orchestrator.base_plt if base else orchestrator.plt
        files = orchestrator.engine.read(plt)
    except PltSyncError as e:
        print_error(str(e))
        sys.exit(ExitCodes.FATAL_ERROR)

    kind = "Base PLT" if base else "Project PLT"
    console.print(f"[bold]{kind}[/bold]  [path]{plt}[/path]", highlight=False)
    if files is None:
        print_warning("Not built yet. Run 'pltsync dialyzer' to create it.")
        return

    console.print(f"  [cyan]{len(files)}[/cyan] files")
    if list_files:
        for path in files.sorted():
            console.print(f"    {path}", markup=False, highlight=False)
