"""pltsync CLI - Main entry point and command registration hub."""
# ruff: noqa: E402 - Intentional lazy loading: commands imported after cli group definition

import click

from pltsync import __version__


@click.group()
@click.version_option(version=__version__, prog_name="pltsync")
@click.help_option("-h", "--help")
def cli():
    """pltsync - Keep dialyzer PLTs up to date and run success typing

    \b
    QUICK START:
      pltsync dialyzer              # Update PLTs, then analyze the project
      pltsync dialyzer -u false     # Analyze without touching the PLT
      pltsync plt-info              # Show the project PLT and its size

    \b
    Configuration: .pf/config.json or PLTSYNC_<SECTION>_<KEY> variables
    For detailed options: pltsync <command> --help"""
    pass


from pltsync.commands.dialyzer import dialyzer
from pltsync.commands.plt_info import plt_info

cli.add_command(dialyzer)
cli.add_command(plt_info)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == "__main__":
    main()
