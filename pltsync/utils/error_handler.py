"""Centralized error handler for pltsync commands."""

import traceback
from collections.abc import Callable
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Any

import click

from pltsync.utils.logging import logger

from .constants import ERROR_LOG_NAME, PF_DIR
from .exit_codes import ExitCodes


def error_log_path(root: str | Path = ".") -> Path:
    """Where tracebacks of failed commands go: ``<root>/.pf/error.log``."""
    return Path(root) / PF_DIR / ERROR_LOG_NAME


class CommandCrash(click.ClickException):
    """An unexpected exception escaped a command; always a fatal exit."""

    exit_code = ExitCodes.FATAL_ERROR


def handle_exceptions(func: Callable[..., Any]) -> Callable[..., Any]:
    """Log unexpected command failures and turn them into click errors.

    click's own exceptions (usage errors, ``Exit``, ``Abort``) and
    ``SystemExit`` pass through untouched. The traceback is appended to the
    error log under the command's ``--root``.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (click.exceptions.ClickException, click.exceptions.Exit, click.exceptions.Abort):
            raise
        except Exception as e:
            error_type = type(e).__name__
            error_msg = str(e)

            logger.opt(exception=True).error(
                "Command '{cmd}' failed: {err}",
                cmd=func.__name__,
                err=error_msg,
            )

            log_file = error_log_path(kwargs.get("root") or ".")
            try:
                log_file.parent.mkdir(parents=True, exist_ok=True)
                with open(log_file, "a", encoding="utf-8") as f:
                    f.write("\n" + "=" * 80 + "\n")
                    f.write(f"[{datetime.now().isoformat()}] Error in command: {func.__name__}\n")
                    f.write("=" * 80 + "\n")
                    f.write(f"{error_type}: {error_msg}\n\n")
                    f.write(traceback.format_exc())
                    f.write("=" * 80 + "\n\n")
                log_hint = f"\n\nFull traceback logged to: {log_file}"
            except OSError:
                log_hint = ""

            raise CommandCrash(f"{error_type}: {error_msg}{log_hint}") from e

    return wrapper
