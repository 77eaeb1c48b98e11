"""Error taxonomy for PLT maintenance and dialyzer runs.

Fatal errors abort the rest of the pipeline. ``DialyzerWarnings`` is the one
non-crash failure: the run completed but produced diagnostics.
"""

import os
from pathlib import Path


def describe_os_error(cause: BaseException) -> str:
    """Short reason for an OSError, without the errno/filename noise."""
    if isinstance(cause, OSError) and cause.errno is not None:
        return cause.strerror or os.strerror(cause.errno)
    return str(cause)


class PltSyncError(Exception):
    """Base class for every error this package reports to the user."""


class UnknownApplication(PltSyncError):
    """An application name could not be resolved to a compiled-object directory."""

    def __init__(self, app: str):
        self.app = app
        super().__init__(f"Could not find application: {app}")


class DialyzerError(PltSyncError):
    """Failure while processing applications, reported as 'Error in dialyzing apps'."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Error in dialyzing apps: {detail}")


class PltReadError(DialyzerError):
    """An existing PLT file could not be read."""

    def __init__(self, plt: Path | str):
        self.plt = Path(plt)
        super().__init__(f"Could not read the PLT file {self.plt}")


class PltCopyError(DialyzerError):
    """The base PLT could not be copied to the project PLT location."""

    def __init__(self, source: Path | str, destination: Path | str, cause: BaseException):
        self.source = Path(source)
        self.destination = Path(destination)
        self.cause = cause
        super().__init__(
            f"Could not copy PLT from {self.source} to {self.destination}: "
            f"{describe_os_error(cause)}"
        )


class BackendError(DialyzerError):
    """The analysis backend failed for a reason other than an unreadable PLT."""


class FileAccessError(DialyzerError):
    """A directory or file the run depends on could not be created or listed."""

    def __init__(self, path: Path | str, cause: BaseException):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Could not access {self.path}: {describe_os_error(cause)}")


class OutputFileError(PltSyncError):
    """The warnings file could not be created or appended to."""

    def __init__(self, path: Path | str, cause: BaseException):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Failed to write to {self.path}: {describe_os_error(cause)}")


class DialyzerWarnings(PltSyncError):
    """The run finished and produced ``count`` warnings."""

    def __init__(self, count: int, output: Path | str | None = None):
        self.count = count
        self.output = Path(output) if output is not None else None
        super().__init__(f"Warnings occurred running dialyzer: {count}")
