"""Analysis backend boundary.

The backend owns everything about type inference and the PLT's internal
format. pltsync only asks it two things: which files a PLT holds, and to run
one analysis over a list of files.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pltsync.plt.fileset import FileSet


class AnalysisType(Enum):
    """Analysis modes understood by the backend."""

    BUILD = "plt_build"
    ADD = "plt_add"
    REMOVE = "plt_remove"
    CHECK = "plt_check"
    SUCC_TYPINGS = "succ_typings"

    @property
    def mutates_plt(self) -> bool:
        return self is not AnalysisType.SUCC_TYPINGS

    @property
    def always_warns(self) -> bool:
        """Success typing always reports warnings; PLT maintenance only on request."""
        return self is AnalysisType.SUCC_TYPINGS

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class Diagnostic:
    """One raw warning as returned by the backend.

    ``file`` is empty and ``line`` is 0 for warnings that are not tied to a
    source position.
    """

    file: str
    line: int
    message: str
    column: int | None = None
    tag: str | None = None

    def format(self) -> str:
        """Render in the backend's ``file:line: message`` form."""
        position = f"{self.file}:{self.line}"
        if self.column is not None:
            position += f":{self.column}"
        return f"{position}: {self.message}"


@dataclass(frozen=True)
class AnalysisOptions:
    """Everything one backend call needs.

    ``init_plt`` is read, ``output_plt`` is written; for in-place PLT updates
    they are the same path. ``check_plt`` is always False: the caller already
    knows the PLT's contents and the backend's own pre-check is redundant.
    """

    analysis_type: AnalysisType
    files: tuple[str, ...]
    get_warnings: bool
    warnings: tuple[str, ...]
    init_plt: Path | None = None
    output_plt: Path | None = None
    from_byte_code: bool = True
    check_plt: bool = False
    home_plt: Path | None = None


class AnalysisBackend(ABC):
    """Interface of the external analysis capability."""

    name = "backend"

    @abstractmethod
    def query_file_set(self, plt: Path) -> FileSet | None:
        """Files recorded in ``plt``, or None if the PLT does not exist.

        Raises:
            PltReadError: the PLT exists but cannot be read.
        """

    @abstractmethod
    def run_analysis(self, options: AnalysisOptions) -> list[Diagnostic]:
        """Run one analysis and return the raw diagnostics it produced."""
