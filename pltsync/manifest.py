"""Application manifests - resolve application names to compiled-object files.

An application is located through the registry's search path: dependency
``ebin`` directories first, then the runtime's library root. Names that the
project itself provides are never resolved through the registry; their files
belong to the success-typing pass, not the PLT.
"""

import re
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from pltsync.errors import FileAccessError, UnknownApplication
from pltsync.plt.fileset import FileSet
from pltsync.utils.constants import OBJECT_FILE_EXTENSION
from pltsync.utils.logging import logger

_VERSIONED_RE = re.compile(r"^(?P<name>.+?)-(?P<vsn>\d[\w.\-+]*)$")


@dataclass(frozen=True)
class ProjectApp:
    """An application built by the project.

    Attributes:
        name: Application name
        ebin: Directory holding its compiled objects
        applications: Names of the applications it depends on
    """

    name: str
    ebin: Path
    applications: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: dict, root: Path | None = None) -> "ProjectApp":
        ebin = Path(data["ebin"]).expanduser()
        if root is not None and not ebin.is_absolute():
            ebin = root / ebin
        return cls(
            name=str(data["name"]),
            ebin=ebin,
            applications=tuple(str(a) for a in data.get("applications", ())),
        )


def _version_key(vsn: str) -> tuple:
    return tuple(int(part) if part.isdigit() else -1 for part in re.split(r"[.\-+]", vsn))


def _split_app_dir(dirname: str) -> tuple[str, str]:
    """``stdlib-5.1`` -> (``stdlib``, ``5.1``); unversioned dirs get an empty vsn."""
    match = _VERSIONED_RE.match(dirname)
    if match:
        return match.group("name"), match.group("vsn")
    return dirname, ""


def object_files(ebin: Path) -> list[str]:
    """Sorted absolute paths of the compiled objects in ``ebin``."""
    try:
        return sorted(
            str(p.absolute())
            for p in ebin.iterdir()
            if p.suffix == OBJECT_FILE_EXTENSION and p.is_file()
        )
    except OSError as e:
        raise FileAccessError(ebin, e) from e


class ArtifactRegistry:
    """Locates an application's ``ebin`` directory by name."""

    def __init__(self, code_paths: Iterable[Path] = (), lib_root: Path | None = None):
        self._code_paths: list[Path] = [Path(p) for p in code_paths]
        self.lib_root = Path(lib_root) if lib_root is not None else None

    @property
    def search_path(self) -> list[Path]:
        return list(self._code_paths)

    @contextmanager
    def code_paths(self, paths: Iterable[Path]) -> Iterator["ArtifactRegistry"]:
        """Put ``paths`` in front of the search path for the duration of the block.

        The previous search path is restored on exit, whatever the outcome.
        """
        saved = list(self._code_paths)
        self._code_paths = [Path(p) for p in paths] + saved
        try:
            yield self
        finally:
            self._code_paths = saved
            logger.debug("Restored code path ({} entries)", len(saved))

    def _from_code_paths(self, name: str) -> Path | None:
        for ebin in self._code_paths:
            if ebin.name != "ebin":
                continue
            app_name, _ = _split_app_dir(ebin.parent.name)
            if app_name == name:
                return ebin
        return None

    def _from_lib_root(self, name: str) -> Path | None:
        if self.lib_root is None or not self.lib_root.is_dir():
            return None
        try:
            app_dirs = list(self.lib_root.iterdir())
        except OSError as e:
            raise FileAccessError(self.lib_root, e) from e
        candidates = []
        for app_dir in app_dirs:
            app_name, vsn = _split_app_dir(app_dir.name)
            if app_name == name:
                candidates.append((_version_key(vsn), app_dir / "ebin"))
        if not candidates:
            return None
        return max(candidates)[1]

    def locate_artifacts(self, name: str) -> Path | None:
        """The ``ebin`` directory of ``name``, or None if it cannot be found."""
        ebin = self._from_code_paths(name) or self._from_lib_root(name)
        if ebin is None or not ebin.is_dir():
            return None
        return ebin


class ManifestResolver:
    """Turns application names into the set of files a PLT must contain."""

    def __init__(self, registry: ArtifactRegistry):
        self.registry = registry

    def app_files(self, name: str) -> list[str]:
        ebin = self.registry.locate_artifacts(name)
        if ebin is None:
            raise UnknownApplication(name)
        return object_files(ebin)

    def resolve(self, app_names: Iterable[str], project_apps: Iterable[ProjectApp]) -> FileSet:
        """Files of every named application not provided by the project.

        Raises:
            UnknownApplication: a name is neither a project app nor locatable.
        """
        logger.info("Resolving files...")
        project_names = {app.name for app in project_apps}
        seen: set[str] = set()
        files: set[str] = set()
        for name in app_names:
            if name in seen or name in project_names:
                continue
            app_files = self.app_files(name)
            logger.debug("{} files: {}", name, app_files)
            seen.add(name)
            files.update(app_files)
        return FileSet.of(files)

    def project_files(self, project_apps: Iterable[ProjectApp]) -> FileSet:
        """Files of the project's own applications, for success typing."""
        logger.info("Resolving files...")
        files: set[str] = set()
        for app in project_apps:
            if not app.ebin.is_dir():
                raise UnknownApplication(app.name)
            files.update(object_files(app.ebin))
        return FileSet.of(files)
