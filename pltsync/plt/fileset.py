"""File sets and the remove/check/add partition used to sync a PLT.

A PLT is keyed by compiled-object path, so bringing one up to date is pure
set arithmetic between what it holds (old) and what the project needs (new):

    remove = old - new
    check  = old & new
    add    = new - old

The three parts are pairwise disjoint and together cover ``old | new``.
"""

import os
from collections.abc import Iterable
from dataclasses import dataclass


def normalize_file(path: str | os.PathLike) -> str:
    """Absolute, normalized string form used as a PLT key."""
    return os.path.normpath(os.path.abspath(os.fspath(path)))


class FileSet(frozenset):
    """Immutable set of absolute compiled-object paths."""

    @classmethod
    def of(cls, paths: Iterable[str | os.PathLike] = ()) -> "FileSet":
        return cls(normalize_file(p) for p in paths)

    def sorted(self) -> list[str]:
        """Deterministic ordering for backend calls and logs."""
        return sorted(self)

    def __repr__(self) -> str:
        return f"FileSet({self.sorted()!r})"


def _as_fileset(files: Iterable[str | os.PathLike]) -> FileSet:
    return files if isinstance(files, FileSet) else FileSet.of(files)


def files_to_remove(old: Iterable[str], new: Iterable[str]) -> FileSet:
    """Files the PLT holds that are no longer required."""
    return FileSet(_as_fileset(old) - _as_fileset(new))


def files_to_check(old: Iterable[str], new: Iterable[str]) -> FileSet:
    """Files already in the PLT that are still required."""
    return FileSet(_as_fileset(old) & _as_fileset(new))


def files_to_add(old: Iterable[str], new: Iterable[str]) -> FileSet:
    """Required files the PLT does not hold yet."""
    return FileSet(_as_fileset(new) - _as_fileset(old))


@dataclass(frozen=True)
class PltDelta:
    """Result of comparing a PLT's contents against a required file set."""

    remove: FileSet
    check: FileSet
    add: FileSet

    @property
    def is_empty(self) -> bool:
        return not (self.remove or self.check or self.add)

    @property
    def changes_contents(self) -> bool:
        """True if syncing would change the PLT's key set."""
        return bool(self.remove or self.add)

    def union(self) -> FileSet:
        return FileSet(self.remove | self.check | self.add)


def partition(old: Iterable[str], new: Iterable[str]) -> PltDelta:
    """Split ``old | new`` into the remove, check and add sets."""
    old_set = _as_fileset(old)
    new_set = _as_fileset(new)
    return PltDelta(
        remove=files_to_remove(old_set, new_set),
        check=files_to_check(old_set, new_set),
        add=files_to_add(old_set, new_set),
    )
