"""PLT file sets, paths and synchronization."""

from .fileset import FileSet, PltDelta, files_to_add, files_to_check, files_to_remove, partition

__all__ = [
    "FileSet",
    "PltDelta",
    "files_to_add",
    "files_to_check",
    "files_to_remove",
    "partition",
]
