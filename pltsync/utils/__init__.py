"""pltsync utilities package."""

from .constants import (
    DEFAULT_BASE_PLT_APPS,
    DEFAULT_PLT_PREFIX,
    ERROR_LOG_NAME,
    OBJECT_FILE_EXTENSION,
    PF_DIR,
)
from .error_handler import handle_exceptions
from .exit_codes import ExitCodes
from .logging import logger

__all__ = [
    "PF_DIR",
    "ERROR_LOG_NAME",
    "DEFAULT_PLT_PREFIX",
    "DEFAULT_BASE_PLT_APPS",
    "OBJECT_FILE_EXTENSION",
    "handle_exceptions",
    "ExitCodes",
    "logger",
]
