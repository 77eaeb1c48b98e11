"""Centralized constants for pltsync.

Single source of truth for file names, directory conventions and the
environment variables the tool reads.
"""

from pathlib import Path

# ============================================================================
# OUTPUT DIRECTORIES
# ============================================================================

# Tool state directory (config file, error log), relative to the project root
PF_DIR = Path("./.pf")

CONFIG_FILE_NAME = "config.json"
ERROR_LOG_NAME = "error.log"

# ============================================================================
# PLT CONVENTIONS
# ============================================================================

# PLT files are named "<prefix>_<otp_release>_plt"
DEFAULT_PLT_PREFIX = "rebar3"
PLT_SUFFIX = "_plt"

# Warnings file is "<otp_release>.dialyzer_warnings" in the project base dir
WARNINGS_FILE_SUFFIX = ".dialyzer_warnings"

# Extension of compiled-object files the backend analyses
OBJECT_FILE_EXTENSION = ".beam"

# Applications every base PLT covers unless configured otherwise
DEFAULT_BASE_PLT_APPS = ("erts", "crypto", "kernel", "stdlib")

# ============================================================================
# ENVIRONMENT VARIABLES
# ============================================================================

ENV_PREFIX = "PLTSYNC"

# Read by dialyzer itself; set only in the child process environment
ENV_DIALYZER_PLT = "DIALYZER_PLT"
