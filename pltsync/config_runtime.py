"""Runtime configuration for pltsync - centralized configuration management."""

import copy
import json
import os
from pathlib import Path
from typing import Any

from pltsync.utils.constants import (
    CONFIG_FILE_NAME,
    DEFAULT_BASE_PLT_APPS,
    DEFAULT_PLT_PREFIX,
    ENV_PREFIX,
    PF_DIR,
)
from pltsync.utils.logging import logger

DEFAULTS = {
    "dialyzer": {
        "update_plt": True,
        "succ_typings": True,
        "warnings": [],
        "get_warnings": False,
        "plt_extra_apps": [],
        "plt_location": "local",
        "plt_prefix": DEFAULT_PLT_PREFIX,
        "base_plt_apps": list(DEFAULT_BASE_PLT_APPS),
        "base_plt_location": "global",
        "base_plt_prefix": DEFAULT_PLT_PREFIX,
    },
    "paths": {
        "base_dir": "./_build/default",
        "global_cache_dir": "~/.cache/rebar3",
        "home_plt": "~/.dialyzer_plt",
    },
    "runtime": {
        "otp_release": "",
        "otp_root": "",
        "erl": "erl",
        "dialyzer": "dialyzer",
        "timeout": 0,
    },
    "project": {
        "apps": [],
        "code_paths": [],
    },
}

# Structured values that can only come from the config file
_FILE_ONLY = {("project", "apps")}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _coerce_env(value: str, default_value: Any) -> Any:
    # bool before int: bool is an int subclass
    if isinstance(default_value, bool):
        return parse_bool(value)
    if isinstance(default_value, int):
        return int(value)
    if isinstance(default_value, float):
        return float(value)
    if isinstance(default_value, list):
        return [v.strip() for v in value.split(",") if v.strip()]
    return value


def config_path(root: str | Path = ".") -> Path:
    return Path(root) / PF_DIR / CONFIG_FILE_NAME


def load_runtime_config(root: str | Path = ".") -> dict[str, Any]:
    """
    Load runtime configuration from .pf/config.json and environment variables.

    Config priority (highest to lowest):
    1. Environment variables (PLTSYNC_<SECTION>_<KEY>)
    2. .pf/config.json file
    3. Built-in defaults

    Values whose type does not match the default are ignored with a warning.

    Args:
        root: Project root to look for the config file in

    Returns:
        Configuration dictionary with merged values
    """
    cfg = copy.deepcopy(DEFAULTS)

    path = config_path(root)
    try:
        if path.exists():
            with open(path, encoding="utf-8") as f:
                user = json.load(f)

            if isinstance(user, dict):
                for section in cfg:
                    if section in user and isinstance(user[section], dict):
                        for key, value in user[section].items():
                            if key not in cfg[section]:
                                logger.warning("Ignoring unknown config key {}.{}", section, key)
                            elif isinstance(value, type(cfg[section][key])):
                                cfg[section][key] = value
                            else:
                                logger.warning(
                                    "Ignoring {}.{}: expected {}, got {}",
                                    section,
                                    key,
                                    type(cfg[section][key]).__name__,
                                    type(value).__name__,
                                )
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Could not load config file from {}: {}", path, e)
        logger.info("Continuing with default configuration")

    for section in cfg:
        for key in cfg[section]:
            if (section, key) in _FILE_ONLY:
                continue
            env_var = f"{ENV_PREFIX}_{section.upper()}_{key.upper()}"
            if env_var in os.environ:
                value = os.environ[env_var]
                default_value = cfg[section][key]
                try:
                    cfg[section][key] = _coerce_env(value, default_value)
                except (ValueError, AttributeError) as e:
                    logger.warning(
                        "Invalid value for environment variable {}: '{}' - {}", env_var, value, e
                    )
                    logger.info("Using default value: {}", cfg[section][key])

    return cfg
