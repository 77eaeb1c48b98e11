"""Logging setup for pltsync, built on Loguru.

Every module logs through the shared ``logger`` exported here. Warning lines
produced by the analysis backend are not log records; they go to the console
sink and the warnings file (see ``pltsync.reporter``).

Usage:
    from pltsync.utils.logging import logger
    logger.info("Updating plt...")
    logger.debug("Running dialyzer with options: {}", opts)

Environment Variables:
    PLTSYNC_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: INFO)
    PLTSYNC_LOG_JSON: 0|1 (default: 0, human-readable on stderr)
    PLTSYNC_LOG_FILE: path to an NDJSON log file (optional)
"""

import json
import os
import sys
from pathlib import Path

from loguru import logger

logger.remove()

# Pino-compatible numeric levels
PINO_LEVELS = {
    "TRACE": 10,
    "DEBUG": 20,
    "INFO": 30,
    "SUCCESS": 30,
    "WARNING": 40,
    "ERROR": 50,
    "CRITICAL": 60,
}

_log_level = os.environ.get("PLTSYNC_LOG_LEVEL", "INFO").upper()
_json_mode = os.environ.get("PLTSYNC_LOG_JSON", "0") == "1"
_log_file = os.environ.get("PLTSYNC_LOG_FILE")


def _to_pino(record) -> str:
    """Render a loguru record as one NDJSON line."""
    entry = {
        "level": PINO_LEVELS.get(record["level"].name, 30),
        "time": int(record["time"].timestamp() * 1000),
        "msg": record["message"],
        "pid": record["process"].id,
        "module": record["name"],
    }
    for key, value in record["extra"].items():
        entry[key] = value
    if record["exception"]:
        exc = record["exception"]
        entry["err"] = {
            "type": exc.type.__name__ if exc.type else "Error",
            "message": str(exc.value) if exc.value else "",
        }
    return json.dumps(entry, default=str)


def pino_stdout_sink(message):
    """Write Pino-format JSON to stdout.

    Never call logger.* inside a sink, it recurses.
    """
    sys.stdout.write(_to_pino(message.record) + "\n")
    sys.stdout.flush()


_human_format = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - "
    "<level>{message}</level>"
)

logger.level("DEBUG", color="<blue>")
logger.level("INFO", color="<white>")
logger.level("WARNING", color="<yellow>")
logger.level("ERROR", color="<red>")

if _json_mode:
    logger.add(pino_stdout_sink, level=_log_level, colorize=False)
else:
    logger.add(
        sys.stderr,
        level=_log_level,
        format=_human_format,
        colorize=None,  # colors on a TTY, plain when piped
    )

if _log_file:

    def _file_pino_sink(message):
        with open(_log_file, "a", encoding="utf-8") as f:
            f.write(_to_pino(message.record) + "\n")

    logger.add(_file_pino_sink, level="DEBUG")


def configure_file_logging(log_dir: Path, level: str = "DEBUG") -> int:
    """Add a rotating human-readable log file under ``log_dir``.

    Args:
        log_dir: Directory for log files (e.g., Path(".pf"))
        level: Minimum log level for file output

    Returns:
        The loguru handler id, for ``logger.remove()``
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    return logger.add(
        log_dir / "pltsync.log",
        rotation="10 MB",
        retention="7 days",
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
    )


__all__ = ["logger", "configure_file_logging"]
