"""Erlang/OTP runtime discovery.

The OTP release names PLT and warnings files; the OTP root locates the
runtime's own applications (``<root>/lib/<app>-<vsn>/ebin``). Both can be
pinned in configuration, otherwise ``erl`` is asked once.
"""

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from pltsync.errors import BackendError
from pltsync.utils.logging import logger

_PROBE = (
    'io:format("~s~n~s~n", '
    "[erlang:system_info(otp_release), code:root_dir()]), "
    "halt()."
)


@dataclass(frozen=True)
class Runtime:
    """The Erlang runtime analysis runs against."""

    otp_release: str
    root_dir: Path

    @property
    def lib_dir(self) -> Path:
        return self.root_dir / "lib"


def probe_runtime(erl: str = "erl", timeout: int | None = 30) -> Runtime:
    """Ask ``erl`` for its release and root directory."""
    erl_bin = shutil.which(erl)
    if erl_bin is None:
        raise BackendError(f"Erlang runtime '{erl}' not found on PATH")

    cmd = [erl_bin, "-noshell", "-eval", _PROBE]
    logger.debug("Probing runtime: {}", cmd)
    try:
        proc = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        raise BackendError(f"Erlang runtime probe timed out after {timeout}s") from e

    lines = [line.strip() for line in proc.stdout.splitlines() if line.strip()]
    if proc.returncode != 0 or len(lines) < 2:
        raise BackendError(
            f"Could not determine OTP release from '{erl}': {proc.stderr.strip() or proc.stdout.strip()}"
        )
    return Runtime(otp_release=lines[0], root_dir=Path(lines[1]))


def resolve_runtime(
    otp_release: str = "", otp_root: str = "", erl: str = "erl", timeout: int | None = 30
) -> Runtime:
    """Use configured values where given, probe ``erl`` for the rest."""
    if otp_release and otp_root:
        return Runtime(otp_release=otp_release, root_dir=Path(otp_root).expanduser())

    probed = probe_runtime(erl, timeout=timeout)
    return Runtime(
        otp_release=otp_release or probed.otp_release,
        root_dir=Path(otp_root).expanduser() if otp_root else probed.root_dir,
    )
