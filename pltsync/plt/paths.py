"""PLT and warnings-file path derivation."""

from pathlib import Path

from pltsync.utils.constants import PLT_SUFFIX, WARNINGS_FILE_SUFFIX

LOCAL = "local"
GLOBAL = "global"


def plt_name(prefix: str, otp_release: str) -> str:
    """PLT file name, e.g. ``rebar3_26_plt``."""
    return f"{prefix}_{otp_release}{PLT_SUFFIX}"


def _resolve_location(location: str | Path, keyword: str, keyword_dir: Path) -> Path:
    if isinstance(location, str) and location == keyword:
        return keyword_dir
    return Path(location).expanduser()


def project_plt_path(
    prefix: str, location: str | Path, base_dir: Path, otp_release: str
) -> Path:
    """Project PLT: ``local`` means the project base directory."""
    directory = _resolve_location(location, LOCAL, base_dir)
    return directory / plt_name(prefix, otp_release)


def base_plt_path(
    prefix: str, location: str | Path, global_cache_dir: Path, otp_release: str
) -> Path:
    """Base PLT: ``global`` means the shared per-user cache directory."""
    directory = _resolve_location(location, GLOBAL, global_cache_dir)
    return directory / plt_name(prefix, otp_release)


def warnings_file_path(base_dir: Path, otp_release: str) -> Path:
    """Warnings report, e.g. ``_build/default/26.dialyzer_warnings``."""
    return base_dir / f"{otp_release}{WARNINGS_FILE_SUFFIX}"
