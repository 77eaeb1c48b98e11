"""Centralized exit codes for the pltsync CLI."""


class ExitCodes:
    """Standard exit codes for pltsync CLI commands."""

    SUCCESS = 0

    WARNINGS = 1

    FATAL_ERROR = 2

    INTERRUPTED = 130

    @classmethod
    def get_description(cls, code: int) -> str:
        """Get human-readable description for an exit code."""
        descriptions = {
            cls.SUCCESS: "Success - No warnings",
            cls.WARNINGS: "Analysis completed but dialyzer reported warnings",
            cls.FATAL_ERROR: "Run aborted by a fatal error",
            cls.INTERRUPTED: "Run interrupted by user",
        }
        return descriptions.get(code, f"Unknown exit code: {code}")
