"""Run data contracts and console UI."""
from .structures import PhaseResult, RunResult, RunStatus, TaskStatus
from .ui import console, print_error, print_status_panel, print_success, print_warning

__all__ = [
    "PhaseResult", "RunResult", "RunStatus", "TaskStatus",
    "console", "print_error", "print_warning", "print_success", "print_status_panel",
]
