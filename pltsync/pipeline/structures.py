"""Data contracts for a dialyzer run."""
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class TaskStatus(Enum):
    """Status of one backend phase."""
    SUCCESS = "success"
    FAILED = "failed"


class RunStatus(Enum):
    """Overall outcome of a run."""
    SUCCESS = "success"
    WARNINGS = "warnings"
    FAILED = "failed"


@dataclass
class PhaseResult:
    """One backend invocation: which analysis, on which PLT, with what outcome.

    JSON-serializable for machine consumption.
    """
    name: str
    plt: str
    files: int
    status: TaskStatus = TaskStatus.SUCCESS
    elapsed: float = 0.0
    warnings: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        d = asdict(self)
        d['status'] = self.status.value
        return d

    @property
    def success(self) -> bool:
        """True if the phase completed."""
        return self.status == TaskStatus.SUCCESS


@dataclass
class RunResult:
    """Outcome of a whole run, returned instead of raised.

    ``error`` is set for FAILED runs and holds the fatal error that stopped
    the pipeline.
    """
    status: RunStatus
    warnings: int = 0
    output: Path | None = None
    error: Exception | None = None
    phases: list[PhaseResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.status == RunStatus.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "warnings": self.warnings,
            "output": str(self.output) if self.output else None,
            "error": str(self.error) if self.error else None,
            "phases": [p.to_dict() for p in self.phases],
        }
