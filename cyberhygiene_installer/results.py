# Path and File Name : /home/cyberhygiene/installer/cyberhygiene_installer/results.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Module outcomes and the run result aggregated across modules and checks

"""
Run Results

ModuleOutcome: what one module's action reported (Success / Failed / Skipped).
RunRecorder:   mutable accumulator used while modules and checks execute.
RunResult:     immutable aggregate produced once by RunRecorder.finalize().
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ModuleStatus(Enum):
    """Module outcome states."""
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ModuleOutcome:
    """Outcome reported by a module action."""
    status: ModuleStatus
    reason: str = ''
    verification: Optional['RunResult'] = None

    @classmethod
    def success(cls, verification: Optional['RunResult'] = None) -> 'ModuleOutcome':
        return cls(ModuleStatus.SUCCESS, verification=verification)

    @classmethod
    def failed(cls, reason: str, verification: Optional['RunResult'] = None) -> 'ModuleOutcome':
        return cls(ModuleStatus.FAILED, reason=reason, verification=verification)

    @classmethod
    def skipped(cls, reason: str) -> 'ModuleOutcome':
        return cls(ModuleStatus.SKIPPED, reason=reason)

    @property
    def succeeded(self) -> bool:
        return self.status == ModuleStatus.SUCCESS


@dataclass(frozen=True)
class ModuleRecord:
    """Recorded outcome of one module in a run."""
    priority: int
    name: str
    outcome: ModuleOutcome


@dataclass(frozen=True)
class RunResult:
    """Aggregate of one orchestration pass. Immutable."""
    started_at: datetime
    finished_at: datetime
    checks_passed: int = 0
    checks_failed: int = 0
    failure_labels: Tuple[str, ...] = ()
    warning_labels: Tuple[str, ...] = ()
    module_records: Tuple[ModuleRecord, ...] = ()

    @property
    def total_checks(self) -> int:
        return self.checks_passed + self.checks_failed

    @property
    def modules_succeeded(self) -> bool:
        return all(
            record.outcome.status == ModuleStatus.SUCCESS for record in self.module_records
        )

    @property
    def succeeded(self) -> bool:
        return self.modules_succeeded and self.checks_failed == 0

    @property
    def exit_status(self) -> int:
        return 0 if self.succeeded else 1

    def to_dict(self) -> Dict[str, Any]:
        """Machine-readable form of the result."""
        return {
            'started_at': self.started_at.isoformat(),
            'finished_at': self.finished_at.isoformat(),
            'succeeded': self.succeeded,
            'exit_status': self.exit_status,
            'checks': {
                'total': self.total_checks,
                'passed': self.checks_passed,
                'failed': self.checks_failed,
            },
            'failures': list(self.failure_labels),
            'warnings': list(self.warning_labels),
            'modules': [
                {
                    'priority': record.priority,
                    'name': record.name,
                    'status': record.outcome.status.value,
                    'reason': record.outcome.reason,
                }
                for record in self.module_records
            ],
        }


class RunRecorder:
    """Accumulates module and check outcomes until finalized."""

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._clock = clock
        self.started_at = clock()
        self.checks_passed = 0
        self.checks_failed = 0
        self.failure_labels: List[str] = []
        self.warning_labels: List[str] = []
        self.module_records: List[ModuleRecord] = []
        self._result: Optional[RunResult] = None

    def _ensure_open(self) -> None:
        if self._result is not None:
            raise RuntimeError("run result already finalized")

    def record_module(self, priority: int, name: str, outcome: ModuleOutcome) -> None:
        self._ensure_open()
        self.module_records.append(ModuleRecord(priority, name, outcome))
        if outcome.verification is not None:
            self.merge_checks(outcome.verification)

    def record_pass(self) -> None:
        self._ensure_open()
        self.checks_passed += 1

    def record_failure(self, label: str) -> None:
        self._ensure_open()
        self.checks_failed += 1
        self.failure_labels.append(label)

    def record_warning(self, label: str) -> None:
        self._ensure_open()
        self.warning_labels.append(label)

    def merge_checks(self, other: RunResult) -> None:
        """Fold the check counts of a verifier result into this run."""
        self._ensure_open()
        self.checks_passed += other.checks_passed
        self.checks_failed += other.checks_failed
        self.failure_labels.extend(other.failure_labels)
        self.warning_labels.extend(other.warning_labels)

    def finalize(self) -> RunResult:
        """Freeze the accumulated state. Can be called once."""
        self._ensure_open()
        self._result = RunResult(
            started_at=self.started_at,
            finished_at=self._clock(),
            checks_passed=self.checks_passed,
            checks_failed=self.checks_failed,
            failure_labels=tuple(self.failure_labels),
            warning_labels=tuple(self.warning_labels),
            module_records=tuple(self.module_records),
        )
        return self._result
