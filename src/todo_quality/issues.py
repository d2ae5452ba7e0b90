"""Validation issue value types.

A ValidationIssue is produced by the validators and never stored on a
task. Its severity decides propagation: any ERROR makes a task list
invalid, while WARNING and INFO issues are advisory.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class IssueSeverity(Enum):
    """How strongly an issue affects validity."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    def __str__(self) -> str:
        return self.value.upper()


class IssueCategory(Enum):
    """Which aspect of a task or list an issue concerns."""

    ACTIONABILITY = "actionability"
    COMPLETENESS = "completeness"
    COMPLEXITY = "complexity"
    TIME_ESTIMATE = "time_estimate"
    DEPENDENCIES = "dependencies"
    STRUCTURE = "structure"
    QUALITY_GATE = "quality_gate"

    def __str__(self) -> str:
        return self.value.replace("_", " ").title()


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation finding.

    Attributes:
        severity: ERROR blocks validity; WARNING and INFO do not.
        category: Aspect the issue concerns.
        message: Human-readable description.
        task_id: Task the issue refers to, None for list-wide issues.
        suggestion: Optional one-line fix.
    """

    severity: IssueSeverity
    category: IssueCategory
    message: str
    task_id: str | None = None
    suggestion: str | None = None

    @property
    def is_blocking(self) -> bool:
        return self.severity is IssueSeverity.ERROR

    def __str__(self) -> str:
        prefix = f"[{self.severity}] {self.category}"
        if self.task_id is not None:
            prefix += f" ({self.task_id})"
        return f"{prefix}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity.value,
            "category": self.category.value,
            "task_id": self.task_id,
            "message": self.message,
            "suggestion": self.suggestion,
        }
