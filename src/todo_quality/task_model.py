"""Data model for tasks in a todo list.

A Task is one unit of work: a short imperative description plus status,
priority, an optional time estimate and the ids of the tasks it depends on.
Construction only fills in defaults; every quality judgement lives in the
validators, and the heuristics here are pure functions of ``content`` and
``status``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

from .policy import DEFAULT_POLICY, KeywordPolicy

if TYPE_CHECKING:
    from .config import QualityConfig


class TaskStatus(Enum):
    """Lifecycle status of a task."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value


# Progress contributed by each status; a pure function of status only
_STATUS_PROGRESS: dict[TaskStatus, float] = {
    TaskStatus.PENDING: 0.0,
    TaskStatus.BLOCKED: 0.0,
    TaskStatus.IN_PROGRESS: 0.5,
    TaskStatus.COMPLETED: 1.0,
    TaskStatus.CANCELLED: 0.0,
}


class TaskPriority(Enum):
    """Task priority, totally ordered LOW < MEDIUM < HIGH < CRITICAL."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Position in the priority ordering, LOW being 0."""
        return _PRIORITY_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, TaskPriority):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, TaskPriority):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, TaskPriority):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, TaskPriority):
            return NotImplemented
        return self.rank >= other.rank

    def __str__(self) -> str:
        return self.value


_PRIORITY_RANK: dict[TaskPriority, int] = {
    priority: rank for rank, priority in enumerate(TaskPriority)
}


def generate_task_id() -> str:
    """Return a fresh random task id (UUID4)."""
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TaskQualityGates:
    """Cached outcome of the last per-task quality evaluation.

    These flags are a cache for display and reporting. Validity is always
    recomputed by the validators and never read from here.
    """

    actionability_check: bool = False
    completeness_check: bool = False
    complexity_check: bool = False
    time_estimate_check: bool = False
    custom_checks: dict[str, bool] = field(default_factory=dict)

    def all_passed(self) -> bool:
        """Return True if the four built-in checks and all custom checks passed."""
        return (
            self.actionability_check
            and self.completeness_check
            and self.complexity_check
            and self.time_estimate_check
            and all(self.custom_checks.values())
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "actionability_check": self.actionability_check,
            "completeness_check": self.completeness_check,
            "complexity_check": self.complexity_check,
            "time_estimate_check": self.time_estimate_check,
            "custom_checks": dict(self.custom_checks),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskQualityGates:
        return cls(
            actionability_check=bool(data.get("actionability_check", False)),
            completeness_check=bool(data.get("completeness_check", False)),
            complexity_check=bool(data.get("complexity_check", False)),
            time_estimate_check=bool(data.get("time_estimate_check", False)),
            custom_checks=dict(data.get("custom_checks", {})),
        )


@dataclass
class Task:
    """A single unit of work in a todo list.

    Attributes:
        content: Human-readable description, ideally 10-100 characters and
            starting with an action verb.
        id: Opaque unique identifier, random UUID4 unless supplied.
        status: Current lifecycle status.
        priority: Priority level.
        estimated_hours: Optional estimate; policy bounds it to 0.5-40h.
        dependencies: Ids of tasks that must finish first. Duplicates are
            allowed by the model but reported as a quality issue.
        quality_gates: Cached result of the last quality evaluation.
        tags: Free-text labels, usually derived from content.
        assignee: Optional owner.
        due_date: Optional deadline.
        created_at: Creation timestamp (UTC).
        custom_fields: Arbitrary extra data carried through serialization.
    """

    content: str
    id: str = field(default_factory=generate_task_id)
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    estimated_hours: float | None = None
    dependencies: list[str] = field(default_factory=list)
    quality_gates: TaskQualityGates = field(default_factory=TaskQualityGates)
    tags: list[str] = field(default_factory=list)
    assignee: str | None = None
    due_date: datetime | None = None
    created_at: datetime = field(default_factory=_utcnow)
    custom_fields: dict[str, Any] = field(default_factory=dict)

    def is_actionable(self, policy: KeywordPolicy = DEFAULT_POLICY) -> bool:
        """Check whether the content starts with an action verb (case-insensitive)."""
        return policy.is_actionable(self.content)

    def has_valid_length(self, min_chars: int, max_chars: int) -> bool:
        """Check whether the content length lies in ``[min_chars, max_chars]``."""
        return min_chars <= len(self.content) <= max_chars

    def complexity_score(self, policy: KeywordPolicy = DEFAULT_POLICY) -> int:
        """Estimate complexity on a 1-10 scale from the content wording."""
        return policy.complexity_score(self.content)

    def has_reasonable_estimate(self, min_hours: float, max_hours: float) -> bool:
        """Check whether an estimate exists and lies in ``[min_hours, max_hours]``."""
        if self.estimated_hours is None:
            return False
        return min_hours <= self.estimated_hours <= max_hours

    def progress(self) -> float:
        """Return progress in [0, 1]: 0.5 while in progress, 1.0 when completed."""
        return _STATUS_PROGRESS[self.status]

    def derive_tags(self, policy: KeywordPolicy = DEFAULT_POLICY) -> list[str]:
        """Replace ``tags`` with keywords found in the content and return them."""
        self.tags = policy.matched_keywords(self.content)
        return self.tags

    def refresh_quality_gates(
        self, config: QualityConfig, policy: KeywordPolicy = DEFAULT_POLICY
    ) -> TaskQualityGates:
        """Recompute the cached quality-gate flags against ``config``.

        Custom checks are preserved untouched.

        Returns:
            The updated TaskQualityGates.
        """
        min_chars, max_chars = config.content_char_bounds
        min_hours, max_hours = config.estimated_hours_bounds

        gates = self.quality_gates
        gates.actionability_check = self.is_actionable(policy)
        gates.completeness_check = self.has_valid_length(min_chars, max_chars) and (
            not config.require_specific_actions or policy.find_vague_term(self.content) is None
        )
        gates.complexity_check = self.complexity_score(policy) <= config.complexity_ceiling
        if self.estimated_hours is None:
            gates.time_estimate_check = not config.require_time_estimates
        else:
            gates.time_estimate_check = self.has_reasonable_estimate(min_hours, max_hours)
        return gates

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary.

        Returns:
            Dictionary containing all task fields; round-trips through
            ``Task.from_dict``.
        """
        return {
            "id": self.id,
            "content": self.content,
            "status": self.status.value,
            "priority": self.priority.value,
            "estimated_hours": self.estimated_hours,
            "dependencies": list(self.dependencies),
            "quality_gates": self.quality_gates.to_dict(),
            "tags": list(self.tags),
            "assignee": self.assignee,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "created_at": self.created_at.isoformat(),
            "custom_fields": dict(self.custom_fields),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """Rebuild a Task from ``to_dict`` output.

        Missing optional keys fall back to the constructor defaults; an
        absent ``id`` gets a fresh one.
        """
        task = cls(content=data["content"])
        if data.get("id"):
            task.id = str(data["id"])
        task.status = TaskStatus(data.get("status", TaskStatus.PENDING.value))
        task.priority = TaskPriority(data.get("priority", TaskPriority.MEDIUM.value))
        hours = data.get("estimated_hours")
        task.estimated_hours = float(hours) if hours is not None else None
        task.dependencies = [str(dep) for dep in data.get("dependencies", [])]
        task.quality_gates = TaskQualityGates.from_dict(data.get("quality_gates", {}))
        task.tags = [str(tag) for tag in data.get("tags", [])]
        task.assignee = data.get("assignee")
        if data.get("due_date"):
            task.due_date = datetime.fromisoformat(data["due_date"])
        if data.get("created_at"):
            task.created_at = datetime.fromisoformat(data["created_at"])
        task.custom_fields = dict(data.get("custom_fields", {}))
        return task


def new_task(content: str, **overrides: Any) -> Task:
    """Create a task with default fields and a fresh unique id.

    Args:
        content: Task description.
        **overrides: Any other Task field to set at creation.

    Returns:
        The new Task.
    """
    return Task(content=content, **overrides)


@dataclass
class ProjectContext:
    """Optional project information attached to a task list."""

    name: str
    description: str | None = None
    project_type: str | None = None
    stakeholders: list[str] = field(default_factory=list)
    tech_stack: list[str] = field(default_factory=list)
    budget_hours: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "project_type": self.project_type,
            "stakeholders": list(self.stakeholders),
            "tech_stack": list(self.tech_stack),
            "budget_hours": self.budget_hours,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProjectContext:
        return cls(
            name=data["name"],
            description=data.get("description"),
            project_type=data.get("project_type"),
            stakeholders=list(data.get("stakeholders", [])),
            tech_stack=list(data.get("tech_stack", [])),
            budget_hours=data.get("budget_hours"),
        )
