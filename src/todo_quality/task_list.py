"""Ordered task collection with cached aggregate metadata.

TaskList.metadata is a cache that is always recomputable from ``tasks``.
``add`` refreshes it cheaply without cycle detection, so bulk construction
never validates the graph on every append; ``refresh_metadata`` runs the
full refresh including cycle detection. Code that mutates ``tasks``
directly must call ``refresh_metadata`` afterwards.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from . import dep_graph
from .dep_graph import CycleCheck
from .task_model import ProjectContext, Task, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

TEMPLATE_VERSION = "1.0.0"


@dataclass
class TaskListMetadata:
    """Aggregate figures derived from a task list.

    Attributes:
        total_count: Number of tasks.
        status_counts: Tasks per status (only statuses present).
        priority_counts: Tasks per priority (only priorities present).
        total_estimated_hours: Sum of present estimates.
        avg_estimated_hours: total_estimated_hours over total_count.
        completion_percentage: Completed tasks over total, in [0, 1].
        dependency_graph_valid: False only when a cycle check found one.
        dependency_graph_checked: Whether the flag above comes from an
            actual cycle check rather than the cheap refresh.
        template_version: Version tag of the list schema.
        custom_metadata: Caller-supplied extra data, carried over on refresh.
    """

    total_count: int = 0
    status_counts: dict[TaskStatus, int] = field(default_factory=dict)
    priority_counts: dict[TaskPriority, int] = field(default_factory=dict)
    total_estimated_hours: float = 0.0
    avg_estimated_hours: float = 0.0
    completion_percentage: float = 0.0
    dependency_graph_valid: bool = True
    dependency_graph_checked: bool = False
    template_version: str = TEMPLATE_VERSION
    custom_metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_count": self.total_count,
            "status_counts": {status.value: n for status, n in self.status_counts.items()},
            "priority_counts": {priority.value: n for priority, n in self.priority_counts.items()},
            "total_estimated_hours": self.total_estimated_hours,
            "avg_estimated_hours": self.avg_estimated_hours,
            "completion_percentage": self.completion_percentage,
            "dependency_graph_valid": self.dependency_graph_valid,
            "dependency_graph_checked": self.dependency_graph_checked,
            "template_version": self.template_version,
            "custom_metadata": dict(self.custom_metadata),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskListMetadata:
        return cls(
            total_count=int(data.get("total_count", 0)),
            status_counts={
                TaskStatus(key): int(n) for key, n in data.get("status_counts", {}).items()
            },
            priority_counts={
                TaskPriority(key): int(n) for key, n in data.get("priority_counts", {}).items()
            },
            total_estimated_hours=float(data.get("total_estimated_hours", 0.0)),
            avg_estimated_hours=float(data.get("avg_estimated_hours", 0.0)),
            completion_percentage=float(data.get("completion_percentage", 0.0)),
            dependency_graph_valid=bool(data.get("dependency_graph_valid", True)),
            dependency_graph_checked=bool(data.get("dependency_graph_checked", False)),
            template_version=str(data.get("template_version", TEMPLATE_VERSION)),
            custom_metadata=dict(data.get("custom_metadata", {})),
        )


@dataclass
class TaskList:
    """Ordered collection of tasks plus derived metadata.

    Insertion order matters for display and for which duplicate gets
    reported, never for graph semantics.
    """

    tasks: list[Task] = field(default_factory=list)
    metadata: TaskListMetadata = field(default_factory=TaskListMetadata)
    project: ProjectContext | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __len__(self) -> int:
        return len(self.tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self.tasks)

    def add(self, task: Task) -> None:
        """Append a task and refresh the cheap metadata.

        Cycle detection is skipped: ``dependency_graph_valid`` is assumed
        True and ``dependency_graph_checked`` is cleared until the next
        ``refresh_metadata``.
        """
        self.tasks.append(task)
        self._update_metadata(check_cycles=False)

    def refresh_metadata(self) -> TaskListMetadata:
        """Recompute all metadata from ``tasks``, including cycle detection.

        Returns:
            The refreshed metadata.
        """
        self._update_metadata(check_cycles=True)
        return self.metadata

    def _update_metadata(self, *, check_cycles: bool) -> None:
        total = len(self.tasks)
        status_counts = dict(Counter(task.status for task in self.tasks))
        priority_counts = dict(Counter(task.priority for task in self.tasks))
        total_hours = sum(
            task.estimated_hours for task in self.tasks if task.estimated_hours is not None
        )
        completed = status_counts.get(TaskStatus.COMPLETED, 0)

        if check_cycles:
            graph_valid = self.validate_dependencies().is_acyclic
        else:
            graph_valid = True

        self.metadata = TaskListMetadata(
            total_count=total,
            status_counts=status_counts,
            priority_counts=priority_counts,
            total_estimated_hours=float(total_hours),
            avg_estimated_hours=total_hours / total if total else 0.0,
            completion_percentage=completed / total if total else 0.0,
            dependency_graph_valid=graph_valid,
            dependency_graph_checked=check_cycles,
            template_version=self.metadata.template_version,
            custom_metadata=self.metadata.custom_metadata,
        )

    def validate_dependencies(self) -> CycleCheck:
        """Check the dependency graph for cycles (see ``dep_graph``)."""
        return dep_graph.validate_dependencies(self.tasks)

    def critical_path(self) -> list[str]:
        """Return the ids along one longest dependency chain."""
        return dep_graph.critical_path(self.tasks)

    def get(self, task_id: str) -> Task | None:
        """Return the first task with ``task_id``, or None."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def tasks_by_status(self, status: TaskStatus) -> list[Task]:
        return [task for task in self.tasks if task.status == status]

    def tasks_by_priority(self, priority: TaskPriority) -> list[Task]:
        return [task for task in self.tasks if task.priority == priority]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary, round-tripping via from_dict."""
        return {
            "tasks": [task.to_dict() for task in self.tasks],
            "metadata": self.metadata.to_dict(),
            "project": self.project.to_dict() if self.project else None,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskList:
        """Rebuild a TaskList from ``to_dict`` output.

        Metadata is recomputed from the tasks with a full refresh; only
        the stored template_version and custom_metadata are kept.
        """
        task_list = cls(tasks=[Task.from_dict(item) for item in data.get("tasks", [])])
        if data.get("project"):
            task_list.project = ProjectContext.from_dict(data["project"])
        if data.get("created_at"):
            task_list.created_at = datetime.fromisoformat(data["created_at"])
        stored = data.get("metadata") or {}
        if "template_version" in stored:
            task_list.metadata.template_version = str(stored["template_version"])
        task_list.metadata.custom_metadata = dict(stored.get("custom_metadata", {}))
        task_list.refresh_metadata()
        return task_list
