"""JSON task-list documents.

A document is either a bare JSON array of tasks or an object with a
``tasks`` array and optional ``project``, ``metadata`` and ``created_at``
keys, which is exactly what ``dump_task_list`` writes. Every task needs
``content``; all other fields are optional.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import TaskListLoadError
from .task_list import TaskList
from .task_model import ProjectContext, Task, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)


class TaskGatesDocument(BaseModel):
    model_config = {"extra": "forbid"}

    actionability_check: bool = False
    completeness_check: bool = False
    complexity_check: bool = False
    time_estimate_check: bool = False
    custom_checks: dict[str, bool] = Field(default_factory=dict)


class TaskDocument(BaseModel):
    """One task as stored in a document."""

    model_config = {"extra": "forbid"}

    content: str
    id: str | None = None
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    estimated_hours: float | None = Field(default=None, gt=0)
    dependencies: list[str] = Field(default_factory=list)
    quality_gates: TaskGatesDocument = Field(default_factory=TaskGatesDocument)
    tags: list[str] = Field(default_factory=list)
    assignee: str | None = None
    due_date: datetime | None = None
    created_at: datetime | None = None
    custom_fields: dict[str, Any] = Field(default_factory=dict)

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str | None) -> str | None:
        """Validate an explicit id is not empty or whitespace."""
        if v is not None and not v.strip():
            raise ValueError("id must not be empty or whitespace")
        return v


class ProjectDocument(BaseModel):
    model_config = {"extra": "forbid"}

    name: str
    description: str | None = None
    project_type: str | None = None
    stakeholders: list[str] = Field(default_factory=list)
    tech_stack: list[str] = Field(default_factory=list)
    budget_hours: float | None = Field(default=None, ge=0)


class TaskListDocument(BaseModel):
    """A whole task-list document.

    Stored metadata is not trusted: only ``custom_metadata`` and
    ``template_version`` are read from it, everything else is recomputed.
    """

    model_config = {"extra": "forbid"}

    tasks: list[TaskDocument] = Field(default_factory=list)
    project: ProjectDocument | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None

    def to_task_list(self) -> TaskList:
        task_list = TaskList(
            tasks=[Task.from_dict(task.model_dump(mode="json")) for task in self.tasks]
        )
        if self.project is not None:
            task_list.project = ProjectContext.from_dict(self.project.model_dump())
        if self.created_at is not None:
            task_list.created_at = self.created_at
        if "template_version" in self.metadata:
            task_list.metadata.template_version = str(self.metadata["template_version"])
        task_list.metadata.custom_metadata = dict(self.metadata.get("custom_metadata", {}))
        task_list.refresh_metadata()
        return task_list


def _format_errors(error: ValidationError) -> list[str]:
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "document"
        messages.append(f"{location}: {item['msg']}")
    return messages


def load_task_list(source: str | Path) -> TaskList:
    """Load a task list from a JSON file or a JSON string.

    Args:
        source: A Path to a JSON file, or the JSON text itself.

    Returns:
        The TaskList, with metadata fully refreshed.

    Raises:
        FileNotFoundError: If ``source`` is a Path that does not exist.
        TaskListLoadError: If the JSON is malformed or any task is invalid.
            ``errors`` lists every problem found.
    """
    if isinstance(source, Path):
        if not source.exists():
            raise FileNotFoundError(f"Task list not found: {source}")
        text = source.read_text(encoding="utf-8")
        origin = str(source)
    else:
        text = source
        origin = "<string>"

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise TaskListLoadError(f"Invalid JSON in {origin}: {e}", [str(e)]) from e

    if isinstance(raw, list):
        raw = {"tasks": raw}

    try:
        document = TaskListDocument.model_validate(raw)
    except ValidationError as e:
        errors = _format_errors(e)
        raise TaskListLoadError(
            f"Invalid task list in {origin}: {len(errors)} error(s)", errors
        ) from e

    task_list = document.to_task_list()
    logger.debug(f"Loaded {len(task_list)} task(s) from {origin}")
    return task_list


def dump_task_list(task_list: TaskList, indent: int = 2) -> str:
    """Serialize a task list to JSON that ``load_task_list`` reads back."""
    return json.dumps(task_list.to_dict(), indent=indent)
