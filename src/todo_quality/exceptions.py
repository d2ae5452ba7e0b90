"""Exceptions for the todo-quality package.

Validation findings (issues, dependency cycles, failed gates) are returned
as values. Exceptions are reserved for inputs that cannot be processed at
all: malformed configuration and unreadable task-list documents.
"""

from __future__ import annotations


class TodoQualityError(Exception):
    """Base exception for all todo-quality errors."""

    pass


class ConfigError(TodoQualityError, ValueError):
    """Raised when a quality configuration is internally inconsistent.

    This exception is raised when:
    - A minimum bound is greater than its maximum
    - A limit that must be positive is zero or negative
    - The complexity ceiling lies outside the 1-10 scoring range
    - A TOML config file is corrupt or has unknown keys
    - A config value has the wrong type
    """

    pass


class TaskListLoadError(TodoQualityError):
    """Raised when a task-list document cannot be parsed.

    Attributes:
        errors: Every problem found in the document, one message each.
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)
