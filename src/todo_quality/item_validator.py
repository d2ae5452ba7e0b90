"""Per-task quality validation.

Public API:
    - TaskValidator: Evaluates one task against a QualityConfig
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from .config import DEFAULT_QUALITY_CONFIG, QualityConfig
from .issues import IssueCategory, IssueSeverity, ValidationIssue
from .policy import DEFAULT_POLICY, KeywordPolicy

if TYPE_CHECKING:
    from .task_model import Task

logger = logging.getLogger(__name__)


class TaskValidator:
    """Validates a single task against configured quality rules.

    Checks, each evaluated independently:
    - Content starts with an action verb (ERROR)
    - Content length within min/max characters (WARNING)
    - Complexity score under the configured maximum (ERROR)
    - Time estimate present when required (ERROR)
    - Time estimate not below the minimum (WARNING) nor above the maximum (ERROR)
    - No generic, vague wording when specific actions are required (WARNING)

    Example:
        >>> validator = TaskValidator(QualityConfig())
        >>> issues = validator.validate(task)
        >>> errors = [i for i in issues if i.is_blocking]
    """

    def __init__(
        self,
        config: QualityConfig = DEFAULT_QUALITY_CONFIG,
        policy: KeywordPolicy = DEFAULT_POLICY,
    ) -> None:
        """Initialize the validator.

        Args:
            config: Thresholds to validate against.
            policy: Keyword tables for the content heuristics.
        """
        self.config = config
        self.policy = policy

    def validate(self, task: Task) -> list[ValidationIssue]:
        """Validate one task.

        The task is never modified.

        Args:
            task: The task to validate.

        Returns:
            Every issue found, in check order; empty if the task is clean.
        """
        issues: list[ValidationIssue] = []
        issues.extend(self._check_actionability(task))
        issues.extend(self._check_length(task))
        issues.extend(self._check_complexity(task))
        issues.extend(self._check_time_estimate(task))
        issues.extend(self._check_vague_language(task))

        if issues:
            logger.debug(f"Task {task.id} produced {len(issues)} issue(s)")
        return issues

    def validate_all(self, tasks: Iterable[Task]) -> dict[str, list[ValidationIssue]]:
        """Validate each task, keyed by task id.

        Tasks sharing an id have their issues merged under that id.
        """
        results: dict[str, list[ValidationIssue]] = {}
        for task in tasks:
            results.setdefault(task.id, []).extend(self.validate(task))
        return results

    def _check_actionability(self, task: Task) -> list[ValidationIssue]:
        if task.is_actionable(self.policy):
            return []
        return [
            ValidationIssue(
                severity=IssueSeverity.ERROR,
                category=IssueCategory.ACTIONABILITY,
                task_id=task.id,
                message=f"Todo '{task.content}' is not actionable - should start with action verb",
                suggestion="Start with verbs like 'implement', 'create', 'add', 'fix', etc.",
            )
        ]

    def _check_length(self, task: Task) -> list[ValidationIssue]:
        min_chars, max_chars = self.config.content_char_bounds
        length = len(task.content)

        if length < min_chars:
            return [
                ValidationIssue(
                    severity=IssueSeverity.WARNING,
                    category=IssueCategory.COMPLETENESS,
                    task_id=task.id,
                    message=f"Todo content too short: {length} chars (min {min_chars})",
                    suggestion="Add more specific details about what needs to be done",
                )
            ]
        if length > max_chars:
            return [
                ValidationIssue(
                    severity=IssueSeverity.WARNING,
                    category=IssueCategory.COMPLETENESS,
                    task_id=task.id,
                    message=f"Todo content too long: {length} chars (max {max_chars})",
                    suggestion="Break this into smaller, more focused tasks",
                )
            ]
        return []

    def _check_complexity(self, task: Task) -> list[ValidationIssue]:
        if self.config.max_complexity is None:
            return []
        score = task.complexity_score(self.policy)
        if score <= self.config.max_complexity:
            return []
        return [
            ValidationIssue(
                severity=IssueSeverity.ERROR,
                category=IssueCategory.COMPLEXITY,
                task_id=task.id,
                message=f"Todo complexity {score} exceeds maximum {self.config.max_complexity}",
                suggestion="Break this complex task into simpler subtasks",
            )
        ]

    def _check_time_estimate(self, task: Task) -> list[ValidationIssue]:
        hours = task.estimated_hours
        if hours is None:
            if not self.config.require_time_estimates:
                return []
            return [
                ValidationIssue(
                    severity=IssueSeverity.ERROR,
                    category=IssueCategory.TIME_ESTIMATE,
                    task_id=task.id,
                    message="Todo missing time estimate",
                    suggestion="Add estimated_hours field with realistic time estimate",
                )
            ]

        min_hours, max_hours = self.config.estimated_hours_bounds
        issues: list[ValidationIssue] = []
        if hours < min_hours:
            issues.append(
                ValidationIssue(
                    severity=IssueSeverity.WARNING,
                    category=IssueCategory.TIME_ESTIMATE,
                    task_id=task.id,
                    message=f"Time estimate {hours:.1f}h seems too low (min {min_hours:.1f}h)",
                    suggestion="Consider if this task really needs so little time",
                )
            )
        if hours > max_hours:
            issues.append(
                ValidationIssue(
                    severity=IssueSeverity.ERROR,
                    category=IssueCategory.TIME_ESTIMATE,
                    task_id=task.id,
                    message=f"Time estimate {hours:.1f}h exceeds maximum {max_hours:.1f}h",
                    suggestion="Break this large task into smaller chunks",
                )
            )
        return issues

    def _check_vague_language(self, task: Task) -> list[ValidationIssue]:
        if not self.config.require_specific_actions:
            return []
        term = self.policy.find_vague_term(task.content)
        if term is None:
            return []
        return [
            ValidationIssue(
                severity=IssueSeverity.WARNING,
                category=IssueCategory.COMPLETENESS,
                task_id=task.id,
                message=f"Todo contains generic language: '{term}'",
                suggestion="Be more specific about what needs to be done",
            )
        ]
