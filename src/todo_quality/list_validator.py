"""Whole-list validation, metrics and improvement suggestions.

This module orchestrates structural checks, dependency checks and the
per-task validator over a TaskList, aggregates quality metrics, and turns
those metrics into a fixed-order list of suggestions and a weighted
quality score.

Public API:
    - DependencyMetrics: Dependency graph figures for a list
    - TodoMetrics: Aggregate quality figures for a list
    - TaskListValidationResult: Outcome of validating a list
    - TaskListValidator: Runs every check over a TaskList
    - calculate_quality_score: Weighted score in [0, 1]
    - validate_task_list: Convenience wrapper around TaskListValidator
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

from . import dep_graph
from .config import DEFAULT_QUALITY_CONFIG, QualityConfig
from .issues import IssueCategory, IssueSeverity, ValidationIssue
from .item_validator import TaskValidator
from .policy import DEFAULT_POLICY, KeywordPolicy

if TYPE_CHECKING:
    from .task_list import TaskList

logger = logging.getLogger(__name__)

# Weights of the quality score terms; they sum to 1.0
ACTIONABILITY_WEIGHT = 0.3
LENGTH_WEIGHT = 0.2
COMPLEXITY_WEIGHT = 0.2
ESTIMATE_WEIGHT = 0.2
DEPENDENCY_WEIGHT = 0.1

# Below this score a general improvement suggestion is added
QUALITY_SCORE_THRESHOLD = 0.8


@dataclass(frozen=True)
class DependencyMetrics:
    """Dependency graph figures.

    Attributes:
        tasks_with_dependencies: Tasks listing at least one dependency.
        total_dependencies: Dependency edges, duplicates included.
        max_depth: Deepest chain length; 0 when cycles are present.
        has_cycles: Whether the graph contains a cycle.
        critical_path_length: Same as max_depth (unweighted by hours).
    """

    tasks_with_dependencies: int = 0
    total_dependencies: int = 0
    max_depth: int = 0
    has_cycles: bool = False
    critical_path_length: int = 0


@dataclass(frozen=True)
class TodoMetrics:
    """Aggregate quality figures for a task list.

    Attributes:
        total_count: Number of tasks.
        actionable_count: Tasks starting with an action verb.
        proper_length_count: Tasks within the configured length bounds.
        estimated_count: Tasks carrying an estimate.
        reasonable_complexity_count: Tasks at or under the complexity limit.
        avg_complexity: Mean complexity score, 0 for an empty list.
        avg_task_length: Mean content length, 0 for an empty list.
        total_estimated_hours: Sum of present estimates.
        dependency_metrics: Dependency graph figures.
    """

    total_count: int = 0
    actionable_count: int = 0
    proper_length_count: int = 0
    estimated_count: int = 0
    reasonable_complexity_count: int = 0
    avg_complexity: float = 0.0
    avg_task_length: float = 0.0
    total_estimated_hours: float = 0.0
    dependency_metrics: DependencyMetrics = field(default_factory=DependencyMetrics)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class TaskListValidationResult:
    """Result of validating a task list.

    Attributes:
        is_valid: True iff no issue has ERROR severity.
        issues: All issues, structural first, then per-task, then dependencies.
        metrics: Aggregate quality figures.
        suggestions: Improvement suggestions derived from the metrics.
        quality_score: Weighted quality score in [0, 1].
    """

    is_valid: bool
    issues: list[ValidationIssue]
    metrics: TodoMetrics
    suggestions: list[str]
    quality_score: float = 0.0

    @property
    def errors(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity is IssueSeverity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity is IssueSeverity.WARNING]

    def issues_for(self, task_id: str) -> list[ValidationIssue]:
        """Return the issues that reference ``task_id``."""
        return [issue for issue in self.issues if issue.task_id == task_id]

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "quality_score": self.quality_score,
            "issues": [issue.to_dict() for issue in self.issues],
            "metrics": self.metrics.to_dict(),
            "suggestions": list(self.suggestions),
        }


def calculate_quality_score(
    metrics: TodoMetrics, config: QualityConfig = DEFAULT_QUALITY_CONFIG
) -> float:
    """Calculate the overall quality score (0.0 to 1.0).

    Weighted average of actionability (0.3), proper length (0.2),
    reasonable complexity (0.2), time estimates (0.2, counted as 1.0 when
    estimates are not required) and dependency validity (0.1, 0.0 when a
    cycle exists). An empty list scores 0.0.

    Args:
        metrics: Metrics of the list.
        config: Config deciding whether estimates are required.

    Returns:
        The score.
    """
    total = metrics.total_count
    if total == 0:
        return 0.0

    actionability = metrics.actionable_count / total
    length = metrics.proper_length_count / total
    complexity = metrics.reasonable_complexity_count / total
    estimates = metrics.estimated_count / total if config.require_time_estimates else 1.0
    dependencies = 0.0 if metrics.dependency_metrics.has_cycles else 1.0

    score = (
        actionability * ACTIONABILITY_WEIGHT
        + length * LENGTH_WEIGHT
        + complexity * COMPLEXITY_WEIGHT
        + estimates * ESTIMATE_WEIGHT
        + dependencies * DEPENDENCY_WEIGHT
    )
    return min(max(score, 0.0), 1.0)


class TaskListValidator:
    """Validates a complete task list.

    Runs structural checks (size, emptiness, duplicate ids and content),
    per-task checks via TaskValidator, and dependency checks (missing
    references, self-references, cycles), then computes metrics and
    suggestions. The list is only read, never modified.

    Example:
        >>> validator = TaskListValidator(QualityConfig())
        >>> result = validator.validate(task_list)
        >>> if not result.is_valid:
        ...     print(result.errors)
    """

    def __init__(
        self,
        config: QualityConfig = DEFAULT_QUALITY_CONFIG,
        policy: KeywordPolicy = DEFAULT_POLICY,
    ) -> None:
        self.config = config
        self.policy = policy
        self.task_validator = TaskValidator(config, policy)

    def validate(self, task_list: TaskList) -> TaskListValidationResult:
        """Validate a task list.

        Args:
            task_list: The list to validate.

        Returns:
            TaskListValidationResult with every issue, metrics and suggestions.
        """
        issues: list[ValidationIssue] = []

        issues.extend(self._check_structure(task_list))
        for task in task_list.tasks:
            issues.extend(self.task_validator.validate(task))
        cycle_check = dep_graph.validate_dependencies(task_list.tasks)
        issues.extend(self._check_dependencies(task_list, cycle_check))

        metrics = self.calculate_metrics(task_list, cycle_check)
        score = calculate_quality_score(metrics, self.config)
        suggestions = self.generate_suggestions(metrics, score)

        is_valid = not any(issue.is_blocking for issue in issues)
        logger.info(
            f"Validated {metrics.total_count} todo(s): valid={is_valid}, "
            f"issues={len(issues)}, score={score:.2f}"
        )
        return TaskListValidationResult(
            is_valid=is_valid,
            issues=issues,
            metrics=metrics,
            suggestions=suggestions,
            quality_score=score,
        )

    def _check_structure(self, task_list: TaskList) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        count = len(task_list.tasks)
        max_tasks = self.config.max_tasks_per_batch

        if max_tasks is not None and count > max_tasks:
            issues.append(
                ValidationIssue(
                    severity=IssueSeverity.ERROR,
                    category=IssueCategory.STRUCTURE,
                    message=f"Todo count {count} exceeds maximum {max_tasks}",
                    suggestion="Split into multiple smaller todo lists",
                )
            )

        if count == 0:
            issues.append(
                ValidationIssue(
                    severity=IssueSeverity.ERROR,
                    category=IssueCategory.STRUCTURE,
                    message="Todo list is empty",
                    suggestion="Add at least one todo item",
                )
            )

        seen_ids: set[str] = set()
        for task in task_list.tasks:
            if task.id in seen_ids:
                issues.append(
                    ValidationIssue(
                        severity=IssueSeverity.ERROR,
                        category=IssueCategory.STRUCTURE,
                        task_id=task.id,
                        message=f"Duplicate todo ID: {task.id}",
                        suggestion="Ensure all todo IDs are unique",
                    )
                )
            seen_ids.add(task.id)

        first_with_content: dict[str, str] = {}
        for task in task_list.tasks:
            normalized = task.content.strip().casefold()
            if normalized in first_with_content:
                issues.append(
                    ValidationIssue(
                        severity=IssueSeverity.WARNING,
                        category=IssueCategory.STRUCTURE,
                        task_id=task.id,
                        message=(
                            f"Duplicate todo content with ID: {first_with_content[normalized]}"
                        ),
                        suggestion="Make todo descriptions more specific to avoid duplicates",
                    )
                )
            else:
                first_with_content[normalized] = task.id

        return issues

    def _check_dependencies(
        self, task_list: TaskList, cycle_check: dep_graph.CycleCheck
    ) -> list[ValidationIssue]:
        if not self.config.require_dependency_graph:
            return []

        issues: list[ValidationIssue] = []
        known_ids = {task.id for task in task_list.tasks}

        for task in task_list.tasks:
            for dep_id in task.dependencies:
                if dep_id not in known_ids:
                    issues.append(
                        ValidationIssue(
                            severity=IssueSeverity.ERROR,
                            category=IssueCategory.DEPENDENCIES,
                            task_id=task.id,
                            message=f"Dependency '{dep_id}' not found",
                            suggestion="Remove invalid dependency or add missing todo",
                        )
                    )

        for task in task_list.tasks:
            if task.id in task.dependencies:
                issues.append(
                    ValidationIssue(
                        severity=IssueSeverity.ERROR,
                        category=IssueCategory.DEPENDENCIES,
                        task_id=task.id,
                        message="Todo depends on itself",
                        suggestion="Remove self-dependency",
                    )
                )

        if self.config.prevent_circular_dependencies and not cycle_check.is_acyclic:
            issues.append(
                ValidationIssue(
                    severity=IssueSeverity.ERROR,
                    category=IssueCategory.DEPENDENCIES,
                    message=f"Circular dependency detected: {cycle_check.format_cycle()}",
                    suggestion="Remove circular dependencies by reordering tasks",
                )
            )

        for task in task_list.tasks:
            duplicates = sorted({dep for dep in task.dependencies if task.dependencies.count(dep) > 1})
            if duplicates:
                issues.append(
                    ValidationIssue(
                        severity=IssueSeverity.INFO,
                        category=IssueCategory.DEPENDENCIES,
                        task_id=task.id,
                        message=f"Todo lists dependencies more than once: {', '.join(duplicates)}",
                        suggestion="List each dependency only once",
                    )
                )

        return issues

    def calculate_metrics(
        self,
        task_list: TaskList,
        cycle_check: dep_graph.CycleCheck | None = None,
    ) -> TodoMetrics:
        """Calculate quality metrics for a list.

        Args:
            task_list: The list to measure.
            cycle_check: A cycle check already run on the list, if any.

        Returns:
            TodoMetrics for the list.
        """
        tasks = task_list.tasks
        total = len(tasks)
        min_chars, max_chars = self.config.content_char_bounds
        ceiling = self.config.complexity_ceiling

        complexities = [task.complexity_score(self.policy) for task in tasks]
        estimates = [task.estimated_hours for task in tasks if task.estimated_hours is not None]

        return TodoMetrics(
            total_count=total,
            actionable_count=sum(1 for task in tasks if task.is_actionable(self.policy)),
            proper_length_count=sum(
                1 for task in tasks if task.has_valid_length(min_chars, max_chars)
            ),
            estimated_count=len(estimates),
            reasonable_complexity_count=sum(1 for score in complexities if score <= ceiling),
            avg_complexity=sum(complexities) / total if total else 0.0,
            avg_task_length=sum(len(task.content) for task in tasks) / total if total else 0.0,
            total_estimated_hours=float(sum(estimates)),
            dependency_metrics=self._dependency_metrics(task_list, cycle_check),
        )

    def _dependency_metrics(
        self,
        task_list: TaskList,
        cycle_check: dep_graph.CycleCheck | None,
    ) -> DependencyMetrics:
        tasks = task_list.tasks
        if cycle_check is None:
            cycle_check = dep_graph.validate_dependencies(tasks)
        has_cycles = not cycle_check.is_acyclic

        # Depth through a cycle is meaningless, so both figures are 0 then
        depth = 0
        if tasks and not has_cycles:
            depth = max(dep_graph.task_depths(tasks).values())

        return DependencyMetrics(
            tasks_with_dependencies=sum(1 for task in tasks if task.dependencies),
            total_dependencies=sum(len(task.dependencies) for task in tasks),
            max_depth=depth,
            has_cycles=has_cycles,
            critical_path_length=depth,
        )

    def generate_suggestions(self, metrics: TodoMetrics, quality_score: float | None = None) -> list[str]:
        """Derive improvement suggestions from metrics, in a fixed order.

        Args:
            metrics: Metrics of the list.
            quality_score: Precomputed score; computed from metrics if None.

        Returns:
            Suggestions, each emitted at most once.
        """
        suggestions: list[str] = []
        total = metrics.total_count

        if metrics.actionable_count < total:
            suggestions.append(
                f"Make {total - metrics.actionable_count} todos more actionable by starting "
                "with action verbs (implement, create, add, etc.)"
            )

        if metrics.reasonable_complexity_count < total:
            suggestions.append(
                f"Break down complex tasks (complexity > {self.config.complexity_ceiling}) "
                "into smaller, focused subtasks"
            )

        if self.config.require_time_estimates and metrics.estimated_count < total:
            suggestions.append(
                f"Add time estimates to {total - metrics.estimated_count} todos "
                "for better project planning"
            )

        if metrics.dependency_metrics.has_cycles:
            suggestions.append("Remove circular dependencies to enable proper task ordering")

        if metrics.dependency_metrics.tasks_with_dependencies == 0 and total > 1:
            suggestions.append(
                "Consider adding dependencies between related tasks for better sequencing"
            )

        if quality_score is None:
            quality_score = calculate_quality_score(metrics, self.config)
        if quality_score < QUALITY_SCORE_THRESHOLD:
            suggestions.append(
                "Overall todo list quality could be improved - focus on specific, "
                "actionable tasks with realistic estimates"
            )

        return suggestions


def validate_task_list(
    task_list: TaskList,
    config: QualityConfig = DEFAULT_QUALITY_CONFIG,
    policy: KeywordPolicy = DEFAULT_POLICY,
) -> TaskListValidationResult:
    """Validate ``task_list`` against ``config``.

    Convenience wrapper around ``TaskListValidator(config, policy).validate``.
    """
    return TaskListValidator(config, policy).validate(task_list)
