"""Threshold gate pipeline for arbitrary quality metrics.

Gates are data: each names a metric, a threshold and a GateKind, and the
evaluator dispatches on the kind through a closed table of comparison
functions. The pipeline is independent of the task model; it judges
coverage, complexity, defect-comment counts, test counts and anything
else a metrics source reports.

Public API:
    - GateKind: Comparison semantics of a gate
    - QualityGate: A configured gate
    - GateResult: Outcome of one gate
    - QualityMetrics: Value object of the standard metrics
    - GatePipelineConfig: Settings for the default gate set
    - QualityGatePipeline: Mutable gate list with evaluation helpers
    - default_gates: Build the default gate set
    - evaluate_gates: Pure evaluation of gates against metrics
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import asdict, dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Union, cast

if TYPE_CHECKING:
    from .list_validator import TaskListValidationResult

logger = logging.getLogger(__name__)

MetricValue = Union[float, int, bool]


class GateKind(Enum):
    """Comparison semantics of a gate."""

    AT_LEAST = "at_least"
    AT_MOST = "at_most"
    INFORMATIONAL = "informational"


# Metric names reported by QualityMetrics
COVERAGE = "coverage"
COMPLEXITY = "complexity"
DOCTEST_COUNT = "doctest_count"
PROPERTY_TEST_COUNT = "property_test_count"
EXAMPLE_COUNT = "example_count"
DEFECT_COMMENT_COUNT = "defect_comment_count"
LINTING = "linting"
FORMATTING = "formatting"

# Canned suggestions for failed gates, keyed by metric
METRIC_SUGGESTIONS: dict[str, tuple[str, ...]] = {
    COVERAGE: ("Add more unit tests to increase coverage",),
    COMPLEXITY: (
        "Refactor complex functions into smaller units",
        "Extract helper functions to reduce complexity",
    ),
    DOCTEST_COUNT: ("Add doctests to all public APIs",),
    PROPERTY_TEST_COUNT: ("Add property tests for complex logic",),
    EXAMPLE_COUNT: ("Add working examples demonstrating usage",),
    DEFECT_COMMENT_COUNT: (
        "Remove all TODO/FIXME/HACK comments",
        "Convert TODOs to proper issue tracking",
    ),
}

# Fallback suggestions for metrics without canned ones
KIND_SUGGESTIONS: dict[GateKind, tuple[str, ...]] = {
    GateKind.AT_LEAST: ("Raise the measured value to meet the minimum threshold",),
    GateKind.AT_MOST: ("Reduce the measured value to within the allowed limit",),
    GateKind.INFORMATIONAL: (),
}


@dataclass(frozen=True)
class QualityGate:
    """A named pass/fail rule over one metric.

    Attributes:
        id: Unique gate identifier.
        description: Human-readable rule.
        kind: Comparison semantics.
        metric: Name of the metric the gate reads.
        threshold: Bound compared against; unused by INFORMATIONAL gates.
        mandatory: Whether the gate must pass for the pipeline to pass.
    """

    id: str
    description: str
    kind: GateKind
    metric: str
    threshold: float | None = None
    mandatory: bool = True

    def __post_init__(self) -> None:
        if self.kind is not GateKind.INFORMATIONAL and self.threshold is None:
            raise ValueError(f"Gate '{self.id}' of kind {self.kind.value} requires a threshold")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "kind": self.kind.value,
            "metric": self.metric,
            "threshold": self.threshold,
            "mandatory": self.mandatory,
        }


@dataclass(frozen=True)
class GateResult:
    """Outcome of evaluating one gate.

    Attributes:
        gate: The gate evaluated.
        passed: Whether it passed.
        actual_value: Observed metric value, None if not reported.
        message: Human-readable outcome.
        suggestions: Improvement suggestions, empty when passed.
    """

    gate: QualityGate
    passed: bool
    actual_value: float | None
    message: str
    suggestions: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "gate": self.gate.to_dict(),
            "passed": self.passed,
            "actual_value": self.actual_value,
            "message": self.message,
            "suggestions": list(self.suggestions),
        }


@dataclass(frozen=True)
class QualityMetrics:
    """Standard metrics supplied by a static-analysis source or quality proxy."""

    coverage: float = 0.0
    complexity: int = 0
    doctest_count: int = 0
    property_test_count: int = 0
    example_count: int = 0
    defect_comment_count: int = 0

    def as_dict(self) -> dict[str, MetricValue]:
        return asdict(self)


@dataclass(frozen=True)
class GatePipelineConfig:
    """Settings for the default gate set.

    Attributes:
        min_coverage: Minimum coverage percentage.
        max_complexity: Maximum cyclomatic complexity.
        require_doctests: Add a gate requiring at least one doctest.
        require_property_tests: Add a gate requiring a property test.
        require_examples: Add a gate requiring a working example.
        zero_defect_comments: Add a zero-tolerance TODO/FIXME/HACK gate.
    """

    min_coverage: float = 80.0
    max_complexity: int = 8
    require_doctests: bool = True
    require_property_tests: bool = True
    require_examples: bool = True
    zero_defect_comments: bool = True


def _fmt(value: float) -> str:
    return f"{value:g}"


def _at_least(value: float, threshold: float) -> bool:
    return value >= threshold


def _at_most(value: float, threshold: float) -> bool:
    return value <= threshold


def _informational(value: float, threshold: float) -> bool:
    return True


_EVALUATORS: dict[GateKind, Callable[[float, float], bool]] = {
    GateKind.AT_LEAST: _at_least,
    GateKind.AT_MOST: _at_most,
    GateKind.INFORMATIONAL: _informational,
}


def _message(gate: QualityGate, value: float, passed: bool) -> str:
    label = gate.metric.replace("_", " ")
    threshold = _fmt(gate.threshold) if gate.threshold is not None else ""
    if gate.kind is GateKind.AT_LEAST:
        if passed:
            return f"{label} {_fmt(value)} meets minimum {threshold}"
        return f"{label} {_fmt(value)} below required {threshold}"
    if passed:
        return f"{label} {_fmt(value)} within limit {threshold}"
    return f"{label} {_fmt(value)} exceeds limit {threshold}"


def _suggestions_for(gate: QualityGate) -> tuple[str, ...]:
    return METRIC_SUGGESTIONS.get(gate.metric) or KIND_SUGGESTIONS[gate.kind]


def evaluate_gate(gate: QualityGate, metrics: Mapping[str, MetricValue]) -> GateResult:
    """Evaluate one gate against a bag of metrics.

    A comparison gate whose metric is missing from the bag, or is not a
    number, fails. Booleans count as 1.0 / 0.0.

    Args:
        gate: The gate to evaluate.
        metrics: Metric name -> observed value.

    Returns:
        GateResult for the gate.
    """
    raw = metrics.get(gate.metric)
    value = float(raw) if isinstance(raw, (int, float)) else None

    if gate.kind is GateKind.INFORMATIONAL:
        return GateResult(
            gate=gate,
            passed=True,
            actual_value=value,
            message=f"{gate.description} (informational)",
        )

    if raw is None:
        return GateResult(
            gate=gate,
            passed=False,
            actual_value=None,
            message=f"Metric '{gate.metric}' was not reported",
            suggestions=(f"Report the '{gate.metric}' metric from the quality source",),
        )
    if value is None:
        return GateResult(
            gate=gate,
            passed=False,
            actual_value=None,
            message=f"Metric '{gate.metric}' is not a number: {raw!r}",
            suggestions=(f"Report '{gate.metric}' as a numeric value",),
        )

    # comparison gates always carry a threshold
    passed = _EVALUATORS[gate.kind](value, cast(float, gate.threshold))
    return GateResult(
        gate=gate,
        passed=passed,
        actual_value=value,
        message=_message(gate, value, passed),
        suggestions=() if passed else _suggestions_for(gate),
    )


def _as_mapping(metrics: QualityMetrics | Mapping[str, MetricValue]) -> Mapping[str, MetricValue]:
    if isinstance(metrics, QualityMetrics):
        return metrics.as_dict()
    return metrics


def evaluate_gates(
    gates: Iterable[QualityGate],
    metrics: QualityMetrics | Mapping[str, MetricValue],
) -> list[GateResult]:
    """Evaluate every gate independently.

    Pure: the same gates and metrics always yield the same results, in
    the order the gates were supplied.

    Args:
        gates: Gates to evaluate.
        metrics: QualityMetrics or any metric name -> value mapping.

    Returns:
        One GateResult per gate.
    """
    bag = _as_mapping(metrics)
    return [evaluate_gate(gate, bag) for gate in gates]


def default_gates(config: GatePipelineConfig | None = None) -> list[QualityGate]:
    """Build the default gate set for ``config``."""
    config = config or GatePipelineConfig()
    gates = [
        QualityGate(
            id="coverage_minimum",
            description=f"Code coverage must be at least {_fmt(config.min_coverage)}%",
            kind=GateKind.AT_LEAST,
            metric=COVERAGE,
            threshold=config.min_coverage,
        )
    ]

    if config.require_doctests:
        gates.append(
            QualityGate(
                id="doctests_required",
                description="All public APIs must have doctests",
                kind=GateKind.AT_LEAST,
                metric=DOCTEST_COUNT,
                threshold=1,
            )
        )
    if config.require_property_tests:
        gates.append(
            QualityGate(
                id="property_tests_required",
                description="Complex logic must have property tests",
                kind=GateKind.AT_LEAST,
                metric=PROPERTY_TEST_COUNT,
                threshold=1,
            )
        )
    if config.require_examples:
        gates.append(
            QualityGate(
                id="examples_required",
                description="Working examples must be provided",
                kind=GateKind.AT_LEAST,
                metric=EXAMPLE_COUNT,
                threshold=1,
            )
        )
    if config.zero_defect_comments:
        gates.append(
            QualityGate(
                id="zero_defect_comments",
                description="No TODO/FIXME/HACK comments allowed",
                kind=GateKind.AT_MOST,
                metric=DEFECT_COMMENT_COUNT,
                threshold=0,
            )
        )

    gates.extend(
        [
            QualityGate(
                id="complexity_limit",
                description=f"Cyclomatic complexity must be at most {config.max_complexity}",
                kind=GateKind.AT_MOST,
                metric=COMPLEXITY,
                threshold=config.max_complexity,
            ),
            QualityGate(
                id="lint_clean",
                description="Code must pass linting",
                kind=GateKind.INFORMATIONAL,
                metric=LINTING,
            ),
            QualityGate(
                id="format_compliant",
                description="Code must be formatted",
                kind=GateKind.INFORMATIONAL,
                metric=FORMATTING,
                mandatory=False,
            ),
        ]
    )
    return gates


class QualityGatePipeline:
    """Configurable list of gates with evaluation helpers.

    Gates can be added and removed; evaluation reads only the gate list
    and the metrics passed in.

    Example:
        >>> pipeline = QualityGatePipeline()
        >>> metrics = QualityMetrics(coverage=91.0, complexity=4)
        >>> results = pipeline.validate(metrics)
        >>> pipeline.all_mandatory_gates_pass(metrics)
    """

    def __init__(
        self,
        config: GatePipelineConfig | None = None,
        gates: Iterable[QualityGate] | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Settings for the default gate set.
            gates: Explicit gates; the default set is built when None.
        """
        self.config = config or GatePipelineConfig()
        self.gates: list[QualityGate] = (
            list(gates) if gates is not None else default_gates(self.config)
        )

    def add_gate(self, gate: QualityGate) -> None:
        """Append a gate, replacing any existing gate with the same id."""
        self.remove_gate(gate.id)
        self.gates.append(gate)

    def remove_gate(self, gate_id: str) -> None:
        """Remove the gate with ``gate_id``; unknown ids are ignored."""
        self.gates = [gate for gate in self.gates if gate.id != gate_id]

    def validate(self, metrics: QualityMetrics | Mapping[str, MetricValue]) -> list[GateResult]:
        """Evaluate every configured gate, in order."""
        results = evaluate_gates(self.gates, metrics)
        failed = [result.gate.id for result in results if not result.passed]
        if failed:
            logger.info(f"{len(failed)} quality gate(s) failed: {', '.join(failed)}")
        return results

    def all_mandatory_gates_pass(self, metrics: QualityMetrics | Mapping[str, MetricValue]) -> bool:
        """Return True iff every mandatory gate passes."""
        return all(result.passed for result in self.validate(metrics) if result.gate.mandatory)

    def failed_gates(self, metrics: QualityMetrics | Mapping[str, MetricValue]) -> list[GateResult]:
        """Return only the results of gates that failed."""
        return [result for result in self.validate(metrics) if not result.passed]


# Metric names exposed by task_list_metrics
TODO_QUALITY_SCORE = "todo_quality_score"
TODO_ERROR_COUNT = "todo_error_count"
TODO_WARNING_COUNT = "todo_warning_count"
TODO_HAS_CYCLES = "todo_has_cycles"


def task_list_metrics(result: TaskListValidationResult) -> dict[str, MetricValue]:
    """Expose a task-list validation result as gate metrics."""
    return {
        TODO_QUALITY_SCORE: result.quality_score,
        TODO_ERROR_COUNT: len(result.errors),
        TODO_WARNING_COUNT: len(result.warnings),
        TODO_HAS_CYCLES: result.metrics.dependency_metrics.has_cycles,
    }


def task_list_gates(min_quality_score: float = 0.8) -> list[QualityGate]:
    """Gates judging a task list through ``task_list_metrics``."""
    return [
        QualityGate(
            id="todo_quality_score",
            description=f"Todo list quality score must be at least {_fmt(min_quality_score)}",
            kind=GateKind.AT_LEAST,
            metric=TODO_QUALITY_SCORE,
            threshold=min_quality_score,
        ),
        QualityGate(
            id="todo_no_errors",
            description="Todo list must have no error-level issues",
            kind=GateKind.AT_MOST,
            metric=TODO_ERROR_COUNT,
            threshold=0,
        ),
        QualityGate(
            id="todo_acyclic",
            description="Todo dependency graph must be acyclic",
            kind=GateKind.AT_MOST,
            metric=TODO_HAS_CYCLES,
            threshold=0,
        ),
        QualityGate(
            id="todo_warnings",
            description="Todo list warnings",
            kind=GateKind.INFORMATIONAL,
            metric=TODO_WARNING_COUNT,
            mandatory=False,
        ),
    ]
