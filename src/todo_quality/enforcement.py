"""Quality enforcement over task lists and generated code.

The enforcer is the single place that turns validation output into a
pass/warn/fail verdict. Task lists go through the list validator; code
goes through the quality proxy and then the gate pipeline.

Usage:
    enforcer = QualityEnforcer(proxy=HttpQualityProxy("http://127.0.0.1:8421"))
    result = enforcer.enforce_task_list(task_list)
    code_result = await enforcer.enforce_code_quality(code, "src/app.py")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Literal

from .config import DEFAULT_QUALITY_CONFIG, QualityConfig
from .gates import GatePipelineConfig, GateResult, QualityGatePipeline
from .list_validator import TaskListValidationResult, TaskListValidator
from .policy import DEFAULT_POLICY, KeywordPolicy
from .proxy import ProxyError, ProxyResponse, QualityProxy, StaticQualityProxy

if TYPE_CHECKING:
    from .task_list import TaskList

logger = logging.getLogger(__name__)

ProxyErrorPolicy = Literal["degrade", "raise"]


class EnforcementOutcome(Enum):
    """Overall verdict of an enforcement run."""

    ALL_PASSED = "all_passed"
    PASSED_WITH_WARNINGS = "passed_with_warnings"
    FAILED = "failed"


class FailureSeverity(Enum):
    """Severity of a quality failure, ordered from least to most severe."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass(frozen=True)
class QualityFailure:
    """A single reason an enforcement run did not pass cleanly.

    Attributes:
        gate: Gate id or issue category that failed.
        message: Human-readable description.
        severity: How serious the failure is.
        task_id: Task the failure refers to, for task-list runs.
        file_path: File the failure refers to, for code runs.
        line_number: Line within ``file_path``, when known.
    """

    gate: str
    message: str
    severity: FailureSeverity = FailureSeverity.ERROR
    task_id: str | None = None
    file_path: str | None = None
    line_number: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "gate": self.gate,
            "message": self.message,
            "severity": self.severity.value,
            "task_id": self.task_id,
            "file_path": self.file_path,
            "line_number": self.line_number,
        }


@dataclass
class EnforcementResult:
    """Verdict plus everything that led to it."""

    outcome: EnforcementOutcome
    failures: list[QualityFailure] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    metrics: dict[str, float] = field(default_factory=dict)
    fixes: list[str] = field(default_factory=list)
    gate_results: list[GateResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.outcome is not EnforcementOutcome.FAILED

    def to_dict(self) -> dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "failures": [failure.to_dict() for failure in self.failures],
            "warnings": list(self.warnings),
            "suggestions": list(self.suggestions),
            "metrics": dict(self.metrics),
            "fixes": list(self.fixes),
            "gate_results": [result.to_dict() for result in self.gate_results],
        }


def _outcome(failures: list[QualityFailure], warnings: list[str]) -> EnforcementOutcome:
    if failures:
        return EnforcementOutcome.FAILED
    if warnings:
        return EnforcementOutcome.PASSED_WITH_WARNINGS
    return EnforcementOutcome.ALL_PASSED


_VIOLATION_SEVERITY = {
    "error": FailureSeverity.ERROR,
    "warning": FailureSeverity.WARNING,
    "info": FailureSeverity.INFO,
}


@dataclass(frozen=True)
class EnforcementConfig:
    """Settings for a QualityEnforcer.

    Attributes:
        quality: Task-list validation settings.
        gates: Default gate set applied to proxy metrics.
        on_proxy_error: "degrade" accepts content with a warning when the
            proxy fails; "raise" propagates the ProxyError.
    """

    quality: QualityConfig = DEFAULT_QUALITY_CONFIG
    gates: GatePipelineConfig = field(default_factory=GatePipelineConfig)
    on_proxy_error: ProxyErrorPolicy = "degrade"

    def __post_init__(self) -> None:
        if self.on_proxy_error not in ("degrade", "raise"):
            raise ValueError(
                f"on_proxy_error must be 'degrade' or 'raise', got {self.on_proxy_error!r}"
            )


class QualityEnforcer:
    """Applies validation and gates and reports a single verdict.

    Args:
        proxy: Quality proxy used for code checks. When None, a
            StaticQualityProxy without metrics accepts code ungated.
        config: Enforcement settings.
        policy: Keyword tables for task-list heuristics.
    """

    def __init__(
        self,
        proxy: QualityProxy | None = None,
        config: EnforcementConfig | None = None,
        policy: KeywordPolicy = DEFAULT_POLICY,
    ) -> None:
        self.config = config or EnforcementConfig()
        self.proxy: QualityProxy = proxy if proxy is not None else StaticQualityProxy()
        self.validator = TaskListValidator(self.config.quality, policy)
        self.pipeline = QualityGatePipeline(self.config.gates)

    def enforce_task_list(self, task_list: TaskList) -> EnforcementResult:
        """Validate a task list and map its issues to a verdict.

        Refreshes the list metadata (including the cycle check) first.
        Error issues become failures, warnings stay warnings and info
        issues are dropped.

        Args:
            task_list: List to enforce.

        Returns:
            EnforcementResult with task-list metrics.
        """
        task_list.refresh_metadata()
        validation = self.validator.validate(task_list)

        failures = [
            QualityFailure(
                gate=issue.category.value,
                message=issue.message,
                severity=FailureSeverity.ERROR,
                task_id=issue.task_id,
            )
            for issue in validation.errors
        ]
        warnings = [str(issue) for issue in validation.warnings]
        outcome = _outcome(failures, warnings)

        logger.info(
            f"Task list enforcement: {outcome.value} "
            f"({len(failures)} failure(s), {len(warnings)} warning(s))"
        )
        return EnforcementResult(
            outcome=outcome,
            failures=failures,
            warnings=warnings,
            suggestions=list(validation.suggestions),
            metrics=self._task_list_metrics(validation),
        )

    @staticmethod
    def _task_list_metrics(validation: TaskListValidationResult) -> dict[str, float]:
        metrics = validation.metrics
        total = metrics.total_count
        return {
            "total_todos": float(total),
            "actionable_ratio": metrics.actionable_count / total if total else 0.0,
            "estimated_ratio": metrics.estimated_count / total if total else 0.0,
            "avg_complexity": metrics.avg_complexity,
            "total_estimated_hours": metrics.total_estimated_hours,
            "quality_score": validation.quality_score,
        }

    async def enforce_code_quality(self, code: str, file_path: str) -> EnforcementResult:
        """Check generated code through the proxy and the gate pipeline.

        A rejection maps the proxy's violations to failures. Accepted or
        modified content has its reported metrics run through the gates:
        failed mandatory gates are failures, failed optional gates are
        warnings, and fixes the proxy applied are reported as warnings.

        Args:
            code: Content to check.
            file_path: Path the content belongs to.

        Returns:
            EnforcementResult for the content.

        Raises:
            ProxyError: If the proxy fails and ``on_proxy_error`` is "raise".
        """
        try:
            response = await self.proxy.validate(code, file_path)
        except ProxyError as e:
            if self.config.on_proxy_error == "raise":
                raise
            logger.warning(f"Quality proxy failed for {file_path}, accepting unchecked: {e}")
            return EnforcementResult(
                outcome=EnforcementOutcome.PASSED_WITH_WARNINGS,
                warnings=[f"Quality proxy unavailable, content not checked: {e}"],
            )

        if response.status == "rejected":
            return self._rejected(response, file_path)
        return self._gated(response, file_path)

    def _rejected(self, response: ProxyResponse, file_path: str) -> EnforcementResult:
        failures = [
            QualityFailure(
                gate=violation.violation_type,
                message=violation.message,
                severity=_VIOLATION_SEVERITY[violation.severity],
                file_path=file_path,
                line_number=violation.line_number,
            )
            for violation in response.quality_report.violations
        ]
        if not failures:
            failures.append(
                QualityFailure(
                    gate="proxy",
                    message="Quality proxy rejected the content",
                    file_path=file_path,
                )
            )
        logger.info(f"Quality proxy rejected {file_path}: {len(failures)} violation(s)")
        return EnforcementResult(
            outcome=EnforcementOutcome.FAILED,
            failures=failures,
            suggestions=list(response.quality_report.suggestions),
            metrics=self._proxy_metrics(response),
        )

    def _gated(self, response: ProxyResponse, file_path: str) -> EnforcementResult:
        if response.metrics is None:
            logger.info(f"No metrics reported for {file_path}, quality gates skipped")
            gate_results: list[GateResult] = []
        else:
            gate_results = self.pipeline.validate(response.metrics.to_quality_metrics())

        failures: list[QualityFailure] = []
        warnings: list[str] = []
        suggestions: list[str] = []
        for result in gate_results:
            if result.passed:
                continue
            suggestions.extend(result.suggestions)
            if result.gate.mandatory:
                failures.append(
                    QualityFailure(gate=result.gate.id, message=result.message, file_path=file_path)
                )
            else:
                warnings.append(result.message)

        if response.status == "modified":
            warnings.extend(f"Applied fix: {fix}" for fix in response.applied_fixes)
        suggestions.extend(response.quality_report.suggestions)

        return EnforcementResult(
            outcome=_outcome(failures, warnings),
            failures=failures,
            warnings=warnings,
            suggestions=suggestions,
            metrics=self._proxy_metrics(response),
            fixes=list(response.applied_fixes),
            gate_results=gate_results,
        )

    @staticmethod
    def _proxy_metrics(response: ProxyResponse) -> dict[str, float]:
        if response.metrics is None:
            return {}
        return {name: float(value) for name, value in response.metrics.model_dump().items()}


