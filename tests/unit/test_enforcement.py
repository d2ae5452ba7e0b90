"""Tests for QualityEnforcer over task lists and proxied code checks."""

from __future__ import annotations

from typing import Any

import pytest

from tests.factories import make_task
from todo_quality.config import QualityConfig
from todo_quality.enforcement import (
    EnforcementConfig,
    EnforcementOutcome,
    FailureSeverity,
    QualityEnforcer,
)
from todo_quality.gates import GatePipelineConfig, QualityMetrics
from todo_quality.proxy import (
    ProxyResponse,
    ProxyTimeoutError,
    ProxyUnavailableError,
    StaticQualityProxy,
)
from todo_quality.task_list import TaskList

GOOD_METRICS = QualityMetrics(
    coverage=90.0,
    complexity=3,
    doctest_count=2,
    property_test_count=1,
    example_count=1,
    defect_comment_count=0,
)


class _FakeProxy:
    """Returns a canned response, or raises a canned error."""

    def __init__(self, response: dict[str, Any] | None = None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def validate(self, content: str, file_path: str) -> ProxyResponse:
        self.calls.append((content, file_path))
        if self.error is not None:
            raise self.error
        return ProxyResponse.model_validate(self.response)


# ---------------------------------------------------------------------------
# Task lists
# ---------------------------------------------------------------------------


class TestEnforceTaskList:
    def test_clean_list_all_passed(self, good_task_list: TaskList) -> None:
        result = QualityEnforcer().enforce_task_list(good_task_list)

        assert result.outcome is EnforcementOutcome.ALL_PASSED
        assert result.passed
        assert result.metrics["total_todos"] == 3.0
        assert result.metrics["actionable_ratio"] == 1.0
        assert result.metrics["quality_score"] == pytest.approx(1.0)

    def test_warnings_only(self) -> None:
        task_list = TaskList()
        task_list.add(make_task("a", "Fix it"))

        result = QualityEnforcer().enforce_task_list(task_list)

        assert result.outcome is EnforcementOutcome.PASSED_WITH_WARNINGS
        assert result.failures == []
        assert any("too short" in warning for warning in result.warnings)

    def test_errors_become_failures(self) -> None:
        task_list = TaskList()
        task_list.add(make_task("t1", "stuff to handle"))

        result = QualityEnforcer().enforce_task_list(task_list)

        assert result.outcome is EnforcementOutcome.FAILED
        assert not result.passed
        assert result.failures[0].gate == "actionability"
        assert result.failures[0].task_id == "t1"
        assert result.failures[0].severity is FailureSeverity.ERROR
        assert result.suggestions

    def test_refreshes_metadata(self) -> None:
        task_list = TaskList()
        task_list.add(make_task("a", "Implement login form", dependencies=["b"]))
        task_list.add(make_task("b", "Create signup form", dependencies=["a"]))

        result = QualityEnforcer().enforce_task_list(task_list)

        assert task_list.metadata.dependency_graph_checked
        assert not task_list.metadata.dependency_graph_valid
        assert any(failure.gate == "dependencies" for failure in result.failures)

    def test_uses_configured_thresholds(self) -> None:
        task_list = TaskList()
        task_list.add(make_task("a", "Implement login form", estimated_hours=None))
        config = EnforcementConfig(quality=QualityConfig(require_time_estimates=False))

        result = QualityEnforcer(config=config).enforce_task_list(task_list)

        assert result.outcome is EnforcementOutcome.ALL_PASSED


# ---------------------------------------------------------------------------
# Code quality through the proxy
# ---------------------------------------------------------------------------


class TestEnforceCodeQuality:
    async def test_accepted_with_good_metrics(self) -> None:
        enforcer = QualityEnforcer(proxy=StaticQualityProxy(GOOD_METRICS))

        result = await enforcer.enforce_code_quality("x = 1\n", "a.py")

        assert result.outcome is EnforcementOutcome.ALL_PASSED
        assert result.metrics["coverage"] == 90.0
        assert len(result.gate_results) == 8

    async def test_default_enforcer_accepts_unmeasured_code(self) -> None:
        result = await QualityEnforcer().enforce_code_quality("def f(): ...\n", "a.py")

        assert result.outcome is EnforcementOutcome.ALL_PASSED
        assert result.failures == []
        assert result.gate_results == []
        assert result.metrics == {}

    async def test_modified_without_metrics_keeps_fix_warnings(self) -> None:
        proxy = _FakeProxy({"status": "modified", "applied_fixes": ["Sorted imports"]})

        result = await QualityEnforcer(proxy=proxy).enforce_code_quality("x\n", "a.py")

        assert result.outcome is EnforcementOutcome.PASSED_WITH_WARNINGS
        assert result.warnings == ["Applied fix: Sorted imports"]

    async def test_accepted_but_gates_fail(self) -> None:
        metrics = QualityMetrics(coverage=40.0, complexity=12)
        enforcer = QualityEnforcer(proxy=StaticQualityProxy(metrics))

        result = await enforcer.enforce_code_quality("x = 1\n", "a.py")

        assert result.outcome is EnforcementOutcome.FAILED
        failed = {failure.gate for failure in result.failures}
        assert {"coverage_minimum", "complexity_limit"} <= failed
        assert all(failure.file_path == "a.py" for failure in result.failures)
        assert "Add more unit tests to increase coverage" in result.suggestions

    async def test_gate_config_applies(self) -> None:
        metrics = QualityMetrics(coverage=65.0, complexity=3)
        config = EnforcementConfig(
            gates=GatePipelineConfig(
                min_coverage=60.0,
                require_doctests=False,
                require_property_tests=False,
                require_examples=False,
            )
        )
        enforcer = QualityEnforcer(proxy=StaticQualityProxy(metrics), config=config)

        result = await enforcer.enforce_code_quality("x = 1\n", "a.py")

        assert result.outcome is EnforcementOutcome.ALL_PASSED

    async def test_modified_reports_fixes_as_warnings(self) -> None:
        proxy = _FakeProxy(
            {
                "status": "modified",
                "final_content": "x = 1\n",
                "metrics": GOOD_METRICS.as_dict(),
                "applied_fixes": ["Removed trailing whitespace"],
            }
        )
        enforcer = QualityEnforcer(proxy=proxy)

        result = await enforcer.enforce_code_quality("x = 1   \n", "a.py")

        assert result.outcome is EnforcementOutcome.PASSED_WITH_WARNINGS
        assert result.fixes == ["Removed trailing whitespace"]
        assert result.warnings == ["Applied fix: Removed trailing whitespace"]
        assert proxy.calls == [("x = 1   \n", "a.py")]

    async def test_rejected_maps_violations(self) -> None:
        proxy = _FakeProxy(
            {
                "status": "rejected",
                "quality_report": {
                    "passed": False,
                    "violations": [
                        {
                            "violation_type": "satd",
                            "severity": "warning",
                            "location": "a.py:3",
                            "message": "TODO comment found",
                        }
                    ],
                    "suggestions": ["Convert TODOs to issues"],
                },
            }
        )

        result = await QualityEnforcer(proxy=proxy).enforce_code_quality("# TODO\n", "a.py")

        assert result.outcome is EnforcementOutcome.FAILED
        failure = result.failures[0]
        assert failure.gate == "satd"
        assert failure.severity is FailureSeverity.WARNING
        assert failure.line_number == 3
        assert failure.file_path == "a.py"
        assert result.suggestions == ["Convert TODOs to issues"]

    async def test_rejected_without_violations_still_fails(self) -> None:
        proxy = _FakeProxy({"status": "rejected"})

        result = await QualityEnforcer(proxy=proxy).enforce_code_quality("x\n", "a.py")

        assert result.outcome is EnforcementOutcome.FAILED
        assert result.failures[0].gate == "proxy"

    async def test_proxy_error_degrades(self, caplog: pytest.LogCaptureFixture) -> None:
        proxy = _FakeProxy(error=ProxyUnavailableError("down", status_code=503))

        with caplog.at_level("WARNING"):
            result = await QualityEnforcer(proxy=proxy).enforce_code_quality("x\n", "a.py")

        assert result.outcome is EnforcementOutcome.PASSED_WITH_WARNINGS
        assert "unavailable" in result.warnings[0]
        assert "Quality proxy failed" in caplog.text

    async def test_proxy_error_raises_when_configured(self) -> None:
        proxy = _FakeProxy(error=ProxyTimeoutError(1.0))
        enforcer = QualityEnforcer(proxy=proxy, config=EnforcementConfig(on_proxy_error="raise"))

        with pytest.raises(ProxyTimeoutError):
            await enforcer.enforce_code_quality("x\n", "a.py")


def test_invalid_proxy_error_policy() -> None:
    with pytest.raises(ValueError, match="on_proxy_error"):
        EnforcementConfig(on_proxy_error="ignore")  # type: ignore[arg-type]


def test_result_to_dict() -> None:
    task_list = TaskList()
    task_list.add(make_task("t1", "stuff to handle"))

    data = QualityEnforcer().enforce_task_list(task_list).to_dict()

    assert data["outcome"] == "failed"
    assert data["failures"][0]["severity"] == "error"
