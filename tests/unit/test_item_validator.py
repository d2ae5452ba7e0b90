"""Tests for the per-task quality validator."""

from __future__ import annotations

from tests.factories import make_task
from todo_quality.config import QualityConfig
from todo_quality.issues import IssueCategory, IssueSeverity, ValidationIssue
from todo_quality.item_validator import TaskValidator
from todo_quality.task_model import new_task


def _categories(issues: list[ValidationIssue]) -> list[tuple[IssueSeverity, IssueCategory]]:
    return [(issue.severity, issue.category) for issue in issues]


class TestTaskValidator:
    def test_clean_task(self) -> None:
        task = make_task("t1", "Implement login form", estimated_hours=3.0)

        assert TaskValidator().validate(task) == []

    def test_vague_non_actionable_task(self) -> None:
        """'stuff to handle' is not actionable and flags 'stuff' once."""
        task = make_task("t1", "stuff to handle")

        issues = TaskValidator().validate(task)

        assert not task.is_actionable()
        assert (IssueSeverity.ERROR, IssueCategory.ACTIONABILITY) in _categories(issues)
        vague = [i for i in issues if "generic language" in i.message]
        assert len(vague) == 1
        assert vague[0].severity is IssueSeverity.WARNING
        assert vague[0].category is IssueCategory.COMPLETENESS
        assert "'stuff'" in vague[0].message
        actionability = next(i for i in issues if i.category is IssueCategory.ACTIONABILITY)
        assert actionability.suggestion and "verbs" in actionability.suggestion

    def test_short_content_is_warning_only(self) -> None:
        task = make_task("t1", "Implement X", estimated_hours=2.0)

        issues = TaskValidator().validate(task)

        assert len(task.content) == 11
        assert not any(issue.is_blocking for issue in issues)

    def test_too_short_and_too_long(self) -> None:
        short = TaskValidator().validate(make_task("s", "Fix it"))
        long = TaskValidator().validate(make_task("l", "Implement " + "x" * 120))

        assert _categories(short) == [(IssueSeverity.WARNING, IssueCategory.COMPLETENESS)]
        assert "too short: 6 chars (min 10)" in short[0].message
        assert _categories(long) == [(IssueSeverity.WARNING, IssueCategory.COMPLETENESS)]
        assert "too long" in long[0].message

    def test_complexity_error(self) -> None:
        config = QualityConfig(max_complexity=2)
        task = make_task("t1", "Refactor database api for performance")

        issues = TaskValidator(config).validate(task)

        assert _categories(issues) == [(IssueSeverity.ERROR, IssueCategory.COMPLEXITY)]
        assert issues[0].message == "Todo complexity 4 exceeds maximum 2"

    def test_complexity_unchecked_without_max(self) -> None:
        config = QualityConfig(max_complexity=None)
        task = make_task("t1", "Refactor database api for performance")

        assert TaskValidator(config).validate(task) == []

    def test_missing_estimate(self) -> None:
        task = new_task("Implement login form")

        issues = TaskValidator().validate(task)

        assert _categories(issues) == [(IssueSeverity.ERROR, IssueCategory.TIME_ESTIMATE)]
        assert issues[0].message == "Todo missing time estimate"

    def test_missing_estimate_allowed(self) -> None:
        config = QualityConfig(require_time_estimates=False)

        assert TaskValidator(config).validate(new_task("Implement login form")) == []

    def test_estimate_bounds(self) -> None:
        low = TaskValidator().validate(make_task("a", "Implement login form", estimated_hours=0.25))
        high = TaskValidator().validate(make_task("b", "Implement login form", estimated_hours=80.0))
        edge = TaskValidator().validate(make_task("c", "Implement login form", estimated_hours=40.0))

        assert _categories(low) == [(IssueSeverity.WARNING, IssueCategory.TIME_ESTIMATE)]
        assert _categories(high) == [(IssueSeverity.ERROR, IssueCategory.TIME_ESTIMATE)]
        assert edge == []

    def test_vague_language_only_when_required(self) -> None:
        config = QualityConfig(require_specific_actions=False)

        issues = TaskValidator(config).validate(make_task("t1", "Update something in the UI"))

        assert issues == []

    def test_only_first_vague_term_reported(self) -> None:
        issues = TaskValidator().validate(make_task("t1", "Fix issues with the stuff thing"))

        vague = [i for i in issues if "generic language" in i.message]
        assert len(vague) == 1
        assert "'thing'" in vague[0].message

    def test_task_not_mutated(self) -> None:
        task = make_task("t1", "stuff to handle")
        before = task.to_dict()

        TaskValidator().validate(task)

        assert task.to_dict() == before

    def test_validate_all_keys_by_id(self) -> None:
        tasks = [make_task("a", "Implement login form"), make_task("b", "stuff to handle")]

        results = TaskValidator().validate_all(tasks)

        assert results["a"] == []
        assert results["b"]

    def test_issue_str(self) -> None:
        issue = TaskValidator().validate(new_task("Implement login form", id="x"))[0]

        assert str(issue) == "[ERROR] Time Estimate (x): Todo missing time estimate"
