"""Root conftest.py for pytest configuration.

Adds the project root to sys.path so shared helpers import by dotted path
(e.g., tests.factories), and ``src/`` so the package imports without an
editable install.

Provides --run-slow flag to opt in to slow tests (skipped by default).
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
for path in (project_root, project_root / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from tests.factories import make_task  # noqa: E402
from todo_quality.task_list import TaskList  # noqa: E402


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-slow", action="store_true", default=False, help="Run tests marked @pytest.mark.slow"
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="needs --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture
def good_task_list() -> TaskList:
    """Three well-formed tasks in a chain: c depends on b, b on a."""
    task_list = TaskList()
    task_list.add(make_task("a", "Implement user authentication", estimated_hours=4.0))
    task_list.add(
        make_task("b", "Create login form component", estimated_hours=2.0, dependencies=["a"])
    )
    task_list.add(
        make_task("c", "Write integration tests for login", estimated_hours=3.0, dependencies=["b"])
    )
    task_list.refresh_metadata()
    return task_list
