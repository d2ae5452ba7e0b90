"""CLI for todo-quality.

Provides commands for validating task-list documents, inspecting their
dependency graph, and evaluating quality gates over reported metrics.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path

import click

from . import dep_graph
from .config import DEFAULT_QUALITY_CONFIG, QualityConfig, load_quality_config
from .enforcement import EnforcementConfig, EnforcementResult, QualityEnforcer
from .exceptions import ConfigError, TaskListLoadError
from .gates import GatePipelineConfig, QualityGatePipeline
from .list_validator import TaskListValidator
from .proxy import DEFAULT_PROXY_TIMEOUT, HttpQualityProxy, ProxyError
from .task_list import TaskList
from .task_loader import load_task_list

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose: bool) -> None:
    """todo-quality - Task-graph integrity and quality validation."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _load_or_exit(file: str) -> TaskList:
    try:
        return load_task_list(Path(file))
    except TaskListLoadError as exc:
        click.echo(f"Error: {exc}", err=True)
        for problem in exc.errors:
            click.echo(f"  - {problem}", err=True)
        sys.exit(1)


def _config_or_exit(config_path: str | None) -> QualityConfig:
    if config_path is None:
        return DEFAULT_QUALITY_CONFIG
    try:
        return load_quality_config(Path(config_path))
    except (FileNotFoundError, ConfigError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@cli.command("validate")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--config", "config_path", type=click.Path(), default=None,
              help="TOML file with a [quality] table")
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON")
def validate_command(file: str, config_path: str | None, as_json: bool) -> None:
    """Validate a JSON task list. Exits 1 when it has errors."""
    config = _config_or_exit(config_path)
    task_list = _load_or_exit(file)
    result = TaskListValidator(config).validate(task_list)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        status = "VALID" if result.is_valid else "INVALID"
        click.echo(
            f"{status}: {len(task_list)} task(s), quality score {result.quality_score:.2f}, "
            f"{len(result.errors)} error(s), {len(result.warnings)} warning(s)"
        )
        if result.issues:
            click.echo("\nIssues:")
            for issue in result.issues:
                click.echo(f"  - {issue}")
        if result.suggestions:
            click.echo("\nSuggestions:")
            for suggestion in result.suggestions:
                click.echo(f"  - {suggestion}")

    if not result.is_valid:
        sys.exit(1)


@cli.command("graph")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def graph_command(file: str) -> None:
    """Show the dependency order, depths and critical path of a task list."""
    task_list = _load_or_exit(file)
    check = task_list.validate_dependencies()

    if not check.is_acyclic:
        click.echo(f"Circular dependency detected: {check.format_cycle()}")
        sys.exit(1)

    depths = dep_graph.task_depths(task_list.tasks)
    click.echo("Order (prerequisites first):")
    for task_id in check.order:
        task = task_list.get(task_id)
        content = task.content if task else ""
        click.echo(f"  [{depths[task_id]}] {task_id}: {content}")

    path = task_list.critical_path()
    click.echo(f"\nCritical path ({len(path)}): {dep_graph.CYCLE_SEPARATOR.join(path)}")


@cli.command("gates")
@click.argument("metrics_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--min-coverage", type=float, default=80.0, help="Minimum coverage percentage")
@click.option("--max-complexity", type=int, default=8, help="Maximum cyclomatic complexity")
def gates_command(metrics_file: str, min_coverage: float, max_complexity: int) -> None:
    """Evaluate quality gates over a JSON object of metrics.

    Exits 1 when a mandatory gate fails.
    """
    try:
        metrics = json.loads(Path(metrics_file).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        click.echo(f"Error: invalid metrics JSON: {exc}", err=True)
        sys.exit(1)
    if not isinstance(metrics, dict):
        click.echo("Error: metrics file must contain a JSON object", err=True)
        sys.exit(1)

    pipeline = QualityGatePipeline(
        GatePipelineConfig(min_coverage=min_coverage, max_complexity=max_complexity)
    )
    results = pipeline.validate(metrics)
    for result in results:
        mark = "PASS" if result.passed else "FAIL"
        optional = "" if result.gate.mandatory else " (optional)"
        click.echo(f"[{mark}] {result.gate.id}{optional}: {result.message}")
        for suggestion in result.suggestions:
            click.echo(f"       -> {suggestion}")

    if not all(result.passed for result in results if result.gate.mandatory):
        sys.exit(1)


@cli.command("enforce")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--proxy-url", envvar="TODO_QUALITY_PROXY_URL", required=True,
              help="Base URL of the quality proxy")
@click.option("--timeout", type=float, default=DEFAULT_PROXY_TIMEOUT,
              help="Proxy timeout in seconds")
@click.option("--strict", is_flag=True, help="Fail instead of degrading when the proxy errors")
def enforce_command(file: str, proxy_url: str, timeout: float, strict: bool) -> None:
    """Check a source file through the quality proxy and gate pipeline."""
    code = Path(file).read_text(encoding="utf-8")
    config = EnforcementConfig(on_proxy_error="raise" if strict else "degrade")
    try:
        result = asyncio.run(_enforce_async(code, file, proxy_url, timeout, config))
    except ProxyError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    _print_enforcement(result)
    if not result.passed:
        sys.exit(1)


async def _enforce_async(
    code: str, file_path: str, proxy_url: str, timeout: float, config: EnforcementConfig
) -> EnforcementResult:
    async with HttpQualityProxy(proxy_url, timeout=timeout) as proxy:
        enforcer = QualityEnforcer(proxy=proxy, config=config)
        return await enforcer.enforce_code_quality(code, file_path)


def _print_enforcement(result: EnforcementResult) -> None:
    click.echo(f"Outcome: {result.outcome.value}")
    for failure in result.failures:
        location = f" line {failure.line_number}" if failure.line_number else ""
        click.echo(f"  FAIL {failure.gate}{location}: {failure.message}")
    for warning in result.warnings:
        click.echo(f"  WARN {warning}")
    for suggestion in result.suggestions:
        click.echo(f"  -> {suggestion}")


def main() -> None:
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
