"""Quality configuration for task-list validation.

Defines the immutable QualityConfig bundle that governs every threshold the
validators apply, and a loader for the ``[quality]`` table of a TOML file.
Configurations are checked for internal consistency when constructed, so a
bad bound fails fast instead of silently skewing validation.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from .exceptions import ConfigError
from .policy import MAX_COMPLEXITY_SCORE, MIN_COMPLEXITY_SCORE

logger = logging.getLogger(__name__)

# Fallbacks used when an optional bound is not configured
DEFAULT_MIN_CONTENT_CHARS = 10
DEFAULT_MAX_CONTENT_CHARS = 100
DEFAULT_MAX_COMPLEXITY = 8
DEFAULT_MIN_ESTIMATED_HOURS = 0.5
DEFAULT_MAX_ESTIMATED_HOURS = 40.0

_QUALITY_TABLE = "quality"


class _QualityTable(BaseModel):
    """Type check for a ``[quality]`` table; no coercion of strings."""

    model_config = {"extra": "forbid", "strict": True}

    max_tasks_per_batch: int | None = 50
    min_content_chars: int | None = DEFAULT_MIN_CONTENT_CHARS
    max_content_chars: int | None = DEFAULT_MAX_CONTENT_CHARS
    max_complexity: int | None = DEFAULT_MAX_COMPLEXITY
    require_time_estimates: bool = True
    require_specific_actions: bool = True
    require_dependency_graph: bool = True
    prevent_circular_dependencies: bool = True
    min_estimated_hours: float | None = DEFAULT_MIN_ESTIMATED_HOURS
    max_estimated_hours: float | None = DEFAULT_MAX_ESTIMATED_HOURS


@dataclass(frozen=True)
class QualityConfig:
    """Thresholds governing task and task-list validation.

    Optional fields accept ``None`` meaning "not configured": the batch
    size and complexity checks are then skipped, and the length and hour
    bounds fall back to the module defaults.

    Attributes:
        max_tasks_per_batch: Maximum tasks allowed in one list.
        min_content_chars: Minimum characters per task description.
        max_content_chars: Maximum characters per task description.
        max_complexity: Maximum complexity score per task (1-10).
        require_time_estimates: Every task must carry estimated_hours.
        require_specific_actions: Flag generic, vague wording.
        require_dependency_graph: Check dependency references at all.
        prevent_circular_dependencies: Run cycle detection.
        min_estimated_hours: Lowest reasonable estimate.
        max_estimated_hours: Highest acceptable estimate.

    Raises:
        ConfigError: If the bounds are inconsistent.
    """

    max_tasks_per_batch: int | None = 50
    min_content_chars: int | None = DEFAULT_MIN_CONTENT_CHARS
    max_content_chars: int | None = DEFAULT_MAX_CONTENT_CHARS
    max_complexity: int | None = DEFAULT_MAX_COMPLEXITY
    require_time_estimates: bool = True
    require_specific_actions: bool = True
    require_dependency_graph: bool = True
    prevent_circular_dependencies: bool = True
    min_estimated_hours: float | None = DEFAULT_MIN_ESTIMATED_HOURS
    max_estimated_hours: float | None = DEFAULT_MAX_ESTIMATED_HOURS

    def __post_init__(self) -> None:
        problems = self._consistency_problems()
        if problems:
            raise ConfigError("Invalid quality configuration: " + "; ".join(problems))

    def _consistency_problems(self) -> list[str]:
        problems: list[str] = []

        if self.max_tasks_per_batch is not None and self.max_tasks_per_batch < 1:
            problems.append(f"max_tasks_per_batch must be at least 1, got {self.max_tasks_per_batch}")

        if self.min_content_chars is not None and self.min_content_chars < 0:
            problems.append(f"min_content_chars must not be negative, got {self.min_content_chars}")
        if self.max_content_chars is not None and self.max_content_chars < 1:
            problems.append(f"max_content_chars must be at least 1, got {self.max_content_chars}")
        if self.content_char_bounds[0] > self.content_char_bounds[1]:
            problems.append(
                f"min_content_chars {self.content_char_bounds[0]} exceeds "
                f"max_content_chars {self.content_char_bounds[1]}"
            )

        if self.max_complexity is not None and not (
            MIN_COMPLEXITY_SCORE <= self.max_complexity <= MAX_COMPLEXITY_SCORE
        ):
            problems.append(
                f"max_complexity must be between {MIN_COMPLEXITY_SCORE} and "
                f"{MAX_COMPLEXITY_SCORE}, got {self.max_complexity}"
            )

        if self.min_estimated_hours is not None and self.min_estimated_hours < 0:
            problems.append(f"min_estimated_hours must not be negative, got {self.min_estimated_hours}")
        if self.max_estimated_hours is not None and self.max_estimated_hours <= 0:
            problems.append(f"max_estimated_hours must be positive, got {self.max_estimated_hours}")
        if self.estimated_hours_bounds[0] > self.estimated_hours_bounds[1]:
            problems.append(
                f"min_estimated_hours {self.estimated_hours_bounds[0]} exceeds "
                f"max_estimated_hours {self.estimated_hours_bounds[1]}"
            )

        return problems

    @property
    def content_char_bounds(self) -> tuple[int, int]:
        """Effective (min, max) description length, defaults applied."""
        low = self.min_content_chars if self.min_content_chars is not None else DEFAULT_MIN_CONTENT_CHARS
        high = self.max_content_chars if self.max_content_chars is not None else DEFAULT_MAX_CONTENT_CHARS
        return low, high

    @property
    def estimated_hours_bounds(self) -> tuple[float, float]:
        """Effective (min, max) estimate in hours, defaults applied."""
        low = self.min_estimated_hours if self.min_estimated_hours is not None else DEFAULT_MIN_ESTIMATED_HOURS
        high = self.max_estimated_hours if self.max_estimated_hours is not None else DEFAULT_MAX_ESTIMATED_HOURS
        return low, high

    @property
    def complexity_ceiling(self) -> int:
        """Complexity limit used for metrics, even when the check is off."""
        return self.max_complexity if self.max_complexity is not None else DEFAULT_MAX_COMPLEXITY

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> QualityConfig:
        """Build a config from a mapping, rejecting unknown keys.

        Args:
            data: Field names mapped to values; missing fields use defaults.

        Returns:
            The constructed QualityConfig.

        Raises:
            ConfigError: On unknown keys, wrongly typed values or
                inconsistent bounds.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown quality config keys: {', '.join(unknown)}")
        try:
            _QualityTable.model_validate(data)
        except ValidationError as exc:
            problems = [
                f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}"
                for item in exc.errors()
            ]
            raise ConfigError("Invalid quality configuration: " + "; ".join(problems)) from exc
        return cls(**data)


def load_quality_config(path: Path) -> QualityConfig:
    """Load a QualityConfig from the ``[quality]`` table of a TOML file.

    A file without a ``[quality]`` table yields the default configuration.

    Args:
        path: Path to the TOML file.

    Returns:
        Parsed QualityConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigError: On corrupt TOML or invalid values.
    """
    if not path.exists():
        msg = f"Quality config not found: {path}"
        raise FileNotFoundError(msg)

    try:
        raw = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise ConfigError(msg) from exc

    table = raw.get(_QUALITY_TABLE, {})
    if not isinstance(table, dict):
        msg = f"[{_QUALITY_TABLE}] in {path} must be a table"
        raise ConfigError(msg)

    config = QualityConfig.from_mapping(table)
    logger.debug(f"Loaded quality config from {path}: {config}")
    return config


# Default configuration instance for convenience
DEFAULT_QUALITY_CONFIG = QualityConfig()
