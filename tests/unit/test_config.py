"""Tests for QualityConfig and TOML loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from todo_quality.config import DEFAULT_QUALITY_CONFIG, QualityConfig, load_quality_config
from todo_quality.exceptions import ConfigError


class TestQualityConfig:
    def test_defaults(self) -> None:
        config = QualityConfig()

        assert config.max_tasks_per_batch == 50
        assert config.content_char_bounds == (10, 100)
        assert config.max_complexity == 8
        assert config.estimated_hours_bounds == (0.5, 40.0)
        assert config.require_time_estimates
        assert config.prevent_circular_dependencies

    def test_none_falls_back_to_defaults(self) -> None:
        config = QualityConfig(min_content_chars=None, max_complexity=None)

        assert config.content_char_bounds == (10, 100)
        assert config.complexity_ceiling == 8

    @pytest.mark.parametrize(
        "overrides",
        [
            {"min_content_chars": 50, "max_content_chars": 20},
            {"min_estimated_hours": 10.0, "max_estimated_hours": 5.0},
            {"max_tasks_per_batch": 0},
            {"max_complexity": 11},
            {"max_complexity": 0},
            {"max_estimated_hours": 0.0},
            {"min_content_chars": -1},
        ],
    )
    def test_inconsistent_config_rejected(self, overrides: dict[str, object]) -> None:
        with pytest.raises(ConfigError):
            QualityConfig(**overrides)  # type: ignore[arg-type]

    def test_config_error_is_value_error(self) -> None:
        with pytest.raises(ValueError, match="exceeds"):
            QualityConfig(min_content_chars=50, max_content_chars=20)

    def test_from_mapping_rejects_unknown_keys(self) -> None:
        with pytest.raises(ConfigError, match="max_todos"):
            QualityConfig.from_mapping({"max_todos": 3})

    @pytest.mark.parametrize(
        "data",
        [
            {"max_tasks_per_batch": "fifty"},
            {"require_time_estimates": "no"},
            {"max_complexity": 5.5},
            {"max_tasks_per_batch": True},
            {"min_estimated_hours": "1"},
        ],
    )
    def test_from_mapping_rejects_wrong_types(self, data: dict[str, object]) -> None:
        key = next(iter(data))

        with pytest.raises(ConfigError, match=key):
            QualityConfig.from_mapping(data)

    def test_from_mapping_accepts_int_for_hours(self) -> None:
        config = QualityConfig.from_mapping({"max_estimated_hours": 12})

        assert config.estimated_hours_bounds == (0.5, 12)

    def test_to_dict_round_trip(self) -> None:
        config = QualityConfig(max_complexity=5, require_time_estimates=False)

        assert QualityConfig.from_mapping(config.to_dict()) == config

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            DEFAULT_QUALITY_CONFIG.max_complexity = 3  # type: ignore[misc]


class TestLoadQualityConfig:
    def test_loads_quality_table(self, tmp_path: Path) -> None:
        path = tmp_path / "quality.toml"
        path.write_text("[quality]\nmax_complexity = 5\nrequire_time_estimates = false\n")

        config = load_quality_config(path)

        assert config.max_complexity == 5
        assert not config.require_time_estimates
        assert config.max_tasks_per_batch == 50

    def test_missing_table_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "quality.toml"
        path.write_text("[other]\nx = 1\n")

        assert load_quality_config(path) == QualityConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_quality_config(tmp_path / "nope.toml")

    def test_corrupt_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "quality.toml"
        path.write_text("[quality\n")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_quality_config(path)

    def test_non_table(self, tmp_path: Path) -> None:
        path = tmp_path / "quality.toml"
        path.write_text('quality = "strict"\n')

        with pytest.raises(ConfigError, match="must be a table"):
            load_quality_config(path)

    def test_invalid_values(self, tmp_path: Path) -> None:
        path = tmp_path / "quality.toml"
        path.write_text("[quality]\nmin_content_chars = 200\n")

        with pytest.raises(ConfigError):
            load_quality_config(path)

    def test_string_values_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "quality.toml"
        path.write_text('[quality]\nmax_tasks_per_batch = "fifty"\nrequire_time_estimates = "no"\n')

        with pytest.raises(ConfigError) as exc_info:
            load_quality_config(path)

        assert "max_tasks_per_batch" in str(exc_info.value)
        assert "require_time_estimates" in str(exc_info.value)
