"""Quality-proxy request and response models with Pydantic validation."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from ..gates import QualityMetrics


class QualityViolation(BaseModel):
    """A single violation reported by the proxy."""

    model_config = {"extra": "ignore"}

    violation_type: str
    severity: Literal["error", "warning", "info"] = "error"
    location: str | None = None
    message: str
    suggestion: str | None = None

    @property
    def line_number(self) -> int | None:
        """Line parsed from a ``file:line[:column]`` location, if present."""
        if not self.location:
            return None
        parts = self.location.split(":")
        if len(parts) < 2:
            return None
        try:
            return int(parts[1])
        except ValueError:
            return None


class QualityReport(BaseModel):
    """Quality assessment attached to a proxy response."""

    model_config = {"extra": "ignore"}

    passed: bool = True
    violations: list[QualityViolation] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class ProxyMetrics(BaseModel):
    """Metrics measured by the proxy, mirroring gates.QualityMetrics."""

    model_config = {"extra": "ignore"}

    coverage: float = Field(default=0.0, ge=0.0, le=100.0)
    complexity: int = Field(default=0, ge=0)
    doctest_count: int = Field(default=0, ge=0)
    property_test_count: int = Field(default=0, ge=0)
    example_count: int = Field(default=0, ge=0)
    defect_comment_count: int = Field(default=0, ge=0)

    def to_quality_metrics(self) -> QualityMetrics:
        return QualityMetrics(**self.model_dump())


class ProxyRequest(BaseModel):
    """Request payload sent to the proxy."""

    model_config = {"extra": "forbid"}

    operation: Literal["validate", "refactor", "format"] = "validate"
    file_path: str
    content: str
    mode: Literal["strict", "advisory", "auto_fix"] = "strict"
    max_complexity: int = 8
    allow_defect_comments: bool = False
    require_docs: bool = True

    @field_validator("file_path")
    @classmethod
    def validate_file_path(cls, v: str) -> str:
        """Validate file_path is not empty or whitespace."""
        if not v or not v.strip():
            raise ValueError("file_path must not be empty or whitespace")
        return v


class ProxyResponse(BaseModel):
    """Response returned by the proxy."""

    model_config = {"extra": "ignore"}

    status: Literal["accepted", "modified", "rejected"]
    final_content: str = ""
    quality_report: QualityReport = Field(default_factory=QualityReport)
    # None when the proxy measured nothing; gates are skipped then
    metrics: ProxyMetrics | None = None
    applied_fixes: list[str] = Field(default_factory=list)
