"""todo-quality: task-graph integrity and quality validation.

This package validates lists of work items: dependency graphs are checked
for cycles and measured for depth, each item is scored by keyword
heuristics, and a whole list gets metrics, a quality score and
suggestions. A generic threshold gate pipeline judges metrics reported by
an external quality proxy.
"""

from __future__ import annotations

from .config import DEFAULT_QUALITY_CONFIG, QualityConfig, load_quality_config
from .dep_graph import (
    CycleCheck,
    critical_path,
    critical_path_length,
    find_cycle,
    max_depth,
    task_depths,
    topological_order,
    validate_dependencies,
)
from .enforcement import (
    EnforcementConfig,
    EnforcementOutcome,
    EnforcementResult,
    FailureSeverity,
    QualityEnforcer,
    QualityFailure,
)
from .exceptions import ConfigError, TaskListLoadError, TodoQualityError
from .gates import (
    GateKind,
    GatePipelineConfig,
    GateResult,
    QualityGate,
    QualityGatePipeline,
    QualityMetrics,
    evaluate_gates,
)
from .issues import IssueCategory, IssueSeverity, ValidationIssue
from .item_validator import TaskValidator
from .list_validator import (
    TaskListValidationResult,
    TaskListValidator,
    TodoMetrics,
    validate_task_list,
)
from .policy import DEFAULT_POLICY, KeywordPolicy
from .task_list import TaskList, TaskListMetadata
from .task_loader import dump_task_list, load_task_list
from .task_model import ProjectContext, Task, TaskPriority, TaskQualityGates, TaskStatus, new_task

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "CycleCheck",
    "DEFAULT_POLICY",
    "DEFAULT_QUALITY_CONFIG",
    "EnforcementConfig",
    "EnforcementOutcome",
    "EnforcementResult",
    "FailureSeverity",
    "GateKind",
    "GatePipelineConfig",
    "GateResult",
    "IssueCategory",
    "IssueSeverity",
    "KeywordPolicy",
    "ProjectContext",
    "QualityConfig",
    "QualityEnforcer",
    "QualityFailure",
    "QualityGate",
    "QualityGatePipeline",
    "QualityMetrics",
    "Task",
    "TaskList",
    "TaskListLoadError",
    "TaskListMetadata",
    "TaskListValidationResult",
    "TaskListValidator",
    "TaskPriority",
    "TaskQualityGates",
    "TaskStatus",
    "TaskValidator",
    "TodoMetrics",
    "TodoQualityError",
    "ValidationIssue",
    "critical_path",
    "critical_path_length",
    "dump_task_list",
    "evaluate_gates",
    "find_cycle",
    "load_quality_config",
    "load_task_list",
    "max_depth",
    "new_task",
    "task_depths",
    "topological_order",
    "validate_dependencies",
    "validate_task_list",
]
