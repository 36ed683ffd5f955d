"""Stage graph: validated conversation stages and their traversal."""

from intakeflow.stages.graph import DEFAULT_MAX_HOPS, StageGraph
from intakeflow.stages.loader import load_flow, load_flow_file, parse_flow
from intakeflow.stages.models import (
    FieldDefinition,
    FlowConfig,
    FlowDefinition,
    Guard,
    GuardedTransition,
    StageAction,
    StageAdvance,
    StageDefinition,
)
from intakeflow.stages.validation import FlowValidator, Issue, Severity, ValidationResult

__all__ = [
    "DEFAULT_MAX_HOPS",
    "FieldDefinition",
    "FlowConfig",
    "FlowDefinition",
    "FlowValidator",
    "Guard",
    "GuardedTransition",
    "Issue",
    "Severity",
    "StageAction",
    "StageAdvance",
    "StageDefinition",
    "StageGraph",
    "ValidationResult",
    "load_flow",
    "load_flow_file",
    "parse_flow",
]
