"""Loading of flow documents into stage graphs."""

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from intakeflow.conditions import PredicateEvaluator
from intakeflow.errors import FlowConfigurationError
from intakeflow.stages.graph import DEFAULT_MAX_HOPS, StageGraph
from intakeflow.stages.models import FlowDefinition
from intakeflow.stages.validation import Issue, Severity


def parse_flow(data: Mapping[str, Any]) -> FlowDefinition:
    """Parse a flow document without validating stage references.

    Raises:
        FlowConfigurationError: If the document does not have the flow shape
    """
    try:
        return FlowDefinition.model_validate(dict(data))
    except ValidationError as e:
        issues = [
            Issue(
                severity=Severity.ERROR,
                code="INVALID_FLOW_DOCUMENT",
                message=error["msg"],
                location=".".join(str(part) for part in error["loc"]),
            )
            for error in e.errors()
        ]
        raise FlowConfigurationError(
            f"Flow document is malformed: {issues[0].message}", issues
        ) from e


def load_flow(
    data: Mapping[str, Any],
    *,
    evaluator: PredicateEvaluator | None = None,
    max_hops: int = DEFAULT_MAX_HOPS,
) -> StageGraph:
    """Parse and validate a flow document.

    Raises:
        FlowConfigurationError: If the document is malformed or references
            unknown stages or fields
    """
    return StageGraph.from_definition(
        parse_flow(data), evaluator=evaluator, max_hops=max_hops
    )


def load_flow_file(
    path: str | Path,
    *,
    evaluator: PredicateEvaluator | None = None,
    max_hops: int = DEFAULT_MAX_HOPS,
) -> StageGraph:
    """Load a flow graph from a JSON file."""
    with Path(path).open(encoding="utf-8") as f:
        data = json.load(f)
    return load_flow(data, evaluator=evaluator, max_hops=max_hops)
