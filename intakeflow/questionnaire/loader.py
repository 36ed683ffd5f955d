"""Loading of questionnaire step documents.

Step documents come in the spreadsheet export shape:

    {
        "process": {"process_key": "...", "ask_if": "...", "audience": "customer"},
        "questions": [{"field_key_en": "...", "required_mode": "required", ...}]
    }

A flat document carrying the step keys next to `questions` is accepted too.
"""

import json
from collections.abc import Collection, Mapping
from pathlib import Path
from typing import Any

from intakeflow.errors import DuplicateQuestionError, UnknownFieldError
from intakeflow.observability.logging import get_logger
from intakeflow.questionnaire.models import QuestionRequirement, StepDefinition

logger = get_logger(__name__)


def _raw_field_key(raw: Mapping[str, Any]) -> str:
    value = raw.get("field_key") or raw.get("field_key_en")
    return str(value or "").strip()


def load_step(
    data: Mapping[str, Any],
    *,
    field_keys: Collection[str] | None = None,
) -> StepDefinition:
    """Build a step definition from a document.

    Args:
        data: Step document
        field_keys: Known field keys; when given, every question must use one

    Returns:
        Validated StepDefinition

    Raises:
        DuplicateQuestionError: If two questions share a field key
        UnknownFieldError: If a question key is missing from `field_keys`
    """
    process = data.get("process")
    header = process if isinstance(process, Mapping) else data
    step_key = str(header.get("key") or header.get("process_key") or "")

    questions: list[QuestionRequirement] = []
    seen: set[str] = set()

    for index, raw in enumerate(data.get("questions") or []):
        if not isinstance(raw, Mapping):
            logger.warning("question_not_a_mapping", step_key=step_key, index=index)
            continue

        key = _raw_field_key(raw)
        if not key:
            logger.warning("question_without_field_key", step_key=step_key, index=index)
            continue

        if key in seen:
            raise DuplicateQuestionError(
                f"Step '{step_key}' defines question '{key}' more than once",
                reference=key,
            )
        if field_keys is not None and key not in field_keys:
            raise UnknownFieldError(
                f"Step '{step_key}' asks for unknown field '{key}'",
                reference=key,
            )

        seen.add(key)
        questions.append(QuestionRequirement.model_validate({**raw, "field_key": key}))

    step = StepDefinition.model_validate(
        {
            **{k: v for k, v in header.items() if k != "questions"},
            "key": step_key,
            "questions": questions,
        }
    )

    logger.debug("step_loaded", step_key=step.key, question_count=len(step.questions))
    return step


def load_step_file(
    path: str | Path,
    *,
    field_keys: Collection[str] | None = None,
) -> StepDefinition:
    """Load a step definition from a JSON file."""
    with Path(path).open(encoding="utf-8") as f:
        data = json.load(f)
    return load_step(data, field_keys=field_keys)
