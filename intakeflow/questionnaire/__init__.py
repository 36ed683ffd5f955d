"""Questionnaire steps: requirement evaluation and completion synthesis."""

from intakeflow.conditions.presence import (
    PresenceRuleTable,
    default_presence_rules,
)
from intakeflow.questionnaire.completion import CompletionSynthesizer
from intakeflow.questionnaire.enums import Audience, RequiredMode
from intakeflow.questionnaire.loader import load_step, load_step_file
from intakeflow.questionnaire.models import (
    QuestionRequirement,
    RequirementStatus,
    StepDefinition,
)
from intakeflow.questionnaire.requirements import (
    SKIP_FILE_UPLOAD,
    SKIP_NON_CUSTOMER,
    RequirementEvaluator,
)

__all__ = [
    "SKIP_FILE_UPLOAD",
    "SKIP_NON_CUSTOMER",
    "Audience",
    "CompletionSynthesizer",
    "PresenceRuleTable",
    "QuestionRequirement",
    "RequiredMode",
    "RequirementEvaluator",
    "RequirementStatus",
    "StepDefinition",
    "default_presence_rules",
    "load_step",
    "load_step_file",
]
