"""Condition DSL: compilation, boolean tolerance and sandboxed evaluation."""

from intakeflow.conditions.boolean_tolerance import AFFIRMATIVE_TOKENS, NEGATIVE_TOKENS
from intakeflow.conditions.compiler import compile_condition
from intakeflow.conditions.evaluator import (
    ContextView,
    PredicateEvaluator,
    evaluate,
    evaluate_condition,
)
from intakeflow.conditions.helpers import contains, is_present_value, text
from intakeflow.conditions.models import CompiledPredicate, CompileWarning
from intakeflow.conditions.presence import (
    PresenceRule,
    PresenceRuleTable,
    default_presence_rules,
)

__all__ = [
    "AFFIRMATIVE_TOKENS",
    "NEGATIVE_TOKENS",
    "CompileWarning",
    "CompiledPredicate",
    "ContextView",
    "PredicateEvaluator",
    "PresenceRule",
    "PresenceRuleTable",
    "compile_condition",
    "contains",
    "default_presence_rules",
    "evaluate",
    "evaluate_condition",
    "is_present_value",
    "text",
]
