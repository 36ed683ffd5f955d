"""Sandboxed evaluation of compiled predicates."""

import ast
from collections.abc import Iterator, Mapping
from functools import lru_cache
from typing import Any

from simpleeval import EvalWithCompoundTypes, InvalidExpression

from intakeflow.conditions.compiler import compile_condition
from intakeflow.conditions.helpers import contains, lower, text, trim
from intakeflow.conditions.models import CompiledPredicate
from intakeflow.conditions.presence import PresenceRuleTable, default_presence_rules
from intakeflow.observability.logging import get_logger

logger = get_logger(__name__)


class ContextView:
    """Read-only view over resolved data; missing keys read as None."""

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | None) -> None:
        self._data: Mapping[str, Any] = data if data is not None else {}

    def __getitem__(self, key: str) -> Any:
        return self._data.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)


class PredicateEvaluator:
    """Evaluate compiled predicates against a resolved view.

    Uses simpleeval so that only the `context` binding and the helper
    functions are reachable from an expression. Any failure evaluates to
    False, so a broken condition keeps a step incomplete instead of
    skipping it.
    """

    def __init__(self, presence_rules: PresenceRuleTable | None = None) -> None:
        self._presence_rules = (
            presence_rules if presence_rules is not None else default_presence_rules()
        )
        self._functions = {
            "present": self._present,
            "contains": contains,
            "text": text,
            "lower": lower,
            "trim": trim,
        }

    @property
    def presence_rules(self) -> PresenceRuleTable:
        return self._presence_rules

    def _present(self, value: Any, field_key: str | None = None) -> bool:
        return self._presence_rules.is_present(field_key, value)

    def is_present(self, field_key: str, view: Mapping[str, Any]) -> bool:
        """Check a single field of the view using the presence rules."""
        return self._presence_rules.is_present(field_key, ContextView(view)[field_key])

    def is_well_formed(self, predicate: CompiledPredicate | None) -> bool:
        """Check that a predicate's expression parses at all."""
        if predicate is None:
            return True
        try:
            ast.parse(predicate.expression.strip(), mode="eval")
        except (SyntaxError, ValueError):
            return False
        return True

    def evaluate(
        self,
        predicate: CompiledPredicate | None,
        view: Mapping[str, Any] | None,
    ) -> bool:
        """Evaluate a predicate.

        Args:
            predicate: Compiled predicate; None means "no condition"
            view: Resolved field values

        Returns:
            The predicate's truth value, True for no predicate and False
            when evaluation fails
        """
        return self.try_evaluate(predicate, view) is True

    def try_evaluate(
        self,
        predicate: CompiledPredicate | None,
        view: Mapping[str, Any] | None,
    ) -> bool | None:
        """Evaluate a predicate, reporting failure as None instead of False."""
        if predicate is None:
            return True

        try:
            evaluator = EvalWithCompoundTypes(
                names={"context": ContextView(view)},
                functions=self._functions,
            )
            return bool(evaluator.eval(predicate.expression))

        except InvalidExpression as e:
            logger.warning(
                "condition_evaluation_failed",
                source=predicate.source,
                reason="invalid_expression",
                error=str(e),
            )

        except SyntaxError as e:
            logger.warning(
                "condition_evaluation_failed",
                source=predicate.source,
                reason="syntax_error",
                error=str(e),
            )

        except Exception as e:  # noqa: BLE001
            logger.warning(
                "condition_evaluation_failed",
                source=predicate.source,
                reason="evaluation_error",
                error=str(e),
            )

        return None


@lru_cache(maxsize=1)
def get_default_evaluator() -> PredicateEvaluator:
    """Shared evaluator using the built-in presence rules."""
    return PredicateEvaluator()


def evaluate(
    predicate: CompiledPredicate | None,
    view: Mapping[str, Any] | None,
    *,
    presence_rules: PresenceRuleTable | None = None,
) -> bool:
    """Evaluate a compiled predicate against a resolved view."""
    if presence_rules is None:
        return get_default_evaluator().evaluate(predicate, view)
    return PredicateEvaluator(presence_rules).evaluate(predicate, view)


def evaluate_condition(
    expr: str | None,
    view: Mapping[str, Any] | None,
    *,
    presence_rules: PresenceRuleTable | None = None,
) -> bool:
    """Compile and evaluate a DSL condition in one step."""
    return evaluate(compile_condition(expr), view, presence_rules=presence_rules)
