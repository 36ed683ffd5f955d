"""Synthesis of step completion predicates.

A step is complete when it does not apply at all, or when every question
that currently blocks has an acceptable answer:

    (not <step activation>) or (<q1 satisfied> and <q2 satisfied> ...)

The result is a single compiled predicate, so hosts can store it alongside
the step and evaluate it like any other condition.
"""

from collections.abc import Mapping
from typing import Any

from intakeflow.conditions import (
    CompiledPredicate,
    CompileWarning,
    PresenceRuleTable,
    compile_condition,
)
from intakeflow.observability.logging import get_logger
from intakeflow.questionnaire.enums import Audience
from intakeflow.questionnaire.models import StepDefinition
from intakeflow.questionnaire.requirements import RequirementEvaluator

logger = get_logger(__name__)


class CompletionSynthesizer:
    """Build and evaluate completion predicates for questionnaire steps."""

    def __init__(
        self,
        presence_rules: PresenceRuleTable | None = None,
        requirements: RequirementEvaluator | None = None,
    ) -> None:
        self._requirements = requirements or RequirementEvaluator(presence_rules)

    @property
    def requirements(self) -> RequirementEvaluator:
        return self._requirements

    def synthesize(self, step: StepDefinition) -> CompiledPredicate:
        """Build the completion predicate of a step.

        Args:
            step: Step definition

        Returns:
            Predicate that is true once the step needs nothing more
        """
        source = f"completion:{step.key}"

        if step.audience is not Audience.CUSTOMER:
            return CompiledPredicate(source=source, expression="True")

        warnings: list[CompileWarning] = []

        activation = compile_condition(step.activation_condition)
        if activation is None:
            skip = "False"
        else:
            skip = f"not ({activation.expression})"
            warnings.extend(activation.warnings)

        checks: list[str] = []
        for question in step.questions:
            expression = self._requirements.satisfaction_expression(question)
            if expression is None:
                continue
            checks.append(expression)
            warnings.extend(self._requirements.condition_warnings(question))

        all_satisfied = " and ".join(checks) if checks else "True"

        logger.debug(
            "completion_predicate_synthesized",
            step_key=step.key,
            blocking_questions=len(checks),
            degraded=bool(warnings),
        )

        return CompiledPredicate(
            source=source,
            expression=f"({skip}) or ({all_satisfied})",
            warnings=tuple(dict.fromkeys(warnings)),
        )

    def is_complete(self, step: StepDefinition, view: Mapping[str, Any]) -> bool:
        """Evaluate the step's completion predicate against a resolved view."""
        return self._requirements.evaluator.evaluate(self.synthesize(step), view)
