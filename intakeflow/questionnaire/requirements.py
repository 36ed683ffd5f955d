"""Per-question requirement evaluation.

A question blocks completion of its step when it is required right now
and its field has no acceptable answer:

    required:     required_now = active
    conditional:  required_now = active and required_if
    optional:     never blocks

File uploads arrive asynchronously and never block. Questions addressed to
internal staff never block a customer-facing conversation.
"""

from collections.abc import Mapping
from typing import Any

from intakeflow.conditions import (
    CompiledPredicate,
    CompileWarning,
    PredicateEvaluator,
    PresenceRuleTable,
    compile_condition,
)
from intakeflow.questionnaire.enums import Audience, RequiredMode
from intakeflow.questionnaire.models import (
    QuestionRequirement,
    RequirementStatus,
    StepDefinition,
)

SKIP_FILE_UPLOAD = "file_upload"
SKIP_NON_CUSTOMER = "non_customer"


def _wrap(predicate: CompiledPredicate | None) -> str:
    return f"({predicate.expression})" if predicate is not None else "True"


def presence_expression(field_key: str) -> str:
    """Expression checking a single field through the presence rules."""
    return f"present(context[{field_key!r}], {field_key!r})"


class RequirementEvaluator:
    """Evaluate question requirements against a resolved view."""

    def __init__(self, presence_rules: PresenceRuleTable | None = None) -> None:
        self._evaluator = PredicateEvaluator(presence_rules)

    @property
    def evaluator(self) -> PredicateEvaluator:
        return self._evaluator

    @property
    def presence_rules(self) -> PresenceRuleTable:
        return self._evaluator.presence_rules

    def skip_reason(
        self, question: QuestionRequirement, *, customer_only: bool = True
    ) -> str | None:
        """Reason the question never blocks, or None if it can block."""
        if question.is_file_upload:
            return SKIP_FILE_UPLOAD
        if customer_only and question.audience is not Audience.CUSTOMER:
            return SKIP_NON_CUSTOMER
        return None

    def evaluate(
        self,
        question: QuestionRequirement,
        view: Mapping[str, Any],
        *,
        customer_only: bool = True,
    ) -> RequirementStatus:
        """Evaluate one question.

        Args:
            question: Requirement metadata
            view: Resolved user data
            customer_only: Skip questions addressed to internal staff

        Returns:
            RequirementStatus describing whether the question blocks
        """
        reason = self.skip_reason(question, customer_only=customer_only)
        if reason is not None:
            return RequirementStatus(
                field_key=question.field_key,
                skipped=True,
                skip_reason=reason,
            )

        is_active = self._evaluator.try_evaluate(
            compile_condition(question.activation_condition), view
        )
        unresolved = is_active is None

        if question.required_mode is RequiredMode.REQUIRED:
            is_required_now = is_active is not False
        elif question.required_mode is RequiredMode.CONDITIONAL:
            is_required_now = is_active is not False
            if is_required_now:
                required_if = self._evaluator.try_evaluate(
                    compile_condition(question.conditional_requirement), view
                )
                unresolved = unresolved or required_if is None
                is_required_now = required_if is not False
        else:
            # optional questions never consult their conditions
            unresolved = False
            is_required_now = False

        # a condition that cannot be evaluated keeps the question open
        is_satisfied = not unresolved and (
            not is_required_now or self._evaluator.is_present(question.field_key, view)
        )

        return RequirementStatus(
            field_key=question.field_key,
            is_active=is_active is not False,
            is_required_now=is_required_now,
            is_satisfied=is_satisfied,
        )

    def satisfaction_expression(
        self, question: QuestionRequirement, *, customer_only: bool = True
    ) -> str | None:
        """Expression text of the question's requirement.

        Returns:
            `(not (<required_now>) or present(...))`, or None when the
            question never blocks
        """
        if self.skip_reason(question, customer_only=customer_only) is not None:
            return None

        active = _wrap(compile_condition(question.activation_condition))

        if question.required_mode is RequiredMode.REQUIRED:
            required_now = active
        elif question.required_mode is RequiredMode.CONDITIONAL:
            condition = _wrap(compile_condition(question.conditional_requirement))
            required_now = f"({active} and {condition})"
        else:
            return None

        return f"(not ({required_now}) or {presence_expression(question.field_key)})"

    def condition_warnings(self, question: QuestionRequirement) -> list[CompileWarning]:
        """Compile warnings of the question's conditions."""
        warnings: list[CompileWarning] = []
        for source in (question.activation_condition, question.conditional_requirement):
            predicate = compile_condition(source)
            if predicate is not None:
                warnings.extend(predicate.warnings)
        return warnings

    def _conditions_parse(self, question: QuestionRequirement) -> bool:
        return all(
            self._evaluator.is_well_formed(compile_condition(source))
            for source in (question.activation_condition, question.conditional_requirement)
        )

    def missing_fields(self, step: StepDefinition, view: Mapping[str, Any]) -> list[str]:
        """Field keys that currently block completion of a step, in question order.

        A step whose activation condition cannot be evaluated never
        completes, so every question that can block is reported. An inactive
        step still reports questions whose conditions do not parse, since
        they break the step's completion predicate as a whole.
        """
        if step.audience is not Audience.CUSTOMER:
            return []

        step_active = self._evaluator.try_evaluate(
            compile_condition(step.activation_condition), view
        )
        if step_active is False:
            return [
                q.field_key
                for q in step.questions
                if self.satisfaction_expression(q) is not None
                and not self._conditions_parse(q)
            ]
        if step_active is None:
            return [
                q.field_key
                for q in step.questions
                if self.satisfaction_expression(q) is not None
            ]

        return [
            q.field_key
            for q in step.questions
            if not self.evaluate(q, view).is_satisfied
        ]
