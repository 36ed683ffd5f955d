"""Load-time validation of stage graphs."""

from enum import Enum

from pydantic import BaseModel, Field

from intakeflow.conditions import compile_condition
from intakeflow.stages.models import FlowDefinition, GuardedTransition, StageDefinition


class Severity(str, Enum):
    """Issue severity levels."""

    ERROR = "error"
    WARNING = "warning"


class Issue(BaseModel):
    """A single validation finding."""

    severity: Severity = Field(..., description="Issue severity")
    code: str = Field(..., description="Stable issue code, e.g. UNKNOWN_FALLBACK_STAGE")
    message: str = Field(..., description="Human-readable description")
    location: str | None = Field(default=None, description="Path inside the flow document")
    reference: str | None = Field(default=None, description="The offending name")

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR


class ValidationResult(BaseModel):
    """Outcome of validating a flow."""

    valid: bool = Field(..., description="No errors were found")
    issues: list[Issue] = Field(default_factory=list, description="All findings")

    @property
    def errors(self) -> list[Issue]:
        return [issue for issue in self.issues if issue.is_error]

    @property
    def warnings(self) -> list[Issue]:
        return [issue for issue in self.issues if not issue.is_error]


class FlowValidator:
    """Validate every stage reference of a flow before it is used.

    Unknown stage names and fields are errors. Conditions that only compile
    with degradations are warnings: they still evaluate, just never to
    true where the untranslated part matters.
    """

    def validate(self, flow: FlowDefinition) -> ValidationResult:
        """Validate a flow definition.

        Args:
            flow: Flow to validate

        Returns:
            ValidationResult with every issue found
        """
        issues: list[Issue] = []

        if not flow.stages:
            issues.append(
                Issue(
                    severity=Severity.ERROR,
                    code="EMPTY_FLOW",
                    message="Flow must have at least one stage",
                    location="stages",
                )
            )
            return ValidationResult(valid=False, issues=issues)

        self._check_designators(flow, issues)
        for name, stage in flow.stages.items():
            self._check_stage(flow, name, stage, issues)

        return ValidationResult(
            valid=not any(issue.is_error for issue in issues),
            issues=issues,
        )

    def _check_designators(self, flow: FlowDefinition, issues: list[Issue]) -> None:
        designators = (
            ("UNKNOWN_INITIAL_STAGE", "initial_stage", flow.config.initial_stage),
            ("UNKNOWN_ERROR_STAGE", "error_stage", flow.config.error_stage),
            ("UNKNOWN_SUCCESS_STAGE", "success_stage", flow.config.success_stage),
        )
        for code, attr, target in designators:
            if target is not None and target not in flow.stages:
                issues.append(
                    Issue(
                        severity=Severity.ERROR,
                        code=code,
                        message=f"config.{attr} references unknown stage '{target}'",
                        location=f"config.{attr}",
                        reference=target,
                    )
                )

    def _check_stage(
        self,
        flow: FlowDefinition,
        name: str,
        stage: StageDefinition,
        issues: list[Issue],
    ) -> None:
        location = f"stages.{name}"

        for field_key in stage.fields_to_collect:
            if field_key not in flow.fields:
                issues.append(
                    Issue(
                        severity=Severity.ERROR,
                        code="UNKNOWN_FIELD",
                        message=f"Stage '{name}' collects undeclared field '{field_key}'",
                        location=f"{location}.fields_to_collect",
                        reference=field_key,
                    )
                )

        self._check_condition(stage.completion_condition, f"{location}.completion_condition", issues)

        if stage.action is not None:
            self._check_condition(
                stage.action.guard_condition, f"{location}.action.guard_condition", issues
            )
            target = stage.action.on_error_stage
            if target is not None and target not in flow.stages:
                issues.append(
                    Issue(
                        severity=Severity.ERROR,
                        code="UNKNOWN_ACTION_ERROR_STAGE",
                        message=f"Action of stage '{name}' falls back to unknown stage '{target}'",
                        location=f"{location}.action.on_error_stage",
                        reference=target,
                    )
                )

        if isinstance(stage.transition, str):
            if stage.transition not in flow.stages:
                issues.append(
                    Issue(
                        severity=Severity.ERROR,
                        code="UNKNOWN_TRANSITION_TARGET",
                        message=f"Stage '{name}' transitions to unknown stage '{stage.transition}'",
                        location=f"{location}.transition",
                        reference=stage.transition,
                    )
                )
        elif isinstance(stage.transition, GuardedTransition):
            self._check_guarded(flow, name, stage.transition, issues)

    def _check_guarded(
        self,
        flow: FlowDefinition,
        name: str,
        transition: GuardedTransition,
        issues: list[Issue],
    ) -> None:
        location = f"stages.{name}.transition"

        for index, guard in enumerate(transition.guards):
            guard_location = f"{location}.guards[{index}]"
            self._check_condition(guard.condition, f"{guard_location}.condition", issues)
            for attr, target in (("on_true", guard.on_true), ("on_false", guard.on_false)):
                if target is not None and target not in flow.stages:
                    issues.append(
                        Issue(
                            severity=Severity.ERROR,
                            code="UNKNOWN_GUARD_TARGET",
                            message=f"Guard {index} of stage '{name}' targets unknown stage '{target}'",
                            location=f"{guard_location}.{attr}",
                            reference=target,
                        )
                    )

        if transition.fallback not in flow.stages:
            issues.append(
                Issue(
                    severity=Severity.ERROR,
                    code="UNKNOWN_FALLBACK_STAGE",
                    message=f"Stage '{name}' falls back to unknown stage '{transition.fallback}'",
                    location=f"{location}.fallback",
                    reference=transition.fallback,
                )
            )

    def _check_condition(self, source: str | None, location: str, issues: list[Issue]) -> None:
        predicate = compile_condition(source)
        if predicate is None or not predicate.is_degraded:
            return
        codes = ", ".join(w.code for w in predicate.warnings)
        issues.append(
            Issue(
                severity=Severity.WARNING,
                code="CONDITION_DEGRADED",
                message=f"Condition '{predicate.source}' compiled with warnings: {codes}",
                location=location,
            )
        )
