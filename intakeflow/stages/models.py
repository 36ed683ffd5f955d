"""Stage graph domain models.

Flow documents written for the original admin UI use camelCase keys
(`fieldsToCollect`, `nextStage`, `conditional`, `ifTrue`, `toolName`,
`initialStage`); both spellings are accepted.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class FieldDefinition(BaseModel):
    """A field a flow may collect."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str = Field(default="string", description="Value type: string, boolean, number")
    description: str = Field(default="", description="What the field holds")
    sensitive: bool = Field(default=False, description="Holds personal data")


class StageAction(BaseModel):
    """Side-effecting operation run by the host when a stage completes."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    operation_name: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("operation_name", "toolName"),
        description="Operation the host should run",
    )
    guard_condition: str | None = Field(
        default=None,
        validation_alias=AliasChoices("guard_condition", "condition"),
        description="DSL condition; the action runs only when it holds",
    )
    on_error_stage: str | None = Field(
        default=None,
        validation_alias=AliasChoices("on_error_stage", "onErrorStage"),
        description="Stage to move to when the operation fails",
    )

    @model_validator(mode="before")
    @classmethod
    def lift_on_error(cls, data: Any) -> Any:
        """Take `onError.nextStage` as the error stage of legacy documents."""
        if not isinstance(data, dict):
            return data
        on_error = data.get("onError")
        if isinstance(on_error, dict) and on_error.get("nextStage"):
            if not data.get("on_error_stage") and not data.get("onErrorStage"):
                data = {**data, "on_error_stage": on_error["nextStage"]}
        return data


class Guard(BaseModel):
    """One guarded alternative of a transition."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    condition: str = Field(..., min_length=1, description="DSL condition")
    on_true: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("on_true", "ifTrue"),
        description="Stage taken when the condition holds",
    )
    on_false: str | None = Field(
        default=None,
        validation_alias=AliasChoices("on_false", "ifFalse"),
        description="Stage taken when the condition is false",
    )


class GuardedTransition(BaseModel):
    """Ordered guarded alternatives with a mandatory fallback."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    guards: tuple[Guard, ...] = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("guards", "conditional"),
        description="Guards in evaluation order",
    )
    fallback: str = Field(..., min_length=1, description="Stage taken when no guard decides")


class StageDefinition(BaseModel):
    """A named conversation stage."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field(default="", description="Stage name, filled from the flow key")
    description: str = Field(default="", description="What the stage is for")
    fields_to_collect: tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("fields_to_collect", "fieldsToCollect"),
        description="Fields that must be present before leaving the stage",
    )
    completion_condition: str | None = Field(
        default=None,
        validation_alias=AliasChoices("completion_condition", "completionCondition"),
        description="Extra DSL condition for completing the stage",
    )
    action: StageAction | None = Field(default=None, description="Guarded action")
    transition: str | GuardedTransition | None = Field(
        default=None,
        validation_alias=AliasChoices("transition", "nextStage"),
        description="Fixed next stage or guarded alternatives; None for terminal stages",
    )

    @property
    def is_terminal(self) -> bool:
        return self.transition is None


class FlowConfig(BaseModel):
    """Graph-level stage designators."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    initial_stage: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("initial_stage", "initialStage"),
        description="Stage a new conversation starts in",
    )
    error_stage: str | None = Field(
        default=None,
        validation_alias=AliasChoices("error_stage", "errorStage"),
        description="Stage used when the host hits an unhandled error",
    )
    success_stage: str | None = Field(
        default=None,
        validation_alias=AliasChoices("success_stage", "successStage"),
        description="Stage reached when the flow is done",
    )


class FlowDefinition(BaseModel):
    """A complete flow: field table, stages and designators."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field(default="", description="Flow name or slug")
    fields: dict[str, FieldDefinition] = Field(
        default_factory=dict, description="Field table"
    )
    stages: dict[str, StageDefinition] = Field(
        default_factory=dict, description="Stages by name"
    )
    config: FlowConfig = Field(..., description="Stage designators")

    @model_validator(mode="before")
    @classmethod
    def name_stages(cls, data: Any) -> Any:
        """Stage names default to their key in the flow document."""
        if not isinstance(data, dict) or not isinstance(data.get("stages"), dict):
            return data
        stages = {}
        for key, stage in data["stages"].items():
            if isinstance(stage, dict) and not stage.get("name"):
                stage = {**stage, "name": key}
            stages[key] = stage
        return {**data, "stages": stages}


class StageAdvance(BaseModel):
    """Result of advancing through a stage graph."""

    model_config = ConfigDict(frozen=True)

    start_stage: str = Field(..., description="Stage the advance started from")
    stage: str = Field(..., description="Stage the conversation is now in")
    path: list[str] = Field(default_factory=list, description="Stages visited, in order")
    missing_fields: list[str] = Field(
        default_factory=list, description="Fields the current stage still needs"
    )
    pending_action: str | None = Field(
        default=None, description="Operation the host must run before moving on"
    )
    is_terminal: bool = Field(default=False, description="Current stage has no transition")
    loop_detected: bool = Field(default=False, description="Traversal stopped on a cycle")

    @property
    def moved(self) -> bool:
        return self.stage != self.start_stage
