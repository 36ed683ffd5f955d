"""Questionnaire domain models."""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from intakeflow.questionnaire.enums import Audience, RequiredMode

FILE_ANSWER_KIND = "file"


class QuestionRequirement(BaseModel):
    """Requirement metadata of a single question.

    Accepts both the spreadsheet export keys (`field_key_en`, `ask_if`,
    `required_if`, `input_type`) and the descriptive names.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    field_key: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("field_key", "field_key_en"),
        description="Key of the answer in user data",
    )
    required_mode: RequiredMode = Field(
        default=RequiredMode.OPTIONAL, description="How the question blocks completion"
    )
    activation_condition: str | None = Field(
        default=None,
        validation_alias=AliasChoices("activation_condition", "ask_if"),
        description="DSL condition under which the question is asked",
    )
    conditional_requirement: str | None = Field(
        default=None,
        validation_alias=AliasChoices("conditional_requirement", "required_if"),
        description="DSL condition under which a conditional question is required",
    )
    answer_kind: str | None = Field(
        default=None,
        validation_alias=AliasChoices("answer_kind", "input_type"),
        description="Input widget kind, e.g. text, yes_no, file",
    )
    audience: Audience = Field(default=Audience.CUSTOMER, description="Who answers")

    @field_validator("field_key", mode="before")
    @classmethod
    def strip_field_key(cls, v: Any) -> Any:
        """Question identity is the trimmed key."""
        return v.strip() if isinstance(v, str) else v

    @field_validator("required_mode", mode="before")
    @classmethod
    def parse_required_mode(cls, v: Any) -> RequiredMode:
        return RequiredMode.parse(v)

    @field_validator("audience", mode="before")
    @classmethod
    def parse_audience(cls, v: Any) -> Audience:
        return Audience.parse(v)

    @property
    def is_file_upload(self) -> bool:
        return (self.answer_kind or "").strip().lower() == FILE_ANSWER_KIND


class StepDefinition(BaseModel):
    """A questionnaire step: an ordered group of questions."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    key: str = Field(
        default="",
        validation_alias=AliasChoices("key", "process_key"),
        description="Step identifier",
    )
    title: str | None = Field(
        default=None,
        validation_alias=AliasChoices("title", "title_he"),
        description="Display title",
    )
    activation_condition: str | None = Field(
        default=None,
        validation_alias=AliasChoices("activation_condition", "ask_if"),
        description="DSL condition under which the step applies at all",
    )
    audience: Audience = Field(default=Audience.CUSTOMER, description="Who answers")
    questions: tuple[QuestionRequirement, ...] = Field(
        default=(), description="Questions in display order"
    )

    @field_validator("audience", mode="before")
    @classmethod
    def parse_audience(cls, v: Any) -> Audience:
        return Audience.parse(v)

    @property
    def field_keys(self) -> list[str]:
        return [q.field_key for q in self.questions]

    def question(self, field_key: str) -> QuestionRequirement | None:
        """Get a question by its field key."""
        wanted = field_key.strip()
        for q in self.questions:
            if q.field_key == wanted:
                return q
        return None


class RequirementStatus(BaseModel):
    """Outcome of evaluating one question against a resolved view."""

    model_config = ConfigDict(frozen=True)

    field_key: str = Field(..., description="Question field key")
    skipped: bool = Field(default=False, description="Question never blocks")
    skip_reason: str | None = Field(default=None, description="file_upload or non_customer")
    is_active: bool = Field(default=True, description="Activation condition holds")
    is_required_now: bool = Field(default=False, description="Question currently blocks")
    is_satisfied: bool = Field(default=True, description="Requirement is met")

    @property
    def is_blocking(self) -> bool:
        return not self.is_satisfied
