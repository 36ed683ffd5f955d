"""Error hierarchy for flow and questionnaire configuration.

Configuration errors are raised at load time and are always fatal: they
point at an authoring defect, not at runtime data. Malformed conditions and
failing presence rules are never raised; they degrade to warnings and to
"not present" respectively.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from intakeflow.stages.validation import Issue


class IntakeflowError(Exception):
    """Base exception for all intakeflow errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(IntakeflowError):
    """Raised when a flow, step or alias configuration is invalid.

    Attributes:
        code: Stable machine-readable error code (e.g. UNKNOWN_FALLBACK_STAGE)
        reference: The offending name (stage, field or alias key)
    """

    code: str = "CONFIGURATION_INVALID"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        reference: str | None = None,
    ) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        self.reference = reference


class FlowConfigurationError(ConfigurationError):
    """Raised when a stage graph fails load-time validation.

    Carries every issue found; `code` and `reference` describe the first error.
    """

    def __init__(self, message: str, issues: "list[Issue]") -> None:
        errors = [issue for issue in issues if issue.is_error]
        first = errors[0] if errors else None
        super().__init__(
            message,
            code=first.code if first else None,
            reference=first.reference if first else None,
        )
        self.issues = issues


class DuplicateQuestionError(ConfigurationError):
    """Raised when two questions of one step share a field key."""

    code = "DUPLICATE_QUESTION"


class UnknownFieldError(ConfigurationError):
    """Raised when a question references a field missing from the field table."""

    code = "UNKNOWN_FIELD"


class AliasTableError(ConfigurationError):
    """Raised when canonical alias groups overlap or point back to themselves."""

    code = "INVALID_ALIAS_TABLE"
