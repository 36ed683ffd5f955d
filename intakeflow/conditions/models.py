"""Models for condition compilation."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TokenKind(str, Enum):
    """Classification of a slice of condition source text.

    - STRING: a quoted literal, never rewritten
    - IDENTIFIER: a bare word outside quotes
    - NUMBER: a run of digits
    - OPERATOR: a run of comparison / logical operator characters
    - WHITESPACE: a run of whitespace
    - OTHER: any other single character (parentheses, commas, ...)
    - CODE: executable text emitted by a rewrite pass
    - FIELD: a bound field access on the evaluation context
    """

    STRING = "string"
    IDENTIFIER = "identifier"
    NUMBER = "number"
    OPERATOR = "operator"
    WHITESPACE = "whitespace"
    OTHER = "other"
    CODE = "code"
    FIELD = "field"


@dataclass(frozen=True)
class Token:
    """A single token of a condition.

    `name` is set on FIELD tokens and holds the bare field key.
    `terminated` is False only for a quoted literal missing its closing quote.
    """

    kind: TokenKind
    text: str
    name: str | None = None
    terminated: bool = True


class CompileWarning(BaseModel):
    """A best-effort rewrite that could not be applied cleanly."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., description="Warning code, e.g. unterminated_literal")
    detail: str = Field(default="", description="Offending source fragment")


class CompiledPredicate(BaseModel):
    """Executable form of a condition.

    `expression` is a Python expression over the single binding `context`
    plus the helper predicates `present` and `contains` and the utilities
    `text`, `lower` and `trim`. Instances are immutable and compare equal
    when compiled from the same source.
    """

    model_config = ConfigDict(frozen=True)

    source: str = Field(..., description="Condition source the predicate was built from")
    expression: str = Field(..., description="Python expression evaluated in the sandbox")
    warnings: tuple[CompileWarning, ...] = Field(
        default=(), description="Degradations recorded while compiling"
    )

    @property
    def is_degraded(self) -> bool:
        """Check whether compilation had to leave parts of the source verbatim."""
        return bool(self.warnings)

    @classmethod
    def constant(cls, value: bool) -> "CompiledPredicate":
        """Build a predicate that always evaluates to `value`."""
        literal = "True" if value else "False"
        return cls(source=literal.lower(), expression=literal)
