"""Compiler from the condition DSL to sandboxed Python expressions.

The DSL is what questionnaire authors write in spreadsheets:

    business_type = 'retail' AND (has_employees = true OR items includes 'stock')

Compilation tokenizes once and then applies a fixed sequence of rewrite
passes, each a pure function over the token list. Nothing is validated
semantically; text the passes do not understand is kept verbatim and
reported as a warning, and the evaluator turns any resulting failure into
a `False` result.
"""

from collections.abc import Callable
from functools import lru_cache

from intakeflow.conditions.boolean_tolerance import rewrite_boolean_comparisons
from intakeflow.conditions.models import (
    CompiledPredicate,
    CompileWarning,
    Token,
    TokenKind,
)
from intakeflow.conditions.tokenizer import render, tokenize
from intakeflow.observability.logging import get_logger

logger = get_logger(__name__)

CONNECTIVE_WORDS = frozenset({"and", "or"})
SYMBOLIC_CONNECTIVES = {"&&": " and ", "||": " or ", "!": " not "}
MEMBERSHIP_KEYWORD = "includes"

COMPARISON_OPERATORS = {
    "=": "==",
    "==": "==",
    "===": "==",
    "!=": "!=",
    "!==": "!=",
    "<": "<",
    ">": ">",
    "<=": "<=",
    ">=": ">=",
}

RESERVED_LITERALS = {
    "true": "True",
    "false": "False",
    "null": "None",
    "undefined": "None",
}
HELPER_NAMES = frozenset({"present", "contains"})
UTILITY_NAMES = frozenset({"text", "lower", "trim"})

# Punctuation that is valid in the emitted expression as-is
PASSTHROUGH_CHARS = frozenset("(),-")

COMPILE_CACHE_SIZE = 1024

RewritePass = Callable[[list[Token]], list[Token]]


def rewrite_connectives(tokens: list[Token]) -> list[Token]:
    """Map `AND`/`OR` (any case) and `&&`, `||`, `!` to Python connectives."""
    result: list[Token] = []
    for token in tokens:
        if token.kind is TokenKind.IDENTIFIER and token.text.lower() in CONNECTIVE_WORDS:
            result.append(Token(TokenKind.CODE, token.text.lower()))
        elif token.kind is TokenKind.OPERATOR and token.text in SYMBOLIC_CONNECTIVES:
            result.append(Token(TokenKind.CODE, SYMBOLIC_CONNECTIVES[token.text]))
        else:
            result.append(token)
    return result


def _is_membership(tokens: list[Token], i: int) -> bool:
    """Check for `<identifier> includes '<literal>'` starting at `i`."""
    if i + 4 >= len(tokens):
        return False
    subject, gap, keyword, gap2, literal = tokens[i : i + 5]
    return (
        subject.kind is TokenKind.IDENTIFIER
        and gap.kind is TokenKind.WHITESPACE
        and keyword.kind is TokenKind.IDENTIFIER
        and keyword.text.lower() == MEMBERSHIP_KEYWORD
        and gap2.kind is TokenKind.WHITESPACE
        and literal.kind is TokenKind.STRING
        and literal.terminated
        and literal.text.startswith("'")
    )


def rewrite_membership(tokens: list[Token]) -> list[Token]:
    """Rewrite `x includes 'v'` into `contains(x, 'v')`."""
    result: list[Token] = []
    i = 0
    while i < len(tokens):
        if _is_membership(tokens, i):
            subject, literal = tokens[i], tokens[i + 4]
            result.extend([
                Token(TokenKind.CODE, "contains("),
                subject,
                Token(TokenKind.CODE, ", "),
                literal,
                Token(TokenKind.CODE, ")"),
            ])
            i += 5
            continue
        result.append(tokens[i])
        i += 1
    return result


def rewrite_equality(tokens: list[Token]) -> list[Token]:
    """Normalise comparison operators; a single `=` means equality."""
    result: list[Token] = []
    for token in tokens:
        if token.kind is TokenKind.OPERATOR and token.text in COMPARISON_OPERATORS:
            result.append(Token(TokenKind.OPERATOR, COMPARISON_OPERATORS[token.text]))
        else:
            result.append(token)
    return result


def bind_identifiers(tokens: list[Token]) -> list[Token]:
    """Turn every non-reserved identifier into a context lookup."""
    result: list[Token] = []
    for token in tokens:
        if token.kind is not TokenKind.IDENTIFIER:
            result.append(token)
        elif token.text in RESERVED_LITERALS:
            result.append(Token(TokenKind.CODE, RESERVED_LITERALS[token.text]))
        elif token.text in HELPER_NAMES or token.text in UTILITY_NAMES:
            result.append(Token(TokenKind.CODE, token.text))
        else:
            result.append(
                Token(TokenKind.FIELD, f"context[{token.text!r}]", name=token.text)
            )
    return result


REWRITE_PASSES: tuple[RewritePass, ...] = (
    rewrite_connectives,
    rewrite_membership,
    rewrite_equality,
    bind_identifiers,
    rewrite_boolean_comparisons,
)

EMITTED_OPERATORS = frozenset(COMPARISON_OPERATORS.values())


def collect_warnings(tokens: list[Token]) -> list[CompileWarning]:
    """Report the parts of the source the passes left untranslated."""
    warnings: list[CompileWarning] = []
    for token in tokens:
        if token.kind is TokenKind.STRING and not token.terminated:
            warnings.append(CompileWarning(code="unterminated_literal", detail=token.text))
        elif token.kind is TokenKind.OPERATOR and token.text not in EMITTED_OPERATORS:
            warnings.append(CompileWarning(code="unknown_operator", detail=token.text))
        elif token.kind is TokenKind.OTHER and token.text not in PASSTHROUGH_CHARS:
            warnings.append(CompileWarning(code="unknown_operator", detail=token.text))
    return warnings


@lru_cache(maxsize=COMPILE_CACHE_SIZE)
def _compile(source: str) -> CompiledPredicate:
    tokens = tokenize(source)
    for rewrite in REWRITE_PASSES:
        tokens = rewrite(tokens)

    warnings = collect_warnings(tokens)
    if warnings:
        logger.warning(
            "condition_compile_degraded",
            source=source,
            warnings=[w.code for w in warnings],
        )

    return CompiledPredicate(
        source=source,
        expression=render(tokens).strip(),
        warnings=tuple(warnings),
    )


def compile_condition(expr: str | None) -> CompiledPredicate | None:
    """Compile a DSL condition into an executable predicate.

    Never raises. Untranslatable fragments are kept verbatim and listed on
    the predicate's `warnings`.

    Args:
        expr: Condition source, or None

    Returns:
        The compiled predicate, or None when there is no condition
        (None, empty or whitespace-only input)
    """
    if expr is None:
        return None
    source = expr.strip()
    if not source:
        return None
    return _compile(source)
