"""Tolerant comparison of answers against boolean literals.

Collected answers arrive as free text, numbers or real booleans, so
`field = true` must match `"yes"`, `"1"`, `"כן"` and `True` alike. Every
equality against a boolean literal is rewritten into a membership test over
the lower-cased, trimmed display text of the field.
"""

from intakeflow.conditions.models import Token, TokenKind

AFFIRMATIVE_TOKENS: tuple[str, ...] = ("true", "1", "כן", "חדש", "new", "y", "yes")
NEGATIVE_TOKENS: tuple[str, ...] = ("false", "0", "לא", "קיים", "existing", "n", "no")

BOOLEAN_LITERALS = {"True": True, "False": False}


def tolerant_boolean_check(field_expression: str, expected: bool) -> str:
    """Build the tolerant replacement for `<field_expression> == <expected>`."""
    accepted = list(AFFIRMATIVE_TOKENS if expected else NEGATIVE_TOKENS)
    return (
        f"(present({field_expression}) and "
        f"contains({accepted!r}, lower(trim(text({field_expression})))))"
    )


def _skip_whitespace(tokens: list[Token], index: int) -> int:
    while index < len(tokens) and tokens[index].kind is TokenKind.WHITESPACE:
        index += 1
    return index


def _match_boolean_comparison(tokens: list[Token], start: int) -> tuple[int, bool] | None:
    """Match `== True|False` after the field token at `start`.

    Returns:
        Index just past the literal and the literal's value, or None
    """
    i = _skip_whitespace(tokens, start + 1)
    if i >= len(tokens) or tokens[i].kind is not TokenKind.OPERATOR or tokens[i].text != "==":
        return None

    i = _skip_whitespace(tokens, i + 1)
    if i >= len(tokens):
        return None
    literal = tokens[i]
    if literal.kind is not TokenKind.CODE or literal.text not in BOOLEAN_LITERALS:
        return None

    return i + 1, BOOLEAN_LITERALS[literal.text]


def rewrite_boolean_comparisons(tokens: list[Token]) -> list[Token]:
    """Rewrite every bound-field equality against a boolean literal."""
    result: list[Token] = []
    i = 0

    while i < len(tokens):
        token = tokens[i]
        if token.kind is TokenKind.FIELD:
            match = _match_boolean_comparison(tokens, i)
            if match is not None:
                end, expected = match
                result.append(
                    Token(TokenKind.CODE, tolerant_boolean_check(token.text, expected))
                )
                i = end
                continue

        result.append(token)
        i += 1

    return result
