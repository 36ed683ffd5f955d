"""Tests for tolerant boolean comparison rewriting."""

from intakeflow.conditions.boolean_tolerance import (
    AFFIRMATIVE_TOKENS,
    NEGATIVE_TOKENS,
    rewrite_boolean_comparisons,
    tolerant_boolean_check,
)
from intakeflow.conditions.models import Token, TokenKind
from intakeflow.conditions.tokenizer import render


def field(name: str) -> Token:
    return Token(TokenKind.FIELD, f"context['{name}']", name=name)


class TestTolerantBooleanCheck:
    """Tests for tolerant_boolean_check."""

    def test_affirmative(self) -> None:
        """True checks the affirmative spellings."""
        check = tolerant_boolean_check("context['a']", True)
        assert check.startswith("(present(context['a']) and contains(")
        assert repr(list(AFFIRMATIVE_TOKENS)) in check
        assert check.endswith("lower(trim(text(context['a'])))))")

    def test_negative(self) -> None:
        """False checks the negative spellings."""
        check = tolerant_boolean_check("context['a']", False)
        assert repr(list(NEGATIVE_TOKENS)) in check

    def test_token_sets_are_disjoint(self) -> None:
        """No spelling is both affirmative and negative."""
        assert not set(AFFIRMATIVE_TOKENS) & set(NEGATIVE_TOKENS)


class TestRewriteBooleanComparisons:
    """Tests for rewrite_boolean_comparisons."""

    def test_rewrites_field_equals_literal(self) -> None:
        """field == True becomes the tolerant check."""
        tokens = [
            field("a"),
            Token(TokenKind.WHITESPACE, " "),
            Token(TokenKind.OPERATOR, "=="),
            Token(TokenKind.WHITESPACE, " "),
            Token(TokenKind.CODE, "True"),
        ]
        assert render(rewrite_boolean_comparisons(tokens)) == tolerant_boolean_check(
            "context['a']", True
        )

    def test_rewrites_without_whitespace(self) -> None:
        """Whitespace around the operator is optional."""
        tokens = [field("a"), Token(TokenKind.OPERATOR, "=="), Token(TokenKind.CODE, "False")]
        assert render(rewrite_boolean_comparisons(tokens)) == tolerant_boolean_check(
            "context['a']", False
        )

    def test_inequality_is_left_alone(self) -> None:
        """Only equality is rewritten."""
        tokens = [field("a"), Token(TokenKind.OPERATOR, "!="), Token(TokenKind.CODE, "True")]
        assert rewrite_boolean_comparisons(tokens) == tokens

    def test_string_true_is_left_alone(self) -> None:
        """A quoted 'true' is a literal, not a boolean."""
        tokens = [field("a"), Token(TokenKind.OPERATOR, "=="), Token(TokenKind.STRING, "'true'")]
        assert rewrite_boolean_comparisons(tokens) == tokens

    def test_trailing_operator(self) -> None:
        """A comparison cut short is left unchanged."""
        tokens = [field("a"), Token(TokenKind.OPERATOR, "==")]
        assert rewrite_boolean_comparisons(tokens) == tokens
