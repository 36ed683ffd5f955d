"""Quote-aware tokenizer for the condition DSL.

Splits a condition into tokens once, so every rewrite pass sees the same
classification of literal text versus code and none of them has to track
quote state again.
"""

import string

from intakeflow.conditions.models import Token, TokenKind

IDENTIFIER_START = frozenset(string.ascii_letters + "_")
IDENTIFIER_CHARS = frozenset(string.ascii_letters + string.digits + "_")
DIGITS = frozenset(string.digits)
NUMBER_CHARS = frozenset(string.digits + ".")
OPERATOR_CHARS = frozenset("=!<>&|")
QUOTES = frozenset("'\"")


def _scan(source: str, start: int, allowed: frozenset[str]) -> int:
    end = start
    while end < len(source) and source[end] in allowed:
        end += 1
    return end


def tokenize(source: str) -> list[Token]:
    """Split condition source into tokens.

    Both single- and double-quoted literals are recognised as literal text.
    A literal missing its closing quote swallows the rest of the source and
    is returned with `terminated=False`.

    Args:
        source: Condition source text

    Returns:
        Tokens whose texts concatenate back to `source`
    """
    tokens: list[Token] = []
    i = 0

    while i < len(source):
        ch = source[i]

        if ch in QUOTES:
            close = source.find(ch, i + 1)
            if close == -1:
                tokens.append(Token(TokenKind.STRING, source[i:], terminated=False))
                break
            tokens.append(Token(TokenKind.STRING, source[i : close + 1]))
            i = close + 1
            continue

        if ch.isspace():
            end = i + 1
            while end < len(source) and source[end].isspace():
                end += 1
            tokens.append(Token(TokenKind.WHITESPACE, source[i:end]))
            i = end
            continue

        if ch in IDENTIFIER_START:
            end = _scan(source, i + 1, IDENTIFIER_CHARS)
            tokens.append(Token(TokenKind.IDENTIFIER, source[i:end]))
            i = end
            continue

        if ch in DIGITS:
            end = _scan(source, i + 1, NUMBER_CHARS)
            tokens.append(Token(TokenKind.NUMBER, source[i:end]))
            i = end
            continue

        if ch in OPERATOR_CHARS:
            end = _scan(source, i + 1, OPERATOR_CHARS)
            tokens.append(Token(TokenKind.OPERATOR, source[i:end]))
            i = end
            continue

        tokens.append(Token(TokenKind.OTHER, ch))
        i += 1

    return tokens


def render(tokens: list[Token]) -> str:
    """Concatenate token texts back into source form."""
    return "".join(token.text for token in tokens)
