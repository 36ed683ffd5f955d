"""Helper predicates and string utilities reachable from compiled conditions."""

import json
from collections.abc import Mapping
from typing import Any

# Sentinel strings some upstream systems write instead of leaving a field empty
PLACEHOLDER_VALUES = frozenset({"null", ":null", "undefined", ":undefined"})

COLLECTION_TYPES = (list, tuple, set, frozenset)


def text(value: Any) -> str:
    """Render a value as display text.

    Booleans render as `true`/`false`, integral floats drop their fraction,
    sequences join their members with commas and mappings render as JSON.
    """
    if value is None:
        return "null"
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, COLLECTION_TYPES):
        return ",".join("" if item is None else text(item) for item in value)
    if isinstance(value, Mapping):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def lower(value: Any) -> str:
    """Lower-cased display text of a value."""
    return text(value).lower()


def trim(value: Any) -> str:
    """Display text of a value without surrounding whitespace."""
    return text(value).strip()


def is_present_value(value: Any) -> bool:
    """Check whether a value counts as answered.

    Missing, blank, placeholder strings and empty collections are absent.
    Every other value, including `False` and `0`, is present.
    """
    if value is None:
        return False
    if isinstance(value, str):
        stripped = value.strip()
        return bool(stripped) and stripped.lower() not in PLACEHOLDER_VALUES
    if isinstance(value, (*COLLECTION_TYPES, Mapping)):
        return len(value) > 0
    return True


def contains(container: Any, needle: Any) -> bool:
    """Membership test used by `includes` conditions.

    Sequences match when any member's display text equals the needle,
    strings match on substring. An empty needle never matches.
    """
    if container is None:
        return False
    wanted = "" if needle is None else text(needle)
    if not wanted:
        return False
    if isinstance(container, COLLECTION_TYPES):
        return any(text(item) == wanted for item in container if item is not None)
    if isinstance(container, str):
        return wanted in container
    return False
