"""Per-field presence rules.

Some fields only count as answered when their value passes an extra check,
e.g. a national id must carry exactly nine digits. Rules are looked up by
field key when a compiled condition calls `present(value, field_key)`.
"""

import re
from collections.abc import Callable, Mapping
from typing import Any

from intakeflow.conditions.helpers import is_present_value, lower, text, trim
from intakeflow.observability.logging import get_logger

logger = get_logger(__name__)

PresenceRule = Callable[[Any], bool]

NATIONAL_ID_CHARS = re.compile(r"[0-9\s\-.]+")
NON_DIGITS = re.compile(r"[^0-9]")
NATIONAL_ID_DIGITS = 9

RELATION_TO_BUSINESS_VALUES = frozenset({
    "בעלים",
    "מורשה חתימה",
    "מנהל",
    "אחר",
    "owner",
    "authorized signer",
    "manager",
    "other",
})

MIN_REFERRAL_SOURCE_LENGTH = 2


def national_id_rule(value: Any) -> bool:
    """Nine digits, optionally separated by spaces, dashes or dots."""
    if not is_present_value(value):
        return False
    raw = text(value).strip()
    if not NATIONAL_ID_CHARS.fullmatch(raw):
        return False
    return len(NON_DIGITS.sub("", raw)) == NATIONAL_ID_DIGITS


def relation_to_business_rule(value: Any) -> bool:
    """One of the known relations of the insured to the business."""
    return is_present_value(value) and lower(trim(value)) in RELATION_TO_BUSINESS_VALUES


def referral_source_rule(value: Any) -> bool:
    """At least two meaningful characters."""
    return is_present_value(value) and len(trim(value)) >= MIN_REFERRAL_SOURCE_LENGTH


class PresenceRuleTable:
    """Registry of field-specific presence rules.

    Fields without a rule fall back to `is_present_value`. A rule that
    raises is treated as reporting the value absent.
    """

    def __init__(self, rules: Mapping[str, PresenceRule] | None = None) -> None:
        self._rules: dict[str, PresenceRule] = dict(rules or {})

    def register(self, field_key: str, rule: PresenceRule) -> None:
        """Register (or replace) the presence rule for a field."""
        self._rules[field_key] = rule

    def has_rule(self, field_key: str) -> bool:
        return field_key in self._rules

    def __contains__(self, field_key: object) -> bool:
        return field_key in self._rules

    @property
    def field_keys(self) -> list[str]:
        return list(self._rules)

    def copy(self) -> "PresenceRuleTable":
        return PresenceRuleTable(self._rules)

    def is_present(self, field_key: str | None, value: Any) -> bool:
        """Check whether `value` counts as answered for `field_key`.

        Args:
            field_key: Field the value belongs to, or None for the generic check
            value: Candidate value

        Returns:
            True if the value counts as answered
        """
        rule = self._rules.get(field_key) if field_key else None
        if rule is None:
            return is_present_value(value)

        try:
            return bool(rule(value))
        except Exception as e:  # noqa: BLE001
            logger.warning(
                "presence_rule_failed",
                field_key=field_key,
                error=str(e),
            )
            return False


def default_presence_rules() -> PresenceRuleTable:
    """Build a fresh table holding the built-in field rules."""
    return PresenceRuleTable(
        {
            "user_id": national_id_rule,
            "insured_relation_to_business": relation_to_business_rule,
            "referral_source": referral_source_rule,
        }
    )
