"""Enums for questionnaire definitions."""

from enum import Enum


class RequiredMode(str, Enum):
    """How a question blocks completion of its step."""

    REQUIRED = "required"  # Blocks whenever the question is active
    OPTIONAL = "optional"  # Never blocks
    CONDITIONAL = "conditional"  # Blocks when active and required_if holds

    @classmethod
    def parse(cls, raw: object) -> "RequiredMode":
        """Normalise a spreadsheet value; unknown values mean optional."""
        if isinstance(raw, cls):
            return raw
        token = str(raw or "").strip().lower()
        if token in ("required", "y", "yes"):
            return cls.REQUIRED
        if token == "conditional":
            return cls.CONDITIONAL
        return cls.OPTIONAL


class Audience(str, Enum):
    """Who is expected to answer."""

    CUSTOMER = "customer"
    INTERNAL = "internal"

    @classmethod
    def parse(cls, raw: object) -> "Audience":
        if isinstance(raw, cls):
            return raw
        token = str(raw or "").strip().lower()
        if token in ("", cls.CUSTOMER.value):
            return cls.CUSTOMER
        return cls.INTERNAL
