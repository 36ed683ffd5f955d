"""Enums for user data records."""

from enum import Enum


class ValueKind(str, Enum):
    """Kind tag stored next to an encoded value."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRUCTURED = "structured"
