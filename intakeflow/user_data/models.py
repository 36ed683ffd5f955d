"""User data record model and value encoding.

Values are stored as text plus a kind tag, the way they were persisted by
the original conversation backend, and decoded on read.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from intakeflow.user_data.enums import ValueKind

# Keys whose string values may hold JSON written before kinds were recorded
JSON_KEY_SUFFIXES = ("_json", "_jsonb", "_selected", "_ids")
JSON_KEYS = frozenset({"completed_processes", "business_site_type"})


class DataRecord(BaseModel):
    """One stored value of one owner, scoped to one questionnaire."""

    model_config = ConfigDict(frozen=True)

    owner_id: str = Field(..., min_length=1, description="Owning user")
    scope_id: str = Field(..., description="Questionnaire or flow the value was collected in")
    key: str = Field(..., min_length=1, description="Field key (case-sensitive)")
    value: str | None = Field(default=None, description="Encoded value")
    value_kind: ValueKind = Field(default=ValueKind.STRING, description="How to decode `value`")


def infer_kind(value: Any) -> ValueKind:
    """Pick the kind tag for a Python value."""
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    return ValueKind.STRUCTURED


def encode_value(value: Any, kind: ValueKind) -> str:
    """Encode a value as stored text."""
    if kind is ValueKind.BOOLEAN:
        return "true" if value else "false"
    if kind is ValueKind.NUMBER:
        return str(value)
    if kind is ValueKind.STRING:
        return "" if value is None else str(value)
    return json.dumps(value, ensure_ascii=False, default=str)


def _decode_number(text: str) -> int | float | str:
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


def decode_value(text: str | None, kind: ValueKind) -> Any:
    """Decode stored text back into a Python value.

    Numbers that do not parse and structured values that are not valid JSON
    come back as the raw text.
    """
    if text is None:
        return None
    if kind is ValueKind.NUMBER:
        return _decode_number(text.strip())
    if kind is ValueKind.BOOLEAN:
        return text == "true"
    if kind is ValueKind.STRUCTURED:
        if not text:
            return text
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return text
    return text


def holds_json(key: str) -> bool:
    """Check whether string values of a key may carry JSON."""
    name = key.strip()
    return name in JSON_KEYS or name.endswith(JSON_KEY_SUFFIXES)


def decode_record(record: DataRecord) -> Any:
    """Decode a record, parsing JSON held in string values of JSON keys."""
    value = decode_value(record.value, record.value_kind)
    if isinstance(value, str) and holds_json(record.key):
        stripped = value.strip()
        if stripped.startswith(("[", "{")):
            try:
                return json.loads(stripped)
            except json.JSONDecodeError:
                return value
    return value
