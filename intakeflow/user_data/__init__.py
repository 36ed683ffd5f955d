"""Layered user data: records, aliases, repairs and resolution."""

from intakeflow.user_data.aliases import DEFAULT_ALIAS_GROUPS, AliasTable
from intakeflow.user_data.enums import ValueKind
from intakeflow.user_data.models import DataRecord, decode_record, encode_value, infer_kind
from intakeflow.user_data.repairs import (
    DEFAULT_REPAIRS,
    drop_customer_status_names,
    drop_relation_word_first_name,
)
from intakeflow.user_data.resolver import LayeredDataResolver, build_resolver
from intakeflow.user_data.store import DataRecordStore
from intakeflow.user_data.stores import InMemoryDataRecordStore

__all__ = [
    "DEFAULT_ALIAS_GROUPS",
    "DEFAULT_REPAIRS",
    "AliasTable",
    "DataRecord",
    "DataRecordStore",
    "InMemoryDataRecordStore",
    "LayeredDataResolver",
    "ValueKind",
    "build_resolver",
    "decode_record",
    "drop_customer_status_names",
    "drop_relation_word_first_name",
    "encode_value",
    "infer_kind",
]
