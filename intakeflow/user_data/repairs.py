"""Read-time repairs of resolved views.

Each repair drops values that are clearly answers to a different question
and were stored under a name field by mistake. Repairs only ever remove
keys, so running them again changes nothing.
"""

from collections.abc import Callable, Iterable
from typing import Any

from intakeflow.observability.logging import get_logger

logger = get_logger(__name__)

ReadTimeRepair = Callable[[dict[str, Any]], dict[str, Any]]

FIRST_NAME_KEYS = ("first_name", "user_first_name", "proposer_first_name")
LAST_NAME_KEYS = ("last_name", "user_last_name", "proposer_last_name")
RELATION_KEY = "insured_relation_to_business"

RELATION_WORDS = frozenset({"בעלים", "מנהל", "מנהלת", "שותף", "שותפה", "אחר"})
CUSTOMER_WORD = "לקוח"
CUSTOMER_STATUS_WORDS = frozenset({"חדש", "קיים", "ותיק"})


def _first_text(view: dict[str, Any], keys: Iterable[str]) -> str:
    for key in keys:
        value = view.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def _drop(view: dict[str, Any], keys: Iterable[str], repair: str) -> dict[str, Any]:
    removed = [key for key in keys if key in view]
    if not removed:
        return view
    logger.info("read_time_repair_applied", repair=repair, removed_keys=removed)
    return {k: v for k, v in view.items() if k not in removed}


def drop_relation_word_first_name(view: dict[str, Any]) -> dict[str, Any]:
    """Drop a first name that is really the insured's relation to the business."""
    if _first_text(view, (RELATION_KEY,)):
        return view
    if _first_text(view, FIRST_NAME_KEYS) not in RELATION_WORDS:
        return view
    return _drop(view, FIRST_NAME_KEYS, "drop_relation_word_first_name")


def drop_customer_status_names(view: dict[str, Any]) -> dict[str, Any]:
    """Drop a name that is really the answer to "are you a new customer"."""
    first = _first_text(view, FIRST_NAME_KEYS)
    last = _first_text(view, LAST_NAME_KEYS)
    if first != CUSTOMER_WORD or last not in CUSTOMER_STATUS_WORDS:
        return view
    return _drop(view, FIRST_NAME_KEYS + LAST_NAME_KEYS, "drop_customer_status_names")


DEFAULT_REPAIRS: tuple[ReadTimeRepair, ...] = (
    drop_relation_word_first_name,
    drop_customer_status_names,
)
