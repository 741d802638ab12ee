# relay/utils/tx_ref.py
import time
from typing import NamedTuple, Optional

SEPARATOR = "_"


class TxRef(NamedTuple):
    prefix: str
    course_id: str
    timestamp: int


def build_tx_ref(prefix: str, course_id: str, timestamp: Optional[int] = None) -> str:
    """
    Build a transaction reference of the form ``<prefix>_<courseId>_<timestamp>``.

    The timestamp defaults to the current time in epoch milliseconds.
    """
    if SEPARATOR in course_id:
        raise ValueError(f"Course id must not contain '{SEPARATOR}'")
    if timestamp is None:
        timestamp = int(time.time() * 1000)
    return SEPARATOR.join([prefix, course_id, str(timestamp)])


def parse_tx_ref(value: Optional[str]) -> Optional[TxRef]:
    """Return the parsed reference, or None when it is not a well-formed one."""
    if not value or not isinstance(value, str):
        return None

    parts = value.split(SEPARATOR)
    if len(parts) != 3 or not all(parts):
        return None

    prefix, course_id, timestamp = parts
    if not timestamp.isdigit():
        return None

    return TxRef(prefix, course_id, int(timestamp))
