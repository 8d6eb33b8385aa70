"""
Record classification.

Decides which table a decoded record belongs to, based only on its kind
code, and which timestamp bounds it against the trial end.
"""

from enum import Enum
from typing import FrozenSet, Optional

from .models import EventRecord, Record, RecordKind


class RecordCategory(str, Enum):
    """Destination of a record."""
    SAMPLE = "sample"
    EVENT = "event"
    RECORDING = "recording"
    END = "end"


EVENT_KINDS: FrozenSet[int] = frozenset({
    RecordKind.STARTPARSE,
    RecordKind.ENDPARSE,
    RecordKind.BREAKPARSE,
    RecordKind.STARTBLINK,
    RecordKind.ENDBLINK,
    RecordKind.STARTSACC,
    RecordKind.ENDSACC,
    RecordKind.STARTFIX,
    RecordKind.ENDFIX,
    RecordKind.FIXUPDATE,
    RecordKind.MESSAGEEVENT,
    RecordKind.STARTSAMPLES,
    RecordKind.ENDSAMPLES,
    RecordKind.STARTEVENTS,
    RecordKind.ENDEVENTS,
    RecordKind.BUTTONEVENT,
    RecordKind.INPUTEVENT,
    RecordKind.LOST_DATA_EVENT,
})


def classify(kind: int) -> Optional[RecordCategory]:
    """
    Map a record kind code to its category.

    Args:
        kind: Kind code reported by the decoder

    Returns:
        The category, or None for codes no table exists for
    """
    if kind == RecordKind.SAMPLE_TYPE:
        return RecordCategory.SAMPLE
    if kind in EVENT_KINDS:
        return RecordCategory.EVENT
    if kind == RecordKind.RECORDING_INFO:
        return RecordCategory.RECORDING
    if kind == RecordKind.NO_PENDING_ITEMS:
        return RecordCategory.END
    return None


def record_timestamp(record: Record) -> int:
    """Timestamp compared against the trial end: start time for events."""
    if isinstance(record, EventRecord):
        return record.sttime
    return record.time


def is_past(record: Record, end_time: int) -> bool:
    return record_timestamp(record) > end_time
