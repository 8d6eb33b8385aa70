"""
Replay decoder for already-decoded record streams.

Serves records from memory or from a JSON-lines dump, one object per line:

    {"preamble": "** DATE: Wed Mar  6 10:00:00 2024"}
    {"type": 24, "sttime": 1000, "message": "TRIALID 1"}
    {"type": 30, "time": 1001, "sample_rate": 500.0, "state": 1}
    {"type": 200, "time": 1002, "flags": 49152, "gx": [512.0, 514.5]}

`type` holds the record kind code. Trial navigation follows the EDF API:
a trial starts at a message beginning with the start marker and ends at the
next message beginning with the end marker.
"""

import dataclasses
import json
import logging
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

from .classifier import EVENT_KINDS, record_timestamp
from .errors import DecoderError
from .models import (
    EventRecord,
    Exhausted,
    OpaqueRecord,
    Record,
    RecordingInfo,
    RecordingRecord,
    RecordKind,
    SampleRecord,
    TrialHeader,
)

logger = logging.getLogger(__name__)

# ==================== Error Codes ====================

FILE_NOT_FOUND = -1
BAD_RECORD = -2
BAD_MARKERS = -3
BAD_TRIAL = -4
SESSION_CLOSED = -5

# ==================== Record Parsing ====================


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_value(name: str, value, default, line: Optional[int]) -> None:
    # pairs and hdata keep the length of their default, messages are text, the rest numbers
    if isinstance(default, tuple):
        valid = isinstance(value, list) and len(value) == len(default) and all(map(_is_number, value))
        expected = f"a list of {len(default)} numbers"
    elif isinstance(default, str):
        valid, expected = isinstance(value, str), "a string"
    else:
        valid, expected = _is_number(value), "a number"
    if not valid:
        raise DecoderError(f"Line {line}: field {name} needs {expected}, got {value!r}", code=BAD_RECORD)


def _build(cls, data: Dict, line: Optional[int]):
    fields = {f.name: f for f in dataclasses.fields(cls)}
    unknown = sorted(set(data) - set(fields))
    if unknown:
        raise DecoderError(f"Line {line}: unknown field(s) {', '.join(unknown)}", code=BAD_RECORD)
    for name, value in data.items():
        _check_value(name, value, fields[name].default, line)
    values = {name: tuple(value) if isinstance(value, list) else value for name, value in data.items()}
    try:
        return cls(**values)
    except TypeError as err:
        raise DecoderError(f"Line {line}: {err}", code=BAD_RECORD) from err


def parse_record(data: Dict, line: Optional[int] = None) -> Record:
    """
    Build a record from one decoded JSON object.

    Args:
        data: Object with a "type" kind code and the record fields
        line: Line number used in error messages

    Returns:
        The record variant matching the kind code
    """
    if not isinstance(data, dict):
        raise DecoderError(f"Line {line}: expected a JSON object, got {data!r}", code=BAD_RECORD)
    data = dict(data)
    try:
        kind = int(data.pop("type"))
    except (KeyError, TypeError, ValueError) as err:
        raise DecoderError(f"Line {line}: missing or invalid record type", code=BAD_RECORD) from err

    if kind == RecordKind.SAMPLE_TYPE:
        return _build(SampleRecord, data, line)
    if kind in EVENT_KINDS:
        return _build(EventRecord, {"kind": kind, **data}, line)
    if kind == RecordKind.RECORDING_INFO:
        return _build(RecordingRecord, data, line)
    time = data.get("time", 0)
    _check_value("time", time, 0, line)
    if kind == RecordKind.NO_PENDING_ITEMS:
        return Exhausted(time=time)
    return OpaqueRecord(kind=kind, time=time)


def load_record_dump(filepath: Path) -> Tuple[List[Record], str]:
    """
    Parse a JSON-lines record dump.

    Args:
        filepath: Path to the dump

    Returns:
        Tuple of (records, preamble text)
    """
    records: List[Record] = []
    preamble: List[str] = []
    with open(filepath, "r", encoding="utf-8") as f:
        for number, raw in enumerate(f, start=1):
            raw = raw.strip()
            if not raw:
                continue
            try:
                data = json.loads(raw)
            except json.JSONDecodeError as err:
                raise DecoderError(f"Line {number}: {err}", code=BAD_RECORD) from err
            if not isinstance(data, dict):
                raise DecoderError(f"Line {number}: expected a JSON object", code=BAD_RECORD)
            if "preamble" in data:
                preamble.append(str(data["preamble"]))
                continue
            records.append(parse_record(data, number))
    return records, "\n".join(preamble)


# ==================== Session ====================


class _Trial(NamedTuple):
    position: int
    header: TrialHeader


def _is_message(record: Record, prefix: str) -> bool:
    return (
        isinstance(record, EventRecord)
        and record.kind == RecordKind.MESSAGEEVENT
        and record.message.startswith(prefix)
    )


class ReplaySession:
    """
    Forward-only cursor over a record list.

    Events and samples that were not requested are never returned, but
    messages still delimit trials.
    """

    def __init__(
        self,
        records: Sequence[Record],
        preamble: str = "",
        want_events: bool = True,
        want_samples: bool = True,
    ):
        self._records = list(records)
        self._preamble = preamble
        self._want_events = want_events
        self._want_samples = want_samples
        self._position = 0
        self._trials: List[_Trial] = []
        self._current: Optional[int] = None
        self._closed = False

    def _wanted(self, record: Record) -> bool:
        if isinstance(record, EventRecord):
            return self._want_events
        if isinstance(record, SampleRecord):
            return self._want_samples
        return True

    def set_trial_boundary_markers(self, start_marker: str, end_marker: str) -> None:
        if not start_marker:
            raise DecoderError("Start marker must not be empty", code=BAD_MARKERS)
        if end_marker and end_marker == start_marker:
            raise DecoderError("Start and end markers must differ", code=BAD_MARKERS)

        starts = [i for i, record in enumerate(self._records) if _is_message(record, start_marker)]
        bounds = starts[1:] + [len(self._records)]
        self._trials = [
            _Trial(position=start, header=self._header(start, stop, end_marker))
            for start, stop in zip(starts, bounds)
        ]
        self._current = None
        logger.debug("Found %d trials delimited by %r/%r", len(self._trials), start_marker, end_marker)

    def _header(self, start: int, stop: int, end_marker: str) -> TrialHeader:
        span = self._records[start:stop]
        starttime = record_timestamp(span[0])

        endtime = None
        if end_marker:
            endtime = next(
                (record.sttime for record in span[1:] if _is_message(record, end_marker)),
                None,
            )
        if endtime is None:
            timed = [record for record in span if not isinstance(record, Exhausted)]
            endtime = record_timestamp(timed[-1])

        rec = next(
            (r for r in reversed(self._records[: start + 1]) if isinstance(r, RecordingRecord)),
            None,
        ) or next((r for r in span if isinstance(r, RecordingRecord)), None)

        return TrialHeader(
            duration=endtime - starttime,
            starttime=starttime,
            endtime=endtime,
            rec=RecordingInfo.from_record(rec) if rec is not None else RecordingInfo(),
        )

    def trial_count(self) -> int:
        return len(self._trials)

    def seek_trial(self, index: int) -> None:
        self._check_open()
        if not 0 <= index < len(self._trials):
            raise DecoderError(f"No trial {index} ({len(self._trials)} trials)", code=BAD_TRIAL)
        self._current = index
        self._position = self._trials[index].position

    def trial_header(self) -> TrialHeader:
        if self._current is None:
            raise DecoderError("No trial selected", code=BAD_TRIAL)
        return self._trials[self._current].header

    def next_record(self) -> Record:
        self._check_open()
        while self._position < len(self._records):
            record = self._records[self._position]
            self._position += 1
            if self._wanted(record):
                return record
        return Exhausted()

    def preamble_text(self) -> str:
        return self._preamble

    def close(self) -> None:
        self._closed = True

    def _check_open(self) -> None:
        if self._closed:
            raise DecoderError("Session is closed", code=SESSION_CLOSED)


# ==================== Decoders ====================


class ReplayDecoder:
    """Decoder serving the same in-memory records for every path."""

    def __init__(self, records: Sequence[Record], preamble: str = ""):
        self.records = tuple(records)
        self.preamble = preamble

    def open(self, path: Path, consistency: int, want_events: bool, want_samples: bool) -> ReplaySession:
        return ReplaySession(self.records, self.preamble, want_events, want_samples)


class JsonlDecoder:
    """Decoder reading JSON-lines record dumps from disk."""

    def open(
        self,
        path: Union[str, Path],
        consistency: int,
        want_events: bool,
        want_samples: bool,
    ) -> ReplaySession:
        path = Path(path)
        if not path.is_file():
            raise DecoderError(f"File not found: {path}", code=FILE_NOT_FOUND)
        records, preamble = load_record_dump(path)
        logger.debug("Loaded %d records from %s", len(records), path)
        return ReplaySession(records, preamble, want_events, want_samples)
