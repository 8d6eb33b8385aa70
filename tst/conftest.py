"""
Pytest fixtures for eyelink_reader tests.

Provides synthetic record streams, a scripted decoder session and
temporary record dumps.
"""

import json
import logging
from typing import List, Optional, Sequence, Tuple

import pytest

from eyelink_reader.errors import DecoderError
from eyelink_reader.models import (
    SAMPLE_LEFT,
    SAMPLE_RIGHT,
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

BOTH_EYES = SAMPLE_LEFT | SAMPLE_RIGHT


def message(sttime: int, text: str) -> EventRecord:
    return EventRecord(kind=RecordKind.MESSAGEEVENT, sttime=sttime, entime=0, time=sttime, message=text)


def header(start: int, end: int) -> TrialHeader:
    return TrialHeader(
        duration=end - start,
        starttime=start,
        endtime=end,
        rec=RecordingInfo(time=start, sample_rate=500.0, state=1, eye=3),
    )


class ScriptedSession:
    """
    Decoder session replaying a fixed record list per trial.

    Seeking to a trial rewinds the cursor to that trial's records; reading
    past them yields Exhausted.
    """

    def __init__(
        self,
        trials: Sequence[Tuple[TrialHeader, List[Record]]],
        reject_markers: bool = False,
        fail_seek_at: Optional[int] = None,
        fail_header_at: Optional[int] = None,
    ):
        self.trials = list(trials)
        self.reject_markers = reject_markers
        self.fail_seek_at = fail_seek_at
        self.fail_header_at = fail_header_at
        self.markers = None
        self.records: List[Record] = []
        self.current: Optional[int] = None
        self.pulled = 0
        self.closed = False

    def set_trial_boundary_markers(self, start_marker, end_marker):
        if self.reject_markers:
            raise DecoderError("markers rejected", code=7)
        self.markers = (start_marker, end_marker)

    def trial_count(self):
        return len(self.trials)

    def seek_trial(self, index):
        if index == self.fail_seek_at:
            raise DecoderError("jump failed", code=9)
        self.current = index
        self.records = list(self.trials[index][1])

    def trial_header(self):
        if self.current == self.fail_header_at:
            raise DecoderError("no header", code=11)
        return self.trials[self.current][0]

    def next_record(self):
        self.pulled += 1
        if self.records:
            return self.records.pop(0)
        return Exhausted()

    def preamble_text(self):
        return "** SCRIPTED"

    def close(self):
        self.closed = True


class ScriptedDecoder:
    """Hands out ScriptedSessions and remembers them."""

    def __init__(self, preamble_records: List[Record], trials, **session_kwargs):
        self.preamble_records = preamble_records
        self.trials = trials
        self.session_kwargs = session_kwargs
        self.opened: List[Tuple[ScriptedSession, bool, bool]] = []

    def open(self, path, consistency, want_events, want_samples):
        if not self.opened:
            session = ScriptedSession([(header(0, 1), self.preamble_records)])
            session.seek_trial(0)
        else:
            session = ScriptedSession(self.trials, **self.session_kwargs)
        self.opened.append((session, want_events, want_samples))
        return session


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo root logger changes made by configure_logging."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def scripted_session():
    """Factory for ScriptedSession."""
    return ScriptedSession


@pytest.fixture
def scripted_decoder():
    """Factory for ScriptedDecoder."""
    return ScriptedDecoder


@pytest.fixture
def recording_stream() -> List[Record]:
    """
    Two trials delimited by TRIALID / TRIAL_RESULT, with a preamble.

    Trial 0 spans 1000-2000 and is followed by a stray sample at 2500;
    trial 1 spans 3000-3500.
    """
    return [
        message(100, "DISPLAY_COORDS 0 0 1919 1079"),
        message(110, "RECCFG CR 500 2 1 LR"),
        message(1000, "TRIALID 1"),
        RecordingRecord(time=1001, sample_rate=500.0, state=1, record_type=3, eye=3),
        SampleRecord(time=1002, flags=BOTH_EYES, px=(-32768.0, 50.0), gx=(512.0, 514.0)),
        EventRecord(kind=RecordKind.STARTFIX, sttime=1100, entime=0, time=1100, eye=0),
        EventRecord(kind=RecordKind.ENDFIX, sttime=1100, entime=1300, time=1300, eye=0, gavx=510.5),
        OpaqueRecord(kind=99, time=1400),
        message(2000, "TRIAL_RESULT 0"),
        SampleRecord(time=2500, flags=SAMPLE_LEFT),
        message(3000, "TRIALID 2"),
        SampleRecord(time=3001, flags=SAMPLE_LEFT, gx=(100.0, -32768.0)),
        message(3500, "TRIAL_RESULT 0"),
    ]


@pytest.fixture
def record_dump(tmp_path):
    """Write a small JSON-lines record dump and return its path."""
    lines = [
        {"preamble": "** CONVERTED FROM D:\\data\\sub01.edf"},
        {"preamble": "** EYELINK 1000 PLUS"},
        {"type": 24, "sttime": 100, "time": 100, "message": "DISPLAY_COORDS 0 0 1279 1023"},
        {"type": 24, "sttime": 1000, "time": 1000, "message": "TRIALID 1"},
        {"type": 30, "time": 1001, "sample_rate": 1000.0, "state": 1, "eye": 3},
        {"type": 200, "time": 1002, "flags": BOTH_EYES, "gx": [640.0, 642.0], "gy": [512.0, -32768.0]},
        {"type": 5, "sttime": 1010, "entime": 1030, "time": 1030},
        {"type": 24, "sttime": 1500, "time": 1500, "message": "TRIAL_RESULT 1"},
        {"type": 24, "sttime": 2000, "time": 2000, "message": "TRIALID 2"},
        {"type": 200, "time": 2001, "flags": SAMPLE_RIGHT, "gx": [-32768.0, 300.0]},
        {"type": 24, "sttime": 2400, "time": 2400, "message": "TRIAL_RESULT 0"},
    ]
    path = tmp_path / "sub01.jsonl"
    path.write_text("\n".join(json.dumps(line) for line in lines) + "\n")
    return path


@pytest.fixture
def make_message():
    """Factory for message events."""
    return message


@pytest.fixture
def make_header():
    """Factory for trial headers."""
    return header
