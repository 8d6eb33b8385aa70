"""
Trial walker and the columnar stores it fills.

The walker visits trials in ascending order, pulls records from the session
until the trial end is passed or the stream runs dry, and routes each record
into the events, samples or recordings columns.
"""

import logging
import warnings
from enum import Enum
from typing import Dict, List, Optional

from .classifier import RecordCategory, classify, is_past
from .errors import SkippedTrialWarning
from .models import (
    SAMPLE_FIELD_GROUPS,
    EventRecord,
    ReadOptions,
    RecordingRecord,
    SampleFieldMask,
    SampleRecord,
    TrialHeader,
)
from .navigator import TrialNavigator
from .normalize import float_or_missing, pair_or_missing
from .session import CancellationToken, DecoderSession

logger = logging.getLogger(__name__)

# ==================== Columnar Stores ====================

EVENT_FLOAT_FIELDS = [
    "hstx", "hsty", "gstx", "gsty", "sta", "henx", "heny", "genx", "geny", "ena",
    "havx", "havy", "gavx", "gavy", "ava", "avel", "pvel", "svel", "evel",
    "supd_x", "eupd_x", "supd_y", "eupd_y",
]
EVENT_COLUMNS = (
    ["trial", "time", "type", "read", "sttime", "entime", "sttime_rel", "entime_rel"]
    + EVENT_FLOAT_FIELDS
    + ["eye", "status", "flags", "input", "buttons", "parsedby", "message"]
)
EVENT_DTYPES: Dict[str, str] = {
    name: "float64" if name in EVENT_FLOAT_FIELDS else "object" if name == "message" else "int64"
    for name in EVENT_COLUMNS
}

RECORDING_FIELDS = [
    "sample_rate", "eflags", "sflags", "state", "record_type", "pupil_type",
    "recording_mode", "filter_type", "pos_type", "eye",
]
RECORDING_COLUMNS = ["trial", "time", "time_rel"] + RECORDING_FIELDS
RECORDING_DTYPES: Dict[str, str] = {
    name: "float64" if name == "sample_rate" else "int64" for name in RECORDING_COLUMNS
}

PAIRED_FLOAT_GROUPS = frozenset({
    "px", "py", "hx", "hy", "pa", "gx", "gy",
    "gxvel", "gyvel", "hxvel", "hyvel", "rxvel", "ryvel",
    "fgxvel", "fgyvel", "fhxvel", "fhyvel", "frxvel", "fryvel",
})
SCALAR_FLOAT_GROUPS = frozenset({"rx", "ry"})

# trial value of events logged before the first recording block
PREAMBLE_TRIAL = -1


class ColumnStore:
    """Append-only table kept as one list per column, with a dtype per column."""

    def __init__(self, dtypes: Dict[str, str]):
        self.dtypes = dict(dtypes)
        self.columns: Dict[str, list] = {name: [] for name in dtypes}

    def __len__(self) -> int:
        return len(next(iter(self.columns.values()), []))

    def _push(self, **values) -> None:
        for name, value in values.items():
            self.columns[name].append(value)


class EventColumns(ColumnStore):
    def __init__(self):
        super().__init__(EVENT_DTYPES)

    def append(self, event: EventRecord, trial: int, trial_start: int) -> None:
        # events without an end keep the raw value instead of a relative one
        entime_rel = event.entime - trial_start if event.entime > 0 else event.entime
        self._push(
            trial=trial,
            time=event.time,
            type=int(event.kind),
            read=event.read,
            sttime=event.sttime,
            entime=event.entime,
            sttime_rel=event.sttime - trial_start,
            entime_rel=entime_rel,
            **{name: getattr(event, name) for name in EVENT_FLOAT_FIELDS},
            eye=event.eye,
            status=event.status,
            flags=event.flags,
            input=event.input,
            buttons=event.buttons,
            parsedby=event.parsedby,
            message=event.message,
        )


class RecordingColumns(ColumnStore):
    def __init__(self):
        super().__init__(RECORDING_DTYPES)

    def append(self, recording: RecordingRecord, trial: int, trial_start: int) -> None:
        self._push(
            trial=trial,
            time=recording.time,
            time_rel=recording.time - trial_start,
            **{name: getattr(recording, name) for name in RECORDING_FIELDS},
        )


class SampleColumns(ColumnStore):
    """Sample table restricted to the field groups enabled in the mask."""

    def __init__(self, mask: SampleFieldMask):
        self.groups = mask.enabled()
        dtypes = {"trial": "int64", "eye": "int64"}
        for group in self.groups:
            dtype = "float64" if group in PAIRED_FLOAT_GROUPS or group in SCALAR_FLOAT_GROUPS else "int64"
            dtypes.update((column, dtype) for column in SAMPLE_FIELD_GROUPS[group])
        super().__init__(dtypes)

    def append(self, sample: SampleRecord, trial: int, trial_start: int) -> None:
        self.columns["trial"].append(trial)
        self.columns["eye"].append(int(sample.eye))
        for group in self.groups:
            for column, value in zip(SAMPLE_FIELD_GROUPS[group], self._group_values(group, sample, trial_start)):
                self.columns[column].append(value)

    @staticmethod
    def _group_values(group: str, sample: SampleRecord, trial_start: int):
        if group == "time":
            return sample.time, sample.time - trial_start
        if group in PAIRED_FLOAT_GROUPS:
            return pair_or_missing(getattr(sample, group))
        if group in SCALAR_FLOAT_GROUPS:
            return (float_or_missing(getattr(sample, group)),)
        if group == "hdata":
            return tuple(sample.hdata)
        return (getattr(sample, group),)


# ==================== Walker ====================


class TrialState(str, Enum):
    AWAITING_FIRST_RECORD = "awaiting_first_record"
    STREAMING = "streaming"
    TRIAL_COMPLETE = "trial_complete"


class TrialWalker:
    """
    Reads every trial of a session into columnar stores.

    Disabled tables have no store. Trial indices are zero-based.
    """

    def __init__(
        self,
        session: DecoderSession,
        navigator: TrialNavigator,
        options: ReadOptions,
        cancel: Optional[CancellationToken] = None,
    ):
        self._session = session
        self._navigator = navigator
        self._cancel = cancel
        self.options = options
        self.sample_fields = options.sample_fields  # fixed for the whole read

        self.headers: List[Dict] = []
        self.events = EventColumns() if options.import_events else None
        self.recordings = RecordingColumns() if options.import_recordings else None
        self.samples = SampleColumns(self.sample_fields) if options.import_samples else None
        self.skipped_trials: List[int] = []
        self.cancelled = False

    def walk(self) -> "TrialWalker":
        total_trials = self._navigator.trial_count
        for trial in range(total_trials):
            if self._cancel is not None and self._cancel.is_set():
                logger.info("Reading cancelled after %d of %d trials", trial, total_trials)
                self.cancelled = True
                break

            header = self._navigator.seek(trial)
            if not header.is_valid:
                self._skip(trial, header)
                continue

            self.headers.append(header.to_row(trial))
            self._walk_trial(trial, header)
            logger.debug("Trial %d/%d read", trial + 1, total_trials)
        return self

    def _skip(self, trial: int, header: TrialHeader) -> None:
        message = (
            f"Skipping trial {trial} due to zero or negative duration "
            f"(start={header.starttime}, end={header.endtime})."
        )
        logger.warning(message)
        warnings.warn(message, SkippedTrialWarning, stacklevel=3)
        self.skipped_trials.append(trial)

    def _walk_trial(self, trial: int, header: TrialHeader) -> TrialState:
        start_time, end_time = header.starttime, header.endtime
        state = TrialState.AWAITING_FIRST_RECORD
        while state is not TrialState.TRIAL_COMPLETE:
            record = self._session.next_record()
            category = classify(record.kind)
            if category is None:
                continue
            if category is RecordCategory.END:
                if state is TrialState.AWAITING_FIRST_RECORD:
                    logger.debug("Trial %d has no records", trial)
                state = TrialState.TRIAL_COMPLETE
                continue
            state = TrialState.STREAMING

            if category is RecordCategory.RECORDING:
                if self.recordings is not None:
                    self.recordings.append(record, trial, start_time)
            elif is_past(record, end_time):
                # samples and events past the end belong to the next trial (or none)
                state = TrialState.TRIAL_COMPLETE
                continue
            elif category is RecordCategory.SAMPLE:
                if self.samples is not None:
                    self.samples.append(record, trial, start_time)
            elif category is RecordCategory.EVENT:
                if self.events is not None:
                    self.events.append(record, trial, start_time)

            if is_past(record, end_time):
                state = TrialState.TRIAL_COMPLETE
        return state
