"""
Data models for decoded EyeLink records, trial headers and read results.

Records are lightweight frozen dataclasses (they arrive at sampling rate),
while configuration-like objects (field mask, read options, headers) are
Pydantic models.
"""

from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

# ==================== Decoder Constants ====================

MISSING_DATA = -32768  # decoder value for "no data" in float fields
SAMPLE_LEFT = 0x8000  # sample flags: left eye data present
SAMPLE_RIGHT = 0x4000  # sample flags: right eye data present

DEFAULT_START_MARKER = "TRIALID"
DEFAULT_END_MARKER = "TRIAL_RESULT"
DISPLAY_COORDS_MARKER = "DISPLAY_COORDS"


class RecordKind(IntEnum):
    """Record type codes reported by the decoder."""
    NO_PENDING_ITEMS = 0
    STARTPARSE = 1
    ENDPARSE = 2
    STARTBLINK = 3
    ENDBLINK = 4
    STARTSACC = 5
    ENDSACC = 6
    STARTFIX = 7
    ENDFIX = 8
    FIXUPDATE = 9
    BREAKPARSE = 10
    STARTSAMPLES = 15
    ENDSAMPLES = 16
    STARTEVENTS = 17
    ENDEVENTS = 18
    MESSAGEEVENT = 24
    BUTTONEVENT = 25
    INPUTEVENT = 28
    RECORDING_INFO = 30
    LOST_DATA_EVENT = 63
    SAMPLE_TYPE = 200


class Eye(IntEnum):
    """Eye indicator stored in the samples table."""
    LEFT = 0
    RIGHT = 1
    BINOCULAR = 2


class ConsistencyMode(str, Enum):
    """Timestamp consistency checking requested from the decoder."""
    NONE = "none"
    REPORT = "report"
    FIX = "fix"

    @property
    def code(self) -> int:
        return {"none": 0, "report": 1, "fix": 2}[self.value]


# ==================== Records ====================

_MISSING_PAIR = (float(MISSING_DATA), float(MISSING_DATA))


@dataclass(slots=True, frozen=True)
class SampleRecord:
    """One gaze sample. Paired fields hold (left, right) values."""
    time: int
    flags: int = 0
    px: Tuple[float, float] = _MISSING_PAIR
    py: Tuple[float, float] = _MISSING_PAIR
    hx: Tuple[float, float] = _MISSING_PAIR
    hy: Tuple[float, float] = _MISSING_PAIR
    pa: Tuple[float, float] = _MISSING_PAIR
    gx: Tuple[float, float] = _MISSING_PAIR
    gy: Tuple[float, float] = _MISSING_PAIR
    rx: float = float(MISSING_DATA)
    ry: float = float(MISSING_DATA)
    gxvel: Tuple[float, float] = _MISSING_PAIR
    gyvel: Tuple[float, float] = _MISSING_PAIR
    hxvel: Tuple[float, float] = _MISSING_PAIR
    hyvel: Tuple[float, float] = _MISSING_PAIR
    rxvel: Tuple[float, float] = _MISSING_PAIR
    ryvel: Tuple[float, float] = _MISSING_PAIR
    fgxvel: Tuple[float, float] = _MISSING_PAIR
    fgyvel: Tuple[float, float] = _MISSING_PAIR
    fhxvel: Tuple[float, float] = _MISSING_PAIR
    fhyvel: Tuple[float, float] = _MISSING_PAIR
    frxvel: Tuple[float, float] = _MISSING_PAIR
    fryvel: Tuple[float, float] = _MISSING_PAIR
    hdata: Tuple[int, ...] = (0,) * 8
    input: int = 0
    buttons: int = 0
    htype: int = 0
    errors: int = 0
    kind: int = RecordKind.SAMPLE_TYPE

    @property
    def eye(self) -> Eye:
        if self.flags & SAMPLE_LEFT:
            return Eye.BINOCULAR if self.flags & SAMPLE_RIGHT else Eye.LEFT
        return Eye.RIGHT


@dataclass(slots=True, frozen=True)
class EventRecord:
    """One parsed event: fixation, saccade, blink, message, button, ..."""
    kind: int
    sttime: int
    entime: int = 0
    time: int = 0
    read: int = 0
    hstx: float = 0.0
    hsty: float = 0.0
    gstx: float = 0.0
    gsty: float = 0.0
    sta: float = 0.0
    henx: float = 0.0
    heny: float = 0.0
    genx: float = 0.0
    geny: float = 0.0
    ena: float = 0.0
    havx: float = 0.0
    havy: float = 0.0
    gavx: float = 0.0
    gavy: float = 0.0
    ava: float = 0.0
    avel: float = 0.0
    pvel: float = 0.0
    svel: float = 0.0
    evel: float = 0.0
    supd_x: float = 0.0
    eupd_x: float = 0.0
    supd_y: float = 0.0
    eupd_y: float = 0.0
    eye: int = 0
    status: int = 0
    flags: int = 0
    input: int = 0
    buttons: int = 0
    parsedby: int = 0
    message: str = ""


@dataclass(slots=True, frozen=True)
class RecordingRecord:
    """Recording start/end marker with the tracker configuration."""
    time: int
    sample_rate: float = 0.0
    eflags: int = 0
    sflags: int = 0
    state: int = 0
    record_type: int = 0
    pupil_type: int = 0
    recording_mode: int = 0
    filter_type: int = 0
    pos_type: int = 0
    eye: int = 0
    kind: int = RecordKind.RECORDING_INFO


@dataclass(slots=True, frozen=True)
class OpaqueRecord:
    """A record whose kind code has no table."""
    kind: int
    time: int = 0


@dataclass(slots=True, frozen=True)
class Exhausted:
    """End-of-stream sentinel."""
    time: int = 0
    kind: int = RecordKind.NO_PENDING_ITEMS


Record = Union[SampleRecord, EventRecord, RecordingRecord, OpaqueRecord, Exhausted]

# ==================== Trial Headers ====================


class RecordingInfo(BaseModel):
    """Tracker configuration active when a trial began."""
    time: int = Field(default=0, description="Timestamp of the recording marker")
    sample_rate: float = Field(default=0.0, description="Sampling rate in Hz")
    eflags: int = Field(default=0, description="Event data flags")
    sflags: int = Field(default=0, description="Sample data flags")
    state: int = Field(default=0, description="1 for recording start, 0 for end")
    record_type: int = Field(default=0, description="Samples, events or both")
    pupil_type: int = Field(default=0, description="Area or diameter")
    recording_mode: int = Field(default=0, description="Pupil-only or pupil-CR")
    filter_type: int = Field(default=0, description="Heuristic filter level")
    pos_type: int = Field(default=0, description="Gaze, HREF or raw")
    eye: int = Field(default=0, description="Recorded eye(s)")

    @classmethod
    def from_record(cls, record: RecordingRecord) -> "RecordingInfo":
        return cls(
            time=record.time,
            sample_rate=record.sample_rate,
            eflags=record.eflags,
            sflags=record.sflags,
            state=record.state,
            record_type=record.record_type,
            pupil_type=record.pupil_type,
            recording_mode=record.recording_mode,
            filter_type=record.filter_type,
            pos_type=record.pos_type,
            eye=record.eye,
        )


class TrialHeader(BaseModel):
    """Header of a single trial as reported by the decoder."""
    duration: int = Field(description="Trial duration in milliseconds")
    starttime: int = Field(description="Absolute trial start timestamp")
    endtime: int = Field(description="Absolute trial end timestamp")
    rec: RecordingInfo = Field(default_factory=RecordingInfo)

    @property
    def is_valid(self) -> bool:
        return self.endtime > self.starttime

    def to_row(self, trial: int) -> Dict:
        """Flatten into a row of the headers table."""
        row = {
            "trial": trial,
            "duration": self.duration,
            "starttime": self.starttime,
            "endtime": self.endtime,
        }
        for name, value in self.rec.model_dump().items():
            row[f"rec_{name}"] = value
        return row


HEADER_COLUMNS = [
    "trial", "duration", "starttime", "endtime",
    "rec_time", "rec_sample_rate", "rec_eflags", "rec_sflags", "rec_state",
    "rec_record_type", "rec_pupil_type", "rec_recording_mode",
    "rec_filter_type", "rec_pos_type", "rec_eye",
]
HEADER_DTYPES: Dict[str, str] = {
    name: "float64" if name == "rec_sample_rate" else "int64" for name in HEADER_COLUMNS
}

# ==================== Sample Field Mask ====================

# field group -> columns it materializes, in table order
SAMPLE_FIELD_GROUPS: Dict[str, List[str]] = {
    "time": ["time", "time_rel"],
    "px": ["pxL", "pxR"],
    "py": ["pyL", "pyR"],
    "hx": ["hxL", "hxR"],
    "hy": ["hyL", "hyR"],
    "pa": ["paL", "paR"],
    "gx": ["gxL", "gxR"],
    "gy": ["gyL", "gyR"],
    "rx": ["rx"],
    "ry": ["ry"],
    "gxvel": ["gxvelL", "gxvelR"],
    "gyvel": ["gyvelL", "gyvelR"],
    "hxvel": ["hxvelL", "hxvelR"],
    "hyvel": ["hyvelL", "hyvelR"],
    "rxvel": ["rxvelL", "rxvelR"],
    "ryvel": ["ryvelL", "ryvelR"],
    "fgxvel": ["fgxvelL", "fgxvelR"],
    "fgyvel": ["fgyvelL", "fgyvelR"],
    "fhxvel": ["fhxvelL", "fhxvelR"],
    "fhyvel": ["fhyvelL", "fhyvelR"],
    "frxvel": ["frxvelL", "frxvelR"],
    "fryvel": ["fryvelL", "fryvelR"],
    "hdata": [f"hdata_{i}" for i in range(1, 9)],
    "flags": ["flags"],
    "input": ["input"],
    "buttons": ["buttons"],
    "htype": ["htype"],
    "errors": ["errors"],
}


class SampleFieldMask(BaseModel):
    """
    Selects which optional sample field groups become columns.

    Each flag gates exactly one group; see SAMPLE_FIELD_GROUPS for the
    columns behind every flag.
    """
    model_config = ConfigDict(frozen=True)

    time: bool = False
    px: bool = False
    py: bool = False
    hx: bool = False
    hy: bool = False
    pa: bool = False
    gx: bool = False
    gy: bool = False
    rx: bool = False
    ry: bool = False
    gxvel: bool = False
    gyvel: bool = False
    hxvel: bool = False
    hyvel: bool = False
    rxvel: bool = False
    ryvel: bool = False
    fgxvel: bool = False
    fgyvel: bool = False
    fhxvel: bool = False
    fhyvel: bool = False
    frxvel: bool = False
    fryvel: bool = False
    hdata: bool = False
    flags: bool = False
    input: bool = False
    buttons: bool = False
    htype: bool = False
    errors: bool = False

    @classmethod
    def all(cls) -> "SampleFieldMask":
        return cls(**{name: True for name in SAMPLE_FIELD_GROUPS})

    @classmethod
    def none(cls) -> "SampleFieldMask":
        return cls()

    @classmethod
    def only(cls, *names: str) -> "SampleFieldMask":
        unknown = [name for name in names if name not in SAMPLE_FIELD_GROUPS]
        if unknown:
            raise ValueError(f"Unknown sample field group(s): {', '.join(unknown)}")
        return cls(**{name: True for name in names})

    @classmethod
    def from_flags(cls, flags: Sequence[bool]) -> "SampleFieldMask":
        """Build from a positional sequence with one flag per group."""
        if len(flags) != len(SAMPLE_FIELD_GROUPS):
            raise ValueError(
                f"Expected {len(SAMPLE_FIELD_GROUPS)} flags, got {len(flags)}"
            )
        return cls(**{name: bool(flag) for name, flag in zip(SAMPLE_FIELD_GROUPS, flags)})

    def enabled(self) -> List[str]:
        """Names of the enabled groups, in table order."""
        return [name for name in SAMPLE_FIELD_GROUPS if getattr(self, name)]

    def columns(self) -> List[str]:
        """Data columns materialized by the enabled groups."""
        return [column for name in self.enabled() for column in SAMPLE_FIELD_GROUPS[name]]


# ==================== Read Options and Results ====================


class ReadOptions(BaseModel):
    """What to import from a recording and how trials are delimited."""
    model_config = ConfigDict(frozen=True)

    consistency: ConsistencyMode = Field(
        default=ConsistencyMode.FIX,
        description="Timestamp consistency checking performed by the decoder",
    )
    import_events: bool = Field(default=True, description="Build the events table")
    import_recordings: bool = Field(default=True, description="Build the recordings table")
    import_samples: bool = Field(default=False, description="Build the samples table")
    sample_fields: SampleFieldMask = Field(
        default_factory=SampleFieldMask.all,
        description="Sample field groups to materialize",
    )
    start_marker: str = Field(
        default=DEFAULT_START_MARKER,
        description="Message that marks trial start (TRIALID when empty)",
    )
    end_marker: str = Field(default=DEFAULT_END_MARKER, description="Message that marks trial end")
    display_marker: str = Field(
        default=DISPLAY_COORDS_MARKER,
        description="Preamble message substring carrying display geometry",
    )


@dataclass(frozen=True)
class EdfRecording:
    """Tables read from one recording."""
    headers: pd.DataFrame
    events: Optional[pd.DataFrame] = None
    recordings: Optional[pd.DataFrame] = None
    samples: Optional[pd.DataFrame] = None
    preamble_events: Optional[pd.DataFrame] = None
    display_coords: Optional[str] = None
    skipped_trials: Tuple[int, ...] = ()
    cancelled: bool = False

    def tables(self) -> Dict[str, pd.DataFrame]:
        """Present tables keyed by name."""
        tables = {"headers": self.headers}
        for name in ("events", "recordings", "samples", "preamble_events"):
            frame = getattr(self, name)
            if frame is not None:
                tables[name] = frame
        return tables

    def with_missing_converted(self) -> "EdfRecording":
        """Copy with the missing-value pass applied to every table."""
        from .normalize import convert_missing

        converted = {name: convert_missing(frame) for name, frame in self.tables().items()}
        return replace(self, **converted)
