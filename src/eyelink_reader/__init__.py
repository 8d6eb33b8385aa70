"""
EyeLink Reader - trial-scoped tables from decoded EyeLink recordings

Walks the record stream of a recording trial by trial and splits it into
headers, events, recordings and samples tables (pandas DataFrames).
"""

from .errors import (
    DecoderError,
    EyelinkReaderError,
    NavigationConfigError,
    NavigationError,
    OpenError,
    SkippedTrialWarning,
    TrialSeekError,
)
from .models import (
    ConsistencyMode,
    EdfRecording,
    EventRecord,
    Exhausted,
    OpaqueRecord,
    ReadOptions,
    RecordingRecord,
    RecordKind,
    SampleFieldMask,
    SampleRecord,
    TrialHeader,
)
from .normalize import convert_missing, float_or_missing
from .preamble import DisplayCoords, parse_display_coords, scan_preamble
from .reader import read_edf, read_preamble, read_trials
from .replay import JsonlDecoder, ReplayDecoder

__version__ = "0.1.0"
__all__ = [
    "DecoderError",
    "EyelinkReaderError",
    "NavigationConfigError",
    "NavigationError",
    "OpenError",
    "SkippedTrialWarning",
    "TrialSeekError",
    "ConsistencyMode",
    "EdfRecording",
    "EventRecord",
    "Exhausted",
    "OpaqueRecord",
    "ReadOptions",
    "RecordingRecord",
    "RecordKind",
    "SampleFieldMask",
    "SampleRecord",
    "TrialHeader",
    "convert_missing",
    "float_or_missing",
    "DisplayCoords",
    "parse_display_coords",
    "scan_preamble",
    "read_edf",
    "read_preamble",
    "read_trials",
    "JsonlDecoder",
    "ReplayDecoder",
]
