"""
Decoder interface consumed by the reader.

A decoder opens a recording and hands out a session: one forward-only
cursor over the decoded records plus the trial navigation calls of the
EDF API. Failing calls raise `DecoderError`.
"""

from pathlib import Path
from typing import Protocol, runtime_checkable

from .models import Record, TrialHeader


@runtime_checkable
class DecoderSession(Protocol):
    """An open recording with a single forward-only record cursor."""

    def set_trial_boundary_markers(self, start_marker: str, end_marker: str) -> None: ...

    def trial_count(self) -> int: ...

    def seek_trial(self, index: int) -> None: ...

    def trial_header(self) -> TrialHeader: ...

    def next_record(self) -> Record: ...

    def preamble_text(self) -> str: ...

    def close(self) -> None: ...


@runtime_checkable
class Decoder(Protocol):
    """Opens recordings. Each call returns an independent session."""

    def open(
        self,
        path: Path,
        consistency: int,
        want_events: bool,
        want_samples: bool,
    ) -> DecoderSession: ...


class CancellationToken(Protocol):
    """Anything with is_set(), e.g. threading.Event."""

    def is_set(self) -> bool: ...
