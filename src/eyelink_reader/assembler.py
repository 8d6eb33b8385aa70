"""Folds the walker's columnar stores into the result bundle."""

from typing import Optional, Sequence

import pandas as pd

from .models import HEADER_DTYPES, EdfRecording, EventRecord
from .walker import PREAMBLE_TRIAL, ColumnStore, EventColumns, TrialWalker


def _to_frame(store: Optional[ColumnStore]) -> Optional[pd.DataFrame]:
    if store is None:
        return None
    return pd.DataFrame(store.columns, columns=list(store.columns)).astype(store.dtypes)


def _preamble_frame(messages: Sequence[EventRecord]) -> pd.DataFrame:
    store = EventColumns()
    for message in messages:
        # no trial has started yet, times stay absolute
        store.append(message, PREAMBLE_TRIAL, 0)
    return _to_frame(store)


def assemble(
    walker: TrialWalker,
    display_coords: Optional[str] = None,
    preamble_messages: Sequence[EventRecord] = (),
) -> EdfRecording:
    """
    Build the tables from a finished walk.

    Args:
        walker: Walker after walk() returned
        display_coords: Preamble display message, if one was found
        preamble_messages: Messages logged before the first recording block

    Returns:
        EdfRecording with headers plus every enabled table. Preamble
        messages form their own events-shaped table, present when events
        are imported.
    """
    headers = pd.DataFrame(walker.headers, columns=list(HEADER_DTYPES)).astype(HEADER_DTYPES)
    return EdfRecording(
        headers=headers,
        events=_to_frame(walker.events),
        recordings=_to_frame(walker.recordings),
        samples=_to_frame(walker.samples),
        preamble_events=_preamble_frame(preamble_messages) if walker.events is not None else None,
        display_coords=display_coords,
        skipped_trials=tuple(walker.skipped_trials),
        cancelled=walker.cancelled,
    )
