"""
Reading recordings into trial tables.

`read_trials` is the core operation: a preamble scan on one session, then a
trial-by-trial walk on a second session. `read_edf` adds the missing-value
clean-up pass, `read_preamble` returns the decoder's preamble text.
"""

import logging
from contextlib import closing
from pathlib import Path
from typing import Optional, Union

from .assembler import assemble
from .errors import DecoderError, OpenError
from .models import ConsistencyMode, EdfRecording, ReadOptions
from .navigator import TrialNavigator
from .preamble import scan_preamble
from .session import CancellationToken, Decoder, DecoderSession
from .walker import TrialWalker

logger = logging.getLogger(__name__)


def open_session(
    decoder: Decoder,
    path: Union[str, Path],
    consistency: ConsistencyMode,
    want_events: bool,
    want_samples: bool,
) -> DecoderSession:
    """
    Open a decoder session, translating failures into OpenError.
    """
    path = Path(path)
    try:
        return decoder.open(path, consistency.code, want_events, want_samples)
    except DecoderError as err:
        raise OpenError(f"Error opening file '{path}', error code: {err.code}", code=err.code) from err
    except OSError as err:
        raise OpenError(f"Error opening file '{path}': {err}", code=err.errno) from err


def read_trials(
    path: Union[str, Path],
    decoder: Decoder,
    options: Optional[ReadOptions] = None,
    cancel: Optional[CancellationToken] = None,
) -> EdfRecording:
    """
    Read a recording trial by trial.

    Args:
        path: Recording file handed to the decoder
        decoder: Decoder implementation
        options: What to import and how trials are delimited
        cancel: Checked between trials; when set, the partial result is returned

    Returns:
        EdfRecording with the headers and every enabled table

    Raises:
        OpenError: A session could not be opened
        NavigationConfigError: The trial markers were rejected
        TrialSeekError: A trial could not be reached
    """
    options = options or ReadOptions()

    # messages before the first recording block, events only
    with closing(open_session(decoder, path, options.consistency, True, False)) as session:
        preamble = scan_preamble(session, options.display_marker)
    logger.debug("%d preamble messages in %s", len(preamble.messages), path)

    with closing(
        open_session(decoder, path, options.consistency, options.import_events, options.import_samples)
    ) as session:
        navigator = TrialNavigator(session)
        navigator.configure(options.start_marker, options.end_marker)
        walker = TrialWalker(session, navigator, options, cancel=cancel).walk()

    recording = assemble(walker, display_coords=preamble.display_coords, preamble_messages=preamble.messages)
    logger.info(
        "Read %d trials from %s (%d skipped)%s",
        len(recording.headers),
        path,
        len(recording.skipped_trials),
        ", cancelled" if recording.cancelled else "",
    )
    return recording


def read_edf(
    path: Union[str, Path],
    decoder: Decoder,
    options: Optional[ReadOptions] = None,
    cancel: Optional[CancellationToken] = None,
) -> EdfRecording:
    """read_trials followed by the missing-value pass over every table."""
    return read_trials(path, decoder, options, cancel).with_missing_converted()


def read_preamble(
    path: Union[str, Path],
    decoder: Decoder,
    consistency: ConsistencyMode = ConsistencyMode.FIX,
) -> str:
    """
    Return the recording preamble as a single string.

    Raises:
        OpenError: The recording could not be opened
        DecoderError: The decoder failed to produce the preamble
    """
    with closing(open_session(decoder, path, consistency, False, False)) as session:
        return session.preamble_text()
