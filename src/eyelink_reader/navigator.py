"""Trial navigation on top of a decoder session."""

import logging
from typing import Optional

from .errors import DecoderError, NavigationConfigError, TrialSeekError
from .models import DEFAULT_START_MARKER, TrialHeader
from .session import DecoderSession

logger = logging.getLogger(__name__)


class TrialNavigator:
    """
    Positions a session at trials and fetches their headers.

    Failures are fatal for the whole read: trials are walked in order, and
    continuing after a failed jump would desynchronize the stream.
    """

    def __init__(self, session: DecoderSession):
        self._session = session
        self._trial_count: Optional[int] = None

    def configure(self, start_marker: str, end_marker: str) -> None:
        """
        Set the messages delimiting trials.

        Args:
            start_marker: Trial start message, TRIALID when empty
            end_marker: Trial end message

        Raises:
            NavigationConfigError: The decoder rejected the markers
        """
        start_marker = start_marker or DEFAULT_START_MARKER
        try:
            self._session.set_trial_boundary_markers(start_marker, end_marker)
        except DecoderError as err:
            raise NavigationConfigError(
                f"Error while setting up trial navigation ({start_marker!r}, {end_marker!r}): {err}",
                code=err.code,
            ) from err
        self._trial_count = self._session.trial_count()
        logger.info("Trials count: %d", self._trial_count)

    @property
    def trial_count(self) -> int:
        if self._trial_count is None:
            self._trial_count = self._session.trial_count()
        return self._trial_count

    def seek(self, index: int) -> TrialHeader:
        """
        Jump to a trial and return its header.

        Raises:
            TrialSeekError: The jump or the header fetch failed
        """
        try:
            self._session.seek_trial(index)
        except DecoderError as err:
            raise TrialSeekError(f"Error jumping to trial {index}: {err}", trial=index, code=err.code) from err
        try:
            return self._session.trial_header()
        except DecoderError as err:
            raise TrialSeekError(
                f"Error obtaining the header for trial {index}: {err}", trial=index, code=err.code
            ) from err
