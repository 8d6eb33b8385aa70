"""Exceptions and warnings raised while reading a recording."""

from typing import Optional


class EyelinkReaderError(Exception):
    """Base class for all fatal reader errors."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class DecoderError(EyelinkReaderError):
    """Raised by decoder sessions when a call fails."""


class OpenError(EyelinkReaderError):
    """The recording could not be opened (missing, corrupt or unreadable)."""


class NavigationConfigError(EyelinkReaderError):
    """The decoder rejected the trial boundary markers."""


NavigationError = NavigationConfigError


class TrialSeekError(EyelinkReaderError):
    """The decoder could not position the stream at a trial."""

    def __init__(self, message: str, trial: int, code: Optional[int] = None):
        super().__init__(message, code)
        self.trial = trial


class SkippedTrialWarning(UserWarning):
    """A trial with zero or negative duration was left out."""
