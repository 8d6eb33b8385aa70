"""
Preamble scan for display geometry and service messages.

Messages logged before the first recording block carry service information
such as ``DISPLAY_COORDS 0 0 1919 1079`` or ``RECCFG CR 500 2 1 LR``. The
scan needs its own session: the cursor cannot be rewound once trial
navigation starts.
"""

import logging
import re
from typing import Iterator, List, NamedTuple, Optional

from pydantic import BaseModel, Field

from .models import DISPLAY_COORDS_MARKER, EventRecord, RecordKind
from .session import DecoderSession

logger = logging.getLogger(__name__)


def _preamble_messages(session: DecoderSession) -> Iterator[EventRecord]:
    """Yield message events until recording starts or the stream ends."""
    while True:
        record = session.next_record()
        if record.kind == RecordKind.NO_PENDING_ITEMS:
            logger.debug("Stream ended before recording started")
            return
        if record.kind == RecordKind.RECORDING_INFO:
            return
        if record.kind == RecordKind.MESSAGEEVENT and isinstance(record, EventRecord):
            yield record


def scan_display_coords(session: DecoderSession, marker: str = DISPLAY_COORDS_MARKER) -> Optional[str]:
    """
    Find the display geometry message logged before recording starts.

    Args:
        session: Fresh events-only session
        marker: Substring identifying the message

    Returns:
        Full message text, or None when recording starts (or the stream
        ends) first
    """
    for message in _preamble_messages(session):
        if marker in message.message:
            return message.message
    logger.debug("No %s message before recording started", marker)
    return None


class PreambleScan(NamedTuple):
    display_coords: Optional[str]
    messages: List[EventRecord]


def scan_preamble(session: DecoderSession, marker: str = DISPLAY_COORDS_MARKER) -> PreambleScan:
    """
    Collect every message logged before recording starts.

    The display geometry is the first collected message containing the
    marker.
    """
    messages = list(_preamble_messages(session))
    display_coords = next((message.message for message in messages if marker in message.message), None)
    if display_coords is None:
        logger.debug("No %s message before recording started", marker)
    return PreambleScan(display_coords=display_coords, messages=messages)


class DisplayCoords(BaseModel):
    """Screen rectangle in pixels, inclusive bounds."""
    left: int = Field(description="Left edge")
    top: int = Field(description="Top edge")
    right: int = Field(description="Right edge")
    bottom: int = Field(description="Bottom edge")

    @property
    def width(self) -> int:
        return self.right - self.left + 1

    @property
    def height(self) -> int:
        return self.bottom - self.top + 1


_COORDS_PATTERN = r"{marker}\s+(-?\d+)\s+(-?\d+)\s+(-?\d+)\s+(-?\d+)"


def parse_display_coords(text: Optional[str], marker: str = DISPLAY_COORDS_MARKER) -> Optional[DisplayCoords]:
    """
    Parse the four coordinates following the marker.

    Examples:
        "DISPLAY_COORDS 0 0 1919 1079" -> DisplayCoords(0, 0, 1919, 1079)
        "RECCFG CR 500 2 1 L" -> None
    """
    if not text:
        return None
    match = re.search(_COORDS_PATTERN.format(marker=re.escape(marker)), text)
    if match is None:
        return None
    left, top, right, bottom = (int(value) for value in match.groups())
    return DisplayCoords(left=left, top=top, right=right, bottom=bottom)
