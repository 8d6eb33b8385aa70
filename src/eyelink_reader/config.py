"""
Reader settings, loaded from environment variables and defaults.

    EYELINK_IMPORT_SAMPLES=true
    EYELINK_START_MARKER=TRIALSTART
    EYELINK_LOGGING__LEVEL=DEBUG
"""

import logging
import sys
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import (
    DEFAULT_END_MARKER,
    DEFAULT_START_MARKER,
    DISPLAY_COORDS_MARKER,
    ConsistencyMode,
    ReadOptions,
    SampleFieldMask,
)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)-8s] [%(name)s] %(message)s"


class ReaderSettings(BaseSettings):
    """Defaults for reading recordings."""
    consistency: ConsistencyMode = Field(
        default=ConsistencyMode.FIX,
        description="Timestamp consistency checking performed by the decoder.",
    )
    import_events: bool = Field(default=True, description="Build the events table.")
    import_recordings: bool = Field(default=True, description="Build the recordings table.")
    import_samples: bool = Field(default=False, description="Build the samples table.")
    start_marker: str = Field(default=DEFAULT_START_MARKER, description="Trial start message.")
    end_marker: str = Field(default=DEFAULT_END_MARKER, description="Trial end message.")
    display_marker: str = Field(
        default=DISPLAY_COORDS_MARKER,
        description="Preamble message carrying the display geometry.",
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="EYELINK_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    def read_options(self, sample_fields: Optional[SampleFieldMask] = None, **overrides) -> ReadOptions:
        """ReadOptions from these settings, with per-call overrides."""
        values = dict(
            consistency=self.consistency,
            import_events=self.import_events,
            import_recordings=self.import_recordings,
            import_samples=self.import_samples,
            start_marker=self.start_marker,
            end_marker=self.end_marker,
            display_marker=self.display_marker,
        )
        if sample_fields is not None:
            values["sample_fields"] = sample_fields
        values.update(overrides)
        return ReadOptions(**values)


def configure_logging(settings: ReaderSettings, verbose: bool = False) -> None:
    """Route library logs to stderr with the configured level and format."""
    level = logging.DEBUG if verbose else settings.logging.level.upper()
    logging.basicConfig(level=level, format=settings.logging.format, stream=sys.stderr, force=True)
