"""
Command-line interface for the EyeLink trial reader.

Usage:
    python -m eyelink_reader convert recording.jsonl --output ./tables
    python -m eyelink_reader convert recording.jsonl --samples --field gx --field gy
    python -m eyelink_reader preamble recording.jsonl
    python -m eyelink_reader fields
"""

from pathlib import Path
from typing import List, Optional

import typer

from .config import ReaderSettings, configure_logging
from .errors import EyelinkReaderError
from .export import write_tables
from .models import SAMPLE_FIELD_GROUPS, ConsistencyMode, SampleFieldMask
from .reader import read_edf, read_preamble, read_trials
from .replay import JsonlDecoder

app = typer.Typer(
    name="eyelink-reader",
    help="Split decoded EyeLink recordings into trial tables",
    add_completion=False,
)


@app.command()
def convert(
    dump: Path = typer.Argument(
        ...,
        help="JSON-lines record dump of the recording",
        exists=True,
        dir_okay=False,
        file_okay=True,
    ),
    output: Path = typer.Option(
        Path("./output"),
        "--output", "-o",
        help="Output directory for CSV tables",
    ),
    consistency: Optional[ConsistencyMode] = typer.Option(
        None,
        "--consistency", "-c",
        help="Timestamp consistency checking (default from settings)",
    ),
    events: Optional[bool] = typer.Option(
        None,
        "--events/--no-events",
        help="Import events",
    ),
    recordings: Optional[bool] = typer.Option(
        None,
        "--recordings/--no-recordings",
        help="Import recording markers",
    ),
    samples: Optional[bool] = typer.Option(
        None,
        "--samples/--no-samples",
        help="Import samples",
    ),
    field: Optional[List[str]] = typer.Option(
        None,
        "--field", "-f",
        help="Sample field group to import (repeatable, default: all)",
    ),
    start_marker: Optional[str] = typer.Option(
        None,
        "--start-marker",
        help="Message marking trial start",
    ),
    end_marker: Optional[str] = typer.Option(
        None,
        "--end-marker",
        help="Message marking trial end",
    ),
    raw: bool = typer.Option(
        False,
        "--raw",
        help="Keep sentinel values instead of converting them to missing",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Log every trial",
    ),
):
    """
    Read a recording trial by trial and write its tables as CSV.

    Writes headers.csv plus events.csv, recordings.csv and samples.csv for
    the enabled tables. Messages logged before recording started go to
    preamble_events.csv along with events.csv.
    """
    settings = ReaderSettings()
    configure_logging(settings, verbose=verbose)

    overrides = {
        "consistency": consistency,
        "import_events": events,
        "import_recordings": recordings,
        "import_samples": samples,
        "start_marker": start_marker,
        "end_marker": end_marker,
    }
    try:
        sample_fields = SampleFieldMask.only(*field) if field else None
        options = settings.read_options(
            sample_fields=sample_fields,
            **{name: value for name, value in overrides.items() if value is not None},
        )
    except ValueError as err:
        raise typer.BadParameter(str(err)) from err

    reader = read_trials if raw else read_edf
    try:
        recording = reader(dump, JsonlDecoder(), options)
    except EyelinkReaderError as err:
        typer.echo(typer.style(f"ERROR: {err}", fg=typer.colors.RED), err=True)
        raise typer.Exit(1)

    output_files = write_tables(recording, output)

    typer.echo(f"Read {len(recording.headers)} trials")
    for trial in recording.skipped_trials:
        typer.echo(typer.style(f"  WARNING: trial {trial} skipped (non-positive duration)", fg=typer.colors.YELLOW))
    for name, csv_path in output_files.items():
        typer.echo(f"  {name}: {csv_path}")


@app.command()
def preamble(
    dump: Path = typer.Argument(
        ...,
        help="JSON-lines record dump of the recording",
        exists=True,
        dir_okay=False,
        file_okay=True,
    ),
):
    """
    Print the recording preamble.
    """
    try:
        text = read_preamble(dump, JsonlDecoder())
    except EyelinkReaderError as err:
        typer.echo(typer.style(f"ERROR: {err}", fg=typer.colors.RED), err=True)
        raise typer.Exit(1)
    typer.echo(text)


@app.command()
def fields():
    """
    List the sample field groups and the columns they produce.
    """
    typer.echo("Sample field groups (always present: trial, eye):")
    for position, (name, columns) in enumerate(SAMPLE_FIELD_GROUPS.items()):
        typer.echo(f"  {position:2d} {name:<8} {', '.join(columns)}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
