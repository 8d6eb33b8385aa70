"""Writing read results to disk."""

import logging
from pathlib import Path
from typing import Dict

from .models import EdfRecording

logger = logging.getLogger(__name__)


def write_tables(recording: EdfRecording, output_dir: Path) -> Dict[str, Path]:
    """
    Write every table of a recording to CSV.

    Args:
        recording: Result of read_trials/read_edf
        output_dir: Directory to write into (created if missing)

    Returns:
        Dictionary mapping table name to the written path
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    output_files: Dict[str, Path] = {}
    for name, frame in recording.tables().items():
        csv_path = output_dir / f"{name}.csv"
        frame.to_csv(csv_path, index=False)
        output_files[name] = csv_path
        logger.debug("Wrote %s: %d rows", csv_path.name, len(frame))

    if recording.display_coords is not None:
        coords_path = output_dir / "display_coords.txt"
        coords_path.write_text(recording.display_coords + "\n", encoding="utf-8")
        output_files["display_coords"] = coords_path

    return output_files
