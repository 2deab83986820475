"""
File I/O for scraper outputs.

Writes the collected places of an offline run to a timestamped JSON
document under the output directory.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from src.scraper.models import PlaceRecord

RESULTS_PREFIX = "google_maps_places"


def results_filename(suffix: str) -> str:
    """
    File name used for a results document.

    Example:
        >>> results_filename("session_1700000000000_ab12cd34e")
        'google_maps_places_session_1700000000000_ab12cd34e.json'
    """
    return f"{RESULTS_PREFIX}_{suffix}.json"


def records_to_json(records: List[PlaceRecord]) -> List[Dict[str, Any]]:
    return [r.to_dict() for r in records]


def write_results(
    records: List[PlaceRecord],
    out_dir: Path,
    timestamp: Optional[datetime] = None,
) -> Path:
    """
    Write places to ``<out_dir>/google_maps_places_<timestamp>.json``.

    Records keep their collection order.

    Args:
        records: Places to write
        out_dir: Output directory (created if missing)
        timestamp: Timestamp for the file name (default: now)

    Returns:
        Path of the written file

    Example:
        >>> path = write_results(places, Path("out"))
        >>> path.name
        'google_maps_places_2026-10-19T06-43-00-123Z.json'
    """
    ts = (timestamp or datetime.now(timezone.utc)).strftime("%Y-%m-%dT%H-%M-%S-%f")[:-3] + "Z"
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    path = out_dir / results_filename(ts)
    path.write_text(
        json.dumps(records_to_json(records), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    return path
