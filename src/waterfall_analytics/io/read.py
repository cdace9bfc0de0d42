from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pandas as pd


def _records_from_json(path: Path) -> list[Any]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict) and "records" in payload:
        payload = payload["records"]
    if not isinstance(payload, list):
        raise ValueError(f"Expected a JSON array of records in {path}")
    return payload


def load_records(path: Path) -> list[Any]:
    """Load records from a JSON array (or ``{"records": [...]}``) or a CSV file."""
    suffix = path.suffix.lower()
    if suffix == ".json":
        return _records_from_json(path)
    if suffix == ".csv":
        # utf-8-sig strips BOM-prefixed headers commonly found in exported CSV files.
        frame = pd.read_csv(path, encoding="utf-8-sig")
        return frame.to_dict(orient="records")
    raise ValueError(f"Unsupported record file type: {path.suffix}")
