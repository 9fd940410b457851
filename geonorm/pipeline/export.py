"""Normalised record and error export."""

from __future__ import annotations

from pathlib import Path

from geonorm.common.fs import write_csv, write_json
from geonorm.common.models import NormalisationResult

NORMALISED_HEADERS = [
    "record_id",
    "latitude",
    "longitude",
    "zone",
    "depth",
    "depth_bin",
    "flags",
]


def _serialize_row(row: dict) -> dict:
    out = {}
    for key in NORMALISED_HEADERS:
        value = row.get(key)
        if value is None:
            out[key] = ""
        elif isinstance(value, float):
            out[key] = f"{value:.6f}"
        else:
            out[key] = value
    return out


def write_normalised_csv(result: NormalisationResult, out_path: Path) -> Path:
    # Input order is kept; it is the order stations were occupied.
    rows = [_serialize_row(record.to_row()) for record in result.records]
    write_csv(out_path, NORMALISED_HEADERS, rows)
    return out_path


def write_errors_json(result: NormalisationResult, out_path: Path) -> Path:
    payload = {
        "delimiter": result.delimiter,
        "error_count": len(result.errors),
        "errors": [result.errors[key].to_dict() for key in sorted(result.errors)],
    }
    write_json(out_path, payload)
    return out_path
