"""Station CSV ingestion."""

from __future__ import annotations

from pathlib import Path

from geonorm.common.errors import StageError
from geonorm.common.fs import read_csv
from geonorm.common.models import RawRecord


def _cell(row: dict, column: str | None) -> str | None:
    if not column:
        return None
    value = row.get(column)
    if value is None:
        return None
    return value.strip()


def read_station_records(path: Path, fields: dict) -> list[RawRecord]:
    if not path.exists():
        raise StageError(f"Missing station input: {path}")
    header, rows = read_csv(path)

    required = [fields["id"], fields["lat"], fields["lon"]]
    missing = [column for column in required if column not in header]
    if missing:
        raise StageError(f"Station input {path} lacks columns: {', '.join(missing)}")

    records: list[RawRecord] = []
    for line_number, row in enumerate(rows, start=2):
        # Unlabelled rows are keyed by CSV line so their errors stay traceable.
        record_id = _cell(row, fields["id"]) or f"line-{line_number}"
        records.append(
            RawRecord(
                record_id=record_id,
                raw_lat=_cell(row, fields["lat"]),
                raw_lon=_cell(row, fields["lon"]),
                raw_depth=_cell(row, fields.get("depth")),
            )
        )
    return records
