"""Run report aggregation."""

from __future__ import annotations

from collections import Counter
from pathlib import Path

from geonorm.common.fs import write_json
from geonorm.common.models import NormalisationResult


def summarise_normalisation(result: NormalisationResult, rows_in: int) -> dict:
    zone_counts = Counter(record.zone or "none" for record in result.records)
    flag_counts = Counter(flag for record in result.records for flag in record.flags)
    error_counts = Counter(error.error_code for error in result.errors.values())
    return {
        "rows_in": rows_in,
        "rows_out": len(result.records),
        "rejected": len(result.errors),
        "delimiter": result.delimiter,
        "zones": dict(sorted(zone_counts.items())),
        "flags": dict(sorted(flag_counts.items())),
        "errors": dict(sorted(error_counts.items())),
    }


def write_run_summary(
    data_dir: Path,
    run_id: str,
    *,
    normalise: dict | None = None,
    bathymetry: dict | None = None,
    failed_stages: list[str] | None = None,
) -> Path:
    failed_stages = failed_stages or []
    warning_count = 0
    if normalise is not None:
        warning_count += normalise["rejected"] + sum(normalise["flags"].values())

    status = "success"
    if failed_stages:
        status = "error"
    elif warning_count > 0:
        status = "partial"

    summary_path = data_dir / "out" / "reports" / "run_summary.json"
    payload = {
        "run_id": run_id,
        "status": status,
        "failed_stages": failed_stages,
        "warning_count": warning_count,
        "normalise": normalise,
        "bathymetry": bathymetry,
    }
    write_json(summary_path, payload)
    return summary_path
