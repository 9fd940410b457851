"""Bathymetric sample ingestion and depth binning."""

from __future__ import annotations

import math
from collections import Counter
from pathlib import Path

from pyproj import CRS, Transformer

from geonorm.common.constants import WGS84_EPSG
from geonorm.common.errors import StageError
from geonorm.common.fs import read_csv, write_csv
from geonorm.common.models import DepthSample
from geonorm.pipeline.depth import DepthClassifier

BINNED_HEADERS = ["x", "y", "depth", "depth_bin"]
NODATA_LABEL = "nodata"


def _safe_float(value) -> float:
    if value is None:
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def read_xyz_samples(
    path: Path,
    *,
    x_field: str,
    y_field: str,
    depth_field: str,
    source_epsg: int | None = None,
) -> list[DepthSample]:
    """Read ``x, y, depth`` rows, reprojecting x/y to WGS84 lon/lat when needed.

    Unreadable depths become NaN cells rather than errors.
    """
    if not path.exists():
        raise StageError(f"Missing bathymetry input: {path}")
    header, rows = read_csv(path)
    missing = [column for column in (x_field, y_field, depth_field) if column not in header]
    if missing:
        raise StageError(f"Bathymetry input {path} lacks columns: {', '.join(missing)}")

    transformer = None
    if source_epsg is not None and int(source_epsg) != WGS84_EPSG:
        transformer = Transformer.from_crs(CRS.from_epsg(int(source_epsg)), CRS.from_epsg(WGS84_EPSG), always_xy=True)

    samples: list[DepthSample] = []
    for row in rows:
        x = _safe_float(row.get(x_field))
        y = _safe_float(row.get(y_field))
        if transformer is not None and math.isfinite(x) and math.isfinite(y):
            x, y = transformer.transform(x, y)
        samples.append(DepthSample(value=_safe_float(row.get(depth_field)), x=x, y=y))
    return samples


def tally_bins(samples: list[DepthSample], classifier: DepthClassifier) -> dict[str, int]:
    counts = Counter(NODATA_LABEL if sample.bin is None else sample.bin.label for sample in samples)
    ordered = {label: counts.get(label, 0) for label in classifier.labels()}
    ordered[NODATA_LABEL] = counts.get(NODATA_LABEL, 0)
    return ordered


def run_bathymetry(
    bathymetry_config: dict,
    classifier: DepthClassifier,
    input_path: Path,
    output_path: Path,
) -> dict:
    samples = read_xyz_samples(
        input_path,
        x_field=bathymetry_config["x_field"],
        y_field=bathymetry_config["y_field"],
        depth_field=bathymetry_config["depth_field"],
        source_epsg=bathymetry_config.get("source_epsg"),
    )
    classified = classifier.classify_samples(samples)

    rows = [
        {
            "x": "" if sample.x is None or not math.isfinite(sample.x) else sample.x,
            "y": "" if sample.y is None or not math.isfinite(sample.y) else sample.y,
            "depth": sample.value if math.isfinite(sample.value) else "",
            "depth_bin": NODATA_LABEL if sample.bin is None else sample.bin.label,
        }
        for sample in classified
    ]
    write_csv(output_path, BINNED_HEADERS, rows)

    return {
        "path": str(output_path),
        "rows": len(rows),
        "bins": tally_bins(classified, classifier),
    }
