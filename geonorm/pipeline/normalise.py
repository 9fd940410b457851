"""Normalise raw station records into decimal-degree, zone-tagged records."""

from __future__ import annotations

import math
from typing import Sequence

from geonorm.common.constants import DELIMITER_SAMPLE_INDEX
from geonorm.common.errors import DuplicateRecordId, MalformedDepth, RecordRejected
from geonorm.common.geometry import GeometryProvider, ShapelyGeometryProvider
from geonorm.common.models import (
    DepthSample,
    HemisphereConvention,
    NormalisationResult,
    NormalizedRecord,
    RawCoordinate,
    RawRecord,
    RecordError,
    Zone,
)
from geonorm.pipeline.coordinates import detect_delimiter, parse_coordinate
from geonorm.pipeline.depth import DepthClassifier
from geonorm.pipeline.zones import tag_zone


def _first_latitude_sample(records: Sequence[RawRecord]) -> str | None:
    for record in records:
        if record.raw_lat and record.raw_lat.strip():
            return record.raw_lat.strip()
    return None


def _parse_depth(raw: str | float | None) -> float | None:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise MalformedDepth(f"Non-numeric depth {raw!r}") from exc
    if not math.isfinite(value):
        raise MalformedDepth(f"Non-finite depth {raw!r}")
    return value


def normalise_record(
    record: RawRecord,
    zones: Sequence[Zone],
    *,
    delimiter: str | None,
    convention: HemisphereConvention,
    provider: GeometryProvider,
    classifier: DepthClassifier | None = None,
) -> NormalizedRecord:
    point = parse_coordinate(
        RawCoordinate(latitude=record.raw_lat or "", longitude=record.raw_lon or ""),
        delimiter,
        convention,
    )
    depth_value = _parse_depth(record.raw_depth)
    depth = None
    if depth_value is not None:
        depth = DepthSample(
            value=depth_value,
            bin=classifier.classify(depth_value) if classifier is not None else None,
        )

    match = tag_zone(point, zones, provider)
    return NormalizedRecord(
        record_id=record.record_id,
        point=point,
        zone=match.name,
        flags=match.flags,
        depth=depth,
    )


def run_normalise(
    records: Sequence[RawRecord],
    zones: Sequence[Zone],
    *,
    convention: HemisphereConvention | None = None,
    delimiter: str | None = None,
    classifier: DepthClassifier | None = None,
    provider: GeometryProvider | None = None,
    sample_index: int = DELIMITER_SAMPLE_INDEX,
) -> NormalisationResult:
    """Normalise a batch; per-record failures land in ``errors``, never raised.

    Raises ``DelimiterDetectionFailed`` when no delimiter is given and none can
    be sniffed from the first latitude sample, since no record could parse.
    A batch with no latitude sample at all is not sniffed: every record in it
    is rejected as an empty coordinate.
    """
    convention = convention or HemisphereConvention()
    provider = provider or ShapelyGeometryProvider()
    if delimiter is None:
        sample = _first_latitude_sample(records)
        if sample is not None:
            delimiter = detect_delimiter(sample, sample_index)

    normalised: list[NormalizedRecord] = []
    errors: dict[str, RecordError] = {}
    seen_ids: set[str] = set()

    for record in records:
        try:
            if record.record_id in seen_ids:
                raise DuplicateRecordId(f"Record id {record.record_id!r} already processed")
            seen_ids.add(record.record_id)
            normalised.append(
                normalise_record(
                    record,
                    zones,
                    delimiter=delimiter,
                    convention=convention,
                    provider=provider,
                    classifier=classifier,
                )
            )
        except RecordRejected as exc:
            errors.setdefault(
                record.record_id,
                RecordError(record_id=record.record_id, error_code=exc.error_code, message=str(exc)),
            )

    return NormalisationResult(records=tuple(normalised), errors=errors, delimiter=delimiter)
