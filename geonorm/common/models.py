"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class RawRecord:
    record_id: str
    raw_lat: str | None
    raw_lon: str | None
    raw_depth: str | float | None = None


@dataclass(frozen=True)
class RawCoordinate:
    latitude: str
    longitude: str


@dataclass(frozen=True)
class HemisphereConvention:
    """Sign applied to unsigned magnitudes, per axis."""

    latitude_sign: int = 1
    longitude_sign: int = -1

    @classmethod
    def from_letters(cls, latitude: str, longitude: str) -> "HemisphereConvention":
        return cls(
            latitude_sign=-1 if latitude.upper() == "S" else 1,
            longitude_sign=-1 if longitude.upper() == "W" else 1,
        )


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class DepthBin:
    index: int
    label: str
    beyond_range: bool = False


@dataclass(frozen=True)
class DepthSample:
    value: float
    bin: DepthBin | None = None
    x: float | None = None
    y: float | None = None


@dataclass(frozen=True)
class Zone:
    name: str
    boundary: Any


@dataclass(frozen=True)
class ZoneMatch:
    name: str | None
    flags: frozenset[str] = frozenset()


@dataclass(frozen=True)
class NormalizedRecord:
    record_id: str
    point: GeoPoint
    zone: str | None
    flags: frozenset[str] = frozenset()
    depth: DepthSample | None = None

    def to_row(self) -> dict[str, Any]:
        return {
            "record_id": self.record_id,
            "latitude": self.point.latitude,
            "longitude": self.point.longitude,
            "zone": self.zone,
            "depth": None if self.depth is None else self.depth.value,
            "depth_bin": None if self.depth is None or self.depth.bin is None else self.depth.bin.label,
            "flags": ";".join(sorted(self.flags)) if self.flags else None,
        }


@dataclass(frozen=True)
class RecordError:
    record_id: str
    error_code: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NormalisationResult:
    records: tuple[NormalizedRecord, ...]
    errors: dict[str, RecordError] = field(default_factory=dict)
    delimiter: str | None = None
