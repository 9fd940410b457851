"""Management-zone construction and point tagging."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Sequence

from geonorm.common.constants import FLAG_ZONE_OVERLAP
from geonorm.common.errors import ConfigError
from geonorm.common.geometry import GeometryProvider, polygon_from_ring
from geonorm.common.models import GeoPoint, Zone, ZoneMatch


def tag_zone(point: GeoPoint, zones: Sequence[Zone], provider: GeometryProvider) -> ZoneMatch:
    """Name of the first zone containing ``point``, flagging overlaps."""
    matches = [zone.name for zone in zones if provider.contains(zone.boundary, point)]
    if not matches:
        return ZoneMatch(name=None)
    if len(matches) > 1:
        return ZoneMatch(name=matches[0], flags=frozenset({FLAG_ZONE_OVERLAP}))
    return ZoneMatch(name=matches[0])


def build_zones(boundaries: Mapping[str, Any], provider: GeometryProvider) -> tuple[Zone, ...]:
    zones = []
    for name, boundary in boundaries.items():
        if isinstance(boundary, (list, tuple)):
            boundary = polygon_from_ring(boundary)
        zones.append(Zone(name=str(name), boundary=provider.repair_validity(boundary)))
    _assert_unique_names(zones)
    return tuple(zones)


def order_zones(zones: Sequence[Zone], order: Sequence[str]) -> tuple[Zone, ...]:
    by_name = {zone.name: zone for zone in zones}
    unknown = [name for name in order if name not in by_name]
    if unknown:
        raise ConfigError(f"Zone order names unknown zones: {', '.join(unknown)}")
    listed = [by_name[name] for name in dict.fromkeys(order)]
    rest = [zone for zone in zones if zone.name not in set(order)]
    return tuple(listed + rest)


def load_zone_set(zones_config: dict, provider: GeometryProvider, config_dir: Path) -> tuple[Zone, ...]:
    zones: list[Zone] = []
    source = zones_config.get("source")
    if source:
        source_path = Path(source)
        if not source_path.is_absolute():
            source_path = config_dir / source_path
        zones.extend(provider.load(source_path, zones_config.get("name_field", "name")))
    zones.extend(build_zones(zones_config.get("inline") or {}, provider))
    _assert_unique_names(zones)
    return order_zones(zones, zones_config.get("order") or [])


def _assert_unique_names(zones: Sequence[Zone]) -> None:
    names = [zone.name for zone in zones]
    dupes = {name for name in names if names.count(name) > 1}
    if dupes:
        raise ConfigError(f"Duplicate zone names: {', '.join(sorted(dupes))}")
