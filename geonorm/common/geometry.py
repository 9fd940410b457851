"""Geometry provider backed by shapely and geopandas.

The pipeline only ever asks four questions of geometry: does a polygon contain
a point, what zones live in a vector file, what is the valid form of a
polygon, and what is the union of several polygons. Everything else (file
formats, CRS handling) stays behind this seam.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Protocol, Sequence

from pyproj import CRS
from shapely import make_valid
from shapely.geometry import Point, Polygon
from shapely.ops import unary_union

from geonorm.common.constants import WGS84_EPSG
from geonorm.common.errors import ConfigError
from geonorm.common.models import GeoPoint, Zone


class GeometryProvider(Protocol):
    def contains(self, polygon: Any, point: GeoPoint) -> bool: ...

    def load(self, path: Path, name_field: str) -> Sequence[Zone]: ...

    def repair_validity(self, polygon: Any) -> Any: ...

    def union(self, polygons: Iterable[Any]) -> Any: ...


def polygon_from_ring(coords: Sequence[Sequence[float]]) -> Polygon:
    """Build a polygon from ``[lon, lat]`` pairs."""
    if len(coords) < 3:
        raise ConfigError(f"Polygon ring needs at least 3 vertices, got {len(coords)}")
    return Polygon([(float(lon), float(lat)) for lon, lat in coords])


class ShapelyGeometryProvider:
    def contains(self, polygon: Any, point: GeoPoint) -> bool:
        # covers() keeps stations sitting exactly on a zone edge inside the zone.
        return bool(polygon.covers(Point(point.longitude, point.latitude)))

    def repair_validity(self, polygon: Any) -> Any:
        if polygon.is_valid:
            return polygon
        return make_valid(polygon)

    def union(self, polygons: Iterable[Any]) -> Any:
        return unary_union(list(polygons))

    def load(self, path: Path, name_field: str) -> list[Zone]:
        import geopandas as gpd

        if not path.exists():
            raise ConfigError(f"Zone source not found: {path}")

        frame = gpd.read_file(path)
        if name_field not in frame.columns:
            raise ConfigError(f"Zone source {path} has no field {name_field!r}")
        if frame.crs is not None and not CRS.from_user_input(frame.crs).equals(CRS.from_epsg(WGS84_EPSG)):
            frame = frame.to_crs(epsg=WGS84_EPSG)

        # Several features may share a zone name; dissolve them in first-seen order.
        grouped: dict[str, list[Any]] = {}
        for name, geometry in zip(frame[name_field], frame.geometry):
            if geometry is None or geometry.is_empty:
                continue
            grouped.setdefault(str(name), []).append(self.repair_validity(geometry))

        return [Zone(name=name, boundary=self.union(parts)) for name, parts in grouped.items()]
