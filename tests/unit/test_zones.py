from itertools import permutations

import pytest
from shapely.geometry import box

from geonorm.common.constants import FLAG_ZONE_OVERLAP
from geonorm.common.errors import ConfigError
from geonorm.common.geometry import ShapelyGeometryProvider
from geonorm.common.models import GeoPoint, Zone
from geonorm.pipeline.zones import build_zones, load_zone_set, order_zones, tag_zone

PROVIDER = ShapelyGeometryProvider()


def _disjoint_zones():
    return [
        Zone("Closed Area I", box(-69.4, 40.75, -68.5, 41.5)),
        Zone("Closed Area II", box(-67.33, 41.0, -66.6, 42.37)),
        Zone("Nantucket Lightship", box(-70.33, 40.33, -69.5, 40.83)),
    ]


def test_tag_zone_returns_containing_zone():
    match = tag_zone(GeoPoint(40.82, -68.5247), _disjoint_zones(), PROVIDER)

    assert match.name == "Closed Area I"
    assert match.flags == frozenset()


def test_tag_zone_outside_every_zone_is_none_without_flags():
    match = tag_zone(GeoPoint(43.0, -65.0), _disjoint_zones(), PROVIDER)

    assert match.name is None
    assert match.flags == frozenset()


def test_overlap_returns_first_match_and_flags():
    zones = [Zone("outer", box(-70, 40, -66, 43)), Zone("inner", box(-69, 41, -68, 42))]

    match = tag_zone(GeoPoint(41.5, -68.5), zones, PROVIDER)

    assert match.name == "outer"
    assert FLAG_ZONE_OVERLAP in match.flags


def test_disjoint_zone_order_does_not_change_result():
    points = [GeoPoint(40.82, -68.5247), GeoPoint(41.5, -67.0), GeoPoint(40.5, -70.0), GeoPoint(39.0, -60.0)]
    expected = [tag_zone(point, _disjoint_zones(), PROVIDER).name for point in points]

    for ordering in permutations(_disjoint_zones()):
        assert [tag_zone(point, list(ordering), PROVIDER).name for point in points] == expected


def test_build_zones_from_rings_repairs_invalid_boundary():
    bowtie = [[0, 0], [2, 2], [2, 0], [0, 2]]
    zones = build_zones({"bowtie": bowtie, "square": box(5, 5, 6, 6)}, PROVIDER)

    assert [zone.name for zone in zones] == ["bowtie", "square"]
    assert zones[0].boundary.is_valid


def test_order_zones_applies_configured_order():
    ordered = order_zones(_disjoint_zones(), ["Nantucket Lightship"])

    assert [zone.name for zone in ordered] == ["Nantucket Lightship", "Closed Area I", "Closed Area II"]


def test_order_zones_rejects_unknown_names():
    with pytest.raises(ConfigError):
        order_zones(_disjoint_zones(), ["Western Gulf of Maine"])


def test_load_zone_set_rejects_duplicate_names(tmp_path):
    zones_config = {
        "inline": {"A": [[0, 0], [1, 0], [1, 1]]},
        "order": [],
    }

    class _Provider(ShapelyGeometryProvider):
        def load(self, path, name_field):
            return [Zone("A", box(0, 0, 1, 1))]

    with pytest.raises(ConfigError):
        load_zone_set({**zones_config, "source": "zones.geojson"}, _Provider(), tmp_path)
