"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from geonorm.common.errors import ConfigError
from geonorm.pipeline.depth import validate_breakpoints

_HEMISPHERE_LETTERS = {"latitude": {"N", "S"}, "longitude": {"E", "W"}}


def _assert_mapping(obj, ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping, got {type(obj).__name__}")


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    _assert_mapping(obj, ctx)
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _validate_section(cfg: dict, name: str, required: set[str], optional: set[str], allow_unknown: bool) -> dict:
    section = cfg[name]
    _assert_required_keys(section, required, name)
    _assert_no_unknown_keys(section, required | optional, name, allow_unknown)
    return section


def validate_normalise_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"coordinates", "fields", "depth", "zones", "bathymetry", "inputs", "output"}
    _assert_required_keys(cfg, top_required, "normalise config")
    _assert_no_unknown_keys(cfg, top_required, "normalise config", allow_unknown)

    coordinates = _validate_section(cfg, "coordinates", {"hemisphere"}, {"delimiter", "sample_index"}, allow_unknown)
    hemisphere = coordinates["hemisphere"]
    _assert_required_keys(hemisphere, {"latitude", "longitude"}, "coordinates.hemisphere")
    for axis, letters in _HEMISPHERE_LETTERS.items():
        if str(hemisphere[axis]).upper() not in letters:
            raise ConfigError(f"coordinates.hemisphere.{axis} must be one of {sorted(letters)}")
    delimiter = coordinates.get("delimiter")
    if delimiter is not None and (not isinstance(delimiter, str) or not delimiter):
        raise ConfigError("coordinates.delimiter must be a non-empty string or null")
    sample_index = coordinates.get("sample_index", 2)
    if not isinstance(sample_index, int) or sample_index < 0:
        raise ConfigError("coordinates.sample_index must be a non-negative integer")

    _validate_section(cfg, "fields", {"id", "lat", "lon"}, {"depth"}, allow_unknown)

    depth = _validate_section(cfg, "depth", {"breakpoints"}, set(), allow_unknown)
    if not isinstance(depth["breakpoints"], list):
        raise ConfigError("depth.breakpoints must be a list")
    validate_breakpoints(depth["breakpoints"])

    zones = _validate_section(cfg, "zones", set(), {"source", "name_field", "order", "inline"}, allow_unknown)
    if zones.get("inline") is not None:
        _assert_mapping(zones["inline"], "zones.inline")
    if zones.get("order") is not None and not isinstance(zones["order"], list):
        raise ConfigError("zones.order must be a list")

    _validate_section(
        cfg,
        "bathymetry",
        {"x_field", "y_field", "depth_field"},
        {"source_epsg"},
        allow_unknown,
    )
    _validate_section(cfg, "inputs", {"stations"}, {"bathymetry"}, allow_unknown)
    _validate_section(
        cfg,
        "output",
        {"normalised_filename", "errors_filename", "bathymetry_filename"},
        set(),
        allow_unknown,
    )
    return cfg
