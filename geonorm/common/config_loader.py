"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from geonorm.common.errors import ConfigError
from geonorm.common.fs import read_yaml
from geonorm.common.models import HemisphereConvention
from geonorm.common.schema import validate_normalise_config

CONFIG_FILENAME = "normalise.yml"


@dataclass(frozen=True)
class ConfigBundle:
    config_dir: Path
    normalise: dict

    @property
    def convention(self) -> HemisphereConvention:
        hemisphere = self.normalise["coordinates"]["hemisphere"]
        return HemisphereConvention.from_letters(hemisphere["latitude"], hemisphere["longitude"])

    @property
    def breakpoints(self) -> list[float]:
        return self.normalise["depth"]["breakpoints"]


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path)
    if not isinstance(base, dict):
        raise ConfigError(f"Config file must hold a mapping: {path}")
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    if overlay is None:
        return base
    if not isinstance(overlay, dict):
        raise ConfigError(f"Overlay config must hold a mapping: {overlay_path}")
    return _deep_merge(base, overlay)


def load_all_configs(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> ConfigBundle:
    overlay_path = None
    if overlay_config_dir is not None:
        overlay_path = overlay_config_dir / CONFIG_FILENAME
    cfg = _load_yaml_with_overlay(config_dir / CONFIG_FILENAME, overlay_path)
    return ConfigBundle(
        config_dir=config_dir,
        normalise=validate_normalise_config(cfg, allow_unknown=allow_unknown),
    )
