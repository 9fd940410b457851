"""Depth binning against descending bathymetric breakpoints."""

from __future__ import annotations

import math
from bisect import bisect_left
from typing import Iterable, Sequence

import numpy as np

from geonorm.common.errors import InvalidBreakpoints, MalformedDepth
from geonorm.common.models import DepthBin, DepthSample


def _format_bound(value: float) -> str:
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return f"{value:g}"


def validate_breakpoints(breakpoints: Sequence[float]) -> tuple[float, ...]:
    try:
        values = tuple(float(value) for value in breakpoints)
    except (TypeError, ValueError) as exc:
        raise InvalidBreakpoints(f"Breakpoints must be numeric: {breakpoints!r}") from exc
    if len(values) < 2:
        raise InvalidBreakpoints("At least two breakpoints are required")
    if not all(math.isfinite(value) for value in values):
        raise InvalidBreakpoints(f"Breakpoints must be finite: {list(values)}")
    for upper, lower in zip(values, values[1:]):
        if not lower < upper:
            raise InvalidBreakpoints(f"Breakpoints must be strictly descending: {upper} then {lower}")
    return values


class DepthClassifier:
    """Buckets depths into ``(lower, upper]`` intervals.

    Index 0 is everything shallower than (above) the first breakpoint and the
    last index is everything at or below the last breakpoint, so a deeper value
    never lands in a smaller index.
    """

    def __init__(self, breakpoints: Sequence[float]) -> None:
        self.breakpoints = validate_breakpoints(breakpoints)
        self._ascending = tuple(reversed(self.breakpoints))
        bounds = (math.inf, *self.breakpoints, -math.inf)
        self._bins = tuple(
            DepthBin(
                index=index,
                label=f"({_format_bound(lower)}, {_format_bound(upper)}" + (")" if math.isinf(upper) else "]"),
                beyond_range=index in (0, len(self.breakpoints)),
            )
            for index, (upper, lower) in enumerate(zip(bounds, bounds[1:]))
        )

    def labels(self) -> list[str]:
        return [depth_bin.label for depth_bin in self._bins]

    def index_of(self, value: float) -> int:
        return len(self._ascending) - bisect_left(self._ascending, value)

    def classify(self, value: float) -> DepthBin:
        if value is None or not math.isfinite(value):
            raise MalformedDepth(f"Depth must be a finite number: {value!r}")
        return self._bins[self.index_of(value)]

    def classify_samples(self, samples: Iterable[DepthSample]) -> list[DepthSample]:
        out: list[DepthSample] = []
        for sample in samples:
            # No-data cells stay unbinned.
            depth_bin = self._bins[self.index_of(sample.value)] if math.isfinite(sample.value) else None
            out.append(DepthSample(value=sample.value, bin=depth_bin, x=sample.x, y=sample.y))
        return out

    def classify_array(self, values: np.ndarray) -> np.ndarray:
        """Bin indices for a whole grid; ``-1`` marks non-finite cells."""
        grid = np.asarray(values, dtype=float)
        ascending = np.asarray(self._ascending)
        indices = len(ascending) - np.searchsorted(ascending, grid, side="left")
        return np.where(np.isfinite(grid), indices, -1)
