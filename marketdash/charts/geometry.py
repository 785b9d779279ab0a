"""Pure geometry shared by the price chart and the sparkline.

Maps a value series onto a drawing rectangle and maps pointer positions
back to the nearest plotted sample. No drawing surface is involved: every
result is plain pixel coordinates.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

FULL_CHART_PICK_RADIUS = 30.0
SPARKLINE_PICK_RADIUS = 10.0
DEFAULT_HEADROOM = 0.01  # 1% above max and below min


@dataclass(frozen=True)
class Padding:
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0

    @classmethod
    def uniform(cls, value: float) -> "Padding":
        return cls(value, value, value, value)


@dataclass(frozen=True)
class DrawRect:
    width: float
    height: float
    padding: Padding = field(default_factory=Padding)

    @property
    def plot_width(self) -> float:
        return self.width - self.padding.left - self.padding.right

    @property
    def plot_height(self) -> float:
        return self.height - self.padding.top - self.padding.bottom


@dataclass(frozen=True)
class ValueScale:
    y_min: float
    y_max: float

    @property
    def span(self) -> float:
        # a collapsed range falls back to 1 to keep the mapping finite
        return (self.y_max - self.y_min) or 1.0

    def to_pixel_y(self, value: float, rect: DrawRect) -> float:
        plot_height = rect.plot_height
        return rect.padding.top + plot_height - plot_height * (value - self.y_min) / self.span


@dataclass(frozen=True)
class ChartPoint:
    index: int
    x: float
    y: float
    value: float
    timestamp: Optional[int] = None


class PickMetric(str, Enum):
    EUCLIDEAN = "euclidean"
    HORIZONTAL = "horizontal"


def value_scale(values: Sequence[float], headroom: float = DEFAULT_HEADROOM) -> ValueScale:
    if not values:
        raise ValueError("cannot scale an empty series")
    return ValueScale(min(values) * (1 - headroom), max(values) * (1 + headroom))


def pixel_x(index: int, count: int, rect: DrawRect) -> float:
    if count <= 1:
        return rect.padding.left
    return rect.padding.left + rect.plot_width * index / (count - 1)


def map_points(
    values: Sequence[float],
    rect: DrawRect,
    headroom: float = DEFAULT_HEADROOM,
    timestamps: Optional[Sequence[int]] = None,
) -> List[ChartPoint]:
    """Pixel coordinates for every sample, in input order."""
    if not values:
        return []
    if timestamps is not None and len(timestamps) != len(values):
        raise ValueError("timestamps and values must have the same length")

    scale = value_scale(values, headroom)
    count = len(values)
    return [
        ChartPoint(
            index=i,
            x=pixel_x(i, count, rect),
            y=scale.to_pixel_y(value, rect),
            value=value,
            timestamp=timestamps[i] if timestamps is not None else None,
        )
        for i, value in enumerate(values)
    ]


def hit_test(
    points: Sequence[ChartPoint],
    x: float,
    y: float = 0.0,
    radius: float = FULL_CHART_PICK_RADIUS,
    metric: PickMetric = PickMetric.EUCLIDEAN,
) -> Optional[ChartPoint]:
    """Nearest point to the pointer, or None when it lies outside ``radius``.

    Ties go to the lowest index. ``y`` is ignored for the horizontal metric.
    """
    best: Optional[ChartPoint] = None
    best_distance = math.inf
    for point in points:
        if metric == PickMetric.HORIZONTAL:
            distance = abs(x - point.x)
        else:
            distance = math.hypot(x - point.x, y - point.y)
        if distance < best_distance:
            best, best_distance = point, distance

    if best is None or best_distance >= radius:
        return None
    return best
