"""Full price chart and sparkline layouts built on the geometry engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import List, Literal, Optional, Sequence, Tuple

from marketdash.charts.geometry import (
    DEFAULT_HEADROOM,
    FULL_CHART_PICK_RADIUS,
    SPARKLINE_PICK_RADIUS,
    ChartPoint,
    DrawRect,
    Padding,
    PickMetric,
    hit_test,
    map_points,
    pixel_x,
    value_scale,
)
from marketdash.schemas.market import MarketChartSeries

Timeframe = Literal["24h", "7d", "30d", "1y"]

TIMEFRAME_DAYS = {"24h": 1, "7d": 7, "30d": 30, "1y": 365}

PRICE_BANDS = 5
TIME_DIVISIONS = 6
CHART_PADDING = Padding(top=30, right=20, bottom=30, left=60)
CHART_HEIGHT = 400
SPARKLINE_WIDTH = 100
SPARKLINE_HEIGHT = 40
SPARKLINE_PADDING = 2


def format_currency(value: float) -> str:
    """USD with separators; 2 decimals from $1 up, 6 below."""
    digits = 2 if abs(value) >= 1 else 6
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.{digits}f}"


def format_time_label(timestamp_ms: int, timeframe: str, tz: tzinfo = timezone.utc) -> str:
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=tz)
    if timeframe == "24h":
        return f"{moment:%H:%M}"
    if timeframe in ("7d", "30d"):
        return f"{moment:%b} {moment.day}"
    return f"{moment:%b} {moment:%y}"


def relative_age(index: int, total: int) -> str:
    """Age of an hourly sparkline sample counted back from the newest one."""
    steps = total - 1 - index
    days, hours = divmod(steps, 24)
    if days == 0:
        return "Now" if hours == 0 else f"{hours}h ago"
    if days == 1 and hours == 0:
        return "1 day ago"
    return f"{days}d {hours}h ago"


@dataclass(frozen=True)
class Gridline:
    position: float
    label: str


@dataclass
class PriceChartLayout:
    width: float
    height: float
    timeframe: str
    points: List[ChartPoint] = field(default_factory=list)
    price_gridlines: List[Gridline] = field(default_factory=list)
    time_gridlines: List[Gridline] = field(default_factory=list)
    title: str = ""
    current_price_label: str = ""

    @classmethod
    def build(
        cls,
        series: MarketChartSeries,
        timeframe: str,
        width: float,
        height: float = CHART_HEIGHT,
        tz: tzinfo = timezone.utc,
    ) -> "PriceChartLayout":
        layout = cls(width=width, height=height, timeframe=timeframe, title=f"Price Chart ({timeframe})")
        values = series.values
        if not values:
            return layout

        rect = DrawRect(width, height, CHART_PADDING)
        timestamps = series.timestamps
        layout.points = map_points(values, rect, DEFAULT_HEADROOM, timestamps)

        scale = value_scale(values, DEFAULT_HEADROOM)
        step = scale.span / PRICE_BANDS
        for i in range(PRICE_BANDS + 1):
            price = scale.y_min + step * i
            layout.price_gridlines.append(Gridline(scale.to_pixel_y(price, rect), format_currency(price)))

        count = len(timestamps)
        stride = max(1, count // TIME_DIVISIONS)
        for i in range(0, count, stride):
            layout.time_gridlines.append(
                Gridline(pixel_x(i, count, rect), format_time_label(timestamps[i], timeframe, tz))
            )

        layout.current_price_label = format_currency(values[-1])
        return layout

    def hit(self, x: float, y: float) -> Optional[ChartPoint]:
        return hit_test(self.points, x, y, FULL_CHART_PICK_RADIUS, PickMetric.EUCLIDEAN)

    @staticmethod
    def tooltip(point: ChartPoint, tz: tzinfo = timezone.utc) -> Tuple[str, str]:
        """(price, date) lines for a hovered point."""
        price = format_currency(point.value)
        if point.timestamp is None:
            return price, ""
        moment = datetime.fromtimestamp(point.timestamp / 1000, tz=tz)
        return price, f"{moment:%b} {moment.day}, {moment:%Y %H:%M}"


@dataclass
class SparklineLayout:
    width: float
    height: float
    trend: Literal["up", "down"]
    points: List[ChartPoint] = field(default_factory=list)

    @classmethod
    def build(
        cls,
        values: Sequence[float],
        change_pct: float,
        width: float = SPARKLINE_WIDTH,
        height: float = SPARKLINE_HEIGHT,
        padding: float = SPARKLINE_PADDING,
    ) -> "SparklineLayout":
        rect = DrawRect(width, height, Padding.uniform(padding))
        # the sparkline spans its raw min..max without headroom
        return cls(
            width=width,
            height=height,
            trend="up" if change_pct >= 0 else "down",
            points=map_points(list(values), rect, headroom=0.0),
        )

    def hit(self, x: float) -> Optional[ChartPoint]:
        return hit_test(self.points, x, radius=SPARKLINE_PICK_RADIUS, metric=PickMetric.HORIZONTAL)

    def tooltip(self, point: ChartPoint) -> Tuple[str, str]:
        return format_currency(point.value), relative_age(point.index, len(self.points))
