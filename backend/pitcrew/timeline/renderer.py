"""
Rendering primitive for the timeline.

The scheduler only relies on the capability
``construct(bars, options) / refresh(bars) / scroll_to_date(date)``.
``TimelineRenderer`` implements it by laying bars out on a column grid and
exposing the resulting geometry, so the UI shell only has to paint rectangles.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Protocol, Sequence

from pitcrew.timeline.layout import BarDescriptor
from pitcrew.timeline.viewport import ZoomLevel

MONTHS_PER_UNIT = {
    ZoomLevel.MONTH: 1,
    ZoomLevel.QUARTER: 3,
}

DAYS_PER_UNIT = {
    ZoomLevel.DAY: 1,
    ZoomLevel.WEEK: 7,
}


@dataclass(frozen=True)
class RenderOptions:
    zoom: ZoomLevel
    column_width: int
    bar_height: int = 24
    padding: int = 14


@dataclass(frozen=True)
class BarGeometry:
    x: float
    width: float
    row: int


class Renderer(Protocol):
    def construct(self, bars: Sequence[BarDescriptor], options: RenderOptions) -> None: ...

    def refresh(self, bars: Sequence[BarDescriptor]) -> None: ...

    def scroll_to_date(self, day: date) -> float | None: ...


def _add_months(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def unit_start(day: date, zoom: ZoomLevel) -> date:
    """First day of the column that contains ``day``."""
    if zoom == ZoomLevel.DAY:
        return day
    if zoom == ZoomLevel.WEEK:
        # Weeks start on Sunday
        return day - timedelta(days=(day.weekday() + 1) % 7)
    if zoom == ZoomLevel.MONTH:
        return day.replace(day=1)
    quarter_month = ((day.month - 1) // 3) * 3 + 1
    return date(day.year, quarter_month, 1)


def add_units(day: date, units: int, zoom: ZoomLevel) -> date:
    """Shift a column start by whole columns."""
    if zoom in DAYS_PER_UNIT:
        return day + timedelta(days=DAYS_PER_UNIT[zoom] * units)
    return _add_months(day, MONTHS_PER_UNIT[zoom] * units)


class TimelineRenderer:
    """
    Column grid plus bar geometry.

    The grid starts one column before the column holding the earliest start
    and ends one column after the column holding the latest end.
    """

    def __init__(self):
        self.options: RenderOptions | None = None
        self.bars: list[BarDescriptor] = []
        self.columns: list[date] = []
        self.origin: date | None = None
        self.finish: date | None = None  # exclusive

    @property
    def constructed(self) -> bool:
        return self.options is not None

    @property
    def total_width(self) -> int:
        if self.options is None:
            return 0
        return len(self.columns) * self.options.column_width

    def construct(self, bars: Sequence[BarDescriptor], options: RenderOptions) -> None:
        self.options = options
        self._layout(bars)

    def refresh(self, bars: Sequence[BarDescriptor]) -> None:
        if self.options is None:
            return
        self._layout(bars)

    def teardown(self) -> None:
        self.options = None
        self.bars = []
        self.columns = []
        self.origin = None
        self.finish = None

    def _layout(self, bars: Sequence[BarDescriptor]) -> None:
        zoom = self.options.zoom
        self.bars = list(bars)
        if not self.bars:
            self.columns = []
            self.origin = self.finish = None
            return

        earliest = min(bar.start for bar in self.bars)
        latest = max(bar.end for bar in self.bars)
        self.origin = add_units(unit_start(earliest, zoom), -1, zoom)
        self.finish = add_units(unit_start(latest, zoom), 2, zoom)

        columns = []
        current = self.origin
        while current < self.finish:
            columns.append(current)
            current = add_units(current, 1, zoom)
        self.columns = columns

    def x_for_date(self, day: date) -> float:
        """Pixel offset of the start of ``day`` from the grid origin."""
        zoom = self.options.zoom
        width = self.options.column_width
        if zoom in DAYS_PER_UNIT:
            return (day - self.origin).days / DAYS_PER_UNIT[zoom] * width

        step = MONTHS_PER_UNIT[zoom]
        months = (day.year - self.origin.year) * 12 + (day.month - self.origin.month)
        index = months // step
        column_start = add_units(self.origin, index, zoom)
        column_end = add_units(self.origin, index + 1, zoom)
        fraction = (day - column_start).days / (column_end - column_start).days
        return (index + fraction) * width

    def geometry(self, bar_id: str) -> BarGeometry | None:
        if self.options is None:
            return None
        for row, bar in enumerate(self.bars):
            if bar.id == bar_id:
                x = self.x_for_date(bar.start)
                # end date is inclusive
                right = self.x_for_date(bar.end + timedelta(days=1))
                return BarGeometry(x=x, width=right - x, row=row)
        return None

    def scroll_to_date(self, day: date) -> float | None:
        """x of ``day``, or None when not laid out or outside the grid."""
        if self.options is None or self.origin is None:
            return None
        if day < self.origin or day >= self.finish:
            return None
        return self.x_for_date(day)
