"""
Viewport controller for the timeline.

Tracks the scrollable viewport width, derives the column width for the active
zoom level and performs the "Today" / "First Task" navigation.
"""

from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Sequence

from pitcrew.logging_config import get_logger

if TYPE_CHECKING:
    from pitcrew.timeline.layout import BarDescriptor
    from pitcrew.timeline.renderer import Renderer

logger = get_logger(__name__)


class ZoomLevel(str, Enum):
    DAY = "Day"
    WEEK = "Week"
    MONTH = "Month"
    QUARTER = "Quarter"


# Columns that should fit in the viewport at each zoom level
COLUMN_COUNTS = {
    ZoomLevel.DAY: 60,
    ZoomLevel.WEEK: 12,
    ZoomLevel.MONTH: 6,
    ZoomLevel.QUARTER: 4,
}

# Floor so header labels stay legible on narrow viewports
MIN_COLUMN_WIDTHS = {
    ZoomLevel.DAY: 30,
    ZoomLevel.WEEK: 80,
    ZoomLevel.MONTH: 120,
    ZoomLevel.QUARTER: 120,
}

DEFAULT_COLUMN_WIDTH = 50  # before the viewport has been measured
VIEWPORT_GUTTER = 20  # px reserved for the vertical scrollbar
TODAY_MARGIN = 100
FIRST_ITEM_MARGIN = 50


def column_width_for(viewport_width: float, zoom: ZoomLevel) -> int:
    """
    Column width in px for a viewport.

    Formula: max(min_width, floor((width - gutter) / columns))
    """
    if not viewport_width or viewport_width <= 0:
        return DEFAULT_COLUMN_WIDTH
    zoom = ZoomLevel(zoom)
    columns = COLUMN_COUNTS[zoom]
    fitted = int((viewport_width - VIEWPORT_GUTTER) // columns)
    return max(MIN_COLUMN_WIDTHS[zoom], fitted)


class ViewportController:
    """Viewport width, zoom level and horizontal scroll position."""

    def __init__(self, zoom: ZoomLevel = ZoomLevel.WEEK, width: float = 0):
        self.zoom = ZoomLevel(zoom)
        self.width = max(0, width)
        self.scroll_left = 0.0

    @property
    def column_width(self) -> int:
        return column_width_for(self.width, self.zoom)

    @property
    def measured(self) -> bool:
        return self.width > 0

    def resize(self, width: float) -> bool:
        """
        Observe a new container width. Scroll position and zoom are kept.

        Returns True when the column width changed.
        """
        before = self.column_width
        self.width = max(0, width)
        return self.column_width != before

    def set_zoom(self, zoom: ZoomLevel) -> bool:
        """Switch zoom level. Returns True when it actually changed."""
        zoom = ZoomLevel(zoom)
        if zoom == self.zoom:
            return False
        self.zoom = zoom
        return True

    def _scroll_to(self, renderer: "Renderer", day: date, margin: int) -> bool:
        x = renderer.scroll_to_date(day)
        if x is None:
            logger.debug(f"No column for {day.isoformat()}, scroll skipped")
            return False
        self.scroll_left = max(0.0, x - margin)
        return True

    def scroll_to_today(self, renderer: "Renderer", today: date) -> bool:
        return self._scroll_to(renderer, today, TODAY_MARGIN)

    def scroll_to_first_item(
        self,
        renderer: "Renderer",
        bars: Sequence["BarDescriptor"],
    ) -> bool:
        if not bars:
            return False
        first = min(bars, key=lambda bar: bar.start)
        return self._scroll_to(renderer, first.start, FIRST_ITEM_MARGIN)
