"""
Chart Surface Boundary

The rendering library owns panes and series primitives. This core only
talks to it through these two interfaces; adapters for a concrete
charting library implement them.
"""

from abc import ABC, abstractmethod
from typing import Any, Sequence

from chart_engine.schemas.chart import SeriesStyle
from chart_engine.schemas.market import ValuePoint


class SeriesHandle(ABC):
    """One rendered series on one pane."""

    @abstractmethod
    def set_data(self, points: Sequence[ValuePoint]) -> None:
        """Replace the series' points."""
        pass

    @abstractmethod
    def apply_options(self, **options: Any) -> None:
        """Update style options in place (visible, title, color...)."""
        pass

    @abstractmethod
    def remove(self) -> None:
        """Detach the series from its pane."""
        pass


class ChartSurface(ABC):
    """Pane and series factory exposed by the rendering library."""

    @abstractmethod
    def add_series(self, pane_index: int, style: SeriesStyle) -> SeriesHandle:
        pass

    @abstractmethod
    def create_pane(self, height: int) -> None:
        """Append one pane below the existing ones."""
        pass

    @abstractmethod
    def pane_count(self) -> int:
        pass
