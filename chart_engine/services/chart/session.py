"""
Chart Session

One mounted chart: its pane allocator, indicator registry and controls.
Created when a chart is mounted, closed when it goes away.
"""

import logging
from typing import Optional, Sequence

from chart_engine.core.config import Settings, get_settings
from chart_engine.schemas.market import Candle
from chart_engine.services.chart.controls import IndicatorControls
from chart_engine.services.chart.panes import PaneAllocator
from chart_engine.services.chart.registry import IndicatorRegistry
from chart_engine.services.chart.surface import ChartSurface

logger = logging.getLogger(__name__)


class ChartSession:
    """
    Usage:
        with ChartSession(surface) as session:
            session.controls.add_indicator(IndicatorType.RSI)
            session.update_candles(candles)
    """

    def __init__(
        self,
        surface: Optional[ChartSurface] = None,
        settings: Optional[Settings] = None,
    ):
        self._settings = settings or get_settings()
        self.allocator = PaneAllocator(
            main_pane_height=self._settings.main_pane_height,
            secondary_pane_height=self._settings.secondary_pane_height,
        )
        self.registry = IndicatorRegistry(allocator=self.allocator)
        self.controls = IndicatorControls(
            self.registry, max_oscillators=self._settings.max_oscillators
        )
        self._closed = False

        if surface is not None:
            self.mount(surface)

    @property
    def closed(self) -> bool:
        return self._closed

    def mount(self, surface: ChartSurface) -> None:
        """Attach (or re-attach) the chart surface."""
        if self._closed:
            logger.warning("mount() on a closed chart session")
            return
        self.registry.bind_surface(surface)

    def unmount(self) -> None:
        self.registry.unbind_surface()

    def update_candles(self, candles: Sequence[Candle]) -> None:
        if self._closed:
            logger.warning("update_candles() on a closed chart session")
            return
        self.registry.update_data(candles)

    def close(self) -> None:
        if self._closed:
            return
        self.registry.close()
        self._closed = True
        logger.info("Chart session closed")

    def __enter__(self) -> "ChartSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
