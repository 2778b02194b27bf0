"""
Shared pytest fixtures
======================

Provides candle histories, an in-memory recording chart surface and an
API test client.
"""

import math
from typing import Any, Optional, Sequence

import pytest
from fastapi.testclient import TestClient

from chart_engine.schemas.chart import SeriesStyle
from chart_engine.schemas.market import Candle, ValuePoint
from chart_engine.services.chart.surface import ChartSurface, SeriesHandle


# ============================================================================
# CANDLE BUILDERS
# ============================================================================

BASE_TIME = 1_700_000_000
STEP = 60


def make_candles(closes: Sequence[float], spread: float = 1.0) -> list[Candle]:
    """Candles one minute apart with high/low a fixed spread around close."""
    candles = []
    for i, close in enumerate(closes):
        candles.append(
            Candle(
                time=BASE_TIME + i * STEP,
                open=close,
                high=close + spread,
                low=close - spread,
                close=close,
                volume=1000,
            )
        )
    return candles


def wave(n: int, base: float = 100.0, amplitude: float = 5.0) -> list[float]:
    """Deterministic oscillating price path with a gentle drift."""
    return [base + amplitude * math.sin(i / 3.0) + i * 0.1 for i in range(n)]


@pytest.fixture
def candles() -> list[Candle]:
    """120 candles, enough for every default warm-up."""
    return make_candles(wave(120))


@pytest.fixture
def short_candles() -> list[Candle]:
    return make_candles([10, 11, 12, 11, 10])


# ============================================================================
# RECORDING CHART SURFACE
# ============================================================================


class RecordingSeries(SeriesHandle):
    """Series that remembers everything pushed to it."""

    def __init__(self, surface: "RecordingSurface", pane_index: int, style: SeriesStyle):
        self.surface = surface
        self.pane_index = pane_index
        self.style = style
        self.options: dict[str, Any] = {"visible": style.visible, "title": style.title}
        self.data: list[ValuePoint] = []
        self.set_data_calls = 0
        self.removed = False

    def set_data(self, points: Sequence[ValuePoint]) -> None:
        if self.removed:
            raise RuntimeError("set_data on removed series")
        self.data = list(points)
        self.set_data_calls += 1

    def apply_options(self, **options: Any) -> None:
        self.options.update(options)

    def remove(self) -> None:
        if self.removed:
            raise RuntimeError("series removed twice")
        self.removed = True
        self.surface.live.remove(self)

    @property
    def visible(self) -> bool:
        return self.options["visible"]


class RecordingSurface(ChartSurface):
    """In-memory chart: panes are counted, series are kept in creation order."""

    def __init__(self, panes: int = 1, fail_add_series_after: Optional[int] = None):
        self.panes = panes
        self.pane_heights: list[int] = []
        self.created: list[RecordingSeries] = []
        self.live: list[RecordingSeries] = []
        self.fail_add_series_after = fail_add_series_after

    def add_series(self, pane_index: int, style: SeriesStyle) -> SeriesHandle:
        if pane_index >= self.panes:
            raise IndexError(f"pane {pane_index} does not exist")
        if self.fail_add_series_after is not None and len(self.created) >= self.fail_add_series_after:
            raise RuntimeError("chart refused series")
        series = RecordingSeries(self, pane_index, style)
        self.created.append(series)
        self.live.append(series)
        return series

    def create_pane(self, height: int) -> None:
        self.panes += 1
        self.pane_heights.append(height)

    def pane_count(self) -> int:
        return self.panes

    def live_in_pane(self, pane_index: int) -> list[RecordingSeries]:
        return [s for s in self.live if s.pane_index == pane_index]


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


# ============================================================================
# API CLIENT
# ============================================================================


@pytest.fixture
def api_client() -> TestClient:
    from chart_engine.main import app

    with TestClient(app) as client:
        yield client
