"""
Chart Synchronization Service

CONTRACT:
    Input:  Candle sequences + UI indicator commands
    Output: series data and panes on a ChartSurface

RESPONSIBILITIES:
    - Indicator instance lifecycle (series creation, updates, teardown)
    - Pane allocation (overlays on pane 0, one pane per oscillator)
    - Registry of the active indicators of one chart session
    - Oscillator policy, batch loading and the chart refresh signal
"""

from chart_engine.services.chart.surface import ChartSurface, SeriesHandle
from chart_engine.services.chart.panes import PaneAllocator, MAIN_PANE, FIRST_SECONDARY_PANE
from chart_engine.services.chart.instance import IndicatorInstance, InstanceState, join_lines
from chart_engine.services.chart.registry import IndicatorRegistry
from chart_engine.services.chart.controls import IndicatorControls
from chart_engine.services.chart.session import ChartSession

__all__ = [
    "ChartSurface",
    "SeriesHandle",
    "PaneAllocator",
    "MAIN_PANE",
    "FIRST_SECONDARY_PANE",
    "IndicatorInstance",
    "InstanceState",
    "join_lines",
    "IndicatorRegistry",
    "IndicatorControls",
    "ChartSession",
]
