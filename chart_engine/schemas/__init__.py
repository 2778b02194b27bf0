"""
Chart Engine Schema Contracts

This module defines all JSON contracts between system components.
These are the authoritative interfaces - all modules must conform to these schemas.
"""

from chart_engine.schemas.market import (
    Candle,
    ValuePoint,
    IndicatorLines,
)
from chart_engine.schemas.indicators import (
    IndicatorType,
    IndicatorCategory,
    IndicatorConfig,
    IndicatorAddRequest,
    CalculationRequest,
    CalculationResponse,
    CatalogEntry,
)
from chart_engine.schemas.chart import (
    SeriesKind,
    LineStyle,
    SeriesStyle,
    ChartRefreshEvent,
)

__all__ = [
    # Market
    "Candle",
    "ValuePoint",
    "IndicatorLines",
    # Indicators
    "IndicatorType",
    "IndicatorCategory",
    "IndicatorConfig",
    "IndicatorAddRequest",
    "CalculationRequest",
    "CalculationResponse",
    "CatalogEntry",
    # Chart
    "SeriesKind",
    "LineStyle",
    "SeriesStyle",
    "ChartRefreshEvent",
]
