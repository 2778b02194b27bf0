"""
Indicator Engine Service

CONTRACT:
    Input:  CalculationRequest (indicator type + OHLCV candles)
    Output: CalculationResponse (named ValuePoint lines)

RESPONSIBILITIES:
    - Calculate chart indicators (SMA, EMA, RSI, MACD, Bollinger Bands,
      ATR, Stochastic, Ichimoku)
    - Resolve default parameters per indicator type
    - Describe the series layout each indicator renders with

PURE PYTHON - No chart state.
Uses NumPy for calculations.
All math is deterministic and reproducible.
"""

from chart_engine.services.indicators.interface import IndicatorServiceInterface
from chart_engine.services.indicators.service import IndicatorService, get_indicator_service
from chart_engine.services.indicators.definitions import (
    IndicatorDefinition,
    LineSpec,
    GuideSpec,
    get_definition,
    resolve_parameters,
    run_calculation,
)

__all__ = [
    "IndicatorServiceInterface",
    "IndicatorService",
    "get_indicator_service",
    "IndicatorDefinition",
    "LineSpec",
    "GuideSpec",
    "get_definition",
    "resolve_parameters",
    "run_calculation",
]
