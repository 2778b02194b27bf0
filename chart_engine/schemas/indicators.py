"""
CONTRACT 2: Indicator Catalog

Input: IndicatorType + optional parameter overrides
Output: IndicatorConfig

Defines the closed set of supported indicators, their fixed
overlay/oscillator classification and their default parameters.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from chart_engine.schemas.market import Candle, IndicatorLines


# =============================================================================
# ENUMS
# =============================================================================


class IndicatorType(str, Enum):
    SMA = "SMA"
    EMA = "EMA"
    RSI = "RSI"
    MACD = "MACD"
    BOLLINGER_BANDS = "BollingerBands"
    ATR = "ATR"
    STOCHASTIC = "Stochastic"
    ICHIMOKU = "Ichimoku"


class IndicatorCategory(str, Enum):
    OVERLAY = "overlay"  # drawn on the price pane
    OSCILLATOR = "oscillator"  # drawn in its own pane


OVERLAY_INDICATORS = frozenset(
    {
        IndicatorType.SMA,
        IndicatorType.EMA,
        IndicatorType.BOLLINGER_BANDS,
        IndicatorType.ICHIMOKU,
    }
)
OSCILLATOR_INDICATORS = frozenset(
    {
        IndicatorType.RSI,
        IndicatorType.MACD,
        IndicatorType.ATR,
        IndicatorType.STOCHASTIC,
    }
)


def category_of(indicator_type: IndicatorType) -> IndicatorCategory:
    """Fixed classification, not configurable per instance."""
    if indicator_type in OVERLAY_INDICATORS:
        return IndicatorCategory.OVERLAY
    return IndicatorCategory.OSCILLATOR


def is_oscillator(indicator_type: IndicatorType) -> bool:
    return indicator_type in OSCILLATOR_INDICATORS


# =============================================================================
# DEFAULTS
# =============================================================================


DEFAULT_PARAMETERS: dict[IndicatorType, dict[str, float]] = {
    IndicatorType.SMA: {"period": 20},
    IndicatorType.EMA: {"period": 20},
    IndicatorType.RSI: {"period": 14, "overbought": 70, "oversold": 30},
    IndicatorType.MACD: {"fast_period": 12, "slow_period": 26, "signal_period": 9},
    IndicatorType.BOLLINGER_BANDS: {"period": 20, "std_dev": 2},
    IndicatorType.ATR: {"period": 14},
    IndicatorType.STOCHASTIC: {
        "k_period": 14,
        "d_period": 3,
        "smooth_k": 1,
        "overbought": 80,
        "oversold": 20,
    },
    IndicatorType.ICHIMOKU: {
        "conversion_period": 9,
        "base_period": 26,
        "span_period": 52,
        "displacement": 26,
    },
}

DEFAULT_COLORS: dict[IndicatorType, str] = {
    IndicatorType.SMA: "#2196F3",
    IndicatorType.EMA: "#FF9800",
    IndicatorType.RSI: "#9C27B0",
    IndicatorType.MACD: "#4CAF50",
    IndicatorType.BOLLINGER_BANDS: "#2196F3",
    IndicatorType.ATR: "#F44336",
    IndicatorType.STOCHASTIC: "#2962FF",
    IndicatorType.ICHIMOKU: "#2962FF",
}


def _fmt(value: float) -> str:
    return f"{value:g}"


def default_name(indicator_type: IndicatorType, parameters: dict[str, float]) -> str:
    """Display name in the dashboard's format, e.g. 'MACD (12, 26, 9)'."""
    p = parameters
    if indicator_type == IndicatorType.MACD:
        args = [p["fast_period"], p["slow_period"], p["signal_period"]]
    elif indicator_type == IndicatorType.BOLLINGER_BANDS:
        return f"BB ({_fmt(p['period'])}, {_fmt(p['std_dev'])})"
    elif indicator_type == IndicatorType.STOCHASTIC:
        args = [p["k_period"], p["d_period"]]
    elif indicator_type == IndicatorType.ICHIMOKU:
        args = [p["conversion_period"], p["base_period"], p["span_period"]]
    else:
        args = [p["period"]]
    return f"{indicator_type.value} ({', '.join(_fmt(a) for a in args)})"


# =============================================================================
# CONFIG
# =============================================================================


class IndicatorConfig(BaseModel):
    """
    Configuration of one indicator instance.
    Created by: Indicator Registry
    Mutated by: parameter edits, visibility toggles
    """

    id: str = Field(..., description="Generated at creation, never reused")
    type: IndicatorType
    name: str
    color: str
    visible: bool = True
    parameters: dict[str, float] = Field(default_factory=dict)


# =============================================================================
# API: Calculation request / response
# =============================================================================


class CalculationRequest(BaseModel):
    """
    Stateless indicator calculation request.
    Sent by: frontend / strategy tooling
    Received by: Indicator Service
    """

    type: IndicatorType
    candles: list[Candle] = Field(..., max_length=5000)
    parameters: Optional[dict[str, float]] = Field(
        default=None, description="Overrides; omitted keys use defaults"
    )


class CalculationResponse(BaseModel):
    """Computed indicator lines for one request."""

    type: IndicatorType
    category: IndicatorCategory
    parameters: dict[str, float]
    lines: IndicatorLines


class CatalogEntry(BaseModel):
    """Describes one indicator kind for the selection dialog."""

    type: IndicatorType
    category: IndicatorCategory
    default_parameters: dict[str, float]
    default_color: str
    lines: list[str]


class IndicatorAddRequest(BaseModel):
    """
    One entry of a batch load (e.g. a saved strategy's indicator set).
    Sent by: strategy restore / dashboard
    Received by: IndicatorControls.load_batch
    """

    type: IndicatorType
    parameters: Optional[dict[str, float]] = None
    name: Optional[str] = None
    color: Optional[str] = None
