"""
Indicator Definitions

Maps every IndicatorType to its calculator and series layout.
The table is exhaustive over the enum; adding a type without a
definition fails at import time.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from chart_engine.schemas.chart import LineStyle, SeriesKind
from chart_engine.schemas.indicators import (
    DEFAULT_COLORS,
    DEFAULT_PARAMETERS,
    IndicatorCategory,
    IndicatorType,
    category_of,
)
from chart_engine.schemas.market import Candle, IndicatorLines
from chart_engine.services.base import ValidationError
from chart_engine.services.indicators.calculations import (
    calculate_atr,
    calculate_bollinger_bands,
    calculate_ema,
    calculate_ichimoku,
    calculate_macd,
    calculate_rsi,
    calculate_sma,
    calculate_stochastic,
)

logger = logging.getLogger(__name__)

Calculator = Callable[[Sequence[Candle], dict[str, float]], IndicatorLines]


@dataclass(frozen=True)
class LineSpec:
    """One output line and the series that renders it."""

    key: str
    title: str  # str.format template over the parameters
    kind: SeriesKind = SeriesKind.LINE
    color: Optional[str] = None  # None: use the indicator's color
    line_width: int = 2
    line_style: LineStyle = LineStyle.SOLID


@dataclass(frozen=True)
class GuideSpec:
    """Constant reference level drawn across the computed range."""

    key: str
    title: str
    level_param: Optional[str] = None
    level: float = 0.0

    def resolve(self, parameters: dict[str, float]) -> float:
        if self.level_param is not None:
            return parameters[self.level_param]
        return self.level


@dataclass(frozen=True)
class IndicatorDefinition:
    type: IndicatorType
    calculate: Calculator
    lines: tuple[LineSpec, ...]
    # Lines in one group are only pushed at their shared timestamps
    join_groups: tuple[tuple[str, ...], ...] = ()
    guides: tuple[GuideSpec, ...] = field(default_factory=tuple)

    @property
    def category(self) -> IndicatorCategory:
        return category_of(self.type)

    @property
    def line_keys(self) -> list[str]:
        return [spec.key for spec in self.lines]


_OVERBOUGHT = GuideSpec("overbought", "Overbought ({overbought:g})", "overbought")
_OVERSOLD = GuideSpec("oversold", "Oversold ({oversold:g})", "oversold")


DEFINITIONS: dict[IndicatorType, IndicatorDefinition] = {
    IndicatorType.SMA: IndicatorDefinition(
        type=IndicatorType.SMA,
        calculate=lambda candles, p: {"sma": calculate_sma(candles, p["period"])},
        lines=(LineSpec("sma", "SMA ({period:g})"),),
    ),
    IndicatorType.EMA: IndicatorDefinition(
        type=IndicatorType.EMA,
        calculate=lambda candles, p: {"ema": calculate_ema(candles, p["period"])},
        lines=(LineSpec("ema", "EMA ({period:g})"),),
    ),
    IndicatorType.RSI: IndicatorDefinition(
        type=IndicatorType.RSI,
        calculate=lambda candles, p: {"rsi": calculate_rsi(candles, p["period"])},
        lines=(LineSpec("rsi", "RSI ({period:g})"),),
        guides=(
            _OVERBOUGHT,
            _OVERSOLD,
            GuideSpec("middle", "Middle (50)", level=50.0),
        ),
    ),
    IndicatorType.MACD: IndicatorDefinition(
        type=IndicatorType.MACD,
        calculate=lambda candles, p: calculate_macd(
            candles, p["fast_period"], p["slow_period"], p["signal_period"]
        ),
        lines=(
            # Histogram first so it renders behind the lines
            LineSpec("histogram", "MACD Histogram", kind=SeriesKind.HISTOGRAM),
            LineSpec(
                "macd_line",
                "MACD ({fast_period:g},{slow_period:g},{signal_period:g})",
                color="#2962FF",
                line_width=3,
            ),
            LineSpec("signal_line", "Signal", color="#FF6D00"),
        ),
        join_groups=(("histogram", "macd_line", "signal_line"),),
    ),
    IndicatorType.BOLLINGER_BANDS: IndicatorDefinition(
        type=IndicatorType.BOLLINGER_BANDS,
        calculate=lambda candles, p: calculate_bollinger_bands(
            candles, p["period"], p["std_dev"]
        ),
        lines=(
            LineSpec("middle", "BB Middle ({period:g})"),
            LineSpec("upper", "BB Upper ({std_dev:g}σ)", color="#FF6D00", line_width=1),
            LineSpec("lower", "BB Lower ({std_dev:g}σ)", color="#2962FF", line_width=1),
        ),
        join_groups=(("middle", "upper", "lower"),),
    ),
    IndicatorType.ATR: IndicatorDefinition(
        type=IndicatorType.ATR,
        calculate=lambda candles, p: {"atr": calculate_atr(candles, p["period"])},
        lines=(LineSpec("atr", "ATR ({period:g})"),),
    ),
    IndicatorType.STOCHASTIC: IndicatorDefinition(
        type=IndicatorType.STOCHASTIC,
        calculate=lambda candles, p: calculate_stochastic(
            candles, p["k_period"], p["d_period"], p["smooth_k"]
        ),
        lines=(
            LineSpec("k", "%K ({k_period:g})"),
            LineSpec("d", "%D ({d_period:g})", color="#FF6D00"),
        ),
        join_groups=(("k", "d"),),
        guides=(_OVERBOUGHT, _OVERSOLD),
    ),
    IndicatorType.ICHIMOKU: IndicatorDefinition(
        type=IndicatorType.ICHIMOKU,
        calculate=lambda candles, p: calculate_ichimoku(
            candles,
            p["conversion_period"],
            p["base_period"],
            p["span_period"],
            p["displacement"],
        ),
        lines=(
            LineSpec("tenkan", "Tenkan ({conversion_period:g})", color="#2962FF"),
            LineSpec("kijun", "Kijun ({base_period:g})", color="#FF6D00"),
            LineSpec(
                "senkou_a", "Senkou A", color="#26A69A", line_width=1,
                line_style=LineStyle.DASHED,
            ),
            LineSpec(
                "senkou_b", "Senkou B ({span_period:g})", color="#EF5350", line_width=1,
                line_style=LineStyle.DASHED,
            ),
            LineSpec("chikou", "Chikou", color="#9C27B0", line_width=1),
        ),
        # chikou is displaced the other way and stands alone
        join_groups=(("tenkan", "kijun"), ("senkou_a", "senkou_b")),
    ),
}

_missing = set(IndicatorType) - set(DEFINITIONS)
if _missing:
    raise RuntimeError(f"No indicator definition for: {sorted(t.value for t in _missing)}")


def get_definition(indicator_type: IndicatorType) -> IndicatorDefinition:
    """Factory lookup: variant -> calculator + series layout."""
    return DEFINITIONS[IndicatorType(indicator_type)]


# Parameters counted in candles; everything else is a level or multiplier
WINDOW_PARAMETERS = frozenset(
    {
        "period",
        "fast_period",
        "slow_period",
        "signal_period",
        "k_period",
        "d_period",
        "smooth_k",
        "conversion_period",
        "base_period",
        "span_period",
        "displacement",
    }
)


def _invalid(indicator_type: IndicatorType, key: str, value, reason: str) -> ValidationError:
    return ValidationError(
        "IndicatorDefinitions",
        f"Parameter '{key}' {reason}",
        {"type": indicator_type.value, "value": value},
    )


def resolve_parameters(
    indicator_type: IndicatorType, overrides: Optional[dict] = None
) -> dict[str, float]:
    """
    Merge overrides onto the type's defaults.

    Unknown keys are dropped. Values must be finite numbers, and window
    parameters (candle counts) must be whole numbers; anything else
    raises ValidationError.
    """
    indicator_type = IndicatorType(indicator_type)
    parameters = dict(DEFAULT_PARAMETERS[indicator_type])

    for key, value in (overrides or {}).items():
        if key not in parameters:
            logger.debug(f"Ignoring unknown {indicator_type.value} parameter '{key}'")
            continue
        if isinstance(value, bool):
            raise _invalid(indicator_type, key, value, "must be numeric")
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise _invalid(indicator_type, key, value, "must be numeric")

        if not math.isfinite(number):
            raise _invalid(indicator_type, key, value, "must be finite")
        if key in WINDOW_PARAMETERS and not number.is_integer():
            raise _invalid(indicator_type, key, value, "must be a whole number of candles")

        parameters[key] = number

    return parameters


def default_color(indicator_type: IndicatorType) -> str:
    return DEFAULT_COLORS[IndicatorType(indicator_type)]


def run_calculation(
    indicator_type: IndicatorType,
    candles: Sequence[Candle],
    parameters: dict[str, float],
) -> IndicatorLines:
    """Compute every line of an indicator; keys follow the definition."""
    definition = get_definition(indicator_type)
    lines = definition.calculate(candles, parameters)
    return {key: lines.get(key, []) for key in definition.line_keys}
