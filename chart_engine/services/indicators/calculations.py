"""
Technical Indicator Calculations

Pure Python/NumPy implementations of the chart indicators.
No rendering, no state - all math is deterministic.

Array functions return arrays aligned to the candle index with NaN in
slots that are not defined (warm-up windows, shifted-out points).
The calculate_* functions convert those arrays into ValuePoint lines,
dropping undefined slots. Every function is total: short histories and
non-positive or non-finite periods give empty output, never an exception.
"""

import numpy as np
from typing import Sequence
from dataclasses import dataclass

from chart_engine.schemas.market import Candle, IndicatorLines, ValuePoint


@dataclass
class OHLCVData:
    """OHLCV data arrays for calculations."""

    times: np.ndarray
    opens: np.ndarray
    highs: np.ndarray
    lows: np.ndarray
    closes: np.ndarray
    volumes: np.ndarray


def to_arrays(candles: Sequence[Candle]) -> OHLCVData:
    """Convert a candle list to numpy arrays."""
    return OHLCVData(
        times=np.array([c.time for c in candles], dtype=np.int64),
        opens=np.array([c.open for c in candles], dtype=float),
        highs=np.array([c.high for c in candles], dtype=float),
        lows=np.array([c.low for c in candles], dtype=float),
        closes=np.array([c.close for c in candles], dtype=float),
        volumes=np.array([c.volume for c in candles], dtype=float),
    )


def to_points(times: np.ndarray, values: np.ndarray) -> list[ValuePoint]:
    """Pair each defined value with its candle time."""
    return [
        ValuePoint(time=int(t), value=float(v))
        for t, v in zip(times, values)
        if not np.isnan(v)
    ]


def _empty(n: int) -> np.ndarray:
    return np.full(n, np.nan)


def _first_valid(data: np.ndarray) -> int:
    """Index of the first defined value (len(data) if none)."""
    valid = np.flatnonzero(~np.isnan(data))
    return int(valid[0]) if len(valid) > 0 else len(data)


def _as_period(value: float) -> int:
    # Non-finite windows select nothing
    if not np.isfinite(value):
        return 0
    return int(value)


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def sma(data: np.ndarray, period: int) -> np.ndarray:
    """
    Simple Moving Average.

    Works on derived series with an undefined (NaN) head: the first
    window starts at the first defined value.
    """
    result = _empty(len(data))
    if period <= 0:
        return result

    start = _first_valid(data)
    for i in range(start + period - 1, len(data)):
        result[i] = np.mean(data[i - period + 1 : i + 1])
    return result


def ema(data: np.ndarray, period: int) -> np.ndarray:
    """Exponential Moving Average, seeded with the SMA of the first period."""
    result = _empty(len(data))
    if period <= 0:
        return result

    start = _first_valid(data)
    seed_index = start + period - 1
    if seed_index >= len(data):
        return result

    alpha = 2 / (period + 1)

    # Start with SMA
    result[seed_index] = np.mean(data[start : seed_index + 1])

    for i in range(seed_index + 1, len(data)):
        result[i] = alpha * data[i] + (1 - alpha) * result[i - 1]

    return result


# =============================================================================
# MOMENTUM INDICATORS
# =============================================================================


def rsi(closes: np.ndarray, period: int = 14) -> np.ndarray:
    """Relative Strength Index with Wilder smoothing."""
    if period <= 0 or len(closes) < period + 1:
        return _empty(len(closes))

    # Calculate price changes
    deltas = np.diff(closes)

    # Separate gains and losses
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    # First average
    avg_gain = np.mean(gains[:period])
    avg_loss = np.mean(losses[:period])

    result = _empty(len(closes))
    result[period] = _rsi_value(avg_gain, avg_loss)

    # Subsequent RSI values using smoothed averages
    for i in range(period, len(deltas)):
        avg_gain = ((period - 1) * avg_gain + gains[i]) / period
        avg_loss = ((period - 1) * avg_loss + losses[i]) / period
        result[i + 1] = _rsi_value(avg_gain, avg_loss)

    return result


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def macd(
    closes: np.ndarray,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    MACD (Moving Average Convergence Divergence).

    Returns: (macd_line, signal_line, histogram)
    """
    n = len(closes)
    if (
        min(fast_period, slow_period, signal_period) <= 0
        or n < max(fast_period, slow_period) + signal_period
    ):
        return _empty(n), _empty(n), _empty(n)

    fast_ema = ema(closes, fast_period)
    slow_ema = ema(closes, slow_period)

    # NaN wherever either EMA is still warming up
    macd_line = fast_ema - slow_ema

    # Signal line is EMA of MACD line
    signal_line = ema(macd_line, signal_period)

    histogram = macd_line - signal_line

    return macd_line, signal_line, histogram


def stochastic(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    k_period: int = 14,
    d_period: int = 3,
    smooth_k: int = 1,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Stochastic Oscillator.

    Returns: (k, d)
    """
    n = len(closes)
    if k_period <= 0 or n < k_period:
        return _empty(n), _empty(n)

    k = _empty(n)

    for i in range(k_period - 1, n):
        highest_high = np.max(highs[i - k_period + 1 : i + 1])
        lowest_low = np.min(lows[i - k_period + 1 : i + 1])

        if highest_high == lowest_low:
            # No range: treat as overbought rather than divide by zero
            k[i] = 100.0
        else:
            k[i] = ((closes[i] - lowest_low) / (highest_high - lowest_low)) * 100

    if smooth_k > 1:
        k = sma(k, smooth_k)

    d = sma(k, d_period)

    return k, d


# =============================================================================
# VOLATILITY INDICATORS
# =============================================================================


def true_range(highs: np.ndarray, lows: np.ndarray, closes: np.ndarray) -> np.ndarray:
    """True range per candle; undefined for the first candle."""
    tr = _empty(len(closes))

    for i in range(1, len(closes)):
        tr[i] = max(
            highs[i] - lows[i],
            abs(highs[i] - closes[i - 1]),
            abs(lows[i] - closes[i - 1]),
        )

    return tr


def atr(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = 14
) -> np.ndarray:
    """Average True Range (Wilder smoothing)."""
    n = len(closes)
    if period <= 0 or n < period + 1:
        return _empty(n)

    tr = true_range(highs, lows, closes)
    result = _empty(n)

    # Seed with the simple average of the first period true ranges
    result[period] = np.mean(tr[1 : period + 1])

    for i in range(period + 1, n):
        result[i] = ((period - 1) * result[i - 1] + tr[i]) / period

    return result


def bollinger_bands(
    closes: np.ndarray, period: int = 20, std_dev: float = 2.0
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Bollinger Bands.

    Returns: (upper, middle, lower)
    """
    middle = sma(closes, period)
    if period <= 0:
        return middle, middle, middle

    # Population standard deviation against the middle band
    std = _empty(len(closes))
    for i in range(period - 1, len(closes)):
        window = closes[i - period + 1 : i + 1]
        std[i] = np.sqrt(np.mean((window - middle[i]) ** 2))

    upper = middle + (std_dev * std)
    lower = middle - (std_dev * std)

    return upper, middle, lower


# =============================================================================
# TREND INDICATORS
# =============================================================================


def midpoint(highs: np.ndarray, lows: np.ndarray, period: int) -> np.ndarray:
    """(highest high + lowest low) / 2 over a full window."""
    result = _empty(len(highs))
    if period <= 0:
        return result

    for i in range(period - 1, len(highs)):
        result[i] = (
            np.max(highs[i - period + 1 : i + 1]) + np.min(lows[i - period + 1 : i + 1])
        ) / 2

    return result


def shift(values: np.ndarray, offset: int) -> np.ndarray:
    """
    Move values by offset candle slots (positive = forward in time).

    Values shifted past either end are dropped, never padded.
    """
    n = len(values)
    result = _empty(n)
    if abs(offset) >= n:
        return result

    if offset >= 0:
        result[offset:] = values[: n - offset]
    else:
        result[:offset] = values[-offset:]
    return result


def ichimoku(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    conversion_period: int = 9,
    base_period: int = 26,
    span_period: int = 52,
    displacement: int = 26,
) -> dict[str, np.ndarray]:
    """
    Ichimoku Cloud.

    Returns: tenkan, kijun, senkou_a, senkou_b, chikou (index aligned,
    senkou spans already displaced forward, chikou backward)
    """
    tenkan = midpoint(highs, lows, conversion_period)
    kijun = midpoint(highs, lows, base_period)

    senkou_a = shift((tenkan + kijun) / 2, displacement)
    senkou_b = shift(midpoint(highs, lows, span_period), displacement)
    chikou = shift(closes, -displacement)

    return {
        "tenkan": tenkan,
        "kijun": kijun,
        "senkou_a": senkou_a,
        "senkou_b": senkou_b,
        "chikou": chikou,
    }


# =============================================================================
# CANDLE-LEVEL CALCULATORS
# =============================================================================


def calculate_sma(candles: Sequence[Candle], period: float = 20) -> list[ValuePoint]:
    data = to_arrays(candles)
    return to_points(data.times, sma(data.closes, _as_period(period)))


def calculate_ema(candles: Sequence[Candle], period: float = 20) -> list[ValuePoint]:
    data = to_arrays(candles)
    return to_points(data.times, ema(data.closes, _as_period(period)))


def calculate_rsi(candles: Sequence[Candle], period: float = 14) -> list[ValuePoint]:
    data = to_arrays(candles)
    return to_points(data.times, rsi(data.closes, _as_period(period)))


def calculate_macd(
    candles: Sequence[Candle],
    fast_period: float = 12,
    slow_period: float = 26,
    signal_period: float = 9,
) -> IndicatorLines:
    data = to_arrays(candles)
    macd_line, signal_line, histogram = macd(
        data.closes,
        _as_period(fast_period),
        _as_period(slow_period),
        _as_period(signal_period),
    )
    return {
        "macd_line": to_points(data.times, macd_line),
        "signal_line": to_points(data.times, signal_line),
        "histogram": to_points(data.times, histogram),
    }


def calculate_bollinger_bands(
    candles: Sequence[Candle], period: float = 20, std_dev: float = 2.0
) -> IndicatorLines:
    data = to_arrays(candles)
    upper, middle, lower = bollinger_bands(data.closes, _as_period(period), std_dev)
    return {
        "upper": to_points(data.times, upper),
        "middle": to_points(data.times, middle),
        "lower": to_points(data.times, lower),
    }


def calculate_atr(candles: Sequence[Candle], period: float = 14) -> list[ValuePoint]:
    data = to_arrays(candles)
    return to_points(data.times, atr(data.highs, data.lows, data.closes, _as_period(period)))


def calculate_stochastic(
    candles: Sequence[Candle],
    k_period: float = 14,
    d_period: float = 3,
    smooth_k: float = 1,
) -> IndicatorLines:
    data = to_arrays(candles)
    k, d = stochastic(
        data.highs,
        data.lows,
        data.closes,
        _as_period(k_period),
        _as_period(d_period),
        _as_period(smooth_k),
    )
    return {"k": to_points(data.times, k), "d": to_points(data.times, d)}


def calculate_ichimoku(
    candles: Sequence[Candle],
    conversion_period: float = 9,
    base_period: float = 26,
    span_period: float = 52,
    displacement: float = 26,
) -> IndicatorLines:
    data = to_arrays(candles)
    lines = ichimoku(
        data.highs,
        data.lows,
        data.closes,
        _as_period(conversion_period),
        _as_period(base_period),
        _as_period(span_period),
        _as_period(displacement),
    )
    return {name: to_points(data.times, values) for name, values in lines.items()}
