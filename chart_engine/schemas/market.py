"""
CONTRACT 1: Candle Stream

Input: ordered Candle sequence from the data-fetch collaborator
Output: ValuePoint sequences pushed to the chart surface

Candles are delivered wholesale on every refresh (time-ascending,
unique timestamps). Indicator lines are sequences of ValuePoints.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Candle(BaseModel):
    """Single OHLCV sample for one time bucket."""

    model_config = ConfigDict(frozen=True)

    time: int = Field(..., description="Bucket open time, epoch seconds")
    open: float
    high: float
    low: float
    close: float
    volume: float = Field(default=0.0, ge=0)


class ValuePoint(BaseModel):
    """One point of an indicator line."""

    time: int
    value: float
    color: Optional[str] = Field(
        default=None, description="Per-point color (histogram bars only)"
    )


# Named line set of a (possibly multi-line) indicator
IndicatorLines = dict[str, list[ValuePoint]]
