"""
CONTRACT 3: Chart Surface

Input: SeriesStyle + pane index (from Indicator Instances / Pane Allocator)
Output: series handles and panes owned by the rendering library

These are the only shapes that cross the rendering boundary.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class SeriesKind(str, Enum):
    LINE = "line"
    HISTOGRAM = "histogram"


class LineStyle(int, Enum):
    SOLID = 0
    DOTTED = 1
    DASHED = 2


class SeriesStyle(BaseModel):
    """Options used when a series is added to a pane."""

    kind: SeriesKind = SeriesKind.LINE
    color: str
    title: str = ""
    line_width: int = Field(default=2, ge=1, le=4)
    line_style: LineStyle = LineStyle.SOLID
    price_scale_id: Optional[str] = None
    visible: bool = True


class ChartRefreshEvent(BaseModel):
    """
    Emitted once after a batch of indicators has been loaded.
    Consumed by: the chart-refresh trigger outside this core
    """

    pair: str
    timeframe: str
    indicator_ids: list[str] = Field(default_factory=list)
