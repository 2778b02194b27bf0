"""
Indicator Instance

Binds one indicator configuration to the series it renders on a chart
surface.

Lifecycle:
    CREATED -> BOUND -> {VISIBLE <-> HIDDEN} -> DESTROYED

Out-of-order calls (create_series before initialize, update_data before
any series exist, anything after destroy) are logged and ignored.
"""

import logging
from enum import Enum
from typing import Optional, Sequence

from chart_engine.core.config import settings
from chart_engine.schemas.chart import LineStyle, SeriesKind, SeriesStyle
from chart_engine.schemas.indicators import (
    IndicatorConfig,
    IndicatorType,
    is_oscillator,
)
from chart_engine.schemas.market import Candle, IndicatorLines, ValuePoint
from chart_engine.services.chart.panes import FIRST_SECONDARY_PANE, MAIN_PANE, PaneAllocator
from chart_engine.services.chart.surface import ChartSurface, SeriesHandle
from chart_engine.services.indicators.definitions import (
    IndicatorDefinition,
    get_definition,
    resolve_parameters,
    run_calculation,
)

logger = logging.getLogger(__name__)


class InstanceState(str, Enum):
    CREATED = "created"
    BOUND = "bound"
    VISIBLE = "visible"
    HIDDEN = "hidden"
    DESTROYED = "destroyed"


def join_lines(
    lines: IndicatorLines, join_groups: Sequence[Sequence[str]]
) -> IndicatorLines:
    """Keep only the timestamps every line of a group has in common."""
    joined = dict(lines)

    for group in join_groups:
        present = [key for key in group if key in joined]
        if not present:
            continue

        common = set.intersection(*({p.time for p in joined[key]} for key in present))
        for key in present:
            joined[key] = [p for p in joined[key] if p.time in common]

    return joined


class IndicatorInstance:
    """
    One indicator on one chart.

    Owns every series it creates; the Registry owns the instance.
    """

    def __init__(self, config: IndicatorConfig, allocator: Optional[PaneAllocator] = None):
        self._config = self._normalized(config, config.id)
        self._definition: IndicatorDefinition = get_definition(config.type)
        self._allocator = allocator
        self._surface: Optional[ChartSurface] = None
        self._state = InstanceState.CREATED
        self._pane_index: Optional[int] = None
        self._series: dict[str, SeriesHandle] = {}
        self._guides: dict[str, SeriesHandle] = {}
        self._last_output: IndicatorLines = {}

    def __repr__(self) -> str:
        return f"<IndicatorInstance {self.name} id={self.id} state={self._state.value}>"

    # ============ Accessors ============

    @property
    def id(self) -> str:
        return self._config.id

    @property
    def type(self) -> IndicatorType:
        return self._config.type

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> IndicatorConfig:
        return self._config

    @property
    def definition(self) -> IndicatorDefinition:
        return self._definition

    @property
    def state(self) -> InstanceState:
        return self._state

    @property
    def is_visible(self) -> bool:
        return self._config.visible

    @property
    def is_destroyed(self) -> bool:
        return self._state == InstanceState.DESTROYED

    @property
    def series_active(self) -> bool:
        return self._state in (InstanceState.VISIBLE, InstanceState.HIDDEN)

    @property
    def pane_index(self) -> Optional[int]:
        return self._pane_index

    @property
    def series(self) -> dict[str, SeriesHandle]:
        """Line series by line key (guide lines excluded)."""
        return dict(self._series)

    @property
    def series_count(self) -> int:
        return len(self._series) + len(self._guides)

    @property
    def last_output(self) -> IndicatorLines:
        """Lines pushed by the most recent update_data."""
        return self._last_output

    # ============ Lifecycle ============

    def initialize(
        self, surface: ChartSurface, config: Optional[IndicatorConfig] = None
    ) -> None:
        """Bind to a chart surface. Only the first bind takes effect."""
        if self.is_destroyed:
            logger.warning(f"initialize() on destroyed indicator {self.id}")
            return

        if self._surface is not None:
            logger.warning(f"Indicator {self.id} is already bound to a chart")
            return

        if config is not None:
            if config.type != self.type:
                logger.warning(
                    f"Ignoring config of type {config.type.value} for {self.type.value} indicator {self.id}"
                )
            else:
                self._config = self._normalized(config, self.id)

        self._surface = surface
        self._state = InstanceState.BOUND

    def create_series(self, pane_index: int) -> Optional[SeriesHandle]:
        """
        Create one series per output line on the given pane.

        Returns:
            The primary series, or None when the chart cannot take series
        """
        if self.is_destroyed:
            logger.warning(f"create_series() on destroyed indicator {self.id}")
            return None

        if self._surface is None:
            logger.warning(f"create_series() before initialize() for indicator {self.id}")
            return None

        if self.series_active:
            logger.warning(f"Series already created for indicator {self.id}")
            return self._primary_series()

        series: dict[str, SeriesHandle] = {}
        guides: dict[str, SeriesHandle] = {}
        try:
            for spec in self._definition.lines:
                series[spec.key] = self._surface.add_series(
                    pane_index,
                    SeriesStyle(
                        kind=spec.kind,
                        color=spec.color or self._config.color,
                        title=self._title(spec.title),
                        line_width=spec.line_width,
                        line_style=spec.line_style,
                        price_scale_id=self._price_scale_id(pane_index),
                        visible=self._config.visible,
                    ),
                )
            for guide in self._definition.guides:
                guides[guide.key] = self._surface.add_series(
                    pane_index,
                    SeriesStyle(
                        color=settings.guide_line_color,
                        title=self._title(guide.title),
                        line_width=1,
                        line_style=LineStyle.DASHED,
                        price_scale_id=self._price_scale_id(pane_index),
                        visible=self._config.visible,
                    ),
                )
        except Exception as e:
            logger.error(f"Error creating series for {self.type.value} indicator {self.id}: {e}")
            for handle in list(series.values()) + list(guides.values()):
                self._remove_handle(handle)
            return None

        self._series = series
        self._guides = guides
        self._pane_index = pane_index
        self._state = InstanceState.VISIBLE if self._config.visible else InstanceState.HIDDEN

        logger.debug(
            f"Created {len(series) + len(guides)} series for {self.name} ({self.id}) in pane {pane_index}"
        )
        return self._primary_series()

    def update_data(self, candles: Sequence[Candle]) -> None:
        """Recompute from the full history and push every line."""
        if not self.series_active:
            logger.warning(
                f"update_data() ignored for indicator {self.id} in state {self._state.value}"
            )
            return

        lines = run_calculation(self.type, candles, self._config.parameters)
        lines = join_lines(lines, self._definition.join_groups)

        for key, handle in self._series.items():
            points = lines.get(key, [])
            if self._is_histogram(key):
                points = [
                    ValuePoint(
                        time=p.time,
                        value=p.value,
                        color=settings.histogram_positive_color
                        if p.value >= 0
                        else settings.histogram_negative_color,
                    )
                    for p in points
                ]
                lines[key] = points
            handle.set_data(points)

        if self._guides:
            times = sorted({p.time for points in lines.values() for p in points})
            for guide in self._definition.guides:
                level = guide.resolve(self._config.parameters)
                self._guides[guide.key].set_data(
                    [ValuePoint(time=t, value=level) for t in times]
                )

        self._last_output = lines

    def set_visibility(self, visible: bool) -> None:
        """Show or hide every owned series without recreating them."""
        if self.is_destroyed:
            logger.warning(f"set_visibility() on destroyed indicator {self.id}")
            return

        self._config.visible = visible
        for handle in self._all_handles():
            handle.apply_options(visible=visible)

        if self.series_active:
            self._state = InstanceState.VISIBLE if visible else InstanceState.HIDDEN

    def set_parameters(self, parameters: dict) -> None:
        """Merge parameter overrides; series titles follow the new values."""
        if self.is_destroyed:
            logger.warning(f"set_parameters() on destroyed indicator {self.id}")
            return

        merged = {**self._config.parameters, **parameters}
        self._config.parameters = resolve_parameters(self.type, merged)

        for spec in self._definition.lines:
            if spec.key in self._series:
                self._series[spec.key].apply_options(title=self._title(spec.title))
        for guide in self._definition.guides:
            if guide.key in self._guides:
                self._guides[guide.key].apply_options(title=self._title(guide.title))

    def destroy(self) -> None:
        """Remove every owned series. Safe to call more than once."""
        if self.is_destroyed:
            return

        for handle in self._all_handles():
            self._remove_handle(handle)

        self._series = {}
        self._guides = {}
        self._surface = None
        self._last_output = {}
        self._state = InstanceState.DESTROYED
        logger.debug(f"Destroyed indicator {self.name} ({self.id})")

    def get_preferred_pane_index(self) -> int:
        """0 for overlays; oscillators ask the pane allocator."""
        if not is_oscillator(self.type):
            return MAIN_PANE

        if self._allocator is None:
            return FIRST_SECONDARY_PANE

        assigned = self._allocator.pane_of(self.id)
        if assigned is not None:
            return assigned
        return self._allocator.next_secondary_pane()

    # ============ Helpers ============

    @staticmethod
    def _normalized(config: IndicatorConfig, indicator_id: str) -> IndicatorConfig:
        """Copy of config with every parameter filled in and validated."""
        return config.model_copy(
            update={
                "id": indicator_id,
                "parameters": resolve_parameters(config.type, config.parameters),
            }
        )

    def _primary_series(self) -> Optional[SeriesHandle]:
        first = self._definition.lines[0].key
        return self._series.get(first)

    def _all_handles(self) -> list[SeriesHandle]:
        return list(self._series.values()) + list(self._guides.values())

    def _is_histogram(self, key: str) -> bool:
        return any(
            spec.key == key and spec.kind == SeriesKind.HISTOGRAM
            for spec in self._definition.lines
        )

    def _title(self, template: str) -> str:
        return template.format(**self._config.parameters)

    def _price_scale_id(self, pane_index: int) -> str:
        # Overlays on the price pane share the candle scale
        if pane_index == MAIN_PANE:
            return settings.main_price_scale_id
        return f"{self.type.value.lower()}-{self.id}"

    def _remove_handle(self, handle: SeriesHandle) -> None:
        try:
            handle.remove()
        except Exception as e:
            logger.error(f"Error removing series of indicator {self.id}: {e}")
