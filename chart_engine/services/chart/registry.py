"""
Indicator Registry

Collection of the active indicator instances of one chart session and
the single integration point between UI commands, the candle stream and
the chart surface.

Owned by a ChartSession (one per mounted chart), never global.
"""

import logging
import uuid
from typing import Iterator, Optional, Sequence

from chart_engine.schemas.indicators import (
    IndicatorConfig,
    IndicatorType,
    default_name,
    is_oscillator,
)
from chart_engine.schemas.market import Candle
from chart_engine.services.base import IndicatorNotFoundError
from chart_engine.services.chart.instance import IndicatorInstance
from chart_engine.services.chart.panes import PaneAllocator
from chart_engine.services.chart.surface import ChartSurface
from chart_engine.services.indicators.definitions import default_color, resolve_parameters

logger = logging.getLogger(__name__)


class IndicatorRegistry:
    """
    Insertion-ordered id -> IndicatorInstance map plus the bound surface.

    Usage:
        registry = IndicatorRegistry()
        registry.bind_surface(surface)
        rsi_id = registry.create_and_add_indicator(IndicatorType.RSI)
        registry.update_data(candles)  # on every candle refresh
    """

    def __init__(
        self,
        surface: Optional[ChartSurface] = None,
        allocator: Optional[PaneAllocator] = None,
    ):
        self._indicators: dict[str, IndicatorInstance] = {}
        self._allocator = allocator or PaneAllocator()
        self._surface: Optional[ChartSurface] = None
        self._candles: list[Candle] = []

        if surface is not None:
            self.bind_surface(surface)

    def __len__(self) -> int:
        return len(self._indicators)

    def __contains__(self, indicator_id: str) -> bool:
        return indicator_id in self._indicators

    def __iter__(self) -> Iterator[IndicatorInstance]:
        return iter(list(self._indicators.values()))

    @property
    def surface(self) -> Optional[ChartSurface]:
        return self._surface

    @property
    def allocator(self) -> PaneAllocator:
        return self._allocator

    @property
    def candles(self) -> list[Candle]:
        return list(self._candles)

    # ============ Creation ============

    def build_indicator(
        self,
        indicator_type: IndicatorType,
        parameters: Optional[dict] = None,
        name: Optional[str] = None,
        color: Optional[str] = None,
    ) -> IndicatorInstance:
        """Factory: fresh id, defaults resolved, not yet attached."""
        indicator_type = IndicatorType(indicator_type)
        resolved = resolve_parameters(indicator_type, parameters)

        config = IndicatorConfig(
            id=uuid.uuid4().hex,
            type=indicator_type,
            name=name or default_name(indicator_type, resolved),
            color=color or default_color(indicator_type),
            visible=True,
            parameters=resolved,
        )
        return IndicatorInstance(config, allocator=self._allocator)

    def create_and_add_indicator(
        self,
        indicator_type: IndicatorType,
        parameters: Optional[dict] = None,
        name: Optional[str] = None,
        color: Optional[str] = None,
    ) -> str:
        """Create an indicator and, if a chart is bound, render it right away."""
        indicator = self.build_indicator(indicator_type, parameters, name, color)
        return self.add_indicator(indicator)

    def add_indicator(self, indicator: IndicatorInstance) -> str:
        """Attach a pre-built instance."""
        if indicator.id in self._indicators:
            logger.warning(f"Indicator {indicator.id} is already registered")
            return indicator.id

        self._indicators[indicator.id] = indicator
        logger.info(f"Added indicator {indicator.name} ({indicator.id})")

        if self._surface is not None:
            self._realize(indicator)

        return indicator.id

    def _realize(self, indicator: IndicatorInstance) -> bool:
        """Bind, place, create series and feed the current history."""
        indicator.initialize(self._surface)

        pane_index = self._allocator.assign(indicator.id, indicator.type)
        if not self._allocator.ensure_pane_exists(pane_index):
            logger.error(f"Pane {pane_index} unavailable for indicator {indicator.id}")
            return False

        if indicator.create_series(pane_index) is None:
            return False

        if self._candles:
            try:
                indicator.update_data(self._candles)
            except Exception as e:
                logger.error(f"Error feeding history to indicator {indicator.name} ({indicator.id}): {e}")
        return True

    # ============ Commands ============

    def remove_indicator(self, indicator_id: str) -> bool:
        indicator = self._indicators.pop(indicator_id, None)
        if indicator is None:
            logger.warning(f"Cannot remove indicator {indicator_id}: not found")
            return False

        indicator.destroy()
        self._allocator.release(indicator_id)
        logger.info(f"Removed indicator {indicator.name} ({indicator_id}), {len(self._indicators)} remaining")
        return True

    def set_indicator_visibility(self, indicator_id: str, visible: bool) -> bool:
        indicator = self._indicators.get(indicator_id)
        if indicator is None:
            logger.warning(f"Cannot set visibility for indicator {indicator_id}: not found")
            return False

        indicator.set_visibility(visible)
        return True

    def toggle_visibility(self, indicator_id: str) -> bool:
        indicator = self._indicators.get(indicator_id)
        if indicator is None:
            logger.warning(f"Cannot toggle visibility for indicator {indicator_id}: not found")
            return False

        indicator.set_visibility(not indicator.is_visible)
        return True

    def update_indicator(self, indicator_id: str, parameters: dict) -> IndicatorConfig:
        """
        Apply a parameter edit and re-push.

        The pane assignment never changes on an edit.

        Raises:
            IndicatorNotFoundError: If no indicator has this id
            ValidationError: If a parameter is not a valid number
        """
        indicator = self._indicators.get(indicator_id)
        if indicator is None:
            raise IndicatorNotFoundError(
                "IndicatorRegistry", f"Indicator {indicator_id} not found"
            )

        indicator.set_parameters(parameters)
        if indicator.series_active and self._candles:
            indicator.update_data(self._candles)

        return indicator.config

    def update_data(self, candles: Sequence[Candle]) -> None:
        """Full recompute of every active indicator, in insertion order."""
        if not candles:
            logger.warning("Cannot update indicators with empty candles")
            return

        self._candles = list(candles)
        logger.debug(f"Updating {len(self._indicators)} indicators with {len(self._candles)} candles")

        for indicator in list(self._indicators.values()):
            if not indicator.series_active:
                continue
            try:
                indicator.update_data(self._candles)
            except Exception as e:
                # Log error but continue with other indicators
                logger.error(f"Error updating indicator {indicator.name} ({indicator.id}): {e}")

    def reorder_indicators(self, ordered_ids: Sequence[str]) -> None:
        """Listed ids first, in the given order; the rest keep their order."""
        reordered: dict[str, IndicatorInstance] = {}
        for indicator_id in ordered_ids:
            if indicator_id in self._indicators and indicator_id not in reordered:
                reordered[indicator_id] = self._indicators[indicator_id]
        for indicator_id, indicator in self._indicators.items():
            reordered.setdefault(indicator_id, indicator)
        self._indicators = reordered

    def clear_all_indicators(self) -> None:
        for indicator in list(self._indicators.values()):
            indicator.destroy()
            self._allocator.release(indicator.id)
        self._indicators.clear()

    # ============ Queries ============

    def get_indicator(self, indicator_id: str) -> Optional[IndicatorInstance]:
        return self._indicators.get(indicator_id)

    def get_indicators(self) -> list[IndicatorInstance]:
        return list(self._indicators.values())

    def get_configs(self) -> list[IndicatorConfig]:
        return [indicator.config.model_copy(deep=True) for indicator in self._indicators.values()]

    def pane_of(self, indicator_id: str) -> Optional[int]:
        return self._allocator.pane_of(indicator_id)

    def active_oscillators(self) -> list[IndicatorInstance]:
        return [i for i in self._indicators.values() if is_oscillator(i.type)]

    # ============ Chart binding ============

    def bind_surface(self, surface: ChartSurface) -> None:
        """
        Attach a chart surface and render every registered indicator.

        Overlays are realized before oscillators.
        """
        if surface is self._surface:
            return
        if self._surface is not None:
            self.unbind_surface()

        self._surface = surface
        self._allocator.bind(surface)
        logger.info(f"Chart surface bound, realizing {len(self._indicators)} indicators")

        indicators = list(self._indicators.values())
        ordered = [i for i in indicators if not is_oscillator(i.type)] + [
            i for i in indicators if is_oscillator(i.type)
        ]
        for indicator in ordered:
            self._realize(indicator)

    def unbind_surface(self) -> None:
        """
        Detach from the chart: every series is removed.

        Configs survive as fresh unbound instances, so the next
        bind_surface renders the same indicators again.
        """
        if self._surface is None:
            return

        for indicator_id, indicator in list(self._indicators.items()):
            indicator.destroy()
            self._indicators[indicator_id] = IndicatorInstance(
                indicator.config.model_copy(deep=True), allocator=self._allocator
            )

        self._surface = None
        self._allocator.bind(None)
        logger.info("Chart surface unbound")

    def close(self) -> None:
        """Session end: destroy everything."""
        self.clear_all_indicators()
        self._surface = None
        self._allocator.bind(None)
        self._allocator.reset()
        self._candles = []
