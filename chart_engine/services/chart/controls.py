"""
Indicator Controls

What the dashboard's indicator controls may do to a registry:
    - offer only the indicator types the oscillator policy allows
    - add single indicators under that policy
    - restore a whole indicator set and signal one chart refresh
"""

import logging
from typing import Callable, List, Optional, Sequence

from chart_engine.core.config import settings
from chart_engine.schemas.chart import ChartRefreshEvent
from chart_engine.schemas.indicators import (
    IndicatorAddRequest,
    IndicatorType,
    is_oscillator,
)
from chart_engine.services.base import OscillatorLimitError, ServiceError
from chart_engine.services.chart.registry import IndicatorRegistry

logger = logging.getLogger(__name__)

RefreshListener = Callable[[ChartRefreshEvent], None]

_UNSET = object()


class IndicatorControls:
    """
    Policy layer in front of an IndicatorRegistry.

    The registry itself accepts any number of oscillators; the limit is
    applied here, where the selection dialog asks what to offer.
    """

    def __init__(self, registry: IndicatorRegistry, max_oscillators=_UNSET):
        self._registry = registry
        self._max_oscillators: Optional[int] = (
            settings.max_oscillators if max_oscillators is _UNSET else max_oscillators
        )
        self._refresh_listeners: List[RefreshListener] = []

    @property
    def registry(self) -> IndicatorRegistry:
        return self._registry

    @property
    def max_oscillators(self) -> Optional[int]:
        return self._max_oscillators

    # ============ Oscillator policy ============

    def oscillator_slots_left(self) -> Optional[int]:
        """None when unlimited."""
        if self._max_oscillators is None:
            return None
        return max(self._max_oscillators - len(self._registry.active_oscillators()), 0)

    def can_add(self, indicator_type: IndicatorType) -> bool:
        if not is_oscillator(indicator_type):
            return True
        slots = self.oscillator_slots_left()
        return slots is None or slots > 0

    def available_types(self) -> list[IndicatorType]:
        return [t for t in IndicatorType if self.can_add(t)]

    def add_indicator(
        self,
        indicator_type: IndicatorType,
        parameters: Optional[dict] = None,
        name: Optional[str] = None,
        color: Optional[str] = None,
    ) -> str:
        """
        Add one indicator from the selection dialog.

        Raises:
            OscillatorLimitError: If another oscillator is not allowed
        """
        indicator_type = IndicatorType(indicator_type)

        if not self.can_add(indicator_type):
            active = self._registry.active_oscillators()
            blocking = active[0].name if active else "an oscillator"
            raise OscillatorLimitError(
                "IndicatorControls",
                f"Cannot add {indicator_type.value}: only {self._max_oscillators} "
                f"oscillator indicator(s) allowed. Please remove {blocking} first.",
                {"active": [i.id for i in active]},
            )

        return self._registry.create_and_add_indicator(indicator_type, parameters, name, color)

    # ============ Batch loading ============

    def load_batch(
        self,
        requests: Sequence[IndicatorAddRequest],
        pair: str,
        timeframe: str,
        clear_existing: bool = True,
    ) -> ChartRefreshEvent:
        """
        Add a saved indicator set, then signal one chart refresh.

        The oscillator policy does not apply: a restored set is taken as
        saved. Failing entries are logged and skipped.

        Returns:
            The refresh event sent to listeners
        """
        if clear_existing:
            self._registry.clear_all_indicators()

        added: list[str] = []
        for request in requests:
            try:
                indicator_id = self._registry.create_and_add_indicator(
                    request.type,
                    request.parameters,
                    request.name,
                    request.color,
                )
                added.append(indicator_id)
            except (ServiceError, ValueError) as e:
                logger.error(f"Failed to load {request.type} indicator for {pair} {timeframe}: {e}")

        logger.info(f"Loaded {len(added)}/{len(requests)} indicators for {pair} {timeframe}")

        event = ChartRefreshEvent(pair=pair, timeframe=timeframe, indicator_ids=added)
        self._emit_refresh(event)
        return event

    # ============ Refresh listeners ============

    def add_refresh_listener(self, callback: RefreshListener) -> None:
        """Add a callback to be called after each batch load."""
        self._refresh_listeners.append(callback)

    def remove_refresh_listener(self, callback: RefreshListener) -> None:
        """Remove a refresh callback."""
        if callback in self._refresh_listeners:
            self._refresh_listeners.remove(callback)

    def _emit_refresh(self, event: ChartRefreshEvent) -> None:
        for callback in list(self._refresh_listeners):
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Refresh listener error: {e}")
