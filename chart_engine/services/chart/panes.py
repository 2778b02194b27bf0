"""
Pane Allocator

Assigns indicators to chart panes and materializes panes on the chart
surface on demand.

Rules:
    - Pane 0 is the price pane and always exists
    - Overlays share pane 0; each oscillator gets its own secondary pane
    - Panes are created contiguously and never removed, so user-adjusted
      heights survive indicator churn
"""

import logging
from typing import Optional

from chart_engine.core.config import settings
from chart_engine.schemas.indicators import IndicatorType, is_oscillator
from chart_engine.services.chart.surface import ChartSurface

logger = logging.getLogger(__name__)

MAIN_PANE = 0
FIRST_SECONDARY_PANE = 1


class PaneAllocator:
    """
    Tracks realized panes and indicator -> pane assignments.

    Usage:
        allocator = PaneAllocator(surface)
        pane = allocator.assign(indicator_id, IndicatorType.RSI)
        if allocator.ensure_pane_exists(pane):
            ...
    """

    def __init__(
        self,
        surface: Optional[ChartSurface] = None,
        main_pane_height: Optional[int] = None,
        secondary_pane_height: Optional[int] = None,
    ):
        self._surface = surface
        self._main_pane_height = main_pane_height or settings.main_pane_height
        self._secondary_pane_height = (
            secondary_pane_height or settings.secondary_pane_height
        )
        self._realized: set[int] = {MAIN_PANE}
        self._assignments: dict[str, int] = {}

    @property
    def surface(self) -> Optional[ChartSurface]:
        return self._surface

    @property
    def realized_panes(self) -> list[int]:
        return sorted(self._realized)

    @property
    def pane_count(self) -> int:
        return len(self._realized)

    @property
    def assignments(self) -> dict[str, int]:
        return dict(self._assignments)

    def bind(self, surface: Optional[ChartSurface]) -> None:
        """
        Switch to another surface (or none).

        Pane tracking restarts from the price pane; assignments are kept
        so indicators return to the same pane index.
        """
        self._surface = surface
        self._realized = {MAIN_PANE}

    def height_for(self, pane_index: int) -> int:
        if pane_index == MAIN_PANE:
            return self._main_pane_height
        return self._secondary_pane_height

    def ensure_pane_exists(self, pane_index: int) -> bool:
        """
        Make sure pane_index is realized on the surface.

        Returns:
            True if the pane exists or was created, False otherwise
        """
        if pane_index in self._realized:
            return True

        if pane_index < 0:
            logger.warning(f"Refusing to create negative pane index {pane_index}")
            return False

        if self._surface is None:
            logger.error(f"Cannot create pane {pane_index}: no chart surface bound")
            return False

        try:
            current = max(self._surface.pane_count(), 1)
            self._realized.update(range(min(current, pane_index + 1)))

            for index in range(current, pane_index + 1):
                logger.debug(f"Creating pane {index}")
                self._surface.create_pane(self.height_for(index))
                self._realized.add(index)
        except Exception as e:
            logger.error(f"Error ensuring pane {pane_index} exists: {e}")
            return False

        return True

    def next_secondary_pane(self) -> int:
        """Lowest secondary pane not held by a live oscillator."""
        used = set(self._assignments.values())
        pane_index = FIRST_SECONDARY_PANE
        while pane_index in used:
            pane_index += 1
        return pane_index

    def assign(self, indicator_id: str, indicator_type: IndicatorType) -> int:
        """Resolve (and remember) the pane for an indicator."""
        if indicator_id in self._assignments:
            return self._assignments[indicator_id]

        if is_oscillator(indicator_type):
            pane_index = self.next_secondary_pane()
        else:
            pane_index = MAIN_PANE

        self._assignments[indicator_id] = pane_index
        logger.debug(f"Assigned {indicator_type} {indicator_id} to pane {pane_index}")
        return pane_index

    def pane_of(self, indicator_id: str) -> Optional[int]:
        return self._assignments.get(indicator_id)

    def release(self, indicator_id: str) -> None:
        """Forget an assignment. The pane itself stays."""
        self._assignments.pop(indicator_id, None)

    def reset(self) -> None:
        """Forget every assignment (panes stay realized)."""
        self._assignments.clear()
