"""
Indicator Engine Service Implementation

Calculates indicator lines from OHLCV data.
Pure Python/NumPy calculations, no chart state.
"""

import logging
from typing import Optional, Sequence

from chart_engine.schemas.market import Candle, IndicatorLines
from chart_engine.schemas.indicators import (
    CalculationRequest,
    CalculationResponse,
    CatalogEntry,
    IndicatorType,
    category_of,
)
from chart_engine.services.indicators.interface import IndicatorServiceInterface
from chart_engine.services.indicators.definitions import (
    DEFINITIONS,
    default_color,
    resolve_parameters,
    run_calculation,
)

logger = logging.getLogger(__name__)


class IndicatorService(IndicatorServiceInterface):
    """
    Indicator Engine Service.

    Calculates technical indicators for charting.
    All calculations are deterministic and reproducible.
    """

    @property
    def name(self) -> str:
        return "IndicatorService"

    async def execute(self, input_data: CalculationRequest) -> CalculationResponse:
        """Calculate one indicator over the request's candles."""
        parameters = resolve_parameters(input_data.type, input_data.parameters)
        lines = self.calculate(input_data.type, input_data.candles, parameters)

        return CalculationResponse(
            type=input_data.type,
            category=category_of(input_data.type),
            parameters=parameters,
            lines=lines,
        )

    def calculate(
        self,
        indicator_type: IndicatorType,
        candles: Sequence[Candle],
        parameters: Optional[dict[str, float]] = None,
    ) -> IndicatorLines:
        parameters = resolve_parameters(indicator_type, parameters)

        lines = run_calculation(indicator_type, candles, parameters)
        logger.debug(
            f"Calculated {IndicatorType(indicator_type).value} over {len(candles)} candles: "
            + ", ".join(f"{key}={len(points)}" for key, points in lines.items())
        )
        return lines

    def catalog(self) -> list[CatalogEntry]:
        return [
            CatalogEntry(
                type=indicator_type,
                category=definition.category,
                default_parameters=resolve_parameters(indicator_type),
                default_color=default_color(indicator_type),
                lines=definition.line_keys,
            )
            for indicator_type, definition in DEFINITIONS.items()
        ]

    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        return True


# Singleton instance
_service_instance: Optional[IndicatorService] = None


def get_indicator_service() -> IndicatorService:
    """Get or create indicator service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = IndicatorService()
    return _service_instance
