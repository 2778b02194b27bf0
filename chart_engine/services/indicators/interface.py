"""
Indicator Engine Service Interface

Defines the contract for the stateless indicator calculation layer.
"""

from abc import abstractmethod
from typing import Optional, Sequence

from chart_engine.services.base import BaseService
from chart_engine.schemas.market import Candle, IndicatorLines
from chart_engine.schemas.indicators import (
    CalculationRequest,
    CalculationResponse,
    CatalogEntry,
    IndicatorType,
)


class IndicatorServiceInterface(BaseService[CalculationRequest, CalculationResponse]):
    """
    Indicator Engine Service Contract.

    INPUT: CalculationRequest
        - type: which indicator
        - candles: full time-ascending OHLCV history
        - parameters: optional overrides of the defaults

    OUTPUT: CalculationResponse
        - lines: named ValuePoint sequences
    """

    @property
    def name(self) -> str:
        return "IndicatorService"

    @abstractmethod
    async def execute(self, input_data: CalculationRequest) -> CalculationResponse:
        """Calculate one indicator over the request's candles."""
        pass

    @abstractmethod
    def calculate(
        self,
        indicator_type: IndicatorType,
        candles: Sequence[Candle],
        parameters: Optional[dict[str, float]] = None,
    ) -> IndicatorLines:
        """
        Synchronous calculation without the request envelope.

        Args:
            indicator_type: Indicator kind
            candles: Full candle history
            parameters: Overrides, merged onto the defaults

        Returns:
            Named lines; empty lines when history is too short
        """
        pass

    @abstractmethod
    def catalog(self) -> list[CatalogEntry]:
        """Describe every supported indicator."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        pass
