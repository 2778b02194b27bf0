"""
Indicator API Endpoints

Stateless indicator calculations for the dashboard and strategy tooling.
"""

import logging

from fastapi import APIRouter, HTTPException

from chart_engine.schemas.indicators import (
    CalculationRequest,
    CalculationResponse,
    CatalogEntry,
    IndicatorType,
)
from chart_engine.services.base import ServiceError
from chart_engine.services.indicators import get_indicator_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/catalog", response_model=list[CatalogEntry])
async def get_catalog():
    """
    List every supported indicator.

    Each entry carries its overlay/oscillator category, default
    parameters, default color and the names of the lines it produces.
    """
    service = get_indicator_service()
    return service.catalog()


@router.get("/catalog/{indicator_type}", response_model=CatalogEntry)
async def get_catalog_entry(indicator_type: IndicatorType):
    """Catalog entry of a single indicator type."""
    service = get_indicator_service()
    for entry in service.catalog():
        if entry.type == indicator_type:
            return entry
    raise HTTPException(status_code=404, detail=f"Unknown indicator {indicator_type}")


@router.post("/calculate", response_model=CalculationResponse)
async def calculate_indicator(request: CalculationRequest):
    """
    Calculate one indicator over the posted candles.

    Omitted parameters take their defaults; unknown parameters are ignored.
    Lines shorter than the warm-up period come back empty.
    """
    service = get_indicator_service()

    try:
        return await service.execute(request)
    except ServiceError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except Exception as e:
        logger.error(f"Indicator calculation failed for {request.type.value}: {e}")
        raise HTTPException(status_code=500, detail=f"Indicator calculation failed: {e}")
