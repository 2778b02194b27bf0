"""
Chart Engine - FastAPI Application

Main entry point for the indicator API.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chart_engine.core.config import settings
from chart_engine.api.v1 import router as api_v1_router
from chart_engine.services.indicators import get_indicator_service

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    service = get_indicator_service()
    logger.info(f"{service.name} ready with {len(service.catalog())} indicators")

    yield

    # Shutdown
    logger.info("Shutting down...")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Chart Engine API

    ## Architecture
    - **Indicator Engine**: Calculates technical indicators (pure Python/NumPy)
    - **Chart Sync**: Keeps indicator series and panes in step with the candle stream

    ## Indicators
    - Overlays: SMA, EMA, Bollinger Bands, Ichimoku
    - Oscillators: RSI, MACD, ATR, Stochastic
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

cors_origins = [settings.frontend_url]
if settings.allowed_origins:
    cors_origins.extend([o for o in settings.allowed_origins if o not in cors_origins])

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    service = get_indicator_service()
    healthy = await service.health_check()
    return {
        "status": "healthy" if healthy else "degraded",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Chart Engine API",
        "docs": "/docs",
        "health": "/health",
    }
