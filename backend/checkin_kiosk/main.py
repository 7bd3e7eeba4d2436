"""Check-in Kiosk Agent - FastAPI Application"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from checkin_kiosk import __version__
from checkin_kiosk.api.v1 import router as api_router
from checkin_kiosk.core.config import settings
from checkin_kiosk.core.logging import get_logger, setup_logging
from checkin_kiosk.services.controller import KioskController, get_controller

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown."""
    # Startup
    setup_logging()
    controller = get_controller()
    await controller.start()

    yield

    # Shutdown - stop polling, push channel and timers
    await controller.stop()
    logger.info("Kiosk agent stopped", lane=controller.lane_id)


app = FastAPI(
    title="Check-in Kiosk Agent",
    description="Keeps a customer check-in kiosk in sync with its lane session",
    version=__version__,
    lifespan=lifespan,
    response_model_by_alias=True,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health_check(controller: KioskController = Depends(get_controller)) -> dict[str, str]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
        "lane": controller.lane_id,
        "transport": "push" if controller.transport.connected else "polling",
    }


def run() -> None:
    """Console entry point."""
    uvicorn.run("checkin_kiosk.main:app", host=settings.host, port=settings.port, reload=settings.debug)
