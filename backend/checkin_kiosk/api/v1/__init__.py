"""API v1 router."""

from fastapi import APIRouter

from checkin_kiosk.api.v1 import kiosk, websocket

router = APIRouter()

router.include_router(kiosk.router, prefix="/kiosk", tags=["kiosk"])
router.include_router(websocket.router, prefix="/ws", tags=["websocket"])
