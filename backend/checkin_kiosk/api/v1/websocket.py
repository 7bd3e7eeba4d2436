"""WebSocket endpoint for the on-device renderer."""

import json

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from checkin_kiosk.core.logging import get_logger
from checkin_kiosk.services.controller import KioskController, get_controller

logger = get_logger(__name__)

router = APIRouter()


@router.websocket("/display")
async def display_websocket(
    websocket: WebSocket,
    controller: KioskController = Depends(get_controller),
):
    """
    WebSocket endpoint for the kiosk touchscreen renderer.

    The display receives:
    - state: full kiosk state, on connect and after every change

    The display can send:
    - ping: Keep-alive
    - refresh: Ask for the current state again
    """
    display = controller.display
    display_id = await display.connect(websocket)

    await display.send(
        display_id,
        {"type": "state", "data": controller.state_response().model_dump(mode="json")},
    )

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except ValueError:
                logger.warning("Display sent invalid JSON", display_id=display_id)
                continue
            msg_type = message.get("type") if isinstance(message, dict) else None

            if msg_type == "ping":
                await websocket.send_json({"type": "pong"})

            elif msg_type == "refresh":
                await display.send(
                    display_id,
                    {"type": "state", "data": controller.state_response().model_dump(mode="json")},
                )

    except WebSocketDisconnect:
        logger.info("Display websocket closed", display_id=display_id)
    except Exception as e:
        logger.error("Display WebSocket error", display_id=display_id, error=str(e))
    finally:
        await display.disconnect(display_id)
