"""Kiosk controller - wires the store to the lane transports and the local displays."""

import asyncio
from datetime import datetime

from checkin_kiosk.core.config import settings
from checkin_kiosk.core.logging import get_logger
from checkin_kiosk.models.session import KioskView
from checkin_kiosk.services.agreement import AgreementLoader
from checkin_kiosk.services.api_client import LaneApiClient
from checkin_kiosk.services.dispatcher import ActionDispatcher
from checkin_kiosk.services.display import DisplayManager
from checkin_kiosk.services.inventory import InventoryTracker
from checkin_kiosk.services.push_channel import LanePushChannel
from checkin_kiosk.services.reconciler import EventReconciler
from checkin_kiosk.services.screens import build_state_response
from checkin_kiosk.services.store import KioskState, KioskStore
from checkin_kiosk.services.transport import TransportSupervisor

logger = get_logger(__name__)


class KioskController:
    """
    Owns every long-lived piece of the kiosk agent for one lane.

    Lifecycle:
    - start(): inventory refresh, polling supervisor, push channel
    - agreement text is fetched whenever a session reaches the agreement screen
    - stop(): cancels every timer and closes every connection

    State changes are fanned out to the local displays. Rapid bursts are
    coalesced so a display always ends on the latest revision.
    """

    def __init__(
        self,
        api: LaneApiClient | None = None,
        display: DisplayManager | None = None,
        lane_id: str | None = None,
    ) -> None:
        self.lane_id = lane_id or settings.lane_id
        self.store = KioskStore()
        self.api = api or LaneApiClient.from_settings()
        self.display = display or DisplayManager()

        self.inventory = InventoryTracker(self.store, self.api, settings.inventory_refresh_seconds)
        self.reconciler = EventReconciler(self.store, on_inventory_update=self.inventory.apply_update)
        self.dispatcher = ActionDispatcher(self.store, self.api)
        self.agreement = AgreementLoader(self.store, self.api)
        self.transport = TransportSupervisor(
            fetch_snapshot=self.api.fetch_session_snapshot,
            apply_snapshot=self.reconciler.apply_snapshot,
            reset=lambda: self.store.reset_to_idle(reason="server-idle"),
            lane_id=self.lane_id,
            grace_seconds=settings.polling_grace_seconds,
            interval_seconds=settings.polling_interval_seconds,
        )
        self.push = LanePushChannel(
            ws_url=settings.ws_url,
            lane_id=self.lane_id,
            kiosk_token=settings.kiosk_token,
            on_message=self.reconciler.handle_raw,
            on_open=self.transport.on_connected,
            on_close=self.transport.on_disconnected,
            retry_delay=settings.push_retry_delay_seconds,
            max_retries=settings.push_max_retries,
        )

        self._welcomed_session_id: str | None = None
        self._overlay_task: asyncio.Task | None = None
        self._broadcast_task: asyncio.Task | None = None
        self._broadcast_pending = False
        self._unsubscribe = self.store.subscribe(self._on_state_change)

    def state_response(self, now: datetime | None = None):
        return build_state_response(self.store.state, now)

    async def start(self) -> None:
        logger.info("Kiosk controller starting", lane=self.lane_id)
        self.inventory.start()
        await self.transport.start(connected=False)
        # Hydrate right away instead of waiting for the grace period
        await self.transport.poll_once()
        self.push.start()

    async def stop(self) -> None:
        logger.info("Kiosk controller stopping", lane=self.lane_id)
        await self.push.stop()
        await self.transport.stop()
        await self.inventory.stop()
        await self.agreement.stop()
        for task in (self._overlay_task, self._broadcast_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._overlay_task = None
        self._broadcast_task = None
        await self.display.close_all()
        await self.api.aclose()

    # State fan-out

    def _on_state_change(self, state: KioskState) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # No loop (sync callers); nothing to schedule
            return

        session_id = state.session.session_id
        if session_id is None:
            self._welcomed_session_id = None
        elif session_id != self._welcomed_session_id and state.view != KioskView.IDLE:
            # Greet once per session, when it first has a visible screen
            self._welcomed_session_id = session_id
            self._start_welcome_overlay()

        if self._broadcast_task is not None and not self._broadcast_task.done():
            self._broadcast_pending = True
            return
        self._broadcast_task = asyncio.create_task(self._broadcast(), name="display-broadcast")

    async def _broadcast(self) -> None:
        while True:
            self._broadcast_pending = False
            message = {"type": "state", "data": self.state_response().model_dump(mode="json")}
            await self.display.broadcast(message)
            if not self._broadcast_pending:
                return

    def _start_welcome_overlay(self) -> None:
        if self._overlay_task is not None and not self._overlay_task.done():
            self._overlay_task.cancel()
        self._overlay_task = asyncio.create_task(self._welcome_overlay(), name="welcome-overlay")

    async def _welcome_overlay(self) -> None:
        session_id = self.store.session_id

        def show(state: KioskState) -> None:
            state.show_welcome_overlay = True

        def hide(state: KioskState) -> None:
            state.show_welcome_overlay = False

        self.store.commit(show, reason="welcome-overlay")
        await asyncio.sleep(settings.welcome_overlay_seconds)
        if self.store.session_id == session_id:
            self.store.commit(hide, reason="welcome-overlay-done")


_controller: KioskController | None = None


def get_controller() -> KioskController:
    """Get the process-wide controller (FastAPI dependency)."""
    global _controller
    if _controller is None:
        _controller = KioskController()
    return _controller
