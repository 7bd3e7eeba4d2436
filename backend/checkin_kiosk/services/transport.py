"""Transport supervisor - push channel state and the polling fallback."""

import asyncio
from typing import Awaitable, Callable

from checkin_kiosk.core.logging import get_logger
from checkin_kiosk.schemas.session import SessionSnapshotResponse, SessionUpdatedPayload
from checkin_kiosk.services.errors import CommandError

logger = get_logger(__name__)


async def _cancel(task: asyncio.Task | None) -> None:
    """Cancel a task if it is still armed. Safe to call repeatedly."""
    if task is None or task.done():
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


class TransportSupervisor:
    """
    Owns the polling fallback for one lane.

    While the push channel is up nothing is polled. When it drops, a grace
    timer runs first so an ordinary reconnect does not start polling; after
    that the session snapshot is fetched at a fixed interval and fed through
    the same path as push events. Reconnecting tears the timers down, so an
    update is never delivered by both paths.

    A snapshot of ``{"session": null}`` means the lane has no session. It
    resets the kiosk once; further empty polls are no-ops until a session is
    seen again.
    """

    def __init__(
        self,
        fetch_snapshot: Callable[[], Awaitable[SessionSnapshotResponse]],
        apply_snapshot: Callable[[SessionUpdatedPayload], None],
        reset: Callable[[], None],
        lane_id: str = "",
        grace_seconds: float = 1.2,
        interval_seconds: float = 1.5,
    ) -> None:
        self._fetch_snapshot = fetch_snapshot
        self._apply_snapshot = apply_snapshot
        self._reset = reset
        self._lane_id = lane_id
        self._grace_seconds = grace_seconds
        self._interval_seconds = interval_seconds

        self._connected = False
        self._stopped = True
        self._poll_task: asyncio.Task | None = None
        self._reset_delivered = False

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def start(self, connected: bool = False) -> None:
        """Begin supervising. Starts disconnected unless told otherwise."""
        self._stopped = False
        if connected:
            await self.on_connected()
        else:
            await self.on_disconnected()

    async def stop(self) -> None:
        self._stopped = True
        await _cancel(self._poll_task)
        self._poll_task = None

    async def on_connected(self) -> None:
        self._connected = True
        was_polling = self.polling
        await _cancel(self._poll_task)
        self._poll_task = None
        self._reset_delivered = False
        if was_polling:
            logger.info("Push channel restored; polling stopped", lane=self._lane_id)

    async def on_disconnected(self) -> None:
        if self._stopped:
            return
        self._connected = False
        if self.polling:
            # Already in grace or polling; keep the existing timers
            return
        self._poll_task = asyncio.create_task(self._grace_then_poll(), name="snapshot-polling")

    async def poll_once(self) -> None:
        """Fetch one snapshot and apply it. Failures are logged, never raised."""
        try:
            snapshot = await self._fetch_snapshot()
        except CommandError as e:
            logger.warning("Snapshot poll failed", lane=self._lane_id, error=str(e))
            return

        if self._connected:
            # Push came back while this request was in flight
            return

        if snapshot.session is None:
            if not self._reset_delivered:
                self._reset_delivered = True
                logger.info("Lane has no active session; resetting", lane=self._lane_id)
                self._reset()
            return

        self._reset_delivered = False
        self._apply_snapshot(snapshot.session)

    async def _grace_then_poll(self) -> None:
        await asyncio.sleep(self._grace_seconds)
        if self._connected:
            return
        logger.info("Push channel down; entering polling fallback", lane=self._lane_id)
        while not self._connected:
            await self.poll_once()
            await asyncio.sleep(self._interval_seconds)
