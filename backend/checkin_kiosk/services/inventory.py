"""Inventory tracking - periodic refresh plus push updates."""

import asyncio
from typing import Any

from pydantic import ValidationError

from checkin_kiosk.core.logging import get_logger
from checkin_kiosk.models.inventory import InventorySnapshot
from checkin_kiosk.schemas.websocket import InventoryUpdatedPayload
from checkin_kiosk.services.api_client import LaneApiClient
from checkin_kiosk.services.errors import CommandError
from checkin_kiosk.services.store import KioskState, KioskStore

logger = get_logger(__name__)


def snapshot_from_available(data: dict[str, Any]) -> InventorySnapshot | None:
    """Parse ``GET /v1/inventory/available`` ({rooms: {...}, lockers: n})."""
    rooms = data.get("rooms")
    lockers = data.get("lockers")
    if not isinstance(rooms, dict) or not isinstance(lockers, int):
        return None
    return InventorySnapshot(
        rooms={str(k): int(v) for k, v in rooms.items() if isinstance(v, (int, float))},
        lockers=lockers,
    )


def snapshot_from_update(payload: InventoryUpdatedPayload) -> InventorySnapshot:
    """Build a snapshot from an INVENTORY_UPDATED push (clean counts)."""
    inventory = payload.inventory
    rooms = {rental: summary.clean for rental, summary in inventory.byType.items()}
    lockers = inventory.lockers.clean if inventory.lockers else 0
    return InventorySnapshot(rooms=rooms, lockers=lockers)


class InventoryTracker:
    """
    Keeps ``KioskState.inventory`` fresh.

    Inventory only gates the UI (sold-out rentals divert to the waitlist);
    a stale value never changes the negotiation itself.
    """

    def __init__(self, store: KioskStore, api: LaneApiClient, refresh_seconds: float = 10.0) -> None:
        self._store = store
        self._api = api
        self._refresh_seconds = refresh_seconds
        self._task: asyncio.Task | None = None

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run(), name="inventory-refresh")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def refresh(self) -> bool:
        """Fetch inventory once. Keeps the previous snapshot on failure."""
        try:
            data = await self._api.fetch_inventory()
        except CommandError as e:
            logger.warning("Inventory refresh failed", error=str(e))
            return False

        snapshot = snapshot_from_available(data)
        if snapshot is None:
            logger.warning("Inventory response ignored", keys=sorted(data))
            return False
        self._set(snapshot, reason="inventory-refresh")
        return True

    def apply_update(self, payload: InventoryUpdatedPayload | dict[str, Any]) -> None:
        if not isinstance(payload, InventoryUpdatedPayload):
            try:
                payload = InventoryUpdatedPayload.model_validate(payload)
            except ValidationError as e:
                logger.warning("Inventory update dropped", error=str(e))
                return
        self._set(snapshot_from_update(payload), reason="inventory-push")

    def _set(self, snapshot: InventorySnapshot, reason: str) -> None:
        def mutate(state: KioskState) -> None:
            state.inventory = snapshot

        self._store.commit(mutate, reason=reason)

    async def _run(self) -> None:
        while True:
            await self.refresh()
            await asyncio.sleep(self._refresh_seconds)
