"""Inventory snapshot model."""

from dataclasses import dataclass, field

from checkin_kiosk.models.session import LOCKER_RENTALS


@dataclass
class InventorySnapshot:
    """Available (clean) counts per rental type. Used for gating only."""

    rooms: dict[str, int] = field(default_factory=dict)
    lockers: int = 0

    def available(self, rental: str) -> int | None:
        """Available count for a rental, or None when unknown."""
        if rental in self.rooms:
            return self.rooms[rental]
        if rental in LOCKER_RENTALS:
            return self.lockers
        return None
