# Models module

from checkin_kiosk.models.inventory import InventorySnapshot
from checkin_kiosk.models.session import (
    Actor,
    KioskView,
    Language,
    MembershipChoice,
    MembershipPurchaseIntent,
    MembershipStatus,
    SessionMirror,
)

__all__ = [
    "InventorySnapshot",
    "Actor",
    "KioskView",
    "Language",
    "MembershipChoice",
    "MembershipPurchaseIntent",
    "MembershipStatus",
    "SessionMirror",
]
