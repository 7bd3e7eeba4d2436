# Services module

from checkin_kiosk.services.membership import resolve_membership_status
from checkin_kiosk.services.view import derive_view
from checkin_kiosk.services.negotiation import SelectionNegotiation
from checkin_kiosk.services.store import KioskStore
from checkin_kiosk.services.reconciler import EventReconciler
from checkin_kiosk.services.transport import TransportSupervisor
from checkin_kiosk.services.dispatcher import ActionDispatcher
from checkin_kiosk.services.agreement import AgreementLoader

__all__ = [
    "resolve_membership_status",
    "derive_view",
    "SelectionNegotiation",
    "KioskStore",
    "EventReconciler",
    "TransportSupervisor",
    "ActionDispatcher",
    "AgreementLoader",
]
