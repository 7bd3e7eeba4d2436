# Schemas module

from checkin_kiosk.schemas.session import (
    ActiveAgreementPayload,
    SessionUpdatedPayload,
    SessionSnapshotResponse,
    WaitlistInfoResponse,
)
from checkin_kiosk.schemas.state import KioskStateResponse, ActionResponse
from checkin_kiosk.schemas.websocket import (
    WSEnvelope,
    WSMessageType,
    InboundEvent,
    inbound_event_adapter,
)

__all__ = [
    "ActiveAgreementPayload",
    "SessionUpdatedPayload",
    "SessionSnapshotResponse",
    "WaitlistInfoResponse",
    "KioskStateResponse",
    "ActionResponse",
    "WSEnvelope",
    "WSMessageType",
    "InboundEvent",
    "inbound_event_adapter",
]
