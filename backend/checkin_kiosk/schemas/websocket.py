"""WebSocket message schemas for the lane push channel."""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from checkin_kiosk.models.session import Actor
from checkin_kiosk.schemas.base import WireModel
from checkin_kiosk.schemas.session import SessionUpdatedPayload


class WSMessageType(str, Enum):
    """Lane push message types consumed by the customer kiosk."""

    SESSION_UPDATED = "SESSION_UPDATED"
    SELECTION_PROPOSED = "SELECTION_PROPOSED"
    SELECTION_LOCKED = "SELECTION_LOCKED"
    SELECTION_FORCED = "SELECTION_FORCED"
    SELECTION_ACKNOWLEDGED = "SELECTION_ACKNOWLEDGED"
    CHECKIN_OPTION_HIGHLIGHTED = "CHECKIN_OPTION_HIGHLIGHTED"
    CUSTOMER_CONFIRMATION_REQUIRED = "CUSTOMER_CONFIRMATION_REQUIRED"
    ASSIGNMENT_CREATED = "ASSIGNMENT_CREATED"
    INVENTORY_UPDATED = "INVENTORY_UPDATED"


class WSEnvelope(BaseModel):
    """Outer frame. The payload is validated per type afterwards."""

    type: str
    payload: Any = None
    timestamp: str | None = None


class SelectionProposedPayload(WireModel):
    sessionId: str
    rentalType: str
    proposedBy: Actor


class SelectionLockedPayload(WireModel):
    sessionId: str
    rentalType: str
    confirmedBy: Actor
    lockedAt: str | None = None


class SelectionForcedPayload(WireModel):
    sessionId: str
    rentalType: str
    forcedBy: Literal["EMPLOYEE"] = "EMPLOYEE"


class SelectionAcknowledgedPayload(WireModel):
    sessionId: str
    acknowledgedBy: Actor


class CheckinOptionHighlightedPayload(WireModel):
    sessionId: str
    step: Literal["LANGUAGE", "MEMBERSHIP", "WAITLIST_BACKUP"]
    option: str | None = None
    by: Literal["EMPLOYEE"] = "EMPLOYEE"


class CustomerConfirmationRequiredPayload(WireModel):
    """Staff assigned something other than what the customer asked for."""

    sessionId: str
    requestedType: str
    selectedType: str
    selectedNumber: str


class AssignmentCreatedPayload(WireModel):
    sessionId: str
    rentalType: str
    roomId: str | None = None
    roomNumber: str | None = None
    lockerId: str | None = None
    lockerNumber: str | None = None


class InventorySummary(WireModel):
    clean: int
    cleaning: int = 0
    dirty: int = 0
    total: int = 0


class DetailedInventory(WireModel):
    byType: dict[str, InventorySummary]
    lockers: InventorySummary | None = None


class InventoryUpdatedPayload(WireModel):
    inventory: DetailedInventory


# Tagged union - one variant per message kind


class SessionUpdatedEvent(BaseModel):
    type: Literal["SESSION_UPDATED"]
    payload: SessionUpdatedPayload
    timestamp: str | None = None


class SelectionProposedEvent(BaseModel):
    type: Literal["SELECTION_PROPOSED"]
    payload: SelectionProposedPayload
    timestamp: str | None = None


class SelectionLockedEvent(BaseModel):
    type: Literal["SELECTION_LOCKED"]
    payload: SelectionLockedPayload
    timestamp: str | None = None


class SelectionForcedEvent(BaseModel):
    type: Literal["SELECTION_FORCED"]
    payload: SelectionForcedPayload
    timestamp: str | None = None


class SelectionAcknowledgedEvent(BaseModel):
    type: Literal["SELECTION_ACKNOWLEDGED"]
    payload: SelectionAcknowledgedPayload
    timestamp: str | None = None


class CheckinOptionHighlightedEvent(BaseModel):
    type: Literal["CHECKIN_OPTION_HIGHLIGHTED"]
    payload: CheckinOptionHighlightedPayload
    timestamp: str | None = None


class CustomerConfirmationRequiredEvent(BaseModel):
    type: Literal["CUSTOMER_CONFIRMATION_REQUIRED"]
    payload: CustomerConfirmationRequiredPayload
    timestamp: str | None = None


class AssignmentCreatedEvent(BaseModel):
    type: Literal["ASSIGNMENT_CREATED"]
    payload: AssignmentCreatedPayload
    timestamp: str | None = None


class InventoryUpdatedEvent(BaseModel):
    type: Literal["INVENTORY_UPDATED"]
    payload: InventoryUpdatedPayload
    timestamp: str | None = None


InboundEvent = Annotated[
    Union[
        SessionUpdatedEvent,
        SelectionProposedEvent,
        SelectionLockedEvent,
        SelectionForcedEvent,
        SelectionAcknowledgedEvent,
        CheckinOptionHighlightedEvent,
        CustomerConfirmationRequiredEvent,
        AssignmentCreatedEvent,
        InventoryUpdatedEvent,
    ],
    Field(discriminator="type"),
]

inbound_event_adapter: TypeAdapter[Any] = TypeAdapter(InboundEvent)
