"""Session schemas - lane session snapshots as sent by the check-in API."""

from typing import Any

from pydantic import field_validator

from checkin_kiosk.models.session import (
    Actor,
    CheckinMode,
    IdScanIssue,
    Language,
    MembershipChoice,
    MembershipPurchaseIntent,
    PaymentStatus,
    ResourceType,
)
from checkin_kiosk.schemas.base import WireModel


class PaymentLineItemPayload(WireModel):
    description: str
    amount: float


class SessionUpdatedPayload(WireModel):
    """Full or partial session snapshot.

    Every field except ``sessionId`` may be omitted. Use ``model_fields_set``
    to tell an omitted key (unchanged) from an explicit null (cleared).
    """

    sessionId: str | None
    customerName: str | None = None
    status: str | None = None
    visitId: str | None = None
    mode: CheckinMode | None = None
    blockEndsAt: str | None = None

    membershipNumber: str | None = None
    customerMembershipValidUntil: str | None = None
    membershipPurchaseIntent: MembershipPurchaseIntent | None = None
    membershipChoice: MembershipChoice | None = None

    allowedRentals: list[str] | None = None
    customerPrimaryLanguage: Language | None = None

    pastDueBlocked: bool | None = None
    pastDueBalance: float | None = None

    paymentStatus: PaymentStatus | None = None
    paymentTotal: float | None = None
    paymentLineItems: list[PaymentLineItemPayload] | None = None
    paymentFailureReason: str | None = None

    agreementSigned: bool | None = None
    agreementBypassPending: bool | None = None
    agreementSignedMethod: str | None = None

    assignedResourceType: ResourceType | None = None
    assignedResourceNumber: str | None = None
    checkoutAt: str | None = None

    kioskAcknowledgedAt: str | None = None
    idScanIssue: IdScanIssue | None = None

    # Negotiation side-channel
    proposedRentalType: str | None = None
    proposedBy: Actor | None = None
    selectionConfirmed: bool | None = None
    selectionConfirmedBy: Actor | None = None
    waitlistDesiredType: str | None = None
    backupRentalType: str | None = None

    @field_validator("sessionId")
    @classmethod
    def blank_session_id_is_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    def sent_fields(self) -> dict[str, Any]:
        """Return only the keys that were present in the payload."""
        return self.model_dump(include=set(self.model_fields_set))


class SessionSnapshotResponse(WireModel):
    """Response of ``GET session-snapshot``."""

    session: SessionUpdatedPayload | None = None


class WaitlistInfoResponse(WireModel):
    """Response of ``GET waitlist-info``. Every field is best-effort."""

    position: int | None = None
    estimatedReadyAt: str | None = None
    upgradeFee: float | None = None


class ConfirmSelectionResponse(WireModel):
    confirmedBy: Actor | None = None


class ActiveAgreementPayload(WireModel):
    """Response of ``GET /v1/agreements/active``."""

    id: str
    version: str
    title: str
    bodyText: str

    @field_validator("version", mode="before")
    @classmethod
    def version_as_text(cls, value: Any) -> Any:
        return str(value) if isinstance(value, (int, float)) else value
