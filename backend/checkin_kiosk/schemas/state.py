"""Kiosk state schemas - what the local renderer reads."""

from pydantic import BaseModel

from checkin_kiosk.models.session import KioskView
from checkin_kiosk.schemas.base import CamelModel


class CustomerSessionResponse(CamelModel):
    """Customer-safe projection of the session. No payment failure reason."""

    sessionId: str | None
    customerName: str | None = None
    customerPrimaryLanguage: str | None = None
    mode: str | None = None
    membershipStatus: str | None = None
    allowedRentals: list[str] = []
    pastDueBlocked: bool = False
    paymentStatus: str | None = None
    agreementSigned: bool = False
    assignedResourceType: str | None = None
    assignedResourceNumber: str | None = None
    checkoutAt: str | None = None
    blockEndsAt: str | None = None
    idScanIssue: str | None = None


class NegotiationResponse(CamelModel):
    proposedRentalType: str | None = None
    proposedBy: str | None = None
    selectionConfirmed: bool = False
    selectionConfirmedBy: str | None = None
    selectedRental: str | None = None
    waitlistDesiredType: str | None = None
    waitlistBackupType: str | None = None


class RentalOptionResponse(CamelModel):
    rental: str
    label: str
    available: int | None = None
    enabled: bool
    selected: bool
    staffProposed: bool
    forced: bool
    lowAvailability: bool
    unavailable: bool
    notice: str | None = None


class MembershipOptionResponse(CamelModel):
    choice: str
    label: str
    enabled: bool
    selected: bool
    highlighted: bool


class SelectionScreenResponse(CamelModel):
    membershipRequired: bool
    membershipOptions: list[MembershipOptionResponse]
    rentalOptions: list[RentalOptionResponse]
    pastDueNotice: str | None = None
    proposalBanner: str | None = None


class PaymentLineResponse(CamelModel):
    description: str
    amount: str


class PaymentScreenResponse(CamelModel):
    lineItems: list[PaymentLineResponse]
    total: str | None = None
    notice: str | None = None


class WaitlistResponse(CamelModel):
    desiredType: str | None = None
    backupType: str | None = None
    position: int | None = None
    estimatedReadyAt: str | None = None
    upgradeFee: float | None = None


class ModalsResponse(CamelModel):
    membership: bool = False
    membershipIntent: str | None = None
    waitlist: bool = False
    upgradeDisclaimer: bool = False
    renewalDisclaimer: bool = False
    welcomeOverlay: bool = False
    customerConfirmation: bool = False


class CustomerConfirmationResponse(CamelModel):
    requestedType: str
    selectedType: str
    selectedNumber: str


class HighlightsResponse(CamelModel):
    language: str | None = None
    membership: str | None = None
    waitlistBackup: str | None = None


class AgreementResponse(CamelModel):
    """Agreement text in the customer's language."""

    id: str
    version: str
    title: str
    bodyText: str


class KioskStateResponse(CamelModel):
    """Full kiosk state for the renderer."""

    revision: int
    view: KioskView
    session: CustomerSessionResponse
    negotiation: NegotiationResponse
    membershipChoice: str | None = None
    isSubmitting: bool = False
    error: str | None = None
    errorKey: str | None = None
    modals: ModalsResponse
    highlights: HighlightsResponse
    waitlist: WaitlistResponse
    customerConfirmation: CustomerConfirmationResponse | None = None
    selectionScreen: SelectionScreenResponse | None = None
    paymentScreen: PaymentScreenResponse | None = None
    agreement: AgreementResponse | None = None
    agreementError: str | None = None


class ActionResponse(BaseModel):
    """Result of a customer action plus the state it left behind."""

    ok: bool
    state: KioskStateResponse
