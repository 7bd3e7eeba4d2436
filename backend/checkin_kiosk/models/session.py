"""Session mirror model - the kiosk's local copy of the server-held lane session."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Language(str, Enum):
    """Customer primary language."""

    EN = "EN"
    ES = "ES"


class Actor(str, Enum):
    """Who proposed or confirmed a selection."""

    CUSTOMER = "CUSTOMER"
    EMPLOYEE = "EMPLOYEE"


class MembershipChoice(str, Enum):
    """Membership option picked for this visit."""

    ONE_TIME = "ONE_TIME"
    SIX_MONTH = "SIX_MONTH"


class MembershipPurchaseIntent(str, Enum):
    """In-flight membership purchase or renewal."""

    PURCHASE = "PURCHASE"
    RENEW = "RENEW"
    NONE = "NONE"      # Wire value that clears the intent


class MembershipStatus(str, Enum):
    """Customer membership status as displayed on the kiosk."""

    NON_MEMBER = "NON_MEMBER"
    PENDING = "PENDING"    # Purchase/renewal requested, not yet paid
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"


class CheckinMode(str, Enum):
    """Visit mode - both require an agreement step."""

    CHECKIN = "CHECKIN"
    RENEWAL = "RENEWAL"


class PaymentStatus(str, Enum):
    DUE = "DUE"
    PAID = "PAID"


class ResourceType(str, Enum):
    ROOM = "room"
    LOCKER = "locker"


class IdScanIssue(str, Enum):
    ID_EXPIRED = "ID_EXPIRED"
    UNDERAGE = "UNDERAGE"


class KioskView(str, Enum):
    """The screen the kiosk is showing. Exactly one is current."""

    IDLE = "idle"
    LANGUAGE = "language"
    SELECTION = "selection"
    PAYMENT = "payment"
    AGREEMENT = "agreement"
    AGREEMENT_BYPASS = "agreement-bypass"
    COMPLETE = "complete"


# Rental categories in display order
RENTAL_ORDER = ("LOCKER", "STANDARD", "DOUBLE", "SPECIAL")
LOCKER_RENTALS = frozenset({"LOCKER", "GYM_LOCKER"})

SESSION_STATUS_COMPLETED = "COMPLETED"


@dataclass
class PaymentLineItem:
    description: str
    amount: float


@dataclass
class SessionMirror:
    """Client-side mirror of the lane session. The server is authoritative."""

    session_id: str | None = None
    customer_name: str | None = None
    status: str | None = None
    visit_id: str | None = None
    mode: CheckinMode | None = None
    block_ends_at: str | None = None

    # Membership
    membership_number: str | None = None
    membership_valid_until: str | None = None  # YYYY-MM-DD, inclusive
    membership_purchase_intent: MembershipPurchaseIntent | None = None
    membership_choice: MembershipChoice | None = None

    allowed_rentals: list[str] = field(default_factory=list)
    customer_primary_language: Language | None = None

    # Past due
    past_due_blocked: bool = False
    past_due_balance: float | None = None

    # Payment (failure reason is staff-only)
    payment_status: PaymentStatus | None = None
    payment_total: float | None = None
    payment_line_items: list[PaymentLineItem] = field(default_factory=list)
    payment_failure_reason: str | None = None

    # Agreement
    agreement_signed: bool = False
    agreement_bypass_pending: bool = False
    agreement_signed_method: str | None = None

    # Assignment
    assigned_resource_type: ResourceType | None = None
    assigned_resource_number: str | None = None
    checkout_at: str | None = None

    kiosk_acknowledged_at: str | None = None
    id_scan_issue: IdScanIssue | None = None

    @property
    def is_active(self) -> bool:
        return self.session_id is not None and self.status != SESSION_STATUS_COMPLETED


# Wire key -> mirror attribute. Only keys present in a payload are merged.
SESSION_FIELD_MAP: dict[str, str] = {
    "sessionId": "session_id",
    "customerName": "customer_name",
    "status": "status",
    "visitId": "visit_id",
    "mode": "mode",
    "blockEndsAt": "block_ends_at",
    "membershipNumber": "membership_number",
    "customerMembershipValidUntil": "membership_valid_until",
    "membershipPurchaseIntent": "membership_purchase_intent",
    "membershipChoice": "membership_choice",
    "allowedRentals": "allowed_rentals",
    "customerPrimaryLanguage": "customer_primary_language",
    "pastDueBlocked": "past_due_blocked",
    "pastDueBalance": "past_due_balance",
    "paymentStatus": "payment_status",
    "paymentTotal": "payment_total",
    "paymentLineItems": "payment_line_items",
    "paymentFailureReason": "payment_failure_reason",
    "agreementSigned": "agreement_signed",
    "agreementBypassPending": "agreement_bypass_pending",
    "agreementSignedMethod": "agreement_signed_method",
    "assignedResourceType": "assigned_resource_type",
    "assignedResourceNumber": "assigned_resource_number",
    "checkoutAt": "checkout_at",
    "kioskAcknowledgedAt": "kiosk_acknowledged_at",
    "idScanIssue": "id_scan_issue",
}

# Fields whose "cleared" value is not None
_EMPTY_VALUES: dict[str, Any] = {
    "allowed_rentals": [],
    "payment_line_items": [],
    "past_due_blocked": False,
    "agreement_signed": False,
    "agreement_bypass_pending": False,
}


def merge_session_fields(mirror: SessionMirror, values: dict[str, Any]) -> None:
    """Merge present wire keys into the mirror in place.

    ``values`` must contain only keys that were actually sent. A key sent as
    null clears the field; an absent key leaves it untouched.
    """
    for wire_key, value in values.items():
        attr = SESSION_FIELD_MAP.get(wire_key)
        if attr is None:
            continue
        if value is None:
            value = _EMPTY_VALUES.get(attr)
            if isinstance(value, list):
                value = []
        elif attr == "membership_purchase_intent" and value == MembershipPurchaseIntent.NONE:
            value = None
        elif attr == "payment_line_items":
            value = [
                item
                if isinstance(item, PaymentLineItem)
                else PaymentLineItem(description=item["description"], amount=item["amount"])
                for item in value
            ]
        elif attr == "allowed_rentals":
            value = list(value)
        setattr(mirror, attr, value)
