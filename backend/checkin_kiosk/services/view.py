"""View derivation - which screen the kiosk shows for a given session."""

from dataclasses import dataclass

from checkin_kiosk.models.session import (
    SESSION_STATUS_COMPLETED,
    CheckinMode,
    KioskView,
    PaymentStatus,
    SessionMirror,
)
from checkin_kiosk.services.negotiation import SelectionNegotiation


@dataclass(frozen=True)
class ViewDecision:
    view: KioskView
    reset_session: bool = False


def derive_view(session: SessionMirror, negotiation: SelectionNegotiation) -> ViewDecision:
    """Derive the current view. First matching rule wins.

    The order is a contract:

    1. kiosk acknowledged completion -> idle (locked until the server completes)
    2. ID scan issue -> idle (blocking modal is shown on top)
    3. room/locker assigned -> complete
    4. session completed -> reset, idle
    5. no language yet -> language
    6. past due -> selection (disabled)
    7. paid, unsigned, bypass pending -> agreement-bypass
    8. paid, unsigned, check-in/renewal -> agreement
    9. confirmed and payment due -> payment
    10. active session -> selection
    """
    if session.kiosk_acknowledged_at:
        return ViewDecision(KioskView.IDLE)

    if session.id_scan_issue:
        return ViewDecision(KioskView.IDLE)

    if session.assigned_resource_type and session.assigned_resource_number:
        return ViewDecision(KioskView.COMPLETE)

    if session.status == SESSION_STATUS_COMPLETED:
        return ViewDecision(KioskView.IDLE, reset_session=True)

    if not session.session_id:
        return ViewDecision(KioskView.IDLE)

    if not session.customer_primary_language:
        return ViewDecision(KioskView.LANGUAGE)

    if session.past_due_blocked:
        return ViewDecision(KioskView.SELECTION)

    paid_unsigned = session.payment_status == PaymentStatus.PAID and not session.agreement_signed

    if paid_unsigned and session.agreement_bypass_pending:
        return ViewDecision(KioskView.AGREEMENT_BYPASS)

    if paid_unsigned and session.mode in (CheckinMode.CHECKIN, CheckinMode.RENEWAL):
        return ViewDecision(KioskView.AGREEMENT)

    if negotiation.selection_confirmed and session.payment_status == PaymentStatus.DUE:
        return ViewDecision(KioskView.PAYMENT)

    return ViewDecision(KioskView.SELECTION)
