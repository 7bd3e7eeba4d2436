"""Customer screen models consumed by the on-device renderer."""

from dataclasses import dataclass, field
from datetime import datetime

from checkin_kiosk.core.agreement_copy import AGREEMENT_BODY_ES
from checkin_kiosk.core.messages import t
from checkin_kiosk.models.inventory import InventorySnapshot
from checkin_kiosk.models.session import (
    RENTAL_ORDER,
    Actor,
    Language,
    MembershipChoice,
    MembershipStatus,
)
from checkin_kiosk.schemas.state import (
    AgreementResponse,
    CustomerConfirmationResponse,
    CustomerSessionResponse,
    HighlightsResponse,
    KioskStateResponse,
    MembershipOptionResponse,
    ModalsResponse,
    NegotiationResponse,
    PaymentLineResponse,
    PaymentScreenResponse,
    RentalOptionResponse,
    SelectionScreenResponse,
    WaitlistResponse,
)
from checkin_kiosk.services.dispatcher import selection_block_reason
from checkin_kiosk.services.membership import needs_membership_choice, resolve_membership_status
from checkin_kiosk.services.store import KioskState

LOW_AVAILABILITY_THRESHOLD = 5


@dataclass
class RentalOption:
    rental: str
    label: str
    available: int | None
    enabled: bool
    selected: bool = False
    staff_proposed: bool = False
    forced: bool = False
    low_availability: bool = False
    unavailable: bool = False
    notice: str | None = None


@dataclass
class MembershipOption:
    choice: MembershipChoice
    label: str
    enabled: bool
    selected: bool = False
    highlighted: bool = False


@dataclass
class SelectionScreen:
    membership_status: MembershipStatus
    membership_required: bool
    membership_options: list[MembershipOption] = field(default_factory=list)
    rental_options: list[RentalOption] = field(default_factory=list)
    past_due_notice: str | None = None
    proposal_banner: str | None = None

    def text(self) -> list[str]:
        """Every string this screen would show."""
        strings = [option.label for option in self.membership_options]
        for option in self.rental_options:
            strings.append(option.label)
            if option.notice:
                strings.append(option.notice)
        if self.past_due_notice:
            strings.append(self.past_due_notice)
        if self.proposal_banner:
            strings.append(self.proposal_banner)
        return strings


@dataclass
class PaymentLine:
    description: str
    amount: str


@dataclass
class PaymentScreen:
    line_items: list[PaymentLine] = field(default_factory=list)
    total: str | None = None
    notice: str | None = None

    def text(self) -> list[str]:
        strings = []
        for line in self.line_items:
            strings.extend((line.description, line.amount))
        if self.total is not None:
            strings.append(self.total)
        if self.notice:
            strings.append(self.notice)
        return strings


def _money(amount: float) -> str:
    return f"${amount:.2f}"


def ordered_rentals(allowed: list[str]) -> list[str]:
    """Allowed rentals in display order. Types outside the known order follow, as sent."""
    unique = list(dict.fromkeys(allowed))
    known = [rental for rental in RENTAL_ORDER if rental in unique]
    return known + [rental for rental in unique if rental not in RENTAL_ORDER]


def _rental_label(lang, rental: str) -> str:
    key = f"rental.{rental}"
    label = t(lang, key)
    return rental if label == key else label


def build_selection_screen(
    state: KioskState,
    inventory: InventorySnapshot | None,
    now: datetime,
) -> SelectionScreen:
    """Selection screen for the current state.

    Membership options are only marked selected from an explicit choice.
    Rentals stay disabled while past due, while submitting, and until a
    non-member or expired member has picked a membership option.
    """
    session = state.session
    negotiation = state.negotiation
    lang = session.customer_primary_language

    status = resolve_membership_status(
        session.membership_number,
        session.membership_valid_until,
        session.membership_purchase_intent,
        now,
    )
    membership_required = needs_membership_choice(status)
    can_interact = not state.is_submitting and not session.past_due_blocked
    rentals_enabled = selection_block_reason(state, now) is None

    screen = SelectionScreen(membership_status=status, membership_required=membership_required)

    if membership_required:
        screen.membership_options = [
            MembershipOption(
                choice=choice,
                label=t(lang, key),
                enabled=can_interact,
                selected=state.membership_choice == choice,
                highlighted=state.highlighted_membership_choice == choice,
            )
            for choice, key in (
                (MembershipChoice.ONE_TIME, "membership.oneTime"),
                (MembershipChoice.SIX_MONTH, "membership.sixMonth"),
            )
        ]

    for rental in ordered_rentals(session.allowed_rentals):
        available = inventory.available(rental) if inventory else None
        option = RentalOption(
            rental=rental,
            label=_rental_label(lang, rental),
            available=available,
            enabled=rentals_enabled,
            selected=negotiation.selection_confirmed and negotiation.proposed_rental_type == rental,
            staff_proposed=(
                negotiation.proposed_by == Actor.EMPLOYEE
                and negotiation.proposed_rental_type == rental
                and not negotiation.selection_confirmed
            ),
            forced=(
                negotiation.selected_rental == rental
                and negotiation.selection_confirmed
                and negotiation.selection_confirmed_by == Actor.EMPLOYEE
            ),
        )
        if available == 0:
            option.unavailable = True
            option.notice = t(lang, "rentalNotAvailable")
        elif available is not None and available <= LOW_AVAILABILITY_THRESHOLD:
            option.low_availability = True
            option.notice = t(lang, "availability.onlyAvailable").format(count=available)
        screen.rental_options.append(option)

    if session.past_due_blocked:
        screen.past_due_notice = t(lang, "pastDueBlocked")

    if negotiation.proposed_rental_type:
        name = _rental_label(lang, negotiation.proposed_rental_type)
        if negotiation.selection_confirmed:
            screen.proposal_banner = f"{t(lang, 'selection.selected')}: {name}"
        elif negotiation.proposed_by == Actor.EMPLOYEE:
            screen.proposal_banner = f"{t(lang, 'selection.proposedByStaff')}: {name}"

    return screen


def build_payment_screen(state: KioskState) -> PaymentScreen:
    """Payment screen. The decline reason is staff-only; customers get a generic notice."""
    session = state.session
    lang = session.customer_primary_language
    screen = PaymentScreen(
        line_items=[
            PaymentLine(description=item.description, amount=_money(item.amount))
            for item in session.payment_line_items
        ],
    )
    if session.payment_total is not None:
        screen.total = f"{t(lang, 'payment.totalDue')}: {_money(session.payment_total)}"
    if session.payment_failure_reason:
        screen.notice = t(lang, "paymentIssueSeeAttendant")
    return screen


def build_agreement(state: KioskState) -> AgreementResponse | None:
    """Agreement for the renderer. Spanish speakers get the Spanish copy."""
    document = state.agreement
    if document is None:
        return None
    lang = state.session.customer_primary_language
    if lang == Language.ES:
        title, body = t(lang, "agreementTitle"), AGREEMENT_BODY_ES
    else:
        title, body = document.title, document.body_text
    return AgreementResponse(id=document.id, version=document.version, title=title, bodyText=body)


def _value(member) -> str | None:
    return member.value if member is not None else None


def build_state_response(state: KioskState, now: datetime | None = None) -> KioskStateResponse:
    """Project the kiosk aggregate for the renderer."""
    now = now or datetime.now()
    session = state.session
    negotiation = state.negotiation
    lang = session.customer_primary_language

    selection_screen = None
    payment_screen = None
    if session.session_id:
        selection = build_selection_screen(state, state.inventory, now)
        selection_screen = SelectionScreenResponse(
            membershipRequired=selection.membership_required,
            membershipOptions=[
                MembershipOptionResponse(
                    choice=option.choice.value,
                    label=option.label,
                    enabled=option.enabled,
                    selected=option.selected,
                    highlighted=option.highlighted,
                )
                for option in selection.membership_options
            ],
            rentalOptions=[
                RentalOptionResponse(
                    rental=option.rental,
                    label=option.label,
                    available=option.available,
                    enabled=option.enabled,
                    selected=option.selected,
                    staffProposed=option.staff_proposed,
                    forced=option.forced,
                    lowAvailability=option.low_availability,
                    unavailable=option.unavailable,
                    notice=option.notice,
                )
                for option in selection.rental_options
            ],
            pastDueNotice=selection.past_due_notice,
            proposalBanner=selection.proposal_banner,
        )
        payment = build_payment_screen(state)
        payment_screen = PaymentScreenResponse(
            lineItems=[
                PaymentLineResponse(description=line.description, amount=line.amount)
                for line in payment.line_items
            ],
            total=payment.total,
            notice=payment.notice,
        )
        membership_status = selection.membership_status.value
    else:
        membership_status = None

    confirmation = state.customer_confirmation

    return KioskStateResponse(
        revision=state.revision,
        view=state.view,
        session=CustomerSessionResponse(
            sessionId=session.session_id,
            customerName=session.customer_name,
            customerPrimaryLanguage=_value(lang),
            mode=_value(session.mode),
            membershipStatus=membership_status,
            allowedRentals=list(session.allowed_rentals),
            pastDueBlocked=session.past_due_blocked,
            paymentStatus=_value(session.payment_status),
            agreementSigned=session.agreement_signed,
            assignedResourceType=_value(session.assigned_resource_type),
            assignedResourceNumber=session.assigned_resource_number,
            checkoutAt=session.checkout_at,
            blockEndsAt=session.block_ends_at,
            idScanIssue=_value(session.id_scan_issue),
        ),
        negotiation=NegotiationResponse(
            proposedRentalType=negotiation.proposed_rental_type,
            proposedBy=_value(negotiation.proposed_by),
            selectionConfirmed=negotiation.selection_confirmed,
            selectionConfirmedBy=_value(negotiation.selection_confirmed_by),
            selectedRental=negotiation.selected_rental,
            waitlistDesiredType=negotiation.waitlist_desired_type,
            waitlistBackupType=negotiation.waitlist_backup_type,
        ),
        membershipChoice=_value(state.membership_choice),
        isSubmitting=state.is_submitting,
        error=t(lang, state.error_key) if state.error_key else None,
        errorKey=state.error_key,
        modals=ModalsResponse(
            membership=state.show_membership_modal,
            membershipIntent=_value(state.membership_modal_intent),
            waitlist=state.show_waitlist_modal,
            upgradeDisclaimer=state.show_upgrade_disclaimer,
            renewalDisclaimer=state.show_renewal_disclaimer,
            welcomeOverlay=state.show_welcome_overlay,
            customerConfirmation=confirmation is not None,
        ),
        highlights=HighlightsResponse(
            language=_value(state.highlighted_language),
            membership=_value(state.highlighted_membership_choice),
            waitlistBackup=state.highlighted_waitlist_backup,
        ),
        waitlist=WaitlistResponse(
            desiredType=negotiation.waitlist_desired_type,
            backupType=negotiation.waitlist_backup_type,
            position=state.waitlist_info.position,
            estimatedReadyAt=state.waitlist_info.estimated_ready_at,
            upgradeFee=state.waitlist_info.upgrade_fee,
        ),
        customerConfirmation=(
            CustomerConfirmationResponse(
                requestedType=confirmation.requested_type,
                selectedType=confirmation.selected_type,
                selectedNumber=confirmation.selected_number,
            )
            if confirmation
            else None
        ),
        selectionScreen=selection_screen,
        paymentScreen=payment_screen,
        agreement=build_agreement(state),
        agreementError=t(lang, state.agreement_error_key) if state.agreement_error_key else None,
    )
