"""Kiosk state store - the single aggregate for session, negotiation and UI flags."""

from dataclasses import asdict, dataclass, field
from typing import Callable

from checkin_kiosk.core.logging import get_logger
from checkin_kiosk.models.inventory import InventorySnapshot
from checkin_kiosk.models.session import (
    KioskView,
    Language,
    MembershipChoice,
    MembershipPurchaseIntent,
    SessionMirror,
    merge_session_fields,
)
from checkin_kiosk.schemas.session import SessionUpdatedPayload
from checkin_kiosk.services.negotiation import SelectionNegotiation
from checkin_kiosk.services.view import derive_view

logger = get_logger(__name__)


@dataclass
class CustomerConfirmationRequest:
    """Staff picked a different rental than requested; customer must accept."""

    session_id: str
    requested_type: str
    selected_type: str
    selected_number: str


@dataclass
class AgreementDocument:
    """Active agreement as served (English). Localized when projected."""

    id: str
    version: str
    title: str
    body_text: str


@dataclass
class WaitlistInfo:
    position: int | None = None
    estimated_ready_at: str | None = None
    upgrade_fee: float | None = None


@dataclass
class KioskState:
    """Everything the kiosk knows. ``view`` is always derived, never set directly."""

    session: SessionMirror = field(default_factory=SessionMirror)
    negotiation: SelectionNegotiation = field(default_factory=SelectionNegotiation)
    view: KioskView = KioskView.IDLE
    inventory: InventorySnapshot | None = None

    # Explicit membership choice for this session. Never defaulted.
    membership_choice: MembershipChoice | None = None
    membership_modal_intent: MembershipPurchaseIntent | None = None
    show_membership_modal: bool = False

    is_submitting: bool = False
    error_key: str | None = None

    # Employee-side highlight hints
    highlighted_language: Language | None = None
    highlighted_membership_choice: MembershipChoice | None = None
    highlighted_waitlist_backup: str | None = None

    customer_confirmation: CustomerConfirmationRequest | None = None

    waitlist_info: WaitlistInfo = field(default_factory=WaitlistInfo)
    show_waitlist_modal: bool = False
    show_upgrade_disclaimer: bool = False
    show_renewal_disclaimer: bool = False
    show_welcome_overlay: bool = False

    # Agreement text for the current session, loaded on the agreement screen
    agreement: AgreementDocument | None = None
    agreement_error_key: str | None = None

    revision: int = 0


Listener = Callable[[KioskState], None]


def _fingerprint(state: KioskState) -> dict:
    data = asdict(state)
    data.pop("revision")
    return data


class KioskStore:
    """Holds the kiosk aggregate. All mutation goes through ``commit``.

    After every mutation the store re-applies the invariants (membership
    choice follows the session, the view is re-derived, a completed session
    is cleared) and notifies listeners if anything changed.
    """

    def __init__(self) -> None:
        self._state = KioskState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> KioskState:
        """Current state. Treat as read-only outside ``commit``."""
        return self._state

    @property
    def session_id(self) -> str | None:
        return self._state.session.session_id

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def commit(self, mutate: Callable[[KioskState], None], reason: str = "update") -> bool:
        """Apply a mutation and re-derive. Returns True when the state changed."""
        state = self._state
        before = _fingerprint(state)
        prev_session_id = state.session.session_id
        prev_choice = state.session.membership_choice

        mutate(state)
        self._reconcile(prev_session_id, prev_choice)

        if _fingerprint(state) == before:
            return False

        state.revision += 1
        logger.debug(
            "Kiosk state changed",
            reason=reason,
            revision=state.revision,
            view=state.view.value,
            session_id=state.session.session_id,
        )
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error("State listener failed", reason=reason, error=str(e))
        return True

    def apply_snapshot(self, payload: SessionUpdatedPayload) -> bool:
        """Merge a session snapshot (full or partial) into the mirror."""
        values = payload.sent_fields()

        def mutate(state: KioskState) -> None:
            if payload.sessionId is not None and payload.sessionId != state.session.session_id:
                # New customer: nothing from the previous session carries over
                _clear_session(state)
            merge_session_fields(state.session, values)
            state.negotiation.merge_payload(values)

        return self.commit(mutate, reason="snapshot")

    def reset_to_idle(self, reason: str = "reset") -> bool:
        return self.commit(_clear_session, reason=reason)

    def _reconcile(self, prev_session_id: str | None, prev_choice: MembershipChoice | None) -> None:
        state = self._state
        session_changed = state.session.session_id != prev_session_id
        if session_changed:
            state.membership_choice = None

        server_choice = state.session.membership_choice
        if server_choice is not None and (session_changed or server_choice != prev_choice):
            state.membership_choice = server_choice

        decision = derive_view(state.session, state.negotiation)
        if decision.reset_session:
            _clear_session(state)
        state.view = decision.view


def _clear_session(state: KioskState) -> None:
    """Blank everything tied to a customer session. Inventory and the
    in-flight submission guard are lane-level and survive."""
    state.session = SessionMirror()
    state.negotiation = SelectionNegotiation()
    state.view = KioskView.IDLE
    state.membership_choice = None
    state.membership_modal_intent = None
    state.show_membership_modal = False
    state.error_key = None
    state.highlighted_language = None
    state.highlighted_membership_choice = None
    state.highlighted_waitlist_backup = None
    state.customer_confirmation = None
    state.waitlist_info = WaitlistInfo()
    state.show_waitlist_modal = False
    state.show_upgrade_disclaimer = False
    state.show_renewal_disclaimer = False
    state.show_welcome_overlay = False
    state.agreement = None
    state.agreement_error_key = None
