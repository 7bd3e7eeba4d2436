"""Action dispatcher - customer taps become server commands plus optimistic writes."""

from datetime import datetime
from typing import Awaitable, Callable

from checkin_kiosk.core.logging import get_logger
from checkin_kiosk.models.session import (
    Actor,
    Language,
    MembershipChoice,
    MembershipPurchaseIntent,
    MembershipStatus,
)
from checkin_kiosk.services.api_client import LaneApiClient
from checkin_kiosk.services.errors import (
    CommandError,
    LanguageRequired,
    NegotiationError,
    RentalUnavailable,
)
from checkin_kiosk.services.membership import needs_membership_choice, resolve_membership_status
from checkin_kiosk.services.store import KioskState, KioskStore, WaitlistInfo

logger = get_logger(__name__)


def selection_block_reason(state: KioskState, now: datetime) -> str | None:
    """Why rental selection is disabled right now, or None when it is open."""
    session = state.session
    if session.past_due_blocked:
        return "past-due"
    if state.is_submitting:
        return "submitting"
    status = resolve_membership_status(
        session.membership_number,
        session.membership_valid_until,
        session.membership_purchase_intent,
        now,
    )
    if needs_membership_choice(status) and state.membership_choice is None:
        return "membership-choice-required"
    return None


def _record_confirmation(state: KioskState, rental: str, confirmed_by: Actor) -> None:
    """Mirror an accepted customer proposal locally."""
    negotiation = state.negotiation
    if negotiation.selection_confirmed:
        # A lock or force from the register landed first; it stands
        return
    negotiation.propose(rental, Actor.CUSTOMER)
    negotiation.confirm(confirmed_by)


class ActionDispatcher:
    """
    Turns customer actions into lane commands.

    Every action is refused while another is in flight, and refused locally
    when no session is active. Failures never propagate: a LANGUAGE_REQUIRED
    rejection sends the customer to the language screen, anything else sets
    a generic message key. Optimistic writes touch one or two fields and are
    skipped if the session changed while the request was out.
    """

    def __init__(
        self,
        store: KioskStore,
        api: LaneApiClient,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._store = store
        self._api = api
        self._clock = clock

    @property
    def state(self) -> KioskState:
        return self._store.state

    async def _run(
        self,
        action: str,
        call: Callable[[str], Awaitable[None]],
        error_key: str = "error.process",
    ) -> bool:
        if self.state.is_submitting:
            logger.debug("Action ignored while submitting", action=action)
            return False

        session_id = self._store.session_id
        if not session_id:
            self._set_error("error.noActiveSession")
            logger.info("Action refused without a session", action=action)
            return False

        def begin(state: KioskState) -> None:
            state.is_submitting = True
            state.error_key = None

        self._store.commit(begin, reason=f"{action}-start")
        try:
            await call(session_id)
            return True
        except LanguageRequired:
            logger.info("Language required before action", action=action)
            if self._same_session(session_id):
                self._store.commit(_require_language, reason="language-required")
            return False
        except RentalUnavailable as e:
            logger.info("Rental unavailable", action=action, error=str(e))
            self._set_error("error.rentalNotAvailable", session_id)
            return False
        except (CommandError, NegotiationError) as e:
            logger.warning("Action failed", action=action, error=str(e))
            self._set_error(error_key, session_id)
            return False
        finally:
            def end(state: KioskState) -> None:
                state.is_submitting = False

            self._store.commit(end, reason=f"{action}-end")

    def _same_session(self, session_id: str) -> bool:
        return self._store.session_id == session_id

    def _set_error(self, key: str, session_id: str | None = None) -> None:
        if session_id is not None and not self._same_session(session_id):
            return

        def mutate(state: KioskState) -> None:
            state.error_key = key

        self._store.commit(mutate, reason="error")

    def _apply(self, session_id: str, mutate: Callable[[KioskState], None], reason: str) -> None:
        """Optimistic write, dropped if the session moved on meanwhile."""
        if not self._same_session(session_id):
            logger.info("Late response ignored", reason=reason, session_id=session_id)
            return
        self._store.commit(mutate, reason=reason)

    def clear_error(self) -> None:
        def mutate(state: KioskState) -> None:
            state.error_key = None

        self._store.commit(mutate, reason="clear-error")

    # Language

    async def select_language(self, language: Language) -> bool:
        async def call(session_id: str) -> None:
            await self._api.set_language(session_id, language, self.state.session.customer_name)

            def mutate(state: KioskState) -> None:
                state.session.customer_primary_language = language

            self._apply(session_id, mutate, reason="language-set")

        return await self._run("set-language", call, error_key="error.setLanguage")

    # Rental selection

    async def select_rental(self, rental: str) -> bool:
        reason = selection_block_reason(self.state, self._clock()) if self._store.session_id else None
        if reason is not None:
            logger.info("Rental selection blocked", rental=rental, reason=reason)
            return False

        inventory = self.state.inventory
        available = inventory.available(rental) if inventory else None
        if available == 0:
            return await self._run("waitlist", lambda sid: self._enter_waitlist(sid, rental))

        async def call(session_id: str) -> None:
            if self.state.negotiation.selection_confirmed:
                raise NegotiationError("Selection is already confirmed")
            await self._api.propose_selection(rental, Actor.CUSTOMER)
            confirmed_by = await self._api.confirm_selection(Actor.CUSTOMER)
            self._apply(
                session_id,
                lambda state: _record_confirmation(state, rental, confirmed_by),
                reason="selection-confirmed",
            )

        return await self._run("select-rental", call, error_key="error.processSelection")

    async def _enter_waitlist(self, session_id: str, rental: str) -> None:
        try:
            await self._api.set_waitlist_desired(session_id, rental)
        except LanguageRequired:
            raise
        except CommandError as e:
            # Desired type is advisory for the register
            logger.warning("Waitlist desired type not recorded", rental=rental, error=str(e))

        info = None
        current_tier = self.state.negotiation.selected_rental or "LOCKER"
        try:
            info = await self._api.get_waitlist_info(rental, current_tier)
        except CommandError as e:
            logger.warning("Waitlist info unavailable", rental=rental, error=str(e))

        def mutate(state: KioskState) -> None:
            state.negotiation.propose(rental, Actor.CUSTOMER, available=0)
            state.waitlist_info = WaitlistInfo(
                position=info.position if info else None,
                estimated_ready_at=info.estimatedReadyAt if info else None,
                upgrade_fee=info.upgradeFee if info else None,
            )
            state.show_waitlist_modal = True

        self._apply(session_id, mutate, reason="waitlist-entered")

    async def select_waitlist_backup(self, rental: str) -> bool:
        async def call(session_id: str) -> None:
            inventory = self.state.inventory
            available = inventory.available(rental) if inventory else None

            def mutate(state: KioskState) -> None:
                state.negotiation.choose_backup(rental, available)
                state.show_waitlist_modal = False
                state.show_upgrade_disclaimer = True

            self._store.commit(mutate, reason="waitlist-backup")

        return await self._run("waitlist-backup", call, error_key="error.processSelection")

    async def acknowledge_upgrade_disclaimer(self) -> bool:
        async def call(session_id: str) -> None:
            negotiation = self.state.negotiation
            desired = negotiation.waitlist_desired_type
            backup = negotiation.waitlist_backup_type
            if not desired or not backup:
                raise NegotiationError("Pick a backup rental first")

            await self._api.propose_selection(
                backup,
                Actor.CUSTOMER,
                waitlist_desired_type=desired,
                backup_rental_type=backup,
            )
            confirmed_by = await self._api.confirm_selection(Actor.CUSTOMER)

            def mutate(state: KioskState) -> None:
                state.negotiation.acknowledge_upgrade_disclaimer()
                _record_confirmation(state, backup, confirmed_by)
                state.show_upgrade_disclaimer = False

            self._apply(session_id, mutate, reason="upgrade-acknowledged")

        return await self._run("upgrade-disclaimer", call, error_key="error.processSelection")

    def close_upgrade_disclaimer(self) -> None:
        def mutate(state: KioskState) -> None:
            state.show_upgrade_disclaimer = False

        self._store.commit(mutate, reason="upgrade-disclaimer-closed")

    async def cancel_waitlist(self) -> bool:
        async def call(session_id: str) -> None:
            try:
                await self._api.set_waitlist_desired(session_id, None)
            finally:
                def mutate(state: KioskState) -> None:
                    state.negotiation.cancel_waitlist()
                    state.highlighted_waitlist_backup = None
                    state.waitlist_info = WaitlistInfo()
                    state.show_waitlist_modal = False
                    state.show_upgrade_disclaimer = False

                self._apply(session_id, mutate, reason="waitlist-cancelled")

        return await self._run("waitlist-cancel", call)

    # Membership

    async def select_one_time_membership(self) -> bool:
        async def call(session_id: str) -> None:
            if self.state.session.membership_purchase_intent is not None:
                await self._api.set_membership_purchase_intent(session_id, MembershipPurchaseIntent.NONE)
            await self._api.set_membership_choice(session_id, MembershipChoice.ONE_TIME)

            def mutate(state: KioskState) -> None:
                state.membership_choice = MembershipChoice.ONE_TIME
                state.session.membership_purchase_intent = None

            self._apply(session_id, mutate, reason="membership-one-time")

        return await self._run("membership-one-time", call)

    def open_six_month_membership(self) -> bool:
        """Open the membership modal. Expired members renew; everyone else purchases."""
        session = self.state.session
        if not session.session_id:
            self._set_error("error.noActiveSession")
            return False
        status = resolve_membership_status(
            session.membership_number,
            session.membership_valid_until,
            session.membership_purchase_intent,
            self._clock(),
        )
        intent = (
            MembershipPurchaseIntent.RENEW
            if status == MembershipStatus.EXPIRED
            else MembershipPurchaseIntent.PURCHASE
        )

        def mutate(state: KioskState) -> None:
            state.membership_modal_intent = intent
            state.show_membership_modal = True

        self._store.commit(mutate, reason="membership-modal-opened")
        return True

    async def continue_membership_purchase(self) -> bool:
        intent = self.state.membership_modal_intent
        if intent is None:
            logger.info("Membership continue without an open modal")
            return False

        async def call(session_id: str) -> None:
            await self._api.set_membership_purchase_intent(session_id, intent)
            await self._api.set_membership_choice(session_id, MembershipChoice.SIX_MONTH)

            def mutate(state: KioskState) -> None:
                state.session.membership_purchase_intent = intent
                state.membership_choice = MembershipChoice.SIX_MONTH
                state.show_membership_modal = False
                state.membership_modal_intent = None

            self._apply(session_id, mutate, reason="membership-six-month")

        return await self._run("membership-purchase", call)

    def close_membership_modal(self) -> None:
        def mutate(state: KioskState) -> None:
            state.show_membership_modal = False
            state.membership_modal_intent = None

        self._store.commit(mutate, reason="membership-modal-closed")

    async def clear_membership_purchase_intent(self) -> bool:
        async def call(session_id: str) -> None:
            await self._api.set_membership_purchase_intent(session_id, MembershipPurchaseIntent.NONE)

            def mutate(state: KioskState) -> None:
                state.session.membership_purchase_intent = None
                if state.membership_choice == MembershipChoice.SIX_MONTH:
                    state.membership_choice = None

            self._apply(session_id, mutate, reason="membership-intent-cleared")

        return await self._run("membership-intent-clear", call)

    # Staff-initiated confirmation

    async def respond_to_customer_confirmation(self, confirmed: bool) -> bool:
        request = self.state.customer_confirmation
        if request is None:
            logger.info("No confirmation pending")
            return False

        async def call(session_id: str) -> None:
            await self._api.customer_confirm(request.session_id, confirmed)

            def mutate(state: KioskState) -> None:
                state.customer_confirmation = None

            self._apply(session_id, mutate, reason="customer-confirmed")

        return await self._run("customer-confirm", call, error_key="error.confirmSelection")

    # Agreement and completion

    async def sign_agreement(self, signature_payload: str) -> bool:
        if not signature_payload or not signature_payload.strip():
            self._set_error("error.signatureRequired")
            return False

        async def call(session_id: str) -> None:
            await self._api.sign_agreement(session_id, signature_payload)

            def mutate(state: KioskState) -> None:
                state.session.agreement_signed = True

            self._apply(session_id, mutate, reason="agreement-signed")

        return await self._run("sign-agreement", call, error_key="error.signAgreement")

    def open_renewal_disclaimer(self) -> None:
        def mutate(state: KioskState) -> None:
            state.show_renewal_disclaimer = True

        self._store.commit(mutate, reason="renewal-disclaimer-opened")

    def close_renewal_disclaimer(self) -> None:
        def mutate(state: KioskState) -> None:
            state.show_renewal_disclaimer = False

        self._store.commit(mutate, reason="renewal-disclaimer-closed")

    async def acknowledge_completion(self) -> bool:
        async def call(session_id: str) -> None:
            await self._api.kiosk_ack()

            def mutate(state: KioskState) -> None:
                state.session.kiosk_acknowledged_at = self._clock().isoformat()

            self._apply(session_id, mutate, reason="kiosk-acknowledged")

        return await self._run("kiosk-ack", call)

    async def dismiss_id_scan_issue(self) -> bool:
        async def call(session_id: str) -> None:
            await self._api.reset()
            if self._same_session(session_id):
                self._store.reset_to_idle(reason="id-scan-dismissed")

        return await self._run("id-scan-dismiss", call)


def _require_language(state: KioskState) -> None:
    state.session.customer_primary_language = None
    state.error_key = None