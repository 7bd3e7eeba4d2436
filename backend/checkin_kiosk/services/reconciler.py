"""Event reconciler - applies inbound lane messages to the kiosk store."""

import json
from typing import Any, Callable

from pydantic import BaseModel, ValidationError

from checkin_kiosk.core.logging import get_logger
from checkin_kiosk.models.session import Language, MembershipChoice, ResourceType
from checkin_kiosk.schemas.session import SessionUpdatedPayload
from checkin_kiosk.schemas.websocket import (
    AssignmentCreatedPayload,
    CheckinOptionHighlightedPayload,
    CustomerConfirmationRequiredPayload,
    InventoryUpdatedPayload,
    SelectionAcknowledgedPayload,
    SelectionForcedPayload,
    SelectionLockedPayload,
    SelectionProposedPayload,
    WSEnvelope,
    WSMessageType,
    inbound_event_adapter,
)
from checkin_kiosk.services.store import CustomerConfirmationRequest, KioskState, KioskStore

logger = get_logger(__name__)


class EventReconciler:
    """
    Routes each inbound message to exactly one handler keyed by its type.

    Parsing is fail-soft: malformed JSON, bad envelopes and schema-invalid
    payloads are logged and dropped without touching state. Point events for
    a session other than the one being tracked are discarded.
    """

    def __init__(
        self,
        store: KioskStore,
        on_inventory_update: Callable[[InventoryUpdatedPayload], None] | None = None,
    ) -> None:
        self._store = store
        self._on_inventory_update = on_inventory_update
        self._handlers: dict[WSMessageType, Callable[[Any], None]] = {
            WSMessageType.SESSION_UPDATED: self._on_session_updated,
            WSMessageType.SELECTION_PROPOSED: self._on_selection_proposed,
            WSMessageType.SELECTION_LOCKED: self._on_selection_locked,
            WSMessageType.SELECTION_FORCED: self._on_selection_forced,
            WSMessageType.SELECTION_ACKNOWLEDGED: self._on_selection_acknowledged,
            WSMessageType.CHECKIN_OPTION_HIGHLIGHTED: self._on_option_highlighted,
            WSMessageType.CUSTOMER_CONFIRMATION_REQUIRED: self._on_confirmation_required,
            WSMessageType.ASSIGNMENT_CREATED: self._on_assignment_created,
            WSMessageType.INVENTORY_UPDATED: self._on_inventory_updated,
        }

    @property
    def handled_types(self) -> frozenset[WSMessageType]:
        return frozenset(self._handlers)

    def handle_raw(self, raw: str | bytes | dict[str, Any]) -> bool:
        """Parse and apply one push frame. Returns True if it was applied."""
        if isinstance(raw, (str, bytes)):
            try:
                raw = json.loads(raw)
            except ValueError as e:
                logger.warning("Dropped malformed message", error=str(e))
                return False

        try:
            envelope = WSEnvelope.model_validate(raw)
        except ValidationError as e:
            logger.warning("Dropped message with invalid envelope", error=str(e))
            return False

        try:
            message_type = WSMessageType(envelope.type)
        except ValueError:
            logger.debug("Ignored message of unknown type", type=envelope.type)
            return False

        try:
            event = inbound_event_adapter.validate_python(raw)
        except ValidationError as e:
            logger.warning("Dropped invalid payload", type=message_type.value, error=str(e))
            return False

        logger.debug("Lane message received", type=message_type.value)
        self._handlers[message_type](event.payload)
        return True

    def apply_snapshot(self, payload: SessionUpdatedPayload) -> None:
        """Entry point shared by push SESSION_UPDATED and polled snapshots."""
        self._store.apply_snapshot(payload)

    def _is_current(self, payload: BaseModel) -> bool:
        session_id = getattr(payload, "sessionId", None)
        current = self._store.session_id
        if current is None or session_id != current:
            logger.info(
                "Discarded event for another session",
                event_session_id=session_id,
                current_session_id=current,
            )
            return False
        return True

    # Handlers

    def _on_session_updated(self, payload: SessionUpdatedPayload) -> None:
        self.apply_snapshot(payload)

    def _on_selection_proposed(self, payload: SelectionProposedPayload) -> None:
        if not self._is_current(payload):
            return

        def mutate(state: KioskState) -> None:
            if state.negotiation.selection_confirmed:
                return
            state.negotiation.proposed_rental_type = payload.rentalType
            state.negotiation.proposed_by = payload.proposedBy

        self._store.commit(mutate, reason="selection-proposed")

    def _on_selection_locked(self, payload: SelectionLockedPayload) -> None:
        if not self._is_current(payload):
            return
        self._store.commit(
            lambda state: state.negotiation.lock(payload.rentalType, payload.confirmedBy),
            reason="selection-locked",
        )

    def _on_selection_forced(self, payload: SelectionForcedPayload) -> None:
        if not self._is_current(payload):
            return
        self._store.commit(
            lambda state: state.negotiation.force(payload.rentalType),
            reason="selection-forced",
        )

    def _on_selection_acknowledged(self, payload: SelectionAcknowledgedPayload) -> None:
        if not self._is_current(payload):
            return

        def mutate(state: KioskState) -> None:
            state.negotiation.selection_acknowledged = True

        self._store.commit(mutate, reason="selection-acknowledged")

    def _on_option_highlighted(self, payload: CheckinOptionHighlightedPayload) -> None:
        if not self._is_current(payload):
            return
        option = payload.option

        def mutate(state: KioskState) -> None:
            if payload.step == "LANGUAGE":
                state.highlighted_language = Language(option) if option in ("EN", "ES") else None
            elif payload.step == "MEMBERSHIP":
                state.highlighted_membership_choice = (
                    MembershipChoice(option) if option in ("ONE_TIME", "SIX_MONTH") else None
                )
            elif payload.step == "WAITLIST_BACKUP":
                state.highlighted_waitlist_backup = option

        self._store.commit(mutate, reason="option-highlighted")

    def _on_confirmation_required(self, payload: CustomerConfirmationRequiredPayload) -> None:
        if not self._is_current(payload):
            return

        def mutate(state: KioskState) -> None:
            state.customer_confirmation = CustomerConfirmationRequest(
                session_id=payload.sessionId,
                requested_type=payload.requestedType,
                selected_type=payload.selectedType,
                selected_number=payload.selectedNumber,
            )

        self._store.commit(mutate, reason="confirmation-required")

    def _on_assignment_created(self, payload: AssignmentCreatedPayload) -> None:
        if not self._is_current(payload):
            return
        if payload.roomNumber:
            resource_type, number = ResourceType.ROOM, payload.roomNumber
        elif payload.lockerNumber:
            resource_type, number = ResourceType.LOCKER, payload.lockerNumber
        else:
            logger.warning("Assignment without room or locker number", session_id=payload.sessionId)
            return

        def mutate(state: KioskState) -> None:
            state.session.assigned_resource_type = resource_type
            state.session.assigned_resource_number = number

        self._store.commit(mutate, reason="assignment-created")

    def _on_inventory_updated(self, payload: InventoryUpdatedPayload) -> None:
        if self._on_inventory_update is not None:
            self._on_inventory_update(payload)
