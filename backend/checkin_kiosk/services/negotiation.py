"""Rental selection negotiation between the customer kiosk and the employee register."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from checkin_kiosk.models.session import Actor
from checkin_kiosk.services.errors import NegotiationError, RentalUnavailable


class NegotiationPhase(str, Enum):
    """Where the selection stands."""

    NONE = "NONE"              # Nothing proposed
    PROPOSED = "PROPOSED"      # Offered by one side, not yet confirmed
    CONFIRMED = "CONFIRMED"    # Locked in (by either side, or forced by staff)
    WAITLISTED = "WAITLISTED"  # First choice sold out, backup pending


@dataclass
class SelectionNegotiation:
    """Proposal / confirmation state for the rental selection.

    Customer proposals of a sold-out rental divert to the waitlist sub-flow.
    An employee force always wins over a pending customer proposal.
    """

    proposed_rental_type: str | None = None
    proposed_by: Actor | None = None
    selection_confirmed: bool = False
    selection_confirmed_by: Actor | None = None
    selected_rental: str | None = None
    selection_acknowledged: bool = False

    waitlist_desired_type: str | None = None
    waitlist_backup_type: str | None = None
    upgrade_disclaimer_acknowledged: bool = False

    @property
    def phase(self) -> NegotiationPhase:
        if self.selection_confirmed and self.proposed_rental_type:
            return NegotiationPhase.CONFIRMED
        if self.waitlist_desired_type and not self.upgrade_disclaimer_acknowledged:
            return NegotiationPhase.WAITLISTED
        if self.proposed_rental_type:
            return NegotiationPhase.PROPOSED
        return NegotiationPhase.NONE

    def propose(self, rental: str, by: Actor, available: int | None = None) -> NegotiationPhase:
        """Offer a rental. ``available`` is the current inventory count, if known."""
        if self.selection_confirmed:
            raise NegotiationError("Selection is already confirmed")

        if by == Actor.CUSTOMER and available == 0:
            self.waitlist_desired_type = rental
            self.waitlist_backup_type = None
            self.upgrade_disclaimer_acknowledged = False
            return NegotiationPhase.WAITLISTED

        self.proposed_rental_type = rental
        self.proposed_by = by
        return self.phase

    def confirm(self, by: Actor) -> None:
        if not self.proposed_rental_type:
            raise NegotiationError("Nothing has been proposed")
        self.selection_confirmed = True
        self.selection_confirmed_by = by

    def force(self, rental: str) -> None:
        """Employee override from any phase."""
        self.proposed_rental_type = rental
        self.proposed_by = Actor.EMPLOYEE
        self.selected_rental = rental
        self.selection_confirmed = True
        self.selection_confirmed_by = Actor.EMPLOYEE
        self.selection_acknowledged = True

    def lock(self, rental: str, confirmed_by: Actor) -> None:
        """Server reported the selection as locked."""
        self.proposed_rental_type = rental
        if self.proposed_by is None:
            self.proposed_by = confirmed_by
        self.selected_rental = rental
        self.selection_confirmed = True
        self.selection_confirmed_by = confirmed_by
        self.selection_acknowledged = True

    def choose_backup(self, rental: str, available: int | None = None) -> None:
        if not self.waitlist_desired_type:
            raise NegotiationError("No waitlist in progress")
        if available == 0:
            raise RentalUnavailable(f"{rental} is not available")
        self.waitlist_backup_type = rental

    def acknowledge_upgrade_disclaimer(self) -> str:
        """Accept the upgrade terms. Returns the backup rental to propose."""
        if not self.waitlist_desired_type or not self.waitlist_backup_type:
            raise NegotiationError("Pick a backup rental first")
        self.upgrade_disclaimer_acknowledged = True
        return self.waitlist_backup_type

    def cancel_waitlist(self) -> None:
        self.waitlist_desired_type = None
        self.waitlist_backup_type = None
        self.upgrade_disclaimer_acknowledged = False

    def merge_payload(self, values: dict[str, Any]) -> None:
        """Copy side-channel fields from a snapshot, only for keys it sent."""
        if values.get("proposedRentalType"):
            self.proposed_rental_type = values["proposedRentalType"]
            self.proposed_by = values.get("proposedBy")
        if "waitlistDesiredType" in values:
            self.waitlist_desired_type = values["waitlistDesiredType"] or None
        if "backupRentalType" in values:
            self.waitlist_backup_type = values["backupRentalType"] or None
        if "selectionConfirmed" in values and values["selectionConfirmed"] is not None:
            confirmed = bool(values["selectionConfirmed"])
            # A confirmation without anything proposed is not representable
            if confirmed and not self.proposed_rental_type:
                return
            self.selection_confirmed = confirmed
            self.selection_confirmed_by = values.get("selectionConfirmedBy") if confirmed else None
