"""Membership status resolution."""

from datetime import date, datetime

from checkin_kiosk.models.session import MembershipPurchaseIntent, MembershipStatus


def _parse_valid_until(value: date | str | None) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def resolve_membership_status(
    membership_number: str | None,
    membership_valid_until: date | str | None,
    membership_purchase_intent: MembershipPurchaseIntent | str | None,
    now: datetime,
) -> MembershipStatus:
    """Map session membership fields to the status shown on the kiosk.

    An in-flight purchase or renewal is PENDING regardless of dates, so it is
    never mistaken for a paid membership. Otherwise a membership is valid
    through the end of its valid-until day (inclusive). ``now`` is local
    time; pass the same value for a whole render pass.
    """
    if membership_purchase_intent and membership_purchase_intent != MembershipPurchaseIntent.NONE:
        return MembershipStatus.PENDING

    if not membership_number or not membership_number.strip():
        return MembershipStatus.NON_MEMBER

    valid_until = _parse_valid_until(membership_valid_until)
    if valid_until is None:
        return MembershipStatus.EXPIRED

    return MembershipStatus.ACTIVE if now.date() <= valid_until else MembershipStatus.EXPIRED


def needs_membership_choice(status: MembershipStatus) -> bool:
    """Non-members and expired members must pick an option before renting."""
    return status in (MembershipStatus.NON_MEMBER, MembershipStatus.EXPIRED)
