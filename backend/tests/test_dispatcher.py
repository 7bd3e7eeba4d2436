"""Action dispatcher against a mocked check-in API."""
import asyncio
import json

import httpx
import pytest

from checkin_kiosk.models.inventory import InventorySnapshot
from checkin_kiosk.models.session import (
    Actor,
    KioskView,
    Language,
    MembershipChoice,
    MembershipPurchaseIntent,
)
from checkin_kiosk.services.api_client import LaneApiClient
from checkin_kiosk.services.dispatcher import ActionDispatcher
from checkin_kiosk.services.store import KioskStore

from conftest import FakeLane, session_payload


@pytest.fixture
def dispatcher(active_store: KioskStore, api: LaneApiClient) -> ActionDispatcher:
    return ActionDispatcher(active_store, api)


def stock(store: KioskStore, **rooms: int) -> None:
    def mutate(state) -> None:
        state.inventory = InventorySnapshot(rooms=rooms, lockers=10)

    store.commit(mutate)


# ---------------------------------------------------------------------------
# Rental selection
# ---------------------------------------------------------------------------

async def test_select_rental_proposes_then_confirms(
    dispatcher: ActionDispatcher, active_store: KioskStore, fake_lane: FakeLane
) -> None:
    fake_lane.reply("confirm-selection", body={"confirmedBy": "CUSTOMER"})

    assert await dispatcher.select_rental("STANDARD") is True

    assert fake_lane.paths() == ["propose-selection", "confirm-selection"]
    assert fake_lane.body(0) == {"rentalType": "STANDARD", "proposedBy": "CUSTOMER"}
    assert fake_lane.requests[0].headers["x-kiosk-token"] == "secret"
    negotiation = active_store.state.negotiation
    assert negotiation.selection_confirmed
    assert negotiation.selection_confirmed_by == Actor.CUSTOMER
    assert active_store.state.is_submitting is False


async def test_language_required_redirects_to_language(
    dispatcher: ActionDispatcher, active_store: KioskStore, fake_lane: FakeLane
) -> None:
    fake_lane.reply("propose-selection", 409, {"code": "LANGUAGE_REQUIRED", "error": "Language required"})

    assert await dispatcher.select_rental("STANDARD") is False

    assert active_store.state.view == KioskView.LANGUAGE
    assert active_store.state.error_key is None
    assert fake_lane.paths() == ["propose-selection"]


async def test_rejection_sets_generic_error(
    dispatcher: ActionDispatcher, active_store: KioskStore, fake_lane: FakeLane
) -> None:
    fake_lane.reply("confirm-selection", 500, {"error": "db exploded at row 7"})

    assert await dispatcher.select_rental("STANDARD") is False

    assert active_store.state.error_key == "error.processSelection"
    assert active_store.state.view == KioskView.SELECTION
    assert not active_store.state.negotiation.selection_confirmed


async def test_transport_failure_sets_generic_error(active_store: KioskStore) -> None:
    def offline(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    api = LaneApiClient("http://checkin.test/api", "lane-1", "secret", transport=httpx.MockTransport(offline))
    dispatcher = ActionDispatcher(active_store, api)

    assert await dispatcher.select_language(Language.ES) is False
    assert active_store.state.error_key == "error.setLanguage"
    await api.aclose()


async def test_no_session_is_refused_locally(store: KioskStore, api: LaneApiClient, fake_lane: FakeLane) -> None:
    dispatcher = ActionDispatcher(store, api)

    assert await dispatcher.select_rental("STANDARD") is False
    assert await dispatcher.select_language(Language.EN) is False

    assert fake_lane.requests == []
    assert store.state.error_key == "error.noActiveSession"


async def test_second_action_while_submitting_is_ignored(active_store: KioskStore) -> None:
    release = asyncio.Event()
    seen: list[str] = []

    async def slow(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        await release.wait()
        return httpx.Response(200, json={})

    api = LaneApiClient("http://checkin.test/api", "lane-1", "secret", transport=httpx.MockTransport(slow))
    dispatcher = ActionDispatcher(active_store, api)

    first = asyncio.create_task(dispatcher.select_language(Language.ES))
    await asyncio.sleep(0.01)
    assert active_store.state.is_submitting

    assert await dispatcher.select_language(Language.EN) is False
    release.set()
    assert await first is True

    assert len(seen) == 1
    assert active_store.state.session.customer_primary_language == Language.ES
    await api.aclose()


async def test_late_response_for_old_session_is_dropped(
    active_store: KioskStore, api: LaneApiClient, fake_lane: FakeLane
) -> None:
    dispatcher = ActionDispatcher(active_store, api)
    # A new customer arrives while set-language is in flight
    fake_lane.on_request = lambda request: active_store.apply_snapshot(
        session_payload(sessionId="s-2", customerName="Next")
    )

    await dispatcher.select_language(Language.ES)

    assert active_store.session_id == "s-2"
    assert active_store.state.session.customer_primary_language is None
    assert active_store.state.view == KioskView.LANGUAGE


async def test_register_force_during_selection_is_kept(
    dispatcher: ActionDispatcher, active_store: KioskStore, fake_lane: FakeLane
) -> None:
    def force_first(request: httpx.Request) -> None:
        if request.url.path.endswith("confirm-selection"):
            active_store.commit(lambda state: state.negotiation.force("LOCKER"), reason="forced")

    fake_lane.on_request = force_first

    assert await dispatcher.select_rental("STANDARD") is True

    negotiation = active_store.state.negotiation
    assert negotiation.proposed_rental_type == "LOCKER"
    assert negotiation.selection_confirmed_by == Actor.EMPLOYEE
    assert active_store.state.error_key is None


# ---------------------------------------------------------------------------
# Waitlist
# ---------------------------------------------------------------------------

async def test_sold_out_rental_opens_waitlist(
    dispatcher: ActionDispatcher, active_store: KioskStore, fake_lane: FakeLane
) -> None:
    stock(active_store, STANDARD=3, DOUBLE=0)
    fake_lane.reply("waitlist-info", body={"position": 2, "estimatedReadyAt": "2026-01-01T12:00:00Z", "upgradeFee": 15})

    assert await dispatcher.select_rental("DOUBLE") is True

    assert "propose-selection" not in fake_lane.paths()
    assert fake_lane.paths() == ["waitlist-desired", "waitlist-info"]
    info_request = fake_lane.requests[1]
    assert info_request.url.params["desiredTier"] == "DOUBLE"
    assert info_request.url.params["currentTier"] == "LOCKER"

    state = active_store.state
    assert state.show_waitlist_modal
    assert state.negotiation.waitlist_desired_type == "DOUBLE"
    assert state.negotiation.proposed_rental_type is None
    assert not state.negotiation.selection_confirmed
    assert state.waitlist_info.position == 2


async def test_backup_and_disclaimer_propose_with_waitlist_fields(
    dispatcher: ActionDispatcher, active_store: KioskStore, fake_lane: FakeLane
) -> None:
    stock(active_store, STANDARD=3, DOUBLE=0)
    await dispatcher.select_rental("DOUBLE")

    assert await dispatcher.select_waitlist_backup("STANDARD") is True
    assert active_store.state.show_upgrade_disclaimer
    assert not active_store.state.show_waitlist_modal

    assert await dispatcher.acknowledge_upgrade_disclaimer() is True
    propose = fake_lane.paths().index("propose-selection")
    assert fake_lane.body(propose) == {
        "rentalType": "STANDARD",
        "proposedBy": "CUSTOMER",
        "waitlistDesiredType": "DOUBLE",
        "backupRentalType": "STANDARD",
    }
    assert active_store.state.negotiation.selection_confirmed
    assert active_store.state.negotiation.proposed_rental_type == "STANDARD"


async def test_sold_out_backup_is_refused(dispatcher: ActionDispatcher, active_store: KioskStore) -> None:
    stock(active_store, STANDARD=0, DOUBLE=0)
    await dispatcher.select_rental("DOUBLE")

    assert await dispatcher.select_waitlist_backup("STANDARD") is False
    assert active_store.state.error_key == "error.rentalNotAvailable"
    assert active_store.state.negotiation.waitlist_backup_type is None


async def test_cancel_waitlist_sends_null(
    dispatcher: ActionDispatcher, active_store: KioskStore, fake_lane: FakeLane
) -> None:
    stock(active_store, DOUBLE=0)
    await dispatcher.select_rental("DOUBLE")

    assert await dispatcher.cancel_waitlist() is True

    assert json.loads(fake_lane.requests[-1].content) == {"waitlistDesiredType": None, "sessionId": "s-1"}
    assert active_store.state.negotiation.waitlist_desired_type is None
    assert not active_store.state.show_waitlist_modal


# ---------------------------------------------------------------------------
# Membership
# ---------------------------------------------------------------------------

@pytest.fixture
def non_member(active_store: KioskStore) -> KioskStore:
    active_store.apply_snapshot(session_payload(membershipNumber=None, customerMembershipValidUntil=None))
    return active_store


async def test_non_member_cannot_rent_before_choosing(
    non_member: KioskStore, api: LaneApiClient, fake_lane: FakeLane
) -> None:
    dispatcher = ActionDispatcher(non_member, api)

    assert await dispatcher.select_rental("LOCKER") is False
    assert fake_lane.requests == []

    assert await dispatcher.select_one_time_membership() is True
    assert await dispatcher.select_rental("LOCKER") is True


async def test_one_time_clears_purchase_intent(
    non_member: KioskStore, api: LaneApiClient, fake_lane: FakeLane
) -> None:
    non_member.apply_snapshot(session_payload(membershipPurchaseIntent="PURCHASE"))
    dispatcher = ActionDispatcher(non_member, api)

    await dispatcher.select_one_time_membership()

    assert fake_lane.paths() == ["membership-purchase-intent", "membership-choice"]
    assert fake_lane.body(0)["intent"] == "NONE"
    assert fake_lane.body(1) == {"choice": "ONE_TIME", "sessionId": "s-1"}
    assert non_member.state.membership_choice == MembershipChoice.ONE_TIME
    assert non_member.state.session.membership_purchase_intent is None


async def test_six_month_renewal_for_expired_member(
    active_store: KioskStore, api: LaneApiClient, fake_lane: FakeLane
) -> None:
    active_store.apply_snapshot(session_payload(customerMembershipValidUntil="2020-01-01"))
    dispatcher = ActionDispatcher(active_store, api)

    assert dispatcher.open_six_month_membership() is True
    assert active_store.state.membership_modal_intent == MembershipPurchaseIntent.RENEW
    assert fake_lane.requests == []

    assert await dispatcher.continue_membership_purchase() is True
    assert fake_lane.paths() == ["membership-purchase-intent", "membership-choice"]
    assert fake_lane.body(0)["intent"] == "RENEW"
    assert active_store.state.membership_choice == MembershipChoice.SIX_MONTH
    assert not active_store.state.show_membership_modal


async def test_six_month_purchase_for_non_member(non_member: KioskStore, api: LaneApiClient) -> None:
    dispatcher = ActionDispatcher(non_member, api)
    dispatcher.open_six_month_membership()
    assert non_member.state.membership_modal_intent == MembershipPurchaseIntent.PURCHASE

    dispatcher.close_membership_modal()
    assert non_member.state.membership_modal_intent is None
    assert await dispatcher.continue_membership_purchase() is False


# ---------------------------------------------------------------------------
# Confirmation, agreement and completion
# ---------------------------------------------------------------------------

async def test_customer_confirmation(
    dispatcher: ActionDispatcher, active_store: KioskStore, fake_lane: FakeLane
) -> None:
    from checkin_kiosk.services.store import CustomerConfirmationRequest

    def request(state) -> None:
        state.customer_confirmation = CustomerConfirmationRequest("s-1", "DOUBLE", "STANDARD", "14")

    active_store.commit(request)

    assert await dispatcher.respond_to_customer_confirmation(False) is True
    assert fake_lane.body(0) == {"sessionId": "s-1", "confirmed": False}
    assert active_store.state.customer_confirmation is None


async def test_empty_signature_is_refused(
    dispatcher: ActionDispatcher, active_store: KioskStore, fake_lane: FakeLane
) -> None:
    assert await dispatcher.sign_agreement("  ") is False
    assert active_store.state.error_key == "error.signatureRequired"
    assert fake_lane.requests == []


async def test_sign_agreement(dispatcher: ActionDispatcher, active_store: KioskStore, fake_lane: FakeLane) -> None:
    assert await dispatcher.sign_agreement("data:image/png;base64,AAAA") is True
    assert fake_lane.body(0) == {"signaturePayload": "data:image/png;base64,AAAA", "sessionId": "s-1"}
    assert active_store.state.session.agreement_signed


async def test_acknowledge_completion_goes_idle(
    dispatcher: ActionDispatcher, active_store: KioskStore, fake_lane: FakeLane
) -> None:
    active_store.apply_snapshot(session_payload(assignedResourceType="room", assignedResourceNumber="12"))
    assert active_store.state.view == KioskView.COMPLETE

    assert await dispatcher.acknowledge_completion() is True
    assert fake_lane.paths() == ["kiosk-ack"]
    assert active_store.state.view == KioskView.IDLE


async def test_dismiss_id_scan_issue_resets(
    dispatcher: ActionDispatcher, active_store: KioskStore, fake_lane: FakeLane
) -> None:
    active_store.apply_snapshot(session_payload(idScanIssue="ID_EXPIRED"))

    assert await dispatcher.dismiss_id_scan_issue() is True
    assert fake_lane.paths() == ["reset"]
    assert active_store.session_id is None
    assert active_store.state.is_submitting is False
