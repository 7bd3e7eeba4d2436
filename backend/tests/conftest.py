"""
Shared fixtures for the kiosk agent tests.

Outbound HTTP goes through ``httpx.MockTransport``; ``FakeLane`` records
every request and answers from a small route table keyed by path suffix.
"""
import json
from typing import Any, Callable

import httpx
import pytest

from checkin_kiosk.schemas.session import SessionUpdatedPayload
from checkin_kiosk.services.api_client import LaneApiClient
from checkin_kiosk.services.store import KioskStore

LANE = "lane-1"


def session_payload(**fields: Any) -> SessionUpdatedPayload:
    """Build a snapshot from wire keys, as if parsed off the socket."""
    fields.setdefault("sessionId", "s-1")
    return SessionUpdatedPayload.model_validate(fields)


class FakeLane:
    """Records requests and replies with canned responses."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, list[tuple[int, Any]]] = {}
        self.on_request: Callable[[httpx.Request], Any] | None = None

    def reply(self, suffix: str, status_code: int = 200, body: Any = None) -> None:
        self.routes[suffix] = [(status_code, body if body is not None else {"ok": True})]

    def reply_sequence(self, suffix: str, answers: list[tuple[int, Any]]) -> None:
        """Answer in order, repeating the last one once exhausted."""
        self.routes[suffix] = list(answers)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.on_request is not None:
            self.on_request(request)
        for suffix, answers in self.routes.items():
            if request.url.path.endswith(suffix):
                status_code, body = answers.pop(0) if len(answers) > 1 else answers[0]
                return httpx.Response(status_code, json=body)
        return httpx.Response(200, json={"ok": True})

    def paths(self) -> list[str]:
        return [request.url.path.rsplit("/", 1)[-1] for request in self.requests]

    def body(self, index: int) -> dict[str, Any]:
        return json.loads(self.requests[index].content or b"{}")


@pytest.fixture
def fake_lane() -> FakeLane:
    return FakeLane()


@pytest.fixture
async def api(fake_lane: FakeLane):
    client = LaneApiClient(
        base_url="http://checkin.test/api",
        lane_id=LANE,
        kiosk_token="secret",
        transport=httpx.MockTransport(fake_lane.handler),
    )
    yield client
    await client.aclose()


@pytest.fixture
def store() -> KioskStore:
    return KioskStore()


@pytest.fixture
def active_store(store: KioskStore) -> KioskStore:
    """A store holding an English-speaking member at the selection screen."""
    store.apply_snapshot(
        session_payload(
            customerName="Alex",
            customerPrimaryLanguage="EN",
            membershipNumber="M-100",
            customerMembershipValidUntil="2099-12-31",
            allowedRentals=["LOCKER", "STANDARD", "DOUBLE"],
            mode="CHECKIN",
        )
    )
    return store
