"""HTTP client for the central check-in API, scoped to one lane."""

from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from checkin_kiosk.core.config import settings
from checkin_kiosk.core.logging import get_logger
from checkin_kiosk.models.session import (
    Actor,
    Language,
    MembershipChoice,
    MembershipPurchaseIntent,
)
from checkin_kiosk.schemas.session import (
    ActiveAgreementPayload,
    ConfirmSelectionResponse,
    SessionSnapshotResponse,
    WaitlistInfoResponse,
)
from checkin_kiosk.services.errors import CommandError, CommandRejected, LanguageRequired

logger = get_logger(__name__)

KIOSK_TOKEN_HEADER = "x-kiosk-token"
LANGUAGE_REQUIRED_CODE = "LANGUAGE_REQUIRED"


class LaneApiClient:
    """
    Issues kiosk commands and snapshot fetches for a single lane.

    Every command carries the shared-secret kiosk header. Non-2xx answers
    raise ``CommandRejected`` (or ``LanguageRequired`` for 409
    LANGUAGE_REQUIRED); transport failures raise ``CommandError``. The
    server's error text is kept for logs only.
    """

    def __init__(
        self,
        base_url: str,
        lane_id: str,
        kiosk_token: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.lane_id = lane_id
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={KIOSK_TOKEN_HEADER: kiosk_token},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls) -> "LaneApiClient":
        return cls(
            base_url=settings.api_base_url,
            lane_id=settings.lane_id,
            kiosk_token=settings.kiosk_token,
            timeout=settings.request_timeout_seconds,
        )

    @property
    def _lane_path(self) -> str:
        return f"/v1/checkin/lane/{quote(self.lane_id, safe='')}"

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise CommandError(f"{method} {path} failed: {e}") from e

        if response.is_success:
            return response

        code: str | None = None
        message: str | None = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            code = body.get("code") if isinstance(body.get("code"), str) else None
            message = body.get("error") or body.get("message")

        if response.status_code == 409 and code == LANGUAGE_REQUIRED_CODE:
            raise LanguageRequired(response.status_code, code, message)
        raise CommandRejected(response.status_code, code, message)

    async def _command(self, action: str, body: dict[str, Any] | None = None) -> dict[str, Any] | None:
        payload = {k: v for k, v in (body or {}).items() if v is not None}
        response = await self._request("POST", f"{self._lane_path}/{action}", json=payload)
        logger.info("Kiosk command sent", lane=self.lane_id, action=action, status=response.status_code)
        try:
            data = response.json()
        except ValueError:
            return None
        return data if isinstance(data, dict) else None

    # Selection

    async def propose_selection(
        self,
        rental_type: str,
        proposed_by: Actor = Actor.CUSTOMER,
        waitlist_desired_type: str | None = None,
        backup_rental_type: str | None = None,
    ) -> None:
        await self._command(
            "propose-selection",
            {
                "rentalType": rental_type,
                "proposedBy": proposed_by.value,
                "waitlistDesiredType": waitlist_desired_type,
                "backupRentalType": backup_rental_type,
            },
        )

    async def confirm_selection(self, confirmed_by: Actor = Actor.CUSTOMER) -> Actor:
        """Confirm the current proposal. Returns who the server recorded as confirming."""
        data = await self._command("confirm-selection", {"confirmedBy": confirmed_by.value})
        if data:
            try:
                parsed = ConfirmSelectionResponse.model_validate(data)
            except ValidationError:
                parsed = None
            if parsed and parsed.confirmedBy:
                return parsed.confirmedBy
        return confirmed_by

    async def customer_confirm(self, session_id: str, confirmed: bool) -> None:
        await self._command("customer-confirm", {"sessionId": session_id, "confirmed": confirmed})

    # Language and membership

    async def set_language(self, session_id: str, language: Language, customer_name: str | None = None) -> None:
        await self._command(
            "set-language",
            {"language": language.value, "sessionId": session_id, "customerName": customer_name},
        )

    async def set_membership_choice(self, session_id: str, choice: MembershipChoice) -> None:
        await self._command("membership-choice", {"choice": choice.value, "sessionId": session_id})

    async def set_membership_purchase_intent(self, session_id: str, intent: MembershipPurchaseIntent) -> None:
        await self._command("membership-purchase-intent", {"intent": intent.value, "sessionId": session_id})

    # Waitlist

    async def set_waitlist_desired(self, session_id: str | None, rental_type: str | None) -> None:
        # Explicit null clears the desired type
        payload: dict[str, Any] = {"waitlistDesiredType": rental_type}
        if session_id:
            payload["sessionId"] = session_id
        response = await self._request("POST", f"{self._lane_path}/waitlist-desired", json=payload)
        logger.info("Kiosk command sent", lane=self.lane_id, action="waitlist-desired", status=response.status_code)

    async def get_waitlist_info(self, desired_tier: str, current_tier: str) -> WaitlistInfoResponse | None:
        response = await self._request(
            "GET",
            f"{self._lane_path}/waitlist-info",
            params={"desiredTier": desired_tier, "currentTier": current_tier},
        )
        try:
            return WaitlistInfoResponse.model_validate(response.json())
        except (ValueError, ValidationError):
            return None

    # Agreement and completion

    async def sign_agreement(self, session_id: str, signature_payload: str) -> None:
        await self._command("sign-agreement", {"signaturePayload": signature_payload, "sessionId": session_id})

    async def kiosk_ack(self) -> None:
        await self._command("kiosk-ack")

    async def reset(self) -> None:
        await self._command("reset")

    # Reads

    async def fetch_session_snapshot(self) -> SessionSnapshotResponse:
        """Fetch the lane's current session. ``session`` is None when the lane is idle.

        Raises ``CommandError`` on transport failures, bad status or an
        unparseable body.
        """
        response = await self._request("GET", f"{self._lane_path}/session-snapshot")
        try:
            return SessionSnapshotResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise CommandError(f"Invalid session snapshot: {e}") from e

    async def fetch_active_agreement(self) -> ActiveAgreementPayload:
        """Fetch the agreement customers sign. Raises ``CommandError`` when missing or unreadable."""
        response = await self._request("GET", "/v1/agreements/active")
        try:
            return ActiveAgreementPayload.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise CommandError(f"Invalid agreement response: {e}") from e

    async def fetch_inventory(self) -> dict[str, Any]:
        response = await self._request("GET", "/v1/inventory/available")
        try:
            data = response.json()
        except ValueError as e:
            raise CommandError(f"Invalid inventory response: {e}") from e
        if not isinstance(data, dict):
            raise CommandError("Invalid inventory response")
        return data
