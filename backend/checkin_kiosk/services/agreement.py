"""Agreement loading - fetches the document a customer signs."""

import asyncio
from typing import Callable

from checkin_kiosk.core.logging import get_logger
from checkin_kiosk.models.session import KioskView
from checkin_kiosk.services.api_client import LaneApiClient
from checkin_kiosk.services.errors import CommandError
from checkin_kiosk.services.store import AgreementDocument, KioskState, KioskStore

logger = get_logger(__name__)


class AgreementLoader:
    """
    Loads the active agreement when a session reaches the agreement screen.

    One fetch per session. A response that lands after the session moved on
    is dropped; a failed fetch records ``error.loadAgreement`` for that
    session only.
    """

    def __init__(self, store: KioskStore, api: LaneApiClient) -> None:
        self._store = store
        self._api = api
        self._task: asyncio.Task | None = None
        self._requested_for: str | None = None
        self._unsubscribe = store.subscribe(self._on_state_change)

    def _on_state_change(self, state: KioskState) -> None:
        session_id = state.session.session_id
        if session_id is None:
            self._requested_for = None
            return
        if state.view != KioskView.AGREEMENT or state.agreement is not None:
            return
        if session_id == self._requested_for:
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return

        self._requested_for = session_id
        self._task = asyncio.create_task(self.load(session_id), name="agreement-load")

    async def load(self, session_id: str) -> bool:
        """Fetch the agreement for ``session_id``. Returns True if it was stored."""
        try:
            payload = await self._api.fetch_active_agreement()
        except CommandError as e:
            logger.warning("Agreement load failed", session_id=session_id, error=str(e))

            def failed(state: KioskState) -> None:
                state.agreement_error_key = "error.loadAgreement"

            self._apply(session_id, failed, reason="agreement-load-failed")
            return False

        document = AgreementDocument(
            id=payload.id,
            version=payload.version,
            title=payload.title,
            body_text=payload.bodyText,
        )

        def loaded(state: KioskState) -> None:
            state.agreement = document
            state.agreement_error_key = None

        logger.info("Agreement loaded", session_id=session_id, version=document.version)
        return self._apply(session_id, loaded, reason="agreement-loaded")

    def _apply(self, session_id: str, mutate: Callable[[KioskState], None], reason: str) -> bool:
        if self._store.session_id != session_id:
            logger.info("Late agreement response ignored", session_id=session_id)
            return False
        self._store.commit(mutate, reason=reason)
        return True

    async def stop(self) -> None:
        self._unsubscribe()
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
