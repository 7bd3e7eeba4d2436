"""Lane push channel - WebSocket subscription to the check-in API."""

import asyncio
from typing import Awaitable, Callable

import aiohttp

from checkin_kiosk.core.logging import get_logger

logger = get_logger(__name__)

POLICY_VIOLATION = 1008
_AUTH_MARKERS = ("auth", "unauthorized", "forbidden", "401", "403")


def is_auth_failure(code: int | None, reason: str | None) -> bool:
    """True when a close looks like the server refused our credentials."""
    if code == POLICY_VIOLATION:
        return True
    text = (reason or "").lower()
    return any(marker in text for marker in _AUTH_MARKERS)


class LanePushChannel:
    """
    Subscribes to push events for one lane as the customer kiosk.

    The kiosk token travels as a ``kiosk-token.<token>`` subprotocol. After
    a drop the channel reconnects every ``retry_delay`` seconds, at most
    ``max_retries`` times in a row; a successful open resets the count. An
    authentication refusal is never retried.
    """

    def __init__(
        self,
        ws_url: str,
        lane_id: str,
        kiosk_token: str,
        on_message: Callable[[str], None],
        on_open: Callable[[], Awaitable[None]],
        on_close: Callable[[], Awaitable[None]],
        retry_delay: float = 1.0,
        max_retries: int = 5,
    ) -> None:
        self._ws_url = ws_url
        self._lane_id = lane_id
        self._kiosk_token = kiosk_token
        self._on_message = on_message
        self._on_open = on_open
        self._on_close = on_close
        self._retry_delay = retry_delay
        self._max_retries = max_retries

        self._task: asyncio.Task | None = None
        self._attempts = 0
        self._auth_failed = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def auth_failed(self) -> bool:
        return self._auth_failed

    def start(self) -> None:
        if self.running:
            return
        self._attempts = 0
        self._auth_failed = False
        self._task = asyncio.create_task(self._run(), name="lane-push-channel")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _run(self) -> None:
        protocols = (f"kiosk-token.{self._kiosk_token}",) if self._kiosk_token else ()
        params = {"lane": self._lane_id, "role": "customer"}

        async with aiohttp.ClientSession() as session:
            while True:
                code, reason = await self._connect_once(session, protocols, params)
                await self._on_close()

                if is_auth_failure(code, reason):
                    self._auth_failed = True
                    logger.error(
                        "Push channel refused; not retrying",
                        lane=self._lane_id,
                        code=code,
                        reason=reason,
                    )
                    return

                self._attempts += 1
                if self._attempts > self._max_retries:
                    logger.warning(
                        "Push channel retries exhausted; staying on polling",
                        lane=self._lane_id,
                        attempts=self._attempts - 1,
                    )
                    return

                logger.info(
                    "Push channel reconnecting",
                    lane=self._lane_id,
                    attempt=self._attempts,
                    delay=self._retry_delay,
                )
                await asyncio.sleep(self._retry_delay)

    async def _opened(self) -> None:
        self._attempts = 0
        logger.info("Push channel connected", lane=self._lane_id)
        await self._on_open()

    async def _connect_once(
        self,
        session: aiohttp.ClientSession,
        protocols: tuple[str, ...],
        params: dict[str, str],
    ) -> tuple[int | None, str | None]:
        """Run one connection until it closes. Returns the close code and reason."""
        try:
            async with session.ws_connect(self._ws_url, protocols=protocols, params=params, heartbeat=20) as ws:
                await self._opened()

                reason: str | None = None
                # Async iteration stops before CLOSE, losing the close reason
                while True:
                    msg = await ws.receive()
                    if msg.type == aiohttp.WSMsgType.TEXT:
                        self._on_message(msg.data)
                    elif msg.type == aiohttp.WSMsgType.BINARY:
                        self._on_message(msg.data.decode("utf-8", errors="replace"))
                    elif msg.type == aiohttp.WSMsgType.CLOSE:
                        reason = msg.extra or None
                        break
                    elif msg.type == aiohttp.WSMsgType.ERROR:
                        logger.warning("Push channel error", lane=self._lane_id, error=str(ws.exception()))
                        break
                    elif msg.type in (aiohttp.WSMsgType.CLOSING, aiohttp.WSMsgType.CLOSED):
                        break

                logger.info("Push channel closed", lane=self._lane_id, code=ws.close_code, reason=reason)
                return ws.close_code, reason
        except aiohttp.WSServerHandshakeError as e:
            logger.warning("Push channel handshake failed", lane=self._lane_id, status=e.status)
            return None, str(e.status) if e.status in (401, 403) else e.message
        except (aiohttp.ClientError, OSError) as e:
            logger.warning("Push channel connect failed", lane=self._lane_id, error=str(e))
            return None, None
