"""Push channel: close classification, reconnect policy and the live socket."""
import asyncio

import pytest
from aiohttp import web

from checkin_kiosk.schemas.session import SessionSnapshotResponse
from checkin_kiosk.services.push_channel import LanePushChannel, is_auth_failure
from checkin_kiosk.services.transport import TransportSupervisor

from conftest import LANE

# Scripted connection outcomes: (kind, close code, close reason)
REFUSED = ("refused", None, None)


def opened(code: int | None, reason: str | None = None) -> tuple:
    return ("open", code, reason)


HOLD = ("hold", 1000, None)


class Counter:
    def __init__(self) -> None:
        self.calls = 0

    async def __call__(self) -> None:
        self.calls += 1


class ScriptedChannel(LanePushChannel):
    """Push channel whose connections follow a script instead of the network."""

    def __init__(self, script, on_open=None, on_close=None, retry_delay: float = 0, max_retries: int = 5) -> None:
        super().__init__(
            ws_url="ws://checkin.test/ws",
            lane_id=LANE,
            kiosk_token="secret",
            on_message=lambda raw: None,
            on_open=on_open or Counter(),
            on_close=on_close or Counter(),
            retry_delay=retry_delay,
            max_retries=max_retries,
        )
        self.script = list(script)
        self.connects = 0
        self.release = asyncio.Event()

    async def _connect_once(self, session, protocols, params):
        self.connects += 1
        kind, code, reason = self.script.pop(0) if self.script else REFUSED
        if kind == "refused":
            return code, reason
        await self._opened()
        if kind == "hold":
            await self.release.wait()
        return code, reason


async def settle(condition, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not condition() and loop.time() < deadline:
        await asyncio.sleep(0.005)


async def finished(channel: LanePushChannel) -> None:
    await settle(lambda: not channel.running)
    assert not channel.running


# ---------------------------------------------------------------------------
# Close classification
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "code, reason, expected",
    [
        (1008, None, True),
        (4001, "Unauthorized kiosk", True),
        (None, "403", True),
        (1000, "Forbidden", True),
        (1006, None, False),
        (1001, "server restart", False),
        (None, None, False),
    ],
)
def test_is_auth_failure(code, reason, expected) -> None:
    assert is_auth_failure(code, reason) is expected


async def test_stop_before_start_is_safe() -> None:
    channel = ScriptedChannel([])
    await channel.stop()
    assert not channel.running


# ---------------------------------------------------------------------------
# Reconnect policy
# ---------------------------------------------------------------------------


async def test_gives_up_after_max_retries() -> None:
    on_close = Counter()
    channel = ScriptedChannel([], on_close=on_close, max_retries=3)

    channel.start()
    await finished(channel)

    # First try plus three retries
    assert channel.connects == 4
    assert on_close.calls == 4
    assert not channel.auth_failed


async def test_successful_open_resets_attempts() -> None:
    on_open = Counter()
    channel = ScriptedChannel([REFUSED, REFUSED, opened(1006)], on_open=on_open, max_retries=2)

    channel.start()
    await finished(channel)

    # Without the reset the third connect would have been the last one
    assert on_open.calls == 1
    assert channel.connects == 5


async def test_policy_violation_close_is_not_retried() -> None:
    channel = ScriptedChannel([opened(1008)])

    channel.start()
    await finished(channel)

    assert channel.connects == 1
    assert channel.auth_failed


async def test_handshake_refusal_is_not_retried() -> None:
    channel = ScriptedChannel([("refused", None, "401")])

    channel.start()
    await finished(channel)

    assert channel.connects == 1
    assert channel.auth_failed


async def test_reconnect_drives_polling_fallback(store) -> None:
    polls = Counter()

    async def fetch() -> SessionSnapshotResponse:
        await polls()
        return SessionSnapshotResponse(session=None)

    supervisor = TransportSupervisor(
        fetch_snapshot=fetch,
        apply_snapshot=store.apply_snapshot,
        reset=lambda: store.reset_to_idle(reason="server-idle"),
        grace_seconds=0.02,
        interval_seconds=0.01,
    )
    channel = ScriptedChannel(
        [opened(1006), HOLD],
        on_open=supervisor.on_connected,
        on_close=supervisor.on_disconnected,
        retry_delay=0.3,
    )
    await supervisor.start(connected=False)
    channel.start()

    # Dropped: polling takes over after the grace period
    await settle(lambda: supervisor.polling and polls.calls > 0)
    assert supervisor.polling
    assert not supervisor.connected

    # Back online: polling stops
    await settle(lambda: channel.connects == 2 and supervisor.connected)
    assert supervisor.connected
    assert not supervisor.polling
    calls = polls.calls
    await asyncio.sleep(0.05)
    assert polls.calls == calls

    await channel.stop()
    await supervisor.stop()


# ---------------------------------------------------------------------------
# Live socket
# ---------------------------------------------------------------------------


class LaneServer:
    """Minimal push endpoint; each test supplies the connection handler."""

    def __init__(self) -> None:
        self.handler = None
        self.url = ""
        self._runner: web.AppRunner | None = None

    async def _route(self, request: web.Request) -> web.StreamResponse:
        return await self.handler(request)

    async def start(self) -> None:
        app = web.Application()
        app.router.add_get("/ws", self._route)
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, "127.0.0.1", 0)
        await site.start()
        host, port = self._runner.addresses[0][:2]
        self.url = f"ws://{host}:{port}/ws"

    async def stop(self) -> None:
        await self._runner.cleanup()


@pytest.fixture
async def lane_server():
    server = LaneServer()
    await server.start()
    yield server
    await server.stop()


def live_channel(server: LaneServer, messages: list, on_open=None) -> LanePushChannel:
    return LanePushChannel(
        ws_url=server.url,
        lane_id=LANE,
        kiosk_token="secret",
        on_message=messages.append,
        on_open=on_open or Counter(),
        on_close=Counter(),
        retry_delay=0.01,
        max_retries=3,
    )


async def test_frames_are_delivered_and_auth_close_stops(lane_server: LaneServer) -> None:
    seen = []

    async def handler(request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse(protocols=("kiosk-token.secret",))
        await ws.prepare(request)
        seen.append((dict(request.query), ws.ws_protocol))
        await ws.send_str('{"type": "SESSION_UPDATED", "payload": {"sessionId": "s-1"}}')
        await ws.close(code=4001, message=b"Unauthorized kiosk")
        return ws

    lane_server.handler = handler
    messages: list[str] = []
    channel = live_channel(lane_server, messages)

    channel.start()
    await finished(channel)

    assert seen == [({"lane": LANE, "role": "customer"}, "kiosk-token.secret")]
    assert messages == ['{"type": "SESSION_UPDATED", "payload": {"sessionId": "s-1"}}']
    assert channel.auth_failed


async def test_unauthorized_handshake_is_not_retried(lane_server: LaneServer) -> None:
    attempts = []

    async def handler(request: web.Request) -> web.StreamResponse:
        attempts.append(request.query.get("lane"))
        raise web.HTTPUnauthorized()

    lane_server.handler = handler
    channel = live_channel(lane_server, [])

    channel.start()
    await finished(channel)

    assert attempts == [LANE]
    assert channel.auth_failed


async def test_normal_close_reconnects(lane_server: LaneServer) -> None:
    connections = []

    async def handler(request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse(protocols=("kiosk-token.secret",))
        await ws.prepare(request)
        connections.append(ws)
        if len(connections) == 1:
            await ws.close(code=1001, message=b"server restart")
        else:
            async for _ in ws:
                pass
        return ws

    lane_server.handler = handler
    on_open = Counter()
    channel = live_channel(lane_server, [], on_open=on_open)

    channel.start()
    await settle(lambda: on_open.calls == 2)

    assert len(connections) == 2
    assert channel.running
    assert not channel.auth_failed

    await channel.stop()
    assert not channel.running
