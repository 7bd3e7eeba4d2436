"""Transport supervisor: grace period, polling fallback and reconnect teardown."""
import asyncio

from checkin_kiosk.models.session import KioskView
from checkin_kiosk.schemas.session import SessionSnapshotResponse
from checkin_kiosk.services.errors import CommandError
from checkin_kiosk.services.store import KioskStore
from checkin_kiosk.services.transport import TransportSupervisor

from conftest import session_payload

GRACE = 0.02
INTERVAL = 0.01


class SnapshotSource:
    """Scripted snapshot endpoint. Repeats the last answer once exhausted."""

    def __init__(self, *answers) -> None:
        self.answers = list(answers)
        self.calls = 0

    async def __call__(self) -> SessionSnapshotResponse:
        self.calls += 1
        answer = self.answers[0] if len(self.answers) == 1 else self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer


def make_supervisor(store: KioskStore, source: SnapshotSource, resets: list[int]) -> TransportSupervisor:
    def reset() -> None:
        resets.append(1)
        store.reset_to_idle(reason="server-idle")

    return TransportSupervisor(
        fetch_snapshot=source,
        apply_snapshot=store.apply_snapshot,
        reset=reset,
        grace_seconds=GRACE,
        interval_seconds=INTERVAL,
    )


async def test_no_polling_while_connected(store: KioskStore) -> None:
    source = SnapshotSource(SessionSnapshotResponse(session=None))
    supervisor = make_supervisor(store, source, [])

    await supervisor.start(connected=True)
    await asyncio.sleep(GRACE * 3)
    await supervisor.stop()

    assert source.calls == 0


async def test_reconnect_within_grace_never_polls(store: KioskStore) -> None:
    source = SnapshotSource(SessionSnapshotResponse(session=None))
    supervisor = make_supervisor(store, source, [])

    await supervisor.start(connected=True)
    await supervisor.on_disconnected()
    await supervisor.on_connected()
    await asyncio.sleep(GRACE * 3)
    await supervisor.stop()

    assert source.calls == 0
    assert not supervisor.polling


async def test_polling_applies_snapshots(store: KioskStore) -> None:
    source = SnapshotSource(
        SessionSnapshotResponse(session=session_payload(customerPrimaryLanguage="EN", mode="CHECKIN"))
    )
    supervisor = make_supervisor(store, source, [])

    await supervisor.start()
    await asyncio.sleep(GRACE + INTERVAL * 10)
    await supervisor.stop()

    assert source.calls >= 2
    assert store.state.view == KioskView.SELECTION


async def test_empty_lane_resets_exactly_once(active_store: KioskStore) -> None:
    resets: list[int] = []
    source = SnapshotSource(SessionSnapshotResponse(session=None))
    supervisor = make_supervisor(active_store, source, resets)

    await supervisor.start(connected=True)
    await supervisor.on_disconnected()
    await asyncio.sleep(GRACE + INTERVAL * 12)
    await supervisor.stop()

    assert source.calls >= 3
    assert resets == [1]
    assert active_store.state.view == KioskView.IDLE
    assert active_store.state.session.session_id is None


async def test_reset_rearms_after_a_session_is_seen(store: KioskStore) -> None:
    resets: list[int] = []
    supervisor = make_supervisor(
        store,
        SnapshotSource(
            SessionSnapshotResponse(session=None),
            SessionSnapshotResponse(session=session_payload(customerPrimaryLanguage="EN")),
            SessionSnapshotResponse(session=None),
        ),
        resets,
    )
    await supervisor.poll_once()
    await supervisor.poll_once()
    await supervisor.poll_once()
    await supervisor.poll_once()
    await supervisor.stop()

    assert resets == [1, 1]


async def test_reconnect_tears_down_polling(store: KioskStore) -> None:
    source = SnapshotSource(SessionSnapshotResponse(session=None))
    supervisor = make_supervisor(store, source, [])

    await supervisor.start()
    await asyncio.sleep(GRACE + INTERVAL * 3)
    assert supervisor.polling

    await supervisor.on_connected()
    calls = source.calls
    await asyncio.sleep(INTERVAL * 5)
    await supervisor.stop()

    assert not supervisor.polling
    assert source.calls == calls


async def test_poll_failures_keep_polling(store: KioskStore) -> None:
    source = SnapshotSource(
        CommandError("boom"),
        CommandError("boom"),
        SessionSnapshotResponse(session=session_payload(customerPrimaryLanguage="EN")),
    )
    supervisor = make_supervisor(store, source, [])

    await supervisor.start()
    await asyncio.sleep(GRACE + INTERVAL * 12)
    await supervisor.stop()

    assert source.calls >= 3
    assert store.session_id == "s-1"


async def test_stop_is_idempotent(store: KioskStore) -> None:
    supervisor = make_supervisor(store, SnapshotSource(SessionSnapshotResponse(session=None)), [])
    await supervisor.start()
    await supervisor.stop()
    await supervisor.stop()
    await supervisor.on_disconnected()

    assert not supervisor.polling
