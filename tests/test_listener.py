from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable

import pytest
from fakes import FakeItemStore, FakeReader

from pyancla.client import StoreClient
from pyancla.config import StoreConfig
from pyancla.exceptions import (
    AnclaConfigError,
    ListenerNotRunningError,
    ListenerNotStoppedError,
    NonSuccessStatusError,
)
from pyancla.listener import ListenerClient, ListenerFunc, ListenerState, _StateFlag
from pyancla.metrics import Measures, PollOutcome
from pyancla.models.item import Item

ITEMS = [
    Item(id="a", data={"url": "https://a.example.com"}),
    Item(id="b", data={"url": "https://b.example.com"}),
]


class _RecordingListener:
    def __init__(self) -> None:
        self.updates: list[list[Item]] = []

    def update(self, items: list[Item]) -> None:
        self.updates.append(items)


async def _wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_poll(), timeout)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def test_missing_listener_and_reader_are_reported_together() -> None:
    with pytest.raises(AnclaConfigError) as exc_info:
        ListenerClient(None, None)

    assert exc_info.value.errors == ["no listener provided", "no reader provided"]


def test_missing_reader() -> None:
    with pytest.raises(AnclaConfigError, match="no reader provided"):
        ListenerClient(_RecordingListener(), None)


@pytest.mark.parametrize("interval", [0, -1.0])
def test_non_positive_interval_uses_default(interval: float) -> None:
    client = ListenerClient(_RecordingListener(), FakeReader(), pull_interval=interval)
    assert client.pull_interval == 5.0


def test_plain_callable_is_wrapped() -> None:
    client = ListenerClient(lambda items: None, FakeReader())
    assert isinstance(client._listener, ListenerFunc)  # type: ignore[attr-defined]
    assert client.state is ListenerState.STOPPED


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_start_twice_raises_not_stopped() -> None:
    client = ListenerClient(_RecordingListener(), FakeReader(), pull_interval=10)

    await client.start()
    with pytest.raises(ListenerNotStoppedError):
        await client.start()

    assert client.state is ListenerState.RUNNING
    await client.stop()


@pytest.mark.asyncio
async def test_stop_twice_raises_not_running() -> None:
    client = ListenerClient(_RecordingListener(), FakeReader(), pull_interval=10)
    await client.start()

    await client.stop()
    with pytest.raises(ListenerNotRunningError):
        await client.stop()

    assert client.state is ListenerState.STOPPED


@pytest.mark.asyncio
async def test_stop_before_start_raises_not_running() -> None:
    client = ListenerClient(_RecordingListener(), FakeReader())

    with pytest.raises(ListenerNotRunningError):
        await client.stop()


@pytest.mark.asyncio
async def test_concurrent_starts_exactly_one_wins() -> None:
    client = ListenerClient(_RecordingListener(), FakeReader(), pull_interval=10)

    results = await asyncio.gather(*(client.start() for _ in range(20)), return_exceptions=True)

    successes = [r for r in results if r is None]
    failures = [r for r in results if isinstance(r, ListenerNotStoppedError)]
    assert len(successes) == 1
    assert len(failures) == 19
    assert client.state is ListenerState.RUNNING
    await client.stop()


@pytest.mark.asyncio
async def test_concurrent_stops_exactly_one_wins() -> None:
    client = ListenerClient(_RecordingListener(), FakeReader(), pull_interval=10)
    await client.start()

    results = await asyncio.gather(*(client.stop() for _ in range(5)), return_exceptions=True)

    assert sum(r is None for r in results) == 1
    assert sum(isinstance(r, ListenerNotRunningError) for r in results) == 4
    assert client.state is ListenerState.STOPPED


def test_state_flag_compare_and_swap_across_threads() -> None:
    flag = _StateFlag()
    barrier = threading.Barrier(16)
    wins: list[bool] = []
    lock = threading.Lock()

    def attempt() -> None:
        barrier.wait()
        won = flag.compare_and_swap(ListenerState.STOPPED, ListenerState.TRANSITIONING)
        with lock:
            wins.append(won)

    threads = [threading.Thread(target=attempt) for _ in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert wins.count(True) == 1
    assert flag.value is ListenerState.TRANSITIONING
    assert flag.swap(ListenerState.RUNNING) is ListenerState.TRANSITIONING


@pytest.mark.asyncio
async def test_listener_can_be_restarted() -> None:
    listener = _RecordingListener()
    reader = FakeReader(ITEMS)
    client = ListenerClient(listener, reader, pull_interval=0.02)

    await client.start()
    await _wait_for(lambda: len(listener.updates) >= 1)
    await client.stop()

    seen = len(listener.updates)
    await asyncio.sleep(0.08)
    assert len(listener.updates) == seen

    await client.start()
    await _wait_for(lambda: len(listener.updates) > seen)
    await client.stop()


@pytest.mark.asyncio
async def test_context_manager_starts_and_stops() -> None:
    client = ListenerClient(_RecordingListener(), FakeReader(), pull_interval=10)

    async with client:
        assert client.is_running

    assert client.state is ListenerState.STOPPED


@pytest.mark.asyncio
async def test_stop_from_listener_callback() -> None:
    holder: dict[str, ListenerClient] = {}
    calls: list[int] = []

    async def on_update(items: list[Item]) -> None:
        calls.append(len(items))
        await holder["client"].stop()

    client = ListenerClient(on_update, FakeReader(ITEMS), pull_interval=0.02)
    holder["client"] = client

    await client.start()
    await _wait_for(lambda: client.state is ListenerState.STOPPED)
    await asyncio.sleep(0.08)

    assert calls == [2]


# ---------------------------------------------------------------------------
# Polling
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_polls_fetch_unscoped_and_notify() -> None:
    listener = _RecordingListener()
    reader = FakeReader(ITEMS)
    measures = Measures()
    client = ListenerClient(listener, reader, pull_interval=0.02, measures=measures)

    async with client:
        await _wait_for(lambda: len(listener.updates) >= 3)

    assert all(update == ITEMS for update in listener.updates)
    assert set(reader.owners) == {""}
    assert measures.poll_count(PollOutcome.SUCCESS) >= 3
    assert measures.poll_count(PollOutcome.FAILURE) == 0


@pytest.mark.asyncio
async def test_fetch_failure_skips_listener_and_keeps_polling() -> None:
    listener = _RecordingListener()
    reader = FakeReader(ITEMS)
    reader.error = NonSuccessStatusError(status_code=500)
    measures = Measures()
    client = ListenerClient(listener, reader, pull_interval=0.02, measures=measures)

    async with client:
        await _wait_for(lambda: measures.poll_count(PollOutcome.FAILURE) >= 2)
        assert listener.updates == []

        reader.error = None
        await _wait_for(lambda: len(listener.updates) >= 1)

    assert listener.updates[0] == ITEMS
    assert measures.poll_count(PollOutcome.SUCCESS) >= 1


@pytest.mark.asyncio
async def test_listener_exception_does_not_stop_polling() -> None:
    calls: list[int] = []

    def explode(items: list[Item]) -> None:
        calls.append(len(items))
        raise RuntimeError("watch broke")

    client = ListenerClient(explode, FakeReader(ITEMS), pull_interval=0.02)

    async with client:
        await _wait_for(lambda: len(calls) >= 2)


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_poller_against_store(config: StoreConfig, fake_store: FakeItemStore) -> None:
    for item in ITEMS:
        fake_store.items[item.id] = item.model_dump(exclude_none=True)
    listener = _RecordingListener()
    measures = Measures()

    async with StoreClient(config) as store:
        poller = ListenerClient(listener, store, pull_interval=0.05, measures=measures)
        await poller.start()
        await asyncio.sleep(0.12)
        await _wait_for(lambda: len(listener.updates) >= 2)
        await poller.stop()

    assert listener.updates[0] == ITEMS
    assert measures.poll_count(PollOutcome.SUCCESS) >= 2


@pytest.mark.asyncio
@pytest.mark.e2e
async def test_poller_recovers_after_store_error(config: StoreConfig, fake_store: FakeItemStore) -> None:
    fake_store.fail_status = 500
    fake_store.items["a"] = ITEMS[0].model_dump(exclude_none=True)
    listener = _RecordingListener()
    measures = Measures()

    async with StoreClient(config) as store:
        async with ListenerClient(listener, store, pull_interval=0.03, measures=measures):
            await _wait_for(lambda: measures.poll_count(PollOutcome.FAILURE) >= 1)
            assert listener.updates == []

            fake_store.fail_status = None
            await _wait_for(lambda: len(listener.updates) >= 1)

    assert listener.updates[-1] == [ITEMS[0]]
