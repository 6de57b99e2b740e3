"""Background poller keeping listeners up to date with the item store.

The listener owns one asyncio task between a successful :meth:`start`
and its matching :meth:`stop`. Each tick it fetches the whole bucket,
hands the items to the bound listener and records the outcome.

Start/stop transitions go through a three-state flag with an atomic
compare-and-swap so concurrent callers get an immediate answer instead
of queuing::

    STOPPED --start--> TRANSITIONING --> RUNNING
    RUNNING --stop---> TRANSITIONING --> STOPPED
"""

from __future__ import annotations

import asyncio
import enum
import inspect
import logging
import threading
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from pyancla._constants import DEFAULT_PULL_INTERVAL
from pyancla.client import Reader
from pyancla.exceptions import AnclaConfigError, ListenerNotRunningError, ListenerNotStoppedError
from pyancla.metrics import Measures, PollOutcome
from pyancla.models.item import Item

_logger = logging.getLogger(__name__)


class Listener(Protocol):
    """Receives the latest item list after every successful poll."""

    def update(self, items: list[Item]) -> Awaitable[None] | None:
        ...


class ListenerFunc:
    """Allows a bare callable to pass as a :class:`Listener`."""

    def __init__(self, func: Callable[[list[Item]], Awaitable[None] | None]) -> None:
        self._func = func

    def update(self, items: list[Item]) -> Awaitable[None] | None:
        return self._func(items)


class ListenerState(enum.IntEnum):
    STOPPED = 0
    RUNNING = 1
    TRANSITIONING = 2


class _StateFlag:
    """Listener state with compare-and-swap semantics.

    The lock only guards the comparison itself and is never held
    across an ``await``, so it can be used from any thread or task.
    """

    def __init__(self, state: ListenerState = ListenerState.STOPPED) -> None:
        self._lock = threading.Lock()
        self._state = state

    @property
    def value(self) -> ListenerState:
        return self._state

    def compare_and_swap(self, old: ListenerState, new: ListenerState) -> bool:
        with self._lock:
            if self._state is not old:
                return False
            self._state = new
            return True

    def swap(self, new: ListenerState) -> ListenerState:
        with self._lock:
            previous, self._state = self._state, new
            return previous


class ListenerClient:
    """Polls a :class:`~pyancla.client.Reader` on a fixed interval.

    Usage::

        async with StoreClient(config) as store:
            poller = ListenerClient(my_listener, store, pull_interval=config.pull_interval)
            await poller.start()
            ...
            await poller.stop()

    Parameters
    ----------
    listener : Listener or callable
        Called with the fetched items after every successful poll.
        Plain callables are wrapped in :class:`ListenerFunc`.
    reader : Reader
        Source of the items, usually a :class:`~pyancla.client.StoreClient`.
    pull_interval : float
        Seconds between polls. Non-positive values select the 5 second
        default.
    measures : Measures or None
        Metrics sink for poll outcomes. A private one is created when
        omitted.
    """

    def __init__(
        self,
        listener: Listener | Callable[[list[Item]], Any] | None,
        reader: Reader | None,
        *,
        pull_interval: float = DEFAULT_PULL_INTERVAL,
        measures: Measures | None = None,
    ) -> None:
        errors: list[str] = []
        if listener is None:
            errors.append("no listener provided")
        if reader is None:
            errors.append("no reader provided")
        if errors:
            raise AnclaConfigError("ancla listener configuration error", errors=errors)

        if not hasattr(listener, "update") and callable(listener):
            listener = ListenerFunc(listener)

        self._listener: Listener = listener  # type: ignore[assignment]
        self._reader: Reader = reader  # type: ignore[assignment]
        self._pull_interval = pull_interval if pull_interval > 0 else DEFAULT_PULL_INTERVAL
        self._measures = measures if measures is not None else Measures()
        self._state = _StateFlag()
        self._shutdown: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> ListenerState:
        return self._state.value

    @property
    def is_running(self) -> bool:
        return self._state.value is ListenerState.RUNNING

    @property
    def pull_interval(self) -> float:
        return self._pull_interval

    @property
    def measures(self) -> Measures:
        return self._measures

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ListenerClient:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self.is_running:
            await self.stop()

    # ------------------------------------------------------------------
    # Start / stop
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Begin polling in the background.

        Raises :class:`~pyancla.exceptions.ListenerNotStoppedError` right
        away if the listener is running or in the middle of a transition.
        Call :meth:`stop` first to restart it.
        """
        if not self._state.compare_and_swap(ListenerState.STOPPED, ListenerState.TRANSITIONING):
            _logger.error("Start called when a listener was not in stopped state")
            raise ListenerNotStoppedError()

        try:
            shutdown = asyncio.Event()
            self._task = asyncio.get_running_loop().create_task(self._run(shutdown), name="pyancla-listener")
            self._shutdown = shutdown
        except BaseException:
            self._state.swap(ListenerState.STOPPED)
            raise

        self._state.swap(ListenerState.RUNNING)
        _logger.debug("Listener started with pull interval %.3fs", self._pull_interval)

    async def stop(self) -> None:
        """Stop polling.

        Raises :class:`~pyancla.exceptions.ListenerNotRunningError` if the
        listener is stopped or in the middle of a transition. The poll
        task is cancelled and awaited, unless ``stop`` is called from a
        listener callback running inside that task.
        """
        if not self._state.compare_and_swap(ListenerState.RUNNING, ListenerState.TRANSITIONING):
            _logger.error("Stop called when a listener was not in running state")
            raise ListenerNotRunningError()

        task, self._task = self._task, None
        shutdown, self._shutdown = self._shutdown, None
        try:
            if shutdown is not None:
                shutdown.set()
            if task is not None and task is not asyncio.current_task():
                task.cancel()
                await asyncio.wait({task})
        finally:
            self._state.swap(ListenerState.STOPPED)
        _logger.debug("Listener stopped")

    # ------------------------------------------------------------------
    # Poll loop
    # ------------------------------------------------------------------

    async def _run(self, shutdown: asyncio.Event) -> None:
        loop = asyncio.get_running_loop()
        interval = self._pull_interval
        next_tick = loop.time() + interval

        while True:
            delay = next_tick - loop.time()
            try:
                await asyncio.wait_for(shutdown.wait(), timeout=max(delay, 0))
                return
            except TimeoutError:
                pass

            await self._poll()

            # Fixed rate: ticks missed while polling are dropped.
            next_tick += interval
            now = loop.time()
            if next_tick <= now:
                next_tick += ((now - next_tick) // interval + 1) * interval

    async def _poll(self) -> None:
        try:
            items = await self._reader.get_items("")
        except Exception:
            _logger.error("Failed to get items for listeners", exc_info=True)
            self._measures.record_poll(PollOutcome.FAILURE)
            return

        try:
            result = self._listener.update(items)
            if inspect.isawaitable(result):
                await result
        except Exception:
            _logger.exception("Listener failed to process %d items", len(items))

        self._measures.record_poll(PollOutcome.SUCCESS)
