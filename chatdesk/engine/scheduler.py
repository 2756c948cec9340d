"""Poll scheduler — named, cancellable timers on the running event loop.

Each name owns at most one live handle. Starting a handle cancels the
previous holder of that name first, so two timers of the same role can
never run side by side.

Ticks are launched as their own tasks, the way a browser interval
fires regardless of whether the previous request has come back.
Cancelling a handle stops the schedule; requests already in flight are
left to finish (their results are filtered by the callers). Only
``shutdown()`` cancels in-flight ticks too, and closes the scheduler:
later start requests are refused so nothing runs after teardown.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from .errors import SchedulerError
from .models import PollHandleName

logger = logging.getLogger(__name__)

Tick = Callable[[], Awaitable[None]]


class PollScheduler:
    """Owns the poll timers of one view."""

    def __init__(self) -> None:
        self._handles: dict[PollHandleName, asyncio.Task] = {}
        self._inflight: set[asyncio.Task] = set()
        self._closed = False

    # ── inspection ──────────────────────────────────────────────

    @property
    def closed(self) -> bool:
        return self._closed

    def is_active(self, name: PollHandleName) -> bool:
        task = self._handles.get(name)
        return task is not None and not task.done()

    def active_names(self) -> list[PollHandleName]:
        return [name for name in self._handles if self.is_active(name)]

    @property
    def inflight_count(self) -> int:
        return len(self._inflight)

    # ── scheduling ──────────────────────────────────────────────

    def start_repeating(
        self,
        name: PollHandleName,
        tick: Tick,
        interval: float,
        *,
        immediate: bool = True,
    ) -> asyncio.Task | None:
        """Run *tick* every *interval* seconds until cancelled.

        With *immediate*, the first tick fires as soon as the loop runs
        the new task rather than after one interval.
        """
        if self._refuse(name):
            return None
        self.cancel(name)
        if self.is_active(name):
            raise SchedulerError(name.value)
        task = asyncio.get_running_loop().create_task(
            self._repeat(name, tick, interval, immediate),
            name=f"chatdesk-{name.value}",
        )
        self._register(name, task)
        logger.debug("Started %s every %.2fs", name.value, interval)
        return task

    def schedule_once(
        self,
        name: PollHandleName,
        tick: Tick,
        delay: float,
    ) -> asyncio.Task | None:
        """Run *tick* once after *delay* seconds unless cancelled first."""
        if self._refuse(name):
            return None
        self.cancel(name)
        if self.is_active(name):
            raise SchedulerError(name.value)
        task = asyncio.get_running_loop().create_task(
            self._once(name, tick, delay),
            name=f"chatdesk-{name.value}",
        )
        self._register(name, task)
        logger.debug("Scheduled %s in %.2fs", name.value, delay)
        return task

    def cancel(self, name: PollHandleName) -> bool:
        """Stop the schedule held under *name*. Idempotent.

        Returns True when a live handle was cancelled.
        """
        task = self._handles.pop(name, None)
        if task is None or task.done():
            return False
        task.cancel()
        logger.debug("Cancelled %s", name.value)
        return True

    def cancel_all(self) -> None:
        for name in list(self._handles):
            self.cancel(name)

    async def shutdown(self) -> None:
        """Cancel every schedule and every tick still in flight.

        The scheduler stays closed afterwards.
        """
        self._closed = True
        tasks = [t for t in self._handles.values() if not t.done()]
        tasks.extend(t for t in self._inflight if not t.done())
        self._handles.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._inflight.clear()

    async def drain(self) -> None:
        """Wait for ticks already in flight to finish."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    # ── internals ───────────────────────────────────────────────

    def _refuse(self, name: PollHandleName) -> bool:
        if self._closed:
            logger.debug("Scheduler closed; not starting %s", name.value)
        return self._closed

    def _register(self, name: PollHandleName, task: asyncio.Task) -> None:
        self._handles[name] = task

        def _forget(done: asyncio.Task) -> None:
            if self._handles.get(name) is done:
                del self._handles[name]

        task.add_done_callback(_forget)

    def _launch(self, name: PollHandleName, tick: Tick) -> None:
        task = asyncio.get_running_loop().create_task(
            self._run_tick(name, tick),
            name=f"chatdesk-{name.value}-tick",
        )
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    @staticmethod
    async def _run_tick(name: PollHandleName, tick: Tick) -> None:
        try:
            await tick()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Poll tick %s failed", name.value)

    async def _repeat(
        self,
        name: PollHandleName,
        tick: Tick,
        interval: float,
        immediate: bool,
    ) -> None:
        try:
            if not immediate:
                await asyncio.sleep(interval)
            while True:
                self._launch(name, tick)
                await asyncio.sleep(interval)
        except asyncio.CancelledError:
            logger.debug("Poll loop %s stopped", name.value)

    async def _once(self, name: PollHandleName, tick: Tick, delay: float) -> None:
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            logger.debug("Deferred %s cancelled before firing", name.value)
            return
        self._launch(name, tick)
