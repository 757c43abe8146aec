"""Debounced whole-document synchronization with the remote store."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

from nutrition_sync.domain.logs import AppState, History, Targets

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 2.0
DEFAULT_SUCCESS_DISPLAY_SECONDS = 3.0


class SyncStatus(StrEnum):
    """Visible state of remote synchronization."""

    IDLE = "idle"
    SYNCING = "syncing"
    SUCCESS = "success"
    ERROR = "error"


class RemoteStore(Protocol):
    """Single-document remote store with whole-document semantics."""

    async def fetch_remote(self) -> AppState | None:
        """Return the stored document, or None when unavailable."""

    async def push_remote(self, history: History, targets: Targets) -> bool:
        """Replace the stored document and return True on acknowledgement."""


StatusListener = Callable[[SyncStatus], None]


@dataclass
class SyncCoordinator:
    """Coalesces state changes into debounced full-document pushes.

    ``schedule_push`` restarts the debounce timer; when it fires the latest
    snapshot is pushed. A push that is already in flight is never cancelled:
    the next cycle waits for it to settle before pushing again.
    """

    remote: RemoteStore
    snapshot: Callable[[], AppState]
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    success_display_seconds: float = DEFAULT_SUCCESS_DISPLAY_SECONDS
    status: SyncStatus = field(default=SyncStatus.IDLE, init=False)
    _listeners: list[StatusListener] = field(default_factory=list, init=False)
    _timer: asyncio.Task[None] | None = field(default=None, init=False, repr=False)
    _in_flight: asyncio.Task[bool] | None = field(
        default=None, init=False, repr=False
    )
    _status_reset: asyncio.Task[None] | None = field(
        default=None, init=False, repr=False
    )

    def on_status_change(self, listener: StatusListener) -> None:
        """Register a callback invoked with every status transition."""
        self._listeners.append(listener)

    @property
    def has_pending_push(self) -> bool:
        return _is_running(self._timer)

    def schedule_push(self) -> None:
        """(Re)start the debounce timer; must be called inside the event loop."""
        if _is_running(self._timer):
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().create_task(
            self._push_after_delay()
        )

    async def push_now(self) -> bool:
        """Skip the debounce and push the latest state right away."""
        if _is_running(self._timer):
            self._timer.cancel()
        return await self._run_cycle()

    async def wait_idle(self) -> None:
        """Wait until no timer, push, or status display is pending."""
        while True:
            pending = [
                task
                for task in (self._timer, self._in_flight, self._status_reset)
                if _is_running(task)
            ]
            if not pending:
                return
            await asyncio.wait(pending)

    async def close(self) -> None:
        """Drop the pending timer and let an in-flight push settle."""
        for task in (self._timer, self._status_reset):
            if _is_running(task):
                task.cancel()
        if _is_running(self._in_flight):
            await asyncio.wait([self._in_flight])

    async def _push_after_delay(self) -> None:
        await asyncio.sleep(self.debounce_seconds)
        await self._run_cycle()

    async def _run_cycle(self) -> bool:
        while _is_running(self._in_flight):
            await asyncio.shield(self._in_flight)
        state = self.snapshot()
        if not state.history:
            logger.debug("History is empty; skipping remote push")
            return False
        self._in_flight = asyncio.get_running_loop().create_task(self._push(state))
        return await asyncio.shield(self._in_flight)

    async def _push(self, state: AppState) -> bool:
        self._set_status(SyncStatus.SYNCING)
        try:
            succeeded = await self.remote.push_remote(state.history, state.targets)
        except Exception:
            logger.exception("Remote push raised an unexpected error")
            succeeded = False
        if succeeded:
            self._set_status(SyncStatus.SUCCESS)
            self._status_reset = asyncio.get_running_loop().create_task(
                self._reset_after_display()
            )
        else:
            logger.warning("Remote push failed; local state remains authoritative")
            self._set_status(SyncStatus.ERROR)
        return succeeded

    async def _reset_after_display(self) -> None:
        await asyncio.sleep(self.success_display_seconds)
        if self.status is SyncStatus.SUCCESS:
            self._set_status(SyncStatus.IDLE)

    def _set_status(self, status: SyncStatus) -> None:
        if status is not SyncStatus.IDLE and _is_running(self._status_reset):
            self._status_reset.cancel()
        if status is self.status:
            return
        self.status = status
        for listener in self._listeners:
            listener(status)


def _is_running(task: asyncio.Task | None) -> bool:
    return task is not None and not task.done()
