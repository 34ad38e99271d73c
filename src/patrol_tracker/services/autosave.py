"""Periodic persistence of in-progress patrol sessions."""

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from patrol_tracker.domain.patrols import PatrolSession, PatrolStatus
from patrol_tracker.services.repositories import PatrolRepository, progress_fields

logger = logging.getLogger(__name__)


@dataclass
class AutosaveScheduler:
    """Flushes the latest session snapshot on a fixed period.

    A failed flush is logged and simply retried on the next tick.
    """

    repository: PatrolRepository
    snapshot: Callable[[], PatrolSession]
    interval_seconds: float = 30.0
    _task: asyncio.Task | None = field(default=None, init=False, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)
    _stopped: bool = field(default=True, init=False, repr=False)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking on the running event loop."""
        if self.running:
            return
        self._stopped = False
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        """Stop ticking once any in-flight flush has finished."""
        self._stopped = True
        async with self._lock:
            task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def flush(self) -> bool:
        """Persist the current snapshot once. Returns True on success."""
        session = self.snapshot()
        if session.status is not PatrolStatus.IN_PROGRESS:
            return False
        try:
            await asyncio.to_thread(
                self.repository.update_session, session.id, progress_fields(session)
            )
        except Exception:
            logger.exception("Autosave failed for patrol %s", session.id)
            return False
        logger.debug(
            "Autosaved patrol %s with %d scans", session.id, len(session.scans)
        )
        return True

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            async with self._lock:
                if self._stopped:
                    return
                await self.flush()
