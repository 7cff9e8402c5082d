"""
Registry of open timeline sessions.

A session is one TimelineScheduler held by the server on behalf of a UI
shell. Sessions live in process memory; closing one stops its polling and
detaches its coordinator.

A session nobody has read for idle_timeout seconds is closed by the next
sweep. Sweeps run when a session is opened and from the app's background
sweeper.
"""

import asyncio
import time
from typing import Any, Callable

from pitcrew.exceptions import SessionNotFoundError
from pitcrew.logging_config import get_logger
from pitcrew.models.common import new_id
from pitcrew.timeline.scheduler import TimelineScheduler

logger = get_logger(__name__)

DEFAULT_IDLE_TIMEOUT_SECONDS = 600.0


class SessionRegistry:

    def __init__(
        self,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.idle_timeout = idle_timeout  # 0 disables expiry
        self._clock = clock
        self._sessions: dict[str, TimelineScheduler] = {}
        self._last_seen: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: Any) -> bool:
        return session_id in self._sessions

    async def open(self, scheduler: TimelineScheduler) -> str:
        await self.expire_idle()
        session_id = new_id()
        self._sessions[session_id] = scheduler
        self._last_seen[session_id] = self._clock()
        logger.info(f"Opened timeline session {session_id} (category={scheduler.category})")
        return session_id

    def get(self, session_id: str) -> TimelineScheduler:
        scheduler = self._sessions.get(session_id)
        if scheduler is None:
            raise SessionNotFoundError(session_id)
        self._last_seen[session_id] = self._clock()
        return scheduler

    async def close(self, session_id: str) -> None:
        scheduler = self._sessions.pop(session_id, None)
        self._last_seen.pop(session_id, None)
        if scheduler is None:
            raise SessionNotFoundError(session_id)
        await scheduler.close()
        logger.info(f"Closed timeline session {session_id}")

    async def expire_idle(self) -> list[str]:
        """Close every session idle for at least idle_timeout. Returns their ids."""
        if self.idle_timeout <= 0:
            return []
        now = self._clock()
        expired = [
            session_id
            for session_id, seen in self._last_seen.items()
            if now - seen >= self.idle_timeout
        ]
        for session_id in expired:
            scheduler = self._sessions.pop(session_id)
            del self._last_seen[session_id]
            await scheduler.close()
            logger.info(f"Expired idle timeline session {session_id}")
        return expired

    async def run_sweeper(self, interval: float) -> None:
        """Expire idle sessions every interval seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            try:
                await self.expire_idle()
            except Exception as e:
                logger.error(f"Session sweep failed: {e}")

    async def close_all(self) -> None:
        sessions, self._sessions = self._sessions, {}
        self._last_seen = {}
        for session_id, scheduler in sessions.items():
            await scheduler.close()
        if sessions:
            logger.info(f"Closed {len(sessions)} timeline sessions")
