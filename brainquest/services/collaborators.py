# brainquest/services/collaborators.py
"""
Narrow interfaces the state machines talk to.

Persistence and activity recording are fire-and-forget from a session's point
of view; XP accrual is awaited because level-up routing depends on it. A
record handed to a background write stays handed off: retry, reset and
abandon never cancel those writes, they only stop the machine from reacting
to XP results that arrive afterwards.
"""
import asyncio
from typing import Awaitable, Callable, List, Optional, Protocol, Set

from brainquest.models.progress import AttemptRecord, LevelResult, SessionRecord
from brainquest.services.leveling import level_for
from brainquest.utils.config import settings
from brainquest.utils.logger import logger


class ProgressStore(Protocol):
    async def add_attempt(self, attempt: AttemptRecord) -> None: ...

    async def put_session(self, record: SessionRecord) -> None: ...


class XPAccrual(Protocol):
    async def add_xp(self, amount: int) -> LevelResult: ...


class ActivityRecorder(Protocol):
    async def record_activity(self) -> None: ...


class SessionCounter:
    """
    Count of completed sessions for one user, owned by whoever builds the
    session and handed to it explicitly. ``on_change`` persists the new value.
    """

    def __init__(self, value: int = 0, every: Optional[int] = None,
                 on_change: Optional[Callable[[int], Awaitable[None]]] = None):
        self.value = value
        self.every = every if every is not None else settings.feedback_prompt_every
        self.on_change = on_change

    @property
    def feedback_due(self) -> bool:
        return self.value > 0 and self.value % self.every == 0

    def increment(self) -> int:
        self.value += 1
        return self.value


class BackgroundTasks:
    """Tracks fire-and-forget coroutines so they can be awaited as a group."""

    def __init__(self, label: str):
        self.label = label
        self._tasks: Set[asyncio.Task] = set()

    def spawn(self, coro: Awaitable, description: str) -> None:
        task = asyncio.ensure_future(self._swallow(coro, description))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _swallow(self, coro: Awaitable, description: str) -> None:
        try:
            await coro
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(f"[{self.label}] Background '{description}' failed; gameplay continues.")

    async def drain(self) -> None:
        """Wait for everything spawned so far to settle."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


# --- In-memory collaborators (tests, offline play) ---

class InMemoryProgressStore:
    def __init__(self):
        self.attempts: List[AttemptRecord] = []
        self.sessions: List[SessionRecord] = []

    async def add_attempt(self, attempt: AttemptRecord) -> None:
        self.attempts.append(attempt)

    async def put_session(self, record: SessionRecord) -> None:
        self.sessions.append(record)


class InMemoryProfile:
    """XP accrual against a running total held in memory."""

    def __init__(self, total_xp: int = 0):
        self.total_xp = total_xp

    async def add_xp(self, amount: int) -> LevelResult:
        old_level = level_for(self.total_xp)
        self.total_xp += amount
        new_level = level_for(self.total_xp)
        return LevelResult(leveled=new_level > old_level, old_level=old_level,
                           new_level=new_level, total_xp=self.total_xp)


class NullActivityRecorder:
    async def record_activity(self) -> None:
        return None
