# brainquest/services/session_registry.py
"""
In-process registry of live quiz sessions and boss encounters, keyed by id.

A finished (or abandoned) machine stays reachable for ``closed_session_ttl``
seconds so its summary can be read and a retry or reset requested; after that
it is evicted the next time the registry is touched.
"""
from typing import Dict, Optional, TypeVar, Union

from brainquest.services.boss_battle import BossBattle
from brainquest.services.quiz_session import QuizSession
from brainquest.utils.config import settings
from brainquest.utils.logger import logger

LiveSession = Union[QuizSession, BossBattle]
M = TypeVar("M", QuizSession, BossBattle)

quiz_sessions: Dict[str, QuizSession] = {}
battles: Dict[str, BossBattle] = {}


def is_expired(machine: LiveSession) -> bool:
    if machine.closed_at is None:
        return False
    return machine.clock() - machine.closed_at >= settings.closed_session_ttl


def prune() -> int:
    """Drops expired machines from both registries; returns how many were dropped."""
    dropped = 0
    for registry in (quiz_sessions, battles):
        for key in [k for k, machine in registry.items() if is_expired(machine)]:
            del registry[key]
            dropped += 1
    if dropped:
        logger.debug(f"Evicted {dropped} closed session(s) from the live registry.")
    return dropped


def register(registry: Dict[str, M], key: str, machine: M) -> M:
    prune()
    registry[key] = machine
    return machine


def lookup(registry: Dict[str, M], key: str) -> Optional[M]:
    prune()
    return registry.get(key)


def rekey(registry: Dict[str, M], old_key: str, machine: M, new_key: str) -> M:
    """Moves a machine to its new id after a retry or reset."""
    registry.pop(old_key, None)
    return register(registry, new_key, machine)


def discard(registry: Dict[str, M], key: str) -> None:
    registry.pop(key, None)


def clear():
    for machine in [*quiz_sessions.values(), *battles.values()]:
        machine.abandon()
    quiz_sessions.clear()
    battles.clear()
