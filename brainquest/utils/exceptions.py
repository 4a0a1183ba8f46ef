"""
Exceptions raised by the quiz engine.

Endpoints translate these into HTTP errors; the state machines never let them
escape from a collaborator failure.
"""


class BrainQuestError(Exception):
    """Base exception for all engine errors."""
    pass


class ContentUnavailableError(BrainQuestError):
    """Raised when a quiz, encounter or question cannot be built from the available content."""

    def __init__(self, message: str, topic: str | None = None, difficulty: int | None = None):
        self.topic = topic
        self.difficulty = difficulty
        super().__init__(message)


class InvalidTransitionError(BrainQuestError):
    """Raised when an event arrives in a phase that does not accept it."""

    def __init__(self, event: str, phase: str):
        self.event = event
        self.phase = phase
        super().__init__(f"Cannot handle '{event}' while in phase '{phase}'")
