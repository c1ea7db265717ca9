"""Typed failures raised by the matching engine.

Each error class carries a ``retryable`` attribute so API wrappers can tell
a transient write conflict apart from a caller mistake without inspecting
messages.
"""


class MatchingError(Exception):
    """Base exception for matching engine failures."""

    retryable = False


class InvalidTransitionError(MatchingError):
    """Raised when a status change is not permitted from the current state."""

    def __init__(self, current: str, target: str, reason: str | None = None):
        self.current = current
        self.target = target
        message = f"Cannot move match from '{current}' to '{target}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ConcurrencyConflictError(MatchingError):
    """Raised when a write lost its optimistic-concurrency race.

    The caller should re-fetch the match and retry against its current state.
    """

    retryable = True

    def __init__(self, message: str, attempts: int = 1):
        self.attempts = attempts
        super().__init__(message)


class NotFoundError(MatchingError):
    """Raised when a match, candidate or job does not exist."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")
