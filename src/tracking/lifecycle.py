"""Finite-state rules for a match's status and candidate-interest flag.

pending -> viewed -> shortlisted -> interviewing -> hired, with rejected
reachable from every non-terminal state. hired and rejected are terminal.
Scoring never moves a match through this table; only explicit actions do.
"""
from typing import Optional, Union

from src.matching.exceptions import InvalidTransitionError
from src.persistence.models import Match, MatchStatus

ALLOWED_TRANSITIONS: dict[MatchStatus, frozenset[MatchStatus]] = {
    MatchStatus.PENDING: frozenset({MatchStatus.VIEWED, MatchStatus.REJECTED}),
    MatchStatus.VIEWED: frozenset({MatchStatus.SHORTLISTED, MatchStatus.REJECTED}),
    MatchStatus.SHORTLISTED: frozenset({MatchStatus.INTERVIEWING, MatchStatus.REJECTED}),
    MatchStatus.INTERVIEWING: frozenset({MatchStatus.HIRED, MatchStatus.REJECTED}),
    MatchStatus.HIRED: frozenset(),
    MatchStatus.REJECTED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def _parse_status(value: Union[str, MatchStatus], current: str) -> MatchStatus:
    try:
        return MatchStatus(value)
    except ValueError:
        raise InvalidTransitionError(current, str(value), "unknown status") from None


def is_terminal(status: Union[str, MatchStatus]) -> bool:
    return MatchStatus(status) in TERMINAL_STATUSES


def check_transition(
    current: Union[str, MatchStatus],
    target: Union[str, MatchStatus],
) -> MatchStatus:
    """
    Validate a status change against the transition table.

    Returns:
        The target as a MatchStatus

    Raises:
        InvalidTransitionError: The change is not permitted
    """
    current_status = MatchStatus(current)
    target_status = _parse_status(target, current_status.value)

    if target_status not in ALLOWED_TRANSITIONS[current_status]:
        reason = "status is terminal" if current_status in TERMINAL_STATUSES else None
        raise InvalidTransitionError(current_status.value, target_status.value, reason)
    return target_status


def apply_transition(
    match: Match,
    target: Union[str, MatchStatus],
    notes: Optional[str] = None,
) -> Match:
    """
    Move a match to a new status in place.

    Nothing is mutated when the transition is rejected.

    Args:
        match: Match to update
        target: Requested next status
        notes: Optional recruiter notes replacing the current ones

    Returns:
        The same match, updated
    """
    target_status = check_transition(match.status, target)
    match.status = target_status.value
    if notes:
        match.recruiter_notes = notes
    return match


def set_candidate_interest(match: Match, interested: Optional[bool]) -> Match:
    """Set the candidate's interest flag without touching status.

    Raises:
        InvalidTransitionError: The match is already hired or rejected
    """
    if is_terminal(match.status):
        raise InvalidTransitionError(
            match.status, match.status, "interest cannot change on a closed match"
        )
    match.candidate_interested = interested
    return match
