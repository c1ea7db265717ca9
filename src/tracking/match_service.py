"""Recruiter and candidate actions on persisted matches."""
import logging
import time
from typing import Callable, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from src.matching.exceptions import ConcurrencyConflictError
from src.persistence.match_repository import TRANSIENT_WRITE_ERRORS, MatchRepository
from src.persistence.models import Match, MatchStatus, MatchStatusHistory
from src.tracking.lifecycle import apply_transition, set_candidate_interest

logger = logging.getLogger(__name__)


class MatchService:
    """Service for moving matches through the hiring funnel.

    Every write is a compare-and-swap on the match's version. Callers that
    pass ``expected_version`` get a ``ConcurrencyConflictError`` as soon as
    the record has moved on; callers that don't are retried against a fresh
    read, up to the repository's attempt limit.
    """

    def __init__(self, session: Session, repository: Optional[MatchRepository] = None):
        """
        Initialize match service.

        Args:
            session: Database session
            repository: Repository sharing ``session`` (built if omitted)
        """
        self.session = session
        self.repository = repository or MatchRepository(session)

    def get_match(self, match_id: str) -> Match:
        """Get a match by ID (raises NotFoundError)."""
        return self.repository.get_match_by_id(match_id)

    def transition(
        self,
        match_id: str,
        target: Union[str, MatchStatus],
        expected_version: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> Match:
        """
        Move a match to a new status with history tracking.

        Args:
            match_id: Match ID
            target: Requested next status
            expected_version: Version the caller last saw, if any
            notes: Notes stored on the history entry and as recruiter notes

        Returns:
            Updated match

        Raises:
            NotFoundError: No such match
            InvalidTransitionError: Not permitted from the current status
            ConcurrencyConflictError: The record changed underneath the caller
        """

        def change(match: Match) -> None:
            old_status = match.status
            apply_transition(match, target, notes)
            self.session.add(
                MatchStatusHistory(
                    match_id=match.id,
                    old_status=old_status,
                    new_status=match.status,
                    notes=notes,
                    changed_at=self.repository.clock(),
                )
            )
            logger.info("Match %s: %s -> %s", match.id, old_status, match.status)

        return self._write(match_id, expected_version, change, f"transition match {match_id}")

    def mark_viewed(self, match_id: str) -> Match:
        """Record that the match was opened. Only a pending match moves."""
        match = self.get_match(match_id)
        if match.status != MatchStatus.PENDING.value:
            return match
        return self.transition(match_id, MatchStatus.VIEWED, expected_version=match.version)

    def record_interest(
        self,
        match_id: str,
        interested: Optional[bool],
        expected_version: Optional[int] = None,
    ) -> Match:
        """Set the candidate's interest flag. Status is unchanged."""
        return self._write(
            match_id,
            expected_version,
            lambda match: set_candidate_interest(match, interested),
            f"record interest on match {match_id}",
        )

    def update_recruiter_notes(
        self,
        match_id: str,
        notes: Optional[str],
        expected_version: Optional[int] = None,
    ) -> Match:
        """Replace recruiter notes. Allowed in any status."""

        def change(match: Match) -> None:
            match.recruiter_notes = notes

        return self._write(match_id, expected_version, change, f"update notes on match {match_id}")

    def _write(
        self,
        match_id: str,
        expected_version: Optional[int],
        change: Callable[[Match], object],
        description: str,
    ) -> Match:
        """Read, change and commit a match under optimistic concurrency."""
        max_attempts = self.repository.max_attempts

        for attempt in range(1, max_attempts + 1):
            match = self.repository.get_match_by_id(match_id)
            if expected_version is not None and match.version != expected_version:
                raise ConcurrencyConflictError(
                    f"Match {match_id} is at version {match.version}, "
                    f"expected {expected_version}",
                    attempts=attempt,
                )

            change(match)
            match.updated_at = self.repository.clock()

            try:
                self.session.commit()
            except (StaleDataError, *TRANSIENT_WRITE_ERRORS) as e:
                self.session.rollback()
                if attempt == max_attempts:
                    logger.error("All %d attempts failed for %s: %s", max_attempts, description, e)
                    raise ConcurrencyConflictError(
                        f"{description} failed after {attempt} attempts",
                        attempts=attempt,
                    ) from e

                wait = self.repository.backoff_seconds * attempt
                logger.warning(
                    "%s lost a concurrent update, retrying in %.2fs (attempt %d/%d)",
                    description, wait, attempt, max_attempts,
                )
                time.sleep(wait)
                continue

            self.session.refresh(match)
            return match

        raise AssertionError("unreachable")

    def get_status_history(self, match_id: str) -> list[MatchStatusHistory]:
        """Status changes for a match, oldest first."""
        stmt = (
            select(MatchStatusHistory)
            .where(MatchStatusHistory.match_id == match_id)
            .order_by(MatchStatusHistory.changed_at, MatchStatusHistory.id)
        )
        return list(self.session.execute(stmt).scalars().all())

    def get_pipeline_counts(self, job_id: Optional[str] = None) -> dict[str, int]:
        """Get counts by status for pipeline view."""
        stmt = select(Match.status, func.count(Match.id)).group_by(Match.status)
        if job_id:
            stmt = stmt.where(Match.job_id == job_id)
        result = self.session.execute(stmt)
        return dict(result.all())
