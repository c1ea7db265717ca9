"""Match record persistence with a one-record-per-pair guarantee."""
import logging
import time
from datetime import datetime
from typing import Callable, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from config.settings import settings
from src.matching.aggregator import MatchResult
from src.matching.exceptions import ConcurrencyConflictError, NotFoundError
from src.persistence.models import Match, MatchStatus, generate_uuid, utcnow

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Errors a retry can plausibly clear (locked database, racing insert)
TRANSIENT_WRITE_ERRORS = (OperationalError, IntegrityError)


class MatchRepository:
    """Exclusive writer for match records.

    Scores are written with a single ``INSERT ... ON CONFLICT DO UPDATE``
    keyed on (candidate_id, job_id), so concurrent rescoring of one pair
    serializes in the database instead of racing a read-then-write.
    """

    def __init__(
        self,
        session: Session,
        clock: Callable[[], datetime] = utcnow,
        max_attempts: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
    ):
        """
        Initialize match repository.

        Args:
            session: Database session
            clock: Source of created/updated timestamps
            max_attempts: Write attempts before surfacing a conflict
            backoff_seconds: Linear backoff step between attempts
        """
        self.session = session
        self.clock = clock
        self.max_attempts = max_attempts or settings.match_write_max_attempts
        self.backoff_seconds = (
            backoff_seconds
            if backoff_seconds is not None
            else settings.match_write_backoff_seconds
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert_match(
        self,
        candidate_id: str,
        job_id: str,
        result: MatchResult,
        scored_at: Optional[datetime] = None,
    ) -> Match:
        """
        Create the match for a pair, or rescore the existing one.

        Status, candidate interest and recruiter notes are never touched.
        A result computed earlier than the stored one is discarded so an
        interleaved, slower rescore cannot overwrite fresher data.

        Args:
            candidate_id: Candidate identifier
            job_id: Job identifier
            result: Aggregated score to store
            scored_at: When ``result`` was computed (defaults to now)

        Returns:
            The stored Match
        """
        scored_at = scored_at or self.clock()

        self.run_write(
            lambda: self._upsert_once(candidate_id, job_id, result, scored_at),
            f"upsert match {candidate_id}/{job_id}",
        )
        return self.get_match(candidate_id, job_id)

    def _upsert_once(
        self,
        candidate_id: str,
        job_id: str,
        result: MatchResult,
        scored_at: datetime,
    ) -> None:
        now = self.clock()
        insert = self._dialect_insert()

        stmt = insert(Match).values(
            id=generate_uuid(),
            candidate_id=candidate_id,
            job_id=job_id,
            match_score=result.match_score,
            score_breakdown=result.breakdown_dict(),
            match_details=result.details_dict(),
            scored_at=scored_at,
            status=MatchStatus.PENDING.value,
            candidate_interested=None,
            version=1,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["candidate_id", "job_id"],
            set_={
                "match_score": stmt.excluded.match_score,
                "score_breakdown": stmt.excluded.score_breakdown,
                "match_details": stmt.excluded.match_details,
                "scored_at": stmt.excluded.scored_at,
                "updated_at": stmt.excluded.updated_at,
                "version": Match.version + 1,
            },
            where=stmt.excluded.scored_at >= Match.scored_at,
        )

        self.session.execute(stmt)
        self.session.commit()

    def _dialect_insert(self):
        """Pick the INSERT construct that supports ON CONFLICT for this backend."""
        dialect = self.session.get_bind().dialect.name
        if dialect == "sqlite":
            return sqlite.insert
        if dialect == "postgresql":
            return postgresql.insert
        raise ValueError(f"Unsupported database type for match upsert: {dialect}")

    def run_write(self, operation: Callable[[], T], description: str) -> T:
        """
        Run a write with a bounded retry on transient database errors.

        Raises:
            ConcurrencyConflictError: All attempts failed
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return operation()
            except TRANSIENT_WRITE_ERRORS as e:
                self.session.rollback()
                if attempt == self.max_attempts:
                    logger.error(
                        "All %d attempts failed for %s: %s",
                        self.max_attempts, description, e,
                    )
                    raise ConcurrencyConflictError(
                        f"{description} failed after {attempt} attempts",
                        attempts=attempt,
                    ) from e

                wait = self.backoff_seconds * attempt
                logger.warning(
                    "%s failed: %s, retrying in %.2fs (attempt %d/%d)",
                    description, e.__class__.__name__, wait, attempt, self.max_attempts,
                )
                time.sleep(wait)

        # max_attempts is always >= 1
        raise AssertionError("unreachable")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_match(self, candidate_id: str, job_id: str) -> Optional[Match]:
        """Get the match for a pair, or None."""
        stmt = (
            select(Match)
            .where(Match.candidate_id == candidate_id, Match.job_id == job_id)
            .execution_options(populate_existing=True)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def get_match(self, candidate_id: str, job_id: str) -> Match:
        """Get the match for a pair.

        Raises:
            NotFoundError: No match exists for the pair
        """
        match = self.find_match(candidate_id, job_id)
        if match is None:
            raise NotFoundError("Match", f"{candidate_id}/{job_id}")
        return match

    def get_match_by_id(self, match_id: str) -> Match:
        """Get a match by record id, refreshed from the database."""
        stmt = (
            select(Match)
            .where(Match.id == match_id)
            .execution_options(populate_existing=True)
        )
        match = self.session.execute(stmt).scalar_one_or_none()
        if match is None:
            raise NotFoundError("Match", match_id)
        return match

    def list_matches_for_candidate(
        self,
        candidate_id: str,
        min_score: Optional[int] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Match]:
        """
        Get a candidate's matches, best first.

        Ordered by score descending, ties broken by most recent update.

        Args:
            candidate_id: Candidate identifier
            min_score: Only include matches scoring at least this
            status: Only include matches in this status
            limit: Maximum results

        Returns:
            List of matches
        """
        stmt = select(Match).where(Match.candidate_id == candidate_id)
        return self._ranked(stmt, min_score, status, limit)

    def list_matches_for_job(
        self,
        job_id: str,
        min_score: Optional[int] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Match]:
        """Get a job's matches, best first (same ordering as for candidates)."""
        stmt = select(Match).where(Match.job_id == job_id)
        return self._ranked(stmt, min_score, status, limit)

    def _ranked(self, stmt, min_score, status, limit) -> list[Match]:
        if min_score is not None:
            stmt = stmt.where(Match.match_score >= min_score)
        if status:
            stmt = stmt.where(Match.status == MatchStatus(status).value)

        stmt = stmt.order_by(
            Match.match_score.desc(),
            Match.updated_at.desc(),
            Match.id,
        )
        if limit:
            stmt = stmt.limit(limit)

        result = self.session.execute(stmt.execution_options(populate_existing=True))
        return list(result.scalars().all())

    def job_ids_for_candidate(self, candidate_id: str) -> set[str]:
        """Jobs that already have a match with this candidate."""
        stmt = select(Match.job_id).where(Match.candidate_id == candidate_id)
        return set(self.session.execute(stmt).scalars().all())

    def candidate_ids_for_job(self, job_id: str) -> set[str]:
        """Candidates that already have a match with this job."""
        stmt = select(Match.candidate_id).where(Match.job_id == job_id)
        return set(self.session.execute(stmt).scalars().all())
