"""Trigger-driven scoring of candidate/job pairs.

Score computation fans out across a thread pool (the scorers are pure);
writes funnel back through the repository upsert one pair at a time.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from config.settings import Settings, settings as default_settings
from src.matching.aggregator import MatchResult, aggregate
from src.matching.catalog import ProfileCatalog
from src.matching.exceptions import ConcurrencyConflictError, NotFoundError
from src.matching.normalizer import (
    NormalizedCandidate,
    NormalizedJob,
    normalize_candidate,
    normalize_job,
)
from src.persistence.match_repository import MatchRepository
from src.persistence.models import Match

logger = logging.getLogger(__name__)


@dataclass
class RescoreSummary:
    """Outcome of a rescoring batch."""

    scored: int = 0
    stored: int = 0
    skipped: int = 0  # new pairs below the storage threshold
    failed: list[str] = field(default_factory=list)  # "candidate/job" keys


@dataclass(frozen=True)
class _Scored:
    candidate_id: str
    job_id: str
    result: MatchResult
    scored_at: datetime


class MatchingEngine:
    """Score pairs and keep their match records current."""

    def __init__(
        self,
        repository: MatchRepository,
        catalog: ProfileCatalog,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize matching engine.

        Args:
            repository: Match repository (the only writer)
            catalog: Source of candidate profiles and job postings
            settings: Configuration (defaults to the global settings)
        """
        self.repository = repository
        self.catalog = catalog
        self.settings = settings or default_settings

    def score_pair(self, candidate_id: str, job_id: str) -> Match:
        """
        Score one pair on demand and store it regardless of threshold.

        Raises:
            NotFoundError: Candidate or job is unknown
        """
        candidate = self._normalized_candidate(candidate_id)
        job = self._normalized_job(job_id)
        scored = self._score(candidate, job)
        return self.repository.upsert_match(
            candidate_id, job_id, scored.result, scored_at=scored.scored_at
        )

    def rescore_candidate(self, candidate_id: str) -> RescoreSummary:
        """
        Rescore a candidate against every active job.

        Called when the candidate's profile changes (e.g. resume upload).
        """
        candidate = self._normalized_candidate(candidate_id)
        jobs = [self._normalize_job(posting) for posting in self.catalog.list_jobs()]
        existing = self.repository.job_ids_for_candidate(candidate_id)

        pairs = [(candidate, job) for job in jobs]
        summary = self._run(pairs, existing_keys={(candidate_id, j) for j in existing})
        logger.info(
            "Rescored candidate %s: %d scored, %d stored, %d skipped, %d failed",
            candidate_id, summary.scored, summary.stored, summary.skipped, len(summary.failed),
        )
        return summary

    def rescore_job(self, job_id: str) -> RescoreSummary:
        """
        Rescore a job against every active candidate.

        Called when a posting is created, imported or edited.
        """
        job = self._normalized_job(job_id)
        candidates = [self._normalize_candidate(p) for p in self.catalog.list_candidates()]
        existing = self.repository.candidate_ids_for_job(job_id)

        pairs = [(candidate, job) for candidate in candidates]
        summary = self._run(pairs, existing_keys={(c, job_id) for c in existing})
        logger.info(
            "Rescored job %s: %d scored, %d stored, %d skipped, %d failed",
            job_id, summary.scored, summary.stored, summary.skipped, len(summary.failed),
        )
        return summary

    def top_matches_for_candidate(self, candidate_id: str, limit: int = 20) -> list[Match]:
        """Best stored matches for a candidate above the storage threshold."""
        return self.repository.list_matches_for_candidate(
            candidate_id,
            min_score=self.settings.min_store_score,
            limit=limit,
        )

    def _run(
        self,
        pairs: list[tuple[NormalizedCandidate, NormalizedJob]],
        existing_keys: set[tuple[str, str]],
    ) -> RescoreSummary:
        summary = RescoreSummary()
        if not pairs:
            return summary

        with ThreadPoolExecutor(max_workers=self.settings.rescore_max_workers) as executor:
            scored = list(executor.map(lambda pair: self._score(*pair), pairs))

        for item in scored:
            summary.scored += 1
            key = (item.candidate_id, item.job_id)

            # Existing records are always refreshed so their breakdown never goes stale
            if key not in existing_keys and item.result.match_score < self.settings.min_store_score:
                summary.skipped += 1
                continue

            try:
                self.repository.upsert_match(
                    item.candidate_id, item.job_id, item.result, scored_at=item.scored_at
                )
            except ConcurrencyConflictError as e:
                logger.warning("Could not store match %s/%s: %s", item.candidate_id, item.job_id, e)
                summary.failed.append(f"{item.candidate_id}/{item.job_id}")
                continue
            summary.stored += 1

        return summary

    def _score(self, candidate: NormalizedCandidate, job: NormalizedJob) -> _Scored:
        scored_at = self.repository.clock()
        result = aggregate(candidate, job)
        for issue in result.issues:
            logger.debug("%s/%s: %s %s", candidate.id, job.id, issue.field, issue.message)
        return _Scored(candidate.id, job.id, result, scored_at)

    def _normalized_candidate(self, candidate_id: str) -> NormalizedCandidate:
        profile = self.catalog.get_candidate(candidate_id)
        if profile is None:
            raise NotFoundError("Candidate", candidate_id)
        return self._normalize_candidate(profile)

    def _normalized_job(self, job_id: str) -> NormalizedJob:
        posting = self.catalog.get_job(job_id)
        if posting is None:
            raise NotFoundError("Job", job_id)
        return self._normalize_job(posting)

    def _normalize_candidate(self, profile) -> NormalizedCandidate:
        return normalize_candidate(profile, self.settings.default_currency)

    def _normalize_job(self, posting) -> NormalizedJob:
        return normalize_job(posting, self.settings.default_currency)
