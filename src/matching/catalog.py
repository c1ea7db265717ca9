"""Candidate and job sources consumed by the matching engine.

Profiles and postings are owned by upstream ingestion (resume parsing, the
posting CRUD layer, feed imports). The engine only reads them through the
``ProfileCatalog`` protocol. ``InMemoryCatalog`` backs scripts and tests.
"""
from pathlib import Path
from typing import Iterable, Optional, Protocol, runtime_checkable

import yaml

from src.matching.profiles import CandidateProfile, JobPosting


@runtime_checkable
class ProfileCatalog(Protocol):
    """Read-only access to candidate profiles and job postings."""

    def get_candidate(self, candidate_id: str) -> Optional[CandidateProfile]:
        ...

    def get_job(self, job_id: str) -> Optional[JobPosting]:
        ...

    def list_candidates(self) -> list[CandidateProfile]:
        """Active candidates eligible for matching."""
        ...

    def list_jobs(self) -> list[JobPosting]:
        """Active postings eligible for matching."""
        ...


class InMemoryCatalog:
    """Dictionary-backed catalog."""

    def __init__(
        self,
        candidates: Iterable[CandidateProfile] = (),
        jobs: Iterable[JobPosting] = (),
    ):
        self._candidates = {c.id: c for c in candidates}
        self._jobs = {j.id: j for j in jobs}

    def add_candidate(self, candidate: CandidateProfile) -> None:
        self._candidates[candidate.id] = candidate

    def add_job(self, job: JobPosting) -> None:
        self._jobs[job.id] = job

    def get_candidate(self, candidate_id: str) -> Optional[CandidateProfile]:
        return self._candidates.get(candidate_id)

    def get_job(self, job_id: str) -> Optional[JobPosting]:
        return self._jobs.get(job_id)

    def list_candidates(self) -> list[CandidateProfile]:
        return [c for c in self._candidates.values() if c.active]

    def list_jobs(self) -> list[JobPosting]:
        return [j for j in self._jobs.values() if j.active]

    def __repr__(self) -> str:
        return f"<InMemoryCatalog candidates={len(self._candidates)} jobs={len(self._jobs)}>"


def load_catalog(path: str | Path) -> InMemoryCatalog:
    """
    Load candidates and jobs from a YAML file.

    Expected layout::

        candidates:
          - id: c1
            skills: {technical: [Python, SQL]}
            total_years: 3
        jobs:
          - id: j1
            required_skills: {technical: [python]}
            job_type: full-time

    Args:
        path: Path to the catalog YAML file

    Returns:
        InMemoryCatalog with every entry validated
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    candidates = [CandidateProfile.model_validate(c) for c in data.get("candidates") or []]
    jobs = [JobPosting.model_validate(j) for j in data.get("jobs") or []]
    return InMemoryCatalog(candidates=candidates, jobs=jobs)
