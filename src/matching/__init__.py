"""Candidate-job matching and scoring."""
from .aggregator import MatchResult, aggregate, score_match
from .catalog import InMemoryCatalog, ProfileCatalog, load_catalog
from .normalizer import normalize_candidate, normalize_job
from .profiles import CandidateProfile, JobPosting, JobType

__all__ = [
    "MatchResult",
    "aggregate",
    "score_match",
    "normalize_candidate",
    "normalize_job",
    "CandidateProfile",
    "JobPosting",
    "JobType",
    "InMemoryCatalog",
    "ProfileCatalog",
    "load_catalog",
]
