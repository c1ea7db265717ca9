"""Factor scorers: skills, experience, location, salary and job type.

Each scorer is a pure function of a normalized candidate and job, returning
a sub-score in [0, 100] plus the detail used to explain it.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.matching.normalizer import Marker, NormalizedCandidate, NormalizedJob

FULL_SCORE = 100.0
NEUTRAL_SCORE = 50.0

# Points lost per year of experience short of the posting minimum
EXPERIENCE_PENALTY_PER_YEAR = 20.0

# Salary gaps scoring at or above this are still worth negotiating
NEGOTIABLE_SALARY_FLOOR = 50.0


class SalaryCompatibility(str, Enum):
    COMPATIBLE = "compatible"
    NEGOTIABLE_GAP = "negotiable-gap"
    INCOMPATIBLE = "incompatible"
    UNKNOWN = "unknown"


class LocationCompatibility(str, Enum):
    REMOTE = "remote"
    EXACT_MATCH = "exact-match"
    RELOCATION_POSSIBLE = "relocation-possible"
    MISMATCH = "mismatch"


@dataclass(frozen=True)
class SkillsScore:
    score: float
    matching: tuple[str, ...]
    missing: tuple[str, ...]


@dataclass(frozen=True)
class ExperienceScore:
    score: float
    difference: Optional[float]  # candidate years minus posting minimum


@dataclass(frozen=True)
class LabeledScore:
    score: float
    label: str


def _clamp(score: float) -> float:
    return max(0.0, min(FULL_SCORE, score))


def score_skills(candidate: NormalizedCandidate, job: NormalizedJob) -> SkillsScore:
    """Share of required technical skills the candidate has.

    Soft skills only feed the matching/missing detail.
    """
    required = job.required_technical
    candidate_all = candidate.technical_skills | candidate.soft_skills
    required_all = required | job.required_soft

    matching = tuple(sorted(candidate_all & required_all))
    missing = tuple(sorted(required_all - candidate_all))

    if not required:
        # Nothing required is trivially satisfied
        return SkillsScore(score=FULL_SCORE, matching=matching, missing=missing)

    hits = len(required & candidate.technical_skills)
    return SkillsScore(
        score=_clamp(FULL_SCORE * hits / len(required)),
        matching=matching,
        missing=missing,
    )


def score_experience(candidate: NormalizedCandidate, job: NormalizedJob) -> ExperienceScore:
    """Linear penalty below the posting minimum; no penalty above its maximum."""
    if job.min_years is Marker.UNBOUNDED:
        return ExperienceScore(score=FULL_SCORE, difference=None)
    if candidate.total_years is Marker.UNKNOWN:
        return ExperienceScore(score=NEUTRAL_SCORE, difference=None)

    difference = candidate.total_years - job.min_years
    if difference >= 0:
        return ExperienceScore(score=FULL_SCORE, difference=difference)

    shortfall = -difference
    return ExperienceScore(
        score=_clamp(FULL_SCORE - EXPERIENCE_PENALTY_PER_YEAR * shortfall),
        difference=difference,
    )


def score_location(candidate: NormalizedCandidate, job: NormalizedJob) -> LabeledScore:
    """Labels are tried in priority order: remote, exact match, relocation."""
    location = job.location

    if location is not Marker.UNKNOWN and location.is_remote:
        return LabeledScore(FULL_SCORE, LocationCompatibility.REMOTE.value)

    if location is not Marker.UNKNOWN and candidate.preferred_locations & location.keys:
        return LabeledScore(FULL_SCORE, LocationCompatibility.EXACT_MATCH.value)

    if candidate.willing_to_relocate:
        return LabeledScore(FULL_SCORE, LocationCompatibility.RELOCATION_POSSIBLE.value)

    if location is Marker.UNKNOWN:
        # Posting has no location to compare against: neutral score
        return LabeledScore(NEUTRAL_SCORE, LocationCompatibility.MISMATCH.value)

    return LabeledScore(0.0, LocationCompatibility.MISMATCH.value)


def score_salary(candidate: NormalizedCandidate, job: NormalizedJob) -> LabeledScore:
    """Compare the candidate's minimum expectation with the posting's maximum.

    No currency conversion is attempted: differing currencies are unknown.
    """
    expected = candidate.salary
    offered = job.salary

    if expected is Marker.UNKNOWN or offered is Marker.UNKNOWN:
        return LabeledScore(NEUTRAL_SCORE, SalaryCompatibility.UNKNOWN.value)
    if expected.currency != offered.currency:
        return LabeledScore(NEUTRAL_SCORE, SalaryCompatibility.UNKNOWN.value)

    floor = expected.minimum
    ceiling = offered.maximum
    if floor is Marker.UNBOUNDED or ceiling is Marker.UNBOUNDED or floor <= ceiling:
        return LabeledScore(FULL_SCORE, SalaryCompatibility.COMPATIBLE.value)

    # floor > ceiling >= 0, so floor is positive here
    gap = floor - ceiling
    score = _clamp(FULL_SCORE - FULL_SCORE * gap / floor)
    if score >= NEGOTIABLE_SALARY_FLOOR:
        return LabeledScore(score, SalaryCompatibility.NEGOTIABLE_GAP.value)
    return LabeledScore(score, SalaryCompatibility.INCOMPATIBLE.value)


def score_job_type(candidate: NormalizedCandidate, job: NormalizedJob) -> float:
    """An empty preference list places no constraint on job type.

    A posting without a recognizable job type (missing or free text that
    maps to no JobType) is unknown and scores neutral against a non-empty
    preference list, the same way a missing salary does.
    """
    if not candidate.job_types:
        return FULL_SCORE
    if job.job_type is Marker.UNKNOWN:
        return NEUTRAL_SCORE
    return FULL_SCORE if job.job_type in candidate.job_types else 0.0
