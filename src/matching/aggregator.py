"""Combine factor sub-scores into a single explainable match score."""
from dataclasses import asdict, dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from src.matching.factors import (
    score_experience,
    score_job_type,
    score_location,
    score_salary,
    score_skills,
)
from src.matching.normalizer import (
    NormalizedCandidate,
    NormalizedJob,
    ValidationIssue,
    normalize_candidate,
    normalize_job,
)
from src.matching.profiles import CandidateProfile, JobPosting

# Skills and experience dominate fit; logistics factors are secondary.
WEIGHTS: dict[str, Decimal] = {
    "skills": Decimal("0.35"),
    "experience": Decimal("0.25"),
    "location": Decimal("0.15"),
    "salary": Decimal("0.15"),
    "job_type": Decimal("0.10"),
}


def validate_weights(weights: dict[str, Decimal]) -> None:
    """Raise ValueError unless the weights sum to exactly 1."""
    total = sum(weights.values(), Decimal("0"))
    if total != Decimal("1"):
        raise ValueError(f"Match weights must sum to 1.0, got {total}")
    if any(w < 0 for w in weights.values()):
        raise ValueError("Match weights must be non-negative")


validate_weights(WEIGHTS)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 always rounding up."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class ScoreBreakdown:
    skills_match: int
    experience_match: int
    location_match: int
    salary_match: int
    job_type_match: int


@dataclass(frozen=True)
class MatchDetails:
    matching_skills: tuple[str, ...]
    missing_skills: tuple[str, ...]
    experience_difference: Optional[float]
    salary_compatibility: str
    location_compatibility: str


@dataclass(frozen=True)
class MatchResult:
    """Value object handed to the repository; never persisted directly."""

    match_score: int
    score_breakdown: ScoreBreakdown
    match_details: MatchDetails
    issues: tuple[ValidationIssue, ...] = field(default=(), compare=False)

    def breakdown_dict(self) -> dict:
        return asdict(self.score_breakdown)

    def details_dict(self) -> dict:
        details = asdict(self.match_details)
        details["matching_skills"] = list(self.match_details.matching_skills)
        details["missing_skills"] = list(self.match_details.missing_skills)
        return details

    def to_dict(self) -> dict:
        return {
            "match_score": self.match_score,
            "score_breakdown": self.breakdown_dict(),
            "match_details": self.details_dict(),
            "issues": [asdict(issue) for issue in self.issues],
        }


def aggregate(candidate: NormalizedCandidate, job: NormalizedJob) -> MatchResult:
    """
    Score a normalized candidate against a normalized job.

    Stateless: identical inputs always produce an identical MatchResult.

    Args:
        candidate: Normalized candidate
        job: Normalized job posting

    Returns:
        MatchResult with overall score, breakdown and explanation
    """
    skills = score_skills(candidate, job)
    experience = score_experience(candidate, job)
    location = score_location(candidate, job)
    salary = score_salary(candidate, job)

    breakdown = ScoreBreakdown(
        skills_match=round_half_up(skills.score),
        experience_match=round_half_up(experience.score),
        location_match=round_half_up(location.score),
        salary_match=round_half_up(salary.score),
        job_type_match=round_half_up(score_job_type(candidate, job)),
    )

    weighted = (
        WEIGHTS["skills"] * breakdown.skills_match
        + WEIGHTS["experience"] * breakdown.experience_match
        + WEIGHTS["location"] * breakdown.location_match
        + WEIGHTS["salary"] * breakdown.salary_match
        + WEIGHTS["job_type"] * breakdown.job_type_match
    )
    overall = int(weighted.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    return MatchResult(
        match_score=max(0, min(100, overall)),
        score_breakdown=breakdown,
        match_details=MatchDetails(
            matching_skills=skills.matching,
            missing_skills=skills.missing,
            experience_difference=experience.difference,
            salary_compatibility=salary.label,
            location_compatibility=location.label,
        ),
        issues=candidate.issues + job.issues,
    )


def score_match(
    profile: CandidateProfile,
    posting: JobPosting,
    default_currency: str = "USD",
) -> MatchResult:
    """Normalize raw records and aggregate them in one call."""
    return aggregate(
        normalize_candidate(profile, default_currency),
        normalize_job(posting, default_currency),
    )
