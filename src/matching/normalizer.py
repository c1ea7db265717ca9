"""Canonicalize raw candidate and job attributes into comparable forms.

Absent optional values never become zero. They normalize to an explicit
``Marker`` so the factor scorers can tell "no requirement" apart from
"requirement of zero". Malformed numbers are corrected rather than rejected
and every correction is recorded as a ``ValidationIssue``.
"""
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Union

from src.matching.profiles import (
    CandidateProfile,
    JobLocation,
    JobPosting,
    JobType,
    SalaryRange,
)

logger = logging.getLogger(__name__)

REMOTE = "REMOTE"

_JOB_TYPE_SEPARATORS = re.compile(r"[\s_]+")


class Marker(Enum):
    """Explicit stand-ins for missing values."""

    UNBOUNDED = "unbounded"
    UNKNOWN = "unknown"


Bound = Union[float, Marker]


@dataclass(frozen=True)
class ValidationIssue:
    """A corrected input field. Recorded, never raised."""

    field: str
    message: str


@dataclass(frozen=True)
class NormalizedSalary:
    minimum: Bound
    maximum: Bound
    currency: str


@dataclass(frozen=True)
class NormalizedLocation:
    """Comparable job location.

    ``token`` is ``REMOTE`` for remote postings, otherwise the canonical
    "city, state, country" text. ``keys`` holds the strings a candidate
    preference may equal (city, state, and "city, state").
    """

    token: str
    keys: frozenset[str] = frozenset()

    @property
    def is_remote(self) -> bool:
        return self.token == REMOTE


REMOTE_LOCATION = NormalizedLocation(token=REMOTE)


@dataclass(frozen=True)
class NormalizedCandidate:
    id: str
    technical_skills: frozenset[str]
    soft_skills: frozenset[str]
    total_years: Union[float, Marker]
    job_types: frozenset[JobType]
    salary: Union[NormalizedSalary, Marker]
    preferred_locations: frozenset[str]
    willing_to_relocate: bool
    issues: tuple[ValidationIssue, ...] = field(default=())


@dataclass(frozen=True)
class NormalizedJob:
    id: str
    required_technical: frozenset[str]
    required_soft: frozenset[str]
    min_years: Bound
    max_years: Bound
    salary: Union[NormalizedSalary, Marker]
    job_type: Union[JobType, Marker]
    location: Union[NormalizedLocation, Marker]
    issues: tuple[ValidationIssue, ...] = field(default=())


def normalize_text(value: str) -> str:
    """Lower-case, trim and collapse internal whitespace."""
    return " ".join(value.strip().lower().split())


def normalize_skills(skills: Iterable[str]) -> frozenset[str]:
    """Normalize skill strings into a deduplicated set."""
    normalized = (normalize_text(s) for s in skills if s)
    return frozenset(s for s in normalized if s)


def normalize_job_type(value: Optional[str]) -> Optional[JobType]:
    """Map free-form job type text ("Full Time", "full_time") to a JobType.

    Returns None when the text does not name a known type.
    """
    if not value:
        return None
    canonical = _JOB_TYPE_SEPARATORS.sub("-", normalize_text(value))
    try:
        return JobType(canonical)
    except ValueError:
        return None


def _normalize_range(
    low: Optional[float],
    high: Optional[float],
    name: str,
    issues: list[ValidationIssue],
) -> tuple[Bound, Bound]:
    """Clamp negative ends to zero and swap inverted ranges."""
    if low is not None and low < 0:
        issues.append(ValidationIssue(f"{name}.min", f"negative value {low} clamped to 0"))
        low = 0.0
    if high is not None and high < 0:
        issues.append(ValidationIssue(f"{name}.max", f"negative value {high} clamped to 0"))
        high = 0.0
    if low is not None and high is not None and high < low:
        issues.append(
            ValidationIssue(name, f"max {high} below min {low}; bounds swapped")
        )
        low, high = high, low

    return (
        float(low) if low is not None else Marker.UNBOUNDED,
        float(high) if high is not None else Marker.UNBOUNDED,
    )


def _normalize_salary(
    salary: Optional[SalaryRange],
    name: str,
    default_currency: str,
    issues: list[ValidationIssue],
) -> Union[NormalizedSalary, Marker]:
    if salary is None or (salary.min is None and salary.max is None):
        return Marker.UNKNOWN

    minimum, maximum = _normalize_range(salary.min, salary.max, name, issues)
    currency = (salary.currency or default_currency).strip().upper()
    return NormalizedSalary(minimum=minimum, maximum=maximum, currency=currency)


def _normalize_location(
    location: Optional[JobLocation],
    remote: bool,
) -> Union[NormalizedLocation, Marker]:
    if remote:
        return REMOTE_LOCATION
    if location is None:
        return Marker.UNKNOWN

    city = normalize_text(location.city or "")
    state = normalize_text(location.state or "")
    country = normalize_text(location.country or "")
    if not city and not state:
        return Marker.UNKNOWN

    keys = {part for part in (city, state) if part}
    if city and state:
        keys.add(f"{city}, {state}")
    token = ", ".join(part for part in (city, state, country) if part)
    return NormalizedLocation(token=token, keys=frozenset(keys))


def normalize_candidate(
    profile: CandidateProfile,
    default_currency: str = "USD",
) -> NormalizedCandidate:
    """Normalize a candidate profile for scoring."""
    issues: list[ValidationIssue] = []

    total_years: Union[float, Marker] = Marker.UNKNOWN
    if profile.total_years is not None:
        total_years = float(profile.total_years)
        if total_years < 0:
            issues.append(
                ValidationIssue("total_years", f"negative value {total_years} clamped to 0")
            )
            total_years = 0.0

    job_types = set()
    for raw in profile.job_types:
        job_type = normalize_job_type(raw)
        if job_type is None:
            issues.append(ValidationIssue("job_types", f"unrecognized job type '{raw}' ignored"))
            continue
        job_types.add(job_type)

    normalized = NormalizedCandidate(
        id=profile.id,
        technical_skills=normalize_skills(profile.skills.technical),
        soft_skills=normalize_skills(profile.skills.soft),
        total_years=total_years,
        job_types=frozenset(job_types),
        salary=_normalize_salary(
            profile.expected_salary, "expected_salary", default_currency, issues
        ),
        preferred_locations=frozenset(
            normalize_text(loc) for loc in profile.preferred_locations
        ),
        willing_to_relocate=profile.willing_to_relocate,
        issues=tuple(issues),
    )

    if issues:
        logger.debug("Corrected %d field(s) on candidate %s", len(issues), profile.id)
    return normalized


def normalize_job(
    posting: JobPosting,
    default_currency: str = "USD",
) -> NormalizedJob:
    """Normalize a job posting for scoring."""
    issues: list[ValidationIssue] = []

    experience = posting.experience
    min_years, max_years = _normalize_range(
        experience.min if experience else None,
        experience.max if experience else None,
        "experience",
        issues,
    )

    job_type: Union[JobType, Marker] = Marker.UNKNOWN
    if posting.job_type:
        parsed = normalize_job_type(posting.job_type)
        if parsed is None:
            issues.append(
                ValidationIssue("job_type", f"unrecognized job type '{posting.job_type}'")
            )
        else:
            job_type = parsed

    remote = bool(posting.location and posting.location.remote) or job_type is JobType.REMOTE

    normalized = NormalizedJob(
        id=posting.id,
        required_technical=normalize_skills(posting.required_skills.technical),
        required_soft=normalize_skills(posting.required_skills.soft),
        min_years=min_years,
        max_years=max_years,
        salary=_normalize_salary(posting.salary, "salary", default_currency, issues),
        job_type=job_type,
        location=_normalize_location(posting.location, remote),
        issues=tuple(issues),
    )

    if issues:
        logger.debug("Corrected %d field(s) on job %s", len(issues), posting.id)
    return normalized
