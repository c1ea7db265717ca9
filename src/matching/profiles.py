"""Pydantic input records for candidates and job postings.

These models only enforce structure (types and shapes). Out-of-range values
such as negative years or inverted salary ranges are accepted here and
corrected later by the normalizer, since upstream data is user-submitted.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class JobType(str, Enum):
    """Employment types a posting can advertise."""

    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"
    REMOTE = "remote"


def _drop_blank(v):
    """Remove None and blank entries from string lists."""
    if isinstance(v, list):
        return [item for item in v if isinstance(item, str) and item.strip()]
    return v


class SkillSet(BaseModel):
    """Technical and soft skill strings, in any casing."""

    technical: list[str] = Field(default_factory=list)
    soft: list[str] = Field(default_factory=list)

    @field_validator("technical", "soft", mode="before")
    @classmethod
    def filter_empty_strings(cls, v):
        """Remove empty strings from lists."""
        return _drop_blank(v)


class SalaryRange(BaseModel):
    """Salary expectation or offer; either end may be omitted."""

    min: Optional[float] = None
    max: Optional[float] = None
    currency: Optional[str] = None


class ExperienceRange(BaseModel):
    """Years-of-experience requirement; a missing end means no bound."""

    min: Optional[float] = None
    max: Optional[float] = None


class JobLocation(BaseModel):
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    remote: bool = False


class CandidateProfile(BaseModel):
    """Structured candidate profile produced by resume ingestion."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    skills: SkillSet = Field(default_factory=SkillSet)
    total_years: Optional[float] = None
    job_types: list[str] = Field(default_factory=list)
    expected_salary: Optional[SalaryRange] = None
    preferred_locations: list[str] = Field(default_factory=list)
    willing_to_relocate: bool = False
    active: bool = True

    @field_validator("job_types", "preferred_locations", mode="before")
    @classmethod
    def filter_empty_strings(cls, v):
        """Remove empty strings from lists."""
        return _drop_blank(v)


class JobPosting(BaseModel):
    """Job posting as stored by the posting CRUD layer or a feed import."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    title: Optional[str] = None
    required_skills: SkillSet = Field(default_factory=SkillSet)
    experience: Optional[ExperienceRange] = None
    salary: Optional[SalaryRange] = None
    job_type: Optional[str] = None
    location: Optional[JobLocation] = None
    active: bool = True
