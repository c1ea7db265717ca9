"""Tests for attribute normalization."""
import pytest

from src.matching.normalizer import (
    REMOTE,
    Marker,
    NormalizedSalary,
    normalize_candidate,
    normalize_job,
    normalize_job_type,
    normalize_skills,
    normalize_text,
)
from src.matching.profiles import JobType


class TestTextAndSkills:
    """Tests for skill string canonicalization."""

    def test_normalize_text(self):
        assert normalize_text("  Machine   LEARNING ") == "machine learning"

    def test_skills_are_deduplicated_set(self):
        skills = normalize_skills(["Python", "python ", " PYTHON", "Node  JS"])
        assert skills == frozenset({"python", "node js"})

    def test_blank_skills_dropped(self):
        assert normalize_skills(["", "   ", "sql"]) == frozenset({"sql"})

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("full-time", JobType.FULL_TIME),
            ("Full Time", JobType.FULL_TIME),
            ("PART_TIME", JobType.PART_TIME),
            ("Internship", JobType.INTERNSHIP),
            ("gig", None),
            (None, None),
        ],
    )
    def test_normalize_job_type(self, raw, expected):
        assert normalize_job_type(raw) == expected


class TestNormalizeCandidate:
    """Tests for candidate normalization."""

    def test_basic_fields(self, scenario_candidate):
        candidate = normalize_candidate(scenario_candidate)

        assert candidate.technical_skills == frozenset({"python", "sql"})
        assert candidate.soft_skills == frozenset({"teamwork"})
        assert candidate.total_years == 3.0
        assert candidate.job_types == frozenset({JobType.FULL_TIME})
        assert candidate.salary == NormalizedSalary(60000.0, 80000.0, "USD")
        assert candidate.preferred_locations == frozenset({"denver"})
        assert candidate.issues == ()

    def test_missing_values_use_markers_not_zero(self, candidate_factory):
        candidate = normalize_candidate(candidate_factory(total_years=None))

        assert candidate.total_years is Marker.UNKNOWN
        assert candidate.salary is Marker.UNKNOWN

    def test_negative_years_clamped_with_issue(self, candidate_factory):
        candidate = normalize_candidate(candidate_factory(total_years=-2))

        assert candidate.total_years == 0.0
        assert [issue.field for issue in candidate.issues] == ["total_years"]

    def test_inverted_salary_swapped(self, candidate_factory):
        candidate = normalize_candidate(
            candidate_factory(expected_salary={"min": 90000, "max": 50000, "currency": "usd"})
        )

        assert candidate.salary == NormalizedSalary(50000.0, 90000.0, "USD")
        assert any("swapped" in issue.message for issue in candidate.issues)

    def test_salary_currency_defaults(self, candidate_factory):
        candidate = normalize_candidate(
            candidate_factory(expected_salary={"min": 40000}),
            default_currency="EUR",
        )

        assert candidate.salary.currency == "EUR"
        assert candidate.salary.maximum is Marker.UNBOUNDED

    def test_unknown_job_types_dropped(self, candidate_factory):
        candidate = normalize_candidate(candidate_factory(job_types=["Full Time", "gig"]))

        assert candidate.job_types == frozenset({JobType.FULL_TIME})
        assert len(candidate.issues) == 1


class TestNormalizeJob:
    """Tests for job posting normalization."""

    def test_remote_flag_overrides_city(self, job_factory):
        job = normalize_job(
            job_factory(location={"city": "Austin", "state": "TX", "remote": True})
        )
        assert job.location.token == REMOTE
        assert job.location.is_remote

    def test_remote_job_type_is_remote(self, job_factory):
        job = normalize_job(job_factory(job_type="remote", location={"city": "Austin"}))
        assert job.location.is_remote

    def test_location_keys(self, scenario_job):
        job = normalize_job(scenario_job)

        assert job.location.token == "austin, tx, us"
        assert job.location.keys == frozenset({"austin", "tx", "austin, tx"})

    def test_missing_location_is_unknown(self, job_factory):
        assert normalize_job(job_factory(location=None)).location is Marker.UNKNOWN
        assert normalize_job(job_factory(location={"country": "US"})).location is Marker.UNKNOWN

    def test_experience_bounds(self, job_factory):
        job = normalize_job(job_factory(experience={"max": 4}))

        assert job.min_years is Marker.UNBOUNDED
        assert job.max_years == 4.0

    def test_no_experience_is_unbounded(self, job_factory):
        job = normalize_job(job_factory())

        assert job.min_years is Marker.UNBOUNDED
        assert job.max_years is Marker.UNBOUNDED

    def test_malformed_experience_corrected(self, job_factory):
        job = normalize_job(job_factory(experience={"min": 8, "max": -1}))

        assert job.min_years == 0.0
        assert job.max_years == 8.0
        assert {issue.field for issue in job.issues} == {"experience.max", "experience"}

    def test_unrecognized_job_type(self, job_factory):
        job = normalize_job(job_factory(job_type="gig"))

        assert job.job_type is Marker.UNKNOWN
        assert job.issues[0].field == "job_type"

    def test_salary_without_numbers_is_unknown(self, job_factory):
        job = normalize_job(job_factory(salary={"currency": "USD"}))
        assert job.salary is Marker.UNKNOWN
