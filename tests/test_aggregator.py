"""Tests for score aggregation."""
import itertools
from decimal import Decimal

import pytest

from src.matching.aggregator import (
    WEIGHTS,
    MatchResult,
    aggregate,
    round_half_up,
    score_match,
    validate_weights,
)
from src.matching.normalizer import normalize_candidate, normalize_job


class TestWeights:
    def test_weights_sum_to_one(self):
        assert sum(WEIGHTS.values()) == Decimal("1")

    def test_bad_weights_rejected(self):
        with pytest.raises(ValueError):
            validate_weights({"skills": Decimal("0.5"), "experience": Decimal("0.4")})

    def test_negative_weight_rejected(self):
        with pytest.raises(ValueError):
            validate_weights({"skills": Decimal("1.2"), "experience": Decimal("-0.2")})


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value,expected",
        [(0.5, 1), (2.5, 3), (66.66666666666667, 67), (23.45, 23), (99.4, 99), (100.0, 100)],
    )
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


class TestAggregate:
    def test_worked_example(self, scenario_candidate, scenario_job):
        """Python+SQL candidate against a Python/SQL/Spark job in Austin."""
        result = score_match(scenario_candidate, scenario_job)

        breakdown = result.score_breakdown
        assert breakdown.skills_match == 67
        assert breakdown.experience_match == 100
        assert breakdown.location_match == 100
        assert breakdown.salary_match == 100
        assert breakdown.job_type_match == 100
        assert result.match_score == 88

        details = result.match_details
        assert details.matching_skills == ("python", "sql")
        assert details.missing_skills == ("spark",)
        assert details.experience_difference == 1
        assert details.salary_compatibility == "compatible"
        assert details.location_compatibility == "relocation-possible"

    def test_overall_rounds_half_up(self, candidate_factory, job_factory):
        # 0.35 * 50 + 25 + 15 + 15 + 10 = 82.5
        candidate = candidate_factory(
            skills={"technical": ["python"]},
            expected_salary={"min": 50000},
        )
        job = job_factory(
            required_skills={"technical": ["python", "go"]},
            salary={"max": 90000},
        )
        result = score_match(candidate, job)

        assert result.score_breakdown.skills_match == 50
        assert result.match_score == 83

    def test_deterministic(self, scenario_candidate, scenario_job):
        first = score_match(scenario_candidate, scenario_job)
        second = score_match(scenario_candidate, scenario_job)

        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_skill_order_irrelevant(self, candidate_factory, job_factory):
        job = job_factory(required_skills={"technical": ["sql", "python", "spark"]})
        a = score_match(candidate_factory(skills={"technical": ["Python", "SQL"]}), job)
        b = score_match(candidate_factory(skills={"technical": ["sql", "python", "sql"]}), job)

        assert a == b

    def test_empty_requirements_full_skills(self, candidate_factory, job_factory):
        result = score_match(
            candidate_factory(skills={"technical": []}),
            job_factory(required_skills={"technical": []}),
        )
        assert result.score_breakdown.skills_match == 100

    def test_scores_within_bounds(self, candidate_factory, job_factory):
        candidates = [
            candidate_factory(total_years=None),
            candidate_factory(total_years=-3, expected_salary={"min": 900000, "max": 10}),
            candidate_factory(
                skills={"technical": []},
                job_types=["contract"],
                preferred_locations=["Nowhere"],
                expected_salary={"min": 1, "currency": "GBP"},
            ),
        ]
        jobs = [
            job_factory(),
            job_factory(
                required_skills={"technical": ["rust", "go"]},
                experience={"min": 50, "max": 2},
                salary={"min": -5, "max": -1},
                location={"city": "Austin"},
                job_type="gig",
            ),
            job_factory(job_type="part-time", location=None, salary=None),
        ]

        for profile, posting in itertools.product(candidates, jobs):
            result = score_match(profile, posting)
            assert 0 <= result.match_score <= 100
            for value in result.breakdown_dict().values():
                assert 0 <= value <= 100

    def test_issues_collected(self, candidate_factory, job_factory):
        result = score_match(
            candidate_factory(total_years=-1),
            job_factory(experience={"min": 5, "max": 1}),
        )
        fields = {issue.field for issue in result.issues}
        assert fields == {"total_years", "experience"}

    def test_aggregate_on_normalized_inputs(self, scenario_candidate, scenario_job):
        result = aggregate(normalize_candidate(scenario_candidate), normalize_job(scenario_job))
        assert isinstance(result, MatchResult)
        assert result.match_score == 88


class TestMatchResultSerialization:
    def test_to_dict_shapes(self, scenario_candidate, scenario_job):
        data = score_match(scenario_candidate, scenario_job).to_dict()

        assert data["match_score"] == 88
        assert set(data["score_breakdown"]) == {
            "skills_match",
            "experience_match",
            "location_match",
            "salary_match",
            "job_type_match",
        }
        assert data["match_details"]["matching_skills"] == ["python", "sql"]
        assert data["match_details"]["missing_skills"] == ["spark"]
        assert data["issues"] == []
