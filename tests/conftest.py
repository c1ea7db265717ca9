"""Pytest fixtures for matching engine tests."""
import sys
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config.settings import Settings
from src.matching.catalog import InMemoryCatalog
from src.matching.profiles import (
    CandidateProfile,
    ExperienceRange,
    JobLocation,
    JobPosting,
    SalaryRange,
    SkillSet,
)
from src.persistence.match_repository import MatchRepository
from src.persistence.models import Base
from src.tracking.match_service import MatchService


class FakeClock:
    """Deterministic clock that advances one second per call."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, tzinfo=timezone.utc)):
        self.now = start
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            self.now += timedelta(seconds=1)
            return self.now


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh in-memory database for each test."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def file_db(tmp_path):
    """Session factory over a file database, for tests needing two sessions."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'matches.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine)
    sessions = []

    def _open():
        session = Session()
        sessions.append(session)
        return session

    yield _open

    for session in sessions:
        session.close()
    engine.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repository(test_db, clock):
    return MatchRepository(test_db, clock=clock, max_attempts=3, backoff_seconds=0)


@pytest.fixture
def service(test_db, repository):
    return MatchService(test_db, repository)


@pytest.fixture
def test_settings():
    return Settings(
        database_url="sqlite:///:memory:",
        min_store_score=30,
        match_write_max_attempts=3,
        match_write_backoff_seconds=0,
        rescore_max_workers=2,
    )


# =============================================================================
# PROFILE FIXTURES
# =============================================================================


@pytest.fixture
def scenario_candidate():
    """Candidate from the worked scoring example."""
    return CandidateProfile(
        id="cand-1",
        skills=SkillSet(technical=["Python", "SQL"], soft=["Teamwork"]),
        total_years=3,
        job_types=["full-time"],
        expected_salary=SalaryRange(min=60000, max=80000, currency="USD"),
        preferred_locations=["Denver"],
        willing_to_relocate=True,
    )


@pytest.fixture
def scenario_job():
    """Job from the worked scoring example."""
    return JobPosting(
        id="job-1",
        title="Data Engineer",
        required_skills=SkillSet(technical=["python", "sql", "spark"]),
        experience=ExperienceRange(min=2),
        salary=SalaryRange(min=70000, max=90000, currency="USD"),
        job_type="full-time",
        location=JobLocation(city="Austin", state="TX", country="US", remote=False),
    )


@pytest.fixture
def candidate_factory():
    """Factory for candidate profiles with sensible defaults."""

    def _create(candidate_id: str = "cand-x", **overrides) -> CandidateProfile:
        data = {
            "id": candidate_id,
            "skills": {"technical": ["python"]},
            "total_years": 5,
        }
        data.update(overrides)
        return CandidateProfile.model_validate(data)

    return _create


@pytest.fixture
def job_factory():
    """Factory for job postings with sensible defaults."""

    def _create(job_id: str = "job-x", **overrides) -> JobPosting:
        data = {
            "id": job_id,
            "required_skills": {"technical": ["python"]},
            "job_type": "full-time",
            "location": {"remote": True},
        }
        data.update(overrides)
        return JobPosting.model_validate(data)

    return _create


@pytest.fixture
def catalog(scenario_candidate, scenario_job):
    return InMemoryCatalog(candidates=[scenario_candidate], jobs=[scenario_job])
