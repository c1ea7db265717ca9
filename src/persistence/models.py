"""SQLAlchemy models for match records."""
import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def generate_uuid() -> str:
    """Generate a UUID string."""
    return str(uuid.uuid4())


class MatchStatus(str, Enum):
    """Hiring-funnel position of a match."""

    PENDING = "pending"
    VIEWED = "viewed"
    SHORTLISTED = "shortlisted"
    INTERVIEWING = "interviewing"
    HIRED = "hired"
    REJECTED = "rejected"


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Match(Base):
    """Scored (candidate, job) pair and its hiring-funnel status.

    Exactly one row exists per pair. ``version`` is the ORM version counter,
    so every ORM update is a compare-and-swap on it; the repository's upsert
    bumps it by hand.
    """

    __tablename__ = "matches"
    __table_args__ = (
        UniqueConstraint("candidate_id", "job_id", name="uq_matches_candidate_job"),
        Index("ix_matches_match_score", "match_score"),
    )

    id = Column(String, primary_key=True, default=generate_uuid)
    candidate_id = Column(String, nullable=False, index=True)
    job_id = Column(String, nullable=False, index=True)

    # Scoring (derived, written only by the repository upsert)
    match_score = Column(Integer, nullable=False)
    score_breakdown = Column(JSON, nullable=False)  # {"skills_match": 67, ...}
    match_details = Column(JSON, nullable=False)  # matching/missing skills, labels
    scored_at = Column(DateTime, nullable=False, default=utcnow)

    status = Column(String, nullable=False, default=MatchStatus.PENDING.value)
    candidate_interested = Column(Boolean, nullable=True, default=None)
    recruiter_notes = Column(Text)

    version = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    history = relationship(
        "MatchStatusHistory",
        back_populates="match",
        order_by="MatchStatusHistory.changed_at",
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return (
            f"<Match {self.candidate_id} -> {self.job_id} "
            f"score={self.match_score} ({self.status})>"
        )


class MatchStatusHistory(Base):
    """Track status changes for matches."""

    __tablename__ = "match_status_history"

    id = Column(String, primary_key=True, default=generate_uuid)
    match_id = Column(String, ForeignKey("matches.id"), nullable=False, index=True)
    old_status = Column(String)
    new_status = Column(String, nullable=False)
    changed_at = Column(DateTime, default=utcnow)
    notes = Column(Text)

    match = relationship("Match", back_populates="history")

    def __repr__(self) -> str:
        return f"<MatchStatusHistory {self.match_id}: {self.old_status} -> {self.new_status}>"
