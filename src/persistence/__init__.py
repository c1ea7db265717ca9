"""Database persistence layer."""
from .database import get_session, init_db
from .match_repository import MatchRepository
from .models import Base, Match, MatchStatus, MatchStatusHistory

__all__ = [
    "Base",
    "Match",
    "MatchStatus",
    "MatchStatusHistory",
    "MatchRepository",
    "init_db",
    "get_session",
]
