"""Match status tracking."""
from .lifecycle import ALLOWED_TRANSITIONS, apply_transition, set_candidate_interest
from .match_service import MatchService

__all__ = ["ALLOWED_TRANSITIONS", "apply_transition", "set_candidate_interest", "MatchService"]
