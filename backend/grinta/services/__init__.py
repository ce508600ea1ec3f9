"""Match settlement services."""

from .outcome import resolve_outcomes
from .base_rating import BaseResult, apply_base_delta, apply_elo_result
from .bonus import award_bonus, award_mvp_bonus, tally_mvp_votes
from .challenges import assign_challenges, evaluate_challenges
from .timeline import list_goals, record_final_score, record_goal
from .settlement import SettlementReport, SettlementWarning, settle_match
from .reversal import ReversalReport, reverse_match
from .votes import record_mvp_vote, record_rating

__all__ = [
    "resolve_outcomes",
    "BaseResult",
    "apply_base_delta",
    "apply_elo_result",
    "award_bonus",
    "award_mvp_bonus",
    "tally_mvp_votes",
    "assign_challenges",
    "evaluate_challenges",
    "list_goals",
    "record_final_score",
    "record_goal",
    "SettlementReport",
    "SettlementWarning",
    "settle_match",
    "ReversalReport",
    "reverse_match",
    "record_mvp_vote",
    "record_rating",
]
