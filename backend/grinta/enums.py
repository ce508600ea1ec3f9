"""Canonical enumerations for match settlement.

Values are the strings stored in the database, so renaming a member is a
schema change.
"""

from enum import Enum


class Team(str, Enum):
    HOME = "A"
    AWAY = "B"

    @property
    def opponent(self) -> "Team":
        return Team.AWAY if self is Team.HOME else Team.HOME


class MatchStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Outcome(str, Enum):
    WIN = "win"
    LOSS = "loss"
    DRAW = "draw"


class LedgerReason(str, Enum):
    """What a rating ledger entry recorded; drives counter reversal."""

    WIN = "win"
    LOSS = "loss"
    DRAW = "draw"
    MVP_BONUS = "mvp_bonus"
    CHALLENGE_BONUS = "challenge_bonus"

    @classmethod
    def for_outcome(cls, outcome: Outcome) -> "LedgerReason":
        return cls(outcome.value)

    @property
    def is_base_result(self) -> bool:
        return self in (LedgerReason.WIN, LedgerReason.LOSS, LedgerReason.DRAW)


class ChallengeType(str, Enum):
    SPECIALIST = "specialist"
    ALTRUIST = "altruiste"
    LOCK = "verrou"
    TEAMMATE_LINK = "binome"
    FOX = "renard"
    SOLDIER = "soldat"
    CLUTCH = "clutch"
    UNSINKABLE = "insubmersible"
    CLEAN_SHEET_LATE = "proprete"
    PIVOT = "pivot"


class WarningKind(str, Enum):
    EXTERNAL_CALL_FAILURE = "external_call_failure"
    LEDGER_INCONSISTENCY = "ledger_inconsistency"
    CLEANUP_FAILURE = "cleanup_failure"
