from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict, model_validator

from .enums import ChallengeType, Outcome, Team, WarningKind


class ChallengeDefinitionOut(BaseModel):
    type: ChallengeType
    title: str
    description: str
    icon: str
    automatic: bool


class ChallengeOut(BaseModel):
    id: str
    player_id: str
    challenge_type: str
    target_player_id: Optional[str] = None
    is_completed: bool

    model_config = ConfigDict(from_attributes=True)


class GoalIn(BaseModel):
    scoring_side: Team
    offset_seconds: int = Field(..., ge=0)
    scorer_id: Optional[str] = None
    assist_id: Optional[str] = None
    is_own_goal: bool = False

    model_config = ConfigDict(extra="forbid")


class GoalOut(BaseModel):
    id: str
    team: Team
    offset_seconds: int
    sequence_order: int
    scorer_id: Optional[str] = None
    assist_id: Optional[str] = None
    is_own_goal: bool

    model_config = ConfigDict(from_attributes=True)


class FinalScoreIn(BaseModel):
    score_home: int = Field(..., ge=0)
    score_away: int = Field(..., ge=0)
    duration_seconds: Optional[int] = Field(default=None, ge=0)
    settle: bool = True

    model_config = ConfigDict(extra="forbid")


class LedgerEntryOut(BaseModel):
    id: str
    player_id: str
    match_id: Optional[str] = None
    rating_before: int
    rating_after: int
    delta: int
    reason: str
    challenge_type: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WarningOut(BaseModel):
    kind: WarningKind
    detail: str
    player_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class SettlementOut(BaseModel):
    match_id: str
    stage: str
    summary: str
    outcomes: dict[str, Outcome]
    entries: list[LedgerEntryOut]
    mvp_player_ids: list[str]
    completed_challenges: list[ChallengeOut]
    warnings: list[WarningOut]

    model_config = ConfigDict(from_attributes=True)


class ReversalOut(BaseModel):
    match_id: str
    summary: str
    reversed_entries: int
    skipped_entries: int
    purged: dict[str, int]
    warnings: list[WarningOut]

    model_config = ConfigDict(from_attributes=True)


class MatchResultOut(BaseModel):
    match_id: str
    status: str
    score_home: Optional[int] = None
    score_away: Optional[int] = None
    duration_seconds: Optional[int] = None
    settlement: Optional[SettlementOut] = None

    @model_validator(mode="after")
    def _settled_needs_score(self):
        if self.settlement is not None and (
            self.score_home is None or self.score_away is None
        ):
            raise ValueError("a settled result must carry both scores")
        return self


class RatingIn(BaseModel):
    rater_id: str
    rated_player_id: str
    score: int = Field(..., ge=1, le=10)

    model_config = ConfigDict(extra="forbid")


class RatingOut(BaseModel):
    id: str
    match_id: str
    rater_id: str
    rated_player_id: str
    score: int

    model_config = ConfigDict(from_attributes=True)


class MvpVoteIn(BaseModel):
    voter_id: str
    voted_player_id: str

    model_config = ConfigDict(extra="forbid")


class MvpVoteOut(BaseModel):
    id: str
    match_id: str
    voter_id: str
    voted_player_id: str

    model_config = ConfigDict(from_attributes=True)
