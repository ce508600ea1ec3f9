# backend/grinta/routers/matches.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from ..db import get_session
from ..exceptions import ProblemDetail, http_problem
from ..models import Match, MatchChallenge
from ..schemas import (
    ChallengeOut,
    FinalScoreIn,
    GoalIn,
    GoalOut,
    LedgerEntryOut,
    MatchResultOut,
    MvpVoteIn,
    MvpVoteOut,
    RatingIn,
    RatingOut,
    SettlementOut,
    WarningOut,
)
from ..services import (
    SettlementReport,
    SettlementWarning,
    assign_challenges,
    list_goals,
    record_final_score,
    record_goal,
    record_mvp_vote,
    record_rating,
    settle_match,
)
from ..services.ledger import match_entries

logger = logging.getLogger(__name__)

# Resource-only prefix; versioning is added in main.py
router = APIRouter(
    prefix="/matches",
    tags=["matches"],
    responses={404: {"model": ProblemDetail}, 409: {"model": ProblemDetail}},
)


def to_warning_out(warning: SettlementWarning) -> WarningOut:
    return WarningOut(
        kind=warning.kind, detail=warning.detail, player_id=warning.player_id
    )


def _to_settlement_out(report: SettlementReport) -> SettlementOut:
    return SettlementOut(
        match_id=report.match_id,
        stage=report.stage.value,
        summary=report.summary,
        outcomes=report.outcomes,
        entries=[LedgerEntryOut.model_validate(e) for e in report.entries],
        mvp_player_ids=report.mvp_player_ids,
        completed_challenges=[
            ChallengeOut.model_validate(c) for c in report.completed_challenges
        ],
        warnings=[to_warning_out(w) for w in report.warnings],
    )


async def _require_match(session: AsyncSession, mid: str) -> Match:
    match = await session.get(Match, mid)
    if match is None:
        raise http_problem(
            status_code=404,
            detail="match not found",
            code="match_not_found",
        )
    return match


# GET /api/v0/matches/{mid}/goals
@router.get("/{mid}/goals", response_model=list[GoalOut])
async def get_goals(mid: str, session: AsyncSession = Depends(get_session)):
    await _require_match(session, mid)
    return [GoalOut.model_validate(g) for g in await list_goals(session, mid)]


# POST /api/v0/matches/{mid}/goals
@router.post("/{mid}/goals", response_model=GoalOut, status_code=201)
async def append_goal(
    mid: str, body: GoalIn, session: AsyncSession = Depends(get_session)
):
    goal = await record_goal(
        session,
        mid,
        scoring_side=body.scoring_side,
        offset_seconds=body.offset_seconds,
        scorer_id=body.scorer_id,
        assist_id=body.assist_id,
        is_own_goal=body.is_own_goal,
    )
    await session.commit()
    return GoalOut.model_validate(goal)


# POST /api/v0/matches/{mid}/result
@router.post("/{mid}/result", response_model=MatchResultOut)
async def record_result(
    mid: str, body: FinalScoreIn, session: AsyncSession = Depends(get_session)
):
    match = await record_final_score(
        session,
        mid,
        score_home=body.score_home,
        score_away=body.score_away,
        duration_seconds=body.duration_seconds,
    )
    await session.commit()

    settlement = None
    if body.settle:
        settlement = _to_settlement_out(await settle_match(session, mid))
    return MatchResultOut(
        match_id=match.id,
        status=match.status,
        score_home=match.score_home,
        score_away=match.score_away,
        duration_seconds=match.duration_seconds,
        settlement=settlement,
    )


# POST /api/v0/matches/{mid}/settle
@router.post("/{mid}/settle", response_model=SettlementOut)
async def settle(mid: str, session: AsyncSession = Depends(get_session)):
    report = await settle_match(session, mid)
    if report.warnings:
        logger.warning("Match %s: %s", mid, report.summary)
    return _to_settlement_out(report)


# GET /api/v0/matches/{mid}/ledger
@router.get("/{mid}/ledger", response_model=list[LedgerEntryOut])
async def get_ledger(mid: str, session: AsyncSession = Depends(get_session)):
    await _require_match(session, mid)
    return [LedgerEntryOut.model_validate(e) for e in await match_entries(session, mid)]


# GET /api/v0/matches/{mid}/challenges
@router.get("/{mid}/challenges", response_model=list[ChallengeOut])
async def get_challenges(mid: str, session: AsyncSession = Depends(get_session)):
    await _require_match(session, mid)
    rows = (
        await session.execute(
            select(MatchChallenge)
            .where(MatchChallenge.match_id == mid)
            .order_by(MatchChallenge.player_id)
        )
    ).scalars().all()
    return [ChallengeOut.model_validate(c) for c in rows]


# POST /api/v0/matches/{mid}/challenges/assign
@router.post("/{mid}/challenges/assign", response_model=list[ChallengeOut])
async def assign(mid: str, session: AsyncSession = Depends(get_session)):
    await _require_match(session, mid)
    created = await assign_challenges(session, mid)
    await session.commit()
    return [ChallengeOut.model_validate(c) for c in created]


# POST /api/v0/matches/{mid}/ratings
@router.post("/{mid}/ratings", response_model=RatingOut, status_code=201)
async def rate_player(
    mid: str, body: RatingIn, session: AsyncSession = Depends(get_session)
):
    rating = await record_rating(
        session,
        mid,
        rater_id=body.rater_id,
        rated_player_id=body.rated_player_id,
        score=body.score,
    )
    await session.commit()
    return RatingOut.model_validate(rating)


# POST /api/v0/matches/{mid}/mvp-votes
@router.post("/{mid}/mvp-votes", response_model=MvpVoteOut, status_code=201)
async def vote_mvp(
    mid: str, body: MvpVoteIn, session: AsyncSession = Depends(get_session)
):
    vote = await record_mvp_vote(
        session, mid, voter_id=body.voter_id, voted_player_id=body.voted_player_id
    )
    await session.commit()
    return MvpVoteOut.model_validate(vote)
