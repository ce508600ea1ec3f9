"""Goal timeline writes and reads, plus final score recording."""

from __future__ import annotations

import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..enums import MatchStatus, Team
from ..exceptions import InvalidMatchData, MatchAlreadySettled, MatchNotFound
from ..models import Match, MatchGoal, MatchPlayer
from .outcome import parse_team


async def _get_match(session: AsyncSession, match_id: str) -> Match:
    match = await session.get(Match, match_id)
    if match is None:
        raise MatchNotFound(match_id)
    return match


async def _player_team(session: AsyncSession, match_id: str, player_id: str) -> Team | None:
    raw = (
        await session.execute(
            select(MatchPlayer.team).where(
                MatchPlayer.match_id == match_id, MatchPlayer.player_id == player_id
            )
        )
    ).scalar_one_or_none()
    return parse_team(raw)


async def record_goal(
    session: AsyncSession,
    match_id: str,
    *,
    scoring_side: Team,
    offset_seconds: int,
    scorer_id: str | None = None,
    assist_id: str | None = None,
    is_own_goal: bool = False,
) -> MatchGoal:
    """Append a goal to the timeline of ``match_id``.

    ``scoring_side`` is the team of the player who put the ball in. The goal
    is credited to that team, or to the other one for an own goal.
    """

    match = await _get_match(session, match_id)
    if match.settled_at is not None:
        raise MatchAlreadySettled(match_id)
    if offset_seconds < 0:
        raise InvalidMatchData("offset_seconds must not be negative")

    credited = scoring_side.opponent if is_own_goal else scoring_side

    if scorer_id is not None:
        if await _player_team(session, match_id, scorer_id) is not scoring_side:
            raise InvalidMatchData(
                f"scorer '{scorer_id}' is not on team {scoring_side.value}"
            )
    if assist_id is not None:
        if is_own_goal:
            raise InvalidMatchData("an own goal cannot have an assist")
        if assist_id == scorer_id:
            raise InvalidMatchData("scorer and assister must differ")
        if await _player_team(session, match_id, assist_id) is not credited:
            raise InvalidMatchData(
                f"assister '{assist_id}' is not on team {credited.value}"
            )

    last_order = (
        await session.execute(
            select(func.max(MatchGoal.sequence_order)).where(
                MatchGoal.match_id == match_id
            )
        )
    ).scalar_one_or_none()

    goal = MatchGoal(
        id=uuid.uuid4().hex,
        match_id=match_id,
        scorer_id=scorer_id,
        assist_id=assist_id,
        team=credited.value,
        offset_seconds=offset_seconds,
        sequence_order=(last_order or 0) + 1,
        is_own_goal=is_own_goal,
    )
    session.add(goal)
    await session.flush()
    return goal


async def list_goals(session: AsyncSession, match_id: str) -> list[MatchGoal]:
    return list(
        (
            await session.execute(
                select(MatchGoal)
                .where(MatchGoal.match_id == match_id)
                .order_by(MatchGoal.sequence_order)
            )
        ).scalars().all()
    )


async def record_final_score(
    session: AsyncSession,
    match_id: str,
    *,
    score_home: int,
    score_away: int,
    duration_seconds: int | None = None,
) -> Match:
    """Store the final score and mark the match completed."""

    match = await _get_match(session, match_id)
    if match.settled_at is not None:
        raise MatchAlreadySettled(match_id)
    if score_home < 0 or score_away < 0:
        raise InvalidMatchData("scores must not be negative")
    match.score_home = score_home
    match.score_away = score_away
    match.duration_seconds = duration_seconds
    match.status = MatchStatus.COMPLETED.value
    await session.flush()
    return match
