"""Shared builders for settlement tests."""

from sqlalchemy.ext.asyncio import AsyncSession

from backend.grinta.enums import Team
from backend.grinta.exceptions import BaseRatingError
from backend.grinta.models import Match, MatchPlayer, Profile
from backend.grinta.services.base_rating import BaseResult
from backend.grinta.services.profiles import update_profile_counters


async def seed_match(
    session: AsyncSession,
    *,
    home=(),
    away=(),
    bench=(),
    match_id="m1",
    score=None,
    duration_seconds=None,
    ratings=None,
    status="completed",
) -> Match:
    """Create a match, its players' profiles and their team assignments."""

    ratings = ratings or {}
    score_home, score_away = score if score is not None else (None, None)
    match = Match(
        id=match_id,
        title=f"Match {match_id}",
        status=status,
        score_home=score_home,
        score_away=score_away,
        duration_seconds=duration_seconds,
    )
    session.add(match)
    for team, players in ((Team.HOME, home), (Team.AWAY, away), (None, bench)):
        for pid in players:
            if await session.get(Profile, pid) is None:
                rating = ratings.get(pid, 1000)
                session.add(
                    Profile(
                        id=pid,
                        first_name=pid,
                        last_name="",
                        rating=rating,
                        rating_base=rating,
                        rating_gain=0,
                        matches_played=0,
                        wins=0,
                        losses=0,
                        draws=0,
                        mvp_count=0,
                        own_goals=0,
                    )
                )
            session.add(
                MatchPlayer(
                    id=f"{match_id}-{pid}",
                    match_id=match_id,
                    player_id=pid,
                    team=team.value if team else None,
                )
            )
    await session.commit()
    return match


async def reload(session: AsyncSession, model, key):
    return await session.get(model, key, populate_existing=True)


def fixed_delta_function(win: int = 20, loss: int = -15, failing=()):
    """Stand-in for the external win/lose rating function."""

    async def apply(session, player_id, match_id, won):
        if player_id in failing:
            raise BaseRatingError(f"rating service unavailable for {player_id}")
        delta = win if won else loss
        update = await update_profile_counters(
            session,
            player_id,
            rating=delta,
            rating_gain=delta,
            matches_played=1,
            wins=1 if won else 0,
            losses=0 if won else 1,
        )
        return BaseResult(update.rating_before, update.rating_after)

    return apply
