"""Base result delta: one call per player into a win/lose rating function."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, Protocol

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .. import config
from ..enums import Outcome, Team
from ..exceptions import BaseRatingError
from ..models import MatchPlayer, Profile, RatingHistory
from .ledger import LedgerTag, record_entry
from .outcome import parse_team
from .profiles import update_profile_counters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BaseResult:
    rating_before: int
    rating_after: int


class BaseRatingFunction(Protocol):
    """Rating formula that only knows whether the player won.

    Implementations update the profile's rating, ``rating_gain``,
    ``matches_played`` and ``wins``/``losses`` themselves and report the
    rating before and after. Failures raise :class:`BaseRatingError`.
    """

    async def __call__(
        self, session: AsyncSession, player_id: str, match_id: str, won: bool
    ) -> BaseResult: ...


async def pre_match_ratings(
    session: AsyncSession, match_id: str, player_ids: Iterable[str]
) -> dict[str, int]:
    """Ratings of ``player_ids`` as they were before ``match_id`` was applied.

    Live rating minus whatever the match's ledger already moved, so the
    result does not depend on which players were processed first.
    """

    player_ids = list(player_ids)
    if not player_ids:
        return {}
    current = dict(
        (
            await session.execute(
                select(Profile.id, Profile.rating).where(Profile.id.in_(player_ids))
            )
        ).all()
    )
    applied = dict(
        (
            await session.execute(
                select(RatingHistory.player_id, func.sum(RatingHistory.delta))
                .where(
                    RatingHistory.match_id == match_id,
                    RatingHistory.player_id.in_(player_ids),
                )
                .group_by(RatingHistory.player_id)
            )
        ).all()
    )
    return {
        pid: int(rating or 0) - int(applied.get(pid) or 0)
        for pid, rating in current.items()
    }


async def _team_averages(
    session: AsyncSession, match_id: str, player_id: str
) -> tuple[float, float] | None:
    """Pre-match ``(own team, opponents)`` average ratings for ``player_id``."""

    rows = (
        await session.execute(
            select(MatchPlayer.player_id, MatchPlayer.team).where(
                MatchPlayer.match_id == match_id
            )
        )
    ).all()
    teams = {pid: parse_team(team) for pid, team in rows}
    own_team = teams.get(player_id)
    if own_team is None:
        return None
    ratings = await pre_match_ratings(
        session, match_id, [pid for pid, team in teams.items() if team is not None]
    )

    def _average(team: Team) -> float | None:
        values = [r for pid, r in ratings.items() if teams[pid] is team]
        return sum(values) / len(values) if values else None

    own, opponents = _average(own_team), _average(own_team.opponent)
    if own is None or opponents is None:
        return None
    return own, opponents


async def apply_elo_result(
    session: AsyncSession,
    player_id: str,
    match_id: str,
    won: bool,
    *,
    k: float | None = None,
) -> BaseResult:
    """Default Elo base function: team average against team average.

    Both averages use pre-match ratings, so every player of a team gets the
    same delta whatever order the players are settled in.
    """

    k = config.ELO_K_FACTOR if k is None else k
    profile = await session.get(Profile, player_id)
    if profile is None:
        raise BaseRatingError(f"profile '{player_id}' not found")

    averages = await _team_averages(session, match_id, player_id)
    if averages is None:
        own_rating = opponent_rating = 0.0
    else:
        own_rating, opponent_rating = averages

    expected = 1 / (1 + 10 ** ((opponent_rating - own_rating) / 400))
    delta = round(k * ((1.0 if won else 0.0) - expected))

    update = await update_profile_counters(
        session,
        player_id,
        rating=delta,
        rating_gain=delta,
        matches_played=1,
        wins=1 if won else 0,
        losses=0 if won else 1,
    )
    if update is None:
        raise BaseRatingError(f"profile '{player_id}' disappeared during update")
    return BaseResult(update.rating_before, update.rating_after)


async def apply_base_delta(
    session: AsyncSession,
    player_id: str,
    match_id: str,
    outcome: Outcome,
    base_function: BaseRatingFunction = apply_elo_result,
) -> RatingHistory:
    """Apply the base result for one player and write its ledger entry.

    The base function has no notion of a draw, so a draw is applied as a
    loss and the counters are corrected right after: one loss back, one
    draw added. The entry is tagged ``draw`` regardless.
    """

    result = await base_function(
        session, player_id, match_id, outcome is Outcome.WIN
    )
    if outcome is Outcome.DRAW:
        corrected = await update_profile_counters(
            session, player_id, losses=-1, draws=1
        )
        if corrected is None:
            raise BaseRatingError(f"profile '{player_id}' not found for draw fix")

    logger.debug(
        "Base delta for player %s in match %s: %s %+d",
        player_id,
        match_id,
        outcome.value,
        result.rating_after - result.rating_before,
    )
    return record_entry(
        session,
        player_id=player_id,
        match_id=match_id,
        rating_before=result.rating_before,
        rating_after=result.rating_after,
        tag=LedgerTag.for_outcome(outcome),
    )
