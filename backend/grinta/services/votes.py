"""Post-match peer ratings and MVP votes.

Both are writable until the match is settled. A second submission from the
same player replaces the first one instead of adding another row.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import InvalidMatchData, MatchAlreadySettled, MatchNotFound
from ..models import Match, MatchPlayer, MvpVote, PlayerRating

logger = logging.getLogger(__name__)

MIN_SCORE = 1
MAX_SCORE = 10


async def _open_match(session: AsyncSession, match_id: str) -> Match:
    match = await session.get(Match, match_id)
    if match is None:
        raise MatchNotFound(match_id)
    if match.settled_at is not None:
        raise MatchAlreadySettled(match_id)
    return match


async def _require_assigned(
    session: AsyncSession, match_id: str, *player_ids: str
) -> None:
    assigned = set(
        (
            await session.execute(
                select(MatchPlayer.player_id).where(
                    MatchPlayer.match_id == match_id,
                    MatchPlayer.player_id.in_(player_ids),
                )
            )
        ).scalars()
    )
    for pid in player_ids:
        if pid not in assigned:
            raise InvalidMatchData(f"player '{pid}' is not part of match {match_id}")


async def record_rating(
    session: AsyncSession,
    match_id: str,
    *,
    rater_id: str,
    rated_player_id: str,
    score: int,
) -> PlayerRating:
    """Store ``rater_id``'s 1-10 score for ``rated_player_id``.

    Raises :class:`InvalidMatchData` for an out of range score, a self
    rating or a player outside the match.
    """

    await _open_match(session, match_id)
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise InvalidMatchData(f"score must be between {MIN_SCORE} and {MAX_SCORE}")
    if rater_id == rated_player_id:
        raise InvalidMatchData("players cannot rate themselves")
    await _require_assigned(session, match_id, rater_id, rated_player_id)

    rating = (
        await session.execute(
            select(PlayerRating).where(
                PlayerRating.match_id == match_id,
                PlayerRating.rated_player_id == rated_player_id,
                PlayerRating.rater_id == rater_id,
            )
        )
    ).scalar_one_or_none()
    if rating is None:
        rating = PlayerRating(
            id=uuid.uuid4().hex,
            match_id=match_id,
            rated_player_id=rated_player_id,
            rater_id=rater_id,
            score=score,
        )
        session.add(rating)
    else:
        rating.score = score
    await session.flush()
    logger.debug(
        "Match %s: %s rated %s %d/10", match_id, rater_id, rated_player_id, score
    )
    return rating


async def record_mvp_vote(
    session: AsyncSession,
    match_id: str,
    *,
    voter_id: str,
    voted_player_id: str,
) -> MvpVote:
    """Store ``voter_id``'s MVP pick, replacing any earlier pick."""

    await _open_match(session, match_id)
    if voter_id == voted_player_id:
        raise InvalidMatchData("players cannot vote for themselves")
    await _require_assigned(session, match_id, voter_id, voted_player_id)

    vote = (
        await session.execute(
            select(MvpVote).where(
                MvpVote.match_id == match_id, MvpVote.voter_id == voter_id
            )
        )
    ).scalar_one_or_none()
    if vote is None:
        vote = MvpVote(
            id=uuid.uuid4().hex,
            match_id=match_id,
            voted_player_id=voted_player_id,
            voter_id=voter_id,
        )
        session.add(vote)
    else:
        vote.voted_player_id = voted_player_id
    await session.flush()
    logger.debug("Match %s: %s voted %s as MVP", match_id, voter_id, voted_player_id)
    return vote
