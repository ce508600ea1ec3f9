"""Fixed rating bonuses (MVP, completed challenges) layered on the base delta."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .. import config
from ..enums import ChallengeType, LedgerReason
from ..exceptions import BaseRatingError
from ..models import MatchChallenge, MvpVote, PlayerBadge, RatingHistory
from .ledger import LedgerTag, record_entry
from .profiles import update_profile_counters

logger = logging.getLogger(__name__)


@dataclass
class MvpTally:
    counts: dict[str, int] = field(default_factory=dict)
    leaders: list[str] = field(default_factory=list)

    @property
    def top_votes(self) -> int:
        return max(self.counts.values(), default=0)


async def award_bonus(
    session: AsyncSession,
    player_id: str,
    match_id: str,
    amount: int,
    tag: LedgerTag,
) -> RatingHistory:
    """Add ``amount`` to the player's rating and write one ledger entry.

    ``rating_gain`` is left alone: it only tracks base results. An MVP bonus
    also bumps ``mvp_count``.
    """

    if tag.reason.is_base_result:
        raise ValueError(f"{tag.label} is not a bonus tag")

    update = await update_profile_counters(
        session,
        player_id,
        rating=amount,
        mvp_count=1 if tag.reason is LedgerReason.MVP_BONUS else 0,
    )
    if update is None:
        raise BaseRatingError(f"profile '{player_id}' not found for {tag.label}")

    return record_entry(
        session,
        player_id=player_id,
        match_id=match_id,
        rating_before=update.rating_before,
        rating_after=update.rating_after,
        tag=tag,
    )


async def tally_mvp_votes(session: AsyncSession, match_id: str) -> MvpTally:
    voted = (
        await session.execute(
            select(MvpVote.voted_player_id).where(MvpVote.match_id == match_id)
        )
    ).scalars().all()
    counts = Counter(voted)
    tally = MvpTally(counts=dict(counts))
    if counts:
        best = tally.top_votes
        tally.leaders = sorted(pid for pid, n in counts.items() if n == best)
    return tally


async def award_mvp_bonus(
    session: AsyncSession, match_id: str, amount: int | None = None
) -> list[RatingHistory]:
    """Award the MVP bonus to every player tied for the most votes."""

    amount = config.MVP_BONUS if amount is None else amount
    tally = await tally_mvp_votes(session, match_id)
    entries = []
    for player_id in tally.leaders:
        entries.append(
            await award_bonus(session, player_id, match_id, amount, LedgerTag.mvp())
        )
    if tally.leaders:
        logger.info(
            "MVP bonus for match %s: %s (%d votes)",
            match_id,
            ", ".join(tally.leaders),
            tally.top_votes,
        )
    return entries


async def complete_challenge(
    session: AsyncSession, challenge: MatchChallenge, amount: int | None = None
) -> RatingHistory:
    """Mark ``challenge`` completed, hand out its badge and its bonus."""

    amount = config.CHALLENGE_BONUS if amount is None else amount
    challenge_type = ChallengeType(challenge.challenge_type)
    entry = await award_bonus(
        session,
        challenge.player_id,
        challenge.match_id,
        amount,
        LedgerTag.challenge(challenge_type),
    )
    challenge.is_completed = True
    session.add(
        PlayerBadge(
            id=uuid.uuid4().hex,
            player_id=challenge.player_id,
            badge_type=f"challenge_{challenge_type.value}",
            match_id=challenge.match_id,
        )
    )
    return entry
