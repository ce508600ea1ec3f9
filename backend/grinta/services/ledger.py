"""Append-only rating ledger.

Every rating change applied for a match is written here with a tag saying
what kind of change it was. Reversal relies on nothing else to decide which
profile counters to undo, so the tag must be exact when the entry is written.
"""

from __future__ import annotations

from dataclasses import dataclass
import uuid

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..enums import ChallengeType, LedgerReason, Outcome
from ..models import RatingHistory


@dataclass(frozen=True)
class LedgerTag:
    reason: LedgerReason
    challenge_type: ChallengeType | None = None

    def __post_init__(self) -> None:
        is_challenge = self.reason is LedgerReason.CHALLENGE_BONUS
        if is_challenge != (self.challenge_type is not None):
            raise ValueError(
                "challenge_type is required for challenge bonuses and only for them"
            )

    @classmethod
    def for_outcome(cls, outcome: Outcome) -> "LedgerTag":
        return cls(LedgerReason.for_outcome(outcome))

    @classmethod
    def mvp(cls) -> "LedgerTag":
        return cls(LedgerReason.MVP_BONUS)

    @classmethod
    def challenge(cls, challenge_type: ChallengeType) -> "LedgerTag":
        return cls(LedgerReason.CHALLENGE_BONUS, challenge_type)

    @classmethod
    def from_entry(cls, entry: RatingHistory) -> "LedgerTag":
        """Decode the tag stored on ``entry``; ``ValueError`` if unreadable."""

        reason = LedgerReason(entry.reason)
        challenge_type = (
            ChallengeType(entry.challenge_type)
            if reason is LedgerReason.CHALLENGE_BONUS
            else None
        )
        return cls(reason, challenge_type)

    @property
    def label(self) -> str:
        if self.challenge_type is not None:
            return f"{self.reason.value}:{self.challenge_type.value}"
        return self.reason.value


def record_entry(
    session: AsyncSession,
    *,
    player_id: str,
    match_id: str,
    rating_before: int,
    rating_after: int,
    tag: LedgerTag,
) -> RatingHistory:
    entry = RatingHistory(
        id=uuid.uuid4().hex,
        player_id=player_id,
        match_id=match_id,
        rating_before=rating_before,
        rating_after=rating_after,
        delta=rating_after - rating_before,
        reason=tag.reason.value,
        challenge_type=tag.challenge_type.value if tag.challenge_type else None,
    )
    session.add(entry)
    return entry


async def match_entries(session: AsyncSession, match_id: str) -> list[RatingHistory]:
    return list(
        (
            await session.execute(
                select(RatingHistory)
                .where(RatingHistory.match_id == match_id)
                .order_by(RatingHistory.created_at, RatingHistory.id)
            )
        ).scalars().all()
    )


async def purge_match_entries(session: AsyncSession, match_id: str) -> None:
    await session.execute(
        delete(RatingHistory).where(RatingHistory.match_id == match_id)
    )
