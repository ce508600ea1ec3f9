"""Transactional read-modify-write of profile rating and counters."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Profile

COUNTER_FIELDS = ("matches_played", "wins", "losses", "draws", "mvp_count")


@dataclass
class ProfileUpdate:
    profile: Profile
    rating_before: int
    rating_after: int

    @property
    def delta(self) -> int:
        return self.rating_after - self.rating_before


async def load_profile_for_update(
    session: AsyncSession, player_id: str
) -> Profile | None:
    """Load ``player_id`` with a row lock (``FOR UPDATE`` where supported).

    ``populate_existing`` refreshes an instance already in the identity map
    so the caller never computes on a stale copy.
    """

    return (
        await session.execute(
            select(Profile)
            .where(Profile.id == player_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
    ).scalar_one_or_none()


async def update_profile_counters(
    session: AsyncSession,
    player_id: str,
    *,
    rating: int = 0,
    rating_gain: int = 0,
    **counters: int,
) -> ProfileUpdate | None:
    """Apply rating and counter deltas to one profile in a single update.

    ``counters`` accepts any of :data:`COUNTER_FIELDS`; each counter is floored
    at zero. Returns ``None`` when the profile does not exist.
    """

    unknown = set(counters) - set(COUNTER_FIELDS)
    if unknown:
        raise ValueError(f"unknown profile counters: {sorted(unknown)}")

    profile = await load_profile_for_update(session, player_id)
    if profile is None:
        return None

    rating_before = int(profile.rating or 0)
    profile.rating = rating_before + rating
    profile.rating_gain = int(profile.rating_gain or 0) + rating_gain
    for field, delta in counters.items():
        if delta:
            current = int(getattr(profile, field) or 0)
            setattr(profile, field, max(0, current + delta))
    await session.flush()
    return ProfileUpdate(profile, rating_before, int(profile.rating))
