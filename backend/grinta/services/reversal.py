"""Administrative reset of a match: undo its settlement and wipe its results.

The ledger is replayed backwards to restore ratings and counters, then every
match scoped record (peer ratings, MVP votes, goals, challenges, challenge
badges) is deleted and the match goes back to ``upcoming`` without a score.
The final reset always runs, so a match can never stay stuck as completed
without a score. Calling this on a match that was never settled only does
the cleanup and the reset. Replay and purge share one transaction under the
match row lock, with a savepoint per step.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..enums import LedgerReason, MatchStatus, WarningKind
from ..models import (
    Match,
    MatchChallenge,
    MatchGoal,
    MvpVote,
    PlayerBadge,
    PlayerRating,
    RatingHistory,
)
from .ledger import LedgerTag, match_entries, purge_match_entries
from .locks import match_locks
from .profiles import update_profile_counters
from .settlement import SettlementWarning, lock_match

logger = logging.getLogger(__name__)

COUNTER_REVERSALS: dict[LedgerReason, dict[str, int]] = {
    LedgerReason.WIN: {"matches_played": -1, "wins": -1},
    LedgerReason.LOSS: {"matches_played": -1, "losses": -1},
    LedgerReason.DRAW: {"matches_played": -1, "draws": -1},
    LedgerReason.MVP_BONUS: {"mvp_count": -1},
    LedgerReason.CHALLENGE_BONUS: {},
}

# Deleted in this order; badges last since they only reference the match.
MATCH_SCOPED_MODELS = (PlayerRating, MvpVote, MatchGoal, MatchChallenge, PlayerBadge)


@dataclass
class ReversalReport:
    match_id: str
    reversed_entries: int = 0
    skipped_entries: int = 0
    purged: dict[str, int] = field(default_factory=dict)
    warnings: list[SettlementWarning] = field(default_factory=list)

    def warn(self, kind: WarningKind, detail: str, player_id: str | None = None) -> None:
        self.warnings.append(SettlementWarning(kind, detail, player_id))

    @property
    def summary(self) -> str:
        return f"reset completed with {len(self.warnings)} warnings"


async def _reverse_entry(
    session: AsyncSession, entry: RatingHistory, report: ReversalReport
) -> None:
    try:
        tag = LedgerTag.from_entry(entry)
    except ValueError:
        report.skipped_entries += 1
        report.warn(
            WarningKind.LEDGER_INCONSISTENCY,
            f"ledger entry {entry.id} has unreadable reason {entry.reason!r}",
            entry.player_id,
        )
        return

    update = await update_profile_counters(
        session,
        entry.player_id,
        rating=-entry.delta,
        rating_gain=-entry.delta if tag.reason.is_base_result else 0,
        **COUNTER_REVERSALS[tag.reason],
    )
    if update is None:
        report.skipped_entries += 1
        report.warn(
            WarningKind.LEDGER_INCONSISTENCY,
            f"ledger entry {entry.id} references a missing profile",
            entry.player_id,
        )
        return
    report.reversed_entries += 1


async def _replay_ledger(
    session: AsyncSession, match_id: str, report: ReversalReport
) -> None:
    entries = await match_entries(session, match_id)
    if not entries:
        return
    try:
        async with session.begin_nested():
            for entry in entries:
                await _reverse_entry(session, entry, report)
            await purge_match_entries(session, match_id)
    except SQLAlchemyError as exc:
        logger.warning("Ledger replay failed for match %s: %s", match_id, exc)
        report.reversed_entries = 0
        report.skipped_entries = len(entries)
        report.warn(WarningKind.LEDGER_INCONSISTENCY, str(exc))


async def _purge_match_records(
    session: AsyncSession, match_id: str, report: ReversalReport
) -> None:
    for model in MATCH_SCOPED_MODELS:
        table = model.__tablename__
        try:
            async with session.begin_nested():
                result = await session.execute(
                    delete(model).where(model.match_id == match_id)
                )
        except SQLAlchemyError as exc:
            logger.warning("Could not purge %s for match %s: %s", table, match_id, exc)
            report.warn(WarningKind.CLEANUP_FAILURE, f"{table}: {exc}")
            continue
        report.purged[table] = result.rowcount or 0


async def _reset_match(session: AsyncSession, match_id: str) -> None:
    match = await session.get(Match, match_id, populate_existing=True)
    if match is None:
        return
    match.score_home = None
    match.score_away = None
    match.duration_seconds = None
    match.status = MatchStatus.UPCOMING.value
    match.settled_at = None
    await session.commit()


async def reverse_match(session: AsyncSession, match_id: str) -> ReversalReport:
    """Undo the settlement of ``match_id`` and reset it to ``upcoming``.

    The match row stays locked from the first read to the final commit.
    """

    async with match_locks.hold(match_id):
        await lock_match(session, match_id)

        report = ReversalReport(match_id=match_id)
        try:
            await _replay_ledger(session, match_id, report)
            await _purge_match_records(session, match_id, report)
        except Exception:
            await session.rollback()
            raise
        finally:
            await _reset_match(session, match_id)

    for warning in report.warnings:
        logger.warning(
            "Reset of match %s: %s (%s)", match_id, warning.detail, warning.kind.value
        )
    logger.info(
        "Reset match %s: %d ledger entries reversed, %s",
        match_id,
        report.reversed_entries,
        report.summary,
    )
    return report
