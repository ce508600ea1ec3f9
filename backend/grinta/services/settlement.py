"""Match settlement: turn a finished match into rating and counter changes.

Runs once per match, after the final score is recorded:

1. resolve each assigned player's outcome from the score,
2. apply the base result delta player by player,
3. award the MVP bonus to the vote leader(s),
4. complete fulfilled challenges.

A failure for one player is recorded as a warning and the rest carry on;
only a missing score aborts, before anything is written. The match's
``settled_at`` stamp makes a second settlement fail instead of applying
every delta twice.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..enums import Outcome, WarningKind
from ..exceptions import BaseRatingError, MatchAlreadySettled, MatchNotFound
from ..models import Match, MatchChallenge, MatchPlayer, RatingHistory
from .base_rating import BaseRatingFunction, apply_base_delta, apply_elo_result
from .bonus import award_mvp_bonus
from .challenges import evaluate_challenges
from .ledger import match_entries
from .locks import match_locks
from .outcome import final_score, resolve_outcomes

logger = logging.getLogger(__name__)


class SettlementStage(str, Enum):
    SCORE_RECORDED = "score_recorded"
    RESOLVING = "resolving"
    BASE_APPLIED = "base_applied"
    BONUSES_APPLIED = "bonuses_applied"
    SETTLED = "settled"


@dataclass
class SettlementWarning:
    kind: WarningKind
    detail: str
    player_id: str | None = None


@dataclass
class SettlementReport:
    match_id: str
    stage: SettlementStage = SettlementStage.SCORE_RECORDED
    outcomes: dict[str, Outcome] = field(default_factory=dict)
    entries: list[RatingHistory] = field(default_factory=list)
    mvp_player_ids: list[str] = field(default_factory=list)
    completed_challenges: list[MatchChallenge] = field(default_factory=list)
    warnings: list[SettlementWarning] = field(default_factory=list)

    def warn(self, kind: WarningKind, detail: str, player_id: str | None = None) -> None:
        self.warnings.append(SettlementWarning(kind, detail, player_id))

    @property
    def summary(self) -> str:
        return f"settlement completed with {len(self.warnings)} warnings"


async def lock_match(session: AsyncSession, match_id: str) -> Match:
    match = (
        await session.execute(
            select(Match)
            .where(Match.id == match_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
    ).scalar_one_or_none()
    if match is None:
        raise MatchNotFound(match_id)
    return match


async def settle_match(
    session: AsyncSession,
    match_id: str,
    *,
    base_function: BaseRatingFunction = apply_elo_result,
    mvp_bonus: int | None = None,
    challenge_bonus: int | None = None,
) -> SettlementReport:
    """Settle ``match_id`` and commit.

    Raises :class:`IncompleteScore` when a score is missing and
    :class:`MatchAlreadySettled` on a second call; in both cases nothing
    has been written.
    """

    async with match_locks.hold(match_id):
        match = await lock_match(session, match_id)
        if match.settled_at is not None:
            raise MatchAlreadySettled(match_id)
        final_score(match)

        report = SettlementReport(match_id=match_id)
        assignments = (
            await session.execute(
                select(MatchPlayer)
                .where(MatchPlayer.match_id == match_id)
                .order_by(MatchPlayer.player_id)
            )
        ).scalars().all()

        report.stage = SettlementStage.RESOLVING
        report.outcomes = resolve_outcomes(match, assignments)
        skipped = len(assignments) - len(report.outcomes)
        if skipped:
            logger.debug("Match %s: %d player(s) without a team skipped", match_id, skipped)

        for player_id, outcome in report.outcomes.items():
            try:
                await apply_base_delta(
                    session, player_id, match_id, outcome, base_function
                )
            except Exception as exc:  # external collaborator; isolate per player
                logger.exception(
                    "Base rating call failed for player %s in match %s",
                    player_id,
                    match_id,
                )
                report.warn(WarningKind.EXTERNAL_CALL_FAILURE, str(exc), player_id)
        report.stage = SettlementStage.BASE_APPLIED

        try:
            mvp_entries = await award_mvp_bonus(session, match_id, mvp_bonus)
        except BaseRatingError as exc:
            logger.warning("MVP bonus failed for match %s: %s", match_id, exc)
            report.warn(WarningKind.EXTERNAL_CALL_FAILURE, str(exc))
        else:
            report.mvp_player_ids = [e.player_id for e in mvp_entries]

        try:
            report.completed_challenges = await evaluate_challenges(
                session, match_id, challenge_bonus
            )
        except BaseRatingError as exc:
            logger.warning("Challenge bonus failed for match %s: %s", match_id, exc)
            report.warn(WarningKind.EXTERNAL_CALL_FAILURE, str(exc))
        report.stage = SettlementStage.BONUSES_APPLIED

        match.settled_at = datetime.now(timezone.utc)
        await session.flush()
        report.entries = await match_entries(session, match_id)
        await session.commit()
        report.stage = SettlementStage.SETTLED

    logger.info(
        "Settled match %s: %d player(s), %d ledger entries, %s",
        match_id,
        len(report.outcomes),
        len(report.entries),
        report.summary,
    )
    return report
