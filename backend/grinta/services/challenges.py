"""Challenge catalog, assignment and automatic fulfilment.

Each player gets one challenge per match. After the score is in, the
evaluator for the challenge's type runs against an immutable snapshot of the
match (goal timeline, score, duration, teams, peer ratings); a fulfilled
challenge is marked completed and earns a rating bonus plus a badge.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import random
import uuid
from typing import Callable, Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .. import config
from ..enums import ChallengeType, Team
from ..exceptions import MatchNotFound
from ..models import Match, MatchChallenge, MatchGoal, MatchPlayer, PlayerRating
from .bonus import complete_challenge
from .outcome import parse_team

logger = logging.getLogger(__name__)


@dataclass
class ChallengeDefinition:
    type: ChallengeType
    title: str
    description: str
    icon: str
    automatic: bool = True


CHALLENGE_DEFINITIONS: list[ChallengeDefinition] = [
    ChallengeDefinition(
        type=ChallengeType.SPECIALIST,
        title="Le Spécialiste",
        description="Marquer un but du mauvais pied",
        icon="🦶",
        automatic=False,
    ),
    ChallengeDefinition(
        type=ChallengeType.ALTRUIST,
        title="L'Altruiste",
        description="2+ passes décisives",
        icon="🤝",
    ),
    ChallengeDefinition(
        type=ChallengeType.LOCK,
        title="Le Verrou",
        description="0 but encaissé les 15 premières min",
        icon="🔒",
    ),
    ChallengeDefinition(
        type=ChallengeType.TEAMMATE_LINK,
        title="Le Binôme",
        description="Faire une PD à un coéquipier spécifique",
        icon="🔗",
    ),
    ChallengeDefinition(
        type=ChallengeType.FOX,
        title="Le Renard",
        description="3+ buts dans le match",
        icon="🦊",
    ),
    ChallengeDefinition(
        type=ChallengeType.SOLDIER,
        title="Le Soldat",
        description="Note moyenne > 8/10",
        icon="⭐",
    ),
    ChallengeDefinition(
        type=ChallengeType.CLUTCH,
        title="Le Clutch",
        description="Marquer le dernier but du match",
        icon="🎯",
    ),
    ChallengeDefinition(
        type=ChallengeType.UNSINKABLE,
        title="L'Insubmersible",
        description="Gagner après avoir été mené de 3+ buts",
        icon="🚢",
    ),
    ChallengeDefinition(
        type=ChallengeType.CLEAN_SHEET_LATE,
        title="La Propreté",
        description="0 but encaissé les 5 dernières min + 0 CSC",
        icon="🧹",
    ),
    ChallengeDefinition(
        type=ChallengeType.PIVOT,
        title="Le Pivot",
        description="1+ but ET 1+ passe décisive",
        icon="🔄",
    ),
]

CHALLENGE_CATALOG: dict[ChallengeType, ChallengeDefinition] = {
    d.type: d for d in CHALLENGE_DEFINITIONS
}


@dataclass(frozen=True)
class GoalEvent:
    """Read-only view of one timeline row.

    ``team`` is the side credited with the goal. For an own goal the scorer
    plays for the other side.
    """

    team: Team
    offset_seconds: int
    sequence_order: int
    scorer_id: str | None = None
    assist_id: str | None = None
    is_own_goal: bool = False

    @classmethod
    def from_row(cls, row: MatchGoal) -> "GoalEvent":
        return cls(
            team=Team(row.team),
            offset_seconds=int(row.offset_seconds),
            sequence_order=int(row.sequence_order),
            scorer_id=row.scorer_id,
            assist_id=row.assist_id,
            is_own_goal=bool(row.is_own_goal),
        )


@dataclass(frozen=True)
class MatchSnapshot:
    score_home: int
    score_away: int
    duration_seconds: int | None = None
    goals: tuple[GoalEvent, ...] = ()
    ratings: dict[str, tuple[int, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.goals, key=lambda g: g.sequence_order))
        object.__setattr__(self, "goals", ordered)

    def score_for(self, team: Team) -> int:
        return self.score_home if team is Team.HOME else self.score_away

    def conceded(self, team: Team) -> list[GoalEvent]:
        """Goals credited to the other side, own goals included."""
        return [g for g in self.goals if g.team is team.opponent]

    def regular_goals(self) -> list[GoalEvent]:
        return [g for g in self.goals if not g.is_own_goal]


ChallengeEvaluator = Callable[[MatchSnapshot, str, Team, "str | None"], bool]


def _altruist(snapshot: MatchSnapshot, player_id: str, team: Team, target_id) -> bool:
    assists = [g for g in snapshot.regular_goals() if g.assist_id == player_id]
    return len(assists) >= config.ALTRUIST_MIN_ASSISTS


def _fox(snapshot: MatchSnapshot, player_id: str, team: Team, target_id) -> bool:
    goals = [g for g in snapshot.regular_goals() if g.scorer_id == player_id]
    return len(goals) >= config.FOX_MIN_GOALS


def _pivot(snapshot: MatchSnapshot, player_id: str, team: Team, target_id) -> bool:
    regular = snapshot.regular_goals()
    scored = any(g.scorer_id == player_id for g in regular)
    assisted = any(g.assist_id == player_id for g in regular)
    return scored and assisted


def _clutch(snapshot: MatchSnapshot, player_id: str, team: Team, target_id) -> bool:
    if not snapshot.goals:
        return False
    last = snapshot.goals[-1]
    return last.scorer_id == player_id and not last.is_own_goal


def _soldier(snapshot: MatchSnapshot, player_id: str, team: Team, target_id) -> bool:
    scores = snapshot.ratings.get(player_id) or ()
    if not scores:
        return False
    return sum(scores) / len(scores) > config.SOLDIER_MIN_AVERAGE


def _lock(snapshot: MatchSnapshot, player_id: str, team: Team, target_id) -> bool:
    early = [
        g
        for g in snapshot.conceded(team)
        if g.offset_seconds <= config.LOCK_WINDOW_SECONDS
    ]
    return not early


def _clean_sheet_late(
    snapshot: MatchSnapshot, player_id: str, team: Team, target_id
) -> bool:
    if not snapshot.duration_seconds or snapshot.duration_seconds <= 0:
        return False
    cutoff = snapshot.duration_seconds - config.CLEAN_SHEET_LATE_WINDOW_SECONDS
    late = [g for g in snapshot.conceded(team) if g.offset_seconds >= cutoff]
    own_goals = [
        g for g in snapshot.goals if g.is_own_goal and g.scorer_id == player_id
    ]
    return not late and not own_goals


def max_deficit(goals: Sequence[GoalEvent], team: Team) -> int:
    """Largest number of goals ``team`` ever trailed by along the timeline."""

    goals_for = goals_against = worst = 0
    for goal in goals:
        if goal.team is team:
            goals_for += 1
        else:
            goals_against += 1
        worst = max(worst, goals_against - goals_for)
    return worst


def _unsinkable(snapshot: MatchSnapshot, player_id: str, team: Team, target_id) -> bool:
    won = snapshot.score_for(team) > snapshot.score_for(team.opponent)
    return won and max_deficit(snapshot.goals, team) >= config.UNSINKABLE_MIN_DEFICIT


def _teammate_link(
    snapshot: MatchSnapshot, player_id: str, team: Team, target_id
) -> bool:
    if not target_id:
        return False
    return any(
        g.assist_id == player_id and g.scorer_id == target_id
        for g in snapshot.regular_goals()
    )


# ``None`` marks a challenge confirmed by hand, never automatically.
EVALUATORS: dict[ChallengeType, ChallengeEvaluator | None] = {
    ChallengeType.SPECIALIST: None,
    ChallengeType.ALTRUIST: _altruist,
    ChallengeType.LOCK: _lock,
    ChallengeType.TEAMMATE_LINK: _teammate_link,
    ChallengeType.FOX: _fox,
    ChallengeType.SOLDIER: _soldier,
    ChallengeType.CLUTCH: _clutch,
    ChallengeType.UNSINKABLE: _unsinkable,
    ChallengeType.CLEAN_SHEET_LATE: _clean_sheet_late,
    ChallengeType.PIVOT: _pivot,
}

_missing = set(ChallengeType) - set(EVALUATORS) | set(ChallengeType) - set(CHALLENGE_CATALOG)
if _missing:
    raise RuntimeError(
        f"challenge types without evaluator or catalog entry: {sorted(t.value for t in _missing)}"
    )


def is_fulfilled(
    challenge_type: ChallengeType,
    snapshot: MatchSnapshot,
    player_id: str,
    team: Team,
    target_id: str | None = None,
) -> bool:
    evaluator = EVALUATORS[challenge_type]
    if evaluator is None:
        return False
    return evaluator(snapshot, player_id, team, target_id)


async def load_snapshot(session: AsyncSession, match: Match) -> MatchSnapshot:
    goal_rows = (
        await session.execute(
            select(MatchGoal)
            .where(MatchGoal.match_id == match.id)
            .order_by(MatchGoal.sequence_order)
        )
    ).scalars().all()
    rating_rows = (
        await session.execute(
            select(PlayerRating.rated_player_id, PlayerRating.score).where(
                PlayerRating.match_id == match.id
            )
        )
    ).all()
    ratings: dict[str, list[int]] = {}
    for rated_id, score in rating_rows:
        ratings.setdefault(rated_id, []).append(int(score))

    return MatchSnapshot(
        score_home=int(match.score_home or 0),
        score_away=int(match.score_away or 0),
        duration_seconds=match.duration_seconds,
        goals=tuple(GoalEvent.from_row(row) for row in goal_rows),
        ratings={pid: tuple(scores) for pid, scores in ratings.items()},
    )


async def _team_map(session: AsyncSession, match_id: str) -> dict[str, Team]:
    rows = (
        await session.execute(
            select(MatchPlayer.player_id, MatchPlayer.team).where(
                MatchPlayer.match_id == match_id
            )
        )
    ).all()
    teams = {}
    for player_id, raw_team in rows:
        team = parse_team(raw_team)
        if team is not None:
            teams[player_id] = team
    return teams


async def evaluate_challenges(
    session: AsyncSession, match_id: str, bonus: int | None = None
) -> list[MatchChallenge]:
    """Complete every open challenge of ``match_id`` whose condition holds.

    Already completed challenges are not looked at again, so running this
    twice never awards a bonus twice.
    """

    challenges = (
        await session.execute(
            select(MatchChallenge).where(
                MatchChallenge.match_id == match_id,
                MatchChallenge.is_completed.is_(False),
            )
        )
    ).scalars().all()
    if not challenges:
        return []

    match = await session.get(Match, match_id)
    if match is None:
        raise MatchNotFound(match_id)

    snapshot = await load_snapshot(session, match)
    teams = await _team_map(session, match_id)

    completed: list[MatchChallenge] = []
    for challenge in challenges:
        team = teams.get(challenge.player_id)
        if team is None:
            continue
        try:
            challenge_type = ChallengeType(challenge.challenge_type)
        except ValueError:
            logger.warning(
                "Unknown challenge type %r on challenge %s",
                challenge.challenge_type,
                challenge.id,
            )
            continue
        if not is_fulfilled(
            challenge_type,
            snapshot,
            challenge.player_id,
            team,
            challenge.target_player_id,
        ):
            continue
        await complete_challenge(session, challenge, bonus)
        completed.append(challenge)

    if completed:
        logger.info(
            "Match %s: %d challenge(s) completed (%s)",
            match_id,
            len(completed),
            ", ".join(sorted(c.challenge_type for c in completed)),
        )
    return completed


def _draw_assignments(
    players: Sequence[tuple[str, Team]], rng: random.Random
) -> list[tuple[str, ChallengeType, str | None]]:
    pool = [t for t in ChallengeType if t is not ChallengeType.TEAMMATE_LINK]
    rng.shuffle(pool)

    picks = []
    for index, (player_id, team) in enumerate(players):
        teammates = [pid for pid, t in players if t is team and pid != player_id]
        if teammates and rng.random() < config.BINOME_PROBABILITY:
            picks.append((player_id, ChallengeType.TEAMMATE_LINK, rng.choice(teammates)))
        else:
            picks.append((player_id, pool[index % len(pool)], None))
    return picks


async def assign_challenges(
    session: AsyncSession, match_id: str, rng: random.Random | None = None
) -> list[MatchChallenge]:
    """Give each assigned player of ``match_id`` one challenge.

    Does nothing when the match already has challenges. Returns the created
    rows (empty when nothing was assigned).
    """

    existing = (
        await session.execute(
            select(MatchChallenge.id).where(MatchChallenge.match_id == match_id).limit(1)
        )
    ).first()
    if existing is not None:
        return []

    teams = await _team_map(session, match_id)
    if not teams:
        return []

    players = sorted(teams.items())
    created = []
    for player_id, challenge_type, target_id in _draw_assignments(
        players, rng or random.Random()
    ):
        challenge = MatchChallenge(
            id=uuid.uuid4().hex,
            match_id=match_id,
            player_id=player_id,
            challenge_type=challenge_type.value,
            target_player_id=target_id,
            is_completed=False,
        )
        session.add(challenge)
        created.append(challenge)
    await session.flush()
    return created


def catalog(types: Iterable[ChallengeType] | None = None) -> list[ChallengeDefinition]:
    wanted = set(types) if types is not None else None
    return [d for d in CHALLENGE_DEFINITIONS if wanted is None or d.type in wanted]
