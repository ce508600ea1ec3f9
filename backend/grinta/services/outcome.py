"""Per-player match outcomes from the final score and team assignments."""

from __future__ import annotations

from typing import Any, Iterable

from ..enums import Outcome, Team
from ..exceptions import IncompleteScore
from ..models import Match, MatchPlayer


def _score_value(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_team(value: Any) -> Team | None:
    """Return the :class:`Team` for a stored team value, ``None`` if unassigned."""

    if value is None:
        return None
    try:
        return Team(value)
    except ValueError:
        return None


def final_score(match: Match) -> tuple[int, int]:
    """Return ``(home, away)`` or raise :class:`IncompleteScore`."""

    home = _score_value(match.score_home)
    away = _score_value(match.score_away)
    if home is None or away is None:
        raise IncompleteScore(match.id)
    return home, away


def team_outcome(team: Team, score_home: int, score_away: int) -> Outcome:
    if score_home == score_away:
        return Outcome.DRAW
    winner = Team.HOME if score_home > score_away else Team.AWAY
    return Outcome.WIN if team is winner else Outcome.LOSS


def resolve_outcomes(
    match: Match, assignments: Iterable[MatchPlayer]
) -> dict[str, Outcome]:
    """Map every assigned player of ``match`` to a win, loss or draw.

    Players without a team are left out entirely, so nothing downstream
    touches them. Pure function: neither argument is modified.
    """

    score_home, score_away = final_score(match)
    outcomes: dict[str, Outcome] = {}
    for assignment in assignments:
        team = parse_team(assignment.team)
        if team is None:
            continue
        outcomes[assignment.player_id] = team_outcome(team, score_home, score_away)
    return outcomes
