import pytest

from backend.grinta.enums import Outcome, Team
from backend.grinta.exceptions import IncompleteScore
from backend.grinta.models import Match, MatchPlayer
from backend.grinta.services.outcome import parse_team, resolve_outcomes


def _match(home, away):
    return Match(id="m1", score_home=home, score_away=away)


def _assignments():
    return [
        MatchPlayer(player_id="h1", team="A"),
        MatchPlayer(player_id="h2", team="A"),
        MatchPlayer(player_id="a1", team="B"),
        MatchPlayer(player_id="sub", team=None),
    ]


def test_home_win_splits_winners_and_losers():
    outcomes = resolve_outcomes(_match(3, 1), _assignments())

    assert outcomes == {"h1": Outcome.WIN, "h2": Outcome.WIN, "a1": Outcome.LOSS}


def test_away_win():
    outcomes = resolve_outcomes(_match(0, 2), _assignments())

    assert outcomes["a1"] is Outcome.WIN
    assert outcomes["h1"] is Outcome.LOSS


@pytest.mark.parametrize("score", [0, 2, 7])
def test_equal_scores_make_everyone_draw(score):
    outcomes = resolve_outcomes(_match(score, score), _assignments())

    assert set(outcomes.values()) == {Outcome.DRAW}
    assert len(outcomes) == 3


def test_players_without_team_are_left_out():
    outcomes = resolve_outcomes(_match(1, 0), _assignments())

    assert "sub" not in outcomes


@pytest.mark.parametrize("home,away", [(None, 1), (2, None), (None, None)])
def test_missing_score_raises(home, away):
    with pytest.raises(IncompleteScore):
        resolve_outcomes(_match(home, away), _assignments())


def test_parse_team():
    assert parse_team("A") is Team.HOME
    assert parse_team("B") is Team.AWAY
    assert parse_team(None) is None
    assert parse_team("Z") is None
    assert Team.HOME.opponent is Team.AWAY
