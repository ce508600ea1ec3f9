import pytest

from backend.grinta.enums import Team
from backend.grinta.exceptions import InvalidMatchData, MatchAlreadySettled, MatchNotFound
from backend.grinta.models import Match
from backend.grinta.services import (
    list_goals,
    record_final_score,
    record_goal,
    settle_match,
)

from helpers import fixed_delta_function, reload, seed_match

pytestmark = pytest.mark.anyio


async def test_goals_get_consecutive_sequence_numbers(session):
    await seed_match(session, home=["h1", "h2"], away=["a1"], status="ongoing")

    await record_goal(
        session, "m1", scoring_side=Team.HOME, offset_seconds=300, scorer_id="h1"
    )
    await record_goal(
        session, "m1", scoring_side=Team.AWAY, offset_seconds=120, scorer_id="a1"
    )
    await session.commit()

    goals = await list_goals(session, "m1")
    assert [(g.sequence_order, g.team, g.scorer_id) for g in goals] == [
        (1, "A", "h1"),
        (2, "B", "a1"),
    ]


async def test_own_goal_is_credited_to_the_other_side(session):
    await seed_match(session, home=["h1"], away=["a1"])

    goal = await record_goal(
        session,
        "m1",
        scoring_side=Team.AWAY,
        offset_seconds=42,
        scorer_id="a1",
        is_own_goal=True,
    )

    assert goal.team == "A"
    assert goal.is_own_goal is True
    assert goal.assist_id is None


async def test_goal_without_scorer_is_allowed(session):
    await seed_match(session, home=["h1"], away=["a1"])

    goal = await record_goal(session, "m1", scoring_side=Team.HOME, offset_seconds=5)

    assert goal.scorer_id is None
    assert goal.team == "A"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"scoring_side": Team.HOME, "offset_seconds": -1},
        {"scoring_side": Team.HOME, "offset_seconds": 10, "scorer_id": "a1"},
        {"scoring_side": Team.HOME, "offset_seconds": 10, "scorer_id": "ghost"},
        {
            "scoring_side": Team.HOME,
            "offset_seconds": 10,
            "scorer_id": "h1",
            "assist_id": "h1",
        },
        {
            "scoring_side": Team.HOME,
            "offset_seconds": 10,
            "scorer_id": "h1",
            "assist_id": "a1",
        },
        {
            "scoring_side": Team.AWAY,
            "offset_seconds": 10,
            "scorer_id": "a1",
            "assist_id": "h1",
            "is_own_goal": True,
        },
    ],
    ids=[
        "negative-offset",
        "scorer-on-other-team",
        "scorer-not-in-match",
        "self-assist",
        "assist-from-opponent",
        "assisted-own-goal",
    ],
)
async def test_invalid_goals_are_rejected(session, kwargs):
    await seed_match(session, home=["h1", "h2"], away=["a1"])

    with pytest.raises(InvalidMatchData):
        await record_goal(session, "m1", **kwargs)

    assert await list_goals(session, "m1") == []


async def test_goal_on_unknown_match(session):
    with pytest.raises(MatchNotFound):
        await record_goal(session, "nope", scoring_side=Team.HOME, offset_seconds=0)


async def test_final_score_marks_match_completed(session):
    await seed_match(session, home=["h1"], away=["a1"], status="ongoing")

    await record_final_score(
        session, "m1", score_home=2, score_away=3, duration_seconds=2700
    )
    await session.commit()

    match = await reload(session, Match, "m1")
    assert (match.score_home, match.score_away, match.duration_seconds) == (2, 3, 2700)
    assert match.status == "completed"


async def test_final_score_rejects_negative_values(session):
    await seed_match(session, home=["h1"], away=["a1"])

    with pytest.raises(InvalidMatchData):
        await record_final_score(session, "m1", score_home=-1, score_away=0)


async def test_settled_match_is_frozen(session):
    await seed_match(session, home=["h1"], away=["a1"], score=(1, 0))
    await settle_match(session, "m1", base_function=fixed_delta_function())

    with pytest.raises(MatchAlreadySettled):
        await record_goal(session, "m1", scoring_side=Team.HOME, offset_seconds=1)
    with pytest.raises(MatchAlreadySettled):
        await record_final_score(session, "m1", score_home=0, score_away=0)
