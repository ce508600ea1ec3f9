import pytest

from backend.grinta.enums import ChallengeType, Team
from backend.grinta.services.challenges import (
    CHALLENGE_CATALOG,
    EVALUATORS,
    GoalEvent,
    MatchSnapshot,
    is_fulfilled,
    max_deficit,
)

A, B = Team.HOME, Team.AWAY


def goal(order, team, offset, scorer=None, assist=None, own=False):
    return GoalEvent(
        team=team,
        offset_seconds=offset,
        sequence_order=order,
        scorer_id=scorer,
        assist_id=assist,
        is_own_goal=own,
    )


def snapshot(goals, score=None, duration=None, ratings=None):
    if score is None:
        score = (
            sum(1 for g in goals if g.team is A),
            sum(1 for g in goals if g.team is B),
        )
    return MatchSnapshot(
        score_home=score[0],
        score_away=score[1],
        duration_seconds=duration,
        goals=tuple(goals),
        ratings=ratings or {},
    )


def test_every_type_has_an_evaluator_slot_and_catalog_entry():
    assert set(EVALUATORS) == set(ChallengeType)
    assert set(CHALLENGE_CATALOG) == set(ChallengeType)
    assert EVALUATORS[ChallengeType.SPECIALIST] is None
    assert CHALLENGE_CATALOG[ChallengeType.SPECIALIST].automatic is False


def test_specialist_is_never_automatic():
    snap = snapshot([goal(1, A, 10, scorer="p1")])
    assert not is_fulfilled(ChallengeType.SPECIALIST, snap, "p1", A)


def test_altruist_needs_two_regular_assists():
    goals = [
        goal(1, A, 10, scorer="p2", assist="p1"),
        goal(2, A, 20, scorer="p3", assist="p1"),
    ]
    assert is_fulfilled(ChallengeType.ALTRUIST, snapshot(goals), "p1", A)
    assert not is_fulfilled(ChallengeType.ALTRUIST, snapshot(goals[:1]), "p1", A)


def test_altruist_ignores_own_goal_rows():
    goals = [
        goal(1, A, 10, scorer="p2", assist="p1"),
        goal(2, A, 20, scorer="b1", assist="p1", own=True),
    ]
    assert not is_fulfilled(ChallengeType.ALTRUIST, snapshot(goals), "p1", A)


def test_fox_needs_three_regular_goals():
    goals = [goal(i, A, i * 60, scorer="p1") for i in range(1, 3)]
    assert not is_fulfilled(ChallengeType.FOX, snapshot(goals), "p1", A)
    goals.append(goal(3, A, 500, scorer="p1"))
    assert is_fulfilled(ChallengeType.FOX, snapshot(goals), "p1", A)


def test_pivot_needs_a_goal_and_an_assist():
    goals = [goal(1, A, 10, scorer="p1"), goal(2, A, 20, scorer="p2", assist="p1")]
    assert is_fulfilled(ChallengeType.PIVOT, snapshot(goals), "p1", A)
    assert not is_fulfilled(ChallengeType.PIVOT, snapshot(goals[:1]), "p1", A)


def test_clutch_is_the_highest_sequence_not_the_latest_offset():
    goals = [
        goal(2, A, 100, scorer="p1"),
        goal(1, B, 900, scorer="b1"),
    ]
    assert is_fulfilled(ChallengeType.CLUTCH, snapshot(goals), "p1", A)
    assert not is_fulfilled(ChallengeType.CLUTCH, snapshot(goals), "b1", B)


def test_clutch_fails_on_own_goal_and_empty_timeline():
    own = [goal(1, A, 10, scorer="p1", own=True)]
    assert not is_fulfilled(ChallengeType.CLUTCH, snapshot(own), "p1", B)
    assert not is_fulfilled(ChallengeType.CLUTCH, snapshot([]), "p1", A)


def test_soldier_average_must_exceed_eight():
    assert is_fulfilled(
        ChallengeType.SOLDIER, snapshot([], ratings={"p1": (9, 8)}), "p1", A
    )
    assert not is_fulfilled(
        ChallengeType.SOLDIER, snapshot([], ratings={"p1": (8, 8)}), "p1", A
    )
    assert not is_fulfilled(ChallengeType.SOLDIER, snapshot([]), "p1", A)


def test_lock_window_is_inclusive_at_900_seconds():
    at_boundary = [goal(1, B, 900, scorer="b1")]
    just_after = [goal(1, B, 901, scorer="b1")]

    assert not is_fulfilled(ChallengeType.LOCK, snapshot(at_boundary), "p1", A)
    assert is_fulfilled(ChallengeType.LOCK, snapshot(just_after), "p1", A)


def test_lock_counts_own_goals_credited_to_the_opponent():
    goals = [goal(1, B, 100, scorer="p2", own=True)]
    assert not is_fulfilled(ChallengeType.LOCK, snapshot(goals), "p1", A)


def test_lock_ignores_own_team_goals():
    goals = [goal(1, A, 100, scorer="p1")]
    assert is_fulfilled(ChallengeType.LOCK, snapshot(goals), "p1", A)


def test_clean_sheet_late_requires_duration():
    assert not is_fulfilled(ChallengeType.CLEAN_SHEET_LATE, snapshot([]), "p1", A)
    assert is_fulfilled(
        ChallengeType.CLEAN_SHEET_LATE, snapshot([], duration=1800), "p1", A
    )


def test_clean_sheet_late_window_is_inclusive():
    conceded = [goal(1, B, 1500, scorer="b1")]
    earlier = [goal(1, B, 1499, scorer="b1")]

    assert not is_fulfilled(
        ChallengeType.CLEAN_SHEET_LATE, snapshot(conceded, duration=1800), "p1", A
    )
    assert is_fulfilled(
        ChallengeType.CLEAN_SHEET_LATE, snapshot(earlier, duration=1800), "p1", A
    )


def test_clean_sheet_late_fails_on_any_own_goal_by_the_player():
    goals = [goal(1, B, 60, scorer="p1", own=True)]
    assert not is_fulfilled(
        ChallengeType.CLEAN_SHEET_LATE, snapshot(goals, duration=1800), "p1", A
    )
    assert is_fulfilled(
        ChallengeType.CLEAN_SHEET_LATE, snapshot(goals, duration=1800), "p2", A
    )


def _comeback(deficit):
    goals = [goal(i + 1, B, i * 10, scorer="b1") for i in range(deficit)]
    for i in range(deficit + 1):
        order = deficit + i + 1
        goals.append(goal(order, A, 1000 + i * 10, scorer="p1"))
    return goals


def test_unsinkable_trailing_by_two_is_not_enough():
    goals = _comeback(2)
    assert max_deficit(goals, A) == 2
    assert not is_fulfilled(ChallengeType.UNSINKABLE, snapshot(goals), "p1", A)


def test_unsinkable_trailing_by_three_then_winning():
    goals = _comeback(3)
    assert max_deficit(goals, A) == 3
    assert is_fulfilled(ChallengeType.UNSINKABLE, snapshot(goals), "p1", A)


def test_unsinkable_requires_the_win():
    goals = [goal(i + 1, B, i * 10, scorer="b1") for i in range(3)]
    assert not is_fulfilled(ChallengeType.UNSINKABLE, snapshot(goals), "p1", A)


def test_teammate_link_needs_the_target_as_scorer():
    goals = [goal(1, A, 10, scorer="p2", assist="p1")]
    snap = snapshot(goals)

    assert is_fulfilled(ChallengeType.TEAMMATE_LINK, snap, "p1", A, "p2")
    assert not is_fulfilled(ChallengeType.TEAMMATE_LINK, snap, "p1", A, "p3")
    assert not is_fulfilled(ChallengeType.TEAMMATE_LINK, snap, "p1", A, None)


def test_snapshot_orders_goals_by_sequence():
    snap = snapshot([goal(3, A, 5), goal(1, B, 50), goal(2, A, 1)])
    assert [g.sequence_order for g in snap.goals] == [1, 2, 3]


class TestThreeOneOwnGoalFixture:
    """3-1 home win: A at 60s, B at 300s, own goal by b2 for A at 600s, A at 1200s."""

    goals = [
        goal(1, A, 60, scorer="a1", assist="a2"),
        goal(2, B, 300, scorer="b1"),
        goal(3, A, 600, scorer="b2", own=True),
        goal(4, A, 1200, scorer="a2", assist="a1"),
    ]

    def snap(self):
        return snapshot(self.goals, duration=1500)

    def test_score_and_credit(self):
        snap = self.snap()
        assert (snap.score_home, snap.score_away) == (3, 1)
        assert snap.goals[2].team is A

    def test_lock_fails_for_both_sides(self):
        snap = self.snap()
        assert not is_fulfilled(ChallengeType.LOCK, snap, "b1", B)
        assert not is_fulfilled(ChallengeType.LOCK, snap, "a1", A)

    def test_clean_sheet_late(self):
        snap = self.snap()
        assert is_fulfilled(ChallengeType.CLEAN_SHEET_LATE, snap, "a3", A)
        assert not is_fulfilled(ChallengeType.CLEAN_SHEET_LATE, snap, "b1", B)

    def test_clutch_and_pivot(self):
        snap = self.snap()
        assert is_fulfilled(ChallengeType.CLUTCH, snap, "a2", A)
        assert is_fulfilled(ChallengeType.PIVOT, snap, "a1", A)
        assert is_fulfilled(ChallengeType.PIVOT, snap, "a2", A)
        assert not is_fulfilled(ChallengeType.FOX, snap, "a2", A)

    @pytest.mark.parametrize("player", ["b1", "b2"])
    def test_losing_side_is_not_unsinkable(self, player):
        assert not is_fulfilled(ChallengeType.UNSINKABLE, self.snap(), player, B)
