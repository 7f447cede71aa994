import pytest
from rest_framework.exceptions import ValidationError

from lp_core.competitions.services import StandingsService
from lp_core.rulesets.results import ResolutionCode


pytestmark = pytest.mark.django_db


def awards_by_id(graded):
    return {a.participant_id: (a.rank, a.points, a.coins) for a in graded.awards}


def test_grade_small_competition(active_scoring, active_rewards):
    graded = StandingsService.grade(standings=[("u1", 1), ("u2", 2), ("u3", 3)])

    assert graded.ok is True
    assert graded.participant_count == 3
    assert graded.scoring.details["tier"] == [1, 10]
    assert graded.scoring.ruleset_id == active_scoring.id
    assert graded.rewards.ruleset_id == active_rewards.id
    assert awards_by_id(graded) == {
        "u1": (1, 10, 100000),
        "u2": (2, 5, 50000),
        "u3": (3, 0, 0),
    }


def test_tied_participants_share_rank(active_scoring, active_rewards):
    graded = StandingsService.grade(standings=[("a", 1), ("b", 1), ("c", 3)])

    assert awards_by_id(graded) == {
        "a": (1, 10, 100000),
        "b": (1, 10, 100000),
        "c": (3, 0, 0),
    }


def test_missing_rewards_config_still_scores(active_scoring):
    graded = StandingsService.grade(standings=[("u1", 1), ("u2", 2)])

    assert graded.ok is False
    assert graded.scoring.ok is True
    assert graded.rewards.code == ResolutionCode.NOT_CONFIGURED
    assert awards_by_id(graded) == {"u1": (1, 10, None), "u2": (2, 5, None)}


def test_no_tier_for_crowd_size(active_scoring, active_rewards, captured_events):
    standings = [(f"u{i}", i) for i in range(1, 13)]
    graded = StandingsService.grade(standings=standings)

    assert graded.scoring.code == ResolutionCode.NO_MATCHING_TIER
    assert all(a.points is None for a in graded.awards)
    assert awards_by_id(graded)["u1"][2] == 100000

    defects = [p for n, p in captured_events if n == "rulesets.configuration_defect"]
    assert len(defects) == 1
    assert defects[0]["details"] == {"participant_count": 12}


@pytest.mark.parametrize(
    "standings",
    [
        [],
        [("u1", 1), ("u1", 2)],
        [("u1", 0)],
        [("u1", 1), ("u2", 3)],
    ],
)
def test_invalid_standings_rejected(standings):
    with pytest.raises(ValidationError):
        StandingsService.grade(standings=standings)
