import pytest

from lp_core.competitions.resolvers import RewardResolver, ScoringResolver
from lp_core.competitions.services import StandingsService
from lp_core.placement.engine import PlacementEngine, SessionStatus
from lp_core.rulesets.results import ResolutionCode
from lp_core.rulesets.services import RuleSetService

pytestmark = pytest.mark.django_db


def test_competition_graded_against_active_configuration(configured):
    standings = [(f"user-{i}", i) for i in range(1, 21)]

    graded = StandingsService.grade(standings=standings)

    assert graded.ok is True
    assert graded.scoring.details["tier"] == [11, 100]
    top3 = [(a.points, a.coins) for a in graded.awards[:3]]
    assert top3 == [(50, 100000), (30, 50000), (10, 0)]
    assert all(a.points == 0 and a.coins == 0 for a in graded.awards[3:])


def test_admin_swaps_rewards_and_deletes_old_set(configured):
    old = configured["rewards"]
    new = RuleSetService.create(
        domain=old.domain,
        name="Holiday rewards",
        rules={"rank_rewards": [{"rank": 1, "coins": 300000}]},
    )

    RuleSetService.activate(ruleset_id=new.id)
    RuleSetService.delete(ruleset_id=old.id)

    assert RewardResolver.resolve_coins(rank=1).value == 300000
    assert RewardResolver.resolve_coins(rank=2).value == 0


def test_deactivated_scoring_is_reported_not_defaulted(configured):
    RuleSetService.deactivate(ruleset_id=configured["scoring"].id)

    res = ScoringResolver.resolve_points(participant_count=5, rank=1)
    assert res.code == ResolutionCode.NOT_CONFIGURED

    graded = StandingsService.grade(standings=[("a", 1), ("b", 2)])
    assert graded.scoring.code == ResolutionCode.NOT_CONFIGURED
    assert [a.points for a in graded.awards] == [None, None]
    assert [a.coins for a in graded.awards] == [100000, 50000]


def test_candidate_placed_with_seeded_rules(configured):
    session, questions = PlacementEngine.start_session()
    assert session.config.ruleset_id == configured["placement"].id
    assert sum(q.count for q in questions) == 8

    PlacementEngine.advance(session, phase="initial", correct_count=5)
    PlacementEngine.advance(session, phase="followup", correct_count=6)

    assert session.status == SessionStatus.TERMINATED
    assert session.result_level == 2
    assert session.questions_answered == 16
