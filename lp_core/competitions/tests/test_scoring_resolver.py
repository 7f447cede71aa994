from datetime import timedelta

import pytest
from rest_framework.exceptions import ValidationError

from lp_core.competitions.resolvers import ScoringResolver
from lp_core.conftest import scoring_rules
from lp_core.rulesets.models import RuleSetDomain
from lp_core.rulesets.results import ResolutionCode
from lp_core.rulesets.services import RuleSetService
from lp_core.rulesets.types import parse_scoring


pytestmark = pytest.mark.django_db


def test_points_for_listed_and_unlisted_rank(active_scoring):
    res = ScoringResolver.resolve_points(participant_count=5, rank=1)
    assert res.ok is True
    assert res.value == 10
    assert res.ruleset_id == active_scoring.id

    res = ScoringResolver.resolve_points(participant_count=5, rank=2)
    assert res.value == 5

    res = ScoringResolver.resolve_points(participant_count=5, rank=3)
    assert res.ok is True
    assert res.code == ResolutionCode.OK
    assert res.value == 0
    assert res.details["rank_listed"] is False


def test_no_bucket_for_participant_count(active_scoring, captured_events):
    res = ScoringResolver.resolve_points(participant_count=50, rank=1)

    assert res.ok is False
    assert res.code == ResolutionCode.NO_MATCHING_TIER
    assert res.value is None
    assert res.is_configuration_defect is True

    defects = [p for name, p in captured_events if name == "rulesets.configuration_defect"]
    assert defects == [
        {
            "domain": "scoring",
            "code": "NO_MATCHING_TIER",
            "ruleset_id": str(active_scoring.id),
            "details": {"participant_count": 50},
        }
    ]


def test_bucket_bounds_are_inclusive(active_scoring):
    assert ScoringResolver.resolve_points(participant_count=1, rank=1).value == 10
    assert ScoringResolver.resolve_points(participant_count=10, rank=1).value == 10
    assert ScoringResolver.resolve_points(participant_count=11, rank=1).code == ResolutionCode.NO_MATCHING_TIER


def test_first_declared_tier_wins_on_overlap():
    rs = RuleSetService.create(
        domain=RuleSetDomain.SCORING,
        name="Overlapping",
        rules=scoring_rules(
            (1, 20, [(1, 30)]),
            (10, 50, [(1, 99)]),
        ),
    )
    RuleSetService.activate(ruleset_id=rs.id)

    results = {ScoringResolver.resolve_points(participant_count=15, rank=1).value for _ in range(5)}
    assert results == {30}
    assert ScoringResolver.resolve_points(participant_count=30, rank=1).value == 99


def test_not_configured_without_active_set():
    RuleSetService.create(
        domain=RuleSetDomain.SCORING,
        name="Draft",
        rules=scoring_rules((1, 10, [(1, 10)])),
    )

    res = ScoringResolver.resolve_points(participant_count=5, rank=1)
    assert res.ok is False
    assert res.code == ResolutionCode.NOT_CONFIGURED
    assert res.details["reason"] == "no_active_ruleset"


def test_not_configured_outside_window(now):
    rs = RuleSetService.create(
        domain=RuleSetDomain.SCORING,
        name="Season 1",
        rules=scoring_rules((1, 10, [(1, 10)])),
        effective_from=now,
        effective_to=now + timedelta(days=30),
    )
    RuleSetService.activate(ruleset_id=rs.id)

    assert ScoringResolver.resolve_points(participant_count=5, rank=1, as_of=now + timedelta(days=1)).value == 10

    res = ScoringResolver.resolve_points(participant_count=5, rank=1, as_of=now + timedelta(days=31))
    assert res.code == ResolutionCode.NOT_CONFIGURED
    assert res.details["reason"] == "outside_effective_window"


def test_numeric_strings_are_normalised(active_scoring):
    res = ScoringResolver.resolve_points(participant_count="5", rank="2")

    assert res.ok is True
    assert res.value == 5


@pytest.mark.parametrize("participant_count,rank", [(0, 1), (5, 0), (-1, 1), ("many", 1), (None, 1)])
def test_invalid_inputs_rejected(active_scoring, participant_count, rank):
    with pytest.raises(ValidationError):
        ScoringResolver.resolve_points(participant_count=participant_count, rank=rank)


def test_points_for_works_on_plain_snapshot():
    config = parse_scoring(
        scoring_rules(
            (1, 10, [(1, 10), (2, 5)]),
            (11, 100, [(1, 50), (2, 30), (3, 10)]),
        )
    )

    assert ScoringResolver.points_for(config, participant_count=40, rank=3).value == 10
    assert ScoringResolver.points_for(config, participant_count=40, rank=4).value == 0
    assert ScoringResolver.points_for(config, participant_count=101, rank=1).code == ResolutionCode.NO_MATCHING_TIER
