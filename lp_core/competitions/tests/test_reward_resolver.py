import pytest
from rest_framework.exceptions import ValidationError

from lp_core.competitions.resolvers import RewardResolver
from lp_core.conftest import reward_rules
from lp_core.rulesets.models import RuleSetDomain
from lp_core.rulesets.results import ResolutionCode
from lp_core.rulesets.services import RuleSetService


pytestmark = pytest.mark.django_db


def test_listed_rank_earns_configured_coins(active_rewards):
    res = RewardResolver.resolve_coins(rank=1)

    assert res.ok is True
    assert res.value == 100000
    assert res.ruleset_id == active_rewards.id
    assert RewardResolver.resolve_coins(rank=2).value == 50000


def test_unlisted_rank_earns_zero(active_rewards, captured_events):
    res = RewardResolver.resolve_coins(rank=5)

    assert res.ok is True
    assert res.code == ResolutionCode.OK
    assert res.value == 0
    assert res.details["rank_listed"] is False
    assert not [n for n, _ in captured_events if n == "rulesets.configuration_defect"]


def test_not_configured_without_active_set():
    res = RewardResolver.resolve_coins(rank=1)

    assert res.ok is False
    assert res.code == ResolutionCode.NOT_CONFIGURED
    assert res.value is None
    assert res.details == {"domain": "rewards", "reason": "no_active_ruleset"}


def test_switching_active_set_changes_payout(active_rewards):
    bigger = RuleSetService.create(
        domain=RuleSetDomain.REWARDS,
        name="Finals",
        rules=reward_rules((1, 250000)),
    )
    RuleSetService.activate(ruleset_id=bigger.id)

    assert RewardResolver.resolve_coins(rank=1).value == 250000
    assert RewardResolver.resolve_coins(rank=2).value == 0


def test_rank_below_one_rejected(active_rewards):
    with pytest.raises(ValidationError):
        RewardResolver.resolve_coins(rank=0)


def test_rank_given_as_string_is_normalised(active_rewards):
    assert RewardResolver.resolve_coins(rank="1").value == 100000
