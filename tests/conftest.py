import pytest

from lp_core.placement.services import ensure_default_placement_ruleset
from lp_core.rulesets.models import RuleSetDomain
from lp_core.rulesets.services import RuleSetService


def activate(domain, name, rules):
    rs = RuleSetService.create(domain=domain, name=name, rules=rules)
    return RuleSetService.activate(ruleset_id=rs.id)


@pytest.fixture
def configured(db):
    """
    One active rule set per domain, as an admin would leave them.
    """
    scoring = activate(
        RuleSetDomain.SCORING,
        "Season scoring",
        {
            "tiers": [
                {
                    "min_participants": 1,
                    "max_participants": 10,
                    "rank_points": [{"rank": 1, "points": 10}, {"rank": 2, "points": 5}],
                },
                {
                    "min_participants": 11,
                    "max_participants": 100,
                    "rank_points": [{"rank": 1, "points": 50}, {"rank": 2, "points": 30}, {"rank": 3, "points": 10}],
                },
            ]
        },
    )
    rewards = activate(
        RuleSetDomain.REWARDS,
        "Season rewards",
        {"rank_rewards": [{"rank": 1, "coins": 100000}, {"rank": 2, "coins": 50000}]},
    )
    placement = ensure_default_placement_ruleset().ruleset
    return {"scoring": scoring, "rewards": rewards, "placement": placement}
