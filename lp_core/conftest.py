# lp_core/conftest.py
import pytest
from django.utils import timezone

from lp_core.common import events
from lp_core.rulesets.defects import CONFIGURATION_DEFECT_EVENT
from lp_core.rulesets.models import RuleSetDomain
from lp_core.rulesets.services import RuleSetService


def scoring_rules(*tiers):
    """
    tiers: (min_participants, max_participants, [(rank, points), ...])
    """
    return {
        "tiers": [
            {
                "min_participants": lo,
                "max_participants": hi,
                "rank_points": [{"rank": r, "points": p} for r, p in rank_points],
            }
            for lo, hi, rank_points in tiers
        ]
    }


def reward_rules(*rank_coins):
    return {"rank_rewards": [{"rank": r, "coins": c} for r, c in rank_coins]}


@pytest.fixture
def now():
    return timezone.now()


@pytest.fixture
def captured_events():
    """
    Collects (event_name, payload) for rule-set events during one test.
    """
    seen = []
    names = ["rulesets.activated", "rulesets.deactivated", CONFIGURATION_DEFECT_EVENT]
    handlers = {}
    for name in names:
        def _handler(payload, _name=name):
            seen.append((_name, payload))

        handlers[name] = events.subscribe(name)(_handler)

    yield seen

    for name, fn in handlers.items():
        events.unsubscribe(name, fn)


@pytest.fixture
def active_scoring(db):
    rs = RuleSetService.create(
        domain=RuleSetDomain.SCORING,
        name="Standard scoring",
        rules=scoring_rules((1, 10, [(1, 10), (2, 5)])),
    )
    return RuleSetService.activate(ruleset_id=rs.id)


@pytest.fixture
def active_rewards(db):
    rs = RuleSetService.create(
        domain=RuleSetDomain.REWARDS,
        name="Standard rewards",
        rules=reward_rules((1, 100000), (2, 50000)),
    )
    return RuleSetService.activate(ruleset_id=rs.id)
