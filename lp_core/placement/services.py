# lp_core/placement/services.py
from __future__ import annotations

from typing import Any

from django.conf import settings

from lp_core.rulesets.models import RuleSetDomain
from lp_core.rulesets.services import EnsureDefaultResult, RuleSetService

DEFAULT_NAME = "Default placement test"
DEFAULT_DESCRIPTION = "Three-phase placement test branching on correct answers per phase."


def _result(name: str, lo: int, hi: int, phase: str, level: int) -> dict[str, Any]:
    return {
        "name": name,
        "condition": {"correct_range": [lo, hi], "from_phase": phase},
        "next_questions": [],
        "result_level": level,
    }


def default_placement_rules(*, levels: tuple[int, int, int] = (1, 2, 3)) -> dict[str, Any]:
    """
    Stock branching over three levels (low, mid, high). Each initial track
    carries its own follow-up results, so tracks A and B share ranges:

      initial (2 low + 3 mid + 3 high = 8 questions)
        1-4    -> track A: followup, 8 low     0-6 -> low,  7-8 -> mid
        5-6    -> track B: followup, 8 mid     0-6 -> mid,  7-8 -> high
        7-8    -> track C: final, 14 high      0-9 -> mid,  10-14 -> high
        0      -> beginner: final, 14 low      0-9 -> low,  10-14 -> mid
    """
    low, mid, high = levels
    return {
        "initial_questions": [
            {"level": low, "count": 2},
            {"level": mid, "count": 3},
            {"level": high, "count": 3},
        ],
        "branches": [
            {
                "name": "1-4 correct (track A)",
                "condition": {"correct_range": [1, 4], "from_phase": "initial"},
                "next_questions": [{"level": low, "count": 8}],
                "next_phase": "followup",
                "sub_branches": [
                    _result("A1: 0-6 correct", 0, 6, "followup", low),
                    _result("A2: 7-8 correct", 7, 8, "followup", mid),
                ],
            },
            {
                "name": "5-6 correct (track B)",
                "condition": {"correct_range": [5, 6], "from_phase": "initial"},
                "next_questions": [{"level": mid, "count": 8}],
                "next_phase": "followup",
                "sub_branches": [
                    _result("B1: 0-6 correct", 0, 6, "followup", mid),
                    _result("B2: 7-8 correct", 7, 8, "followup", high),
                ],
            },
            {
                "name": "7-8 correct (track C)",
                "condition": {"correct_range": [7, 8], "from_phase": "initial"},
                "next_questions": [{"level": high, "count": 14}],
                "next_phase": "final",
                "sub_branches": [
                    _result("C1: 0-9 correct", 0, 9, "final", mid),
                    _result("C2: 10-14 correct", 10, 14, "final", high),
                ],
            },
            {
                "name": "0 correct (beginner)",
                "condition": {"correct_range": [0, 0], "from_phase": "initial"},
                "next_questions": [{"level": low, "count": 14}],
                "next_phase": "final",
                "sub_branches": [
                    _result("Beginner: 0-9 correct", 0, 9, "final", low),
                    _result("Beginner: 10-14 correct", 10, 14, "final", mid),
                ],
            },
        ],
    }


def ensure_default_placement_ruleset(*, levels: tuple[int, int, int] = (1, 2, 3)) -> EnsureDefaultResult:
    """
    Seeds and activates the stock placement rule set when the placement
    domain has none yet. Idempotent.
    """
    return RuleSetService.ensure_default(
        domain=RuleSetDomain.PLACEMENT,
        name=DEFAULT_NAME,
        description=DEFAULT_DESCRIPTION,
        rules=default_placement_rules(levels=levels),
        cost=int(getattr(settings, "PLACEMENT_DEFAULT_COST", 50000)),
    )
