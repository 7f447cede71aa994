# lp_core/rulesets/types.py
"""
Immutable snapshots of the rule documents stored in RuleSet.rules.

Stored JSON shapes:

    scoring:   {"tiers": [{"min_participants": 1, "max_participants": 10,
                           "rank_points": [{"rank": 1, "points": 10}]}]}
    rewards:   {"rank_rewards": [{"rank": 1, "coins": 100000}]}
    placement: {"initial_questions": [{"level": 1, "count": 2}],
                "branches": [{"name": "...",
                              "condition": {"correct_range": [0, 4], "from_phase": "initial"},
                              "next_questions": [{"level": 1, "count": 8}],
                              "result_level": null,
                              "next_phase": "followup",
                              "sub_branches": [...]}]}

A placement branch may carry sub_branches of the same shape: they apply to
the phase the branch continues into and only for sessions that took it.

Resolvers only ever see these dataclasses; the JSON is parsed once per
resolution so a concurrent admin update cannot change rules mid-call.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from django.db import models


class Phase(models.TextChoices):
    INITIAL = "initial", "Initial"
    FOLLOWUP = "followup", "Follow-up"
    FINAL = "final", "Final"


# next_phase may never point back at "initial"
NEXT_PHASES = (Phase.FOLLOWUP.value, Phase.FINAL.value)


@dataclass(frozen=True)
class RankPoints:
    rank: int
    points: int


@dataclass(frozen=True)
class ScoringTier:
    min_participants: int
    max_participants: int
    rank_points: tuple[RankPoints, ...]

    @property
    def participant_range(self) -> tuple[int, int]:
        return (self.min_participants, self.max_participants)

    def points_for_rank(self, rank: int) -> Optional[int]:
        for rp in self.rank_points:
            if rp.rank == rank:
                return rp.points
        return None


@dataclass(frozen=True)
class RankReward:
    rank: int
    coins: int


@dataclass(frozen=True)
class QuestionSpec:
    level: int
    count: int

    def as_dict(self) -> dict[str, int]:
        return {"level": self.level, "count": self.count}


@dataclass(frozen=True)
class PlacementBranch:
    name: str
    correct_range: tuple[int, int]
    from_phase: str
    next_questions: tuple[QuestionSpec, ...]
    result_level: Optional[int] = None
    next_phase: Optional[str] = None
    sub_branches: tuple["PlacementBranch", ...] = ()

    @property
    def is_terminal(self) -> bool:
        return self.result_level is not None


@dataclass(frozen=True)
class ScoringConfig:
    ruleset_id: Optional[UUID]
    version: int
    tiers: tuple[ScoringTier, ...]


@dataclass(frozen=True)
class RewardConfig:
    ruleset_id: Optional[UUID]
    version: int
    rank_rewards: tuple[RankReward, ...]


@dataclass(frozen=True)
class PlacementConfig:
    ruleset_id: Optional[UUID]
    version: int
    cost: int
    initial_questions: tuple[QuestionSpec, ...]
    branches: tuple[PlacementBranch, ...]


# -----------------------------
# Parsing (documents are validated on write; parsing trusts the shape)
# -----------------------------
def _questions(items: Any) -> tuple[QuestionSpec, ...]:
    return tuple(QuestionSpec(level=int(q["level"]), count=int(q["count"])) for q in (items or []))


def parse_scoring(document: dict, *, ruleset_id: Optional[UUID] = None, version: int = 1) -> ScoringConfig:
    tiers = []
    for t in (document or {}).get("tiers") or []:
        tiers.append(
            ScoringTier(
                min_participants=int(t["min_participants"]),
                max_participants=int(t["max_participants"]),
                rank_points=tuple(
                    RankPoints(rank=int(rp["rank"]), points=int(rp["points"])) for rp in (t.get("rank_points") or [])
                ),
            )
        )
    return ScoringConfig(ruleset_id=ruleset_id, version=version, tiers=tuple(tiers))


def parse_rewards(document: dict, *, ruleset_id: Optional[UUID] = None, version: int = 1) -> RewardConfig:
    rewards = tuple(
        RankReward(rank=int(r["rank"]), coins=int(r["coins"])) for r in ((document or {}).get("rank_rewards") or [])
    )
    return RewardConfig(ruleset_id=ruleset_id, version=version, rank_rewards=rewards)


def _branches(items: Any) -> tuple[PlacementBranch, ...]:
    branches = []
    for b in items or []:
        cond = b.get("condition") or {}
        lo, hi = cond["correct_range"]
        result_level = b.get("result_level")
        branches.append(
            PlacementBranch(
                name=str(b.get("name") or ""),
                correct_range=(int(lo), int(hi)),
                from_phase=str(cond["from_phase"]),
                next_questions=_questions(b.get("next_questions")),
                result_level=None if result_level is None else int(result_level),
                next_phase=b.get("next_phase") or None,
                sub_branches=_branches(b.get("sub_branches")),
            )
        )
    return tuple(branches)


def parse_placement(
    document: dict,
    *,
    ruleset_id: Optional[UUID] = None,
    version: int = 1,
    cost: int = 0,
) -> PlacementConfig:
    document = document or {}
    return PlacementConfig(
        ruleset_id=ruleset_id,
        version=version,
        cost=int(cost or 0),
        initial_questions=_questions(document.get("initial_questions")),
        branches=_branches(document.get("branches")),
    )
