# lp_core/rulesets/selectors.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import QuerySet
from django.utils import timezone

from lp_core.rulesets.exceptions import RuleSetNotFound
from lp_core.rulesets.models import RuleSet
from lp_core.rulesets.results import ResolutionCode
from lp_core.rulesets.types import (
    PlacementConfig,
    RewardConfig,
    ScoringConfig,
    parse_placement,
    parse_rewards,
    parse_scoring,
)


@dataclass(frozen=True)
class ActiveLookup:
    ok: bool
    code: str
    ruleset: Optional[RuleSet] = None
    reason: str = ""


def get_ruleset(*, ruleset_id: UUID) -> RuleSet:
    try:
        return RuleSet.objects.get(id=ruleset_id)
    except (RuleSet.DoesNotExist, DjangoValidationError):
        raise RuleSetNotFound()


def list_rulesets(*, domain: str, active_only: bool = False) -> QuerySet[RuleSet]:
    qs = RuleSet.objects.filter(domain=domain)
    if active_only:
        qs = qs.filter(is_active=True)
    return qs.order_by("-created_at")


def get_active_ruleset(*, domain: str) -> Optional[RuleSet]:
    # the partial unique constraint guarantees at most one row
    return RuleSet.objects.filter(domain=domain, is_active=True).first()


def resolve_active(*, domain: str, as_of: Optional[datetime] = None) -> ActiveLookup:
    """
    Active rule set for `domain` whose effective window contains `as_of`.
    A lapsed (or not yet started) window is NOT_CONFIGURED even though
    is_active is still true; windows are evaluated at read time only.
    """
    as_of = as_of or timezone.now()
    rs = get_active_ruleset(domain=domain)
    if rs is None:
        return ActiveLookup(ok=False, code=ResolutionCode.NOT_CONFIGURED, reason="no_active_ruleset")
    if not rs.in_window(as_of):
        return ActiveLookup(ok=False, code=ResolutionCode.NOT_CONFIGURED, ruleset=rs, reason="outside_effective_window")
    return ActiveLookup(ok=True, code=ResolutionCode.OK, ruleset=rs)


# -----------------------------
# Snapshots
# -----------------------------
def scoring_snapshot(rs: RuleSet) -> ScoringConfig:
    return parse_scoring(rs.rules, ruleset_id=rs.id, version=rs.version)


def rewards_snapshot(rs: RuleSet) -> RewardConfig:
    return parse_rewards(rs.rules, ruleset_id=rs.id, version=rs.version)


def placement_snapshot(rs: RuleSet) -> PlacementConfig:
    return parse_placement(rs.rules, ruleset_id=rs.id, version=rs.version, cost=rs.cost)
