# lp_core/competitions/resolvers.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from rest_framework.exceptions import ValidationError

from lp_core.rulesets.defects import report_configuration_defect
from lp_core.rulesets.matching import first_match
from lp_core.rulesets.models import RuleSetDomain
from lp_core.rulesets.results import Resolution, ResolutionCode
from lp_core.rulesets.selectors import resolve_active, rewards_snapshot, scoring_snapshot
from lp_core.rulesets.types import RewardConfig, ScoringConfig


def _positive(name: str, value: int) -> int:
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValidationError({name: "A whole number is required."})
    if value < 1:
        raise ValidationError({name: "Must be >= 1."})
    return value


class ScoringResolver:
    """
    participant count -> scoring tier -> rank -> points.

    Tiers are scanned in declaration order; the first whose participant range
    contains the count wins. Inside the tier the rank is an exact lookup and
    an unlisted rank scores 0.
    """

    domain = RuleSetDomain.SCORING

    @staticmethod
    def points_for(config: ScoringConfig, *, participant_count: int, rank: int) -> Resolution:
        tier = first_match(config.tiers, participant_count, lambda t: t.participant_range)
        if tier is None:
            report_configuration_defect(
                domain=ScoringResolver.domain,
                code=ResolutionCode.NO_MATCHING_TIER,
                ruleset_id=config.ruleset_id,
                participant_count=participant_count,
            )
            return Resolution.no_matching_tier(ruleset_id=config.ruleset_id, participant_count=participant_count)

        points = tier.points_for_rank(rank)
        return Resolution.resolved(
            0 if points is None else points,
            ruleset_id=config.ruleset_id,
            tier=list(tier.participant_range),
            rank_listed=points is not None,
        )

    @staticmethod
    def resolve_points(*, participant_count: int, rank: int, as_of: Optional[datetime] = None) -> Resolution:
        participant_count = _positive("participant_count", participant_count)
        rank = _positive("rank", rank)

        lookup = resolve_active(domain=ScoringResolver.domain, as_of=as_of)
        if not lookup.ok:
            return Resolution.not_configured(domain=ScoringResolver.domain.value, reason=lookup.reason)

        return ScoringResolver.points_for(
            scoring_snapshot(lookup.ruleset),
            participant_count=participant_count,
            rank=rank,
        )


class RewardResolver:
    """
    final rank -> coins, exact match. Unlisted ranks earn 0 (most ranks are unrewarded).
    """

    domain = RuleSetDomain.REWARDS

    @staticmethod
    def coins_for(config: RewardConfig, *, rank: int) -> Resolution:
        for reward in config.rank_rewards:
            if reward.rank == rank:
                return Resolution.resolved(reward.coins, ruleset_id=config.ruleset_id, rank_listed=True)
        return Resolution.resolved(0, ruleset_id=config.ruleset_id, rank_listed=False)

    @staticmethod
    def resolve_coins(*, rank: int, as_of: Optional[datetime] = None) -> Resolution:
        rank = _positive("rank", rank)

        lookup = resolve_active(domain=RewardResolver.domain, as_of=as_of)
        if not lookup.ok:
            return Resolution.not_configured(domain=RewardResolver.domain.value, reason=lookup.reason)

        return RewardResolver.coins_for(rewards_snapshot(lookup.ruleset), rank=rank)
