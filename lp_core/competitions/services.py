# lp_core/competitions/services.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from django.utils import timezone
from rest_framework.exceptions import ValidationError

from lp_core.common.logging import get_logger
from lp_core.competitions.resolvers import RewardResolver, ScoringResolver
from lp_core.rulesets.results import Resolution, ResolutionCode
from lp_core.rulesets.selectors import resolve_active, rewards_snapshot, scoring_snapshot

log = get_logger(__name__)


@dataclass(frozen=True)
class ParticipantAward:
    participant_id: str
    rank: int
    points: Optional[int]
    coins: Optional[int]


@dataclass(frozen=True)
class GradedStandings:
    """
    points/coins are None for every participant when the matching resolution
    is not OK; the reason is on scoring/rewards.
    """
    participant_count: int
    scoring: Resolution
    rewards: Resolution
    awards: list[ParticipantAward] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.scoring.ok and self.rewards.ok


class StandingsService:
    """
    Grades a finished competition in one pass.

    Both rule sets are read once so every participant is graded against the
    same snapshot even if an admin activates another config mid-batch.
    Crediting the numbers is the billing side's job.
    """

    @staticmethod
    def _validate(standings: list[tuple[str, int]]) -> None:
        if not standings:
            raise ValidationError({"standings": "At least one participant is required."})

        seen: set[str] = set()
        for participant_id, rank in standings:
            if participant_id in seen:
                raise ValidationError({"standings": f"Duplicate participant '{participant_id}'."})
            seen.add(participant_id)
            if int(rank) < 1:
                raise ValidationError({"standings": f"Rank for '{participant_id}' must be >= 1."})
            if int(rank) > len(standings):
                raise ValidationError({"standings": f"Rank for '{participant_id}' exceeds participant count."})

    @staticmethod
    def grade(
        *,
        standings: Iterable[tuple[str | UUID, int]],
        as_of: Optional[datetime] = None,
    ) -> GradedStandings:
        """
        standings: (participant_id, final_rank) pairs. Ties share a rank.
        The participant count used for tier selection is len(standings).
        """
        rows = [(str(pid), int(rank)) for pid, rank in standings]
        StandingsService._validate(rows)

        as_of = as_of or timezone.now()
        participant_count = len(rows)

        scoring_lookup = resolve_active(domain=ScoringResolver.domain, as_of=as_of)
        rewards_lookup = resolve_active(domain=RewardResolver.domain, as_of=as_of)
        scoring_config = scoring_snapshot(scoring_lookup.ruleset) if scoring_lookup.ok else None
        rewards_config = rewards_snapshot(rewards_lookup.ruleset) if rewards_lookup.ok else None

        if scoring_config is None:
            scoring_summary = Resolution.not_configured(domain=ScoringResolver.domain.value, reason=scoring_lookup.reason)
        else:
            # probe with rank 1 to settle the tier once for the whole batch
            probe = ScoringResolver.points_for(scoring_config, participant_count=participant_count, rank=1)
            scoring_summary = probe
            if probe.ok:
                scoring_summary = Resolution(
                    ok=True,
                    code=ResolutionCode.OK,
                    ruleset_id=probe.ruleset_id,
                    details={"tier": probe.details["tier"]},
                )

        if rewards_config is None:
            rewards_summary = Resolution.not_configured(domain=RewardResolver.domain.value, reason=rewards_lookup.reason)
        else:
            rewards_summary = Resolution(ok=True, code=ResolutionCode.OK, ruleset_id=rewards_config.ruleset_id)

        awards: list[ParticipantAward] = []
        for participant_id, rank in rows:
            points = None
            coins = None
            if scoring_summary.ok:
                points = ScoringResolver.points_for(
                    scoring_config, participant_count=participant_count, rank=rank
                ).value
            if rewards_summary.ok:
                coins = RewardResolver.coins_for(rewards_config, rank=rank).value
            awards.append(ParticipantAward(participant_id=participant_id, rank=rank, points=points, coins=coins))

        log.info(
            "competition.graded",
            participant_count=participant_count,
            scoring=scoring_summary.code,
            rewards=rewards_summary.code,
        )
        if scoring_summary.code == ResolutionCode.NO_MATCHING_TIER:
            log.warning("competition.graded_without_points", participant_count=participant_count)

        return GradedStandings(
            participant_count=participant_count,
            scoring=scoring_summary,
            rewards=rewards_summary,
            awards=awards,
        )
