# lp_core/rulesets/serializers.py
from __future__ import annotations

from django.conf import settings
from rest_framework import serializers

from lp_core.rulesets.matching import find_overlaps
from lp_core.rulesets.types import NEXT_PHASES, Phase

PHASE_ORDER = {Phase.INITIAL.value: 0, Phase.FOLLOWUP.value: 1, Phase.FINAL.value: 2}


def _reject_overlaps() -> bool:
    return bool(getattr(settings, "RULESETS_REJECT_OVERLAPPING_RANGES", False))


# -----------------------------
# Scoring
# -----------------------------
class RankPointsSerializer(serializers.Serializer):
    rank = serializers.IntegerField(min_value=1)
    points = serializers.IntegerField(min_value=0)


class ScoringTierSerializer(serializers.Serializer):
    min_participants = serializers.IntegerField(min_value=1)
    max_participants = serializers.IntegerField(min_value=1)
    rank_points = RankPointsSerializer(many=True, allow_empty=False)

    def validate(self, attrs):
        if attrs["min_participants"] > attrs["max_participants"]:
            raise serializers.ValidationError(
                {"max_participants": "Must be greater than or equal to min_participants."}
            )
        ranks = [rp["rank"] for rp in attrs["rank_points"]]
        if len(ranks) != len(set(ranks)):
            raise serializers.ValidationError({"rank_points": "Duplicate rank."})
        return attrs


class ScoringRulesSerializer(serializers.Serializer):
    tiers = ScoringTierSerializer(many=True, allow_empty=False)

    def validate_tiers(self, tiers):
        if _reject_overlaps():
            ranges = [(t["min_participants"], t["max_participants"]) for t in tiers]
            overlaps = find_overlaps(ranges)
            if overlaps:
                raise serializers.ValidationError(
                    [f"Participant ranges of tiers {i} and {j} overlap." for i, j in overlaps]
                )
        return tiers


# -----------------------------
# Rewards
# -----------------------------
class RankRewardSerializer(serializers.Serializer):
    rank = serializers.IntegerField(min_value=1)
    coins = serializers.IntegerField(min_value=0)


class RewardRulesSerializer(serializers.Serializer):
    rank_rewards = RankRewardSerializer(many=True, allow_empty=False)

    def validate_rank_rewards(self, rewards):
        ranks = [r["rank"] for r in rewards]
        if len(ranks) != len(set(ranks)):
            raise serializers.ValidationError("Duplicate rank.")
        return rewards


# -----------------------------
# Placement
# -----------------------------
class QuestionSpecSerializer(serializers.Serializer):
    level = serializers.IntegerField(min_value=1)
    count = serializers.IntegerField(min_value=1)


class BranchConditionSerializer(serializers.Serializer):
    correct_range = serializers.ListField(
        child=serializers.IntegerField(min_value=0),
        min_length=2,
        max_length=2,
    )
    from_phase = serializers.ChoiceField(choices=Phase.choices)

    def validate_correct_range(self, value):
        if value[0] > value[1]:
            raise serializers.ValidationError("Range minimum must not exceed maximum.")
        return value


class PlacementBranchSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, allow_blank=True, required=False, default="")
    condition = BranchConditionSerializer()
    next_questions = QuestionSpecSerializer(many=True, required=False, default=list)
    result_level = serializers.IntegerField(min_value=1, required=False, allow_null=True, default=None)
    next_phase = serializers.ChoiceField(choices=NEXT_PHASES, required=False, allow_null=True, default=None)

    def get_fields(self):
        fields = super().get_fields()
        # track-scoped branches, consulted before the top-level ones of next_phase
        fields["sub_branches"] = PlacementBranchSerializer(many=True, required=False, default=list)
        return fields

    def validate(self, attrs):
        sub_branches = attrs.get("sub_branches") or []

        if attrs.get("result_level") is not None:
            # terminal; next_phase/next_questions are carried but never followed
            if sub_branches:
                raise serializers.ValidationError({"sub_branches": "A terminal branch cannot have sub-branches."})
            return attrs

        if not attrs.get("next_phase") or not attrs.get("next_questions"):
            raise serializers.ValidationError(
                "Branch must set result_level, or next_phase with at least one next question."
            )

        from_phase = attrs["condition"]["from_phase"]
        next_phase = attrs["next_phase"]
        if PHASE_ORDER[next_phase] <= PHASE_ORDER[from_phase]:
            raise serializers.ValidationError(
                {"next_phase": f"Must come after '{from_phase}'; final-phase branches must be terminal."}
            )

        if any(sub["condition"]["from_phase"] != next_phase for sub in sub_branches):
            raise serializers.ValidationError({"sub_branches": f"Sub-branches must start from '{next_phase}'."})
        return attrs


def _branch_overlaps(branches, prefix: str = "") -> list[str]:
    """
    Overlaps are checked among siblings of the same phase; sub-branches of
    different tracks may share ranges.
    """
    errors: list[str] = []
    for phase in PHASE_ORDER:
        idx = [i for i, b in enumerate(branches) if b["condition"]["from_phase"] == phase]
        ranges = [tuple(branches[i]["condition"]["correct_range"]) for i in idx]
        for a, b in find_overlaps(ranges):
            errors.append(f"Branches {prefix}{idx[a]} and {prefix}{idx[b]} overlap in phase '{phase}'.")
    for i, branch in enumerate(branches):
        errors.extend(_branch_overlaps(branch.get("sub_branches") or [], f"{prefix}{i}."))
    return errors


class PlacementRulesSerializer(serializers.Serializer):
    initial_questions = QuestionSpecSerializer(many=True, allow_empty=False)
    branches = PlacementBranchSerializer(many=True, allow_empty=True)

    def validate_branches(self, branches):
        if _reject_overlaps():
            errors = _branch_overlaps(branches)
            if errors:
                raise serializers.ValidationError(errors)
        return branches


# -----------------------------
# RuleSet envelope
# -----------------------------
class RuleSetWriteSerializer(serializers.Serializer):
    """
    Shared envelope for create/update. `rules` is validated by the
    domain serializer selected in lp_core.rulesets.validators.
    """
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(allow_blank=True, required=False, default="")
    effective_from = serializers.DateTimeField(required=False, allow_null=True, default=None)
    effective_to = serializers.DateTimeField(required=False, allow_null=True, default=None)
    cost = serializers.IntegerField(min_value=0, required=False, default=0)

    def validate_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("Name is required.")
        return value

    def validate(self, attrs):
        start = attrs.get("effective_from")
        end = attrs.get("effective_to")
        if start is not None and end is not None and start > end:
            raise serializers.ValidationError({"effective_to": "Must not be earlier than effective_from."})
        return attrs
