# lp_core/rulesets/validators.py
from __future__ import annotations

from typing import Any

from rest_framework.exceptions import ValidationError

from lp_core.rulesets.models import RuleSetDomain
from lp_core.rulesets.serializers import (
    PlacementRulesSerializer,
    RewardRulesSerializer,
    RuleSetWriteSerializer,
    ScoringRulesSerializer,
)

RULES_SERIALIZERS = {
    RuleSetDomain.SCORING: ScoringRulesSerializer,
    RuleSetDomain.REWARDS: RewardRulesSerializer,
    RuleSetDomain.PLACEMENT: PlacementRulesSerializer,
}


def _plain(value: Any) -> Any:
    """
    Serializer output -> JSON-safe plain dicts/lists (OrderedDict/ReturnDict aside).
    """
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def normalize_domain(domain: str) -> str:
    try:
        return RuleSetDomain(domain).value
    except ValueError:
        raise ValidationError({"domain": f"Unknown rule set domain '{domain}'."})


def validate_ruleset(*, domain: str, data: dict[str, Any]) -> dict[str, Any]:
    """
    Validate a full create/update payload for one domain.

    Returns cleaned fields ready for RuleSet(**fields):
        name, description, effective_from, effective_to, cost, rules
    Raises rest_framework ValidationError (never at resolution time).
    """
    domain = normalize_domain(domain)

    envelope = RuleSetWriteSerializer(data=data)
    rules = RULES_SERIALIZERS[RuleSetDomain(domain)](data=data.get("rules") or {})

    errors: dict[str, Any] = {}
    if not envelope.is_valid():
        errors.update(envelope.errors)
    if not rules.is_valid():
        errors["rules"] = rules.errors
    if errors:
        raise ValidationError(errors)

    cleaned = dict(envelope.validated_data)
    if domain != RuleSetDomain.PLACEMENT:
        # cost only means something for placement
        cleaned["cost"] = 0
    cleaned["rules"] = _plain(rules.validated_data)
    return cleaned
