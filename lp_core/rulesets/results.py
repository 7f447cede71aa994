# lp_core/rulesets/results.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional
from uuid import UUID


class ResolutionCode:
    """
    Outcome codes returned by resolvers instead of raising for expected conditions.
    """
    OK = "OK"
    NOT_CONFIGURED = "NOT_CONFIGURED"
    NO_MATCHING_TIER = "NO_MATCHING_TIER"


@dataclass(frozen=True)
class Resolution:
    ok: bool
    code: str
    value: Optional[int] = None
    ruleset_id: Optional[UUID] = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def resolved(cls, value: int, *, ruleset_id: Optional[UUID], **details: Any) -> "Resolution":
        return cls(ok=True, code=ResolutionCode.OK, value=value, ruleset_id=ruleset_id, details=details)

    @classmethod
    def not_configured(cls, **details: Any) -> "Resolution":
        return cls(ok=False, code=ResolutionCode.NOT_CONFIGURED, details=details)

    @classmethod
    def no_matching_tier(cls, *, ruleset_id: Optional[UUID], **details: Any) -> "Resolution":
        return cls(ok=False, code=ResolutionCode.NO_MATCHING_TIER, ruleset_id=ruleset_id, details=details)

    @property
    def is_configuration_defect(self) -> bool:
        return self.code == ResolutionCode.NO_MATCHING_TIER
