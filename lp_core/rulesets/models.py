# lp_core/rulesets/models.py
from __future__ import annotations

from datetime import datetime

from django.db import models
from django.db.models import Q

from lp_core.common.models import UUIDModel


class RuleSetDomain(models.TextChoices):
    SCORING = "scoring", "Competition scoring"
    REWARDS = "rewards", "Competition rewards"
    PLACEMENT = "placement", "Placement test"


class RuleSet(UUIDModel):
    """
    Versioned rule configuration for one domain.

    - rules: domain-specific JSON document (see lp_core.rulesets.types)
    - is_active: at most one per domain; only RuleSetService.activate() flips it
    - effective_from/effective_to: optional window, a missing bound is open-ended
    """
    domain = models.CharField(max_length=32, choices=RuleSetDomain.choices, db_index=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")

    is_active = models.BooleanField(default=False)
    effective_from = models.DateTimeField(null=True, blank=True)
    effective_to = models.DateTimeField(null=True, blank=True)

    rules = models.JSONField(default=dict)
    cost = models.PositiveIntegerField(default=0)  # placement entry fee (coins)
    version = models.PositiveIntegerField(default=1)

    class Meta:
        db_table = "rulesets_ruleset"
        ordering = ["domain", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["domain"],
                condition=Q(is_active=True),
                name="uq_ruleset_single_active_per_domain",
            ),
            models.CheckConstraint(
                condition=Q(effective_from__isnull=True)
                | Q(effective_to__isnull=True)
                | Q(effective_from__lte=models.F("effective_to")),
                name="ck_ruleset_effective_window",
            ),
        ]
        indexes = [
            models.Index(fields=["domain", "is_active"]),
        ]

    def __str__(self) -> str:
        return f"{self.domain}:{self.name} v{self.version}"

    def in_window(self, at: datetime) -> bool:
        if self.effective_from is not None and at < self.effective_from:
            return False
        if self.effective_to is not None and at > self.effective_to:
            return False
        return True
