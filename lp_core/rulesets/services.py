# lp_core/rulesets/services.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from lp_core.common.events import publish
from lp_core.common.logging import get_logger
from lp_core.rulesets.exceptions import ActivationConflict, RuleSetNotFound
from lp_core.rulesets.models import RuleSet
from lp_core.rulesets.validators import normalize_domain, validate_ruleset

log = get_logger(__name__)


@dataclass(frozen=True)
class EnsureDefaultResult:
    ruleset: RuleSet
    created: bool


class RuleSetService:
    """
    Rule sets write-model service (the activation registry).

    Why this exists:
    - is_active is never written directly; activate() is the only path to it
    - validation happens here, before persistence, never at resolution time
    - resolvers read through lp_core.rulesets.selectors only

    Invariant:
      at most one RuleSet per domain has is_active=True
      (serialized activate() + partial unique constraint)
    """

    # -----------------------------
    # Internal helpers
    # -----------------------------
    @staticmethod
    def _lock(*, ruleset_id: UUID) -> RuleSet:
        try:
            return RuleSet.objects.select_for_update().get(id=ruleset_id)
        except (RuleSet.DoesNotExist, DjangoValidationError):
            raise RuleSetNotFound()

    @staticmethod
    def _payload(
        *,
        name: str,
        rules: dict[str, Any],
        description: str,
        effective_from: Optional[datetime],
        effective_to: Optional[datetime],
        cost: int,
    ) -> dict[str, Any]:
        return {
            "name": name,
            "description": description or "",
            "effective_from": effective_from,
            "effective_to": effective_to,
            "cost": cost,
            "rules": rules,
        }

    # -----------------------------
    # Lifecycle
    # -----------------------------
    @staticmethod
    @transaction.atomic
    def create(
        *,
        domain: str,
        name: str,
        rules: dict[str, Any],
        description: str = "",
        effective_from: Optional[datetime] = None,
        effective_to: Optional[datetime] = None,
        cost: int = 0,
    ) -> RuleSet:
        """
        New rule sets start inactive; call activate() to put one in service.
        """
        domain = normalize_domain(domain)
        fields = validate_ruleset(
            domain=domain,
            data=RuleSetService._payload(
                name=name,
                rules=rules,
                description=description,
                effective_from=effective_from,
                effective_to=effective_to,
                cost=cost,
            ),
        )
        rs = RuleSet.objects.create(domain=domain, is_active=False, version=1, **fields)
        log.info("ruleset.created", domain=domain, ruleset_id=str(rs.id), name=rs.name)
        return rs

    @staticmethod
    @transaction.atomic
    def update(
        *,
        ruleset_id: UUID,
        name: str,
        rules: dict[str, Any],
        description: str = "",
        effective_from: Optional[datetime] = None,
        effective_to: Optional[datetime] = None,
        cost: int = 0,
    ) -> RuleSet:
        """
        Full replacement of labels, window, cost and rules (no partial patching).
        Activation state is untouched; version is bumped.
        """
        rs = RuleSetService._lock(ruleset_id=ruleset_id)
        fields = validate_ruleset(
            domain=rs.domain,
            data=RuleSetService._payload(
                name=name,
                rules=rules,
                description=description,
                effective_from=effective_from,
                effective_to=effective_to,
                cost=cost,
            ),
        )

        for attr, value in fields.items():
            setattr(rs, attr, value)
        rs.version = int(rs.version) + 1
        rs.save()

        log.info("ruleset.updated", domain=rs.domain, ruleset_id=str(rs.id), version=rs.version)
        return rs

    @staticmethod
    @transaction.atomic
    def delete(*, ruleset_id: UUID) -> None:
        rs = RuleSetService._lock(ruleset_id=ruleset_id)
        if rs.is_active:
            raise ActivationConflict()
        rs.delete()
        log.info("ruleset.deleted", domain=rs.domain, ruleset_id=str(ruleset_id))

    # -----------------------------
    # Activation
    # -----------------------------
    @staticmethod
    @transaction.atomic
    def activate(*, ruleset_id: UUID) -> RuleSet:
        """
        Make `ruleset_id` the single active rule set of its domain.

        All rows of the domain are locked first so concurrent activate() calls
        for the same domain run one after another. Siblings are switched off
        before the target is switched on (the partial unique index would reject
        the opposite order).
        """
        try:
            target = RuleSet.objects.only("id", "domain").get(id=ruleset_id)
        except (RuleSet.DoesNotExist, DjangoValidationError):
            raise RuleSetNotFound()

        domain = target.domain
        rows = list(RuleSet.objects.select_for_update().filter(domain=domain).order_by("id"))
        target = next((r for r in rows if r.id == target.id), None)
        if target is None:
            # deleted between lookup and lock
            raise RuleSetNotFound()

        if target.is_active:
            return target

        previous = [r.id for r in rows if r.is_active]
        RuleSet.objects.filter(domain=domain, is_active=True).exclude(id=target.id).update(
            is_active=False, updated_at=timezone.now()
        )
        RuleSet.objects.filter(id=target.id).update(is_active=True, updated_at=timezone.now())
        target.refresh_from_db()

        log.info(
            "ruleset.activated",
            domain=domain,
            ruleset_id=str(target.id),
            deactivated=[str(x) for x in previous],
        )
        publish(
            "rulesets.activated",
            {
                "domain": domain,
                "ruleset_id": str(target.id),
                "deactivated_ids": [str(x) for x in previous],
            },
        )
        return target

    @staticmethod
    @transaction.atomic
    def deactivate(*, ruleset_id: UUID) -> RuleSet:
        """
        Explicit switch-off. The domain is unconfigured afterwards and resolvers
        answer NOT_CONFIGURED until another rule set is activated.
        """
        rs = RuleSetService._lock(ruleset_id=ruleset_id)
        if not rs.is_active:
            return rs

        rs.is_active = False
        rs.save(update_fields=["is_active", "updated_at"])

        log.warning("ruleset.deactivated", domain=rs.domain, ruleset_id=str(rs.id))
        publish("rulesets.deactivated", {"domain": rs.domain, "ruleset_id": str(rs.id)})
        return rs

    # -----------------------------
    # Seeding
    # -----------------------------
    @staticmethod
    @transaction.atomic
    def ensure_default(
        *,
        domain: str,
        name: str,
        rules: dict[str, Any],
        description: str = "",
        cost: int = 0,
        activate: bool = True,
    ) -> EnsureDefaultResult:
        """
        Idempotent: when the domain already has any rule set, nothing is created.
        Otherwise the given default is created (and activated unless activate=False).
        """
        domain = normalize_domain(domain)
        existing = RuleSet.objects.filter(domain=domain).order_by("-is_active", "-created_at").first()
        if existing is not None:
            return EnsureDefaultResult(ruleset=existing, created=False)

        rs = RuleSetService.create(domain=domain, name=name, rules=rules, description=description, cost=cost)
        if activate:
            rs = RuleSetService.activate(ruleset_id=rs.id)
        return EnsureDefaultResult(ruleset=rs, created=True)
