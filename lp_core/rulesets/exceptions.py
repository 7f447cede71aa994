# lp_core/rulesets/exceptions.py
from __future__ import annotations

from rest_framework.exceptions import NotFound

from lp_core.common.exceptions import ConflictError


class RuleSetNotFound(NotFound):
    default_detail = "Rule set not found."
    default_code = "ruleset_not_found"


class ActivationConflict(ConflictError):
    """
    Raised when a change would leave a domain without its active rule set
    implicitly (e.g. deleting the active one).
    """
    default_detail = "Rule set is active; activate a replacement or deactivate it first."
    default_code = "activation_conflict"
