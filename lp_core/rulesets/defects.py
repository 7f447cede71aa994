# lp_core/rulesets/defects.py
from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from lp_core.common.events import publish
from lp_core.common.logging import get_logger

log = get_logger(__name__)

CONFIGURATION_DEFECT_EVENT = "rulesets.configuration_defect"


def report_configuration_defect(*, domain: str, code: str, ruleset_id: Optional[UUID], **details: Any) -> None:
    """
    An active rule set exists but no rule covers the input.
    Never defaulted by the caller; logged and handed to admin-facing subscribers.
    """
    log.error("ruleset.configuration_defect", domain=domain, code=code, ruleset_id=str(ruleset_id), **details)
    publish(
        CONFIGURATION_DEFECT_EVENT,
        {
            "domain": domain,
            "code": code,
            "ruleset_id": None if ruleset_id is None else str(ruleset_id),
            "details": details,
        },
    )
