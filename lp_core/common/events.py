# lp_core/common/events.py
"""
In-process event bus for rule-set lifecycle notifications.

Published names:
    rulesets.activated             {domain, ruleset_id, deactivated_ids}
    rulesets.deactivated           {domain, ruleset_id}
    rulesets.configuration_defect  {domain, code, ruleset_id, details}

Handlers run synchronously inside the publisher's call; an exception in a
handler propagates to the caller.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable

Handler = Callable[[dict[str, Any]], None]

_registry: dict[str, list[Handler]] = defaultdict(list)


def subscribe(event_name: str) -> Callable[[Handler], Handler]:
    """
    @subscribe("rulesets.configuration_defect")
    def notify_admins(payload): ...
    """
    def _decorator(fn: Handler) -> Handler:
        _registry[event_name].append(fn)
        return fn
    return _decorator


def unsubscribe(event_name: str, fn: Handler) -> None:
    handlers = _registry.get(event_name, [])
    if fn in handlers:
        handlers.remove(fn)


def publish(event_name: str, payload: dict[str, Any]) -> None:
    # payloads carry ids and plain values only, never model instances
    for handler in list(_registry.get(event_name, [])):
        handler(payload)
