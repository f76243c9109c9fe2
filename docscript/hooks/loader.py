"""Parse hook definitions from configuration data."""

import logging
from typing import Any

from .runner import HookDefinition, HookEvent

_log = logging.getLogger(__name__)

_EVENT_MAP = {event.value: event for event in HookEvent}


def load_hooks_from_config(hooks_data: list[dict[str, Any]]) -> tuple[HookDefinition, ...]:
    """Parse a list of hook config dicts into HookDefinition instances.

    Each dict should have:
        name: str (required)
        event: str (required) - one of on_create, on_update, on_set,
            on_delete, before_query
        function: str (optional, defaults to name) - script function to call
        order: int (optional, default 0)
        enabled: bool (optional, default True)

    Invalid entries are skipped.
    """
    hooks = []

    for entry in hooks_data or ():
        if not isinstance(entry, dict):
            _log.debug("Skipping non-mapping hook entry: %r", entry)
            continue

        name = entry.get("name")
        event_str = entry.get("event")

        if not all((name, event_str)):
            _log.debug("Skipping hook entry missing name or event: %r", entry)
            continue

        event = _EVENT_MAP.get(event_str)
        if event is None:
            _log.debug("Skipping hook %s with unknown event %r", name, event_str)
            continue

        hooks.append(HookDefinition(
            name=name,
            event=event,
            function=entry.get("function") or name,
            enabled=entry.get("enabled", True),
            order=entry.get("order", 0),
        ))

    return tuple(hooks)
