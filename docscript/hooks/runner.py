"""Hook runner for document lifecycle events.

Runs the script functions bound to an event (on_create, on_set, ...) against
the document being written, in order, and reports one result per hook.
"""

import inspect
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from ..document import Document
from ..metadata import Metadata
from .runtime import HookScript

_log = logging.getLogger(__name__)


class HookEvent(str, Enum):
    """Points in a document's lifecycle where hooks can run."""

    ON_CREATE = "on_create"
    ON_UPDATE = "on_update"
    ON_SET = "on_set"
    ON_DELETE = "on_delete"
    BEFORE_QUERY = "before_query"


@dataclass(frozen=True)
class HookDefinition:
    """Binds a script function to a lifecycle event."""

    name: str
    event: HookEvent
    function: str
    enabled: bool = True
    order: int = 0


def bind_arguments(fn: Callable[..., Any], available: dict[str, Any]) -> list[Any]:
    """Pick the positional arguments a hook function asks for.

    Parameters named like a key of ``available`` get that value; the rest
    are filled from ``available`` in order. Parameters with nothing left to
    fill keep their default, and trailing defaults are dropped.
    """
    params = [
        p for p in inspect.signature(fn).parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
    ]
    remaining = [v for k, v in available.items() if k not in {p.name for p in params}]
    args = []
    defaulted = []
    for param in params:
        if param.name in available:
            args.append(available[param.name])
            defaulted.append(False)
        elif remaining:
            args.append(remaining.pop(0))
            defaulted.append(False)
        elif param.default is not param.empty:
            args.append(param.default)
            defaulted.append(True)
        else:
            args.append(None)
            defaulted.append(False)
    while defaulted and defaulted[-1]:
        args.pop()
        defaulted.pop()
    return args


class HookRunner:
    """Execute script hooks at lifecycle events."""

    def __init__(self, script: HookScript, hooks: tuple[HookDefinition, ...] = ()):
        self._script = script
        self._hooks = hooks

    @property
    def script(self) -> HookScript:
        return self._script

    @property
    def hook_count(self) -> int:
        return len(self._hooks)

    def hooks_for_event(self, event: HookEvent) -> tuple[HookDefinition, ...]:
        """Return all enabled hooks for a given event, in run order."""
        return tuple(sorted(
            (h for h in self._hooks if h.event == event and h.enabled),
            key=lambda h: h.order,
        ))

    def call(self, name: str, *args: Any) -> Any:
        """Call a script function directly. Errors propagate to the caller."""
        return self._script.call(name, *args)

    def run_document_hooks(
        self,
        event: HookEvent,
        doc: Document,
        meta: Optional[Metadata] = None,
    ) -> list[dict]:
        """Run every enabled hook for ``event`` against ``doc``.

        ``doc`` is mutated in place. A failing hook is reported and the
        remaining hooks still run.

        Returns:
            List of result dicts with keys: name, success, output, duration.
        """
        hooks = self.hooks_for_event(event)
        if not hooks:
            return []

        available = {"doc": doc, "meta": meta or Metadata(), "event": event.value}
        return [self._run_single(hook, available) for hook in hooks]

    def _run_single(self, hook: HookDefinition, available: dict[str, Any]) -> dict:
        """Execute a single hook function."""
        start = time.monotonic()
        try:
            fn = self._script.get(hook.function)
            output = fn(*bind_arguments(fn, available))
            duration = time.monotonic() - start
            return {
                "name": hook.name,
                "success": True,
                "output": output,
                "duration": round(duration, 3),
            }
        except Exception as e:
            duration = time.monotonic() - start
            _log.warning("Hook %s (%s) failed: %s", hook.name, hook.function, e)
            return {
                "name": hook.name,
                "success": False,
                "output": f"Hook failed: {e}",
                "duration": round(duration, 3),
            }

    def describe(self) -> list[dict]:
        """Return a summary of all hooks for display."""
        return [
            {
                "name": h.name,
                "event": h.event.value,
                "function": h.function,
                "enabled": h.enabled,
                "order": h.order,
            }
            for h in self._hooks
        ]
