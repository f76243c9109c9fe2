"""Allow/deny authorization rules evaluated by the script runtime.

Each rule carries a Python expression (``match``) evaluated against the
loaded script with ``doc``, ``meta``, ``query`` and ``action`` in scope,
so a rule like ``is_super_user(meta)`` calls straight into the script.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .document import Document
from .errors import AuthorizationError
from .hooks.runtime import HookScript
from .metadata import Metadata
from .query import Query

_log = logging.getLogger(__name__)


class Effect(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


class Action(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    SET = "set"
    DELETE = "delete"
    QUERY = "query"
    ALL = "*"


@dataclass(frozen=True)
class AuthzRule:
    """A single allow or deny rule."""

    effect: Effect
    action: tuple[str, ...]
    match: str

    def applies_to(self, action: str) -> bool:
        return Action.ALL.value in self.action or action in self.action


class Authorizer:
    """Evaluate authorization rules for a collection.

    Deny rules are checked first: any match denies. If no allow rule
    applies to the action, the request is allowed; otherwise at least one
    allow rule must match.
    """

    def __init__(self, script: HookScript, rules: tuple[AuthzRule, ...] = ()):
        self._script = script
        self._rules = rules

    @property
    def rules(self) -> tuple[AuthzRule, ...]:
        return self._rules

    def authorize(
        self,
        action: str,
        meta: Optional[Metadata] = None,
        doc: Optional[Document] = None,
        query: Optional[Query] = None,
    ) -> bool:
        action = action.value if isinstance(action, Action) else action
        meta = meta or Metadata()
        if meta.is_internal or not self._rules:
            return True

        bindings = {"doc": doc, "meta": meta, "query": query, "action": action}

        for rule in self._rules_for(action, Effect.DENY):
            if self._matches(rule, bindings):
                _log.info("Denied %s for user %s by rule %r", action, meta.user_id, rule.match)
                return False

        allow = self._rules_for(action, Effect.ALLOW)
        if not allow:
            return True

        for rule in allow:
            if self._matches(rule, bindings):
                return True

        _log.info("No allow rule matched %s for user %s", action, meta.user_id)
        return False

    def _rules_for(self, action: str, effect: Effect) -> list[AuthzRule]:
        return [r for r in self._rules if r.effect == effect and r.applies_to(action)]

    def _matches(self, rule: AuthzRule, bindings: dict[str, Any]) -> bool:
        try:
            return bool(self._script.evaluate(rule.match, **bindings))
        except Exception as e:
            raise AuthorizationError(
                f"failed to run authz match script {rule.match!r}: {e}"
            ) from e


def load_rules_from_config(rules_data: list[dict[str, Any]]) -> tuple[AuthzRule, ...]:
    """Parse a list of rule dicts (effect, action, match) into AuthzRules.

    ``action`` may be a single string or a list. Invalid entries are skipped.
    """
    rules = []
    effects = {e.value: e for e in Effect}

    for entry in rules_data or ():
        if not isinstance(entry, dict):
            continue

        effect = effects.get(entry.get("effect"))
        match = entry.get("match")
        action = entry.get("action") or ["*"]
        if isinstance(action, str):
            action = [action]

        if effect is None or not match:
            _log.debug("Skipping invalid authz rule: %r", entry)
            continue

        rules.append(AuthzRule(effect=effect, action=tuple(action), match=match))

    return tuple(rules)
