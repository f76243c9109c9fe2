"""Script runtime: compile hook scripts and call their functions by name.

A script is ordinary Python source. It runs once in a private namespace
seeded with the helpers from ``default_globals()``; every top-level
function it defines becomes a hook the host can call by name.
"""

import inspect
import logging
import re
import uuid
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable, Optional

from ..document import Document, strict_equal
from ..errors import HookNotFoundError, ScriptError
from ..metadata import Metadata
from ..query import Query, Where
from ..utils.time import iso_timestamp

_log = logging.getLogger(__name__)

_DEF_RE = re.compile(r"^(?:async\s+)?def\s+([A-Za-z_][A-Za-z0-9_]*)\s*\(", re.MULTILINE)


def contains(sequence: Any, item: Any) -> bool:
    """Membership test with exact value equality.

    Returns False for None and for values that are not lists, tuples or
    sets. Strings are not searched character by character.
    """
    if sequence is None or isinstance(sequence, (str, bytes, Mapping)):
        return False
    if not isinstance(sequence, (list, tuple, set, frozenset)):
        return False
    return any(strict_equal(v, item) for v in sequence)


def new_id() -> str:
    """Return a new random document id."""
    return uuid.uuid4().hex


def default_globals(overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    """Build the namespace a script starts with."""
    namespace: dict[str, Any] = {
        "__name__": "__docscript__",
        "contains": contains,
        "iso_timestamp": iso_timestamp,
        "new_id": new_id,
        "Document": Document,
        "Metadata": Metadata,
        "Query": Query,
        "Where": Where,
    }
    if overrides:
        namespace.update(overrides)
    return namespace


def function_name(source: str) -> str:
    """Return the name of the first function defined in ``source``, or ''."""
    match = _DEF_RE.search(source)
    return match.group(1) if match else ""


class HookScript:
    """A compiled script and the hook functions it defines."""

    def __init__(
        self,
        source: str,
        name: str = "<script>",
        overrides: Optional[dict[str, Any]] = None,
    ):
        self.source = source
        self.name = name
        self.namespace = default_globals(overrides)
        self._reserved = set(self.namespace)

        try:
            code = compile(source, name, "exec")
        except SyntaxError as e:
            raise ScriptError(f"{name}: syntax error on line {e.lineno}: {e.msg}") from e

        try:
            exec(code, self.namespace)
        except Exception as e:
            raise ScriptError(f"{name}: failed to load: {e}") from e

        _log.debug("Loaded script %s with hooks %s", name, self.function_names())

    @classmethod
    def from_file(
        cls, path: str | Path, overrides: Optional[dict[str, Any]] = None,
    ) -> "HookScript":
        path = Path(path).expanduser()
        try:
            source = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ScriptError(f"cannot read script {path}: {e}") from e
        return cls(source, name=str(path), overrides=overrides)

    def function_names(self) -> list[str]:
        """Names of the functions the script defined, in definition order."""
        return [
            key for key, value in self.namespace.items()
            if key not in self._reserved
            and not key.startswith("_")
            and inspect.isfunction(value)
            and value.__module__ == self.namespace["__name__"]
        ]

    def has(self, name: str) -> bool:
        return name in self.function_names()

    def get(self, name: str) -> Callable[..., Any]:
        if not self.has(name):
            raise HookNotFoundError(f"{self.name}: no hook named '{name}'")
        return self.namespace[name]

    def call(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Call a hook by name. Exceptions raised by the hook propagate."""
        fn = self.get(name)
        _log.debug("Calling hook %s", name)
        return fn(*args, **kwargs)

    def evaluate(self, expression: str, **bindings: Any) -> Any:
        """Evaluate a single expression against the script namespace.

        ``bindings`` are visible as local names (``doc``, ``meta``...).
        """
        try:
            code = compile(expression, f"{self.name}:<expr>", "eval")
        except SyntaxError as e:
            raise ScriptError(f"invalid expression {expression!r}: {e.msg}") from e
        return eval(code, self.namespace, dict(bindings))
