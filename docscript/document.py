"""Mutable JSON document passed to hooks.

Fields are addressed with dotted paths: ``"address.city"`` reads a nested
object and ``"tags.0"`` reads the first element of a list.
"""

import copy
import json
import logging
from typing import Any, Iterable, Iterator, Optional

from .errors import DocumentError
from .query import Where, WhereOp, parse_op

_log = logging.getLogger(__name__)

# Where values starting with this prefix reference another field of the
# same document ("$updatedAt" compares against doc.get("updatedAt")).
SELF_REF_PREFIX = "$"

_MISSING = object()


def strict_equal(a: Any, b: Any) -> bool:
    """Equality without bool/number cross-matching (True != 1)."""
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    if type(a) is not type(b):
        return False
    return a == b


def _split(path: str) -> list[str]:
    if not path:
        raise DocumentError("empty field path")
    return path.split(".")


def _step(node: Any, key: str) -> Any:
    if isinstance(node, dict):
        return node.get(key, _MISSING)
    if isinstance(node, list) and key.lstrip("-").isdigit():
        index = int(key)
        if -len(node) <= index < len(node):
            return node[index]
    return _MISSING


class Document:
    """A mutable key-value record backed by a plain dict."""

    def __init__(self, data: Optional[dict[str, Any]] = None):
        if data is not None and not isinstance(data, dict):
            raise DocumentError(f"document must be an object, got {type(data).__name__}")
        self._data: dict[str, Any] = copy.deepcopy(data) if data else {}

    @classmethod
    def from_json(cls, text: str) -> "Document":
        try:
            data = json.loads(text) if text else {}
        except json.JSONDecodeError as e:
            raise DocumentError(f"invalid document JSON: {e}") from e
        return cls(data)

    def _lookup(self, path: str) -> Any:
        node: Any = self._data
        for key in _split(path):
            node = _step(node, key)
            if node is _MISSING:
                return _MISSING
        return node

    def get(self, path: str) -> Any:
        """Return the value at ``path`` or None if it does not exist."""
        value = self._lookup(path)
        return None if value is _MISSING else value

    def exists(self, path: str) -> bool:
        return self._lookup(path) is not _MISSING

    def get_string(self, path: str) -> str:
        value = self.get(path)
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        if isinstance(value, (dict, list)):
            return json.dumps(value, separators=(",", ":"))
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def get_bool(self, path: str) -> bool:
        value = self.get(path)
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes")
        return bool(value)

    def get_float(self, path: str) -> float:
        value = self.get(path)
        if isinstance(value, bool):
            return 1.0 if value else 0.0
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0.0

    def get_array(self, path: str) -> list[Any]:
        value = self.get(path)
        if value is None:
            return []
        if isinstance(value, list):
            return value
        return [value]

    def set(self, path: str, value: Any) -> "Document":
        """Set ``path`` to ``value``, creating intermediate objects.

        Returns the document so calls can be chained.
        """
        keys = _split(path)
        node: Any = self._data
        for i, key in enumerate(keys[:-1]):
            child = _step(node, key)
            if child is _MISSING:
                if not isinstance(node, dict):
                    raise DocumentError(
                        f"cannot set '{path}': '{'.'.join(keys[:i])}' is not an object"
                    )
                child = node[key] = {}
            elif not isinstance(child, (dict, list)):
                raise DocumentError(
                    f"cannot set '{path}': '{'.'.join(keys[:i + 1])}' is not an object"
                )
            node = child

        last = keys[-1]
        if isinstance(node, dict):
            node[last] = value
        elif isinstance(node, list) and last.isdigit() and int(last) < len(node):
            node[int(last)] = value
        elif isinstance(node, list) and last.isdigit() and int(last) == len(node):
            node.append(value)
        else:
            raise DocumentError(f"cannot set '{path}': index out of range")
        return self

    def set_all(self, values: dict[str, Any]) -> "Document":
        for path, value in values.items():
            self.set(path, value)
        return self

    def merge(self, other: "Document") -> "Document":
        """Deep-merge another document's fields into this one."""
        _deep_merge(self._data, other.value())
        return self

    def delete(self, path: str) -> "Document":
        keys = _split(path)
        parent = self._data if len(keys) == 1 else self._lookup(".".join(keys[:-1]))
        last = keys[-1]
        if isinstance(parent, dict):
            parent.pop(last, None)
        elif isinstance(parent, list) and last.isdigit() and int(last) < len(parent):
            del parent[int(last)]
        return self

    def delete_all(self, *paths: str) -> "Document":
        for path in paths:
            self.delete(path)
        return self

    def value(self) -> dict[str, Any]:
        """Return a deep copy of the underlying data."""
        return copy.deepcopy(self._data)

    def clone(self) -> "Document":
        return Document(self._data)

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self._data, indent=indent, sort_keys=indent is not None)

    def field_paths(self) -> list[str]:
        """List the dotted paths of every leaf and container in the document."""
        paths: list[str] = []
        _collect_paths(self._data, "", paths)
        return paths

    def where(self, clauses: Iterable[Where]) -> bool:
        """Return True if the document satisfies every clause."""
        for clause in clauses:
            if isinstance(clause, dict):
                clause = Where.from_dict(clause)
            if not self._match(clause):
                return False
        return True

    def _match(self, clause: Where) -> bool:
        op = parse_op(clause.op)
        if op is None:
            raise DocumentError(f"invalid operator: '{clause.op}'")

        actual = self.get(clause.field)
        expected = clause.value
        if isinstance(expected, str) and expected.startswith(SELF_REF_PREFIX):
            expected = self.get(expected[len(SELF_REF_PREFIX):])

        if op == WhereOp.EQ:
            return strict_equal(actual, expected)
        if op == WhereOp.NEQ:
            return not strict_equal(actual, expected)
        if op in (WhereOp.GT, WhereOp.GTE, WhereOp.LT, WhereOp.LTE):
            return _compare(op, self.get_float(clause.field), _to_float(expected))
        if op == WhereOp.IN:
            return any(strict_equal(actual, v) for v in _as_list(expected))
        if op == WhereOp.CONTAINS:
            if isinstance(actual, str):
                return str(expected) in actual
            if isinstance(actual, list):
                return any(strict_equal(v, expected) for v in actual)
            return json.dumps(expected) in json.dumps(actual)
        if op == WhereOp.CONTAINS_ALL:
            have = [str(v) for v in _as_list(actual)]
            return all(str(v) in have for v in _as_list(expected))
        # containsAny
        have = [str(v) for v in _as_list(actual)]
        return any(str(v) in have for v in _as_list(expected))

    def __getitem__(self, path: str) -> Any:
        value = self._lookup(path)
        if value is _MISSING:
            raise KeyError(path)
        return value

    def __setitem__(self, path: str, value: Any) -> None:
        self.set(path, value)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.exists(path)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Document):
            return self._data == other._data
        if isinstance(other, dict):
            return self._data == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"Document({self._data!r})"


def _deep_merge(target: dict, source: dict) -> None:
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_merge(target[key], value)
        else:
            target[key] = value


def _collect_paths(node: Any, prefix: str, out: list[str]) -> None:
    if isinstance(node, dict):
        items = node.items()
    elif isinstance(node, list):
        items = ((str(i), v) for i, v in enumerate(node))
    else:
        return
    for key, value in items:
        path = f"{prefix}.{key}" if prefix else key
        out.append(path)
        _collect_paths(value, path, out)


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        _log.debug("Non-numeric comparison value %r treated as 0", value)
        return 0.0


def _compare(op: WhereOp, left: float, right: float) -> bool:
    if op == WhereOp.GT:
        return left > right
    if op == WhereOp.GTE:
        return left >= right
    if op == WhereOp.LT:
        return left < right
    return left <= right
