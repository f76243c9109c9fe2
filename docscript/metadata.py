"""Read-only caller context (identity, roles, groups) passed to hooks."""

import copy
from typing import Any, Iterator, Optional

from .errors import MetadataError

KEY_NAMESPACE = "namespace"
KEY_USER_ID = "userId"
KEY_ROLES = "roles"
KEY_GROUPS = "groups"
# Set by the host for its own calls; authorization is skipped.
KEY_INTERNAL = "internal"

DEFAULT_NAMESPACE = "default"


class Metadata:
    """Immutable key-value context for a single hook call.

    ``with_*`` methods return a new Metadata and leave this one untouched.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Optional[dict[str, Any]] = None):
        object.__setattr__(self, "_values", copy.deepcopy(dict(values or {})))

    def get(self, key: str) -> Any:
        """Return the value for ``key`` or None.

        ``namespace`` falls back to "default" when unset.
        """
        value = self._values.get(key)
        if value is None and key == KEY_NAMESPACE:
            return DEFAULT_NAMESPACE
        # Callers get a copy so nested lists can't be edited in place.
        return copy.deepcopy(value)

    def exists(self, key: str) -> bool:
        return key in self._values

    def to_dict(self) -> dict[str, Any]:
        data = copy.deepcopy(self._values)
        data.setdefault(KEY_NAMESPACE, DEFAULT_NAMESPACE)
        return data

    @property
    def namespace(self) -> str:
        return self.get(KEY_NAMESPACE)

    @property
    def user_id(self) -> Optional[str]:
        return self.get(KEY_USER_ID)

    @property
    def roles(self) -> list[str]:
        return list(self.get(KEY_ROLES) or [])

    @property
    def groups(self) -> list[str]:
        return list(self.get(KEY_GROUPS) or [])

    @property
    def is_internal(self) -> bool:
        return bool(self._values.get(KEY_INTERNAL, False))

    def with_values(self, **values: Any) -> "Metadata":
        merged = dict(self._values)
        merged.update(values)
        return Metadata(merged)

    def with_namespace(self, namespace: str) -> "Metadata":
        return self.with_values(**{KEY_NAMESPACE: namespace})

    def with_user_id(self, user_id: str) -> "Metadata":
        return self.with_values(**{KEY_USER_ID: user_id})

    def with_roles(self, roles: list[str]) -> "Metadata":
        return self.with_values(**{KEY_ROLES: list(roles)})

    def with_groups(self, groups: list[str]) -> "Metadata":
        return self.with_values(**{KEY_GROUPS: list(groups)})

    def set(self, key: str, value: Any) -> None:
        raise MetadataError(f"metadata is read-only (tried to set '{key}')")

    def __setattr__(self, name: str, value: Any) -> None:
        raise MetadataError(f"metadata is read-only (tried to set '{name}')")

    def __setitem__(self, key: str, value: Any) -> None:
        raise MetadataError(f"metadata is read-only (tried to set '{key}')")

    def __getitem__(self, key: str) -> Any:
        if key not in self._values and key != KEY_NAMESPACE:
            raise KeyError(key)
        return self.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __copy__(self) -> "Metadata":
        return self

    def __deepcopy__(self, memo: dict) -> "Metadata":
        return self

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Metadata):
            return self._values == other._values
        return NotImplemented

    def __repr__(self) -> str:
        return f"Metadata({self._values!r})"
