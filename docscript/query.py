"""Query model handed to hooks: select fields, where clauses, paging."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .errors import QueryError


class WhereOp(str, Enum):
    """Comparison operators accepted in where clauses."""

    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN = "in"
    CONTAINS = "contains"
    CONTAINS_ALL = "containsAll"
    CONTAINS_ANY = "containsAny"


_OPS = {op.value: op for op in WhereOp}


@dataclass(frozen=True)
class Where:
    """A single filter clause."""

    field: str
    op: str
    value: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Where":
        return cls(
            field=data.get("field", ""),
            op=data.get("op", ""),
            value=data.get("value"),
        )

    def to_dict(self) -> dict[str, Any]:
        op = self.op.value if isinstance(self.op, WhereOp) else self.op
        return {"field": self.field, "op": op, "value": self.value}


@dataclass(frozen=True)
class OrderBy:
    field: str
    direction: str = "asc"


@dataclass(frozen=True)
class Query:
    """A read-only query against a collection.

    ``where`` may be None or empty; both mean "no filter".
    """

    select: tuple[str, ...] = ("*",)
    where: Optional[tuple[Where, ...]] = None
    page: int = 0
    limit: int = 0
    order_by: tuple[OrderBy, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "Query":
        """Build a Query from its JSON shape.

        Select entries may be plain strings or ``{"field": ...}`` objects.
        A missing ``where`` key stays None.
        """
        data = data or {}
        if not isinstance(data, dict):
            raise QueryError(f"query must be an object, got {type(data).__name__}")

        select = tuple(
            s.get("field", "*") if isinstance(s, dict) else str(s)
            for s in _as_sequence(data.get("select") or ("*",), "select")
        )

        where = data.get("where")
        if where is not None:
            where = tuple(
                w if isinstance(w, Where) else Where.from_dict(_as_mapping(w, "where clause"))
                for w in _as_sequence(where, "where")
            )

        order_by = tuple(
            OrderBy(field=o.get("field", ""), direction=o.get("direction", "asc"))
            for o in (
                _as_mapping(o, "orderBy entry")
                for o in _as_sequence(data.get("orderBy") or (), "orderBy")
            )
        )

        page = data.get("page", 0)
        limit = data.get("limit", 0)
        for key, number in (("page", page), ("limit", limit)):
            if isinstance(number, bool) or not isinstance(number, int):
                raise QueryError(f"{key} must be an integer, got {number!r}")

        return cls(
            select=select,
            where=where,
            page=page,
            limit=limit,
            order_by=order_by,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "select": [{"field": s} for s in self.select],
            "page": self.page,
        }
        if self.where is not None:
            data["where"] = [w.to_dict() for w in self.where]
        if self.limit:
            data["limit"] = self.limit
        if self.order_by:
            data["orderBy"] = [
                {"field": o.field, "direction": o.direction} for o in self.order_by
            ]
        return data

    def validate(self) -> None:
        """Raise QueryError if the query is malformed."""
        if self.page < 0:
            raise QueryError(f"page must be >= 0, got {self.page}")
        if self.limit < 0:
            raise QueryError(f"limit must be >= 0, got {self.limit}")
        for clause in self.where or ():
            if not clause.field:
                raise QueryError("where clause is missing a field")
            if parse_op(clause.op) is None:
                raise QueryError(f"invalid operator: '{clause.op}'")
        for order in self.order_by:
            if order.direction not in ("asc", "desc"):
                raise QueryError(f"invalid order direction: '{order.direction}'")


def parse_op(op: Any) -> Optional[WhereOp]:
    """Map an operator string (or WhereOp) to a WhereOp, or None."""
    if isinstance(op, WhereOp):
        return op
    if not isinstance(op, str):
        return None
    return _OPS.get(op)


def _as_sequence(value: Any, label: str) -> Any:
    if isinstance(value, (str, bytes, dict)) or not isinstance(value, (list, tuple)):
        raise QueryError(f"{label} must be a list, got {type(value).__name__}")
    return value


def _as_mapping(value: Any, label: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise QueryError(f"{label} must be an object, got {type(value).__name__}")
    return value
