"""Fixtures for exercising the hook interface from host test suites."""

from importlib import resources
from typing import Any, Optional

from ..document import Document
from ..hooks.runtime import HookScript
from ..metadata import Metadata
from ..query import Query


def scripts_source() -> str:
    """Source of the bundled fixture script."""
    return (
        resources.files(__package__)
        .joinpath("testdata").joinpath("scripts.py")
        .read_text(encoding="utf-8")
    )


def load_scripts(overrides: Optional[dict[str, Any]] = None) -> HookScript:
    """Compile the bundled fixture script."""
    return HookScript(scripts_source(), name="testdata/scripts.py", overrides=overrides)


def new_account_doc(account_id: str = "1", name: str = "acme") -> Document:
    return Document({"_id": account_id, "name": name})


def new_user_doc(user_id: str, account_id: str = "1", **fields: Any) -> Document:
    doc = Document({"_id": user_id, "account_id": account_id, "name": f"user-{user_id}"})
    return doc.set_all(fields)


def new_meta(
    roles: Optional[list[str]] = None,
    groups: Optional[list[str]] = None,
    **values: Any,
) -> Metadata:
    meta = Metadata(values)
    if roles is not None:
        meta = meta.with_roles(roles)
    if groups is not None:
        meta = meta.with_groups(groups)
    return meta


def id_query(doc_id: Any) -> Query:
    """A point lookup by _id."""
    return Query.from_dict({"where": [{"field": "_id", "op": "eq", "value": doc_id}]})
