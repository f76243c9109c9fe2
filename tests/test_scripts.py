"""Tests for the bundled fixture hooks in docscript/testutil/testdata/scripts.py."""

from datetime import datetime, timezone

import pytest

from docscript.document import Document
from docscript.errors import DocumentError
from docscript.metadata import Metadata
from docscript.query import Query
from docscript.testutil import id_query, load_scripts, new_meta, scripts_source
from docscript.utils.time import parse_timestamp


@pytest.fixture
def scripts():
    return load_scripts()


def _query(where):
    data = {} if where is None else {"where": where}
    return Query.from_dict(data)


class TestFixtureSource:
    """The fixture script defines exactly the three hooks."""

    def test_function_names(self, scripts):
        assert scripts.function_names() == [
            "set_doc_timestamp",
            "is_super_user",
            "account_query_auth",
        ]

    def test_source_is_readable(self):
        assert "def is_super_user(meta)" in scripts_source()


class TestSetDocTimestamp:

    def test_sets_iso_timestamp_near_now(self, scripts):
        doc = Document({"name": "acme"})
        before = datetime.now(timezone.utc)
        scripts.call("set_doc_timestamp", doc)
        after = datetime.now(timezone.utc)

        stamp = doc.get("timestamp")
        assert isinstance(stamp, str)
        assert stamp.endswith("Z")
        parsed = parse_timestamp(stamp)
        # Millisecond truncation can put the stamp just before `before`.
        assert before.replace(microsecond=before.microsecond // 1000 * 1000) <= parsed <= after

    def test_keeps_other_fields(self, scripts):
        doc = Document({"name": "acme"})
        scripts.call("set_doc_timestamp", doc)
        assert doc.get("name") == "acme"

    def test_returns_none(self, scripts):
        assert scripts.call("set_doc_timestamp", Document()) is None

    def test_overwrites_existing_timestamp(self, scripts):
        doc = Document({"timestamp": "1970-01-01T00:00:00.000Z"})
        scripts.call("set_doc_timestamp", doc)
        assert doc.get("timestamp") != "1970-01-01T00:00:00.000Z"

    def test_set_failure_propagates(self, scripts):
        class BrokenDoc:
            def set(self, key, value):
                raise DocumentError("read-only")

        with pytest.raises(DocumentError):
            scripts.call("set_doc_timestamp", BrokenDoc())


class TestIsSuperUser:

    def test_super_user_role(self, scripts):
        meta = new_meta(roles=["admin", "super_user"])
        assert scripts.call("is_super_user", meta) is True

    def test_other_roles(self, scripts):
        meta = new_meta(roles=["admin"])
        assert scripts.call("is_super_user", meta) is False

    def test_roles_absent(self, scripts):
        assert scripts.call("is_super_user", Metadata()) is False

    def test_roles_empty(self, scripts):
        assert scripts.call("is_super_user", new_meta(roles=[])) is False

    def test_exact_match_only(self, scripts):
        meta = new_meta(roles=["super_users", "SUPER_USER"])
        assert scripts.call("is_super_user", meta) is False

    def test_roles_as_string_not_searched(self, scripts):
        meta = Metadata({"roles": "super_user"})
        assert scripts.call("is_super_user", meta) is False


class TestAccountQueryAuth:

    @pytest.fixture
    def meta(self):
        return new_meta(groups=["u1", "u2"])

    def test_id_lookup_in_groups(self, scripts, meta):
        query = _query([{"field": "_id", "op": "eq", "value": "u1"}])
        assert scripts.call("account_query_auth", query, meta) is True

    def test_id_query_helper(self, scripts, meta):
        assert scripts.call("account_query_auth", id_query("u2"), meta) is True

    def test_wrong_field(self, scripts, meta):
        query = _query([{"field": "name", "op": "eq", "value": "u1"}])
        assert scripts.call("account_query_auth", query, meta) is False

    def test_wrong_op(self, scripts, meta):
        query = _query([{"field": "_id", "op": "neq", "value": "u1"}])
        assert scripts.call("account_query_auth", query, meta) is False

    def test_value_not_in_groups(self, scripts, meta):
        query = _query([{"field": "_id", "op": "eq", "value": "u3"}])
        assert scripts.call("account_query_auth", query, meta) is False

    def test_empty_where(self, scripts, meta):
        assert scripts.call("account_query_auth", _query([]), meta) is False

    def test_absent_where(self, scripts, meta):
        assert scripts.call("account_query_auth", _query(None), meta) is False

    def test_groups_absent(self, scripts):
        query = _query([{"field": "_id", "op": "eq", "value": "u1"}])
        assert scripts.call("account_query_auth", query, Metadata()) is False

    def test_only_first_clause_inspected(self, scripts, meta):
        query = _query([
            {"field": "name", "op": "eq", "value": "acme"},
            {"field": "_id", "op": "eq", "value": "u1"},
        ])
        assert scripts.call("account_query_auth", query, meta) is False

    def test_extra_clauses_after_id_lookup(self, scripts, meta):
        query = _query([
            {"field": "_id", "op": "eq", "value": "u1"},
            {"field": "name", "op": "eq", "value": "acme"},
        ])
        assert scripts.call("account_query_auth", query, meta) is True

    def test_numeric_id_does_not_match_string_group(self, scripts):
        meta = new_meta(groups=["1"])
        query = _query([{"field": "_id", "op": "eq", "value": 1}])
        assert scripts.call("account_query_auth", query, meta) is False
