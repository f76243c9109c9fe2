"""Tests for the docscript CLI commands."""

import json

import pytest
import yaml
from click.testing import CliRunner

from docscript.cli import DocScriptApp, cli
from docscript.document import Document
from docscript.metadata import Metadata
from docscript.testutil import id_query, scripts_source


@pytest.fixture
def script_path(tmp_path):
    path = tmp_path / "scripts.py"
    path.write_text(scripts_source())
    return path


@pytest.fixture
def config_path(tmp_path, script_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump({
        "scripts": [script_path.name],
        "hooks": [
            {"name": "timestamp", "event": "on_set", "function": "set_doc_timestamp"},
        ],
        "authz": [
            {"effect": "allow", "action": "*", "match": "is_super_user(meta)"},
            {"effect": "allow", "action": "query", "match": "account_query_auth(query, meta)"},
        ],
    }))
    return path


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, config_path, *args):
    return runner.invoke(cli, ["--config", str(config_path), *args])


class TestDocScriptApp:

    def test_loads_configured_script(self, config_path):
        app = DocScriptApp(str(config_path))
        assert app.script.has("is_super_user")
        assert app.hook_runner.hook_count == 1
        assert len(app.authorizer.rules) == 2

    def test_run_binds_arguments(self, config_path):
        app = DocScriptApp(str(config_path))
        meta = Metadata({"groups": ["u1"]})
        assert app.run("account_query_auth", meta=meta, query=id_query("u1")) is True

    def test_run_document_hook(self, config_path):
        app = DocScriptApp(str(config_path))
        doc = Document()
        app.run("set_doc_timestamp", doc=doc)
        assert doc.exists("timestamp")

    def test_multiple_scripts_are_joined(self, tmp_path, script_path):
        extra = tmp_path / "extra.py"
        extra.write_text("def always(meta):\n    return True\n")
        config = tmp_path / "multi.yaml"
        config.write_text(yaml.dump({"scripts": [str(script_path), str(extra)]}))

        app = DocScriptApp(str(config))
        assert app.script.has("always")
        assert app.script.has("is_super_user")

    def test_no_scripts(self, tmp_path):
        app = DocScriptApp(str(tmp_path / "empty.yaml"))
        assert app.script.function_names() == []

    def test_timestamp_stays_utc_with_configured_timezone(self, config_path, monkeypatch):
        monkeypatch.setenv("DOCSCRIPT_TZ", "America/Phoenix")
        app = DocScriptApp(str(config_path))
        doc = Document()
        app.run("set_doc_timestamp", doc=doc)
        assert doc.get("timestamp").endswith("Z")


class TestCommands:

    def test_hooks_lists_functions(self, runner, config_path):
        result = invoke(runner, config_path, "hooks")
        assert result.exit_code == 0
        assert "set_doc_timestamp" in result.output
        assert "account_query_auth" in result.output
        assert "on_set" in result.output

    def test_hooks_empty(self, runner, tmp_path):
        result = invoke(runner, tmp_path / "empty.yaml", "hooks")
        assert result.exit_code == 0
        assert "No hooks defined" in result.output

    def test_run_predicate(self, runner, config_path):
        result = invoke(
            runner, config_path, "run", "is_super_user",
            "--meta", json.dumps({"roles": ["admin", "super_user"]}),
        )
        assert result.exit_code == 0
        assert "true" in result.output

    def test_run_query_auth(self, runner, config_path):
        result = invoke(
            runner, config_path, "run", "account_query_auth",
            "--meta", json.dumps({"groups": ["u1", "u2"]}),
            "--query", json.dumps({"where": [{"field": "name", "op": "eq", "value": "u1"}]}),
        )
        assert result.exit_code == 0
        assert "false" in result.output

    def test_run_with_explicit_script(self, runner, tmp_path):
        script = tmp_path / "other.py"
        script.write_text("def answer(meta):\n    return 42\n")
        result = invoke(runner, tmp_path / "empty.yaml", "run", "answer", "--script", str(script))
        assert result.exit_code == 0
        assert "42" in result.output

    def test_run_document_hook_prints_doc(self, runner, config_path):
        result = invoke(
            runner, config_path, "run", "set_doc_timestamp", "--doc", '{"name": "acme"}',
        )
        assert result.exit_code == 0
        assert "timestamp" in result.output

    def test_run_unknown_hook(self, runner, config_path):
        result = invoke(runner, config_path, "run", "nope")
        assert result.exit_code == 1
        assert "no hook named 'nope'" in result.output

    def test_run_invalid_json(self, runner, config_path):
        result = invoke(runner, config_path, "run", "is_super_user", "--meta", "{nope")
        assert result.exit_code == 2

    def test_run_unreadable_input_file(self, runner, config_path, tmp_path):
        missing = tmp_path / "missing.json"
        result = invoke(runner, config_path, "run", "is_super_user", "--meta", f"@{missing}")
        assert result.exit_code == 2
        assert "cannot read" in result.output

    def test_run_query_auth_without_query(self, runner, config_path):
        result = invoke(
            runner, config_path, "run", "account_query_auth",
            "--meta", json.dumps({"groups": ["u1"]}),
        )
        assert result.exit_code == 0
        assert "false" in result.output

    def test_run_malformed_where(self, runner, config_path):
        result = invoke(
            runner, config_path, "run", "account_query_auth",
            "--query", json.dumps({"where": {"field": "_id"}}),
        )
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "where must be a list" in result.output

    def test_run_invalid_operator(self, runner, config_path):
        result = invoke(
            runner, config_path, "run", "account_query_auth",
            "--query", json.dumps({"where": [{"field": "_id", "op": "like", "value": "u1"}]}),
        )
        assert result.exit_code == 1
        assert "invalid operator" in result.output

    def test_trigger(self, runner, config_path):
        result = invoke(runner, config_path, "trigger", "on_set", "--doc", '{"name": "acme"}')
        assert result.exit_code == 0
        assert "timestamp" in result.output

    def test_authorize_allowed(self, runner, config_path):
        result = invoke(
            runner, config_path, "authorize", "create",
            "--meta", json.dumps({"roles": ["super_user"]}),
        )
        assert result.exit_code == 0
        assert "true" in result.output

    def test_authorize_denied(self, runner, config_path):
        result = invoke(
            runner, config_path, "authorize", "create",
            "--meta", json.dumps({"roles": ["read_only"]}),
        )
        assert result.exit_code == 2
        assert "false" in result.output

    def test_authorize_query_without_query_denies(self, runner, config_path):
        result = invoke(
            runner, config_path, "authorize", "query",
            "--meta", json.dumps({"groups": ["u1"]}),
        )
        assert result.exit_code == 2
        assert "false" in result.output

    def test_authorize_query(self, runner, config_path):
        result = invoke(
            runner, config_path, "authorize", "query",
            "--meta", json.dumps({"groups": ["1"]}),
            "--query", json.dumps(id_query("1").to_dict()),
        )
        assert result.exit_code == 0

    def test_config(self, runner, config_path):
        result = invoke(runner, config_path, "config")
        assert result.exit_code == 0
        assert "Authz rules: 2" in result.output
