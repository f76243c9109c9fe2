"""docscript CLI - load hook scripts and run them against JSON input."""

import json
import logging
import sys
from typing import Any, Optional

import click
from rich.logging import RichHandler

from .authz import Authorizer, load_rules_from_config
from .config import ConfigManager
from .document import Document
from .errors import DocScriptError
from .hooks import HookEvent, HookRunner, HookScript, load_hooks_from_config
from .hooks.runner import bind_arguments
from .metadata import Metadata
from .query import Query
from .ui import console, render_error, render_hooks, render_value


class DocScriptApp:
    """Wires config, script, hook runner and authorizer together."""

    def __init__(self, config_path: Optional[str] = None, script_path: Optional[str] = None):
        self.config = ConfigManager(config_path)
        self.script = self._load_script(script_path)
        self.hook_runner = HookRunner(
            self.script, load_hooks_from_config(self.config.get_hooks_config()),
        )
        self.authorizer = Authorizer(
            self.script, load_rules_from_config(self.config.get_authz_config()),
        )

    def _script_globals(self) -> dict[str, Any]:
        # Stored timestamps stay UTC; the configured timezone is display-only.
        return dict(self.config.get_globals_config())

    def _load_script(self, script_path: Optional[str]) -> HookScript:
        """Load the given script, or concatenate every configured script."""
        overrides = self._script_globals()
        if script_path:
            return HookScript.from_file(script_path, overrides=overrides)

        paths = self.config.get_script_paths()
        if not paths:
            return HookScript("", name="<empty>", overrides=overrides)
        if len(paths) == 1:
            return HookScript.from_file(paths[0], overrides=overrides)

        sources = []
        for path in paths:
            try:
                sources.append(path.read_text(encoding="utf-8"))
            except OSError as e:
                raise DocScriptError(f"cannot read script {path}: {e}") from e
        return HookScript("\n\n".join(sources), name="<scripts>", overrides=overrides)

    def run(
        self,
        name: str,
        doc: Optional[Document] = None,
        meta: Optional[Metadata] = None,
        query: Optional[Query] = None,
    ) -> Any:
        """Call a hook, passing whichever of doc/meta/query it asks for."""
        available: dict[str, Any] = {}
        if doc is not None:
            available["doc"] = doc
        if query is not None:
            available["query"] = query
        available["meta"] = meta or Metadata()

        fn = self.script.get(name)
        return fn(*bind_arguments(fn, available))


def _parse_json(value: Optional[str], label: str) -> Optional[dict]:
    if value is None:
        return None
    if value.startswith("@"):
        try:
            with open(value[1:], "r", encoding="utf-8") as f:
                value = f.read()
        except OSError as e:
            raise click.BadParameter(f"cannot read {value[1:]}: {e}", param_hint=label)
    try:
        data = json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"invalid JSON: {e}", param_hint=label)
    if not isinstance(data, dict):
        raise click.BadParameter("expected a JSON object", param_hint=label)
    return data


def _inputs(doc, meta, query) -> tuple[Optional[Document], Metadata, Query]:
    """Parse the JSON options. A missing --query is an empty Query."""
    doc_data = _parse_json(doc, "--doc")
    meta_data = _parse_json(meta, "--meta")
    query_data = _parse_json(query, "--query")
    try:
        parsed_query = Query.from_dict(query_data)
        parsed_query.validate()
        return (
            Document(doc_data) if doc_data is not None else None,
            Metadata(meta_data),
            parsed_query,
        )
    except DocScriptError as e:
        raise click.ClickException(str(e))


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


_input_options = [
    click.option("--doc", "-d", help="Document JSON (or @file)"),
    click.option("--meta", "-m", help="Metadata JSON (or @file)"),
    click.option("--query", "-q", help="Query JSON (or @file)"),
]


def input_options(fn):
    for option in reversed(_input_options):
        fn = option(fn)
    return fn


@click.group()
@click.option("--config", "config_path", envvar="DOCSCRIPT_CONFIG", help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, config_path, verbose):
    """DOCSCRIPT - run document hook scripts.

    Load a script, list its hooks, call them or evaluate authz rules.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    level = "DEBUG" if verbose else ConfigManager(config_path).get_log_level()
    _configure_logging(level)


def _app(ctx, script_path: Optional[str] = None) -> DocScriptApp:
    try:
        return DocScriptApp(ctx.obj.get("config_path"), script_path)
    except DocScriptError as e:
        raise click.ClickException(str(e))


@cli.command()
@click.argument("script", required=False)
@click.pass_context
def hooks(ctx, script):
    """List the hooks a script defines."""
    app = _app(ctx, script)
    names = app.script.function_names()
    if not names:
        console.print("No hooks defined.", style="dim")
        return
    render_hooks(app.script.name, names, app.hook_runner.describe())


@cli.command()
@click.argument("name")
@click.option("--script", "-s", help="Script file (defaults to configured scripts)")
@input_options
@click.pass_context
def run(ctx, name, script, doc, meta, query):
    """Call a single hook by name."""
    app = _app(ctx, script)
    document, metadata, parsed_query = _inputs(doc, meta, query)
    try:
        result = app.run(name, doc=document, meta=metadata, query=parsed_query)
    except DocScriptError as e:
        raise click.ClickException(str(e))
    except Exception as e:
        render_error(f"{name}: {e}")
        sys.exit(1)

    render_value("result", result)
    if document is not None:
        render_value("doc", document.value())


@cli.command()
@click.argument("event", type=click.Choice([e.value for e in HookEvent]))
@click.option("--script", "-s", help="Script file (defaults to configured scripts)")
@input_options
@click.pass_context
def trigger(ctx, event, script, doc, meta, query):
    """Run every configured hook bound to EVENT against a document."""
    app = _app(ctx, script)
    document, metadata, _ = _inputs(doc, meta, query)
    document = document if document is not None else Document()

    results = app.hook_runner.run_document_hooks(HookEvent(event), document, metadata)
    for result in results:
        if result["success"]:
            render_value(result["name"], result["output"])
        else:
            render_error(f"{result['name']}: {result['output']}")
    render_value("doc", document.value())

    if not all(r["success"] for r in results):
        sys.exit(1)


@cli.command()
@click.argument("action")
@click.option("--script", "-s", help="Script file (defaults to configured scripts)")
@input_options
@click.pass_context
def authorize(ctx, action, script, doc, meta, query):
    """Evaluate the configured authz rules for ACTION."""
    app = _app(ctx, script)
    document, metadata, parsed_query = _inputs(doc, meta, query)
    try:
        allowed = app.authorizer.authorize(
            action, meta=metadata, doc=document, query=parsed_query,
        )
    except DocScriptError as e:
        raise click.ClickException(str(e))

    render_value(action, allowed)
    if not allowed:
        sys.exit(2)


@cli.command()
@click.pass_context
def config(ctx):
    """Show configuration."""
    manager = ConfigManager(ctx.obj.get("config_path"))

    console.print(f"Config file: {manager.config_path}")
    console.print(f"Scripts: {[str(p) for p in manager.get_script_paths()]}")
    console.print(f"Hooks: {len(manager.get_hooks_config())}")
    console.print(f"Authz rules: {len(manager.get_authz_config())}")
    console.print(f"Timezone: {manager.get_timezone()}")


if __name__ == "__main__":
    cli()
