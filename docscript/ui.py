"""Terminal output for the docscript CLI."""

import json
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

console = Console()

CYAN = "#00d4e5"
GREEN = "#34d399"
RED = "#e55a6e"
DIM = "#4a4a60"


def render_error(text: str) -> None:
    """Render an error message."""
    err = Text()
    err.append("err ", style=f"bold {RED}")
    err.append("| ", style=f"dim {DIM}")
    err.append(text, style=RED)
    console.print(err)


def render_value(label: str, value: Any) -> None:
    """Render a labelled value; booleans are colored as decisions."""
    line = Text()
    line.append(f"{label} ", style=f"bold {CYAN}")
    line.append("| ", style=f"dim {DIM}")
    if isinstance(value, bool):
        line.append(str(value).lower(), style=f"bold {GREEN if value else RED}")
    else:
        line.append(json.dumps(value, default=str))
    console.print(line)


def render_hooks(script_name: str, names: list[str], bound: list[dict]) -> None:
    """Render the functions a script defines and the events bound to them."""
    table = Table(title=script_name, title_style=f"bold {CYAN}", border_style=DIM)
    table.add_column("function")
    table.add_column("events")

    events: dict[str, list[str]] = {}
    for hook in bound:
        events.setdefault(hook["function"], []).append(
            hook["event"] if hook["enabled"] else f"{hook['event']} (disabled)"
        )

    for name in names:
        table.add_row(name, ", ".join(events.get(name, [])) or "-")
    console.print(table)
