"""Script hooks: runtime, lifecycle runner and config loader."""

from .runtime import HookScript, contains, default_globals, function_name, new_id
from .runner import HookEvent, HookDefinition, HookRunner
from .loader import load_hooks_from_config

__all__ = [
    "HookScript",
    "contains",
    "default_globals",
    "function_name",
    "new_id",
    "HookEvent",
    "HookDefinition",
    "HookRunner",
    "load_hooks_from_config",
]
