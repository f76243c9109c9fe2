"""docscript - embedded hook scripts for JSON document stores."""

__version__ = "0.1.0"

from .authz import Action, Authorizer, AuthzRule, Effect
from .config import ConfigManager
from .document import Document
from .errors import DocScriptError
from .hooks import HookDefinition, HookEvent, HookRunner, HookScript, contains
from .metadata import Metadata
from .query import Query, Where, WhereOp

__all__ = [
    "Action",
    "Authorizer",
    "AuthzRule",
    "ConfigManager",
    "DocScriptError",
    "Document",
    "Effect",
    "HookDefinition",
    "HookEvent",
    "HookRunner",
    "HookScript",
    "Metadata",
    "Query",
    "Where",
    "WhereOp",
    "contains",
]
