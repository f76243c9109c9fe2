"""Exception hierarchy for docscript."""


class DocScriptError(Exception):
    """Base class for all docscript errors."""


class DocumentError(DocScriptError):
    """Raised when a document path cannot be read or written."""


class MetadataError(DocScriptError):
    """Raised on attempts to mutate read-only metadata."""


class QueryError(DocScriptError):
    """Raised when a query fails validation."""


class ScriptError(DocScriptError):
    """Raised when a script cannot be compiled or executed."""


class HookNotFoundError(DocScriptError, KeyError):
    """Raised when a hook name is not defined by the loaded script."""

    def __str__(self) -> str:
        return Exception.__str__(self)


class AuthorizationError(DocScriptError):
    """Raised when an authorization rule cannot be evaluated."""
