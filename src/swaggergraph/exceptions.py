"""Exception hierarchy for swaggergraph.

All exceptions inherit from :class:`SwaggerGraphError`, which carries an
optional ``path`` attribute holding the JSON Pointer location of the
offending node (e.g. ``#/definitions/Pet/properties/id``).  Errors are
raised fail-fast and never aggregated: a parse either succeeds completely
or surfaces the first error encountered.

Subclass hierarchy::

    SwaggerGraphError
    +-- SpecParseError            (document could not be loaded)
    +-- MalformedNodeError        (node matches no schema kind / bad shape)
    |   +-- TypeCoercionError     (scalar keyword has the wrong type)
    +-- UnresolvedReferenceError  ($ref target missing)
    +-- ConfigError
"""

from __future__ import annotations

from typing import Optional


class SwaggerGraphError(Exception):
    """Base exception for all swaggergraph errors.

    Args:
        message: Human-readable error description.
        path: JSON Pointer of the node being decoded when the error occurred.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        if path:
            message = f"{message} (at {path})"
        super().__init__(message)
        self.path = path


class SpecParseError(SwaggerGraphError):
    """Raised when a source document cannot be loaded or is not a supported version."""


class MalformedNodeError(SwaggerGraphError):
    """Raised when a raw node matches no schema discriminant or a keyword has the wrong shape."""


class TypeCoercionError(MalformedNodeError):
    """Raised when a scalar keyword cannot be coerced to its expected representation."""


class UnresolvedReferenceError(SwaggerGraphError):
    """Raised when a ``$ref`` pointer names a definition absent from the definitions table."""

    def __init__(self, message: str, ref: str, path: Optional[str] = None):
        super().__init__(message, path=path)
        self.ref = ref


class ConfigError(SwaggerGraphError):
    """Raised for configuration problems (unreadable config file, invalid values)."""
