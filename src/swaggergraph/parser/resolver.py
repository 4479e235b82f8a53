"""Resolve ``$ref`` pointers against a document's definitions table.

A :class:`BuildContext` is created for each document parse.  It owns the
decoded definitions table (name to builder) and the resolution cache (name
to :class:`~swaggergraph.models.Structure`), and is threaded through every
recursive build call.  Contexts are never shared between documents.

Resolution registers a provisional ``Structure`` for a definition *before*
building it and completes it in place afterwards.  Any reference reached in
the meantime, directly (``TreeNode.children -> TreeNode``) or through other
definitions (``A -> B -> A``), finds the provisional handle in the cache
and returns it instead of building again.  This guarantees that:

* each definition is built exactly once per context, and
* every reference to a name yields the identical ``Structure`` and
  therefore the identical :class:`~swaggergraph.models.Schema`.

Only internal references into the definitions table are supported
(``#/definitions/Pet`` for Swagger 2.0, ``#/components/schemas/Pet`` for
OpenAPI 3.x).  Anything else raises
:class:`~swaggergraph.exceptions.UnresolvedReferenceError`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Optional

from swaggergraph.exceptions import UnresolvedReferenceError
from swaggergraph.models import ParserConfig, Schema, Structure
from swaggergraph.parser.builders import SchemaBuilder
from swaggergraph.parser.node import unescape_segment

logger = logging.getLogger(__name__)


class BuildContext:
    """Shared state of one build pass.

    Args:
        definitions: Definition name to decoded builder.
        config: Parser configuration; defaults to :class:`ParserConfig`.
    """

    def __init__(
        self,
        definitions: Mapping[str, SchemaBuilder],
        config: Optional[ParserConfig] = None,
    ):
        self.definitions: dict[str, SchemaBuilder] = dict(definitions)
        self.config = config if config is not None else ParserConfig()
        self.structures: dict[str, Structure] = {}

    def definitions_table(self) -> dict[str, Schema]:
        """Build every definition and return name to :class:`Schema`, in table order.

        Definitions already reached through a reference are not rebuilt; the
        returned schemas are the same instances the graph refers to.
        """
        return {name: resolve_name(self, name).target for name in self.definitions}


def definition_name(ref: str, config: ParserConfig) -> str:
    """Extract the definition name addressed by *ref*.

    Handles RFC 6901 escaping (``~1`` for ``/``, ``~0`` for ``~``).

    Raises:
        UnresolvedReferenceError: If *ref* is external or does not address a
            direct entry of the definitions table.
    """
    if not ref.startswith("#/"):
        raise UnresolvedReferenceError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled.",
            ref=ref,
        )

    prefix = config.definitions_pointer
    name = ref[len(prefix):]
    if not ref.startswith(prefix) or not name or "/" in name:
        raise UnresolvedReferenceError(
            f"Cannot resolve $ref '{ref}': only definitions under '{prefix}' can be referenced",
            ref=ref,
        )
    return unescape_segment(name)


def resolve(context: BuildContext, ref: str, path: Optional[str] = None) -> Structure:
    """Resolve a ``$ref`` string to the :class:`Structure` for its definition.

    Args:
        context: The build context of the current document.
        ref: The reference string (e.g. ``"#/definitions/Pet"``).
        path: JSON Pointer of the referring node, for error messages.

    Returns:
        The definition's ``Structure``.  It may still be provisional when the
        reference closes a cycle; its ``target`` is set once the outermost
        resolution of that definition returns.

    Raises:
        UnresolvedReferenceError: If the reference is unsupported or names a
            missing definition.
    """
    try:
        name = definition_name(ref, context.config)
    except UnresolvedReferenceError as exc:
        raise UnresolvedReferenceError(str(exc), ref=ref, path=path) from None
    return resolve_name(context, name, ref=ref, path=path)


def resolve_name(
    context: BuildContext,
    name: str,
    ref: Optional[str] = None,
    path: Optional[str] = None,
) -> Structure:
    """Resolve a definition by name, building it on first use.

    Raises:
        UnresolvedReferenceError: If *name* is not in the definitions table.
    """
    cached = context.structures.get(name)
    if cached is not None:
        if not cached.is_complete:
            logger.debug("Cycle through '%s', returning provisional structure", name)
        return cached

    builder = context.definitions.get(name)
    if builder is None:
        raise UnresolvedReferenceError(
            f"Cannot resolve $ref '{ref or name}': no definition named '{name}'",
            ref=ref or name,
            path=path,
        )

    # Register before building so recursive references find this handle
    known = set(context.structures)
    structure = Structure(name=name)
    context.structures[name] = structure
    logger.debug("Building definition '%s'", name)

    from swaggergraph.parser.assembler import build_schema

    try:
        schema = build_schema(builder, context)
    except Exception:
        # Drop every handle registered by the failed build, provisional or not
        for stale in [key for key in context.structures if key not in known]:
            del context.structures[stale]
        raise
    structure.complete(schema)
    return structure
