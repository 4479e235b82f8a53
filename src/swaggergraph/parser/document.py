"""Parse a whole document into a :class:`~swaggergraph.models.ParsedDocument`.

This module ties the pipeline together:

1. the definitions table is decoded into builders
   (:func:`~swaggergraph.parser.builders.decode_definitions`), with no
   reference resolution;
2. a fresh :class:`~swaggergraph.parser.resolver.BuildContext` is created
   and every definition is built through the resolver, so the table holds
   the very instances the graph refers to.

Public entry points:

* :func:`parse_source` -- load a file, URL or stdin and parse it.
* :func:`parse_document` -- raise the first error.
* :func:`try_parse_document` -- return ``(result, None)`` or ``(None, error)``.
* :func:`parse_schema` -- build one standalone schema node against a
  definitions mapping.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from swaggergraph.config import resolve_config
from swaggergraph.exceptions import SwaggerGraphError
from swaggergraph.models import ParsedDocument, ParserConfig, Schema
from swaggergraph.parser.assembler import build_schema
from swaggergraph.parser.builders import decode_definitions, decode_schema
from swaggergraph.parser.loader import detect_spec_version, load_spec
from swaggergraph.parser.node import RawNode, escape_segment
from swaggergraph.parser.resolver import BuildContext

logger = logging.getLogger(__name__)


def parse_source(source: str, config: Optional[ParserConfig] = None) -> ParsedDocument:
    """Load *source* with :func:`~swaggergraph.parser.loader.load_spec` and parse it.

    Raises:
        SwaggerGraphError: If loading, decoding or building fails.
    """
    return parse_document(load_spec(source), config)


def parse_document(
    raw: Union[Mapping[str, Any], RawNode], config: Optional[ParserConfig] = None
) -> ParsedDocument:
    """Parse the type definitions of a raw document.

    Args:
        raw: The document root, either the :class:`RawNode` returned by
            :func:`~swaggergraph.parser.loader.load_spec` or a plain mapping.
        config: Parser configuration.  When ``None`` it is resolved with
            :func:`~swaggergraph.config.resolve_config`, using the document's
            declared version to pick the definitions location.

    Returns:
        The fully resolved :class:`~swaggergraph.models.ParsedDocument`.

    Raises:
        SwaggerGraphError: The first error met while decoding or building;
            no partial result is produced.

    Example::

        raw = load_spec("petstore.yaml")
        parsed = parse_document(raw)
        pet = parsed.definitions["Pet"]
        print(pet.type.all_properties)
    """
    root = raw if isinstance(raw, RawNode) else RawNode(raw)
    version: Optional[str] = None
    if "swagger" in root or "openapi" in root:
        version = detect_spec_version(dict(root.value))

    if config is None:
        config = resolve_config(version=version)

    context = BuildContext(decode_definitions(root, config), config)
    definitions = context.definitions_table()
    logger.debug("Built %d definitions", len(definitions))
    return ParsedDocument(definitions=definitions, version=version)


def try_parse_document(
    raw: Union[Mapping[str, Any], RawNode], config: Optional[ParserConfig] = None
) -> tuple[Optional[ParsedDocument], Optional[SwaggerGraphError]]:
    """Like :func:`parse_document`, but return the error instead of raising it.

    Returns:
        ``(document, None)`` on success or ``(None, error)`` on failure;
        exactly one side is set.
    """
    try:
        return parse_document(raw, config), None
    except SwaggerGraphError as exc:
        logger.debug("Document parse failed: %s", exc)
        return None, exc


def parse_schema(
    node: Any,
    definitions: Optional[Mapping[str, Any]] = None,
    config: Optional[ParserConfig] = None,
) -> Schema:
    """Build a single raw schema node.

    References inside *node* resolve against *definitions* (raw definition
    nodes keyed by name).  Each call uses its own build context.

    Raises:
        SwaggerGraphError: On any decode or resolution failure.
    """
    config = config if config is not None else ParserConfig()
    builders = {
        name: decode_schema(
            RawNode(value, f"{config.definitions_pointer}{escape_segment(name)}"), config
        )
        for name, value in (definitions or {}).items()
    }
    context = BuildContext(builders, config)
    return build_schema(decode_schema(RawNode(node), config), context)
