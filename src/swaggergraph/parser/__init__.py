"""Document parser -- load, decode, resolve ``$ref`` pointers, and build the schema graph.

Typical usage::

    from swaggergraph.parser import parse_source

    parsed = parse_source("https://petstore.swagger.io/v2/swagger.json")

Sub-modules:

* :mod:`~swaggergraph.parser.loader` -- I/O layer (URL, file, stdin) plus
  format detection and version detection.
* :mod:`~swaggergraph.parser.node` -- :class:`RawNode`, the decode adapter
  over loaded JSON/YAML values.
* :mod:`~swaggergraph.parser.classifier` -- decides which schema kind a node is.
* :mod:`~swaggergraph.parser.builders` -- decode pass producing builders.
* :mod:`~swaggergraph.parser.resolver` -- build context and cycle-safe
  ``$ref`` resolution.
* :mod:`~swaggergraph.parser.assembler` -- build pass producing the graph.
* :mod:`~swaggergraph.parser.document` -- top-level orchestration.
"""

from swaggergraph.parser.document import (
    parse_document,
    parse_schema,
    parse_source,
    try_parse_document,
)
from swaggergraph.parser.loader import detect_spec_version, load_spec

__all__ = [
    "load_spec",
    "detect_spec_version",
    "parse_source",
    "parse_document",
    "try_parse_document",
    "parse_schema",
]
