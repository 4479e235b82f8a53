"""Decide which schema kind a raw node represents.

:func:`classify` inspects the keyword set of a node and returns a
:class:`DataType`.  Keywords are checked in a fixed priority order, so a
node that carries several markers (``$ref`` next to ``type``, ``properties``
next to ``allOf``) always classifies the same way:

1. ``$ref`` -- pointer
2. ``type: object`` or ``properties`` -- object
3. ``type: array`` or ``items`` -- array
4. ``allOf`` -- allOf composition
5. ``oneOf`` -- oneOf composition
6. ``type`` of ``string``, ``number``, ``integer``, ``boolean``, ``file``
7. ``enum`` -- enumeration
8. no ``type``, or ``type: any`` -- any
9. ``type: null`` -- null
"""

from __future__ import annotations

import enum
from typing import Optional

from swaggergraph.exceptions import MalformedNodeError
from swaggergraph.parser.node import RawNode


class DataType(str, enum.Enum):
    """The schema kinds a raw node can decode to."""

    POINTER = "pointer"
    OBJECT = "object"
    ARRAY = "array"
    ALL_OF = "allOf"
    ONE_OF = "oneOf"
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    FILE = "file"
    ENUMERATION = "enumeration"
    ANY = "any"
    NULL = "null"


_SCALAR_TYPES = {
    "string": DataType.STRING,
    "number": DataType.NUMBER,
    "integer": DataType.INTEGER,
    "boolean": DataType.BOOLEAN,
    "file": DataType.FILE,
}


def declared_type(node: RawNode) -> Optional[str]:
    """Return the node's ``type`` keyword, or ``None`` when absent.

    OpenAPI 3.1 allows ``type`` to be a list (e.g. ``["string", "null"]``);
    the first non-null entry wins, and a list of only ``null`` is ``null``.

    Raises:
        MalformedNodeError: If ``type`` is neither a string nor a list of strings.
    """
    type_node = node.get("type")
    if type_node is None:
        return None

    if type_node.is_sequence:
        names = [item.as_str() for item in type_node.sequence()]
        non_null = [name for name in names if name != "null"]
        if non_null:
            return non_null[0]
        if names:
            return "null"
        raise MalformedNodeError("Empty 'type' list", path=type_node.path)

    if not isinstance(type_node.value, str):
        raise MalformedNodeError(
            f"'type' must be a string, got {type(type_node.value).__name__}",
            path=type_node.path,
        )
    return type_node.value


def classify(node: RawNode) -> DataType:
    """Classify a raw node by its keyword set.

    Args:
        node: A raw schema node.

    Returns:
        The :class:`DataType` the node decodes to.

    Raises:
        MalformedNodeError: If the node is not an object or matches no
            recognised discriminant (e.g. ``type: "widget"``).
    """
    if not node.is_mapping:
        raise MalformedNodeError(
            f"Schema must be an object, got {type(node.value).__name__}", path=node.path
        )

    if "$ref" in node:
        return DataType.POINTER

    type_name = declared_type(node)

    if type_name == "object" or "properties" in node:
        return DataType.OBJECT
    if type_name == "array" or "items" in node:
        return DataType.ARRAY
    if "allOf" in node:
        return DataType.ALL_OF
    if "oneOf" in node:
        return DataType.ONE_OF
    if type_name in _SCALAR_TYPES:
        return _SCALAR_TYPES[type_name]
    if "enum" in node:
        return DataType.ENUMERATION
    if type_name is None or type_name == "any":
        return DataType.ANY
    if type_name == "null":
        return DataType.NULL

    raise MalformedNodeError(f"Unrecognised schema type '{type_name}'", path=node.path)
