"""Decode raw schema nodes into reference-unaware builder values.

The decode pass turns every raw node into a :class:`SchemaBuilder` without
looking at any other node: a ``$ref`` becomes a :class:`PointerBuilder`
holding only the reference string.  Resolution happens later, in
:mod:`~swaggergraph.parser.assembler`, once the whole definitions table is
available.

Builders mirror the resolved :mod:`~swaggergraph.models` hierarchy but embed
other builders instead of :class:`~swaggergraph.models.Schema` values.  Leaf
metadata (string, numeric, array and object bounds, general metadata) has no
references, so the resolved metadata models are reused here directly.

Object builders keep ``all_properties`` separately from ``properties``: the
names are read a second time straight from the ``properties`` node, so they
reflect the document's declaration order whatever mapping the properties
end up in.

The public entry points are :func:`decode_schema` and
:func:`decode_definitions`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Annotated, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from swaggergraph.exceptions import MalformedNodeError, TypeCoercionError
from swaggergraph.models import (
    ArrayMetadata,
    Metadata,
    NumericMetadata,
    ObjectMetadata,
    ParserConfig,
    StringMetadata,
)
from swaggergraph.parser.classifier import DataType, classify
from swaggergraph.parser.node import RawNode

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


# --- Builder models ---


class _Builder(BaseModel):
    model_config = ConfigDict(frozen=True)


class PointerBuilder(_Builder):
    """An unresolved ``$ref`` (e.g. ``#/definitions/Pet``)."""

    kind: Literal["pointer"] = "pointer"
    ref: str
    path: Optional[str] = None


class ObjectSchemaBuilder(_Builder):
    kind: Literal["object"] = "object"
    metadata: ObjectMetadata = Field(default_factory=ObjectMetadata)
    required: list[str] = Field(default_factory=list)
    properties: dict[str, SchemaBuilder] = Field(default_factory=dict)
    all_properties: list[str] = Field(default_factory=list)
    additional_properties: Union[bool, SchemaBuilder] = False
    abstract: bool = False


class ArraySchemaBuilder(_Builder):
    kind: Literal["array"] = "array"
    metadata: ArrayMetadata = Field(default_factory=ArrayMetadata)
    items: Union[SchemaBuilder, list[SchemaBuilder]]


class AllOfSchemaBuilder(_Builder):
    kind: Literal["allOf"] = "allOf"
    subschemas: list[SchemaBuilder]
    abstract: bool = False


class OneOfSchemaBuilder(_Builder):
    kind: Literal["oneOf"] = "oneOf"
    subschemas: list[SchemaBuilder]
    abstract: bool = False


class StringTypeBuilder(_Builder):
    kind: Literal["string"] = "string"
    format: Optional[str] = None
    metadata: StringMetadata = Field(default_factory=StringMetadata)


class NumberTypeBuilder(_Builder):
    kind: Literal["number"] = "number"
    format: Optional[str] = None
    metadata: NumericMetadata[float] = Field(default_factory=NumericMetadata[float])


class IntegerTypeBuilder(_Builder):
    kind: Literal["integer"] = "integer"
    format: Optional[str] = None
    metadata: NumericMetadata[int] = Field(default_factory=NumericMetadata[int])


class SimpleTypeBuilder(_Builder):
    kind: Literal["enumeration", "boolean", "file", "any", "null"]


SchemaTypeBuilder = Annotated[
    Union[
        PointerBuilder,
        ObjectSchemaBuilder,
        ArraySchemaBuilder,
        AllOfSchemaBuilder,
        OneOfSchemaBuilder,
        StringTypeBuilder,
        NumberTypeBuilder,
        IntegerTypeBuilder,
        SimpleTypeBuilder,
    ],
    Field(discriminator="kind"),
]


class SchemaBuilder(_Builder):
    """Decoded, unresolved counterpart of :class:`~swaggergraph.models.Schema`."""

    metadata: Metadata = Field(default_factory=Metadata)
    type: SchemaTypeBuilder


ObjectSchemaBuilder.model_rebuild()
ArraySchemaBuilder.model_rebuild()
AllOfSchemaBuilder.model_rebuild()
OneOfSchemaBuilder.model_rebuild()
SchemaBuilder.model_rebuild()


# --- Decoding ---


def decode_schema(node: RawNode, config: ParserConfig) -> SchemaBuilder:
    """Decode one raw schema node (and everything nested in it).

    Args:
        node: The raw schema node.
        config: Parser configuration (abstract extension name).

    Returns:
        The node's :class:`SchemaBuilder`.

    Raises:
        MalformedNodeError: If the node or any nested node has no recognised
            discriminant or a keyword of the wrong shape.
        TypeCoercionError: If a metadata keyword has the wrong scalar type.
    """
    data_type = classify(node)
    schema_type = _DECODERS[data_type](node, config)
    return SchemaBuilder(metadata=_decode_metadata(node), type=schema_type)


def decode_definitions(document: RawNode, config: ParserConfig) -> dict[str, SchemaBuilder]:
    """Decode the definitions table of a document.

    The table is looked up at ``config.definitions_path``; a document without
    one has no definitions.

    Returns:
        Definition name to builder, in document order.

    Raises:
        MalformedNodeError: If the table (or a definition in it) is malformed.
    """
    table: Optional[RawNode] = document
    for segment in config.definitions_path.strip("/").split("/"):
        table = table.get(segment)
        if table is None:
            logger.debug("No definitions table at '%s'", config.definitions_path)
            return {}

    if not table.is_mapping:
        raise MalformedNodeError("Definitions table must be an object", path=table.path)

    builders = {name: decode_schema(child, config) for name, child in table.items()}
    logger.debug("Decoded %d definitions from %s", len(builders), table.path)
    return builders


def _validate(model: type[M], node: RawNode) -> M:
    """Validate *model* against the keywords of *node*, mapping errors to the taxonomy."""
    try:
        return model.model_validate(node.value)
    except ValidationError as exc:
        first = exc.errors()[0]
        keyword = "/".join(str(part) for part in first["loc"])
        raise TypeCoercionError(
            f"Invalid value for '{keyword}': {first['msg']}",
            path=f"{node.path}/{keyword}" if keyword else node.path,
        ) from exc


def _decode_metadata(node: RawNode) -> Metadata:
    metadata = _validate(Metadata, node)
    type_node = node.get("type")
    if type_node is not None and type_node.is_sequence and "null" in type_node.value:
        metadata = metadata.model_copy(update={"nullable": True})
    return metadata


def _decode_format(node: RawNode) -> Optional[str]:
    format_node = node.get("format")
    return format_node.as_str() if format_node is not None else None


def _decode_abstract(node: RawNode, config: ParserConfig) -> bool:
    abstract_node = node.get(config.abstract_extension)
    return abstract_node.as_bool() if abstract_node is not None else False


def _decode_subschemas(node: RawNode, keyword: str, config: ParserConfig) -> list[SchemaBuilder]:
    subschemas = node.child(keyword)
    if not subschemas.is_sequence or not subschemas.value:
        raise MalformedNodeError(
            f"'{keyword}' must be a non-empty array of schemas", path=subschemas.path
        )
    return [decode_schema(child, config) for child in subschemas.sequence()]


def _decode_pointer(node: RawNode, config: ParserConfig) -> PointerBuilder:
    return PointerBuilder(ref=node.child("$ref").as_str(), path=node.path)


def _decode_object(node: RawNode, config: ParserConfig) -> ObjectSchemaBuilder:
    properties: dict[str, SchemaBuilder] = {}
    all_properties: list[str] = []
    properties_node = node.get("properties")
    if properties_node is not None:
        if not properties_node.is_mapping:
            raise MalformedNodeError("'properties' must be an object", path=properties_node.path)
        properties = {
            name: decode_schema(child, config) for name, child in properties_node.items()
        }
        # Second, order-preserving read of the same node
        all_properties = properties_node.keys()

    required: list[str] = []
    required_node = node.get("required")
    if required_node is not None:
        required = [item.as_str() for item in required_node.sequence()]

    additional_properties: Union[bool, SchemaBuilder] = False
    additional_node = node.get("additionalProperties")
    if additional_node is not None:
        if isinstance(additional_node.value, bool):
            additional_properties = additional_node.value
        elif additional_node.is_mapping:
            additional_properties = decode_schema(additional_node, config)
        else:
            raise MalformedNodeError(
                "'additionalProperties' must be a boolean or a schema",
                path=additional_node.path,
            )

    return ObjectSchemaBuilder(
        metadata=_validate(ObjectMetadata, node),
        required=required,
        properties=properties,
        all_properties=all_properties,
        additional_properties=additional_properties,
        abstract=_decode_abstract(node, config),
    )


def _decode_array(node: RawNode, config: ParserConfig) -> ArraySchemaBuilder:
    items_node = node.get("items")
    items: Union[SchemaBuilder, list[SchemaBuilder]]
    if items_node is None:
        items = SchemaBuilder(type=SimpleTypeBuilder(kind="any"))
    elif items_node.is_sequence:
        if not items_node.value:
            raise MalformedNodeError("'items' must not be an empty array", path=items_node.path)
        items = [decode_schema(child, config) for child in items_node.sequence()]
    else:
        items = decode_schema(items_node, config)

    return ArraySchemaBuilder(metadata=_validate(ArrayMetadata, node), items=items)


def _decode_all_of(node: RawNode, config: ParserConfig) -> AllOfSchemaBuilder:
    return AllOfSchemaBuilder(
        subschemas=_decode_subschemas(node, "allOf", config),
        abstract=_decode_abstract(node, config),
    )


def _decode_one_of(node: RawNode, config: ParserConfig) -> OneOfSchemaBuilder:
    return OneOfSchemaBuilder(
        subschemas=_decode_subschemas(node, "oneOf", config),
        abstract=_decode_abstract(node, config),
    )


def _decode_string(node: RawNode, config: ParserConfig) -> StringTypeBuilder:
    return StringTypeBuilder(format=_decode_format(node), metadata=_validate(StringMetadata, node))


def _decode_number(node: RawNode, config: ParserConfig) -> NumberTypeBuilder:
    return NumberTypeBuilder(
        format=_decode_format(node), metadata=_validate(NumericMetadata[float], node)
    )


def _decode_integer(node: RawNode, config: ParserConfig) -> IntegerTypeBuilder:
    return IntegerTypeBuilder(
        format=_decode_format(node), metadata=_validate(NumericMetadata[int], node)
    )


def _simple(kind: str) -> Callable[[RawNode, ParserConfig], SimpleTypeBuilder]:
    def decode(node: RawNode, config: ParserConfig) -> SimpleTypeBuilder:
        return SimpleTypeBuilder(kind=kind)

    return decode


_DECODERS: dict[DataType, Callable[[RawNode, ParserConfig], SchemaTypeBuilder]] = {
    DataType.POINTER: _decode_pointer,
    DataType.OBJECT: _decode_object,
    DataType.ARRAY: _decode_array,
    DataType.ALL_OF: _decode_all_of,
    DataType.ONE_OF: _decode_one_of,
    DataType.STRING: _decode_string,
    DataType.NUMBER: _decode_number,
    DataType.INTEGER: _decode_integer,
    DataType.ENUMERATION: _simple("enumeration"),
    DataType.BOOLEAN: _simple("boolean"),
    DataType.FILE: _simple("file"),
    DataType.ANY: _simple("any"),
    DataType.NULL: _simple("null"),
}
