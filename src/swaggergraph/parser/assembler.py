"""Assemble builder values into the resolved, immutable schema graph.

:func:`build` is the build pass: a synchronous depth-first walk that turns
each builder into its :mod:`~swaggergraph.models` counterpart.  Pointer
builders go through :func:`~swaggergraph.parser.resolver.resolve`, so
shared and cyclic references become shared ``Structure`` handles instead of
copies.  Leaf formats and metadata are copied verbatim.

Any error raised while building a descendant propagates unchanged; there is
no partial result for a node with a broken descendant.
"""

from __future__ import annotations

from swaggergraph.models import (
    AllOfSchema,
    ArraySchema,
    IntegerType,
    NumberType,
    ObjectSchema,
    OneOfSchema,
    Schema,
    SchemaType,
    SimpleType,
    StringType,
)
from swaggergraph.parser.builders import (
    AllOfSchemaBuilder,
    ArraySchemaBuilder,
    IntegerTypeBuilder,
    NumberTypeBuilder,
    ObjectSchemaBuilder,
    OneOfSchemaBuilder,
    PointerBuilder,
    SchemaBuilder,
    SchemaTypeBuilder,
    SimpleTypeBuilder,
    StringTypeBuilder,
)
from swaggergraph.parser.resolver import BuildContext, resolve


def build_schema(builder: SchemaBuilder, context: BuildContext) -> Schema:
    """Build a :class:`~swaggergraph.models.Schema` from its builder."""
    return Schema(metadata=builder.metadata, type=build(builder.type, context))


def build(builder: SchemaTypeBuilder, context: BuildContext) -> SchemaType:
    """Build the :data:`~swaggergraph.models.SchemaType` for one builder variant.

    Args:
        builder: Any schema type builder.
        context: The build context of the current document.

    Returns:
        The resolved schema type.

    Raises:
        UnresolvedReferenceError: If a pointer anywhere below *builder*
            names a missing definition.
    """
    if isinstance(builder, PointerBuilder):
        return resolve(context, builder.ref, path=builder.path)
    if isinstance(builder, ObjectSchemaBuilder):
        return _build_object(builder, context)
    if isinstance(builder, ArraySchemaBuilder):
        return _build_array(builder, context)
    if isinstance(builder, AllOfSchemaBuilder):
        return AllOfSchema(
            subschemas=[build_schema(sub, context) for sub in builder.subschemas],
            abstract=builder.abstract,
        )
    if isinstance(builder, OneOfSchemaBuilder):
        return OneOfSchema(
            subschemas=[build_schema(sub, context) for sub in builder.subschemas],
            abstract=builder.abstract,
        )
    if isinstance(builder, StringTypeBuilder):
        return StringType(format=builder.format, metadata=builder.metadata)
    if isinstance(builder, NumberTypeBuilder):
        return NumberType(format=builder.format, metadata=builder.metadata)
    if isinstance(builder, IntegerTypeBuilder):
        return IntegerType(format=builder.format, metadata=builder.metadata)
    if isinstance(builder, SimpleTypeBuilder):
        return SimpleType(kind=builder.kind)
    raise TypeError(f"Unsupported builder type: {type(builder).__name__}")


def _build_object(builder: ObjectSchemaBuilder, context: BuildContext) -> ObjectSchema:
    properties = {
        name: build_schema(property_builder, context)
        for name, property_builder in builder.properties.items()
    }

    additional_properties: bool | Schema
    if isinstance(builder.additional_properties, bool):
        additional_properties = builder.additional_properties
    else:
        additional_properties = build_schema(builder.additional_properties, context)

    return ObjectSchema(
        metadata=builder.metadata,
        required=list(builder.required),
        properties=properties,
        all_properties=list(builder.all_properties),
        additional_properties=additional_properties,
        abstract=builder.abstract,
    )


def _build_array(builder: ArraySchemaBuilder, context: BuildContext) -> ArraySchema:
    if isinstance(builder.items, list):
        items: Schema | list[Schema] = [build_schema(item, context) for item in builder.items]
    else:
        items = build_schema(builder.items, context)
    return ArraySchema(metadata=builder.metadata, items=items)
