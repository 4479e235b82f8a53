"""Canonical Pydantic models shared across all swaggergraph modules.

This is the single source of truth for data shapes in the project.  The
models fall into two groups:

**Configuration models** -- :class:`ParserConfig`, resolved by
:func:`~swaggergraph.config.resolve_config`.

**Schema graph models** -- the immutable, fully resolved output of the
build pass:
    :class:`Schema`, the :data:`SchemaType` union and its members
    (:class:`Structure`, :class:`ObjectSchema`, :class:`ArraySchema`,
    :class:`AllOfSchema`, :class:`OneOfSchema`, :class:`StringType`,
    :class:`NumberType`, :class:`IntegerType`, :class:`SimpleType`), the
    metadata models, and :class:`ParsedDocument`.

Every schema graph model is frozen except :class:`Structure`, whose target
is completed in place by the pointer resolver once the referenced
definition has been built.  That single mutable cell is what lets a
self-referential definition point back at itself.

Leaf metadata models (:class:`StringMetadata`, :class:`NumericMetadata`,
:class:`ArrayMetadata`, :class:`ObjectMetadata`, :class:`Metadata`) hold no
references, so the decode pass produces them directly and the build pass
copies them verbatim.  They validate in strict mode: a bound given as a
string or an ``exclusiveMinimum`` given as a number is rejected rather than
coerced.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Generic, Literal, Optional, TypeVar, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    field_validator,
    model_validator,
)

from swaggergraph.exceptions import UnresolvedReferenceError


# --- Parser Config ---


class ParserConfig(BaseModel):
    """Settings that control where definitions live and which extensions are read.

    See Also:
        :func:`~swaggergraph.config.resolve_config`: Precedence resolution.
    """

    definitions_path: str = Field(
        default="definitions",
        description="Slash-separated location of the definitions table, "
        "e.g. 'definitions' (Swagger 2.0) or 'components/schemas' (OpenAPI 3.x)",
    )
    abstract_extension: str = Field(
        default="x-abstract",
        description="Vendor extension marking object/allOf/oneOf schemas as abstract",
    )

    @property
    def definitions_pointer(self) -> str:
        """The ``$ref`` prefix that addresses a named definition."""
        return "#/" + self.definitions_path.strip("/") + "/"


# --- Formats ---


class StringFormat(str, enum.Enum):
    """Well-known ``format`` values for string schemas."""

    BYTE = "byte"
    BINARY = "binary"
    DATE = "date"
    DATE_TIME = "date-time"
    PASSWORD = "password"
    EMAIL = "email"
    HOSTNAME = "hostname"
    IPV4 = "ipv4"
    IPV6 = "ipv6"
    URI = "uri"
    UUID = "uuid"


class NumberFormat(str, enum.Enum):
    """Well-known ``format`` values for number schemas."""

    FLOAT = "float"
    DOUBLE = "double"


class IntegerFormat(str, enum.Enum):
    """Well-known ``format`` values for integer schemas."""

    INT32 = "int32"
    INT64 = "int64"


# --- Metadata ---

# Aliased fields accept only the document keyword, never the field name
_METADATA_CONFIG = ConfigDict(frozen=True, strict=True, extra="ignore")

T = TypeVar("T")


class Metadata(BaseModel):
    """General keywords shared by every schema regardless of its kind.

    ``extensions`` collects every ``x-*`` vendor keyword of the node in
    source order, so consumers can read extensions this model does not name.
    """

    model_config = _METADATA_CONFIG

    title: Optional[str] = None
    description: Optional[str] = None
    default: Any = None
    example: Any = None
    enum_values: Optional[list[Any]] = Field(default=None, alias="enum")
    nullable: bool = Field(
        default=False, validation_alias=AliasChoices("x-nullable", "nullable")
    )
    read_only: bool = Field(default=False, alias="readOnly")
    # Swagger 2.0 names the property; OpenAPI 3.x uses an object
    discriminator: Union[str, dict[str, Any], None] = None
    extensions: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _collect_extensions(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            data["extensions"] = {
                key: value
                for key, value in data.items()
                if isinstance(key, str) and key.startswith("x-")
            }
        return data


class StringMetadata(BaseModel):
    """Length and pattern constraints for string schemas."""

    model_config = _METADATA_CONFIG

    min_length: Optional[int] = Field(default=None, alias="minLength")
    max_length: Optional[int] = Field(default=None, alias="maxLength")
    pattern: Optional[str] = None


class NumericMetadata(BaseModel, Generic[T]):
    """Bounds for numeric schemas, parametrised over the numeric representation.

    ``NumericMetadata[float]`` backs ``number`` schemas and
    ``NumericMetadata[int]`` backs ``integer`` schemas.  Absent exclusive
    flags mean an inclusive bound.  ``minimum <= maximum`` and
    ``multiple_of > 0`` are not checked.
    """

    model_config = _METADATA_CONFIG

    minimum: Optional[T] = None
    exclusive_minimum: bool = Field(default=False, alias="exclusiveMinimum")
    maximum: Optional[T] = None
    exclusive_maximum: bool = Field(default=False, alias="exclusiveMaximum")
    multiple_of: Optional[T] = Field(default=None, alias="multipleOf")

    @field_validator("minimum", "maximum", "multiple_of", mode="before")
    @classmethod
    def _whole_float_as_int(cls, value: Any) -> Any:
        # 100.0 is a valid integer bound; 100.5 still fails strict validation
        if (
            cls.__pydantic_generic_metadata__["args"] == (int,)
            and isinstance(value, float)
            and value.is_integer()
        ):
            return int(value)
        return value


class ArrayMetadata(BaseModel):
    """Size and uniqueness constraints for array schemas."""

    model_config = _METADATA_CONFIG

    min_items: Optional[int] = Field(default=None, alias="minItems")
    max_items: Optional[int] = Field(default=None, alias="maxItems")
    unique_items: bool = Field(default=False, alias="uniqueItems")


class ObjectMetadata(BaseModel):
    """Bounds on the number of properties of an object schema."""

    model_config = _METADATA_CONFIG

    min_properties: Optional[int] = Field(default=None, alias="minProperties")
    max_properties: Optional[int] = Field(default=None, alias="maxProperties")


# --- Schema graph ---

_GRAPH_CONFIG = ConfigDict(frozen=True)


class Structure(BaseModel):
    """A resolved reference to a named definition.

    The resolver hands out one ``Structure`` per definition name and build
    context.  It is registered before the definition is built and completed
    afterwards, so a reference reached while the definition is still being
    built (a cycle) receives this same handle and observes the finished
    :class:`Schema` through :attr:`target` once resolution returns.

    Equality and hashing are identity based; comparing two cyclic graphs
    structurally would not terminate.
    """

    kind: Literal["structure"] = "structure"
    name: str
    _target: Optional[Schema] = PrivateAttr(default=None)

    @property
    def target(self) -> Schema:
        """The referenced definition's schema."""
        if self._target is None:
            raise UnresolvedReferenceError(
                f"Definition '{self.name}' has not finished building", ref=self.name
            )
        return self._target

    @property
    def is_complete(self) -> bool:
        return self._target is not None

    def complete(self, schema: Schema) -> None:
        """Set the target once; the resolver calls this after building the definition."""
        if self._target is not None:
            raise RuntimeError(f"Structure '{self.name}' is already complete")
        self._target = schema

    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)


class ObjectSchema(BaseModel):
    """An object type with named properties.

    ``properties`` is keyed by name; ``all_properties`` carries the names in
    exact source declaration order.  ``required`` is copied as declared and
    is not checked against ``properties``.

    ``additional_properties`` is either a boolean flag or a :class:`Schema`
    describing the allowed extra properties; an absent keyword yields
    ``False``.
    """

    model_config = _GRAPH_CONFIG

    kind: Literal["object"] = "object"
    metadata: ObjectMetadata = Field(default_factory=ObjectMetadata)
    required: list[str] = Field(default_factory=list)
    properties: dict[str, Schema] = Field(default_factory=dict)
    all_properties: list[str] = Field(default_factory=list)
    additional_properties: Union[bool, Schema] = False
    abstract: bool = False


class ArraySchema(BaseModel):
    """An array whose items match one schema, or a tuple of positional schemas."""

    model_config = _GRAPH_CONFIG

    kind: Literal["array"] = "array"
    metadata: ArrayMetadata = Field(default_factory=ArrayMetadata)
    items: Union[Schema, list[Schema]]


class AllOfSchema(BaseModel):
    """An object with the combined requirements of every subschema."""

    model_config = _GRAPH_CONFIG

    kind: Literal["allOf"] = "allOf"
    subschemas: list[Schema]
    abstract: bool = False


class OneOfSchema(BaseModel):
    """A value that matches exactly one of several subschemas.

    ``abstract`` marks the schema as an interface rather than a concrete
    type (the ``x-abstract`` extension).
    """

    model_config = _GRAPH_CONFIG

    kind: Literal["oneOf"] = "oneOf"
    subschemas: list[Schema]
    abstract: bool = False


class StringType(BaseModel):
    model_config = _GRAPH_CONFIG

    kind: Literal["string"] = "string"
    format: Optional[str] = None
    metadata: StringMetadata = Field(default_factory=StringMetadata)


class NumberType(BaseModel):
    model_config = _GRAPH_CONFIG

    kind: Literal["number"] = "number"
    format: Optional[str] = None
    metadata: NumericMetadata[float] = Field(default_factory=NumericMetadata[float])


class IntegerType(BaseModel):
    model_config = _GRAPH_CONFIG

    kind: Literal["integer"] = "integer"
    format: Optional[str] = None
    metadata: NumericMetadata[int] = Field(default_factory=NumericMetadata[int])


class SimpleType(BaseModel):
    """A schema kind without a payload of its own.

    ``enumeration`` keeps its accepted values in :attr:`Metadata.enum_values`.
    """

    model_config = _GRAPH_CONFIG

    kind: Literal["enumeration", "boolean", "file", "any", "null"]


SchemaType = Annotated[
    Union[
        Structure,
        ObjectSchema,
        ArraySchema,
        AllOfSchema,
        OneOfSchema,
        StringType,
        NumberType,
        IntegerType,
        SimpleType,
    ],
    Field(discriminator="kind"),
]


class Schema(BaseModel):
    """One node of the resolved type graph: general metadata plus a :data:`SchemaType`.

    Schemas reached through the same ``$ref`` are shared, not copied: every
    referrer holds the identical instance for the lifetime of the parse
    result.
    """

    model_config = _GRAPH_CONFIG

    metadata: Metadata = Field(default_factory=Metadata)
    type: SchemaType


class ParsedDocument(BaseModel):
    """The result of parsing one document.

    ``definitions`` maps each definition name (in document order) to its
    built :class:`Schema`.  Every ``$ref`` inside the graph is already
    resolved, so consumers can traverse freely.
    """

    model_config = _GRAPH_CONFIG

    definitions: dict[str, Schema] = Field(default_factory=dict)
    version: Optional[str] = None


Structure.model_rebuild()
ObjectSchema.model_rebuild()
ArraySchema.model_rebuild()
AllOfSchema.model_rebuild()
OneOfSchema.model_rebuild()
Schema.model_rebuild()
ParsedDocument.model_rebuild()
