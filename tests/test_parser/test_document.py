"""End-to-end tests for swaggergraph.parser.document."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from swaggergraph.exceptions import (
    MalformedNodeError,
    SpecParseError,
    SwaggerGraphError,
    UnresolvedReferenceError,
)
from swaggergraph.models import (
    ArraySchema,
    IntegerFormat,
    IntegerType,
    NumberType,
    ObjectSchema,
    OneOfSchema,
    ParsedDocument,
    ParserConfig,
    StringFormat,
    StringType,
    Structure,
)
from swaggergraph.parser.document import (
    parse_document,
    parse_schema,
    parse_source,
    try_parse_document,
)
from swaggergraph.parser.node import RawNode

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


# ---------------------------------------------------------------------------
# Swagger 2.0 document
# ---------------------------------------------------------------------------


class TestUberDocument:
    def test_version_and_definitions(self, uber_document: ParsedDocument) -> None:
        assert uber_document.version == "2.0"
        assert list(uber_document.definitions) == [
            "Product",
            "PriceEstimate",
            "Profile",
            "Activity",
            "Activities",
            "Error",
        ]

    def test_untyped_definition_with_properties_is_object(self, uber_document: ParsedDocument) -> None:
        product = uber_document.definitions["Product"].type
        assert isinstance(product, ObjectSchema)
        assert product.all_properties == [
            "product_id",
            "description",
            "display_name",
            "capacity",
            "image",
        ]
        assert product.required == ["product_id"]
        assert product.additional_properties is False

    def test_leaf_formats_and_bounds(self, uber_document: ParsedDocument) -> None:
        product = uber_document.definitions["Product"].type
        capacity = product.properties["capacity"].type
        assert isinstance(capacity, IntegerType)
        assert capacity.format == IntegerFormat.INT32
        assert capacity.metadata.minimum == 1
        assert capacity.metadata.maximum == 8
        assert capacity.metadata.exclusive_minimum is False
        assert product.properties["image"].type.format == StringFormat.URI
        assert product.properties["capacity"].metadata.description.startswith("Capacity")

    def test_number_metadata(self, uber_document: ParsedDocument) -> None:
        estimate = uber_document.definitions["PriceEstimate"].type
        high = estimate.properties["high_estimate"].type
        assert isinstance(high, NumberType)
        assert high.metadata.minimum == 0
        assert high.metadata.exclusive_minimum is True
        assert estimate.properties["surge_multiplier"].type.metadata.multiple_of == 0.1

        currency = estimate.properties["currency_code"].type
        assert isinstance(currency, StringType)
        assert currency.metadata.pattern == "^[A-Z]{3}$"
        assert currency.metadata.min_length == currency.metadata.max_length == 3

    def test_additional_properties(self, uber_document: ParsedDocument) -> None:
        estimate = uber_document.definitions["PriceEstimate"].type
        assert isinstance(estimate.additional_properties.type, StringType)
        assert uber_document.definitions["Profile"].type.additional_properties is True

    def test_general_metadata(self, uber_document: ParsedDocument) -> None:
        profile = uber_document.definitions["Profile"]
        assert profile.metadata.title == "Rider profile"
        assert profile.type.properties["promo_code"].metadata.nullable is True
        error = uber_document.definitions["Error"]
        assert error.metadata.extensions == {"x-error-category": "client"}

    def test_references_share_definitions(self, uber_document: ParsedDocument) -> None:
        definitions = uber_document.definitions
        product_ref = definitions["Activity"].type.properties["product"].type
        assert isinstance(product_ref, Structure)
        assert product_ref.target is definitions["Product"]

        history = definitions["Activities"].type.properties["history"].type
        assert isinstance(history, ArraySchema)
        assert history.metadata.unique_items is True
        assert history.items.type.target is definitions["Activity"]


# ---------------------------------------------------------------------------
# oneOf document
# ---------------------------------------------------------------------------


class TestOneOfDocument:
    def test_abstract_one_of(self, one_of_raw: dict[str, Any]) -> None:
        document = parse_document(one_of_raw)
        foo = document.definitions["TestOneOfFoo"]
        bar = document.definitions["TestOneOfBar"]

        assert isinstance(foo.type, OneOfSchema)
        assert foo.type.abstract is True
        assert foo.metadata.description == "This is an OneOf description."
        assert bar.type.abstract is False

        base = document.definitions["TestOneOfBase"]
        assert foo.type.subschemas[0].type.target is base
        assert bar.type.subschemas[0].type.target is base
        assert foo.type.subschemas[1].type.all_properties == ["foo"]
        assert isinstance(bar.type.subschemas[1].type.properties["bar"].type, IntegerType)


# ---------------------------------------------------------------------------
# OpenAPI 3.x document with cycles
# ---------------------------------------------------------------------------


class TestTreeDocument:
    def test_components_location_from_version(self, tree_raw: dict[str, Any]) -> None:
        document = parse_document(tree_raw)
        assert document.version == "3.0.3"
        assert list(document.definitions) == ["TreeNode", "Husband", "Wife"]

    def test_self_reference(self, tree_raw: dict[str, Any]) -> None:
        document = parse_document(tree_raw)
        tree = document.definitions["TreeNode"]
        assert tree.type.properties["parent"].type.target is tree
        assert tree.type.properties["children"].type.items.type.target is tree
        assert tree.type.required == ["value"]

    def test_mutual_reference(self, tree_raw: dict[str, Any]) -> None:
        document = parse_document(tree_raw)
        husband = document.definitions["Husband"]
        wife = document.definitions["Wife"]
        assert husband.type.properties["wife"].type.target is wife
        assert wife.type.properties["husband"].type.target is husband

    def test_explicit_config_wins(self, tree_raw: dict[str, Any]) -> None:
        document = parse_document(tree_raw, ParserConfig())
        assert document.definitions == {}


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestParseFailures:
    def test_unresolved_reference(self) -> None:
        raw = {
            "swagger": "2.0",
            "definitions": {
                "Pet": {"type": "object", "properties": {"owner": {"$ref": "#/definitions/User"}}},
            },
        }
        with pytest.raises(UnresolvedReferenceError, match="no definition named 'User'") as exc_info:
            parse_document(raw)
        assert exc_info.value.path == "#/definitions/Pet/properties/owner"

    def test_malformed_node(self) -> None:
        raw = {"swagger": "2.0", "definitions": {"Pet": {"type": "widget"}}}
        with pytest.raises(MalformedNodeError, match="Unrecognised schema type 'widget'"):
            parse_document(raw)

    def test_unsupported_version(self) -> None:
        with pytest.raises(SpecParseError, match="Unsupported Swagger version"):
            parse_document({"swagger": "1.2", "definitions": {}})

    def test_document_without_version_uses_defaults(self) -> None:
        document = parse_document({"definitions": {"Name": {"type": "string"}}})
        assert document.version is None
        assert isinstance(document.definitions["Name"].type, StringType)


class TestTryParseDocument:
    def test_success(self, uber_raw: dict[str, Any]) -> None:
        document, error = try_parse_document(uber_raw)
        assert error is None
        assert document is not None
        assert "Product" in document.definitions

    def test_failure_returns_error_without_result(self) -> None:
        raw = {"swagger": "2.0", "definitions": {"A": {"$ref": "#/definitions/B"}}}
        document, error = try_parse_document(raw)
        assert document is None
        assert isinstance(error, UnresolvedReferenceError)
        assert isinstance(error, SwaggerGraphError)


# ---------------------------------------------------------------------------
# parse_schema
# ---------------------------------------------------------------------------


class TestParseSchema:
    def test_standalone_node(self) -> None:
        schema = parse_schema({"type": "string", "format": "date"})
        assert schema.type.format == StringFormat.DATE

    def test_resolves_against_definitions(self) -> None:
        schema = parse_schema(
            {"type": "array", "items": {"$ref": "#/definitions/Pet"}},
            definitions={"Pet": {"type": "object", "properties": {"id": {"type": "integer"}}}},
        )
        pet = schema.type.items.type
        assert isinstance(pet, Structure)
        assert pet.target.type.all_properties == ["id"]

    def test_missing_definition(self) -> None:
        with pytest.raises(UnresolvedReferenceError):
            parse_schema({"$ref": "#/definitions/Pet"})

    def test_openapi_config(self) -> None:
        config = ParserConfig(definitions_path="components/schemas")
        schema = parse_schema(
            {"$ref": "#/components/schemas/Pet"},
            definitions={"Pet": {"type": "boolean"}},
            config=config,
        )
        assert schema.type.target.type.kind == "boolean"


# ---------------------------------------------------------------------------
# parse_source
# ---------------------------------------------------------------------------


class TestParseSource:
    def test_swagger_file(self, isolated_env: Path) -> None:
        document = parse_source(str(FIXTURES_DIR / "test_one_of.json"))
        assert document.version == "2.0"
        assert list(document.definitions) == ["TestOneOfBase", "TestOneOfFoo", "TestOneOfBar"]

    def test_openapi_file_uses_components(self, isolated_env: Path) -> None:
        document = parse_source(str(FIXTURES_DIR / "tree.yaml"))
        tree = document.definitions["TreeNode"]
        assert tree.type.properties["parent"].type.target is tree

    def test_errors_point_into_loaded_document(self, isolated_env: Path) -> None:
        path = isolated_env / "broken.yaml"
        path.write_text(
            'swagger: "2.0"\ndefinitions:\n  Pet:\n    properties:\n      tag: {type: widget}\n',
            encoding="utf-8",
        )
        with pytest.raises(MalformedNodeError) as exc_info:
            parse_source(str(path))
        assert exc_info.value.path == "#/definitions/Pet/properties/tag"

    def test_missing_source(self, isolated_env: Path) -> None:
        with pytest.raises(SpecParseError, match="Document not found"):
            parse_source(str(isolated_env / "absent.json"))

    def test_parse_document_accepts_raw_node(self, uber_raw: dict[str, Any]) -> None:
        document = parse_document(RawNode(uber_raw))
        assert document.version == "2.0"
        assert "Product" in document.definitions
