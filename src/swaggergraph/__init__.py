"""swaggergraph -- Parse Swagger/OpenAPI type definitions into a resolved schema graph.

This package reads the definitions table of an API-description document and
produces immutable, fully cross-referenced :class:`~swaggergraph.models.Schema`
values for code generators, validators and documentation tools.  ``$ref``
pointers are resolved to shared instances, and self- or mutually-referential
definitions build to cyclic graphs instead of recursing forever.

Typical workflow::

    from swaggergraph.parser import parse_source

    parsed = parse_source("swagger.json")
    product = parsed.definitions["Product"]

Modules:
    models: Pydantic models for the schema graph and parser configuration.
    config: Configuration loading and precedence resolution.
    exceptions: Exception hierarchy.
    parser: Loading, decoding, resolution and assembly.
"""

__version__ = "0.1.0"
