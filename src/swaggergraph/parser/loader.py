"""Read API-description documents into a :class:`~swaggergraph.parser.node.RawNode`.

A source is a local file path, an ``http(s)://`` URL, or ``-`` for stdin.
Reading a source yields its text plus a format guess taken from the file
suffix or the response ``Content-Type``.  :func:`decode_text` then turns
the text into a mapping, and :func:`load_spec` roots it at ``#`` so every
error raised by the decode pass carries a pointer into this document.

:func:`detect_spec_version` reports the declared ``swagger`` / ``openapi``
version, which :func:`~swaggergraph.config.version_defaults` maps to the
definitions location.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml

from swaggergraph.exceptions import SpecParseError
from swaggergraph.parser.node import RawNode

logger = logging.getLogger(__name__)

_SUFFIX_FORMATS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}


def load_spec(source: str) -> RawNode:
    """Load a document from a URL, file path, or stdin (``-``).

    Args:
        source: Where to read the document from.

    Returns:
        The document root as a :class:`RawNode` at ``#``.

    Raises:
        SpecParseError: If the source cannot be read, is empty, or does not
            hold a JSON/YAML object.
    """
    if source == "-":
        text, text_format = _read_stdin(), None
    elif source.startswith(("http://", "https://")):
        text, text_format = _fetch(source)
    else:
        text, text_format = _read_file(source)

    if not text.strip():
        raise SpecParseError(f"Document is empty: {source}")

    logger.debug("Read %d characters from %s (format: %s)", len(text), source, text_format)
    return RawNode(decode_text(text, text_format))


def _read_stdin() -> str:
    try:
        return sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc


def _fetch(url: str) -> tuple[str, Optional[str]]:
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(f"HTTP {exc.response.status_code} fetching {url}") from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch {url}: {exc}") from exc

    media_type = response.headers.get("content-type", "").lower()
    text_format: Optional[str] = None
    if "json" in media_type:
        text_format = "json"
    elif "yaml" in media_type or "yml" in media_type:
        text_format = "yaml"
    return response.text, text_format


def _read_file(path: str) -> tuple[str, Optional[str]]:
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise SpecParseError(f"Document not found: {path}")
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read {path}: {exc}") from exc
    return text, _SUFFIX_FORMATS.get(file_path.suffix.lower())


def decode_text(text: str, text_format: Optional[str] = None) -> dict[str, Any]:
    """Decode document text as JSON or YAML.

    Without a format, JSON is tried first and YAML second; YAML alone would
    also read most JSON but reports JSON mistakes less precisely.

    Args:
        text: The document text.
        text_format: ``"json"``, ``"yaml"`` or ``None`` when unknown.

    Raises:
        SpecParseError: If the text does not decode, or decodes to anything
            other than an object.
    """
    if text_format == "json":
        data = _decode_json(text)
    elif text_format == "yaml":
        data = _decode_yaml(text)
    else:
        try:
            data = _decode_json(text)
        except SpecParseError as json_error:
            try:
                data = _decode_yaml(text)
            except SpecParseError as yaml_error:
                raise SpecParseError(
                    f"Failed to parse document as JSON or YAML\n  {json_error}\n  {yaml_error}"
                ) from yaml_error

    if not isinstance(data, dict):
        found = "empty document" if data is None else type(data).__name__
        raise SpecParseError(f"Document must be a JSON/YAML object, got {found}")
    return data


def _decode_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise SpecParseError(f"Invalid JSON: {exc}") from exc


def _decode_yaml(text: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise SpecParseError(f"Invalid YAML: {exc}") from exc


def detect_spec_version(spec: dict[str, Any]) -> str:
    """Return the document's declared version string.

    Swagger 2.x documents declare ``swagger: "2.0"``; OpenAPI documents
    declare ``openapi: "3.x.y"``.  Both lay out type definitions the same way
    apart from where the definitions table lives (see
    :func:`~swaggergraph.config.version_defaults`).

    Args:
        spec: The parsed document dictionary.

    Returns:
        The version string (e.g. ``'2.0'``, ``'3.0.3'``).

    Raises:
        SpecParseError: If no version is declared or it is unsupported.
    """
    if "swagger" in spec:
        version_str = str(spec["swagger"])
        if version_str.startswith("2."):
            return version_str
        raise SpecParseError(f"Unsupported Swagger version: {version_str}")

    openapi_version = spec.get("openapi")
    if openapi_version is None:
        raise SpecParseError(
            "Missing 'swagger' or 'openapi' field. Is this an API description document?"
        )

    version_str = str(openapi_version)
    if version_str.startswith("3."):
        return version_str

    raise SpecParseError(
        f"Unsupported OpenAPI version: {version_str}. "
        "Only Swagger 2.x and OpenAPI 3.x are supported."
    )
