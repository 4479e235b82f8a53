"""Shared test fixtures for swaggergraph.

Provides raw document fixtures loaded from ``tests/fixtures``, parsed
documents, and an isolated environment for configuration tests.  These
fixtures are automatically discovered by pytest and available to all test
modules without explicit imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from swaggergraph.models import ParsedDocument


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Raw document fixtures (plain dicts loaded from fixture files)
# ---------------------------------------------------------------------------


@pytest.fixture
def uber_raw() -> dict[str, Any]:
    """Load the raw Uber API Swagger 2.0 document."""
    with open(FIXTURES_DIR / "uber.json") as f:
        return json.load(f)


@pytest.fixture
def one_of_raw() -> dict[str, Any]:
    """Load the raw oneOf Swagger 2.0 document."""
    with open(FIXTURES_DIR / "test_one_of.json") as f:
        return json.load(f)


@pytest.fixture
def tree_raw() -> dict[str, Any]:
    """Load the raw OpenAPI 3.0 document with self- and mutually-referential schemas."""
    with open(FIXTURES_DIR / "tree.yaml") as f:
        return yaml.safe_load(f)


# ---------------------------------------------------------------------------
# Parsed document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def uber_document(uber_raw: dict[str, Any]) -> ParsedDocument:
    """Parsed Uber API document."""
    from swaggergraph.parser.document import parse_document

    return parse_document(uber_raw)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Clear all SWAGGERGRAPH_* environment variables and chdir to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    for var in [
        "SWAGGERGRAPH_DEFINITIONS_PATH",
        "SWAGGERGRAPH_ABSTRACT_EXTENSION",
        "SWAGGERGRAPH_CONFIG",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path
