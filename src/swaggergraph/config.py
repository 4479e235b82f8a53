"""Parser configuration loading and precedence resolution.

Configuration is small: where the definitions table lives inside the
document and which vendor extension marks a schema as abstract.  It is
resolved from several layers by :func:`resolve_config`:

1. Explicit keyword arguments
2. Environment variables (``SWAGGERGRAPH_DEFINITIONS_PATH``,
   ``SWAGGERGRAPH_ABSTRACT_EXTENSION``)
3. A JSON config file (``config_file`` argument or ``SWAGGERGRAPH_CONFIG``)
4. The document version (Swagger 2.0 keeps ``definitions``, OpenAPI 3.x
   uses ``components/schemas``)
5. :class:`~swaggergraph.models.ParserConfig` defaults
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from swaggergraph.exceptions import ConfigError
from swaggergraph.models import ParserConfig

_ENV_PREFIX = "SWAGGERGRAPH_"
_ENV_CONFIG_FILE = f"{_ENV_PREFIX}CONFIG"
_OPENAPI3_DEFINITIONS_PATH = "components/schemas"


def load_config(path: str | Path) -> ParserConfig:
    """Load a :class:`~swaggergraph.models.ParserConfig` from a JSON file.

    Args:
        path: Path to a JSON file whose top-level object holds config fields.

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If the file does not exist, contains invalid JSON, or
            fails Pydantic validation.
    """
    config_path = Path(path).expanduser()
    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
        return ParserConfig.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ConfigError(f"Invalid config at {config_path}: {exc}") from exc


def version_defaults(version: Optional[str]) -> dict[str, Any]:
    """Return the config fields implied by a document version string.

    Args:
        version: A version as returned by
            :func:`~swaggergraph.parser.loader.detect_spec_version`, or
            ``None`` when unknown.
    """
    if version is not None and version.startswith("3."):
        return {"definitions_path": _OPENAPI3_DEFINITIONS_PATH}
    return {}


def resolve_config(
    definitions_path: Optional[str] = None,
    abstract_extension: Optional[str] = None,
    config_file: Optional[str | Path] = None,
    version: Optional[str] = None,
) -> ParserConfig:
    """Resolve the effective parser configuration.

    Precedence (high to low):
        1. Keyword arguments
        2. Environment variables (``SWAGGERGRAPH_*``)
        3. Config file (``config_file`` or ``$SWAGGERGRAPH_CONFIG``)
        4. Defaults implied by ``version``
        5. Model defaults

    Returns:
        The merged :class:`~swaggergraph.models.ParserConfig`.

    Raises:
        ConfigError: If the config file is invalid or the merged values fail
            validation.
    """
    # 5 + 4. Version defaults over model defaults
    merged: dict[str, Any] = version_defaults(version)

    # 3. Config file
    file_source = config_file if config_file is not None else os.environ.get(_ENV_CONFIG_FILE)
    if file_source:
        file_config = load_config(file_source)
        merged.update(file_config.model_dump(exclude_unset=True))

    # 2. Environment variables
    for field_name in ParserConfig.model_fields:
        env_value = os.environ.get(f"{_ENV_PREFIX}{field_name.upper()}")
        if env_value:
            merged[field_name] = env_value

    # 1. Explicit arguments
    if definitions_path is not None:
        merged["definitions_path"] = definitions_path
    if abstract_extension is not None:
        merged["abstract_extension"] = abstract_extension

    try:
        return ParserConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid parser configuration: {exc}") from exc
