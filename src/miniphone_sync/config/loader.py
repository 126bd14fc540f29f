"""YAML configuration loading with environment variable references."""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from .schema import ClientConfig

# ${NAME} or ${NAME:-fallback}
_ENV_REF = re.compile(r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<default>[^}]*))?\}")


def substitute_env_vars(text: str) -> str:
    """Expand ``${NAME}`` and ``${NAME:-fallback}`` references.

    Raises:
        ValueError: If a variable without a fallback is not set
    """

    def expand(match: re.Match[str]) -> str:
        name = match.group("name")
        value = os.environ.get(name)
        if value is not None:
            return value
        if match.group("default") is not None:
            return match.group("default")
        raise ValueError(f"Environment variable {name} not found")

    return _ENV_REF.sub(expand, text)


def expand_env_refs(value: Any) -> Any:
    """Apply :func:`substitute_env_vars` to every string in a parsed document.

    Keys and non-string scalars are left alone; YAML comments never reach
    this point.
    """
    if isinstance(value, str):
        return substitute_env_vars(value)
    if isinstance(value, dict):
        return {key: expand_env_refs(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env_refs(item) for item in value]
    return value


def load_config(path: Path | None = None) -> ClientConfig:
    """Build the client configuration.

    Values come from the YAML file at ``path`` (if any) and are overridden
    by ``MINIPHONE_*`` environment variables. String values in the file may
    reference the environment with ``${NAME}`` or ``${NAME:-fallback}``.

    Raises:
        FileNotFoundError: If ``path`` does not exist
        ValueError: If a referenced variable is unset or the root is not a mapping
        ValidationError: If a value does not match the schema
    """
    if path is None:
        return ClientConfig()

    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found: {path}") from None

    document = yaml.safe_load(raw)
    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ValueError(f"Configuration root must be a mapping: {path}")

    values = expand_env_refs(document)
    return ClientConfig(**{str(key): value for key, value in values.items()})
