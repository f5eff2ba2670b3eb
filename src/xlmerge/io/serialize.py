from __future__ import annotations

import importlib
import json
from types import ModuleType

from ..errors import MissingDependencyError, SerializationError
from ..models.types import JsonStructure

_FORMAT_HINTS: set[str] = {"json", "yaml"}


def _normalize_format_hint(fmt: str) -> str:
    """Normalize a format hint string.

    Args:
        fmt: Format string such as "json", "yaml", or "yml".

    Returns:
        Normalized format hint.
    """
    format_hint = fmt.lower().lstrip(".")
    if format_hint == "yml":
        return "yaml"
    return format_hint


def _ensure_format_hint(
    fmt: str,
    *,
    allowed: set[str],
    error_type: type[Exception],
    error_message: str,
) -> str:
    """Validate and normalize a format hint.

    Args:
        fmt: Raw format string.
        allowed: Allowed format hints.
        error_type: Exception type to raise on error.
        error_message: Error message template with {fmt}.

    Returns:
        Normalized format hint.
    """
    format_hint = _normalize_format_hint(fmt)
    if format_hint not in allowed:
        raise error_type(error_message.format(fmt=fmt))
    return format_hint


def _serialize_payload_from_hint(
    payload: JsonStructure,
    format_hint: str,
    *,
    pretty: bool = False,
    indent: int | None = None,
) -> str:
    """Serialize a payload using a normalized format hint.

    Args:
        payload: JSON-serializable payload.
        format_hint: Normalized format hint ("json" or "yaml").
        pretty: Whether to pretty-print JSON.
        indent: Optional JSON indentation width.

    Returns:
        Serialized string for the requested format.
    """
    match format_hint:
        case "json":
            indent_val = 2 if pretty and indent is None else indent
            return json.dumps(payload, ensure_ascii=False, indent=indent_val)
        case "yaml":
            yaml = _require_yaml()
            return str(
                yaml.safe_dump(
                    payload,
                    allow_unicode=True,
                    sort_keys=False,
                    indent=2,
                )
            )
        case _:
            raise SerializationError(
                f"Unsupported export format '{format_hint}'. Allowed: json, yaml, yml."
            )


def _parse_text_from_hint(text: str, format_hint: str) -> JsonStructure:
    """Parse serialized text using a normalized format hint.

    Args:
        text: Raw document text.
        format_hint: Normalized format hint ("json" or "yaml").

    Returns:
        Parsed JSON-compatible structure.
    """
    match format_hint:
        case "json":
            try:
                return json.loads(text)
            except json.JSONDecodeError as e:
                raise SerializationError(f"Invalid JSON document: {e}") from e
        case "yaml":
            yaml = _require_yaml()
            try:
                return yaml.safe_load(text)
            except yaml.YAMLError as e:
                raise SerializationError(f"Invalid YAML document: {e}") from e
        case _:
            raise SerializationError(
                f"Unsupported input format '{format_hint}'. Allowed: json, yaml, yml."
            )


def _require_yaml() -> ModuleType:
    """Ensure pyyaml is installed; otherwise raise with guidance."""
    try:
        module = importlib.import_module("yaml")
    except ImportError as e:
        raise MissingDependencyError(
            "YAML support requires pyyaml. Install it via `pip install pyyaml` or add the 'yaml' extra."
        ) from e
    return module
