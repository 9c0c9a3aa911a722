"""Helpers shared by the JSON-based parsers."""

from __future__ import annotations

import json
import logging
from typing import Any

from .errors import StructuralParseError

logger = logging.getLogger(__name__)


def load_json_object(content: str, label: str) -> dict[str, Any]:
    """Decode ``content`` and require a top-level JSON object."""
    # ValueError also covers the int digit limit, not only JSONDecodeError.
    try:
        data = json.loads(content)
    except (ValueError, RecursionError) as exc:
        raise StructuralParseError(f"failed to parse {label}: {exc}") from exc

    if not isinstance(data, dict):
        raise StructuralParseError(
            f"failed to parse {label}: expected a JSON object, got {type(data).__name__}"
        )
    return data


def string_mapping(value: Any, label: str) -> dict[str, str]:
    """Keep only the str -> str pairs of a mapping; anything else becomes empty."""
    if not isinstance(value, dict):
        if value is not None:
            logger.debug("Ignoring %s: expected an object, got %s", label, type(value).__name__)
        return {}

    result: dict[str, str] = {}
    for key, item in value.items():
        if isinstance(key, str) and isinstance(item, str):
            result[key] = item
        else:
            logger.debug("Skipping %s entry %r: non-string value", label, key)
    return result
