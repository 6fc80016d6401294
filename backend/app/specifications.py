"""Validation for product specification maps.

A specification map is ``str -> scalar | mapping`` where scalars are
strings, numbers, booleans or null, and mappings nest the same shape.
Lists and other containers are rejected so the storefront can render every
value as a label/value pair.
"""

from collections.abc import Iterable
from typing import Any

_SCALARS = (str, int, float, bool, type(None))


def check_specification_shape(value: Any, path: str = "specifications") -> None:
    """Raise ``ValueError`` if ``value`` is not a well-formed specification map."""
    if not isinstance(value, dict):
        raise ValueError(f"{path} must be an object")
    for key, item in value.items():
        if not isinstance(key, str) or not key.strip():
            raise ValueError(f"{path} keys must be non-empty strings")
        if isinstance(item, dict):
            check_specification_shape(item, f"{path}.{key}")
        elif not isinstance(item, _SCALARS):
            raise ValueError(f"{path}.{key} must be a string, number, boolean, null or object")


def missing_required_keys(value: dict[str, Any], required: Iterable[str]) -> list[str]:
    return [key for key in required if key not in value]
