"""Query key utilities.

This module derives stable identities for query keys. A query key is a tuple
``(kind, *parts)`` whose parts may be scalars, mappings or pydantic models.
Two keys that are structurally equal, regardless of mapping insertion order,
produce the same identity.

Key Features:
    - Parameter normalization (None removal, models dumped to dicts)
    - Canonical encoding with sorted mapping keys (orjson)
    - SHA-256 hash used to index cache entries
    - Prefix matching for invalidation

Example:
    >>> a = key_hash(("news", {"page": 1, "limit": 10}))
    >>> a == key_hash(("news", {"limit": 10, "page": 1}))
    True
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping, Sequence
from typing import Any, Tuple

import orjson
from pydantic import BaseModel

from storefront_query.shared.errors import ErrorCode, ErrorContext, StorefrontError

QueryKey = Tuple[Any, ...]


def canonical_params(params: Mapping[str, Any] | BaseModel | None) -> dict[str, Any]:
    """Normalize a parameter bag for key derivation.

    Normalization rules:
        1. Pydantic models are dumped to plain dicts
        2. None values are removed
        3. Nested mappings are normalized recursively

    Args:
        params: Parameter mapping, model, or None

    Returns:
        Normalized dict; empty if params is None

    Example:
        >>> canonical_params({"page": 1, "search": None})
        {'page': 1}
    """
    if params is None:
        return {}
    if isinstance(params, BaseModel):
        params = params.model_dump(mode="json")
    return {k: _normalize(v) for k, v in params.items() if v is not None}


def _normalize(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return canonical_params(value)
    if isinstance(value, Mapping):
        return canonical_params(value)
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    return value


def normalize_key(key: Sequence[Any]) -> list[Any]:
    """Normalize every part of a query key.

    Raises:
        StorefrontError: If the key is empty or its kind is not a non-empty string
    """
    if not key or not isinstance(key[0], str) or not key[0]:
        raise StorefrontError(
            ErrorCode.QUERY_INVALID_KEY,
            "Query key must start with a non-empty resource kind",
            ErrorContext(operation="normalize_key"),
        )
    return [_normalize(part) for part in key]


def encode_key(key: Sequence[Any]) -> bytes:
    """Encode a query key canonically (sorted mapping keys).

    Raises:
        StorefrontError: If the key contains values that cannot be encoded
    """
    try:
        return orjson.dumps(normalize_key(key), option=orjson.OPT_SORT_KEYS)
    except TypeError as e:
        raise StorefrontError(
            ErrorCode.QUERY_INVALID_KEY,
            f"Query key is not serializable: {e!s}",
            ErrorContext(operation="encode_key"),
            original_error=e,
        ) from e


def key_hash(key: Sequence[Any]) -> str:
    """Return the SHA-256 hex digest identifying a query key."""
    return hashlib.sha256(encode_key(key)).hexdigest()


def key_matches_prefix(key: Sequence[Any], prefix: Sequence[Any]) -> bool:
    """Check whether ``prefix`` is a leading part of ``key``.

    Example:
        >>> key_matches_prefix(("news", "detail", "42"), ("news",))
        True
        >>> key_matches_prefix(("news",), ("news", "detail"))
        False
    """
    if len(prefix) > len(key):
        return False
    normalized_key = normalize_key(key)
    normalized_prefix = normalize_key(prefix)
    return normalized_key[: len(normalized_prefix)] == normalized_prefix
