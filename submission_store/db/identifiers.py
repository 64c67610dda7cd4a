"""
Identifier normalization.

Coerces caller-supplied values into native store identifiers. Coercion is
lenient: anything that cannot become an ObjectId is passed through untouched
so a malformed id degrades into a filter that simply matches nothing.
"""
from __future__ import annotations

from typing import Any, Mapping

from bson import ObjectId
from bson.errors import InvalidId

IN_OPERATOR = "$in"


def is_in_filter(value: Any) -> bool:
    return isinstance(value, Mapping) and IN_OPERATOR in value


def normalize_id(value: Any) -> Any:
    """Return `value` as an ObjectId when possible, otherwise unchanged.

    Set-membership filters (``{"$in": [...]}``) are normalized element-wise
    and returned as a new filter. An ``$in`` operand that is not a list is
    left for the server to reject. ``None`` stays ``None``.
    """
    if is_in_filter(value):
        items = value[IN_OPERATOR]
        if not isinstance(items, (list, tuple)):
            return value
        return {IN_OPERATOR: [normalize_id(item) for item in items]}
    if value is None:
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return value
