from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, TypeVar

T = TypeVar("T")


def deep_clone(value: T) -> T:
    return copy.deepcopy(value)


def deep_merge(base: Mapping[str, Any], changes: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Returns a new dict with `changes` merged into `base`.

    Nested dicts are merged key by key; any other value (lists included)
    replaces the previous one. Neither input is modified.
    """
    merged: Dict[str, Any] = copy.deepcopy(dict(base))

    for key, value in changes.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)

    return merged


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
