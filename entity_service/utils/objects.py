"""
Small mapping helpers used by the service's diffing logic.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping


def pick_keys(source: Mapping[str, Any], keys: Iterable[str]) -> dict[str, Any]:
    """
    Return a shallow copy of `source` restricted to `keys`.

    Keys missing from `source` are left out rather than filled with None, so
    the result tells "not supplied" apart from "supplied as None".
    """
    return {key: source[key] for key in keys if key in source}


def objects_equal(left: Mapping[str, Any], right: Mapping[str, Any]) -> bool:
    """Shallow equality: same key set and ``==`` values for every key."""
    if left.keys() != right.keys():
        return False
    return all(left[key] == right[key] for key in left)


__all__ = ["objects_equal", "pick_keys"]
