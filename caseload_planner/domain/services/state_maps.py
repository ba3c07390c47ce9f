"""Copy-on-write helpers for lookup maps.

Every helper returns a new dict and leaves its input untouched, so consumers
can detect changes by identity.
"""

from typing import Mapping, TypeVar

K = TypeVar("K")
V = TypeVar("V")


def with_entry(current: Mapping[K, V], key: K, value: V) -> dict[K, V]:
    updated = dict(current)
    updated[key] = value
    return updated


def without_entry(current: Mapping[K, V], key: K) -> dict[K, V]:
    updated = dict(current)
    updated.pop(key, None)
    return updated


def merge_missing(primary: Mapping[K, V], supplementary: Mapping[K, V]) -> dict[K, V]:
    """Union of two maps where ``primary`` always wins on shared keys."""
    merged = dict(supplementary)
    merged.update(primary)
    return merged
