"""Query key construction and matching.

A query key is a tuple of primitives such as ``("bid-results", "T1")``.
Two keys address the same cache entry iff they are deep-equal, so keys are
normalized here (lists become tuples) before they reach the store.
"""

from __future__ import annotations

from collections.abc import Hashable, Sequence
from typing import Any, Callable, Tuple, Union

QueryKey = Tuple[Hashable, ...]
KeyPredicate = Callable[[QueryKey], bool]
KeyMatcher = Union[QueryKey, Sequence[Any], KeyPredicate]


def _freeze(part: Any) -> Hashable:
    if isinstance(part, (list, tuple)):
        return tuple(_freeze(item) for item in part)
    if isinstance(part, dict):
        return tuple(sorted((k, _freeze(v)) for k, v in part.items()))
    if not isinstance(part, Hashable):
        msg = f"Query key parts must be hashable, got {type(part).__name__}"
        raise TypeError(msg)
    return part


def make_key(*parts: Any) -> QueryKey:
    """Build a normalized query key from its parts.

    Example:
        >>> make_key("bid-results", "T1")
        ('bid-results', 'T1')
        >>> make_key("tenders", ["a", "b"]) == make_key("tenders", ("a", "b"))
        True
    """
    return tuple(_freeze(part) for part in parts)


def normalize_key(key: Sequence[Any]) -> QueryKey:
    """Normalize an already-built key (list or tuple) to its canonical tuple."""
    if isinstance(key, str):
        return (key,)
    return make_key(*key)


def key_matches(key: QueryKey, matcher: KeyMatcher, *, exact: bool = False) -> bool:
    """Check whether ``key`` is selected by ``matcher``.

    A callable matcher is used as a predicate. A key matcher selects every
    key it is a prefix of, or only itself when ``exact`` is set.
    """
    if callable(matcher):
        return bool(matcher(key))

    prefix = normalize_key(matcher)
    if exact:
        return key == prefix
    return key[: len(prefix)] == prefix


def format_key(key: QueryKey) -> str:
    """Render a key for logs and error contexts."""
    return "[" + ", ".join(repr(part) for part in key) + "]"
