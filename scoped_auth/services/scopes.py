"""
Access scope matching.

A token grants a set of scope names and a remote method requires a set of
scope names. Both are opaque strings; there is no hierarchy between them.
An empty set on either side stands for the reserved DEFAULT scope.
"""
from collections.abc import Iterable

DEFAULT_SCOPE = "DEFAULT"


def normalize_scopes(scopes: Iterable[str] | None) -> frozenset[str]:
    """Return scopes as a frozenset, mapping None or empty to {DEFAULT}.

    A single scope name may be passed as a plain string.
    """
    if isinstance(scopes, str):
        scopes = [scopes]
    normalized = frozenset(scopes or ())
    if not normalized:
        return frozenset({DEFAULT_SCOPE})
    return normalized


def matching_scopes(
    granted_scopes: Iterable[str] | None, required_scopes: Iterable[str] | None
) -> frozenset[str]:
    """Return the granted scopes that satisfy one of the required scopes."""
    return normalize_scopes(granted_scopes) & normalize_scopes(required_scopes)


def authorize(
    granted_scopes: Iterable[str] | None, required_scopes: Iterable[str] | None
) -> bool:
    """
    Decide whether a token may invoke a method.

    At least one required scope must be granted; exact set equality is not
    needed. A token with DEFAULT only cannot invoke a custom-scoped method,
    and a token with custom scopes only cannot invoke a default-scoped one.

    Examples:
        >>> authorize([], ["DEFAULT"])
        True
        >>> authorize(["read:custom"], [])
        False
        >>> authorize(["read", "execute"], ["read", "write"])
        True
    """
    return bool(matching_scopes(granted_scopes, required_scopes))
