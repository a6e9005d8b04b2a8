"""Stable identity resolution for analysis output."""

from identity.resolver import IdentityMap, resolve_identities

__all__ = ["IdentityMap", "resolve_identities"]
