"""
Namespace table data structures for the event store.

Defines the type aliases for the registry's internal table and for the
snapshot handed to persistence layers. A namespace maps event keys to their
integer values; the registry maps namespaces to those tables.

A namespace exists in the registry once at least one key has been written to
it, and stays until it is explicitly cleared or replaced by a snapshot load.
"""

DEFAULT_NAMESPACE = ""
"""Namespace used when the caller does not name one."""

NamespaceTable = dict[str, int]
"""All event values recorded under a single namespace."""

Snapshot = dict[str, NamespaceTable]
"""The full, serializable registry state: namespace -> key -> value."""
