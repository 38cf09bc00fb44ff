# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Secondary index (service -> groups, country -> groups).

Each key maps to an ordered set of group names, most recently written
last. Only names are stored; callers resolve them through the group
record store so an index never carries its own copy of a group.
"""

from typing import Optional


class IndexRepository:
    """In-memory secondary index keyed by a non-primary group attribute."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._store: dict[str, list[str]] = {}

    # ── Read ──

    def get(self, key: str) -> Optional[str]:
        """Name of the group most recently written under ``key``."""
        names = self._store.get(key)
        return names[-1] if names else None

    def get_all(self, key: str) -> list[str]:
        return list(self._store.get(key, []))

    def keys(self) -> list[str]:
        return list(self._store.keys())

    def contains(self, key: str) -> bool:
        return key in self._store

    def count(self) -> int:
        return len(self._store)

    # ── Write ──

    def put(self, key: str, group_name: str) -> None:
        names = self._store.setdefault(key, [])
        if group_name in names:
            names.remove(group_name)
        names.append(group_name)

    # ── Bulk / internal ──

    def clear(self) -> None:
        self._store.clear()

    def snapshot(self) -> dict[str, list[str]]:
        return {key: list(names) for key, names in self._store.items()}

    def restore(self, snapshot: dict[str, list[str]]) -> None:
        self._store = {key: list(names) for key, names in snapshot.items()}
