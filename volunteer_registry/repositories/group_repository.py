# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Group record store.
The authoritative name -> Group mapping. NO business rules here: pure CRUD.
"""

from typing import Optional

from volunteer_registry.models.domain import Group


class GroupRepository:
    """In-memory group storage keyed by group name."""

    def __init__(self) -> None:
        self._store: dict[str, Group] = {}

    # ── Read ──

    def get(self, name: str) -> Optional[Group]:
        return self._store.get(name)

    def get_all(self) -> list[Group]:
        return list(self._store.values())

    def exists(self, name: str) -> bool:
        return name in self._store

    def count(self) -> int:
        return len(self._store)

    def max_id(self) -> int:
        return max((g.id for g in self._store.values()), default=0)

    # ── Write ──

    def put(self, name: str, group: Group) -> None:
        self._store[name] = group

    # ── Bulk / internal ──

    def clear(self) -> None:
        self._store.clear()

    def snapshot(self) -> dict[str, Group]:
        # Groups are frozen, a shallow copy is a full snapshot
        return dict(self._store)

    def restore(self, snapshot: dict[str, Group]) -> None:
        self._store = dict(snapshot)
