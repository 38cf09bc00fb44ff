# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: In-memory registry store.
Bundles the group record store with the service and location indexes
so the service layer can write all three in one transaction.
"""

from contextlib import contextmanager
from typing import Iterator

from volunteer_registry.core.logging import get_logger
from volunteer_registry.repositories.group_repository import GroupRepository
from volunteer_registry.repositories.index_repository import IndexRepository

logger = get_logger(__name__)


class InMemoryRegistryStore:
    """Record store plus both secondary indexes, held in process memory."""

    backend = "memory"

    def __init__(self) -> None:
        self.groups = GroupRepository()
        self.services = IndexRepository("service")
        self.locations = IndexRepository("location")
        self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """All-or-nothing write scope: on error every map is rolled back."""
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        saved = (
            self.groups.snapshot(),
            self.services.snapshot(),
            self.locations.snapshot(),
        )
        self._depth = 1
        try:
            yield
        except BaseException:
            self.groups.restore(saved[0])
            self.services.restore(saved[1])
            self.locations.restore(saved[2])
            logger.warning("Registry transaction rolled back")
            raise
        finally:
            self._depth = 0

    def initialize(self) -> None:
        """Nothing to provision for the in-memory backend."""

    def ping(self) -> bool:
        return True

    def clear(self) -> None:
        self.groups.clear()
        self.services.clear()
        self.locations.clear()
