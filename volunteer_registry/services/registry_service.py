# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Volunteer registry business logic (registration, lookups, membership).

Every operation runs under one re-entrant lock that guards the record
store and both secondary indexes, so operations never interleave. All
checks happen before the first write; writes go through the store's
transaction so the record store and the indexes change together or not
at all.
"""

import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator, Optional

from volunteer_registry.core.clock import Clock, SequentialIdGenerator, system_clock
from volunteer_registry.core.logging import get_logger
from volunteer_registry.metrics.prometheus import (
    ACTIVE_GROUPS,
    GROUPS_REGISTERED,
    MEMBERS_LEFT,
    OPERATION_LATENCY,
    REGISTRY_ERRORS,
    VOLUNTEERS_JOINED,
)
from volunteer_registry.models.domain import Group, Member
from volunteer_registry.services.exceptions import (
    GroupAlreadyRegistered,
    GroupNotAvailable,
    MissingCredentials,
    NotAMember,
    RegistryError,
    ServicesNotAvailable,
)
from volunteer_registry.services.validation import (
    is_blank,
    validate_group_payload,
    validate_leave_payload,
    validate_member_payload,
)

logger = get_logger(__name__)

GROUP_REGISTERED = "Group registered successfully"
VOLUNTEERED = "Successfully volunteered"
ALREADY_VOLUNTEERED = "Already volunteered for this group"
LEFT_GROUP = "Successfully exited the group"


class RegistryService:
    """Business logic for the multi-index volunteer group registry."""

    def __init__(
        self,
        store: Any,
        clock: Clock = system_clock,
        id_generator: Optional[Callable[[], int]] = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._ids = id_generator or SequentialIdGenerator()
        self._lock = threading.RLock()

    @property
    def store(self) -> Any:
        return self._store

    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        with self._lock, OPERATION_LATENCY.labels(operation=name).time():
            try:
                yield
            except RegistryError as exc:
                REGISTRY_ERRORS.labels(operation=name, kind=exc.kind).inc()
                logger.warning(
                    "%s rejected: %s", name, exc.message,
                    extra={"error_kind": exc.kind},
                )
                raise

    def _commit(
        self,
        group: Group,
        service_keys: Iterable[str],
        location_keys: Iterable[str],
    ) -> None:
        """Write one group to the record store and every index key, atomically."""
        with self._store.transaction():
            self._store.groups.put(group.name, group)
            for key in dict.fromkeys(service_keys):
                self._store.services.put(key, group.name)
            for key in dict.fromkeys(location_keys):
                self._store.locations.put(key, group.name)

    def _resolve(self, group_name: Optional[str], missing: str) -> Group:
        group = self._store.groups.get(group_name) if group_name else None
        if group is None:
            raise GroupNotAvailable(missing)
        return group

    # ── Lifecycle ──

    def startup(self) -> None:
        """Provision storage and continue id numbering after the stored groups."""
        with self._lock:
            self._store.initialize()
            if isinstance(self._ids, SequentialIdGenerator):
                self._ids.reset(self._store.groups.max_id() + 1)
            ACTIVE_GROUPS.set(self._store.groups.count())

    def reset(self) -> None:
        """Drop every group and restart id numbering."""
        with self._lock:
            self._store.clear()
            if isinstance(self._ids, SequentialIdGenerator):
                self._ids.reset()
            ACTIVE_GROUPS.set(0)

    # ── Commands ──

    def register_group(
        self,
        name: str,
        country: str,
        contact_number: str,
        official_email: str,
        service: str,
    ) -> str:
        """Create a group with an empty roster. Raises MissingCredentials / GroupAlreadyRegistered."""
        with self._operation("register_group"):
            validate_group_payload(name, country, contact_number, official_email, service)
            if self._store.groups.exists(name):
                raise GroupAlreadyRegistered(f"Group '{name}' already exists")

            group = Group(
                id=self._ids(),
                name=name,
                country=country,
                contact_number=contact_number,
                official_email=official_email,
                service=service,
                created_at=self._clock(),
                members=(),
            )
            self._commit(group, service_keys=(service,), location_keys=(country,))

            GROUPS_REGISTERED.inc()
            ACTIVE_GROUPS.set(self._store.groups.count())
            logger.info(
                "Group registered: name=%s, id=%d, service=%s, country=%s",
                name, group.id, service, country,
            )
            return GROUP_REGISTERED

    def volunteer(
        self,
        name: str,
        location: str,
        specialist: str,
        group_name: str,
        caller: str,
    ) -> str:
        """
        Add the caller to a group's roster.
        ``specialist`` must be a service some registered group offers.
        Raises MissingCredentials / GroupNotAvailable / ServicesNotAvailable.
        """
        with self._operation("volunteer"):
            validate_member_payload(name, location, specialist, group_name)
            if is_blank(caller):
                raise MissingCredentials("Caller identity is required")

            group = self._resolve(
                group_name, f"Group with name {group_name} is not available"
            )
            if not self._store.services.contains(specialist):
                raise ServicesNotAvailable(
                    f"Service '{specialist}' is not offered by any registered group"
                )

            if group.has_member(name, caller):
                logger.info("Volunteer already on roster: group=%s, name=%s", group_name, name)
                return ALREADY_VOLUNTEERED

            member = Member(
                name=name,
                location=location,
                specialist=specialist,
                registration_id=caller,
            )
            updated = group.with_member(member)
            self._commit(
                updated,
                service_keys=(group.service, specialist),
                location_keys=(group.country,),
            )

            VOLUNTEERS_JOINED.labels(service=specialist).inc()
            logger.info(
                "Volunteer joined: group=%s, name=%s, specialist=%s, members=%d",
                group_name, name, specialist, len(updated.members),
            )
            return VOLUNTEERED

    def leave_group(self, name: str, registration_id: str, group_name: str) -> str:
        """
        Remove a member from a group.
        The (name, registration_id) pair must match a member; once it does,
        every roster entry with that name is removed.
        Raises MissingCredentials / GroupNotAvailable / NotAMember.
        """
        with self._operation("leave_group"):
            validate_leave_payload(name, registration_id, group_name)
            group = self._resolve(
                group_name, f"Group with name {group_name} is not available"
            )
            if not group.has_member(name, registration_id):
                raise NotAMember(f"You are not a member of {group_name}")

            updated = group.without_member(name)
            self._commit(
                updated,
                service_keys=(group.service,),
                location_keys=(group.country,),
            )

            removed = len(group.members) - len(updated.members)
            MEMBERS_LEFT.inc(removed)
            logger.info(
                "Member left: group=%s, name=%s, removed=%d", group_name, name, removed
            )
            return LEFT_GROUP

    # ── Queries ──

    def list_groups(self) -> list[Group]:
        with self._operation("list_groups"):
            return self._store.groups.get_all()

    def get_group_by_name(self, name: str) -> Group:
        with self._operation("get_group_by_name"):
            if is_blank(name):
                raise MissingCredentials("Name of group is required")
            return self._resolve(name, f"Group with name {name} is not available")

    def get_group_by_service(self, service: str) -> Group:
        with self._operation("get_group_by_service"):
            if is_blank(service):
                raise MissingCredentials("Service field is required")
            return self._resolve(
                self._store.services.get(service),
                f"Group offering {service} is not available",
            )

    def get_group_by_location(self, location: str) -> Group:
        with self._operation("get_group_by_location"):
            if is_blank(location):
                raise MissingCredentials("Location field is required")
            return self._resolve(
                self._store.locations.get(location),
                f"No group is available in {location}",
            )

    def get_groups_by_service(self, service: str) -> list[Group]:
        with self._operation("get_groups_by_service"):
            if is_blank(service):
                raise MissingCredentials("Service field is required")
            return self._fetch_all(self._store.services.get_all(service))

    def get_groups_by_location(self, location: str) -> list[Group]:
        with self._operation("get_groups_by_location"):
            if is_blank(location):
                raise MissingCredentials("Location field is required")
            return self._fetch_all(self._store.locations.get_all(location))

    def list_services(self) -> list[str]:
        with self._operation("list_services"):
            return self._store.services.keys()

    def list_locations(self) -> list[str]:
        with self._operation("list_locations"):
            return self._store.locations.keys()

    def _fetch_all(self, names: list[str]) -> list[Group]:
        groups = (self._store.groups.get(n) for n in names)
        return [g for g in groups if g is not None]

    # ── Stats helpers ──

    def get_stats(self) -> dict[str, Any]:
        """Aggregated registry statistics."""
        with self._operation("get_stats"):
            groups = self._store.groups.get_all()
            services: dict[str, int] = {}
            for g in groups:
                services[g.service] = services.get(g.service, 0) + 1
            return {
                "total_groups": len(groups),
                "total_members": sum(len(g.members) for g in groups),
                "total_services": self._store.services.count(),
                "total_locations": self._store.locations.count(),
                "groups_per_service": services,
            }

    # ── Seed ──

    def seed_demo_groups(self) -> int:
        """Register a few demo groups so a fresh instance has something to browse."""
        demo_groups = [
            {
                "name": "GreenEarth",
                "country": "Kenya",
                "contact_number": "+254700000001",
                "official_email": "hello@greenearth.example",
                "service": "tree-planting",
            },
            {
                "name": "CleanCoasts",
                "country": "Ghana",
                "contact_number": "+233200000002",
                "official_email": "team@cleancoasts.example",
                "service": "beach-cleanup",
            },
            {
                "name": "RiverKeepers",
                "country": "Uganda",
                "contact_number": "+256700000003",
                "official_email": "info@riverkeepers.example",
                "service": "water-monitoring",
            },
        ]
        seeded = 0
        for payload in demo_groups:
            if self._store.groups.exists(payload["name"]):
                continue
            self.register_group(**payload)
            seeded += 1
        logger.info("Seeded %d demo volunteer groups", seeded)
        return seeded
