# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false

"""
Tests for the registry service and its storage backends.
Every service test runs against both the in-memory and the SQL store.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from volunteer_registry.core.clock import FixedClock, SequentialIdGenerator
from volunteer_registry.core.database import build_engine
from volunteer_registry.models.domain import Group, Member
from volunteer_registry.repositories.index_repository import IndexRepository
from volunteer_registry.repositories.registry_store import InMemoryRegistryStore
from volunteer_registry.repositories.sql_store import SqlRegistryStore
from volunteer_registry.services.exceptions import (
    ERROR_KINDS,
    FailedToRegisterGroup,
    GroupAlreadyRegistered,
    GroupNotAvailable,
    MissingCredentials,
    NotAMember,
    ServicesNotAvailable,
)
from volunteer_registry.services.registry_service import (
    ALREADY_VOLUNTEERED,
    GROUP_REGISTERED,
    LEFT_GROUP,
    VOLUNTEERED,
    RegistryService,
)
from volunteer_registry.services.validation import is_blank, missing_fields

START_NS = 1_700_000_000_000_000_000
CALLER = "rrkah-fqaaa-aaaaa-aaaaq-cai"
OTHER_CALLER = "ryjl3-tyaaa-aaaaa-aaaba-cai"


def make_store(backend: str):
    if backend == "sql":
        store = SqlRegistryStore(build_engine("sqlite://"))
    else:
        store = InMemoryRegistryStore()
    store.initialize()
    return store


@pytest.fixture(params=["memory", "sql"])
def store(request):
    return make_store(request.param)


@pytest.fixture
def registry(store):
    service = RegistryService(
        store=store,
        clock=FixedClock(START_NS, step_ns=1),
        id_generator=SequentialIdGenerator(),
    )
    service.startup()
    return service


def register(registry, name="GreenEarth", country="Kenya", service="tree-planting"):
    return registry.register_group(
        name=name,
        country=country,
        contact_number="+254700000001",
        official_email=f"{name.lower()}@example.org",
        service=service,
    )


def state(store):
    """Comparable picture of all three maps."""
    return (
        sorted((g.model_dump_json() for g in store.groups.get_all())),
        {k: store.services.get_all(k) for k in store.services.keys()},
        {k: store.locations.get_all(k) for k in store.locations.keys()},
    )


# ============================================
# Register
# ============================================
class TestRegisterGroup:
    def test_register_returns_confirmation(self, registry):
        assert register(registry) == GROUP_REGISTERED

    def test_registered_group_has_empty_roster(self, registry):
        register(registry)
        group = registry.get_group_by_name("GreenEarth")
        assert group.members == ()
        assert group.service == "tree-planting"
        assert group.country == "Kenya"

    def test_register_assigns_sequential_ids(self, registry):
        register(registry, name="A")
        register(registry, name="B")
        assert registry.get_group_by_name("A").id == 1
        assert registry.get_group_by_name("B").id == 2

    def test_register_uses_injected_clock(self, registry):
        register(registry)
        assert registry.get_group_by_name("GreenEarth").created_at == START_NS

    def test_register_indexes_service_and_country(self, registry, store):
        register(registry)
        assert store.services.get("tree-planting") == "GreenEarth"
        assert store.locations.get("Kenya") == "GreenEarth"

    def test_register_duplicate_fails(self, registry, store):
        register(registry)
        before = state(store)
        with pytest.raises(GroupAlreadyRegistered):
            register(registry, country="Ghana", service="beach-cleanup")
        assert state(store) == before

    def test_duplicate_does_not_consume_an_id(self, registry):
        register(registry, name="A")
        with pytest.raises(GroupAlreadyRegistered):
            register(registry, name="A")
        register(registry, name="B")
        assert registry.get_group_by_name("B").id == 2

    @pytest.mark.parametrize(
        "field", ["name", "country", "contact_number", "official_email", "service"]
    )
    def test_register_missing_field(self, registry, store, field):
        payload = {
            "name": "GreenEarth",
            "country": "Kenya",
            "contact_number": "+254700000001",
            "official_email": "hi@greenearth.org",
            "service": "tree-planting",
        }
        payload[field] = ""
        with pytest.raises(MissingCredentials) as exc_info:
            registry.register_group(**payload)
        assert field in exc_info.value.message
        assert store.groups.count() == 0

    def test_register_whitespace_only_is_missing(self, registry):
        with pytest.raises(MissingCredentials):
            register(registry, name="   ")


# ============================================
# Lookups
# ============================================
class TestLookups:
    def test_list_groups_empty(self, registry):
        assert registry.list_groups() == []

    def test_list_groups(self, registry):
        register(registry, name="A")
        register(registry, name="B", service="beach-cleanup", country="Ghana")
        assert {g.name for g in registry.list_groups()} == {"A", "B"}

    def test_get_by_name_missing(self, registry):
        with pytest.raises(MissingCredentials):
            registry.get_group_by_name("")

    def test_get_by_name_unknown(self, registry):
        with pytest.raises(GroupNotAvailable) as exc_info:
            registry.get_group_by_name("Nope")
        assert "Nope" in exc_info.value.message

    def test_get_by_service(self, registry):
        register(registry)
        assert registry.get_group_by_service("tree-planting").name == "GreenEarth"

    def test_get_by_service_missing(self, registry):
        with pytest.raises(MissingCredentials):
            registry.get_group_by_service("")

    def test_get_by_service_unknown(self, registry):
        with pytest.raises(GroupNotAvailable):
            registry.get_group_by_service("knitting")

    def test_get_by_location(self, registry):
        register(registry)
        assert registry.get_group_by_location("Kenya").name == "GreenEarth"

    def test_get_by_location_unknown(self, registry):
        with pytest.raises(GroupNotAvailable):
            registry.get_group_by_location("Peru")

    def test_get_by_location_missing(self, registry):
        with pytest.raises(MissingCredentials):
            registry.get_group_by_location(" ")

    def test_every_group_reachable_through_all_keys(self, registry, store):
        register(registry, name="A", service="s1", country="c1")
        register(registry, name="B", service="s2", country="c1")
        register(registry, name="C", service="s1", country="c2")
        for group in registry.list_groups():
            assert registry.get_group_by_name(group.name) == group
            assert group.name in store.services.get_all(group.service)
            assert group.name in store.locations.get_all(group.country)

    def test_list_services(self, registry):
        register(registry, name="A", service="s1")
        register(registry, name="B", service="s2")
        register(registry, name="C", service="s1")
        assert sorted(registry.list_services()) == ["s1", "s2"]

    def test_list_locations(self, registry):
        register(registry, name="A", country="Kenya")
        register(registry, name="B", country="Ghana")
        assert sorted(registry.list_locations()) == ["Ghana", "Kenya"]


# ============================================
# Shared index keys
# ============================================
class TestSharedKeys:
    def test_last_registered_wins_single_lookup(self, registry):
        register(registry, name="First", service="cleanup")
        register(registry, name="Second", service="cleanup")
        assert registry.get_group_by_service("cleanup").name == "Second"

    def test_no_group_lost_under_shared_service(self, registry):
        register(registry, name="First", service="cleanup")
        register(registry, name="Second", service="cleanup")
        names = [g.name for g in registry.get_groups_by_service("cleanup")]
        assert names == ["First", "Second"]

    def test_no_group_lost_under_shared_country(self, registry):
        register(registry, name="First", country="Kenya")
        register(registry, name="Second", country="Kenya", service="other")
        names = [g.name for g in registry.get_groups_by_location("Kenya")]
        assert names == ["First", "Second"]

    def test_membership_change_moves_group_to_most_recent(self, registry):
        register(registry, name="First", service="cleanup")
        register(registry, name="Second", service="cleanup")
        registry.volunteer("Amara", "Nairobi", "cleanup", "First", caller=CALLER)
        assert registry.get_group_by_service("cleanup").name == "First"

    def test_unknown_key_gives_empty_list(self, registry):
        assert registry.get_groups_by_service("nothing") == []
        assert registry.get_groups_by_location("nowhere") == []

    def test_multi_lookup_requires_key(self, registry):
        with pytest.raises(MissingCredentials):
            registry.get_groups_by_service("")
        with pytest.raises(MissingCredentials):
            registry.get_groups_by_location("")

    def test_index_returns_current_record(self, registry):
        register(registry)
        registry.volunteer("Amara", "Nairobi", "tree-planting", "GreenEarth", caller=CALLER)
        by_name = registry.get_group_by_name("GreenEarth")
        assert registry.get_group_by_service("tree-planting") == by_name
        assert registry.get_group_by_location("Kenya") == by_name


# ============================================
# Volunteer
# ============================================
class TestVolunteer:
    def test_volunteer_succeeds(self, registry):
        register(registry)
        result = registry.volunteer("Amara", "Nairobi", "tree-planting", "GreenEarth", caller=CALLER)
        assert result == VOLUNTEERED

    def test_volunteer_appends_exactly_one_member(self, registry):
        register(registry)
        before = len(registry.get_group_by_name("GreenEarth").members)
        registry.volunteer("Amara", "Nairobi", "tree-planting", "GreenEarth", caller=CALLER)
        group = registry.get_group_by_name("GreenEarth")
        assert len(group.members) == before + 1
        assert group.members[-1] == Member(
            name="Amara",
            location="Nairobi",
            specialist="tree-planting",
            registration_id=CALLER,
        )

    def test_volunteer_keeps_roster_order(self, registry):
        register(registry)
        registry.volunteer("Amara", "Nairobi", "tree-planting", "GreenEarth", caller=CALLER)
        registry.volunteer("Baraka", "Mombasa", "tree-planting", "GreenEarth", caller=OTHER_CALLER)
        names = [m.name for m in registry.get_group_by_name("GreenEarth").members]
        assert names == ["Amara", "Baraka"]

    def test_specialist_may_be_another_groups_service(self, registry, store):
        register(registry)
        register(registry, name="CleanCoasts", country="Ghana", service="beach-cleanup")
        registry.volunteer("Kofi", "Accra", "beach-cleanup", "GreenEarth", caller=CALLER)
        assert "GreenEarth" in store.services.get_all("beach-cleanup")
        assert "GreenEarth" in store.services.get_all("tree-planting")
        assert registry.get_group_by_service("beach-cleanup").name == "GreenEarth"

    def test_volunteer_unknown_service(self, registry, store):
        register(registry)
        before = state(store)
        with pytest.raises(ServicesNotAvailable) as exc_info:
            registry.volunteer("Amara", "Nairobi", "knitting", "GreenEarth", caller=CALLER)
        assert "knitting" in exc_info.value.message
        assert state(store) == before

    def test_volunteer_unknown_group(self, registry, store):
        register(registry)
        before = state(store)
        with pytest.raises(GroupNotAvailable):
            registry.volunteer("Amara", "Nairobi", "tree-planting", "Nope", caller=CALLER)
        assert state(store) == before

    def test_group_checked_before_service(self, registry):
        with pytest.raises(GroupNotAvailable):
            registry.volunteer("Amara", "Nairobi", "knitting", "Nope", caller=CALLER)

    @pytest.mark.parametrize("field", ["name", "location", "specialist", "group_name"])
    def test_volunteer_missing_field(self, registry, field):
        register(registry)
        payload = {
            "name": "Amara",
            "location": "Nairobi",
            "specialist": "tree-planting",
            "group_name": "GreenEarth",
        }
        payload[field] = ""
        with pytest.raises(MissingCredentials):
            registry.volunteer(caller=CALLER, **payload)

    def test_volunteer_requires_caller(self, registry):
        register(registry)
        with pytest.raises(MissingCredentials):
            registry.volunteer("Amara", "Nairobi", "tree-planting", "GreenEarth", caller="")

    def test_duplicate_join_is_idempotent(self, registry):
        register(registry)
        registry.volunteer("Amara", "Nairobi", "tree-planting", "GreenEarth", caller=CALLER)
        result = registry.volunteer("Amara", "Kisumu", "tree-planting", "GreenEarth", caller=CALLER)
        assert result == ALREADY_VOLUNTEERED
        assert len(registry.get_group_by_name("GreenEarth").members) == 1

    def test_same_name_different_caller_is_new_member(self, registry):
        register(registry)
        registry.volunteer("Amara", "Nairobi", "tree-planting", "GreenEarth", caller=CALLER)
        registry.volunteer("Amara", "Nairobi", "tree-planting", "GreenEarth", caller=OTHER_CALLER)
        assert len(registry.get_group_by_name("GreenEarth").members) == 2

    def test_volunteer_keeps_group_identity(self, registry):
        register(registry)
        before = registry.get_group_by_name("GreenEarth")
        registry.volunteer("Amara", "Nairobi", "tree-planting", "GreenEarth", caller=CALLER)
        after = registry.get_group_by_name("GreenEarth")
        assert (after.id, after.created_at, after.service, after.country) == (
            before.id, before.created_at, before.service, before.country,
        )


# ============================================
# Leave
# ============================================
class TestLeaveGroup:
    def test_leave_succeeds(self, registry):
        register(registry)
        registry.volunteer("Amara", "Nairobi", "tree-planting", "GreenEarth", caller=CALLER)
        assert registry.leave_group("Amara", CALLER, "GreenEarth") == LEFT_GROUP
        assert registry.get_group_by_name("GreenEarth").members == ()

    def test_join_then_leave_restores_roster(self, registry):
        register(registry)
        registry.volunteer("Baraka", "Mombasa", "tree-planting", "GreenEarth", caller=OTHER_CALLER)
        before = registry.get_group_by_name("GreenEarth").members
        registry.volunteer("Amara", "Nairobi", "tree-planting", "GreenEarth", caller=CALLER)
        registry.leave_group("Amara", CALLER, "GreenEarth")
        assert registry.get_group_by_name("GreenEarth").members == before

    def test_leave_never_joined(self, registry, store):
        register(registry)
        registry.volunteer("Amara", "Nairobi", "tree-planting", "GreenEarth", caller=CALLER)
        before = state(store)
        with pytest.raises(NotAMember) as exc_info:
            registry.leave_group("Zawadi", CALLER, "GreenEarth")
        assert "GreenEarth" in exc_info.value.message
        assert state(store) == before

    def test_leave_with_wrong_identity(self, registry, store):
        register(registry)
        registry.volunteer("Amara", "Nairobi", "tree-planting", "GreenEarth", caller=CALLER)
        before = state(store)
        with pytest.raises(NotAMember):
            registry.leave_group("Amara", OTHER_CALLER, "GreenEarth")
        assert state(store) == before

    def test_leave_from_empty_roster(self, registry):
        register(registry)
        with pytest.raises(NotAMember):
            registry.leave_group("Amara", CALLER, "GreenEarth")

    def test_leave_unknown_group(self, registry):
        with pytest.raises(GroupNotAvailable):
            registry.leave_group("Amara", CALLER, "Nope")

    @pytest.mark.parametrize("field", ["name", "registration_id", "group_name"])
    def test_leave_missing_field(self, registry, field):
        payload = {"name": "Amara", "registration_id": CALLER, "group_name": "GreenEarth"}
        payload[field] = ""
        with pytest.raises(MissingCredentials):
            registry.leave_group(**payload)

    def test_leave_removes_every_entry_with_that_name(self, registry):
        register(registry)
        registry.volunteer("Amara", "Nairobi", "tree-planting", "GreenEarth", caller=CALLER)
        registry.volunteer("Amara", "Nairobi", "tree-planting", "GreenEarth", caller=OTHER_CALLER)
        registry.volunteer("Baraka", "Mombasa", "tree-planting", "GreenEarth", caller=OTHER_CALLER)
        registry.leave_group("Amara", CALLER, "GreenEarth")
        names = [m.name for m in registry.get_group_by_name("GreenEarth").members]
        assert names == ["Baraka"]

    def test_leave_propagates_to_indexes(self, registry):
        register(registry)
        registry.volunteer("Amara", "Nairobi", "tree-planting", "GreenEarth", caller=CALLER)
        registry.leave_group("Amara", CALLER, "GreenEarth")
        assert registry.get_group_by_service("tree-planting").members == ()
        assert registry.get_group_by_location("Kenya").members == ()


# ============================================
# Scenario
# ============================================
class TestGreenEarthScenario:
    def test_register_list_join_search(self, registry):
        register(registry)
        assert "tree-planting" in registry.list_services()
        assert registry.volunteer(
            "Amara", "Nairobi", "tree-planting", "GreenEarth", caller=CALLER
        ) == VOLUNTEERED
        group = registry.get_group_by_service("tree-planting")
        assert "Amara" in [m.name for m in group.members]


# ============================================
# Stats & lifecycle
# ============================================
class TestStatsAndLifecycle:
    def test_stats(self, registry):
        register(registry, name="A", service="s1", country="c1")
        register(registry, name="B", service="s1", country="c2")
        registry.volunteer("Amara", "Nairobi", "s1", "A", caller=CALLER)
        stats = registry.get_stats()
        assert stats["total_groups"] == 2
        assert stats["total_members"] == 1
        assert stats["total_services"] == 1
        assert stats["total_locations"] == 2
        assert stats["groups_per_service"] == {"s1": 2}

    def test_reset_clears_everything(self, registry, store):
        register(registry)
        registry.reset()
        assert store.groups.count() == 0
        assert registry.list_services() == []
        register(registry, name="Fresh")
        assert registry.get_group_by_name("Fresh").id == 1

    def test_startup_continues_id_numbering(self, registry, store):
        register(registry, name="A")
        register(registry, name="B")
        restarted = RegistryService(store=store, clock=FixedClock(START_NS))
        restarted.startup()
        register(restarted, name="C")
        assert restarted.get_group_by_name("C").id == 3

    def test_seed_demo_groups(self, registry):
        assert registry.seed_demo_groups() == 3
        assert registry.seed_demo_groups() == 0
        assert "tree-planting" in registry.list_services()


# ============================================
# Concurrency
# ============================================
class TestConcurrency:
    def test_parallel_joins_lose_no_member(self, registry):
        register(registry)

        def join(i):
            return registry.volunteer(
                f"volunteer-{i}", "Nairobi", "tree-planting", "GreenEarth",
                caller=f"principal-{i}",
            )

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(join, range(40)))

        assert results == [VOLUNTEERED] * 40
        group = registry.get_group_by_name("GreenEarth")
        assert len(group.members) == 40
        assert registry.get_group_by_service("tree-planting") == group
        assert registry.get_group_by_location("Kenya") == group

    def test_parallel_duplicate_registration(self, registry):
        def attempt(_):
            try:
                return register(registry)
            except GroupAlreadyRegistered:
                return "duplicate"

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, range(10)))

        assert results.count(GROUP_REGISTERED) == 1
        assert results.count("duplicate") == 9


# ============================================
# Store transactions
# ============================================
class TestStoreTransactions:
    def _group(self, name="GreenEarth"):
        return Group(
            id=1,
            name=name,
            country="Kenya",
            contact_number="+254700000001",
            official_email="hi@greenearth.org",
            service="tree-planting",
            created_at=START_NS,
        )

    def test_failed_transaction_rolls_back_all_maps(self, store):
        group = self._group()
        with store.transaction():
            store.groups.put(group.name, group)
            store.services.put(group.service, group.name)
            store.locations.put(group.country, group.name)
        before = state(store)

        with pytest.raises(RuntimeError):
            with store.transaction():
                other = self._group("Other")
                store.groups.put(other.name, other)
                store.services.put("other-service", other.name)
                store.locations.put(other.country, other.name)
                raise RuntimeError("boom")

        assert state(store) == before

    def test_group_round_trip_with_members(self, store):
        group = self._group().with_member(
            Member(name="Amara", location="Nairobi", specialist="tree-planting", registration_id=CALLER)
        )
        with store.transaction():
            store.groups.put(group.name, group)
        assert store.groups.get(group.name) == group
        assert store.groups.max_id() == 1

    def test_put_replaces_record(self, store):
        group = self._group()
        store.groups.put(group.name, group)
        updated = group.with_member(
            Member(name="Amara", location="Nairobi", specialist="tree-planting", registration_id=CALLER)
        )
        store.groups.put(group.name, updated)
        assert store.groups.count() == 1
        assert len(store.groups.get(group.name).members) == 1

    def test_ping(self, store):
        assert store.ping() is True


# ============================================
# Domain, index & validation units
# ============================================
class TestIndexRepository:
    def test_put_moves_existing_name_to_end(self):
        index = IndexRepository("service")
        index.put("k", "a")
        index.put("k", "b")
        index.put("k", "a")
        assert index.get_all("k") == ["b", "a"]
        assert index.get("k") == "a"

    def test_get_unknown_key(self):
        index = IndexRepository("service")
        assert index.get("missing") is None
        assert index.get_all("missing") == []
        assert index.contains("missing") is False


class TestDomain:
    def test_group_is_frozen(self):
        group = TestStoreTransactions()._group()
        with pytest.raises(Exception):
            group.name = "Renamed"

    def test_with_member_copies(self):
        group = TestStoreTransactions()._group()
        member = Member(name="Amara", location="Nairobi", specialist="x", registration_id=CALLER)
        updated = group.with_member(member)
        assert group.members == ()
        assert updated.members == (member,)

    def test_has_member_needs_both_fields(self):
        member = Member(name="Amara", location="Nairobi", specialist="x", registration_id=CALLER)
        group = TestStoreTransactions()._group().with_member(member)
        assert group.has_member("Amara", CALLER) is True
        assert group.has_member("Amara", OTHER_CALLER) is False
        assert group.has_member("Baraka", CALLER) is False


class TestValidation:
    def test_is_blank(self):
        assert is_blank(None)
        assert is_blank("")
        assert is_blank("  ")
        assert not is_blank("x")

    def test_missing_fields_lists_names(self):
        assert missing_fields(a="x", b="", c=None) == ["b", "c"]


class TestErrors:
    def test_error_kinds_are_closed_set(self):
        assert [e.kind for e in ERROR_KINDS] == [
            "MissingCredentials",
            "FailedToRegisterGroup",
            "GroupAlreadyRegistered",
            "GroupNotAvailable",
            "ServicesNotAvailable",
            "NotAMember",
        ]

    def test_dormant_error_has_default_message(self):
        err = FailedToRegisterGroup()
        assert err.to_dict() == {"error": "FailedToRegisterGroup", "detail": "Failed to register group"}
