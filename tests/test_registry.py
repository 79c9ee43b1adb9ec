"""
Tests for concierge.identifiers.registry.
"""

import pytest

from concierge.exceptions import UnknownSystemError
from concierge.identifiers.base import Identifier, Mapper, Resolver
from concierge.identifiers.registry import SystemRegistry

SYS_A = "https://example.org/a"
SYS_B = "https://example.org/b"

# ------------------------------------------------------------------------------
# helpers
# ------------------------------------------------------------------------------


class _TableResolver:
    def __init__(self, table):
        self.table = table
        self.calls = 0

    def resolve(self, identifier):
        self.calls += 1
        return self.table.get(identifier.value)


class _TableMapper:
    def __init__(self, table, target):
        self.table = table
        self.target = target
        self.calls = 0

    def map(self, identifier):
        self.calls += 1
        value = self.table.get(identifier.value)
        return Identifier(self.target, value) if value else None


class _NotAResolver:
    def lookup(self, identifier):
        return None


# ------------------------------------------------------------------------------
# register()
# ------------------------------------------------------------------------------


def test_register_records_name_and_lists_systems_sorted(registry):
    registry.register("B", SYS_B)
    registry.register("A", SYS_A)
    assert registry.systems() == [(SYS_A, "A"), (SYS_B, "B")]
    assert registry.name(SYS_A) == "A"
    assert registry.name("https://example.org/none") is None


def test_register_is_idempotent_and_overwrites_name(registry):
    registry.register("Old", SYS_A)
    registry.register("New", SYS_A)
    assert registry.systems() == [(SYS_A, "New")]


def test_register_rejects_empty_uri(registry):
    with pytest.raises(ValueError, match=r"^system uri must be a non-empty"):
        registry.register("Nameless", "")


# ------------------------------------------------------------------------------
# resolvers
# ------------------------------------------------------------------------------


def test_resolve_dispatches_to_bound_resolver(registry):
    resolver = _TableResolver({"1": "one"})
    registry.register_resolver(SYS_A, resolver)
    assert registry.resolve(Identifier(SYS_A, "1")) == "one"
    assert resolver.calls == 1


def test_resolve_absent_value_returns_none(registry):
    registry.register_resolver(SYS_A, _TableResolver({"1": "one"}))
    assert registry.resolve(Identifier(SYS_A, "2")) is None


def test_resolve_unknown_system_fails_before_any_resolver_runs(registry):
    resolver = _TableResolver({"1": "one"})
    registry.register_resolver(SYS_A, resolver)
    with pytest.raises(UnknownSystemError, match=r"^No resolver registered"):
        registry.resolve(Identifier(SYS_B, "1"))
    assert resolver.calls == 0


def test_resolve_system_uri_is_case_sensitive(registry):
    registry.register_resolver(SYS_A, _TableResolver({"1": "one"}))
    with pytest.raises(UnknownSystemError):
        registry.resolve(Identifier(SYS_A.upper(), "1"))


def test_register_resolver_rejects_duplicate(registry):
    registry.register_resolver(SYS_A, _TableResolver({}))
    with pytest.raises(ValueError, match=r"^Resolver already registered for system"):
        registry.register_resolver(SYS_A, _TableResolver({}))


def test_register_resolver_rejects_object_without_resolve(registry):
    with pytest.raises(
        TypeError, match=r"^_NotAResolver does not implement Resolver protocol"
    ):
        registry.register_resolver(SYS_A, _NotAResolver())


def test_table_resolver_satisfies_runtime_protocol():
    assert isinstance(_TableResolver({}), Resolver)
    assert isinstance(_TableMapper({}, SYS_B), Mapper)
    assert not isinstance(_NotAResolver(), Resolver)


# ------------------------------------------------------------------------------
# mappers
# ------------------------------------------------------------------------------


def test_map_dispatches_on_ordered_pair(registry):
    registry.register_mapper(SYS_A, SYS_B, _TableMapper({"1": "x"}, SYS_B))
    assert registry.map(Identifier(SYS_A, "1"), SYS_B) == Identifier(SYS_B, "x")
    assert registry.map(Identifier(SYS_A, "2"), SYS_B) is None


def test_map_reverse_direction_is_not_implied(registry):
    registry.register_mapper(SYS_A, SYS_B, _TableMapper({"1": "x"}, SYS_B))
    with pytest.raises(UnknownSystemError, match=r"^No mapper registered"):
        registry.map(Identifier(SYS_B, "x"), SYS_A)


def test_map_does_not_chain_mappers(registry):
    sys_c = "https://example.org/c"
    registry.register_mapper(SYS_A, SYS_B, _TableMapper({"1": "x"}, SYS_B))
    registry.register_mapper(SYS_B, sys_c, _TableMapper({"x": "y"}, sys_c))
    with pytest.raises(UnknownSystemError):
        registry.map(Identifier(SYS_A, "1"), sys_c)


def test_register_mapper_rejects_duplicate_pair(registry):
    registry.register_mapper(SYS_A, SYS_B, _TableMapper({}, SYS_B))
    with pytest.raises(ValueError, match=r"^Mapper already registered for"):
        registry.register_mapper(SYS_A, SYS_B, _TableMapper({}, SYS_B))


def test_register_mapper_rejects_object_without_map(registry):
    with pytest.raises(TypeError, match=r"does not implement Mapper protocol$"):
        registry.register_mapper(SYS_A, SYS_B, _TableResolver({}))


def test_mappings_lists_pairs(registry):
    registry.register_mapper(SYS_B, SYS_A, _TableMapper({}, SYS_A))
    registry.register_mapper(SYS_A, SYS_B, _TableMapper({}, SYS_B))
    assert registry.mappings() == [(SYS_A, SYS_B), (SYS_B, SYS_A)]


def test_registries_are_isolated():
    first = SystemRegistry()
    second = SystemRegistry()
    first.register_resolver(SYS_A, _TableResolver({"1": "one"}))
    with pytest.raises(UnknownSystemError):
        second.resolve(Identifier(SYS_A, "1"))
