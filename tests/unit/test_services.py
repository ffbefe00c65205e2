# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging

import pytest

from scriptcheck.errors import InvalidFilterError
from scriptcheck.services import (
    InMemoryServiceRegistry,
    ResourceTracker,
    ScriptHelper,
    parse_filter,
    type_name_of,
)


class Datasource:
    def __init__(self, name):
        self.name = name


class FlakyRegistry(InMemoryServiceRegistry):
    def __init__(self):
        super().__init__()
        self.fail_for = set()

    def unget_service(self, reference):
        if reference.service_id in self.fail_for:
            raise RuntimeError("registry went away")
        return super().unget_service(reference)


def test_type_name_of():
    assert type_name_of("com.example.Foo") == "com.example.Foo"
    assert type_name_of(Datasource) == f"{__name__}.Datasource"
    with pytest.raises(TypeError):
        type_name_of(42)


@pytest.mark.parametrize(
    ("expression", "expected"),
    [
        ("(name=primary)", True),
        ("(name=prim*)", True),
        ("(name=*ary)", True),
        ("(name=p*m*y)", True),
        ("(name=secondary)", False),
        ("(region=*)", False),
        ("(name=*)", True),
        ("(weight>=10)", True),
        ("(weight<=9)", False),
        ("(&(name=primary)(weight>=10))", True),
        ("(|(name=other)(zone=eu))", True),
        ("(!(zone=eu))", False),
        ("(zone=us)", True),
        ("  ", True),
    ],
)
def test_filter_matching(expression, expected):
    props = {"name": "primary", "weight": 12, "zone": ["eu", "us"]}
    assert parse_filter(expression)(props) is expected


@pytest.mark.parametrize("expression", ["name=primary", "(name=primary", "(&)", "(=x)", "(name=a)(name=b)"])
def test_invalid_filters(expression):
    with pytest.raises(InvalidFilterError):
        parse_filter(expression)


def test_references_are_ordered_by_ranking_then_id():
    registry = InMemoryServiceRegistry()
    low = registry.register(Datasource, Datasource("low"), {"service.ranking": -1})
    first = registry.register(Datasource, Datasource("first"))
    high = registry.register(Datasource, Datasource("high"), {"service.ranking": 5})
    second = registry.register(Datasource, Datasource("second"))

    refs = registry.get_service_references(type_name_of(Datasource))
    assert refs == [high, first, second, low]
    assert registry.get_service_reference(type_name_of(Datasource)) == high
    assert high.properties["objectClass"] == [type_name_of(Datasource)]


def test_use_counts_follow_get_and_unget():
    registry = InMemoryServiceRegistry()
    ref = registry.register("svc", object())

    registry.get_service(ref)
    registry.get_service(ref)
    assert registry.use_count(ref) == 2
    assert registry.unget_service(ref) is True
    assert registry.unget_service(ref) is True
    assert registry.unget_service(ref) is False
    assert registry.outstanding == 0


def test_unregistered_service_is_not_returned():
    registry = InMemoryServiceRegistry()
    ref = registry.register("svc", object())
    registry.unregister(ref)
    assert registry.get_service(ref) is None
    assert registry.get_service_reference("svc") is None


def test_helper_caches_single_service_per_type():
    registry = InMemoryServiceRegistry()
    ref = registry.register(Datasource, Datasource("main"))
    tracker = ResourceTracker(registry)
    helper = ScriptHelper(registry, tracker)

    first = helper.getService(Datasource)
    again = helper.get_service(type_name_of(Datasource))

    assert first is again
    assert registry.use_count(ref) == 1
    assert tracker.outstanding == 1
    assert helper.getService("missing.Type") is None


def test_helper_get_services_with_filter():
    registry = InMemoryServiceRegistry()
    registry.register(Datasource, Datasource("eu-1"), {"zone": "eu"})
    registry.register(Datasource, Datasource("us-1"), {"zone": "us"})
    registry.register(Datasource, Datasource("eu-2"), {"zone": "eu", "service.ranking": 3})
    helper = ScriptHelper(registry, ResourceTracker(registry))

    assert [ds.name for ds in helper.getServices(Datasource, "(zone=eu)")] == ["eu-2", "eu-1"]
    assert helper.getServices("missing.Type") == []
    assert len(helper.get_services(Datasource)) == 3


def test_release_all_ungets_every_acquisition_once():
    registry = InMemoryServiceRegistry()
    refs = [registry.register("svc", object()) for _ in range(3)]
    tracker = ResourceTracker(registry)
    for ref in refs:
        tracker.acquire(ref)
    tracker.acquire(refs[0])
    assert registry.outstanding == 4

    assert tracker.release_all() == 4
    assert registry.outstanding == 0
    assert tracker.outstanding == 0
    assert tracker.release_all() == 0


def test_release_all_continues_past_failures(caplog):
    registry = FlakyRegistry()
    refs = [registry.register("svc", object()) for _ in range(3)]
    registry.fail_for.add(refs[1].service_id)
    tracker = ResourceTracker(registry)
    for ref in refs:
        tracker.acquire(ref)

    with caplog.at_level(logging.WARNING, logger="scriptcheck.services.tracker"):
        released = tracker.release_all()

    assert released == 2
    assert tracker.outstanding == 0
    assert registry.use_count(refs[0]) == 0
    assert registry.use_count(refs[2]) == 0
    assert "Failed to unget service" in caplog.text


def test_tracker_as_context_manager():
    registry = InMemoryServiceRegistry()
    ref = registry.register("svc", object())
    with ResourceTracker(registry) as tracker:
        tracker.acquire(ref)
        assert registry.outstanding == 1
    assert registry.outstanding == 0
