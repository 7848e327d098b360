from dataclasses import dataclass
from typing import Optional

import pytest
from pydantic import BaseModel

from dataproviders import (
    CyclicReferenceError,
    DataProvider,
    DeferProp,
    Flattenable,
    LazyProp,
    MemberKind,
    defer,
    lazy,
)
from dataproviders.provider import MAX_NESTING_DEPTH


class UserProvider(DataProvider):
    def __init__(self, full_name: str, user_id: int) -> None:
        self.fullName = full_name
        self.id = user_id


class StaticProvider(DataProvider):
    static_data = {"title": "Static", "fullName": "literal"}

    def title(self) -> str:
        return "From method"

    @property
    def fullName(self) -> str:
        return "reflected"


class Address(DataProvider):
    def __init__(self, city: str) -> None:
        self.city = city


class Customer(DataProvider):
    def __init__(self, name: str, address: Address) -> None:
        self.name = name
        self.address = address

    def previous(self):
        return [Address("Oslo"), {"nested": Address("Rome")}]


class Node(DataProvider):
    def __init__(self) -> None:
        self.child: Optional["Node"] = None


class Meta(BaseModel):
    version: int = 1
    channel: str = "web"


class ExternalPayload:
    """Flattenable that does not derive from DataProvider."""

    def to_flat_map(self, formatter=None, resolver=None):
        return {"external": True, "inner": Address("Lima")}


def test_flat_map_as_written(container):
    assert UserProvider("Ada Lovelace", 7).to_flat_map(resolver=container) == {"fullName": "Ada Lovelace", "id": 7}


def test_flat_map_snake_case(container):
    data = UserProvider("Ada Lovelace", 7).to_flat_map(formatter="SnakeCase", resolver=container)
    assert data == {"full_name": "Ada Lovelace", "id": 7}


def test_static_data_wins_and_is_not_formatted(container):
    data = StaticProvider().to_flat_map(formatter="SnakeCase", resolver=container)
    assert data == {"full_name": "reflected", "title": "Static", "fullName": "literal"}


def test_static_data_from_pydantic_model(container):
    class Versioned(DataProvider):
        static_data = Meta(version=3)

        def version(self):
            return 1

    assert Versioned().to_flat_map(resolver=container) == {"version": 3, "channel": "web"}


def test_invalid_static_data_raises_type_error(container):
    class Bad(DataProvider):
        static_data = ["not", "a", "mapping"]

    with pytest.raises(TypeError):
        Bad().to_flat_map(resolver=container)


def test_members_lists_static_entries_last():
    members = StaticProvider().members()
    assert [(m.name, m.kind) for m in members] == [
        ("fullName", MemberKind.PROPERTY),
        ("title", MemberKind.METHOD),
        ("title", MemberKind.STATIC),
        ("fullName", MemberKind.STATIC),
    ]


def test_flat_map_keeps_nested_providers_as_objects(container):
    address = Address("Paris")
    data = Customer("Ada", address).to_flat_map(resolver=container)
    assert data["address"] is address
    assert isinstance(data["previous"][0], Address)


def test_nested_map_expands_providers_recursively(container):
    data = Customer("Ada", Address("Paris")).to_nested_map(resolver=container)
    assert data == {
        "name": "Ada",
        "address": {"city": "Paris"},
        "previous": [{"city": "Oslo"}, {"nested": {"city": "Rome"}}],
    }


def test_nested_map_applies_formatter_at_every_level(container):
    class Outer(DataProvider):
        def __init__(self):
            self.innerUser = UserProvider("Bob", 2)

    data = Outer().to_nested_map(formatter="SnakeCase", resolver=container)
    assert data == {"inner_user": {"full_name": "Bob", "id": 2}}


def test_nested_map_handles_models_and_foreign_flattenables(container):
    class Mixed(DataProvider):
        def __init__(self):
            self.meta = Meta()
            self.payload = ExternalPayload()

    assert isinstance(ExternalPayload(), Flattenable)
    data = Mixed().to_nested_map(resolver=container)
    assert data == {
        "meta": {"version": 1, "channel": "web"},
        "payload": {"external": True, "inner": {"city": "Lima"}},
    }


def test_shared_provider_in_siblings_is_not_a_cycle(container):
    shared = Address("Berlin")

    class Pair(DataProvider):
        def __init__(self):
            self.home = shared
            self.work = shared

    assert Pair().to_nested_map(resolver=container) == {"home": {"city": "Berlin"}, "work": {"city": "Berlin"}}


def test_self_reference_raises_cyclic_error(container):
    node = Node()
    node.child = node
    with pytest.raises(CyclicReferenceError) as exc:
        node.to_nested_map(resolver=container)
    assert [type(p) for p in exc.value.path] == [Node, Node]
    # flat output is unaffected
    assert node.to_flat_map(resolver=container) == {"child": node}


def test_indirect_cycle_raises(container):
    a, b = Node(), Node()
    a.child, b.child = b, a
    with pytest.raises(CyclicReferenceError, match="Node -> Node -> Node"):
        a.to_nested_map(resolver=container)


def test_deferred_wrappers_stay_opaque(container):
    calls = []

    class Report(DataProvider):
        def rows(self):
            return defer(lambda: calls.append("rows"))

        def export(self):
            return lazy(lambda: calls.append("export"))

    for data in (Report().to_flat_map(resolver=container), Report().to_nested_map(resolver=container)):
        assert isinstance(data["rows"], DeferProp)
        assert isinstance(data["export"], LazyProp)
    assert calls == []


def test_dataclass_provider(container):
    @dataclass(eq=False)
    class Card(DataProvider):
        title: str
        points: int = 0

    assert Card("Story", 3).to_flat_map(resolver=container) == {"title": "Story", "points": 3}


def test_properties_methods_and_static_data(container):
    class Summary(DataProvider):
        static_data = {"id": 1}

        def __init__(self):
            self.title = "Hi"

        def count(self) -> int:
            return 5

    assert Summary().to_flat_map(resolver=container) == {"title": "Hi", "count": 5, "id": 1}
    assert list(Summary().to_flat_map(resolver=container)) == ["title", "count", "id"]


class Tree(DataProvider):
    def child(self) -> "Tree":
        return Tree()


def test_unbounded_fresh_nesting_stops_at_depth_limit(container):
    with pytest.raises(CyclicReferenceError, match="deeper than 64 levels") as exc:
        Tree().to_nested_map(resolver=container)
    assert exc.value.limit == MAX_NESTING_DEPTH
    assert len(exc.value.path) == MAX_NESTING_DEPTH + 1
    # flat output only builds one level
    assert isinstance(Tree().to_flat_map(resolver=container)["child"], Tree)
