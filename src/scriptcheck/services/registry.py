# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Host service registry: the `bundleContext` handed to scripts.

`ServiceRegistry` is the protocol the probe relies on. `InMemoryServiceRegistry`
is a thread-safe implementation with per-reference use counts, suitable for
embedding hosts and tests.
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from ..errors import InvalidFilterError

OBJECT_CLASS = "objectClass"
SERVICE_RANKING = "service.ranking"

Predicate = Callable[[Mapping[str, Any]], bool]


def type_name_of(service_type: Any) -> str:
    """Registry key for a class or an already qualified name."""
    if isinstance(service_type, str):
        return service_type
    if isinstance(service_type, type):
        return f"{service_type.__module__}.{service_type.__qualname__}"
    raise TypeError(f"Expected a class or a type name, got {type(service_type).__name__}")


@dataclass(frozen=True, eq=False)
class ServiceReference:
    service_id: int
    type_names: tuple[str, ...]
    properties: Mapping[str, Any] = field(default_factory=dict)

    @property
    def ranking(self) -> int:
        try:
            return int(self.properties.get(SERVICE_RANKING, 0))
        except (TypeError, ValueError):
            return 0

    def __hash__(self) -> int:
        return hash(self.service_id)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ServiceReference) and other.service_id == self.service_id


class ServiceRegistry(Protocol):
    def get_service_reference(self, type_name: str) -> ServiceReference | None: ...

    def get_service_references(self, type_name: str, filter: str | None = None) -> list[ServiceReference]: ...

    def get_service(self, reference: ServiceReference) -> Any: ...

    def unget_service(self, reference: ServiceReference) -> bool: ...


# ── Filters ──────────────────────────────────────────────────────────────────


class _FilterParser:
    """Parser for the LDAP-style filter subset: (k=v), (k=*), (k=a*b), (k>=v), (k<=v), &, |, !."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def parse(self) -> Predicate:
        predicate = self._filter()
        self._skip_ws()
        if self.pos != len(self.text):
            self._fail("trailing characters")
        return predicate

    def _fail(self, reason: str) -> None:
        raise InvalidFilterError(f"Invalid filter {self.text!r} at position {self.pos}: {reason}")

    def _skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def _expect(self, char: str) -> None:
        self._skip_ws()
        if self.pos >= len(self.text) or self.text[self.pos] != char:
            self._fail(f"expected {char!r}")
        self.pos += 1

    def _filter(self) -> Predicate:
        self._expect("(")
        self._skip_ws()
        if self.pos >= len(self.text):
            self._fail("unexpected end")
        op = self.text[self.pos]
        if op in "&|":
            self.pos += 1
            operands = self._filter_list()
            combine = all if op == "&" else any
            predicate: Predicate = lambda props, ops=operands, fn=combine: fn(p(props) for p in ops)  # noqa: E731
        elif op == "!":
            self.pos += 1
            inner = self._filter()
            predicate = lambda props: not inner(props)  # noqa: E731
        else:
            predicate = self._item()
        self._expect(")")
        return predicate

    def _filter_list(self) -> list[Predicate]:
        operands: list[Predicate] = []
        self._skip_ws()
        while self.pos < len(self.text) and self.text[self.pos] == "(":
            operands.append(self._filter())
            self._skip_ws()
        if not operands:
            self._fail("empty filter list")
        return operands

    def _item(self) -> Predicate:
        end = self.text.find(")", self.pos)
        if end < 0:
            self._fail("unterminated item")
        item = self.text[self.pos : end]
        self.pos = end
        for op in (">=", "<=", "="):
            key, sep, value = item.partition(op)
            if sep:
                break
        key = key.strip()
        if not sep or not key:
            self._fail(f"malformed item {item!r}")
        return _item_predicate(key, op, value.strip())


def _as_values(raw: Any) -> list[Any]:
    if isinstance(raw, (list, tuple, set, frozenset)):
        return list(raw)
    return [raw]


def _compare(actual: Any, expected: str, op: str) -> bool:
    try:
        left: Any = float(actual)
        right: Any = float(expected)
    except (TypeError, ValueError):
        left, right = str(actual), expected
    return left >= right if op == ">=" else left <= right


def _wildcard_match(value: str, pattern: str) -> bool:
    pieces = pattern.split("*")
    if not value.startswith(pieces[0]):
        return False
    index = len(pieces[0])
    for piece in pieces[1:-1]:
        found = value.find(piece, index)
        if found < 0:
            return False
        index = found + len(piece)
    return value[index:].endswith(pieces[-1]) if len(pieces) > 1 else value == pattern


def _item_predicate(key: str, op: str, expected: str) -> Predicate:
    def predicate(props: Mapping[str, Any]) -> bool:
        if key not in props:
            return False
        if op == "=" and expected == "*":
            return True
        for actual in _as_values(props[key]):
            if op == "=":
                if "*" in expected:
                    if _wildcard_match(str(actual), expected):
                        return True
                elif str(actual) == expected:
                    return True
            elif _compare(actual, expected, op):
                return True
        return False

    return predicate


def parse_filter(text: str | None) -> Predicate:
    if text is None or not text.strip():
        return lambda _props: True
    return _FilterParser(text.strip()).parse()


# ── In-memory registry ───────────────────────────────────────────────────────


class InMemoryServiceRegistry:
    """Thread-safe service registry shared by every probe of a host."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._services: dict[ServiceReference, Any] = {}
        self._use_counts: dict[ServiceReference, int] = {}

    def register(
        self,
        service_types: Any | Iterable[Any],
        service: Any,
        properties: Mapping[str, Any] | None = None,
    ) -> ServiceReference:
        if isinstance(service_types, (str, type)):
            service_types = [service_types]
        type_names = tuple(type_name_of(t) for t in service_types)
        props = dict(properties or {})
        props[OBJECT_CLASS] = list(type_names)
        with self._lock:
            reference = ServiceReference(next(self._ids), type_names, props)
            self._services[reference] = service
            self._use_counts[reference] = 0
        return reference

    def unregister(self, reference: ServiceReference) -> None:
        with self._lock:
            self._services.pop(reference, None)
            self._use_counts.pop(reference, None)

    def get_service_reference(self, type_name: str) -> ServiceReference | None:
        references = self.get_service_references(type_name)
        return references[0] if references else None

    def get_service_references(self, type_name: str, filter: str | None = None) -> list[ServiceReference]:
        predicate = parse_filter(filter)
        with self._lock:
            candidates = [ref for ref in self._services if type_name in ref.type_names]
        matches = [ref for ref in candidates if predicate(ref.properties)]
        return sorted(matches, key=lambda ref: (-ref.ranking, ref.service_id))

    def get_service(self, reference: ServiceReference) -> Any:
        with self._lock:
            if reference not in self._services:
                return None
            self._use_counts[reference] += 1
            return self._services[reference]

    def unget_service(self, reference: ServiceReference) -> bool:
        with self._lock:
            count = self._use_counts.get(reference, 0)
            if count <= 0:
                return False
            self._use_counts[reference] = count - 1
            return True

    def use_count(self, reference: ServiceReference) -> int:
        with self._lock:
            return self._use_counts.get(reference, 0)

    @property
    def outstanding(self) -> int:
        with self._lock:
            return sum(self._use_counts.values())


__all__ = [
    "InMemoryServiceRegistry",
    "OBJECT_CLASS",
    "SERVICE_RANKING",
    "ServiceReference",
    "ServiceRegistry",
    "parse_filter",
    "type_name_of",
]
