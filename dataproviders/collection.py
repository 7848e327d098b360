"""Ordered, conditionally composed sequence of providers and plain mappings."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel

from .container import Resolver, default_resolver
from .formatters import FormatterLike, NameFormatter, resolve_formatter
from .provider import DataProvider, Flattenable, enter, expand

logger = logging.getLogger(__name__)

Entry = Union[DataProvider, "ProviderCollection", Mapping, BaseModel, Flattenable]


class ProviderCollection:
    """Merges its entries left to right into one payload; later entries win.

    Usage:
        props = (
            ProviderCollection.collection(HeaderProvider(user), {"page": "home"})
            .when(user.is_admin, lambda c: c.add(AdminProvider()))
            .unless(is_embedded, lambda c: c.add(NavigationProvider()))
            .to_flat_map()
        )
    """

    def __init__(self, *entries: Entry) -> None:
        self._entries: List[Entry] = []
        for entry in entries:
            self.add(entry)

    @classmethod
    def collection(cls, *entries: Entry) -> "ProviderCollection":
        return cls(*entries)

    # ---- Building ----
    def add(self, entry: Entry) -> "ProviderCollection":
        if not isinstance(entry, (Mapping, BaseModel, Flattenable)):
            raise TypeError(f"Cannot add {type(entry).__name__} to a ProviderCollection")
        self._entries.append(entry)
        return self

    def when(self, condition: Any, callback: Callable[["ProviderCollection"], Any]) -> "ProviderCollection":
        """Run ``callback(self)`` now if ``condition`` holds.

        A callable condition is evaluated immediately with the collection.
        """
        if callable(condition):
            condition = condition(self)
        if condition:
            callback(self)
        return self

    def unless(self, condition: Any, callback: Callable[["ProviderCollection"], Any]) -> "ProviderCollection":
        if callable(condition):
            condition = condition(self)
        return self.when(not condition, callback)

    @property
    def entries(self) -> Tuple[Entry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(tuple(self._entries))

    # ---- Resolution ----
    def resolve(
        self,
        nested: bool = False,
        formatter: FormatterLike = None,
        resolver: Optional[Resolver] = None,
    ) -> Dict[str, Any]:
        """Merge every entry into one dict, all-or-nothing."""
        return self._compose(resolve_formatter(formatter), resolver or default_resolver(), nested, [])

    def to_flat_map(self, formatter: FormatterLike = None, resolver: Optional[Resolver] = None) -> Dict[str, Any]:
        return self.resolve(False, formatter, resolver)

    def to_nested_map(self, formatter: FormatterLike = None, resolver: Optional[Resolver] = None) -> Dict[str, Any]:
        return self.resolve(True, formatter, resolver)

    def _compose(self, formatter: NameFormatter, resolver: Resolver, nested: bool, path: list) -> Dict[str, Any]:
        path = enter(self, path)
        merged: Dict[str, Any] = {}
        for entry in self._entries:
            merged.update(self._reduce(entry, formatter, resolver, nested, path))
        logger.debug("Merged %d entries into %d keys (nested=%s)", len(self._entries), len(merged), nested)
        return merged

    @staticmethod
    def _reduce(entry: Entry, formatter: NameFormatter, resolver: Resolver, nested: bool, path: list) -> Dict[str, Any]:
        if isinstance(entry, BaseModel):
            data = entry.model_dump()
        elif isinstance(entry, Mapping):
            data = dict(entry)
        elif hasattr(entry, "_compose"):
            return entry._compose(formatter, resolver, nested, path)
        else:
            data = entry.to_flat_map(formatter=formatter, resolver=resolver)
        if nested:
            return {key: expand(value, formatter, resolver, path) for key, value in data.items()}
        return data


def collection(*entries: Entry) -> ProviderCollection:
    return ProviderCollection.collection(*entries)
