"""Base class for page data providers.

A provider is a plain object whose public surface becomes a page payload::

    class DashboardProvider(DataProvider):
        static_data = {"section": "overview"}

        def __init__(self, user):
            self.user = user

        def stats(self, repo: MetricsRepository) -> dict:
            return repo.kpis()

        def rows(self):
            return defer(lambda: load_rows())

    DashboardProvider(user).to_flat_map()
    # {"user": ..., "stats": {...}, "rows": DeferProp(...), "section": "overview"}
"""
import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from pydantic import BaseModel

from .container import Resolver, default_resolver
from .errors import CyclicReferenceError
from .formatters import FormatterLike, NameFormatter, resolve_formatter
from .members import Member, MemberKind, MemberResolver, describe
from .rendering.props import DeferredValue

logger = logging.getLogger(__name__)

MAX_NESTING_DEPTH = 64


@runtime_checkable
class Flattenable(Protocol):
    """Protocol for objects that can be flattened into a props map."""

    def to_flat_map(self, formatter: FormatterLike = None, resolver: Optional[Resolver] = None) -> Dict[str, Any]: ...


class DataProvider:
    """Exposes public properties, public methods and ``static_data`` as one payload.

    ``static_data`` keys are taken literally and win over reflected members
    with the same (formatted) name.
    """

    static_data: Any = None

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        describe(cls, DataProvider)

    def members(self) -> List[Member]:
        """Exposed members in payload order, static entries last."""
        reflected = MemberResolver(DataProvider).members(self)
        return reflected + [Member(key, MemberKind.STATIC) for key in self._static_items()]

    def to_flat_map(self, formatter: FormatterLike = None, resolver: Optional[Resolver] = None) -> Dict[str, Any]:
        """Single-level payload; nested providers are kept as objects."""
        return self._compose(resolve_formatter(formatter), resolver or default_resolver(), nested=False, path=[])

    def to_nested_map(self, formatter: FormatterLike = None, resolver: Optional[Resolver] = None) -> Dict[str, Any]:
        """Payload with every nested provider expanded into a dict under its key."""
        return self._compose(resolve_formatter(formatter), resolver or default_resolver(), nested=True, path=[])

    def _static_items(self) -> Dict[str, Any]:
        data = self.static_data
        if data is None:
            return {}
        if isinstance(data, BaseModel):
            return data.model_dump()
        if isinstance(data, Mapping):
            return dict(data)
        raise TypeError(f"{type(self).__name__}.static_data must be a mapping or a pydantic model, got {type(data).__name__}")

    def _compose(self, formatter: NameFormatter, resolver: Resolver, nested: bool, path: list) -> Dict[str, Any]:
        path = enter(self, path)
        raw = MemberResolver(DataProvider, resolver).resolve(self)
        data = {formatter.format(name): value for name, value in raw.items()}
        data.update(self._static_items())
        if nested:
            data = {key: expand(value, formatter, resolver, path) for key, value in data.items()}
        logger.debug("Composed %s into %d keys (nested=%s)", type(self).__name__, len(data), nested)
        return data


def enter(node: Any, path: list) -> list:
    """Extend the active expansion path, failing if ``node`` is already on it.

    Providers that build a fresh child of their own kind on every call never
    revisit an object, so the path is also capped at MAX_NESTING_DEPTH.
    """
    if any(seen is node for seen in path):
        raise CyclicReferenceError([*path, node])
    if len(path) >= MAX_NESTING_DEPTH:
        raise CyclicReferenceError([*path, node], limit=MAX_NESTING_DEPTH)
    return [*path, node]


def expand(value: Any, formatter: NameFormatter, resolver: Resolver, path: list) -> Any:
    """Recursively expand Flattenables found in ``value`` for nested output.

    Deferred wrappers are returned untouched.
    """
    if isinstance(value, DeferredValue):
        return value
    compose = getattr(value, "_compose", None)
    if compose is not None and isinstance(value, Flattenable):
        return compose(formatter, resolver, True, path)
    if isinstance(value, Flattenable):
        flat = value.to_flat_map(formatter=formatter, resolver=resolver)
        return expand(flat, formatter, resolver, enter(value, path))
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, Mapping):
        return {key: expand(item, formatter, resolver, path) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [expand(item, formatter, resolver, path) for item in value]
    return value
