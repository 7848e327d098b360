"""Hand-off between composed payloads and the page rendering layer."""
import logging
from collections.abc import Mapping
from typing import Any, Callable, Collection, Dict, List, Optional, Tuple

from flask import has_request_context, request
from flask.json.provider import DefaultJSONProvider
from pydantic import BaseModel, Field

from ..container import current_container
from ..formatters import FormatterLike
from ..provider import Flattenable, enter
from .props import AlwaysProp, DeferProp, DeferredValue, LazyProp, OnceProp

logger = logging.getLogger(__name__)


class Page(BaseModel):
    """Page object handed to the client: which view, with which props."""

    component: str
    props: Dict[str, Any] = Field(default_factory=dict)
    url: str = "/"
    deferred_props: Dict[str, List[str]] = Field(default_factory=dict, serialization_alias="deferredProps")


def to_props(
    data: Any,
    nested: bool = False,
    formatter: FormatterLike = None,
    resolver: Optional[Callable[[Any], Any]] = None,
) -> Dict[str, Any]:
    """Reduce a provider, collection or mapping to the props dict of a render call."""
    if data is None:
        return {}
    if isinstance(data, Flattenable):
        if nested and hasattr(data, "to_nested_map"):
            return data.to_nested_map(formatter=formatter, resolver=resolver)
        return data.to_flat_map(formatter=formatter, resolver=resolver)
    if isinstance(data, BaseModel):
        return data.model_dump()
    if isinstance(data, Mapping):
        return dict(data)
    raise TypeError(f"Cannot render {type(data).__name__} as page props")


def request_path() -> str:
    return request.path if has_request_context() else "/"


class PropsResolver:
    """Resolves a props payload for a full page load or a partial reload.

    Full load (no ``only``/``except_``): LazyProp and DeferProp are left out,
    DeferProp keys are reported per group for loading after render.
    Partial reload: only requested keys are kept, AlwaysProp is always kept,
    and unrequested LazyProp/DeferProp/OnceProp values are skipped.
    """

    def __init__(
        self,
        invoke: Optional[Callable[[Callable[..., Any]], Any]] = None,
        formatter: FormatterLike = None,
    ) -> None:
        self.invoke = invoke
        self.formatter = formatter

    def resolve(
        self,
        props: Mapping,
        only: Optional[Collection[str]] = None,
        except_: Optional[Collection[str]] = None,
    ) -> Tuple[Dict[str, Any], Dict[str, List[str]]]:
        invoke = self.invoke or current_container().call
        partial = only is not None or except_ is not None
        resolved: Dict[str, Any] = {}
        deferred: Dict[str, List[str]] = {}

        for key, value in props.items():
            if not self._included(key, value, only, except_):
                if not partial and isinstance(value, DeferProp):
                    deferred.setdefault(value.group, []).append(key)
                continue
            resolved[key] = self._plain(value, invoke, [])

        logger.debug("Resolved %d props (partial=%s, deferred=%s)", len(resolved), partial, deferred)
        return resolved, deferred

    @staticmethod
    def _included(key: str, value: Any, only, except_) -> bool:
        if isinstance(value, AlwaysProp):
            return True
        if only is None and except_ is None:
            return not isinstance(value, (LazyProp, DeferProp))
        if only is not None and key not in only:
            return False
        if except_ is not None and key in except_:
            return False
        if only is None:
            return not isinstance(value, (LazyProp, DeferProp, OnceProp))
        return True

    def _plain(self, value: Any, invoke: Callable[[Callable[..., Any]], Any], path: list) -> Any:
        if isinstance(value, DeferredValue):
            value = value(invoke)
        if isinstance(value, Flattenable):
            path = enter(value, path)
            value = to_props(value, formatter=self.formatter)
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json")
        if isinstance(value, Mapping):
            return {k: self._plain(v, invoke, path) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._plain(v, invoke, path) for v in value]
        return value


class ProviderJSONProvider(DefaultJSONProvider):
    """Flask JSON provider that understands providers, prop wrappers and models."""

    @staticmethod
    def default(o: Any) -> Any:
        if isinstance(o, DeferredValue):
            return o(current_container().call)
        if isinstance(o, Flattenable):
            return to_props(o, nested=True)
        if isinstance(o, BaseModel):
            return o.model_dump(mode="json")
        return DefaultJSONProvider.default(o)
