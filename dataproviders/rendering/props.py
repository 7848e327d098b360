"""Prop wrappers whose resolution timing belongs to the rendering layer.

The composition core treats every wrapper as an opaque value: it is stored in
the payload untouched and only the rendering layer decides when to call it.

- LazyProp: left out of the first page load; resolved only when a partial
  reload asks for it by key.
- DeferProp: left out of the first page load and fetched right after the page
  has rendered, batched by ``group``.
- AlwaysProp: resolved on every load, including partial reloads that did not
  ask for it.
- OnceProp: resolved on the first page load; partial reloads skip it unless it
  is requested explicitly.
"""
from typing import Any, Callable, Optional


class DeferredValue:
    """Base wrapper around a value or a zero-argument callback."""

    def __init__(self, callback: Any) -> None:
        self.callback = callback

    def __call__(self, invoke: Optional[Callable[[Callable[..., Any]], Any]] = None) -> Any:
        """Resolve the wrapped value.

        ``invoke`` lets the caller inject callback parameters, e.g.
        ``Container.call``; by default the callback is called without arguments.
        """
        if not callable(self.callback):
            return self.callback
        if invoke is not None:
            return invoke(self.callback)
        return self.callback()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.callback!r})"


class LazyProp(DeferredValue):
    pass


class DeferProp(DeferredValue):
    def __init__(self, callback: Any, group: str = "default") -> None:
        super().__init__(callback)
        self.group = group

    def __repr__(self) -> str:
        return f"DeferProp({self.callback!r}, group={self.group!r})"


class AlwaysProp(DeferredValue):
    pass


class OnceProp(DeferredValue):
    pass


def lazy(callback: Callable[..., Any]) -> LazyProp:
    return LazyProp(callback)


def defer(callback: Callable[..., Any], group: str = "default") -> DeferProp:
    return DeferProp(callback, group)


def always(value: Any) -> AlwaysProp:
    return AlwaysProp(value)


def once(callback: Callable[..., Any]) -> OnceProp:
    return OnceProp(callback)
