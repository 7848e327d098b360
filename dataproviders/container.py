"""Minimal dependency container used to satisfy provider method parameters.

The composition core only ever calls ``resolve(type) -> instance``. The
container adds bindings, singletons and constructor autowiring on top of that
so host applications have one place to register their services.
"""
from __future__ import annotations

import inspect
import logging
import threading
import typing
from typing import Any, Callable, Dict, List, Optional

from flask import current_app, has_app_context

from .errors import UnresolvableDependency

logger = logging.getLogger(__name__)

Resolver = Callable[[Any], Any]

_NoneType = type(None)


def _describe(func: Callable[..., Any]) -> str:
    return getattr(func, "__qualname__", None) or repr(func)


def _unwrap_optional(annotation: Any) -> Any:
    """``Optional[X]`` (or ``X | None``) resolves as ``X``."""
    args = typing.get_args(annotation)
    if args and _NoneType in args:
        remaining = [a for a in args if a is not _NoneType]
        if len(remaining) == 1:
            return remaining[0]
    return annotation


def _parameter_types(func: Callable[..., Any]) -> Dict[str, Any]:
    target = func.__init__ if inspect.isclass(func) else func
    try:
        return typing.get_type_hints(target)
    except (NameError, TypeError):
        # Forward references that cannot be evaluated fall back to raw annotations.
        return {}


def injected_arguments(func: Callable[..., Any], resolver: Resolver) -> Dict[str, Any]:
    """Build keyword arguments for ``func`` by resolving each parameter's type.

    Parameters with a default keep it when the resolver cannot satisfy them.
    Required parameters without an annotation, or whose type cannot be
    resolved, raise UnresolvableDependency.
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError) as e:
        raise UnresolvableDependency(_describe(func), "-", f"signature unavailable: {e}") from e

    hints = _parameter_types(func)
    kwargs: Dict[str, Any] = {}
    for name, param in signature.parameters.items():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        annotation = hints.get(name, param.annotation)
        has_default = param.default is not param.empty

        if annotation is param.empty or isinstance(annotation, str):
            if has_default:
                continue
            raise UnresolvableDependency(_describe(func), name, "parameter has no resolvable type annotation")

        try:
            kwargs[name] = resolver(_unwrap_optional(annotation))
        except UnresolvableDependency as e:
            if has_default:
                continue
            raise UnresolvableDependency(_describe(func), name, e.reason) from e
    return kwargs


class Container:
    """Type-keyed service container with autowiring of concrete classes."""

    def __init__(self) -> None:
        self._factories: Dict[Any, Callable[[], Any]] = {}
        self._shared: Dict[Any, bool] = {}
        self._instances: Dict[Any, Any] = {}
        self._local = threading.local()
        self._lock = threading.RLock()

    # ---- Registration ----
    def bind(self, abstract: Any, factory: Optional[Callable[..., Any]] = None, singleton: bool = False) -> "Container":
        """Register ``factory`` for ``abstract``; factory parameters are injected too."""
        concrete = factory if factory is not None else abstract
        self._factories[abstract] = lambda: self.call(concrete)
        self._shared[abstract] = singleton
        self._instances.pop(abstract, None)
        return self

    def singleton(self, abstract: Any, factory: Optional[Callable[..., Any]] = None) -> "Container":
        return self.bind(abstract, factory, singleton=True)

    def instance(self, abstract: Any, obj: Any) -> "Container":
        self._instances[abstract] = obj
        return self

    def bound(self, abstract: Any) -> bool:
        return abstract in self._instances or abstract in self._factories

    def forget(self, abstract: Any) -> None:
        self._factories.pop(abstract, None)
        self._shared.pop(abstract, None)
        self._instances.pop(abstract, None)

    # ---- Resolution ----
    def resolve(self, abstract: Any) -> Any:
        """Return an instance for ``abstract``, autowiring unbound classes."""
        if abstract in self._instances:
            return self._instances[abstract]

        resolving = self._resolving()
        if abstract in resolving:
            chain = " -> ".join(_describe(a) for a in [*resolving, abstract])
            raise UnresolvableDependency(_describe(abstract), "__init__", f"circular dependency ({chain})")

        factory = self._factories.get(abstract)
        if factory is None:
            if not _autowirable(abstract):
                logger.debug("No binding for %r", abstract)
                raise UnresolvableDependency(_describe(abstract), "-", "no binding registered and type cannot be autowired")
            factory = lambda: self.call(abstract)  # noqa: E731

        if not self._shared.get(abstract):
            return self._build(abstract, factory)

        with self._lock:
            # Another thread may have finished building it while this one waited.
            if abstract not in self._instances:
                self._instances[abstract] = self._build(abstract, factory)
            return self._instances[abstract]

    def _resolving(self) -> List[Any]:
        """Types being built by the current thread, outermost first."""
        stack = getattr(self._local, "stack", None)
        if stack is None:
            stack = self._local.stack = []
        return stack

    def _build(self, abstract: Any, factory: Callable[[], Any]) -> Any:
        resolving = self._resolving()
        resolving.append(abstract)
        try:
            return factory()
        finally:
            resolving.pop()

    __call__ = resolve

    def call(self, func: Callable[..., Any]) -> Any:
        """Invoke ``func`` with every parameter injected from this container."""
        return func(**injected_arguments(func, self.resolve))


def _autowirable(abstract: Any) -> bool:
    """Only user-defined concrete classes are built without a binding."""
    if not inspect.isclass(abstract) or inspect.isabstract(abstract):
        return False
    if getattr(abstract, "_is_protocol", False):
        return False
    return abstract.__module__ != "builtins"


# Process-wide container used outside a Flask application context
_container_singleton: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get the process-wide Container, creating it on first call."""
    global _container_singleton
    with _container_lock:
        if _container_singleton is None:
            _container_singleton = Container()
    return _container_singleton


def current_container() -> Container:
    """Container of the active Flask app, else the process-wide one."""
    if has_app_context():
        container = current_app.extensions.get("dataproviders")
        if container is not None:
            return container
    return get_container()


def default_resolver() -> Resolver:
    return current_container().resolve
