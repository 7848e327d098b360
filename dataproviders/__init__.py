"""Compose page props from plain provider objects.

Public exports:
- DataProvider, ProviderCollection, collection, Flattenable, internal
- AsWritten, SnakeCase, CamelCase, resolve_formatter
- Container, get_container
- prop wrappers: lazy, defer, always, once
- rendering: to_props, PropsResolver, DashPage, DataProviders (Flask extension)
"""
from .errors import (
    CyclicReferenceError,
    DataProviderError,
    InvalidFormatterError,
    ScaffoldError,
    UnresolvableDependency,
)
from .config import Settings, get_settings
from .formatters import AsWritten, CamelCase, NameFormatter, SnakeCase, resolve_formatter
from .container import Container, current_container, get_container
from .members import Member, MemberKind, internal
from .provider import DataProvider, Flattenable
from .collection import ProviderCollection, collection
from .rendering.props import AlwaysProp, DeferProp, DeferredValue, LazyProp, OnceProp, always, defer, lazy, once
from .rendering.bridge import Page, PropsResolver, ProviderJSONProvider, to_props
from .rendering.dash_page import DashPage
from .ext import DataProviders

__all__ = [
    "CyclicReferenceError",
    "DataProviderError",
    "InvalidFormatterError",
    "ScaffoldError",
    "UnresolvableDependency",
    "Settings",
    "get_settings",
    "AsWritten",
    "CamelCase",
    "NameFormatter",
    "SnakeCase",
    "resolve_formatter",
    "Container",
    "current_container",
    "get_container",
    "Member",
    "MemberKind",
    "internal",
    "DataProvider",
    "Flattenable",
    "ProviderCollection",
    "collection",
    "AlwaysProp",
    "DeferProp",
    "DeferredValue",
    "LazyProp",
    "OnceProp",
    "always",
    "defer",
    "lazy",
    "once",
    "Page",
    "PropsResolver",
    "ProviderJSONProvider",
    "to_props",
    "DashPage",
    "DataProviders",
]
