"""Discovery and evaluation of the members a provider exposes.

Class-level members are described once per provider type, in the order the
class body declares them, and cached:

- properties: annotated names, class data attributes, ``property`` and
  ``cached_property`` descriptors, ``__slots__`` entries
- methods: plain instance functions

Instance attributes assigned at runtime are read from the live object on each
resolution pass. Names starting with an underscore and members decorated with
:func:`internal` are never exposed.
"""
import ast
import enum
import functools
import inspect
import logging
import textwrap
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from .container import Resolver, default_resolver, injected_arguments

logger = logging.getLogger(__name__)

INTERNAL_MARKER = "__dataprovider_internal__"

# Marks an optional property that has no value on the instance.
_UNSET = object()


class MemberKind(str, enum.Enum):
    PROPERTY = "property"
    METHOD = "method"
    STATIC = "static"


@dataclass(frozen=True)
class Member:
    """A named, resolvable unit on a provider."""

    name: str
    kind: MemberKind
    accessor: Optional[Callable[[Any, Resolver], Any]] = None


@dataclass(frozen=True)
class ClassMembers:
    properties: Tuple[Member, ...]
    methods: Tuple[Member, ...]

    @property
    def names(self) -> frozenset:
        return frozenset(m.name for m in self.properties + self.methods)


def internal(member):
    """Keep a public method or property out of the provider payload."""
    if isinstance(member, property):
        target = member.fget
    elif isinstance(member, functools.cached_property):
        target = member.func
    else:
        target = member
    setattr(target, INTERNAL_MARKER, True)
    return member


def is_public(name: str) -> bool:
    return not name.startswith("_")


def _is_internal(value: Any) -> bool:
    if isinstance(value, property):
        value = value.fget
    elif isinstance(value, functools.cached_property):
        value = value.func
    return bool(getattr(value, INTERNAL_MARKER, False))


# ---- Accessors ----
def _read(name: str, optional: bool = False) -> Callable[[Any, Resolver], Any]:
    def read(obj: Any, resolver: Resolver) -> Any:
        if optional:
            try:
                return getattr(obj, name)
            except AttributeError:
                # Annotation-only name or empty slot: nothing assigned yet.
                return _UNSET
        return getattr(obj, name)

    return read


def _invoke(name: str) -> Callable[[Any, Resolver], Any]:
    def invoke(obj: Any, resolver: Resolver) -> Any:
        bound = getattr(obj, name)
        return bound(**injected_arguments(bound, resolver))

    return invoke


def _classify(name: str, value: Any) -> Optional[Member]:
    """Member for a class ``__dict__`` entry, or None when it is not exposed."""
    if isinstance(value, (staticmethod, classmethod)) or inspect.isclass(value) or inspect.isbuiltin(value):
        return None
    if _is_internal(value):
        return None
    if inspect.isfunction(value):
        return Member(name, MemberKind.METHOD, _invoke(name))
    if inspect.ismemberdescriptor(value):
        return Member(name, MemberKind.PROPERTY, _read(name, optional=True))
    return Member(name, MemberKind.PROPERTY, _read(name))


# ---- Declaration order ----
def _bound_names(stmt: ast.stmt) -> List[str]:
    if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
        return [stmt.name]
    if isinstance(stmt, ast.AnnAssign):
        targets = [stmt.target]
    elif isinstance(stmt, ast.Assign):
        targets = stmt.targets
    else:
        return []
    return [node.id for target in targets for node in ast.walk(target) if isinstance(node, ast.Name)]


@functools.lru_cache(maxsize=None)
def _source_positions(klass: type) -> Dict[str, int]:
    """Position of each name bound in the class body, or {} without source."""
    try:
        tree = ast.parse(textwrap.dedent(inspect.getsource(klass)))
    except (OSError, TypeError, SyntaxError):
        return {}
    node = tree.body[0] if tree.body else None
    if not isinstance(node, ast.ClassDef):
        return {}
    positions: Dict[str, int] = {}
    for stmt in node.body:
        for name in _bound_names(stmt):
            positions.setdefault(name, len(positions))
    return positions


def _declaration_order(klass: type, names: List[str]) -> List[str]:
    """Annotated and assigned names of ``klass`` in source order.

    Names the class body does not bind (slots, generated attributes) follow in
    reflection order; without source, annotations precede namespace entries.
    """
    names = list(dict.fromkeys(names))
    positions = _source_positions(klass)
    if positions:
        names.sort(key=lambda name: positions.get(name, len(positions)))
    return names


@functools.lru_cache(maxsize=None)
def describe(cls: type, base: type) -> ClassMembers:
    """Describe the public members ``cls`` declares below ``base``.

    Classes are walked base-first; a name keeps the position of its first
    declaration while its kind and accessor follow the most derived one.
    """
    stop = set(base.__mro__)
    reserved = {name for name in dir(base) if is_public(name)}
    properties: Dict[str, Member] = {}
    methods: Dict[str, Member] = {}

    def place(name: str, member: Optional[Member]) -> None:
        if member is None:
            properties.pop(name, None)
            methods.pop(name, None)
            return
        same, other = (properties, methods) if member.kind is MemberKind.PROPERTY else (methods, properties)
        other.pop(name, None)
        same[name] = member

    for klass in reversed(cls.__mro__):
        if klass in stop:
            continue
        namespace = vars(klass)
        for name in _declaration_order(klass, [*inspect.get_annotations(klass), *namespace]):
            if not is_public(name) or name in reserved:
                continue
            if name in namespace:
                place(name, _classify(name, namespace[name]))
            elif name not in properties and name not in methods:
                place(name, Member(name, MemberKind.PROPERTY, _read(name, optional=True)))

    described = ClassMembers(tuple(properties.values()), tuple(methods.values()))
    logger.debug(
        "Described %s: %d properties, %d methods",
        cls.__qualname__, len(described.properties), len(described.methods),
    )
    return described


class MemberResolver:
    """Evaluates the exposed members of a provider instance, in declaration order."""

    def __init__(self, base: type, resolver: Optional[Resolver] = None) -> None:
        self.base = base
        self.resolver = resolver
        self.reserved = frozenset(name for name in dir(base) if is_public(name))

    def members(self, obj: Any) -> List[Member]:
        """Properties (class-declared, then instance-only) followed by methods."""
        described = describe(type(obj), self.base)
        declared = described.names
        attrs = getattr(obj, "__dict__", {})
        properties = list(described.properties)
        properties += [
            Member(name, MemberKind.PROPERTY, _read(name))
            for name in attrs
            if is_public(name) and name not in self.reserved and name not in declared
        ]
        methods = []
        for member in described.methods:
            if member.name in attrs:
                # An instance attribute shadowing a method is read, never called.
                properties.append(Member(member.name, MemberKind.PROPERTY, _read(member.name)))
            else:
                methods.append(member)
        return [*properties, *methods]

    def resolve(self, obj: Any) -> Dict[str, Any]:
        """Map raw member names to their current values.

        Exceptions raised by a property or method propagate unchanged.
        """
        resolver = self.resolver or default_resolver()
        values: Dict[str, Any] = {}
        for member in self.members(obj):
            value = member.accessor(obj, resolver)
            if value is not _UNSET:
                values[member.name] = value
        return values
