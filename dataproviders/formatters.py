"""Attribute name formatters applied to reflected member names.

Three strategies ship with the package:
- AsWritten: keep the member name exactly as declared (default)
- SnakeCase: ``fullName`` -> ``full_name``
- CamelCase: ``full_name`` -> ``fullName``

Custom strategies are any object with a ``format(name) -> str`` method, or a
plain callable with the same signature.
"""
import importlib
import re
from typing import Callable, List, Protocol, Union, runtime_checkable

from .config import get_settings
from .errors import InvalidFormatterError

_SEPARATORS = re.compile(r"[\s_\-]+")


@runtime_checkable
class NameFormatter(Protocol):
    """Protocol for strategies that map a member name to an output key."""

    def format(self, name: str) -> str: ...


def split_words(name: str) -> List[str]:
    """Split an identifier into words at separators and case transitions.

    Digits stay attached to the word before them and an acronym run ends
    before its last capital when a lowercase letter follows (``HTTPServer``
    splits into ``HTTP`` and ``Server``).
    """
    words: List[str] = []
    for chunk in _SEPARATORS.split(name):
        start = 0
        for i in range(1, len(chunk)):
            prev, cur = chunk[i - 1], chunk[i]
            if not cur.isupper():
                continue
            nxt = chunk[i + 1] if i + 1 < len(chunk) else ""
            if not prev.isupper() or nxt.islower():
                words.append(chunk[start:i])
                start = i
        if chunk[start:]:
            words.append(chunk[start:])
    return [w for w in words if w]


class AsWritten:
    """Identity formatter."""

    def format(self, name: str) -> str:
        return name

    def __repr__(self) -> str:
        return "AsWritten()"


class SnakeCase:
    """Lowercase words joined by underscores."""

    def format(self, name: str) -> str:
        return "_".join(w.lower() for w in split_words(name))

    def __repr__(self) -> str:
        return "SnakeCase()"


class CamelCase:
    """First word lowercase, following words capitalized; acronyms kept.

    A word that :func:`split_words` would not find again in the output (one
    starting with a digit, or one glued to a preceding capital run) is merged
    into the word before it, so formatting an already formatted name is a no-op.
    """

    def format(self, name: str) -> str:
        words: List[str] = []
        for word in split_words(name):
            if words and self._joins(words, word):
                words[-1] += word
            else:
                words.append(word)
        return "".join(self._render(w, i == 0) for i, w in enumerate(words))

    @staticmethod
    def _render(word: str, first: bool) -> str:
        if first:
            return word.lower()
        if len(word) > 1 and word.isupper():
            return word
        return word[:1].upper() + word[1:].lower()

    def _joins(self, words: List[str], word: str) -> bool:
        piece = self._render(word, False)
        if not piece[:1].isupper():
            return True
        prev = self._render(words[-1], len(words) == 1)
        # After a capital, a new word only starts before a lowercase letter.
        return prev[-1:].isupper() and not piece[1:2].islower()

    def __repr__(self) -> str:
        return "CamelCase()"


class _CallableFormatter:
    """Adapts a plain ``str -> str`` callable to the NameFormatter protocol."""

    def __init__(self, fn: Callable[[str], str]) -> None:
        self.fn = fn

    def format(self, name: str) -> str:
        return self.fn(name)

    def __repr__(self) -> str:
        return f"_CallableFormatter({self.fn!r})"


BUILTIN_FORMATTERS = {
    "aswritten": AsWritten,
    "snakecase": SnakeCase,
    "camelcase": CamelCase,
}

FormatterLike = Union[None, str, NameFormatter, type, Callable[[str], str]]


def _import_formatter(path: str):
    module_name, sep, attr = path.partition(":")
    if not sep:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise InvalidFormatterError(f"Unknown attribute name formatter '{path}'")
    try:
        module = importlib.import_module(module_name)
        return getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise InvalidFormatterError(f"Cannot import attribute name formatter '{path}': {e}") from e


def resolve_formatter(value: FormatterLike = None) -> NameFormatter:
    """Turn a formatter setting into a NameFormatter instance.

    ``None`` reads the process-wide ``attribute_name_formatter`` setting.
    Strings are matched against the built-in names (ignoring case and
    separators) before being treated as an import path.
    """
    if value is None:
        value = get_settings().attribute_name_formatter

    if isinstance(value, str):
        builtin = BUILTIN_FORMATTERS.get(_SEPARATORS.sub("", value).lower())
        value = builtin if builtin is not None else _import_formatter(value)

    if isinstance(value, type):
        value = value()

    if isinstance(value, NameFormatter):
        return value
    if callable(value):
        return _CallableFormatter(value)
    raise InvalidFormatterError(f"{value!r} is not an attribute name formatter")
