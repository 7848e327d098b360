from typing import Optional


class DataProviderError(Exception):
    """Base class for errors raised while composing provider data."""


class UnresolvableDependency(DataProviderError, LookupError):
    """A required parameter could not be satisfied by the container."""

    def __init__(self, target: str, parameter: str, reason: str) -> None:
        self.target = target
        self.parameter = parameter
        self.reason = reason
        super().__init__(f"Cannot resolve parameter '{parameter}' of {target}: {reason}")


class CyclicReferenceError(DataProviderError):
    """A provider reached itself while being expanded into a nested map."""

    def __init__(self, path: list, limit: Optional[int] = None) -> None:
        self.path = path
        self.limit = limit
        chain = " -> ".join(type(p).__name__ for p in path)
        if limit is None:
            super().__init__(f"Cyclic provider reference: {chain}")
        else:
            super().__init__(f"Provider nesting deeper than {limit} levels: {chain}")


class InvalidFormatterError(DataProviderError, ValueError):
    """The configured attribute name formatter is unknown or not importable."""


class ScaffoldError(DataProviderError):
    """A provider skeleton could not be generated."""
