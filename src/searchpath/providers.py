"""Built-in path providers and the current context provider.

A provider is any object that contributes raw identifiers to the search path.
The engine does not require a shared interface (see enumerator.py); the classes
here are simply the providers this library ships.
"""

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from contextvars import Token
from typing import Any


class PathListProvider:
    """Provider backed by a fixed list of identifiers, optionally chained to a parent."""

    def __init__(self, entries: list[str] | None = None, parent: Any = None):
        self.entries = list(entries or [])
        self.parent = parent

    def get_search_path(self) -> list[str]:
        return list(self.entries)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.entries!r})"


class SysPathProvider(PathListProvider):
    """The process-wide default provider: a live view of sys.path."""

    def get_search_path(self) -> list[str]:
        # "" on sys.path stands for the current directory
        return [entry or "." for entry in sys.path]

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


_context_provider: ContextVar[Any] = ContextVar("searchpath_context_provider", default=None)


def get_context_provider() -> Any:
    """Return the provider associated with the current thread/task, if any."""
    return _context_provider.get()


def set_context_provider(provider: Any) -> Token:
    """Associate a provider with the current context; returns a token for reset."""
    return _context_provider.set(provider)


def reset_context_provider(token: Token) -> None:
    _context_provider.reset(token)


@contextmanager
def use_context_provider(provider: Any) -> Iterator[Any]:
    """Make a provider the context provider for the duration of a with-block.

    Example:
        >>> with use_context_provider(PathListProvider(["plugins/"])):
        ...     paths = SearchPathResolver().resolve()
    """
    token = set_context_provider(provider)
    try:
        yield provider
    finally:
        reset_context_provider(token)
