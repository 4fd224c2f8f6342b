"""Protocol for providers that follow this library's own convention.

Providers are third-party objects with no common interface; the enumerator
reaches them through adapters. This protocol only describes the shape the
built-in providers (and any new provider written for this library) share.
"""

from typing import Any
from typing import Protocol
from typing import runtime_checkable


@runtime_checkable
class PathProvider(Protocol):
    """A provider with an explicit parent and a path-list accessor.

    Example implementations:
    - SysPathProvider: live view of sys.path
    - PathListProvider: fixed list, e.g. a plugin directory set
    """

    parent: Any

    def get_search_path(self) -> list[str]:
        """Return raw identifiers in lookup order.

        Returns:
            Identifiers (paths, file URLs or jar: references)
        """
        ...
