"""Search path resolver - provider discovery, enumeration and registry in one pass.

The resolver is an explicit context object: each instance owns its registry,
exclusion cache and resolved snapshot. Apps inject policy (settings, providers);
nothing is process-global.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Any

from .discovery import discover_providers
from .enumerator import EnumerationResult
from .enumerator import ProviderEnumerator
from .exclusion import RuntimeExclusionFilter
from .providers import SysPathProvider
from .providers import get_context_provider
from .registry import SearchPathRegistry
from .schema import SearchPathSettings

logger = logging.getLogger(__name__)


class SearchPathResolver:
    """
    Resolve the effective search path of the running host, exactly once per generation.

    Resolution order:
    1. System provider (sys.path by default)
    2. Caller provider chain, outermost ancestor first
    3. Current context provider
    4. Fallback environment variable (PYTHONPATH by default)

    The result is cached until override() or reset(). Concurrent first calls to
    resolve() share a single resolution run.
    """

    def __init__(
        self,
        settings: SearchPathSettings | None = None,
        system_provider: Any = None,
        caller_provider: Any = None,
        enumerator: ProviderEnumerator | None = None,
    ):
        """Initialize resolver with app-provided policy.

        Args:
            settings: Resolution policy (defaults to SearchPathSettings())
            system_provider: Process-wide provider (defaults to SysPathProvider())
            caller_provider: The caller's own provider; its parent chain is enumerated too
            enumerator: Adapter table for provider kinds (defaults to the built-in adapters)

        Example:
            >>> resolver = SearchPathResolver(caller_provider=plugin_provider)
            >>> for entry in resolver.resolve():
            ...     print(entry)
        """
        self.settings = settings or SearchPathSettings()
        self.system_provider = system_provider if system_provider is not None else SysPathProvider()
        self.caller_provider = caller_provider
        self.enumerator = enumerator or ProviderEnumerator(path_delimiter=self.settings.path_delimiter)

        self._lock = threading.Lock()
        self._resolved: tuple[Path, ...] | None = None
        self._generation = 0
        self._known_runtime_dirs: frozenset[str] = frozenset()
        self._enumeration_results: tuple[EnumerationResult, ...] = ()

    @property
    def is_resolved(self) -> bool:
        return self._resolved is not None

    @property
    def generation(self) -> int:
        """Incremented every time the cached result is discarded."""
        return self._generation

    @property
    def known_runtime_dirs(self) -> frozenset[str]:
        """Runtime-owned directories found by the last resolution run."""
        return self._known_runtime_dirs

    @property
    def enumeration_results(self) -> tuple[EnumerationResult, ...]:
        """Per-provider outcomes of the last provider-based resolution."""
        return self._enumeration_results

    def resolve(self) -> tuple[Path, ...]:
        """
        Return the unique existing directories and archives on the search path.

        Returns:
            Canonical paths in provider resolution order (empty if nothing resolved)
        """
        resolved = self._resolved
        if resolved is not None:
            return resolved

        with self._lock:
            if self._resolved is None:
                self._publish(self._resolve_from_providers())
            return self._resolved

    def override(self, raw_path_list: str) -> tuple[Path, ...]:
        """
        Replace the search path with an explicit delimited list, skipping providers.

        Entries are still normalized, deduplicated and manifest-expanded.

        Args:
            raw_path_list: Identifiers separated by settings.path_delimiter

        Returns:
            The new resolved search path
        """
        with self._lock:
            self._generation += 1
            registry = self._new_registry()
            registry.register_delimited(raw_path_list)
            self._enumeration_results = ()
            self._publish(registry)
            logger.debug(f"Search path overridden with {len(self._resolved)} entries")
            return self._resolved

    def reset(self) -> None:
        """Discard the cached result; the next resolve() rescans."""
        with self._lock:
            self._generation += 1
            self._resolved = None
            self._known_runtime_dirs = frozenset()
            self._enumeration_results = ()

    def _new_registry(self) -> SearchPathRegistry:
        return SearchPathRegistry(self.settings, RuntimeExclusionFilter(self.settings))

    def _publish(self, registry: SearchPathRegistry) -> None:
        self._known_runtime_dirs = registry.exclusion_filter.known_runtime_dirs
        self._resolved = registry.entries

    def _resolve_from_providers(self) -> SearchPathRegistry:
        registry = self._new_registry()

        providers = discover_providers(
            self.system_provider,
            caller_provider=self.caller_provider,
            context_provider=get_context_provider(),
        )
        results = []
        for provider in providers:
            result = self.enumerator.enumerate(provider)
            results.append(result)
            for identifier in result.identifiers:
                registry.register(identifier)
        self._enumeration_results = tuple(results)

        # Catch entries from provider kinds no adapter covers
        if self.settings.fallback_env_var:
            registry.register_delimited(os.environ.get(self.settings.fallback_env_var))

        logger.debug(f"Resolved search path with {len(registry)} entries from {len(providers)} providers")
        return registry


def get_search_path(
    caller_provider: Any = None,
    settings: SearchPathSettings | None = None,
) -> tuple[Path, ...]:
    """One-shot resolution with default providers.

    Example:
        >>> for entry in get_search_path():
        ...     print(entry)
    """
    return SearchPathResolver(settings=settings, caller_provider=caller_provider).resolve()
