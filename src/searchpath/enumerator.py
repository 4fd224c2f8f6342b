"""Provider enumeration - extract a provider's contribution through adapters.

Providers are third-party objects with no shared interface. Each supported kind
is described by an adapter naming its qualified type and a zero-argument
accessor. New kinds are supported by registering an adapter, not by changing
call sites.
"""

import importlib.machinery
import logging
import os
import zipimport
from collections.abc import Iterable
from dataclasses import dataclass
from dataclasses import field
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict

from .exceptions import AccessorInvocationFailure
from .exceptions import SearchPathError
from .exceptions import UnsupportedProviderKind
from .providers import PathListProvider
from .utils import as_identifier
from .utils import qualified_type_name
from .utils import split_path_list

logger = logging.getLogger(__name__)


class ProviderAdapter(BaseModel):
    """Declares how one provider kind produces its path list."""

    model_config = ConfigDict(frozen=True)

    # Qualified type name ("module.QualName") matched against the provider's MRO
    type_name: str
    # Zero-argument method, property or plain attribute
    accessor: str


DEFAULT_ADAPTERS: list[ProviderAdapter] = [
    ProviderAdapter(type_name=qualified_type_name(PathListProvider), accessor="get_search_path"),
    ProviderAdapter(type_name=qualified_type_name(importlib.machinery.FileFinder), accessor="path"),
    ProviderAdapter(type_name=qualified_type_name(zipimport.zipimporter), accessor="archive"),
    ProviderAdapter(type_name="pkg_resources.WorkingSet", accessor="entries"),
]


@dataclass(frozen=True)
class EnumerationResult:
    """What one provider contributed, or why it contributed nothing."""

    provider_type: str
    identifiers: list[str] = field(default_factory=list)
    adapter: ProviderAdapter | None = None
    error: SearchPathError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ProviderEnumerator:
    """
    Ask providers for their raw identifiers.

    Example:
        >>> enumerator = ProviderEnumerator()
        >>> enumerator.register_adapter("myhost.loaders.PluginLoader", "plugin_dirs")
        >>> result = enumerator.enumerate(plugin_loader)
        >>> result.identifiers
        ['/opt/plugins/a', '/opt/plugins/b']
    """

    def __init__(self, adapters: list[ProviderAdapter] | None = None, path_delimiter: str = os.pathsep):
        self.path_delimiter = path_delimiter
        self._adapters: dict[str, ProviderAdapter] = {}
        for adapter in DEFAULT_ADAPTERS if adapters is None else adapters:
            self._adapters[adapter.type_name] = adapter

    @property
    def adapters(self) -> list[ProviderAdapter]:
        return list(self._adapters.values())

    def register_adapter(self, provider_type: type | str, accessor: str) -> ProviderAdapter:
        """
        Support a new provider kind.

        Args:
            provider_type: Class or qualified type name ("module.QualName")
            accessor: Zero-argument accessor returning a delimited string,
                     a collection, or an array of identifiers

        Returns:
            The registered adapter (replaces any adapter for the same type)
        """
        type_name = provider_type if isinstance(provider_type, str) else qualified_type_name(provider_type)
        adapter = ProviderAdapter(type_name=type_name, accessor=accessor)
        self._adapters[type_name] = adapter
        return adapter

    def adapter_for(self, provider: Any) -> tuple[type, ProviderAdapter] | None:
        """Find the adapter for the most specific matching type in the provider's MRO."""
        for cls in type(provider).__mro__:
            if cls is object:
                continue
            adapter = self._adapters.get(qualified_type_name(cls))
            if adapter is not None:
                return cls, adapter
        return None

    def enumerate(self, provider: Any) -> EnumerationResult:
        """
        Extract a provider's identifiers. Never raises.

        Args:
            provider: Provider of any kind

        Returns:
            EnumerationResult with identifiers, or with an UnsupportedProviderKind /
            AccessorInvocationFailure error and no identifiers
        """
        provider_type = qualified_type_name(type(provider))
        match = self.adapter_for(provider)
        if match is None:
            error = UnsupportedProviderKind(
                f"Found unknown provider type, cannot read its search path: {provider_type}",
                context={"provider_type": provider_type},
            )
            logger.warning(error.message)
            return EnumerationResult(provider_type=provider_type, error=error)

        owner, adapter = match
        try:
            result = self._invoke(provider, owner, adapter.accessor)
            identifiers = self._interpret(result, adapter)
        except AccessorInvocationFailure as e:
            logger.warning(e.message)
            return EnumerationResult(provider_type=provider_type, adapter=adapter, error=e)
        except Exception as e:
            error = AccessorInvocationFailure(
                f"Was not able to call {adapter.accessor}() in {adapter.type_name}: {e!r}",
                context={"provider_type": provider_type, "accessor": adapter.accessor},
            )
            logger.warning(error.message)
            return EnumerationResult(provider_type=provider_type, adapter=adapter, error=error)

        logger.debug(f"{provider_type} contributed {len(identifiers)} entries")
        return EnumerationResult(provider_type=provider_type, identifiers=identifiers, adapter=adapter)

    @staticmethod
    def _invoke(provider: Any, owner: type, accessor: str) -> Any:
        name = accessor
        # Private accessors live under the defining class's mangled name
        if accessor.startswith("__") and not accessor.endswith("__"):
            name = f"_{owner.__name__.lstrip('_')}{accessor}"
        value = getattr(provider, name)
        return value() if callable(value) else value

    def _interpret(self, result: Any, adapter: ProviderAdapter) -> list[str]:
        if result is None:
            return []
        if isinstance(result, str):
            return split_path_list(result, self.path_delimiter)
        if isinstance(result, bytes):
            return split_path_list(os.fsdecode(result), self.path_delimiter)
        if isinstance(result, os.PathLike):
            return [as_identifier(result)]
        if isinstance(result, Iterable):
            return [as_identifier(element) for element in result]
        raise AccessorInvocationFailure(
            f"{adapter.accessor}() in {adapter.type_name} returned unsupported type {type(result).__name__}",
            context={"provider_type": adapter.type_name, "accessor": adapter.accessor},
        )
