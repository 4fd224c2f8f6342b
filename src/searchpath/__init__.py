"""searchpath - Resolve the effective search path of a running host.

Public API: SearchPathResolver is the entry point; the lower layers are exported
for apps that want to assemble their own pipeline.
"""

from .discovery import discover_providers
from .discovery import provider_chain
from .enumerator import DEFAULT_ADAPTERS
from .enumerator import EnumerationResult
from .enumerator import ProviderAdapter
from .enumerator import ProviderEnumerator
from .exceptions import AccessorInvocationFailure
from .exceptions import ArchiveInternalReferenceRejected
from .exceptions import MetadataUnreadable
from .exceptions import NormalizationFailure
from .exceptions import RemoteLocationRejected
from .exceptions import SearchPathError
from .exceptions import UnsupportedProviderKind
from .exclusion import RuntimeExclusionFilter
from .manifest import parse_manifest
from .manifest import read_manifest
from .normalize import normalize_identifier
from .normalize import resolve_identifier
from .protocols import PathProvider
from .providers import PathListProvider
from .providers import SysPathProvider
from .providers import get_context_provider
from .providers import reset_context_provider
from .providers import set_context_provider
from .providers import use_context_provider
from .registry import SearchPathRegistry
from .resolver import SearchPathResolver
from .resolver import get_search_path
from .schema import SearchPathSettings

__all__ = [
    # Settings
    "SearchPathSettings",
    # Resolution
    "SearchPathResolver",
    "get_search_path",
    "SearchPathRegistry",
    "RuntimeExclusionFilter",
    "normalize_identifier",
    "resolve_identifier",
    # Manifests
    "parse_manifest",
    "read_manifest",
    # Providers
    "PathProvider",
    "PathListProvider",
    "SysPathProvider",
    "get_context_provider",
    "set_context_provider",
    "reset_context_provider",
    "use_context_provider",
    "discover_providers",
    "provider_chain",
    "ProviderAdapter",
    "ProviderEnumerator",
    "EnumerationResult",
    "DEFAULT_ADAPTERS",
    # Exceptions
    "SearchPathError",
    "NormalizationFailure",
    "RemoteLocationRejected",
    "ArchiveInternalReferenceRejected",
    "MetadataUnreadable",
    "UnsupportedProviderKind",
    "AccessorInvocationFailure",
]

__version__ = "0.1.0"
