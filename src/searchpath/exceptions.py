"""Search path exceptions.

None of these abort a resolution run. Lower-level helpers raise them, and the
registry, enumerator and resolver turn them into skipped entries.
"""


class SearchPathError(Exception):
    """Base exception for search path resolution."""

    def __init__(self, message: str, context: dict | None = None):
        """Initialize with message and optional context.

        Args:
            message: Human-readable error message
            context: Optional dict with additional context (identifier, provider type, etc.)
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class NormalizationFailure(SearchPathError):
    """Identifier could not be turned into an existing canonical path."""


class RemoteLocationRejected(SearchPathError):
    """Identifier names a network location, which is never fetched."""


class ArchiveInternalReferenceRejected(SearchPathError):
    """Identifier points inside an archive rather than at the archive itself."""


class MetadataUnreadable(SearchPathError):
    """Archive metadata resource is missing or corrupt."""


class UnsupportedProviderKind(SearchPathError):
    """No adapter matches the provider's type hierarchy."""


class AccessorInvocationFailure(SearchPathError):
    """Provider accessor is missing, raised, or returned an unusable shape."""
