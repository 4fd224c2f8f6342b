"""Identifier normalization - raw identifier to canonical existing path.

Providers hand back URLs, `jar:` references and plain filesystem strings, often
mixed. Each is tried against an ordered list of parsing strategies; the first
one that yields an existing, symlink-resolved path wins.
"""

import logging
from collections.abc import Callable
from pathlib import Path
from urllib.parse import urlsplit
from urllib.request import url2pathname

from .exceptions import ArchiveInternalReferenceRejected
from .exceptions import NormalizationFailure
from .exceptions import RemoteLocationRejected
from .exceptions import SearchPathError
from .schema import SearchPathSettings

logger = logging.getLogger(__name__)

# (candidate, original identifier, base directory) -> canonical path or None
Strategy = Callable[[str, str, Path], Path | None]


def _canonical(path: Path) -> Path | None:
    """Follow symlinks and relative segments; None if the target doesn't exist."""
    try:
        return path.resolve(strict=True)
    except (OSError, RuntimeError, ValueError):
        return None


def _from_url(candidate: str, original: str, base_dir: Path) -> Path | None:
    try:
        parts = urlsplit(candidate)
        # One-letter "schemes" are Windows drive letters, not URLs
        if len(parts.scheme) < 2 or parts.scheme.lower() != "file":
            return None
        if parts.netloc and parts.netloc != "localhost":
            return None
        local = url2pathname(parts.path)
    except ValueError:
        return None
    return _canonical(base_dir / local)


def _from_relative_path(candidate: str, original: str, base_dir: Path) -> Path | None:
    return _canonical(base_dir / candidate)


def _from_literal_path(candidate: str, original: str, base_dir: Path) -> Path | None:
    path = Path(original)
    if not path.exists():
        return None
    return _canonical(path)


STRATEGIES: list[tuple[str, Strategy]] = [
    ("file URL", _from_url),
    ("path relative to base directory", _from_relative_path),
    ("literal path", _from_literal_path),
]


def _has_prefix(value: str, prefixes: list[str]) -> bool:
    lowered = value.lower()
    return any(lowered.startswith(prefix) for prefix in prefixes)


def resolve_identifier(
    identifier: str,
    base_dir: Path | None = None,
    settings: SearchPathSettings | None = None,
) -> Path:
    """
    Resolve one raw identifier to a canonical existing path.

    Args:
        identifier: Raw identifier (URL, `jar:` reference, or filesystem path)
        base_dir: Directory relative identifiers are resolved against
                 (defaults to the current working directory)
        settings: Resolution policy (defaults to SearchPathSettings())

    Returns:
        Absolute, symlink-resolved path that exists on disk

    Raises:
        NormalizationFailure: If the identifier is empty or no strategy resolves it
        ArchiveInternalReferenceRejected: If the identifier points inside an archive
        RemoteLocationRejected: If the identifier names a network location

    Example:
        >>> resolve_identifier("jar:file:/opt/app/lib/a.jar")
        PosixPath('/opt/app/lib/a.jar')
    """
    settings = settings or SearchPathSettings()
    base_dir = base_dir if base_dir is not None else Path.cwd()
    context = {"identifier": identifier}

    if not identifier:
        raise NormalizationFailure("Empty identifier", context=context)

    remote_prefixes = [f"{scheme.lower()}:" for scheme in settings.remote_schemes]
    candidate = identifier

    if settings.archive_prefix and _has_prefix(candidate, [settings.archive_prefix.lower()]):
        if settings.archive_internal_separator and settings.archive_internal_separator in candidate:
            raise ArchiveInternalReferenceRejected(
                f"Ignoring archive-internal reference: {identifier}", context=context
            )
        candidate = candidate[len(settings.archive_prefix) :]
        if not _has_prefix(candidate, ["file:", *remote_prefixes]):
            candidate = "file:" + candidate

    if _has_prefix(candidate, remote_prefixes):
        raise RemoteLocationRejected(f"Ignoring remote entry: {identifier}", context=context)

    for name, strategy in STRATEGIES:
        path = strategy(candidate, identifier, base_dir)
        if path is not None:
            return path
        context["last_strategy"] = name

    raise NormalizationFailure(
        f"Could not resolve {identifier} relative to {base_dir}: no such file or directory",
        context={**context, "base_dir": str(base_dir)},
    )


def normalize_identifier(
    identifier: str,
    base_dir: Path | None = None,
    settings: SearchPathSettings | None = None,
) -> Path | None:
    """Resolve an identifier, returning None (and logging at DEBUG) when it is rejected."""
    try:
        return resolve_identifier(identifier, base_dir, settings)
    except SearchPathError as e:
        logger.debug(e.message)
        return None
