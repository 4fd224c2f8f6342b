"""Search path registry - ordered, deduplicated entries with manifest expansion.

Dependencies declared in an archive's manifest are placed before the archive
that declares them. Membership is recorded before an archive's manifest is
expanded; that is what makes mutually dependent archives terminate.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from .exceptions import MetadataUnreadable
from .exclusion import RuntimeExclusionFilter
from .manifest import read_manifest
from .normalize import normalize_identifier
from .schema import SearchPathSettings
from .utils import split_path_list

logger = logging.getLogger(__name__)


@dataclass
class _Pending:
    """An admitted path whose declared dependencies are still being registered."""

    path: Path
    excluded: bool
    dependencies: Iterator[str]


class SearchPathRegistry:
    """
    Accumulate resolved search path entries in first-discovery order.

    Example:
        >>> registry = SearchPathRegistry()
        >>> registry.register_delimited("lib/app.jar:classes")
        >>> registry.entries
        (PosixPath('/srv/lib/dep.jar'), PosixPath('/srv/lib/app.jar'), PosixPath('/srv/classes'))
    """

    def __init__(
        self,
        settings: SearchPathSettings | None = None,
        exclusion_filter: RuntimeExclusionFilter | None = None,
    ):
        self.settings = settings or SearchPathSettings()
        self.exclusion_filter = exclusion_filter or RuntimeExclusionFilter(self.settings)
        self._entries: list[Path] = []
        self._entry_keys: set[str] = set()
        # Everything ever admitted, including excluded runtime archives
        self._seen: set[str] = set()

    @property
    def entries(self) -> tuple[Path, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Path | str):
            return str(item) in self._entry_keys
        return False

    def clear(self) -> None:
        self._entries.clear()
        self._entry_keys.clear()
        self._seen.clear()
        self.exclusion_filter.clear()

    def register(self, identifier: str, base_dir: Path | None = None) -> None:
        """
        Register one identifier and, for archives, everything its manifest declares.

        Args:
            identifier: Raw identifier from a provider or caller
            base_dir: Directory relative identifiers resolve against
                     (defaults to the current working directory)
        """
        root = self._admit(identifier, base_dir)
        if root is None:
            return

        # Post-order walk: an archive is appended once all its dependencies are
        stack = [root]
        while stack:
            pending = stack[-1]
            dependency = next(pending.dependencies, None)
            if dependency is not None:
                child = self._admit(dependency, pending.path.parent)
                if child is not None:
                    stack.append(child)
                continue

            stack.pop()
            if not pending.excluded:
                logger.debug(f"Found search path entry: {pending.path}")
                self._entries.append(pending.path)
                self._entry_keys.add(str(pending.path))

    def register_delimited(self, raw_list: str | None, base_dir: Path | None = None) -> None:
        """Register every non-empty segment of a delimited path list."""
        for segment in split_path_list(raw_list, self.settings.path_delimiter):
            self.register(segment, base_dir)

    def _admit(self, identifier: str, base_dir: Path | None) -> _Pending | None:
        path = normalize_identifier(identifier, base_dir, self.settings)
        if path is None:
            return None

        key = str(path)
        if key in self._seen:
            return None
        self._seen.add(key)

        if not (path.is_file() and self.settings.is_archive_name(path.name)):
            return _Pending(path=path, excluded=False, dependencies=iter(()))

        if self.exclusion_filter.is_runtime_owned(path):
            logger.debug(f"Skipping runtime archive: {path}")
            return _Pending(path=path, excluded=True, dependencies=iter(()))

        return _Pending(path=path, excluded=False, dependencies=iter(self._declared_dependencies(path)))

    def _declared_dependencies(self, archive_path: Path) -> list[str]:
        try:
            attributes = read_manifest(archive_path, self.settings.manifest_path)
        except MetadataUnreadable as e:
            logger.debug(e.message)
            return []

        declared = attributes.get(self.settings.dependency_attribute, "")
        if declared:
            logger.debug(
                f"Found {self.settings.dependency_attribute} entry in {archive_path}: {declared}"
            )
        return declared.split()
