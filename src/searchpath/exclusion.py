"""Runtime exclusion - keep the host runtime's own archives off the search path.

Runtime archives live in or just below a directory holding the sentinel archive.
The sentinel's manifest identifies it; a same-named file without the identity
attributes doesn't count.
"""

import logging
from pathlib import Path

from .exceptions import MetadataUnreadable
from .manifest import read_manifest
from .schema import SearchPathSettings

logger = logging.getLogger(__name__)


class RuntimeExclusionFilter:
    """
    Decide whether an archive belongs to the host runtime installation.

    Confirmed runtime directories are cached for the lifetime of the filter, so
    sibling archives don't rescan the same ancestor chain. One filter is used
    per resolution run.

    Heuristic: absence of the sentinel proves nothing (false negatives are
    acceptable), but a directory is only cached after its sentinel's identity
    attributes matched.
    """

    def __init__(self, settings: SearchPathSettings | None = None):
        self.settings = settings or SearchPathSettings()
        self._runtime_dirs: set[str] = set()

    @property
    def known_runtime_dirs(self) -> frozenset[str]:
        """Directories confirmed runtime-owned so far."""
        return frozenset(self._runtime_dirs)

    def clear(self) -> None:
        self._runtime_dirs.clear()

    def is_runtime_owned(self, archive_path: Path, max_ancestor_depth: int | None = None) -> bool:
        """
        Check whether an archive belongs to the runtime installation.

        Args:
            archive_path: Canonical path of the archive
            max_ancestor_depth: Number of ancestor directories to check, starting
                               with the archive's own directory
                               (defaults to settings.runtime_scan_depth)

        Returns:
            True if a confirmed sentinel was found within the depth limit
        """
        depth = self.settings.runtime_scan_depth if max_ancestor_depth is None else max_ancestor_depth
        current = archive_path

        for _ in range(depth):
            parent = current.parent
            if parent == current:
                return False
            if str(parent) in self._runtime_dirs:
                return True
            if self._has_runtime_sentinel(parent):
                self._runtime_dirs.add(str(parent))
                return True
            current = parent

        return False

    def _has_runtime_sentinel(self, directory: Path) -> bool:
        sentinel = directory / self.settings.runtime_sentinel
        if not sentinel.is_file():
            return False

        try:
            attributes = read_manifest(sentinel, self.settings.manifest_path)
        except MetadataUnreadable as e:
            logger.debug(f"Sentinel {sentinel} has no readable manifest: {e.message}")
            return False

        for key, expected in self.settings.runtime_identity.items():
            if attributes.get(key) == expected:
                logger.debug(f"Found runtime sentinel {sentinel} ({key}: {expected})")
                return True
        return False
