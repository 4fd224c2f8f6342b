"""Archive metadata resource reader.

Reads the main section of the manifest embedded in an archive. Only this one
small resource is ever opened; archive contents are not indexed.
"""

import logging
import zipfile
import zlib
from pathlib import Path

from .exceptions import MetadataUnreadable
from .schema import MANIFEST_PATH

logger = logging.getLogger(__name__)


def parse_manifest(text: str) -> dict[str, str]:
    """Parse the main section of a manifest into attributes.

    Lines are "Key: value". A line starting with a single space continues the
    previous value. The main section ends at the first blank line.

    Example:
        >>> parse_manifest("Manifest-Version: 1.0\\nClass-Path: a.jar\\n  b.jar\\n")
        {'Manifest-Version': '1.0', 'Class-Path': 'a.jar b.jar'}
    """
    attributes: dict[str, str] = {}
    current: str | None = None

    for line in text.splitlines():
        if not line.strip():
            if attributes:
                break
            continue
        if line.startswith(" ") and current is not None:
            attributes[current] += line[1:]
            continue

        key, sep, value = line.partition(":")
        if not sep:
            logger.debug(f"Ignoring malformed manifest line: {line!r}")
            current = None
            continue
        current = key.strip()
        attributes[current] = value[1:] if value.startswith(" ") else value

    return {key: value.rstrip() for key, value in attributes.items()}


def read_manifest(archive_path: Path, manifest_path: str = MANIFEST_PATH) -> dict[str, str]:
    """
    Read the manifest attributes of an archive.

    Args:
        archive_path: Path to the archive file
        manifest_path: Location of the metadata resource inside the archive

    Returns:
        Main-section attributes

    Raises:
        MetadataUnreadable: If the archive cannot be opened or has no manifest
    """
    try:
        with zipfile.ZipFile(archive_path) as archive:
            raw = archive.read(manifest_path)
    except KeyError as e:
        raise MetadataUnreadable(
            f"No {manifest_path} in {archive_path}",
            context={"archive": str(archive_path)},
        ) from e
    except (OSError, EOFError, RuntimeError, ValueError, zipfile.BadZipFile, zlib.error) as e:
        raise MetadataUnreadable(
            f"Could not read {manifest_path} from {archive_path}: {e}",
            context={"archive": str(archive_path)},
        ) from e

    return parse_manifest(raw.decode("utf-8", errors="replace"))
