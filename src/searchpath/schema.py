"""Search path settings - every policy constant in one immutable model.

Apps inject settings; the engine never reads configuration on its own except the
single fallback environment variable named here.
"""

import os
import tomllib
from pathlib import Path

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

# Literal names carried by real-world archives. Changing them breaks compatibility.
MANIFEST_PATH = "META-INF/MANIFEST.MF"
DEPENDENCY_ATTRIBUTE = "Class-Path"
RUNTIME_SENTINEL = "rt.jar"
RUNTIME_IDENTITY = {
    "Implementation-Title": "Java Runtime Environment",
    "Specification-Title": "Java Platform API Specification",
}


class SearchPathSettings(BaseModel):
    """
    Policy for search path resolution.

    Defaults match what real-world archives and hosts use. Override individual
    fields in code or through the [tool.searchpath] table of a pyproject.toml.
    """

    model_config = ConfigDict(frozen=True)

    # Identifier normalization
    archive_prefix: str = "jar:"
    archive_internal_separator: str = "!"
    remote_schemes: list[str] = Field(default_factory=lambda: ["http", "https"])
    path_delimiter: str = os.pathsep

    # Archives and their metadata resource
    archive_suffixes: list[str] = Field(
        default_factory=lambda: [".jar", ".zip", ".war", ".ear", ".whl", ".egg", ".pyz"]
    )
    manifest_path: str = MANIFEST_PATH
    dependency_attribute: str = DEPENDENCY_ATTRIBUTE

    # Runtime exclusion heuristic
    runtime_sentinel: str = RUNTIME_SENTINEL
    runtime_identity: dict[str, str] = Field(default_factory=lambda: dict(RUNTIME_IDENTITY))
    runtime_scan_depth: int = Field(default=2, ge=0)

    # Catch-all pass after provider enumeration
    fallback_env_var: str | None = "PYTHONPATH"

    def is_archive_name(self, name: str) -> bool:
        """Check whether a file name carries one of the archive suffixes."""
        lowered = name.lower()
        return any(lowered.endswith(suffix.lower()) for suffix in self.archive_suffixes)

    @classmethod
    def from_pyproject(cls, pyproject_path: Path) -> "SearchPathSettings":
        """
        Load settings from the [tool.searchpath] table of a pyproject.toml.

        Keys may use dashes or underscores. A missing table yields defaults.

        Args:
            pyproject_path: Path to pyproject.toml file

        Returns:
            SearchPathSettings instance

        Raises:
            FileNotFoundError: If pyproject.toml doesn't exist
            tomllib.TOMLDecodeError: If invalid TOML
            pydantic.ValidationError: If a value has the wrong type

        Example:
            >>> settings = SearchPathSettings.from_pyproject(Path("pyproject.toml"))
            >>> settings.fallback_env_var
            'PYTHONPATH'
        """
        if not pyproject_path.exists():
            raise FileNotFoundError(f"pyproject.toml not found: {pyproject_path}")

        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)

        table = data.get("tool", {}).get("searchpath", {})
        return cls.model_validate({key.replace("-", "_"): value for key, value in table.items()})
