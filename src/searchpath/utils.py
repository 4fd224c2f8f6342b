"""Small helpers shared by the registry and the enumerator."""

import os


def qualified_type_name(cls: type) -> str:
    """Return "module.QualName" for a class.

    Example:
        >>> import zipimport
        >>> qualified_type_name(zipimport.zipimporter)
        'zipimport.zipimporter'
    """
    return f"{cls.__module__}.{cls.__qualname__}"


def split_path_list(raw: str | None, delimiter: str = os.pathsep) -> list[str]:
    """Split a delimited path list, dropping empty segments."""
    if not raw:
        return []
    return [segment for segment in raw.split(delimiter) if segment]


def as_identifier(value: object) -> str:
    """String form of one collection element returned by a provider."""
    if isinstance(value, os.PathLike):
        value = os.fspath(value)
    if isinstance(value, bytes):
        return os.fsdecode(value)
    return str(value)
