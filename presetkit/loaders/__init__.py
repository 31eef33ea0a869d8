from pathlib import Path

from presetkit.schemas.preset_schema import Catalog

from .catalog_loader import (
    BUILTIN_CATALOG, load_builtin_catalog, load_json_catalog, load_yaml_catalog, parse_catalog,
)
from .remote import fetch_catalog

_LOADER_MAP = {
    ".json": load_json_catalog,
    ".yaml": load_yaml_catalog,
    ".yml": load_yaml_catalog,
}


def load_catalog(path: str | Path) -> Catalog:
    """Load a preset catalog file.

    Dispatches to the appropriate loader based on file extension.
    Supported formats: .json, .yaml, .yml
    """
    path = Path(path)
    ext = path.suffix.lower()
    loader = _LOADER_MAP.get(ext)
    if loader is None:
        supported = ", ".join(sorted(_LOADER_MAP.keys()))
        raise ValueError(f"Unsupported catalog format '{ext}'. Supported: {supported}")
    return loader(path)


__all__ = [
    "BUILTIN_CATALOG",
    "load_catalog",
    "load_builtin_catalog",
    "load_json_catalog",
    "load_yaml_catalog",
    "parse_catalog",
    "fetch_catalog",
]
