"""Load preset catalogs from local files."""

import logging
from pathlib import Path
from typing import Any

from presetkit.schemas.preset_schema import Catalog
from presetkit.utils.file_utils import load_json, load_yaml

logger = logging.getLogger(__name__)

BUILTIN_CATALOG = Path(__file__).resolve().parent.parent / "data" / "presets.json"


def parse_catalog(data: Any) -> Catalog:
    """Validate a raw nested mapping (or an existing Catalog) as a Catalog."""
    if isinstance(data, Catalog):
        return data
    return Catalog.model_validate(data)


def load_json_catalog(path: Path) -> Catalog:
    return parse_catalog(load_json(path))


def load_yaml_catalog(path: Path) -> Catalog:
    return parse_catalog(load_yaml(path))


def load_builtin_catalog() -> Catalog:
    """The catalog shipped with the package."""
    catalog = load_json_catalog(BUILTIN_CATALOG)
    logger.debug(f"Loaded built-in catalog: {len(catalog.presets)} presets")
    return catalog
