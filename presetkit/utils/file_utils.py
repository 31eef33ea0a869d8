"""File I/O helpers for catalogs and persisted preferences."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


def ensure_directory(path: str | Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML document. An empty document loads as an empty dict."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_json(path: str | Path) -> Any:
    """Load any JSON document."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"JSON file not found: {path}")
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def load_json_object(path: str | Path) -> dict[str, Any]:
    """Load a JSON document whose top level must be an object.

    Raises ValueError (json.JSONDecodeError included) when the file is not
    JSON or holds an array, scalar or null.
    """
    data = load_json(path)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {path}, got {type(data).__name__}")
    return data


def save_json(data: Any, path: str | Path, indent: int = 2) -> None:
    """Write JSON atomically: a sibling temp file is renamed over `path`."""
    path = Path(path)
    ensure_directory(path.parent)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, default=str)
        os.replace(tmp, path)
    except BaseException:
        os.unlink(tmp)
        raise
    logger.debug(f"Wrote {path}")
