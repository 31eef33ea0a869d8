"""Key-value stores used to persist favorites and recents."""

import logging
from pathlib import Path
from typing import Optional

from presetkit.utils.file_utils import load_json_object, save_json

logger = logging.getLogger(__name__)


class MemoryStorage:
    """In-process store. Nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStorage:
    """Store backed by a single JSON object on disk, rewritten on every set."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._data: Optional[dict[str, str]] = None

    def _load(self) -> dict[str, str]:
        if self._data is None:
            try:
                data = load_json_object(self.path)
            except FileNotFoundError:
                data = {}
            except ValueError as e:
                logger.warning(f"Ignoring unreadable storage file {self.path}: {e}")
                data = {}
            self._data = {str(k): v for k, v in data.items() if isinstance(v, str)}
        return self._data

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        save_json(data, self.path)
