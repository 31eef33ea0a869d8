"""Tag-based preset matching and indexing for map features."""

from presetkit.engine.collection import PresetCollection
from presetkit.engine.preset import Preset, PresetCategory, PresetField
from presetkit.engine.preset_index import PresetIndex
from presetkit.engine.ribbon import RibbonItem
from presetkit.engine.storage import JsonFileStorage, MemoryStorage
from presetkit.schemas import Catalog, Geometry, IndexSettings

__version__ = "0.1.0"

__all__ = [
    "Catalog",
    "Geometry",
    "IndexSettings",
    "JsonFileStorage",
    "MemoryStorage",
    "Preset",
    "PresetCategory",
    "PresetCollection",
    "PresetField",
    "PresetIndex",
    "RibbonItem",
]
