from .preset_schema import (
    GEOMETRIES, Geometry, RawField, RawPreset, RawCategory, CatalogDefaults, Catalog,
)
from .ribbon_schema import RibbonSource, MinifiedRibbonItem, MinifiedRibbonList
from .settings import IndexSettings

__all__ = [
    "GEOMETRIES",
    "Geometry",
    "RawField",
    "RawPreset",
    "RawCategory",
    "CatalogDefaults",
    "Catalog",
    "RibbonSource",
    "MinifiedRibbonItem",
    "MinifiedRibbonList",
    "IndexSettings",
]
