"""Area, point and vertex classification tables derived from the catalog.

Because tagging is open-ended, the catalog can never list every tag in use.
These tables let geometry logic reason from the primary tags the catalog
does know about, e.g. "a closed way with an amenity tag is an area, unless
the amenity is one of these values".

`area_keys` is a whitelist/blacklist: a closed way tagged (k, v) is an area
when ``k in area_keys and v not in area_keys[k]``. Its keys form the
whitelist and each value set is that key's blacklist.
"""

import logging
from typing import Any, Iterable, Mapping

from .preset import WILDCARD

logger = logging.getLogger(__name__)

# Keys that are linear by convention even when some presets allow areas
IGNORED_AREA_KEYS = frozenset({"barrier", "highway", "footway", "railway", "type"})


def _eligible(presets: Iterable, require_searchable: bool = False) -> list:
    """Skip suggestion and deprecated presets, and optionally generic ones."""
    out = []
    for preset in presets:
        if preset.suggestion or preset.replacement:
            continue
        if require_searchable and preset.searchable is False:
            continue
        out.append(preset)
    return out


def compute_area_keys(presets: Iterable) -> dict[str, set[str]]:
    presets = _eligible(presets)
    area_keys: dict[str, set[str]] = {}

    # whitelist
    for preset in presets:
        primary = preset.primary_tag
        if primary is None:
            continue
        key, _ = primary
        if key in IGNORED_AREA_KEYS:
            continue
        if preset.match_geometry("area"):
            area_keys.setdefault(key, set())

    # blacklist
    for preset in presets:
        primary = preset.primary_tag
        if primary is None:
            continue
        key, value = primary
        if key in IGNORED_AREA_KEYS:
            continue
        if key in area_keys and preset.match_geometry("line") and value != WILDCARD:
            area_keys[key].add(value)

    return area_keys


def _compute_geometry_tags(presets: Iterable, geometry: str) -> dict[str, set[str]]:
    tags: dict[str, set[str]] = {}
    for preset in _eligible(presets, require_searchable=True):
        primary = preset.primary_tag
        if primary is None:
            continue
        key, value = primary
        if preset.match_geometry(geometry):
            tags.setdefault(key, set()).add(value)
    return tags


def compute_point_tags(presets: Iterable) -> dict[str, set[str]]:
    return _compute_geometry_tags(presets, "point")


def compute_vertex_tags(presets: Iterable) -> dict[str, set[str]]:
    return _compute_geometry_tags(presets, "vertex")


class TagTables:
    """The three classification tables for one catalog build."""

    def __init__(self, presets: Iterable):
        presets = list(presets)
        self.area_keys = compute_area_keys(presets)
        self.point_tags = compute_point_tags(presets)
        self.vertex_tags = compute_vertex_tags(presets)
        logger.debug(
            f"Classification tables: {len(self.area_keys)} area keys, "
            f"{len(self.point_tags)} point keys, {len(self.vertex_tags)} vertex keys"
        )

    def node_geometries_for_tags(self, tags: Mapping[str, Any]) -> dict[str, bool]:
        """Which standalone node geometries the catalog allows for these tags."""
        geometries: dict[str, bool] = {}
        for key, value in tags.items():
            point_values = self.point_tags.get(key)
            if point_values and (WILDCARD in point_values or value in point_values):
                geometries["point"] = True
            vertex_values = self.vertex_tags.get(key)
            if vertex_values and (WILDCARD in vertex_values or value in vertex_values):
                geometries["vertex"] = True
            if geometries.get("point") and geometries.get("vertex"):
                break
        return geometries
