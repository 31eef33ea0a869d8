"""Inverted index of presets by (geometry, tag key), and the tag matcher."""

import logging
import re
from typing import Any, Iterable, Mapping, Optional

from presetkit.schemas.preset_schema import GEOMETRIES

logger = logging.getLogger(__name__)

ADDRESS_KEY = "addr:*"
_ADDRESS_RE = re.compile(r"^addr:")


class TagIndex:
    """For each geometry, the presets declaring each tag key, in catalog order.

    A preset is listed under (g, k) exactly when g is one of its geometries
    and k is a key of its tag pattern. The index is only ever rebuilt whole.
    """

    def __init__(self):
        self._index: dict[str, dict[str, list]] = {g: {} for g in GEOMETRIES}

    def build(self, presets: Iterable) -> "TagIndex":
        index: dict[str, dict[str, list]] = {g: {} for g in GEOMETRIES}
        count = 0
        for preset in presets:
            for geometry in preset.geometry:
                buckets = index.setdefault(geometry, {})
                for key in preset.tags:
                    buckets.setdefault(key, []).append(preset)
            count += 1
        self._index = index
        logger.debug(f"Indexed {count} presets by tag key")
        return self

    def bucket(self, geometry: str, key: str) -> list:
        return list(self._index.get(geometry, {}).get(key, ()))

    def keys(self, geometry: str) -> list[str]:
        return list(self._index.get(geometry, {}))

    def snapshot(self) -> dict[str, dict[str, list[str]]]:
        """Bucket contents as preset ids, for comparison and debugging."""
        return {
            geometry: {key: [p.id for p in presets] for key, presets in buckets.items()}
            for geometry, buckets in self._index.items()
        }

    def match(self, tags: Mapping[str, Any], geometry: str) -> Optional[object]:
        """Best-scoring preset for `tags`, or None when nothing scores.

        Keys are visited in input order and bucket entries in catalog order;
        an equal score never replaces an earlier winner. If any `addr:` key is
        present and the best result is missing or generic, the first
        address preset wins instead.
        """
        geometry_matches = self._index.get(geometry, {})
        address = None
        best = -1.0
        match = None

        for key in tags:
            if address is None and _ADDRESS_RE.match(key) and geometry_matches.get(ADDRESS_KEY):
                address = geometry_matches[ADDRESS_KEY][0]

            for candidate in geometry_matches.get(key, ()):
                score = candidate.match_score(tags)
                if score > best:
                    best = score
                    match = candidate

        if address is not None and (match is None or match.is_fallback()):
            match = address
        return match
