"""Ordered, id-unique collections of presets."""

from typing import Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")


def uniq_by_id(items: Iterable[T]) -> list[T]:
    """Drop repeated presets (by id) while keeping first-seen order."""
    seen: set[str] = set()
    out: list[T] = []
    for item in items:
        if item is None:
            continue
        item_id = item.id
        if item_id in seen:
            continue
        seen.add(item_id)
        out.append(item)
    return out


def fallback_id(geometry: str) -> str:
    """Id of the generic preset for a geometry. Vertices share the point preset."""
    return "point" if geometry == "vertex" else geometry


class PresetCollection:
    """An ordered sequence of presets, unique by id.

    Views such as `match_geometry` return new collections and never touch the
    presets themselves.
    """

    def __init__(self, collection: Iterable = ()):
        self.collection = list(collection)

    def __iter__(self) -> Iterator:
        return iter(self.collection)

    def __len__(self) -> int:
        return len(self.collection)

    def __repr__(self) -> str:
        return f"PresetCollection({[p.id for p in self.collection]!r})"

    def item(self, preset_id: str):
        """Look up a preset by id, or None."""
        for preset in self.collection:
            if preset.id == preset_id:
                return preset
        return None

    def index(self, preset_id: str) -> int:
        """Position of the preset with this id, or -1."""
        for i, preset in enumerate(self.collection):
            if preset.id == preset_id:
                return i
        return -1

    def match_geometry(self, geometry: str) -> "PresetCollection":
        return PresetCollection(p for p in self.collection if p.match_geometry(geometry))

    def fallback(self, geometry: str) -> Optional[object]:
        return self.item(fallback_id(geometry))

    def upsert(self, preset) -> None:
        """Replace the preset with the same id in place, or append it."""
        existing = self.index(preset.id)
        if existing != -1:
            self.collection[existing] = preset
        else:
            self.collection.append(preset)
