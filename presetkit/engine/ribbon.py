"""Favorites and recents: two bounded, persisted lists of ribbon items.

Both lists are loaded lazily from a key-value store the first time they are
used, mutated in place, and written back in full after every change.

The two lists evict differently. Favorites grow at the end, so a full list
drops its last entry (last in, first out). Recents grow at the front, so a
full list drops its last entry, which is the oldest (first in, first out).
"""

import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from presetkit.schemas.ribbon_schema import MinifiedRibbonItem, MinifiedRibbonList, RibbonSource
from presetkit.schemas.settings import IndexSettings

from .collection import fallback_id
from .events import Dispatcher
from .interfaces import IntroMode, KeyValueStore

logger = logging.getLogger(__name__)

FAVORITES_CHANGED = "favoritePreset"
RECENTS_CHANGED = "recentsChange"


class RibbonItem:
    """A (preset, geometry) pair the user picked, tagged with where it came from.

    Two items are equal when they refer to the same preset id and geometry,
    whatever their source.
    """

    __slots__ = ("preset", "geometry", "source")

    def __init__(self, preset: Any, geometry: str, source: RibbonSource):
        self.preset = preset
        self.geometry = geometry
        self.source = source

    def __repr__(self) -> str:
        return f"RibbonItem({self.preset.id!r}, {self.geometry!r}, {self.source!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RibbonItem):
            return NotImplemented
        return self.preset.id == other.preset.id and self.geometry == other.geometry

    def __hash__(self) -> int:
        return hash((self.preset.id, self.geometry))

    def is_favorite(self) -> bool:
        return self.source == "favorite"

    def is_recent(self) -> bool:
        return self.source == "recent"

    def matches(self, preset: Any, geometry: str) -> bool:
        return self.preset.id == preset.id and self.geometry == geometry

    def minified(self) -> MinifiedRibbonItem:
        return MinifiedRibbonItem(preset_id=self.preset.id, geometry=self.geometry)


def move_item(items: list, from_index: int, to_index: int) -> Optional[list]:
    """Move items[from_index] to to_index in place. None if the move is invalid."""
    if (
        from_index == to_index
        or from_index < 0
        or to_index < 0
        or from_index >= len(items)
        or to_index >= len(items)
    ):
        return None
    items.insert(to_index, items.pop(from_index))
    return items


class RibbonStore:
    """Owns the favorites and recents lists for one preset index.

    Args:
        presets: Lookup with `item(id)` used to rebuild persisted items.
        storage: Where the minified lists are persisted.
        dispatcher: Receives `favoritePreset` and `recentsChange` calls.
        settings: Capacities, storage keys and default favorites.
        in_intro: Returns True while the guided tour is running.
    """

    def __init__(
        self,
        presets: Any,
        storage: KeyValueStore,
        dispatcher: Dispatcher,
        settings: IndexSettings,
        in_intro: IntroMode,
    ):
        self.presets = presets
        self.storage = storage
        self.dispatcher = dispatcher
        self.settings = settings
        self.in_intro = in_intro
        self._favorites: Optional[list[RibbonItem]] = None
        self._recents: Optional[list[RibbonItem]] = None

    def reset(self) -> None:
        """Forget both lists so they are reloaded on next use."""
        self._favorites = None
        self._recents = None

    # ------------------------------------------------------------------
    # Loading and persistence
    # ------------------------------------------------------------------

    def item_for_minified(self, d: Any, source: RibbonSource) -> Optional[RibbonItem]:
        """Rebuild a stored item, or None if it no longer fits the catalog."""
        try:
            minified = MinifiedRibbonItem.model_validate(d)
        except ValidationError:
            logger.debug(f"Dropping malformed {source} entry: {d!r}")
            return None

        preset = self.presets.item(minified.preset_id)
        if preset is None:
            logger.debug(f"Dropping {source} entry for unknown preset {minified.preset_id}")
            return None

        # treat point and vertex features as one geometry
        geometry = fallback_id(minified.geometry)

        # the catalog may have changed since this was saved
        if preset.match_geometry(geometry) or (geometry == "point" and preset.match_geometry("vertex")):
            return RibbonItem(preset, geometry, source)

        logger.debug(f"Dropping {source} entry {preset.id}: no longer supports {geometry}")
        return None

    def _read(self, key: str) -> Optional[list]:
        raw = self.storage.get(key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring unreadable stored value for '{key}': {e}")
            return None
        if not isinstance(data, list):
            logger.warning(f"Ignoring stored value for '{key}': expected a list")
            return None
        return data

    def _load(self, key: str, source: RibbonSource, default: list, limit: int) -> list[RibbonItem]:
        data = self._read(key)
        if data is None:
            data = default
        items = []
        for d in data:
            item = self.item_for_minified(d, source)
            if item is not None:
                items.append(item)
        return items[:limit]

    def _write(self, key: str, items: list[RibbonItem]) -> None:
        payload = MinifiedRibbonList.dump_json([i.minified() for i in items], by_alias=True)
        self.storage.set(key, payload.decode("utf-8"))

    def get_favorites(self) -> list[RibbonItem]:
        if self._favorites is None:
            default = [d.model_dump(by_alias=True) for d in self.settings.default_favorites]
            self._favorites = self._load(
                self.settings.favorites_key, "favorite", default, self.settings.favorites_limit
            )
        return self._favorites

    def get_recents(self) -> list[RibbonItem]:
        if self._recents is None:
            self._recents = self._load(
                self.settings.recents_key, "recent", [], self.settings.recents_limit
            )
        return self._recents

    def _set_favorites(self, items: list[RibbonItem]) -> None:
        self._favorites = items
        self._write(self.settings.favorites_key, items)
        self.dispatcher.call(FAVORITES_CHANGED)

    def _set_recents(self, items: list[RibbonItem]) -> None:
        self._recents = items
        self._write(self.settings.recents_key, items)
        self.dispatcher.call(RECENTS_CHANGED)

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    def favorite_matching(self, preset: Any, geometry: str) -> Optional[RibbonItem]:
        geometry = fallback_id(geometry)
        for item in self.get_favorites():
            if item.matches(preset, geometry):
                return item
        return None

    def toggle_favorite(self, preset: Any, geometry: str) -> None:
        geometry = fallback_id(geometry)
        favs = self.get_favorites()
        favorite = self.favorite_matching(preset, geometry)
        if favorite is not None:
            favs.remove(favorite)
        else:
            if len(favs) >= self.settings.favorites_limit:
                # last in, first out
                favs.pop()
            favs.append(RibbonItem(preset, geometry, "favorite"))
        self._set_favorites(favs)

    def add_favorite(self, preset: Any, geometry: str) -> None:
        # TODO: evict at capacity like toggle_favorite instead of rejecting the new item
        geometry = fallback_id(geometry)
        favs = self.get_favorites()
        if self.favorite_matching(preset, geometry) is None and len(favs) < self.settings.favorites_limit:
            favs.append(RibbonItem(preset, geometry, "favorite"))
        self._set_favorites(favs)

    def remove_favorite(self, preset: Any, geometry: str) -> None:
        item = self.favorite_matching(preset, geometry)
        if item is not None:
            items = self.get_favorites()
            items.remove(item)
            self._set_favorites(items)

    def move_favorite(self, from_index: int, to_index: int) -> Optional[list[RibbonItem]]:
        items = move_item(self.get_favorites(), from_index, to_index)
        if items is not None:
            self._set_favorites(items)
        return items

    # ------------------------------------------------------------------
    # Recents
    # ------------------------------------------------------------------

    def recent_matching(self, preset: Any, geometry: str) -> Optional[RibbonItem]:
        geometry = fallback_id(geometry)
        for item in self.get_recents():
            if item.matches(preset, geometry):
                return item
        return None

    def remove_recent(self, preset: Any, geometry: str) -> None:
        item = self.recent_matching(preset, geometry)
        if item is not None:
            items = self.get_recents()
            items.remove(item)
            self._set_recents(items)

    def move_recent(self, from_index: int, to_index: int) -> Optional[list[RibbonItem]]:
        items = move_item(self.get_recents(), from_index, to_index)
        if items is not None:
            self._set_recents(items)
        return items

    def move_recent_item(self, item: RibbonItem, before_item: RibbonItem) -> Optional[list[RibbonItem]]:
        """Move `item` to the position currently held by `before_item`."""
        recents = self.get_recents()
        from_index = recents.index(item) if item in recents else -1
        to_index = recents.index(before_item) if before_item in recents else -1
        return self.move_recent(from_index, to_index)

    def set_most_recent(self, preset: Any, geometry: str) -> None:
        if self.in_intro():
            return
        if preset.searchable is False:
            return

        geometry = fallback_id(geometry)
        items = self.get_recents()
        item = self.recent_matching(preset, geometry)
        if item is not None:
            items.remove(item)
        else:
            item = RibbonItem(preset, geometry, "recent")

        if len(items) >= self.settings.recents_limit:
            # first in, first out
            items.pop()
        items.insert(0, item)
        self._set_recents(items)
