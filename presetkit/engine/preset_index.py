"""Preset index: the catalog, its tag index and tables, and the user's ribbons.

PresetIndex owns the preset collection built from one or more catalogs, the
(geometry, tag key) index used for matching, the area/point/vertex tables
derived from the same catalog, and the favorites/recents lists. It exposes
the build/init/reset/from_external lifecycle and the query surface used by
the editor.
"""

import logging
from typing import Any, Callable, Mapping, Optional, Union

import httpx

from presetkit.loaders import fetch_catalog, load_builtin_catalog, load_catalog, parse_catalog
from presetkit.schemas.preset_schema import GEOMETRIES, Catalog, RawPreset
from presetkit.schemas.settings import IndexSettings

from .classification import TagTables
from .collection import PresetCollection, uniq_by_id
from .events import Dispatcher
from .interfaces import Feature, GeometryClassifier, IntroMode, KeyValueStore, Resolver
from .preset import Preset, PresetCategory, PresetField
from .ribbon import FAVORITES_CHANGED, RECENTS_CHANGED, RibbonItem, RibbonStore
from .storage import MemoryStorage
from .tag_index import TagIndex

logger = logging.getLogger(__name__)

Visibility = Union[bool, Callable[[str, RawPreset], bool]]


class PresetIndex:
    """Index of presets with matching, classification tables and ribbons.

    Args:
        storage: Key-value store for favorites and recents (in-memory if omitted).
        settings: Limits, storage keys and catalog location.
        geometry_classifier: Reports which node geometries tags allow. Defaults
            to the point/vertex tables of the current catalog.
        in_intro: Returns True while the guided tour runs; recents are frozen then.
        builtin_catalog: Catalog to use instead of the packaged one.
    """

    def __init__(
        self,
        storage: Optional[KeyValueStore] = None,
        settings: Optional[IndexSettings] = None,
        geometry_classifier: Optional[GeometryClassifier] = None,
        in_intro: Optional[IntroMode] = None,
        builtin_catalog: Optional[Catalog] = None,
    ):
        self.settings = settings or IndexSettings()
        self.storage = storage if storage is not None else MemoryStorage()
        self.in_intro = in_intro or (lambda: False)
        self.dispatcher = Dispatcher(RECENTS_CHANGED, FAVORITES_CHANGED)
        self._geometry_classifier = geometry_classifier
        self._builtin = builtin_catalog

        self.all = PresetCollection()
        self._defaults: dict[str, PresetCollection] = {g: self.all for g in GEOMETRIES}
        self._fields: dict[str, PresetField] = {}
        self._universal: list[PresetField] = []
        self._tag_index = TagIndex()
        self._tables: Optional[TagTables] = None
        self.ribbons = RibbonStore(
            self.all, self.storage, self.dispatcher, self.settings, self.in_intro
        )

    # ------------------------------------------------------------------
    # Collection views
    # ------------------------------------------------------------------

    @property
    def collection(self) -> list:
        return self.all.collection

    @property
    def tag_index(self) -> TagIndex:
        return self._tag_index

    def __iter__(self):
        return iter(self.all)

    def __len__(self) -> int:
        return len(self.all)

    def item(self, preset_id: str):
        return self.all.item(preset_id)

    def index(self, preset_id: str) -> int:
        return self.all.index(preset_id)

    def match_geometry(self, geometry: str) -> PresetCollection:
        return self.all.match_geometry(geometry)

    def fallback(self, geometry: str):
        return self.all.fallback(geometry)

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def match(self, entity: Feature, resolver: Resolver):
        """Best preset for a feature, cached on the resolver per feature."""

        def compute():
            geometry = entity.geometry(resolver)
            # Features on address interpolation lines act as points, not vertices
            if geometry == "vertex" and entity.is_on_address_line(resolver):
                geometry = "point"
            return self.match_tags(entity.tags, geometry)

        return resolver.transient(entity, "presetMatch", compute)

    def match_tags(self, tags: Mapping[str, Any], geometry: str):
        """Best preset for a tag set and geometry, or the geometry's fallback."""
        match = self._tag_index.match(tags, geometry)
        if match is None:
            match = self.fallback(geometry)
        return match

    def allows_vertex(self, entity: Feature, resolver: Resolver) -> bool:
        """Whether a node may be used as a vertex of a way."""
        if entity.type != "node":
            return False
        if len(entity.tags) == 0:
            return True

        def compute():
            # address lines allow vertices to act as standalone points
            if entity.is_on_address_line(resolver):
                return True
            geometries = self.node_geometries_for_tags(entity.tags)
            if geometries.get("vertex"):
                return True
            if geometries.get("point"):
                return False
            # allow vertices for unspecified points
            return True

        return resolver.transient(entity, "vertexMatch", compute)

    def node_geometries_for_tags(self, tags: Mapping[str, Any]) -> Mapping[str, bool]:
        if self._geometry_classifier is not None:
            return self._geometry_classifier(tags)
        return self._get_tables().node_geometries_for_tags(tags)

    # ------------------------------------------------------------------
    # Classification tables
    # ------------------------------------------------------------------

    def _get_tables(self) -> TagTables:
        if self._tables is None:
            self._tables = TagTables(self.all)
        return self._tables

    def area_keys(self) -> dict[str, set[str]]:
        return {k: set(v) for k, v in self._get_tables().area_keys.items()}

    def point_tags(self) -> dict[str, set[str]]:
        return {k: set(v) for k, v in self._get_tables().point_tags.items()}

    def vertex_tags(self) -> dict[str, set[str]]:
        return {k: set(v) for k, v in self._get_tables().vertex_tags.items()}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def builtin_catalog(self) -> Catalog:
        if self._builtin is None:
            if self.settings.catalog_path is not None:
                self._builtin = load_catalog(self.settings.catalog_path)
            else:
                self._builtin = load_builtin_catalog()
        return self._builtin

    def build(self, catalog: Union[Catalog, Mapping[str, Any]], visible: Visibility = True) -> "PresetIndex":
        """Merge a catalog into the index and rebuild the tag index.

        Presets and categories replace existing entries with the same id in
        place; new ids are appended. `visible` is a flag or a callable
        ``(preset_id, raw_preset) -> bool``.
        """
        catalog = parse_catalog(catalog)

        for field_id, raw_field in catalog.fields.items():
            self._fields[field_id] = PresetField.from_raw(field_id, raw_field)
        self._universal = [f for f in self._fields.values() if f.universal]

        for preset_id, raw in catalog.presets.items():
            is_visible = visible(preset_id, raw) if callable(visible) else visible
            self.all.upsert(Preset.from_raw(preset_id, raw, self._fields, is_visible, catalog.presets))

        for category_id, raw_category in catalog.categories.items():
            self.all.upsert(PresetCategory.from_raw(category_id, raw_category, self.all))

        if catalog.defaults is not None:
            self._defaults = {
                g: PresetCollection(
                    p for p in (self.all.item(i) for i in getattr(catalog.defaults, g)) if p is not None
                )
                for g in GEOMETRIES
            }

        self._tag_index = TagIndex().build(self.all)
        self._tables = None
        logger.info(
            f"Built preset index: {len(catalog.presets)} presets, {len(catalog.categories)} categories "
            f"merged ({len(self.all)} total)"
        )
        return self

    def init(self, should_show: Visibility = True) -> "PresetIndex":
        """Discard everything and build from the built-in catalog."""
        self.all.collection = []
        self.ribbons.reset()
        self._fields = {}
        self._universal = []
        self._tag_index = TagIndex()
        self._tables = None
        return self.build(self.builtin_catalog(), should_show)

    def reset(self) -> "PresetIndex":
        """Discard the catalog, tables, defaults and loaded ribbons."""
        self.all.collection = []
        self._defaults = {g: self.all for g in GEOMETRIES}
        self._fields = {}
        self._universal = []
        self.ribbons.reset()
        self._tag_index = TagIndex()
        self._tables = None
        return self

    async def from_external(
        self,
        url: str,
        done: Optional[Callable[["PresetIndex"], Any]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "PresetIndex":
        """Rebuild from an external catalog layered over the hidden built-in one.

        If the fetch or the build fails the built-in catalog is used alone.
        `done` is called with the index either way. When calls overlap, the
        one that completes last determines the catalog.
        """
        self.reset()
        try:
            external = await fetch_catalog(url, client=client, timeout=self.settings.fetch_timeout)
            # another call may have built while this one was awaiting
            self.reset()
            self.build(self.builtin_catalog(), False)
            self.build(external, True)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            logger.warning(f"Could not load external presets from {url}, using built-in presets: {e}")
            self.init()
        else:
            logger.info(f"Loaded {len(external.presets)} external presets from {url}")
        finally:
            if done is not None:
                done(self)
        return self

    # ------------------------------------------------------------------
    # Fields and defaults
    # ------------------------------------------------------------------

    def field(self, field_id: str) -> Optional[PresetField]:
        return self._fields.get(field_id)

    def universal(self) -> list[PresetField]:
        return list(self._universal)

    def defaults(self, geometry: str, n: int) -> PresetCollection:
        """Presets to offer first for a geometry: recents, catalog defaults, fallback."""
        rec = []
        if not self.in_intro():
            limit = self.settings.recent_defaults_limit
            rec = self.recent().match_geometry(geometry).collection[:limit]
        geometry_defaults = self._defaults.get(geometry, self.all)
        picked = uniq_by_id(rec + geometry_defaults.collection)[: n - 1]
        return PresetCollection(uniq_by_id(rec + picked + [self.fallback(geometry)]))

    def recent(self) -> PresetCollection:
        return PresetCollection(uniq_by_id(item.preset for item in self.get_recents()))

    # ------------------------------------------------------------------
    # Favorites and recents
    # ------------------------------------------------------------------

    def on(self, typename: str, callback: Optional[Callable] = None) -> "PresetIndex":
        """Subscribe to `recentsChange` or `favoritePreset` (None unsubscribes)."""
        self.dispatcher.on(typename, callback)
        return self

    def get_favorites(self) -> list[RibbonItem]:
        return self.ribbons.get_favorites()

    def get_recents(self) -> list[RibbonItem]:
        return self.ribbons.get_recents()

    def favorite_matching(self, preset, geometry: str) -> Optional[RibbonItem]:
        return self.ribbons.favorite_matching(preset, geometry)

    def recent_matching(self, preset, geometry: str) -> Optional[RibbonItem]:
        return self.ribbons.recent_matching(preset, geometry)

    def toggle_favorite(self, preset, geometry: str) -> None:
        self.ribbons.toggle_favorite(preset, geometry)

    def add_favorite(self, preset, geometry: str) -> None:
        self.ribbons.add_favorite(preset, geometry)

    def remove_favorite(self, preset, geometry: str) -> None:
        self.ribbons.remove_favorite(preset, geometry)

    def move_favorite(self, from_index: int, to_index: int) -> Optional[list[RibbonItem]]:
        return self.ribbons.move_favorite(from_index, to_index)

    def remove_recent(self, preset, geometry: str) -> None:
        self.ribbons.remove_recent(preset, geometry)

    def move_recent(self, from_index: int, to_index: int) -> Optional[list[RibbonItem]]:
        return self.ribbons.move_recent(from_index, to_index)

    def move_recent_item(self, item: RibbonItem, before_item: RibbonItem) -> Optional[list[RibbonItem]]:
        return self.ribbons.move_recent_item(item, before_item)

    def set_most_recent(self, preset, geometry: str) -> None:
        self.ribbons.set_most_recent(preset, geometry)
