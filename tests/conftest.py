"""Shared fixtures: fake features and resolvers, small catalogs, built indexes."""

import pytest

from presetkit.engine.preset_index import PresetIndex
from presetkit.engine.storage import MemoryStorage


class FakeEntity:
    """Feature stand-in with a fixed geometry and address-line flag."""

    def __init__(self, id, tags=None, type="node", geometry="point", on_address_line=False):
        self.id = id
        self.tags = tags or {}
        self.type = type
        self._geometry = geometry
        self._on_address_line = on_address_line

    def geometry(self, resolver):
        return self._geometry

    def is_on_address_line(self, resolver):
        return self._on_address_line


class FakeResolver:
    """Resolver stand-in that memoizes by (entity id, slot name)."""

    def __init__(self):
        self._cache = {}
        self.computed = 0

    def transient(self, entity, key, fn):
        cache_key = (entity.id, key)
        if cache_key not in self._cache:
            self.computed += 1
            self._cache[cache_key] = fn()
        return self._cache[cache_key]


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def index(storage):
    """Index built from the packaged catalog."""
    return PresetIndex(storage=storage).init()


@pytest.fixture
def shop_catalog():
    return {
        "presets": {
            "point": {"tags": {}, "geometry": ["point"]},
            "A": {"tags": {"shop": "*"}, "geometry": ["point"]},
            "B": {"tags": {"shop": "bakery"}, "geometry": ["point"]},
        }
    }


@pytest.fixture
def numbered_catalog():
    """Generic presets plus 40 distinct point presets p0..p39."""
    presets = {
        "point": {"tags": {}, "geometry": ["point", "vertex"]},
        "line": {"tags": {}, "geometry": ["line"]},
        "area": {"tags": {"area": "yes"}, "geometry": ["area"]},
    }
    for i in range(40):
        presets[f"p{i}"] = {"tags": {"ref": f"v{i}"}, "geometry": ["point", "line"]}
    return {"presets": presets}


@pytest.fixture
def numbered_index(numbered_catalog, storage):
    from presetkit.loaders import parse_catalog

    return PresetIndex(storage=storage, builtin_catalog=parse_catalog(numbered_catalog)).init()
