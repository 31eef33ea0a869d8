"""Tests for catalog loaders and file storage helpers."""

import asyncio
import json

import httpx
import pytest
import yaml
from pydantic import ValidationError

from presetkit.loaders import BUILTIN_CATALOG, fetch_catalog, load_builtin_catalog, load_catalog, parse_catalog
from presetkit.schemas.preset_schema import Catalog
from presetkit.utils.file_utils import load_json_object, save_json

CATALOG = {
    "presets": {
        "point": {"tags": {}, "geometry": ["point", "vertex"]},
        "shop": {"tags": {"shop": "*"}, "geometry": ["point", "area"], "matchScore": 0.9},
    },
    "defaults": {"point": ["shop"]},
}


class TestLoadCatalog:
    def test_json(self, tmp_path):
        path = tmp_path / "presets.json"
        path.write_text(json.dumps(CATALOG))
        catalog = load_catalog(path)
        assert list(catalog.presets) == ["point", "shop"]
        assert catalog.presets["shop"].match_score == 0.9

    def test_yaml(self, tmp_path):
        path = tmp_path / "presets.yml"
        path.write_text(yaml.safe_dump(CATALOG, sort_keys=False))
        catalog = load_catalog(path)
        assert list(catalog.presets) == ["point", "shop"]
        assert catalog.defaults.point == ["shop"]

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "presets.xml"
        path.write_text("<presets/>")
        with pytest.raises(ValueError, match="Unsupported catalog format"):
            load_catalog(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_catalog(tmp_path / "missing.json")

    def test_parse_passes_catalog_through(self):
        catalog = Catalog()
        assert parse_catalog(catalog) is catalog

    def test_parse_rejects_bad_shape(self):
        with pytest.raises(ValidationError):
            parse_catalog({"presets": {"x": {"geometry": "point"}}})


class TestBuiltinCatalog:
    def test_packaged_file_exists(self):
        assert BUILTIN_CATALOG.exists()

    def test_generic_presets_present(self):
        catalog = load_builtin_catalog()
        for preset_id in ("point", "line", "area", "relation"):
            assert preset_id in catalog.presets

    def test_defaults_reference_known_ids(self):
        catalog = load_builtin_catalog()
        known = set(catalog.presets) | set(catalog.categories)
        for geometry in ("point", "vertex", "line", "area", "relation"):
            assert set(getattr(catalog.defaults, geometry)) <= known


class TestFetchCatalog:
    def test_fetch(self):
        async def run():
            transport = httpx.MockTransport(lambda request: httpx.Response(200, json=CATALOG))
            async with httpx.AsyncClient(transport=transport) as client:
                return await fetch_catalog("https://example.org/presets.json", client=client)

        catalog = asyncio.run(run())
        assert catalog.presets["shop"].tags == {"shop": "*"}

    def test_status_error(self):
        async def run():
            transport = httpx.MockTransport(lambda request: httpx.Response(404))
            async with httpx.AsyncClient(transport=transport) as client:
                return await fetch_catalog("https://example.org/presets.json", client=client)

        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(run())


class TestFileUtils:
    def test_save_json_replaces_without_leftovers(self, tmp_path):
        path = tmp_path / "prefs" / "ribbons.json"
        save_json({"a": "1"}, path)
        save_json({"b": "2"}, path)
        assert load_json_object(path) == {"b": "2"}
        assert [p.name for p in path.parent.iterdir()] == ["ribbons.json"]

    def test_load_json_object_rejects_other_documents(self, tmp_path):
        path = tmp_path / "ribbons.json"
        for document in ("[1, 2]", "null", "3"):
            path.write_text(document)
            with pytest.raises(ValueError, match="Expected a JSON object"):
                load_json_object(path)
