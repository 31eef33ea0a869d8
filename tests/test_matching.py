"""Tests for presets, the tag index and the matcher."""

import pytest

from presetkit.engine.collection import PresetCollection, fallback_id, uniq_by_id
from presetkit.engine.preset import Preset
from presetkit.engine.preset_index import PresetIndex
from presetkit.engine.tag_index import TagIndex
from presetkit.schemas.preset_schema import GEOMETRIES, RawPreset

from conftest import FakeEntity


def _preset(preset_id, tags, geometry=("point",), **kwargs):
    raw = RawPreset.model_validate({"tags": tags, "geometry": list(geometry), **kwargs})
    return Preset.from_raw(preset_id, raw, {})


class TestPresetScore:
    def test_literal_and_wildcard(self):
        bakery = _preset("shop/bakery", {"shop": "bakery"})
        shop = _preset("shop", {"shop": "*"})
        tags = {"shop": "bakery"}
        assert bakery.match_score(tags) == 1.0
        assert shop.match_score(tags) == 0.5

    def test_missing_key_is_negative(self):
        preset = _preset("x", {"amenity": "cafe", "cuisine": "coffee_shop"})
        assert preset.match_score({"amenity": "cafe"}) == -1

    def test_match_score_weight(self):
        building = _preset("building", {"building": "*"}, ("area",), matchScore=0.6)
        assert building.match_score({"building": "yes"}) == 0.3

    def test_add_tags_bonus(self):
        preset = _preset("x", {"leisure": "pitch"}, addTags={"leisure": "pitch", "sport": "tennis"})
        assert preset.match_score({"leisure": "pitch"}) == 1.0
        assert preset.match_score({"leisure": "pitch", "sport": "tennis"}) == 2.0

    def test_is_fallback(self):
        assert _preset("point", {}).is_fallback()
        assert _preset("area", {"area": "yes"}, ("area",)).is_fallback()
        assert not _preset("shop", {"shop": "*"}).is_fallback()
        assert not _preset("x", {"area": "yes", "leisure": "park"}, ("area",)).is_fallback()

    def test_primary_tag_is_first_declared(self):
        preset = _preset("x", {"highway": "pedestrian", "area": "yes"}, ("area",))
        assert preset.primary_tag == ("highway", "pedestrian")
        assert _preset("point", {}).primary_tag is None

    def test_tags_are_read_only(self):
        preset = _preset("shop", {"shop": "*"})
        with pytest.raises(TypeError):
            preset.tags["shop"] = "bakery"


class TestCollection:
    def test_lookup_and_views(self):
        a = _preset("a", {"a": "1"}, ("point", "area"))
        b = _preset("b", {"b": "1"}, ("line",))
        collection = PresetCollection([a, b])
        assert collection.item("b") is b
        assert collection.item("zzz") is None
        assert collection.index("b") == 1
        assert collection.index("zzz") == -1
        assert [p.id for p in collection.match_geometry("area")] == ["a"]
        assert len(collection) == 2

    def test_upsert_keeps_position(self):
        a = _preset("a", {"a": "1"})
        b = _preset("b", {"b": "1"})
        collection = PresetCollection([a, b])
        a2 = _preset("a", {"a": "2"})
        collection.upsert(a2)
        collection.upsert(_preset("c", {"c": "1"}))
        assert [p.id for p in collection] == ["a", "b", "c"]
        assert collection.item("a") is a2

    def test_fallback_id(self):
        assert fallback_id("vertex") == "point"
        assert fallback_id("line") == "line"

    def test_uniq_by_id(self):
        a = _preset("a", {})
        b = _preset("b", {})
        assert uniq_by_id([a, None, b, a]) == [a, b]


class TestTagIndex:
    def test_bucket_invariant(self, index):
        for geometry in GEOMETRIES:
            for key in index.tag_index.keys(geometry):
                for preset in index.tag_index.bucket(geometry, key):
                    assert preset.match_geometry(geometry)
                    assert key in preset.tags
        for preset in index:
            for geometry in preset.geometry:
                for key in preset.tags:
                    assert preset in index.tag_index.bucket(geometry, key)

    def test_bucket_order_is_catalog_order(self, index):
        ids = [p.id for p in index.tag_index.bucket("point", "shop")]
        assert ids == ["shop", "shop/bakery", "shop/fishmonger", "shop/seafood"]

    def test_rebuild_is_identical(self, storage):
        first = PresetIndex(storage=storage).init().tag_index.snapshot()
        second = PresetIndex(storage=storage).init().tag_index.snapshot()
        assert first == second

    def test_build_twice_does_not_duplicate(self, index):
        before = index.tag_index.snapshot()
        index.build(index.builtin_catalog())
        assert index.tag_index.snapshot() == before

    def test_empty_index_matches_nothing(self):
        assert TagIndex().match({"shop": "bakery"}, "point") is None


class TestMatchTags:
    def test_literal_beats_wildcard(self, shop_catalog):
        index = PresetIndex().build(shop_catalog)
        assert index.match_tags({"shop": "bakery"}, "point").id == "B"
        assert index.match_tags({"shop": "florist"}, "point").id == "A"

    def test_never_empty(self, index):
        tag_sets = [{}, {"foo": "bar"}, {"shop": "bakery"}, {"addr:street": "Main"}, {"area": "yes"}]
        for geometry in GEOMETRIES:
            for tags in tag_sets:
                assert index.match_tags(tags, geometry) is not None

    def test_fallbacks(self, index):
        assert index.match_tags({}, "line").id == "line"
        assert index.match_tags({"foo": "bar"}, "relation").id == "relation"
        assert index.match_tags({"foo": "bar"}, "vertex").id == "point"
        assert index.match_tags({"area": "yes"}, "area").id == "area"

    def test_geometry_filter(self, index):
        assert index.match_tags({"highway": "crossing"}, "vertex").id == "highway/crossing"
        assert index.match_tags({"highway": "crossing"}, "line").id == "line"

    def test_address_beats_generic(self, index):
        assert index.match_tags({"addr:housenumber": "12", "addr:street": "Main"}, "point").id == "address"
        assert index.match_tags({"area": "yes", "addr:street": "Main"}, "area").id == "address"

    def test_address_does_not_beat_specific(self, index):
        tags = {"building": "yes", "addr:housenumber": "12"}
        assert index.match_tags(tags, "area").id == "building"

    def test_address_needs_bucket_for_geometry(self, index):
        assert index.match_tags({"addr:street": "Main"}, "line").id == "line"

    def test_suggestion_with_extra_tag_wins(self, index):
        tags = {"amenity": "cafe", "brand": "Starbucks"}
        assert index.match_tags(tags, "point").id == "amenity/cafe/Starbucks"
        assert index.match_tags({"amenity": "cafe"}, "point").id == "amenity/cafe"

    def test_first_equal_score_wins(self):
        index = PresetIndex().build(
            {
                "presets": {
                    "point": {"tags": {}, "geometry": ["point"]},
                    "first": {"tags": {"amenity": "cafe"}, "geometry": ["point"]},
                    "second": {"tags": {"amenity": "cafe"}, "geometry": ["point"]},
                }
            }
        )
        assert index.match_tags({"amenity": "cafe"}, "point").id == "first"

    def test_input_key_order_breaks_ties(self):
        index = PresetIndex().build(
            {
                "presets": {
                    "point": {"tags": {}, "geometry": ["point"]},
                    "x": {"tags": {"a": "1"}, "geometry": ["point"]},
                    "y": {"tags": {"b": "1"}, "geometry": ["point"]},
                }
            }
        )
        assert index.match_tags({"a": "1", "b": "1"}, "point").id == "x"
        assert index.match_tags({"b": "1", "a": "1"}, "point").id == "y"

    def test_categories_never_match(self, index):
        category = index.item("category-building")
        assert category.match_score({"building": "yes"}) == -1
        assert index.match_tags({"building": "yes"}, "area").id == "building"


class TestMatchEntity:
    def test_match_is_cached(self, index, resolver):
        entity = FakeEntity("n1", {"shop": "bakery"})
        first = index.match(entity, resolver)
        second = index.match(entity, resolver)
        assert first is second
        assert first.id == "shop/bakery"
        assert resolver.computed == 1

    def test_vertex_on_address_line_is_point(self, index, resolver):
        tags = {"shop": "bakery"}
        vertex = FakeEntity("n1", tags, geometry="vertex")
        on_line = FakeEntity("n2", tags, geometry="vertex", on_address_line=True)
        assert index.match(vertex, resolver).id == "point"
        assert index.match(on_line, resolver).id == "shop/bakery"


class TestAllowsVertex:
    def test_ways_never(self, index, resolver):
        assert index.allows_vertex(FakeEntity("w1", type="way"), resolver) is False

    def test_untagged_node(self, index, resolver):
        assert index.allows_vertex(FakeEntity("n1"), resolver) is True
        assert resolver.computed == 0

    def test_point_only_tags(self, index, resolver):
        assert index.allows_vertex(FakeEntity("n1", {"amenity": "cafe"}), resolver) is False

    def test_address_line_overrides(self, index, resolver):
        entity = FakeEntity("n1", {"amenity": "cafe"}, on_address_line=True)
        assert index.allows_vertex(entity, resolver) is True

    def test_vertex_tags(self, index, resolver):
        assert index.allows_vertex(FakeEntity("n1", {"highway": "crossing"}), resolver) is True
        assert index.allows_vertex(FakeEntity("n2", {"natural": "tree"}), resolver) is True

    def test_unknown_tags_allowed(self, index, resolver):
        assert index.allows_vertex(FakeEntity("n1", {"foo": "bar"}), resolver) is True

    def test_custom_classifier(self, resolver):
        index = PresetIndex(geometry_classifier=lambda tags: {"point": True}).init()
        assert index.allows_vertex(FakeEntity("n1", {"highway": "crossing"}), resolver) is False
