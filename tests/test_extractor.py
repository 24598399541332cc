"""Tests for entity extraction from raw drawing records."""

import math

import pytest

from ilotplan.dxf_parser import BYLAYER, EntityExtractor, EntityKind
from ilotplan.geometry import FALLBACK_BOUNDS


def raw_polyline(vertices, layer="A-WALL", color=7, kind="Polyline"):
    return {
        "kind": kind,
        "layerLabel": layer,
        "styleHint": color,
        "vertices": [{"x": x, "y": y} for x, y in vertices],
    }


class TestExtractCoordinates:
    """Tests for EntityExtractor.extract_coordinates."""

    def setup_method(self):
        self.extractor = EntityExtractor()

    def test_polyline_vertices(self):
        raw = raw_polyline([(0, 0), (10, 0), (10, 5)])
        assert self.extractor.extract_coordinates(raw) == [(0, 0), (10, 0), (10, 5)]

    def test_pair_vertices(self):
        raw = {"type": "lwpolyline", "coordinates": [[0, 0], [2, 2]]}
        assert self.extractor.extract_coordinates(raw) == [(0, 0), (2, 2)]

    def test_line_keeps_two_points(self):
        raw = raw_polyline([(0, 0), (5, 0), (9, 9)], kind="Line")
        assert self.extractor.extract_coordinates(raw) == [(0, 0), (5, 0)]

    def test_single_vertex_is_malformed(self):
        assert self.extractor.extract_coordinates(raw_polyline([(1, 1)])) == []

    def test_unknown_kind_is_malformed(self):
        raw = raw_polyline([(0, 0), (1, 1)], kind="Circle")
        assert self.extractor.extract_coordinates(raw) == []

    def test_non_numeric_vertex_drops_entity(self):
        raw = {"kind": "Polyline", "vertices": [{"x": 0, "y": 0}, {"x": "a", "y": 1}]}
        assert self.extractor.extract_coordinates(raw) == []

    def test_nan_vertex_drops_entity(self):
        raw = {"kind": "Polyline", "vertices": [[0, 0], [math.nan, 1], [2, 2]]}
        assert self.extractor.extract_coordinates(raw) == []

    def test_bool_is_not_a_coordinate(self):
        raw = {"kind": "Line", "vertices": [[True, 0], [1, 1]]}
        assert self.extractor.extract_coordinates(raw) == []

    def test_missing_vertices(self):
        assert self.extractor.extract_coordinates({"kind": "Polyline"}) == []

    def test_non_mapping_record(self):
        assert self.extractor.extract_coordinates(["not", "a", "record"]) == []


class TestExtractEntity:
    """Tests for EntityExtractor.extract_entity."""

    def test_fields(self):
        entity = EntityExtractor().extract_entity(raw_polyline([(0, 0), (3, 4)], layer="DOOR", color=1))
        assert entity.layer == "DOOR"
        assert entity.color == 1
        assert entity.kind is EntityKind.POLYLINE
        assert entity.length == pytest.approx(5.0)

    def test_missing_color_is_bylayer(self):
        raw = {"kind": "Line", "layer": "X", "vertices": [[0, 0], [1, 0]]}
        entity = EntityExtractor().extract_entity(raw)
        assert entity.color == BYLAYER
        assert entity.kind is EntityKind.LINE

    def test_missing_layer_is_empty(self):
        raw = {"kind": "Line", "vertices": [[0, 0], [1, 0]]}
        assert EntityExtractor().extract_entity(raw).layer == ""

    def test_malformed_returns_none(self):
        assert EntityExtractor().extract_entity({"kind": "Line", "vertices": []}) is None


class TestExtract:
    """Tests for EntityExtractor.extract."""

    def test_bounds_cover_all_points(self):
        result = EntityExtractor().extract([
            raw_polyline([(0, 0), (20, 0)]),
            raw_polyline([(5, -3), (5, 12)]),
        ])
        assert len(result.entities) == 2
        assert result.bounds.as_tuple() == (0, -3, 20, 12)
        assert result.used_fallback_bounds is False

    def test_malformed_entities_counted(self):
        result = EntityExtractor().extract([
            raw_polyline([(0, 0), (20, 0)]),
            {"kind": "Polyline", "vertices": [[1, 1]]},
            None,
        ])
        assert len(result.entities) == 1
        assert result.dropped == 2

    def test_empty_input_uses_fallback(self):
        result = EntityExtractor().extract([])
        assert result.entities == []
        assert result.bounds == FALLBACK_BOUNDS
        assert result.used_fallback_bounds is True

    def test_none_input(self):
        result = EntityExtractor().extract(None)
        assert result.bounds == FALLBACK_BOUNDS

    def test_order_preserved(self):
        result = EntityExtractor().extract([
            raw_polyline([(0, 0), (1, 0)], layer="first"),
            raw_polyline([(0, 0), (1, 0)], layer="second"),
        ])
        assert [e.layer for e in result.entities] == ["first", "second"]
