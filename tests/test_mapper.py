"""
Tests for mapping decoded records to drawing entities, and the
ring and triangle helpers behind it.
"""

import pytest

import shpimport
from shpimport import (
    LineEntity,
    MultiPatchRecord,
    MultiPointRecord,
    NullRecord,
    PointEntity,
    PointRecord,
    PolyRecord,
    PolylineEntity,
    Style,
    TextEntity,
    UnknownRecord,
    is_cw,
    map_record,
    ring_holes,
    signed_area,
    triangle_fan,
    triangle_strip,
)

STYLE = Style(color=1, linetype="DASHED", width=0.5)

# clockwise (outer) and counter-clockwise (hole) unit squares
CW = [(0, 0), (0, 1), (1, 1), (1, 0)]
CCW = [(0, 0), (1, 0), (1, 1), (0, 1)]


def _poly(shapeType, parts, z=None, partTypes=None):
    bbox = (0, 0, 10, 10)
    if partTypes is not None:
        return MultiPatchRecord(
            oid=0, shapeType=shapeType, parts=parts, bbox=bbox, z=z, partTypes=tuple(partTypes)
        )
    return PolyRecord(oid=0, shapeType=shapeType, parts=parts, bbox=bbox, z=z)


def test_signed_area():
    """
    Assert the orientation convention: clockwise rings have
    a negative area, whether or not the ring repeats its first point.
    """
    assert signed_area(CW) == -1.0
    assert signed_area(CCW) == 1.0
    assert signed_area(CW + [CW[0]]) == -1.0
    assert signed_area([(0, 0), (1, 1)]) == 0.0
    assert is_cw(CW)
    assert not is_cw(CCW)


def test_ring_holes_by_orientation():
    assert ring_holes([CW, CCW, [(0, 0), (1, 1)]]) == [False, True, False]


def test_ring_holes_trust_part_types():
    """
    Assert that declared ring types win when trusted, and that
    orientation decides otherwise and for plain RING parts.
    """
    rings = [CCW, CW, CW, CCW]
    partTypes = [shpimport.OUTER_RING, shpimport.INNER_RING, shpimport.FIRST_RING, shpimport.RING]
    assert ring_holes(rings, partTypes, trust_part_types=True) == [False, True, False, True]
    assert ring_holes(rings, partTypes, trust_part_types=False) == [True, False, False, True]


@pytest.mark.parametrize("n", [0, 1, 2, 3, 4, 7])
def test_triangle_counts(n):
    assert len(list(triangle_strip(n))) == max(0, n - 2)
    assert len(list(triangle_fan(n))) == max(0, n - 2)


def test_triangle_indices():
    assert list(triangle_strip(5)) == [(0, 1, 2), (1, 2, 3), (2, 3, 4)]
    assert list(triangle_fan(5)) == [(0, 1, 2), (0, 2, 3), (0, 3, 4)]


def test_point():
    record = PointRecord(oid=0, shapeType=shpimport.POINT, x=1.25, y=-3.5)
    assert map_record(record, STYLE) == [PointEntity(location=(1.25, -3.5), style=STYLE)]


def test_pointz_keeps_elevation():
    record = PointRecord(oid=0, shapeType=shpimport.POINTZ, x=1, y=2, z=3, m=None)
    (entity,) = map_record(record, STYLE)
    assert entity.location == (1, 2, 3)
    assert entity.elevation == 3


def test_point_as_label():
    record = PointRecord(oid=0, shapeType=shpimport.POINT, x=1, y=2)
    (entity,) = map_record(record, STYLE, label="Well 4", label_height=1.5)
    assert entity == TextEntity(insert=(1, 2), text="Well 4", height=1.5, style=STYLE)


def test_multipoint_one_entity_per_point():
    record = MultiPointRecord(
        oid=0,
        shapeType=shpimport.MULTIPOINTZ,
        points=[(0, 0), (1, 1), (2, 2)],
        bbox=(0, 0, 2, 2),
        z=[5, 6, 7],
    )
    entities = map_record(record, STYLE)
    assert [e.location for e in entities] == [(0, 0, 5), (1, 1, 6), (2, 2, 7)]
    assert all(e.style == STYLE for e in entities)


def test_polyline_parts():
    """
    Assert that each arc part becomes its own entity, in file
    order, and two point parts become lines.
    """
    record = _poly(
        shpimport.POLYLINE, [[(0, 0), (1, 1)], [(2, 2), (3, 3), (4, 2)], [(9, 9)], []]
    )
    entities = map_record(record, STYLE)
    assert entities == [
        LineEntity(start=(0, 0), end=(1, 1), style=STYLE),
        PolylineEntity(vertices=((2, 2), (3, 3), (4, 2)), closed=False, style=STYLE),
        PointEntity(location=(9, 9), style=STYLE),
    ]


def test_polylinez_vertices():
    record = _poly(shpimport.POLYLINEZ, [[(0, 0), (1, 1), (2, 0)]], z=[[1, 2, 3]])
    (entity,) = map_record(record, STYLE)
    assert entity.vertices == ((0, 0, 1), (1, 1, 2), (2, 0, 3))
    assert entity.is3d


def test_polygon_rings():
    """
    Assert that every ring becomes one closed polyline with the
    ring's own vertices, flagged as a hole when counter-clockwise.
    """
    outer = [(0, 0), (0, 10), (10, 10), (10, 0), (0, 0)]
    hole = [(2, 2), (4, 2), (4, 4), (2, 4)]
    entities = map_record(_poly(shpimport.POLYGON, [outer, hole]), STYLE)
    assert len(entities) == 2
    assert [len(e.vertices) for e in entities] == [5, 4]
    assert all(e.closed for e in entities)
    assert [e.hole for e in entities] == [False, True]


def test_multipatch_decomposition():
    strip = [(0, 0), (1, 0), (0, 1), (1, 1), (0, 2)]
    fan = [(5, 5), (6, 5), (6, 6), (5, 6)]
    ring = [(0, 0), (0, 5), (5, 5), (5, 0)]
    record = _poly(
        shpimport.MULTIPATCH,
        [strip, fan, ring],
        z=[[0] * 5, [1] * 4, [2] * 4],
        partTypes=[shpimport.TRIANGLE_STRIP, shpimport.TRIANGLE_FAN, shpimport.OUTER_RING],
    )
    entities = map_record(record, STYLE)
    assert len(entities) == 3 + 2 + 1
    triangles = entities[:5]
    assert all(len(e.vertices) == 3 and e.closed for e in triangles)
    assert triangles[0].vertices == ((0, 0, 0), (1, 0, 0), (0, 1, 0))
    assert triangles[3].vertices == ((5, 5, 1), (6, 5, 1), (6, 6, 1))
    assert triangles[4].vertices == ((5, 5, 1), (6, 6, 1), (5, 6, 1))
    assert entities[5].closed and not entities[5].hole


def test_multipatch_recompute_rings():
    """
    Assert that with trust_part_types off, an INNER_RING drawn
    clockwise is treated as an outer boundary.
    """
    record = _poly(
        shpimport.MULTIPATCH, [CW], z=[[0] * 4], partTypes=[shpimport.INNER_RING]
    )
    assert map_record(record, STYLE)[0].hole
    assert not map_record(record, STYLE, trust_part_types=False)[0].hole


def test_multipatch_short_triangle_parts():
    record = _poly(
        shpimport.MULTIPATCH,
        [[(0, 0), (1, 1)]],
        z=[[0, 0]],
        partTypes=[shpimport.TRIANGLE_FAN],
    )
    assert map_record(record, STYLE) == []


def test_null_and_unknown_map_to_nothing():
    assert map_record(NullRecord(oid=0), STYLE) == []
    assert map_record(UnknownRecord(oid=0, shapeType=99), STYLE) == []
