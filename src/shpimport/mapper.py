"""
Turns decoded geometry records into drawing entities.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from .constants import (
    DEFAULT_LABEL_HEIGHT,
    TRIANGLE_STRIP,
    Ring_partTypes,
    Triangle_partTypes,
)
from .entities import Entity, LineEntity, PointEntity, PolylineEntity, Style, TextEntity
from .exceptions import CorruptGeometry
from .geometric_calculations import ring_holes, triangle_fan, triangle_strip
from .shapes import (
    GeometryRecord,
    MultiPatchRecord,
    MultiPointRecord,
    PointRecord,
    PolyRecord,
)
from .types import Point2D, Vertex


def _vertex(x: float, y: float, z: Optional[float]) -> Vertex:
    if z is None:
        return (x, y)
    return (x, y, z)


def _vertices(part: Sequence[Point2D], zs: Optional[Sequence[float]]) -> tuple[Vertex, ...]:
    if zs is None:
        return tuple((x, y) for x, y in part)
    return tuple((x, y, z) for (x, y), z in zip(part, zs))


def _point(location: Vertex, style: Style, label: Optional[str], height: float) -> Entity:
    if label is not None:
        return TextEntity(insert=location, text=label, height=height, style=style)
    return PointEntity(location=location, style=style)


def _chain(vertices: tuple[Vertex, ...], style: Style) -> list[Entity]:
    # Degenerate parts: nothing to draw, or a lone point
    if not vertices:
        return []
    if len(vertices) == 1:
        return [PointEntity(location=vertices[0], style=style)]
    if len(vertices) == 2:
        return [LineEntity(start=vertices[0], end=vertices[1], style=style)]
    return [PolylineEntity(vertices=vertices, closed=False, style=style)]


def _ring(vertices: tuple[Vertex, ...], style: Style, hole: bool) -> list[Entity]:
    if not vertices:
        return []
    if len(vertices) == 1:
        return [PointEntity(location=vertices[0], style=style)]
    return [PolylineEntity(vertices=vertices, closed=True, style=style, hole=hole)]


def _triangles(vertices: tuple[Vertex, ...], partType: int, style: Style) -> list[Entity]:
    indices = triangle_strip if partType == TRIANGLE_STRIP else triangle_fan
    return [
        PolylineEntity(vertices=(vertices[a], vertices[b], vertices[c]), closed=True, style=style)
        for a, b, c in indices(len(vertices))
    ]


def _parts(record: PolyRecord) -> list[tuple[Vertex, ...]]:
    zs: Sequence[Optional[Sequence[float]]] = record.z or [None] * len(record.parts)
    return [_vertices(part, z) for part, z in zip(record.parts, zs)]


def map_point(
    record: PointRecord,
    style: Style,
    label: Optional[str] = None,
    label_height: float = DEFAULT_LABEL_HEIGHT,
) -> list[Entity]:
    return [_point(_vertex(record.x, record.y, record.z), style, label, label_height)]


def map_multipoint(
    record: MultiPointRecord,
    style: Style,
    label: Optional[str] = None,
    label_height: float = DEFAULT_LABEL_HEIGHT,
) -> list[Entity]:
    return [
        _point(vertex, style, label, label_height)
        for vertex in _vertices(record.points, record.z)
    ]


def map_polyline(record: PolyRecord, style: Style) -> list[Entity]:
    entities: list[Entity] = []
    for vertices in _parts(record):
        entities.extend(_chain(vertices, style))
    return entities


def map_polygon(record: PolyRecord, style: Style) -> list[Entity]:
    rings = _parts(record)
    entities: list[Entity] = []
    for vertices, hole in zip(rings, ring_holes(rings)):
        entities.extend(_ring(vertices, style, hole))
    return entities


def map_multipatch(
    record: MultiPatchRecord, style: Style, trust_part_types: bool = True
) -> list[Entity]:
    """Triangle strips and fans become one closed three vertex polyline
    per triangle. Rings become closed polylines, classified as holes by
    their part type or orientation.
    """
    parts = _parts(record)
    if len(record.partTypes) != len(parts):
        raise CorruptGeometry(
            f"Record {record.oid}: {len(record.partTypes)} part types for {len(parts)} parts"
        )
    holes = ring_holes(parts, record.partTypes, trust_part_types)
    entities: list[Entity] = []
    for vertices, partType, hole in zip(parts, record.partTypes, holes):
        if partType in Ring_partTypes:
            entities.extend(_ring(vertices, style, hole))
        elif partType in Triangle_partTypes:
            entities.extend(_triangles(vertices, partType, style))
        else:
            raise CorruptGeometry(f"Record {record.oid}: unknown part type {partType}")
    return entities


def map_record(
    record: GeometryRecord,
    style: Style,
    label: Optional[str] = None,
    trust_part_types: bool = True,
    label_height: float = DEFAULT_LABEL_HEIGHT,
) -> list[Entity]:
    """Returns the entities drawing record. Null and unknown shapes,
    having no geometry, map to no entities.
    """
    if isinstance(record, PointRecord):
        return map_point(record, style, label, label_height)
    if isinstance(record, MultiPointRecord):
        return map_multipoint(record, style, label, label_height)
    if isinstance(record, MultiPatchRecord):
        return map_multipatch(record, style, trust_part_types)
    if isinstance(record, PolyRecord):
        if record.isPolygon:
            return map_polygon(record, style)
        return map_polyline(record, style)
    return []
