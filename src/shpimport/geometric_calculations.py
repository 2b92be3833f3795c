from __future__ import annotations

from collections.abc import Iterator, Sequence

from .constants import FIRST_RING, INNER_RING, OUTER_RING
from .types import BBox, Vertex


def signed_area(coords: Sequence[Vertex], fast: bool = False) -> float:
    """Return the signed area enclosed by a ring using the linear time
    shoelace algorithm. The ring is closed implicitly, so the last vertex
    need not repeat the first. A value >= 0 indicates a counter-clockwise
    oriented ring. A faster version is possible by setting 'fast' to True,
    which returns 2x the area, e.g. if you're only interested in the sign
    of the area.
    """
    n = len(coords)
    if n < 3:
        return 0.0
    area2: float = 0.0
    for i in range(n):
        x0, y0 = coords[i][0], coords[i][1]  # ignore any z values
        x1, y1 = coords[(i + 1) % n][0], coords[(i + 1) % n][1]
        area2 += x0 * y1 - x1 * y0
    if fast:
        return area2

    return area2 / 2.0


def is_cw(coords: Sequence[Vertex]) -> bool:
    """Returns True if a polygon ring has clockwise orientation, determined
    by a negatively signed area.
    """
    area2 = signed_area(coords, fast=True)
    return area2 < 0


def is_hole(coords: Sequence[Vertex]) -> bool:
    """Shapefile rings are outer boundaries when clockwise and holes when
    counter-clockwise. Rings without area count as outer boundaries.
    """
    return signed_area(coords, fast=True) > 0


def ring_holes(
    rings: Sequence[Sequence[Vertex]],
    partTypes: Sequence[int] | None = None,
    trust_part_types: bool = True,
) -> list[bool]:
    """Classifies each ring as a hole (True) or an outer boundary (False).

    Multipatch part types say so explicitly for OUTER_RING, INNER_RING and
    FIRST_RING parts, and are used when trust_part_types is set. Any other
    ring falls back to its orientation.
    """
    holes = []
    for i, ring in enumerate(rings):
        partType = partTypes[i] if partTypes is not None and trust_part_types else None
        if partType in (OUTER_RING, FIRST_RING):
            holes.append(False)
        elif partType == INNER_RING:
            holes.append(True)
        else:
            holes.append(is_hole(ring))
    return holes


def triangle_strip(nVertices: int) -> Iterator[tuple[int, int, int]]:
    """Vertex indices of the triangles of a triangle strip:
    (0, 1, 2), (1, 2, 3), ...
    """
    for i in range(nVertices - 2):
        yield i, i + 1, i + 2


def triangle_fan(nVertices: int) -> Iterator[tuple[int, int, int]]:
    """Vertex indices of the triangles of a triangle fan:
    (0, 1, 2), (0, 2, 3), ...
    """
    for i in range(1, nVertices - 1):
        yield 0, i, i + 1


def bbox_overlap(bbox1: BBox, bbox2: BBox) -> bool:
    """Tests whether two bounding boxes overlap."""
    xmin1, ymin1, xmax1, ymax1 = bbox1
    xmin2, ymin2, xmax2, ymax2 = bbox2
    overlap = xmin1 <= xmax2 and xmin2 <= xmax1 and ymin1 <= ymax2 and ymin2 <= ymax1
    return overlap
