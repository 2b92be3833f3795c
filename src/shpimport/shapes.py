from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .constants import (
    MULTIPATCH,
    NODATA,
    NULL,
    PARTTYPE_LOOKUP,
    POINTZ,
    RECORD_HEADER_LENGTH,
    SHAPETYPE_LOOKUP,
    MultiPatch_shapeTypes,
    MultiPoint_shapeTypes,
    PointM_shapeTypes,
    Point_shapeTypes,
    Polygon_shapeTypes,
    _CanHaveParts_shapeTypes,
    _HasM_shapeTypes,
    _HasZ_shapeTypes,
)
from .cursor import BinaryCursor
from .exceptions import CorruptGeometry, DegenerateGeometry, ShapeTypeMismatch
from .helpers import unpack_2_int32_be
from .types import BBox, MBox, Point2D, ZBox

logger = logging.getLogger(__name__)


def _m_or_none(m: float) -> float | None:
    # Measure values less than -10e38 are nodata values according to the ESRI whitepaper
    return m if m > NODATA else None


@dataclass(frozen=True)
class NullRecord:
    oid: int
    shapeType: int = NULL


@dataclass(frozen=True)
class UnknownRecord:
    """A record whose shape type code is not a known shapefile shape type."""

    oid: int
    shapeType: int


@dataclass(frozen=True)
class PointRecord:
    oid: int
    shapeType: int
    x: float
    y: float
    z: float | None = None
    m: float | None = None


@dataclass(frozen=True)
class MultiPointRecord:
    oid: int
    shapeType: int
    points: list[Point2D]
    bbox: BBox
    z: Optional[list[float]] = None
    m: Optional[list[Optional[float]]] = None
    zbox: Optional[ZBox] = None
    mbox: Optional[MBox] = None


@dataclass(frozen=True)
class PolyRecord:
    """Polylines (arcs) and polygons. Each part is a list of vertices,
    with z and m values, if any, held in lists parallel to the parts.
    """

    oid: int
    shapeType: int
    parts: list[list[Point2D]]
    bbox: BBox
    z: Optional[list[list[float]]] = None
    m: Optional[list[list[Optional[float]]]] = None
    zbox: Optional[ZBox] = None
    mbox: Optional[MBox] = None
    warnings: tuple[DegenerateGeometry, ...] = ()

    @property
    def isPolygon(self) -> bool:
        return self.shapeType in Polygon_shapeTypes


@dataclass(frozen=True)
class MultiPatchRecord(PolyRecord):
    partTypes: tuple[int, ...] = ()


GeometryRecord = Union[
    NullRecord, UnknownRecord, PointRecord, MultiPointRecord, PolyRecord, MultiPatchRecord
]


def _read_point(
    b_io: BinaryCursor, shapeType: int, oid: int
) -> PointRecord:
    x, y = b_io.read_doubles(2)
    z = None
    m = None
    if shapeType == POINTZ:
        z = b_io.read_double()
    if shapeType in PointM_shapeTypes and b_io.remaining() >= 8:
        m = _m_or_none(b_io.read_double())
    return PointRecord(oid=oid, shapeType=shapeType, x=x, y=y, z=z, m=m)


def _read_count(b_io: BinaryCursor, what: str, oid: int) -> int:
    n = b_io.read_int()
    if n < 0:
        raise CorruptGeometry(f"Record {oid}: negative {what} count {n}")
    return n


def _read_points(b_io: BinaryCursor, nPoints: int) -> list[Point2D]:
    flat = b_io.read_doubles(2 * nPoints)
    return list(zip(*(iter(flat),) * 2))  # type: ignore[arg-type]


def _read_zs(b_io: BinaryCursor, nPoints: int) -> tuple[ZBox, list[float]]:
    zbox: ZBox = b_io.read_doubles(2)  # type: ignore[assignment]
    return zbox, list(b_io.read_doubles(nPoints))


def _read_ms(
    b_io: BinaryCursor, nPoints: int
) -> tuple[MBox | None, list[float | None] | None]:
    # The m block is optional for the M and Z types, and
    # only present if the record is long enough to hold it.
    if b_io.remaining() < 16 + 8 * nPoints:
        return None, None
    mmin, mmax = b_io.read_doubles(2)
    ms = [_m_or_none(m) for m in b_io.read_doubles(nPoints)]
    return (_m_or_none(mmin), _m_or_none(mmax)), ms


def _read_multipoint(
    b_io: BinaryCursor, shapeType: int, oid: int
) -> MultiPointRecord:
    bbox: BBox = b_io.read_doubles(4)  # type: ignore[assignment]
    nPoints = _read_count(b_io, "point", oid)
    points = _read_points(b_io, nPoints)
    zbox = zs = None
    if shapeType in _HasZ_shapeTypes:
        zbox, zs = _read_zs(b_io, nPoints)
    mbox = ms = None
    if shapeType in _HasM_shapeTypes:
        mbox, ms = _read_ms(b_io, nPoints)
    return MultiPointRecord(
        oid=oid,
        shapeType=shapeType,
        points=points,
        bbox=bbox,
        z=zs,
        m=ms,
        zbox=zbox,
        mbox=mbox,
    )


def _check_part_indices(parts: tuple[int, ...], nPoints: int, oid: int) -> None:
    # Every point belongs to a part, so the first part starts at point 0
    if not parts:
        if nPoints:
            raise CorruptGeometry(f"Record {oid}: {nPoints} points but no parts")
        return
    if parts[0] != 0:
        raise CorruptGeometry(
            f"Record {oid}: first part starts at index {parts[0]}, not 0"
        )
    previous = 0
    for i, start in enumerate(parts):
        if start < 0 or start >= nPoints:
            raise CorruptGeometry(
                f"Record {oid}: start index {start} of part {i} is out of bounds "
                f"for {nPoints} points"
            )
        if start < previous:
            raise CorruptGeometry(
                f"Record {oid}: start index {start} of part {i} precedes "
                f"the previous part's start index {previous}"
            )
        previous = start


def _split(flat: list, parts: tuple[int, ...], nPoints: int) -> list[list]:
    ends = parts[1:] + (nPoints,)
    return [flat[start:end] for start, end in zip(parts, ends)]


def _read_poly(b_io: BinaryCursor, shapeType: int, oid: int) -> PolyRecord:
    bbox: BBox = b_io.read_doubles(4)  # type: ignore[assignment]
    nParts = _read_count(b_io, "part", oid)
    nPoints = _read_count(b_io, "point", oid)
    parts = b_io.read_ints(nParts)
    _check_part_indices(parts, nPoints, oid)

    partTypes: tuple[int, ...] = ()
    if shapeType in MultiPatch_shapeTypes:
        partTypes = b_io.read_ints(nParts)
        for i, partType in enumerate(partTypes):
            if partType not in PARTTYPE_LOOKUP:
                raise CorruptGeometry(
                    f"Record {oid}: part {i} has unknown multipatch part type {partType}"
                )

    points = _split(_read_points(b_io, nPoints), parts, nPoints)

    zbox = zs = None
    if shapeType in _HasZ_shapeTypes:
        zbox, flat_z = _read_zs(b_io, nPoints)
        zs = _split(flat_z, parts, nPoints)
    mbox = ms = None
    if shapeType in _HasM_shapeTypes:
        mbox, flat_m = _read_ms(b_io, nPoints)
        if flat_m is not None:
            ms = _split(flat_m, parts, nPoints)

    warnings = tuple(
        DegenerateGeometry(
            f"Record {oid}: part {i} has {len(part)} point{'' if len(part) == 1 else 's'}"
        )
        for i, part in enumerate(points)
        if len(part) < 2
    )

    if shapeType == MULTIPATCH:
        return MultiPatchRecord(
            oid=oid,
            shapeType=shapeType,
            parts=points,
            bbox=bbox,
            z=zs,
            m=ms,
            zbox=zbox,
            mbox=mbox,
            warnings=warnings,
            partTypes=partTypes,
        )
    return PolyRecord(
        oid=oid,
        shapeType=shapeType,
        parts=points,
        bbox=bbox,
        z=zs,
        m=ms,
        zbox=zbox,
        mbox=mbox,
        warnings=warnings,
    )


_Reader = Callable[[BinaryCursor, int, int], GeometryRecord]

_READERS: dict[int, _Reader] = {}
for _shapeType in Point_shapeTypes:
    _READERS[_shapeType] = _read_point
for _shapeType in MultiPoint_shapeTypes:
    _READERS[_shapeType] = _read_multipoint
for _shapeType in _CanHaveParts_shapeTypes:
    _READERS[_shapeType] = _read_poly


def decode_content(content: BinaryCursor, fileShapeType: int, oid: int) -> GeometryRecord:
    """Decodes the content of one record, starting at its shape type."""
    shapeType = content.read_int()
    if shapeType == NULL:
        return NullRecord(oid=oid)
    if shapeType not in SHAPETYPE_LOOKUP:
        return UnknownRecord(oid=oid, shapeType=shapeType)
    if shapeType != fileShapeType:
        raise ShapeTypeMismatch(
            f"Record {oid}: shape type {SHAPETYPE_LOOKUP[shapeType]} in a "
            f"{SHAPETYPE_LOOKUP.get(fileShapeType, fileShapeType)} file"
        )
    return _READERS[shapeType](content, shapeType, oid)


def decode_record(
    shp: BinaryCursor, offset: int, fileShapeType: int, oid: int
) -> GeometryRecord:
    """Returns the geometry of the record whose header starts at offset."""
    shp.seek(offset)
    (recNum, recLength) = unpack_2_int32_be(shp.read(RECORD_HEADER_LENGTH))
    if recLength < 0:
        raise CorruptGeometry(f"Record {oid}: negative content length {recLength}")
    if recNum != oid + 1:
        logger.debug("%s: record %d is numbered %d", shp.name, oid, recNum)

    # Read entire record into memory, so that nothing decoded for this
    # record can read past the length its header declares.
    content = BinaryCursor(shp.read(2 * recLength), name=f"{shp.name} record {oid}")
    return decode_content(content, fileShapeType, oid)
