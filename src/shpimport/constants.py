from __future__ import annotations

import os

# Module settings
DEFAULT_ENCODING = os.getenv("SHPIMPORT_ENCODING", "utf-8")
DEFAULT_ENCODING_ERRORS = "replace"
DEFAULT_LAYER = "0"
DEFAULT_LABEL_HEIGHT = 2.5

# Main file and index file layout
SHP_FILE_CODE = 9994
SHP_VERSION = 1000
HEADER_LENGTH = 100
RECORD_HEADER_LENGTH = 8
INDEX_ENTRY_LENGTH = 8

# Constants for shape types
NULL = 0
POINT = 1
POLYLINE = 3
POLYGON = 5
MULTIPOINT = 8
POINTZ = 11
POLYLINEZ = 13
POLYGONZ = 15
MULTIPOINTZ = 18
POINTM = 21
POLYLINEM = 23
POLYGONM = 25
MULTIPOINTM = 28
MULTIPATCH = 31

SHAPETYPE_LOOKUP = {
    NULL: "NULL",
    POINT: "POINT",
    POLYLINE: "POLYLINE",
    POLYGON: "POLYGON",
    MULTIPOINT: "MULTIPOINT",
    POINTZ: "POINTZ",
    POLYLINEZ: "POLYLINEZ",
    POLYGONZ: "POLYGONZ",
    MULTIPOINTZ: "MULTIPOINTZ",
    POINTM: "POINTM",
    POLYLINEM: "POLYLINEM",
    POLYGONM: "POLYGONM",
    MULTIPOINTM: "MULTIPOINTM",
    MULTIPATCH: "MULTIPATCH",
}

# Shape type families
Point_shapeTypes = frozenset([POINT, POINTM, POINTZ])
PointM_shapeTypes = frozenset([POINTM, POINTZ])
MultiPoint_shapeTypes = frozenset([MULTIPOINT, MULTIPOINTM, MULTIPOINTZ])
Polyline_shapeTypes = frozenset([POLYLINE, POLYLINEM, POLYLINEZ])
Polygon_shapeTypes = frozenset([POLYGON, POLYGONM, POLYGONZ])
MultiPatch_shapeTypes = frozenset([MULTIPATCH])

_CanHaveParts_shapeTypes = Polyline_shapeTypes | Polygon_shapeTypes | MultiPatch_shapeTypes

# Multi-point shapes carrying a z block (PointZ stores a single z inline)
_HasZ_shapeTypes = frozenset([POLYLINEZ, POLYGONZ, MULTIPOINTZ, MULTIPATCH])
# Multi-point shapes with an optional trailing m block
_HasM_shapeTypes = frozenset(
    [
        POLYLINEM,
        POLYLINEZ,
        POLYGONM,
        POLYGONZ,
        MULTIPOINTM,
        MULTIPOINTZ,
        MULTIPATCH,
    ]
)

TRIANGLE_STRIP = 0
TRIANGLE_FAN = 1
OUTER_RING = 2
INNER_RING = 3
FIRST_RING = 4
RING = 5

PARTTYPE_LOOKUP = {
    0: "TRIANGLE_STRIP",
    1: "TRIANGLE_FAN",
    2: "OUTER_RING",
    3: "INNER_RING",
    4: "FIRST_RING",
    5: "RING",
}

Triangle_partTypes = frozenset([TRIANGLE_STRIP, TRIANGLE_FAN])
Ring_partTypes = frozenset([OUTER_RING, INNER_RING, FIRST_RING, RING])

NODATA = -10e38  # as per the ESRI shapefile whitepaper, only used for m-values.

# Default styling of a destination drawing ("BYLAYER" in AutoCAD terms)
COLOR_BYLAYER = 256
LINETYPE_BYLAYER = "BYLAYER"
WIDTH_BYLAYER = -1.0
