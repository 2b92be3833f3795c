"""
shpimport
Imports ESRI Shapefiles into CAD drawings: decodes the .shp, .shx and
.dbf files and draws every shape as points, lines, polylines or labels,
styled from fixed settings or from the attribute table.
Compatible with Python versions >=3.9
"""

from __future__ import annotations

import logging

from .__version__ import __version__
from .constants import (
    FIRST_RING,
    INNER_RING,
    MULTIPATCH,
    MULTIPOINT,
    MULTIPOINTM,
    MULTIPOINTZ,
    NULL,
    OUTER_RING,
    PARTTYPE_LOOKUP,
    POINT,
    POINTM,
    POINTZ,
    POLYGON,
    POLYGONM,
    POLYGONZ,
    POLYLINE,
    POLYLINEM,
    POLYLINEZ,
    RING,
    SHAPETYPE_LOOKUP,
    TRIANGLE_FAN,
    TRIANGLE_STRIP,
)
from .cursor import BinaryCursor
from .entities import (
    Drawing,
    Entity,
    LineEntity,
    MemoryDrawing,
    PointEntity,
    PolylineEntity,
    Style,
    TextEntity,
)
from .exceptions import (
    AttributeCountMismatch,
    AttributeTableError,
    BadExtension,
    BadSignature,
    CorruptGeometry,
    DegenerateGeometry,
    FileNotFound,
    MissingField,
    ShapeTypeMismatch,
    ShpImportException,
    TruncatedInput,
    UnsupportedShapeType,
)
from .geometric_calculations import is_cw, ring_holes, signed_area, triangle_fan, triangle_strip
from .header import ShpHeader, read_header, read_index, walk_offsets
from .importer import (
    ImportConfig,
    ImportResult,
    ImportWarning,
    ShapefileImporter,
    import_shapefile,
)
from .mapper import map_record
from .shapes import (
    GeometryRecord,
    MultiPatchRecord,
    MultiPointRecord,
    NullRecord,
    PointRecord,
    PolyRecord,
    UnknownRecord,
    decode_content,
    decode_record,
)
from .style import Fixed, FromField, StyleResolver, StyleSource, resolve
from .table import AttributeRow, AttributeTable, Field

__all__ = [
    "__version__",
    "NULL",
    "POINT",
    "POLYLINE",
    "POLYGON",
    "MULTIPOINT",
    "POINTZ",
    "POLYLINEZ",
    "POLYGONZ",
    "MULTIPOINTZ",
    "POINTM",
    "POLYLINEM",
    "POLYGONM",
    "MULTIPOINTM",
    "MULTIPATCH",
    "SHAPETYPE_LOOKUP",
    "TRIANGLE_STRIP",
    "TRIANGLE_FAN",
    "OUTER_RING",
    "INNER_RING",
    "FIRST_RING",
    "RING",
    "PARTTYPE_LOOKUP",
    "BinaryCursor",
    "ShpHeader",
    "read_header",
    "read_index",
    "walk_offsets",
    "GeometryRecord",
    "NullRecord",
    "UnknownRecord",
    "PointRecord",
    "MultiPointRecord",
    "PolyRecord",
    "MultiPatchRecord",
    "decode_content",
    "decode_record",
    "Field",
    "AttributeRow",
    "AttributeTable",
    "Fixed",
    "FromField",
    "StyleSource",
    "StyleResolver",
    "resolve",
    "Style",
    "Entity",
    "PointEntity",
    "LineEntity",
    "PolylineEntity",
    "TextEntity",
    "Drawing",
    "MemoryDrawing",
    "map_record",
    "signed_area",
    "is_cw",
    "ring_holes",
    "triangle_strip",
    "triangle_fan",
    "ImportConfig",
    "ImportResult",
    "ImportWarning",
    "ShapefileImporter",
    "import_shapefile",
    "ShpImportException",
    "FileNotFound",
    "BadExtension",
    "BadSignature",
    "UnsupportedShapeType",
    "TruncatedInput",
    "CorruptGeometry",
    "ShapeTypeMismatch",
    "DegenerateGeometry",
    "AttributeTableError",
    "AttributeCountMismatch",
    "MissingField",
]

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())
