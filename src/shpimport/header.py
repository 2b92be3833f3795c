from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from .constants import (
    HEADER_LENGTH,
    INDEX_ENTRY_LENGTH,
    NODATA,
    RECORD_HEADER_LENGTH,
    SHAPETYPE_LOOKUP,
    SHP_FILE_CODE,
    SHP_VERSION,
)
from .cursor import BinaryCursor
from .exceptions import BadSignature, ShpImportException, UnsupportedShapeType
from .helpers import unpack_2_int32_be
from .types import BBox, MBox, ZBox

logger = logging.getLogger(__name__)

IndexEntry = tuple[int, int]  # (byte offset of record header, content length in bytes)


@dataclass(frozen=True)
class ShpHeader:
    """The fixed 100 byte header shared by .shp and .shx files."""

    fileLength: int  # in bytes
    version: int
    shapeType: int
    bbox: BBox
    zbox: ZBox
    mbox: MBox

    @property
    def shapeTypeName(self) -> str:
        return SHAPETYPE_LOOKUP[self.shapeType]


def read_header(cursor: BinaryCursor) -> ShpHeader:
    """Reads and validates the file header at the start of cursor."""
    cursor.seek(0)
    # Read the whole header first, so that a short file is reported
    # as truncated regardless of which field it breaks off in.
    hdr = BinaryCursor(cursor.read(HEADER_LENGTH), name=f"{cursor.name} header")

    fileCode = hdr.read_int(">")
    if fileCode != SHP_FILE_CODE:
        raise BadSignature(
            f"{cursor.name}: expected file code {SHP_FILE_CODE}, got {fileCode}. "
            "Not an ESRI shapefile?"
        )
    hdr.seek(24)
    # File length (16-bit word * 2 = bytes)
    fileLength = hdr.read_int(">") * 2
    version = hdr.read_int("<")
    if version != SHP_VERSION:
        logger.debug("%s: unexpected shapefile version %d", cursor.name, version)
    shapeType = hdr.read_int("<")
    if shapeType not in SHAPETYPE_LOOKUP:
        raise UnsupportedShapeType(
            f"{cursor.name}: shape type {shapeType} is not a supported shape type"
        )
    # The shapefile's bounding box (lower left, upper right)
    bbox: BBox = hdr.read_doubles(4)  # type: ignore[assignment]
    zbox: ZBox = hdr.read_doubles(2)  # type: ignore[assignment]
    # Measure values less than -10e38 are nodata values according to the ESRI whitepaper
    m_bounds = [m if m > NODATA else None for m in hdr.read_doubles(2)]

    return ShpHeader(
        fileLength=fileLength,
        version=version,
        shapeType=shapeType,
        bbox=bbox,
        zbox=zbox,
        mbox=(m_bounds[0], m_bounds[1]),
    )


def read_index(
    shx: BinaryCursor, shp_header: ShpHeader, shp_size: int
) -> list[IndexEntry] | None:
    """Reads the record offsets and lengths from a .shx file.

    Returns None, so that the caller walks the .shp file record by record
    instead, if the index cannot be read or disagrees with the main file.
    """
    try:
        header = read_header(shx)
    except ShpImportException as e:
        logger.info("Ignoring unreadable index %s: %s", shx.name, e)
        return None

    body_length = header.fileLength - HEADER_LENGTH
    if (
        body_length < 0
        or body_length % INDEX_ENTRY_LENGTH
        or header.fileLength != shx.size
    ):
        logger.info(
            "Ignoring index %s: declared length %d does not match its size %d",
            shx.name,
            header.fileLength,
            shx.size,
        )
        return None
    if header.shapeType != shp_header.shapeType:
        logger.info(
            "Ignoring index %s: shape type %s differs from the main file's %s",
            shx.name,
            header.shapeTypeName,
            shp_header.shapeTypeName,
        )
        return None

    numShapes = body_length // INDEX_ENTRY_LENGTH
    shx.seek(HEADER_LENGTH)
    words = shx.read_ints(2 * numShapes, ">")
    limit = min(shp_header.fileLength, shp_size)
    entries: list[IndexEntry] = []
    for i in range(numShapes):
        offset, length = 2 * words[2 * i], 2 * words[2 * i + 1]
        if offset < HEADER_LENGTH or length < 0 or offset + RECORD_HEADER_LENGTH + length > limit:
            logger.info(
                "Ignoring index %s: entry %d (offset %d, length %d) lies outside the main file",
                shx.name,
                i,
                offset,
                length,
            )
            return None
        entries.append((offset, length))
    return entries


def walk_offsets(shp: BinaryCursor) -> Iterator[IndexEntry]:
    """Yields the index entries of a .shp file by hopping from one
    record header to the next, each record declaring its own length.
    """
    # Found shapefiles which report incorrect
    # shp file length in the header. Can't trust
    # that so we walk up to the real end of the file.
    size = shp.size
    pos = HEADER_LENGTH
    while pos + RECORD_HEADER_LENGTH <= size:
        shp.seek(pos)
        (__recNum, recLength) = unpack_2_int32_be(shp.read(RECORD_HEADER_LENGTH))
        length = 2 * recLength
        yield pos, length
        if length < 0:
            logger.warning(
                "%s: negative record length at offset %d, cannot locate further records",
                shp.name,
                pos,
            )
            return
        pos += RECORD_HEADER_LENGTH + length
    if pos < size:
        logger.debug("%s: ignoring %d trailing bytes", shp.name, size - pos)
