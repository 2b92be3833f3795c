from __future__ import annotations

import codecs
import logging
from collections.abc import Iterator, Mapping
from datetime import date
from struct import Struct, calcsize
from typing import NamedTuple

from .cursor import BinaryCursor
from .exceptions import AttributeTableError
from .types import FIELD_TYPE_ALIASES, FieldType, FieldTypeT, RecordValue

logger = logging.getLogger(__name__)


class Field(NamedTuple):
    name: str
    field_type: FieldTypeT
    size: int
    decimal: int

    def __repr__(self) -> str:
        return f'Field(name="{self.name}", field_type=FieldType.{self.field_type}, size={self.size}, decimal={self.decimal})'


class AttributeRow(Mapping[str, RecordValue]):
    """
    The attribute values of one dbf record, by field name, in field order.
    The oid is the record's position in the table, which is also the
    position of the geometry record it describes.

    A row standing in for a record the table does not have (past its end,
    or deleted) is flagged as missing and holds no values.
    """

    __slots__ = ("_positions", "_values", "oid", "missing")

    def __init__(
        self,
        field_positions: dict[str, int],
        values: list[RecordValue],
        oid: int = -1,
        missing: bool = False,
    ):
        self._positions = field_positions
        self._values = values
        self.oid = oid
        self.missing = missing

    @classmethod
    def empty(cls, oid: int) -> AttributeRow:
        return cls({}, [], oid=oid, missing=True)

    def __getitem__(self, name: str) -> RecordValue:
        try:
            return self._values[self._positions[name]]
        except KeyError:
            raise KeyError(f"{name} is not a field name") from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._positions)

    def __len__(self) -> int:
        return len(self._positions)

    def __repr__(self) -> str:
        return f"AttributeRow #{self.oid}: {dict(self)}"


def _parse_value(field: Field, value: bytes, encoding: str, errors: str) -> RecordValue:
    typ = field.field_type
    if typ is FieldType.N or typ is FieldType.F:
        # numeric or float: number stored as a string, right justified, and padded with blanks to the width of the field.
        value = value.split(b"\0")[0].strip()
        value = value.replace(b"*", b"")  # QGIS NULL is all '*' chars
        if value == b"":
            return None
        if field.decimal:
            try:
                return float(value)
            except ValueError:
                return None
        try:
            # forcing a large int to float and back to int
            # will lose information and result in wrong nr.
            return int(value)
        except ValueError:
            try:
                return int(float(value))
            except ValueError:
                return None
    if typ is FieldType.D:
        # date: 8 bytes - date stored as a string in the format YYYYMMDD.
        if not value.replace(b"\x00", b"").replace(b" ", b"").replace(b"0", b""):
            # dbf date field has no official null value
            # but can check for all hex null-chars, all spaces, or all 0s (QGIS null)
            return None
        try:
            return date(int(value[:4]), int(value[4:6]), int(value[6:8]))
        except (TypeError, ValueError):
            return value.decode(encoding, errors).strip()
    if typ is FieldType.L:
        # logical: 1 byte - initialized to 0x20 (space) otherwise T or F.
        if value in (b"Y", b"y", b"T", b"t", b"1"):
            return True
        if value in (b"N", b"n", b"F", b"f", b"0"):
            return False
        return None
    # remove null-padding at end of strings
    return value.decode(encoding, errors).strip().rstrip("\x00")


class AttributeTable:
    """Reads the dBASE table (.dbf) holding one attribute row per shape.

    Only the header is read on construction. Rows are decoded one at a
    time by iterRows(). Xbase-related code borrows heavily from ActiveState
    Python Cookbook Recipe 362715 by Raymond Hettinger.
    """

    def __init__(
        self,
        dbf: BinaryCursor,
        encoding: str = "utf-8",
        encodingErrors: str = "replace",
    ):
        try:
            codecs.lookup(encoding)
        except LookupError:
            raise AttributeTableError(f"Unknown text encoding: {encoding}") from None
        self.dbf = dbf
        self.encoding = encoding
        self.encodingErrors = encodingErrors
        self.fields: list[Field] = []
        self.__readHeader()

    def __readHeader(self) -> None:
        dbf = self.dbf
        dbf.seek(0)
        self.numRecords, self.__hdrLength, self.__recordLength = dbf.unpack(
            "<xxxxLHH20x"
        )
        numFields = (self.__hdrLength - 33) // 32
        if numFields < 0:
            raise AttributeTableError(
                f"{dbf.name}: header length {self.__hdrLength} is too short"
            )
        for __field in range(numFields):
            encoded_name, encoded_type_char, size, decimal = dbf.unpack("<11sc4xBB14x")
            if b"\x00" in encoded_name:
                encoded_name = encoded_name[: encoded_name.index(b"\x00")]
            name = encoded_name.decode(self.encoding, self.encodingErrors).strip()
            try:
                field_type = FIELD_TYPE_ALIASES[encoded_type_char]
            except KeyError:
                raise AttributeTableError(
                    f"{dbf.name}: field {name} has unknown type {encoded_type_char!r}"
                ) from None
            self.fields.append(Field(name, field_type, size, decimal))
        terminator = dbf.read(1)
        if terminator != b"\r":
            raise AttributeTableError(
                f"{dbf.name}: header lacks expected terminator. (likely corrupt?)"
            )

        # Field names are unique within a table. Keep the first of any duplicates.
        self.__fieldLookup: dict[str, int] = {}
        for i, f in enumerate(self.fields):
            if f.name in self.__fieldLookup:
                logger.warning("%s: duplicate field name %s ignored", dbf.name, f.name)
                continue
            self.__fieldLookup[f.name] = i

        # deletion flag, then one string per field, padded out to the record length
        fmt = "<1s" + "".join(f"{f.size}s" for f in self.fields)
        size = calcsize(fmt)
        if size > self.__recordLength:
            raise AttributeTableError(
                f"{dbf.name}: fields need {size} bytes but records are {self.__recordLength} long"
            )
        self.__recStruct = Struct(fmt + "x" * (self.__recordLength - size))

    def __len__(self) -> int:
        return self.numRecords

    def __repr__(self) -> str:
        return f"AttributeTable({self.dbf.name!r}, records={self.numRecords}, fields={len(self.fields)})"

    def __row(self, oid: int) -> AttributeRow:
        recordContents = self.__recStruct.unpack(self.dbf.read(self.__recStruct.size))
        if recordContents[0] == b"*":
            logger.debug("%s: record %d is deleted", self.dbf.name, oid)
            return AttributeRow.empty(oid)
        values = [
            _parse_value(f, value, self.encoding, self.encodingErrors)
            for f, value in zip(self.fields, recordContents[1:])
        ]
        return AttributeRow(self.__fieldLookup, values, oid=oid)

    def iterRows(self) -> Iterator[AttributeRow]:
        """Yields the rows in record order, stopping early, with a warning
        logged, if the file ends before the number of records its header
        declares.
        """
        recSize = self.__recordLength
        available = self.numRecords
        if recSize:
            available = min(available, (self.dbf.size - self.__hdrLength) // recSize)
        else:
            available = 0
        if available < self.numRecords:
            logger.warning(
                "%s: header declares %d records but the file only holds %d",
                self.dbf.name,
                self.numRecords,
                available,
            )
        for i in range(available):
            # Seek every time: the cursor may be shared with other readers
            self.dbf.seek(self.__hdrLength + i * recSize)
            yield self.__row(i)


def encoding_from_cpg(text: str) -> str | None:
    """Returns the Python codec named by the contents of a .cpg file,
    or None if it names no known codec.
    """
    name = text.strip()
    if not name:
        return None
    upper = name.upper()
    if upper.startswith("ANSI "):
        name = "cp" + name[5:].strip()
    elif name.isdigit():
        name = {"88591": "latin-1"}.get(name, f"cp{name}")
    try:
        return codecs.lookup(name).name
    except LookupError:
        return None
