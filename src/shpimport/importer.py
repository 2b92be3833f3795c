from __future__ import annotations

import logging
import os
from collections import Counter
from contextlib import ExitStack
from dataclasses import dataclass, field
from os import PathLike
from typing import Any, Optional, Protocol

from .constants import (
    DEFAULT_ENCODING,
    DEFAULT_ENCODING_ERRORS,
    DEFAULT_LABEL_HEIGHT,
    DEFAULT_LAYER,
    NULL,
    SHAPETYPE_LOOKUP,
    MultiPoint_shapeTypes,
    Point_shapeTypes,
)
from .cursor import BinaryCursor
from .entities import Drawing, Entity
from .exceptions import (
    AttributeCountMismatch,
    BadExtension,
    CorruptGeometry,
    FileNotFound,
    ShpImportException,
    TruncatedInput,
)
from .geometric_calculations import bbox_overlap
from .header import IndexEntry, ShpHeader, read_header, read_index, walk_offsets
from .helpers import fsdecode_if_pathlike, sibling_path
from .mapper import map_record
from .shapes import GeometryRecord, NullRecord, UnknownRecord, decode_record
from .style import StyleResolver, StyleSource
from .table import AttributeRow, AttributeTable, encoding_from_cpg
from .types import BBox

logger = logging.getLogger(__name__)

COMPLETED = "completed"
CANCELLED = "cancelled"


class StopFlag(Protocol):
    def is_set(self) -> bool: ...


@dataclass(frozen=True)
class ImportConfig:
    """The choices made before an import starts.

    Each style source is None to use the drawing's current setting,
    Fixed(value), or FromField(name) to read the value from the
    record's attribute row. A label source makes points import as
    text labels.
    """

    layer: str = DEFAULT_LAYER
    color: StyleSource = None
    linetype: StyleSource = None
    width: StyleSource = None
    label: StyleSource = None
    layer_source: StyleSource = None
    # Use the ring types declared by multipatch parts, rather than
    # always classifying rings by orientation.
    trust_part_types: bool = True
    encoding: str = DEFAULT_ENCODING
    encoding_errors: str = DEFAULT_ENCODING_ERRORS
    label_height: float = DEFAULT_LABEL_HEIGHT


@dataclass(frozen=True)
class ImportWarning:
    oid: Optional[int]  # None for problems of the whole file
    error: ShpImportException

    @property
    def kind(self) -> str:
        return type(self.error).__name__

    def __str__(self) -> str:
        where = "file" if self.oid is None else f"record {self.oid}"
        return f"{where}: {self.kind}: {self.error}"


@dataclass
class ImportResult:
    filename: str
    shapeType: int = NULL
    bbox: Optional[BBox] = None
    records: int = 0
    skipped: int = 0
    entities: int = 0
    entities_by_type: Counter = field(default_factory=Counter)
    warnings: list[ImportWarning] = field(default_factory=list)
    status: str = COMPLETED

    @property
    def imported(self) -> int:
        """Number of records that were decoded and drawn."""
        return self.records - self.skipped

    @property
    def shapeTypeName(self) -> str:
        return SHAPETYPE_LOOKUP.get(self.shapeType, "UNKNOWN")

    def warn(self, oid: Optional[int], error: ShpImportException) -> None:
        warning = ImportWarning(oid, error)
        self.warnings.append(warning)
        logger.warning("%s: %s", self.filename, warning)

    def summary(self) -> str:
        lines = [
            f"file: {self.filename}",
            f"shape_type: {self.shapeTypeName}",
            f"status: {self.status}",
            f"records: {self.records}",
            f"imported_records: {self.imported}",
            f"skipped_records: {self.skipped}",
            f"entities: {self.entities}",
        ]
        for dxftype, count in sorted(self.entities_by_type.items()):
            lines.append(f"entities[{dxftype}]: {count}")
        lines.append(f"warnings: {len(self.warnings)}")
        for kind, count in sorted(Counter(w.kind for w in self.warnings).items()):
            lines.append(f"warnings[{kind}]: {count}")
        return "\n".join(lines)


@dataclass(frozen=True)
class RecordOutcome:
    """What one record contributed to an import: entities to insert,
    or nothing if it was skipped, plus any recoverable problems.
    """

    oid: int
    layer: str = DEFAULT_LAYER
    entities: tuple[Entity, ...] = ()
    problems: tuple[ShpImportException, ...] = ()
    skipped: bool = False


class ShapefileImporter:
    """Imports the shapes of a shapefile into a drawing.

    Problems with the file as a whole (a missing file, a wrong extension,
    a bad header) are raised before anything is drawn. Problems with a
    single record or attribute are recorded as warnings on the
    ImportResult, and the import carries on with the next record.
    Entities drawn before a problem are kept.
    """

    def __init__(self, drawing: Drawing, config: ImportConfig | None = None):
        self.drawing = drawing
        self.config = config or ImportConfig()

    def run(
        self, shapefile_path: str | PathLike[Any], cancel: StopFlag | None = None
    ) -> ImportResult:
        path = fsdecode_if_pathlike(shapefile_path)
        if not path.lower().endswith(".shp"):
            raise BadExtension(f"The file {path} does not have extension .shp")
        if not os.path.isfile(path):
            raise FileNotFound(f"The file {path} does not exist")
        dbf_path = sibling_path(path, "dbf")
        if dbf_path is None:
            raise FileNotFound(f"The attribute table of {path} does not exist")
        shx_path = sibling_path(path, "shx")

        encoding = self.config.encoding
        cpg_path = sibling_path(path, "cpg")
        if cpg_path is not None:
            with open(cpg_path, encoding="ascii", errors="replace") as f:
                cpg_encoding = encoding_from_cpg(f.read())
            if cpg_encoding is None:
                logger.info("Ignoring %s: unknown code page", cpg_path)
            else:
                encoding = cpg_encoding

        with ExitStack() as stack:
            shp = BinaryCursor(
                stack.enter_context(open(path, "rb")), name=os.path.basename(path)
            )
            header = read_header(shp)
            table = AttributeTable(
                BinaryCursor(
                    stack.enter_context(open(dbf_path, "rb")),
                    name=os.path.basename(dbf_path),
                ),
                encoding=encoding,
                encodingErrors=self.config.encoding_errors,
            )
            index = None
            if shx_path is not None:
                shx = BinaryCursor(
                    stack.enter_context(open(shx_path, "rb")),
                    name=os.path.basename(shx_path),
                )
                index = read_index(shx, header, shp.size)
            return self._import(path, shp, header, table, index, cancel)

    def _import(
        self,
        path: str,
        shp: BinaryCursor,
        header: ShpHeader,
        table: AttributeTable,
        index: list[IndexEntry] | None,
        cancel: StopFlag | None,
    ) -> ImportResult:
        config = self.config
        result = ImportResult(filename=path, shapeType=header.shapeType, bbox=header.bbox)
        resolver = StyleResolver(
            self.drawing,
            layer=config.layer,
            color=config.color,
            linetype=config.linetype,
            width=config.width,
            label=config.label,
            layer_source=config.layer_source,
        )
        self.drawing.layer(config.layer)
        layers = {config.layer}

        logger.info(
            "Importing %s: %s, %s records",
            path,
            header.shapeTypeName,
            len(index) if index is not None else "unindexed",
        )

        count_mismatch_reported = False
        if index is not None and len(index) != len(table):
            result.warn(None, _count_mismatch(len(index), len(table)))
            count_mismatch_reported = True

        rows = table.iterRows()
        entries = index if index is not None else walk_offsets(shp)
        for oid, (offset, __length) in enumerate(entries):
            if cancel is not None and cancel.is_set():
                logger.info("%s: import cancelled before record %d", path, oid)
                result.status = CANCELLED
                break
            row = next(rows, None)
            if row is None:
                if not count_mismatch_reported:
                    result.warn(None, _count_mismatch(None, len(table)))
                    count_mismatch_reported = True
                row = AttributeRow.empty(oid)

            outcome = self._record(shp, header, offset, oid, row, resolver)

            result.records += 1
            for problem in outcome.problems:
                result.warn(oid, problem)
            if outcome.skipped:
                result.skipped += 1
                continue
            if outcome.layer not in layers:
                self.drawing.layer(outcome.layer)
                layers.add(outcome.layer)
            for entity in outcome.entities:
                self.drawing.add(entity, outcome.layer)
                result.entities_by_type[entity.dxftype] += 1
            result.entities += len(outcome.entities)

        if (
            result.status == COMPLETED
            and not count_mismatch_reported
            and result.records != len(table)
        ):
            result.warn(None, _count_mismatch(result.records, len(table)))

        logger.info(
            "%s: imported %d entities from %d of %d records, %d warnings",
            path,
            result.entities,
            result.imported,
            result.records,
            len(result.warnings),
        )
        return result

    def _record(
        self,
        shp: BinaryCursor,
        header: ShpHeader,
        offset: int,
        oid: int,
        row: AttributeRow,
        resolver: StyleResolver,
    ) -> RecordOutcome:
        try:
            record: GeometryRecord = decode_record(shp, offset, header.shapeType, oid)
        except (CorruptGeometry, TruncatedInput) as e:
            return RecordOutcome(oid, problems=(e,), skipped=True)

        if isinstance(record, (NullRecord, UnknownRecord)):
            if isinstance(record, UnknownRecord):
                logger.debug(
                    "%s: skipping record %d of unknown shape type %d",
                    shp.name,
                    oid,
                    record.shapeType,
                )
            return RecordOutcome(oid, skipped=True)

        record_bbox = getattr(record, "bbox", None)
        if record_bbox is not None and not bbox_overlap(header.bbox, record_bbox):
            logger.debug("%s: record %d lies outside the file's bounding box", shp.name, oid)

        problems: list[ShpImportException] = list(getattr(record, "warnings", ()))
        resolved = resolver.resolve(
            row, want_label=record.shapeType in Point_shapeTypes | MultiPoint_shapeTypes
        )
        problems.extend(resolved.warnings)
        try:
            entities = map_record(
                record,
                resolved.style,
                label=resolved.label,
                trust_part_types=self.config.trust_part_types,
                label_height=self.config.label_height,
            )
        except CorruptGeometry as e:
            return RecordOutcome(oid, problems=(*problems, e), skipped=True)
        return RecordOutcome(
            oid,
            layer=resolved.layer,
            entities=tuple(entities),
            problems=tuple(problems),
        )


def _count_mismatch(shapes: int | None, rows: int) -> AttributeCountMismatch:
    if shapes is None:
        return AttributeCountMismatch(
            f"The attribute table holds fewer rows ({rows}) than there are shapes"
        )
    return AttributeCountMismatch(
        f"The attribute table holds {rows} rows for {shapes} shapes"
    )


def import_shapefile(
    shapefile_path: str | PathLike[Any],
    drawing: Drawing,
    config: ImportConfig | None = None,
    *,
    cancel: StopFlag | None = None,
) -> ImportResult:
    """Imports a shapefile into drawing. See ShapefileImporter."""
    return ShapefileImporter(drawing, config).run(shapefile_path, cancel=cancel)
