"""
End to end tests importing shapefiles written to a temporary directory
into an in-memory drawing.
"""

import threading
from struct import pack

import pytest

import shpimport
from shpimport import (
    BadExtension,
    FileNotFound,
    Fixed,
    FromField,
    ImportConfig,
    LineEntity,
    MemoryDrawing,
    PointEntity,
    PolylineEntity,
    TextEntity,
    TruncatedInput,
    import_shapefile,
)
from shpimport.importer import CANCELLED, COMPLETED

from _shp_helpers import (
    null_content,
    point_content,
    poly_content,
    write_shapefile,
)

SQUARE = [(0.0, 0.0), (0.0, 10.0), (10.0, 10.0), (10.0, 0.0), (0.0, 0.0)]


def _points(n):
    return [point_content(float(i), float(i) * 2) for i in range(n)]


def _kinds(result):
    return [w.kind for w in result.warnings]


class _StopAfter:
    """A stop flag that is set once it has been polled n times."""

    def __init__(self, n):
        self.n = n

    def is_set(self):
        self.n -= 1
        return self.n < 0


def test_import_mixed_geometry(tmp_path):
    """
    Assert that a point, a two part arc and a polygon each
    import, in file order, to the expected entities.
    """
    point = write_shapefile(tmp_path, shpimport.POINT, [point_content(1.5, 2.5)], name="point")
    arc = write_shapefile(
        tmp_path,
        shpimport.POLYLINE,
        [poly_content([[(0, 0), (1, 1)], [(2, 2), (3, 3), (4, 2)]])],
        name="arc",
    )
    polygon = write_shapefile(
        tmp_path,
        shpimport.POLYGON,
        [poly_content([SQUARE], shapeType=shpimport.POLYGON)],
        name="polygon",
    )
    drawing = MemoryDrawing()
    results = [import_shapefile(path, drawing) for path in (point, arc, polygon)]

    assert [r.records for r in results] == [1, 1, 1]
    assert [r.imported for r in results] == [1, 1, 1]
    assert [r.entities for r in results] == [1, 2, 1]
    assert all(r.warnings == [] for r in results)
    assert all(r.status == COMPLETED for r in results)

    entities = drawing.entities
    assert isinstance(entities[0], PointEntity)
    assert entities[0].location == (1.5, 2.5)
    assert isinstance(entities[1], LineEntity)
    assert isinstance(entities[2], PolylineEntity) and not entities[2].closed
    assert isinstance(entities[3], PolylineEntity) and entities[3].closed
    assert len(entities[3].vertices) == 5
    assert list(drawing.layers) == ["0"]


def test_result_fields(tmp_path):
    path = write_shapefile(tmp_path, shpimport.POINT, _points(3))
    result = import_shapefile(path, MemoryDrawing())
    assert result.filename == str(path)
    assert result.shapeType == shpimport.POINT
    assert result.shapeTypeName == "POINT"
    assert result.bbox == (0.0, 0.0, 10.0, 10.0)
    assert result.entities_by_type == {"POINT": 3}
    summary = result.summary()
    assert "records: 3" in summary
    assert "entities[POINT]: 3" in summary
    assert "warnings: 0" in summary


@pytest.mark.parametrize("starts", [[0, 99], [0, 3, 1], [2, 0], [1, 2]])
def test_corrupt_part_index_skips_one_record(tmp_path, starts):
    """
    Assert that a record whose part indices are out of bounds,
    descending, or skip leading points is skipped with a warning,
    and the other records still import.
    """
    contents = [
        poly_content([[(0, 0), (1, 1), (2, 0)]]),
        poly_content([[(0, 0), (1, 1)], [(2, 2), (3, 3)]], starts=starts),
        poly_content([[(5, 5), (6, 6)]]),
    ]
    path = write_shapefile(tmp_path, shpimport.POLYLINE, contents)
    drawing = MemoryDrawing()
    result = import_shapefile(path, drawing)
    assert result.records == 3
    assert result.imported == 2
    assert result.skipped == 1
    assert _kinds(result) == ["CorruptGeometry"]
    assert result.warnings[0].oid == 1
    assert len(drawing) == 2


def test_huge_content_length_skips_one_record(tmp_path):
    """
    Assert that a record header declaring more content than the
    file holds is skipped as truncated, not read into memory.
    """
    path = write_shapefile(tmp_path, shpimport.POINT, _points(3))
    data = path.read_bytes()
    # second record header at 128: number, then content length in words
    path.write_bytes(data[:132] + pack(">i", 0x7FFFFFFF) + data[136:])
    drawing = MemoryDrawing()
    result = import_shapefile(path, drawing)
    assert result.records == 3
    assert result.skipped == 1
    assert _kinds(result) == ["TruncatedInput"]
    assert result.warnings[0].oid == 1
    assert [e.location for e in drawing.entities] == [(0, 0), (2, 4)]


def test_fewer_attribute_rows(tmp_path):
    """
    Assert that a table shorter than the shapefile yields a single
    count mismatch warning, and all shapes still import.
    """
    path = write_shapefile(tmp_path, shpimport.POINT, _points(5), rows=[[0], [1], [2]])
    drawing = MemoryDrawing()
    result = import_shapefile(path, drawing, ImportConfig(color=FromField("ID")))
    assert _kinds(result) == ["AttributeCountMismatch"]
    assert result.imported == 5
    assert len(drawing) == 5


def test_more_attribute_rows_without_index(tmp_path):
    path = write_shapefile(
        tmp_path, shpimport.POINT, _points(2), rows=[[0], [1], [2]], shx=False
    )
    result = import_shapefile(path, MemoryDrawing())
    assert _kinds(result) == ["AttributeCountMismatch"]
    assert result.imported == 2


def test_missing_style_field_uses_drawing_default(tmp_path):
    """
    Assert that styling from a field the table lacks falls back
    to the drawing's current color, with a warning per record.
    """
    path = write_shapefile(tmp_path, shpimport.POINT, _points(2))
    drawing = MemoryDrawing(color=3)
    result = import_shapefile(path, drawing, ImportConfig(color=FromField("COLOR")))
    assert [e.style.color for e in drawing.entities] == [3, 3]
    assert _kinds(result) == ["MissingField", "MissingField"]
    assert [w.oid for w in result.warnings] == [0, 1]
    assert result.imported == 2


def test_style_from_fields(tmp_path):
    fields = [("COLOR", "N", 3, 0), ("LTYPE", "C", 16, 0), ("WIDTH", "N", 6, 2)]
    rows = [[1, "dashed", 0.5], [7, "CENTER", 0.25]]
    path = write_shapefile(tmp_path, shpimport.POINT, _points(2), fields=fields, rows=rows)
    drawing = MemoryDrawing()
    config = ImportConfig(
        color=FromField("COLOR"), linetype=FromField("LTYPE"), width=FromField("WIDTH")
    )
    result = import_shapefile(path, drawing, config)
    assert result.warnings == []
    styles = [e.style for e in drawing.entities]
    assert [s.color for s in styles] == [1, 7]
    assert [s.linetype for s in styles] == ["DASHED", "CENTER"]
    assert [s.width for s in styles] == [0.5, 0.25]


def test_fixed_style_and_layer(tmp_path):
    path = write_shapefile(tmp_path, shpimport.POINT, _points(2))
    drawing = MemoryDrawing()
    config = ImportConfig(layer="WELLS", color=Fixed(5), width=Fixed(0.3))
    import_shapefile(path, drawing, config)
    assert list(drawing.layers) == ["WELLS"]
    assert all(e.style.color == 5 and e.style.width == 0.3 for e in drawing.entities)


def test_layer_from_field(tmp_path):
    fields = [("KIND", "C", 10, 0)]
    rows = [["roads"], ["rivers"], [None]]
    contents = [poly_content([[(0, 0), (1, 1)]]) for __i in range(3)]
    path = write_shapefile(tmp_path, shpimport.POLYLINE, contents, fields=fields, rows=rows)
    drawing = MemoryDrawing()
    result = import_shapefile(
        path, drawing, ImportConfig(layer="IMPORT", layer_source=FromField("KIND"))
    )
    assert sorted(drawing.layers) == ["IMPORT", "rivers", "roads"]
    assert [len(drawing.layers[name]) for name in ("roads", "rivers", "IMPORT")] == [1, 1, 1]
    assert _kinds(result) == ["MissingField"]


def test_point_labels(tmp_path):
    fields = [("NAME", "C", 20, 0)]
    rows = [["North well"], [""]]
    path = write_shapefile(tmp_path, shpimport.POINT, _points(2), fields=fields, rows=rows)
    drawing = MemoryDrawing()
    config = ImportConfig(label=FromField("NAME"), label_height=4.0)
    result = import_shapefile(path, drawing, config)
    first, second = drawing.entities
    assert first == TextEntity(
        insert=(0.0, 0.0), text="North well", height=4.0, style=first.style
    )
    assert isinstance(second, PointEntity)
    assert _kinds(result) == ["MissingField"]


def test_label_ignored_for_lines(tmp_path):
    fields = [("NAME", "C", 20, 0)]
    path = write_shapefile(
        tmp_path,
        shpimport.POLYLINE,
        [poly_content([[(0, 0), (1, 1)]])],
        fields=fields,
        rows=[["Main St"]],
    )
    drawing = MemoryDrawing()
    import_shapefile(path, drawing, ImportConfig(label=FromField("NAME")))
    assert [type(e) for e in drawing.entities] == [LineEntity]


def test_code_page_file(tmp_path):
    """
    Assert that a .cpg file overrides the configured encoding
    of the attribute table.
    """
    fields = [("NAME", "C", 10, 0)]
    path = write_shapefile(tmp_path, shpimport.POINT, _points(1), fields=fields, rows=[["Zoë"]])
    (tmp_path / "test.cpg").write_text("1252")
    drawing = MemoryDrawing()
    import_shapefile(path, drawing, ImportConfig(label=FromField("NAME")))
    assert drawing.entities[0].text == "ZoÃ«"


def test_null_and_unknown_records_are_skipped(tmp_path):
    contents = [point_content(1, 1), null_content(), b"\x07\x00\x00\x00", point_content(2, 2)]
    path = write_shapefile(tmp_path, shpimport.POINT, contents)
    drawing = MemoryDrawing()
    result = import_shapefile(path, drawing)
    assert result.records == 4
    assert result.skipped == 2
    assert result.imported == 2
    assert result.warnings == []
    assert len(drawing) == 2


def test_degenerate_part_warns(tmp_path):
    contents = [poly_content([[(0, 0)], [(1, 1), (2, 2), (3, 1)]])]
    path = write_shapefile(tmp_path, shpimport.POLYLINE, contents)
    drawing = MemoryDrawing()
    result = import_shapefile(path, drawing)
    assert _kinds(result) == ["DegenerateGeometry"]
    assert result.imported == 1
    assert [type(e) for e in drawing.entities] == [PointEntity, PolylineEntity]


def test_without_index(tmp_path):
    """
    Assert that without a .shx file the records are found by
    walking the .shp file, with the same outcome.
    """
    path = write_shapefile(tmp_path, shpimport.POINT, _points(4), shx=False)
    drawing = MemoryDrawing()
    result = import_shapefile(path, drawing)
    assert result.imported == 4
    assert [e.location for e in drawing.entities] == [(0, 0), (1, 2), (2, 4), (3, 6)]


def test_cancel(tmp_path):
    path = write_shapefile(tmp_path, shpimport.POINT, _points(5))
    drawing = MemoryDrawing()
    result = import_shapefile(path, drawing, cancel=_StopAfter(2))
    assert result.status == CANCELLED
    assert result.records == 2
    assert len(drawing) == 2
    assert result.warnings == []


def test_cancel_with_event(tmp_path):
    path = write_shapefile(tmp_path, shpimport.POINT, _points(3))
    event = threading.Event()
    event.set()
    result = import_shapefile(path, MemoryDrawing(), cancel=event)
    assert result.status == CANCELLED
    assert result.records == 0


def test_pathlike_and_upper_case_siblings(tmp_path):
    path = write_shapefile(tmp_path, shpimport.POINT, _points(2), name="UPPER")
    (tmp_path / "UPPER.dbf").rename(tmp_path / "UPPER.DBF")
    result = import_shapefile(path, MemoryDrawing())
    assert result.imported == 2


def test_bad_extension(tmp_path):
    path = write_shapefile(tmp_path, shpimport.POINT, _points(1))
    with pytest.raises(BadExtension):
        import_shapefile(tmp_path / "test.dbf", MemoryDrawing())
    assert path.exists()


def test_missing_files(tmp_path):
    with pytest.raises(FileNotFound):
        import_shapefile(tmp_path / "nothing.shp", MemoryDrawing())
    path = write_shapefile(tmp_path, shpimport.POINT, _points(1))
    (tmp_path / "test.dbf").unlink()
    with pytest.raises(FileNotFoundError):
        import_shapefile(path, MemoryDrawing())


def test_truncated_header(tmp_path):
    path = write_shapefile(tmp_path, shpimport.POINT, _points(1))
    path.write_bytes(path.read_bytes()[:60])
    drawing = MemoryDrawing()
    with pytest.raises(TruncatedInput):
        import_shapefile(path, drawing)
    assert len(drawing) == 0
