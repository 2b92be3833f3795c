class ShpImportException(Exception):
    """An exception to handle shapefile import problems."""


# Fatal, raised before any entity is inserted


class FileNotFound(ShpImportException, FileNotFoundError):
    pass


class BadExtension(ShpImportException):
    pass


class BadSignature(ShpImportException):
    pass


class UnsupportedShapeType(ShpImportException):
    pass


class TruncatedInput(ShpImportException):
    """Fewer bytes remain in the source than a read asked for."""


class AttributeTableError(ShpImportException):
    """The .dbf header or a field descriptor cannot be decoded."""


# Recovered per record or per property, reported as warnings


class CorruptGeometry(ShpImportException):
    pass


class ShapeTypeMismatch(CorruptGeometry):
    pass


class DegenerateGeometry(ShpImportException):
    """A part holding fewer than two vertices."""


class AttributeCountMismatch(ShpImportException):
    pass


class MissingField(ShpImportException):
    """A style field is absent from a row, or its value cannot be coerced."""
