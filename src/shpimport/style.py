"""
Resolves the display properties of each imported record, either from a
fixed value or from a field of the record's attribute row.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Generic, Optional, TypeVar, Union

from .entities import Drawing, Style
from .exceptions import MissingField
from .table import AttributeRow
from .types import Color, RecordValue

V = TypeVar("V")


@dataclass(frozen=True)
class Fixed(Generic[V]):
    value: V


@dataclass(frozen=True)
class FromField:
    name: str


# None means "Current": the destination drawing's default.
StyleSource = Union[Fixed[Any], FromField, None]


def _as_int(value: RecordValue) -> int:
    if isinstance(value, bool) or value is None or isinstance(value, date):
        raise TypeError(f"expected a number, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"expected a whole number, got {value!r}")
        return int(value)
    return int(value)


def to_color(value: RecordValue) -> Color:
    """ACI numbers 0 to 256, or "#RRGGBB" strings for true colors."""
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("#"):
            if len(text) != 7:
                raise ValueError(f"expected #RRGGBB, got {value!r}")
            rgb = int(text[1:], 16)
            return (rgb >> 16) & 0xFF, (rgb >> 8) & 0xFF, rgb & 0xFF
        value = text
    aci = _as_int(value)
    if not 0 <= aci <= 256:
        raise ValueError(f"color number {aci} outside 0..256")
    return aci


def _non_empty_text(value: RecordValue) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected text, got {value!r}")
    text = value.strip()
    if not text:
        raise ValueError("empty text")
    return text


def to_linetype(value: RecordValue) -> str:
    return _non_empty_text(value).upper()


def to_layer(value: RecordValue) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    return _non_empty_text(value)


def to_width(value: RecordValue) -> float:
    if isinstance(value, bool) or value is None or isinstance(value, date):
        raise TypeError(f"expected a number, got {value!r}")
    width = float(value)
    if width < 0:
        raise ValueError(f"negative width {width}")
    return width


def to_label(value: RecordValue) -> str:
    if value is None:
        raise ValueError("no value")
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    if not text:
        raise ValueError("empty text")
    return text


def resolve(
    source: StyleSource,
    row: Mapping[str, RecordValue],
    coerce: Callable[[RecordValue], V],
    default: V,
) -> tuple[V, Optional[MissingField]]:
    """Returns the value of one display property for one record, and the
    MissingField problem that made it fall back to default, if any.
    """
    if source is None:
        return default, None
    if isinstance(source, Fixed):
        return source.value, None
    oid = getattr(row, "oid", -1)
    if getattr(row, "missing", False):
        # No attributes exist for this record, which is reported once for
        # the whole table rather than once per property.
        return default, None
    if source.name not in row:
        return default, MissingField(f'Record {oid}: no field named "{source.name}"')
    value = row[source.name]
    try:
        return coerce(value), None
    except (TypeError, ValueError) as e:
        return default, MissingField(
            f'Record {oid}: field "{source.name}" value {value!r} is unusable: {e}'
        )


@dataclass(frozen=True)
class ResolvedStyle:
    style: Style
    layer: str
    label: Optional[str] = None
    warnings: tuple[MissingField, ...] = ()


class StyleResolver:
    """Resolves every display property of a record against the import's
    style sources, falling back to the drawing's current settings.
    """

    def __init__(
        self,
        drawing: Drawing,
        layer: str,
        color: StyleSource = None,
        linetype: StyleSource = None,
        width: StyleSource = None,
        label: StyleSource = None,
        layer_source: StyleSource = None,
    ):
        self.layer = layer
        self.color = color
        self.linetype = linetype
        self.width = width
        self.label = label
        self.layer_source = layer_source
        # Read once: the defaults cannot change during an import
        self.defaults = Style(
            color=drawing.current_color(),
            linetype=drawing.current_linetype(),
            width=drawing.current_width(),
        )

    @property
    def labels(self) -> bool:
        return self.label is not None

    def resolve(self, row: AttributeRow, want_label: bool = False) -> ResolvedStyle:
        warnings: list[MissingField] = []

        def _resolve(source: StyleSource, coerce: Callable[[RecordValue], V], default: V) -> V:
            value, problem = resolve(source, row, coerce, default)
            if problem is not None:
                warnings.append(problem)
            return value

        style = Style(
            color=_resolve(self.color, to_color, self.defaults.color),
            linetype=_resolve(self.linetype, to_linetype, self.defaults.linetype),
            width=_resolve(self.width, to_width, self.defaults.width),
        )
        layer = _resolve(self.layer_source, to_layer, self.layer)
        label: Optional[str] = None
        if want_label and self.label is not None:
            label = _resolve(self.label, to_label, None)  # type: ignore[arg-type]
        return ResolvedStyle(style=style, layer=layer, label=label, warnings=tuple(warnings))
