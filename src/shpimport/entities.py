from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import ClassVar, Optional, Protocol, Union

from .constants import COLOR_BYLAYER, LINETYPE_BYLAYER, WIDTH_BYLAYER
from .types import Color, Vertex


@dataclass(frozen=True)
class Style:
    color: Color = COLOR_BYLAYER
    linetype: str = LINETYPE_BYLAYER
    width: float = WIDTH_BYLAYER


def _elevation(vertex: Vertex) -> float | None:
    return vertex[2] if len(vertex) > 2 else None  # type: ignore[misc]


@dataclass(frozen=True)
class PointEntity:
    dxftype: ClassVar[str] = "POINT"
    location: Vertex
    style: Style = Style()

    @property
    def elevation(self) -> float | None:
        return _elevation(self.location)


@dataclass(frozen=True)
class LineEntity:
    dxftype: ClassVar[str] = "LINE"
    start: Vertex
    end: Vertex
    style: Style = Style()


@dataclass(frozen=True)
class PolylineEntity:
    """An open chain or, if closed, a ring. The closing segment of a
    closed polyline is implied; the last vertex need not repeat the first.
    """

    dxftype: ClassVar[str] = "POLYLINE"
    vertices: tuple[Vertex, ...]
    closed: bool = False
    style: Style = Style()
    hole: bool = False

    @property
    def is3d(self) -> bool:
        return any(len(v) > 2 for v in self.vertices)


@dataclass(frozen=True)
class TextEntity:
    dxftype: ClassVar[str] = "TEXT"
    insert: Vertex
    text: str
    height: float
    style: Style = Style()


Entity = Union[PointEntity, LineEntity, PolylineEntity, TextEntity]


class Drawing(Protocol):
    """What an import needs from the destination document."""

    def layer(self, name: str) -> None:
        """Creates the named layer if the drawing lacks it."""
        ...

    def add(self, entity: Entity, layer: str) -> None: ...

    def current_color(self) -> Color: ...

    def current_linetype(self) -> str: ...

    def current_width(self) -> float: ...


@dataclass
class MemoryDrawing:
    """A Drawing keeping its entities in memory, in insertion order."""

    color: Color = COLOR_BYLAYER
    linetype: str = LINETYPE_BYLAYER
    width: float = WIDTH_BYLAYER
    layers: dict[str, list[Entity]] = field(default_factory=dict)
    _order: list[tuple[str, Entity]] = field(default_factory=list, repr=False)

    def layer(self, name: str) -> None:
        self.layers.setdefault(name, [])

    def add(self, entity: Entity, layer: str) -> None:
        self.layer(layer)
        self.layers[layer].append(entity)
        self._order.append((layer, entity))

    def current_color(self) -> Color:
        return self.color

    def current_linetype(self) -> str:
        return self.linetype

    def current_width(self) -> float:
        return self.width

    @property
    def entities(self) -> list[Entity]:
        return [entity for __layer, entity in self._order]

    def query(self, dxftype: Optional[str] = None) -> Iterator[Entity]:
        for __layer, entity in self._order:
            if dxftype is None or entity.dxftype == dxftype:
                yield entity

    def __len__(self) -> int:
        return len(self._order)
