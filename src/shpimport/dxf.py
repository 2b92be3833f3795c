from __future__ import annotations

import logging
from os import PathLike
from typing import Any

from .constants import COLOR_BYLAYER, LINETYPE_BYLAYER, WIDTH_BYLAYER
from .entities import Entity, LineEntity, PointEntity, PolylineEntity, Style, TextEntity
from .types import Color, Vertex

logger = logging.getLogger(__name__)

# Pseudo line types every drawing accepts
_PSEUDO_LINETYPES = {"BYLAYER", "BYBLOCK"}


def _require_ezdxf():
    try:
        import ezdxf
    except Exception as exc:
        raise ImportError(
            "ezdxf is required to write DXF drawings. "
            'Install it with `pip install "shpimport[dxf]"`.'
        ) from exc
    return ezdxf


def _point3(vertex: Vertex) -> tuple[float, float, float]:
    if len(vertex) > 2:
        return (float(vertex[0]), float(vertex[1]), float(vertex[2]))  # type: ignore[misc]
    return (float(vertex[0]), float(vertex[1]), 0.0)


def _lineweight(width: float) -> int:
    """Converts a width in millimetres to the nearest DXF lineweight,
    in hundredths of a millimetre.
    """
    if width < 0:
        return -1  # BYLAYER
    from ezdxf.lldxf.const import VALID_DXF_LINEWEIGHTS

    target = round(width * 100)
    return min(VALID_DXF_LINEWEIGHTS, key=lambda lw: abs(lw - target))


class DxfDrawing:
    """A Drawing writing into the modelspace of an ezdxf document."""

    def __init__(self, doc: Any = None, *, dxf_version: str = "R2010"):
        ezdxf = _require_ezdxf()
        self.doc = doc if doc is not None else ezdxf.new(dxfversion=dxf_version)
        self.modelspace = self.doc.modelspace()
        from ezdxf.colors import rgb2int

        self._rgb2int = rgb2int

    def layer(self, name: str) -> None:
        if name not in self.doc.layers:
            self.doc.layers.add(name)

    def current_color(self) -> Color:
        return int(self.doc.header.get("$CECOLOR", COLOR_BYLAYER))

    def current_linetype(self) -> str:
        return str(self.doc.header.get("$CELTYPE", LINETYPE_BYLAYER)).upper()

    def current_width(self) -> float:
        lineweight = int(self.doc.header.get("$CELWEIGHT", -1))
        if lineweight < 0:
            return WIDTH_BYLAYER
        return lineweight / 100.0

    def _dxfattribs(self, style: Style, layer: str) -> dict[str, Any]:
        dxfattribs: dict[str, Any] = {"layer": layer}
        if isinstance(style.color, tuple):
            dxfattribs["true_color"] = self._rgb2int(style.color)
        else:
            dxfattribs["color"] = style.color
        linetype = style.linetype.upper()
        if linetype in _PSEUDO_LINETYPES:
            dxfattribs["linetype"] = linetype
        elif linetype in self.doc.linetypes:
            dxfattribs["linetype"] = linetype
        else:
            logger.debug("Line type %s is not defined in the drawing, using BYLAYER", linetype)
        dxfattribs["lineweight"] = _lineweight(style.width)
        return dxfattribs

    def add(self, entity: Entity, layer: str) -> None:
        msp = self.modelspace
        dxfattribs = self._dxfattribs(entity.style, layer)
        if isinstance(entity, PointEntity):
            msp.add_point(_point3(entity.location), dxfattribs=dxfattribs)
        elif isinstance(entity, LineEntity):
            msp.add_line(_point3(entity.start), _point3(entity.end), dxfattribs=dxfattribs)
        elif isinstance(entity, PolylineEntity):
            points = [_point3(v) for v in entity.vertices]
            elevations = {p[2] for p in points}
            if len(elevations) > 1:
                msp.add_polyline3d(points, close=entity.closed, dxfattribs=dxfattribs)
            else:
                dxfattribs["elevation"] = elevations.pop() if elevations else 0.0
                msp.add_lwpolyline(
                    [(p[0], p[1]) for p in points],
                    format="xy",
                    close=entity.closed,
                    dxfattribs=dxfattribs,
                )
        elif isinstance(entity, TextEntity):
            dxfattribs["insert"] = _point3(entity.insert)
            dxfattribs["height"] = entity.height
            msp.add_text(entity.text, dxfattribs=dxfattribs)
        else:
            raise TypeError(f"Cannot write {entity!r} to a DXF drawing")

    def saveas(self, path: str | PathLike[str]) -> None:
        self.doc.saveas(path)
