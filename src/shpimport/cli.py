from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, Sequence

from .__version__ import __version__
from .exceptions import ShpImportException
from .importer import ImportConfig, import_shapefile
from .style import Fixed, FromField, StyleSource, to_color, to_label, to_linetype, to_width

_FIELD_PREFIX = "field:"


def _style_source(coerce: Callable[[Any], Any]) -> Callable[[str], StyleSource]:
    """An argparse type reading "current", "field:NAME" or a literal value."""

    def parse(text: str) -> StyleSource:
        if text.lower() == "current":
            return None
        if text.lower().startswith(_FIELD_PREFIX):
            name = text[len(_FIELD_PREFIX) :].strip()
            if not name:
                raise argparse.ArgumentTypeError(f"missing field name in {text!r}")
            return FromField(name)
        try:
            return Fixed(coerce(text))
        except (TypeError, ValueError) as exc:
            raise argparse.ArgumentTypeError(str(exc)) from exc

    return parse


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shpimport", description="Import an ESRI shapefile into a DXF drawing."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("input_path", help="Path to the .shp file.")
    parser.add_argument("output_path", help="Path to output DXF file.")
    parser.add_argument("--layer", default="0", help="Destination layer (default: 0).")
    parser.add_argument(
        "--layer-field",
        metavar="FIELD",
        help="Take each record's layer from this attribute field.",
    )
    parser.add_argument(
        "--color",
        type=_style_source(to_color),
        metavar="SRC",
        help='"current", a color number, "#RRGGBB", or "field:NAME".',
    )
    parser.add_argument(
        "--linetype",
        type=_style_source(to_linetype),
        metavar="SRC",
        help='"current", a line type name, or "field:NAME".',
    )
    parser.add_argument(
        "--width",
        type=_style_source(to_width),
        metavar="SRC",
        help='"current", a width in millimetres, or "field:NAME".',
    )
    parser.add_argument(
        "--label",
        type=_style_source(to_label),
        metavar="SRC",
        help='Import points as text labels: literal text or "field:NAME".',
    )
    parser.add_argument(
        "--recompute-rings",
        action="store_true",
        help="Classify multipatch rings by orientation, ignoring declared part types.",
    )
    parser.add_argument("--encoding", help="Text encoding of the attribute table.")
    parser.add_argument(
        "--dxf-version", default="R2010", help="DXF version of the output (default: R2010)."
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging.")
    return parser


def _run_import(args: argparse.Namespace) -> int:
    try:
        from .dxf import DxfDrawing

        drawing = DxfDrawing(dxf_version=args.dxf_version)
    except ImportError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    config_kwargs: dict[str, Any] = {
        "layer": args.layer,
        "color": args.color,
        "linetype": args.linetype,
        "width": args.width,
        "label": args.label,
        "layer_source": FromField(args.layer_field) if args.layer_field else None,
        "trust_part_types": not args.recompute_rings,
    }
    if args.encoding:
        config_kwargs["encoding"] = args.encoding

    try:
        result = import_shapefile(args.input_path, drawing, ImportConfig(**config_kwargs))
    except ShpImportException as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: failed to read {args.input_path}: {exc}", file=sys.stderr)
        return 1

    out_path = Path(args.output_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    drawing.saveas(out_path)

    print(result.summary())
    print(f"output: {out_path}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    return _run_import(args)
