from __future__ import annotations

import os
from os import PathLike
from struct import Struct
from typing import Any, overload

from .types import T

# Helpers


unpack_2_int32_be = Struct(">2i").unpack


@overload
def fsdecode_if_pathlike(path: PathLike[Any]) -> str: ...
@overload
def fsdecode_if_pathlike(path: T) -> T: ...
def fsdecode_if_pathlike(path: Any) -> Any:
    if isinstance(path, PathLike):
        return os.fsdecode(path)  # str

    return path


def sibling_path(shp_path: str, ext: str) -> str | None:
    """Returns the path of the file sharing shp_path's base name with
    the extension ext, trying it in lower then upper case, or None if
    neither exists.
    """
    base = os.path.splitext(shp_path)[0]
    for candidate in (f"{base}.{ext.lower()}", f"{base}.{ext.upper()}"):
        if os.path.isfile(candidate):
            return candidate
    return None
