from __future__ import annotations

import io
from struct import calcsize, unpack

from .exceptions import TruncatedInput
from .types import ReadSeekableBinStream


class BinaryCursor:
    """Sequential and random access reads over a byte buffer or a
    seekable binary stream.

    Every read goes through read(), which raises TruncatedInput when
    fewer bytes remain than requested, so a decoder running off the
    end of a damaged file always fails the same way.
    """

    def __init__(
        self, source: bytes | bytearray | ReadSeekableBinStream, name: str = "<bytes>"
    ):
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        self._stream: ReadSeekableBinStream = source
        self.name = name
        self._size: int | None = None

    def __repr__(self) -> str:
        return f"BinaryCursor({self.name!r}, pos={self.tell()})"

    @property
    def size(self) -> int:
        """Total length of the underlying source in bytes."""
        if self._size is None:
            pos = self._stream.tell()
            self._size = self._stream.seek(0, 2)
            self._stream.seek(pos)
        return self._size

    def tell(self) -> int:
        return self._stream.tell()

    def seek(self, offset: int) -> None:
        if offset < 0 or offset > self.size:
            raise TruncatedInput(
                f"{self.name}: cannot seek to offset {offset}, source is {self.size} bytes"
            )
        self._stream.seek(offset)

    def remaining(self) -> int:
        return self.size - self.tell()

    def read(self, n: int) -> bytes:
        if n < 0:
            raise ValueError(f"Cannot read a negative number of bytes. Got: {n}")
        pos = self.tell()
        # Never ask the stream for more than the source holds
        if n > self.size - pos:
            raise TruncatedInput(
                f"{self.name}: expected {n} bytes at offset {pos}, "
                f"only {self.size - pos} remain"
            )
        data = self._stream.read(n)
        if len(data) < n:
            raise TruncatedInput(
                f"{self.name}: expected {n} bytes at offset {pos}, got {len(data)}"
            )
        return data

    def read_int(self, byteorder: str = "<", width: int = 4, signed: bool = True) -> int:
        code = {2: "h", 4: "i", 8: "q"}[width]
        if not signed:
            code = code.upper()
        return unpack(byteorder + code, self.read(width))[0]

    def read_ints(self, count: int, byteorder: str = "<") -> tuple[int, ...]:
        return unpack(f"{byteorder}{count}i", self.read(4 * count))

    def read_double(self, byteorder: str = "<") -> float:
        return unpack(byteorder + "d", self.read(8))[0]

    def read_doubles(self, count: int, byteorder: str = "<") -> tuple[float, ...]:
        return unpack(f"{byteorder}{count}d", self.read(8 * count))

    def unpack(self, fmt: str) -> tuple:
        return unpack(fmt, self.read(calcsize(fmt)))
