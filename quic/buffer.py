"""
Byte Buffer Cursor

Positioned big-endian reads and writes of 8/16/32/64-bit unsigned integers.
"""

import struct


class BufferReadError(ValueError):
    """Read past the end of the buffer."""


class BufferWriteError(ValueError):
    """Write past the capacity of the buffer."""


_FORMATS = {
    1: ">B",
    2: ">H",
    4: ">I",
    8: ">Q",
}


class Buffer:
    """
    Fixed-capacity byte buffer with a read/write position.

    Either pass `capacity` to get a zero-filled buffer for writing, or
    `data` to wrap existing bytes for reading.
    """

    def __init__(self, capacity: int = 0, data: bytes = None):
        if data is not None:
            self._data = bytearray(data)
        else:
            self._data = bytearray(capacity)
        self._pos = 0

    @property
    def data(self) -> bytes:
        """Bytes written so far (up to the current position)."""
        return bytes(self._data[:self._pos])

    @property
    def capacity(self) -> int:
        return len(self._data)

    def remaining(self) -> int:
        return len(self._data) - self._pos

    def eof(self) -> bool:
        return self._pos >= len(self._data)

    def tell(self) -> int:
        return self._pos

    def seek(self, pos: int) -> None:
        if pos < 0 or pos > len(self._data):
            raise BufferReadError(f"Cannot seek to {pos}, buffer has {len(self._data)} bytes")
        self._pos = pos

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def pull_bytes(self, length: int) -> bytes:
        if length < 0 or self._pos + length > len(self._data):
            raise BufferReadError(
                f"Need {length} bytes at offset {self._pos}, have {self.remaining()}")
        value = bytes(self._data[self._pos:self._pos + length])
        self._pos += length
        return value

    def pull_uint(self, width: int) -> int:
        """
        Read an unsigned big-endian integer of `width` bytes (0-8).

        A width of 0 reads nothing and returns 0.
        """
        fmt = _FORMATS.get(width)
        if fmt is not None:
            return struct.unpack(fmt, self.pull_bytes(width))[0]
        if 0 <= width <= 8:
            return int.from_bytes(self.pull_bytes(width), "big")
        raise ValueError(f"Unsupported integer width: {width}")

    def pull_uint8(self) -> int:
        return self.pull_uint(1)

    def pull_uint16(self) -> int:
        return self.pull_uint(2)

    def pull_uint32(self) -> int:
        return self.pull_uint(4)

    def pull_uint64(self) -> int:
        return self.pull_uint(8)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def push_bytes(self, value: bytes) -> None:
        end = self._pos + len(value)
        if end > len(self._data):
            raise BufferWriteError(
                f"Need {len(value)} bytes at offset {self._pos}, have {self.remaining()}")
        self._data[self._pos:end] = value
        self._pos = end

    def push_uint(self, value: int, width: int) -> None:
        """Write `value` as an unsigned big-endian integer of `width` bytes (0-8)."""
        if not 0 <= width <= 8:
            raise ValueError(f"Unsupported integer width: {width}")
        if value < 0 or value >> (8 * width):
            raise ValueError(f"Value {value:#x} does not fit in {width} bytes")
        fmt = _FORMATS.get(width)
        if fmt is not None:
            self.push_bytes(struct.pack(fmt, value))
        else:
            self.push_bytes(value.to_bytes(width, "big"))

    def push_uint8(self, value: int) -> None:
        self.push_uint(value, 1)

    def push_uint16(self, value: int) -> None:
        self.push_uint(value, 2)

    def push_uint32(self, value: int) -> None:
        self.push_uint(value, 4)

    def push_uint64(self, value: int) -> None:
        self.push_uint(value, 8)
