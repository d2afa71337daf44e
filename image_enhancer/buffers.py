"""Immutable RGBA pixel buffers exchanged between the enhancement stages."""
from __future__ import annotations

from typing import Tuple

import numpy as np

CHANNELS = 4


class InvalidInput(ValueError):
    """Raised when a caller violates the buffer or parameter contract.

    Attributes:
        kind: Short label naming the violated invariant, e.g.
            ``"buffer/dimension mismatch"`` or ``"parameter out of range"``.
    """

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(f"{kind}: {message}")
        self.kind = kind


class PixelBuffer:
    """Dense row-major RGBA raster with 8-bit channels.

    The pixel data lives in a read-only ``uint8`` array of shape
    ``(height, width, 4)``. Stages never write into a buffer they receive;
    they build a new one from a fresh array.
    """

    __slots__ = ("_width", "_height", "_data")

    def __init__(self, width: int, height: int, data: bytes | bytearray | memoryview | np.ndarray) -> None:
        if int(width) != width or int(height) != height or width < 0 or height < 0:
            raise InvalidInput("invalid dimensions", f"got {width}x{height}")
        width = int(width)
        height = int(height)
        if isinstance(data, np.ndarray):
            if data.dtype != np.uint8:
                raise InvalidInput("buffer/dimension mismatch", f"expected uint8 channels, got {data.dtype}")
            flat = np.ascontiguousarray(data).reshape(-1)
        else:
            flat = np.frombuffer(bytes(data), dtype=np.uint8)
        expected = width * height * CHANNELS
        if flat.size != expected:
            raise InvalidInput(
                "buffer/dimension mismatch",
                f"{width}x{height} RGBA needs {expected} bytes, got {flat.size}",
            )
        arr = flat.reshape((height, width, CHANNELS)).copy()
        arr.setflags(write=False)
        self._width = width
        self._height = height
        self._data = arr

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "PixelBuffer":
        """Build a buffer from an ``(H, W, 4)`` uint8 array (copied)."""
        if arr.ndim != 3 or arr.shape[2] != CHANNELS:
            raise InvalidInput("buffer/dimension mismatch", f"expected (H, W, 4) array, got shape {arr.shape}")
        if arr.dtype != np.uint8:
            raise InvalidInput("buffer/dimension mismatch", f"expected uint8 channels, got {arr.dtype}")
        height, width = arr.shape[:2]
        return cls(width, height, arr)

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> "PixelBuffer":
        return cls(width, height, data)

    @classmethod
    def _wrap(cls, arr: np.ndarray) -> "PixelBuffer":
        # Adopts a freshly allocated array without the defensive copy.
        buffer = cls.__new__(cls)
        arr.setflags(write=False)
        buffer._height, buffer._width = arr.shape[:2]
        buffer._data = arr
        return buffer

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> Tuple[int, int]:
        return self._width, self._height

    @property
    def array(self) -> np.ndarray:
        """Read-only ``(H, W, 4)`` view of the pixel data."""
        return self._data

    @property
    def rgb(self) -> np.ndarray:
        return self._data[:, :, :3]

    @property
    def alpha(self) -> np.ndarray:
        return self._data[:, :, 3]

    def to_array(self) -> np.ndarray:
        """Return a writable copy of the pixel data."""
        return self._data.copy()

    def to_bytes(self) -> bytes:
        return self._data.tobytes()

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(f"pixel ({x}, {y}) outside {self._width}x{self._height} buffer")
        r, g, b, a = (int(v) for v in self._data[y, x])
        return r, g, b, a

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.size == other.size and np.array_equal(self._data, other._data)

    def __hash__(self) -> int:
        return hash((self._width, self._height, self._data.tobytes()))

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self._width}, height={self._height})"


def ensure_buffer(value: object) -> PixelBuffer:
    if not isinstance(value, PixelBuffer):
        raise InvalidInput("buffer/dimension mismatch", f"expected PixelBuffer, got {type(value).__name__}")
    return value


__all__ = ["CHANNELS", "InvalidInput", "PixelBuffer", "ensure_buffer"]
