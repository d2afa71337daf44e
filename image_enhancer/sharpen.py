"""3x3 convolution sharpening with untouched borders."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Tuple

import numpy as np

from .adjustments import to_channel_bytes
from .buffers import InvalidInput, PixelBuffer, ensure_buffer

LOGGER = logging.getLogger("image_enhancer")


def _build_kernel() -> np.ndarray:
    kernel = np.full((3, 3), -1.0 / 9.0, dtype=np.float64)
    kernel[1, 1] = 17.0 / 9.0
    kernel.setflags(write=False)
    return kernel


SHARPEN_KERNEL = _build_kernel()


def _row_bands(height: int, workers: int) -> List[Tuple[int, int]]:
    """Split the interior rows ``1 .. height - 2`` into contiguous bands."""
    interior = np.arange(1, height - 1)
    bands = []
    for chunk in np.array_split(interior, max(1, min(workers, interior.size))):
        if chunk.size:
            bands.append((int(chunk[0]), int(chunk[-1]) + 1))
    return bands


def _sharpen_band(src: np.ndarray, out: np.ndarray, start: int, stop: int, scale: float) -> None:
    """Convolve interior rows ``start:stop`` of *src* into *out*.

    Reads only from *src*; each band owns a disjoint slice of *out*.
    """
    width = src.shape[1]
    acc = np.zeros((stop - start, width - 2, 3), dtype=np.float64)
    for ky in range(3):
        for kx in range(3):
            acc += src[start - 1 + ky : stop - 1 + ky, kx : width - 2 + kx] * SHARPEN_KERNEL[ky, kx]
    out[start:stop, 1 : width - 1, :3] = to_channel_bytes(acc * scale)
    out[start:stop, 1 : width - 1, 3] = 255


def sharpen(buffer: PixelBuffer, amount: float, *, workers: int = 1) -> PixelBuffer:
    """Sharpen *buffer* with :data:`SHARPEN_KERNEL` scaled by ``amount / 100``.

    Border pixels are copied from the input unchanged. Every interior pixel
    gets an opaque alpha of 255 whatever its input alpha was.

    Args:
        buffer: Colour-adjusted RGBA buffer.
        amount: Sharpness in percent; 0 returns *buffer* itself.
        workers: Number of threads sharing the interior rows.

    Returns:
        Sharpened buffer (a new instance unless ``amount == 0``).

    Raises:
        InvalidInput: If *amount* is negative or *workers* is below 1.
    """
    ensure_buffer(buffer)
    if amount == 0:
        return buffer
    if amount < 0:
        raise InvalidInput("parameter out of range", f"sharpness must be non-negative, got {amount}")
    if workers < 1:
        raise InvalidInput("parameter out of range", f"workers must be a positive integer, got {workers}")

    out = buffer.to_array()
    width, height = buffer.size
    if width < 3 or height < 3:
        LOGGER.debug("Sharpen skipped for %sx%s buffer without interior pixels", width, height)
        return PixelBuffer._wrap(out)

    src = buffer.array.astype(np.float64)[:, :, :3]
    scale = amount / 100.0
    bands = _row_bands(height, workers)
    LOGGER.debug("Sharpen amount=%s scale=%.3f bands=%s", amount, scale, len(bands))

    if len(bands) == 1:
        _sharpen_band(src, out, bands[0][0], bands[0][1], scale)
    else:
        with ThreadPoolExecutor(max_workers=len(bands)) as executor:
            futures = [executor.submit(_sharpen_band, src, out, start, stop, scale) for start, stop in bands]
            for future in futures:
                future.result()
    return PixelBuffer._wrap(out)


__all__ = ["SHARPEN_KERNEL", "sharpen"]
