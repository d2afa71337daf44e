"""Per-pixel colour adjustments: brightness, contrast and saturation."""
from __future__ import annotations

import logging

import numpy as np

from .buffers import PixelBuffer, ensure_buffer

LOGGER = logging.getLogger("image_enhancer")

CONTRAST_PIVOT = 128.0
IDENTITY_PERCENT = 100.0


def luminance(arr: np.ndarray) -> np.ndarray:
    """Calculate perceptual luminance from RGB values.

    Uses Rec. 709 luma coefficients, the same weights a browser's
    ``saturate()`` filter is built on.

    Args:
        arr: Float RGB array of shape ``(H, W, 3)``.

    Returns:
        2D luminance array with same height and width as input.
    """
    return arr[:, :, 0] * 0.2126 + arr[:, :, 1] * 0.7152 + arr[:, :, 2] * 0.0722


def _clamp(arr: np.ndarray) -> np.ndarray:
    return np.clip(arr, 0.0, 255.0)


def apply_brightness(arr: np.ndarray, percent: float) -> np.ndarray:
    """Scale every channel by ``percent / 100``.

    Args:
        arr: Float RGB array with values in [0, 255].
        percent: Brightness in percent, 100 leaves the array untouched.

    Returns:
        Brightness-adjusted array, clipped to [0, 255].
    """
    if percent == IDENTITY_PERCENT:
        return arr
    factor = percent / 100.0
    LOGGER.debug("Applying brightness: %s%% (factor %.3f)", percent, factor)
    return _clamp(arr * factor)


def apply_contrast(arr: np.ndarray, percent: float) -> np.ndarray:
    """Stretch or compress channels around the mid-grey pivot of 128.

    Args:
        arr: Float RGB array with values in [0, 255].
        percent: Contrast in percent; 0 collapses everything to 128.

    Returns:
        Contrast-adjusted array, clipped to [0, 255].
    """
    if percent == IDENTITY_PERCENT:
        return arr
    factor = percent / 100.0
    LOGGER.debug("Applying contrast: %s%% (factor %.3f)", percent, factor)
    return _clamp((arr - CONTRAST_PIVOT) * factor + CONTRAST_PIVOT)


def apply_saturation(arr: np.ndarray, percent: float) -> np.ndarray:
    """Blend each pixel toward (or away from) its luma grey.

    Args:
        arr: Float RGB array with values in [0, 255].
        percent: Saturation in percent; 0 yields greyscale, 200 doubles
            the distance from grey.

    Returns:
        Saturation-adjusted array, clipped to [0, 255].
    """
    if percent == IDENTITY_PERCENT:
        return arr
    factor = percent / 100.0
    grey = luminance(arr)[..., None]
    LOGGER.debug("Applying saturation: %s%% (factor %.3f)", percent, factor)
    return _clamp(grey + (arr - grey) * factor)


def to_channel_bytes(arr: np.ndarray) -> np.ndarray:
    """Round half-to-even and store as ``uint8``, like a clamped 8-bit canvas."""
    return np.rint(_clamp(arr)).astype(np.uint8)


def adjust(buffer: PixelBuffer, brightness: float, contrast: float, saturation: float) -> PixelBuffer:
    """Apply ``brightness() contrast() saturate()`` in that order.

    Alpha is passed through unchanged and the input buffer is left untouched.
    Values outside the documented slider ranges are still computed; the
    result is simply clamped on output.

    Args:
        buffer: Source RGBA buffer.
        brightness: Brightness in percent (100 = identity).
        contrast: Contrast in percent (100 = identity).
        saturation: Saturation in percent (100 = identity).

    Returns:
        A new :class:`PixelBuffer` holding the adjusted pixels.
    """
    ensure_buffer(buffer)
    out = buffer.to_array()
    if brightness == contrast == saturation == IDENTITY_PERCENT:
        return PixelBuffer._wrap(out)

    rgb = buffer.rgb.astype(np.float64)
    rgb = apply_brightness(rgb, brightness)
    rgb = apply_contrast(rgb, contrast)
    rgb = apply_saturation(rgb, saturation)
    out[:, :, :3] = to_channel_bytes(rgb)
    return PixelBuffer._wrap(out)


__all__ = [
    "adjust",
    "apply_brightness",
    "apply_contrast",
    "apply_saturation",
    "luminance",
    "to_channel_bytes",
]
