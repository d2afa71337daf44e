"""Enhancement orchestration: colour adjustment followed by optional sharpening."""
from __future__ import annotations

import logging

from .adjustments import adjust
from .buffers import InvalidInput, PixelBuffer, ensure_buffer
from .params import EnhancementParams, reset
from .sharpen import sharpen

LOGGER = logging.getLogger("image_enhancer")


def enhance(original: PixelBuffer, params: EnhancementParams, *, workers: int = 1) -> PixelBuffer:
    """Apply the complete enhancement pipeline to *original*.

    The colour stage always runs and produces a fresh buffer; the sharpening
    stage only runs when ``params.sharpness > 0``. The same inputs always
    produce byte-identical output.

    Args:
        original: Decoded RGBA buffer, left unmodified.
        params: Slider values for this call.
        workers: Threads used by the sharpening stage.

    Returns:
        The enhanced buffer.
    """
    ensure_buffer(original)
    if not isinstance(params, EnhancementParams):
        raise InvalidInput("parameter out of range", f"expected EnhancementParams, got {type(params).__name__}")

    LOGGER.debug("Enhancing %sx%s buffer with %s", original.width, original.height, params)
    adjusted = adjust(original, params.brightness, params.contrast, params.saturation)
    if params.sharpness > 0:
        return sharpen(adjusted, params.sharpness, workers=workers)
    return adjusted


__all__ = ["enhance", "reset"]
