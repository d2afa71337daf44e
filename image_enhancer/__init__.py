"""Interactive image enhancement: brightness, contrast, saturation and sharpness.

The package turns a decoded RGBA raster plus four slider values into a new
enhanced raster. Each stage is a pure function that allocates a fresh buffer,
so identical inputs always give byte-identical output.

Module Organization
-------------------

buffers
    ``PixelBuffer`` (immutable row-major RGBA, 8-bit channels) and the
    ``InvalidInput`` contract error.

params
    ``EnhancementParams`` with range validation, slider-style clamping and
    ``reset()``.

adjustments
    Per-pixel brightness, contrast and luma-preserving saturation.

sharpen
    3x3 sharpening convolution with copied borders and optional row-band
    threading.

enhancer
    ``enhance()``, which chains the colour stage and the sharpen stage.

session
    Preview state holder and a latest-request-wins background runner.

io_utils
    Pillow based loading and atomic export of buffers.

config
    JSON / YAML parameter files.

Example Usage
-------------

    from image_enhancer import EnhancementParams, enhance, load_image, save_image

    original = load_image("photo.jpg")
    result = enhance(original, EnhancementParams(brightness=120, sharpness=50))
    save_image("enhanced-image.png", result)
"""
from __future__ import annotations

import logging

from .adjustments import adjust, apply_brightness, apply_contrast, apply_saturation, luminance
from .buffers import InvalidInput, PixelBuffer
from .config import load_params, save_params
from .enhancer import enhance
from .io_utils import (
    DEFAULT_EXPORT_NAME,
    ProcessingContext,
    buffer_to_image,
    export_path,
    image_to_buffer,
    load_image,
    save_image,
)
from .params import PARAMETER_RANGES, EnhancementParams, reset
from .session import EnhancementSession, LatestRequestRunner
from .sharpen import SHARPEN_KERNEL, sharpen

LOGGER = logging.getLogger("image_enhancer")

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_EXPORT_NAME",
    "EnhancementParams",
    "EnhancementSession",
    "InvalidInput",
    "LatestRequestRunner",
    "PARAMETER_RANGES",
    "PixelBuffer",
    "ProcessingContext",
    "SHARPEN_KERNEL",
    "adjust",
    "apply_brightness",
    "apply_contrast",
    "apply_saturation",
    "buffer_to_image",
    "enhance",
    "export_path",
    "image_to_buffer",
    "load_image",
    "load_params",
    "luminance",
    "reset",
    "save_image",
    "save_params",
    "sharpen",
]
