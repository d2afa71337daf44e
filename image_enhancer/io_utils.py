"""Image decode/encode collaborator built on Pillow.

The enhancement core only ever sees :class:`PixelBuffer` instances. This
module turns files of any raster format Pillow understands into RGBA
buffers, and writes enhanced buffers back out.

Key Components
--------------

ProcessingContext
    Context manager for atomic file operations with staged writes.

Functions
---------

load_image
    Decode an image file into an RGBA :class:`PixelBuffer`.

save_image
    Encode a buffer to disk through a staged temporary file.
"""
from __future__ import annotations

import contextlib
import dataclasses
import logging
import os
import uuid
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image

from .buffers import PixelBuffer, ensure_buffer

LOGGER = logging.getLogger("image_enhancer")

DEFAULT_EXPORT_NAME = "enhanced-image.png"

# Formats Pillow cannot store an alpha channel in.
_OPAQUE_FORMATS = {"JPEG", "BMP", "PPM", "EPS"}


@dataclasses.dataclass
class ProcessingContext:
    """Stage an export next to its destination and swap it in on success.

    The yielded path is a hidden sibling of ``destination``. It replaces the
    destination only when the ``with`` block finishes cleanly; otherwise it is
    removed and any existing export is left as it was.
    """

    destination: Path
    suffix: str = ".tmp"

    def __post_init__(self) -> None:
        self._staged: Optional[Path] = None

    def __enter__(self) -> Path:
        target_dir = self.destination.parent
        target_dir.mkdir(parents=True, exist_ok=True)
        self._staged = target_dir / f".{self.destination.name}{self.suffix}-{uuid.uuid4().hex}"
        return self._staged

    def __exit__(self, exc_type, exc, tb) -> bool:
        staged, self._staged = self._staged, None
        if staged is None:
            return False

        if exc_type is not None:
            with contextlib.suppress(FileNotFoundError):
                staged.unlink()
            return False
        try:
            os.replace(staged, self.destination)
        except OSError:
            with contextlib.suppress(OSError):
                staged.unlink()
            raise
        return False


def image_to_buffer(image: Image.Image) -> PixelBuffer:
    """Convert a Pillow image of any mode to an RGBA buffer."""
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    arr = np.asarray(image, dtype=np.uint8)
    return PixelBuffer.from_array(arr)


def buffer_to_image(buffer: PixelBuffer) -> Image.Image:
    ensure_buffer(buffer)
    return Image.frombytes("RGBA", buffer.size, buffer.to_bytes())


def load_image(path: Union[str, os.PathLike]) -> PixelBuffer:
    """Decode *path* into an RGBA :class:`PixelBuffer`.

    Raises:
        FileNotFoundError: If *path* does not exist.
        PIL.UnidentifiedImageError: If Pillow cannot decode the file.
    """
    source = Path(path)
    with Image.open(source) as image:
        image.load()
        buffer = image_to_buffer(image)
    LOGGER.info("Loaded %s (%sx%s)", source, buffer.width, buffer.height)
    return buffer


def _resolve_format(destination: Path, requested: Optional[str]) -> str:
    if requested:
        alias = Image.registered_extensions().get("." + requested.lower().lstrip("."))
        return alias or requested.upper()
    extension = destination.suffix.lower()
    resolved = Image.registered_extensions().get(extension)
    if resolved is None:
        raise ValueError(f"Cannot infer an image format from '{destination.name}'; pass format explicitly")
    return resolved


def save_image(
    destination: Union[str, os.PathLike],
    buffer: PixelBuffer,
    *,
    format: Optional[str] = None,  # pylint: disable=redefined-builtin
) -> Path:
    """Encode *buffer* to *destination*.

    The file is staged next to the destination and only moved into place
    once Pillow has written it completely.

    Args:
        destination: Output path; its extension selects the format unless
            *format* is given.
        buffer: Enhanced RGBA buffer.
        format: Optional Pillow format name (``"PNG"``, ``"JPEG"``...).

    Returns:
        The destination path.
    """
    target = Path(destination)
    image_format = _resolve_format(target, format)
    image = buffer_to_image(buffer)
    if image_format in _OPAQUE_FORMATS:
        LOGGER.debug("Dropping alpha channel for %s output", image_format)
        image = image.convert("RGB")

    with ProcessingContext(target) as staged_path:
        image.save(staged_path, format=image_format)
    LOGGER.info("Saved %s (%sx%s, %s)", target, buffer.width, buffer.height, image_format)
    return target


def export_path(folder: Union[str, os.PathLike], name: str = DEFAULT_EXPORT_NAME) -> Path:
    """Return the download location for an enhanced image inside *folder*."""
    return Path(folder) / name


__all__ = [
    "DEFAULT_EXPORT_NAME",
    "ProcessingContext",
    "buffer_to_image",
    "export_path",
    "image_to_buffer",
    "load_image",
    "save_image",
]
