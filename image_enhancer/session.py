"""Stateful preview collaborator sitting between controls and the pipeline.

:class:`EnhancementSession` keeps the original image, the current slider
values and the latest enhanced result, recomputing on every change the way
an interactive editor does. :class:`LatestRequestRunner` moves that work off
the caller's thread and drops results that a newer request has superseded.
"""
from __future__ import annotations

import functools
import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Optional, Union

from .buffers import PixelBuffer, ensure_buffer
from .enhancer import enhance
from .io_utils import DEFAULT_EXPORT_NAME, save_image
from .params import EnhancementParams, reset

LOGGER = logging.getLogger("image_enhancer")
SESSION_LOGGER = LOGGER.getChild("session")


class EnhancementSession:
    """Original image, current parameters and the latest enhanced image."""

    def __init__(
        self,
        original: Optional[PixelBuffer] = None,
        params: Optional[EnhancementParams] = None,
        *,
        workers: int = 1,
    ) -> None:
        self._params = params if params is not None else reset()
        self._workers = workers
        self._original: Optional[PixelBuffer] = None
        self._enhanced: Optional[PixelBuffer] = None
        if original is not None:
            self.load(original)

    @property
    def original(self) -> Optional[PixelBuffer]:
        return self._original

    @property
    def enhanced(self) -> Optional[PixelBuffer]:
        return self._enhanced

    @property
    def params(self) -> EnhancementParams:
        return self._params

    def _refresh(self) -> Optional[PixelBuffer]:
        if self._original is None:
            return None
        self._enhanced = enhance(self._original, self._params, workers=self._workers)
        return self._enhanced

    def load(self, buffer: PixelBuffer) -> PixelBuffer:
        """Replace the original image and enhance it with the current values."""
        self._original = ensure_buffer(buffer)
        SESSION_LOGGER.info("Loaded %sx%s original", buffer.width, buffer.height)
        self._enhanced = enhance(self._original, self._params, workers=self._workers)
        return self._enhanced

    def update(self, **changes: float) -> Optional[PixelBuffer]:
        """Change one or more controls and recompute.

        Values are clamped into their documented ranges first. Returns the new
        enhanced image, or ``None`` while no original is loaded.
        """
        merged = {**self._params.as_dict(), **changes}
        self._params = EnhancementParams.clamped(**merged)
        SESSION_LOGGER.debug("Parameters now %s", self._params)
        return self._refresh()

    def reset(self) -> Optional[PixelBuffer]:
        """Return every control to neutral; the enhanced image equals the original."""
        self._params = reset()
        SESSION_LOGGER.debug("Parameters reset")
        return self._refresh()

    def export(self, destination: Union[str, os.PathLike] = DEFAULT_EXPORT_NAME) -> Path:
        """Write the enhanced image to *destination*.

        Raises:
            RuntimeError: If no image has been loaded yet.
        """
        if self._enhanced is None:
            raise RuntimeError("No enhanced image to export; load an image first")
        return save_image(destination, self._enhanced)


class LatestRequestRunner:
    """Run :func:`enhance` in the background, keeping only the newest result.

    Every :meth:`submit` starts a new generation. A request still waiting in
    the queue is cancelled when a newer one arrives, and a request that was
    already running has its result discarded on completion.
    """

    def __init__(
        self,
        *,
        max_workers: int = 1,
        workers: int = 1,
        on_result: Optional[Callable[[PixelBuffer], None]] = None,
    ) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="image-enhancer")
        self._workers = workers
        self._on_result = on_result
        self._lock = threading.Lock()
        self._generation = 0
        self._pending: Optional[Future] = None
        self._latest: Optional[PixelBuffer] = None

    @property
    def latest(self) -> Optional[PixelBuffer]:
        """Most recent result delivered for the newest generation."""
        with self._lock:
            return self._latest

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def submit(self, original: PixelBuffer, params: EnhancementParams) -> Future:
        with self._lock:
            self._generation += 1
            generation = self._generation
            previous = self._pending
            if previous is not None and previous.cancel():
                SESSION_LOGGER.debug("Cancelled queued request superseded by generation %s", generation)
            future = self._executor.submit(enhance, original, params, workers=self._workers)
            self._pending = future
        future.add_done_callback(functools.partial(self._deliver, generation))
        return future

    def _deliver(self, generation: int, future: Future) -> None:
        if future.cancelled() or future.exception() is not None:
            return
        result = future.result()
        with self._lock:
            if generation != self._generation:
                SESSION_LOGGER.debug(
                    "Discarding stale result from generation %s (current %s)", generation, self._generation
                )
                return
            self._latest = result
            callback = self._on_result
        if callback is not None:
            callback(result)

    def wait(self, timeout: Optional[float] = None) -> Optional[PixelBuffer]:
        """Block until the newest request finishes and return its result.

        Errors raised by :func:`enhance` propagate from here.
        """
        with self._lock:
            pending = self._pending
        if pending is None:
            return None
        return pending.result(timeout=timeout)

    def close(self) -> None:
        with self._lock:
            pending = self._pending
        if pending is not None:
            pending.cancel()
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "LatestRequestRunner":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False


__all__ = ["EnhancementSession", "LatestRequestRunner"]
