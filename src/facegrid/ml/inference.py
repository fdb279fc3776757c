"""Detection concurrency layer.

Architecture:
    FastAPI (async) -> asyncio.Semaphore(N) -> ThreadPoolExecutor(N) -> SkinToneFaceDetector

The detector itself is synchronous and CPU-bound, so it never runs on the
event loop. Requests beyond the semaphore limit wait up to queue_timeout
seconds, then get TimeoutError (mapped to 503 by the API).
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from facegrid.ml.face_detector import SkinToneFaceDetector

if TYPE_CHECKING:
    from facegrid.config import Settings
    from facegrid.ml.aggregation import FaceBox
    from facegrid.ml.face_detector import FaceDetector
    from facegrid.ml.scanner import PixelBuffer

logger = logging.getLogger(__name__)


class DetectionPool:
    """Bounds concurrent detection passes and runs them off the event loop."""

    def __init__(self, settings: Settings, detector: FaceDetector | None = None) -> None:
        self._detector: FaceDetector = detector or SkinToneFaceDetector(settings.detector_params())
        self._timeout = settings.queue_timeout
        self._semaphore = asyncio.Semaphore(settings.max_concurrent)
        self._executor = ThreadPoolExecutor(
            max_workers=settings.max_concurrent,
            thread_name_prefix="facegrid-detect",
        )
        self._active_count: int = 0
        self._queue_depth: int = 0
        self._counter_lock = threading.Lock()

    @property
    def detector(self) -> FaceDetector:
        return self._detector

    async def detect(self, pixels: PixelBuffer, width: int, height: int) -> list[FaceBox]:
        """Run one detection pass in the worker pool.

        Raises:
            TimeoutError: If no worker slot frees up within the queue timeout.
        """
        with self._counter_lock:
            self._queue_depth += 1
        try:
            await asyncio.wait_for(self._semaphore.acquire(), timeout=self._timeout)
        except TimeoutError:
            logger.warning("Detection queue timeout after %.1fs (%dx%d image)", self._timeout, width, height)
            raise
        finally:
            with self._counter_lock:
                self._queue_depth -= 1

        with self._counter_lock:
            self._active_count += 1
        try:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(self._executor, self._detector.detect, pixels, width, height)
        finally:
            self._semaphore.release()
            with self._counter_lock:
                self._active_count -= 1

    @property
    def active_count(self) -> int:
        """Number of detection passes currently running."""
        with self._counter_lock:
            return self._active_count

    @property
    def queue_depth(self) -> int:
        """Number of requests waiting for a worker slot."""
        with self._counter_lock:
            return self._queue_depth

    def shutdown(self) -> None:
        """Shut down the worker thread pool."""
        self._executor.shutdown(wait=True)
