"""
Ripple -- Frame Scheduler

Drives the renderer once per display refresh:

  IDLE     no image yet; ticks do nothing
  LOADING  an image is being fetched/decoded; ticks do nothing
  READY    every tick renders a full frame and presents it

Loads are numbered. Only the newest load may complete the LOADING -> READY
transition; an older load that finishes late is dropped, and a frame whose
render overlapped a new load request is discarded instead of presented.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from enum import Enum

from core.buffer import PixelBuffer, PLACEHOLDER
from core.image_io import load_with_fallback
from core.render import render


class Phase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"


class FrameScheduler:
    """Owns the Idle/Loading/Ready lifecycle around a RenderState.

    Args:
        state: RenderState to render from.
        surface: DisplaySurface receiving each finished frame.
        workers: Row bands rendered concurrently per frame.
        timeout: Network timeout for URL loads.
        loader: fn(source, timeout) -> (PixelBuffer, error | None).
    """

    def __init__(self, state, surface, workers=1, timeout=10.0, loader=load_with_fallback):
        self.state = state
        self.surface = surface
        self.workers = workers
        self.timeout = timeout
        self._loader = loader
        self._lock = threading.Lock()
        self._generation = 0
        self._executor = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None

        self.phase = Phase.READY if state.ready else Phase.IDLE
        self.last_error = None
        self.ticks = 0
        self.frames_presented = 0
        self.frames_dropped = 0

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    @property
    def generation(self) -> int:
        return self._generation

    def _begin_load(self) -> int:
        with self._lock:
            self._generation += 1
            self.phase = Phase.LOADING
            return self._generation

    def request_image(self, source, background=True) -> int:
        """Start loading a source (path, URL or data URL).

        Returns:
            The load's generation number.
        """
        generation = self._begin_load()
        if background:
            worker = threading.Thread(
                target=self._load_worker, args=(source, generation),
                name=f"ripple-load-{generation}", daemon=True,
            )
            worker.start()
        else:
            self._load_worker(source, generation)
        return generation

    def _load_worker(self, source, generation):
        try:
            buffer, error = self._loader(source, self.timeout)
        except Exception as e:
            logging.exception("Unexpected failure loading %s", source)
            buffer, error = PLACEHOLDER, e
        self.finish_load(buffer, generation, error)

    def supply_image(self, buffer: PixelBuffer) -> int:
        """Install an already-decoded image immediately."""
        generation = self._begin_load()
        self.finish_load(buffer, generation)
        return generation

    def finish_load(self, buffer: PixelBuffer, generation: int, error=None) -> bool:
        """Complete a load. Returns False if a newer load superseded it."""
        with self._lock:
            if generation != self._generation:
                return False
            self.state.load_image(buffer)
            self.last_error = error
            self.phase = Phase.READY
        return True

    def tick(self) -> PixelBuffer | None:
        """Run one scheduling step.

        Returns:
            The presented frame, or None if the step was skipped.
        """
        self.ticks += 1
        with self._lock:
            phase, generation = self.phase, self._generation
        if phase is not Phase.READY:
            return None

        frame = render(self.state, workers=self.workers, executor=self._executor)
        with self._lock:
            if generation != self._generation:
                self.frames_dropped += 1
                return None
            self.surface.present(frame)
        self.frames_presented += 1
        return frame

    def run(self, fps=60, max_frames=None, should_continue=None, sleep=time.sleep):
        """Tick at up to ``fps`` until told to stop.

        Args:
            max_frames: Stop after this many ticks (None = forever).
            should_continue: Optional fn() -> bool checked before each tick.
        """
        period = 1.0 / fps
        done = 0
        while max_frames is None or done < max_frames:
            if should_continue is not None and not should_continue():
                break
            started = time.monotonic()
            self.tick()
            done += 1
            remaining = period - (time.monotonic() - started)
            if remaining > 0:
                sleep(remaining)

    def close(self):
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
