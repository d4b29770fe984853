"""
Ripple -- Display Surfaces
Anything that can show a finished frame. The render core only ever calls
``present(buffer)``; windows, files and test doubles all look the same.
"""

from pathlib import Path
from typing import Protocol

from core.buffer import PixelBuffer
from core.image_io import save_frame


class DisplaySurface(Protocol):
    def present(self, buffer: PixelBuffer) -> None:
        ...


class MemorySurface:
    """Keeps the most recent frames in memory.

    Args:
        keep: Maximum frames retained (oldest dropped first). None = unbounded.
    """

    def __init__(self, keep: int | None = None):
        self.keep = keep
        self.frames: list[PixelBuffer] = []
        self.presented = 0

    def present(self, buffer: PixelBuffer) -> None:
        self.frames.append(buffer)
        self.presented += 1
        if self.keep is not None and len(self.frames) > self.keep:
            del self.frames[:len(self.frames) - self.keep]

    @property
    def last(self) -> PixelBuffer | None:
        return self.frames[-1] if self.frames else None


class PngSequenceSurface:
    """Writes every presented frame to ``frame_000000.png``, ``frame_000001.png``..."""

    def __init__(self, output_dir):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.paths: list[Path] = []

    def present(self, buffer: PixelBuffer) -> None:
        path = self.output_dir / f"frame_{len(self.paths):06d}.png"
        save_frame(buffer, path)
        self.paths.append(path)
