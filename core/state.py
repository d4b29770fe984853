"""
Ripple -- Render State
Everything a frame depends on, gathered into one explicit value.

Inbound interfaces (image loader, pointer input, window resize) mutate the
state only by swapping whole references: the source buffer, the output
size tuple and the origin are each replaced in a single assignment, so a
frame that snapshots them once sees a consistent set.
"""

import math
import time
from dataclasses import dataclass, field

from core.buffer import PixelBuffer
from core.config import RippleParameters, MAX_DIMENSION
from core.image_io import fit_dimensions
from core.safety import validate_dimensions


@dataclass(frozen=True)
class RippleOrigin:
    """Normalized wave origin in output space."""
    x: float = 0.5
    y: float = 0.5


CENTER = RippleOrigin(0.5, 0.5)


class Clock:
    """Monotonic seconds since the last reset.

    Args:
        time_fn: Zero-argument callable returning seconds. Injectable for tests.
    """

    def __init__(self, time_fn=time.monotonic):
        self._time_fn = time_fn
        self._start = time_fn()

    def reset(self):
        self._start = self._time_fn()

    def elapsed(self) -> float:
        return max(0.0, self._time_fn() - self._start)


@dataclass
class RenderState:
    """Source image, output size, origin and clock for the running effect.

    Runtime fields:
        source: Read-only PixelBuffer, None until the first image loads.
        output_size: (width, height) of the output buffer, None until then.
        origin: Current RippleOrigin. Persists across image reloads.
    """
    params: RippleParameters = field(default_factory=RippleParameters)
    max_dimension: int = MAX_DIMENSION
    clock: Clock = field(default_factory=Clock)
    source: PixelBuffer | None = None
    output_size: tuple[int, int] | None = None
    origin: RippleOrigin = CENTER

    @property
    def ready(self) -> bool:
        return self.source is not None and self.output_size is not None

    def load_image(self, buffer: PixelBuffer):
        """Install a freshly decoded source image.

        Sizes the output per the resize policy and restarts the clock.
        The buffer's storage is marked read-only.
        """
        if not isinstance(buffer, PixelBuffer):
            raise TypeError(f"Expected PixelBuffer, got {type(buffer).__name__}")
        buffer.freeze()
        self.output_size = fit_dimensions(buffer.width, buffer.height, self.max_dimension)
        self.source = buffer
        self.clock.reset()

    def update_origin(self, x: float, y: float):
        """Move the wave origin. Coordinates are clamped to [0, 1]."""
        x = float(x)
        y = float(y)
        if not (math.isfinite(x) and math.isfinite(y)):
            raise ValueError(f"Origin must be finite, got ({x}, {y})")
        self.origin = RippleOrigin(min(1.0, max(0.0, x)), min(1.0, max(0.0, y)))

    def recenter(self):
        self.origin = CENTER

    def display_resize(self, width: int, height: int):
        """Reallocate the output to a new display size."""
        validate_dimensions(width, height)
        self.output_size = (int(width), int(height))

    def elapsed(self) -> float:
        return self.clock.elapsed()
