"""
Ripple -- Nearest-Neighbour Resampler
Maps continuous normalized coordinates onto source pixels.

Indices are floor(u * W) and floor(v * H), each clamped independently to
the raster: any real (u, v), however far outside [0, 1], lands on an edge
pixel. No blending, no wraparound.
"""

import math

import numpy as np


# Absorbs the (x / W) * W float round trip so aligned coordinates hit their own pixel.
INDEX_TOLERANCE = 1e-6


def source_index(u: float, size: int) -> int:
    """Clamped pixel index for one normalized coordinate. Clamps in float space before the int cast."""
    i = u * size + INDEX_TOLERANCE
    return int(math.floor(min(max(i, 0.0), size - 1)))


def sample(buffer, u: float, v: float) -> tuple[int, int, int, int]:
    """RGBA of the source pixel nearest to (u, v).

    Args:
        buffer: PixelBuffer to read from.
        u, v: Normalized coordinates (any real value).
    """
    x = source_index(u, buffer.width)
    y = source_index(v, buffer.height)
    return buffer.pixel(x, y)


def source_indices(coords: np.ndarray, size: int) -> np.ndarray:
    """Vectorized ``source_index``. Clamps in float space before the int cast."""
    idx = np.floor(coords * size + INDEX_TOLERANCE)
    return np.clip(idx, 0, size - 1).astype(np.intp)


def sample_nearest(buffer, u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Gather source colors for whole coordinate grids.

    Args:
        buffer: PixelBuffer to read from.
        u, v: Float arrays of identical shape.

    Returns:
        uint8 array of shape u.shape + (4,).
    """
    xi = source_indices(u, buffer.width)
    yi = source_indices(v, buffer.height)
    return buffer.pixels[yi, xi]
