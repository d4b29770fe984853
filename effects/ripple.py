"""
Ripple -- Wave Field
Radially propagating damped sine wave, evaluated per output pixel.

The wave is measured in aspect-corrected space (y scaled by height/width)
so rings stay circular on non-square outputs. Elapsed time is folded into
a 2-second loop: the ripple restarts from the origin every cycle.
"""

import math
from typing import NamedTuple

import numpy as np


# Below this distance a pixel sits on the origin and has no direction.
ORIGIN_EPSILON = 1e-5


class RippleSample(NamedTuple):
    amount: float
    dir_x: float
    dir_y: float


def effective_time(t: float) -> float:
    """Loop elapsed seconds into the visible wave cycle, [0, 1)."""
    return (t * 0.5) % 1.0


def wave_value(local_time, frequency: float, decay: float):
    """Damped oscillation sin(f*t) * exp(-d*t). Works on floats or arrays."""
    if isinstance(local_time, np.ndarray):
        return np.sin(frequency * local_time) * np.exp(-decay * local_time)
    return math.sin(frequency * local_time) * math.exp(-decay * local_time)


def evaluate(t: float, origin, aspect: float, px: float, py: float, params) -> RippleSample:
    """Wave amount and outward direction for one pixel.

    Args:
        t: Elapsed seconds since the image became ready.
        origin: Object with normalized ``x`` and ``y`` (output space).
        aspect: Output height / width.
        px, py: Pixel position, normalized to [0, 1] before aspect correction.
        params: RippleParameters.

    Returns:
        RippleSample(amount, dir_x, dir_y). Direction is a unit vector in
        aspect-corrected space, or (0, 0) on the origin itself.
    """
    dx = px - origin.x
    dy = py * aspect - origin.y * aspect
    distance = math.sqrt(dx * dx + dy * dy)

    delay = distance / params.speed
    local_time = max(0.0, effective_time(t) - delay)
    amount = params.amplitude * wave_value(local_time, params.frequency, params.decay)

    if distance > ORIGIN_EPSILON:
        return RippleSample(amount, dx / distance, dy / distance)
    return RippleSample(amount, 0.0, 0.0)


def displaced_position(px: float, py: float, aspect: float, sample: RippleSample) -> tuple[float, float]:
    """Where a pixel samples the source: its position pushed along the wave direction.

    Returned coordinates are normalized but unclamped.
    """
    u = px + sample.amount * sample.dir_x
    if aspect > 0:
        v = py + sample.amount * sample.dir_y / aspect
    else:
        v = py + sample.amount * sample.dir_y
    return u, v


def pixel_grid(width: int, height: int, rows: tuple[int, int] | None = None):
    """Normalized (px, py) grids for an output of the given size.

    Args:
        rows: Optional (start, stop) row band; defaults to the full height.

    Returns:
        Two float64 arrays of shape (stop - start, width).
    """
    y0, y1 = rows if rows is not None else (0, height)
    xs = np.arange(width, dtype=np.float64) / width
    ys = np.arange(y0, y1, dtype=np.float64) / height
    px, py = np.meshgrid(xs, ys)
    return px, py


def ripple_field(t: float, origin, width: int, height: int, params,
                 rows: tuple[int, int] | None = None):
    """Vectorized ``evaluate`` over an output raster (or a band of its rows).

    Returns:
        (amount, dir_x, dir_y): float64 arrays of shape (rows, width).
    """
    aspect = height / width
    px, py = pixel_grid(width, height, rows)

    dx = px - origin.x
    dy = py * aspect - origin.y * aspect
    distance = np.sqrt(dx * dx + dy * dy)

    delay = distance / params.speed
    local_time = np.maximum(0.0, effective_time(t) - delay)
    amount = params.amplitude * wave_value(local_time, params.frequency, params.decay)

    has_dir = distance > ORIGIN_EPSILON
    safe = np.where(has_dir, distance, 1.0)
    dir_x = np.where(has_dir, dx / safe, 0.0)
    dir_y = np.where(has_dir, dy / safe, 0.0)
    return amount, dir_x, dir_y


def sample_coordinates(t: float, origin, width: int, height: int, params,
                       rows: tuple[int, int] | None = None):
    """Displaced (u, v) sample grids plus the wave amount for each pixel.

    Returns:
        (u, v, amount): float64 arrays of shape (rows, width). u and v are
        normalized and unclamped.
    """
    aspect = height / width
    px, py = pixel_grid(width, height, rows)
    amount, dir_x, dir_y = ripple_field(t, origin, width, height, params, rows)
    u = px + amount * dir_x
    v = py + amount * dir_y / aspect
    return u, v, amount
