"""
Ripple -- Per-Pixel Stages
Wave field -> nearest-neighbour resample -> wave shading.

Each stage has a scalar form (one pixel, used for reference and tests)
and a vectorized form operating on whole numpy grids (used per frame).
"""

from effects.ripple import (
    RippleSample,
    effective_time,
    wave_value,
    evaluate,
    displaced_position,
    ripple_field,
    sample_coordinates,
)
from effects.resample import sample, sample_nearest
from effects.composite import composite, composite_frame, shade_factor

__all__ = [
    "RippleSample",
    "effective_time",
    "wave_value",
    "evaluate",
    "displaced_position",
    "ripple_field",
    "sample_coordinates",
    "sample",
    "sample_nearest",
    "composite",
    "composite_frame",
    "shade_factor",
]
