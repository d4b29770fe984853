"""
Ripple -- Wave Shading
Brightens crests and darkens troughs in step with the displacement.

adjust = 0.3 * (amount / amplitude), added to R, G and B as adjust * 255.
Alpha passes through from the sampled pixel. With amplitude 0 the factor
is defined as 0 and colors are untouched.
"""

import numpy as np


SHADE_STRENGTH = 0.3


def shade_factor(amount, amplitude: float):
    """Signed brightness factor, roughly [-0.3, 0.3]. Floats or arrays."""
    if amplitude == 0:
        if isinstance(amount, np.ndarray):
            return np.zeros_like(amount, dtype=np.float64)
        return 0.0
    return SHADE_STRENGTH * (amount / amplitude)


def _clamp_channel(value: float) -> int:
    return int(max(0, min(255, round(value))))


def composite(color, amount: float, amplitude: float) -> tuple[int, int, int, int]:
    """Shade one sampled RGBA color by the local wave amount."""
    r, g, b, a = color
    offset = shade_factor(amount, amplitude) * 255
    return (
        _clamp_channel(r + offset),
        _clamp_channel(g + offset),
        _clamp_channel(b + offset),
        int(a),
    )


def composite_frame(colors: np.ndarray, amount: np.ndarray, amplitude: float) -> np.ndarray:
    """Vectorized ``composite``.

    Args:
        colors: (H, W, 4) uint8 sampled colors.
        amount: (H, W) wave amounts.

    Returns:
        (H, W, 4) uint8 shaded colors.
    """
    out = np.empty_like(colors)
    offset = shade_factor(amount, amplitude)[..., np.newaxis] * 255
    rgb = colors[..., :3].astype(np.float64) + offset
    out[..., :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
    out[..., 3] = colors[..., 3]
    return out
