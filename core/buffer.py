"""
Ripple -- Pixel Buffers
RGBA8 raster storage shared by the source image and the rendered output.

Pixels live in a (height, width, 4) uint8 numpy array, row-major, so
``to_bytes()`` is exactly the RGBA8 row-major layout a display expects.
"""

from dataclasses import dataclass

import numpy as np


@dataclass
class PixelBuffer:
    """RGBA8 raster.

    Args:
        pixels: (H, W, 4) uint8 array.
    """
    pixels: np.ndarray

    def __post_init__(self):
        if not isinstance(self.pixels, np.ndarray):
            raise TypeError(f"pixels must be a numpy array, got {type(self.pixels).__name__}")
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4:
            raise ValueError(f"pixels must have shape (H, W, 4), got {self.pixels.shape}")
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"pixels must be uint8, got {self.pixels.dtype}")
        if self.pixels.shape[0] < 1 or self.pixels.shape[1] < 1:
            raise ValueError(f"buffer must be at least 1x1, got {self.pixels.shape[1]}x{self.pixels.shape[0]}")

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        """(width, height)."""
        return self.width, self.height

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelBuffer":
        """Transparent black buffer of the given size."""
        if width < 1 or height < 1:
            raise ValueError(f"buffer must be at least 1x1, got {width}x{height}")
        return cls(np.zeros((height, width, 4), dtype=np.uint8))

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """Build a buffer from a gray (H, W), RGB (H, W, 3) or RGBA (H, W, 4) array.

        Missing alpha is filled with 255. The input is copied.
        """
        arr = np.asarray(array)
        if arr.dtype != np.uint8:
            arr = np.clip(arr, 0, 255).astype(np.uint8)
        if arr.ndim == 2:
            arr = np.stack([arr, arr, arr], axis=-1)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise ValueError(f"Expected (H, W), (H, W, 3) or (H, W, 4) array, got {arr.shape}")
        if arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, alpha], axis=-1)
        return cls(np.ascontiguousarray(arr).copy())

    def freeze(self) -> "PixelBuffer":
        """Mark pixel storage read-only (source buffers never change while loaded)."""
        self.pixels.flags.writeable = False
        return self

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        r, g, b, a = self.pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def to_bytes(self) -> bytes:
        """Row-major RGBA8 bytes, length width * height * 4."""
        return self.pixels.tobytes()

    def __eq__(self, other):
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and np.array_equal(self.pixels, other.pixels)


# Fallback image used when a source cannot be loaded: 2x2 mid-gray checker.
PLACEHOLDER = PixelBuffer(np.array(
    [[[96, 96, 96, 255], [160, 160, 160, 255]],
     [[160, 160, 160, 255], [96, 96, 96, 255]]],
    dtype=np.uint8,
)).freeze()
