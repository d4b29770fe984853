"""
Ripple -- Safety & Resource Guards
Preflight checks run before any file is decoded, plus numeric guards
for values that arrive from outside the render core.
"""

import math
import os
from pathlib import Path

# --- Configurable Limits ---
MAX_FILE_MB = 50           # Maximum input image size on disk
MAX_DIMENSION = 8192       # Largest output edge accepted from a display
MAX_FRAMES = 3600          # Cap for offline PNG sequence renders
MAX_GIF_FRAMES = 300       # Cap for animated GIF exports (frames buffered in memory)
ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".tif", ".tiff"}


class SafetyError(Exception):
    """Raised when a preflight check fails."""
    pass


class FileTypeError(SafetyError):
    """Raised when an input file's extension is not an allowed image type."""
    pass


def preflight(input_path) -> dict:
    """Run all safety checks before decoding a local image.

    Returns:
        dict with file metadata (path, size_mb, extension).

    Raises:
        FileNotFoundError: If input doesn't exist.
        SafetyError: If the file is too large.
        FileTypeError: If the extension is not an allowed image type.
    """
    input_path = str(input_path)
    real_path = os.path.realpath(input_path)

    if not os.path.isfile(real_path):
        raise FileNotFoundError(f"Input file not found: {input_path}")

    size_mb = os.path.getsize(real_path) / (1024 * 1024)
    if size_mb > MAX_FILE_MB:
        raise SafetyError(
            f"Input file is {size_mb:.0f}MB, exceeds {MAX_FILE_MB}MB limit."
        )

    ext = Path(real_path).suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise FileTypeError(
            f"File type '{ext}' not allowed. "
            f"Supported: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
        )

    return {
        "path": real_path,
        "size_mb": size_mb,
        "extension": ext,
    }


def validate_dimensions(width, height) -> None:
    """Check a display size before allocating an output buffer.

    Raises:
        ValueError: If either edge is not a positive integer within MAX_DIMENSION.
    """
    for name, v in (("width", width), ("height", height)):
        if isinstance(v, bool) or int(v) != v:
            raise ValueError(f"{name} must be an integer, got {v!r}")
        if not 1 <= int(v) <= MAX_DIMENSION:
            raise ValueError(f"{name} must be in 1..{MAX_DIMENSION}, got {v}")


def validate_time(t) -> float:
    """Reject NaN/Inf/negative animation times."""
    t = float(t)
    if not math.isfinite(t) or t < 0:
        raise ValueError(f"Time must be a finite, non-negative number of seconds, got {t}")
    return t


def validate_frame_count(count: int, max_frames: int | None = None) -> None:
    limit = MAX_FRAMES if max_frames is None else max_frames
    if count < 1 or count > limit:
        raise SafetyError(f"Sequence has {count} frames, must be 1..{limit}.")
