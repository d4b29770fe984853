"""
Ripple -- Image I/O
Turns a source (file path, http(s) URL, or data: URL) into an RGBA
PixelBuffer, and writes rendered frames back out as PNG or GIF.

All load failures surface as one of three ImageLoadError kinds.
load_with_fallback() swallows exactly those, logs them, and hands back
the built-in placeholder so rendering can always proceed.
"""

import base64
import logging
import math
from io import BytesIO
from pathlib import Path
from urllib.parse import unquote_to_bytes

import numpy as np
import requests
from PIL import Image, UnidentifiedImageError

from core.buffer import PixelBuffer, PLACEHOLDER
from core.config import MAX_DIMENSION
from core.safety import preflight, SafetyError, FileTypeError


class ImageLoadError(Exception):
    """Base class for failures while acquiring or decoding a source image."""
    pass


class SourceUnavailable(ImageLoadError):
    """The bytes could not be read (missing file, network failure)."""
    pass


class UnsupportedFormat(ImageLoadError):
    """The source isn't a recognised image type."""
    pass


class DecodeFailure(ImageLoadError):
    """The image type was recognised but its data is corrupt or too large."""
    pass


def fit_dimensions(width: int, height: int, max_dimension: int = MAX_DIMENSION) -> tuple[int, int]:
    """Output size for a source image.

    If either edge exceeds max_dimension, scale down preserving aspect
    ratio so the longer edge equals max_dimension. Edges round half up.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image must be at least 1x1, got {width}x{height}")
    w, h = float(width), float(height)
    if w > max_dimension or h > max_dimension:
        aspect = w / h
        if aspect > 1:  # Landscape
            w = max_dimension
            h = max_dimension / aspect
        else:  # Portrait or square
            h = max_dimension
            w = max_dimension * aspect
    return max(1, math.floor(w + 0.5)), max(1, math.floor(h + 0.5))


def decode_image(data: bytes) -> PixelBuffer:
    """Decode encoded image bytes (first frame for animations) to RGBA."""
    try:
        img = Image.open(BytesIO(data))
    except UnidentifiedImageError as e:
        raise UnsupportedFormat(f"Not a recognised image: {e}") from e
    except (SyntaxError, Image.DecompressionBombError) as e:
        raise DecodeFailure(str(e)) from e
    try:
        img.load()
        # Gray and RGB get their alpha added by PixelBuffer.from_array
        if img.mode not in ("L", "RGB", "RGBA"):
            img = img.convert("RGBA")
        pixels = np.asarray(img, dtype=np.uint8)
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeFailure(f"Failed to decode {img.format or 'image'}: {e}") from e
    return PixelBuffer.from_array(pixels)


def _read_data_url(source: str) -> bytes:
    """Payload bytes of a ``data:[<mime>][;base64],<data>`` URL."""
    header, sep, payload = source[5:].partition(",")
    if not sep:
        raise UnsupportedFormat("Malformed data URL (no ',' separator)")
    mime = header.split(";")[0]
    if mime and not mime.startswith("image/"):
        raise UnsupportedFormat(f"Data URL is '{mime}', not an image")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except ValueError as e:
            raise DecodeFailure(f"Invalid base64 in data URL: {e}") from e
    return unquote_to_bytes(payload)


def _read_url(source: str, timeout: float) -> bytes:
    try:
        resp = requests.get(source, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise SourceUnavailable(f"Failed to fetch {source}: {e}") from e
    return resp.content


def _read_file(source: str) -> bytes:
    try:
        info = preflight(source)
    except FileNotFoundError as e:
        raise SourceUnavailable(str(e)) from e
    except FileTypeError as e:
        raise UnsupportedFormat(str(e)) from e
    except SafetyError as e:
        raise SourceUnavailable(str(e)) from e
    try:
        return Path(info["path"]).read_bytes()
    except OSError as e:
        raise SourceUnavailable(f"Failed to read {source}: {e}") from e


def load_source(source, timeout: float = 10.0) -> PixelBuffer:
    """Load a source image.

    Args:
        source: Local path, ``http(s)://`` URL, or ``data:`` URL.
        timeout: Network timeout in seconds (URLs only).

    Raises:
        SourceUnavailable, UnsupportedFormat, DecodeFailure
    """
    source = str(source)
    if source.startswith("data:"):
        data = _read_data_url(source)
    elif source.startswith(("http://", "https://")):
        data = _read_url(source, timeout)
    elif "://" in source:
        raise UnsupportedFormat(f"Unsupported source scheme: {source.split('://', 1)[0]}")
    else:
        data = _read_file(source)
    return decode_image(data)


def load_with_fallback(source, timeout: float = 10.0) -> tuple[PixelBuffer, ImageLoadError | None]:
    """Load a source, substituting the placeholder on failure.

    Returns:
        (buffer, error): error is None on success.
    """
    try:
        return load_source(source, timeout=timeout), None
    except ImageLoadError as e:
        logging.warning("Failed to load image %s (%s): %s -- using placeholder",
                        _describe(source), type(e).__name__, e)
        return PLACEHOLDER, e


def _describe(source) -> str:
    source = str(source)
    if source.startswith("data:"):
        return source[:32] + "..."
    return source


def save_frame(buffer: PixelBuffer, output_path) -> Path:
    """Save a buffer as PNG (RGBA)."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(buffer.pixels).save(str(output_path))
    return output_path


def save_gif(buffers: list[PixelBuffer], output_path, fps: float = 30.0) -> Path:
    """Save frames as a looping animated GIF. Alpha is dropped."""
    if not buffers:
        raise ValueError("No frames to save")
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    images = [Image.fromarray(b.pixels).convert("RGB") for b in buffers]
    images[0].save(
        str(output_path),
        save_all=True,
        append_images=images[1:],
        duration=max(1, int(round(1000 / fps))),
        loop=0,
    )
    return output_path
