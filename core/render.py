"""
Ripple -- Frame Renderer

Pure per-frame computation: (source, origin, time, output size) -> RGBA
output buffer. Every output pixel runs wave field -> resample -> shading
with no dependency on any other pixel, so the frame can be split into
row bands and computed in parallel; bands never overlap.
"""

from concurrent.futures import ThreadPoolExecutor

import numpy as np

from core.buffer import PixelBuffer
from core.safety import validate_dimensions, validate_time
from effects import sample_coordinates, sample_nearest, composite_frame


def row_bands(height: int, count: int) -> list[tuple[int, int]]:
    """Split [0, height) into at most ``count`` contiguous, non-empty bands."""
    count = max(1, min(count, height))
    edges = np.linspace(0, height, count + 1).round().astype(int)
    return [(int(a), int(b)) for a, b in zip(edges[:-1], edges[1:]) if b > a]


def render_rows(source: PixelBuffer, origin, t: float, size: tuple[int, int],
                params, rows: tuple[int, int], out: np.ndarray) -> None:
    """Compute output rows [rows[0], rows[1]) into ``out`` in place."""
    width, height = size
    u, v, amount = sample_coordinates(t, origin, width, height, params, rows)
    colors = sample_nearest(source, u, v)
    out[rows[0]:rows[1]] = composite_frame(colors, amount, params.amplitude)


def render_frame(source: PixelBuffer, origin, t: float, size: tuple[int, int], params,
                 workers: int = 1, executor: ThreadPoolExecutor | None = None) -> PixelBuffer:
    """Render one full output frame.

    Args:
        source: Source image.
        origin: RippleOrigin snapshot for this frame.
        t: Elapsed seconds.
        size: Output (width, height).
        params: RippleParameters.
        workers: Number of row bands to compute concurrently.
        executor: Optional pool to reuse across frames.

    Returns:
        Fully populated output PixelBuffer.
    """
    width, height = size
    validate_dimensions(width, height)
    t = validate_time(t)
    out = np.empty((height, width, 4), dtype=np.uint8)

    bands = row_bands(height, workers)
    if len(bands) == 1:
        render_rows(source, origin, t, size, params, bands[0], out)
    elif executor is not None:
        futures = [executor.submit(render_rows, source, origin, t, size, params, band, out)
                   for band in bands]
        for f in futures:
            f.result()
    else:
        with ThreadPoolExecutor(max_workers=len(bands)) as pool:
            list(pool.map(lambda band: render_rows(source, origin, t, size, params, band, out),
                          bands))

    return PixelBuffer(out)


def render(state, display_dims: tuple[int, int] | None = None, t: float | None = None,
           workers: int = 1, executor: ThreadPoolExecutor | None = None) -> PixelBuffer:
    """Render the current frame of a RenderState.

    Source, origin and output size are each read once, up front.

    Args:
        state: RenderState with an image loaded.
        display_dims: Output (width, height); defaults to state.output_size.
        t: Elapsed seconds; defaults to the state's clock.

    Raises:
        RuntimeError: If no image has been loaded yet.
    """
    source = state.source
    origin = state.origin
    size = display_dims or state.output_size
    if source is None or size is None:
        raise RuntimeError("Cannot render before an image is loaded")
    if t is None:
        t = state.elapsed()
    return render_frame(source, origin, t, size, state.params,
                        workers=workers, executor=executor)
