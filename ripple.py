#!/usr/bin/env python3
"""
Ripple -- Interactive Image Ripple
CLI entry point. Also importable as a library.

Usage:
    python ripple.py live photo.jpg
    python ripple.py frame photo.jpg -o still.png --time 0.25 --origin 0.3,0.6
    python ripple.py sequence photo.jpg -o frames/ --seconds 2 --fps 30
    python ripple.py sequence photo.jpg -o loop.gif --seconds 2
    python ripple.py info photo.jpg
"""

import argparse
import math
import os
import sys
from pathlib import Path

# Add project root to path so imports work
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from core.config import RippleConfig, load_config
from core.display import MemorySurface, PngSequenceSurface
from core.image_io import load_with_fallback, save_frame, save_gif
from core.render import render
from core.safety import validate_frame_count, validate_time, MAX_FRAMES, MAX_GIF_FRAMES
from core.state import RenderState

__version__ = "0.1.0"


def _parse_origin(val: str) -> tuple[float, float]:
    """Parse 'x,y' normalized origin. Rejects NaN/Inf and out-of-range values."""
    parts = val.replace(" ", "").strip("()").split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"Origin must be 'x,y', got '{val}'")
    try:
        x, y = float(parts[0]), float(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"Non-numeric origin: '{val}'")
    if not (math.isfinite(x) and math.isfinite(y)):
        raise argparse.ArgumentTypeError(f"NaN/Inf not allowed: '{val}'")
    if not (0.0 <= x <= 1.0 and 0.0 <= y <= 1.0):
        raise argparse.ArgumentTypeError(f"Origin must be within [0,1], got '{val}'")
    return x, y


def build_config(args) -> RippleConfig:
    """Config file (if any) overlaid with command-line flags."""
    config = load_config(args.config) if args.config else RippleConfig()
    data = config.model_dump()

    for k in ("amplitude", "frequency", "decay", "speed"):
        if getattr(args, k, None) is not None:
            data["params"][k] = getattr(args, k)
    for k in ("max_dimension", "workers", "fps"):
        if getattr(args, k, None) is not None:
            data[k] = getattr(args, k)
    if getattr(args, "recenter_on_leave", False):
        data["recenter_on_leave"] = True

    return RippleConfig.model_validate(data)


def _load_state(args, config) -> RenderState:
    state = RenderState(params=config.params, max_dimension=config.max_dimension)
    buffer, error = load_with_fallback(args.source, timeout=config.request_timeout)
    if error is not None:
        print(f"  Warning: {type(error).__name__}: {error}", file=sys.stderr)
        print("  Using built-in placeholder image.", file=sys.stderr)
    state.load_image(buffer)
    if getattr(args, "origin", None):
        state.update_origin(*args.origin)
    return state


def cmd_frame(args):
    """Render a single frame at a chosen time."""
    config = build_config(args)
    state = _load_state(args, config)
    t = validate_time(args.time)
    frame = render(state, t=t, workers=config.workers)
    out = save_frame(frame, args.output)
    print(f"  Frame t={t:.3f}s {frame.width}x{frame.height} -> {out}")


def cmd_sequence(args):
    """Render frames over a time range to a PNG directory or animated GIF."""
    config = build_config(args)
    fps = args.fps or config.fps
    count = int(round(args.seconds * fps))
    output = Path(args.output)
    as_gif = output.suffix.lower() == ".gif"
    # GIF frames are held in memory until the file is written
    validate_frame_count(count, MAX_GIF_FRAMES if as_gif else MAX_FRAMES)
    validate_time(args.start)

    state = _load_state(args, config)
    surface = MemorySurface() if as_gif else PngSequenceSurface(output)

    for i in range(count):
        t = args.start + i / fps
        surface.present(render(state, t=t, workers=config.workers))
        if count > 10 and (i + 1) % (count // 10) == 0:
            print(f"  Rendering: {(i + 1) / count * 100:.0f}% ({i + 1}/{count} frames)")

    if as_gif:
        save_gif(surface.frames, output, fps=fps)
    print(f"  Wrote {count} frames -> {output}")


def cmd_live(args):
    """Open the interactive window."""
    from core.performer import LiveRipple

    config = build_config(args)
    live = LiveRipple(config=config, source=args.source, show_hud=not args.no_hud)
    live.run()


def cmd_info(args):
    """Print source size, output size and wave parameters."""
    config = build_config(args)
    state = _load_state(args, config)
    src = state.source
    w, h = state.output_size
    p = config.params
    print(f"  Source: {src.width}x{src.height}")
    print(f"  Output: {w}x{h} (max edge {config.max_dimension})")
    print(f"  Wave:   amplitude={p.amplitude} frequency={p.frequency} "
          f"decay={p.decay} speed={p.speed}")


def _add_common(p, source_required=True):
    if source_required:
        p.add_argument("source", help="Image path, http(s) URL or data: URL")
    p.add_argument("--config", type=str, help="JSON config file")
    p.add_argument("--amplitude", type=float, help="Displacement strength (default 0.05)")
    p.add_argument("--frequency", type=float, help="Ripple frequency (default 15)")
    p.add_argument("--decay", type=float, help="Fade-out rate (default 8)")
    p.add_argument("--speed", type=float, help="Propagation speed (default 2)")
    p.add_argument("--max-dimension", type=int, help="Longest output edge (default 600)")
    p.add_argument("--workers", type=int, help="Row bands rendered in parallel (default 1)")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Ripple -- animated ripple distortion over an image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command")

    p = sub.add_parser("frame", help="Render one frame to PNG")
    _add_common(p)
    p.add_argument("--output", "-o", required=True, help="Output PNG path")
    p.add_argument("--time", "-t", type=float, default=0.25, help="Elapsed seconds (default 0.25)")
    p.add_argument("--origin", type=_parse_origin, help="Normalized origin 'x,y' (default 0.5,0.5)")
    p.set_defaults(func=cmd_frame)

    p = sub.add_parser("sequence", help="Render a time range to PNGs or a GIF")
    _add_common(p)
    p.add_argument("--output", "-o", required=True, help="Output directory, or a .gif path")
    p.add_argument("--seconds", type=float, default=2.0, help="Duration (default 2.0 = one loop)")
    p.add_argument("--start", type=float, default=0.0, help="Start time in seconds")
    p.add_argument("--fps", type=int, help="Frames per second (default from config)")
    p.add_argument("--origin", type=_parse_origin, help="Normalized origin 'x,y'")
    p.set_defaults(func=cmd_sequence)

    p = sub.add_parser("live", help="Interactive window (requires pygame)")
    p.add_argument("source", nargs="?", default=None, help="Image to open (default: sample URL)")
    _add_common(p, source_required=False)
    p.add_argument("--fps", type=int, help="Target framerate (default 60)")
    p.add_argument("--recenter-on-leave", action="store_true",
                   help="Return the origin to center when the pointer leaves the window")
    p.add_argument("--no-hud", action="store_true", help="Hide the status overlay")
    p.set_defaults(func=cmd_live)

    p = sub.add_parser("info", help="Show source and output sizes")
    _add_common(p)
    p.set_defaults(func=cmd_info)

    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 1
    try:
        args.func(args)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    return 0


if __name__ == "__main__":
    sys.exit(main())
