from __future__ import annotations

import argparse
from dataclasses import replace
import json
import logging
from pathlib import Path

from PIL import Image

from crispcache_core.core import HostRuntime, RecordingHostChannel, RenderConfig, load_render_config
from crispcache_core.render.errors import ConfigurationError
from crispcache_core.render.raster import RasterImage


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="crispcache")
    parser.add_argument("--config", type=Path, default=None, help="TOML file with [render] and [theme] tables.")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Paint one frame and write it as a PNG.")
    render.add_argument("--width", type=int, default=None)
    render.add_argument("--height", type=int, default=None)
    render.add_argument("--scale", type=float, default=None, help="Off-screen scale factor, clamped to [0.125, 8].")
    render.add_argument("--direct", action="store_true", help="Draw directly instead of through the raster cache.")
    render.add_argument("--hover", action="store_true", help="Show the hover indicator overlay.")
    render.add_argument("--out", type=Path, default=Path("crispcache.png"))

    session = sub.add_parser("session", help="Replay host messages and print a JSON summary.")
    session.add_argument(
        "--message",
        "-m",
        action="append",
        default=[],
        help="Host message, e.g. `float 3`, `bang`, `idle`, `direct_draw 1`, `resize 300 120`.",
    )
    session.add_argument("--out", type=Path, default=None, help="Write the last painted frame as a PNG.")

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_render_config(args.config) if args.config is not None else RenderConfig()
    except ConfigurationError as exc:
        print(f"config error: {exc}")
        return 2

    if args.command == "render":
        config = replace(
            config,
            width=args.width if args.width is not None else config.width,
            height=args.height if args.height is not None else config.height,
            use_cached_image=config.use_cached_image and not args.direct,
        )
        runtime = HostRuntime(config)
        if args.scale is not None:
            runtime.post(f"float {args.scale}")
        if args.hover:
            runtime.post("idle")
        runtime.request_repaint()
        runtime.run_until_idle()
        if runtime.last_frame is None:
            print("no frame painted")
            return 1
        _write_png(runtime.last_frame, args.out)
        print(f"wrote {args.out} ({runtime.last_frame.width}x{runtime.last_frame.height})")
        return 0

    if args.command == "session":
        outlets = RecordingHostChannel()
        runtime = HostRuntime(config, outlets=outlets)
        runtime.request_repaint()
        runtime.run_once()
        dropped = [m for m in args.message if not runtime.post(m)]
        ticks = runtime.run_until_idle()
        summary = {
            "paints_completed": outlets.paints_completed,
            "draws_executed": outlets.draws_executed,
            "cache_builds": runtime.cache.builds,
            "cache_hits": runtime.cache.hits,
            "ticks": len(ticks) + 1,
            "scale_factor": runtime.state.scale_factor,
            "use_cached_image": runtime.state.use_cached_image,
            "dropped_messages": dropped,
            "errors": [str(e) for e in outlets.errors],
        }
        print(json.dumps(summary, indent=2, sort_keys=True))
        if args.out is not None and runtime.last_frame is not None:
            _write_png(runtime.last_frame, args.out)
        return 0

    raise RuntimeError(f"unsupported command: {args.command}")


def _write_png(frame: RasterImage, path: Path) -> None:
    Image.fromarray(frame.rgba.contiguous().numpy()).save(path)


if __name__ == "__main__":
    raise SystemExit(main())
