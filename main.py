"""
Command line front-end for the Mandelbrot renderer.

Usage examples:
  python main.py single --preset 1080p --iterations 500 --method gpu-double
  python main.py matrix --width 8000 --height 8000 --dimension-size 4 --workers 2
  python main.py animation --preset 720p --fps 30 --duration 10 --end-zoom 1e12
  python main.py devices
"""
import argparse
import logging
import sys
from typing import List, Optional

from api.render_api import RenderAPI, RESOLUTION_PRESETS
from fractals.parameters import RenderParameters, DEFAULT_DIRECTORY
from rendering.engines.animation import (DEFAULT_FPS, DEFAULT_DURATION, DEFAULT_END_X,
                                         DEFAULT_END_Y, DEFAULT_END_ZOOM)
from rendering.executor import RenderExecutor
from utils.enums import BackendType
from utils.errors import MandelbakerError, InvalidParameterError
from utils.log import configure_logging

logger = logging.getLogger("mandelbaker")

_DEFAULTS = RenderParameters()


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    common.add_argument("--log-file", type=str, default=None, help="Also log to a rotating file")

    render = argparse.ArgumentParser(add_help=False)
    render.add_argument("--width", type=int, default=_DEFAULTS.resolution_x)
    render.add_argument("--height", type=int, default=_DEFAULTS.resolution_y)
    render.add_argument("--preset", type=str, choices=sorted(RESOLUTION_PRESETS), default=None,
                        help="Resolution preset, overrides --width/--height")
    render.add_argument("--iterations", type=int, default=_DEFAULTS.iterations)
    render.add_argument("--top", type=float, default=_DEFAULTS.top)
    render.add_argument("--bottom", type=float, default=_DEFAULTS.bottom)
    render.add_argument("--left", type=float, default=_DEFAULTS.left)
    render.add_argument("--right", type=float, default=_DEFAULTS.right)
    render.add_argument("--method", type=str, default="cpu", choices=["cpu", "gpu-float", "gpu-double"])
    render.add_argument("--coloring", type=str, default="hsv", choices=["hsv", "legacy"])
    render.add_argument("--directory", type=str, default=DEFAULT_DIRECTORY)
    render.add_argument("--backend", type=str, default="auto", choices=["auto", "cuda", "opencl"],
                        help="Accelerator to use for the gpu methods")
    render.add_argument("--device", type=int, default=None, help="Device id for --backend")
    render.add_argument("--no-fallback", action="store_true",
                        help="Fail instead of falling back to the CPU when no accelerator works")
    render.add_argument("--workers", type=int, default=1, help="Tiles/frames rendered concurrently")
    render.add_argument("--telemetry-dir", type=str, default=None,
                        help="Write timing records as JSON into this directory")

    p = argparse.ArgumentParser(prog="mandelbaker", description="Escape-time Mandelbrot renderer.")
    sub = p.add_subparsers(dest="command", required=True)

    single = sub.add_parser("single", parents=[common, render], help="Render one image")
    single.add_argument("--filename", type=str, default=None)

    matrix = sub.add_parser("matrix", parents=[common, render], help="Render an N x N tile matrix")
    matrix.add_argument("--dimension-size", type=int, default=2)

    anim = sub.add_parser("animation", parents=[common, render], help="Render a zoom animation")
    anim.add_argument("--fps", type=int, default=DEFAULT_FPS)
    anim.add_argument("--duration", type=int, default=DEFAULT_DURATION, help="Seconds")
    anim.add_argument("--end-x", type=float, default=DEFAULT_END_X)
    anim.add_argument("--end-y", type=float, default=DEFAULT_END_Y)
    anim.add_argument("--end-zoom", type=float, default=DEFAULT_END_ZOOM)
    anim.add_argument("--keep-frames", action="store_true",
                      help="Neither clear the frame directory before nor delete the frames after")
    anim.add_argument("--no-video", action="store_true", help="Only render the frames")

    sub.add_parser("devices", parents=[common], help="List compute devices")
    return p


def parameters_from_args(args: argparse.Namespace) -> RenderParameters:
    builder = (RenderAPI.configure()
               .resolution(args.width, args.height)
               .iterations(args.iterations)
               .viewport(args.top, args.bottom, args.left, args.right)
               .method(args.method)
               .coloring(args.coloring)
               .output(args.directory, getattr(args, "filename", None)))
    if args.preset:
        builder.preset(args.preset)
    return builder.build()


def list_devices() -> int:
    with RenderExecutor() as executor:
        for di in executor.list_devices():
            print(di.describe())
    return 0


def run(args: argparse.Namespace) -> int:
    if args.command == "devices":
        return list_devices()

    params = parameters_from_args(args)
    executor = RenderExecutor(allow_fallback=not args.no_fallback,
                              backend=BackendType[args.backend.upper()], device=args.device)
    api = RenderAPI(telemetry_dir=args.telemetry_dir, executor=executor, max_workers=args.workers)
    try:
        if args.command == "single":
            info = api.render_single(params)
            print(info)
        elif args.command == "matrix":
            aggregate, _ = api.render_matrix(params, args.dimension_size)
            print(aggregate)
        else:
            aggregate, _ = api.render_animation(
                params, args.fps, args.duration, args.end_x, args.end_y, args.end_zoom,
                clean_directory=not args.keep_frames, encode_video=not args.no_video)
            print(aggregate)
    finally:
        api.close()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose, args.log_file)
    try:
        return run(args)
    except InvalidParameterError as e:
        print(e.describe(), file=sys.stderr)
        return 2
    except MandelbakerError as e:
        print(e.describe(), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
