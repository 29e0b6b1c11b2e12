"""
Benchmark the escape-time kernels per calculation method (CPU / GPU_FLOAT / GPU_DOUBLE)
and check that accelerator grids match the CPU grid.

Usage examples:
  python -m benchmarking.benchmark --methods cpu,gpu-double --res 800x600,1920x1080 \
      --iterations 1000 --runs 5

  python -m benchmarking.benchmark --methods gpu-float --no-fallback --csv gpu.csv
"""

import os
import csv
import time
import argparse
import logging
import platform
from typing import List, Tuple, Optional

import numpy as np

from fractals.parameters import RenderParameters, validate_parameters
from fractals.viewport import adapt_to_aspect_ratio
from rendering.executor import RenderExecutor
from utils.enums import CalculationMethod
from utils.errors import MandelbakerError
from utils.log import configure_logging

logger = logging.getLogger(__name__)

# --- Helpers -----------------------------------------------------------------

def parse_resolution_list(res_str: str) -> List[Tuple[int, int]]:
    """
    Parse resolutions like "800x600,1280x720".
    """
    if not res_str:
        return [(800, 600), (1280, 720), (1920, 1080)]
    out: List[Tuple[int, int]] = []
    for token in res_str.split(','):
        token = token.strip().lower()
        if not token:
            continue
        w, h = token.split('x')
        out.append((int(w), int(h)))
    return out

def parse_methods(methods: str) -> List[CalculationMethod]:
    return [CalculationMethod.parse(m) for m in methods.split(",") if m.strip()]

def benchmark_params(method: CalculationMethod, width: int, height: int, iterations: int) -> RenderParameters:
    """
    The canonical full view, aspect-corrected for the resolution.
    """
    top, bottom, left, right = adapt_to_aspect_ratio(width, height, 1.5, -1.5, -2.0, 1.0)
    return validate_parameters(RenderParameters(
        resolution_x=width, resolution_y=height, iterations=iterations,
        top=top, bottom=bottom, left=left, right=right, method=method))

# --- Benchmark core ----------------------------------------------------------

def benchmark_method(executor: RenderExecutor,
                     params: RenderParameters,
                     runs: int,
                     warmup: int = 1) -> Tuple[float, float, str, np.ndarray]:
    """
    Runs warmups (not timed), then 'runs' timed computations.
    Returns (avg_time_seconds, pixels_per_second, backend_label, last_grid).
    """
    grid, label = executor.compute_labeled(params)
    for _ in range(max(0, warmup - 1)):
        grid, label = executor.compute_labeled(params)

    times = []
    for _ in range(runs):
        t0 = time.perf_counter()
        grid, label = executor.compute_labeled(params)
        t1 = time.perf_counter()
        times.append(t1 - t0)

    avg = sum(times) / len(times)
    pps = params.resolution_x * params.resolution_y / avg if avg > 0 else 0.0
    return avg, pps, label, grid

def grids_agree(reference: Optional[np.ndarray], grid: np.ndarray) -> str:
    if reference is None:
        return "n/a"
    if np.array_equal(reference, grid):
        return "equal"
    return f"{int(np.count_nonzero(reference != grid))} px differ"

# --- CLI ---------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Benchmark the escape-time kernels.")
    p.add_argument("--methods", type=str, default="cpu,gpu-float,gpu-double",
                   help="Comma separated list: cpu,gpu-float,gpu-double")
    p.add_argument("--res", type=str, default="800x600,1280x720,1920x1080",
                   help="Comma separated WxH list")
    p.add_argument("--iterations", type=int, default=500)
    p.add_argument("--runs", type=int, default=3)
    p.add_argument("--warmup", type=int, default=1)
    p.add_argument("--no-fallback", action="store_true")
    p.add_argument("--csv", type=str, default="benchmark_results.csv")
    p.add_argument("-v", "--verbose", action="store_true")
    args = p.parse_args(argv)

    configure_logging(args.verbose)
    methods = parse_methods(args.methods)
    resolutions = parse_resolution_list(args.res)

    executor = RenderExecutor(allow_fallback=not args.no_fallback)
    cpu_info = platform.processor() or platform.machine() or "Unknown CPU"
    accel = [d.describe() for d in executor.list_devices() if d.backend != "CPU"]
    logger.info("CPU: %s", cpu_info)
    logger.info("Accelerators: %s", "; ".join(accel) or "none")

    if os.path.exists(args.csv):
        os.remove(args.csv)
    with open(args.csv, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["Hardware Summary"])
        writer.writerow(["CPU", cpu_info])
        writer.writerow(["Accelerators", "; ".join(accel) or "none"])
        writer.writerow([])
        writer.writerow(["Resolution", "Method", "Backend", "Time (s)", "Pixels/s", "Matches CPU"])

        for (w, h) in resolutions:
            reference = None
            for method in methods:
                params = benchmark_params(method, w, h, args.iterations)
                try:
                    avg, pps, label, grid = benchmark_method(executor, params, args.runs, args.warmup)
                except MandelbakerError as e:
                    logger.error("%dx%d %s: %s", w, h, method.name, e.describe())
                    writer.writerow([f"{w}x{h}", method.name, "n/a", "n/a", "n/a", "n/a"])
                    continue
                if method is CalculationMethod.CPU:
                    reference = grid
                    agree = "n/a"
                else:
                    agree = grids_agree(reference, grid)
                logger.info("%dx%d %-10s %-24s avg=%.4fs  %.3g px/s  %s",
                            w, h, method.name, label, avg, pps, agree)
                writer.writerow([f"{w}x{h}", method.name, label, f"{avg:.4f}", f"{pps:.0f}", agree])

    executor.close()
    logger.info("Benchmark results saved to %s", args.csv)
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
