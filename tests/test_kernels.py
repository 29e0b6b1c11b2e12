import math

import numpy as np
import pytest

from fractals.base import Viewport, RenderSettings
from fractals.mandelbrot import MandelbrotFractal
from kernel_sources.cpu.mandelbrot.iter import magnitude_f32, magnitude_f64
from kernel_sources.loader import load_kernel
from kernel_sources.registry import registered_precisions
from rendering.executor import compute_iterations


def reference_escape(cr, ci, max_iter):
    """Plain Python escape-time loop with the same scaled modulus as the kernels."""
    def magnitude(re, im):
        a, b = abs(re), abs(im)
        if a > b:
            r = b / a
            return a * math.sqrt(1.0 + r * r)
        if a == 0.0:
            return b
        r = a / b
        return b * math.sqrt(1.0 + r * r)

    zr, zi = cr, ci
    i = 0
    while i < max_iter:
        if magnitude(zr, zi) > 2.0:
            break
        zr, zi = zr * zr - zi * zi + cr, zr * zi + zi * zr + ci
        i += 1
    return i


def test_interior_point_reaches_cap(executor):
    grid = compute_iterations(1, 1, 200, 0.0, -1.0, 0.0, 1.0, executor=executor)
    assert grid.shape == (1, 1)
    assert grid[0, 0] == 200


def test_far_point_escapes_immediately(executor):
    grid = compute_iterations(1, 1, 200, 1000.0, 999.0, 1000.0, 1001.0, executor=executor)
    assert grid[0, 0] <= 2


def test_grid_matches_reference_mapping(executor):
    w, h, it = 24, 18, 60
    top, bottom, left, right = 1.2, -1.1, -2.1, 0.7
    grid = compute_iterations(w, h, it, top, bottom, left, right, executor=executor)

    assert grid.shape == (h, w)
    assert grid.dtype == np.int32
    for iy in range(h):
        for ix in range(w):
            ci = top - (top - bottom) * iy / h
            cr = left + (right - left) * ix / w
            assert grid[iy, ix] == reference_escape(cr, ci, it), (ix, iy)


def test_counts_stay_within_bounds(executor):
    grid = compute_iterations(64, 64, 30, 2.0, -2.0, -2.5, 1.5, executor=executor)
    assert grid.min() >= 0
    assert grid.max() <= 30
    assert (grid == 30).any()
    assert (grid < 30).any()


@pytest.mark.parametrize("precision", ["f32", "f64"])
def test_cpu_kernels_registered_per_precision(precision):
    meta = load_kernel("CPU", "mandelbrot", "iter", precision)
    assert meta["arg_order"] == ["params", "iter_out"]
    assert precision in registered_precisions("CPU", "mandelbrot", "iter")


def test_single_precision_kernel_runs_in_float32():
    fractal = MandelbrotFractal()
    st = RenderSettings(max_iter=100, precision="f32")
    meta = fractal.get_kernel(st, "CPU")
    params = fractal.build_arg_values(Viewport(0.0, -1.0, 0.0, 1.0, 1, 1), st)
    assert params.dtype == np.float32

    out = np.empty(1, dtype=np.int32)
    meta["func"](params, out)
    assert out[0] == 100


def test_magnitude_edge_cases():
    assert magnitude_f64(3.0, 4.0) == 5.0
    assert magnitude_f64(0.0, 0.0) == 0.0
    assert magnitude_f64(0.0, -2.5) == 2.5
    assert math.isnan(magnitude_f64(math.nan, 1.0))
    assert magnitude_f64(-math.inf, 1.0) == math.inf
    assert magnitude_f64(1e300, 1e300) == pytest.approx(math.sqrt(2) * 1e300)

    big = np.float32(2e38)
    assert math.isfinite(magnitude_f32(big, big))
    assert magnitude_f32(np.float32(3.0), np.float32(4.0)) == 5.0
    assert math.isnan(magnitude_f32(np.float32(math.nan), np.float32(0.0)))
