import numpy as np
from numba import njit, prange, float32, float64

from kernel_sources.common.escape import build_escape_functions
from kernel_sources.registry import register_kernel


# params = [res_x, res_y, max_iter, top, bottom, left, right]
ARG_BUFFERS_IN = ["params"]
ARG_BUFFERS_OUT = ["iter_out"]

ARG_ORDER = ARG_BUFFERS_IN + ARG_BUFFERS_OUT

_escape = build_escape_functions(njit)

magnitude_f32 = _escape.magnitude_f32
magnitude_f64 = _escape.magnitude_f64
escape_time_f32 = _escape.escape_time_f32
escape_time_f64 = _escape.escape_time_f64


@njit(parallel=True)
def _mandelbrot_iter_f32(params, iter_out):
    res_x = params[0]
    res_y = params[1]
    max_iter = int(params[2])
    top = params[3]
    bottom = params[4]
    left = params[5]
    right = params[6]
    width = int(res_x)
    for index in prange(iter_out.size):
        iy = index // width
        ix = index - iy * width
        ci = top - (top - bottom) * float32(iy) / res_y
        cr = left + (right - left) * float32(ix) / res_x
        iter_out[index] = escape_time_f32(cr, ci, max_iter)


@njit(parallel=True)
def _mandelbrot_iter_f64(params, iter_out):
    res_x = params[0]
    res_y = params[1]
    max_iter = int(params[2])
    top = params[3]
    bottom = params[4]
    left = params[5]
    right = params[6]
    width = int(res_x)
    for index in prange(iter_out.size):
        iy = index // width
        ix = index - iy * width
        ci = top - (top - bottom) * float64(iy) / res_y
        cr = left + (right - left) * float64(ix) / res_x
        iter_out[index] = escape_time_f64(cr, ci, max_iter)


register_kernel(
    fractal="mandelbrot",
    op_name="iter",
    backend="CPU",
    precision="f32",
    func=_mandelbrot_iter_f32,
    dtype=np.float32,
    arg_order=ARG_ORDER,
    block=None
)

register_kernel(
    fractal="mandelbrot",
    op_name="iter",
    backend="CPU",
    precision="f64",
    func=_mandelbrot_iter_f64,
    dtype=np.float64,
    arg_order=ARG_ORDER,
    block=None
)
