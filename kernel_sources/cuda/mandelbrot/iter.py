import numpy as np
from numba import cuda, float32, float64

from kernel_sources.common.escape import build_escape_functions
from kernel_sources.registry import register_kernel

# params = [res_x, res_y, max_iter, top, bottom, left, right]
ARG_BUFFERS_IN = ["params"]
ARG_BUFFERS_OUT = ["iter_out"]

ARG_ORDER = ARG_BUFFERS_IN + ARG_BUFFERS_OUT

_escape = build_escape_functions(lambda f: cuda.jit(device=True)(f))
escape_time_f32 = _escape.escape_time_f32
escape_time_f64 = _escape.escape_time_f64


@cuda.jit
def _mandelbrot_iter_f32(params, iter_out):
    # one thread per pixel index
    index = cuda.grid(1)
    if index >= iter_out.size:
        return
    res_x = params[0]
    res_y = params[1]
    width = int(res_x)
    iy = index // width
    ix = index - iy * width
    ci = params[3] - (params[3] - params[4]) * float32(iy) / res_y
    cr = params[5] + (params[6] - params[5]) * float32(ix) / res_x
    iter_out[index] = escape_time_f32(cr, ci, int(params[2]))


@cuda.jit
def _mandelbrot_iter_f64(params, iter_out):
    index = cuda.grid(1)
    if index >= iter_out.size:
        return
    res_x = params[0]
    res_y = params[1]
    width = int(res_x)
    iy = index // width
    ix = index - iy * width
    ci = params[3] - (params[3] - params[4]) * float64(iy) / res_y
    cr = params[5] + (params[6] - params[5]) * float64(ix) / res_x
    iter_out[index] = escape_time_f64(cr, ci, int(params[2]))


register_kernel(
    fractal="mandelbrot",
    op_name="iter",
    backend="CUDA",
    precision="f32",
    func=_mandelbrot_iter_f32,
    dtype=np.float32,
    arg_order=ARG_ORDER,
    block=256
)

register_kernel(
    fractal="mandelbrot",
    op_name="iter",
    backend="CUDA",
    precision="f64",
    func=_mandelbrot_iter_f64,
    dtype=np.float64,
    arg_order=ARG_ORDER,
    block=256
)
