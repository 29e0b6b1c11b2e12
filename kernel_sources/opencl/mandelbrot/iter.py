import numpy as np

from kernel_sources.registry import register_kernel

SRC = r"""
#pragma OPENCL FP_CONTRACT OFF
#ifdef USE_DOUBLE
  #pragma OPENCL EXTENSION cl_khr_fp64 : enable
  typedef double real_t;
#else
  typedef float  real_t;
#endif

real_t magnitude(real_t re, real_t im)
{
    if (isnan(re) || isnan(im)) return (real_t)NAN;
    if (isinf(re) || isinf(im)) return (real_t)INFINITY;
    real_t a = fabs(re);
    real_t b = fabs(im);
    if (a > b) {
        real_t r = b / a;
        return a * sqrt((real_t)1 + r * r);
    }
    if (a == (real_t)0) return b;
    real_t r = a / b;
    return b * sqrt((real_t)1 + r * r);
}

/* params = [res_x, res_y, max_iter, top, bottom, left, right] */
__kernel void mandelbrot_iter(
    __global const real_t* params,
    __global int* iter_out,
    const int total)
{
    const int index = get_global_id(0);
    if (index >= total) return;

    const real_t res_x = params[0];
    const real_t res_y = params[1];
    const int max_iter = (int)params[2];
    const real_t top = params[3];
    const real_t bottom = params[4];
    const real_t left = params[5];
    const real_t right = params[6];

    const int width = (int)res_x;
    const int iy = index / width;
    const int ix = index - iy * width;
    const real_t ci = top - (top - bottom) * (real_t)iy / res_y;
    const real_t cr = left + (right - left) * (real_t)ix / res_x;

    real_t zr = cr, zi = ci;
    int i = 0;
    while (i < max_iter) {
        if (magnitude(zr, zi) > (real_t)2) break;
        const real_t nzr = zr * zr - zi * zi + cr;
        const real_t nzi = zr * zi + zi * zr + ci;
        zr = nzr;
        zi = nzi;
        ++i;
    }
    iter_out[index] = i;
}
"""

KERNEL_NAME = "mandelbrot_iter"

ARG_SCALARS = ["total"]
ARG_BUFFERS_IN = ["params"]
ARG_BUFFERS_OUT = ["iter_out"]

ARG_ORDER = ARG_BUFFERS_IN + ARG_BUFFERS_OUT + ARG_SCALARS

opts_f32 = ["-cl-fp32-correctly-rounded-divide-sqrt"]
opts_f64 = ["-D", "USE_DOUBLE=1"]

register_kernel(
    fractal="mandelbrot",
    op_name="iter",
    backend="opencl",
    precision="f32",
    func={"src": SRC, "kernel_name": KERNEL_NAME, "build_options": opts_f32},
    dtype=np.float32,
    arg_order=ARG_ORDER,
    block=64
)

register_kernel(
    fractal="mandelbrot",
    op_name="iter",
    backend="opencl",
    precision="f64",
    func={"src": SRC, "kernel_name": KERNEL_NAME, "build_options": opts_f64},
    dtype=np.float64,
    arg_order=ARG_ORDER,
    block=64
)
