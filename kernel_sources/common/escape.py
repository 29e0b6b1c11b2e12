"""
Target-independent escape-time building blocks.

The same Python source is compiled for every numba target (CPU njit and CUDA
device functions) so both paths run identical arithmetic in identical order.
"""
import math
from collections import namedtuple

from numba import float32, float64


EscapeFunctions = namedtuple(
    "EscapeFunctions",
    ["magnitude_f32", "magnitude_f64", "escape_time_f32", "escape_time_f64"],
)


def build_escape_functions(jit) -> EscapeFunctions:
    """
    Compile the magnitude and escape-time functions with the given decorator
    (e.g. numba.njit, or cuda.jit(device=True)).

    The magnitude is computed as a * sqrt(1 + (b / a)**2) with a = max(|re|, |im|),
    which cannot overflow for finite inputs. The float32 variant keeps every
    intermediate in float32.
    """

    @jit
    def magnitude_f32(re, im):
        if math.isnan(re) or math.isnan(im):
            return float32(math.nan)
        if math.isinf(re) or math.isinf(im):
            return float32(math.inf)
        a = abs(re)
        b = abs(im)
        if a > b:
            r = b / a
            return float32(a * float32(math.sqrt(float32(1.0) + r * r)))
        if a == float32(0.0):
            return float32(b)
        r = a / b
        return float32(b * float32(math.sqrt(float32(1.0) + r * r)))

    @jit
    def magnitude_f64(re, im):
        if math.isnan(re) or math.isnan(im):
            return float64(math.nan)
        if math.isinf(re) or math.isinf(im):
            return float64(math.inf)
        a = abs(re)
        b = abs(im)
        if a > b:
            r = b / a
            return a * math.sqrt(1.0 + r * r)
        if a == 0.0:
            return float64(b)
        r = a / b
        return b * math.sqrt(1.0 + r * r)

    @jit
    def escape_time_f32(cr, ci, max_iter):
        limit = float32(2.0)
        zr = cr
        zi = ci
        i = 0
        while i < max_iter:
            if magnitude_f32(zr, zi) > limit:
                break
            zr, zi = zr * zr - zi * zi + cr, zr * zi + zi * zr + ci
            i += 1
        return i

    @jit
    def escape_time_f64(cr, ci, max_iter):
        zr = cr
        zi = ci
        i = 0
        while i < max_iter:
            if magnitude_f64(zr, zi) > 2.0:
                break
            zr, zi = zr * zr - zi * zi + cr, zr * zi + zi * zr + ci
            i += 1
        return i

    return EscapeFunctions(magnitude_f32, magnitude_f64, escape_time_f32, escape_time_f64)
