from dataclasses import dataclass
from typing import Dict, Any
import numpy as np

from fractals.base import Fractal, Viewport, RenderSettings
from kernel_sources.loader import load_kernel


@dataclass
class MandelbrotFractal(Fractal):
    name: str = "mandelbrot"

    def build_arg_values(self, vp: Viewport, st: RenderSettings) -> np.ndarray:
        """
        The read-only parameter vector every backend kernel consumes:
        [res_x, res_y, max_iter, top, bottom, left, right] in the render precision.
        """
        return np.array([
            vp.width,
            vp.height,
            st.max_iter,
            vp.top,
            vp.bottom,
            vp.left,
            vp.right,
        ], dtype=st.dtype)

    def get_kernel(self, st: RenderSettings, backend_name: str) -> Dict[str, Any]:
        return load_kernel(backend_name, self.name, "iter", st.precision)
