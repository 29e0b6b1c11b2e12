import logging
import threading
from typing import Dict, Any, Tuple

import numpy as np

from fractals.base import Fractal, Viewport, RenderSettings
from backend.model.base import Backend, CpuEvent

logger = logging.getLogger(__name__)

# numba's parallel runtime must not be entered from several threads at once
_DISPATCH_LOCK = threading.Lock()


class CpuBackend(Backend):
    """
    Backend for CPU-based escape-time rendering (numba parallel kernels).
    """
    name = "CPU"

    def __init__(self):
        self._kernels: Dict[str, Dict[str, Any]] = {}

        # Warm up params
        self._wu_bounds = (1.5, -1.5, -2.0, 1.0)
        self._wu_width = 64
        self._wu_height = 64
        self._wu_max_iter = 64

    def compile(self, fractal: Fractal, settings: RenderSettings) -> None:
        if settings.precision in self._kernels:
            return
        meta = fractal.get_kernel(settings, self.name)
        self._kernels[settings.precision] = meta
        logger.debug("CPU kernel loaded for %s/%s", fractal.name, settings.precision)
        self._warmup(fractal, settings)

    def _warmup(self, fractal: Fractal, settings: RenderSettings) -> None:
        """
        Run a small render so numba compiles the kernel before the first timed call.
        """
        top, bottom, left, right = self._wu_bounds
        vp = Viewport(top, bottom, left, right, self._wu_width, self._wu_height)
        st = RenderSettings(max_iter=self._wu_max_iter, precision=settings.precision)
        self.render(fractal, vp, st)

    def render_async(self,
                     fractal: Fractal,
                     vp: Viewport,
                     settings: RenderSettings
                     ) -> Tuple[np.ndarray, CpuEvent]:
        """
        Synchronous CPU execution, returns (host_array, CpuEvent) for API parity.
        """
        meta = self._kernels.get(settings.precision)
        if meta is None:
            raise RuntimeError(f"Backend has not been compiled for {settings.precision}")

        params = fractal.build_arg_values(vp, settings)
        out = np.empty(vp.pixel_count, dtype=np.int32)
        with _DISPATCH_LOCK:
            meta["func"](params, out)
        return out.reshape((vp.height, vp.width)), CpuEvent()

    def close(self) -> None:
        self._kernels.clear()
