import logging
import numpy as np
from typing import Dict, Any, Optional, Tuple
from numba import cuda

from fractals.base import Fractal, Viewport, RenderSettings
from backend.model.base import Backend
from utils.errors import AcceleratorInitError, AcceleratorRuntimeError

logger = logging.getLogger(__name__)


class CudaBackend(Backend):
    """
    Backend for CUDA-based escape-time rendering (numba.cuda kernels).
    """
    name = "CUDA"

    def __init__(self, device: Optional[int] = None, streams: int = 2):
        try:
            if not cuda.is_available():
                raise AcceleratorInitError("CUDA not available", backend=self.name)
            if device is not None:
                cuda.select_device(device)
            # Stream pool: 0 -> launch on the default stream
            self.streams = [cuda.stream() for _ in range(streams)] if streams > 0 else []
        except AcceleratorInitError:
            raise
        except Exception as e:
            raise AcceleratorInitError(f"CUDA initialization failed: {e}", backend=self.name) from e
        self.device_id = device
        self.threads_per_block = 256
        self._kernels: Dict[str, Dict[str, Any]] = {}

        # Warm up params
        self._wu_bounds = (1.5, -1.5, -2.0, 1.0)
        self._wu_width = 64
        self._wu_height = 64
        self._wu_max_iter = 64

    def _get_stream(self) -> Any:
        # Round-robin allocation
        if self.streams is None:
            raise AcceleratorRuntimeError("CUDA backend is closed")
        if not self.streams:
            return cuda.default_stream()
        s = self.streams.pop(0)
        self.streams.append(s)
        return s

    def compile(self, fractal: Fractal, settings: RenderSettings) -> None:
        if settings.precision in self._kernels:
            return
        try:
            meta = fractal.get_kernel(settings, self.name)
        except Exception as e:
            raise AcceleratorInitError(
                f"CUDA kernel for {fractal.name}/{settings.precision} unavailable: {e}",
                backend=self.name) from e
        self._kernels[settings.precision] = meta
        try:
            self._warmup(fractal, settings)
        except Exception as e:
            del self._kernels[settings.precision]
            raise AcceleratorInitError(
                f"CUDA kernel compilation failed for {settings.precision}: {e}",
                backend=self.name) from e
        logger.debug("CUDA kernel compiled for %s/%s", fractal.name, settings.precision)

    def _warmup(self, fractal: Fractal, settings: RenderSettings) -> None:
        """
        Launch a small render so the JIT compiles the kernel outside the timed path.
        """
        top, bottom, left, right = self._wu_bounds
        vp = Viewport(top, bottom, left, right, self._wu_width, self._wu_height)
        st = RenderSettings(max_iter=self._wu_max_iter, precision=settings.precision)
        self.render(fractal, vp, st)

    def render_async(self,
                     fractal: Fractal,
                     vp: Viewport,
                     settings: RenderSettings,
                     stream: Optional[Any] = None,
                     ) -> Tuple[np.ndarray, Any]:
        """
        Asynchronous rendering.
        - Copies the parameter vector to the device
        - Launches one thread per pixel into a stream
        - Copies back into a pinned host array asynchronously
        - Returns (host_array_view, completion_event)
        """
        meta = self._kernels.get(settings.precision)
        if meta is None:
            raise RuntimeError(f"Backend has not been compiled for {settings.precision}")

        n = vp.pixel_count
        tpb = meta.get("block") or self.threads_per_block
        blocks = (n + tpb - 1) // tpb

        try:
            # worker threads do not inherit the device selected in __init__
            if self.device_id is not None:
                cuda.select_device(self.device_id)
            s = stream or self._get_stream()
            d_params = cuda.to_device(fractal.build_arg_values(vp, settings), stream=s)
            d_out = cuda.device_array(n, dtype=np.int32, stream=s)

            meta["func"][blocks, tpb, s](d_params, d_out)

            h_out = cuda.pinned_array(n, dtype=np.int32)
            d_out.copy_to_host(h_out, stream=s)

            done_evt = cuda.event(timing=False)
            done_evt.record(stream=s)
        except AcceleratorRuntimeError:
            raise
        except Exception as e:
            raise AcceleratorRuntimeError(f"CUDA dispatch failed: {e}") from e

        return h_out.reshape((vp.height, vp.width)), _CudaEvent(done_evt, (d_params, d_out))

    def close(self) -> None:
        if self.streams:
            for s in self.streams:
                try:
                    s.synchronize()
                except Exception as e:
                    logger.warning("Error in closing stream: %s", e)
            self.streams.clear()
        self.streams = None
        self._kernels.clear()


class _CudaEvent:
    """Adapts a numba CUDA event to the wait() interface of the other backends."""

    def __init__(self, evt, buffers=()):
        self._evt = evt
        # device buffers stay referenced until the stream has consumed them
        self._buffers = buffers

    def wait(self) -> None:
        try:
            self._evt.synchronize()
        except Exception as e:
            raise AcceleratorRuntimeError(f"CUDA transfer failed: {e}") from e
        self._buffers = ()
