import logging
import threading

import numpy as np
import pyopencl as cl
from typing import Dict, Any, Optional, Tuple

from fractals.base import Fractal, Viewport, RenderSettings
from backend.model.base import Backend
from utils.errors import AcceleratorInitError, AcceleratorRuntimeError

logger = logging.getLogger(__name__)


class OpenClBackend(Backend):
    """
    Backend for OpenCL-based escape-time rendering.
    """
    name = "OPENCL"

    def __init__(self, device: Optional[int] = None, queues: int = 2):
        try:
            all_devs: list[tuple[int, cl.Device]] = []
            ordinal = 0
            for p in cl.get_platforms():
                for d in p.get_devices():
                    all_devs.append((ordinal, d))
                    ordinal += 1
        except cl.Error as e:
            raise AcceleratorInitError(f"OpenCL platform query failed: {e}", backend=self.name) from e

        if not all_devs:
            raise AcceleratorInitError("No OpenCL devices found.", backend=self.name)

        if device is None:
            chosen = next(((o, d) for o, d in all_devs if d.type & cl.device_type.GPU), all_devs[0])
        else:
            chosen = next(((o, d) for o, d in all_devs if o == device), None)
            if chosen is None:
                raise AcceleratorInitError(f"No OpenCL device with ordinal {device} found.", backend=self.name)

        self.device_ordinal, self.device = chosen

        try:
            self.ctx: cl.Context | None = cl.Context([self.device])
            self.queues: list[cl.CommandQueue] | None = [cl.CommandQueue(self.ctx, self.device)
                                                         for _ in range(max(1, queues))]
        except cl.Error as e:
            raise AcceleratorInitError(
                f"OpenCL context creation failed on {self.device.name.strip()}: {e}",
                backend=self.name) from e

        self._kernels: Dict[str, Tuple[cl.Kernel, Dict[str, Any]]] = {}
        # kernel args are shared state on the cl.Kernel object
        self._dispatch_lock = threading.Lock()

        # Warmup parameters
        self._wu_bounds = (1.5, -1.5, -2.0, 1.0)
        self._wu_w, self._wu_h = 64, 64
        self._wu_max_iter = 64

    def supports_fp64(self) -> bool:
        return bool(getattr(self.device, "double_fp_config", 0)) or \
            "cl_khr_fp64" in getattr(self.device, "extensions", "")

    def _get_queue(self) -> cl.CommandQueue:
        if not self.queues:
            raise AcceleratorRuntimeError("OpenCL backend has been closed")
        q = self.queues.pop(0)
        self.queues.append(q)
        return q

    def compile(self, fractal: Fractal, settings: RenderSettings) -> None:
        """
        Build the registered kernel source for the requested precision.
        f64 requires a device with cl_khr_fp64.
        """
        if settings.precision in self._kernels:
            return
        if settings.precision == "f64" and not self.supports_fp64():
            raise AcceleratorInitError(
                f"OpenCL device {self.device.name.strip()} does not support double precision",
                backend=self.name)

        try:
            meta = fractal.get_kernel(settings, self.name)
        except Exception as e:
            raise AcceleratorInitError(
                f"OpenCL kernel for {fractal.name}/{settings.precision} unavailable: {e}",
                backend=self.name) from e

        func = meta["func"]
        try:
            program = cl.Program(self.ctx, func["src"]).build(options=func.get("build_options", []))
            kernel = cl.Kernel(program, func["kernel_name"])
        except cl.Error as e:
            raise AcceleratorInitError(f"OpenCL build failed for {settings.precision}: {e}",
                                       backend=self.name) from e

        self._kernels[settings.precision] = (kernel, meta)
        logger.debug("OpenCL kernel built for %s/%s on %s", fractal.name, settings.precision,
                     self.device.name.strip())
        self._warmup(fractal, settings)

    def _warmup(self, fractal: Fractal, settings: RenderSettings) -> None:
        top, bottom, left, right = self._wu_bounds
        vp = Viewport(top, bottom, left, right, self._wu_w, self._wu_h)
        st = RenderSettings(max_iter=self._wu_max_iter, precision=settings.precision)
        try:
            self.render(fractal, vp, st)
        except AcceleratorRuntimeError as e:
            del self._kernels[settings.precision]
            raise AcceleratorInitError(f"OpenCL warm-up failed: {e}", backend=self.name) from e

    def render_async(self,
                     fractal: Fractal,
                     vp: Viewport,
                     settings: RenderSettings,
                     queue: Optional[cl.CommandQueue] = None) -> Tuple[np.ndarray, cl.Event]:
        """
        Asynchronous rendering.
        - Enqueue kernel on a chosen queue
        - Enqueue non-blocking read into a host array
        - Return (host_array, completion_event)
        """
        entry = self._kernels.get(settings.precision)
        if entry is None:
            raise RuntimeError(f"Backend has not been compiled for {settings.precision}")
        kernel, meta = entry

        n = vp.pixel_count
        params = fractal.build_arg_values(vp, settings)
        out_np = np.empty(n, dtype=np.int32)

        local = int(meta.get("block") or 64)
        global_size = ((n + local - 1) // local) * local

        try:
            q = queue or self._get_queue()
            mf = cl.mem_flags
            params_buf = cl.Buffer(self.ctx, mf.READ_ONLY | mf.COPY_HOST_PTR, hostbuf=params)
            out_buf = cl.Buffer(self.ctx, mf.WRITE_ONLY, out_np.nbytes)

            with self._dispatch_lock:
                kernel.set_arg(0, params_buf)
                kernel.set_arg(1, out_buf)
                kernel.set_arg(2, np.int32(n))
                k_evt = cl.enqueue_nd_range_kernel(q, kernel,
                                                   global_work_size=(global_size,),
                                                   local_work_size=(local,))
            read_evt = cl.enqueue_copy(q, out_np, out_buf, is_blocking=False, wait_for=[k_evt])
        except cl.Error as e:
            raise AcceleratorRuntimeError(f"OpenCL dispatch failed: {e}") from e

        return out_np.reshape((vp.height, vp.width)), _ClEvent(read_evt)

    def close(self) -> None:
        if self.queues:
            for q in self.queues:
                try:
                    q.finish()
                except cl.Error as e:
                    logger.warning("Error in closing queue: %s", e)
            self.queues.clear()
        self.queues = None
        self._kernels.clear()
        self.ctx = None


class _ClEvent:
    def __init__(self, evt: cl.Event):
        self._evt = evt

    def wait(self) -> None:
        try:
            self._evt.wait()
        except cl.Error as e:
            raise AcceleratorRuntimeError(f"OpenCL transfer failed: {e}") from e
