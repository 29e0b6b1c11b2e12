from __future__ import annotations

import logging
import threading
from typing import Optional, List, Tuple

import numpy as np

from backend.model.base import Backend
from backend.pool import BackendPool
from devices.manager import DeviceManager
from devices.types import DeviceInfo
from fractals.base import Fractal, RenderSettings
from fractals.mandelbrot import MandelbrotFractal
from fractals.parameters import RenderParameters, validate_parameters
from utils.enums import BackendType, CalculationMethod
from utils.errors import AcceleratorInitError

logger = logging.getLogger(__name__)

ACCELERATORS = ("CUDA", "OPENCL")


class RenderExecutor:
    """
    Execution facade built on:
      - DeviceManager: discovery/selection/scoring (created on first accelerator use).
      - BackendPool: backend instance lifecycle and compilation.

    Maps a CalculationMethod onto a backend once per render call:
      CPU        -> CPU kernel, f64
      GPU_DOUBLE -> CUDA, then OpenCL, f64
      GPU_FLOAT  -> CUDA, then OpenCL, f32
    An accelerator that fails to initialize is disabled for the session; with
    allow_fallback the CPU kernel of the same precision is used instead.
    """

    def __init__(
        self,
        *,
        fractal: Optional[Fractal] = None,
        devices: Optional[DeviceManager] = None,
        pool: Optional[BackendPool] = None,
        allow_fallback: bool = True,
        backend: BackendType | str = BackendType.AUTO,
        device: Optional[int] = None,
    ) -> None:
        self.fractal = fractal or MandelbrotFractal()
        self._devices = devices
        self.pool = pool or BackendPool()
        self.allow_fallback = allow_fallback
        self.backend = backend if isinstance(backend, BackendType) else BackendType[str(backend).upper()]
        self.device = device
        self._unusable: set[Tuple[str, str]] = set()
        self._lock = threading.Lock()

    # ---- Lifecycle ------------------------------------------------------

    def close(self) -> None:
        self.pool.close_all()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ---- Device APIs ----------------------------------------------------

    @property
    def devices(self) -> DeviceManager:
        if self._devices is None:
            self._devices = DeviceManager()
        return self._devices

    def list_devices(self, backend: Optional[str] = None) -> List[DeviceInfo]:
        return self.devices.list(backend)

    # ---- Backend selection ----------------------------------------------

    def _accelerator_order(self) -> Tuple[str, ...]:
        if self.backend in (BackendType.CUDA, BackendType.OPENCL):
            return (self.backend.name,)
        return ACCELERATORS

    def _try_accelerator(self, name: str, settings: RenderSettings) -> Backend:
        if name not in self.pool.registry:
            raise AcceleratorInitError(f"{name} backend not registered", backend=name)
        if self.pool.is_disabled(name):
            raise AcceleratorInitError(f"{name} backend disabled for this session", backend=name)
        if (name, settings.precision) in self._unusable:
            raise AcceleratorInitError(f"{name} cannot run {settings.precision} kernels", backend=name)

        device = self.device if self.backend.name == name else None
        try:
            di = self.devices.choose(name, device=device)
        except AcceleratorInitError:
            self.pool.disable(name)
            raise
        if settings.precision == "f64" and not di.supports_fp64:
            # the backend stays usable for f32
            try:
                di = self.devices.choose(name, device=device, require_fp64=True)
            except AcceleratorInitError:
                self._unusable.add((name, settings.precision))
                raise
        try:
            be = self.pool.get(name, di.device_id)
        except AcceleratorInitError:
            self.pool.disable(name)
            raise
        try:
            self.pool.get_compiled(name, self.fractal, settings, device=di.device_id)
        except AcceleratorInitError:
            self._unusable.add((name, settings.precision))
            raise
        return be

    def backend_for(self, method: CalculationMethod, settings: RenderSettings) -> Backend:
        """
        Resolve the backend that runs `method`, compiling its kernel if needed.
        Raises AcceleratorInitError when no accelerator works and fallback is off.
        """
        method = CalculationMethod.parse(method)
        if not method.uses_accelerator:
            return self.pool.get_compiled("CPU", self.fractal, settings)

        failures: List[AcceleratorInitError] = []
        with self._lock:
            for name in self._accelerator_order():
                try:
                    return self._try_accelerator(name, settings)
                except AcceleratorInitError as e:
                    logger.debug("%s unavailable for %s: %s", name, method.name, e)
                    failures.append(e)

        reason = "; ".join(str(e) for e in failures)
        if not self.allow_fallback:
            raise AcceleratorInitError(f"no accelerator could run {method.name}: {reason}",
                                       backend=failures[-1].backend if failures else None)
        logger.warning("%s: no usable accelerator (%s), falling back to the CPU %s kernel",
                       method.name, reason, settings.precision)
        return self.pool.get_compiled("CPU", self.fractal, settings)

    @staticmethod
    def method_label(method: CalculationMethod, backend: Backend) -> str:
        if method.uses_accelerator and backend.name == "CPU":
            return f"{method.name} (CPU fallback)"
        return method.name

    # ---- Compute --------------------------------------------------------

    def compute_labeled(self, params: RenderParameters) -> Tuple[np.ndarray, str]:
        """Iteration grid of shape (resolution_y, resolution_x) plus the label of the path that ran."""
        settings = params.settings
        be = self.backend_for(params.method, settings)
        grid = be.render(self.fractal, params.viewport, settings)
        return grid, self.method_label(params.method, be)

    def compute(self, params: RenderParameters) -> np.ndarray:
        return self.compute_labeled(params)[0]


_default_executor: Optional[RenderExecutor] = None
_default_lock = threading.Lock()


def default_executor() -> RenderExecutor:
    global _default_executor
    with _default_lock:
        if _default_executor is None:
            _default_executor = RenderExecutor()
        return _default_executor


def compute_iterations(resolution_x: int, resolution_y: int, iterations: int,
                       top: float, bottom: float, left: float, right: float,
                       method: CalculationMethod | str = CalculationMethod.CPU,
                       executor: Optional[RenderExecutor] = None) -> np.ndarray:
    """
    Escape-time counts for the given rectangle, without aspect correction.
    Each cell is in [0, iterations]; `iterations` marks points that never escaped.
    """
    params = validate_parameters(RenderParameters(
        resolution_x=resolution_x, resolution_y=resolution_y, iterations=iterations,
        top=top, bottom=bottom, left=left, right=right, method=method))
    return (executor or default_executor()).compute(params)
