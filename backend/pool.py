from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Tuple, Optional, Type, Set

from backend.model.base import Backend
from backend.model.cpu import CpuBackend
from backend.model.cuda import CudaBackend
from backend.model.opencl import OpenClBackend
from fractals.base import Fractal, RenderSettings
from utils.errors import AcceleratorInitError

logger = logging.getLogger(__name__)


# Small descriptor of a backend implementation
@dataclass(frozen=True)
class BackendSpec:
    cls: Type[Backend]
    priority: int
    supports_devices: bool


# Default registry
DEFAULT_BACKENDS: Dict[str, BackendSpec] = {
    "CPU":    BackendSpec(cls=CpuBackend,   priority=0,  supports_devices=False),
    "CUDA":   BackendSpec(cls=CudaBackend,  priority=10, supports_devices=True),
    "OPENCL": BackendSpec(cls=OpenClBackend, priority=8, supports_devices=True),
}


class BackendPool:
    """
    Creates, caches and compiles backend instances.
    Keyed by (backend_name, device_id_or_None).

    A backend whose initialization failed is remembered as disabled so the
    session does not retry it on every render.
    """

    def __init__(self, registry: Optional[Dict[str, BackendSpec]] = None) -> None:
        self.registry: Dict[str, BackendSpec] = registry or DEFAULT_BACKENDS
        self._cache: Dict[Tuple[str, Optional[int]], Backend] = {}
        self._disabled: Set[str] = set()
        self._lock = threading.RLock()

    def is_disabled(self, name: str) -> bool:
        return name.upper() in self._disabled

    def disable(self, name: str) -> None:
        with self._lock:
            self._disabled.add(name.upper())
            for key in [k for k in self._cache if k[0] == name.upper()]:
                self._close_quietly(self._cache.pop(key))

    def get(self, name: str, device: Optional[int] = None) -> Backend:
        name = name.upper()
        if name not in self.registry:
            raise KeyError(f"Unknown backend '{name}'")
        if name in self._disabled:
            raise AcceleratorInitError(f"{name} backend disabled for this session", backend=name)
        spec = self.registry[name]
        key = (name, device if spec.supports_devices else None)
        with self._lock:
            if key in self._cache:
                return self._cache[key]
            be = spec.cls(device=device) if spec.supports_devices else spec.cls()
            logger.debug("Created %s backend (device=%s)", name, key[1])
            self._cache[key] = be
            return be

    def get_compiled(self, name: str, fractal: Fractal, settings: RenderSettings,
                     device: Optional[int] = None) -> Backend:
        """Fetch a backend and make sure its kernel for settings.precision is built."""
        be = self.get(name, device)
        with self._lock:
            be.compile(fractal, settings)
        return be

    def close_all(self) -> None:
        with self._lock:
            for be in list(self._cache.values()):
                self._close_quietly(be)
            self._cache.clear()

    @staticmethod
    def _close_quietly(be: Backend) -> None:
        try:
            be.close()
        except Exception as e:
            logger.warning("Closing %s backend failed: %s", getattr(be, "name", be), e)
