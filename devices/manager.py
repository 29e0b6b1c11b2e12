from __future__ import annotations
import logging
import re
from dataclasses import replace
from typing import List, Optional
from devices.types import DeviceInfo
from devices.providers.prov_cpu import CpuDeviceProvider
from devices.providers.prov_cuda import CudaDeviceProvider
from devices.providers.prov_opencl import OpenClDeviceProvider
from utils.errors import AcceleratorInitError

logger = logging.getLogger(__name__)

BACKEND_PRIORITY = {"CPU": 0, "OPENCL": 8, "CUDA": 10}
PROVIDER = CudaDeviceProvider | OpenClDeviceProvider | CpuDeviceProvider

# relative weight of each normalised criterion; sums to 1
SCORE_WEIGHTS = {"priority": 0.40, "memory": 0.20, "compute": 0.25, "fp64": 0.15}

_VERSION = re.compile(r"\d+(\.\d+)?")


class DeviceManager:
    """
    Discovers compute devices through pluggable providers and picks one per backend.
    Selection is non-interactive: the best scored device of a backend wins
    unless the caller names a device id.
    """
    def __init__(self, providers: Optional[List[PROVIDER]] = None) -> None:
        self.providers = providers if providers is not None else [
            CudaDeviceProvider(), OpenClDeviceProvider(), CpuDeviceProvider()]
        self._devices: List[DeviceInfo] = []
        self.refresh()

    # ---- Discovery ------------------------------------------------------

    def refresh(self) -> None:
        found: List[DeviceInfo] = []
        for provider in self.providers:
            try:
                found.extend(raw if isinstance(raw, DeviceInfo) else DeviceInfo(backend=provider.backend, **raw)
                             for raw in provider.enumerate())
            except Exception:
                logger.exception("Device provider %s failed", getattr(provider, "backend", provider))
        self._devices = self._rank([d for d in found if d.is_available])
        logger.debug("Discovered %d device(s): %s", len(self._devices),
                     ", ".join(d.describe() for d in self._devices))

    def list(self, backend: Optional[str] = None) -> List[DeviceInfo]:
        if backend is None:
            return list(self._devices)
        return [d for d in self._devices if d.backend.upper() == backend.upper()]

    # ---- Selection ------------------------------------------------------

    def choose(self, backend: Optional[str] = None, device: Optional[int] = None,
               require_fp64: bool = False) -> DeviceInfo:
        """
        Best device of `backend` (or of any backend), or the one with id `device`.
        Raises AcceleratorInitError when nothing qualifies.
        """
        where = backend or "any backend"
        candidates = [d for d in self.list(backend) if d.supports_fp64 or not require_fp64]

        if device is not None:
            match = next((d for d in candidates if d.device_id == device), None)
            if match is None:
                raise AcceleratorInitError(f"No device {device} on {where}", backend=backend)
            return match

        if not candidates:
            what = "double precision " if require_fp64 else ""
            raise AcceleratorInitError(f"No {what}device available on {where}", backend=backend)
        return candidates[0]

    # ---- Scoring --------------------------------------------------------

    @staticmethod
    def _spread(values: List[float]) -> List[float]:
        """Min-max normalisation to [0, 1]; all equal -> 0.5."""
        lo, hi = min(values), max(values)
        if hi <= lo:
            return [0.5] * len(values)
        return [(v - lo) / (hi - lo) for v in values]

    @staticmethod
    def _compute_version(cc: object) -> float:
        # '8.6', 'OpenCL 3.0 CUDA', ...
        m = _VERSION.search(str(cc or ""))
        return float(m.group(0)) if m else 0.0

    def _rank(self, devices: List[DeviceInfo]) -> List[DeviceInfo]:
        if not devices:
            return []
        columns = {
            "priority": [float(BACKEND_PRIORITY.get(d.backend.upper(), -1)) for d in devices],
            "memory": [float(d.memory_total_mb or 0) for d in devices],
            "compute": [self._compute_version(d.compute_capability) for d in devices],
            "fp64": [1.0 if d.supports_fp64 else 0.0 for d in devices],
        }
        normalised = {k: self._spread(v) for k, v in columns.items()}
        scored = [
            replace(d, score=sum(SCORE_WEIGHTS[k] * normalised[k][i] for k in SCORE_WEIGHTS))
            for i, d in enumerate(devices)
        ]
        return sorted(scored, key=lambda d: d.score, reverse=True)
