from __future__ import annotations
from typing import List, Dict
import logging
logger = logging.getLogger(__name__)

class OpenClDeviceProvider:
    backend = "OPENCL"

    @staticmethod
    def enumerate() -> List[Dict]:
        """
        Probe pyopencl platforms/devices and return a list of device dicts.
        Ordinals run across all platforms, matching OpenClBackend(device=...).
        """
        devs: List[Dict] = []
        try:
            import pyopencl as cl
            plats = cl.get_platforms()
        except Exception as e:
            logger.debug("OpenCL platforms unavailable: %s", e)
            return devs

        ordinal = 0
        for p in plats:
            for d in p.get_devices():
                try:
                    name = getattr(d, "name", None)
                    extra = {
                        "cores": getattr(d, "max_compute_units", None),
                        "clock_mhz": getattr(d, "max_clock_frequency", None),
                        "fp64": bool(getattr(d, "double_fp_config", 0))
                                or "cl_khr_fp64" in getattr(d, "extensions", ""),
                    }
                    devs.append({
                        "device_id": ordinal,
                        "name": name.strip() if name else f"OpenCL Device {ordinal}",
                        "vendor": (getattr(d, "vendor", None) or "").strip() or None,
                        "driver": getattr(d, "driver_version", None) or getattr(p, "version", None),
                        "compute_capability": getattr(d, "version", None) or getattr(p, "version", None),
                        "memory_total_mb": int(getattr(d, "global_mem_size", 0) // (1024 ** 2)),
                        "memory_free_mb": None,
                        "is_available": True,
                        "extra": extra,
                    })
                except Exception:
                    logger.exception(
                        "Failed to read OpenCL device info for platform %s",
                        getattr(p, "name", "<unknown>"))
                ordinal += 1
        return devs
