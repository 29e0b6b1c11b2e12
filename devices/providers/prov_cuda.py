from __future__ import annotations
from typing import List, Dict
import logging
logger = logging.getLogger(__name__)

class CudaDeviceProvider:
    backend = "CUDA"

    @staticmethod
    def enumerate() -> List[Dict]:
        """
        Probe CUDA devices through numba.cuda and return device dicts for DeviceInfo.
        Returns an empty list if no driver or device is present.
        """
        devs: List[Dict] = []
        try:
            from numba import cuda
            if not cuda.is_available():
                logger.debug("CUDA driver or device not available")
                return devs
            gpus = list(cuda.gpus)
        except Exception:
            logger.exception("Failed to query CUDA devices")
            return devs

        for i, gpu in enumerate(gpus):
            try:
                with gpu:
                    dev = cuda.get_current_device()
                    cc = dev.compute_capability
                    free_b, total_b = cuda.current_context().get_memory_info()
                    name = dev.name.decode() if isinstance(dev.name, bytes) else str(dev.name)
                    devs.append({
                        "device_id": i,
                        "name": name,
                        "vendor": "NVIDIA",
                        "driver": None,
                        "compute_capability": f"{cc[0]}.{cc[1]}",
                        "memory_total_mb": int(total_b // (1024 ** 2)),
                        "memory_free_mb": int(free_b // (1024 ** 2)),
                        "is_available": True,
                        "extra": {
                            "multiprocessors": getattr(dev, "MULTIPROCESSOR_COUNT", None),
                            "fp64": True,
                        },
                    })
            except Exception:
                logger.exception("Failed to read CUDA device info for index %d", i)
        return devs
