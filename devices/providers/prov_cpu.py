from __future__ import annotations
import os
import platform
from typing import List, Dict

import numba


class CpuDeviceProvider:
    """The host CPU as seen by the numba parallel kernels; always present."""
    backend = "CPU"

    @staticmethod
    def enumerate() -> List[Dict]:
        name = platform.processor() or platform.machine() or "CPU"
        return [{
            "device_id": None,
            "name": name,
            "vendor": None,
            "compute_capability": None,
            "memory_total_mb": None,
            "extra": {
                "cores": os.cpu_count(),
                "threads": numba.config.NUMBA_NUM_THREADS,
                "fp64": True,
            },
        }]
