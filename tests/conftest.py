import os

# numba's TBB threading layer deadlocks at interpreter exit once a subprocess
# (imageio's ffmpeg) has been spawned, and workqueue rejects the executor's
# concurrent kernel launches; pin OpenMP for the test run.
os.environ.setdefault("NUMBA_THREADING_LAYER", "omp")

import pytest

from devices.manager import DeviceManager
from devices.providers.prov_cpu import CpuDeviceProvider
from fractals.parameters import RenderParameters
from rendering.executor import RenderExecutor


@pytest.fixture
def executor():
    ex = RenderExecutor(devices=DeviceManager(providers=[CpuDeviceProvider()]))
    yield ex
    ex.close()


@pytest.fixture
def small_params(tmp_path):
    return RenderParameters(resolution_x=48, resolution_y=32, iterations=50, directory=str(tmp_path))
