
from backend.model.base import Backend, CpuEvent
from backend.model.cpu import CpuBackend
from backend.pool import BackendPool, BackendSpec
from devices.manager import DeviceManager
from devices.providers.prov_cpu import CpuDeviceProvider
from rendering.executor import RenderExecutor
from utils.errors import AcceleratorInitError


def accelerator_devices(require_fp64=False):
    manager = DeviceManager()
    devs = manager.list("CUDA") + manager.list("OPENCL")
    if require_fp64:
        devs = [d for d in devs if d.supports_fp64]
    return devs


class FakeGpuProvider:
    backend = "CUDA"

    def __init__(self, fp64=True):
        self.fp64 = fp64

    def enumerate(self):
        return [{"device_id": 0, "name": "Fake GPU", "vendor": "Test",
                 "compute_capability": "8.6", "memory_total_mb": 8192,
                 "extra": {"fp64": self.fp64}}]


class BrokenGpuBackend(Backend):
    """Accelerator whose driver cannot be initialized."""
    name = "CUDA"
    created = 0

    def __init__(self, device=None):
        type(self).created += 1
        raise AcceleratorInitError("driver not loaded", backend=self.name)

    def compile(self, fractal, settings):
        pass

    def render_async(self, fractal, vp, settings):
        raise AssertionError("unreachable")

    def close(self):
        pass


class CpuBackedGpu(Backend):
    """Accelerator stand-in that runs the CPU kernel, optionally refusing f64."""
    name = "CUDA"
    fp64 = True

    def __init__(self, device=None):
        self._cpu = CpuBackend()
        self.renders = 0

    def compile(self, fractal, settings):
        if settings.precision == "f64" and not self.fp64:
            raise AcceleratorInitError("no double precision", backend=self.name)
        self._cpu.compile(fractal, settings)

    def render_async(self, fractal, vp, settings):
        self.renders += 1
        return self._cpu.render(fractal, vp, settings), CpuEvent()

    def close(self):
        self._cpu.close()


def make_executor(gpu_cls, allow_fallback=True, device_fp64=True):
    registry = {
        "CPU": BackendSpec(cls=CpuBackend, priority=0, supports_devices=False),
        "CUDA": BackendSpec(cls=gpu_cls, priority=10, supports_devices=True),
    }
    devices = DeviceManager(providers=[FakeGpuProvider(fp64=device_fp64), CpuDeviceProvider()])
    return RenderExecutor(devices=devices, pool=BackendPool(registry), allow_fallback=allow_fallback)


