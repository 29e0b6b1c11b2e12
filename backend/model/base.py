from abc import ABC, abstractmethod
from typing import Any, Tuple
import numpy as np
from fractals.base import Fractal, Viewport, RenderSettings


class CpuEvent:
    """Event stand-in for backends that finish before render_async returns."""
    @staticmethod
    def wait() -> None:
        return None


class Backend(ABC):
    """
    An abstract base class for escape-time backends.

    A backend owns its device resources, compiles one kernel per precision and
    turns (fractal, viewport, settings) into an int32 iteration grid of shape
    (height, width).
    """
    name: str

    @abstractmethod
    def compile(self, fractal: Fractal, settings: RenderSettings) -> None:
        ...

    @abstractmethod
    def render_async(self,
                     fractal: Fractal,
                     vp: Viewport,
                     settings: RenderSettings
                     ) -> Tuple[np.ndarray, Any]:
        ...

    def render(self, fractal: Fractal, vp: Viewport, settings: RenderSettings) -> np.ndarray:
        view, evt = self.render_async(fractal, vp, settings)
        evt.wait()
        return view

    @abstractmethod
    def close(self) -> None:
        ...

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __del__(self):
        try:
            self.close()
        except Exception:
            pass
