from dataclasses import dataclass, replace
from typing import Dict, Any
import numpy as np
from abc import ABC, abstractmethod


PRECISIONS: Dict[str, Any] = {
    "f32": np.float32,
    "f64": np.float64,
}


@dataclass(frozen=True)
class Viewport:
    """
    Holds the viewport parameters for rendering a fractal.
    Top, bottom, left and right bound the area of the complex plane to render.
    Width and Height determine the size of the resulting image in pixels.
    """
    top: float
    bottom: float
    left: float
    right: float
    width: int
    height: int

    @property
    def span_x(self) -> float:
        return self.right - self.left

    @property
    def span_y(self) -> float:
        return self.top - self.bottom

    @property
    def center(self) -> tuple[float, float]:
        return (self.left + self.right) / 2.0, (self.top + self.bottom) / 2.0

    @property
    def pixel_count(self) -> int:
        return int(self.width) * int(self.height)

    def with_bounds(self, top: float, bottom: float, left: float, right: float) -> "Viewport":
        return replace(self, top=top, bottom=bottom, left=left, right=right)


@dataclass(frozen=True)
class RenderSettings:
    """
    Holds the kernel settings for a render.
    Max_iter is the escape cap; precision is the registry tag ("f32" or "f64")
    selecting the floating-point width the kernel computes in.
    """
    max_iter: int
    precision: str = "f64"

    @property
    def dtype(self) -> Any:
        try:
            return PRECISIONS[self.precision]
        except KeyError:
            raise ValueError(f"Unsupported precision tag: {self.precision}") from None


class Fractal(ABC):
    """
    An abstract base class for fractal types.
    """
    name: str

    @abstractmethod
    def build_arg_values(self, vp: Viewport, st: RenderSettings) -> np.ndarray:
        ...

    @abstractmethod
    def get_kernel(self, st: RenderSettings, backend_name: str) -> Dict[str, Any]:
        ...
