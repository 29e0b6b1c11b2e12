from abc import ABC, abstractmethod
from typing import Tuple
import numpy as np

RGB = Tuple[int, int, int]


class ColoringStrategy(ABC):
    """
    Turns iteration counts into colours. Counts equal to the cap are interior
    points and always map to black.
    """
    name: str

    @abstractmethod
    def map_to_rgb(self, iteration_count: int, iteration_cap: int) -> RGB:
        ...

    @abstractmethod
    def apply(self, iter_buf: np.ndarray, iteration_cap: int) -> np.ndarray:
        """Vectorised map_to_rgb over an (H, W) grid; returns (H, W, 3) uint8 RGB."""
        ...
