import numpy as np

from coloring.base import ColoringStrategy, RGB


class LegacyModuloColoring(ColoringStrategy):
    """
    The earlier channel-extraction scheme:
    b = n % 16 * 16, g = n % 8 * 32, r = n % 3 * 64.
    """
    name = "legacy"

    def map_to_rgb(self, iteration_count: int, iteration_cap: int) -> RGB:
        if iteration_count == iteration_cap:
            return 0, 0, 0
        return iteration_count % 3 * 64, iteration_count % 8 * 32, iteration_count % 16 * 16

    def apply(self, iter_buf: np.ndarray, iteration_cap: int) -> np.ndarray:
        counts = iter_buf.astype(np.int64, copy=False)
        rgb = np.empty(counts.shape + (3,), dtype=np.uint8)
        rgb[..., 0] = counts % 3 * 64
        rgb[..., 1] = counts % 8 * 32
        rgb[..., 2] = counts % 16 * 16
        rgb[counts == iteration_cap] = 0
        return rgb
