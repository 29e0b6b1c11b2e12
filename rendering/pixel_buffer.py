from __future__ import annotations

import numpy as np
from numba import njit, prange


def row_stride(width: int) -> int:
    """Bytes per row of a 24 bpp raster, padded to a 4-byte boundary."""
    return ((3 * int(width) + 3) // 4) * 4


@njit(parallel=True)
def _pack_bgr_rows(rgb, out, stride):
    height, width = rgb.shape[0], rgb.shape[1]
    for y in prange(height):
        base = y * stride
        for x in range(width):
            i = base + 3 * x
            out[i] = rgb[y, x, 2]
            out[i + 1] = rgb[y, x, 1]
            out[i + 2] = rgb[y, x, 0]


class PixelBuffer:
    """
    Packed 24-bit raster: one (B, G, R) triple per pixel, rows padded to `stride`.
    Padding bytes are zero.
    """

    def __init__(self, data: np.ndarray, width: int, height: int):
        stride = row_stride(width)
        if data.dtype != np.uint8 or data.size != stride * height:
            raise ValueError(f"expected {stride * height} uint8 bytes for {width}x{height}, got {data.size}")
        self.data = data
        self.width = int(width)
        self.height = int(height)
        self.stride = stride

    @classmethod
    def from_rgb(cls, rgb: np.ndarray) -> "PixelBuffer":
        height, width = rgb.shape[:2]
        stride = row_stride(width)
        out = np.zeros(stride * height, dtype=np.uint8)
        _pack_bgr_rows(np.ascontiguousarray(rgb, dtype=np.uint8), out, stride)
        return cls(out, width, height)

    def pixel(self, x: int, y: int) -> tuple[int, int, int]:
        """(r, g, b) at column x, row y."""
        i = y * self.stride + 3 * x
        b, g, r = self.data[i:i + 3]
        return int(r), int(g), int(b)

    def to_rgb(self) -> np.ndarray:
        rows = self.data.reshape(self.height, self.stride)[:, :3 * self.width]
        return np.ascontiguousarray(rows.reshape(self.height, self.width, 3)[:, :, ::-1])
