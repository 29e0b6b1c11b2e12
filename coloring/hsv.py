import numpy as np

from coloring.base import ColoringStrategy, RGB

HUE_PERIOD = 256


def hsv_to_rgb(h: float, s: float, v: float) -> RGB:
    """
    Standard six-sector HSV to RGB conversion.
    h in degrees [0, 360), s and v in [0, 1]; channels rounded half-to-even.
    """
    c = v * s
    x = c * (1 - abs(h / 60 % 2 - 1))
    m = v - c

    r1 = g1 = b1 = 0.0
    if 0 <= h < 60:
        r1, g1 = c, x
    elif 60 <= h < 120:
        r1, g1 = x, c
    elif 120 <= h < 180:
        g1, b1 = c, x
    elif 180 <= h < 240:
        g1, b1 = x, c
    elif 240 <= h < 300:
        r1, b1 = x, c
    elif 300 <= h < 360:
        r1, b1 = c, x

    return round((r1 + m) * 255), round((g1 + m) * 255), round((b1 + m) * 255)


def hue_for(iteration_count: int) -> float:
    return iteration_count % HUE_PERIOD / 255.0 * 359


class HsvColoring(ColoringStrategy):
    """
    Cyclic hue banding: the count modulo 256 walks the hue wheel at full
    saturation and value. Independent of the cap's magnitude.
    """
    name = "hsv"

    def __init__(self):
        self._table = np.array([hsv_to_rgb(hue_for(i), 1.0, 1.0) for i in range(HUE_PERIOD)],
                               dtype=np.uint8)

    def map_to_rgb(self, iteration_count: int, iteration_cap: int) -> RGB:
        if iteration_count == iteration_cap:
            return 0, 0, 0
        return hsv_to_rgb(hue_for(iteration_count), 1.0, 1.0)

    def apply(self, iter_buf: np.ndarray, iteration_cap: int) -> np.ndarray:
        rgb = self._table[np.mod(iter_buf, HUE_PERIOD)]
        rgb[iter_buf == iteration_cap] = 0
        return rgb
