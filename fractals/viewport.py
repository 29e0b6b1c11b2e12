from __future__ import annotations

from fractals.base import Viewport


def adapt_to_aspect_ratio(resolution_x: int, resolution_y: int,
                          top: float, bottom: float,
                          left: float, right: float) -> tuple[float, float, float, float]:
    """
    Grows the viewport symmetrically along one axis so that its width:height
    ratio equals resolution_x:resolution_y. The center never moves and the
    viewport never shrinks, so the fractal is not stretched.

    Returns:
        tuple: (top, bottom, left, right)
    """
    target_ratio = resolution_x / resolution_y
    current_ratio = (right - left) / (top - bottom)

    if target_ratio > current_ratio:
        # too tall for the raster -> widen
        width = (top - bottom) * target_ratio
        delta_width = width - (right - left)
        right += delta_width / 2
        left -= delta_width / 2
    elif target_ratio < current_ratio:
        # too wide for the raster -> heighten
        height = (right - left) / target_ratio
        delta_height = height - (top - bottom)
        top += delta_height / 2
        bottom -= delta_height / 2

    return top, bottom, left, right


def adapt_viewport(vp: Viewport) -> Viewport:
    return vp.with_bounds(*adapt_to_aspect_ratio(vp.width, vp.height,
                                                 vp.top, vp.bottom,
                                                 vp.left, vp.right))
