import pytest

from fractals.base import Viewport
from fractals.viewport import adapt_to_aspect_ratio, adapt_viewport


@pytest.mark.parametrize("res_x, res_y, bounds", [
    (1000, 1000, (1.5, -1.5, -2.0, 1.0)),
    (1920, 1080, (1.5, -1.5, -2.0, 1.0)),
    (400, 1200, (1.5, -1.5, -2.0, 1.0)),
    (640, 480, (0.1, -0.3, 0.25, 0.3)),
    (3, 7, (10.0, 9.5, -100.0, 50.0)),
])
def test_aspect_ratio_matches_resolution_and_center_is_kept(res_x, res_y, bounds):
    top, bottom, left, right = bounds
    t, b, l, r = adapt_to_aspect_ratio(res_x, res_y, top, bottom, left, right)

    assert (r - l) / (t - b) == pytest.approx(res_x / res_y, rel=1e-12)
    assert (l + r) / 2 == pytest.approx((left + right) / 2, abs=1e-12)
    assert (t + b) / 2 == pytest.approx((top + bottom) / 2, abs=1e-12)


def test_viewport_only_grows():
    t, b, l, r = adapt_to_aspect_ratio(1920, 1080, 1.5, -1.5, -2.0, 1.0)
    assert (t, b) == (1.5, -1.5)
    assert l < -2.0 and r > 1.0

    t, b, l, r = adapt_to_aspect_ratio(1080, 1920, 1.5, -1.5, -2.0, 1.0)
    assert (l, r) == (-2.0, 1.0)
    assert t > 1.5 and b < -1.5


def test_matching_ratio_is_unchanged():
    assert adapt_to_aspect_ratio(100, 100, 1.5, -1.5, -2.0, 1.0) == (1.5, -1.5, -2.0, 1.0)


def test_adapt_viewport_keeps_resolution():
    vp = adapt_viewport(Viewport(1.5, -1.5, -2.0, 1.0, 300, 100))
    assert (vp.width, vp.height) == (300, 100)
    assert vp.span_x / vp.span_y == pytest.approx(3.0)
    assert vp.center == pytest.approx((-0.5, 0.0))
