import numpy as np
import pytest

from rendering.pixel_buffer import PixelBuffer, row_stride


@pytest.mark.parametrize("width, stride", [(1, 4), (4, 12), (5, 16), (100, 300), (101, 304)])
def test_row_stride_is_four_byte_aligned(width, stride):
    assert row_stride(width) == stride


def test_packs_bgr_rows_with_zero_padding():
    rgb = np.zeros((3, 5, 3), dtype=np.uint8)
    rgb[0, 0] = (10, 20, 30)
    rgb[2, 4] = (200, 100, 50)

    buf = PixelBuffer.from_rgb(rgb)

    assert (buf.width, buf.height, buf.stride) == (5, 3, 16)
    assert buf.data.size == 16 * 3
    assert list(buf.data[0:3]) == [30, 20, 10]
    assert buf.pixel(0, 0) == (10, 20, 30)
    assert buf.pixel(4, 2) == (200, 100, 50)
    padding = buf.data.reshape(3, 16)[:, 15:]
    assert not padding.any()


def test_to_rgb_restores_the_image():
    rng = np.random.default_rng(7)
    rgb = rng.integers(0, 256, size=(9, 13, 3), dtype=np.uint8)
    assert np.array_equal(PixelBuffer.from_rgb(rgb).to_rgb(), rgb)


def test_rejects_wrong_size():
    with pytest.raises(ValueError):
        PixelBuffer(np.zeros(10, dtype=np.uint8), 5, 3)
