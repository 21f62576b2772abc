"""
像素缓冲区与映射引擎测试
"""

import numpy as np
import pytest

from pixelpipe.colorspace import greyscale_pixel, hsv_pixel
from pixelpipe.pixelbuffer import InvalidBufferError, PixelBuffer, PixelMapper, map_pixels


def random_buffer(width=7, height=5, seed=0):
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    return PixelBuffer(width, height, pixels)


class TestPixelBuffer:

    def test_from_pixels_row_major(self):
        buf = PixelBuffer.from_pixels(2, 2, [(1, 2, 3, 4), (5, 6, 7, 8),
                                             (9, 10, 11, 12), (13, 14, 15, 16)])
        assert len(buf) == 4
        assert buf.pixel(1, 0) == (5, 6, 7, 8)
        assert buf.pixel(0, 1) == (9, 10, 11, 12)
        assert buf.to_list()[3] == (13, 14, 15, 16)

    @pytest.mark.parametrize("width,height", [(0, 3), (3, 0), (-1, 2)])
    def test_rejects_non_positive_dimensions(self, width, height):
        with pytest.raises(InvalidBufferError):
            PixelBuffer(width, height)

    def test_rejects_pixel_count_mismatch(self):
        with pytest.raises(InvalidBufferError):
            PixelBuffer.from_pixels(2, 2, [(0, 0, 0, 0)] * 3)

    def test_rejects_empty_pixels(self):
        with pytest.raises(InvalidBufferError):
            PixelBuffer.from_pixels(1, 1, [])

    def test_rejects_wrong_shape(self):
        with pytest.raises(InvalidBufferError):
            PixelBuffer(2, 2, np.zeros((2, 2, 3), dtype=np.uint8))

    def test_bgr_round_trip_keeps_colour(self):
        bgr = np.zeros((3, 4, 3), dtype=np.uint8)
        bgr[..., 2] = 200  # 红色
        buf = PixelBuffer.from_bgr(bgr)
        assert (buf.width, buf.height) == (4, 3)
        assert buf.pixel(0, 0) == (200, 0, 0, 255)
        assert np.array_equal(buf.to_bgr(), bgr)

    def test_from_bgr_rejects_empty_image(self):
        with pytest.raises(InvalidBufferError):
            PixelBuffer.from_bgr(np.zeros((0, 0, 3), dtype=np.uint8))

    def test_copy_is_independent(self):
        buf = random_buffer()
        original = buf.pixel(0, 0)
        dup = buf.copy()
        assert dup == buf
        dup.pixels[0, 0] = (original[0] ^ 1, 0, 0, 0)
        assert buf.pixel(0, 0) == original


class TestPixelMapper:

    def test_output_has_same_dimensions(self):
        buf = random_buffer(9, 4)
        out = map_pixels(buf, greyscale_pixel)
        assert (out.width, out.height) == (9, 4)

    def test_input_is_not_mutated(self):
        buf = random_buffer()
        before = buf.pixels.copy()
        map_pixels(buf, lambda r, g, b, a: (b, g, r, a))
        assert np.array_equal(buf.pixels, before)

    def test_constant_components_are_broadcast(self):
        buf = random_buffer()
        out = map_pixels(buf, lambda r, g, b, a: (0, 255, b, a))
        assert np.all(out.pixels[..., 0] == 0)
        assert np.all(out.pixels[..., 1] == 255)
        assert np.array_equal(out.pixels[..., 2], buf.pixels[..., 2])

    def test_results_are_rounded_and_saturated(self):
        buf = PixelBuffer.from_pixels(1, 1, [(100, 100, 100, 100)])
        out = map_pixels(buf, lambda r, g, b, a: (r * 3, g - 200, b + 0.6, a))
        assert out.pixel(0, 0) == (255, 0, 101, 100)

    def test_per_pixel_mode_visits_row_major(self):
        buf = PixelBuffer.from_pixels(3, 2, [(i, 0, 0, 255) for i in range(6)])
        seen = []

        def record(r, g, b, a):
            seen.append(r)
            return r, g, b, a

        PixelMapper(vectorized=False).map(buf, record)
        assert seen == [0, 1, 2, 3, 4, 5]

    def test_per_pixel_mode_allows_branching(self):
        buf = PixelBuffer.from_pixels(2, 1, [(50, 1, 2, 3), (150, 1, 2, 3)])
        out = PixelMapper(vectorized=False).map(
            buf, lambda r, g, b, a: (255 if r > 100 else 0, g, b, a))
        assert out.to_list() == [(0, 1, 2, 3), (255, 1, 2, 3)]

    @pytest.mark.parametrize("transform", [greyscale_pixel, hsv_pixel])
    def test_modes_agree(self, transform):
        buf = random_buffer(6, 6, seed=3)
        vectorized = PixelMapper(vectorized=True).map(buf, transform)
        per_pixel = PixelMapper(vectorized=False).map(buf, transform)
        assert vectorized == per_pixel

    def test_rejects_invalid_buffer(self):
        buf = random_buffer()
        buf.width = 0
        with pytest.raises(InvalidBufferError):
            map_pixels(buf, greyscale_pixel)

    @pytest.mark.parametrize("vectorized", [True, False])
    def test_rejects_dimension_mismatch(self, vectorized):
        buf = random_buffer(7, 5)
        buf.width = 3
        with pytest.raises(InvalidBufferError):
            PixelMapper(vectorized=vectorized).map(buf, greyscale_pixel)
