"""
手势滤镜测试
"""

import numpy as np

from pixelpipe.colorspace import ColorSpaceConverter
from pixelpipe.imagefilter import FilterController, ImageFilter
from pixelpipe.pixelbuffer import PixelBuffer


def sample():
    rng = np.random.default_rng(4)
    return PixelBuffer(5, 4, rng.integers(0, 256, size=(4, 5, 4), dtype=np.uint8))


class TestImageFilter:

    def test_selectors(self):
        buf = sample()
        image_filter = ImageFilter()
        assert image_filter.apply_filter(buf, 0) == buf
        assert image_filter.apply_filter(buf, 1) == ColorSpaceConverter.greyscale(buf)
        assert image_filter.apply_filter(buf, 2) == ColorSpaceConverter.to_hsv(buf)
        assert image_filter.apply_filter(buf, 3) == ColorSpaceConverter.to_ycbcr(buf)

    def test_unknown_selector_returns_copy(self):
        buf = sample()
        out = ImageFilter().apply_filter(buf, 42)
        assert out == buf
        assert out is not buf

    def test_filter_names(self):
        assert ImageFilter().get_filter_names() == {
            0: "original", 1: "greyscale", 2: "hsv", 3: "ycbcr"}


class TestFilterController:

    def test_recognized_gesture_switches_filter(self):
        controller = FilterController()
        assert controller.update_by_gesture(2) == 2
        assert controller.get_info_text() == "hsv"

    def test_no_gesture_keeps_filter(self):
        controller = FilterController()
        controller.update_by_gesture(3)
        assert controller.update_by_gesture(0) == 3
        assert controller.update_by_gesture(7) == 3

    def test_reset(self):
        controller = FilterController()
        controller.update_by_gesture(1)
        controller.reset()
        assert controller.active_filter == 0
        buf = sample()
        assert controller.apply(buf) == buf
