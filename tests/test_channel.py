"""
通道提取与单通道阈值测试
"""

import numpy as np
import pytest

from pixelpipe.channel import ChannelExtractor, Thresholder, extract_channel, threshold
from pixelpipe.pixelbuffer import PixelBuffer


def random_buffer(seed=2):
    rng = np.random.default_rng(seed)
    return PixelBuffer(12, 8, rng.integers(0, 256, size=(8, 12, 4), dtype=np.uint8))


class TestChannelExtractor:

    @pytest.mark.parametrize("channel,expected", [
        ("red", (10, 0, 0, 40)),
        ("green", (0, 20, 0, 40)),
        ("blue", (0, 0, 30, 40)),
    ])
    def test_keeps_selected_channel_and_alpha(self, channel, expected):
        buf = PixelBuffer.from_pixels(1, 1, [(10, 20, 30, 40)])
        assert ChannelExtractor.extract(buf, channel).pixel(0, 0) == expected

    @pytest.mark.parametrize("channel", ["red", "green", "blue"])
    def test_idempotent(self, channel):
        buf = random_buffer()
        once = extract_channel(buf, channel)
        assert extract_channel(once, channel) == once

    def test_unknown_channel_returns_input(self):
        buf = random_buffer()
        out = extract_channel(buf, "alpha")
        assert out == buf
        assert out is not buf


class TestThreshold:

    def test_pixel_above_cutoff(self):
        out = threshold(0, 150, 0, 7, "green", 100)
        assert tuple(int(v) for v in out) == (0, 255, 0, 7)

    def test_pixel_equal_to_cutoff_is_off(self):
        out = threshold(200, 100, 200, 9, "green", 100)
        assert tuple(int(v) for v in out) == (0, 0, 0, 9)

    def test_unknown_channel_passes_pixel_through(self):
        assert threshold(1, 2, 3, 4, "purple", 0) == (1, 2, 3, 4)

    @pytest.mark.parametrize("channel,slot", [("red", 0), ("green", 1), ("blue", 2)])
    def test_output_is_binary_in_selected_slot(self, channel, slot):
        buf = random_buffer()
        out = Thresholder.apply(buf, channel, 128)
        others = [i for i in range(3) if i != slot]
        assert set(np.unique(out.pixels[..., slot])) <= {0, 255}
        assert np.all(out.pixels[..., others] == 0)
        assert np.array_equal(out.pixels[..., 3], buf.pixels[..., 3])

    def test_differs_from_component_threshold(self):
        buf = PixelBuffer.from_pixels(1, 1, [(200, 0, 0, 255)])
        assert Thresholder.apply(buf, "red", 100).pixel(0, 0) == (255, 0, 0, 255)

    def test_unknown_channel_returns_input(self):
        buf = random_buffer()
        assert Thresholder.apply(buf, "cyan", 10) == buf
