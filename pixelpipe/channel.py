"""
单通道提取与单通道阈值化
"""

import numpy as np
from functools import partial

from .pixelbuffer import PixelBuffer, map_pixels

CHANNELS = ("red", "green", "blue")


def extract_channel_pixel(r, g, b, a, channel):
    """ 保留选中通道，另外两个通道置 0 """
    if channel == "red":
        return r, 0, 0, a
    elif channel == "green":
        return 0, g, 0, a
    elif channel == "blue":
        return 0, 0, b, a
    return r, g, b, a


def threshold(r, g, b, a, channel, cutoff):
    """
    单通道阈值化: 选中通道大于阈值为 255 否则为 0，其余通道置 0
    与 HSV/YCbCr 阈值不同，这里输出单通道高亮而不是黑白图
    """
    if channel not in CHANNELS:
        return r, g, b, a
    value = (r, g, b)[CHANNELS.index(channel)]
    out = [0, 0, 0, a]
    out[CHANNELS.index(channel)] = np.where(value > cutoff, 255, 0)
    return tuple(out)


class ChannelExtractor:
    """通道提取器"""

    @staticmethod
    def extract(buffer: PixelBuffer, channel: str) -> PixelBuffer:
        """
        :param channel: "red" / "green" / "blue"，未知通道时原样返回
        """
        if channel not in CHANNELS:
            return buffer.copy()
        return map_pixels(buffer, partial(extract_channel_pixel, channel=channel))


class Thresholder:
    """单通道阈值化器"""

    @staticmethod
    def apply(buffer: PixelBuffer, channel: str, cutoff: float) -> PixelBuffer:
        if channel not in CHANNELS:
            return buffer.copy()
        return map_pixels(buffer, partial(threshold, channel=channel, cutoff=cutoff))


def extract_channel(buffer: PixelBuffer, channel: str) -> PixelBuffer:
    return ChannelExtractor.extract(buffer, channel)
