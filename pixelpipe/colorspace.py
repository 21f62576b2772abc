"""
颜色空间转换 - 灰度 / HSV / YCbCr 以及分量阈值化

逐像素函数只使用 numpy 逐元素运算，因此既可以接收标量，
也可以一次性接收整幅通道平面 (见 PixelMapper)。
"""

import numpy as np
from functools import partial

from .config import BRIGHTNESS_GAIN
from .pixelbuffer import PixelBuffer, map_pixels

HSV_COMPONENTS = ("H", "S", "V")
YCBCR_COMPONENTS = ("Y", "Cb", "Cr")


# ======================== 逐像素变换 ========================

def greyscale_pixel(r, g, b, a):
    """ 亮度加权灰度，再提亮 20% (上限 255) """
    grey = 0.299 * r + 0.587 * g + 0.114 * b
    bright = np.minimum(grey * BRIGHTNESS_GAIN, 255)
    return bright, bright, bright, a


def hsv_pixel(r, g, b, a):
    """
    RGB -> HSV，H/S/V 缩放到 [0, 255] 后依次写入 R/G/B 通道
    仅用于可视化: 缩放与量化会损失精度，不能无损转换回 RGB
    """
    r_n, g_n, b_n = r / 255.0, g / 255.0, b / 255.0
    c_max = np.maximum(np.maximum(r_n, g_n), b_n)
    c_min = np.minimum(np.minimum(r_n, g_n), b_n)
    delta = c_max - c_min
    safe_delta = np.where(delta == 0, 1.0, delta)

    # 无彩色 (delta == 0) 时色相取 0
    h = np.where(
        delta == 0, 0.0,
        np.where(c_max == r_n, 60 * np.mod((g_n - b_n) / safe_delta, 6),
                 np.where(c_max == g_n, 60 * ((b_n - r_n) / safe_delta + 2),
                          60 * ((r_n - g_n) / safe_delta + 4))))
    h = np.where(h < 0, h + 360, h)

    s = np.where(c_max == 0, 0.0, delta / np.where(c_max == 0, 1.0, c_max))
    v = c_max

    scaled_h = np.clip(h / 360 * 255, 0, 255)
    scaled_s = np.clip(s * 255, 0, 255)
    scaled_v = np.clip(v * 255, 0, 255)
    return scaled_h, scaled_s, scaled_v, a


def ycbcr_pixel(r, g, b, a):
    """ RGB -> YCbCr (BT.601)，Y/Cb/Cr 依次写入 R/G/B 通道 """
    y = 0.299 * r + 0.587 * g + 0.114 * b
    cb = -0.168736 * r - 0.331264 * g + 0.5 * b + 128
    cr = 0.5 * r - 0.418688 * g - 0.081312 * b + 128
    return np.clip(y, 0, 255), np.clip(cb, 0, 255), np.clip(cr, 0, 255), a


def threshold_component_pixel(r, g, b, a, component, cutoff, components):
    """
    对已转换图像的某个分量做二值化: 大于阈值为白，否则为黑
    :param component: 分量名称，必须属于 components
    :param components: 分量名称依次对应 R/G/B 通道
    """
    if component not in components:
        return r, g, b, a
    value = (r, g, b)[components.index(component)]
    white = np.where(value > cutoff, 255, 0)
    return white, white, white, a


def threshold_hsv_pixel(r, g, b, a, component, cutoff):
    return threshold_component_pixel(r, g, b, a, component, cutoff, HSV_COMPONENTS)


def threshold_ycbcr_pixel(r, g, b, a, component, cutoff):
    return threshold_component_pixel(r, g, b, a, component, cutoff, YCBCR_COMPONENTS)


# ======================== 缓冲区级操作 ========================

class ColorSpaceConverter:
    """颜色空间转换器 - 每个操作都返回新缓冲区"""

    @staticmethod
    def greyscale(buffer: PixelBuffer) -> PixelBuffer:
        return map_pixels(buffer, greyscale_pixel)

    @staticmethod
    def to_hsv(buffer: PixelBuffer) -> PixelBuffer:
        return map_pixels(buffer, hsv_pixel)

    @staticmethod
    def to_ycbcr(buffer: PixelBuffer) -> PixelBuffer:
        return map_pixels(buffer, ycbcr_pixel)

    @staticmethod
    def threshold_hsv(buffer: PixelBuffer, component: str, cutoff: float) -> PixelBuffer:
        """
        HSV 分量阈值化
        :param buffer: to_hsv 的输出
        :param component: "H" / "S" / "V"，未知分量时原样返回
        :param cutoff: 阈值 (0-255)
        """
        if component not in HSV_COMPONENTS:
            return buffer.copy()
        return map_pixels(buffer, partial(threshold_hsv_pixel,
                                          component=component, cutoff=cutoff))

    @staticmethod
    def threshold_ycbcr(buffer: PixelBuffer, component: str, cutoff: float) -> PixelBuffer:
        """
        YCbCr 分量阈值化
        :param buffer: to_ycbcr 的输出
        :param component: "Y" / "Cb" / "Cr"，未知分量时原样返回
        :param cutoff: 阈值 (0-255)
        """
        if component not in YCBCR_COMPONENTS:
            return buffer.copy()
        return map_pixels(buffer, partial(threshold_ycbcr_pixel,
                                          component=component, cutoff=cutoff))
