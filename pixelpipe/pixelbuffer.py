"""
像素缓冲区与逐像素映射引擎
"""

import cv2
import numpy as np
from typing import Callable, Iterable, Tuple


class InvalidBufferError(ValueError):
    """缓冲区尺寸非法或像素数量与尺寸不符"""


# (r, g, b, a) -> (r', g', b', a')，纯函数，不依赖像素位置
PixelTransform = Callable[..., Tuple]


class PixelBuffer:
    """RGBA 光栅缓冲区 (行优先, 像素 (x, y) 位于 y*W+x)"""

    def __init__(self, width: int, height: int, pixels: np.ndarray = None):
        """
        :param width: 宽度 (正整数)
        :param height: 高度 (正整数)
        :param pixels: (H, W, 4) 的 uint8 数组，省略时为全透明黑色
        """
        if width <= 0 or height <= 0:
            raise InvalidBufferError(f"非法尺寸: {width}x{height}")
        if pixels is None:
            pixels = np.zeros((height, width, 4), dtype=np.uint8)
        pixels = np.asarray(pixels)
        if pixels.shape != (height, width, 4):
            raise InvalidBufferError(
                f"像素数组形状 {pixels.shape} 与尺寸 {width}x{height} 不符")
        self.width = width
        self.height = height
        self.pixels = pixels.astype(np.uint8, copy=False)

    @classmethod
    def from_pixels(cls, width: int, height: int,
                    pixels: Iterable[Tuple[int, int, int, int]]) -> "PixelBuffer":
        """由 (r, g, b, a) 元组序列构建"""
        data = np.asarray(list(pixels), dtype=np.float64)
        if data.size == 0 or data.ndim != 2 or data.shape[1] != 4:
            raise InvalidBufferError("像素必须是非空的 RGBA 四元组序列")
        if width <= 0 or height <= 0 or data.shape[0] != width * height:
            raise InvalidBufferError(
                f"像素数量 {data.shape[0]} 与尺寸 {width}x{height} 不符")
        data = np.clip(np.rint(data), 0, 255).astype(np.uint8)
        return cls(width, height, data.reshape(height, width, 4))

    @classmethod
    def from_bgr(cls, img: np.ndarray) -> "PixelBuffer":
        """
        由 OpenCV 图像构建
        :param img: BGR / BGRA / 灰度图像
        """
        if img is None or img.size == 0:
            raise InvalidBufferError("空图像")
        if img.ndim == 2:
            rgba = cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
        elif img.shape[2] == 4:
            rgba = cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
        else:
            rgba = cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
        h, w = rgba.shape[:2]
        return cls(w, h, rgba)

    def to_bgr(self) -> np.ndarray:
        """转换为 OpenCV BGR 图像 (丢弃 alpha)"""
        return cv2.cvtColor(self.pixels, cv2.COLOR_RGBA2BGR)

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        """读取 (x, y) 处的像素"""
        return tuple(int(v) for v in self.pixels[y, x])

    def to_list(self) -> list:
        """行优先展开为 RGBA 元组列表"""
        return [tuple(int(v) for v in p) for p in self.pixels.reshape(-1, 4)]

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.width, self.height, self.pixels.copy())

    def crop(self, x: int, y: int, w: int, h: int) -> "PixelBuffer":
        """裁剪区域 (调用方保证区域在缓冲区内)"""
        return PixelBuffer(w, h, self.pixels[y:y + h, x:x + w].copy())

    def __len__(self):
        return self.width * self.height

    def __eq__(self, other):
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (self.width == other.width and self.height == other.height
                and np.array_equal(self.pixels, other.pixels))

    def __repr__(self):
        return f"PixelBuffer({self.width}x{self.height})"


class PixelMapper:
    """逐像素映射引擎 - 对每个像素调用同一个纯函数，输出新缓冲区"""

    def __init__(self, vectorized: bool = True):
        """
        :param vectorized: True 时一次性传入整幅通道平面 (numpy 数组)，
                           变换函数需由逐元素运算组成；False 时按行优先
                           逐像素调用，变换函数可以使用任意 Python 分支
        """
        self.vectorized = vectorized

    def map(self, buffer: PixelBuffer, transform: PixelTransform) -> PixelBuffer:
        """
        应用变换，输入缓冲区保持不变
        :param buffer: 输入缓冲区
        :param transform: (r, g, b, a) -> (r', g', b', a')
        :return: 尺寸相同的新缓冲区
        """
        if buffer.width <= 0 or buffer.height <= 0 or buffer.pixels.size == 0:
            raise InvalidBufferError(f"非法尺寸: {buffer.width}x{buffer.height}")
        if buffer.pixels.shape != (buffer.height, buffer.width, 4):
            raise InvalidBufferError(
                f"像素数组形状 {buffer.pixels.shape} 与尺寸 {buffer.width}x{buffer.height} 不符")

        if self.vectorized:
            result = self._map_planes(buffer, transform)
        else:
            result = self._map_each(buffer, transform)

        # 与 8 位画布一致: 四舍五入并饱和到 [0, 255]
        result = np.clip(np.rint(result), 0, 255).astype(np.uint8)
        return PixelBuffer(buffer.width, buffer.height, result)

    @staticmethod
    def _map_planes(buffer, transform):
        planes = buffer.pixels.astype(np.float64)
        r, g, b, a = (planes[..., i] for i in range(4))
        out = transform(r, g, b, a)
        shape = (buffer.height, buffer.width)
        # 常量分量 (如 0 或 255) 需要广播到整幅平面
        return np.stack([np.broadcast_to(np.asarray(c, dtype=np.float64), shape)
                         for c in out], axis=-1)

    @staticmethod
    def _map_each(buffer, transform):
        src = buffer.pixels
        dst = np.empty(src.shape, dtype=np.float64)
        for y in range(buffer.height):
            for x in range(buffer.width):
                r, g, b, a = (int(v) for v in src[y, x])
                dst[y, x] = transform(r, g, b, a)
        return dst


_default_mapper = PixelMapper()


def map_pixels(buffer: PixelBuffer, transform: PixelTransform) -> PixelBuffer:
    """使用默认 (向量化) 映射引擎"""
    return _default_mapper.map(buffer, transform)
