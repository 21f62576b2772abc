from typing import Dict

from .colorspace import ColorSpaceConverter
from .pixelbuffer import PixelBuffer


class ImageFilter:
    """整帧滤镜 - 由手势滤镜编号选择"""

    def __init__(self):
        """初始化滤镜表"""
        self.filters = {
            0: self.filter_original,
            1: self.filter_greyscale,   # 手势: 食指
            2: self.filter_hsv,         # 手势: 食指 + 中指
            3: self.filter_ycbcr,       # 手势: 食指 + 中指 + 无名指
        }

    def apply_filter(self, buffer: PixelBuffer, selector: int) -> PixelBuffer:
        """
        应用指定的滤镜
        :param buffer: 输入帧
        :param selector: 滤镜编号，未知编号时返回原图副本
        :return: 处理后的新缓冲区
        """
        if selector in self.filters:
            return self.filters[selector](buffer)
        return buffer.copy()

    def get_filter_names(self) -> Dict[int, str]:
        """获取滤镜编号与名称"""
        return {selector: FILTER_NAMES[selector] for selector in self.filters}

    # ======================== 滤镜实现 ========================

    def filter_original(self, buffer: PixelBuffer) -> PixelBuffer:
        """ 原图 """
        return buffer.copy()

    def filter_greyscale(self, buffer: PixelBuffer) -> PixelBuffer:
        return ColorSpaceConverter.greyscale(buffer)

    def filter_hsv(self, buffer: PixelBuffer) -> PixelBuffer:
        return ColorSpaceConverter.to_hsv(buffer)

    def filter_ycbcr(self, buffer: PixelBuffer) -> PixelBuffer:
        return ColorSpaceConverter.to_ycbcr(buffer)


FILTER_NAMES = {
    0: "original",
    1: "greyscale",
    2: "hsv",
    3: "ycbcr",
}


class FilterController:
    """滤镜控制器 - 保存当前激活的滤镜"""

    def __init__(self):
        self.filter = ImageFilter()
        self.active_filter = 0

    def update_by_gesture(self, selector: int) -> int:
        """
        根据手势更新滤镜: 识别出的手势 (1-3) 切换滤镜，0 保持当前滤镜
        :return: 当前激活的滤镜编号
        """
        if selector in self.filter.filters and selector != 0:
            self.active_filter = selector
        return self.active_filter

    def reset(self):
        self.active_filter = 0

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        return self.filter.apply_filter(buffer, self.active_filter)

    def get_info_text(self) -> str:
        return FILTER_NAMES.get(self.active_filter, "original")
