"""
处理管线 - 每帧把原图经过各个算子，按网格排列输出

每帧的滑块、单选项、特效编号等都通过 FrameSettings 显式传入，
管线本身不持有任何界面状态。
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .channel import CHANNELS, ChannelExtractor, Thresholder
from .colorspace import ColorSpaceConverter
from .config import (CAM_HEIGHT, CAM_WIDTH, DEFAULT_THRESHOLD, GRID_BASE_X,
                     GRID_BASE_Y, GRID_PADDING_X, GRID_PADDING_Y)
from .detection import FaceBox
from .facedetector import FaceRegionModifier
from .gridlayout import GridLayout
from .imagefilter import ImageFilter
from .pixelbuffer import PixelBuffer

logger = logging.getLogger(__name__)

# (buffer, x, y, width, height) -> None
DisplayCallback = Callable[[PixelBuffer, int, int, int, int], None]


@dataclass(frozen=True)
class FrameSettings:
    """单帧配置 (每帧从界面读取一次)"""
    red_threshold: int = DEFAULT_THRESHOLD
    green_threshold: int = DEFAULT_THRESHOLD
    blue_threshold: int = DEFAULT_THRESHOLD
    hsv_component: str = "H"
    hsv_threshold: int = DEFAULT_THRESHOLD
    ycbcr_component: str = "Y"
    ycbcr_threshold: int = DEFAULT_THRESHOLD
    face_modification: Optional[str] = None
    active_filter: int = 0


@dataclass
class Panel:
    """网格中的一个输出"""
    name: str
    buffer: PixelBuffer
    col: int
    row: int
    x: int
    y: int


class ProcessingPipeline:
    """
    网格排布:
        行 0: 原图 | 灰度 | 手势滤镜
        行 1: 红 | 绿 | 蓝 通道
        行 2: 红 | 绿 | 蓝 阈值
        行 3: 原图 | HSV | YCbCr
        行 4: 人脸特效 | HSV 阈值 | YCbCr 阈值
    """

    def __init__(self, layout: GridLayout = None, cell_width: int = CAM_WIDTH,
                 cell_height: int = CAM_HEIGHT):
        self.cell_width = cell_width
        self.cell_height = cell_height
        self.layout = layout or GridLayout(GRID_BASE_X, GRID_BASE_Y, cell_width, cell_height,
                                           GRID_PADDING_X, GRID_PADDING_Y)
        self.image_filter = ImageFilter()
        self.face_modifier = FaceRegionModifier()

    def process(self, frame: PixelBuffer, settings: FrameSettings = None,
                face_box: Optional[FaceBox] = None) -> List[Panel]:
        """
        处理单帧，frame 不会被修改
        :param face_box: 最近一次的人脸检测结果，None 表示本帧无人脸
        :return: 按行优先排列的输出面板
        """
        settings = settings or FrameSettings()
        panels = []

        def add(name, buffer, col, row):
            x, y = self.layout.get_position(col, row)
            panels.append(Panel(name, buffer, col, row, x, y))

        add("original", frame.copy(), 0, 0)
        add("greyscale", ColorSpaceConverter.greyscale(frame), 1, 0)
        add("gesture_filter", self.image_filter.apply_filter(frame, settings.active_filter), 2, 0)

        cutoffs = {
            "red": settings.red_threshold,
            "green": settings.green_threshold,
            "blue": settings.blue_threshold,
        }
        for col, channel in enumerate(CHANNELS):
            extracted = ChannelExtractor.extract(frame, channel)
            add(f"{channel}_channel", extracted, col, 1)
            add(f"{channel}_threshold", Thresholder.apply(extracted, channel, cutoffs[channel]),
                col, 2)

        hsv = ColorSpaceConverter.to_hsv(frame)
        ycbcr = ColorSpaceConverter.to_ycbcr(frame)
        add("original_repeat", frame.copy(), 0, 3)
        add("hsv", hsv, 1, 3)
        add("ycbcr", ycbcr, 2, 3)

        add("face", self.face_modifier.apply(frame, face_box, settings.face_modification), 0, 4)
        add("hsv_threshold", ColorSpaceConverter.threshold_hsv(
            hsv, settings.hsv_component, settings.hsv_threshold), 1, 4)
        add("ycbcr_threshold", ColorSpaceConverter.threshold_ycbcr(
            ycbcr, settings.ycbcr_component, settings.ycbcr_threshold), 2, 4)

        panels.sort(key=lambda p: (p.row, p.col))
        return panels

    def render(self, frame: PixelBuffer, settings: FrameSettings, display: DisplayCallback,
               face_box: Optional[FaceBox] = None) -> List[Panel]:
        """处理单帧并把每个面板交给显示回调"""
        panels = self.process(frame, settings, face_box)
        for panel in panels:
            display(panel.buffer, panel.x, panel.y, self.cell_width, self.cell_height)
        return panels
