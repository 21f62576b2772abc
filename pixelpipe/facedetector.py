"""
人脸检测 (OpenCV Haar 级联) 与人脸区域特效

区域特效编号:
- '1': 灰度
- '2': 模糊
- '3': HSV 转换
- '4': 马赛克 (灰度 + 降采样)
"""

import os
import logging
from typing import Optional

import cv2
import numpy as np

from .colorspace import ColorSpaceConverter
from .config import BLUR_KERNEL_SIZE, PIXELATE_BLOCK_SIZE
from .detection import FaceBox
from .pixelbuffer import PixelBuffer

logger = logging.getLogger(__name__)

CASCADE_FILE = "haarcascade_frontalface_default.xml"


class FaceDetector:
    """人脸检测器 - 返回面积最大的人脸框"""

    def __init__(self, cascade_path: str = None, scale_factor: float = 1.1,
                 min_neighbors: int = 5):
        cascade_path = cascade_path or os.path.join(cv2.data.haarcascades, CASCADE_FILE)
        if not os.path.exists(cascade_path):
            raise RuntimeError(f"人脸级联模型不存在: {cascade_path}")
        self.cascade = cv2.CascadeClassifier(cascade_path)
        if self.cascade.empty():
            raise RuntimeError(f"无法加载人脸级联模型: {cascade_path}")
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        logger.info("人脸检测模型已加载")

    def detect(self, img: np.ndarray) -> Optional[FaceBox]:
        """
        :param img: OpenCV BGR 图像
        :return: 人脸框，未检测到时返回 None
        """
        gray = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
        faces = self.cascade.detectMultiScale(gray, scaleFactor=self.scale_factor,
                                              minNeighbors=self.min_neighbors)
        if len(faces) == 0:
            return None
        x, y, w, h = max(faces, key=lambda f: f[2] * f[3])
        return FaceBox(int(x), int(y), int(w), int(h))


class FaceRegionModifier:
    """对人脸区域应用特效，输出新缓冲区"""

    def __init__(self, block_size: int = PIXELATE_BLOCK_SIZE,
                 blur_kernel: int = BLUR_KERNEL_SIZE):
        self.block_size = block_size
        self.blur_kernel = blur_kernel
        self.modifications = {
            "1": self.modify_greyscale,
            "2": self.modify_blur,
            "3": self.modify_hsv,
            "4": self.modify_pixelate,
        }

    def apply(self, frame: PixelBuffer, face_box: Optional[FaceBox], mod) -> PixelBuffer:
        """
        :param frame: 整帧
        :param face_box: 人脸框，None 表示本帧没有人脸
        :param mod: 特效编号，未知编号时原样返回
        """
        modify = self.modifications.get(str(mod)) if mod is not None else None
        if face_box is None or modify is None:
            return frame.copy()

        # 人脸框裁剪到画面范围内
        x0, y0 = max(0, face_box.x), max(0, face_box.y)
        x1 = min(frame.width, face_box.x + face_box.w)
        y1 = min(frame.height, face_box.y + face_box.h)
        if x1 <= x0 or y1 <= y0:
            return frame.copy()

        region = frame.crop(x0, y0, x1 - x0, y1 - y0)
        modified = modify(region)

        output = frame.copy()
        output.pixels[y0:y1, x0:x1] = modified.pixels
        return output

    def modify_greyscale(self, region: PixelBuffer) -> PixelBuffer:
        return ColorSpaceConverter.greyscale(region)

    def modify_blur(self, region: PixelBuffer) -> PixelBuffer:
        k = self.blur_kernel
        return PixelBuffer(region.width, region.height, cv2.blur(region.pixels, (k, k)))

    def modify_hsv(self, region: PixelBuffer) -> PixelBuffer:
        return ColorSpaceConverter.to_hsv(region)

    def modify_pixelate(self, region: PixelBuffer) -> PixelBuffer:
        grey = ColorSpaceConverter.greyscale(region)
        small_w = max(1, region.width // self.block_size)
        small_h = max(1, region.height // self.block_size)
        small = cv2.resize(grey.pixels, (small_w, small_h), interpolation=cv2.INTER_AREA)
        scaled_up = cv2.resize(small, (region.width, region.height),
                               interpolation=cv2.INTER_NEAREST)
        return PixelBuffer(region.width, region.height, scaled_up)
