"""
显示 - 把面板绘制到 OpenCV 画布上
"""

import cv2
import numpy as np

from .config import CANVAS_HEIGHT, CANVAS_WIDTH
from .imagefilter import FILTER_NAMES
from .pixelbuffer import PixelBuffer


class CanvasDisplay:
    """白底画布，按坐标粘贴缩放后的缓冲区"""

    def __init__(self, width: int = CANVAS_WIDTH, height: int = CANVAS_HEIGHT):
        self.width = width
        self.height = height
        self.canvas = None
        self.clear()

    def clear(self):
        self.canvas = np.full((self.height, self.width, 3), 255, dtype=np.uint8)

    def __call__(self, buffer: PixelBuffer, x: int, y: int, width: int, height: int):
        img = buffer.to_bgr()
        if (buffer.width, buffer.height) != (width, height):
            img = cv2.resize(img, (width, height))

        # 超出画布的部分直接裁掉
        x0, y0 = max(0, x), max(0, y)
        x1, y1 = min(self.width, x + width), min(self.height, y + height)
        if x1 <= x0 or y1 <= y0:
            return
        self.canvas[y0:y1, x0:x1] = img[y0 - y:y1 - y, x0 - x:x1 - x]

    def label(self, text: str, x: int, y: int, color=(0, 0, 0)):
        cv2.putText(self.canvas, text, (x, y), cv2.FONT_HERSHEY_SIMPLEX, 0.4, color, 1)


# 21 个关键点的骨架连线 (0 为掌根)
HAND_CONNECTIONS = [
    (0, 1), (1, 2), (2, 3), (3, 4),
    (0, 5), (5, 6), (6, 7), (7, 8),
    (0, 9), (9, 10), (10, 11), (11, 12),
    (0, 13), (13, 14), (14, 15), (15, 16),
    (0, 17), (17, 18), (18, 19), (19, 20),
    (5, 9), (9, 13), (13, 17)
]


def draw_hand_annotations(img: np.ndarray, hands, scale=(1.0, 1.0), offset=(0, 0),
                          color=(0, 255, 0)) -> np.ndarray:
    """
    在 BGR 图像上绘制手部关键点和骨架 (原地绘制)
    :param hands: 检测坐标系下的关键点注释列表
    :param scale: 检测坐标到图像坐标的缩放 (sx, sy)
    :param offset: 绘制位置偏移 (画布上的面板左上角)
    """
    sx, sy = scale
    ox, oy = offset
    for annotations in hands or []:
        points = list(annotations.get("palm_base", [])[:1])
        for name in ("thumb", "index", "middle", "ring", "pinky"):
            points.extend(annotations.get(name, []))
        points = [(int(x * sx) + ox, int(y * sy) + oy) for x, y in points]

        # 关键点不全时只画点
        if len(points) == 21:
            for start, end in HAND_CONNECTIONS:
                cv2.line(img, points[start], points[end], (255, 0, 0), 1)
        for point in points:
            cv2.circle(img, point, 2, color, -1)
    return img


def draw_filter_info(img: np.ndarray, filter_name: str, gesture: int,
                     position: str = "top") -> np.ndarray:
    """
    在图像上叠加当前滤镜和手势信息
    :param gesture: 本帧识别出的手势滤镜编号，0 表示未识别
    :param position: "top" 或 "bottom"
    """
    h = img.shape[0]
    baseline = 30 if position == "top" else h - 30

    shaded = img.copy()
    cv2.rectangle(shaded, (5, baseline - 25), (350, baseline + 10), (0, 0, 0), -1)
    cv2.addWeighted(shaded, 0.3, img, 0.7, 0, img)

    gesture_text = FILTER_NAMES.get(gesture, "none") if gesture else "none"
    lines = (f"Filter: {filter_name}", f"Gesture: {gesture_text}")
    for i, text in enumerate(lines):
        cv2.putText(img, text, (15, baseline + 25 * i), cv2.FONT_HERSHEY_SIMPLEX, 0.6,
                    (0, 255, 0), 2)
    return img
