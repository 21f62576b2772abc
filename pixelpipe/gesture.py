"""
手势分类 - 由手指伸展比例得到滤镜编号

滤镜编号:
- 1: 仅食指伸出
- 2: 食指 + 中指
- 3: 食指 + 中指 + 无名指
- 0: 未识别
"""

import math
from typing import Dict, Iterable, Optional, Sequence, Tuple

from .config import DEFAULT_FINGER_THRESHOLD, FINGER_THRESHOLDS
from .detection import FaceBox

Point = Tuple[float, float]

FINGER_NAMES = ("thumb", "index", "middle", "ring", "pinky")

# 21 点手部关键点的分组 (掌根 + 每根手指 4 个点)
LANDMARK_GROUPS = {
    "palm_base": (0,),
    "thumb": (1, 2, 3, 4),
    "index": (5, 6, 7, 8),
    "middle": (9, 10, 11, 12),
    "ring": (13, 14, 15, 16),
    "pinky": (17, 18, 19, 20),
}

# (食指, 中指, 无名指, 小指, 拇指) -> 滤镜编号
GESTURE_TABLE = {
    (True, False, False, False, False): 1,
    (True, True, False, False, False): 2,
    (True, True, True, False, False): 3,
}


def distance(p: Point, q: Point) -> float:
    return math.hypot(q[0] - p[0], q[1] - p[1])


def landmarks_to_annotations(landmarks: Sequence, width: int, height: int) -> Dict[str, list]:
    """
    将 21 个归一化关键点转换为按手指命名的像素坐标
    :param landmarks: 具有 x / y 属性 (0-1) 的关键点序列
    :return: {"palm_base": [pt], "thumb": [pt x4], ...}，不足 21 点时返回空字典
    """
    if landmarks is None or len(landmarks) < 21:
        return {}
    points = [(lm.x * width, lm.y * height) for lm in landmarks]
    return {name: [points[i] for i in ids] for name, ids in LANDMARK_GROUPS.items()}


class GestureClassifier:
    """手指伸展状态判定 + 决策表"""

    def __init__(self, thresholds: Optional[Dict[str, float]] = None,
                 default_threshold: float = DEFAULT_FINGER_THRESHOLD):
        self.thresholds = dict(FINGER_THRESHOLDS if thresholds is None else thresholds)
        self.default_threshold = default_threshold

    def threshold_for(self, finger: str) -> float:
        return self.thresholds.get(finger, self.default_threshold)

    def finger_states(self, fingers: Dict[str, Tuple[Point, Point]],
                      reference_distance: float) -> Dict[str, bool]:
        """
        计算每根手指是否伸展
        :param fingers: 手指名 -> (指节点, 指尖点)，缺失的手指视为弯曲
        :param reference_distance: 掌根到中指尖的距离
        """
        states = {}
        for name in FINGER_NAMES:
            pair = fingers.get(name)
            if not pair or reference_distance <= 0:
                states[name] = False
                continue
            proximal, tip = pair
            ratio = distance(proximal, tip) / reference_distance
            states[name] = ratio > self.threshold_for(name)
        return states

    def classify(self, fingers: Optional[Dict[str, Tuple[Point, Point]]],
                 reference_distance: Optional[float],
                 palm_base: Optional[Point] = None,
                 exclusion: Optional[FaceBox] = None) -> int:
        """
        :param exclusion: 排除区域 (通常是人脸框)，掌根落在其中时返回 0
        :return: 滤镜编号 0-3
        """
        if not fingers or reference_distance is None:
            return 0
        if reference_distance <= 0:
            return 0
        if exclusion is not None and palm_base is not None and exclusion.contains(palm_base):
            return 0

        states = self.finger_states(fingers, reference_distance)
        key = (states["index"], states["middle"], states["ring"],
               states["pinky"], states["thumb"])
        return GESTURE_TABLE.get(key, 0)

    def classify_hand(self, annotations: Optional[Dict[str, list]],
                      exclusion: Optional[FaceBox] = None) -> int:
        """
        由单只手的关键点注释分类
        参考距离取掌根到中指尖，每根手指取第 2 个点 (PIP) 到指尖
        """
        if not annotations:
            return 0
        palm = annotations.get("palm_base")
        middle = annotations.get("middle")
        if not palm or not middle or len(middle) < 4:
            return 0

        palm_base = palm[0]
        fingers = {}
        for name in FINGER_NAMES:
            points = annotations.get(name)
            if points and len(points) >= 4:
                fingers[name] = (points[1], points[3])

        return self.classify(fingers, distance(palm_base, middle[3]),
                             palm_base=palm_base, exclusion=exclusion)

    def classify_hands(self, hands: Optional[Iterable[Dict[str, list]]],
                       exclusion: Optional[FaceBox] = None) -> int:
        """只处理第一只手；无检测结果时返回 0"""
        if not hands:
            return 0
        for annotations in hands:
            return self.classify_hand(annotations, exclusion)
        return 0
