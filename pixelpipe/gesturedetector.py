"""
手部关键点检测 (MediaPipe HandLandmarker)
输出按手指命名的关键点注释，供 GestureClassifier 使用
"""

import os
import logging
import urllib.request

import cv2
import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision
from mediapipe.tasks.python.vision import RunningMode

from .config import (MODEL_DIR, MODEL_PATH, MODEL_URL, MP_NUM_HANDS,
                     MP_MIN_DETECTION_CONFIDENCE, MP_MIN_PRESENCE_CONFIDENCE)
from .gesture import landmarks_to_annotations

logger = logging.getLogger(__name__)


class HandDetector:
    def __init__(self, model_path: str = MODEL_PATH):
        """初始化手部检测器"""
        model_path = self._ensure_model_file(model_path)

        base_options = python.BaseOptions(model_asset_path=model_path)
        options = vision.HandLandmarkerOptions(
            base_options=base_options,
            running_mode=RunningMode.IMAGE,
            num_hands=MP_NUM_HANDS,
            min_hand_detection_confidence=MP_MIN_DETECTION_CONFIDENCE,
            min_hand_presence_confidence=MP_MIN_PRESENCE_CONFIDENCE
        )

        self.hand_landmarker = vision.HandLandmarker.create_from_options(options)
        logger.info("手部检测模型已加载: %s", model_path)

    @staticmethod
    def _ensure_model_file(model_path):
        """确保模型文件存在"""
        if os.path.exists(model_path):
            return model_path

        os.makedirs(os.path.dirname(model_path) or MODEL_DIR, exist_ok=True)
        logger.info("正在下载手部检测模型...")
        try:
            urllib.request.urlretrieve(MODEL_URL, model_path)
        except OSError:
            logger.exception("下载模型失败")
            raise
        logger.info("模型已下载到: %s", model_path)
        return model_path

    def detect(self, img):
        """
        检测手部关键点
        :param img: OpenCV BGR 图像
        :return: 每只手的关键点注释列表 (像素坐标)，未检测到时为空列表
        """
        img_rgb = cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
        h, w = img.shape[:2]

        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=img_rgb)
        results = self.hand_landmarker.detect(mp_image)

        hands = []
        for hand_landmarks in results.hand_landmarks or []:
            annotations = landmarks_to_annotations(hand_landmarks, w, h)
            if annotations:
                hands.append(annotations)
        return hands

    def close(self):
        self.hand_landmarker.close()
