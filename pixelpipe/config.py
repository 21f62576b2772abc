"""
配置常量 - 所有可调参数集中在此处
"""

# ======================== 画面与网格 ========================

CAM_WIDTH = 160
CAM_HEIGHT = 120

CANVAS_WIDTH = 520
CANVAS_HEIGHT = 760

# 网格左上角与单元格间距
GRID_BASE_X = 10
GRID_BASE_Y = 10
GRID_PADDING_X = 10
GRID_PADDING_Y = 30

# ======================== 阈值 ========================

# 滑块默认值 (0-255)
DEFAULT_THRESHOLD = 128

# 亮度增益 (灰度 +20%)
BRIGHTNESS_GAIN = 1.2

# 手指伸展比例阈值 (指节->指尖 / 掌根->中指尖)
FINGER_THRESHOLDS = {
    "index": 0.23,
    "middle": 0.25,
    "ring": 0.22,
}
# 拇指、小指没有单独调参，使用默认值
DEFAULT_FINGER_THRESHOLD = 0.35

# ======================== 人脸区域处理 ========================

PIXELATE_BLOCK_SIZE = 5
BLUR_KERNEL_SIZE = 21

# ======================== MediaPipe ========================

MODEL_DIR = "./model"
MODEL_PATH = "./model/hand_landmarker.task"
MODEL_URL = ("https://storage.googleapis.com/mediapipe-models/hand_landmarker/"
             "hand_landmarker/float16/latest/hand_landmarker.task")
MP_NUM_HANDS = 1
MP_MIN_DETECTION_CONFIDENCE = 0.7
MP_MIN_PRESENCE_CONFIDENCE = 0.5

# ======================== 输出 ========================

OUTPUT_DIR = "./data/output"
