"""
逐像素图像变换管线 - 主入口程序

功能：
- 实时模式：摄像头画面经过各个算子，以网格形式显示；手势切换整帧滤镜，
  按键切换人脸区域特效。
- 图片模式：对指定图片生成网格结果并保存。
- 演示模式：依次展示所有手势滤镜。
手势映射关系:
- 食指                -> 1 灰度
- 食指 + 中指         -> 2 HSV
- 食指 + 中指 + 无名指 -> 3 YCbCr
"""

import os
import time
import logging
import argparse

import cv2

from pixelpipe import config
from pixelpipe.channel import CHANNELS
from pixelpipe.colorspace import HSV_COMPONENTS, YCBCR_COMPONENTS
from pixelpipe.detection import DetectionWorker, FaceBox, LatestResult
from pixelpipe.display import CanvasDisplay, draw_filter_info, draw_hand_annotations
from pixelpipe.facedetector import FaceDetector
from pixelpipe.gesture import GestureClassifier
from pixelpipe.imagefilter import FILTER_NAMES, FilterController
from pixelpipe.logger import setup_logging
from pixelpipe.pipeline import FrameSettings, ProcessingPipeline
from pixelpipe.pixelbuffer import PixelBuffer

logger = logging.getLogger("pixelpipe.main")

WINDOW_NAME = "Pixel Pipeline"
CONTROLS_WINDOW = "Controls"


def probe_camera(camera_index: int) -> bool:
    """检测摄像头是否可用 (一次性)"""
    cap = cv2.VideoCapture(camera_index)
    try:
        if not cap.isOpened():
            return False
        success, _ = cap.read()
        return success
    finally:
        cap.release()


def scale_box(box, sx: float, sy: float):
    """把人脸框从检测分辨率缩放到网格分辨率"""
    if box is None:
        return None
    return FaceBox(int(box.x * sx), int(box.y * sy), int(box.w * sx), int(box.h * sy))


def to_cell(img):
    """把 BGR 图像缩放到单元格尺寸"""
    return PixelBuffer.from_bgr(cv2.resize(img, (config.CAM_WIDTH, config.CAM_HEIGHT)))


def draw_panel_labels(display, panels):
    for panel in panels:
        display.label(panel.name, panel.x, panel.y + config.CAM_HEIGHT + 15)


class PixelPipelineApp:
    """实时处理程序"""

    def __init__(self, camera_index: int = 0, output_dir: str = config.OUTPUT_DIR):
        self.camera_index = camera_index
        self.output_dir = output_dir
        self.pipeline = ProcessingPipeline()
        self.display = CanvasDisplay()
        self.classifier = GestureClassifier()
        self.filter_controller = FilterController()

        self.latest_frame = LatestResult()
        self.face_worker = None
        self.hand_worker = None
        self.hand_detector = None

        self.snapshot = None
        self.face_modification = None
        self.current_gesture = 0

        print("=" * 60)
        print("逐像素图像变换管线")
        print("=" * 60)
        print("\n手势映射关系:")
        for selector, name in FILTER_NAMES.items():
            print(f"  {selector} → {name}")
        print("\n控制按键:")
        print("  Space → 拍照 (冻结画面)")
        print("  L     → 回到实时画面")
        print("  1-4   → 人脸特效 (灰度/模糊/HSV/马赛克)")
        print("  0     → 取消人脸特效")
        print("  S     → 保存网格图")
        print("  Q/ESC → 退出")
        print("=" * 60 + "\n")

    def _start_detectors(self):
        """启动后台检测线程，模型不可用时跳过对应检测"""
        try:
            face_detector = FaceDetector()
            self.face_worker = DetectionWorker(self.latest_frame.get, face_detector.detect,
                                               interval=0.03, name="face")
            self.face_worker.start()
        except RuntimeError:
            logger.exception("人脸检测不可用")

        try:
            # mediapipe 较重，只在实时模式下加载
            from pixelpipe.gesturedetector import HandDetector
            self.hand_detector = HandDetector()
            self.hand_worker = DetectionWorker(self.latest_frame.get, self.hand_detector.detect,
                                               interval=0.03, name="hand")
            self.hand_worker.start()
        except (OSError, RuntimeError, ImportError):
            logger.exception("手部检测不可用")

    def _stop_detectors(self):
        if self.face_worker is not None:
            self.face_worker.stop()
        hand_stopped = self.hand_worker is None or self.hand_worker.stop()
        # 检测线程仍在运行时不能关闭模型
        if self.hand_detector is not None and hand_stopped:
            self.hand_detector.close()
            self.hand_detector = None

    def _create_controls(self):
        cv2.namedWindow(CONTROLS_WINDOW)
        for channel in CHANNELS:
            cv2.createTrackbar(f"{channel} thr", CONTROLS_WINDOW,
                               config.DEFAULT_THRESHOLD, 255, lambda v: None)
        cv2.createTrackbar("HSV comp", CONTROLS_WINDOW, 0, len(HSV_COMPONENTS) - 1, lambda v: None)
        cv2.createTrackbar("HSV thr", CONTROLS_WINDOW, config.DEFAULT_THRESHOLD, 255, lambda v: None)
        cv2.createTrackbar("YCbCr comp", CONTROLS_WINDOW, 0, len(YCBCR_COMPONENTS) - 1,
                           lambda v: None)
        cv2.createTrackbar("YCbCr thr", CONTROLS_WINDOW, config.DEFAULT_THRESHOLD, 255,
                           lambda v: None)

    def read_settings(self) -> FrameSettings:
        """每帧读取一次滑块"""
        def pos(name):
            return cv2.getTrackbarPos(name, CONTROLS_WINDOW)

        return FrameSettings(
            red_threshold=pos("red thr"),
            green_threshold=pos("green thr"),
            blue_threshold=pos("blue thr"),
            hsv_component=HSV_COMPONENTS[pos("HSV comp")],
            hsv_threshold=pos("HSV thr"),
            ycbcr_component=YCBCR_COMPONENTS[pos("YCbCr comp")],
            ycbcr_threshold=pos("YCbCr thr"),
            face_modification=self.face_modification,
            active_filter=self.filter_controller.active_filter,
        )

    def process_frame(self, frame):
        """处理单帧图像 (BGR)，返回画布"""
        self.latest_frame.publish(frame)

        face_box = self.face_worker.result.get() if self.face_worker else None
        hands = self.hand_worker.result.get() if self.hand_worker else None

        # 掌根落在人脸框内的手不参与分类
        self.current_gesture = self.classifier.classify_hands(hands, exclusion=face_box)
        self.filter_controller.update_by_gesture(self.current_gesture)

        source = self.snapshot if self.snapshot is not None else frame
        h, w = source.shape[:2]
        cell_box = scale_box(face_box, config.CAM_WIDTH / w, config.CAM_HEIGHT / h)

        self.display.clear()
        panels = self.pipeline.render(to_cell(source), self.read_settings(), self.display,
                                      face_box=cell_box)
        if self.snapshot is None:
            # 关键点只画在实时原图面板上
            original = panels[0]
            draw_hand_annotations(self.display.canvas, hands,
                                  scale=(config.CAM_WIDTH / w, config.CAM_HEIGHT / h),
                                  offset=(original.x, original.y))
        draw_panel_labels(self.display, panels)
        return self.display.canvas

    def save_canvas(self, canvas):
        """保存当前网格图"""
        os.makedirs(self.output_dir, exist_ok=True)
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        filter_name = self.filter_controller.get_info_text()
        filename = os.path.join(self.output_dir, f"grid_{timestamp}_{filter_name}.jpg")
        cv2.imwrite(filename, canvas)
        logger.info("已保存: %s", filename)

    def run(self):
        """运行主程序"""
        if not probe_camera(self.camera_index):
            logger.error("未检测到摄像头: %d", self.camera_index)
            return

        cap = cv2.VideoCapture(self.camera_index)
        if not cap.isOpened():
            logger.error("无法打开摄像头")
            return

        logger.info("摄像头已打开，系统开始运行")
        self._create_controls()
        self._start_detectors()

        try:
            while True:
                success, frame = cap.read()
                if not success:
                    logger.error("无法读取摄像头")
                    break

                # 镜像翻转
                frame = cv2.flip(frame, 1)
                canvas = self.process_frame(frame)

                display_canvas = draw_filter_info(
                    canvas.copy(), self.filter_controller.get_info_text(),
                    self.current_gesture, position="bottom")
                cv2.imshow(WINDOW_NAME, display_canvas)

                key = cv2.waitKey(1) & 0xFF
                if key == ord('q') or key == 27:  # Q 或 ESC
                    logger.info("用户退出程序")
                    break
                elif key == ord(' '):
                    self.snapshot = frame.copy()
                    logger.info("已拍照")
                elif key in (ord('l'), ord('L')):
                    self.snapshot = None
                elif key in (ord('1'), ord('2'), ord('3'), ord('4')):
                    self.face_modification = chr(key)
                elif key == ord('0'):
                    self.face_modification = None
                elif key in (ord('s'), ord('S')):
                    self.save_canvas(canvas)

        except KeyboardInterrupt:
            logger.info("已被中断")

        finally:
            self._stop_detectors()
            cap.release()
            cv2.destroyAllWindows()
            logger.info("系统关闭")


def run_image_mode(image_path: str, output_dir: str, face_modification: str = None):
    """图片模式：生成网格图并保存"""
    if not os.path.exists(image_path):
        logger.error("图片不存在: %s", image_path)
        return

    img = cv2.imread(image_path)
    if img is None:
        logger.error("无法读取图片: %s", image_path)
        return

    face_box = None
    if face_modification:
        h, w = img.shape[:2]
        face_box = scale_box(FaceDetector().detect(img),
                             config.CAM_WIDTH / w, config.CAM_HEIGHT / h)

    pipeline = ProcessingPipeline()
    display = CanvasDisplay()
    settings = FrameSettings(face_modification=face_modification)
    panels = pipeline.render(to_cell(img), settings, display, face_box=face_box)
    draw_panel_labels(display, panels)

    os.makedirs(output_dir, exist_ok=True)
    name = os.path.splitext(os.path.basename(image_path))[0]
    output_path = os.path.join(output_dir, f"grid_{name}.jpg")
    cv2.imwrite(output_path, display.canvas)
    logger.info("结果已保存至: %s", output_path)

    cv2.imshow(WINDOW_NAME, display.canvas)
    print("按任意键关闭图片窗口...")
    cv2.waitKey(0)
    cv2.destroyAllWindows()


def run_demo_mode(image_path: str):
    """演示模式：依次展示所有手势滤镜"""
    if not os.path.exists(image_path):
        logger.error("测试图片不存在: %s", image_path)
        return

    frame = PixelBuffer.from_bgr(cv2.imread(image_path))
    controller = FilterController()

    for selector, filter_name in FILTER_NAMES.items():
        controller.update_by_gesture(selector)
        result = controller.filter.apply_filter(frame, selector).to_bgr()
        result = draw_filter_info(result, filter_name, selector)

        cv2.imshow(f"{WINDOW_NAME} - Demo", result)
        print(f"  {filter_name:12} (按任意键查看下一个滤镜...)")
        cv2.waitKey(0)

    cv2.destroyAllWindows()
    print("\n✓ 演示完成")


def main():
    """主函数"""
    parser = argparse.ArgumentParser(
        description="逐像素图像变换管线",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--mode", default="realtime", choices=["realtime", "image", "demo"],
                        help="运行模式 (realtime: 实时视频, image: 图片网格, demo: 滤镜演示)")
    parser.add_argument("--img_path", default="./data/input/apple.png", type=str,
                        help="图片路径 (image / demo 模式需要)")
    parser.add_argument("--camera", default=0, type=int, help="摄像头编号")
    parser.add_argument("--face_mod", default=None, choices=["1", "2", "3", "4"],
                        help="人脸特效编号 (仅 image 模式)")
    parser.add_argument("--output_dir", default=config.OUTPUT_DIR, help="输出目录")
    parser.add_argument("--log_level", default="INFO", help="日志级别")
    parser.add_argument("--log_file", default=None, help="日志文件")

    args = parser.parse_args()
    setup_logging(args.log_level, args.log_file)

    if args.mode == "realtime":
        PixelPipelineApp(args.camera, args.output_dir).run()
    elif args.mode == "image":
        run_image_mode(args.img_path, args.output_dir, args.face_mod)
    elif args.mode == "demo":
        run_demo_mode(args.img_path)


if __name__ == "__main__":
    main()
