"""
检测结果的单槽共享单元与后台检测线程

外部检测器在后台线程中不断产出结果，写入单槽 (新结果覆盖旧结果)；
处理管线每帧同步读取一次最新结果。
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FaceBox:
    """矩形区域 (人脸框，也用作手势排除区域)"""
    x: int
    y: int
    w: int
    h: int

    def contains(self, point: Tuple[float, float]) -> bool:
        """点是否落在矩形内 (含边界)"""
        px, py = point[0], point[1]
        return self.x <= px <= self.x + self.w and self.y <= py <= self.y + self.h


class LatestResult:
    """单槽、写覆盖、加锁的共享单元"""

    def __init__(self):
        self._lock = threading.Lock()
        self._value = None

    def publish(self, value):
        with self._lock:
            self._value = value

    def get(self):
        """返回最近一次发布的结果，没有时返回 None"""
        with self._lock:
            return self._value

    def clear(self):
        self.publish(None)


class DetectionWorker:
    """
    后台检测线程
    循环: 取帧 -> 检测 -> 发布到 LatestResult
    停止即不再调度下一次检测，没有需要取消的回调
    """

    def __init__(self, frame_source: Callable[[], Any], detect: Callable[[Any], Any],
                 result: Optional[LatestResult] = None, interval: float = 0.0,
                 name: str = "detector"):
        """
        :param frame_source: 返回当前帧的函数，可以返回 None
        :param detect: 检测函数，返回检测结果 (无检测时返回 None)
        :param result: 结果单元，省略时自动创建
        :param interval: 两次检测之间的等待时间（秒）
        """
        self.frame_source = frame_source
        self.detect = detect
        self.result = result if result is not None else LatestResult()
        self.interval = interval
        self.name = name
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.is_running:
            return
        # 每个线程使用自己的停止信号，停止超时的旧线程不会被重新唤醒
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._run, args=(self._stop_event,),
                                        name=self.name, daemon=True)
        self._thread.start()
        logger.info("检测线程已启动: %s", self.name)

    def stop(self, timeout: float = 2.0) -> bool:
        """
        :return: 线程是否已在 timeout 内退出 (检测调用过慢时为 False，
                 旧线程会在当前检测结束后自行退出)
        """
        self._stop_event.set()
        stopped = True
        if self._thread is not None:
            self._thread.join(timeout)
            stopped = not self._thread.is_alive()
            self._thread = None
        if stopped:
            logger.info("检测线程已停止: %s", self.name)
        else:
            logger.warning("检测线程未能在 %.1f 秒内停止: %s", timeout, self.name)
        return stopped

    def _run(self, stop_event: threading.Event):
        while not stop_event.is_set():
            frame = self.frame_source()
            if frame is not None:
                try:
                    self.result.publish(self.detect(frame))
                except Exception:
                    # 检测失败视为本帧无检测结果
                    logger.exception("检测失败: %s", self.name)
                    self.result.clear()
            stop_event.wait(self.interval)
