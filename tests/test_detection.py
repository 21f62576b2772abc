"""
检测结果单元与后台检测线程测试
"""

import threading
import time

from pixelpipe.detection import DetectionWorker, FaceBox, LatestResult


def wait_for(predicate, timeout=2.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


class TestFaceBox:

    def test_contains_is_inclusive(self):
        box = FaceBox(10, 20, 30, 40)
        assert box.contains((10, 20))
        assert box.contains((40, 60))
        assert box.contains((25, 30))
        assert not box.contains((9, 30))
        assert not box.contains((25, 61))


class TestLatestResult:

    def test_empty_cell_returns_none(self):
        assert LatestResult().get() is None

    def test_publish_overwrites(self):
        cell = LatestResult()
        cell.publish(1)
        cell.publish(2)
        assert cell.get() == 2

    def test_clear(self):
        cell = LatestResult()
        cell.publish("x")
        cell.clear()
        assert cell.get() is None


class TestDetectionWorker:

    def test_publishes_latest_result(self):
        worker = DetectionWorker(lambda: 21, lambda frame: frame * 2, interval=0.01)
        worker.start()
        try:
            assert wait_for(lambda: worker.result.get() == 42)
            assert worker.is_running
        finally:
            worker.stop()
        assert not worker.is_running

    def test_skips_missing_frames(self):
        calls = []
        worker = DetectionWorker(lambda: None, calls.append, interval=0.01)
        worker.start()
        time.sleep(0.1)
        worker.stop()
        assert calls == []
        assert worker.result.get() is None

    def test_detector_failure_clears_result(self):
        failed = threading.Event()
        result = LatestResult()
        result.publish("stale")

        def detect(frame):
            failed.set()
            raise ValueError("model error")

        worker = DetectionWorker(lambda: "frame", detect, result=result, interval=0.01)
        worker.start()
        try:
            assert failed.wait(2.0)
            assert wait_for(lambda: result.get() is None)
            assert worker.is_running
        finally:
            worker.stop()

    def test_start_twice_keeps_one_thread(self):
        worker = DetectionWorker(lambda: 1, lambda frame: frame, interval=0.01)
        worker.start()
        thread = worker._thread
        worker.start()
        assert worker._thread is thread
        worker.stop()

    def test_restart_after_slow_stop_retires_old_thread(self):
        release = threading.Event()
        threads = []

        def detect(frame):
            threads.append(threading.current_thread())
            release.wait(2.0)
            return frame

        worker = DetectionWorker(lambda: 1, detect)
        worker.start()
        try:
            assert wait_for(lambda: threads)
            first = threads[0]
            assert worker.stop(timeout=0.05) is False
            worker.start()
            release.set()
            assert wait_for(lambda: not first.is_alive())
            assert worker.is_running
        finally:
            release.set()
            assert worker.stop()
