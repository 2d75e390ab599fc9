"""
검출기 비동기 호출 (작업 스레드 1개 + 타임아웃)
"""

from concurrent.futures import ThreadPoolExecutor, wait
from concurrent.futures import TimeoutError as FutureTimeout

from .errors import DetectorError
from .utils import get_logger

logger = get_logger(__name__)


class DetectionRunner:
    """
    detector.estimate(frame, max_poses=..., mirror=...) 를 별도 스레드에서 실행한다.
    timeout 안에 끝나지 않으면 None 을 돌려주고(프레임 건너뜀), 다음 호출에서 같은 작업을 계속 기다린다.
    동시에 두 개의 검출이 진행되는 일은 없다.
    """

    def __init__(self, detector, timeout_sec=1.0):
        self.detector = detector
        self.timeout_sec = timeout_sec
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pose-detector")
        self._pending = None
        self.stalled_ticks = 0

    @property
    def busy(self):
        return self._pending is not None and not self._pending.done()

    def run(self, frame, max_poses=4, mirror=True):
        if self._pending is None:
            self._pending = self._pool.submit(self.detector.estimate, frame, max_poses=max_poses, mirror=mirror)
        try:
            result = self._pending.result(timeout=self.timeout_sec)
        except FutureTimeout:
            self.stalled_ticks += 1
            logger.warning(f"detector still running after {self.timeout_sec:.2f}s; skipping frame")
            return None
        except Exception as e:
            self._pending = None
            raise DetectorError(f"pose estimation failed: {e}") from e
        self._pending = None
        self.stalled_ticks = 0
        return list(result) if result else []

    def close(self, wait_sec=5.0):
        """진행 중인 검출이 끝나기를 최대 wait_sec 기다린 뒤 검출기를 닫는다."""
        pending, self._pending = self._pending, None
        if pending is not None:
            done, _ = wait([pending], timeout=wait_sec)
            if not done:
                # 검출 도중에 모델을 닫으면 안 되므로 검출기는 그대로 둔다
                logger.warning(f"detector still running after {wait_sec:.1f}s; not closing it")
                self._pool.shutdown(wait=False, cancel_futures=True)
                return
        self._pool.shutdown(wait=True, cancel_futures=True)
        close = getattr(self.detector, "close", None)
        if close is not None:
            close()
