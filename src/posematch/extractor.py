"""
포즈 추출기 클래스 (MediaPipe, 최대 4인)
"""

try:
    import mediapipe as mp
except ImportError:
    raise SystemExit("pip install mediapipe opencv-python numpy")

import time

import cv2
import numpy as np

from .keypoints import Keypoint, Skeleton
from .utils import get_logger

logger = get_logger(__name__)

# BlazePose 33 landmark index -> COCO 17 이름
LANDMARK_NAMES = {
    0: "nose",
    2: "left_eye", 5: "right_eye",
    7: "left_ear", 8: "right_ear",
    11: "left_shoulder", 12: "right_shoulder",
    13: "left_elbow", 14: "right_elbow",
    15: "left_wrist", 16: "right_wrist",
    23: "left_hip", 24: "right_hip",
    25: "left_knee", 26: "right_knee",
    27: "left_ankle", 28: "right_ankle",
}


def landmarks_to_skeleton(landmarks, width, height, mirror=True):
    """정규화 landmark 리스트 -> 픽셀 좌표 Skeleton. mirror 면 좌우 반전 (거울 화면 기준)."""
    kps = []
    for idx, name in LANDMARK_NAMES.items():
        p = landmarks[idx]
        x = p.x * width
        if mirror:
            x = width - x
        vis = getattr(p, "visibility", None)
        score = 1.0 if vis is None else float(np.clip(vis, 0.0, 1.0))
        kps.append(Keypoint(name, float(x), float(p.y * height), score))
    score = float(np.mean([k.score for k in kps])) if kps else 0.0
    return Skeleton(kps, score)


class PoseExtractor:
    """
    model_path 가 있으면 Tasks API 의 PoseLandmarker (multi-pose).
    없으면 기존 solutions.pose (1인) 로 대체한다.
    """

    def __init__(self, model_path=None, max_poses=4, model_complexity=1,
                 min_detection_confidence=0.15, min_tracking_confidence=0.15):
        self.max_poses = max_poses
        self.landmarker = None
        self.pose = None
        self._t0 = time.perf_counter()
        self._last_ts = -1
        if model_path:
            vision = mp.tasks.vision
            options = vision.PoseLandmarkerOptions(
                base_options=mp.tasks.BaseOptions(model_asset_path=model_path),
                running_mode=vision.RunningMode.VIDEO,
                num_poses=max_poses,
                min_pose_detection_confidence=min_detection_confidence,
                min_pose_presence_confidence=min_detection_confidence,
                min_tracking_confidence=min_tracking_confidence,
            )
            self.landmarker = vision.PoseLandmarker.create_from_options(options)
            logger.info(f"PoseLandmarker loaded: {model_path} (num_poses={max_poses})")
        else:
            logger.warning("no pose_landmarker model given; falling back to single-person mp.solutions.pose")
            try:
                solutions_pose = mp.solutions.pose
            except AttributeError:
                raise RuntimeError("this mediapipe build has no solutions.pose; pass --model <pose_landmarker.task>") from None
            self.pose = solutions_pose.Pose(
                static_image_mode=False,
                model_complexity=model_complexity,
                enable_segmentation=False,
                min_detection_confidence=min_detection_confidence,
                min_tracking_confidence=min_tracking_confidence,
            )

    def _timestamp_ms(self):
        # VIDEO 모드는 단조 증가 timestamp 필요
        ts = int((time.perf_counter() - self._t0) * 1000)
        ts = max(ts, self._last_ts + 1)
        self._last_ts = ts
        return ts

    def estimate(self, bgr, max_poses=4, mirror=True):
        h, w = bgr.shape[:2]
        rgb = cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)
        if self.landmarker is not None:
            image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
            res = self.landmarker.detect_for_video(image, self._timestamp_ms())
            poses = res.pose_landmarks or []
        else:
            res = self.pose.process(rgb)
            poses = [res.pose_landmarks.landmark] if res.pose_landmarks else []
        n = min(max_poses, self.max_poses)
        return [landmarks_to_skeleton(lm, w, h, mirror=mirror) for lm in poses[:n]]

    def close(self):
        if self.landmarker is not None:
            self.landmarker.close()
        if self.pose is not None:
            self.pose.close()
