"""
목표 포즈 라이브러리와 순환(수동/자동 넘김)
"""

from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple

from .keypoints import Keypoint
from .utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TargetPose:
    """어깨 중점 원점, 어깨 너비 1 단위 좌표의 목표 포즈"""
    id: str
    name: str
    keypoints: Mapping[str, Keypoint]

    @classmethod
    def from_points(cls, pose_id: str, name: str, points: Mapping[str, Sequence[float]]) -> "TargetPose":
        kps = {n: Keypoint(n, float(p[0]), float(p[1]), 1.0) for n, p in points.items()}
        return cls(pose_id, name, MappingProxyType(_to_shoulder_frame(kps)))


def _to_shoulder_frame(kps):
    """
    어깨 중점 원점 / 어깨 너비 1 로 맞춘다.
    normalize_pose 와 달리 너비 1 미만도 그대로 나눈다 (작성 좌표가 이미 단위 공간이므로).
    어깨가 없거나 두 어깨가 겹치면 그대로 둔다.
    """
    ls = kps.get("left_shoulder")
    rs = kps.get("right_shoulder")
    if ls is None or rs is None:
        return kps
    width = math.hypot(rs.x - ls.x, rs.y - ls.y)
    if width == 0.0:
        return kps
    cx = (ls.x + rs.x) / 2.0
    cy = (ls.y + rs.y) / 2.0
    return {n: k.moved((k.x - cx) / width, (k.y - cy) / width) for n, k in kps.items()}


STANDING = {
    "left_shoulder": (-0.5, -0.35),
    "right_shoulder": (0.5, -0.35),
    "left_elbow": (-0.6, -0.1),
    "right_elbow": (0.6, -0.1),
    "left_wrist": (-0.55, 0.15),
    "right_wrist": (0.55, 0.15),
    "left_hip": (-0.4, 0.25),
    "right_hip": (0.4, 0.25),
    "left_knee": (-0.45, 0.6),
    "right_knee": (0.45, 0.6),
    "left_ankle": (-0.45, 0.9),
    "right_ankle": (0.45, 0.9),
}


def _standing(**changes: Tuple[float, float]):
    pts = dict(STANDING)
    pts.update(changes)
    return pts


def default_target_poses():
    return [
        TargetPose.from_points("right_hand_up", "Right hand up",
                               _standing(right_elbow=(0.5, -0.5), right_wrist=(0.45, -0.75))),
        TargetPose.from_points("left_hand_up", "Left hand up",
                               _standing(left_elbow=(-0.5, -0.5), left_wrist=(-0.45, -0.75))),
        TargetPose.from_points("both_hands_up", "Both hands up",
                               _standing(left_elbow=(-0.5, -0.55), right_elbow=(0.5, -0.55),
                                         left_wrist=(-0.5, -0.8), right_wrist=(0.5, -0.8))),
        TargetPose.from_points("y_pose", "Y pose",
                               _standing(left_elbow=(-0.55, -0.5), right_elbow=(0.55, -0.5),
                                         left_wrist=(-0.7, -0.8), right_wrist=(0.7, -0.8))),
        TargetPose.from_points("hands_hips", "Hands on hips",
                               _standing(left_wrist=(-0.4, 0.2), right_wrist=(0.4, 0.2))),
        # 다리 포즈 예시 (팔 상태만 보는 categorical 정책에서는 stand_neutral 과 같게 판정됨)
        TargetPose.from_points("flamingo", "Flamingo",
                               _standing(right_knee=(0.7, 0.4), right_ankle=(0.7, 0.6))),
        TargetPose.from_points("stand_neutral", "Attention", _standing()),
    ]


def load_target_poses_json(json_path: str):
    """
    JSON 형식 예:
    [
      {"id": "t_pose", "name": "T pose",
       "keypoints": {"left_shoulder": [-0.5, 0.0], "right_shoulder": [0.5, 0.0], ...}}
    ]
    """
    if not os.path.exists(json_path):
        raise FileNotFoundError(f"{json_path} not found.")
    with open(json_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"top-level of {json_path} must be a list, got {type(data).__name__}")
    poses = []
    for i, item in enumerate(data):
        try:
            pose_id = str(item["id"])
            points = item["keypoints"]
        except (KeyError, TypeError):
            raise ValueError(f"{json_path}: entry {i} needs 'id' and 'keypoints'") from None
        poses.append(TargetPose.from_points(pose_id, str(item.get("name", pose_id)), points))
    logger.info(f"{len(poses)} target poses loaded from {json_path}")
    return poses


class TargetCycler:
    """현재 목표 포즈 인덱스 관리. auto_advance_sec 이 있으면 tick() 에서 시간 경과로 넘김."""

    def __init__(self, poses=None, auto_advance_sec: Optional[float] = None):
        self.poses = list(poses) if poses is not None else default_target_poses()
        if not self.poses:
            raise ValueError("target pose library is empty")
        self.index = 0
        self.auto_advance_sec = auto_advance_sec if auto_advance_sec and auto_advance_sec > 0 else None
        self._shown_at = None

    @property
    def current(self) -> TargetPose:
        return self.poses[self.index]

    def next(self, now: Optional[float] = None) -> TargetPose:
        self.index = (self.index + 1) % len(self.poses)
        self._shown_at = now
        logger.info(f"target pose -> {self.current.id}")
        return self.current

    def tick(self, now: float) -> bool:
        """자동 넘김 시점이면 다음 포즈로 넘기고 True."""
        if self.auto_advance_sec is None:
            return False
        if self._shown_at is None:
            self._shown_at = now
            return False
        if now - self._shown_at >= self.auto_advance_sec:
            self.next(now)
            return True
        return False
