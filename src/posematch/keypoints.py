"""
키포인트/스켈레톤 데이터 구조와 관절 그룹 테이블
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

# COCO 17 keypoints (MoveNet / BlazePose 공통 이름)
KEYPOINT_NAMES = (
    "nose",
    "left_eye", "right_eye",
    "left_ear", "right_ear",
    "left_shoulder", "right_shoulder",
    "left_elbow", "right_elbow",
    "left_wrist", "right_wrist",
    "left_hip", "right_hip",
    "left_knee", "right_knee",
    "left_ankle", "right_ankle",
)

SKELETON_EDGES = [
    ("left_shoulder", "right_shoulder"),
    ("left_shoulder", "left_elbow"),
    ("left_elbow", "left_wrist"),
    ("right_shoulder", "right_elbow"),
    ("right_elbow", "right_wrist"),
    ("left_shoulder", "left_hip"),
    ("right_shoulder", "right_hip"),
    ("left_hip", "right_hip"),
    ("left_hip", "left_knee"),
    ("left_knee", "left_ankle"),
    ("right_hip", "right_knee"),
    ("right_knee", "right_ankle"),
]


class JointGroup(str, Enum):
    TORSO = "torso"
    LIMBS = "limbs"
    EXTREMITIES = "extremities"
    HANDS = "hands"


# 부위별 스무딩 강도 선택용 (이름 문자열 검사 대신 한 번만 만드는 테이블)
JOINT_GROUPS: Dict[str, JointGroup] = {
    "left_shoulder": JointGroup.TORSO,
    "right_shoulder": JointGroup.TORSO,
    "left_hip": JointGroup.TORSO,
    "right_hip": JointGroup.TORSO,
    "left_elbow": JointGroup.LIMBS,
    "right_elbow": JointGroup.LIMBS,
    "left_knee": JointGroup.LIMBS,
    "right_knee": JointGroup.LIMBS,
    "left_wrist": JointGroup.HANDS,
    "right_wrist": JointGroup.HANDS,
    "left_ankle": JointGroup.EXTREMITIES,
    "right_ankle": JointGroup.EXTREMITIES,
    "nose": JointGroup.EXTREMITIES,
    "left_eye": JointGroup.EXTREMITIES,
    "right_eye": JointGroup.EXTREMITIES,
    "left_ear": JointGroup.EXTREMITIES,
    "right_ear": JointGroup.EXTREMITIES,
}


@dataclass(frozen=True)
class Keypoint:
    """단일 키포인트 (픽셀 좌표 또는 정규화 좌표)"""
    name: str
    x: float
    y: float
    score: float = 1.0

    def moved(self, x: float, y: float) -> "Keypoint":
        return Keypoint(self.name, float(x), float(y), self.score)


KeypointMap = Dict[str, Keypoint]


@dataclass
class Skeleton:
    """검출기가 한 프레임에서 찾은 한 사람의 포즈"""
    keypoints: List[Keypoint] = field(default_factory=list)
    score: float = 1.0

    def keypoint_map(self) -> KeypointMap:
        return keypoints_to_map(self.keypoints)


def keypoints_to_map(keypoints) -> KeypointMap:
    m = {}
    if not keypoints:
        return m
    for k in keypoints:
        if k is not None and k.name:
            m[k.name] = k
    return m


def joint_group(name: str) -> JointGroup:
    return JOINT_GROUPS.get(name, JointGroup.TORSO)
