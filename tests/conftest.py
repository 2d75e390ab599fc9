import pytest

from posematch import GameConfig, Keypoint, Skeleton, default_target_poses


def person(target, cx, cy=240.0, scale=80.0, score=0.9, drop=()):
    """목표 포즈를 픽셀 좌표로 옮긴 가짜 검출 (어깨 너비 = scale)"""
    kps = [
        Keypoint(name, cx + k.x * scale, cy + k.y * scale, score)
        for name, k in target.keypoints.items()
        if name not in drop
    ]
    return Skeleton(kps, score)


def shifted(skeleton, dx, dy=0.0):
    return Skeleton([k.moved(k.x + dx, k.y + dy) for k in skeleton.keypoints], skeleton.score)


def target_by_id(pose_id):
    for t in default_target_poses():
        if t.id == pose_id:
            return t
    raise KeyError(pose_id)


class FakeClock:
    def __init__(self, t=0.0):
        self.t = t

    def __call__(self):
        return self.t


@pytest.fixture
def config():
    return GameConfig()


@pytest.fixture
def standing():
    return target_by_id("stand_neutral")
