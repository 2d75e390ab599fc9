"""
유사도 계산: 팔 상태 범주 비교(categorical)와 관절 거리 비교(distance)
"""

import math

UP_MARGIN = 0.12       # 손목이 어깨보다 이만큼 이상 위면 'up'
HIPS_MARGIN = 0.06     # 손목이 골반 높이 근처면 'hips'
HIP_FALLBACK = 0.55    # 골반이 안 보일 때 어깨 아래 고정 오프셋 (어깨 너비 단위)
DISTANCE_SENSITIVITY = 1.5


def arm_state(wrist_y, shoulder_y, hip_y):
    if wrist_y - shoulder_y <= -UP_MARGIN:
        return "up"
    if abs(wrist_y - hip_y) < HIPS_MARGIN:
        return "hips"
    return "down"


def arm_states(keypoint_map):
    """정규화 좌표의 (왼팔, 오른팔) 상태. 어깨가 없으면 None."""
    ls = keypoint_map.get("left_shoulder")
    rs = keypoint_map.get("right_shoulder")
    if ls is None or rs is None:
        return None
    shoulder_y = (ls.y + rs.y) / 2.0
    lh = keypoint_map.get("left_hip")
    rh = keypoint_map.get("right_hip")
    hip_y = (lh.y + rh.y) / 2.0 if lh is not None and rh is not None else shoulder_y + HIP_FALLBACK

    states = []
    for side in ("left_wrist", "right_wrist"):
        wrist = keypoint_map.get(side)
        states.append(arm_state(wrist.y, shoulder_y, hip_y) if wrist is not None else "down")
    return tuple(states)


def categorical_similarity(norm_user, target_keypoints, sensitivity=None):
    """양팔 상태가 모두 같을 때만 1.0, 아니면 0.0 (부분 점수 없음)"""
    if not norm_user or not target_keypoints:
        return 0.0
    user = arm_states(norm_user)
    target = arm_states(target_keypoints)
    if user is None or target is None:
        return 0.0
    return 1.0 if user == target else 0.0


def distance_similarity(norm_user, target_keypoints, sensitivity=DISTANCE_SENSITIVITY):
    """양쪽에 모두 있는 관절별 max(0, 1 - d*k) 의 평균"""
    if not norm_user or not target_keypoints:
        return 0.0
    k = DISTANCE_SENSITIVITY if sensitivity is None else sensitivity
    scores = []
    for name, t in target_keypoints.items():
        u = norm_user.get(name)
        if u is None:
            continue
        d = math.hypot(u.x - t.x, u.y - t.y)
        scores.append(max(0.0, 1.0 - d * k))
    if not scores:
        return 0.0
    return float(sum(scores) / len(scores))


SIMILARITY_POLICIES = {
    "categorical": categorical_similarity,
    "distance": distance_similarity,
}


def pose_similarity(norm_user, target_keypoints, policy="categorical", sensitivity=None):
    try:
        fn = SIMILARITY_POLICIES[policy]
    except KeyError:
        raise ValueError(f"unknown similarity policy: {policy!r}") from None
    return fn(norm_user, target_keypoints, sensitivity)
