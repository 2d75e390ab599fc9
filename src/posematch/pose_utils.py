"""
포즈 관련 유틸리티 함수들: 어깨 기준 정규화, 중심/손 위치, 포즈 간 거리, 스켈레톤 그리기
"""

import math

import cv2
import numpy as np

from .keypoints import SKELETON_EDGES, Keypoint

MIN_KEYPOINT_SCORE = 0.25

LEFT_PARTS = ("left_shoulder", "left_elbow", "left_wrist", "left_hip", "left_knee", "left_ankle")
RIGHT_PARTS = ("right_shoulder", "right_elbow", "right_wrist", "right_hip", "right_knee", "right_ankle")
FACE_PARTS = ("nose", "left_eye", "right_eye", "left_ear", "right_ear")

# 간단한 막대 인간 스타일 (BGR)
STYLE = {
    "left": (255, 255, 0),      # 왼쪽 반신 (시안)
    "right": (255, 0, 255),     # 오른쪽 반신 (마젠타)
    "body": (255, 255, 255),    # 몸통 (흰색)
    "matched": (0, 255, 0),
    "cooling": (0, 215, 255),
    "line_width": 6,
    "joint_radius": 5,
    "head_radius": 25,
}


def _confident(k, min_score):
    return k is not None and k.score >= min_score


def _midpoint(a, b):
    return ((a.x + b.x) / 2.0, (a.y + b.y) / 2.0)


def normalize_pose(keypoint_map, min_score=MIN_KEYPOINT_SCORE):
    """
    어깨 중점을 원점, 어깨 너비를 1 로 하는 좌표계로 변환한다.
    어깨가 하나라도 없거나 신뢰도가 낮으면 None.
    임계값 미만 키포인트는 결과에서 빠진다 (0 으로 채우지 않음).
    """
    if not keypoint_map:
        return None
    ls = keypoint_map.get("left_shoulder")
    rs = keypoint_map.get("right_shoulder")
    if not _confident(ls, min_score) or not _confident(rs, min_score):
        return None

    cx, cy = _midpoint(ls, rs)
    # 어깨가 겹쳐도 폭주하지 않도록 최소 1
    scale = max(math.hypot(rs.x - ls.x, rs.y - ls.y), 1.0)

    out = {}
    for name, k in keypoint_map.items():
        if k.score < min_score:
            continue
        out[name] = Keypoint(name, (k.x - cx) / scale, (k.y - cy) / scale, k.score)
    return out


def pose_center(keypoint_map, min_score=MIN_KEYPOINT_SCORE):
    """어깨 중점 -> 골반 중점 -> 신뢰 키포인트 무게중심 -> (0, 0) 순으로 중심을 정한다."""
    for left, right in (("left_shoulder", "right_shoulder"), ("left_hip", "right_hip")):
        a = keypoint_map.get(left)
        b = keypoint_map.get(right)
        if _confident(a, min_score) and _confident(b, min_score):
            return _midpoint(a, b)

    pts = [(k.x, k.y) for k in keypoint_map.values() if k.score >= min_score]
    if pts:
        c = np.mean(np.asarray(pts, dtype=np.float64), axis=0)
        return float(c[0]), float(c[1])
    return 0.0, 0.0


def pose_hands(keypoint_map, min_score=MIN_KEYPOINT_SCORE, fallback_offset=80.0, center=None):
    """양 손목 위치. 안 보이는 손은 중심에서 좌우로 fallback_offset 만큼 떨어진 점으로 대체."""
    if center is None:
        center = pose_center(keypoint_map, min_score)
    cx, cy = center
    lw = keypoint_map.get("left_wrist")
    rw = keypoint_map.get("right_wrist")
    left = (lw.x, lw.y) if _confident(lw, min_score) else (cx - fallback_offset, cy)
    right = (rw.x, rw.y) if _confident(rw, min_score) else (cx + fallback_offset, cy)
    return left, right


def pose_distance(map_a, map_b, min_score=MIN_KEYPOINT_SCORE,
                  center_weight=0.4, hand_weight=0.3, fallback_offset=80.0):
    """
    중심 거리와 양손 거리의 가중합.
    중심만 보면 서로 교차해 지나간 두 사람을 헷갈리므로 손 위치도 함께 본다.
    """
    ca = pose_center(map_a, min_score)
    cb = pose_center(map_b, min_score)
    la, ra = pose_hands(map_a, min_score, fallback_offset, center=ca)
    lb, rb = pose_hands(map_b, min_score, fallback_offset, center=cb)
    d_center = math.hypot(ca[0] - cb[0], ca[1] - cb[1])
    d_left = math.hypot(la[0] - lb[0], la[1] - lb[1])
    d_right = math.hypot(ra[0] - rb[0], ra[1] - rb[1])
    return d_center * center_weight + d_left * hand_weight + d_right * hand_weight


def _pt(k):
    return int(round(k.x)), int(round(k.y))


def draw_player_skeleton(image_bgr, keypoint_map, label=None, label_color=None,
                         min_score=MIN_KEYPOINT_SCORE, min_visible=5):
    """신뢰도 이상 관절만 막대 인간으로 그린다. 보이는 관절이 min_visible 미만이면 생략."""
    if not keypoint_map:
        return image_bgr
    km = {n: k for n, k in keypoint_map.items() if k.score >= min_score}
    if len(km) < min_visible:
        return image_bgr

    lw = STYLE["line_width"]

    def line(a, b, color):
        if a in km and b in km:
            cv2.line(image_bgr, _pt(km[a]), _pt(km[b]), color, lw, cv2.LINE_AA)

    for a, b in SKELETON_EDGES:
        if a.startswith("left") and b.startswith("left"):
            color = STYLE["left"]
        elif a.startswith("right") and b.startswith("right"):
            color = STYLE["right"]
        else:
            color = STYLE["body"]
        line(a, b, color)

    for name in LEFT_PARTS:
        if name in km:
            cv2.circle(image_bgr, _pt(km[name]), STYLE["joint_radius"], STYLE["left"], -1, cv2.LINE_AA)
    for name in RIGHT_PARTS:
        if name in km:
            cv2.circle(image_bgr, _pt(km[name]), STYLE["joint_radius"], STYLE["right"], -1, cv2.LINE_AA)

    # 얼굴: 얼굴 키포인트 평균, 없으면 어깨 중점 위
    face = [km[n] for n in FACE_PARTS if n in km]
    if face:
        fx = sum(k.x for k in face) / len(face)
        fy = sum(k.y for k in face) / len(face)
    elif "left_shoulder" in km and "right_shoulder" in km:
        fx, fy = _midpoint(km["left_shoulder"], km["right_shoulder"])
        fy -= 50
    else:
        return image_bgr
    head = (int(fx), int(fy))
    cv2.circle(image_bgr, head, STYLE["head_radius"], STYLE["body"], 4, cv2.LINE_AA)

    if label:
        font = cv2.FONT_HERSHEY_SIMPLEX
        (tw, th), _ = cv2.getTextSize(label, font, 0.7, 2)
        ty = head[1] - STYLE["head_radius"] - 15
        if ty < th:
            ty = head[1] + STYLE["head_radius"] + 10 + th
        cv2.putText(image_bgr, label, (head[0] - tw // 2, ty), font, 0.7,
                    label_color or STYLE["body"], 2, cv2.LINE_AA)
    return image_bgr


def draw_target_pose(panel_bgr, target, pad=30):
    """정규화 좌표의 목표 포즈를 패널 크기에 맞춰 그린다."""
    h, w = panel_bgr.shape[:2]
    panel_bgr[:] = (245, 245, 245)
    if target is None or not target.keypoints:
        return panel_bgr
    kp = target.keypoints
    xs = [k.x for k in kp.values()]
    ys = [k.y for k in kp.values()]
    range_x = (max(xs) - min(xs)) or 1.0
    range_y = (max(ys) - min(ys)) or 1.0
    scale = min((w - pad * 2) / range_x, (h - pad * 2 - 30) / range_y)
    cx = (min(xs) + max(xs)) / 2.0
    cy = (min(ys) + max(ys)) / 2.0

    def to_panel(k):
        return int(w / 2 + (k.x - cx) * scale), int(h / 2 + 15 + (k.y - cy) * scale)

    for a, b in SKELETON_EDGES:
        if a in kp and b in kp:
            cv2.line(panel_bgr, to_panel(kp[a]), to_panel(kp[b]), (51, 51, 51), 3, cv2.LINE_AA)
    for k in kp.values():
        cv2.circle(panel_bgr, to_panel(k), 5, (243, 150, 33), -1, cv2.LINE_AA)
    cv2.putText(panel_bgr, target.name, (10, 25), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (0, 0, 0), 2, cv2.LINE_AA)
    return panel_bgr
