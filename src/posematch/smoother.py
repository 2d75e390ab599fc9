"""
키포인트 시간축 스무딩 (슬롯별, 관절별 저역통과 필터)

alpha 는 새 좌표의 반영 비율이다: new = prev * (1 - alpha) + raw * alpha.
alpha 가 작을수록 더 강하게(느리게) 스무딩된다.
"""

import math

from .keypoints import joint_group


def exp_moving_avg(prev, new, alpha=0.2):
    return prev*(1-alpha) + new*alpha


def clamp_jump(prev, raw, max_jump):
    """
    prev -> raw 이동이 max_jump 보다 크면 같은 방향으로 max_jump 만큼만 이동한 점을 돌려준다.
    Returns (x, y, jumped)
    """
    dx = raw.x - prev.x
    dy = raw.y - prev.y
    dist = math.hypot(dx, dy)
    if dist <= max_jump:
        return raw.x, raw.y, False
    ratio = max_jump / dist
    return prev.x + dx * ratio, prev.y + dy * ratio, True


def smooth_keypoint(prev, raw, alpha, max_jump, jump_alpha_factor=0.5, min_score=0.25):
    """한 관절의 새 스무딩 값. 결과가 없으면 None."""
    if raw is None or raw.score < min_score:
        # 안 보이면 직전 값을 그대로 유지 (0 으로 떨어뜨리지 않음). 처음 보는 관절이면 저장하지 않는다
        return prev
    if prev is None:
        return raw
    x, y, jumped = clamp_jump(prev, raw, max_jump)
    if jumped:
        alpha *= jump_alpha_factor
    return raw.moved(exp_moving_avg(prev.x, x, alpha), exp_moving_avg(prev.y, y, alpha))


class TemporalSmoother:
    def __init__(self, config):
        self.config = config

    def alpha_for(self, name):
        return self.config.smooth_alpha[joint_group(name).value]

    def smooth(self, prev_map, raw_map):
        """
        prev_map: 슬롯의 직전 스무딩 결과 (없으면 빈 dict)
        raw_map: 이번 프레임에 슬롯에 할당된 원본 키포인트
        새 dict 를 돌려주며 입력은 건드리지 않는다.
        """
        cfg = self.config
        if not prev_map:
            return {n: k for n, k in raw_map.items() if k is not None and k.score >= cfg.min_keypoint_score}
        out = {}
        for name in set(prev_map) | set(raw_map):
            k = smooth_keypoint(
                prev_map.get(name), raw_map.get(name),
                alpha=self.alpha_for(name),
                max_jump=cfg.max_jump_px,
                jump_alpha_factor=cfg.jump_alpha_factor,
                min_score=cfg.min_keypoint_score,
            )
            if k is not None:
                out[name] = k
        return out

    def update_slot(self, slot):
        """할당 결과(slot.assigned, slot.raw)에 따라 slot.smoothed 를 갱신한다."""
        if slot.assigned:
            slot.smoothed = self.smooth(slot.smoothed, slot.raw)
            slot.missed_frames = 0
            return
        slot.missed_frames += 1
        if self.config.history_policy == "reset" or slot.missed_frames > self.config.miss_tolerance_frames:
            slot.smoothed = {}
