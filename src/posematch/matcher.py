"""
프레임별 검출 결과를 고정된 플레이어 슬롯에 할당하는 매칭 클래스
"""

import math
from collections import namedtuple

from .pose_utils import pose_center, pose_distance

# 한 슬롯에 할당된 검출: 원본 스켈레톤, 이름별 키포인트, 중심점
Assignment = namedtuple("Assignment", ["skeleton", "keypoints", "center"])


class PlayerMatcher:
    """
    이전 프레임의 슬롯별 스무딩 포즈와 가까운 검출을 우선 연결해 ID 를 유지한다.
    외형 정보 없이 2D 키포인트 위치만 사용한다.
    """

    def __init__(self, config):
        self.config = config

    def _distance(self, slot, keypoints):
        cfg = self.config
        return pose_distance(
            slot.smoothed, keypoints,
            min_score=cfg.min_keypoint_score,
            center_weight=cfg.center_weight,
            hand_weight=cfg.hand_weight,
            fallback_offset=cfg.hand_fallback_offset_px,
        )

    def _pair_score(self, slot, center, dist):
        cfg = self.config
        score = -dist
        # 직전 프레임에 이 슬롯이 있던 자리 근처면 가산점 (비슷한 거리의 두 후보 사이 깜빡임 방지)
        if slot.last_center is not None:
            d_last = math.hypot(center[0] - slot.last_center[0], center[1] - slot.last_center[1])
            if d_last < cfg.sticky_radius_px:
                score += (cfg.sticky_radius_px - d_last) * cfg.sticky_weight
        return score

    def assign(self, detections, slots, frame_width):
        """
        Returns: 슬롯 인덱스별 Assignment 또는 None (len == len(slots))
        한 검출은 최대 한 슬롯에, 한 슬롯은 최대 한 검출만 받는다.
        """
        cfg = self.config
        assigned = [None] * len(slots)
        if not detections:
            return assigned

        candidates = []
        for det in detections:
            kps = det.keypoint_map()
            candidates.append(Assignment(det, kps, pose_center(kps, cfg.min_keypoint_score)))
        # 왼쪽 -> 오른쪽 순서. 신규 슬롯 배치와 동점 처리에만 사용
        candidates.sort(key=lambda a: a.center[0])
        taken = [False] * len(candidates)

        active = slots[:cfg.player_count]
        warm = [s for s in active if s.smoothed]
        cold = [s for s in active if not s.smoothed]

        # 1) 이전 포즈가 있는 슬롯: 모든 (슬롯, 검출) 쌍 중 점수가 높은 것부터 확정
        ceiling = cfg.match_distance_fraction * frame_width
        pairs = []
        for slot in warm:
            for i, cand in enumerate(candidates):
                dist = self._distance(slot, cand.keypoints)
                # 한 프레임에 화면 폭의 1/3 이상 움직였으면 다른 사람으로 본다
                if dist >= ceiling:
                    continue
                pairs.append((self._pair_score(slot, cand.center, dist), slot.index, i))
        pairs.sort(key=lambda p: (-p[0], p[1], p[2]))

        done = set()
        for _, slot_idx, i in pairs:
            if slot_idx in done or taken[i]:
                continue
            assigned[slot_idx] = candidates[i]
            done.add(slot_idx)
            taken[i] = True

        # 2) 새 슬롯: 남은 검출을 왼쪽부터 낮은 슬롯 번호에
        free = [i for i, t in enumerate(taken) if not t]
        for slot, i in zip(cold, free):
            assigned[slot.index] = candidates[i]
            taken[i] = True

        # 남은 검출(5번째 이후, 너무 먼 검출)은 이번 프레임에서 버린다
        return assigned
