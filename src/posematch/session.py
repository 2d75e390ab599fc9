"""
게임 세션: 플레이어 슬롯 배열과 프레임 단위 파이프라인
(할당 -> 스무딩 -> 정규화/유사도 -> 점수)
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .config import DIFFICULTIES, DIFFICULTY_THRESHOLDS, GameConfig
from .errors import ConfigError, DetectorError
from .keypoints import Keypoint
from .matcher import PlayerMatcher
from .pose_utils import normalize_pose
from .scoring import ScoreKeeper
from .similarity import pose_similarity
from .smoother import TemporalSmoother
from .targets import TargetCycler
from .utils import get_logger

logger = get_logger(__name__)


@dataclass
class PlayerSlot:
    index: int
    smoothed: Dict[str, Keypoint] = field(default_factory=dict)
    raw: Dict[str, Keypoint] = field(default_factory=dict)
    match_streak: int = 0
    score: int = 0
    cooldown_until: float = 0.0
    assigned: bool = False
    last_center: Optional[Tuple[float, float]] = None
    missed_frames: int = 0
    similarity: float = 0.0
    matched: bool = False

    def reset(self):
        """스무딩 이력과 프레임 상태만 지운다. 점수와 쿨다운은 유지."""
        self.smoothed = {}
        self.raw = {}
        self.match_streak = 0
        self.assigned = False
        self.last_center = None
        self.missed_frames = 0
        self.similarity = 0.0
        self.matched = False


@dataclass
class SlotResult:
    """렌더링/UI 용 슬롯별 프레임 결과"""
    index: int
    keypoints: Dict[str, Keypoint]
    assigned: bool
    similarity: float
    matched: bool
    awarded: bool
    cooling: bool
    score: int


class GameSession:
    def __init__(self, config: Optional[GameConfig] = None, targets=None, clock=time.perf_counter):
        self.config = config or GameConfig()
        self.clock = clock
        self.slots = [PlayerSlot(i) for i in range(self.config.max_players)]
        self.targets = TargetCycler(targets, auto_advance_sec=self.config.auto_advance_sec)
        self.matcher = PlayerMatcher(self.config)
        self.smoother = TemporalSmoother(self.config)
        self.scorer = ScoreKeeper(self.config)
        self.frame_index = 0
        self.skipped_frames = 0
        self.last_results: List[SlotResult] = []

    # ---- 설정 변경 (UI) ----
    @property
    def current_target(self):
        return self.targets.current

    @property
    def threshold(self):
        return self.config.threshold

    def set_player_count(self, n):
        if not 1 <= n <= self.config.max_players:
            raise ConfigError(f"player count must be in 1..{self.config.max_players}, got {n}")
        self.config.player_count = n
        for slot in self.slots[n:]:
            slot.reset()
        logger.info(f"player count -> {n}")

    def set_difficulty(self, difficulty):
        if difficulty not in DIFFICULTIES:
            raise ConfigError(f"unknown difficulty: {difficulty!r}")
        self.config.difficulty = difficulty
        logger.info(f"difficulty -> {difficulty} (threshold {self.threshold:.2f})")

    def set_policy(self, policy):
        if policy not in DIFFICULTY_THRESHOLDS:
            raise ConfigError(f"unknown similarity policy: {policy!r}")
        self.config.similarity_policy = policy

    def _on_target_changed(self):
        for slot in self.slots:
            slot.match_streak = 0
            slot.matched = False

    def next_pose(self, now=None):
        target = self.targets.next(self.clock() if now is None else now)
        self._on_target_changed()
        return target

    def tick_targets(self, now=None):
        if self.targets.tick(self.clock() if now is None else now):
            self._on_target_changed()
            return True
        return False

    def reset_scores(self):
        for slot in self.slots:
            slot.score = 0
            slot.cooldown_until = 0.0
            slot.match_streak = 0

    # ---- 프레임 처리 ----
    def process_detections(self, detections, frame_width, now=None):
        """검출 결과 한 프레임을 처리한다. 이 함수 안에서만 슬롯 상태가 바뀐다."""
        cfg = self.config
        now = self.clock() if now is None else now
        detections = detections or []

        assignment = self.matcher.assign(detections, self.slots, frame_width)
        for slot, a in zip(self.slots, assignment):
            slot.assigned = a is not None
            slot.raw = dict(a.keypoints) if a is not None else {}
            if a is not None:
                slot.last_center = a.center
            self.smoother.update_slot(slot)
            if not slot.smoothed:
                slot.last_center = None

        target = self.targets.current
        threshold = cfg.threshold
        results = []
        for slot in self.slots:
            awarded = False
            active = slot.index < cfg.player_count
            if active and slot.assigned and slot.smoothed:
                norm = normalize_pose(slot.smoothed, cfg.min_keypoint_score)
                sim = pose_similarity(norm, target.keypoints, cfg.similarity_policy, cfg.distance_sensitivity)
                awarded = self.scorer.update(slot, sim, threshold, now)
            else:
                self.scorer.miss(slot)
            results.append(SlotResult(
                index=slot.index,
                keypoints=dict(slot.smoothed) if slot.assigned else {},
                assigned=slot.assigned,
                similarity=slot.similarity,
                matched=slot.matched,
                awarded=awarded,
                cooling=self.scorer.is_cooling(slot, now),
                score=slot.score,
            ))
        self.frame_index += 1
        self.last_results = results
        return results

    def step(self, runner, frame, now=None):
        """
        카메라 프레임 한 장에 대해 검출 + 파이프라인을 실행한다.
        프레임을 못 읽었거나, 검출이 아직 안 끝났거나, 검출기가 실패하면 None 을 돌려주고
        기존 상태(점수, 할당)는 그대로 둔다.
        """
        if frame is None:
            self.skipped_frames += 1
            return None
        try:
            # 인원수보다 많이 받아 둔다. 검출기 출력 순서로 추적 중인 사람이 잘려 나가지 않도록
            # 남는 검출은 매칭 단계에서 버린다
            detections = runner.run(frame, max_poses=self.config.max_players, mirror=self.config.mirror)
        except DetectorError as e:
            self.skipped_frames += 1
            logger.warning(f"frame skipped: {e}")
            return None
        if detections is None:
            self.skipped_frames += 1
            return None
        self.tick_targets(now)
        return self.process_detections(detections, frame.shape[1], now)

    def snapshot(self):
        """웹 UI 상태 조회용 (JSON 직렬화 가능)"""
        now = self.clock()
        target = self.targets.current
        return {
            "frame_index": self.frame_index,
            "skipped_frames": self.skipped_frames,
            "difficulty": self.config.difficulty,
            "policy": self.config.similarity_policy,
            "threshold": self.threshold,
            "player_count": self.config.player_count,
            "target": {"id": target.id, "name": target.name, "index": self.targets.index},
            "players": [
                {
                    "index": s.index,
                    "score": s.score,
                    "assigned": s.assigned,
                    "similarity": round(s.similarity, 3),
                    "matched": s.matched,
                    "cooling": s.cooldown_until > now,
                }
                for s in self.slots[:self.config.player_count]
            ],
        }
