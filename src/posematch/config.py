"""
게임 설정값 (난이도, 인원수, 스무딩/매칭/점수 상수)
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field, fields
from typing import Dict, Optional

from .errors import ConfigError
from .utils import get_logger

logger = get_logger(__name__)

MAX_PLAYERS = 4
DIFFICULTIES = ("easy", "normal", "hard")
HISTORY_POLICIES = ("reset", "retain")
SCORING_POLICIES = ("immediate", "hold")

# 정책별 난이도 판정 임계값 (각 행은 easy < normal < hard)
DIFFICULTY_THRESHOLDS = {
    # 팔 상태가 양쪽 모두 일치할 때만 1.0 이므로 세 단계 모두 사실상 완전 일치 요구
    "categorical": {"easy": 0.75, "normal": 0.85, "hard": 0.95},
    "distance": {"easy": 0.60, "normal": 0.70, "hard": 0.80},
}

DEFAULT_SMOOTH_ALPHA = {
    "torso": 0.5,        # 어깨/골반
    "limbs": 0.4,        # 팔꿈치/무릎
    "extremities": 0.3,  # 발목/얼굴
    "hands": 0.2,        # 손목: 가장 빠르게 움직이고 튀기 쉬워서 가장 강하게
}


@dataclass
class GameConfig:
    # 인원
    max_players: int = MAX_PLAYERS
    player_count: int = MAX_PLAYERS

    # 판정
    difficulty: str = "normal"
    similarity_policy: str = "categorical"
    distance_sensitivity: float = 1.5
    min_keypoint_score: float = 0.25

    # 점수
    scoring_policy: str = "immediate"
    cooldown_sec: float = 2.5
    hold_frames: int = 5
    mismatch_decay: int = 2

    # 스무딩 (alpha = 새 좌표 반영 비율, 작을수록 강하게 스무딩)
    smooth_alpha: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_SMOOTH_ALPHA))
    max_jump_px: float = 300.0
    jump_alpha_factor: float = 0.5
    history_policy: str = "reset"
    miss_tolerance_frames: int = 10

    # 플레이어 할당
    match_distance_fraction: float = 1.0 / 3.0
    sticky_radius_px: float = 350.0
    sticky_weight: float = 0.5
    center_weight: float = 0.4
    hand_weight: float = 0.3
    hand_fallback_offset_px: float = 80.0

    # 검출기 / 루프
    mirror: bool = True
    detector_timeout_sec: float = 1.0
    auto_advance_sec: Optional[float] = None

    def __post_init__(self):
        if not 1 <= self.max_players <= MAX_PLAYERS:
            raise ConfigError(f"max_players must be in 1..{MAX_PLAYERS}, got {self.max_players}")
        if not 1 <= self.player_count <= self.max_players:
            raise ConfigError(f"player_count must be in 1..{self.max_players}, got {self.player_count}")
        if self.difficulty not in DIFFICULTIES:
            raise ConfigError(f"unknown difficulty: {self.difficulty!r}")
        if self.similarity_policy not in DIFFICULTY_THRESHOLDS:
            raise ConfigError(f"unknown similarity policy: {self.similarity_policy!r}")
        if self.scoring_policy not in SCORING_POLICIES:
            raise ConfigError(f"unknown scoring policy: {self.scoring_policy!r}")
        if self.history_policy not in HISTORY_POLICIES:
            raise ConfigError(f"unknown history policy: {self.history_policy!r}")
        if not 0.0 <= self.min_keypoint_score <= 1.0:
            raise ConfigError("min_keypoint_score must be in [0, 1]")
        missing = set(DEFAULT_SMOOTH_ALPHA) - set(self.smooth_alpha)
        if missing:
            raise ConfigError(f"smooth_alpha is missing groups: {sorted(missing)}")
        for group, alpha in self.smooth_alpha.items():
            if not 0.0 < alpha <= 1.0:
                raise ConfigError(f"smooth_alpha[{group!r}] must be in (0, 1], got {alpha}")
        if not 0.0 < self.jump_alpha_factor <= 1.0:
            raise ConfigError("jump_alpha_factor must be in (0, 1]")
        if self.max_jump_px <= 0 or self.cooldown_sec < 0 or self.detector_timeout_sec <= 0:
            raise ConfigError("max_jump_px, cooldown_sec and detector_timeout_sec must be positive")
        if self.hold_frames < 1 or self.mismatch_decay < 0:
            raise ConfigError("hold_frames must be >= 1 and mismatch_decay >= 0")
        if not 0.0 < self.match_distance_fraction <= 1.0:
            raise ConfigError("match_distance_fraction must be in (0, 1]")
        for name in ("sticky_radius_px", "sticky_weight", "center_weight", "hand_weight", "hand_fallback_offset_px"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be >= 0, got {getattr(self, name)}")

    @property
    def threshold(self) -> float:
        return DIFFICULTY_THRESHOLDS[self.similarity_policy][self.difficulty]

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "GameConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"unknown config keys: {sorted(unknown)}")
        merged = dict(data)
        if "smooth_alpha" in merged:
            alpha = dict(DEFAULT_SMOOTH_ALPHA)
            alpha.update(merged["smooth_alpha"])
            merged["smooth_alpha"] = alpha
        return cls(**merged)


def load_config(json_path: Optional[str] = None, **overrides) -> GameConfig:
    """
    JSON 설정 파일을 기본값 위에 덮어쓴 뒤, 키워드 인자(override)를 마지막으로 적용한다.
    값이 None 인 override 는 무시한다 (argparse 기본값 전달용).
    """
    data = {}
    if json_path:
        if not os.path.exists(json_path):
            raise FileNotFoundError(f"{json_path} not found.")
        with open(json_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ConfigError(f"top-level of {json_path} must be an object, got {type(data).__name__}")
        logger.info(f"config loaded: {json_path} ({len(data)} keys)")
    data.update({k: v for k, v in overrides.items() if v is not None})
    return GameConfig.from_dict(data)
