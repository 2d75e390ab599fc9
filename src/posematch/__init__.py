"""
Multi-player pose matching game 모듈
(검출기/카메라 루프는 mediapipe 가 필요하므로 posematch.extractor, posematch.live_play 에서 직접 import)
"""

from .config import (
    MAX_PLAYERS, DIFFICULTIES, DIFFICULTY_THRESHOLDS, DEFAULT_SMOOTH_ALPHA,
    GameConfig, load_config
)
from .errors import PoseMatchError, ConfigError, DetectorError
from .keypoints import (
    KEYPOINT_NAMES, SKELETON_EDGES, JOINT_GROUPS, JointGroup,
    Keypoint, Skeleton, keypoints_to_map
)
from .matcher import PlayerMatcher, Assignment
from .pose_utils import (
    normalize_pose, pose_center, pose_hands, pose_distance,
    draw_player_skeleton, draw_target_pose
)
from .runner import DetectionRunner
from .scoring import ScoreKeeper
from .session import GameSession, PlayerSlot, SlotResult
from .similarity import (
    SIMILARITY_POLICIES, arm_state, categorical_similarity, distance_similarity, pose_similarity
)
from .smoother import TemporalSmoother, clamp_jump, exp_moving_avg, smooth_keypoint
from .targets import TargetPose, TargetCycler, default_target_poses, load_target_poses_json
from .utils import get_logger, parse_bgr, play_beep, start_bgm_player, stop_bgm_player

__all__ = [
    'MAX_PLAYERS',
    'DIFFICULTIES',
    'DIFFICULTY_THRESHOLDS',
    'DEFAULT_SMOOTH_ALPHA',
    'GameConfig',
    'load_config',
    'PoseMatchError',
    'ConfigError',
    'DetectorError',
    'KEYPOINT_NAMES',
    'SKELETON_EDGES',
    'JOINT_GROUPS',
    'JointGroup',
    'Keypoint',
    'Skeleton',
    'keypoints_to_map',
    'PlayerMatcher',
    'Assignment',
    'normalize_pose',
    'pose_center',
    'pose_hands',
    'pose_distance',
    'draw_player_skeleton',
    'draw_target_pose',
    'DetectionRunner',
    'ScoreKeeper',
    'GameSession',
    'PlayerSlot',
    'SlotResult',
    'SIMILARITY_POLICIES',
    'arm_state',
    'categorical_similarity',
    'distance_similarity',
    'pose_similarity',
    'TemporalSmoother',
    'clamp_jump',
    'exp_moving_avg',
    'smooth_keypoint',
    'TargetPose',
    'TargetCycler',
    'default_target_poses',
    'load_target_poses_json',
    'get_logger',
    'parse_bgr',
    'play_beep',
    'start_bgm_player',
    'stop_bgm_player',
]
