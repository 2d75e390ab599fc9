import pytest

from posematch import (
    Keypoint, arm_state, categorical_similarity, distance_similarity, normalize_pose, pose_similarity
)
from posematch.similarity import arm_states

from conftest import person, target_by_id


def norm_map(**points):
    return {n: Keypoint(n, x, y, 1.0) for n, (x, y) in points.items()}


def test_arm_state_classification():
    assert arm_state(-0.2, 0.0, 0.55) == "up"
    assert arm_state(0.57, 0.0, 0.55) == "hips"
    assert arm_state(0.3, 0.0, 0.55) == "down"


def test_both_arms_up_matches_both_hands_up_target():
    user = norm_map(left_shoulder=(-0.5, 0.0), right_shoulder=(0.5, 0.0),
                    left_wrist=(-0.6, -0.2), right_wrist=(0.6, -0.2))
    target = target_by_id("both_hands_up")
    assert categorical_similarity(user, target.keypoints) == 1.0


def test_one_arm_mismatch_scores_zero():
    user = norm_map(left_shoulder=(-0.5, 0.0), right_shoulder=(0.5, 0.0),
                    left_wrist=(-0.6, -0.2), right_wrist=(0.6, 0.5))
    target = target_by_id("both_hands_up")
    assert categorical_similarity(user, target.keypoints) == 0.0


def test_missing_wrist_counts_as_down():
    user = norm_map(left_shoulder=(-0.5, 0.0), right_shoulder=(0.5, 0.0))
    assert arm_states(user) == ("down", "down")
    assert categorical_similarity(user, target_by_id("stand_neutral").keypoints) == 1.0


def test_hands_on_hips_uses_hip_midpoint():
    user = norm_map(left_shoulder=(-0.5, 0.0), right_shoulder=(0.5, 0.0),
                    left_hip=(-0.4, 0.6), right_hip=(0.4, 0.6),
                    left_wrist=(-0.4, 0.62), right_wrist=(0.4, 0.58))
    assert categorical_similarity(user, target_by_id("hands_hips").keypoints) == 1.0


def test_default_targets_arm_states():
    expected = {
        "right_hand_up": ("down", "up"),
        "left_hand_up": ("up", "down"),
        "both_hands_up": ("up", "up"),
        "y_pose": ("up", "up"),
        "hands_hips": ("hips", "hips"),
        "stand_neutral": ("down", "down"),
    }
    for pose_id, states in expected.items():
        assert arm_states(target_by_id(pose_id).keypoints) == states


@pytest.mark.parametrize("policy", ["categorical", "distance"])
def test_failed_normalization_or_empty_target_scores_zero(policy):
    target = target_by_id("both_hands_up")
    assert pose_similarity(None, target.keypoints, policy) == 0.0
    user = normalize_pose(person(target, 300).keypoint_map())
    assert pose_similarity(user, {}, policy) == 0.0


def test_distance_policy_identical_pose_is_one():
    target = target_by_id("y_pose")
    user = normalize_pose(person(target, 300, scale=120).keypoint_map())
    assert distance_similarity(user, target.keypoints) == pytest.approx(1.0)


def test_distance_policy_offset():
    target = norm_map(left_wrist=(0.0, 0.0), right_wrist=(1.0, 0.0))
    user = norm_map(left_wrist=(0.2, 0.0), right_wrist=(1.0, 0.2), nose=(5.0, 5.0))
    assert distance_similarity(user, target, sensitivity=1.5) == pytest.approx(0.7)
    far = norm_map(left_wrist=(3.0, 0.0))
    assert distance_similarity(far, target, sensitivity=1.5) == 0.0


def test_distance_policy_no_shared_keypoints():
    target = norm_map(left_wrist=(0.0, 0.0))
    user = norm_map(nose=(0.0, 0.0))
    assert distance_similarity(user, target) == 0.0


def test_unknown_policy_raises():
    with pytest.raises(ValueError):
        pose_similarity({}, {}, "fuzzy")
