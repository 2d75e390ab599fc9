import pytest

from posematch import GameConfig, Keypoint, TemporalSmoother, clamp_jump, exp_moving_avg, smooth_keypoint
from posematch.session import PlayerSlot


def kp(name, x, y, score=0.9):
    return Keypoint(name, x, y, score)


def test_exp_moving_avg_weights_new_value():
    assert exp_moving_avg(0.0, 10.0, alpha=0.2) == pytest.approx(2.0)


def test_clamp_jump_limits_displacement():
    x, y, jumped = clamp_jump(kp("nose", 0, 0), kp("nose", 500, 0), 300)
    assert (x, y) == pytest.approx((300.0, 0.0))
    assert jumped


def test_clamp_jump_keeps_small_moves():
    x, y, jumped = clamp_jump(kp("nose", 0, 0), kp("nose", 30, 40), 300)
    assert (x, y) == (30, 40)
    assert not jumped


def test_jump_is_clamped_then_smoothed_harder():
    out = smooth_keypoint(kp("left_shoulder", 0, 0), kp("left_shoulder", 500, 0),
                          alpha=0.5, max_jump=300, jump_alpha_factor=0.5)
    # 300 까지 잘린 뒤 alpha 0.25 로 블렌딩
    assert out.x == pytest.approx(75.0)
    assert out.y == pytest.approx(0.0)


def test_low_confidence_raw_freezes_previous():
    prev = kp("left_wrist", 10, 10)
    assert smooth_keypoint(prev, kp("left_wrist", 90, 90, 0.05), alpha=0.2, max_jump=300) is prev
    assert smooth_keypoint(prev, None, alpha=0.2, max_jump=300) is prev


def test_first_sight_adopts_raw():
    raw = kp("left_knee", 42, 7)
    assert smooth_keypoint(None, raw, alpha=0.4, max_jump=300) is raw


def test_group_alpha_lookup():
    smoother = TemporalSmoother(GameConfig())
    prev = {"left_shoulder": kp("left_shoulder", 0, 0), "left_wrist": kp("left_wrist", 0, 0),
            "left_elbow": kp("left_elbow", 0, 0), "left_ankle": kp("left_ankle", 0, 0)}
    raw = {n: kp(n, 10, 0) for n in prev}
    out = smoother.smooth(prev, raw)
    assert out["left_shoulder"].x == pytest.approx(5.0)
    assert out["left_elbow"].x == pytest.approx(4.0)
    assert out["left_ankle"].x == pytest.approx(3.0)
    assert out["left_wrist"].x == pytest.approx(2.0)


def test_smooth_keeps_keypoints_missing_from_raw():
    smoother = TemporalSmoother(GameConfig())
    prev = {"nose": kp("nose", 5, 5), "left_hip": kp("left_hip", 0, 0)}
    out = smoother.smooth(prev, {"left_hip": kp("left_hip", 2, 0)})
    assert out["nose"] == prev["nose"]
    assert out["left_hip"].x == pytest.approx(1.0)
    assert "nose" in prev and prev["left_hip"].x == 0


def test_smooth_without_history_copies_raw():
    smoother = TemporalSmoother(GameConfig())
    raw = {"nose": kp("nose", 1, 2)}
    out = smoother.smooth({}, raw)
    assert out == raw
    assert out is not raw


def test_reset_policy_clears_history_on_miss():
    smoother = TemporalSmoother(GameConfig(history_policy="reset"))
    slot = PlayerSlot(0, smoothed={"nose": kp("nose", 1, 1)})
    slot.assigned = False
    smoother.update_slot(slot)
    assert slot.smoothed == {}


def test_retain_policy_keeps_history_for_brief_dropouts():
    smoother = TemporalSmoother(GameConfig(history_policy="retain", miss_tolerance_frames=2))
    slot = PlayerSlot(0, smoothed={"nose": kp("nose", 1, 1)})
    slot.assigned = False
    smoother.update_slot(slot)
    smoother.update_slot(slot)
    assert slot.smoothed
    smoother.update_slot(slot)
    assert slot.smoothed == {}


def test_assigned_slot_is_smoothed_and_miss_counter_cleared():
    smoother = TemporalSmoother(GameConfig())
    slot = PlayerSlot(0, smoothed={"left_hip": kp("left_hip", 0, 0)}, missed_frames=3)
    slot.assigned = True
    slot.raw = {"left_hip": kp("left_hip", 10, 0)}
    smoother.update_slot(slot)
    assert slot.smoothed["left_hip"].x == pytest.approx(5.0)
    assert slot.missed_frames == 0


def test_low_confidence_first_sight_is_not_stored():
    assert smooth_keypoint(None, kp("left_wrist", 90, 90, 0.05), alpha=0.2, max_jump=300) is None
    smoother = TemporalSmoother(GameConfig())
    assert smoother.smooth({}, {"left_shoulder": kp("left_shoulder", 0, 0, 0.05)}) == {}
    out = smoother.smooth({"nose": kp("nose", 1, 1)}, {"left_wrist": kp("left_wrist", 5, 5, 0.05)})
    assert "left_wrist" not in out


def test_misfire_does_not_drag_next_confident_sighting():
    smoother = TemporalSmoother(GameConfig())
    slot = PlayerSlot(0)
    slot.assigned = True
    slot.raw = {"left_shoulder": kp("left_shoulder", 0, 0, 0.05), "nose": kp("nose", 10, 10)}
    smoother.update_slot(slot)
    assert "left_shoulder" not in slot.smoothed
    slot.raw = {"left_shoulder": kp("left_shoulder", 500, 0, 0.9), "nose": kp("nose", 10, 10)}
    smoother.update_slot(slot)
    assert slot.smoothed["left_shoulder"].x == pytest.approx(500.0)
