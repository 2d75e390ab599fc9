import pytest

from posematch import GameConfig, PlayerMatcher
from posematch.session import PlayerSlot

from conftest import person, target_by_id

FRAME_WIDTH = 640


def warm_slot(index, target, cx):
    p = person(target, cx)
    return PlayerSlot(index, smoothed=p.keypoint_map(), last_center=(float(cx), 240.0))


def centers(assigned):
    return [None if a is None else round(a.center[0]) for a in assigned]


@pytest.fixture
def matcher():
    return PlayerMatcher(GameConfig(player_count=2, max_players=2))


def test_no_detections(matcher):
    slots = [PlayerSlot(0), PlayerSlot(1)]
    assert matcher.assign([], slots, FRAME_WIDTH) == [None, None]


def test_continuity_follows_previous_positions(matcher, standing):
    slots = [warm_slot(0, standing, 100), warm_slot(1, standing, 400)]
    dets = [person(standing, 395), person(standing, 105)]
    assert centers(matcher.assign(dets, slots, FRAME_WIDTH)) == [105, 395]


def test_continuity_ignores_left_to_right_order(matcher, standing):
    # 슬롯 0 이 오른쪽에 있던 경우에도 그대로 유지
    slots = [warm_slot(0, standing, 400), warm_slot(1, standing, 100)]
    dets = [person(standing, 105), person(standing, 395)]
    assert centers(matcher.assign(dets, slots, FRAME_WIDTH)) == [395, 105]


def test_cold_start_single_detection_goes_to_slot_zero(matcher, standing):
    slots = [PlayerSlot(0), PlayerSlot(1)]
    assert centers(matcher.assign([person(standing, 500)], slots, FRAME_WIDTH)) == [500, None]


def test_cold_start_orders_left_to_right(standing):
    matcher = PlayerMatcher(GameConfig(player_count=3))
    slots = [PlayerSlot(i) for i in range(4)]
    dets = [person(standing, 520), person(standing, 80), person(standing, 300)]
    assert centers(matcher.assign(dets, slots, FRAME_WIDTH)) == [80, 300, 520, None]


def test_far_detection_is_not_matched_to_warm_slot(matcher, standing):
    slots = [warm_slot(0, standing, 100), PlayerSlot(1)]
    # 화면 폭의 1/3 이상 떨어진 검출은 새 사람으로 보고 빈 슬롯에
    assert centers(matcher.assign([person(standing, 500)], slots, FRAME_WIDTH)) == [None, 500]


def test_excess_detections_are_dropped(standing):
    matcher = PlayerMatcher(GameConfig())
    slots = [PlayerSlot(i) for i in range(4)]
    dets = [person(standing, x) for x in (50, 150, 250, 350, 450)]
    assigned = matcher.assign(dets, slots, FRAME_WIDTH)
    assert centers(assigned) == [50, 150, 250, 350]


def test_inactive_slots_never_receive_detections(standing):
    matcher = PlayerMatcher(GameConfig(player_count=1))
    slots = [PlayerSlot(i) for i in range(4)]
    dets = [person(standing, 100), person(standing, 300)]
    assert centers(matcher.assign(dets, slots, FRAME_WIDTH)) == [100, None, None, None]


def test_each_detection_used_once(matcher, standing):
    # 두 슬롯이 같은 자리에 있어도 검출 하나는 한 슬롯에만
    slots = [warm_slot(0, standing, 200), warm_slot(1, standing, 200)]
    assigned = matcher.assign([person(standing, 205)], slots, FRAME_WIDTH)
    assert centers(assigned) == [205, None]


def test_best_pair_is_committed_first(matcher, standing):
    # 슬롯 번호 순서로 고르면 슬롯 0 이 150 을 가져가지만, 전역적으로는 슬롯 1 - 150 이 가장 가깝다
    slots = [warm_slot(0, standing, 130), warm_slot(1, standing, 160)]
    dets = [person(standing, 150), person(standing, 100)]
    assert centers(matcher.assign(dets, slots, FRAME_WIDTH)) == [100, 150]


def test_hand_position_breaks_center_ties(matcher, standing):
    up = target_by_id("both_hands_up")
    slots = [warm_slot(0, standing, 300), warm_slot(1, up, 300)]
    dets = [person(up, 300), person(standing, 300)]
    a = matcher.assign(dets, slots, FRAME_WIDTH)
    assert a[0].skeleton is dets[1]
    assert a[1].skeleton is dets[0]


def test_last_position_bonus_beats_slightly_nearer_candidate(matcher, standing):
    # 스무딩 포즈는 300 에 있지만 직전 원본 위치는 330: 14 px 떨어진 286 보다 15 px 떨어진 315 를 고른다
    slot = warm_slot(0, standing, 300)
    slot.last_center = (330.0, 240.0)
    dets = [person(standing, 286), person(standing, 315)]
    assert centers(matcher.assign(dets, [slot, PlayerSlot(1)], FRAME_WIDTH)) == [315, 286]


def test_without_last_position_nearest_candidate_wins(matcher, standing):
    slot = warm_slot(0, standing, 300)
    slot.last_center = None
    dets = [person(standing, 286), person(standing, 315)]
    assert centers(matcher.assign(dets, [slot, PlayerSlot(1)], FRAME_WIDTH)) == [286, 315]


def test_last_position_bonus_ignored_outside_radius(standing):
    matcher = PlayerMatcher(GameConfig(player_count=2, max_players=2, sticky_radius_px=10.0))
    slot = warm_slot(0, standing, 300)
    slot.last_center = (330.0, 240.0)
    dets = [person(standing, 286), person(standing, 315)]
    assert centers(matcher.assign(dets, [slot, PlayerSlot(1)], FRAME_WIDTH)) == [286, 315]


def test_extra_person_does_not_displace_tracked_players(matcher, standing):
    # 인원수(2)보다 많은 검출이 들어와도 기존 두 사람은 자기 슬롯을 유지하고 나머지는 버린다
    slots = [warm_slot(0, standing, 420), warm_slot(1, standing, 200)]
    for dets in ([person(standing, 40), person(standing, 205), person(standing, 415)],
                 [person(standing, 415), person(standing, 205), person(standing, 40)]):
        assert centers(matcher.assign(dets, slots, FRAME_WIDTH)) == [415, 205]
