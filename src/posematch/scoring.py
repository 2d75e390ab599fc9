"""
슬롯별 점수 판정 (쿨다운 포함)
"""

from .utils import get_logger

logger = get_logger(__name__)


class ScoreKeeper:
    """
    immediate: 임계값을 넘는 프레임이 나오고 쿨다운이 끝났으면 바로 1점.
    hold: 일치 +1 / 불일치 -mismatch_decay 로 움직이는 포화 카운터가 hold_frames 에 닿아야 1점.
    득점 후에는 cooldown_sec 동안 추가 득점이 없다.
    """

    def __init__(self, config):
        self.config = config

    @staticmethod
    def is_cooling(slot, now):
        return slot.cooldown_until > now

    def miss(self, slot):
        """검출/포즈가 없는 프레임: 연속 일치 카운터 초기화"""
        slot.match_streak = 0
        slot.similarity = 0.0
        slot.matched = False

    def update(self, slot, similarity, threshold, now):
        """Returns True when a point was awarded this frame."""
        cfg = self.config
        slot.similarity = float(similarity)
        slot.matched = similarity >= threshold

        if cfg.scoring_policy == "hold":
            if slot.matched:
                slot.match_streak = min(slot.match_streak + 1, cfg.hold_frames)
            else:
                slot.match_streak = max(slot.match_streak - cfg.mismatch_decay, 0)
            ready = slot.match_streak >= cfg.hold_frames
        else:
            slot.match_streak = slot.match_streak + 1 if slot.matched else 0
            ready = slot.matched

        if not ready or self.is_cooling(slot, now):
            return False

        slot.score += 1
        slot.cooldown_until = now + cfg.cooldown_sec
        slot.match_streak = 0
        logger.info(f"P{slot.index + 1} +1 (score={slot.score}, similarity={similarity:.2f})")
        return True
