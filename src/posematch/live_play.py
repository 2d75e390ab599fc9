"""
실시간 웹캠 포즈 맞추기 게임 (OpenCV 창)
"""

import os
import time

import cv2
import numpy as np

from .extractor import PoseExtractor
from .pose_utils import STYLE, draw_player_skeleton, draw_target_pose
from .runner import DetectionRunner
from .session import GameSession
from .utils import get_logger, parse_bgr, play_beep, start_bgm_player, stop_bgm_player

logger = get_logger(__name__)

WINDOW_NAME = "Pose Match (left: YOU, right: TARGET)"
DIFFICULTY_KEYS = {ord('e'): "easy", ord('m'): "normal", ord('h'): "hard"}
PLAYER_KEYS = {ord(str(n)): n for n in range(1, 5)}


def _label_color(result):
    if result.cooling:
        return STYLE["cooling"]
    if result.matched:
        return STYLE["matched"]
    return STYLE["body"]


def render_game_frame(frame_bgr, session, results, panel_width=320, mirror=True):
    """카메라 프레임 위에 플레이어 스켈레톤/라벨을 그리고 오른쪽에 목표 포즈 패널을 붙인다."""
    display = cv2.flip(frame_bgr, 1) if mirror else frame_bgr.copy()
    for r in results or []:
        if not r.assigned:
            continue
        label = f"P{r.index + 1} ({int(r.similarity * 100)}%)"
        draw_player_skeleton(display, r.keypoints, label=label, label_color=_label_color(r),
                             min_score=session.config.min_keypoint_score)

    h = display.shape[0]
    panel = np.zeros((h, panel_width, 3), dtype=np.uint8)
    draw_target_pose(panel, session.current_target)

    font = cv2.FONT_HERSHEY_SIMPLEX
    cfg = session.config
    cv2.putText(panel, f"{cfg.difficulty.upper()}  (>= {session.threshold:.2f})", (10, h - 20 - 30 * cfg.player_count),
                font, 0.6, (60, 60, 60), 2, cv2.LINE_AA)
    now = session.clock()
    for i, slot in enumerate(session.slots[:cfg.player_count]):
        color = STYLE["cooling"] if slot.cooldown_until > now else (0, 0, 0)
        cv2.putText(panel, f"P{slot.index + 1}: {slot.score}", (10, h - 10 - 30 * (cfg.player_count - 1 - i)),
                    font, 0.8, color, 2, cv2.LINE_AA)
    return np.hstack([display, panel])


def live_play(model_path=None, camera=0, config=None, targets=None, bgm=None,
              score_beep=True, status_color="0,215,255", window_name=WINDOW_NAME):
    """
    - model_path: MediaPipe pose_landmarker .task 파일 (없으면 1인 모델로 대체)
    - config: GameConfig (난이도, 인원수, 스무딩 상수 등)
    - targets: TargetPose 리스트 (없으면 기본 7종)
    - bgm: 배경 음악 파일 경로 (ffplay/afplay 필요)
    """
    session = GameSession(config, targets)
    cfg = session.config

    cap = cv2.VideoCapture(camera)
    if not cap.isOpened():
        raise SystemExit(f"카메라 열기 실패: {camera}")

    pe = PoseExtractor(model_path=model_path, max_poses=cfg.max_players)
    runner = DetectionRunner(pe, timeout_sec=cfg.detector_timeout_sec)
    status_bgr = parse_bgr(status_color)

    bgm_proc = None
    if bgm and os.path.exists(bgm):
        bgm_proc = start_bgm_player(bgm)

    font = cv2.FONT_HERSHEY_SIMPLEX
    last_combined = None
    fps_t = time.perf_counter()
    fps = 0.0
    try:
        while True:
            ok, frame = cap.read()
            if not ok:
                # 프레임을 못 읽으면 이번 틱만 건너뛰고 다음에 다시 시도 (점수/할당 유지)
                session.step(runner, None)
                key = cv2.waitKey(30) & 0xFF
                if key in (27, ord('q')):
                    break
                continue

            results = session.step(runner, frame)
            if results is None:
                results = session.last_results
            else:
                now = time.perf_counter()
                fps = 0.9 * fps + 0.1 * (1.0 / max(now - fps_t, 1e-6))
                fps_t = now
                if score_beep and any(r.awarded for r in results):
                    play_beep(freq=1400.0, dur=0.15)

            combined = render_game_frame(frame, session, results, mirror=cfg.mirror)
            cv2.putText(combined, f"{fps:4.1f} fps", (20, 40), font, 0.8, status_bgr, 2, cv2.LINE_AA)
            if runner.busy:
                cv2.putText(combined, "detecting...", (20, 75), font, 0.6, status_bgr, 1, cv2.LINE_AA)
            last_combined = combined
            cv2.imshow(window_name, combined)

            key = cv2.waitKey(1) & 0xFF
            if key in (27, ord('q')):
                break
            if key == ord('n'):
                session.next_pose()
            elif key == ord('r'):
                session.reset_scores()
            elif key in DIFFICULTY_KEYS:
                session.set_difficulty(DIFFICULTY_KEYS[key])
            elif key in PLAYER_KEYS and PLAYER_KEYS[key] <= cfg.max_players:
                session.set_player_count(PLAYER_KEYS[key])
    finally:
        cap.release()
        runner.close()
        stop_bgm_player(bgm_proc)
        cv2.destroyAllWindows()

    scores = [s.score for s in session.slots[:cfg.player_count]]
    logger.info(f"final scores: {scores}")
    return scores, last_combined
