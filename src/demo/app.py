"""
app.py

웹캠 포즈 맞추기 게임을 브라우저에서 보여주는 Flask 앱.
서버 쪽에서 카메라를 읽고 GameSession 파이프라인을 돌린 뒤 MJPEG 로 스트리밍한다.
난이도/인원수/다음 포즈는 JSON API 로 조작한다.

사용법:
  python3 src/demo/app.py
  브라우저: http://localhost:5001
"""
from __future__ import annotations

import os
import sys
import threading
import time
from pathlib import Path

import cv2
from flask import Flask, render_template, Response, jsonify, request
from flask_cors import CORS

# 경로 설정
CUR_DIR = Path(__file__).resolve().parent
SRC_DIR = CUR_DIR.parent

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from posematch import (  # noqa: E402
    ConfigError, DetectionRunner, GameSession, get_logger, load_config, load_target_poses_json
)
from posematch.extractor import PoseExtractor  # noqa: E402
from posematch.live_play import render_game_frame  # noqa: E402

logger = get_logger(__name__)

app = Flask(__name__)
CORS(app)
app.config['SECRET_KEY'] = os.environ.get('POSE_MATCH_SECRET', 'pose-match-secret')

# ============================================================
# 설정 섹션 (여기서 기본값을 수정하세요)
# ============================================================
CONFIG = {
    # 웹캠 설정
    'CAMERA_ID': 0,  # 0: 기본 웹캠, 1: 외장 웹캠

    # 포즈 추출 설정
    'MODEL_PATH': os.environ.get('POSE_LANDMARKER_MODEL'),  # pose_landmarker .task (없으면 1인 모델)
    'GAME_CONFIG_JSON': os.environ.get('POSE_MATCH_CONFIG'),  # GameConfig JSON (선택)
    'TARGETS_JSON': os.environ.get('POSE_MATCH_TARGETS'),     # 목표 포즈 JSON (선택)

    # 스트리밍 설정
    'WEBCAM_FPS': 30,   # 스트리밍 FPS 상한
    'JPEG_QUALITY': 75,  # JPEG 압축 품질 (1~100)
}
# ============================================================

# 세션 상태 저장소 (웹캠 전용)
active_session = {
    'is_running': False,
    'session': None,
    'runner': None,
    'webcam_cap': None,
    'frame_buffer': None,
    'lock': threading.Lock(),
}


def init_session(camera_id=None):
    """세션 초기화: 카메라 + 검출기 + GameSession"""
    with active_session['lock']:
        _release_locked()
        config = load_config(CONFIG['GAME_CONFIG_JSON'])
        targets = load_target_poses_json(CONFIG['TARGETS_JSON']) if CONFIG['TARGETS_JSON'] else None
        session = GameSession(config, targets)

        cam = CONFIG['CAMERA_ID'] if camera_id is None else camera_id
        webcam_cap = cv2.VideoCapture(cam)
        if not webcam_cap.isOpened():
            raise RuntimeError(f'Failed to open webcam (CAMERA_ID={cam})')

        pe = PoseExtractor(model_path=CONFIG['MODEL_PATH'], max_poses=config.max_players)
        active_session.update({
            'is_running': True,
            'session': session,
            'runner': DetectionRunner(pe, timeout_sec=config.detector_timeout_sec),
            'webcam_cap': webcam_cap,
            'frame_buffer': None,
        })


def _release_locked():
    if active_session['webcam_cap'] is not None:
        active_session['webcam_cap'].release()
    if active_session['runner'] is not None:
        active_session['runner'].close()
    active_session.update({'is_running': False, 'webcam_cap': None, 'runner': None})


def generate_frames():
    """프레임 생성 (MJPEG 스트리밍)"""
    while True:
        with active_session['lock']:
            if not active_session['is_running']:
                break
            session = active_session['session']
            ok, frame = active_session['webcam_cap'].read()
            if not ok:
                # 웹캠 재시도 (상태 유지)
                session.step(active_session['runner'], None)
                frame = None
            else:
                results = session.step(active_session['runner'], frame)
                if results is None:
                    results = session.last_results
                combined = render_game_frame(frame, session, results, mirror=session.config.mirror)
                active_session['frame_buffer'] = combined

        if frame is None:
            time.sleep(1 / CONFIG['WEBCAM_FPS'])
            continue

        ret, buffer = cv2.imencode('.jpg', combined, [int(cv2.IMWRITE_JPEG_QUALITY), CONFIG['JPEG_QUALITY']])
        if ret:
            yield (b'--frame\r\n'
                   b'Content-Type: image/jpeg\r\n\r\n' + buffer.tobytes() + b'\r\n')

        time.sleep(1 / CONFIG['WEBCAM_FPS'])


def _require_session():
    session = active_session['session']
    if session is None:
        return None, (jsonify({'success': False, 'message': 'session not started'}), 409)
    return session, None


@app.route('/')
def index():
    return render_template('index.html')


@app.route('/api/start', methods=['POST'])
def start_session():
    data = request.get_json(silent=True) or {}
    try:
        init_session(data.get('camera_id'))
    except (RuntimeError, ConfigError, FileNotFoundError) as e:
        return jsonify({'success': False, 'message': f'failed to start session: {e}'}), 500
    return jsonify({'success': True, 'message': 'session started'})


@app.route('/api/stop', methods=['POST'])
def stop_session():
    with active_session['lock']:
        _release_locked()
    return jsonify({'success': True, 'message': 'session stopped'})


@app.route('/api/status')
def get_status():
    with active_session['lock']:
        session = active_session['session']
        response = {'is_running': active_session['is_running']}
        if session is not None:
            response.update(session.snapshot())
    return jsonify(response)


@app.route('/api/difficulty', methods=['POST'])
def set_difficulty():
    data = request.get_json(silent=True) or {}
    with active_session['lock']:
        session, err = _require_session()
        if err:
            return err
        try:
            session.set_difficulty(data.get('difficulty'))
        except ConfigError as e:
            return jsonify({'success': False, 'message': str(e)}), 400
        return jsonify({'success': True, 'difficulty': session.config.difficulty})


@app.route('/api/players', methods=['POST'])
def set_players():
    data = request.get_json(silent=True) or {}
    with active_session['lock']:
        session, err = _require_session()
        if err:
            return err
        try:
            session.set_player_count(int(data.get('count', 0)))
        except (ConfigError, TypeError, ValueError) as e:
            return jsonify({'success': False, 'message': str(e)}), 400
        return jsonify({'success': True, 'player_count': session.config.player_count})


@app.route('/api/next_pose', methods=['POST'])
def next_pose():
    with active_session['lock']:
        session, err = _require_session()
        if err:
            return err
        target = session.next_pose()
        return jsonify({'success': True, 'target': {'id': target.id, 'name': target.name}})


@app.route('/api/reset', methods=['POST'])
def reset_scores():
    with active_session['lock']:
        session, err = _require_session()
        if err:
            return err
        session.reset_scores()
        return jsonify({'success': True})


@app.route('/video_feed')
def video_feed():
    return Response(
        generate_frames(),
        mimetype='multipart/x-mixed-replace; boundary=frame'
    )


if __name__ == '__main__':
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT', 5001)), debug=True, threaded=True, use_reloader=False)
