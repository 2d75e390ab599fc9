# pose_play.py
# -------------
# Usage:
#   python3 pose_play.py --model models/pose_landmarker_full.task --camera 0 --players 2 --difficulty easy
# Keys: n=next pose, 1-4=player count, e/m/h=difficulty, r=reset scores, q/ESC=quit
"""
# 예시: 거리 기반 판정 + 유지(hold) 점수 + 10초마다 자동으로 다음 포즈
python3 pose_play.py \
  --model models/pose_landmarker_full.task \
  --policy distance \
  --scoring hold --hold_frames 8 \
  --auto_advance 10 \
  --bgm music/bgm.mp3
"""

import argparse
import sys

from posematch import ConfigError, load_config, load_target_poses_json
from posematch.live_play import live_play


def parse_args(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument("--model", type=str, default=None, help="MediaPipe pose_landmarker .task 경로 (없으면 1인 모델)")
    ap.add_argument("--camera", type=int, default=0)
    ap.add_argument("--config", type=str, default=None, help="GameConfig JSON 파일 경로")
    ap.add_argument("--targets", type=str, default=None, help="목표 포즈 JSON 파일 경로 (없으면 기본 7종)")
    ap.add_argument("--players", type=int, default=None, choices=[1, 2, 3, 4], help="동시 플레이 인원")
    ap.add_argument("--difficulty", type=str, default=None, choices=["easy", "normal", "hard"])
    ap.add_argument("--policy", type=str, default=None, choices=["categorical", "distance"], help="유사도 판정 방식")
    ap.add_argument("--scoring", type=str, default=None, choices=["immediate", "hold"], help="점수 판정 방식")
    ap.add_argument("--hold_frames", type=int, default=None, help="hold 방식에서 필요한 연속 일치 프레임 수")
    ap.add_argument("--cooldown", type=float, default=None, help="득점 후 쿨다운 (초)")
    ap.add_argument("--history", type=str, default=None, choices=["reset", "retain"],
                    help="검출이 끊긴 슬롯의 스무딩 이력 처리")
    ap.add_argument("--auto_advance", type=float, default=None, help="N초마다 다음 포즈로 자동 전환")
    ap.add_argument("--no_mirror", action="store_true", help="좌우 반전 끄기")
    ap.add_argument("--bgm", type=str, default=None, help="배경 음악 파일 (ffplay/afplay 필요)")
    ap.add_argument("--no_beep", action="store_true", help="득점 비프음 끄기")
    return ap.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    try:
        config = load_config(
            args.config,
            player_count=args.players,
            difficulty=args.difficulty,
            similarity_policy=args.policy,
            scoring_policy=args.scoring,
            hold_frames=args.hold_frames,
            cooldown_sec=args.cooldown,
            history_policy=args.history,
            auto_advance_sec=args.auto_advance,
            mirror=False if args.no_mirror else None,
        )
        targets = load_target_poses_json(args.targets) if args.targets else None
    except (ConfigError, ValueError, FileNotFoundError) as e:
        print(f"[pose_play error] {e}", file=sys.stderr)
        sys.exit(1)

    live_play(
        model_path=args.model,
        camera=args.camera,
        config=config,
        targets=targets,
        bgm=args.bgm,
        score_beep=not args.no_beep,
    )


if __name__ == "__main__":
    main()
