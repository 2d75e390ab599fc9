"""
run_live.py: posematch.live_play 를 별도 프로세스에서 실행하기 위한 간단한 런너
사용 예:
  python3 src/demo/run_live.py \
    --model /tmp/pose_landmarker_full.task \
    --config /tmp/game.json \
    --camera 0
"""
from __future__ import annotations
import argparse
import sys
from pathlib import Path

# src 루트를 sys.path에 추가
CUR = Path(__file__).resolve()
SRC_DIR = CUR.parents[1]
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from posematch import load_config  # noqa: E402
from posematch.live_play import live_play  # noqa: E402


def parse_args():
    p = argparse.ArgumentParser()
    p.add_argument("--model", default=None)
    p.add_argument("--config", default=None)
    p.add_argument("--camera", type=int, default=0)
    return p.parse_args()


def main():
    a = parse_args()
    try:
        live_play(
            model_path=a.model,
            camera=a.camera,
            config=load_config(a.config),
        )
    except Exception as e:
        print(f"[run_live error] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
