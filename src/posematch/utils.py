"""
유틸리티 함수들: 로거, 색상 파싱, 비프음 재생, BGM 재생 등
"""

import logging
import shutil
import subprocess
import sys

import numpy as np


def get_logger(name):
    """'[LEVEL] message' 형식으로 stderr 에 출력하는 로거 (핸들러는 한 번만 붙인다)"""
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler(sys.stderr)
        h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        logger.addHandler(h)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


logger = get_logger(__name__)


def parse_bgr(color_str, default=(0, 215, 255)):
    """
    Parse 'B,G,R' into a BGR tuple of ints. Fallback to default on error.
    """
    try:
        parts = [int(x.strip()) for x in color_str.split(',')]
    except (AttributeError, ValueError):
        return default
    if len(parts) != 3:
        return default
    return tuple(parts)


def play_beep(freq=1000.0, dur=0.2, sr=44100, amp=0.2):
    """
    Play a short sine beep using sounddevice if available.
    Non-blocking; failures are logged and ignored.
    """
    try:
        import sounddevice as sd
        t = np.linspace(0, dur, int(sr*dur), endpoint=False, dtype=np.float32)
        wave = (amp*np.sin(2*np.pi*freq*t)).astype(np.float32)
        sd.play(wave, samplerate=sr, blocking=False)
    except Exception as e:
        logger.debug(f"beep failed: {e}")


def start_bgm_player(path, loop=True):
    """
    Play background music with ffplay (preferred) or afplay (macOS).
    Returns the subprocess.Popen handle or None on failure.
    """
    try:
        if shutil.which("ffplay"):
            # -nodisp: no window, -loglevel quiet: silent, -loop 0: forever
            cmd = ["ffplay", "-nodisp", "-loglevel", "quiet"]
            cmd += ["-loop", "0"] if loop else ["-autoexit"]
            cmd += [path]
            return subprocess.Popen(cmd)
        # afplay cannot loop; plays once
        if shutil.which("afplay"):
            return subprocess.Popen(["afplay", path])
    except OSError as e:
        logger.warning(f"BGM playback failed: {e}")
        return None
    logger.warning("BGM playback needs ffplay or afplay")
    return None


def stop_bgm_player(proc):
    """Stop the BGM player process if running."""
    if proc is None:
        return
    try:
        if proc.poll() is None:
            proc.terminate()
    except OSError as e:
        logger.debug(f"stopping BGM player failed: {e}")
