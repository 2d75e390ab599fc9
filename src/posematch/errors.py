"""
예외 클래스
"""


class PoseMatchError(Exception):
    """posematch 공통 예외"""


class ConfigError(PoseMatchError, ValueError):
    """잘못된 설정값 (난이도, 인원수, 스무딩 상수 등)"""


class DetectorError(PoseMatchError, RuntimeError):
    """포즈 검출기 호출 실패. 해당 프레임만 건너뛴다."""
