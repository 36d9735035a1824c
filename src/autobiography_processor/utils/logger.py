"""전역 로깅 설정 모듈

모든 모듈에서 `from autobiography_processor.utils.logger import get_logger` 로 사용.
"""

import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional

# 로그 디렉토리
LOG_DIR = Path("data/logs")
LOG_DIR.mkdir(parents=True, exist_ok=True)

# 로그 포맷
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"

# 날짜별 로그 파일
LOG_FILE = LOG_DIR / f"{datetime.now().strftime('%Y-%m-%d')}.log"

# 패키지 로거 이름 (외부 라이브러리 로그와 분리)
PACKAGE_LOGGER = "autobiography_processor"


def setup_logging(level: str = "DEBUG", console_level: str = "WARNING") -> None:
    """패키지 로깅 설정

    구조 파서는 페이지 렌더링마다 호출되므로 콘솔은 WARNING 이상만 출력하고,
    상세 내용은 파일 로그에 남긴다.

    Args:
        level: 파일 로그 레벨 (DEBUG/INFO/WARNING/ERROR)
        console_level: 콘솔 로그 레벨 (기본 WARNING)
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(logging.DEBUG)  # 최소 레벨은 DEBUG

    # 기존 핸들러 제거
    package_logger.handlers.clear()

    # 파일 핸들러
    file_handler = logging.FileHandler(LOG_FILE, encoding="utf-8")
    file_handler.setLevel(getattr(logging, level.upper()))
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    package_logger.addHandler(file_handler)

    # 콘솔 핸들러
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    package_logger.addHandler(console_handler)

    package_logger.debug(f"Logging initialized: file={LOG_FILE}, level={level}")


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """로거 인스턴스 반환

    Args:
        name: 로거 이름 (보통 __name__ 사용)

    Returns:
        logging.Logger 인스턴스

    Example:
        >>> from autobiography_processor.utils.logger import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("디버그 메시지")
    """
    return logging.getLogger(name or PACKAGE_LOGGER)


# 모듈 임포트 시 자동 초기화
setup_logging()
