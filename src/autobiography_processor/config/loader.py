"""설정 파일 로더 (YAML)

config.yml을 읽어서 Python 객체로 변환
"""

import yaml
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field, asdict
from autobiography_processor.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = "config/config.yml"

QUOTE_FOLLOW_POLICIES = ("blank", "placeholder")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ParserConfig:
    """구조 파서 설정

    Attributes:
        quote_follow_policy: 인용구 직후 제목 없는 섹션 처리 ("blank" 또는 "placeholder")
        quote_title: 인용구 섹션에 붙는 고정 제목
        placeholder_section_title: placeholder 정책에서 쓰는 섹션 제목
        fallback_chapter_title: 챕터 제목이 하나도 없을 때의 챕터 제목
        fallback_section_title: 챕터 제목이 하나도 없을 때의 섹션 제목
        collapse_blank_lines: 연속된 빈 줄을 하나로 합칠지 여부
    """
    quote_follow_policy: str = "blank"
    quote_title: str = "인용구"
    placeholder_section_title: str = "섹션"
    fallback_chapter_title: str = "자서전"
    fallback_section_title: str = "전체 내용"
    collapse_blank_lines: bool = True


@dataclass
class NavigationConfig:
    """목차/스크롤 동기화 설정"""
    mobile_breakpoint: int = 1024
    mobile_header_offset: int = 140
    scroll_retry_delay: float = 0.1
    max_scroll_retries: int = 1
    smooth_scroll: bool = True


@dataclass
class EditorConfig:
    """수동 편집기 기본값"""
    new_chapter_title: str = "새 챕터"
    new_section_title: str = "새 섹션"
    section_title_prefix: str = "섹션"


@dataclass
class LoggingConfig:
    """로깅 설정"""
    file_level: str = "DEBUG"
    console_level: str = "WARNING"


@dataclass
class Config:
    """전체 설정"""
    parser: ParserConfig = field(default_factory=ParserConfig)
    navigation: NavigationConfig = field(default_factory=NavigationConfig)
    editor: EditorConfig = field(default_factory=EditorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _build_config(data: Dict[str, Any]) -> Config:
    config = Config(
        parser=ParserConfig(**data.get("parser", {})),
        navigation=NavigationConfig(**data.get("navigation", {})),
        editor=EditorConfig(**data.get("editor", {})),
        logging=LoggingConfig(**data.get("logging", {}))
    )

    if config.parser.quote_follow_policy not in QUOTE_FOLLOW_POLICIES:
        raise ValueError(
            f"Invalid quote_follow_policy: {config.parser.quote_follow_policy!r} "
            f"(expected one of {QUOTE_FOLLOW_POLICIES})"
        )
    for name in ("file_level", "console_level"):
        level = getattr(config.logging, name)
        if str(level).upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid logging.{name}: {level!r} (expected one of {LOG_LEVELS})")
    return config


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Config:
    """config.yml 로드

    Args:
        config_path: 설정 파일 경로

    Returns:
        Config 객체

    Raises:
        FileNotFoundError: 설정 파일이 없을 때
        yaml.YAMLError: YAML 파싱 에러
        ValueError: 알 수 없는 정책 값
    """
    path = Path(config_path)
    if not path.exists():
        logger.error(f"Config file not found: {config_path}")
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.debug(f"Loading config from: {config_path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    config = _build_config(data)
    logger.info(f"✅ Config loaded: quote policy={config.parser.quote_follow_policy}")
    return config


# 전역 설정 인스턴스 (싱글톤)
_config: Optional[Config] = None


def get_config() -> Config:
    """전역 설정 인스턴스 반환 (싱글톤)

    기본 설정 파일이 없으면 내장 기본값을 사용한다.

    Example:
        >>> from autobiography_processor.config.loader import get_config
        >>> config = get_config()
        >>> print(config.navigation.mobile_breakpoint)
    """
    global _config
    if _config is None:
        if Path(DEFAULT_CONFIG_PATH).exists():
            _config = load_config(DEFAULT_CONFIG_PATH)
        else:
            logger.debug(f"No {DEFAULT_CONFIG_PATH}, using built-in defaults")
            _config = Config()
    return _config


def reset_config() -> None:
    """싱글톤 초기화 (테스트용)"""
    global _config
    _config = None


def save_config(config: Config, config_path: str = DEFAULT_CONFIG_PATH) -> None:
    """config.yml 저장

    Args:
        config: Config 객체
        config_path: 설정 파일 경로
    """
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(asdict(config), f, allow_unicode=True, default_flow_style=False, sort_keys=False)

    logger.info(f"✅ Config saved: {config_path}")
