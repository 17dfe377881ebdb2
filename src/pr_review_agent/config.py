"""
Configuration Management

시스템 설정 관리
"""

import os
import yaml
from dataclasses import dataclass, field, replace
from typing import Optional, Dict, Any, List, Mapping
from pathlib import Path
import logging
from logging.handlers import RotatingFileHandler

from .exceptions import SetupError


DEFAULT_MODEL = "gpt-4"


@dataclass
class GitHubConfig:
    """GitHub API 설정"""
    token: Optional[str] = None
    api_base_url: str = "https://api.github.com"
    timeout_seconds: int = 30


@dataclass
class OpenAIConfig:
    """Completion API 설정"""
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    base_url: Optional[str] = None
    temperature: float = 0.2
    timeout_seconds: int = 120


@dataclass
class ReviewConfig:
    """리뷰 생성 설정"""
    max_diff_lines: int = 1500
    max_comments_per_file: int = 10
    validate_lines: bool = True
    exclude_patterns: List[str] = field(default_factory=list)


@dataclass
class LoggingConfig:
    """로깅 설정"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


def _split_patterns(raw: Optional[str]) -> List[str]:
    """쉼표/줄바꿈으로 구분된 glob 패턴 목록"""
    if not raw:
        return []
    return [p.strip() for p in raw.replace('\n', ',').split(',') if p.strip()]


def _as_bool(raw: str) -> bool:
    return raw.strip().lower() in {'1', 'true', 'yes', 'on'}


@dataclass
class AppConfig:
    """전체 애플리케이션 설정"""
    github: GitHubConfig = field(default_factory=GitHubConfig)
    openai: OpenAIConfig = field(default_factory=OpenAIConfig)
    review: ReviewConfig = field(default_factory=ReviewConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """환경 변수에서 설정 로드"""
        env = os.environ if environ is None else environ
        return cls(
            github=GitHubConfig(
                token=env.get("GITHUB_TOKEN") or None,
                api_base_url=env.get("GITHUB_API_URL", "https://api.github.com"),
                timeout_seconds=int(env.get("GITHUB_TIMEOUT", "30")),
            ),
            openai=OpenAIConfig(
                api_key=env.get("OPENAI_API_KEY") or None,
                model=env.get("OPENAI_API_MODEL") or DEFAULT_MODEL,
                base_url=env.get("OPENAI_BASE_URL") or None,
                temperature=float(env.get("OPENAI_TEMPERATURE", "0.2")),
                timeout_seconds=int(env.get("OPENAI_TIMEOUT", "120")),
            ),
            review=ReviewConfig(
                max_diff_lines=int(env.get("MAX_DIFF_LINES", "1500")),
                max_comments_per_file=int(env.get("MAX_COMMENTS_PER_FILE", "10")),
                validate_lines=_as_bool(env.get("VALIDATE_LINES", "true")),
                exclude_patterns=_split_patterns(env.get("EXCLUDE_PATTERNS")),
            ),
            logging=LoggingConfig(
                level=env.get("LOG_LEVEL", "INFO"),
                format=env.get("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
                file_path=env.get("LOG_FILE") or None,
                max_file_size=int(env.get("LOG_MAX_SIZE", str(10 * 1024 * 1024))),
                backup_count=int(env.get("LOG_BACKUP_COUNT", "5")),
            ),
        )

    @classmethod
    def from_yaml(cls, config_path: str, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """
        YAML 파일에서 설정 로드

        토큰은 YAML에 두지 않고 환경 변수에서 가져온다.
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise SetupError(f"Config file not found: {config_path}")

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        if not isinstance(config_data, dict):
            raise SetupError(f"Config file must contain a mapping: {config_path}")

        try:
            config = cls(
                github=GitHubConfig(**config_data.get('github', {})),
                openai=OpenAIConfig(**config_data.get('openai', {})),
                review=ReviewConfig(**config_data.get('review', {})),
                logging=LoggingConfig(**config_data.get('logging', {})),
            )
        except TypeError as e:
            raise SetupError(f"Invalid config file {config_path}: {e}")

        env = os.environ if environ is None else environ
        if env.get("GITHUB_TOKEN"):
            config.github.token = env["GITHUB_TOKEN"]
        if env.get("OPENAI_API_KEY"):
            config.openai.api_key = env["OPENAI_API_KEY"]
        if env.get("OPENAI_API_MODEL"):
            config.openai.model = env["OPENAI_API_MODEL"]
        return config

    def validate(self) -> None:
        """설정 유효성 검사"""
        errors = []

        # 인증 정보 필수 확인
        if not self.github.token:
            errors.append("GITHUB_TOKEN is not provided")
        if not self.openai.api_key:
            errors.append("OPENAI_API_KEY is not provided")

        if not self.openai.model:
            errors.append("Model name cannot be empty")

        if not 0.0 <= self.openai.temperature <= 2.0:
            errors.append("Temperature must be between 0.0 and 2.0")

        if self.github.timeout_seconds <= 0 or self.openai.timeout_seconds <= 0:
            errors.append("Timeouts must be positive")

        if self.review.max_diff_lines <= 0:
            errors.append("max_diff_lines must be positive")

        if self.review.max_comments_per_file <= 0:
            errors.append("max_comments_per_file must be positive")

        # 로그 레벨 검증
        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.logging.level.upper() not in valid_log_levels:
            errors.append(f"Invalid log level: {self.logging.level}")

        if errors:
            raise SetupError(f"Configuration validation failed: {'; '.join(errors)}")

    def to_dict(self) -> Dict[str, Any]:
        """설정을 딕셔너리로 변환"""
        return {
            'github': {
                'api_base_url': self.github.api_base_url,
                'timeout_seconds': self.github.timeout_seconds,
                # 보안상 토큰은 제외
            },
            'openai': {
                'model': self.openai.model,
                'base_url': self.openai.base_url,
                'temperature': self.openai.temperature,
                'timeout_seconds': self.openai.timeout_seconds,
            },
            'review': {
                'max_diff_lines': self.review.max_diff_lines,
                'max_comments_per_file': self.review.max_comments_per_file,
                'validate_lines': self.review.validate_lines,
                'exclude_patterns': list(self.review.exclude_patterns),
            },
            'logging': {
                'level': self.logging.level,
                'format': self.logging.format,
                'file_path': self.logging.file_path,
                'max_file_size': self.logging.max_file_size,
                'backup_count': self.logging.backup_count,
            },
        }


class ConfigManager:
    """설정 관리자"""

    def __init__(self, config: AppConfig):
        self._config = config
        self._config.validate()
        setup_logging(self._config.logging)

    @property
    def config(self) -> AppConfig:
        """현재 설정 반환"""
        return self._config

    def update_config(self, **kwargs) -> None:
        """
        설정 업데이트

        키는 'openai.model' 처럼 섹션.필드 형식
        """
        sections = {}
        for key, value in kwargs.items():
            if '.' not in key:
                raise SetupError(f"Config key must be 'section.field': {key}")
            section, name = key.split('.', 1)
            if not hasattr(self._config, section) or not hasattr(getattr(self._config, section), name):
                raise SetupError(f"Unknown config key: {key}")
            sections.setdefault(section, {})[name] = value

        updated = self._config
        for section, values in sections.items():
            updated = replace(updated, **{section: replace(getattr(updated, section), **values)})

        updated.validate()
        self._config = updated
        if 'logging' in sections:
            setup_logging(self._config.logging)


def setup_logging(config: LoggingConfig) -> None:
    """로깅 설정"""
    logging.basicConfig(
        level=getattr(logging, config.level.upper()),
        format=config.format,
    )
    logging.getLogger().setLevel(getattr(logging, config.level.upper()))

    # 파일 로깅이 설정된 경우 로테이션 설정
    if config.file_path:
        handler = RotatingFileHandler(
            config.file_path,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
        )
        handler.setFormatter(logging.Formatter(config.format))

        # 루트 로거에 핸들러 추가
        logging.getLogger().addHandler(handler)
