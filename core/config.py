"""
core/config.py - 중앙 설정 관리

감사 실행 설정(AuditConfig)과 출력 형식(OutputFormat), 설정 로드를 담당합니다.

설정 우선순위 (낮음 -> 높음):
    1. 기본값
    2. YAML 설정 파일 (--config 경로 또는 ~/.gcp-auditor.yaml)
    3. 환경 변수 (GCP_AUDITOR_ 접두사)
    4. CLI 옵션

Usage:
    from core.config import load_config

    config = load_config(overrides={"days": 60})
    print(config.period)  # 60 days, 0:00:00
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from datetime import timedelta
from enum import Flag, auto
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from core.exceptions import ConfigError, ValidationError

PROJECT_ROOT = Path(__file__).resolve().parent.parent
VERSION_FILE = PROJECT_ROOT / "version.txt"

CONFIG_FILE_NAME = ".gcp-auditor.yaml"
ENV_PREFIX = "GCP_AUDITOR_"

DEFAULT_OUTPUT_DIR = "reports"
DEFAULT_DAYS = 30
DEFAULT_CONCURRENCY = 3
DEFAULT_SERVICE_WORKERS = 10
DEFAULT_ITEM_TIMEOUT = 30.0
DEFAULT_RUN_TIMEOUT_MINUTES = 30


def get_version() -> str:
    """version.txt에서 버전 문자열 반환 (없으면 설치된 패키지 메타데이터)"""
    if VERSION_FILE.exists():
        return VERSION_FILE.read_text(encoding="utf-8").strip()

    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("gcp-auditor")
    except PackageNotFoundError:
        return "0.0.0"


class OutputFormat(Flag):
    """출력 형식 플래그

    Usage:
        fmt = OutputFormat.from_string("all")
        if OutputFormat.MARKDOWN in fmt:
            ...
    """

    NONE = 0
    MARKDOWN = auto()
    JSON = auto()
    ALL = MARKDOWN | JSON

    @classmethod
    def from_string(cls, value: str) -> OutputFormat:
        """문자열에서 OutputFormat 생성

        Args:
            value: "markdown", "json", "all"

        Raises:
            ValidationError: 지원하지 않는 형식
        """
        format_map = {
            "markdown": cls.MARKDOWN,
            "json": cls.JSON,
            "all": cls.ALL,
        }
        fmt = format_map.get(value.strip().lower())
        if fmt is None:
            raise ValidationError("format", value, "markdown, json, all")
        return fmt


@dataclass
class AuditConfig:
    """감사 실행 설정

    Attributes:
        output_dir: 리포트 출력 디렉토리
        days: 사용량 조회 기간 (일)
        format: 리포트 출력 형식
        verbose: 디버그 로그 출력 여부
        concurrency: 동시에 처리할 최대 프로젝트 수
        service_workers: 프로젝트당 사용량 조회 워커 수
        item_timeout: 서비스별 사용량 조회 제한 시간 (초)
        run_timeout_minutes: 감사 전체 제한 시간 (분)
        exclude_patterns: 추가로 제외할 프로젝트 ID 정규식
    """

    output_dir: str = DEFAULT_OUTPUT_DIR
    days: int = DEFAULT_DAYS
    format: OutputFormat = OutputFormat.ALL
    verbose: bool = False
    concurrency: int = DEFAULT_CONCURRENCY
    service_workers: int = DEFAULT_SERVICE_WORKERS
    item_timeout: float = DEFAULT_ITEM_TIMEOUT
    run_timeout_minutes: int = DEFAULT_RUN_TIMEOUT_MINUTES
    exclude_patterns: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if isinstance(self.format, str):
            self.format = OutputFormat.from_string(self.format)
        if self.days < 1:
            raise ConfigError("days", f"1 이상이어야 합니다 (현재: {self.days})")
        if self.concurrency < 1:
            raise ConfigError("concurrency", f"1 이상이어야 합니다 (현재: {self.concurrency})")
        if self.service_workers < 1:
            raise ConfigError("service_workers", f"1 이상이어야 합니다 (현재: {self.service_workers})")
        if self.item_timeout <= 0:
            raise ConfigError("item_timeout", f"0보다 커야 합니다 (현재: {self.item_timeout})")
        if self.run_timeout_minutes < 1:
            raise ConfigError("run_timeout_minutes", f"1 이상이어야 합니다 (현재: {self.run_timeout_minutes})")
        if self.exclude_patterns is None:
            self.exclude_patterns = []
        elif isinstance(self.exclude_patterns, str):
            self.exclude_patterns = [self.exclude_patterns]
        if not isinstance(self.exclude_patterns, (list, tuple)) or not all(
            isinstance(pattern, str) for pattern in self.exclude_patterns
        ):
            raise ConfigError("exclude_patterns", f"문자열 목록이어야 합니다 (현재: {self.exclude_patterns!r})")
        self.exclude_patterns = list(self.exclude_patterns)

    @property
    def period(self) -> timedelta:
        return timedelta(days=self.days)

    @property
    def run_timeout(self) -> timedelta:
        return timedelta(minutes=self.run_timeout_minutes)


# 환경 변수 이름 -> (설정 키, 변환 함수)
_ENV_KEYS = {
    "OUTPUT_DIR": ("output_dir", str),
    "DAYS": ("days", int),
    "FORMAT": ("format", str),
    "VERBOSE": ("verbose", lambda v: v.strip().lower() in ("1", "true", "yes", "on")),
    "CONCURRENCY": ("concurrency", int),
}


def _load_file(path: Path) -> dict[str, Any]:
    """YAML 설정 파일 로드 (키의 '-'는 '_'로 변환)"""
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(str(path), "설정 파일을 읽을 수 없습니다", cause=e) from e

    if not isinstance(data, dict):
        raise ConfigError(str(path), "최상위 값은 매핑이어야 합니다")

    return {str(key).replace("-", "_"): value for key, value in data.items()}


def _load_env(environ: dict[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for suffix, (key, convert) in _ENV_KEYS.items():
        raw = environ.get(f"{ENV_PREFIX}{suffix}")
        if raw is None or raw == "":
            continue
        try:
            values[key] = convert(raw)
        except ValueError as e:
            raise ConfigError(f"{ENV_PREFIX}{suffix}", f"잘못된 값 '{raw}'", cause=e) from e
    return values


def find_config_file(config_file: str | Path | None = None) -> Path | None:
    """사용할 설정 파일 경로 반환

    Args:
        config_file: 명시한 설정 파일 경로 (None이면 ~/.gcp-auditor.yaml이 있을 때만 사용)

    Returns:
        설정 파일 경로 (사용할 파일이 없으면 None)

    Raises:
        ConfigError: 명시한 설정 파일이 없음
    """
    if config_file is not None:
        path = Path(config_file).expanduser()
        if not path.exists():
            raise ConfigError(str(path), "설정 파일이 없습니다")
        return path

    default_path = Path.home() / CONFIG_FILE_NAME
    return default_path if default_path.exists() else None


def load_config(
    config_file: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
    environ: dict[str, str] | None = None,
) -> AuditConfig:
    """설정 파일, 환경 변수, CLI 옵션을 병합하여 AuditConfig 생성

    Args:
        config_file: 설정 파일 경로 (None이면 ~/.gcp-auditor.yaml이 있을 때만 사용)
        overrides: CLI 옵션 값 (None 값은 무시)
        environ: 환경 변수 (None이면 os.environ)

    Returns:
        AuditConfig

    Raises:
        ConfigError: 설정 파일 오류, 알 수 없는 키, 잘못된 값
    """
    values: dict[str, Any] = {}

    path = find_config_file(config_file)
    if path is not None:
        values.update(_load_file(path))

    values.update(_load_env(dict(os.environ) if environ is None else environ))
    values.update({key: value for key, value in (overrides or {}).items() if value is not None})

    known = {f.name for f in fields(AuditConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError(unknown[0], "알 수 없는 설정 키입니다")

    try:
        return AuditConfig(**values)
    except (TypeError, ValidationError) as e:
        raise ConfigError("config", str(e), cause=e) from e
