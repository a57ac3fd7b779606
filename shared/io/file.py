"""
shared/io/file.py - 리포트 파일 I/O 유틸리티

쓰기 실패는 ReportError로 올립니다 (reporter 이름 포함).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from core.exceptions import ReportError


def ensure_dir(path: str | Path, reporter: str = "file") -> Path:
    """디렉토리 존재 확인 및 생성

    Args:
        path: 디렉토리 경로
        reporter: 오류 메시지에 사용할 리포터 이름

    Returns:
        생성된 경로 객체

    Raises:
        ReportError: 디렉토리를 만들 수 없는 경우
    """
    path = Path(path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ReportError(reporter, f"디렉토리 생성 실패: {path}", cause=e) from e
    return path


def write_text(
    filepath: str | Path,
    content: str,
    reporter: str = "file",
    encoding: str = "utf-8",
) -> Path:
    """텍스트 파일 쓰기 (상위 디렉토리 자동 생성)

    Raises:
        ReportError: 쓰기 실패
    """
    filepath = Path(filepath)
    ensure_dir(filepath.parent, reporter)
    try:
        filepath.write_text(content, encoding=encoding)
    except OSError as e:
        raise ReportError(reporter, f"파일 쓰기 실패: {filepath}", cause=e) from e
    return filepath


def write_json(
    filepath: str | Path,
    data: Any,
    reporter: str = "file",
    indent: int = 2,
) -> Path:
    """JSON 파일 쓰기

    Raises:
        ReportError: 직렬화 또는 쓰기 실패
    """
    try:
        content = json.dumps(data, ensure_ascii=False, indent=indent)
    except (TypeError, ValueError) as e:
        raise ReportError(reporter, f"JSON 직렬화 실패: {filepath}", cause=e) from e
    return write_text(filepath, content + "\n", reporter)
