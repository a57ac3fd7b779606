"""
reports/base.py - 리포터 공통 기반

모든 리포터는 같은 실행의 결과를 <output_dir>/<generated_at:%Y%m%d_%H%M%S>/
아래에 씁니다. 리포터는 리포트를 읽기만 하고 변경하지 않습니다.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path

from core.domain.models import AuditReport
from shared.io.file import ensure_dir

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def report_timestamp(report: AuditReport) -> datetime:
    """리포트 출력 기준 시각 (generated_at이 없으면 현재 시각)"""
    return report.generated_at or datetime.now(timezone.utc)


class BaseReporter(ABC):
    """리포터 기반 클래스

    Attributes:
        name: 리포터 이름 (오류 메시지/로그용)
        output_dir: 출력 루트 디렉토리
    """

    name: str = "base"

    def __init__(self, output_dir: str | Path):
        self.output_dir = Path(output_dir)

    def report_dir(self, report: AuditReport) -> Path:
        """이번 실행의 출력 디렉토리 생성 후 반환"""
        timestamp = report_timestamp(report).strftime(TIMESTAMP_FORMAT)
        return ensure_dir(self.output_dir / timestamp, self.name)

    @abstractmethod
    def render(self, report: AuditReport) -> Path:
        """리포트 출력

        Returns:
            주 출력 파일 경로

        Raises:
            ReportError: 출력 실패
        """
