"""reports - 감사 리포트 출력 모듈

하위 모듈:
- markdown: report.md + 프로젝트별 Markdown
- json_report: services.json / projects.json / summary.json

리포터는 선택된 형식 순서대로 하나씩 실행되며, 리포트를 변경하지 않습니다.

Example:
    reporters = build_reporters(OutputFormat.ALL, "reports")
    paths = render_reports(report, reporters)
"""

from __future__ import annotations

import logging
from pathlib import Path

from core.config import OutputFormat
from core.domain.interfaces import Reporter
from core.domain.models import AuditReport

from .base import BaseReporter
from .json_report import JSONReporter
from .markdown import MarkdownReporter

logger = logging.getLogger(__name__)


def build_reporters(fmt: OutputFormat, output_dir: str | Path) -> list[Reporter]:
    """출력 형식 플래그에 해당하는 리포터 목록 (Markdown -> JSON 순)"""
    reporters: list[Reporter] = []
    if OutputFormat.MARKDOWN in fmt:
        reporters.append(MarkdownReporter(output_dir))
    if OutputFormat.JSON in fmt:
        reporters.append(JSONReporter(output_dir))
    return reporters


def render_reports(report: AuditReport, reporters: list[Reporter]) -> list[Path]:
    """리포터를 순서대로 실행

    Returns:
        각 리포터의 주 출력 파일 경로

    Raises:
        ReportError: 리포터 실패 (이후 리포터는 실행하지 않음)
    """
    paths = []
    for reporter in reporters:
        logger.debug(f"{reporter.name} 리포트 생성 중...")
        paths.append(reporter.render(report))
    return paths


__all__: list[str] = [
    "BaseReporter",
    "MarkdownReporter",
    "JSONReporter",
    "build_reporters",
    "render_reports",
]
