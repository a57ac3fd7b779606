"""
cli/ui/summary.py - 감사 결과 콘솔 요약

프로젝트 수, 고유 서비스 수, 미사용 서비스 수, 건너뛴 프로젝트,
요청 수 기준 상위 서비스를 Rich 테이블/패널로 출력합니다.
"""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table

from core.domain.models import AuditReport
from shared.gcp.categories import category_display_name, service_category
from shared.io.formatting import format_duration, format_number

from .console import console, print_table

DEFAULT_TOP_SERVICES = 10


def print_audit_summary(report: AuditReport, top: int = DEFAULT_TOP_SERVICES) -> None:
    """감사 결과 요약 출력

    Args:
        report: 통계가 계산된 AuditReport
        top: 상위 서비스 표시 개수 (0이면 생략)
    """
    stats = report.statistics

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()
    table.add_row("분석 기간", f"{report.period_days}일")
    table.add_row("분석 프로젝트", f"{len(report.services)}개")
    table.add_row("제외 프로젝트", f"{stats.excluded_projects}개")
    table.add_row("건너뛴 프로젝트", f"{stats.skipped_projects}개")
    table.add_row("고유 서비스", f"{stats.unique_services}개")
    table.add_row("미사용 서비스", f"{stats.services_with_no_usage}개")
    table.add_row("실행 시간", format_duration(report.execution_time))
    console.print(Panel(table, title="감사 요약", border_style="cyan"))

    if report.skipped_projects:
        print_table(
            "건너뛴 프로젝트",
            ["프로젝트", "오류"],
            [[project_id, report.skipped_projects[project_id]] for project_id in sorted(report.skipped_projects)],
        )

    if top > 0 and stats.service_details:
        print_table(
            f"상위 서비스 (최대 {top}개)",
            ["서비스", "카테고리", "프로젝트 수", "요청 수"],
            [
                [
                    detail.name,
                    category_display_name(service_category(detail.name)),
                    detail.project_count,
                    format_number(detail.total_requests),
                ]
                for detail in stats.service_details[:top]
            ],
        )
