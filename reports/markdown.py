"""
reports/markdown.py - Markdown 리포트

출력 구조:
    <output_dir>/<timestamp>/
    ├── report.md                  # 실행 정보, 요약, 프로젝트/서비스 개요, 건너뛴 프로젝트
    └── projects_report/
        └── <project_id>.md        # 프로젝트별 서비스 사용량
"""

from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path

from core.audit.statistics import calculate_project_stats
from core.domain.models import AuditReport, Service, UsageStatus
from shared.gcp.categories import category_display_name, is_infrastructure_service, service_category
from shared.io.file import ensure_dir, write_text
from shared.io.formatting import format_duration, format_number

from .base import BaseReporter, report_timestamp

logger = logging.getLogger(__name__)

MAIN_REPORT_NAME = "report.md"
PROJECTS_DIR_NAME = "projects_report"

DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _cell(value: object) -> str:
    """표 셀 값 (파이프와 줄바꿈 이스케이프)"""
    return str(value).replace("|", "\\|").replace("\n", " ")


class _MarkdownWriter:
    """Markdown 문서 작성 헬퍼"""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def title(self, text: str) -> None:
        self.lines += [f"# {text}", ""]

    def section(self, text: str) -> None:
        self.lines += [f"## {text}", ""]

    def item(self, label: str, value: object) -> None:
        self.lines.append(f"- {label}: {value}")

    def bullet(self, text: str) -> None:
        self.lines.append(f"- {text}")

    def paragraph(self, text: str) -> None:
        self.lines += [text, ""]

    def table(self, headers: list[str], rows: list[list[object]]) -> None:
        self.lines.append("| " + " | ".join(headers) + " |")
        self.lines.append("|" + "|".join("-" * (len(h) + 2) for h in headers) + "|")
        for row in rows:
            self.lines.append("| " + " | ".join(_cell(v) for v in row) + " |")
        self.blank()

    def blank(self) -> None:
        self.lines.append("")

    def render(self) -> str:
        return "\n".join(self.lines).rstrip("\n") + "\n"


class MarkdownReporter(BaseReporter):
    """report.md + 프로젝트별 Markdown 리포트"""

    name = "markdown"

    def render(self, report: AuditReport) -> Path:
        report_dir = self.report_dir(report)
        projects_dir = ensure_dir(report_dir / PROJECTS_DIR_NAME, self.name)

        main_path = write_text(report_dir / MAIN_REPORT_NAME, self.build_main_report(report), self.name)

        for project_id in sorted(report.services):
            write_text(
                projects_dir / f"{project_id}.md",
                self.build_project_report(report, project_id),
                self.name,
            )

        logger.info(f"Markdown 리포트 생성: {main_path} (프로젝트 {len(report.services)}개)")
        return main_path

    # -------------------------------------------------------------------------
    # report.md
    # -------------------------------------------------------------------------

    def build_main_report(self, report: AuditReport) -> str:
        stats = report.statistics
        generated_at = report_timestamp(report)
        md = _MarkdownWriter()

        md.title("GCP Services Audit Report")

        md.section("Execution Information")
        md.item("Start time", report.start_time.isoformat(timespec="seconds"))
        md.item("End time", generated_at.isoformat(timespec="seconds"))
        md.item("Total execution time", format_duration(report.execution_time))
        md.blank()

        md.section("Summary")
        md.item("Analysis Period", f"{report.period_days} days")
        md.item(
            "Date Range",
            f"{(report.start_time - report.period).strftime(DATE_FORMAT)} to {report.start_time.strftime(DATE_FORMAT)}",
        )
        md.item("Total Projects", stats.total_projects)
        md.item("Valid Projects", stats.valid_projects)
        md.item("Excluded Projects", stats.excluded_projects)
        md.item("Skipped Projects", stats.skipped_projects)
        md.item("Unique Services", stats.unique_services)
        md.item("Services With No Usage", stats.services_with_no_usage)
        md.blank()

        self._write_projects_overview(md, report)
        self._write_timing(md, report)
        self._write_services(md, report)
        self._write_skipped(md, report)

        return md.render()

    def _write_projects_overview(self, md: _MarkdownWriter, report: AuditReport) -> None:
        # 서비스 수 내림차순 -> 프로젝트 ID
        overview = sorted(
            (
                (project_id, len(services), sum(1 for s in services if s.is_active))
                for project_id, services in report.services.items()
            ),
            key=lambda row: (-row[1], row[0]),
        )

        md.section("Projects Overview")
        md.table(
            ["Project ID", "Services", "Active Services*", "Processing Time"],
            [
                [
                    f"[{project_id}](./{PROJECTS_DIR_NAME}/{project_id}.md)",
                    total,
                    active,
                    format_duration(report.project_durations.get(project_id, timedelta(0))),
                ]
                for project_id, total, active in overview
            ],
        )
        md.paragraph("*Active services are those with request count > 0 in the specified period")

    def _write_timing(self, md: _MarkdownWriter, report: AuditReport) -> None:
        durations = {pid: report.project_durations.get(pid, timedelta(0)) for pid in report.services}
        if not durations:
            return

        total = sum(durations.values(), timedelta(0))
        slowest = max(sorted(durations), key=lambda pid: durations[pid])

        md.section("Timing Statistics")
        md.item("Total execution time", format_duration(report.execution_time))
        md.item("Average project processing time", format_duration(total / len(durations)))
        md.item("Slowest project", f"{slowest} ({format_duration(durations[slowest])})")
        md.blank()

    def _write_services(self, md: _MarkdownWriter, report: AuditReport) -> None:
        details = report.statistics.service_details
        if not details:
            return

        md.section("Services")
        md.table(
            ["Service", "Category", "Infra", "Projects", "Total Requests"],
            [
                [
                    detail.name,
                    category_display_name(service_category(detail.name)),
                    "Y" if is_infrastructure_service(detail.name) else "",
                    detail.project_count,
                    format_number(detail.total_requests),
                ]
                for detail in details
            ],
        )

    def _write_skipped(self, md: _MarkdownWriter, report: AuditReport) -> None:
        if not report.skipped_projects:
            return

        md.section("Skipped Projects")
        md.table(
            ["Project ID", "Error"],
            [[project_id, report.skipped_projects[project_id]] for project_id in sorted(report.skipped_projects)],
        )

    # -------------------------------------------------------------------------
    # projects_report/<project_id>.md
    # -------------------------------------------------------------------------

    def build_project_report(self, report: AuditReport, project_id: str) -> str:
        services = report.services.get(project_id, [])
        stats = calculate_project_stats(services)
        md = _MarkdownWriter()

        md.title(f"Project: {project_id}")
        md.paragraph(f"Generated on: {report_timestamp(report).isoformat(timespec='seconds')}")

        md.section("Summary")
        md.item("Total Services", stats.total_services)
        md.item("Active Services", stats.active_services)
        md.item("Inactive Services", stats.inactive_services)
        md.item("Services without access to metrics", stats.no_access_services)
        md.item("Services with errors", stats.error_services)
        md.item("Total Requests", format_number(stats.total_requests))
        md.blank()

        active = sorted(
            (s for s in services if s.is_active),
            key=lambda s: (-s.usage.request_count if s.usage else 0, s.name),
        )
        if active:
            md.section("Active Services")
            md.table(
                ["Service Name", "State", "Request Count", "Last Updated"],
                [[s.name, s.state, format_number(s.usage.request_count), _last_updated(s)] for s in active if s.usage],
            )

        if stats.inactive_services:
            md.section("Inactive Services")
            md.paragraph("The following services are enabled but had no requests during the audit period:")
            for s in services:
                if s.is_inactive:
                    md.bullet(s.name)
            md.blank()

        if stats.no_access_services:
            md.section("Services Without Metrics Access")
            md.paragraph("Unable to determine usage for the following services due to insufficient permissions:")
            for s in _with_status(services, UsageStatus.NO_ACCESS):
                md.bullet(s.name)
            md.blank()

        if stats.error_services:
            md.section("Services With Errors")
            md.paragraph("The following services encountered errors while fetching metrics:")
            for s in _with_status(services, UsageStatus.ERROR):
                md.bullet(f"{s.name}: {s.usage.error if s.usage else ''}")
            md.blank()

        return md.render()


def _with_status(services: list[Service], status: UsageStatus) -> list[Service]:
    return [s for s in services if s.usage is not None and s.usage.status == status]


def _last_updated(service: Service) -> str:
    if service.usage is None or service.usage.last_updated is None:
        return "-"
    return service.usage.last_updated.strftime(DATETIME_FORMAT)
