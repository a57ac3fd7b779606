"""
reports/json_report.py - JSON 리포트

출력 구조:
    <output_dir>/<timestamp>/
    ├── services.json   # 서비스 중심: 서비스별 활성화된 프로젝트와 요청 수
    ├── projects.json   # 프로젝트 중심: 프로젝트별 서비스와 요청 수
    └── summary.json    # 실행 통계, 건너뛴 프로젝트, 프로젝트별 처리 시간

키는 camelCase, 목록은 이름/ID 순으로 정렬합니다.
requestCount는 SUCCESS 상태일 때만 실제 값이고, 그 외에는 0입니다.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from core.domain.models import AuditReport, Service
from shared.io.file import write_json

from .base import BaseReporter, report_timestamp

logger = logging.getLogger(__name__)

SERVICES_FILE = "services.json"
PROJECTS_FILE = "projects.json"
SUMMARY_FILE = "summary.json"

ISO_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _usage_fields(service: Service) -> dict[str, Any]:
    fields: dict[str, Any] = {"requestCount": 0, "state": service.state}
    usage = service.usage
    if usage is None:
        return fields

    fields["requestCount"] = usage.counted_requests
    if usage.status is not None:
        fields["status"] = usage.status.value
    if usage.error:
        fields["error"] = usage.error
    if usage.last_updated is not None:
        fields["lastUpdated"] = usage.last_updated.strftime(ISO_FORMAT)
    return fields


def build_services_report(report: AuditReport) -> list[dict[str, Any]]:
    """서비스 중심 리포트 (서비스 이름순, 서비스별 프로젝트 ID순)"""
    by_name: dict[str, dict[str, Any]] = {}

    for project_id, services in report.services.items():
        for service in services:
            entry = by_name.get(service.name)
            if entry is None:
                entry = {"name": service.name, "projects": []}
                if service.title:
                    entry["title"] = service.title
                by_name[service.name] = entry
            entry["projects"].append({"projectId": project_id, **_usage_fields(service)})

    result = []
    for name in sorted(by_name):
        entry = by_name[name]
        entry["projects"].sort(key=lambda p: p["projectId"])
        result.append(entry)
    return result


def build_projects_report(report: AuditReport) -> list[dict[str, Any]]:
    """프로젝트 중심 리포트 (프로젝트 ID순, 서비스 이름순)"""
    result = []
    for project_id in sorted(report.services):
        services = []
        for service in sorted(report.services[project_id], key=lambda s: s.name):
            entry: dict[str, Any] = {"name": service.name}
            if service.title:
                entry["title"] = service.title
            entry.update(_usage_fields(service))
            services.append(entry)
        result.append({"projectId": project_id, "services": services})
    return result


def build_summary(report: AuditReport) -> dict[str, Any]:
    """실행 요약 (통계, 건너뛴 프로젝트, 처리 시간)"""
    stats = report.statistics
    return {
        "startTime": report.start_time.strftime(ISO_FORMAT),
        "generatedAt": report_timestamp(report).strftime(ISO_FORMAT),
        "periodDays": report.period_days,
        "executionSeconds": round(report.execution_time.total_seconds(), 3),
        "statistics": {
            "totalProjects": stats.total_projects,
            "validProjects": stats.valid_projects,
            "excludedProjects": stats.excluded_projects,
            "skippedProjects": stats.skipped_projects,
            "uniqueServices": stats.unique_services,
            "servicesWithNoUsage": stats.services_with_no_usage,
        },
        "serviceDetails": [
            {
                "name": detail.name,
                "projectCount": detail.project_count,
                "totalRequests": detail.total_requests,
                "enabledIn": list(detail.enabled_in),
            }
            for detail in stats.service_details
        ],
        "skippedProjects": [
            {"projectId": project_id, "error": str(report.skipped_projects[project_id])}
            for project_id in sorted(report.skipped_projects)
        ],
        "projectDurations": {
            project_id: round(report.project_durations[project_id].total_seconds(), 3)
            for project_id in sorted(report.project_durations)
        },
    }


class JSONReporter(BaseReporter):
    """services.json / projects.json / summary.json 출력"""

    name = "json"

    def render(self, report: AuditReport) -> Path:
        report_dir = self.report_dir(report)

        services_path = write_json(report_dir / SERVICES_FILE, build_services_report(report), self.name)
        write_json(report_dir / PROJECTS_FILE, build_projects_report(report), self.name)
        write_json(report_dir / SUMMARY_FILE, build_summary(report), self.name)

        logger.info(f"JSON 리포트 생성: {report_dir}")
        return services_path
