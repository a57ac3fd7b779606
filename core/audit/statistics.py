"""
core/audit/statistics.py - 감사 결과 집계

모든 프로젝트 작업이 끝난 뒤(join 이후) 한 번만 실행되는 순수 함수입니다.
I/O와 동시성이 없으므로 락이 필요하지 않습니다.
"""

from __future__ import annotations

from dataclasses import replace

from core.domain.models import (
    AuditReport,
    AuditStatistics,
    Service,
    ServiceDetail,
    ServiceStatistics,
    UsageStatus,
)


def _detail_sort_key(detail: ServiceDetail) -> tuple[int, int, str]:
    # 활성 프로젝트 수 내림차순 -> 요청 수 내림차순 -> 이름
    return (-detail.project_count, -detail.total_requests, detail.name)


def compute_statistics(report: AuditReport) -> AuditStatistics:
    """리포트의 프로젝트별 서비스 목록으로 실행 전체 통계 계산

    프로젝트 수 관련 필드(total/valid/excluded/skipped)는 report.statistics에서
    그대로 가져오고, 서비스 관련 필드를 새로 계산한다. 입력을 변경하지 않으므로
    같은 리포트에 여러 번 호출해도 결과가 같다.

    - SUCCESS가 아닌 사용량은 요청 수 합계와 미사용 카운트에 포함하지 않음
    - 미사용 카운트는 (프로젝트, 서비스) 쌍 단위

    Args:
        report: 모든 프로젝트 작업이 끝난 AuditReport

    Returns:
        새 AuditStatistics
    """
    details: dict[str, ServiceDetail] = {}
    services_with_no_usage = 0

    for project_id, services in report.services.items():
        for service in services:
            detail = details.get(service.name)
            if detail is None:
                detail = ServiceDetail(name=service.name)
                details[service.name] = detail

            detail.project_count += 1
            detail.enabled_in.append(project_id)

            usage = service.usage
            if usage is not None and usage.status == UsageStatus.SUCCESS:
                detail.total_requests += usage.request_count
                if usage.request_count == 0:
                    services_with_no_usage += 1

    for detail in details.values():
        detail.enabled_in.sort()

    return replace(
        report.statistics,
        unique_services=len(details),
        services_with_no_usage=services_with_no_usage,
        service_details=sorted(details.values(), key=_detail_sort_key),
    )


def calculate_project_stats(services: list[Service]) -> ServiceStatistics:
    """단일 프로젝트의 서비스 상태별 통계"""
    stats = ServiceStatistics(total_services=len(services))

    for service in services:
        usage = service.usage
        if usage is None:
            continue

        if usage.status == UsageStatus.SUCCESS:
            if usage.request_count > 0:
                stats.active_services += 1
                stats.total_requests += usage.request_count
            else:
                stats.inactive_services += 1
        elif usage.status == UsageStatus.NO_ACCESS:
            stats.no_access_services += 1
        elif usage.status == UsageStatus.ERROR:
            stats.error_services += 1

    return stats
