"""
core/audit - 감사 실행 모듈

- AuditService: 프로젝트 단위 병렬 스케줄러 (동시성 제한, 부분 실패 허용)
- ServiceEnricher: 프로젝트 내 서비스별 사용량 병렬 조회
- compute_statistics / calculate_project_stats: 결과 집계

Example:
    from core.audit import AuditService
    from core.parallel import RunContext

    service = AuditService(project_repo, service_repo, config)
    report = service.audit(RunContext(timeout=30 * 60))
"""

from .enricher import ServiceEnricher, clean_service_name
from .service import AuditService
from .statistics import calculate_project_stats, compute_statistics

__all__: list[str] = [
    "AuditService",
    "ServiceEnricher",
    "clean_service_name",
    "compute_statistics",
    "calculate_project_stats",
]
