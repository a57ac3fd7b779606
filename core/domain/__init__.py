"""
core/domain - 감사 도메인 모델 및 협력자 인터페이스
"""

from .interfaces import ProjectRepository, Reporter, ServiceRepository
from .models import (
    AuditReport,
    AuditStatistics,
    Project,
    Service,
    ServiceDetail,
    ServiceStatistics,
    Usage,
    UsageStatus,
)

__all__: list[str] = [
    # Models
    "Project",
    "Service",
    "Usage",
    "UsageStatus",
    "AuditReport",
    "AuditStatistics",
    "ServiceDetail",
    "ServiceStatistics",
    # Interfaces
    "ProjectRepository",
    "ServiceRepository",
    "Reporter",
]
