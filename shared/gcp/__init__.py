"""
shared/gcp - Google Cloud 어댑터

core.domain 인터페이스(ProjectRepository, ServiceRepository)의 GCP 구현과
클라이언트 생성, 서비스 카테고리 분류를 제공합니다.
"""

from .categories import category_display_name, is_infrastructure_service, service_category
from .client import GCPClients, create_clients
from .projects import SYSTEM_PROJECT_PATTERN, GCPProjectRepository
from .services import GCPServiceRepository, build_usage_filter

__all__: list[str] = [
    # Client
    "GCPClients",
    "create_clients",
    # Repositories
    "GCPProjectRepository",
    "GCPServiceRepository",
    "SYSTEM_PROJECT_PATTERN",
    "build_usage_filter",
    # Categories
    "service_category",
    "category_display_name",
    "is_infrastructure_service",
]
