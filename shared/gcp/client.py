"""
shared/gcp/client.py - Google Cloud API 클라이언트 생성 헬퍼

Application Default Credentials(ADC)로 감사에 필요한 세 클라이언트를
생성합니다. 인증 정보 탐색과 재시도는 클라이언트 라이브러리에 맡깁니다.

주요 구성 요소:
- GCPClients: Resource Manager / Service Usage / Monitoring 클라이언트 묶음
- create_clients: 클라이언트 생성 (실패 시 ClientInitError)

Example:
    from shared.gcp.client import create_clients

    with create_clients() as clients:
        projects = GCPProjectRepository(clients.projects)
        services = GCPServiceRepository(clients.service_usage, clients.monitoring)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import monitoring_v3, resourcemanager_v3, service_usage_v1

from core.exceptions import ClientInitError

logger = logging.getLogger(__name__)


@dataclass
class GCPClients:
    """감사에 사용하는 GCP 클라이언트 묶음

    Attributes:
        projects: resourcemanager_v3.ProjectsClient
        service_usage: service_usage_v1.ServiceUsageClient
        monitoring: monitoring_v3.MetricServiceClient
    """

    projects: Any
    service_usage: Any
    monitoring: Any

    def close(self) -> None:
        """모든 클라이언트의 transport 종료"""
        for client in (self.projects, self.service_usage, self.monitoring):
            transport = getattr(client, "transport", None)
            if transport is not None:
                transport.close()

    def __enter__(self) -> GCPClients:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _create(service: str, factory: Any, credentials: Any = None) -> Any:
    try:
        return factory(credentials=credentials)
    except (GoogleAuthError, GoogleAPIError, ValueError) as e:
        logger.error(f"{service} 클라이언트 생성 실패: {e}")
        raise ClientInitError(service, cause=e) from e


def create_clients(credentials: Any = None) -> GCPClients:
    """GCP 클라이언트 생성

    Args:
        credentials: google.auth 자격 증명 (None이면 ADC 사용)

    Returns:
        GCPClients

    Raises:
        ClientInitError: 자격 증명을 찾을 수 없거나 클라이언트 생성 실패
    """
    projects = _create("resourcemanager", resourcemanager_v3.ProjectsClient, credentials)
    service_usage = _create("serviceusage", service_usage_v1.ServiceUsageClient, credentials)
    monitoring = _create("monitoring", monitoring_v3.MetricServiceClient, credentials)

    logger.debug("GCP 클라이언트 생성 완료 (resourcemanager, serviceusage, monitoring)")
    return GCPClients(projects=projects, service_usage=service_usage, monitoring=monitoring)
