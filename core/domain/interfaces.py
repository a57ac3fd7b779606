"""
core/domain/interfaces.py - 외부 협력자 인터페이스

감사 코어가 의존하는 프로젝트/서비스 조회 및 리포트 출력 계약입니다.
실제 구현은 shared.gcp(조회)와 reports(출력)에 있습니다.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from .models import AuditReport, Project, Service, Usage

if TYPE_CHECKING:
    from core.parallel.context import RunContext


class ProjectRepository(Protocol):
    """프로젝트 목록 조회 및 감사 대상 판별"""

    def list_projects(self, ctx: RunContext) -> list[Project]: ...

    def is_valid_project(self, project: Project) -> bool: ...


class ServiceRepository(Protocol):
    """프로젝트별 활성 서비스 및 사용량 조회

    get_service_usage는 권한 없음을 NO_ACCESS로, 그 외 API 오류를
    ERROR 상태로 반환한다 (예외로 올리지 않음).
    """

    def list_services(self, ctx: RunContext, project_id: str, period: timedelta) -> list[Service]: ...

    def get_service_usage(
        self,
        ctx: RunContext,
        project_id: str,
        service_name: str,
        period: timedelta,
    ) -> Usage: ...


class Reporter(Protocol):
    """완성된 리포트를 파일로 출력 (리포트를 변경하지 않음)"""

    name: str

    def render(self, report: AuditReport) -> Path: ...
