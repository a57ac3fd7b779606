"""
shared/gcp/projects.py - GCP 프로젝트 조회 (Resource Manager v3)

호출자가 접근할 수 있는 ACTIVE 프로젝트를 모두 조회하고,
시스템 프로젝트(sys-숫자)와 설정된 제외 패턴에 맞는 프로젝트를 걸러냅니다.
페이지 처리는 클라이언트 라이브러리의 pager에 맡깁니다.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from google.api_core.exceptions import GoogleAPICallError

from core.domain.models import Project
from core.exceptions import APICallError, ConfigError
from core.parallel import RunContext

logger = logging.getLogger(__name__)

SYSTEM_PROJECT_PATTERN = r"^sys-\d+"
ACTIVE_PROJECTS_QUERY = "state:ACTIVE"


def _project_number(resource_name: str) -> int:
    """"projects/123456" -> 123456 (형식이 다르면 0)"""
    _, _, number = resource_name.rpartition("/")
    return int(number) if number.isdigit() else 0


def _to_project(raw: Any) -> Project:
    create_time = raw.create_time if isinstance(raw.create_time, datetime) else None
    return Project(
        id=raw.project_id,
        name=raw.display_name,
        number=_project_number(raw.name),
        labels=dict(raw.labels),
        create_time=create_time,
    )


class GCPProjectRepository:
    """Resource Manager 기반 ProjectRepository 구현"""

    def __init__(self, client: Any, exclude_patterns: Iterable[str] = ()):
        """초기화

        Args:
            client: resourcemanager_v3.ProjectsClient
            exclude_patterns: 추가로 제외할 프로젝트 ID 정규식

        Raises:
            ConfigError: 잘못된 정규식
        """
        self.client = client
        self._patterns = [re.compile(SYSTEM_PROJECT_PATTERN)]
        for pattern in exclude_patterns:
            try:
                self._patterns.append(re.compile(pattern))
            except re.error as e:
                raise ConfigError("exclude_patterns", f"잘못된 정규식 '{pattern}'", cause=e) from e

    def list_projects(self, ctx: RunContext) -> list[Project]:
        """ACTIVE 프로젝트 전체 조회

        Raises:
            APICallError: Resource Manager API 호출 실패
            RunCancelledError: 조회 도중 실행이 취소된 경우
        """
        ctx.raise_if_done()
        logger.debug("프로젝트 목록 조회 시작")

        projects: list[Project] = []
        try:
            pager = self.client.search_projects(
                request={"query": ACTIVE_PROJECTS_QUERY},
                timeout=ctx.remaining(),
            )
            for raw in pager:
                ctx.raise_if_done()
                projects.append(_to_project(raw))
        except GoogleAPICallError as e:
            raise APICallError.from_google_error("resourcemanager", "search_projects", e) from e

        logger.debug(f"프로젝트 목록 조회 완료: {len(projects)}개")
        return projects

    def is_valid_project(self, project: Project) -> bool:
        """감사 대상 프로젝트인지 확인 (제외 패턴에 하나라도 맞으면 False)"""
        return not any(pattern.search(project.id) for pattern in self._patterns)
