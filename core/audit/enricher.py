"""
core/audit/enricher.py - 프로젝트 단위 서비스 사용량 조회 워커 풀

한 프로젝트의 활성 서비스 목록을 조회한 뒤, 고정 크기 워커 풀로
서비스별 사용량을 병렬 조회하여 입력 순서 그대로 반환합니다.

- 서비스 목록 조회 실패는 그대로 전파 (스케줄러가 skipped로 기록)
- 개별 사용량 조회 실패는 ERROR 상태 Usage로 격하 (프로젝트는 계속 진행)
- 실행 취소는 RunCancelledError로 전파
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from core.domain.interfaces import ServiceRepository
from core.domain.models import Service, Usage
from core.parallel import DEFAULT_ITEM_TIMEOUT, DEFAULT_WORKERS, RunContext, ordered_map
from core.parallel.errors import categorize_error, get_error_code

logger = logging.getLogger(__name__)

_SERVICE_PREFIX = "services/"


def clean_service_name(name: str) -> str:
    """리소스 경로 접두사 제거

    "projects/123/services/compute.googleapis.com" -> "compute.googleapis.com"
    """
    index = name.find(_SERVICE_PREFIX)
    if index != -1:
        return name[index + len(_SERVICE_PREFIX) :]
    return name


class ServiceEnricher:
    """서비스 목록 조회 + 사용량 병렬 조회

    Attributes:
        workers: 프로젝트당 워커 수 (프로젝트 동시성 제한과 별개)
        item_timeout: 서비스별 사용량 조회 제한 시간 (초)
    """

    def __init__(
        self,
        service_repo: ServiceRepository,
        workers: int = DEFAULT_WORKERS,
        item_timeout: float = DEFAULT_ITEM_TIMEOUT,
    ):
        self.service_repo = service_repo
        self.workers = workers
        self.item_timeout = item_timeout

    def enrich(self, ctx: RunContext, project_id: str, period: timedelta) -> list[Service]:
        """프로젝트의 활성 서비스 목록과 각 서비스의 사용량 반환

        Args:
            ctx: 실행 컨텍스트
            project_id: 프로젝트 ID
            period: 사용량 조회 기간

        Returns:
            서비스 목록 (서비스 목록 조회 결과와 같은 순서, 같은 길이)

        Raises:
            Exception: 서비스 목록 조회 실패 (그대로 전파)
            RunCancelledError: 처리 도중 실행이 취소된 경우
        """
        services = self.service_repo.list_services(ctx, project_id, period)
        logger.debug(f"[{project_id}] 서비스 {len(services)}개 발견")

        def fetch(item_ctx: RunContext, service: Service) -> Service:
            return self._enrich_one(ctx, item_ctx, project_id, service, period)

        return ordered_map(
            ctx,
            services,
            fetch,
            workers=self.workers,
            item_timeout=self.item_timeout,
            name=f"usage-{project_id}",
        )

    def _enrich_one(
        self,
        ctx: RunContext,
        item_ctx: RunContext,
        project_id: str,
        service: Service,
        period: timedelta,
    ) -> Service:
        name = clean_service_name(service.name)
        enriched = Service(
            name=name,
            state=service.state,
            title=service.title,
            project_id=project_id,
        )

        try:
            enriched.usage = self.service_repo.get_service_usage(item_ctx, project_id, name, period)
        except Exception as e:
            # 실행 자체가 취소된 경우만 전파, 항목 timeout 등은 격하
            ctx.raise_if_done()
            logger.debug(f"[{project_id}] {name} 사용량 조회 실패: {get_error_code(e)} ({categorize_error(e).value}) {e}")
            enriched.usage = Usage.failed(period, str(e), last_updated=datetime.now(timezone.utc))

        return enriched
