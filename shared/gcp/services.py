"""
shared/gcp/services.py - GCP 서비스 목록 및 사용량 조회

- 서비스 목록: Service Usage v1 list_services (state:ENABLED)
- 사용량: Cloud Monitoring v3 list_time_series
  (serviceruntime.googleapis.com/api/request_count, 1일 ALIGN_SUM + REDUCE_SUM)

사용량 조회 실패는 예외로 올리지 않고 Usage 상태로 반환합니다.
권한 없음은 NO_ACCESS, 그 외 API 오류는 ERROR입니다.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from google.api_core.exceptions import GoogleAPICallError, GoogleAPIError
from google.cloud import monitoring_v3

from core.domain.models import Service, Usage, UsageStatus
from core.exceptions import APICallError, is_access_denied
from core.parallel import RunContext
from shared.io.time_range import TimeRange

logger = logging.getLogger(__name__)

ENABLED_SERVICES_FILTER = "state:ENABLED"
REQUEST_COUNT_METRIC = "serviceruntime.googleapis.com/api/request_count"
SERVICE_NAME_SUFFIX = ".googleapis.com"
ALIGNMENT_PERIOD = timedelta(days=1)

NO_ACCESS_MESSAGE = "모니터링 데이터 접근 권한 없음"


def _state_name(state: Any) -> str:
    # proto enum이면 이름, 문자열이면 그대로
    return getattr(state, "name", None) or str(state)


def _service_title(raw: Any) -> str:
    config = getattr(raw, "config", None)
    return getattr(config, "title", "") if config is not None else ""


def _point_value(point: Any) -> int:
    value = point.value
    if value.int64_value:
        return int(value.int64_value)
    if value.double_value:
        return int(value.double_value)
    return 0


def build_usage_filter(service_name: str) -> str:
    """request_count 메트릭 필터 생성 (서비스 이름에 .googleapis.com 보정)"""
    if not service_name.endswith(SERVICE_NAME_SUFFIX):
        service_name = f"{service_name}{SERVICE_NAME_SUFFIX}"
    return f'metric.type = "{REQUEST_COUNT_METRIC}" AND resource.labels.service = "{service_name}"'


class GCPServiceRepository:
    """Service Usage + Cloud Monitoring 기반 ServiceRepository 구현"""

    def __init__(self, service_usage_client: Any, monitoring_client: Any):
        """초기화

        Args:
            service_usage_client: service_usage_v1.ServiceUsageClient
            monitoring_client: monitoring_v3.MetricServiceClient
        """
        self.service_usage_client = service_usage_client
        self.monitoring_client = monitoring_client

    def list_services(self, ctx: RunContext, project_id: str, period: timedelta) -> list[Service]:
        """프로젝트의 활성 서비스 목록 (사용량은 비어 있음)

        Args:
            ctx: 실행 컨텍스트
            project_id: 프로젝트 ID
            period: 조회 기간 (목록 조회에는 사용하지 않음)

        Returns:
            서비스 목록 (name은 "projects/N/services/x" 리소스 경로)

        Raises:
            APICallError: Service Usage API 호출 실패
            RunCancelledError: 조회 도중 실행이 취소된 경우
        """
        ctx.raise_if_done()

        services: list[Service] = []
        try:
            pager = self.service_usage_client.list_services(
                request={"parent": f"projects/{project_id}", "filter": ENABLED_SERVICES_FILTER},
                timeout=ctx.remaining(),
            )
            for raw in pager:
                ctx.raise_if_done()
                services.append(
                    Service(
                        name=raw.name,
                        state=_state_name(raw.state),
                        title=_service_title(raw),
                        project_id=project_id,
                    )
                )
        except GoogleAPICallError as e:
            raise APICallError.from_google_error("serviceusage", "list_services", e) from e

        return services

    def get_service_usage(
        self,
        ctx: RunContext,
        project_id: str,
        service_name: str,
        period: timedelta,
    ) -> Usage:
        """서비스의 기간 내 API 요청 수 조회

        Args:
            ctx: 항목 컨텍스트 (항목별 timeout 적용)
            project_id: 프로젝트 ID
            service_name: 서비스 이름 (예: "compute.googleapis.com")
            period: 조회 기간 (현재 시각 기준 과거)

        Returns:
            Usage (SUCCESS / NO_ACCESS / ERROR)

        Raises:
            RunCancelledError: 컨텍스트가 취소되었거나 기한이 지난 경우
        """
        ctx.raise_if_done()

        time_range = TimeRange.ending_now(period)
        usage = Usage(period=period, last_updated=time_range.end, status=UsageStatus.SUCCESS)

        request = monitoring_v3.ListTimeSeriesRequest(
            name=f"projects/{project_id}",
            filter=build_usage_filter(service_name),
            interval=monitoring_v3.TimeInterval(start_time=time_range.start, end_time=time_range.end),
            aggregation=monitoring_v3.Aggregation(
                alignment_period=ALIGNMENT_PERIOD,
                per_series_aligner=monitoring_v3.Aggregation.Aligner.ALIGN_SUM,
                cross_series_reducer=monitoring_v3.Aggregation.Reducer.REDUCE_SUM,
            ),
            view=monitoring_v3.ListTimeSeriesRequest.TimeSeriesView.FULL,
        )

        try:
            pager = self.monitoring_client.list_time_series(request=request, timeout=ctx.remaining())
            for series in pager:
                ctx.raise_if_done()
                for point in series.points:
                    usage.request_count += _point_value(point)
        except GoogleAPIError as e:
            usage.request_count = 0
            if is_access_denied(e):
                usage.status = UsageStatus.NO_ACCESS
                usage.error = NO_ACCESS_MESSAGE
            else:
                usage.status = UsageStatus.ERROR
                usage.error = str(e)
            logger.debug(f"[{project_id}] {service_name} 사용량 조회 실패: {usage.status.value} {e}")

        return usage
