"""
core/domain/models.py - 감사 도메인 모델

GCP 프로젝트, 서비스, 사용량, 감사 리포트 데이터 구조를 정의합니다.

주요 구성 요소:
- Project: 감사 대상 GCP 프로젝트 (조회 후 불변)
- Service: 프로젝트에 활성화된 서비스
- Usage / UsageStatus: 서비스 API 요청 수와 조회 상태
- AuditReport: 한 번의 감사 실행 결과 (집계 루트)
- AuditStatistics / ServiceDetail: 실행 전체 통계
- ServiceStatistics: 프로젝트 단위 서비스 통계 (리포트 출력용)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum


class UsageStatus(str, Enum):
    """사용량 조회 상태

    SUCCESS가 아닌 경우 request_count는 의미가 없으며 합계에 포함되지 않는다.
    """

    SUCCESS = "SUCCESS"
    NO_ACCESS = "NO_ACCESS"
    ERROR = "ERROR"


@dataclass(frozen=True)
class Project:
    """GCP 프로젝트

    Attributes:
        id: 프로젝트 ID (예: "my-project")
        name: 표시 이름
        number: 프로젝트 번호
        labels: 프로젝트 라벨
        create_time: 생성 시각 (알 수 없으면 None)
    """

    id: str
    name: str = ""
    number: int = 0
    labels: dict[str, str] = field(default_factory=dict, compare=False)
    create_time: datetime | None = None


@dataclass
class Usage:
    """서비스 사용량

    Attributes:
        request_count: 기간 내 전체 API 요청 수
        period: 조회 기간
        last_updated: 조회 시각
        status: 조회 상태 (None이면 아직 조회되지 않음)
        error: 실패 시 에러 메시지
    """

    request_count: int = 0
    period: timedelta = timedelta(0)
    last_updated: datetime | None = None
    status: UsageStatus | None = None
    error: str = ""

    @property
    def is_success(self) -> bool:
        return self.status == UsageStatus.SUCCESS

    @property
    def counted_requests(self) -> int:
        """합계에 반영할 요청 수 (SUCCESS가 아니면 0)"""
        return self.request_count if self.is_success else 0

    @classmethod
    def failed(cls, period: timedelta, error: str, last_updated: datetime | None = None) -> Usage:
        """조회 실패를 나타내는 Usage 생성"""
        return cls(period=period, last_updated=last_updated, status=UsageStatus.ERROR, error=error)


@dataclass
class Service:
    """프로젝트에 활성화된 GCP 서비스

    Attributes:
        name: 서비스 이름 (예: "compute.googleapis.com"), 프로젝트 내에서만 유일
        state: 서비스 상태 (예: "ENABLED")
        title: 사람이 읽는 제목
        project_id: 소속 프로젝트 ID
        usage: 사용량 (워커 풀이 채우기 전에는 None)
    """

    name: str
    state: str = ""
    title: str = ""
    project_id: str = ""
    usage: Usage | None = None

    @property
    def is_active(self) -> bool:
        """기간 내 요청이 1건 이상 있는 서비스"""
        return self.usage is not None and self.usage.is_success and self.usage.request_count > 0

    @property
    def is_inactive(self) -> bool:
        """조회에 성공했지만 기간 내 요청이 없는 서비스"""
        return self.usage is not None and self.usage.is_success and self.usage.request_count == 0


@dataclass
class ServiceDetail:
    """서비스별 집계 정보

    Attributes:
        name: 서비스 이름
        project_count: 서비스가 활성화된 프로젝트 수
        total_requests: 전체 프로젝트 합산 요청 수
        enabled_in: 활성화된 프로젝트 ID 목록 (정렬됨)
    """

    name: str
    project_count: int = 0
    total_requests: int = 0
    enabled_in: list[str] = field(default_factory=list)


@dataclass
class AuditStatistics:
    """감사 실행 전체 통계"""

    total_projects: int = 0
    valid_projects: int = 0
    excluded_projects: int = 0
    skipped_projects: int = 0
    unique_services: int = 0
    services_with_no_usage: int = 0
    service_details: list[ServiceDetail] = field(default_factory=list)


@dataclass
class ServiceStatistics:
    """단일 프로젝트의 서비스 통계"""

    total_services: int = 0
    active_services: int = 0
    inactive_services: int = 0
    no_access_services: int = 0
    error_services: int = 0
    total_requests: int = 0


@dataclass
class AuditReport:
    """감사 리포트 (집계 루트)

    프로젝트 단위 필드(services, skipped_projects, project_durations)는
    스케줄러가 락 안에서만 변경하고, statistics는 모든 작업이 끝난 뒤
    한 번만 계산된다.

    Attributes:
        start_time: 실행 시작 시각
        period: 사용량 조회 기간
        generated_at: 실행 완료 시각
        projects: 검증을 통과한 프로젝트 목록
        services: 프로젝트 ID -> 서비스 목록
        skipped_projects: 프로젝트 ID -> 서비스 조회 실패 원인
        project_durations: 프로젝트 ID -> 처리 소요 시간
        statistics: 집계 통계
    """

    start_time: datetime
    period: timedelta
    generated_at: datetime | None = None
    projects: list[Project] = field(default_factory=list)
    services: dict[str, list[Service]] = field(default_factory=dict)
    skipped_projects: dict[str, Exception] = field(default_factory=dict)
    project_durations: dict[str, timedelta] = field(default_factory=dict)
    statistics: AuditStatistics = field(default_factory=AuditStatistics)

    @property
    def period_days(self) -> int:
        return int(self.period / timedelta(days=1))

    @property
    def execution_time(self) -> timedelta:
        if self.generated_at is None:
            return timedelta(0)
        return self.generated_at - self.start_time
