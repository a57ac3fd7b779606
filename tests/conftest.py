"""
tests/conftest.py - pytest 공통 픽스처

GCP API 없이 감사 로직을 검증하기 위한 인메모리 저장소와 테스트 헬퍼를 제공합니다.

Usage:
    def test_something(project_repo, service_repo, run_ctx):
        service = AuditService(project_repo, service_repo, AuditConfig())
        report = service.audit(run_ctx)
"""

import sys
import threading
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from core.audit.statistics import compute_statistics  # noqa: E402
from core.domain.models import (  # noqa: E402
    AuditReport,
    Project,
    Service,
    Usage,
    UsageStatus,
)
from core.exceptions import APICallError  # noqa: E402
from core.parallel import RunContext  # noqa: E402

SYSTEM_PROJECT = "sys-12345"


# =============================================================================
# 인메모리 저장소
# =============================================================================


class FakeProjectRepository:
    """list_projects 결과를 고정하는 ProjectRepository"""

    def __init__(self, project_ids=(), error=None):
        self.projects = [Project(id=pid, name=pid.upper()) for pid in project_ids]
        self.error = error

    def list_projects(self, ctx):
        ctx.raise_if_done()
        if self.error is not None:
            raise self.error
        return list(self.projects)

    def is_valid_project(self, project):
        return not project.id.startswith("sys-")


class FakeServiceRepository:
    """프로젝트별 서비스/사용량을 딕셔너리로 정의하는 ServiceRepository

    Attributes:
        services: project_id -> 서비스 이름 목록
        usage: (project_id, service_name) -> 요청 수, Usage 또는 Exception
        failing_projects: list_services가 실패하는 프로젝트
        delay: list_services 호출마다 대기할 시간 (초, ctx 취소 시 즉시 종료)
    """

    def __init__(self, services=None, usage=None, failing_projects=(), delay=0.0):
        self.services = services or {}
        self.usage = usage or {}
        self.failing_projects = set(failing_projects)
        self.delay = delay
        self.lock = threading.Lock()
        self.listed = []
        self.usage_calls = []
        self.active = 0
        self.max_active = 0

    def list_services(self, ctx, project_id, period):
        with self.lock:
            self.listed.append(project_id)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                ctx.wait(self.delay)
            ctx.raise_if_done()
            if project_id in self.failing_projects:
                raise APICallError("serviceusage", "list_services", "PermissionDenied", f"{project_id} 접근 거부")
            return [
                Service(name=f"projects/{project_id}/services/{name}", state="ENABLED", title=name.split(".")[0])
                for name in self.services.get(project_id, [])
            ]
        finally:
            with self.lock:
                self.active -= 1

    def get_service_usage(self, ctx, project_id, service_name, period):
        with self.lock:
            self.usage_calls.append((project_id, service_name))
        value = self.usage.get((project_id, service_name), 0)
        if isinstance(value, Exception):
            raise value
        if isinstance(value, Usage):
            return value
        return Usage(
            request_count=value,
            period=period,
            last_updated=datetime.now(timezone.utc),
            status=UsageStatus.SUCCESS,
        )


class RecordingTracker:
    """ParallelTracker 대체 (호출 기록)"""

    def __init__(self):
        self.lock = threading.Lock()
        self.total = None
        self.results = []

    def set_total(self, total):
        self.total = total

    def on_complete(self, success):
        with self.lock:
            self.results.append(success)


# =============================================================================
# 헬퍼
# =============================================================================


def make_service(name, count=0, status=UsageStatus.SUCCESS, project_id=""):
    """사용량이 채워진 Service 생성 (status=None이면 usage 없음)"""
    usage = None
    if status is not None:
        usage = Usage(request_count=count, period=timedelta(days=30), status=status)
    return Service(name=name, state="ENABLED", project_id=project_id, usage=usage)


def wait_until(predicate, timeout=5.0):
    """predicate가 True가 될 때까지 대기"""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


# =============================================================================
# 픽스처
# =============================================================================


@pytest.fixture
def run_ctx():
    """무기한 실행 컨텍스트 (테스트 종료 시 취소)"""
    ctx = RunContext()
    yield ctx
    ctx.cancel("테스트 종료")


@pytest.fixture
def project_repo():
    """5개 프로젝트 (1개는 시스템 프로젝트)"""
    return FakeProjectRepository(["alpha", "beta", "gamma", "delta", SYSTEM_PROJECT])


@pytest.fixture
def service_repo():
    """alpha/beta/delta 서비스 구성 (gamma는 서비스 목록 조회 실패)"""
    return FakeServiceRepository(
        services={
            "alpha": ["compute.googleapis.com", "storage.googleapis.com", "logging.googleapis.com"],
            "beta": ["compute.googleapis.com", "bigquery.googleapis.com"],
            "delta": ["compute.googleapis.com", "storage.googleapis.com"],
        },
        usage={
            ("alpha", "compute.googleapis.com"): 100,
            ("alpha", "storage.googleapis.com"): 0,
            ("alpha", "logging.googleapis.com"): 7,
            ("beta", "compute.googleapis.com"): 50,
            ("beta", "bigquery.googleapis.com"): 0,
            ("delta", "compute.googleapis.com"): 25,
            ("delta", "storage.googleapis.com"): 3,
        },
        failing_projects=["gamma"],
    )


@pytest.fixture
def tracker():
    return RecordingTracker()


@pytest.fixture
def sample_report():
    """통계 계산 전 샘플 리포트 (alpha, beta 처리 / gamma 건너뜀)"""
    start = datetime(2024, 5, 1, 9, 0, 0, tzinfo=timezone.utc)
    report = AuditReport(start_time=start, period=timedelta(days=30))
    report.generated_at = start + timedelta(minutes=2, seconds=5)
    report.projects = [Project(id="alpha"), Project(id="beta"), Project(id="gamma")]
    report.services = {
        "alpha": [
            make_service("compute.googleapis.com", 100, project_id="alpha"),
            make_service("storage.googleapis.com", 0, project_id="alpha"),
            make_service("monitoring.googleapis.com", 0, UsageStatus.NO_ACCESS, project_id="alpha"),
        ],
        "beta": [
            make_service("compute.googleapis.com", 50, project_id="beta"),
            make_service("bigquery.googleapis.com", 9, UsageStatus.ERROR, project_id="beta"),
        ],
    }
    report.services["beta"][1].usage.error = "deadline exceeded"
    report.skipped_projects = {"gamma": APICallError("serviceusage", "list_services", "PermissionDenied", "거부")}
    report.project_durations = {
        "alpha": timedelta(seconds=4),
        "beta": timedelta(seconds=9),
        "gamma": timedelta(seconds=1),
    }
    report.statistics.total_projects = 4
    report.statistics.valid_projects = 3
    report.statistics.excluded_projects = 1
    report.statistics.skipped_projects = 1
    return report


@pytest.fixture
def final_report(sample_report):
    """통계 계산이 끝난 샘플 리포트"""
    sample_report.statistics = compute_statistics(sample_report)
    return sample_report
