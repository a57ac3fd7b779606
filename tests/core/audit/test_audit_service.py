"""
tests/core/audit/test_audit_service.py - core/audit/service.py 테스트

인메모리 저장소로 프로젝트 스케줄링, 건너뛰기, 취소 동작을 검증합니다.
"""

import threading
import time

import pytest
from conftest import FakeProjectRepository, FakeServiceRepository, wait_until

from core.audit.service import AuditService
from core.config import AuditConfig
from core.domain.models import UsageStatus
from core.exceptions import APICallError, AuditCancelledError, ProjectListingError, RunCancelledError
from core.parallel import RunContext


def _config(**kwargs):
    return AuditConfig(**kwargs)


class TestAuditScenario:
    """정상 감사 시나리오"""

    def test_full_audit(self, project_repo, service_repo, run_ctx):
        report = AuditService(project_repo, service_repo, _config()).audit(run_ctx)
        stats = report.statistics

        assert stats.total_projects == 5
        assert stats.valid_projects == 4
        assert stats.excluded_projects == 1
        assert stats.skipped_projects == 1
        assert set(report.services) == {"alpha", "beta", "delta"}
        assert set(report.skipped_projects) == {"gamma"}
        assert isinstance(report.skipped_projects["gamma"], APICallError)

    def test_project_accounting(self, project_repo, service_repo, run_ctx):
        """valid == 처리됨 + 건너뜀, 처리 시간은 모든 유효 프로젝트에 기록"""
        report = AuditService(project_repo, service_repo, _config()).audit(run_ctx)

        assert len(report.services) + len(report.skipped_projects) == report.statistics.valid_projects
        assert set(report.project_durations) == {"alpha", "beta", "gamma", "delta"}
        assert [p.id for p in report.projects] == ["alpha", "beta", "gamma", "delta"]

    def test_system_project_never_listed(self, project_repo, service_repo, run_ctx):
        AuditService(project_repo, service_repo, _config()).audit(run_ctx)
        assert "sys-12345" not in service_repo.listed

    def test_services_enriched(self, project_repo, service_repo, run_ctx):
        report = AuditService(project_repo, service_repo, _config()).audit(run_ctx)

        alpha = report.services["alpha"]
        assert [s.name for s in alpha] == [
            "compute.googleapis.com",
            "storage.googleapis.com",
            "logging.googleapis.com",
        ]
        assert [s.usage.request_count for s in alpha] == [100, 0, 7]
        assert all(s.usage.status == UsageStatus.SUCCESS for s in alpha)

    def test_statistics_computed(self, project_repo, service_repo, run_ctx):
        stats = AuditService(project_repo, service_repo, _config()).audit(run_ctx).statistics

        assert stats.unique_services == 4
        # alpha/storage, beta/bigquery
        assert stats.services_with_no_usage == 2
        top = stats.service_details[0]
        assert (top.name, top.project_count, top.total_requests) == ("compute.googleapis.com", 3, 175)
        assert top.enabled_in == ["alpha", "beta", "delta"]

    def test_report_timing(self, project_repo, service_repo, run_ctx):
        report = AuditService(project_repo, service_repo, _config()).audit(run_ctx)

        assert report.generated_at is not None
        assert report.generated_at >= report.start_time
        assert report.period_days == 30

    def test_days_from_config(self, project_repo, service_repo, run_ctx):
        report = AuditService(project_repo, service_repo, _config(days=7)).audit(run_ctx)
        assert report.period_days == 7
        assert report.services["alpha"][0].usage.period.days == 7

    def test_tracker_calls(self, project_repo, service_repo, run_ctx, tracker):
        AuditService(project_repo, service_repo, _config()).audit(run_ctx, progress_tracker=tracker)

        assert tracker.total == 4
        assert sorted(tracker.results) == [False, True, True, True]

    def test_empty_project_list(self, run_ctx, tracker):
        report = AuditService(FakeProjectRepository([]), FakeServiceRepository(), _config()).audit(
            run_ctx, progress_tracker=tracker
        )

        assert report.statistics.total_projects == 0
        assert report.services == {}
        assert report.generated_at is not None
        assert tracker.total is None

    def test_only_excluded_projects(self, run_ctx):
        repo = FakeServiceRepository()
        report = AuditService(FakeProjectRepository(["sys-1", "sys-2"]), repo, _config()).audit(run_ctx)

        assert report.statistics.total_projects == 2
        assert report.statistics.excluded_projects == 2
        assert report.statistics.valid_projects == 0
        assert repo.listed == []


class TestConcurrency:
    """동시성 제한 테스트"""

    @pytest.mark.parametrize("concurrency", [1, 2, 3])
    def test_max_active_within_limit(self, concurrency, run_ctx):
        ids = [f"p{i}" for i in range(8)]
        repo = FakeServiceRepository(services={pid: ["compute.googleapis.com"] for pid in ids}, delay=0.05)

        AuditService(FakeProjectRepository(ids), repo, _config(concurrency=concurrency)).audit(run_ctx)

        assert 1 <= repo.max_active <= concurrency
        assert sorted(repo.listed) == sorted(ids)

    def test_same_result_regardless_of_concurrency(self, project_repo):
        """동시성 설정과 무관하게 같은 통계"""
        results = []
        for concurrency in (1, 3):
            repo = FakeServiceRepository(
                services={"alpha": ["a.googleapis.com", "b.googleapis.com"], "beta": ["a.googleapis.com"]},
                usage={("alpha", "a.googleapis.com"): 5, ("beta", "a.googleapis.com"): 2},
                failing_projects=["gamma"],
            )
            ctx = RunContext()
            report = AuditService(project_repo, repo, _config(concurrency=concurrency)).audit(ctx)
            results.append(report.statistics)

        assert results[0] == results[1]


class TestFailures:
    """목록 조회 실패와 취소 테스트"""

    def test_listing_failure(self, service_repo, run_ctx):
        project_repo = FakeProjectRepository(error=APICallError("resourcemanager", "search_projects", "PermissionDenied"))

        with pytest.raises(ProjectListingError) as exc_info:
            AuditService(project_repo, service_repo, _config()).audit(run_ctx)

        assert isinstance(exc_info.value.cause, APICallError)
        assert exc_info.value.report is not None
        assert service_repo.listed == []

    def test_listing_cancelled(self, project_repo, service_repo):
        ctx = RunContext()
        ctx.cancel("중단")

        with pytest.raises(AuditCancelledError):
            AuditService(project_repo, service_repo, _config()).audit(ctx)

    def test_cancel_returns_partial_report(self, tracker):
        """처리 중 취소된 프로젝트는 처리 시간과 함께 skipped로 기록"""
        ids = ["fast", "slow1", "slow2", "slow3"]

        class MixedRepo(FakeServiceRepository):
            def list_services(self, ctx, project_id, period):
                if project_id == "fast":
                    return super().list_services(ctx, project_id, period)
                with self.lock:
                    self.listed.append(project_id)
                ctx.wait(30.0)
                ctx.raise_if_done()
                return []

        repo = MixedRepo(services={"fast": ["compute.googleapis.com"]})
        ctx = RunContext()
        service = AuditService(FakeProjectRepository(ids), repo, _config(concurrency=4))

        threading.Thread(
            target=lambda: wait_until(lambda: len(repo.listed) == 4) and ctx.cancel("사용자 중단"),
            daemon=True,
        ).start()

        started = time.monotonic()
        with pytest.raises(AuditCancelledError) as exc_info:
            service.audit(ctx, progress_tracker=tracker)
        elapsed = time.monotonic() - started

        assert elapsed < 10.0
        report = exc_info.value.report
        assert set(report.services) == {"fast"}
        assert set(report.skipped_projects) == {"slow1", "slow2", "slow3"}
        assert all(isinstance(report.skipped_projects[pid], RunCancelledError) for pid in ids[1:])
        assert set(report.project_durations) == set(ids)
        for pid in ids:
            assert (pid in report.services) != (pid in report.skipped_projects)
        assert report.generated_at is not None
        assert report.statistics.unique_services == 1
        assert report.statistics.valid_projects == 4
        assert report.statistics.skipped_projects == 3
        assert sorted(tracker.results) == [False, False, False, True]

    def test_cancel_before_permit_records_nothing(self):
        """permit을 얻기 전에 취소된 프로젝트는 어느 쪽에도 기록되지 않음"""
        ids = [f"p{i}" for i in range(3)]
        repo = FakeServiceRepository(services={pid: [] for pid in ids}, delay=30.0)
        ctx = RunContext()
        service = AuditService(FakeProjectRepository(ids), repo, _config(concurrency=1))

        threading.Thread(
            target=lambda: wait_until(lambda: len(repo.listed) == 1) and ctx.cancel("사용자 중단"),
            daemon=True,
        ).start()

        with pytest.raises(AuditCancelledError) as exc_info:
            service.audit(ctx)

        report = exc_info.value.report
        started_id = repo.listed[0]
        assert report.services == {}
        assert set(report.skipped_projects) == {started_id}
        assert set(report.project_durations) == {started_id}

    def test_deadline_stops_audit(self):
        ids = [f"p{i}" for i in range(3)]
        repo = FakeServiceRepository(services={pid: [] for pid in ids}, delay=30.0)
        ctx = RunContext(timeout=0.2)

        started = time.monotonic()
        with pytest.raises(AuditCancelledError) as exc_info:
            AuditService(FakeProjectRepository(ids), repo, _config(concurrency=1)).audit(ctx)

        assert time.monotonic() - started < 10.0
        assert exc_info.value.report.services == {}
