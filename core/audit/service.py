"""
core/audit/service.py - 감사 실행기 (프로젝트 단위 병렬 스케줄러)

프로젝트 목록 조회 -> 검증 필터 -> permit pool 아래 프로젝트별 병렬 처리
-> join -> 통계 계산 순으로 감사를 실행합니다.

특징:
- 프로젝트 목록 조회 실패만 치명적 (ProjectListingError)
- 프로젝트별 서비스 조회 실패는 skipped로 기록하고 계속 진행
- 공유 리포트 변경은 단일 락 안에서만 수행 (락 안에서는 I/O 없음)
- 취소 시 처리 중이던 프로젝트는 skipped로 기록하고 AuditCancelledError 발생

Example:
    service = AuditService(project_repo, service_repo, config)
    ctx = RunContext(timeout=config.run_timeout.total_seconds())

    with parallel_progress("프로젝트 감사") as tracker:
        report = service.audit(ctx, progress_tracker=tracker)
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from core.config import AuditConfig
from core.domain.interfaces import ProjectRepository, ServiceRepository
from core.domain.models import AuditReport, Project
from core.exceptions import AuditCancelledError, ProjectListingError, RunCancelledError
from core.parallel import PermitPool, RunContext
from core.parallel.errors import get_error_code

from .enricher import ServiceEnricher
from .statistics import compute_statistics

if TYPE_CHECKING:
    from cli.ui.progress import ParallelTracker

logger = logging.getLogger(__name__)

# permit 하나당 스케줄러 스레드 수 (permit 대기 스레드를 미리 확보)
THREADS_PER_PERMIT = 2

# join 대기 중 Ctrl+C 감지 주기 (초)
JOIN_POLL_INTERVAL = 0.5


@dataclass
class _RunState:
    """스케줄러 공유 상태 (lock으로 보호)"""

    total: int
    lock: threading.Lock = field(default_factory=threading.Lock)
    processed: int = 0
    # 처리 도중 실행 취소로 중단된 프로젝트 수
    interrupted: int = 0


class AuditService:
    """GCP 서비스 감사 실행기"""

    def __init__(
        self,
        project_repo: ProjectRepository,
        service_repo: ServiceRepository,
        config: AuditConfig | None = None,
    ):
        """초기화

        Args:
            project_repo: 프로젝트 목록 조회/검증
            service_repo: 서비스 목록/사용량 조회
            config: 감사 설정 (None이면 기본값)
        """
        self.project_repo = project_repo
        self.config = config or AuditConfig()
        self.enricher = ServiceEnricher(
            service_repo,
            workers=self.config.service_workers,
            item_timeout=self.config.item_timeout,
        )

    def audit(
        self,
        ctx: RunContext,
        progress_tracker: ParallelTracker | None = None,
    ) -> AuditReport:
        """감사 실행

        Args:
            ctx: 실행 전체를 지배하는 컨텍스트 (취소/기한)
            progress_tracker: 진행 상황 추적기 (선택사항).
                전달 시 set_total(유효 프로젝트 수), 프로젝트 완료마다
                on_complete(success) 호출

        Returns:
            통계가 계산된 AuditReport

        Raises:
            ProjectListingError: 프로젝트 목록 조회 실패 (report는 통계 미계산)
            AuditCancelledError: 모든 프로젝트가 끝나기 전에 취소됨
                (처리 중이던 프로젝트는 skipped, 시작 전 프로젝트는 미포함)
        """
        report = AuditReport(start_time=datetime.now(timezone.utc), period=self.config.period)

        logger.info(f"최근 {self.config.days}일 GCP 서비스 감사 시작")
        logger.info("GCP 프로젝트 검색 중...")

        try:
            projects = self.project_repo.list_projects(ctx)
        except RunCancelledError as e:
            raise AuditCancelledError(report, cause=e) from e
        except Exception as e:
            logger.error(f"프로젝트 목록 조회 실패: {e}")
            raise ProjectListingError(report, cause=e) from e

        logger.info(f"프로젝트 {len(projects)}개 발견")

        valid_projects = [p for p in projects if self.project_repo.is_valid_project(p)]
        report.projects = valid_projects
        report.statistics.total_projects = len(projects)
        report.statistics.valid_projects = len(valid_projects)
        report.statistics.excluded_projects = len(projects) - len(valid_projects)

        logger.info(
            f"유효 프로젝트 {len(valid_projects)}개 처리 (제외 {report.statistics.excluded_projects}개, "
            f"concurrency={self.config.concurrency})"
        )

        state = _RunState(total=len(valid_projects))
        if valid_projects:
            self._process_projects(ctx, valid_projects, report, state, progress_tracker)

        report.generated_at = datetime.now(timezone.utc)
        report.statistics = compute_statistics(report)

        if state.processed < state.total or state.interrupted:
            error = ctx.error
            completed = state.processed - state.interrupted
            logger.warning(f"감사 중단: {completed}/{state.total} 프로젝트만 완료됨 ({error})")
            raise AuditCancelledError(report, cause=error)

        logger.info(f"감사 완료: {_round_seconds(report.execution_time)}")
        logger.info(
            f"프로젝트 {len(valid_projects)}개에서 고유 서비스 {report.statistics.unique_services}개 발견"
        )
        return report

    def _process_projects(
        self,
        ctx: RunContext,
        projects: list[Project],
        report: AuditReport,
        state: _RunState,
        progress_tracker: ParallelTracker | None,
    ) -> None:
        """유효 프로젝트를 permit pool 아래에서 병렬 처리하고 모두 끝날 때까지 대기"""
        if progress_tracker:
            progress_tracker.set_total(len(projects))

        permits = PermitPool(self.config.concurrency)
        max_workers = min(len(projects), self.config.concurrency * THREADS_PER_PERMIT)

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="audit-project") as executor:
            futures: dict[Future[None], Project] = {
                executor.submit(
                    self._process_project,
                    ctx,
                    project,
                    permits,
                    report,
                    state,
                    progress_tracker,
                ): project
                for project in projects
            }
            self._join(ctx, futures)

    def _join(self, ctx: RunContext, futures: dict[Future[None], Project]) -> None:
        """모든 프로젝트 작업 완료 대기 (Ctrl+C 시 취소 후 계속 대기)"""
        pending = set(futures)
        while pending:
            try:
                done, pending = wait(pending, timeout=JOIN_POLL_INTERVAL, return_when=FIRST_COMPLETED)
            except KeyboardInterrupt:
                logger.warning("사용자 중단 요청 - 진행 중인 프로젝트 정리 중...")
                ctx.cancel("사용자 중단")
                continue

            for future in done:
                error = future.exception()
                if error is not None:
                    # _process_project 내부에서 처리되지 않은 예외
                    logger.error(f"프로젝트 작업 실행 중 예외 [{futures[future].id}]: {error}")

    def _process_project(
        self,
        ctx: RunContext,
        project: Project,
        permits: PermitPool,
        report: AuditReport,
        state: _RunState,
        progress_tracker: ParallelTracker | None,
    ) -> None:
        """단일 프로젝트 처리 (워커 스레드)

        permit 대기 중 실행이 취소되면 아무것도 기록하지 않고 종료한다.
        permit을 얻은 뒤의 실패는 실행 취소를 포함해 모두 건너뛴 프로젝트로 기록한다.
        """
        try:
            with permits.permit(ctx):
                self._audit_project(ctx, project, report, state, progress_tracker)
        except RunCancelledError:
            logger.debug(f"[{project.id}] 시작 전 취소됨")

    def _audit_project(
        self,
        ctx: RunContext,
        project: Project,
        report: AuditReport,
        state: _RunState,
        progress_tracker: ParallelTracker | None,
    ) -> None:
        logger.debug(f"[{project.id}] 프로젝트 처리 시작")
        started = time.monotonic()
        error: Exception | None = None
        try:
            services = self.enricher.enrich(ctx, project.id, self.config.period)
        except Exception as e:
            error = e
            services = []
        duration = timedelta(seconds=time.monotonic() - started)

        with state.lock:
            state.processed += 1
            processed = state.processed
            report.project_durations[project.id] = duration
            if error is not None:
                report.skipped_projects[project.id] = error
                report.statistics.skipped_projects += 1
                if isinstance(error, RunCancelledError) and ctx.done():
                    state.interrupted += 1
            else:
                report.services[project.id] = services

        if error is not None:
            logger.error(f"프로젝트 처리 실패 [{project.id}]: {get_error_code(error)} - {error}")
        else:
            logger.info(
                f"진행: {processed}/{state.total} 프로젝트 처리 ({processed * 100 // state.total}%) "
                f"- {project.id} 완료 ({_round_seconds(duration)})"
            )

        if progress_tracker:
            progress_tracker.on_complete(error is None)


def _round_seconds(duration: timedelta) -> timedelta:
    return timedelta(seconds=round(duration.total_seconds()))
