"""
cli/app.py - 메인 CLI 엔트리포인트

Click 기반의 CLI 애플리케이션 진입점입니다.

명령어 구조:
    gcp-auditor --version                 # 버전 표시
    gcp-auditor audit                     # 최근 30일 감사 (Markdown + JSON)
    gcp-auditor --days 60 audit -f json   # 최근 60일, JSON만
    gcp-auditor --config cfg.yaml audit -c 5 --timeout 60

종료 코드:
    0   감사 완료
    1   설정/클라이언트/프로젝트 목록 조회/리포트 실패, 또는 감사 중단
        (중단 시에도 완료된 프로젝트로 리포트 생성)

Usage:
    $ gcp-auditor audit -v
    $ python -m cli.app audit
"""

from __future__ import annotations

import logging

import click
from click import Context

from core.audit import AuditService
from core.config import AuditConfig, find_config_file, get_version, load_config
from core.domain.interfaces import ProjectRepository, ServiceRepository
from core.domain.models import AuditReport
from core.exceptions import (
    AuditCancelledError,
    ClientInitError,
    ConfigError,
    ProjectListingError,
    ReportError,
    format_error_for_user,
)
from core.parallel import RunContext
from reports import build_reporters, render_reports
from shared.gcp import GCPProjectRepository, GCPServiceRepository, create_clients
from shared.io.file import ensure_dir

from .ui import (
    configure_logging,
    parallel_progress,
    print_audit_summary,
    print_error,
    print_header,
    print_info,
    print_success,
    print_warning,
)

logger = logging.getLogger(__name__)

VERSION = get_version()


def run_audit(
    config: AuditConfig,
    project_repo: ProjectRepository,
    service_repo: ServiceRepository,
    quiet: bool = False,
) -> int:
    """감사 실행 -> 리포트 출력 -> 콘솔 요약

    Args:
        config: AuditConfig
        project_repo: 프로젝트 조회
        service_repo: 서비스/사용량 조회
        quiet: 진행 표시와 요약 생략

    Returns:
        종료 코드 (0: 완료, 1: 실패 또는 중단)
    """
    service = AuditService(project_repo, service_repo, config)
    ctx = RunContext(timeout=config.run_timeout.total_seconds())
    exit_code = 0

    try:
        with parallel_progress("프로젝트 감사", disable=quiet) as tracker:
            report: AuditReport = service.audit(ctx, progress_tracker=tracker)
    except ProjectListingError as e:
        print_error(f"프로젝트 목록 조회 실패: {format_error_for_user(e.cause or e)}")
        return 1
    except AuditCancelledError as e:
        report = e.report
        print_warning(f"{e}. 완료된 프로젝트만 리포트에 포함합니다.")
        exit_code = 1

    try:
        paths = render_reports(report, build_reporters(config.format, config.output_dir))
    except ReportError as e:
        print_error(str(e))
        return 1

    if not quiet:
        print_audit_summary(report)
    for path in paths:
        print_success(f"리포트 생성: {path}")

    return exit_code


@click.group()
@click.version_option(VERSION, prog_name="gcp-auditor")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="설정 파일 경로 (기본: ~/.gcp-auditor.yaml)",
)
@click.option("-o", "--output-dir", default=None, help="리포트 출력 디렉토리 (기본: reports)")
@click.option("-d", "--days", type=click.IntRange(min=1), default=None, help="사용량 조회 기간 (일, 기본: 30)")
@click.pass_context
def cli(ctx: Context, config_file: str | None, output_dir: str | None, days: int | None) -> None:
    """GCP 프로젝트별 활성 서비스와 API 사용량 감사 도구"""
    ctx.ensure_object(dict)
    ctx.obj.update(config_file=config_file, output_dir=output_dir, days=days)


@cli.command("audit")
@click.option("-v", "--verbose", is_flag=True, help="디버그 로그 출력")
@click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice(["markdown", "json", "all"]),
    default=None,
    help="리포트 형식 (기본: all)",
)
@click.option("-c", "--concurrency", type=click.IntRange(min=1), default=None, help="동시 처리 프로젝트 수 (기본: 3)")
@click.option("--timeout", type=click.IntRange(min=1), default=None, help="감사 전체 제한 시간 (분, 기본: 30)")
@click.option("-q", "--quiet", is_flag=True, help="최소 출력 모드")
@click.pass_context
def audit_command(
    ctx: Context,
    verbose: bool,
    fmt: str | None,
    concurrency: int | None,
    timeout: int | None,
    quiet: bool,
) -> None:
    """모든 접근 가능한 프로젝트의 활성 서비스와 사용량 감사"""
    options = ctx.obj or {}
    overrides = {
        "output_dir": options.get("output_dir"),
        "days": options.get("days"),
        "format": fmt,
        "concurrency": concurrency,
        "run_timeout_minutes": timeout,
        "verbose": True if verbose else None,
    }

    try:
        config = load_config(options.get("config_file"), overrides=overrides)
    except ConfigError as e:
        print_error(str(e))
        raise SystemExit(1) from e

    configure_logging(verbose=config.verbose, quiet=quiet)
    config_path = find_config_file(options.get("config_file"))
    if config_path is not None:
        logger.info(f"설정 파일 사용: {config_path}")
    logger.debug(f"설정: {config}")

    if not quiet:
        print_header(f"GCP 서비스 감사 v{VERSION}")
        print_info(f"기간 {config.days}일, 동시 처리 {config.concurrency}개 프로젝트, 출력 {config.output_dir}")

    try:
        ensure_dir(config.output_dir, "cli")
    except ReportError as e:
        print_error(str(e))
        raise SystemExit(1) from e

    try:
        clients = create_clients()
    except ClientInitError as e:
        print_error(f"GCP 클라이언트 생성 실패: {format_error_for_user(e.cause or e)}")
        raise SystemExit(1) from e

    with clients:
        try:
            project_repo = GCPProjectRepository(clients.projects, config.exclude_patterns)
        except ConfigError as e:
            print_error(str(e))
            raise SystemExit(1) from e
        service_repo = GCPServiceRepository(clients.service_usage, clients.monitoring)

        exit_code = run_audit(config, project_repo, service_repo, quiet=quiet)

    raise SystemExit(exit_code)


if __name__ == "__main__":
    cli()
