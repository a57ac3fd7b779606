# tests/cli/test_cli_app.py
"""
cli/app.py 단위 테스트

GCP 클라이언트와 저장소를 인메모리 구현으로 교체하여 CLI 흐름과 종료 코드를 검증합니다.
"""

from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner
from conftest import FakeProjectRepository, FakeServiceRepository

from core.config import AuditConfig, OutputFormat
from core.exceptions import APICallError, ClientInitError

# =============================================================================
# 픽스처
# =============================================================================


@pytest.fixture
def runner():
    """Click CliRunner"""
    return CliRunner()


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """홈 설정 파일과 GCP_AUDITOR_ 환경 변수 격리"""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    for suffix in ("OUTPUT_DIR", "DAYS", "FORMAT", "VERBOSE", "CONCURRENCY"):
        monkeypatch.delenv(f"GCP_AUDITOR_{suffix}", raising=False)
    return tmp_path


@pytest.fixture
def fake_gcp(project_repo, service_repo):
    """create_clients / 저장소 생성을 가짜 구현으로 교체"""
    with (
        patch("cli.app.create_clients", return_value=MagicMock()) as create_clients,
        patch("cli.app.GCPProjectRepository", return_value=project_repo) as project_cls,
        patch("cli.app.GCPServiceRepository", return_value=service_repo),
    ):
        yield create_clients, project_cls


def _only_run_dir(output_dir):
    dirs = [p for p in output_dir.iterdir() if p.is_dir()]
    assert len(dirs) == 1
    return dirs[0]


# =============================================================================
# CLI 그룹 테스트
# =============================================================================


class TestCLI:
    """CLI 그룹 테스트"""

    def test_version_option(self, runner):
        """--version 옵션 테스트"""
        from cli.app import VERSION, cli

        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert VERSION in result.output

    def test_help_option(self, runner):
        from cli.app import cli

        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "audit" in result.output

    def test_invalid_days(self, runner):
        from cli.app import cli

        result = runner.invoke(cli, ["--days", "0", "audit"])
        assert result.exit_code == 2


# =============================================================================
# audit 명령 테스트
# =============================================================================


class TestAuditCommand:
    """audit 명령 흐름 테스트"""

    def test_success(self, runner, isolated_env, fake_gcp):
        from cli.app import cli

        output_dir = isolated_env / "out"
        result = runner.invoke(cli, ["--output-dir", str(output_dir), "audit", "-q"])

        assert result.exit_code == 0, result.output
        run_dir = _only_run_dir(output_dir)
        assert (run_dir / "report.md").exists()
        assert (run_dir / "services.json").exists()
        assert (run_dir / "projects_report" / "alpha.md").exists()
        assert "리포트 생성" in result.output

    def test_json_only(self, runner, isolated_env, fake_gcp):
        from cli.app import cli

        output_dir = isolated_env / "out"
        result = runner.invoke(cli, ["-o", str(output_dir), "audit", "-q", "-f", "json"])

        assert result.exit_code == 0, result.output
        run_dir = _only_run_dir(output_dir)
        assert not (run_dir / "report.md").exists()
        assert (run_dir / "summary.json").exists()

    def test_summary_printed(self, runner, isolated_env, fake_gcp):
        from cli.app import cli

        result = runner.invoke(cli, ["-o", str(isolated_env / "out"), "audit"])

        assert result.exit_code == 0, result.output
        assert "감사 요약" in result.output
        assert "gamma" in result.output

    def test_exclude_patterns_from_config(self, runner, isolated_env, fake_gcp):
        from cli.app import cli

        _, project_cls = fake_gcp
        config_file = isolated_env / "audit.yaml"
        config_file.write_text("exclude-patterns:\n  - '^sandbox-'\n", encoding="utf-8")

        result = runner.invoke(
            cli,
            ["--config", str(config_file), "-o", str(isolated_env / "out"), "audit", "-q"],
        )

        assert result.exit_code == 0, result.output
        assert list(project_cls.call_args.args[1]) == ["^sandbox-"]

    def test_config_file_logged(self, runner, isolated_env, fake_gcp, caplog):
        """로깅 설정 이후 사용한 설정 파일 경로를 기록"""
        from cli.app import cli

        config_file = isolated_env / "audit.yaml"
        config_file.write_text("days: 7\n", encoding="utf-8")

        result = runner.invoke(cli, ["--config", str(config_file), "-o", str(isolated_env / "out"), "audit"])

        assert result.exit_code == 0, result.output
        messages = [r.getMessage() for r in caplog.records if r.name == "cli.app"]
        assert f"설정 파일 사용: {config_file}" in messages

    def test_missing_config_file(self, runner, isolated_env, fake_gcp):
        from cli.app import cli

        create_clients, _ = fake_gcp
        result = runner.invoke(cli, ["--config", str(isolated_env / "nope.yaml"), "audit", "-q"])

        assert result.exit_code == 1
        create_clients.assert_not_called()

    def test_client_init_failure(self, runner, isolated_env):
        from cli.app import cli

        with patch("cli.app.create_clients", side_effect=ClientInitError("resourcemanager")):
            result = runner.invoke(cli, ["-o", str(isolated_env / "out"), "audit", "-q"])

        assert result.exit_code == 1
        assert "GCP 클라이언트 생성 실패" in result.output

    def test_listing_failure(self, runner, isolated_env, service_repo):
        from cli.app import cli

        failing = FakeProjectRepository(error=APICallError("resourcemanager", "search_projects", "Unavailable"))
        with (
            patch("cli.app.create_clients", return_value=MagicMock()),
            patch("cli.app.GCPProjectRepository", return_value=failing),
            patch("cli.app.GCPServiceRepository", return_value=service_repo),
        ):
            result = runner.invoke(cli, ["-o", str(isolated_env / "out"), "audit", "-q"])

        assert result.exit_code == 1
        assert "프로젝트 목록 조회 실패" in result.output
        assert not (isolated_env / "out").exists() or not any((isolated_env / "out").iterdir())

    def test_clients_closed(self, runner, isolated_env, fake_gcp):
        from cli.app import cli

        create_clients, _ = fake_gcp
        runner.invoke(cli, ["-o", str(isolated_env / "out"), "audit", "-q"])

        create_clients.return_value.__exit__.assert_called_once()


# =============================================================================
# run_audit 테스트
# =============================================================================


class TestRunAudit:
    """run_audit 종료 코드 테스트"""

    def test_success(self, tmp_path, project_repo, service_repo):
        from cli.app import run_audit

        config = AuditConfig(output_dir=str(tmp_path), format=OutputFormat.JSON)
        assert run_audit(config, project_repo, service_repo, quiet=True) == 0

    def test_cancelled_renders_partial_report(self, tmp_path, project_repo):
        """기한 초과로 중단되어도 완료된 프로젝트로 리포트 생성 후 1 반환"""
        from cli.app import run_audit

        slow = FakeServiceRepository(services={"alpha": ["compute.googleapis.com"]}, delay=120.0)
        config = AuditConfig(output_dir=str(tmp_path), format=OutputFormat.JSON)

        with patch("cli.app.RunContext") as ctx_cls:
            from core.parallel import RunContext

            ctx_cls.side_effect = lambda timeout=None: RunContext(timeout=0.3)
            exit_code = run_audit(config, project_repo, slow, quiet=True)

        assert exit_code == 1
        run_dir = _only_run_dir(tmp_path)
        assert (run_dir / "summary.json").exists()

    def test_report_error(self, tmp_path, project_repo, service_repo):
        from cli.app import run_audit

        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        config = AuditConfig(output_dir=str(blocker), format=OutputFormat.MARKDOWN)

        assert run_audit(config, project_repo, service_repo, quiet=True) == 1
