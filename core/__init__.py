# core/__init__.py
"""
core - GCP Auditor 핵심 로직

외부 서비스(GCP)나 출력 형식에 의존하지 않는 감사 로직 전체를 포함합니다.

아키텍처:
    core/
    ├── domain/         # 데이터 모델, 협력자 인터페이스 (Protocol)
    ├── parallel/       # 취소 컨텍스트, permit pool, 순서 보존 워커 풀
    ├── audit/          # 감사 스케줄러, 서비스 사용량 조회, 통계 집계
    ├── config.py       # 중앙 설정 관리
    └── exceptions.py   # 통합 예외 계층

Usage:
    # 설정 사용
    from core.config import load_config
    config = load_config(overrides={"days": 60})

    # 예외 처리
    from core.exceptions import is_access_denied
    try:
        usage = client.list_time_series(request=request)
    except Exception as e:
        if is_access_denied(e):
            print("권한이 없습니다")

    # 감사 실행
    from core.audit import AuditService
    from core.parallel import RunContext
    report = AuditService(project_repo, service_repo, config).audit(RunContext())
"""

from core import audit, config, domain, exceptions, parallel

__all__: list[str] = [
    # 서브패키지
    "domain",
    "parallel",
    "audit",
    # 모듈
    "config",
    "exceptions",
]
