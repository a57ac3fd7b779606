"""공유 유틸리티 - core 인터페이스 구현과 reports/cli에서 공통 사용.

- gcp: Google Cloud 어댑터 (프로젝트/서비스 조회, 클라이언트, 카테고리)
- io: 입출력 유틸리티 (파일 쓰기, 표시 형식, 조회 기간)

의존성 구조:
    core (감사 로직)
       ↑
    shared (공유 유틸리티)
       ↑
    reports / cli
"""

from . import gcp, io

__all__ = ["gcp", "io"]
