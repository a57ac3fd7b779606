"""
core/parallel - 병렬 처리 모듈

멀티 프로젝트/서비스 GCP 작업을 취소 가능하게, 동시성 제한 아래에서 처리합니다.

주요 구성 요소:
- RunContext: 취소/기한 컨텍스트 (하위 컨텍스트로 전파)
- PermitPool: 동시 실행 수 제한 (프로젝트 단위)
- ordered_map: 입력 순서를 보존하는 고정 워커 풀 (서비스 단위)
- categorize_error / get_error_code: 에러 분류

Example:
    from core.parallel import PermitPool, RunContext, ordered_map

    ctx = RunContext(timeout=30 * 60)
    permits = PermitPool(3)

    with permits.permit(ctx):
        results = ordered_map(ctx, services, fetch_usage, workers=10, item_timeout=30.0)
"""

from .context import RunContext
from .errors import ErrorCategory, categorize_error, get_error_code
from .permits import PermitPool
from .pool import DEFAULT_ITEM_TIMEOUT, DEFAULT_WORKERS, ordered_map

__all__: list[str] = [
    # Context
    "RunContext",
    # Limiter
    "PermitPool",
    # Worker pool
    "ordered_map",
    "DEFAULT_WORKERS",
    "DEFAULT_ITEM_TIMEOUT",
    # Error handling
    "ErrorCategory",
    "categorize_error",
    "get_error_code",
]
