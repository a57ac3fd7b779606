"""
core/parallel/errors.py - GCP API 에러 분류

병렬 실행 중 발생한 예외를 ErrorCategory로 분류하고 에러 코드를 추출합니다.
로그와 리포트에서 실패 원인을 일관되게 표시하는 데 사용합니다.

Example:
    try:
        services = repo.list_services(ctx, project_id, period)
    except Exception as e:
        logger.error(f"[{project_id}] {get_error_code(e)} ({categorize_error(e).value})")
"""

from __future__ import annotations

from enum import Enum

from google.api_core import exceptions as google_exceptions

from core.exceptions import (
    APICallError,
    RunCancelledError,
    RunDeadlineExceededError,
    is_access_denied,
    is_not_found,
    is_throttling,
)


class ErrorCategory(Enum):
    """에러 카테고리"""

    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"
    THROTTLING = "throttling"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    NETWORK = "network"
    SERVICE_ERROR = "service_error"
    UNKNOWN = "unknown"


def categorize_error(error: Exception) -> ErrorCategory:
    """예외 객체를 분석하여 ErrorCategory로 분류

    Args:
        error: 분류할 예외

    Returns:
        에러 카테고리
    """
    if isinstance(error, RunDeadlineExceededError):
        return ErrorCategory.TIMEOUT
    if isinstance(error, RunCancelledError):
        return ErrorCategory.CANCELLED

    if is_access_denied(error):
        return ErrorCategory.ACCESS_DENIED
    if is_throttling(error):
        return ErrorCategory.THROTTLING
    if is_not_found(error):
        return ErrorCategory.NOT_FOUND

    cause = error.cause if isinstance(error, APICallError) and error.cause else error

    if isinstance(cause, google_exceptions.DeadlineExceeded):
        return ErrorCategory.TIMEOUT
    if isinstance(cause, (google_exceptions.ServerError, google_exceptions.ServiceUnavailable)):
        return ErrorCategory.SERVICE_ERROR
    if isinstance(cause, (ConnectionError, TimeoutError, OSError)):
        return ErrorCategory.NETWORK

    return ErrorCategory.UNKNOWN


def get_error_code(error: Exception) -> str:
    """예외 객체에서 에러 코드 문자열 추출

    APICallError는 래핑된 에러 코드를, 그 외에는 예외 클래스명을 반환합니다.

    Args:
        error: 예외 객체

    Returns:
        에러 코드 문자열
    """
    if isinstance(error, APICallError) and error.error_code:
        return error.error_code
    return error.__class__.__name__
