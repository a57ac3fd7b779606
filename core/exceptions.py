"""
core/exceptions.py - 통합 예외 계층 구조

애플리케이션 전체에서 사용되는 예외 클래스들을 정의합니다.
일관된 예외 처리와 에러 메시지를 제공합니다.

예외 계층 구조:
    GAError (베이스)
    ├── RunCancelledError (실행 취소)
    │   └── RunDeadlineExceededError (실행 기한 초과)
    ├── AuditError (감사 실행)
    │   ├── ProjectListingError (프로젝트 목록 조회 실패 - 치명적)
    │   └── AuditCancelledError (감사 도중 취소)
    ├── ToolExecutionError (도구 실행)
    │   ├── ClientInitError
    │   └── APICallError
    ├── ReportError (리포트 생성)
    ├── ConfigError (설정 관련)
    └── ValidationError (입력 검증)

Usage:
    from core.exceptions import APICallError

    try:
        pager = client.list_services(request=request)
    except GoogleAPICallError as e:
        raise APICallError.from_google_error("serviceusage", "list_services", e) from e
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from google.api_core import exceptions as google_exceptions

if TYPE_CHECKING:
    from core.domain.models import AuditReport

# =============================================================================
# 베이스 예외
# =============================================================================


class GAError(Exception):
    """GCP Auditor 기본 예외 클래스

    모든 커스텀 예외의 베이스 클래스입니다.

    Attributes:
        message: 에러 메시지
        cause: 원인 예외 (체이닝용)
        details: 추가 상세 정보
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """예외 정보를 딕셔너리로 반환"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "details": self.details,
        }


# =============================================================================
# 실행 취소 관련 예외
# =============================================================================


class RunCancelledError(GAError):
    """실행 컨텍스트가 취소된 경우

    RunContext.cancel() 호출 또는 상위 컨텍스트 취소 시 발생합니다.
    """

    def __init__(self, reason: str = "실행이 취소되었습니다"):
        super().__init__(reason)
        self.reason = reason


class RunDeadlineExceededError(RunCancelledError):
    """실행 기한(deadline)이 지난 경우"""

    def __init__(self, timeout: float | None = None):
        if timeout is not None:
            reason = f"실행 기한 초과 ({timeout:.0f}초)"
        else:
            reason = "실행 기한 초과"
        super().__init__(reason)
        self.timeout = timeout


# =============================================================================
# 감사 실행 관련 예외
# =============================================================================


class AuditError(GAError):
    """감사 실행 관련 예외

    실패 시점까지 구성된 리포트를 함께 전달합니다.

    Attributes:
        report: 실패 시점까지의 AuditReport
    """

    def __init__(
        self,
        message: str,
        report: AuditReport,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.report = report


class ProjectListingError(AuditError):
    """프로젝트 목록 조회 실패 (감사 전체 중단)"""

    def __init__(self, report: AuditReport, cause: Exception | None = None):
        super().__init__("프로젝트 목록 조회 실패", report=report, cause=cause)


class AuditCancelledError(AuditError):
    """감사 도중 실행이 취소됨

    report에는 취소 이전에 끝난 프로젝트와, 처리 도중 취소되어
    skipped로 기록된 프로젝트가 포함됩니다. permit을 얻기 전에 취소된
    프로젝트는 어느 쪽에도 없습니다.
    """

    def __init__(self, report: AuditReport, cause: Exception | None = None):
        super().__init__("감사가 중단되었습니다", report=report, cause=cause)


# =============================================================================
# 도구 실행 관련 예외
# =============================================================================


class ToolExecutionError(GAError):
    """도구 실행 관련 예외"""

    def __init__(
        self,
        tool_name: str,
        message: str,
        cause: Exception | None = None,
    ):
        full_message = f"도구 실행 오류 [{tool_name}]: {message}"
        super().__init__(full_message, cause)
        self.tool_name = tool_name
        self.details["tool_name"] = tool_name


class ClientInitError(ToolExecutionError):
    """GCP API 클라이언트 생성 실패"""

    def __init__(self, service: str, cause: Exception | None = None):
        super().__init__(tool_name=service, message="클라이언트 생성 실패", cause=cause)
        self.service = service


class APICallError(ToolExecutionError):
    """GCP API 호출 관련 예외

    google.api_core의 GoogleAPICallError를 래핑하여 일관된 예외 처리를 제공합니다.
    """

    def __init__(
        self,
        service: str,
        operation: str,
        error_code: str | None = None,
        error_message: str | None = None,
        cause: Exception | None = None,
    ):
        message = f"{service}.{operation}"
        if error_code:
            message = f"{message} 실패 ({error_code})"
        if error_message:
            message = f"{message}: {error_message}"

        super().__init__(tool_name=service, message=message, cause=cause)
        self.service = service
        self.operation = operation
        self.error_code = error_code
        self.error_message = error_message
        self.details.update(
            {
                "service": service,
                "operation": operation,
                "error_code": error_code,
            }
        )

    def __str__(self) -> str:
        # cause 메시지는 error_message에 이미 포함됨
        return self.message

    @classmethod
    def from_google_error(
        cls,
        service: str,
        operation: str,
        error: Exception,
    ) -> APICallError:
        """google.api_core.exceptions.GoogleAPICallError로부터 생성

        Args:
            service: GCP 서비스 이름 (예: "serviceusage")
            operation: API 작업 이름 (예: "list_services")
            error: 원본 예외

        Returns:
            APICallError 인스턴스
        """
        error_code = error.__class__.__name__
        error_message = getattr(error, "message", None) or str(error)

        return cls(
            service=service,
            operation=operation,
            error_code=error_code,
            error_message=error_message,
            cause=error,
        )


# =============================================================================
# 리포트 관련 예외
# =============================================================================


class ReportError(GAError):
    """리포트 생성 실패"""

    def __init__(
        self,
        reporter: str,
        message: str,
        cause: Exception | None = None,
    ):
        full_message = f"리포트 생성 오류 [{reporter}]: {message}"
        super().__init__(full_message, cause)
        self.reporter = reporter
        self.details["reporter"] = reporter


# =============================================================================
# 설정 관련 예외
# =============================================================================


class ConfigError(GAError):
    """설정 관련 예외"""

    def __init__(
        self,
        key: str,
        message: str,
        cause: Exception | None = None,
    ):
        full_message = f"설정 오류 [{key}]: {message}"
        super().__init__(full_message, cause)
        self.config_key = key
        self.details["config_key"] = key


class ValidationError(GAError):
    """입력 검증 오류"""

    def __init__(
        self,
        field: str,
        value: Any,
        expected: str,
        cause: Exception | None = None,
    ):
        message = f"검증 오류 [{field}]: 예상값 '{expected}', 실제값 '{value}'"
        super().__init__(message, cause)
        self.field = field
        self.value = value
        self.expected = expected
        self.details.update(
            {
                "field": field,
                "value": str(value),
                "expected": expected,
            }
        )


# =============================================================================
# 예외 유틸리티 함수
# =============================================================================

_ACCESS_DENIED_ERRORS = (
    google_exceptions.PermissionDenied,
    google_exceptions.Forbidden,
    google_exceptions.Unauthenticated,
    google_exceptions.Unauthorized,
)

_THROTTLING_ERRORS = (
    google_exceptions.TooManyRequests,
    google_exceptions.ResourceExhausted,
)

_ACCESS_DENIED_CODES = {"PermissionDenied", "Forbidden", "Unauthenticated", "Unauthorized"}
_THROTTLING_CODES = {"TooManyRequests", "ResourceExhausted"}
_NOT_FOUND_CODES = {"NotFound"}


def _unwrap(error: Exception) -> Exception:
    """APICallError면 원인 예외를 반환"""
    if isinstance(error, APICallError) and error.cause is not None:
        return error.cause
    return error


def is_access_denied(error: Exception) -> bool:
    """액세스 거부 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        액세스 거부 오류이면 True
    """
    if isinstance(error, APICallError) and error.error_code in _ACCESS_DENIED_CODES:
        return True

    error = _unwrap(error)
    if isinstance(error, _ACCESS_DENIED_ERRORS):
        return True

    # gRPC 상태 문자열로만 전달되는 경우
    text = str(error)
    return "PermissionDenied" in text or "PERMISSION_DENIED" in text


def is_throttling(error: Exception) -> bool:
    """스로틀링(쿼터 초과) 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        스로틀링 오류이면 True
    """
    if isinstance(error, APICallError) and error.error_code in _THROTTLING_CODES:
        return True

    return isinstance(_unwrap(error), _THROTTLING_ERRORS)


def is_not_found(error: Exception) -> bool:
    """리소스를 찾을 수 없는 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        리소스 없음 오류이면 True
    """
    if isinstance(error, APICallError) and error.error_code in _NOT_FOUND_CODES:
        return True

    return isinstance(_unwrap(error), google_exceptions.NotFound)


def format_error_for_user(error: Exception) -> str:
    """사용자에게 표시할 에러 메시지 포맷팅

    Args:
        error: 예외

    Returns:
        사용자 친화적인 에러 메시지
    """
    if is_access_denied(error):
        return "권한이 없습니다. IAM 역할을 확인하세요."
    if is_throttling(error):
        return "API 쿼터를 초과했습니다. 잠시 후 다시 시도하세요."

    # GAError는 이미 포맷팅됨
    return str(error)
