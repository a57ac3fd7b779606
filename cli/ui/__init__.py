# cli/ui - 콘솔 UI 컴포넌트 (rich)
"""
콘솔 UI 모듈

CLI 전용 UI 컴포넌트들 (콘솔 출력, 로깅 설정, 진행 표시, 결과 요약)
"""

from .console import (
    SYMBOL_ERROR,
    SYMBOL_INFO,
    SYMBOL_SUCCESS,
    SYMBOL_WARNING,
    configure_logging,
    console,
    get_console,
    print_error,
    print_header,
    print_info,
    print_success,
    print_table,
    print_warning,
)
from .progress import ParallelTracker, parallel_progress
from .summary import print_audit_summary

__all__: list[str] = [
    # Console
    "console",
    "get_console",
    "configure_logging",
    "print_success",
    "print_error",
    "print_warning",
    "print_info",
    "print_header",
    "print_table",
    "SYMBOL_SUCCESS",
    "SYMBOL_ERROR",
    "SYMBOL_WARNING",
    "SYMBOL_INFO",
    # Progress
    "ParallelTracker",
    "parallel_progress",
    # Summary
    "print_audit_summary",
]
