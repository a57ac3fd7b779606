"""입출력 유틸리티.

하위 모듈:
- file: 리포트 파일 쓰기 (실패 시 ReportError)
- formatting: 숫자/시간 표시 형식
- time_range: 조회 기간
"""

from .file import ensure_dir, write_json, write_text
from .formatting import format_duration, format_number
from .time_range import TimeRange

__all__: list[str] = [
    # 파일
    "ensure_dir",
    "write_text",
    "write_json",
    # 형식
    "format_number",
    "format_duration",
    # 기간
    "TimeRange",
]
