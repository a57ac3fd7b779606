"""
shared/io/formatting.py - 숫자/시간 표시 형식
"""

from __future__ import annotations

from datetime import timedelta


def format_number(n: int) -> str:
    """천 단위 구분 기호 추가 (예: 1234567 -> "1,234,567", -1000 -> "-1,000")"""
    return f"{n:,}"


def format_duration(duration: timedelta) -> str:
    """소요 시간을 초 단위로 반올림하여 표시 (예: "1m 5s", "2h 0m 3s", "0s")"""
    total = int(round(duration.total_seconds()))
    if total < 0:
        return f"-{format_duration(timedelta(seconds=-total))}"

    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes}m {seconds}s"
    if minutes:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"
