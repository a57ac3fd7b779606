"""
shared/io/time_range.py - 조회 기간 (UTC)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone


@dataclass(frozen=True)
class TimeRange:
    """시작/종료 시각 쌍

    Attributes:
        start: 시작 시각 (UTC)
        end: 종료 시각 (UTC)
    """

    start: datetime
    end: datetime

    @classmethod
    def ending_now(cls, period: timedelta, now: datetime | None = None) -> TimeRange:
        """현재 시각(now)으로 끝나는 period 길이의 기간"""
        end = now or datetime.now(timezone.utc)
        return cls(start=end - period, end=end)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start
