"""
core/parallel/permits.py - 동시 실행 제한 (permit pool)

카운팅 세마포어 기반으로 동시에 진행 중인 작업 수를 제한합니다.
permit 대기 중에도 RunContext 취소를 감지하여 즉시 빠져나옵니다.

Example:
    permits = PermitPool(3)

    with permits.permit(ctx):
        process_project(ctx, project)
"""

from __future__ import annotations

import threading
from collections.abc import Generator
from contextlib import contextmanager

from .context import RunContext

# 취소 감지 주기 (초)
POLL_INTERVAL = 0.05


class PermitPool:
    """취소 가능한 카운팅 permit pool

    Attributes:
        size: 전체 permit 수
    """

    def __init__(self, size: int):
        if size < 1:
            raise ValueError(f"size must be >= 1, got {size}")
        self.size = size
        self._semaphore = threading.BoundedSemaphore(size)

    def acquire(self, ctx: RunContext) -> None:
        """permit 획득 (사용 가능해지거나 컨텍스트가 취소될 때까지 대기)

        Raises:
            RunCancelledError: 대기 중 컨텍스트가 취소된 경우
        """
        while True:
            ctx.raise_if_done()
            if self._semaphore.acquire(timeout=POLL_INTERVAL):
                return

    def release(self) -> None:
        self._semaphore.release()

    @contextmanager
    def permit(self, ctx: RunContext) -> Generator[None, None, None]:
        """with 블록 동안 permit 하나를 보유"""
        self.acquire(ctx)
        try:
            yield
        finally:
            self.release()
