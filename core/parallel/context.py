"""
core/parallel/context.py - 취소 가능한 실행 컨텍스트

하나의 감사 실행 전체를 지배하는 취소/기한(deadline) 컨텍스트입니다.
하위 컨텍스트는 상위의 취소를 전파받고, 더 이른 기한을 상속합니다.

블로킹 지점(permit 대기, 큐 대기, API 호출)에서 done()/raise_if_done()을
확인하고, API 호출에는 remaining()을 timeout으로 전달합니다.

Example:
    ctx = RunContext(timeout=30 * 60)

    with ctx.child(timeout=30) as item_ctx:
        item_ctx.raise_if_done()
        client.list_time_series(request=request, timeout=item_ctx.remaining())

    # 다른 스레드에서
    ctx.cancel("사용자 중단")
"""

from __future__ import annotations

import threading
import time

from core.exceptions import RunCancelledError, RunDeadlineExceededError


class RunContext:
    """취소 가능하고 기한이 있는 실행 컨텍스트 (스레드 세이프)

    Attributes:
        deadline: time.monotonic() 기준 기한 (None이면 무기한)
    """

    def __init__(
        self,
        timeout: float | None = None,
        parent: RunContext | None = None,
    ):
        """초기화

        Args:
            timeout: 기한까지 남은 시간 (초, None이면 무기한)
            parent: 상위 컨텍스트 (취소 전파 및 기한 상속)
        """
        self._parent = parent
        self._timeout = timeout
        self._lock = threading.Lock()
        self._cancelled = threading.Event()
        self._error: RunCancelledError | None = None
        self._children: set[RunContext] = set()

        deadline = None if timeout is None else time.monotonic() + timeout
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self.deadline = deadline

        if parent is not None:
            parent._attach(self)

    # -------------------------------------------------------------------------
    # 상태 조회
    # -------------------------------------------------------------------------

    @property
    def parent(self) -> RunContext | None:
        return self._parent

    @property
    def error(self) -> RunCancelledError | None:
        """취소 원인 (취소되지 않았으면 None)

        기한이 지난 경우 이 시점에 RunDeadlineExceededError로 확정된다.
        """
        if self._error is None and self.deadline is not None and time.monotonic() >= self.deadline:
            self._cancel_with(RunDeadlineExceededError(self._timeout))
        return self._error

    def done(self) -> bool:
        """취소되었거나 기한이 지났으면 True"""
        return self.error is not None

    def raise_if_done(self) -> None:
        """취소되었으면 취소 원인 예외를 발생"""
        error = self.error
        if error is not None:
            raise error

    def remaining(self) -> float | None:
        """기한까지 남은 시간 (초). 무기한이면 None"""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def wait(self, timeout: float | None = None) -> bool:
        """취소되거나 timeout이 지날 때까지 대기

        Args:
            timeout: 최대 대기 시간 (초, None이면 취소/기한까지)

        Returns:
            대기 종료 시점에 취소 상태이면 True
        """
        remaining = self.remaining()
        if remaining is not None:
            timeout = remaining if timeout is None else min(timeout, remaining)
        self._cancelled.wait(timeout)
        return self.done()

    # -------------------------------------------------------------------------
    # 취소 / 하위 컨텍스트
    # -------------------------------------------------------------------------

    def cancel(self, reason: str = "실행이 취소되었습니다") -> None:
        """컨텍스트와 모든 하위 컨텍스트를 취소 (이미 취소되었으면 무시)"""
        self._cancel_with(RunCancelledError(reason))

    def child(self, timeout: float | None = None) -> RunContext:
        """하위 컨텍스트 생성

        Args:
            timeout: 하위 컨텍스트의 기한 (상위 기한보다 늦으면 상위 기한 적용)

        Returns:
            RunContext (with 문으로 사용하면 종료 시 상위에서 분리됨)
        """
        return RunContext(timeout=timeout, parent=self)

    def close(self) -> None:
        """상위 컨텍스트에서 분리"""
        if self._parent is not None:
            self._parent._detach(self)

    def __enter__(self) -> RunContext:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _attach(self, child: RunContext) -> None:
        with self._lock:
            error = self._error
            if error is None:
                self._children.add(child)
                return
        child._cancel_with(error)

    def _detach(self, child: RunContext) -> None:
        with self._lock:
            self._children.discard(child)

    def _cancel_with(self, error: RunCancelledError) -> None:
        with self._lock:
            if self._error is not None:
                return
            self._error = error
            children = list(self._children)
            self._children.clear()

        self._cancelled.set()
        for child in children:
            child._cancel_with(error)
