"""
core/parallel/pool.py - 입력 순서를 보존하는 고정 크기 워커 풀

작업 큐 -> 고정 워커 N개 -> 결과 큐 구조로 항목을 병렬 처리하고,
결과를 입력 인덱스 위치에 기록하여 완료 순서와 무관하게 입력 순서를 보존합니다.

구성:
- dispatch: 모든 항목을 작업 큐에 넣은 뒤 워커 수만큼 종료 표시(_CLOSED)를 넣음
- worker: 항목마다 per-item timeout이 걸린 하위 컨텍스트로 func 실행
- collector: 호출 스레드에서 인덱스별 결과를 정확히 한 번씩 수집

반환 길이는 항상 입력 길이와 같고, 그렇지 못하면 예외가 발생합니다.

Example:
    def fetch(item_ctx, service):
        return repo.get_service_usage(item_ctx, project_id, service.name, period)

    usages = ordered_map(ctx, services, fetch, workers=10, item_timeout=30.0)
"""

from __future__ import annotations

import logging
import queue
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

from .context import RunContext

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_WORKERS = 10
DEFAULT_ITEM_TIMEOUT = 30.0

# 큐 대기 중 취소 감지 주기 (초)
POLL_INTERVAL = 0.05

_CLOSED = object()
_MISSING = object()


def _put(target: queue.Queue, entry: Any, ctx: RunContext) -> bool:
    """컨텍스트가 살아 있는 동안 큐에 넣기. 취소되면 False"""
    while not ctx.done():
        try:
            target.put(entry, timeout=POLL_INTERVAL)
            return True
        except queue.Full:
            continue
    return False


def ordered_map(
    ctx: RunContext,
    items: Sequence[T],
    func: Callable[[RunContext, T], R],
    workers: int = DEFAULT_WORKERS,
    item_timeout: float | None = DEFAULT_ITEM_TIMEOUT,
    name: str = "pool",
) -> list[R]:
    """items에 func를 병렬 적용하고 입력 순서대로 결과 반환

    Args:
        ctx: 상위 실행 컨텍스트
        items: 처리할 항목
        func: (item_ctx, item) -> R. item_ctx에는 item_timeout 기한이 걸려 있음
        workers: 최대 워커 수 (항목 수보다 많으면 항목 수로 제한)
        item_timeout: 항목별 제한 시간 (초, None이면 상위 기한만 적용)
        name: 스레드 이름 접두사

    Returns:
        len(items)와 길이가 같은 결과 리스트

    Raises:
        RunCancelledError: 처리 도중 ctx가 취소된 경우
        Exception: func가 예외를 발생시킨 경우 (첫 번째 예외, 나머지 작업은 중단)
    """
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")

    total = len(items)
    if total == 0:
        return []

    worker_count = min(workers, total)
    work_queue: queue.Queue = queue.Queue(maxsize=total)
    result_queue: queue.Queue = queue.Queue(maxsize=total)
    failures: list[Exception] = []

    with ctx.child() as pool_ctx:

        def dispatch() -> None:
            for entry in enumerate(items):
                if not _put(work_queue, entry, pool_ctx):
                    return
            for _ in range(worker_count):
                if not _put(work_queue, _CLOSED, pool_ctx):
                    return

        def work() -> None:
            while not pool_ctx.done():
                try:
                    entry = work_queue.get(timeout=POLL_INTERVAL)
                except queue.Empty:
                    continue
                if entry is _CLOSED:
                    return

                index, item = entry
                with pool_ctx.child(timeout=item_timeout) as item_ctx:
                    try:
                        value = func(item_ctx, item)
                    except Exception as e:
                        if not pool_ctx.done():
                            failures.append(e)
                            pool_ctx.cancel(f"{name}: 항목 {index} 처리 실패")
                        return

                if not _put(result_queue, (index, value), pool_ctx):
                    return

        results: list[Any] = [_MISSING] * total
        received = 0

        with ThreadPoolExecutor(max_workers=worker_count + 1, thread_name_prefix=name) as executor:
            executor.submit(dispatch)
            for _ in range(worker_count):
                executor.submit(work)

            while received < total and not pool_ctx.done():
                try:
                    index, value = result_queue.get(timeout=POLL_INTERVAL)
                except queue.Empty:
                    continue
                results[index] = value
                received += 1

            # 남은 워커는 종료 표시 또는 취소를 보고 빠져나옴

        if failures:
            raise failures[0]

        if received < total:
            ctx.raise_if_done()
            pool_ctx.raise_if_done()

    logger.debug(f"[{name}] {total}개 항목 처리 완료 (workers={worker_count})")
    return results
