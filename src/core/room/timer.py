"""취소 가능한 예약 콜백

합성 지연(MERGE_DELAY_MS) 전용. 세션은 단일 스레드 협력형이므로
콜백 실행과 슬롯 변경은 같은 루프에서 직렬화된다.

- ManualScheduler: advance()로 시간을 진행 (테스트, 결정적 재생)
- AsyncioScheduler: loop.call_later 래핑 (API 서버)
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Callable, Optional

from src.core.logging import get_logger

logger = get_logger(__name__)

TimerCallback = Callable[[], None]


class TimerToken:
    """예약 1건의 핸들. cancel() 후에는 절대 실행되지 않는다."""

    def __init__(self, due_ms: int) -> None:
        self.due_ms = due_ms
        self._cancelled = False
        self._fired = False
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._fired)

    def cancel(self) -> None:
        if not self.active:
            return
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()


class Scheduler(ABC):
    @abstractmethod
    def now_ms(self) -> int:
        ...

    @abstractmethod
    def schedule(self, delay_ms: int, callback: TimerCallback) -> TimerToken:
        ...

    @staticmethod
    def _run(token: TimerToken, callback: TimerCallback) -> None:
        if not token.active:
            return
        token._fired = True
        callback()


class ManualScheduler(Scheduler):
    """가상 시계. advance() 호출 시 만기된 콜백을 예약 순서대로 실행."""

    def __init__(self, start_ms: int = 0) -> None:
        self._now = start_ms
        self._queue: list[tuple[int, int, TimerToken, TimerCallback]] = []
        self._seq = itertools.count()

    def now_ms(self) -> int:
        return self._now

    def schedule(self, delay_ms: int, callback: TimerCallback) -> TimerToken:
        token = TimerToken(self._now + delay_ms)
        heapq.heappush(self._queue, (token.due_ms, next(self._seq), token, callback))
        return token

    def advance(self, delta_ms: int) -> int:
        """시간 진행. 반환: 실행된 콜백 수."""
        target = self._now + delta_ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, token, callback = heapq.heappop(self._queue)
            self._now = due
            if token.active:
                self._run(token, callback)
                fired += 1
        self._now = target
        return fired

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, token, _ in self._queue if token.active)


class AsyncioScheduler(Scheduler):
    """실행 중인 이벤트 루프의 시계와 call_later 사용. 루프 밖에서 호출 금지."""

    def now_ms(self) -> int:
        return int(asyncio.get_running_loop().time() * 1000)

    def schedule(self, delay_ms: int, callback: TimerCallback) -> TimerToken:
        loop = asyncio.get_running_loop()
        token = TimerToken(self.now_ms() + delay_ms)
        token._handle = loop.call_later(
            delay_ms / 1000, self._run_logged, token, callback
        )
        return token

    def _run_logged(self, token: TimerToken, callback: TimerCallback) -> None:
        try:
            self._run(token, callback)
        except Exception:
            logger.exception("Scheduled callback failed (due=%d)", token.due_ms)
