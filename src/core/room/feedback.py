"""파티클 피드백: 표시 후 자동 만료, 게임 상태 없음"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

FEEDBACK_DURATION_MS = 1000
MERGE_FEEDBACK_DURATION_MS = 2000
MAX_FEEDBACK = 20  # 초과 시 오래된 것부터 버림


@dataclass(frozen=True)
class Feedback:
    text: str
    x: float  # %
    y: float
    expires_at_ms: int
    color: str = ""


class FeedbackBoard:
    def __init__(self, max_size: int = MAX_FEEDBACK) -> None:
        self._entries: deque[Feedback] = deque(maxlen=max_size)

    def push(
        self,
        text: str,
        now_ms: int,
        x: float = 50.0,
        y: float = 50.0,
        duration_ms: int = FEEDBACK_DURATION_MS,
        color: str = "",
    ) -> Feedback:
        entry = Feedback(text, x, y, now_ms + duration_ms, color)
        self._entries.append(entry)
        return entry

    def active(self, now_ms: int) -> list[Feedback]:
        """만료 항목 정리 후 남은 항목 반환."""
        while self._entries and self._entries[0].expires_at_ms <= now_ms:
            self._entries.popleft()
        return [e for e in self._entries if e.expires_at_ms > now_ms]

    def clear(self) -> None:
        self._entries.clear()
