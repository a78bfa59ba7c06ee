"""방 세션 Core: 배치, 합성, 상태 머신"""

from .feedback import Feedback, FeedbackBoard
from .merge import MergeOutcome, MergeResolver, MergeSlots
from .session import RoomSession, SessionState, SessionView
from .spawner import PlacedItem, Position, Spawner
from .timer import AsyncioScheduler, ManualScheduler, Scheduler, TimerToken

__all__ = [
    "Feedback",
    "FeedbackBoard",
    "MergeOutcome",
    "MergeResolver",
    "MergeSlots",
    "RoomSession",
    "SessionState",
    "SessionView",
    "PlacedItem",
    "Position",
    "Spawner",
    "AsyncioScheduler",
    "ManualScheduler",
    "Scheduler",
    "TimerToken",
]
