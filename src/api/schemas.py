"""API request/response schemas."""

from typing import Any, Optional

from pydantic import BaseModel, Field


# === Request Schemas ===


class EnterRoomRequest(BaseModel):
    """방 입장 요청"""

    player_id: str = Field(..., min_length=1, max_length=50, description="플레이어 ID")
    room_id: str = Field(..., min_length=1, description="방 ID")


class UnlockRoomRequest(BaseModel):
    """방 해금 요청"""

    player_id: str = Field(..., min_length=1, max_length=50)
    room_id: str = Field(..., min_length=1)


class SessionActionRequest(BaseModel):
    """세션 입력 요청"""

    player_id: str = Field(..., min_length=1, max_length=50, description="플레이어 ID")
    action: str = Field(
        ...,
        description="액션 타입: extract, clear_slot, accept_assist, "
        "decline_assist, restart, exit",
    )
    params: dict[str, Any] = Field(default_factory=dict, description="액션 파라미터")


class SettingsRequest(BaseModel):
    player_id: str = Field(..., min_length=1, max_length=50)
    sound_enabled: Optional[bool] = None
    music_enabled: Optional[bool] = None


# === Response Schemas ===


class PlayerStatsInfo(BaseModel):
    total_items_collected: int
    total_games_played: int
    total_coins_earned: int


class PlayerInfo(BaseModel):
    """플레이어 정보"""

    player_id: str
    coins: int
    unlocked_rooms: list[str] = []
    collected_items: dict[str, int] = {}
    stats: PlayerStatsInfo
    sound_enabled: bool
    music_enabled: bool
    completion_rate: int


class RoomInfo(BaseModel):
    """로비 방 목록 항목"""

    room_id: str
    name: str
    description: str
    unlock_cost: int
    clear_target: int
    coin_reward: int
    background: str
    unlocked: bool


class RoomListResponse(BaseModel):
    rooms: list[RoomInfo]
    coins: int


class PositionInfo(BaseModel):
    x: float
    y: float
    z: int
    rotation: float
    scale: float


class PlacedItemInfo(BaseModel):
    item_id: str
    instance_id: str
    position: PositionInfo


class FeedbackInfo(BaseModel):
    text: str
    x: float
    y: float
    color: str = ""


class SessionStateResponse(BaseModel):
    """방 세션 화면 상태"""

    room_id: str
    state: str  # playing | completed | failed
    score: int
    target_score: int
    spawned_items: list[PlacedItemInfo] = []
    slots: list[Optional[str]]
    assist_offered: bool
    merge_pending: bool
    feedback: list[FeedbackInfo] = []
    coins: int
    completion_rate: int


class ActionResponse(BaseModel):
    """액션 실행 응답"""

    success: bool
    action: str
    message: str
    session: Optional[SessionStateResponse] = None


class CollectionItemInfo(BaseModel):
    item_id: str
    name: str
    description: str
    image: str
    tier: int
    rarity: str
    count: int
    collected: bool


class CollectionResponse(BaseModel):
    """도감 응답"""

    completion_rate: int
    collected_count: int
    total_count: int
    tiers: dict[int, list[CollectionItemInfo]]


class ErrorResponse(BaseModel):
    """에러 응답"""

    detail: str
