"""Game API endpoints.

입력 엔드포인트는 async def: 이벤트 루프 위에서 합성 타이머 콜백과 직렬화된다.
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.schemas import (
    ActionResponse,
    CollectionItemInfo,
    CollectionResponse,
    EnterRoomRequest,
    ErrorResponse,
    FeedbackInfo,
    PlacedItemInfo,
    PlayerInfo,
    PlayerStatsInfo,
    PositionInfo,
    RoomInfo,
    RoomListResponse,
    SessionActionRequest,
    SessionStateResponse,
    SettingsRequest,
    UnlockRoomRequest,
)
from src.core.catalog.registry import DataIntegrityError
from src.core.collection.models import PlayerData
from src.core.logging import get_logger
from src.core.room.session import RoomSession
from src.services.game_service import GameService

logger = get_logger(__name__)

router = APIRouter(prefix="/game", tags=["game"])


def get_game_service(request: Request) -> GameService:
    """GameService 인스턴스 반환 (의존성 주입)"""
    service: GameService = request.app.state.game_service
    return service


def _build_player_info(
    player_id: str, data: PlayerData, completion_rate: int
) -> PlayerInfo:
    """PlayerData를 PlayerInfo로 변환"""
    return PlayerInfo(
        player_id=player_id,
        coins=data.coins,
        unlocked_rooms=list(data.unlocked_rooms),
        collected_items=dict(data.collected_items),
        stats=PlayerStatsInfo(
            total_items_collected=data.stats.total_items_collected,
            total_games_played=data.stats.total_games_played,
            total_coins_earned=data.stats.total_coins_earned,
        ),
        sound_enabled=data.settings.sound_enabled,
        music_enabled=data.settings.music_enabled,
        completion_rate=completion_rate,
    )


def _build_session_state(
    service: GameService, player_id: str, session: RoomSession
) -> SessionStateResponse:
    """SessionView를 SessionStateResponse로 변환"""
    view = session.view()
    ledger = service.get_ledger(player_id)
    return SessionStateResponse(
        room_id=view.room_id,
        state=view.state.value,
        score=view.score,
        target_score=view.target_score,
        spawned_items=[
            PlacedItemInfo(
                item_id=item.item_id,
                instance_id=item.instance_id,
                position=PositionInfo(
                    x=item.position.x,
                    y=item.position.y,
                    z=item.position.z,
                    rotation=item.position.rotation,
                    scale=item.position.scale,
                ),
            )
            for item in view.spawned_items
        ],
        slots=list(view.slots),
        assist_offered=view.assist_offered,
        merge_pending=view.merge_pending,
        feedback=[
            FeedbackInfo(text=f.text, x=f.x, y=f.y, color=f.color)
            for f in view.feedback
        ],
        coins=ledger.data.coins,
        completion_rate=ledger.completion_rate(),
    )


@router.get("/player/{player_id}", response_model=PlayerInfo)
async def get_player(
    player_id: str,
    service: GameService = Depends(get_game_service),
) -> PlayerInfo:
    """플레이어 데이터 조회 (없으면 기본값으로 생성)"""
    ledger = service.get_ledger(player_id)
    return _build_player_info(player_id, ledger.data, ledger.completion_rate())


@router.put("/settings", response_model=PlayerInfo)
async def update_settings(
    request: SettingsRequest,
    service: GameService = Depends(get_game_service),
) -> PlayerInfo:
    """사운드/음악 설정 변경"""
    data = service.update_settings(
        request.player_id, request.sound_enabled, request.music_enabled
    )
    ledger = service.get_ledger(request.player_id)
    return _build_player_info(request.player_id, data, ledger.completion_rate())


@router.get("/rooms/{player_id}", response_model=RoomListResponse)
async def list_rooms(
    player_id: str,
    service: GameService = Depends(get_game_service),
) -> RoomListResponse:
    """로비 방 목록 + 해금 여부"""
    rooms = [
        RoomInfo(
            room_id=room.room_id,
            name=room.name,
            description=room.description,
            unlock_cost=room.unlock_cost,
            clear_target=room.clear_target,
            coin_reward=room.coin_reward,
            background=room.background,
            unlocked=unlocked,
        )
        for room, unlocked in service.list_rooms(player_id)
    ]
    return RoomListResponse(
        rooms=rooms, coins=service.get_player_data(player_id).coins
    )


@router.post(
    "/rooms/unlock",
    response_model=PlayerInfo,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def unlock_room(
    request: UnlockRoomRequest,
    service: GameService = Depends(get_game_service),
) -> PlayerInfo:
    """코인으로 방 해금"""
    try:
        unlocked = service.unlock_room(request.player_id, request.room_id)
    except DataIntegrityError:
        raise HTTPException(
            status_code=404, detail=f"Room not found: {request.room_id}"
        )
    if not unlocked:
        raise HTTPException(status_code=400, detail="Not enough coins")

    ledger = service.get_ledger(request.player_id)
    return _build_player_info(request.player_id, ledger.data, ledger.completion_rate())


@router.post(
    "/session/enter",
    response_model=SessionStateResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def enter_room(
    request: EnterRoomRequest,
    service: GameService = Depends(get_game_service),
) -> SessionStateResponse:
    """
    방 입장

    새 세션을 만들고 초기 아이템을 배치합니다. 기존 세션은 종료됩니다.
    """
    result = service.enter_room(request.player_id, request.room_id)
    if result.message == "room_not_found":
        raise HTTPException(
            status_code=404, detail=f"Room not found: {request.room_id}"
        )
    if result.message == "room_locked":
        raise HTTPException(
            status_code=403, detail=f"Room locked: {request.room_id}"
        )

    assert result.session is not None
    logger.info("Player %s entered %s", request.player_id, request.room_id)
    return _build_session_state(service, request.player_id, result.session)


@router.get(
    "/session/{player_id}",
    response_model=SessionStateResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_session_state(
    player_id: str,
    service: GameService = Depends(get_game_service),
) -> SessionStateResponse:
    """현재 방 세션 상태 조회 (렌더링용)"""
    session = service.get_session(player_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"No active room: {player_id}")
    return _build_session_state(service, player_id, session)


@router.post(
    "/session/action",
    response_model=ActionResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def session_action(
    request: SessionActionRequest,
    service: GameService = Depends(get_game_service),
) -> ActionResponse:
    """
    방 세션 입력 처리

    지원 액션:
    - extract: 아이템 꺼내기 (params: {instance_id: "..."})
    - clear_slot: 합성 슬롯 비우기 (params: {index: 0~2})
    - accept_assist: 광고 보조 수락 (+5 아이템, +20 코인)
    - decline_assist: 광고 보조 거절 (실패 처리)
    - restart: 다시 시작
    - exit: 로비로 나가기
    """
    session = service.get_session(request.player_id)
    if session is None:
        raise HTTPException(
            status_code=404, detail=f"No active room: {request.player_id}"
        )

    action = request.action.lower()
    params = request.params

    if action == "extract":
        instance_id = params.get("instance_id", "")
        if not instance_id:
            raise HTTPException(
                status_code=400, detail="Missing 'instance_id' parameter"
            )
        success = session.extract(instance_id)
        message = "Extracted" if success else "Item no longer available"
    elif action == "clear_slot":
        index = params.get("index")
        if not isinstance(index, int) or isinstance(index, bool):
            raise HTTPException(status_code=400, detail="Missing 'index' parameter")
        try:
            success = session.clear_slot(index)
        except IndexError as e:
            raise HTTPException(status_code=422, detail=str(e))
        message = "Slot cleared" if success else "Slot already empty"
    elif action == "accept_assist":
        success = session.accept_assist()
        message = "Assist accepted" if success else "No assist offer"
    elif action == "decline_assist":
        success = session.decline_assist()
        message = "Room failed" if success else "No assist offer"
    elif action == "restart":
        session.restart()
        success = True
        message = "Room restarted"
    elif action == "exit":
        service.exit_room(request.player_id)
        return ActionResponse(
            success=True, action=action, message="Back to lobby", session=None
        )
    else:
        raise HTTPException(status_code=400, detail=f"Unknown action: {action}")

    return ActionResponse(
        success=success,
        action=action,
        message=message,
        session=_build_session_state(service, request.player_id, session),
    )


@router.get("/collection/{player_id}", response_model=CollectionResponse)
async def get_collection(
    player_id: str,
    service: GameService = Depends(get_game_service),
) -> CollectionResponse:
    """도감: 티어별 아이템과 수집 현황"""
    view = service.get_collection(player_id)
    return CollectionResponse(
        completion_rate=view.completion_rate,
        collected_count=view.collected_count,
        total_count=view.total_count,
        tiers={
            tier: [
                CollectionItemInfo(
                    item_id=entry.item.item_id,
                    name=entry.item.name,
                    description=entry.item.description,
                    image=entry.item.image,
                    tier=entry.item.tier,
                    rarity=entry.item.rarity.value,
                    count=entry.count,
                    collected=entry.collected,
                )
                for entry in entries
            ]
            for tier, entries in view.tiers.items()
        },
    )
