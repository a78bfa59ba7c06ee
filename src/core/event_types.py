"""이벤트 유형 상수

RoomSession / GameService가 발행. 표시 계층과 저장 정책이 구독한다.
"""


class EventTypes:
    """이벤트 유형 문자열 상수"""

    # === 방 세션 ===
    ROOM_STARTED = "room_started"
    ITEM_EXTRACTED = "item_extracted"
    ITEM_DISCARDED = "item_discarded"  # 슬롯이 가득 차서 합성 경로에서 제외
    SLOT_CLEARED = "slot_cleared"
    MERGE_COMPLETED = "merge_completed"
    ROOM_COMPLETED = "room_completed"
    ROOM_FAILED = "room_failed"

    # === 광고 보조 ===
    ASSIST_OFFERED = "assist_offered"
    ASSIST_ACCEPTED = "assist_accepted"

    # === 로비 ===
    ROOM_UNLOCKED = "room_unlocked"
    ROOM_EXITED = "room_exited"
