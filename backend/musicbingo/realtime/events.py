# Client -> server
ROOM_JOIN = "room:join"
ROOM_LEAVE = "room:leave"
ROOM_GET_STATE = "room:get_state"
CARD_GET = "card:get"
CONTENT_GENERATE = "content:generate"
GAME_START = "game:start"
GAME_NEXT = "game:next"
BINGO_CLAIM = "bingo:claim"

# Server -> client
ROOM_STATE = "room:state"
ROOM_ERROR = "room:error"
CARD_ASSIGNED = "card:assigned"
CARD_UPDATE = "card:update"
CONTENT_PROGRESS = "content:progress"
CONTENT_READY = "content:ready"
GAME_STARTED = "game:started"
GAME_ENTRY = "game:entry"
GAME_ENDED = "game:ended"
BINGO_RESULT = "bingo:result"
BINGO_CLAIMED = "bingo:claimed"
