"""Game errors.

Every failure the room state machine can report is a ``BingoError`` with a
short machine-readable ``error`` code, so the transport layer can turn any of
them into the same ``{"error": ..., "message": ...}`` payload.
"""


class BingoError(Exception):
    error = "bingo_error"

    def to_public(self) -> dict:
        return {"error": self.error, "message": str(self)}


class RoomNotFound(BingoError):
    error = "room_not_found"

    def __init__(self, code):
        self.code = code
        super().__init__(f"Room {code} not found")


class RoomAlreadyExists(BingoError):
    error = "room_exists"

    def __init__(self, code):
        self.code = code
        super().__init__(f"Room {code} already exists")


class InvalidPhaseTransition(BingoError):
    """The room's current phase forbids the requested operation."""
    error = "invalid_phase"


class GameAlreadyStarted(InvalidPhaseTransition):
    error = "game_already_started"


class ContentAlreadyGenerated(InvalidPhaseTransition):
    error = "content_already_generated"


class ContentStillLoading(InvalidPhaseTransition):
    """Every pooled entry was dealt but backfill is still running; retry later."""
    error = "content_loading"


class PlayerNotFound(BingoError):
    error = "player_not_found"

    def __init__(self, player_id):
        self.player_id = player_id
        super().__init__(f"Player {player_id} not found")


class HostOnlyViolation(BingoError):
    error = "only_host"

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Only the host can {action}")


class ContentSupplierFailure(BingoError):
    error = "content_failure"
