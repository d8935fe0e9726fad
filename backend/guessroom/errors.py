"""Game errors.

Every command failure is raised as a ``GameError`` subclass; the HTTP and
Socket.IO layers turn them into ``{"error": code, "message": text}``.
"""
from __future__ import annotations


class GameError(Exception):
    status = 400
    code = "game_error"

    def __init__(self, message: str = "", code: str | None = None):
        super().__init__(message or self.code)
        self.message = message or self.code
        if code:
            self.code = code

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class ValidationError(GameError):
    """Malformed or missing input. Never worth retrying."""

    status = 400
    code = "invalid_payload"


class NotFoundError(GameError):
    status = 404
    code = "not_found"


class RoomNotFound(NotFoundError):
    code = "room_not_found"

    def __init__(self, room_code: str):
        self.room_code = room_code
        super().__init__(f"Room {room_code} not found")


class PlayerNotFound(NotFoundError):
    code = "player_not_found"

    def __init__(self, player_id: str):
        self.player_id = player_id
        super().__init__(f"Player {player_id} not found")


class ConflictError(GameError):
    """The room is in a state that does not accept the command."""

    status = 409
    code = "game_in_progress"


class PermissionDeniedError(GameError):
    status = 403
    code = "not_category_chooser"


class UpstreamError(GameError):
    """The question provider failed. The only retryable error."""

    status = 502
    code = "question_unavailable"
