from __future__ import annotations

import logging
from typing import Callable

from flask import request
from flask_socketio import SocketIO, emit, join_room, leave_room

from ..errors import GameError
from ..game.models import Room
from ..game.service import GameService, normalize_code, room_public_state

logger = logging.getLogger(__name__)


def make_room_broadcaster(socketio: SocketIO) -> Callable[[Room], None]:
    """Push the public state to everyone watching the room after each change.

    Clients still poll, so a failed push is logged and otherwise ignored.
    """

    def _broadcast(room: Room) -> None:
        try:
            socketio.emit("room:state", room_public_state(room), to=room.code)
        except Exception:
            logger.exception(f"[broadcast-failed] code={room.code}")

    return _broadcast


def _payload(data) -> dict:
    return data if isinstance(data, dict) else {}


def register_socketio_handlers(socketio: SocketIO, service: GameService) -> None:
    def _room_or_error(payload) -> Room | None:
        room_code = normalize_code(_payload(payload).get("roomCode", ""))
        if not room_code:
            emit("room:error", {"error": "invalid_room"})
            return None
        try:
            return service.get_room(room_code)
        except GameError as e:
            emit("room:error", {"error": e.code})
            return None

    @socketio.on("room:watch")
    def room_watch(data):
        room = _room_or_error(data)
        if room is None:
            return {"ok": False, "error": "room_not_found"}

        join_room(room.code)
        logger.info(f"[room-watch] code={room.code} sid={request.sid}")
        state = room_public_state(room)
        emit("room:state", state, to=request.sid)
        return {"ok": True, "room": state}

    @socketio.on("room:sync")
    def room_sync(data):
        room = _room_or_error(data)
        if room is None:
            return {"ok": False, "error": "room_not_found"}

        state = room_public_state(room)
        emit("room:state", state, to=request.sid)
        return {"ok": True, "room": state}

    @socketio.on("room:unwatch")
    def room_unwatch(data):
        room_code = normalize_code(_payload(data).get("roomCode", ""))
        if not room_code:
            return {"ok": False, "error": "invalid_room"}
        leave_room(room_code)
        return {"ok": True}
