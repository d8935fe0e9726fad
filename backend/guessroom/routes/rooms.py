from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from ..game.service import GameService, player_public_state, room_public_state

bp = Blueprint("rooms", __name__)


def _service() -> GameService:
    return current_app.extensions["guessroom"]


def _payload() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _join_url(code: str) -> str:
    base = current_app.config.get("PUBLIC_BASE_URL") or request.host_url
    return f"{base.rstrip('/')}/join/{code}"


@bp.post("/rooms")
def create_room():
    data = _payload()
    room = _service().create_room(data.get("hostName"), data.get("roomName"))
    return jsonify({
        "roomCode": room.code,
        "room": room_public_state(room),
        "joinUrl": _join_url(room.code),
    }), 201


@bp.get("/rooms/<code>")
def get_room(code: str):
    room = _service().get_room(code)
    return jsonify({"room": room_public_state(room)})


@bp.post("/rooms/<code>/join")
def join_room(code: str):
    data = _payload()
    room, player = _service().join(code, data.get("playerName"))
    return jsonify({"success": True, "player": player_public_state(player), "room": room_public_state(room)})


@bp.post("/rooms/<code>/answer")
def submit_answer(code: str):
    data = _payload()
    room, player = _service().submit_answer(code, str(data.get("playerId", "")), data.get("answer"))
    return jsonify({"success": True, "player": player_public_state(player), "room": room_public_state(room)})


@bp.post("/rooms/<code>/next")
@bp.post("/rooms/<code>/start", endpoint="start_room")
def next_question(code: str):
    data = _payload()
    category = data.get("category") or None
    room = _service().start_round(code, category)
    return jsonify({"success": True, "room": room_public_state(room)})


@bp.post("/rooms/<code>/reveal")
def reveal(code: str):
    room = _service().reveal(code)
    return jsonify({"success": True, "room": room_public_state(room)})


@bp.post("/rooms/<code>/ready-next")
def ready_next(code: str):
    data = _payload()
    room, all_ready = _service().mark_ready(code, str(data.get("playerId", "")))
    return jsonify({
        "success": True,
        "room": room_public_state(room),
        "allPlayersReady": all_ready,
        "readyCount": len(room.players_ready_for_next),
        "totalPlayers": len(room.players),
    })


@bp.post("/rooms/<code>/select-category")
def select_category(code: str):
    data = _payload()
    room = _service().select_category(code, str(data.get("playerId", "")), data.get("category") or None)
    return jsonify({"success": True, "room": room_public_state(room)})
