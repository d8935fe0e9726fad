"""Room lifecycle transitions.

Each function takes a Room snapshot and returns a new one; the snapshot passed
in is never modified, so a failed command leaves nothing half-applied.

    waiting -> playing -> revealed -> playing -> revealed -> ...
"""
from __future__ import annotations

import copy
import time
import uuid

from ..errors import ConflictError, PermissionDeniedError, PlayerNotFound, ValidationError
from .models import ROUND_TIMER_SEC, Player, Question, Room
from .scoring import RoundResult, score_round


MAX_NAME_LENGTH = 32


def now_ms() -> int:
    return int(time.time() * 1000)


def clean_name(raw: object, field_name: str = "name") -> str:
    name = raw.strip() if isinstance(raw, str) else ""
    if not name:
        raise ValidationError(f"{field_name} required")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"{field_name} too long")
    if "<" in name or ">" in name:
        raise ValidationError(f"{field_name} contains invalid characters")
    for ch in name:
        if ord(ch) < 32:
            raise ValidationError(f"{field_name} contains invalid characters")
    return name


def parse_answer(raw: object) -> float:
    """Parse a guess. Anything that is not a number becomes NaN rather than an error."""
    if isinstance(raw, bool):
        return float("nan")
    try:
        return float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return float("nan")


def create_room(code: str, host_name: object, room_name: object = None, now: int | None = None) -> Room:
    host = clean_name(host_name, "hostName")
    label = room_name.strip() if isinstance(room_name, str) else ""
    return Room(
        code=code,
        host=host,
        room_name=label or f"{host}'s Room",
        created_at=now if now is not None else now_ms(),
    )


def join(room: Room, player_name: object, now: int | None = None) -> tuple[Room, Player]:
    if room.state in ("playing", "revealed"):
        raise ConflictError("Game already in progress")

    name = clean_name(player_name, "playerName")
    existing = room.find_player_by_name(name)
    if existing is not None:
        return room, existing

    room = copy.deepcopy(room)
    player = Player(
        id=uuid.uuid4().hex,
        name=name,
        joined_at=now if now is not None else now_ms(),
    )
    room.players.append(player)
    return room, player


def start_round(room: Room, question: Question, now: int | None = None) -> Room:
    room = copy.deepcopy(room)
    for p in room.players:
        p.current_answer = None
        p.answered_at = None

    room.current_question = question
    room.state = "playing"
    room.question_start_time = now if now is not None else now_ms()
    room.timer = ROUND_TIMER_SEC
    room.used_questions.append(question)
    room.players_ready_for_next = []
    room.category_chooser = None
    return room


def submit_answer(room: Room, player_id: str, raw_answer: object, now: int | None = None) -> tuple[Room, Player]:
    if room.find_player(player_id) is None:
        raise PlayerNotFound(player_id)

    room = copy.deepcopy(room)
    player = room.find_player(player_id)
    player.current_answer = parse_answer(raw_answer)
    player.answered_at = now if now is not None else now_ms()
    return room, player


def reveal(room: Room) -> tuple[Room, RoundResult | None]:
    """Score the running round and move to ``revealed``.

    Only a ``playing`` room is scored. Revealing a room that is waiting or
    already revealed returns it unchanged with no result.
    """
    if room.state != "playing" or room.current_question is None:
        return room, None

    room = copy.deepcopy(room)
    result = score_round(room.players, room.current_question.answer)

    closest = set(result.closest_ids)
    farthest = set(result.farthest_ids)
    for p in room.players:
        if p.id in closest:
            p.closest_count += 1
        if p.id in farthest:
            p.farthest_count += 1

    room.state = "revealed"
    room.category_chooser = result.chooser_id
    room.players_ready_for_next = []
    return room, result


def mark_ready(room: Room, player_id: str) -> tuple[Room, bool]:
    """Record that a player wants the next question. Returns (room, all_ready)."""
    if room.find_player(player_id) is None:
        raise PlayerNotFound(player_id)

    if player_id not in room.players_ready_for_next:
        room = copy.deepcopy(room)
        room.players_ready_for_next.append(player_id)

    all_ready = len(room.players_ready_for_next) == len(room.players)
    return room, all_ready


def check_category_chooser(room: Room, player_id: str) -> None:
    if room.find_player(player_id) is None:
        raise PlayerNotFound(player_id)
    if room.category_chooser is None or room.category_chooser != player_id:
        raise PermissionDeniedError("Only the category chooser can select category")


def select_category(room: Room, player_id: str, question: Question, now: int | None = None) -> Room:
    check_category_chooser(room, player_id)
    # start_round also clears the chooser.
    return start_round(room, question, now=now)
