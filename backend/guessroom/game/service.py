from __future__ import annotations

import logging
import math
import random
import string
from typing import Callable

from ..errors import RoomNotFound, UpstreamError
from . import engine
from .models import Player, Question, Room
from .questions import QuestionProvider, SampleQuestionProvider
from .store import RoomStore

logger = logging.getLogger(__name__)


def normalize_code(code: object) -> str:
    return code.strip().upper() if isinstance(code, str) else ""


def generate_room_code(length: int = 6) -> str:
    return "".join(random.choices(string.ascii_uppercase + string.digits, k=length))


class GameService:
    """Runs room commands against the store.

    Each command loads the room, applies one engine transition and writes the
    result back while holding that room's writer lock. Nothing is written when
    the transition raises.
    """

    def __init__(
        self,
        store: RoomStore,
        questions: QuestionProvider,
        fallback: QuestionProvider | None = None,
        notify: Callable[[Room], None] | None = None,
        fallback_on_error: bool = True,
        code_length: int = 6,
    ):
        self.store = store
        self.questions = questions
        self.fallback = fallback or SampleQuestionProvider()
        self.notify = notify
        self.fallback_on_error = fallback_on_error
        self.code_length = code_length

    def _load(self, code: str) -> Room:
        room = self.store.get(code)
        if room is None:
            raise RoomNotFound(code)
        return room

    def _save(self, room: Room) -> Room:
        self.store.put(room.code, room)
        if self.notify is not None:
            self.notify(room)
        return room

    def get_room(self, code: object) -> Room:
        return self._load(normalize_code(code))

    def list_rooms(self) -> list[Room]:
        rooms = []
        for code in self.store.codes():
            room = self.store.get(code)
            if room is not None:
                rooms.append(room)
        return rooms

    def delete_room(self, code: object) -> bool:
        code = normalize_code(code)
        with self.store.lock(code):
            return self.store.delete(code)

    def create_room(self, host_name: object, room_name: object = None) -> Room:
        # Validate before spending a code.
        engine.clean_name(host_name, "hostName")

        while True:
            code = generate_room_code(self.code_length)
            with self.store.lock(code):
                # Checked under the lock so two creates cannot claim one code.
                if self.store.get(code) is not None:
                    logger.warning(f"[room-code-collision] code={code}")
                    continue
                room = engine.create_room(code, host_name, room_name)
                logger.info(f"[room-create] code={code} host={room.host!r}")
                return self._save(room)

    def join(self, code: object, player_name: object) -> tuple[Room, Player]:
        code = normalize_code(code)
        with self.store.lock(code):
            room = self._load(code)
            updated, player = engine.join(room, player_name)
            if updated is room:
                logger.info(f"[room-rejoin] code={code} player={player.id} name={player.name!r}")
                return room, player
            logger.info(f"[room-join] code={code} player={player.id} name={player.name!r}")
            return self._save(updated), player

    def submit_answer(self, code: object, player_id: str, raw_answer: object) -> tuple[Room, Player]:
        code = normalize_code(code)
        with self.store.lock(code):
            room = self._load(code)
            if room.state != "playing":
                logger.warning(f"[answer-outside-round] code={code} player={player_id} state={room.state}")
            updated, player = engine.submit_answer(room, player_id, raw_answer)
            return self._save(updated), player

    def _generate(self, category: str | None, used_questions: list[Question]) -> tuple[Question, str]:
        """Returns the question and which provider served it ("provider" or "fallback")."""
        try:
            return self.questions.generate(category, used_questions), "provider"
        except UpstreamError as e:
            if not self.fallback_on_error:
                raise
            logger.warning(f"[question-fallback] category={category} error={e.message}")
            return self.fallback.generate(category, used_questions), "fallback"

    def generate_question(self, category: str | None, used_questions: list[Question]) -> Question:
        """Ask the configured provider, falling back to the offline samples on failure."""
        question, _ = self._generate(category, used_questions)
        return question

    def start_round(self, code: object, category: str | None = None) -> Room:
        code = normalize_code(code)
        with self.store.lock(code):
            room = self._load(code)
            question, source = self._generate(category, room.used_questions)
            room = engine.start_round(room, question)
            logger.info(
                f"[round-start] code={code} round={len(room.used_questions)} "
                f"category={question.category} source={source}"
            )
            return self._save(room)

    def reveal(self, code: object) -> Room:
        code = normalize_code(code)
        with self.store.lock(code):
            room = self._load(code)
            updated, result = engine.reveal(room)
            if result is None:
                logger.info(f"[reveal-skip] code={code} state={room.state}")
                return room
            logger.info(
                f"[reveal] code={code} answer={updated.current_question.answer} "
                f"closest={result.closest_ids} farthest={result.farthest_ids} chooser={result.chooser_id}"
            )
            return self._save(updated)

    def mark_ready(self, code: object, player_id: str) -> tuple[Room, bool]:
        code = normalize_code(code)
        with self.store.lock(code):
            room = self._load(code)
            updated, all_ready = engine.mark_ready(room, player_id)
            logger.info(
                f"[ready-next] code={code} player={player_id} "
                f"ready={len(updated.players_ready_for_next)}/{len(updated.players)}"
            )
            if updated is room:
                return room, all_ready
            return self._save(updated), all_ready

    def select_category(self, code: object, player_id: str, category: str | None) -> Room:
        code = normalize_code(code)
        with self.store.lock(code):
            room = self._load(code)
            # Reject non-choosers before paying for a question.
            engine.check_category_chooser(room, player_id)
            question, source = self._generate(category, room.used_questions)
            room = engine.select_category(room, player_id, question)
            logger.info(
                f"[category-select] code={code} player={player_id} "
                f"category={question.category} source={source}"
            )
            return self._save(room)


def _public_answer(value: float | None) -> float | None:
    if value is None or not math.isfinite(value):
        return None
    return value


def room_public_state(room: Room) -> dict:
    """Wire view of a room.

    While a round is running the true answer and everybody's guesses stay
    hidden; clients only see who has answered.
    """
    playing = room.state == "playing"

    players = []
    for p in room.players:
        d = p.to_dict()
        d["currentAnswer"] = None if playing else _public_answer(p.current_answer)
        d["hasAnswered"] = p.has_answered
        players.append(d)

    current = room.current_question.to_dict() if room.current_question else None
    if current and playing:
        current.pop("answer", None)
        current.pop("source", None)

    payload = room.to_dict()
    if playing:
        payload.pop("usedQuestions", None)
    payload.update(
        {
            "players": players,
            "currentQuestion": current,
            "roundNumber": len(room.used_questions),
            "answeredCount": sum(1 for p in room.players if p.has_answered),
            "readyCount": len(room.players_ready_for_next),
            "totalPlayers": len(room.players),
        }
    )
    return payload


def player_public_state(player: Player) -> dict:
    d = player.to_dict()
    d["currentAnswer"] = _public_answer(player.current_answer)
    d["hasAnswered"] = player.has_answered
    return d
