from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal


GameState = Literal["waiting", "playing", "revealed"]

ROUND_TIMER_SEC = 30


@dataclass(frozen=True)
class Question:
    question: str
    answer: float
    category: str
    unit: str = ""
    source: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "question": self.question,
            "answer": self.answer,
            "unit": self.unit,
            "category": self.category,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Question:
        return cls(
            question=data["question"],
            answer=data["answer"],
            category=data.get("category", ""),
            unit=data.get("unit") or "",
            source=data.get("source") or "",
        )


@dataclass
class Player:
    id: str
    name: str
    joined_at: int = 0
    current_answer: float | None = None
    answered_at: int | None = None
    closest_count: int = 0
    farthest_count: int = 0

    @property
    def has_answered(self) -> bool:
        return self.current_answer is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "joinedAt": self.joined_at,
            "currentAnswer": self.current_answer,
            "answeredAt": self.answered_at,
            "closestCount": self.closest_count,
            "farthestCount": self.farthest_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Player:
        return cls(
            id=data["id"],
            name=data["name"],
            joined_at=data.get("joinedAt", 0),
            current_answer=data.get("currentAnswer"),
            answered_at=data.get("answeredAt"),
            closest_count=data.get("closestCount", 0),
            farthest_count=data.get("farthestCount", 0),
        )


@dataclass
class Room:
    code: str
    host: str
    room_name: str
    state: GameState = "waiting"
    players: list[Player] = field(default_factory=list)
    current_question: Question | None = None
    used_questions: list[Question] = field(default_factory=list)
    question_start_time: int | None = None
    timer: int = ROUND_TIMER_SEC
    # Ordered for stable serialization; treated as a set.
    players_ready_for_next: list[str] = field(default_factory=list)
    category_chooser: str | None = None
    created_at: int = 0

    def find_player(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def find_player_by_name(self, name: str) -> Player | None:
        for p in self.players:
            if p.name == name:
                return p
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "host": self.host,
            "roomName": self.room_name,
            "gameState": self.state,
            "players": [p.to_dict() for p in self.players],
            "currentQuestion": self.current_question.to_dict() if self.current_question else None,
            "usedQuestions": [q.to_dict() for q in self.used_questions],
            "questionStartTime": self.question_start_time,
            "timer": self.timer,
            "playersReadyForNext": list(self.players_ready_for_next),
            "categoryChooser": self.category_chooser,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Room:
        current = data.get("currentQuestion")
        return cls(
            code=data["code"],
            host=data["host"],
            room_name=data.get("roomName") or f"{data['host']}'s Room",
            state=data.get("gameState", "waiting"),
            players=[Player.from_dict(p) for p in data.get("players") or []],
            current_question=Question.from_dict(current) if current else None,
            used_questions=[Question.from_dict(q) for q in data.get("usedQuestions") or []],
            question_start_time=data.get("questionStartTime"),
            timer=data.get("timer", ROUND_TIMER_SEC),
            players_ready_for_next=list(data.get("playersReadyForNext") or []),
            category_chooser=data.get("categoryChooser"),
            created_at=data.get("createdAt", 0),
        )
