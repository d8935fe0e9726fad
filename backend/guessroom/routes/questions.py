from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from ..errors import UpstreamError
from ..game.models import Question
from ..game.questions import CATEGORIES, parse_question_payload

bp = Blueprint("questions", __name__)


@bp.get("/categories")
def get_categories():
    return jsonify({"categories": list(CATEGORIES)})


@bp.post("/question")
def generate_question():
    data = request.get_json(silent=True) or {}
    category = data.get("category") if isinstance(data.get("category"), str) else None

    used: list[Question] = []
    raw_used = data.get("usedQuestions")
    if isinstance(raw_used, list):
        for item in raw_used:
            try:
                used.append(parse_question_payload(item, ""))
            except UpstreamError:
                # Only the text matters for avoiding repeats; skip malformed entries.
                continue

    question = current_app.extensions["guessroom"].generate_question(category, used)
    return jsonify(question.to_dict())
