"""Question providers.

A provider turns a category hint and the room's used questions into a new
``Question``. ``OpenAIQuestionProvider`` asks an OpenAI-compatible chat
completions endpoint; ``SampleQuestionProvider`` serves one fixed question per
category so the game runs without network access.
"""
from __future__ import annotations

import json
import logging
import math
import random
from typing import Any, Iterable

import httpx

from ..errors import UpstreamError
from .models import Question

logger = logging.getLogger(__name__)


CATEGORIES = [
    "celebrity_age",
    "country_population",
    "avg_temperature",
    "building_height",
    "distance_length",
    "time_dates",
    "sports_numbers",
    "space_numbers",
]

SAMPLE_QUESTIONS: dict[str, dict[str, Any]] = {
    "celebrity_age": {
        "question": "How old is Taylor Swift (years)?",
        "answer": 34,
        "unit": "years",
        "source": "https://en.wikipedia.org/wiki/Taylor_Swift",
    },
    "country_population": {
        "question": "Population of Denmark (millions)?",
        "answer": 5.9,
        "unit": "million",
        "source": "https://data.worldbank.org/indicator/SP.POP.TOTL?locations=DK",
    },
    "avg_temperature": {
        "question": "Average July temperature in Rome (°C)?",
        "answer": 25,
        "unit": "°C",
        "source": "https://www.metoffice.gov.uk/weather/travel/holiday-weather/europe/italy/rome",
    },
    "building_height": {
        "question": "Height of the Eiffel Tower (m)?",
        "answer": 324,
        "unit": "m",
        "source": "https://www.toureiffel.paris/en/the-monument",
    },
    "distance_length": {
        "question": "Length of the Golden Gate Bridge (m)?",
        "answer": 2737,
        "unit": "m",
        "source": "https://www.goldengatebridge.org/bridge/history-research/facts-stats.php",
    },
    "time_dates": {
        "question": "What year did the iPhone launch?",
        "answer": 2007,
        "source": "https://www.apple.com/stevejobs/",
    },
    "sports_numbers": {
        "question": "How many players on a soccer team on the field?",
        "answer": 11,
        "source": "https://www.fifa.com/",
    },
    "space_numbers": {
        "question": "Distance from Earth to the Moon (km)?",
        "answer": 384400,
        "unit": "km",
        "source": "https://solarsystem.nasa.gov/moons/earths-moon/overview/",
    },
}

SYSTEM_PROMPT = """
You write ONE numeric-trivia question at a time.

Rules:
- The question must have a single numeric answer, optionally with a unit (e.g., km, °C, m).
- Prefer well-known or easy-to-verify facts.
- Return ONLY valid JSON that matches:
  {
    "question": "string",
    "answer": number,
    "unit": "string or empty",
    "category": "string",
    "source": "short URL or empty"
  }
""".strip()


def choose_category(category: str | None) -> str:
    if category in CATEGORIES:
        return category  # type: ignore[return-value]
    return random.choice(CATEGORIES)


def parse_question_payload(data: Any, category: str) -> Question:
    """Validate a provider payload. Needs a text question and a numeric answer."""
    if not isinstance(data, dict):
        raise UpstreamError("Invalid question format")

    text = data.get("question")
    answer = data.get("answer")
    if not isinstance(text, str) or not text.strip():
        raise UpstreamError("Invalid question format")
    if isinstance(answer, bool) or not isinstance(answer, (int, float)) or not math.isfinite(answer):
        raise UpstreamError("Invalid question format")

    return Question(
        question=text.strip(),
        answer=answer,
        category=data.get("category") or category,
        unit=data.get("unit") or "",
        source=data.get("source") or "",
    )


class QuestionProvider:
    def generate(self, category: str | None, used_questions: Iterable[Question]) -> Question:
        raise NotImplementedError


class SampleQuestionProvider(QuestionProvider):
    def generate(self, category: str | None, used_questions: Iterable[Question] = ()) -> Question:
        chosen = choose_category(category)
        return parse_question_payload(SAMPLE_QUESTIONS[chosen], chosen)


class OpenAIQuestionProvider(QuestionProvider):
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o-mini",
        timeout: float = 20.0,
        client: httpx.Client | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.client = client or httpx.Client(timeout=timeout)

    def _endpoint(self) -> str:
        if self.base_url.endswith("/chat/completions"):
            return self.base_url
        return f"{self.base_url}/chat/completions"

    def _build_request_body(self, category: str, used_questions: Iterable[Question]) -> dict:
        avoid = "; ".join(q.question for q in used_questions)
        user = f"""
Category: {category}
Used questions to avoid: {avoid}

Examples:
- celebrity_age → "How old is Zendaya in years?"
- country_population → "Population of Denmark (millions, approx to 0.1)?"
- avg_temperature → "Average July temperature in Rome (°C)?"
- building_height → "Height of the Statue of Liberty (m)?"
- sports_numbers → "Total goals scored by Lionel Messi for Argentina (as of 2024)?"

IMPORTANT: Generate a completely different question that has NOT been used before.
Return JSON only, no backticks, no commentary.
""".strip()
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": user},
            ],
            "response_format": {"type": "json_object"},
        }

    def generate(self, category: str | None, used_questions: Iterable[Question] = ()) -> Question:
        chosen = choose_category(category)
        body = self._build_request_body(chosen, list(used_questions))
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            resp = self.client.post(self._endpoint(), json=body, headers=headers)
            resp.raise_for_status()
            content = resp.json()["choices"][0]["message"]["content"] or "{}"
            data = json.loads(content)
        except httpx.HTTPError as e:
            logger.warning(f"[question-http] category={chosen} error={e}")
            raise UpstreamError(f"Question provider request failed: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning(f"[question-parse] category={chosen} error={e}")
            raise UpstreamError("Invalid question format") from e

        return parse_question_payload(data, chosen)


def build_question_provider(config: Any) -> QuestionProvider:
    """Pick the provider for an app config mapping: OpenAI when a key is set."""
    api_key = config.get("OPENAI_API_KEY") or ""
    if not api_key:
        return SampleQuestionProvider()
    return OpenAIQuestionProvider(
        api_key=api_key,
        base_url=config.get("OPENAI_BASE_URL") or "https://api.openai.com/v1",
        model=config.get("OPENAI_MODEL") or "gpt-4o-mini",
        timeout=float(config.get("QUESTION_TIMEOUT_SEC", 20)),
    )
