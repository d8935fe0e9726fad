from __future__ import annotations

import math
from dataclasses import dataclass, field

from .models import Player


@dataclass
class RoundResult:
    closest_ids: list[str] = field(default_factory=list)
    farthest_ids: list[str] = field(default_factory=list)
    chooser_id: str | None = None
    min_distance: float | None = None
    max_distance: float | None = None


def answer_distance(player: Player, truth: float) -> float | None:
    """Absolute distance from the true answer, or None if the player has no usable guess."""
    if player.current_answer is None or not math.isfinite(player.current_answer):
        return None
    return abs(player.current_answer - truth)


def score_round(players: list[Player], truth: float) -> RoundResult:
    """Work out who was closest and who was farthest this round.

    Ties for closest all count. Farthest is only awarded when more than one
    player answered and the answers are not all the same distance away.
    The category chooser is the first farthest player in join order, falling
    back to the first closest one when nobody is distinctly farthest.
    """
    distances: list[tuple[Player, float]] = []
    for p in players:
        d = answer_distance(p, truth)
        if d is not None:
            distances.append((p, d))

    if not distances:
        return RoundResult()

    min_d = min(d for _, d in distances)
    max_d = max(d for _, d in distances)
    has_distinct_farthest = len(distances) > 1 and max_d > min_d

    closest = [p.id for p, d in distances if d == min_d]
    farthest = [p.id for p, d in distances if d == max_d] if has_distinct_farthest else []

    if farthest:
        chooser = farthest[0]
    elif closest:
        chooser = closest[0]
    else:
        # Non-finite truth: nothing compares equal, nobody qualifies.
        chooser = None

    return RoundResult(
        closest_ids=closest,
        farthest_ids=farthest,
        chooser_id=chooser,
        min_distance=min_d,
        max_distance=max_d,
    )
