"""
Recommended topic of the day.

Deterministic and stateless: the pick depends only on the catalog (in
declaration order), the user's preferences and points, and the calendar date.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Collection, Optional, Sequence


@dataclass(frozen=True)
class Topic:
    id: str
    required_points: int = 0
    title: str = ""
    description: str = ""
    module_ids: tuple[str, ...] = field(default_factory=tuple)


def date_seed(today: date) -> int:
    return today.year * 10000 + today.month * 100 + today.day


def recommend_topic(
    topics: Sequence[Topic],
    preferred_topic_ids: Collection[str],
    user_points: int,
    today: date,
) -> Optional[Topic]:
    if not topics:
        return None

    eligible = [t for t in topics if t.required_points <= user_points]
    preferred = [t for t in eligible if t.id in preferred_topic_ids]
    candidates = preferred or eligible
    if not candidates:
        # Nothing unlocked yet: fall back to the cheapest tier of the catalog.
        lowest = min(t.required_points for t in topics)
        candidates = [t for t in topics if t.required_points == lowest]

    return candidates[date_seed(today) % len(candidates)]
