"""
Derived rewards: level, badges, lesson achievements and the next unlockable
reward. All values are projections of totalPoints / lesson counts, so they
can be recomputed at any time and never need merging.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

POINTS_PER_LEVEL = 100

# (minimum level, badge)
LEVEL_BADGES: tuple[tuple[int, str], ...] = (
    (2, "Beginner"),
    (5, "Intermediate"),
)

# completed lesson count -> achievement name
LESSON_ACHIEVEMENTS: dict[int, str] = {
    1: "First Lesson",
    5: "Getting Started",
    10: "Financial Explorer",
    25: "Financial Expert",
    50: "Financial Guru",
}


@dataclass(frozen=True)
class Reward:
    id: str
    title: str
    points: int
    description: str = ""


UPCOMING_REWARDS: tuple[Reward, ...] = (
    Reward("1", "Premium Investing Guide", 500, "Unlock a comprehensive guide to investing for beginners"),
    Reward("2", "Advanced Budgeting Tools", 750, "Access to premium budgeting templates and calculators"),
    Reward("3", "One-on-One Financial Coaching", 1000, "30-minute session with a financial expert"),
)


def level_for(points: int) -> int:
    return max(points, 0) // POINTS_PER_LEVEL + 1


def badges_for(points: int, existing: Sequence[str] = ()) -> list[str]:
    """Badges never get taken away, so existing ones are kept."""
    badges = list(dict.fromkeys(existing))
    level = level_for(points)
    for min_level, badge in LEVEL_BADGES:
        if level >= min_level and badge not in badges:
            badges.append(badge)
    return badges


def lesson_achievement(completed_lessons: int) -> Optional[str]:
    """Achievement unlocked by reaching exactly this many completed lessons."""
    return LESSON_ACHIEVEMENTS.get(completed_lessons)


def lesson_achievements(completed_lessons: int) -> list[str]:
    return [name for count, name in sorted(LESSON_ACHIEVEMENTS.items()) if completed_lessons >= count]


def next_reward(points: int, catalog: Sequence[Reward] = UPCOMING_REWARDS) -> Optional[Reward]:
    locked = [r for r in catalog if r.points > points]
    return min(locked, key=lambda r: r.points) if locked else None


def unlocked_rewards(points: int, catalog: Sequence[Reward] = UPCOMING_REWARDS) -> list[Reward]:
    return [r for r in catalog if r.points <= points]
