"""
Merge engine: reconcile a server copy and a client copy of the same user's
ProgressRecord into one that is at least as informative as either.

Policy is field-wise "most complete wins", never last-write-wins:
booleans OR, scores and aggregates max, timestamps later, id sets union.
Attempt counters are summed; that is the only part that is not idempotent.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from lajan.completion import later
from lajan.errors import UserMismatch
from lajan.model import ModuleProgress, ProgressRecord, TopicProgress, utcnow


def merge_module(server: ModuleProgress, client: ModuleProgress) -> ModuleProgress:
    return ModuleProgress(
        completed=server.completed or client.completed,
        score=max(server.score, client.score),
        last_attempt=later(server.last_attempt, client.last_attempt),
    )


def merge_topic(server: TopicProgress, client: TopicProgress) -> TopicProgress:
    modules: dict[str, ModuleProgress] = {}
    for module_id in sorted(server.modules.keys() | client.modules.keys()):
        ours, theirs = server.modules.get(module_id), client.modules.get(module_id)
        if ours is None or theirs is None:
            modules[module_id] = theirs if ours is None else ours
        else:
            modules[module_id] = merge_module(ours, theirs)

    return TopicProgress(
        completed=server.completed or client.completed,
        score=max(server.score, client.score),
        last_attempt=later(server.last_attempt, client.last_attempt),
        questions_answered=server.questions_answered + client.questions_answered,
        correct_answers=server.correct_answers + client.correct_answers,
        modules=modules,
        completed_modules=sorted(set(server.completed_modules) | set(client.completed_modules)),
    )


def merge(server: ProgressRecord, client: ProgressRecord, now: Optional[datetime] = None) -> ProgressRecord:
    """
    Merge two records of the same user. Commutative; idempotent for every
    field except the summed questionsAnswered/correctAnswers counters.
    """
    if server.user_id != client.user_id:
        raise UserMismatch(server.user_id, client.user_id)

    topics: dict[str, TopicProgress] = {}
    for topic_id in sorted(server.topics_progress.keys() | client.topics_progress.keys()):
        ours, theirs = server.topics_progress.get(topic_id), client.topics_progress.get(topic_id)
        if ours is None or theirs is None:
            topics[topic_id] = theirs if ours is None else ours
        else:
            topics[topic_id] = merge_topic(ours, theirs)

    return ProgressRecord(
        user_id=server.user_id,
        topics_progress=topics,
        streak=max(server.streak, client.streak),
        last_completed_date=later(server.last_completed_date, client.last_completed_date),
        total_points=max(server.total_points, client.total_points),
        updated_at=now or utcnow(),
    )
