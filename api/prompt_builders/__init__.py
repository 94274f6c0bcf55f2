"""
App prompt builders: generator prompts built from the core template filler.
All prompt content and templates live here; the quiz service only passes values in.
"""

from api.prompt_builders.quiz import (
    build_feedback_prompt,
    build_feedback_system_prompt,
    build_quiz_questions_prompt,
    build_quiz_system_prompt,
)

__all__ = [
    "build_feedback_prompt",
    "build_feedback_system_prompt",
    "build_quiz_questions_prompt",
    "build_quiz_system_prompt",
]
