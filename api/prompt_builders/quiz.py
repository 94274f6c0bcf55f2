"""Quiz question and feedback prompts for the generator. Uses the core template filler."""

from __future__ import annotations

from typing import List, Optional

from lajan.prompt_builder import bullets, build_from_template
from lajan.quiz import Difficulty, LearningStyle, score_percentage

_DIFFICULTY_SYSTEM = {
    Difficulty.BEGINNER: "Generate ONLY beginner-level questions that are accessible to someone new to this topic.",
    Difficulty.INTERMEDIATE: "Generate ONLY intermediate-level questions that assume some basic knowledge of the topic.",
    Difficulty.ADVANCED: "Generate ONLY advanced-level questions that challenge someone with good knowledge of the topic.",
    Difficulty.ALL: "Generate a mix of beginner, intermediate, and advanced questions.",
}

_DIFFICULTY_GUIDE = {
    Difficulty.BEGINNER: "Focus on basic definitions, simple concepts, and straightforward applications.",
    Difficulty.INTERMEDIATE: "Include questions that apply concepts to situations and connect related ideas.",
    Difficulty.ADVANCED: "Include complex scenarios, nuanced distinctions, and synthesis of multiple concepts.",
}

_STYLE_QUESTIONS = {
    LearningStyle.VISUAL: (
        "The user prefers VISUAL learning. Fill visualContent for every question with a text "
        "description of a chart, diagram, or image that illustrates the concept."
    ),
    LearningStyle.PRACTICAL: (
        "The user prefers PRACTICAL learning. Fill practicalExample for every question with a "
        "concrete, real-life application of the concept."
    ),
}

_STYLE_FEEDBACK = {
    LearningStyle.VISUAL: (
        "This user prefers VISUAL learning: use visual language, reference charts or diagrams, "
        "and suggest visual ways to reinforce the concepts such as mind maps."
    ),
    LearningStyle.PRACTICAL: (
        "This user prefers PRACTICAL learning: focus on real-world applications and give "
        "concrete next steps, such as creating a real budget."
    ),
}

TEMPLATE_QUIZ_SYSTEM = """You are an expert in financial education creating quiz questions for a learning app.
{difficulty_rule}
{style_rule}
Every question has exactly four options and correctAnswer must match one option exactly. Vary the position of correct answers."""

TEMPLATE_QUIZ_QUESTIONS = """Generate {count} multiple-choice quiz questions for a financial education app about "{module_title}".

Module Content: {module_content}
{key_points_section}
{difficulty_section}
For each question provide the question, four plausible options, the correct answer, a brief explanation and the difficulty level ({difficulty_label})."""

TEMPLATE_FEEDBACK_SYSTEM = "You are a supportive financial education coach providing personalized feedback to students."

TEMPLATE_FEEDBACK = """Generate personalized feedback for a user who completed a quiz on "{module_title}" and scored {score} out of {total_questions} questions ({percentage}%).
The feedback should be encouraging, mention their performance, and provide tips for improvement if needed.
{style_section}
{key_points_section}
Keep the feedback concise (2-3 paragraphs) and actionable. If they did well, suggest how they can apply this knowledge. If they need improvement, suggest specific concepts to review."""


def build_quiz_system_prompt(
    *,
    difficulty: Difficulty = Difficulty.ALL,
    learning_style: Optional[LearningStyle] = None,
) -> str:
    return build_from_template(
        TEMPLATE_QUIZ_SYSTEM,
        difficulty_rule=_DIFFICULTY_SYSTEM[difficulty],
        style_rule=_STYLE_QUESTIONS.get(learning_style) if learning_style else None,
    ).strip()


def build_quiz_questions_prompt(
    *,
    module_title: str,
    module_content: str,
    key_points: List[str],
    difficulty: Difficulty = Difficulty.ALL,
    count: int = 5,
) -> str:
    key_points_text = bullets(key_points)
    key_points_section = (
        f"\nKey Points and Insights:\n{key_points_text}\n"
        "Use the key points as a foundation, test understanding of them and apply them to realistic scenarios.\n"
        if key_points_text
        else ""
    )
    difficulty_section = (
        f"\nThe questions must be {difficulty.value} level. {_DIFFICULTY_GUIDE[difficulty]}\n"
        if difficulty != Difficulty.ALL
        else ""
    )
    return build_from_template(
        TEMPLATE_QUIZ_QUESTIONS,
        count=count,
        module_title=module_title,
        module_content=module_content or "(no content provided)",
        key_points_section=key_points_section,
        difficulty_section=difficulty_section,
        difficulty_label="varies" if difficulty == Difficulty.ALL else difficulty.value,
    ).strip()


def build_feedback_system_prompt(*, learning_style: Optional[LearningStyle] = None) -> str:
    if learning_style == LearningStyle.VISUAL:
        return TEMPLATE_FEEDBACK_SYSTEM + " You reference visual metaphors and mental pictures."
    if learning_style == LearningStyle.PRACTICAL:
        return TEMPLATE_FEEDBACK_SYSTEM + " You reference real-world applications and actionable steps."
    return TEMPLATE_FEEDBACK_SYSTEM


def build_feedback_prompt(
    *,
    module_title: str,
    score: int,
    total_questions: int,
    key_points: List[str],
    learning_style: Optional[LearningStyle] = None,
) -> str:
    key_points_text = bullets(key_points, limit=5)
    return build_from_template(
        TEMPLATE_FEEDBACK,
        module_title=module_title,
        score=score,
        total_questions=total_questions,
        percentage=score_percentage(score, total_questions),
        style_section=_STYLE_FEEDBACK.get(learning_style) if learning_style else None,
        key_points_section=(
            f"Key learning points you can reference:\n{key_points_text}" if key_points_text else None
        ),
    ).strip()
