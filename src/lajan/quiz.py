"""
Quiz question and feedback content.

The generator (an LLM) is best-effort. Everything here is deterministic: the
cleanup applied to generated questions and the canned content substituted
when generation fails, so fallback output is stable for the same inputs.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MAX_QUESTIONS = 10
OPTIONS_PER_QUESTION = 4


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    ALL = "all"


class LearningStyle(str, Enum):
    VISUAL = "visual"
    PRACTICAL = "practical"


class QuizQuestion(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None
    question: str = Field(description="The question text")
    options: list[str] = Field(description="Exactly four answer options")
    correct_answer: str = Field(description="Must match exactly one of the options")
    explanation: str = Field(description="Why the correct answer is right")
    difficulty: Difficulty = Field(default=Difficulty.BEGINNER, description="beginner, intermediate or advanced")
    visual_content: Optional[str] = Field(default=None, description="Description of a chart or diagram")
    practical_example: Optional[str] = Field(default=None, description="A real-world application")


class QuizQuestionSet(BaseModel):
    """Structured output requested from the generator."""
    questions: list[QuizQuestion] = Field(description="Multiple-choice questions")


def slug(text: str) -> str:
    return re.sub(r"\s+", "-", text.strip()).lower() or "module"


def clean_questions(
    questions: Iterable[QuizQuestion],
    module_title: str,
    difficulty: Difficulty = Difficulty.ALL,
    limit: int = MAX_QUESTIONS,
) -> list[QuizQuestion]:
    """
    Drop malformed and duplicate questions, honour the difficulty filter
    (falling back to everything when nothing matches) and assign stable ids.
    """
    valid: list[QuizQuestion] = []
    seen: set[str] = set()
    for q in questions:
        text = q.question.strip()
        if not text or text in seen:
            continue
        if len(q.options) != OPTIONS_PER_QUESTION or q.correct_answer not in q.options:
            continue
        if not q.explanation.strip():
            continue
        seen.add(text)
        valid.append(q)

    if difficulty != Difficulty.ALL:
        matching = [q for q in valid if q.difficulty == difficulty]
        valid = matching or valid

    prefix = slug(module_title)
    return [
        q.model_copy(update={"id": f"{prefix}-q{i}"})
        for i, q in enumerate(valid[:limit], start=1)
    ]


# (question, options, correct, explanation, difficulty, visual, practical)
_FALLBACK_QUESTIONS = (
    (
        "What is the main purpose of budgeting?",
        ["To track expenses", "To plan finances", "To save money", "All of the above"],
        "All of the above",
        "Budgeting helps in tracking expenses, planning finances, and saving money effectively.",
        Difficulty.BEGINNER,
        "A pie chart showing budget allocation between needs (50%), wants (30%), and savings (20%).",
        "A family setting up a monthly budget worksheet to save for a summer vacation.",
    ),
    (
        "What is an emergency fund?",
        [
            "Money set aside for vacations",
            "Investments in the stock market",
            "Savings for unexpected expenses",
            "Money used for daily expenses",
        ],
        "Savings for unexpected expenses",
        "An emergency fund covers unexpected expenses like medical emergencies or sudden job loss.",
        Difficulty.BEGINNER,
        "A bar graph of recommended emergency fund sizes, typically 3-6 months of expenses.",
        "Sarah paid four months of rent from her emergency fund after an unexpected layoff.",
    ),
    (
        "What is the rule of 72 in finance?",
        [
            "A law requiring 72% of income to be saved",
            "A formula to estimate how long it takes for money to double",
            "A tax rule allowing deduction of 72% of investment losses",
            "A banking regulation limiting interest rates to 72%",
        ],
        "A formula to estimate how long it takes for money to double",
        "Divide 72 by the annual rate of return to estimate the years needed to double an investment.",
        Difficulty.INTERMEDIATE,
        "A line graph of investment growth at different interest rates.",
        "At 8% a year a retirement account doubles roughly every 9 years (72 / 8 = 9).",
    ),
    (
        "What is the difference between a traditional IRA and a Roth IRA?",
        [
            "There is no difference",
            "Traditional IRAs are taxed on withdrawal, Roth IRAs are taxed on contribution",
            "Roth IRAs have higher contribution limits",
            "Traditional IRAs can only be opened by employees",
        ],
        "Traditional IRAs are taxed on withdrawal, Roth IRAs are taxed on contribution",
        "Traditional contributions are deductible now and taxed later; Roth contributions are taxed now.",
        Difficulty.INTERMEDIATE,
        "A side-by-side chart comparing tax treatment of Traditional and Roth IRAs.",
        "John lowers this year's taxable income with a Traditional IRA; Maria withdraws tax-free later.",
    ),
    (
        "Which of the following is NOT typically considered a defensive stock?",
        ["Utilities", "Consumer staples", "Technology", "Healthcare"],
        "Technology",
        "Technology stocks are usually growth or cyclical stocks, not defensive ones.",
        Difficulty.ADVANCED,
        "A scatter plot of volatility during recessions with defensive sectors clustered low.",
        "During 2008 utilities kept paying dividends while many technology stocks fell sharply.",
    ),
    (
        "What is the primary risk associated with investing in long-term bonds?",
        ["Default risk", "Interest rate risk", "Currency risk", "Political risk"],
        "Interest rate risk",
        "When rates rise, bond prices fall, and longer durations fall further.",
        Difficulty.ADVANCED,
        "A graph of the inverse relationship between bond prices and interest rates.",
        "A 3% 30-year Treasury lost about 20% of market value when rates rose to 5%.",
    ),
)


def fallback_questions(
    module_title: str,
    difficulty: Difficulty = Difficulty.ALL,
    learning_style: Optional[LearningStyle] = None,
) -> list[QuizQuestion]:
    questions = [
        QuizQuestion(
            question=text,
            options=list(options),
            correct_answer=correct,
            explanation=explanation,
            difficulty=level,
            visual_content=visual if learning_style == LearningStyle.VISUAL else None,
            practical_example=practical if learning_style == LearningStyle.PRACTICAL else None,
        )
        for text, options, correct, explanation, level, visual, practical in _FALLBACK_QUESTIONS
    ]
    return clean_questions(questions, module_title, difficulty)


def score_percentage(score: int, total_questions: int) -> int:
    if total_questions <= 0:
        return 0
    return round(score / total_questions * 100)


def fallback_feedback(
    module_title: str,
    score: int,
    total_questions: int,
    learning_style: Optional[LearningStyle] = None,
) -> str:
    percentage = score_percentage(score, total_questions)
    if percentage >= 80:
        opening = (
            f"Excellent work on the {module_title} quiz! "
            "You've demonstrated a strong understanding of the key concepts."
        )
        tips = {
            LearningStyle.VISUAL: "Try creating a mind map or visual diagram of these concepts to solidify your understanding.",
            LearningStyle.PRACTICAL: "Now try applying these principles to your own financial situation.",
            None: "Keep up the great work and continue building on this knowledge!",
        }
    elif percentage >= 60:
        opening = (
            f"Good job on the {module_title} quiz! "
            "You understand most of the concepts, but there's still room for improvement."
        )
        tips = {
            LearningStyle.VISUAL: "Charts, diagrams or simple sketches of the challenging concepts can make the relationships clearer.",
            LearningStyle.PRACTICAL: "Apply the concepts you found most challenging to a real-world scenario.",
            None: "Consider reviewing the sections you found challenging and try again later.",
        }
    else:
        opening = f"Thank you for completing the {module_title} quiz. Consider reviewing the material again."
        tips = {
            LearningStyle.VISUAL: "Visual aids like diagrams, charts or flashcards with visual cues can help the concepts stick.",
            LearningStyle.PRACTICAL: "Look for a practical example or real-world application of each key concept.",
            None: "Don't be discouraged - financial literacy is a journey!",
        }
    return f"{opening} {tips.get(learning_style, tips[None])}"
