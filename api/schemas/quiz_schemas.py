from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from lajan.quiz import MAX_QUESTIONS, Difficulty, LearningStyle, QuizQuestion


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuizQuestionsRequest(_CamelModel):
    module_title: str = Field(min_length=1)
    module_content: str = ""
    key_points: list[str] = Field(default_factory=list)
    difficulty: Difficulty = Difficulty.ALL
    learning_style: Optional[LearningStyle] = None
    count: int = Field(default=5, ge=1, le=MAX_QUESTIONS)


class QuizQuestionsResponse(_CamelModel):
    questions: list[QuizQuestion]
    generated: bool  # False when fallback content was served


class QuizFeedbackRequest(_CamelModel):
    module_title: str = Field(min_length=1)
    score: int = Field(ge=0)
    total_questions: int = Field(ge=0)
    key_points: list[str] = Field(default_factory=list)
    learning_style: Optional[LearningStyle] = None


class QuizFeedbackResponse(_CamelModel):
    feedback: str
    percentage: int
    generated: bool
