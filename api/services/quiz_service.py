"""
Quiz service: questions and feedback from the generator, with canned content
whenever generation fails. Nothing in here ever raises to the route; a
completion flow must not be blocked by the generator.
"""

from typing import Optional

from api.config import get_settings
from api.prompt_builders.quiz import (
    build_feedback_prompt,
    build_feedback_system_prompt,
    build_quiz_questions_prompt,
    build_quiz_system_prompt,
)
from api.schemas.quiz_schemas import QuizFeedbackRequest, QuizQuestionsRequest
from api.utils.logger import configure_logging, log_request
from infra.llm.ollama import OllamaLLM
from lajan.errors import GenerationUnavailable
from lajan.llm import LLM
from lajan.quiz import (
    QuizQuestion,
    QuizQuestionSet,
    clean_questions,
    fallback_feedback,
    fallback_questions,
)

logger = configure_logging()


def get_llm() -> LLM:
    """FastAPI dependency; tests override it with a fake."""
    settings = get_settings()
    return OllamaLLM(model=settings.ollama_model, base_url=settings.ollama_base_url)


class QuizService:
    def __init__(self, llm: LLM, timeout: Optional[float] = None):
        self.llm = llm
        self.timeout = timeout or get_settings().generation_timeout_seconds

    async def questions(self, req: QuizQuestionsRequest) -> tuple[list[QuizQuestion], bool]:
        """Returns (questions, generated). generated is False when fallback content was used."""
        try:
            with log_request(logger, f"quiz.questions module={req.module_title!r}"):
                return await self._generate_questions(req), True
        except GenerationUnavailable as e:
            logger.warning("quiz generation unavailable, serving fallback module=%r reason=%s", req.module_title, e)
            fallback = fallback_questions(req.module_title, req.difficulty, req.learning_style)
            return fallback[: req.count], False

    async def feedback(self, req: QuizFeedbackRequest) -> tuple[str, bool]:
        try:
            with log_request(logger, f"quiz.feedback module={req.module_title!r}"):
                return await self._generate_feedback(req), True
        except GenerationUnavailable as e:
            logger.warning("feedback generation unavailable, serving fallback module=%r reason=%s", req.module_title, e)
            return fallback_feedback(req.module_title, req.score, req.total_questions, req.learning_style), False

    async def _generate_questions(self, req: QuizQuestionsRequest) -> list[QuizQuestion]:
        prompt = build_quiz_questions_prompt(
            module_title=req.module_title,
            module_content=req.module_content,
            key_points=req.key_points,
            difficulty=req.difficulty,
            count=req.count,
        )
        system = build_quiz_system_prompt(difficulty=req.difficulty, learning_style=req.learning_style)
        try:
            result = await self.llm.generate_structured(prompt, QuizQuestionSet, system=system, timeout=self.timeout)
        except Exception as e:  # collaborator failures of any kind
            raise GenerationUnavailable(f"{type(e).__name__}: {e}") from e
        if not isinstance(result, QuizQuestionSet):
            raise GenerationUnavailable(f"unexpected generator output {type(result).__name__}")

        questions = clean_questions(result.questions, req.module_title, req.difficulty, limit=req.count)
        if not questions:
            raise GenerationUnavailable("generator returned no usable questions")
        return questions

    async def _generate_feedback(self, req: QuizFeedbackRequest) -> str:
        prompt = build_feedback_prompt(
            module_title=req.module_title,
            score=req.score,
            total_questions=req.total_questions,
            key_points=req.key_points,
            learning_style=req.learning_style,
        )
        system = build_feedback_system_prompt(learning_style=req.learning_style)
        try:
            text = await self.llm.generate(prompt, system=system, timeout=self.timeout)
        except Exception as e:  # collaborator failures of any kind
            raise GenerationUnavailable(f"{type(e).__name__}: {e}") from e
        if not isinstance(text, str) or not text.strip():
            raise GenerationUnavailable("generator returned empty feedback")
        return text.strip()