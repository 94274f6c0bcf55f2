"""
Quiz endpoints. Backed by the generator, but never fail because of it:
when generation is unavailable the canned questions/feedback are returned.
"""

from fastapi import APIRouter, Depends

from api.schemas.quiz_schemas import (
    QuizFeedbackRequest,
    QuizFeedbackResponse,
    QuizQuestionsRequest,
    QuizQuestionsResponse,
)
from api.services.quiz_service import QuizService, get_llm
from api.utils.auth import get_current_user
from lajan.llm import LLM
from lajan.quiz import score_percentage

quiz_routes = APIRouter(dependencies=[Depends(get_current_user)])


@quiz_routes.post("/questions", response_model=QuizQuestionsResponse)
async def quiz_questions(body: QuizQuestionsRequest, llm: LLM = Depends(get_llm)) -> QuizQuestionsResponse:
    questions, generated = await QuizService(llm).questions(body)
    return QuizQuestionsResponse(questions=questions, generated=generated)


@quiz_routes.post("/feedback", response_model=QuizFeedbackResponse)
async def quiz_feedback(body: QuizFeedbackRequest, llm: LLM = Depends(get_llm)) -> QuizFeedbackResponse:
    feedback, generated = await QuizService(llm).feedback(body)
    return QuizFeedbackResponse(
        feedback=feedback,
        percentage=score_percentage(body.score, body.total_questions),
        generated=generated,
    )
