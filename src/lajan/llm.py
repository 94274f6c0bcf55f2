from abc import ABC, abstractmethod
from typing import Optional, Type, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class LLM(ABC):
    """
    Contract for the text-generation collaborator used for quizzes and feedback.
    Implementations may raise anything; callers treat every failure as
    GenerationUnavailable and fall back to canned content.
    """

    @abstractmethod
    async def generate(self, prompt: str, *, system: Optional[str] = None, timeout: Optional[float] = None) -> str:
        raise NotImplementedError

    @abstractmethod
    async def generate_structured(
        self,
        prompt: str,
        schema: Type[T],
        *,
        system: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> T:
        raise NotImplementedError
