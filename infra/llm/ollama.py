import asyncio
import time
from typing import Optional, Type, TypeVar

from langchain_ollama import ChatOllama
from pydantic import BaseModel

from api.utils.logger import configure_logging
from lajan.llm import LLM

T = TypeVar("T", bound=BaseModel)

DEFAULT_TIMEOUT = 60.0
DEFAULT_STRUCTURED_TIMEOUT = 120.0

logger = configure_logging()


class OllamaLLM(LLM):
    """Quiz/feedback generator backed by a local Ollama model through LangChain."""

    def __init__(self, model: str, temperature: float = 0.7, base_url: str = "http://localhost:11434"):
        self.model = model
        self._chat_llm = ChatOllama(model=model, temperature=temperature, base_url=base_url)

    @staticmethod
    def _messages(prompt: str, system: Optional[str]):
        if not system:
            return prompt
        return [("system", system), ("human", prompt)]

    async def _timed(self, label: str, coro, timeout: float):
        start = time.time()
        try:
            result = await asyncio.wait_for(coro, timeout=timeout)
        except asyncio.TimeoutError:
            logger.error("llm %s timed out model=%s timeout_s=%s", label, self.model, timeout)
            raise TimeoutError(f"LLM call timed out after {timeout}s") from None
        elapsed = time.time() - start
        logger.info("llm %s ok model=%s duration_s=%.2f", label, self.model, elapsed)
        return result

    async def generate(self, prompt: str, *, system: Optional[str] = None, timeout: Optional[float] = None) -> str:
        message = await self._timed(
            "generate",
            self._chat_llm.ainvoke(self._messages(prompt, system)),
            timeout or DEFAULT_TIMEOUT,
        )
        content = getattr(message, "content", message)
        return content if isinstance(content, str) else str(content)

    async def generate_structured(
        self,
        prompt: str,
        schema: Type[T],
        *,
        system: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> T:
        """LangChain's with_structured_output does the JSON parsing and schema validation."""
        runnable = self._chat_llm.with_structured_output(schema)
        return await self._timed(
            "generate_structured",
            runnable.ainvoke(self._messages(prompt, system)),
            timeout or DEFAULT_STRUCTURED_TIMEOUT,
        )
