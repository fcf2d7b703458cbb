"""
Gemini Text Client

Thin LangChain wrapper around Google Gemini, used only for advisory copy
about an already-scored assessment. When no key is configured the client
stays offline and every call returns an empty mock reply.
"""
from dataclasses import dataclass
from typing import Optional
import asyncio
import time

from langchain_google_genai import ChatGoogleGenerativeAI

from healthrisk.config import settings
from healthrisk.utils import get_logger

logger = get_logger(__name__)


@dataclass
class GeminiConfig:
    """Model and transport options for one Gemini client."""
    api_key: Optional[str] = None
    model: str = "gemini-2.5-flash"
    temperature: float = 0.7
    max_output_tokens: int = 2048
    request_timeout_seconds: int = 30
    max_retries: int = 2
    use_mock: bool = False

    @classmethod
    def from_settings(cls, model: Optional[str] = None) -> "GeminiConfig":
        return cls(
            api_key=settings.gemini_api_key,
            model=model or settings.root_cause_model,
            temperature=settings.advisor_temperature,
            request_timeout_seconds=settings.llm_timeout_seconds,
            use_mock=settings.use_mock_llm,
        )


@dataclass
class GeminiResponse:
    """One completion, or the reason there is none."""
    text: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    latency_ms: float = 0.0
    is_mock: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        """True when the text came from the live model."""
        return not self.is_mock and self.error is None


class GeminiClient:
    """
    Gemini chat model behind a never-raising `generate`.

    Failures are reported on the returned GeminiResponse (`error`), and an
    offline client answers with `is_mock=True`.
    """

    def __init__(self, config: Optional[GeminiConfig] = None):
        self.config = config or GeminiConfig.from_settings()
        self._llm = None
        self._initialized = False
        self._request_count = 0

        self._connect()

    def _connect(self):
        if self.config.use_mock:
            logger.info(f"Gemini {self.config.model} disabled by USE_MOCK_LLM")
            return
        if not self.config.api_key:
            logger.warning(f"No Gemini API key - {self.config.model} advisory text will use fallbacks")
            return

        try:
            self._llm = ChatGoogleGenerativeAI(
                model=self.config.model,
                temperature=self.config.temperature,
                max_tokens=self.config.max_output_tokens,
                timeout=self.config.request_timeout_seconds,
                max_retries=self.config.max_retries,
                google_api_key=self.config.api_key,
            )
            self._initialized = True
            logger.info(f"Gemini client ready: {self.config.model}")
        except Exception as e:
            logger.error(f"Could not create Gemini client for {self.config.model}: {e}")

    @property
    def is_available(self) -> bool:
        return self._initialized

    @property
    def request_count(self) -> int:
        """Completed live requests."""
        return self._request_count

    def generate(self, prompt: str, system_instruction: Optional[str] = None) -> GeminiResponse:
        """
        Run one completion.

        Args:
            prompt: User turn
            system_instruction: Optional system turn sent before the prompt

        Returns:
            GeminiResponse; check `ok` before using `text`
        """
        if not self.is_available:
            return GeminiResponse(text="", model="mock", is_mock=True)

        messages = [("human", prompt)]
        if system_instruction:
            messages.insert(0, ("system", system_instruction))

        started = time.perf_counter()
        try:
            reply = self._llm.invoke(messages)
        except Exception as e:
            logger.error(f"Gemini {self.config.model} request failed: {e}")
            return GeminiResponse(text="", model=self.config.model, error=str(e))

        content = reply.content
        if not isinstance(content, str):
            # Multi-part content blocks
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            )
        usage = getattr(reply, "usage_metadata", None) or {}
        self._request_count += 1

        return GeminiResponse(
            text=content,
            model=self.config.model,
            prompt_tokens=usage.get("input_tokens", 0),
            completion_tokens=usage.get("output_tokens", 0),
            latency_ms=(time.perf_counter() - started) * 1000,
        )

    async def generate_async(self, prompt: str, system_instruction: Optional[str] = None) -> GeminiResponse:
        """`generate` on the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.generate, prompt, system_instruction)
