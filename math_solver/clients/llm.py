from typing import Any, Optional

from fastapi import Request
from openai import OpenAI, OpenAIError

from math_solver.config import Config
from math_solver.errors import UpstreamCallFailure


class LLMClient:
    """
    Thin wrapper over an OpenAI-compatible chat completions endpoint.

    One instance is built at startup and handed to request handlers; the
    solver only ever calls ``complete``.
    """

    def __init__(
        self,
        client: OpenAI,
        model: str,
        temperature: float = Config.GEMINI.TEMPERATURE,
        top_p: float = Config.GEMINI.TOP_P,
        max_tokens: Optional[int] = Config.GEMINI.MAX_TOKENS,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.top_p = top_p
        self.max_tokens = max_tokens

    def complete(self, prompt: str) -> str:
        """Send a single user prompt and return the reply text."""
        call_params: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
            "top_p": self.top_p,
        }
        if self.max_tokens is not None:
            call_params["max_tokens"] = self.max_tokens

        try:
            response = self.client.chat.completions.create(**call_params)
        except OpenAIError as e:
            raise UpstreamCallFailure(f"LLM request failed: {e}") from e

        if not response.choices:
            raise UpstreamCallFailure("LLM returned no choices")

        content = response.choices[0].message.content
        if not content or not content.strip():
            raise UpstreamCallFailure("LLM returned an empty completion")

        return content


def build_llm_client() -> Optional[LLMClient]:
    """Build the Gemini client from Config, or None when no API key is set."""
    if not Config.GEMINI.API_KEY:
        return None

    return LLMClient(
        client=OpenAI(
            base_url=Config.GEMINI.BASE_URL,
            api_key=Config.GEMINI.API_KEY,
            timeout=Config.GEMINI.TIMEOUT,
        ),
        model=Config.GEMINI.MODEL_NAME,
    )


def get_llm_client(request: Request) -> Optional[LLMClient]:
    """FastAPI dependency: the client built during app startup."""
    return getattr(request.app.state, "llm_client", None)
