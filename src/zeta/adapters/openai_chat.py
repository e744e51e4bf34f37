"""OpenAI adapter - chat completions wrapper."""

import logging

from openai import OpenAI, OpenAIError

from zeta.core.disambiguation import SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class OpenAIChatService:
    """
    OpenAI chat completions adapter.

    Implements LLMService protocol. One request per call, no retries, so a
    slow or failing model never holds up the caller for long.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        timeout: float = 20.0,
        json_mode: bool = True,
        client: OpenAI | None = None,
    ):
        self.model = model
        self.json_mode = json_mode
        self._client = client or OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def generate(self, prompt: str) -> str:
        """Generate text from a prompt. Returns complete response."""
        kwargs = {}
        if self.json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                **kwargs,
            )
        except OpenAIError as e:
            logger.error(f"OpenAI request failed: {e}")
            raise RuntimeError(f"OpenAI request failed: {e}") from e

        content = response.choices[0].message.content
        if content is None:
            raise RuntimeError("OpenAI response missing content")
        return content.strip()
